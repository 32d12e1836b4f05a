"""Library configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional, Union

from dotenv import dotenv_values

STREAK_POLICIES = ("calendar", "scheduled")


def _load_env(env_file: Optional[Union[str, Path]]) -> dict[str, str]:
    """Merge a ``.env`` file under the process environment.

    Variables already set in ``os.environ`` win. The process environment is
    read, never written.
    """

    file_values = dotenv_values(env_file) if env_file else {}
    merged = {key: value for key, value in file_values.items() if value is not None}
    merged.update(os.environ)
    return merged


def _env_bool(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = env.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_optional_int(env: Mapping[str, str], name: str) -> Optional[int]:
    """Read a non-negative integer from the environment, or None when unset."""

    value = env.get(name)
    if value is None or not value.strip():
        return None
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc
    if parsed < 0:
        raise ValueError(f"{name} must not be negative, got {parsed}")
    return parsed


class BaseConfig:
    """Base configuration shared across environments.

    Settings come from ``STRIDE_*`` variables, with ``ENV_FILE`` (relative to
    the working directory) filling in anything the environment leaves unset.
    Building a config has no side effects: nothing is created on disk and
    ``os.environ`` is left untouched.
    """

    APP_NAME = "Stride"
    LOG_FILENAME = "stride.log"
    ENV_FILE: Optional[str] = ".env"

    def __init__(self, env_file: Optional[Union[str, Path]] = None) -> None:
        env = _load_env(env_file if env_file is not None else self.ENV_FILE)
        self.DATA_DIR = self._resolve_data_dir(env)
        self.DEV_MODE = _env_bool(env, "STRIDE_DEV_MODE", default=True)
        self.STREAK_POLICY = env.get("STRIDE_STREAK_POLICY", "calendar").strip().lower()
        self.STREAK_GRACE_DAYS = _env_optional_int(env, "STRIDE_STREAK_GRACE_DAYS")
        if self.STREAK_POLICY not in STREAK_POLICIES:
            raise ValueError(
                f"STRIDE_STREAK_POLICY must be one of {', '.join(STREAK_POLICIES)}; "
                f"got {self.STREAK_POLICY!r}"
            )

    @staticmethod
    def _resolve_data_dir(env: Mapping[str, str]) -> Path:
        """Return the directory where log files go; setup_logging creates it."""

        data_root = env.get("STRIDE_DATA_DIR") or "instance"
        return Path(data_root).expanduser().resolve()


class DevConfig(BaseConfig):
    """Development configuration."""

    DEBUG = True
    TESTING = False


class TestConfig(BaseConfig):
    """Configuration used by the test suite; ignores any ``.env`` file."""

    __test__ = False  # keep pytest from collecting this class

    ENV_FILE = None
    DEBUG = True
    TESTING = True
