"""Logging for the stride package.

The package logger carries a ``NullHandler`` from import, so engine events go
nowhere unless the host application configures logging. ``setup_logging`` is an
opt-in helper that adds a console handler plus a rotating JSON-lines file.
"""

from __future__ import annotations

import json
import logging
import logging.handlers
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:  # pragma: no cover
    from .config import BaseConfig

PACKAGE_LOGGER = "stride"

_NULL_HANDLER = logging.NullHandler()
logging.getLogger(PACKAGE_LOGGER).addHandler(_NULL_HANDLER)

# Attributes every LogRecord has; anything else arrived through ``extra``.
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    """Render each engine event as one JSON object.

    ``extra`` fields are grouped under ``context`` so callers can filter on
    them (habit id, month, policy) without parsing the message.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        context = {key: value for key, value in vars(record).items() if key not in _RECORD_ATTRS}
        if context:
            entry["context"] = context

        if record.exc_info and record.exc_info[0] is not None:
            entry["error"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(entry, default=str)


def reset_logging() -> None:
    """Detach and close the handlers ``setup_logging`` installed."""

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        if handler is _NULL_HANDLER:
            continue
        package_logger.removeHandler(handler)
        handler.close()


def setup_logging(
    config: "BaseConfig", *, log_dir: Optional[Union[str, Path]] = None
) -> logging.Logger:
    """Send package logs to the console and to ``<log_dir>/<LOG_FILENAME>``.

    ``log_dir`` defaults to ``DATA_DIR/logs`` and is created here. Calling it
    again replaces the handlers from the previous call.
    """

    logs_dir = Path(log_dir) if log_dir is not None else Path(config.DATA_DIR) / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    reset_logging()
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(logging.DEBUG if config.DEV_MODE else logging.INFO)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO if config.DEV_MODE else logging.WARNING)
    console_handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)-8s %(name)s: %(message)s", datefmt="%H:%M:%S")
    )
    package_logger.addHandler(console_handler)

    log_file = logs_dir / config.LOG_FILENAME
    file_handler = logging.handlers.RotatingFileHandler(
        filename=log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(JSONFormatter())
    package_logger.addHandler(file_handler)

    package_logger.info(
        "Logging initialized",
        extra={"log_file": str(log_file), "streak_policy": config.STREAK_POLICY},
    )
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Return a logger namespaced under the ``stride`` package logger."""

    if name == PACKAGE_LOGGER or name.startswith(f"{PACKAGE_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")


__all__ = ["JSONFormatter", "get_logger", "reset_logging", "setup_logging"]
