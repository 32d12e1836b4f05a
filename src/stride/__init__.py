"""Stride habit scheduling, streak and history engine."""

from __future__ import annotations

from .config import BaseConfig, DevConfig
from .services import HabitHistoryService

__all__ = ["BaseConfig", "DevConfig", "HabitHistoryService"]
