"""Pytest configuration and shared fixtures for Stride tests.

Provides configuration isolated to a temporary data directory and factories
for habits and completion records, so tests never depend on the wall clock or
on a real database.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

import pytest

from stride.config import TestConfig
from stride.models import Habit, HabitCompletion
from stride.services.streaks import CompletionRecord

# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def test_config(tmp_path, monkeypatch):
    """Build a TestConfig whose DATA_DIR is a temporary directory.

    Streak settings are cleared from the environment so a developer's shell
    does not leak into assertions; TestConfig skips .env files on its own.
    """
    monkeypatch.setenv("STRIDE_DATA_DIR", str(tmp_path))
    monkeypatch.delenv("STRIDE_STREAK_POLICY", raising=False)
    monkeypatch.delenv("STRIDE_STREAK_GRACE_DAYS", raising=False)
    monkeypatch.delenv("STRIDE_DEV_MODE", raising=False)
    return TestConfig()


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def habit_factory():
    """Factory for creating in-memory Habit rows.

    Returns:
        Callable: Function that builds Habit instances with sensible defaults
    """
    counter = {"next_id": 1}

    def _create_habit(
        name: str = "Test Habit",
        schedule_type: str = "DAILY",
        schedule_days_of_week: str | None = None,
        schedule_start_date: date | str | None = None,
        schedule_end_date: date | str | None = None,
        tracking_type: str = "COMPLETED",
        target_count: int | None = None,
        unit: str | None = None,
    ) -> Habit:
        """Create a habit with an auto-incremented id.

        Args:
            name: Habit name
            schedule_type: DAILY, WEEKLY or CUSTOM
            schedule_days_of_week: Stored weekday list, e.g. "[1,3,5]"
            schedule_start_date: Inclusive start for CUSTOM schedules
            schedule_end_date: Inclusive end for CUSTOM schedules
            tracking_type: COMPLETED or COUNTER
            target_count: Daily target for counter habits

        Returns:
            Habit: Unsaved habit instance
        """
        habit = Habit(
            id=counter["next_id"],
            user_id=1,
            name=name,
            schedule_type=schedule_type,
            schedule_days_of_week=schedule_days_of_week,
            schedule_start_date=schedule_start_date,
            schedule_end_date=schedule_end_date,
            tracking_type=tracking_type,
            target_count=target_count,
            unit=unit,
        )
        counter["next_id"] += 1
        return habit

    return _create_habit


@pytest.fixture
def completion_rows():
    """Factory for HabitCompletion rows on the given days."""

    def _rows(habit: Habit, days: Iterable[date], *, value: float | None = None) -> list[HabitCompletion]:
        return [
            HabitCompletion(
                habit_id=habit.id,
                user_id=habit.user_id,
                occurred_on=day,
                completed=True,
                value=value,
            )
            for day in days
        ]

    return _rows


# =============================================================================
# Helper Functions
# =============================================================================


def completed_on(*days: date) -> list[CompletionRecord]:
    """Completed records for each of ``days``."""
    return [CompletionRecord(date=day, completed=True) for day in days]


def date_range(start: date, count: int) -> list[date]:
    """``count`` consecutive days beginning at ``start``."""
    return [start + timedelta(days=i) for i in range(count)]
