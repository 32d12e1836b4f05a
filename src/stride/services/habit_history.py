"""Habit overview service composing schedule, streak and history helpers."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional, Union

from ..config import BaseConfig
from ..logging_config import get_logger
from ..models.habit import Habit, HabitCompletion
from .history import CalendarGrid, YearMonth, build_calendar_grid
from .schedule import ScheduleDescriptor, descriptor_from_habit
from .streaks import (
    CompletionRecord,
    StreakPolicy,
    StreakSummary,
    coerce_date,
    completion_rate,
    compute_streaks,
    counter_progress,
    week_bounds,
)

logger = get_logger(__name__)

CompletionLike = Union[CompletionRecord, HabitCompletion]


def to_completion_records(rows: Iterable[CompletionLike]) -> list[CompletionRecord]:
    """Convert persisted completion rows into engine records, preserving order."""

    records: list[CompletionRecord] = []
    for row in rows:
        if isinstance(row, CompletionRecord):
            records.append(row)
        else:
            records.append(
                CompletionRecord(date=row.occurred_on, completed=row.completed, value=row.value)
            )
    return records


@dataclass(frozen=True, slots=True)
class HabitOverview:
    """Everything a habit card and its history panel need for one render."""

    descriptor: ScheduleDescriptor
    streaks: StreakSummary
    grid: CalendarGrid
    weekly_completion_rate: float
    progress: Optional[float] = None


class HabitHistoryService:
    """Configured entry point for habit history views.

    Holds the streak policy and grace window from configuration; every call
    still takes the completions and ``as_of`` explicitly. Without a config the
    calendar policy applies with no grace window, and nothing is read from the
    environment.
    """

    def __init__(self, config: Optional[BaseConfig] = None):
        if config is None:
            self.policy = StreakPolicy.CALENDAR
            self.grace_days: Optional[int] = None
        else:
            self.policy = StreakPolicy(config.STREAK_POLICY)
            self.grace_days = config.STREAK_GRACE_DAYS

    def streaks(
        self,
        descriptor: ScheduleDescriptor,
        completions: Iterable[CompletionLike],
        *,
        as_of: date,
    ) -> StreakSummary:
        """Compute streaks with the configured policy."""
        return compute_streaks(
            to_completion_records(completions),
            as_of,
            descriptor=descriptor,
            policy=self.policy,
            grace_days=self.grace_days,
        )

    def overview(
        self,
        habit: Habit,
        completions: Iterable[CompletionLike],
        *,
        as_of: date,
        month: Optional[YearMonth] = None,
    ) -> HabitOverview:
        """Build the streak summary, calendar grid and progress for ``habit``.

        ``month`` defaults to the month containing ``as_of``.
        """

        as_of = coerce_date(as_of)
        descriptor = descriptor_from_habit(habit)
        records = to_completion_records(completions)
        summary = self.streaks(descriptor, records, as_of=as_of)
        grid = build_calendar_grid(
            month or YearMonth.of(as_of), records, descriptor, as_of, summary.current
        )

        week_start, week_end = week_bounds(as_of)
        rate = completion_rate(records, descriptor, week_start, week_end)

        progress: Optional[float] = None
        if habit.is_counter:
            today = next((r for r in records if r.date == as_of), None)
            progress = counter_progress(today.value if today else None, habit.target_count)

        logger.debug(
            "Built habit overview",
            extra={
                "habit_id": habit.id,
                "month": f"{grid.month.year}-{grid.month.month:02d}",
                "current_streak": summary.current,
            },
        )
        return HabitOverview(
            descriptor=descriptor,
            streaks=summary,
            grid=grid,
            weekly_completion_rate=rate,
            progress=progress,
        )


__all__ = ["HabitHistoryService", "HabitOverview", "to_completion_records"]
