"""Domain services for habit schedules, streaks and history."""

from .habit_history import HabitHistoryService, HabitOverview, to_completion_records
from .history import (
    CalendarGrid,
    CellGrouping,
    CellRun,
    CellStatus,
    DayCell,
    RunKind,
    YearMonth,
    build_calendar_grid,
    describe_cell,
    next_month,
    previous_month,
    week_groupings,
    week_runs,
)
from .schedule import ScheduleDescriptor, ScheduleType, is_scheduled, parse_schedule_days
from .streaks import (
    CompletionRecord,
    StreakPolicy,
    StreakSummary,
    completion_rate,
    compute_streaks,
    counter_progress,
)

__all__ = [
    "CalendarGrid",
    "CellGrouping",
    "CellRun",
    "CellStatus",
    "CompletionRecord",
    "DayCell",
    "HabitHistoryService",
    "HabitOverview",
    "RunKind",
    "ScheduleDescriptor",
    "ScheduleType",
    "StreakPolicy",
    "StreakSummary",
    "YearMonth",
    "build_calendar_grid",
    "completion_rate",
    "compute_streaks",
    "counter_progress",
    "describe_cell",
    "is_scheduled",
    "next_month",
    "parse_schedule_days",
    "previous_month",
    "to_completion_records",
    "week_groupings",
    "week_runs",
]
