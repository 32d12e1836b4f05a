"""Habit streak helpers.

Streaks are computed from plain completion records and an explicit ``as_of``
date, so the same inputs always produce the same summary.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from enum import Enum
from typing import Iterable, Optional

from ..errors import StreakPolicyError
from ..logging_config import get_logger
from .dates import coerce_date
from .schedule import ScheduleDescriptor, ScheduleType, is_scheduled, sunday_weekday

logger = get_logger(__name__)

ONE_DAY = timedelta(days=1)


@dataclass(frozen=True, slots=True)
class CompletionRecord:
    """Whether a habit was completed on one calendar day."""

    date: date
    completed: bool = True
    value: Optional[float] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "date", coerce_date(self.date))
        object.__setattr__(self, "completed", bool(self.completed))


class StreakPolicy(str, Enum):
    """How gaps between completions are judged.

    CALENDAR: any calendar day without a completion breaks the streak.
    SCHEDULED: days the habit is not due are skipped instead of breaking it.
    """

    CALENDAR = "calendar"
    SCHEDULED = "scheduled"


@dataclass(frozen=True, slots=True)
class StreakSummary:
    """Current/longest streak snapshot for one habit."""

    current: int
    longest: int
    last_completed_date: Optional[date]
    total_completions: int = 0


def completed_dates(completions: Iterable[CompletionRecord]) -> list[date]:
    """Return the distinct completed dates, newest first."""

    return sorted({c.date for c in completions if c.completed}, reverse=True)


def _has_scheduled_day_between(descriptor: ScheduleDescriptor, after: date, before: date) -> bool:
    """True if any day strictly between ``after`` and ``before`` is scheduled."""

    first = after + ONE_DAY
    last = before - ONE_DAY
    if first > last:
        return False
    if descriptor.schedule_type == ScheduleType.CUSTOM:
        if descriptor.start_date is not None and last < descriptor.start_date:
            return False
        if descriptor.end_date is not None and first > descriptor.end_date:
            return False
        return True
    # Daily/weekly patterns repeat every week, so a week of gap decides it.
    span = min((last - first).days + 1, 7)
    return any(is_scheduled(descriptor, first + timedelta(days=i)) for i in range(span))


def _current_streak(
    days_desc: list[date],
    as_of: date,
    *,
    descriptor: Optional[ScheduleDescriptor],
    policy: StreakPolicy,
    grace_days: Optional[int],
) -> int:
    anchor = next((d for d in days_desc if d <= as_of), None)
    if anchor is None:
        return 0
    if grace_days is not None and (as_of - anchor).days > grace_days:
        return 0

    completed = set(days_desc)
    earliest = days_desc[-1]
    current = 0
    cursor = anchor
    while cursor >= earliest:
        if cursor in completed:
            current += 1
        elif policy == StreakPolicy.SCHEDULED and not is_scheduled(descriptor, cursor):
            pass  # not due that day; keep walking
        else:
            break
        cursor -= ONE_DAY
    return current


def _longest_streak(
    days_asc: list[date],
    *,
    descriptor: Optional[ScheduleDescriptor],
    policy: StreakPolicy,
) -> int:
    longest = 0
    run = 0
    last_day: Optional[date] = None
    for d in days_asc:
        if last_day is None or d == last_day + ONE_DAY:
            run += 1
        elif policy == StreakPolicy.SCHEDULED and not _has_scheduled_day_between(
            descriptor, last_day, d
        ):
            run += 1
        else:
            longest = max(longest, run)
            run = 1
        last_day = d
    return max(longest, run)


def compute_streaks(
    completions: Iterable[CompletionRecord],
    as_of: date,
    *,
    descriptor: Optional[ScheduleDescriptor] = None,
    policy: StreakPolicy = StreakPolicy.CALENDAR,
    grace_days: Optional[int] = None,
) -> StreakSummary:
    """Return current and longest streaks for a collection of completions.

    The current streak is counted backwards from the latest completion on or
    before ``as_of``. With ``grace_days`` set, a streak whose latest completion
    is older than that many days counts as broken. The SCHEDULED policy needs a
    descriptor to know which days may be skipped.
    """

    policy = StreakPolicy(policy)
    if policy == StreakPolicy.SCHEDULED and descriptor is None:
        raise StreakPolicyError("The scheduled streak policy requires a schedule descriptor")
    as_of = coerce_date(as_of)

    days_desc = completed_dates(completions)
    if not days_desc:
        return StreakSummary(current=0, longest=0, last_completed_date=None)

    current = _current_streak(
        days_desc, as_of, descriptor=descriptor, policy=policy, grace_days=grace_days
    )
    longest = _longest_streak(list(reversed(days_desc)), descriptor=descriptor, policy=policy)
    summary = StreakSummary(
        current=current,
        longest=longest,
        last_completed_date=days_desc[0],
        total_completions=len(days_desc),
    )
    logger.debug(
        "Computed streaks",
        extra={"current": current, "longest": longest, "policy": policy.value},
    )
    return summary


def week_bounds(day: date) -> tuple[date, date]:
    """Return the (Sunday, Saturday) week containing ``day``."""

    start = day - timedelta(days=sunday_weekday(day))
    return start, start + timedelta(days=6)


def completion_rate(
    completions: Iterable[CompletionRecord],
    descriptor: ScheduleDescriptor,
    start: date,
    end: date,
) -> float:
    """Percentage (0-100) of scheduled days in [start, end] with a completion."""

    done = {c.date for c in completions if c.completed}
    scheduled = 0
    hits = 0
    cursor = start
    while cursor <= end:
        if is_scheduled(descriptor, cursor):
            scheduled += 1
            if cursor in done:
                hits += 1
        cursor += ONE_DAY
    if scheduled == 0:
        return 0.0
    return hits / scheduled * 100


def counter_progress(value: Optional[float], target_count: Optional[float]) -> float:
    """Progress of a counter habit towards its target, in percent (unclamped)."""

    if not target_count or target_count <= 0:
        return 0.0
    return (value or 0) / target_count * 100


__all__ = [
    "CompletionRecord",
    "StreakPolicy",
    "StreakSummary",
    "coerce_date",
    "completed_dates",
    "completion_rate",
    "compute_streaks",
    "counter_progress",
    "week_bounds",
]
