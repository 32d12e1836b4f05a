"""Habit schedule evaluation.

Answers whether a habit is due on a given local calendar date. Every helper here
is pure: the caller supplies the descriptor and the date, nothing is read from
the wall clock, and a degenerate descriptor simply yields "not scheduled".

Weekdays use the Sunday-first convention stored by the client (0 = Sunday,
6 = Saturday), which differs from ``date.weekday()`` (0 = Monday).
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, Iterable, Optional, Union

from ..errors import ScheduleValidationError
from ..logging_config import get_logger
from .dates import coerce_date, coerce_optional_date

if TYPE_CHECKING:  # pragma: no cover
    from ..models.habit import Habit

logger = get_logger(__name__)

WEEKDAYS = range(0, 7)


class ScheduleType(str, Enum):
    """Supported recurrence kinds."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    CUSTOM = "CUSTOM"


@dataclass(frozen=True, slots=True)
class ScheduleDescriptor:
    """Immutable description of when a habit is due.

    ``schedule_days`` only matters for WEEKLY and the date bounds only matter
    for CUSTOM; both bounds are inclusive and either may be open.
    """

    schedule_type: ScheduleType = ScheduleType.DAILY
    schedule_days: Optional[frozenset[int]] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "start_date", coerce_optional_date(self.start_date))
        object.__setattr__(self, "end_date", coerce_optional_date(self.end_date))
        if self.schedule_days is not None and not isinstance(self.schedule_days, frozenset):
            object.__setattr__(self, "schedule_days", frozenset(self.schedule_days))

    @classmethod
    def daily(cls) -> "ScheduleDescriptor":
        return cls(ScheduleType.DAILY)

    @classmethod
    def weekly(cls, days: Iterable[int]) -> "ScheduleDescriptor":
        return cls(ScheduleType.WEEKLY, schedule_days=frozenset(days))

    @classmethod
    def custom(
        cls, start_date: Optional[date] = None, end_date: Optional[date] = None
    ) -> "ScheduleDescriptor":
        return cls(ScheduleType.CUSTOM, start_date=start_date, end_date=end_date)

    def validate(self) -> None:
        """Raise ScheduleValidationError if the descriptor breaks its invariants.

        Evaluation never calls this; it is meant for the point where an edited
        schedule is saved.
        """

        if self.schedule_type == ScheduleType.WEEKLY:
            days = self.schedule_days or frozenset()
            if not any(day in WEEKDAYS for day in days):
                raise ScheduleValidationError(
                    "Weekly schedules need at least one day between 0 (Sunday) and 6 (Saturday)"
                )
            invalid = sorted(day for day in days if day not in WEEKDAYS)
            if invalid:
                raise ScheduleValidationError(f"Invalid weekdays in schedule: {invalid}")
        elif self.schedule_type == ScheduleType.CUSTOM:
            if self.start_date and self.end_date and self.start_date > self.end_date:
                raise ScheduleValidationError(
                    f"Schedule starts {self.start_date.isoformat()} "
                    f"after it ends {self.end_date.isoformat()}"
                )
        else:
            try:
                ScheduleType(self.schedule_type)
            except ValueError as exc:
                raise ScheduleValidationError(
                    f"Unknown schedule type {self.schedule_type!r}"
                ) from exc

    @property
    def is_valid(self) -> bool:
        try:
            self.validate()
        except ScheduleValidationError:
            return False
        return True


def sunday_weekday(day: date) -> int:
    """Return the day of week with 0 = Sunday .. 6 = Saturday."""

    return (day.weekday() + 1) % 7


def is_scheduled(descriptor: Optional[ScheduleDescriptor], day: date) -> bool:
    """Return True when the habit described by ``descriptor`` is due on ``day``.

    A missing descriptor is never due. ``day`` may be anything ``coerce_date``
    accepts.
    """

    if descriptor is None:
        return False
    day = coerce_date(day)
    schedule_type = descriptor.schedule_type
    if schedule_type == ScheduleType.DAILY:
        return True
    if schedule_type == ScheduleType.WEEKLY:
        if not descriptor.schedule_days:
            return False
        return sunday_weekday(day) in descriptor.schedule_days
    if schedule_type == ScheduleType.CUSTOM:
        if descriptor.start_date is not None and day < descriptor.start_date:
            return False
        if descriptor.end_date is not None and day > descriptor.end_date:
            return False
        return True
    return False


def parse_schedule_type(raw: Union[str, ScheduleType, None]) -> Optional[ScheduleType]:
    """Map a stored schedule type onto the enum; unknown values map to None."""

    if isinstance(raw, ScheduleType):
        return raw
    if not raw:
        return None
    try:
        return ScheduleType(str(raw).strip().upper())
    except ValueError:
        logger.warning("Unknown schedule type; habit will never be scheduled", extra={"raw": raw})
        return None


def parse_schedule_days(raw: Union[str, Iterable[int], None]) -> frozenset[int]:
    """Read a stored day-of-week list.

    Accepts a JSON array (``"[1,3,5]"``), a comma separated string (``"1,3,5"``)
    or any iterable of ints. Tokens that are not weekdays are dropped with a
    warning so a half-edited form still evaluates.
    """

    if raw is None:
        return frozenset()

    tokens: list[object]
    if isinstance(raw, str):
        text = raw.strip()
        if not text:
            return frozenset()
        if text.startswith("["):
            try:
                loaded = json.loads(text)
            except json.JSONDecodeError:
                loaded = text.strip("[]").split(",")
            tokens = list(loaded) if isinstance(loaded, list) else [loaded]
        else:
            tokens = text.split(",")
    else:
        tokens = list(raw)

    days: set[int] = set()
    dropped: list[object] = []
    for token in tokens:
        try:
            value = int(str(token).strip())
        except ValueError:
            dropped.append(token)
            continue
        if value in WEEKDAYS:
            days.add(value)
        else:
            dropped.append(token)

    if dropped:
        logger.warning("Ignoring invalid schedule days", extra={"dropped": dropped, "raw": raw})
    return frozenset(days)


def descriptor_from_habit(habit: "Habit") -> ScheduleDescriptor:
    """Build a descriptor from a persisted habit row."""

    schedule_type = parse_schedule_type(habit.schedule_type)
    if schedule_type is None:
        # Evaluates as WEEKLY with no days: never scheduled.
        return ScheduleDescriptor(ScheduleType.WEEKLY, schedule_days=frozenset())
    if schedule_type == ScheduleType.WEEKLY:
        return ScheduleDescriptor.weekly(parse_schedule_days(habit.schedule_days_of_week))
    if schedule_type == ScheduleType.CUSTOM:
        return ScheduleDescriptor.custom(habit.schedule_start_date, habit.schedule_end_date)
    return ScheduleDescriptor.daily()


__all__ = [
    "ScheduleDescriptor",
    "ScheduleType",
    "descriptor_from_habit",
    "is_scheduled",
    "parse_schedule_days",
    "parse_schedule_type",
    "sunday_weekday",
]
