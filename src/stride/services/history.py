"""Monthly habit history grid and run grouping.

Builds the six-week calendar a habit history view renders, merges in
completion and schedule information, and exposes the run boundaries a renderer
uses to join adjacent day pills. No styling decisions are made here.
"""

from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass, field
from datetime import MAXYEAR, MINYEAR, date, timedelta
from enum import Enum
from typing import Iterable, Optional

from ..logging_config import get_logger
from .dates import coerce_date
from .schedule import ScheduleDescriptor, is_scheduled, sunday_weekday
from .streaks import CompletionRecord, completed_dates

logger = get_logger(__name__)

GRID_WEEKS = 6
DAYS_PER_WEEK = 7
GRID_CELLS = GRID_WEEKS * DAYS_PER_WEEK

WEEKDAY_LABELS: tuple[str, ...] = ("S", "M", "T", "W", "T", "F", "S")
MONTH_NAMES: tuple[str, ...] = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

# The grid starts on the Sunday before the 1st and runs 42 days, so the
# outermost years cannot be displayed.
_FIRST_YEAR = MINYEAR + 1
_LAST_YEAR = MAXYEAR - 1


@dataclass(frozen=True, slots=True)
class YearMonth:
    """A calendar month; ``month`` is 1-12 once normalized."""

    year: int
    month: int

    @classmethod
    def of(cls, day: date) -> "YearMonth":
        return cls(day.year, day.month)

    def normalized(self) -> "YearMonth":
        """Roll out-of-range months into adjacent years and clamp the year."""

        year, month_index = divmod(self.year * 12 + (self.month - 1), 12)
        year = min(max(year, _FIRST_YEAR), _LAST_YEAR)
        return YearMonth(year, month_index + 1)

    @property
    def first_day(self) -> date:
        ym = self.normalized()
        return date(ym.year, ym.month, 1)

    @property
    def last_day(self) -> date:
        ym = self.normalized()
        return date(ym.year, ym.month, monthrange(ym.year, ym.month)[1])

    def days(self) -> list[date]:
        first = self.first_day
        return [first + timedelta(days=i) for i in range((self.last_day - first).days + 1)]

    def contains(self, day: date) -> bool:
        ym = self.normalized()
        return day.year == ym.year and day.month == ym.month


@dataclass(frozen=True, slots=True)
class DayCell:
    """One entry of the calendar grid."""

    date: date
    completed: bool = False
    is_scheduled: bool = False
    is_today: bool = False
    is_in_current_streak: bool = False
    is_in_displayed_month: bool = False
    value: Optional[float] = None


@dataclass(slots=True)
class CalendarGrid:
    """Six weeks of cells covering ``month``.

    ``rows`` always holds all six weeks; ``visible_rows`` omits weeks with no
    day of the displayed month.
    """

    month: YearMonth
    rows: list[list[DayCell]] = field(default_factory=list)

    @property
    def visible_rows(self) -> list[list[DayCell]]:
        return [week for week in self.rows if any(c.is_in_displayed_month for c in week)]

    @property
    def cells(self) -> list[DayCell]:
        return [cell for week in self.rows for cell in week]

    def cell_for(self, day: date) -> Optional[DayCell]:
        return next((c for c in self.cells if c.date == day), None)


def grid_start(month: YearMonth) -> date:
    """Return the Sunday on or before the first of ``month``."""

    first = month.first_day
    return first - timedelta(days=sunday_weekday(first))


def streak_dates(
    completions: Iterable[CompletionRecord],
    current_streak: int,
    as_of: Optional[date] = None,
) -> set[date]:
    """The ``current_streak`` most recent completed dates on or before ``as_of``.

    The current streak is anchored at or before ``as_of``, so completions after
    it are never marked.
    """

    if current_streak <= 0:
        return set()
    days = completed_dates(completions)
    if as_of is not None:
        as_of = coerce_date(as_of)
        days = [d for d in days if d <= as_of]
    return set(days[:current_streak])


def build_calendar_grid(
    month: YearMonth,
    completions: Iterable[CompletionRecord],
    descriptor: ScheduleDescriptor,
    as_of: date,
    current_streak: int,
) -> CalendarGrid:
    """Build the 6x7 calendar grid for ``month``.

    A malformed month is normalized rather than rejected, and an empty
    completion list yields a grid with every completion flag off.
    """

    as_of = coerce_date(as_of)
    target = month.normalized()
    if target != month:
        logger.warning(
            "Normalized out-of-range month",
            extra={"requested": f"{month.year}-{month.month}", "used": f"{target.year}-{target.month}"},
        )

    records = list(completions)
    by_day: dict[date, CompletionRecord] = {}
    for record in records:
        # First record supplied for a date wins.
        by_day.setdefault(record.date, record)
    in_streak = streak_dates(records, current_streak, as_of)

    start = grid_start(target)
    cells: list[DayCell] = []
    for offset in range(GRID_CELLS):
        day = start + timedelta(days=offset)
        record = by_day.get(day)
        cells.append(
            DayCell(
                date=day,
                completed=bool(record and record.completed),
                is_scheduled=is_scheduled(descriptor, day),
                is_today=day == as_of,
                is_in_current_streak=day in in_streak,
                is_in_displayed_month=target.contains(day),
                value=record.value if record else None,
            )
        )

    rows = [cells[i : i + DAYS_PER_WEEK] for i in range(0, GRID_CELLS, DAYS_PER_WEEK)]
    return CalendarGrid(month=target, rows=rows)


class RunKind(str, Enum):
    COMPLETED = "completed"
    SCHEDULED = "scheduled"


@dataclass(frozen=True, slots=True)
class CellRun:
    """A maximal run of adjacent qualifying cells in one week (inclusive)."""

    kind: RunKind
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def is_joined(self) -> bool:
        return self.length > 1

    def __contains__(self, index: object) -> bool:
        return isinstance(index, int) and self.start <= index <= self.end


@dataclass(frozen=True, slots=True)
class CellGrouping:
    """Where a single cell sits inside its run, if any."""

    kind: Optional[RunKind] = None
    is_first: bool = False
    is_last: bool = False
    is_joined: bool = False
    has_gap_after: bool = True

    @property
    def in_group(self) -> bool:
        return self.kind is not None


def _runs(week: list[DayCell], kind: RunKind, qualifies) -> list[CellRun]:
    runs: list[CellRun] = []
    run_start: Optional[int] = None
    for index, cell in enumerate(week):
        if qualifies(cell):
            if run_start is None:
                run_start = index
        elif run_start is not None:
            runs.append(CellRun(kind, run_start, index - 1))
            run_start = None
    if run_start is not None:
        runs.append(CellRun(kind, run_start, len(week) - 1))
    return runs


def week_runs(week: list[DayCell]) -> list[CellRun]:
    """Completed runs followed by scheduled runs for one week.

    Only cells of the displayed month take part. Scheduled runs include
    completed cells that are also scheduled.
    """

    completed = _runs(week, RunKind.COMPLETED, lambda c: c.completed and c.is_in_displayed_month)
    scheduled = _runs(
        week, RunKind.SCHEDULED, lambda c: c.is_scheduled and c.is_in_displayed_month
    )
    return completed + scheduled


def week_groupings(week: list[DayCell]) -> list[CellGrouping]:
    """Resolve run membership into one grouping per cell.

    A completed cell follows its completed run; an open scheduled cell follows
    its scheduled run; everything else is ungrouped.
    """

    runs = week_runs(week)
    groupings: list[CellGrouping] = []
    for index, cell in enumerate(week):
        if cell.completed:
            kind = RunKind.COMPLETED
        elif cell.is_scheduled:
            kind = RunKind.SCHEDULED
        else:
            kind = None
        run = next((r for r in runs if r.kind == kind and index in r), None)
        if run is None:
            groupings.append(CellGrouping())
            continue
        groupings.append(
            CellGrouping(
                kind=kind,
                is_first=index == run.start,
                is_last=index == run.end,
                is_joined=run.is_joined,
                has_gap_after=index == run.end,
            )
        )
    return groupings


def previous_month(month: YearMonth) -> YearMonth:
    return YearMonth(month.year, month.month - 1).normalized()


def can_go_forward(month: YearMonth, as_of: date) -> bool:
    """Navigation never moves past the month containing ``as_of``."""

    current = month.normalized()
    return (current.year, current.month) < (as_of.year, as_of.month)


def next_month(month: YearMonth, as_of: date) -> YearMonth:
    if not can_go_forward(month, as_of):
        return month.normalized()
    return YearMonth(month.year, month.month + 1).normalized()


class CellStatus(str, Enum):
    COMPLETED = "completed"
    SCHEDULED = "scheduled"
    UNSCHEDULED = "unscheduled"
    OUTSIDE_MONTH = "outside_month"


def cell_status(cell: DayCell) -> CellStatus:
    if cell.completed:
        return CellStatus.COMPLETED
    if not cell.is_in_displayed_month:
        return CellStatus.OUTSIDE_MONTH
    if cell.is_scheduled:
        return CellStatus.SCHEDULED
    return CellStatus.UNSCHEDULED


def month_label(month: YearMonth) -> str:
    ym = month.normalized()
    return f"{MONTH_NAMES[ym.month - 1]} {ym.year}"


def _format_value(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else f"{value:g}"


def describe_cell(cell: DayCell) -> str:
    """Tooltip text, e.g. ``"Mar 5: Completed (3) - current streak"``."""

    if cell.completed:
        state = "Completed"
    elif cell.is_scheduled:
        state = "Scheduled"
    else:
        state = "Not scheduled"
    text = f"{MONTH_NAMES[cell.date.month - 1][:3]} {cell.date.day}: {state}"
    if cell.value is not None:
        text += f" ({_format_value(cell.value)})"
    if cell.is_in_current_streak:
        text += " - current streak"
    return text


__all__ = [
    "CalendarGrid",
    "CellGrouping",
    "CellRun",
    "CellStatus",
    "DayCell",
    "MONTH_NAMES",
    "RunKind",
    "WEEKDAY_LABELS",
    "YearMonth",
    "build_calendar_grid",
    "can_go_forward",
    "cell_status",
    "describe_cell",
    "grid_start",
    "month_label",
    "next_month",
    "previous_month",
    "streak_dates",
    "week_groupings",
    "week_runs",
]
