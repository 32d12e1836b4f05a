"""Local calendar date normalization shared by the schedule and streak helpers."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Union

from ..errors import InvalidDateError

DateLike = Union[date, datetime, str]


def coerce_date(value: DateLike) -> date:
    """Return ``value`` as a local calendar date or raise InvalidDateError.

    Naive datetimes keep their calendar day; aware datetimes are rejected since
    picking a day for them would need a timezone decision the caller owns.
    Strings must start with ``YYYY-MM-DD``, the format the client stores.
    """

    if isinstance(value, datetime):
        if value.tzinfo is not None:
            raise InvalidDateError(value)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as exc:
            raise InvalidDateError(value) from exc
    raise InvalidDateError(value)


def coerce_optional_date(value: Optional[DateLike]) -> Optional[date]:
    """Like coerce_date, but None and blank strings mean an open bound."""

    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return coerce_date(value)


__all__ = ["DateLike", "coerce_date", "coerce_optional_date"]
