"""Typed errors raised for input the engine cannot safely normalize."""

from __future__ import annotations


class StrideError(Exception):
    """Base class for all errors raised by the stride package."""


class InvalidDateError(StrideError, ValueError):
    """A value that should be a local calendar date could not be read as one."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Expected a calendar date (date or YYYY-MM-DD), got {value!r}")
        self.value = value


class ScheduleValidationError(StrideError, ValueError):
    """A schedule descriptor violates its invariants."""


class StreakPolicyError(StrideError, ValueError):
    """A streak policy was requested without the inputs it needs."""


__all__ = [
    "InvalidDateError",
    "ScheduleValidationError",
    "StrideError",
    "StreakPolicyError",
]
