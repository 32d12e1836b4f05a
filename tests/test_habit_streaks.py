"""Comprehensive tests for habit streak calculations.

These tests verify the logic for calculating current and longest streaks,
including edge cases like:
- Consecutive days
- Gaps in habit completion
- Streaks ending before the as-of date
- Empty habit data
- Schedule-aware streak counting for weekly and custom habits
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from stride.errors import InvalidDateError, StreakPolicyError
from stride.services.schedule import ScheduleDescriptor
from stride.services.streaks import (
    CompletionRecord,
    StreakPolicy,
    StreakSummary,
    coerce_date,
    completion_rate,
    compute_streaks,
    counter_progress,
    week_bounds,
)
from tests.conftest import completed_on, date_range

MONDAYS_JAN_2024 = [date(2024, 1, d) for d in (1, 8, 15, 22, 29)]


class TestCurrentStreak:
    """Tests for calculating current consecutive day streaks."""

    def test_no_entries_returns_zero_streak(self):
        summary = compute_streaks([], date(2024, 3, 5))
        assert summary == StreakSummary(current=0, longest=0, last_completed_date=None)

    def test_single_entry_today_returns_one(self):
        today = date(2024, 3, 5)
        assert compute_streaks(completed_on(today), today).current == 1

    def test_five_consecutive_days(self):
        """Completions on Mar 1-5 as of Mar 5 give a five day streak."""
        summary = compute_streaks(completed_on(*date_range(date(2024, 3, 1), 5)), date(2024, 3, 5))

        assert summary.current == 5
        assert summary.longest == 5
        assert summary.last_completed_date == date(2024, 3, 5)

    def test_gap_breaks_streak(self):
        """Mar 3 missing leaves Mar 4-5 as the current streak."""
        days = [date(2024, 3, d) for d in (1, 2, 4, 5)]
        summary = compute_streaks(completed_on(*days), date(2024, 3, 5))

        assert summary.current == 2
        assert summary.longest == 2

    def test_streak_counts_from_latest_completion_before_as_of(self):
        """A streak that ended before as_of is still reported from its last day."""
        days = date_range(date(2024, 3, 1), 3)
        summary = compute_streaks(completed_on(*days), date(2024, 3, 10))
        assert summary.current == 3

    def test_future_completions_ignored_for_current(self):
        days = [date(2024, 3, 4), date(2024, 3, 5), date(2024, 3, 7)]
        summary = compute_streaks(completed_on(*days), date(2024, 3, 5))

        assert summary.current == 2
        assert summary.last_completed_date == date(2024, 3, 7)

    def test_uncompleted_record_breaks_streak(self):
        """A record with completed=False counts as a gap."""
        records = [
            CompletionRecord(date(2024, 3, 3), completed=True),
            CompletionRecord(date(2024, 3, 4), completed=False),
            CompletionRecord(date(2024, 3, 5), completed=True),
        ]
        summary = compute_streaks(records, date(2024, 3, 5))

        assert summary.current == 1
        assert summary.total_completions == 2

    def test_duplicate_records_count_once(self):
        records = completed_on(date(2024, 3, 5), date(2024, 3, 5), date(2024, 3, 4))
        summary = compute_streaks(records, date(2024, 3, 5))

        assert summary.current == 2
        assert summary.total_completions == 2

    def test_unsorted_input(self):
        days = [date(2024, 3, 3), date(2024, 3, 5), date(2024, 3, 4)]
        assert compute_streaks(completed_on(*days), date(2024, 3, 5)).current == 3


class TestGraceWindow:
    """Tests for expiring stale streaks with grace_days."""

    def test_within_grace_window(self):
        days = date_range(date(2024, 3, 1), 3)
        summary = compute_streaks(completed_on(*days), date(2024, 3, 4), grace_days=1)
        assert summary.current == 3

    def test_outside_grace_window(self):
        days = date_range(date(2024, 3, 1), 3)
        summary = compute_streaks(completed_on(*days), date(2024, 3, 5), grace_days=1)

        assert summary.current == 0
        assert summary.longest == 3

    def test_zero_grace_requires_completion_on_as_of(self):
        days = date_range(date(2024, 3, 1), 3)
        assert compute_streaks(completed_on(*days), date(2024, 3, 3), grace_days=0).current == 3
        assert compute_streaks(completed_on(*days), date(2024, 3, 4), grace_days=0).current == 0


class TestLongestStreak:
    """Tests for calculating the longest historical streak."""

    def test_single_entry_returns_one(self):
        assert compute_streaks(completed_on(date(2024, 1, 1)), date(2024, 1, 1)).longest == 1

    def test_multiple_streaks_returns_longest(self):
        days = (
            date_range(date(2024, 1, 1), 3)
            + date_range(date(2024, 1, 10), 7)
            + date_range(date(2024, 1, 20), 4)
        )
        summary = compute_streaks(completed_on(*days), date(2024, 1, 23))

        assert summary.longest == 7
        assert summary.current == 4

    def test_current_streak_can_be_longest(self):
        days = [date(2024, 1, 1), date(2024, 1, 2)] + date_range(date(2024, 2, 1), 14)
        summary = compute_streaks(completed_on(*days), date(2024, 2, 14))

        assert summary.longest == summary.current == 14

    def test_streak_across_month_and_year_boundary(self):
        days = date_range(date(2023, 12, 30), 4)
        summary = compute_streaks(completed_on(*days), date(2024, 1, 2))

        assert summary.current == 4
        assert summary.longest == 4

    def test_streak_across_leap_day(self):
        days = [date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1)]
        assert compute_streaks(completed_on(*days), date(2024, 3, 1)).longest == 3

    def test_extending_a_run_never_lowers_longest(self):
        base = completed_on(*date_range(date(2024, 1, 1), 4), *date_range(date(2024, 1, 10), 2))
        extended = base + completed_on(date(2024, 1, 12), date(2024, 1, 13))
        as_of = date(2024, 1, 31)

        assert compute_streaks(extended, as_of).longest >= compute_streaks(base, as_of).longest


class TestScheduledPolicy:
    """Streaks that skip days the habit is not due."""

    def test_mondays_only_calendar_policy(self):
        """Counting raw calendar days, only the latest Monday is in the streak."""
        summary = compute_streaks(
            completed_on(*MONDAYS_JAN_2024),
            date(2024, 1, 29),
            descriptor=ScheduleDescriptor.weekly([1]),
            policy=StreakPolicy.CALENDAR,
        )
        assert summary.current == 1
        assert summary.longest == 1

    def test_mondays_only_scheduled_policy(self):
        """Skipping non-scheduled days, every Monday in January counts."""
        summary = compute_streaks(
            completed_on(*MONDAYS_JAN_2024),
            date(2024, 1, 29),
            descriptor=ScheduleDescriptor.weekly([1]),
            policy=StreakPolicy.SCHEDULED,
        )
        assert summary.current == 5
        assert summary.longest == 5

    def test_missed_scheduled_day_breaks_streak(self):
        mondays = [d for d in MONDAYS_JAN_2024 if d != date(2024, 1, 15)]
        summary = compute_streaks(
            completed_on(*mondays),
            date(2024, 1, 29),
            descriptor=ScheduleDescriptor.weekly([1]),
            policy="scheduled",
        )
        assert summary.current == 2
        assert summary.longest == 2

    def test_custom_range_edges_do_not_break_streak(self):
        """Days outside a custom range are skipped, inside ones are not."""
        descriptor = ScheduleDescriptor.custom(date(2024, 1, 10), date(2024, 1, 12))
        days = [date(2024, 1, 5), date(2024, 1, 10), date(2024, 1, 11), date(2024, 1, 12)]
        summary = compute_streaks(
            completed_on(*days), date(2024, 1, 20), descriptor=descriptor, policy=StreakPolicy.SCHEDULED
        )

        assert summary.current == 4
        assert summary.longest == 4

    def test_gap_inside_custom_range_breaks(self):
        descriptor = ScheduleDescriptor.custom(date(2024, 1, 1), date(2024, 1, 31))
        days = [date(2024, 1, 5), date(2024, 1, 7)]
        summary = compute_streaks(
            completed_on(*days), date(2024, 1, 7), descriptor=descriptor, policy=StreakPolicy.SCHEDULED
        )
        assert summary.current == 1
        assert summary.longest == 1

    def test_never_scheduled_descriptor_does_not_loop(self):
        """With no scheduled days, every completion joins one run."""
        days = [date(2024, 1, 1), date(2024, 3, 1)]
        summary = compute_streaks(
            completed_on(*days),
            date(2024, 3, 1),
            descriptor=ScheduleDescriptor.weekly([]),
            policy=StreakPolicy.SCHEDULED,
        )
        assert summary.current == 2
        assert summary.longest == 2

    def test_scheduled_policy_requires_descriptor(self):
        with pytest.raises(StreakPolicyError):
            compute_streaks(completed_on(date(2024, 1, 1)), date(2024, 1, 1), policy=StreakPolicy.SCHEDULED)

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValueError):
            compute_streaks([], date(2024, 1, 1), policy="weekly-ish")

    def test_long_gap_with_scheduled_day_resets(self):
        """A decade-long gap is decided without walking every day."""
        start = date(2000, 1, 1)
        days = [start, start + timedelta(days=3650)]
        summary = compute_streaks(
            completed_on(*days),
            days[-1],
            descriptor=ScheduleDescriptor.weekly([2]),
            policy=StreakPolicy.SCHEDULED,
        )
        assert summary.longest == 1


class TestIdempotence:
    def test_same_input_same_output(self):
        records = completed_on(*date_range(date(2024, 3, 1), 5))
        first = compute_streaks(records, date(2024, 3, 5))
        second = compute_streaks(records, date(2024, 3, 5))
        assert first == second


class TestDateCoercion:
    """Dates are read as local calendar dates or rejected with a typed error."""

    def test_iso_string(self):
        assert CompletionRecord("2024-03-05").date == date(2024, 3, 5)

    def test_naive_datetime_keeps_calendar_day(self):
        assert coerce_date(datetime(2024, 3, 5, 23, 59)) == date(2024, 3, 5)

    def test_aware_datetime_rejected(self):
        with pytest.raises(InvalidDateError):
            coerce_date(datetime(2024, 3, 5, tzinfo=timezone.utc))

    @pytest.mark.parametrize("bad", ["2024-02-30", "yesterday", 20240305, None])
    def test_invalid_dates_rejected(self, bad):
        with pytest.raises(InvalidDateError):
            CompletionRecord(bad)

    def test_invalid_as_of_rejected(self):
        with pytest.raises(InvalidDateError):
            compute_streaks([], "not-a-date")


class TestCompletionRate:
    """Share of scheduled days completed within a window."""

    def test_week_bounds_are_sunday_to_saturday(self):
        assert week_bounds(date(2024, 3, 6)) == (date(2024, 3, 3), date(2024, 3, 9))
        assert week_bounds(date(2024, 3, 3)) == (date(2024, 3, 3), date(2024, 3, 9))

    def test_weekly_rate(self):
        descriptor = ScheduleDescriptor.weekly([1, 3, 5])
        records = completed_on(date(2024, 3, 4), date(2024, 3, 6), date(2024, 3, 7))
        rate = completion_rate(records, descriptor, date(2024, 3, 3), date(2024, 3, 9))
        assert rate == pytest.approx(200 / 3)

    def test_no_scheduled_days_is_zero(self):
        rate = completion_rate([], ScheduleDescriptor.weekly([]), date(2024, 3, 3), date(2024, 3, 9))
        assert rate == 0.0

    def test_full_week(self):
        records = completed_on(*date_range(date(2024, 3, 3), 7))
        rate = completion_rate(records, ScheduleDescriptor.daily(), date(2024, 3, 3), date(2024, 3, 9))
        assert rate == 100.0


class TestCounterProgress:
    @pytest.mark.parametrize(
        "value, target, expected",
        [(4, 8, 50.0), (None, 8, 0.0), (12, 8, 150.0), (3, None, 0.0), (3, 0, 0.0)],
    )
    def test_progress(self, value, target, expected):
        assert counter_progress(value, target) == pytest.approx(expected)

