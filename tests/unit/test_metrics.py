"""Unit tests for the metric calculator (habit_analytics/services/metrics.py)"""
import pytest
from datetime import timedelta

from habit_analytics.models import FeedbackKind
from habit_analytics.services.metrics import (
    best_performing_weekdays,
    classify_feedback,
    completion_rate,
    compute_metrics,
    current_streak,
    longest_streak,
    run_lengths,
    sort_records,
)


# ============================================================================
# Completion Rate Tests
# ============================================================================

class TestCompletionRate:
    """Tests for completion_rate()"""

    def test_empty_records_is_zero(self):
        """Empty input yields 0.0 rather than a division error"""
        assert completion_rate([]) == 0.0

    def test_exact_ratio(self, series_factory):
        """Rate is completed / total of the exact set passed in"""
        records = series_factory([True, False, True, False, False, True, False])
        assert completion_rate(records) == pytest.approx(3 / 7)

    def test_all_completed(self, series_factory):
        records = series_factory([True] * 4)
        assert completion_rate(records) == 1.0

    def test_other_habit_records_are_not_filtered(self, record_factory):
        """Records are counted regardless of habit id"""
        records = [
            record_factory(0, True, habit_id="a"),
            record_factory(1, False, habit_id="b"),
        ]
        assert completion_rate(records) == 0.5


# ============================================================================
# Current Streak Tests
# ============================================================================

class TestCurrentStreak:
    """Tests for current_streak()"""

    def test_all_completed_scenario(self, series_factory, base_date):
        """10 consecutive completions give rate 1.0 and streak 10"""
        records = series_factory([True] * 10)

        metrics = compute_metrics(records, base_date + timedelta(days=9))

        assert metrics.completion_rate == 1.0
        assert metrics.current_streak == 10
        assert metrics.record_count == 10

    def test_alternating_ending_in_miss(self, series_factory, base_date):
        """Alternating history ending in a miss gives streak -1 and rate 0.5"""
        records = series_factory([True, False] * 5)

        metrics = compute_metrics(records, base_date + timedelta(days=9))

        assert metrics.current_streak == -1
        assert metrics.completion_rate == 0.5

    def test_empty_records(self, base_date):
        """Empty input gives rate 0 and streak 0"""
        metrics = compute_metrics([], base_date)

        assert metrics.completion_rate == 0.0
        assert metrics.current_streak == 0
        assert metrics.record_count == 0

    def test_miss_run_is_negative(self, series_factory, base_date):
        records = series_factory([True, True, False, False, False])
        assert current_streak(records, base_date + timedelta(days=4)) == -3

    def test_records_after_as_of_are_ignored(self, series_factory, base_date):
        """Only records dated on or before as_of count"""
        records = series_factory([True, True, True, False, False])
        assert current_streak(records, base_date + timedelta(days=2)) == 3

    def test_as_of_before_all_records(self, series_factory, base_date):
        records = series_factory([True] * 3, start=5)
        assert current_streak(records, base_date) == 0

    def test_calendar_gaps_do_not_break_run(self, record_factory, base_date):
        """Days without any record are skipped, not treated as misses"""
        records = [record_factory(day, True) for day in (0, 1, 5, 9)]
        assert current_streak(records, base_date + timedelta(days=30)) == 4

    def test_sign_matches_latest_record(self, series_factory, base_date):
        """Streak sign always follows the most recent record's status"""
        for outcomes in ([True, False, True], [False, True, False], [True], [False]):
            records = series_factory(outcomes)
            streak = current_streak(records, base_date + timedelta(days=10))
            assert (streak > 0) == outcomes[-1]
            assert streak != 0

    def test_input_order_is_irrelevant(self, series_factory, shuffled, base_date):
        records = series_factory([True, True, False, True, True, True, False, True])
        as_of = base_date + timedelta(days=7)

        expected = current_streak(records, as_of)
        for seed in range(5):
            assert current_streak(shuffled(records, seed), as_of) == expected

    def test_same_day_records_sort_deterministically(self, record_factory, shuffled, base_date):
        """Two records on one day resolve the same way for any input order"""
        records = [
            record_factory(0, True),
            record_factory(1, True),
            record_factory(1, False),
        ]

        results = {current_streak(shuffled(records, seed), base_date + timedelta(days=1)) for seed in range(6)}

        assert len(results) == 1


# ============================================================================
# Run Length Tests
# ============================================================================

class TestRunLengths:
    """Tests for run_lengths() and longest_streak()"""

    def test_signed_runs_in_chronological_order(self, series_factory):
        records = series_factory([True, True, False, True])
        assert run_lengths(records) == [2, -1, 1]

    def test_empty(self):
        assert run_lengths([]) == []
        assert longest_streak([]) == 0

    def test_runs_ignore_input_order(self, series_factory, shuffled):
        records = series_factory([False, False, True, True, True, False])
        assert run_lengths(shuffled(records)) == [-2, 3, -1]

    def test_longest_streak(self, series_factory):
        records = series_factory([True, True, False, True, True, True])
        assert longest_streak(records) == 3

    def test_longest_streak_without_completions(self, series_factory):
        records = series_factory([False] * 4)
        assert longest_streak(records) == 0

    def test_sort_records_descending(self, series_factory):
        records = series_factory([True, False, True])
        ordered = sort_records(records, descending=True)
        assert [r.date for r in ordered] == sorted((r.date for r in records), reverse=True)


# ============================================================================
# Feedback / Weekday Tests
# ============================================================================

@pytest.mark.parametrize("streak,expected", [
    (45, FeedbackKind.MILESTONE),
    (30, FeedbackKind.MILESTONE),
    (29, FeedbackKind.STREAK),
    (7, FeedbackKind.STREAK),
    (6, FeedbackKind.COMPLETION),
    (1, FeedbackKind.COMPLETION),
    (0, FeedbackKind.GENERAL),
    (-1, FeedbackKind.MISSED),
    (-12, FeedbackKind.MISSED),
])
def test_classify_feedback(streak, expected):
    """Feedback kind follows the signed streak"""
    assert classify_feedback(streak) == expected


class TestBestPerformingWeekdays:
    """Tests for best_performing_weekdays()"""

    def test_ties_are_all_returned(self, record_factory):
        records = [
            record_factory(0, True),   # Monday
            record_factory(7, True),   # Monday
            record_factory(2, True),   # Wednesday
            record_factory(9, True),   # Wednesday
            record_factory(1, True),   # Tuesday
            record_factory(8, False),  # Tuesday
        ]
        assert best_performing_weekdays(records) == [0, 2]

    def test_no_completions(self, series_factory):
        assert best_performing_weekdays(series_factory([False] * 7)) == []
