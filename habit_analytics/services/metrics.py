"""
Metric Calculator

Pure functions over a record set: completion rate, signed current streak,
run lengths and a few streak-derived classifications.

Streaks are record-run based: only records that exist are considered, so a
calendar day with no record at all does not break a run.
"""

from collections import Counter
from datetime import date
from typing import List, Sequence
import logging

from habit_analytics.models import CompletionRecord, FeedbackKind, HabitMetrics
from habit_analytics.services.statistical_analysis import proportion

logger = logging.getLogger(__name__)

# Streak lengths that switch completion feedback to a stronger kind
MILESTONE_STREAK = 30
STREAK_FEEDBACK_MIN = 7


def sort_records(records: Sequence[CompletionRecord], descending: bool = False) -> List[CompletionRecord]:
    """Sort records chronologically with a total, permutation-proof key"""
    return sorted(records, key=lambda r: r.sort_key(), reverse=descending)


def completion_rate(records: Sequence[CompletionRecord]) -> float:
    """
    Completed records divided by all records.

    Returns 0.0 for an empty set; callers must check the record count before
    acting on that value.
    """
    return proportion(sum(1 for r in records if r.is_completed), len(records))


def current_streak(records: Sequence[CompletionRecord], as_of: date) -> int:
    """
    Signed length of the most recent same-status run.

    Walks records newest-first starting at the latest record dated on or
    before `as_of`. Positive values count consecutive completions, negative
    values consecutive misses.

    Args:
        records: Records of one habit, in any order
        as_of: Records dated after this day are ignored

    Returns:
        Signed run length, 0 when no record is dated on or before as_of
    """
    eligible = [r for r in sort_records(records, descending=True) if r.date <= as_of]
    if not eligible:
        return 0

    anchor = eligible[0].is_completed
    streak = 0
    for record in eligible:
        if record.is_completed != anchor:
            break
        streak += 1 if anchor else -1

    return streak


def compute_metrics(records: Sequence[CompletionRecord], as_of: date) -> HabitMetrics:
    """Completion rate and current streak for one record set"""
    return HabitMetrics(
        completion_rate=completion_rate(records),
        current_streak=current_streak(records, as_of),
        record_count=len(records),
    )


def run_lengths(records: Sequence[CompletionRecord]) -> List[int]:
    """
    Signed run lengths in chronological order.

    Example: completed, completed, missed, completed -> [2, -1, 1]
    """
    runs: List[int] = []
    for record in sort_records(records):
        step = 1 if record.is_completed else -1
        if runs and (runs[-1] > 0) == record.is_completed:
            runs[-1] += step
        else:
            runs.append(step)
    return runs


def longest_streak(records: Sequence[CompletionRecord]) -> int:
    """Longest run of consecutive completions (0 if none)"""
    return max((run for run in run_lengths(records) if run > 0), default=0)


def classify_feedback(streak: int) -> FeedbackKind:
    """Feedback kind to show after a check-in, from the signed streak"""
    if streak >= MILESTONE_STREAK:
        return FeedbackKind.MILESTONE
    if streak >= STREAK_FEEDBACK_MIN:
        return FeedbackKind.STREAK
    if streak > 0:
        return FeedbackKind.COMPLETION
    if streak < 0:
        return FeedbackKind.MISSED
    return FeedbackKind.GENERAL


def best_performing_weekdays(records: Sequence[CompletionRecord]) -> List[int]:
    """
    Weekdays sharing the highest completion count.

    Returns:
        Sorted weekday indexes (Monday=0), empty if nothing was completed
    """
    counts = Counter(r.date.weekday() for r in records if r.is_completed)
    if not counts:
        return []
    top = max(counts.values())
    return sorted(day for day, count in counts.items() if count == top)
