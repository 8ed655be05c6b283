"""
Insight Selection Service

Combines metrics and pattern findings for one habit into a small, ranked
HabitInsightResult: at most two salient patterns, a category framing tag and
a tenure tier. Also derives the compact headline, check-in feedback kind and
rule-based optimization suggestions.

Everything returned is a tag or a number; wording belongs to the renderer.
"""

import logging
from collections import Counter
from datetime import date
from fractions import Fraction
from typing import Iterable, List, Sequence

from habit_analytics import config
from habit_analytics.models import (
    TAG_PRIORITY,
    CategoryFraming,
    CompletionRecord,
    HabitDescriptor,
    HabitInsightResult,
    HeadlineTag,
    OptimizationSuggestion,
    PatternFinding,
    PatternTag,
    SuggestionType,
    TenureTier,
)
from habit_analytics.services.metrics import (
    best_performing_weekdays,
    classify_feedback,
    compute_metrics,
    sort_records,
)
from habit_analytics.services.pattern_detection import MIN_RECORDS, detect_pattern_findings
from habit_analytics.services.statistical_analysis import exact_rate
from habit_analytics.utils.datetime_helpers import days_between

logger = logging.getLogger(__name__)

# Pattern selection
SELECTION_THRESHOLD = 0.6
MAX_SELECTED_PATTERNS = 2

# Category framing
POSITIVE_FRAMING_RATE = 0.7
EARLY_POSITIVE_FRAMING_RATE = 0.5

# Tenure tiers: (minimum days tracked, tier), checked from the top
TENURE_TIERS = (
    (180, TenureTier.SIX_MONTHS_PLUS),
    (90, TenureTier.THREE_MONTHS),
    (30, TenureTier.ONE_MONTH),
)

# Headline thresholds
HEADLINE_MIN_RECORDS = 5
HEADLINE_STREAK = 5
HIGH_COMPLETION_RATE = Fraction(4, 5)
LOW_COMPLETION_RATE = Fraction(3, 10)
RECENT_WINDOW = 7
RECENT_UPPER_RATIO = Fraction(6, 5)
RECENT_LOWER_RATIO = Fraction(4, 5)

# Suggestion confidences
NO_DATA_TIME_CHANGE_CONFIDENCE = 0.7
DIFFICULTY_ADJUST_CONFIDENCE = 0.8
MISSED_DAYS_TIME_CHANGE_CONFIDENCE = 0.75
HABIT_COMBINATION_CONFIDENCE = 0.65
DIFFICULTY_ADJUST_RATE = 0.5
MISSED_DAYS_LIMIT = 2


def select_patterns(findings: Iterable[PatternFinding]) -> List[PatternFinding]:
    """
    Pick the salient findings to surface.

    Keeps findings with confidence strictly above SELECTION_THRESHOLD
    (InsufficientData never qualifies), sorted by confidence descending with
    TAG_PRIORITY breaking ties, and returns at most MAX_SELECTED_PATTERNS.
    """
    eligible = [
        f for f in findings
        if f.tag != PatternTag.INSUFFICIENT_DATA and f.confidence > SELECTION_THRESHOLD
    ]
    eligible.sort(key=lambda f: (-f.confidence, TAG_PRIORITY.index(f.tag)))
    return eligible[:MAX_SELECTED_PATTERNS]


def derive_category_framing(completion_rate: float, record_count: int) -> CategoryFraming:
    """
    Positive or NeedsSupport framing for category-specific messaging.

    Short histories (fewer than MIN_RECORDS) use the lower 0.5 bar,
    inclusive; established ones need a rate strictly above 0.7.
    """
    if record_count < MIN_RECORDS:
        positive = completion_rate >= EARLY_POSITIVE_FRAMING_RATE
    else:
        positive = completion_rate > POSITIVE_FRAMING_RATE
    return CategoryFraming.POSITIVE if positive else CategoryFraming.NEEDS_SUPPORT


def derive_tenure_tier(start_date: date, as_of: date) -> TenureTier:
    """Tenure tier from days elapsed since the habit started (future starts are New)"""
    elapsed = days_between(start_date, as_of)
    for minimum, tier in TENURE_TIERS:
        if elapsed >= minimum:
            return tier
    return TenureTier.NEW


def select_headline(records: Sequence[CompletionRecord], current_streak: int) -> HeadlineTag:
    """
    Single most relevant finding for compact display.

    Checked in order: no data, too few records, long streak or miss run,
    very high or very low overall rate, then the last RECENT_WINDOW records
    against the overall rate.

    Args:
        records: Records of one habit, in any order
        current_streak: Signed streak as returned by current_streak()

    Returns:
        HeadlineTag
    """
    if not records:
        return HeadlineTag.NO_DATA
    if len(records) < HEADLINE_MIN_RECORDS:
        return HeadlineTag.KEEP_TRACKING
    if current_streak >= HEADLINE_STREAK:
        return HeadlineTag.STREAK_RUN
    if current_streak <= -HEADLINE_STREAK:
        return HeadlineTag.MISS_RUN

    overall = exact_rate(sum(1 for r in records if r.is_completed), len(records))
    if overall > HIGH_COMPLETION_RATE:
        return HeadlineTag.HIGH_COMPLETION
    if overall < LOW_COMPLETION_RATE:
        return HeadlineTag.LOW_COMPLETION

    recent = sort_records(records)[-RECENT_WINDOW:]
    recent_rate = exact_rate(sum(1 for r in recent if r.is_completed), len(recent))
    if recent_rate > overall * RECENT_UPPER_RATIO:
        return HeadlineTag.RECENT_IMPROVEMENT
    if recent_rate < overall * RECENT_LOWER_RATIO:
        return HeadlineTag.RECENT_DECLINE
    return HeadlineTag.STEADY


def build_suggestions(records: Sequence[CompletionRecord]) -> List[OptimizationSuggestion]:
    """
    Rule-based optimization suggestions for one habit.

    Without records a single default TimeChange suggestion is returned.
    Otherwise: DifficultyAdjust when the rate is below 0.5, TimeChange for
    the (up to two) most-missed weekdays, and always HabitCombination.
    """
    if not records:
        return [OptimizationSuggestion(
            type=SuggestionType.TIME_CHANGE,
            confidence=NO_DATA_TIME_CHANGE_CONFIDENCE
        )]

    suggestions = []

    completed = sum(1 for r in records if r.is_completed)
    if completed / len(records) < DIFFICULTY_ADJUST_RATE:
        suggestions.append(OptimizationSuggestion(
            type=SuggestionType.DIFFICULTY_ADJUST,
            confidence=DIFFICULTY_ADJUST_CONFIDENCE
        ))

    missed = Counter(r.date.weekday() for r in records if not r.is_completed)
    if missed:
        most_missed = sorted(missed, key=lambda day: (-missed[day], day))[:MISSED_DAYS_LIMIT]
        suggestions.append(OptimizationSuggestion(
            type=SuggestionType.TIME_CHANGE,
            confidence=MISSED_DAYS_TIME_CHANGE_CONFIDENCE,
            weekdays=most_missed
        ))

    suggestions.append(OptimizationSuggestion(
        type=SuggestionType.HABIT_COMBINATION,
        confidence=HABIT_COMBINATION_CONFIDENCE
    ))

    return suggestions


def analyze_habit(
    habit: HabitDescriptor,
    records: Sequence[CompletionRecord],
    as_of: date
) -> HabitInsightResult:
    """
    Full per-habit analysis.

    The record set is used exactly as given: records are not filtered by
    habit id or date, so the completion rate always covers the whole set.

    Args:
        habit: Descriptor of the analysed habit (category, start date)
        records: The habit's completion records, in any order
        as_of: Reference day for the streak and the tenure tier

    Returns:
        HabitInsightResult. With no records every field keeps its default
        (tenure New, no patterns) apart from the single default TimeChange
        suggestion; with fewer than MIN_RECORDS records no
        patterns are selected.
    """
    if not records:
        logger.debug(f"No records for habit {habit.id}, returning defaults")
        return HabitInsightResult(
            habit_id=habit.id,
            category=habit.category,
            suggestions=build_suggestions(records)
        )

    metrics = compute_metrics(records, as_of)

    if metrics.record_count < MIN_RECORDS:
        selected = []
    else:
        selected = select_patterns(detect_pattern_findings(records))

    if config.ANALYTICS_LOG_FINDINGS:
        for finding in selected:
            logger.info(f"Habit {habit.id}: {finding.tag.value} (confidence={finding.confidence:.2f})")

    return HabitInsightResult(
        habit_id=habit.id,
        category=habit.category,
        record_count=metrics.record_count,
        completion_rate=metrics.completion_rate,
        current_streak=metrics.current_streak,
        selected_patterns=selected,
        category_framing=derive_category_framing(metrics.completion_rate, metrics.record_count),
        tenure_tier=derive_tenure_tier(habit.start_date, as_of),
        days_tracked=max(0, days_between(habit.start_date, as_of)),
        headline=select_headline(records, metrics.current_streak),
        feedback_kind=classify_feedback(metrics.current_streak),
        best_weekdays=best_performing_weekdays(records),
        suggestions=build_suggestions(records),
    )
