"""
Periodic Report Service

Aggregates many habits over an inclusive date window:

1. Overall completion rate (weighted by record count)
2. Habit ranking by in-window completion rate
3. Best/worst weekday and best/worst category
4. First-half vs second-half trend
5. Prioritized recommendations (at most 3)

Habits without in-window records are left out of the ranking and listed in
habits_without_data instead.
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from fractions import Fraction
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from habit_analytics.exceptions import InvalidRangeError, ValidationError
from habit_analytics.models import (
    CompletionRecord,
    HabitCategory,
    HabitDescriptor,
    HabitRate,
    PeriodicReportResult,
    RecommendationTag,
    ReportPeriod,
    SummaryTier,
    TrendDirection,
)
from habit_analytics.services.metrics import completion_rate
from habit_analytics.services.statistical_analysis import exact_rate, group_rates, pick_extremes
from habit_analytics.utils.datetime_helpers import in_window, window_midpoint

logger = logging.getLogger(__name__)

TREND_UPPER_RATIO = Fraction(6, 5)
TREND_LOWER_RATIO = Fraction(4, 5)

REDUCE_SCOPE_RATE = 0.5
STRUGGLING_RATE = 0.5
EXCELLENT_RATE = 0.8
GOOD_RATE = 0.5

MAX_RECOMMENDATIONS = 3

# Days covered by each standard period, end date included
PERIOD_LENGTHS = {
    ReportPeriod.DAILY: 1,
    ReportPeriod.WEEKLY: 7,
    ReportPeriod.MONTHLY: 30,
}


def report_window(period: ReportPeriod, end_date: date) -> Tuple[date, date]:
    """
    Inclusive (start, end) window of a standard report period ending on end_date.

    Example:
        >>> report_window(ReportPeriod.WEEKLY, date(2024, 3, 10))
        (datetime.date(2024, 3, 4), datetime.date(2024, 3, 10))
    """
    return end_date - timedelta(days=PERIOD_LENGTHS[period] - 1), end_date


def window_trend(records: Sequence[CompletionRecord], start_date: date, end_date: date) -> TrendDirection:
    """
    Compare completion in the first and second half of a window.

    Records dated before the window midpoint form the first half. Improved
    and Declined need the second-half rate strictly beyond 1.2x / 0.8x of
    the first; an empty half makes the trend Indeterminate.
    """
    midpoint = window_midpoint(start_date, end_date)
    first = [r for r in records if r.date < midpoint]
    second = [r for r in records if r.date >= midpoint]

    if not first or not second:
        return TrendDirection.INDETERMINATE

    first_rate = exact_rate(sum(1 for r in first if r.is_completed), len(first))
    second_rate = exact_rate(sum(1 for r in second if r.is_completed), len(second))

    if second_rate > first_rate * TREND_UPPER_RATIO:
        return TrendDirection.IMPROVED
    if second_rate < first_rate * TREND_LOWER_RATIO:
        return TrendDirection.DECLINED
    return TrendDirection.FLAT


def summary_tier(overall_rate: float, record_count: int) -> SummaryTier:
    """Performance band of the whole report"""
    if record_count == 0:
        return SummaryTier.NO_DATA
    if overall_rate > EXCELLENT_RATE:
        return SummaryTier.EXCELLENT
    if overall_rate > GOOD_RATE:
        return SummaryTier.GOOD
    return SummaryTier.NEEDS_IMPROVEMENT


def _recommendations(
    weekday_extremes: Optional[tuple],
    category_extremes: Optional[tuple],
    overall_rate: float
) -> List[RecommendationTag]:
    recommendations = []
    if weekday_extremes is not None:
        recommendations.append(RecommendationTag.WEEKDAY_DISPARITY)
    if category_extremes is not None:
        recommendations.append(RecommendationTag.CATEGORY_DISPARITY)

    if not recommendations:
        if overall_rate < REDUCE_SCOPE_RATE:
            recommendations.append(RecommendationTag.REDUCE_SCOPE)
        else:
            recommendations.append(RecommendationTag.RAISE_CHALLENGE)

    return recommendations[:MAX_RECOMMENDATIONS]


def build_periodic_report(
    habits_with_records: Mapping[HabitDescriptor, Sequence[CompletionRecord]],
    start_date: date,
    end_date: date
) -> PeriodicReportResult:
    """
    Cross-habit report over the inclusive window [start_date, end_date].

    Args:
        habits_with_records: Each habit's descriptor mapped to its records
            (any order, any dates; out-of-window records are ignored)
        start_date: First day of the window
        end_date: Last day of the window

    Returns:
        PeriodicReportResult

    Raises:
        InvalidRangeError: If end_date is before start_date
        ValidationError: If two descriptors share a habit id
    """
    if end_date < start_date:
        raise InvalidRangeError(start_date, end_date)

    seen_ids = set()
    for habit in habits_with_records:
        if habit.id in seen_ids:
            raise ValidationError(
                message=f"Duplicate habit id '{habit.id}'",
                field="habits_with_records",
                value=habit.id,
                operation="build_periodic_report"
            )
        seen_ids.add(habit.id)

    if not habits_with_records:
        logger.info(f"Periodic report {start_date}..{end_date}: no habits")
        return PeriodicReportResult(
            start_date=start_date,
            end_date=end_date,
            recommendations=[RecommendationTag.ADD_FIRST_HABIT],
        )

    ranking: List[HabitRate] = []
    habits_without_data: List[str] = []
    window_records: List[CompletionRecord] = []
    by_weekday: Dict[int, List[bool]] = defaultdict(list)
    by_category: Dict[HabitCategory, List[bool]] = defaultdict(list)

    for habit, records in habits_with_records.items():
        in_range = [r for r in records if in_window(r.date, start_date, end_date)]
        if not in_range:
            habits_without_data.append(habit.id)
            continue

        ranking.append(HabitRate(
            habit_id=habit.id,
            rate=completion_rate(in_range),
            record_count=len(in_range)
        ))
        window_records.extend(in_range)
        for record in in_range:
            by_weekday[record.date.weekday()].append(record.is_completed)
            by_category[habit.category].append(record.is_completed)

    # Highest rate first, habit id breaks ties
    ranking.sort(key=lambda entry: (-entry.rate, entry.habit_id))
    habits_without_data.sort()

    overall_rate = completion_rate(window_records)
    weekday_extremes = pick_extremes(group_rates(by_weekday), range(7))
    category_extremes = pick_extremes(group_rates(by_category), list(HabitCategory))

    struggling = None
    if len(ranking) > 1 and ranking[-1].rate < STRUGGLING_RATE:
        struggling = ranking[-1]

    report = PeriodicReportResult(
        start_date=start_date,
        end_date=end_date,
        record_count=len(window_records),
        overall_completion_rate=overall_rate,
        habit_ranking=ranking,
        habits_without_data=habits_without_data,
        best_weekday=weekday_extremes[0] if weekday_extremes else None,
        worst_weekday=weekday_extremes[1] if weekday_extremes else None,
        best_category=category_extremes[0] if category_extremes else None,
        worst_category=category_extremes[1] if category_extremes else None,
        trend_direction=window_trend(window_records, start_date, end_date),
        recommendations=_recommendations(weekday_extremes, category_extremes, overall_rate),
        summary_tier=summary_tier(overall_rate, len(window_records)),
        top_habit=ranking[0] if ranking else None,
        struggling_habit=struggling,
    )

    logger.info(
        f"Periodic report {start_date}..{end_date}: {report.record_count} records, "
        f"{len(ranking)} ranked habits, overall rate {overall_rate:.2f}"
    )
    return report
