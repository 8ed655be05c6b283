"""
Pattern Detection Service

Detects temporal regularities in the completion history of one habit:

1. Weekday / weekend bias
2. Time-of-day bias (morning, afternoon, evening, night)
3. Trend (improving, declining, stable, fluctuating)
4. Streak-driven completion
5. Specific-day bias
6. Insufficient data (supersedes everything else)

Each detector is independent and returns at most one PatternFinding. The
service does not rank or filter findings; that is the insight selector's job.
Threshold comparisons use exact fractions so boundary cases (e.g. a second
half at exactly 1.2x the first) always land on the same side.

Also provides historical anomaly detection (records that deviate from their
weekday baseline and recent moving average). Nothing here forecasts.
"""

import logging
from collections import defaultdict
from fractions import Fraction
from typing import Dict, List, Optional, Sequence

from habit_analytics.exceptions import ValidationError
from habit_analytics.models import (
    AnomalousRecord,
    CompletionRecord,
    PatternFinding,
    PatternTag,
)
from habit_analytics.services.metrics import longest_streak, run_lengths, sort_records
from habit_analytics.services.statistical_analysis import (
    bernoulli_variance,
    clamp,
    exact_rate,
    moving_averages,
    normalized_gap,
    outcome_rate,
    ratio_deviation,
)
from habit_analytics.utils.datetime_helpers import TimeBucket, is_weekend, time_bucket, weekday_name

logger = logging.getLogger(__name__)

# Below this many records only InsufficientData is reported
MIN_RECORDS = 7

# Findings under this confidence count as "not detected"
DETECTION_FLOOR = 0.3

# A rate gap of this size saturates bias confidence at 1.0
BIAS_SCALE = Fraction(1, 2)

MIN_BIAS_SAMPLE = 7
MIN_TIMED_RECORDS = 3
MIN_TIMED_BUCKETS = 2

TREND_UPPER_RATIO = Fraction(6, 5)  # 1.2x
TREND_LOWER_RATIO = Fraction(4, 5)  # 0.8x
TREND_BASE_CONFIDENCE = Fraction(1, 2)
STABLE_RATE_DELTA = Fraction(1, 10)
STABLE_VARIANCE_CEILING = Fraction(4, 25)  # rate <= 0.2 or >= 0.8
STABLE_BAND = TREND_UPPER_RATIO - 1

LONG_RUN_LENGTH = 5

SPECIFIC_DAY_MARGIN = Fraction(3, 10)
SPECIFIC_DAY_MIN_SAMPLES = 3

ANOMALY_MIN_RECORDS = 14
ANOMALY_WINDOW = 7
ANOMALY_SMOOTHING = 0.1

TIME_BUCKET_TAGS = {
    TimeBucket.MORNING: PatternTag.MORNING_BIAS,
    TimeBucket.AFTERNOON: PatternTag.AFTERNOON_BIAS,
    TimeBucket.EVENING: PatternTag.EVENING_BIAS,
    TimeBucket.NIGHT: PatternTag.NIGHT_BIAS,
}


def _count_completed(records: Sequence[CompletionRecord]) -> int:
    return sum(1 for r in records if r.is_completed)


def _rate(records: Sequence[CompletionRecord]) -> Fraction:
    return exact_rate(_count_completed(records), len(records))


def _bias_confidence(gap: Fraction) -> float:
    return float(normalized_gap(gap, BIAS_SCALE))


# ================================================================
# Detector 1: Weekday / Weekend Bias
# ================================================================

def _detect_weekday_bias(records: Sequence[CompletionRecord]) -> Optional[PatternFinding]:
    """Compare pooled weekday (Mon-Fri) and weekend (Sat, Sun) completion rates"""
    weekday = [r for r in records if not is_weekend(r.date)]
    weekend = [r for r in records if is_weekend(r.date)]

    if not weekday or not weekend or len(weekday) + len(weekend) < MIN_BIAS_SAMPLE:
        return None

    weekday_rate = _rate(weekday)
    weekend_rate = _rate(weekend)
    confidence = _bias_confidence(weekday_rate - weekend_rate)

    if weekday_rate == weekend_rate or confidence < DETECTION_FLOOR:
        logger.debug(f"No weekday/weekend bias (weekday={float(weekday_rate):.2f}, weekend={float(weekend_rate):.2f})")
        return None

    tag = PatternTag.WEEKDAY_BIAS if weekday_rate > weekend_rate else PatternTag.WEEKEND_BIAS
    return PatternFinding(
        tag=tag,
        confidence=confidence,
        parameters={
            "weekday_rate": float(weekday_rate),
            "weekend_rate": float(weekend_rate),
        }
    )


# ================================================================
# Detector 2: Time-of-Day Bias
# ================================================================

def _best_bucket(scores: Dict[TimeBucket, Fraction]) -> TimeBucket:
    """Highest-scoring bucket; declaration order breaks ties"""
    populated = [bucket for bucket in TimeBucket if bucket in scores]
    best = populated[0]
    for bucket in populated[1:]:
        if scores[bucket] > scores[best]:
            best = bucket
    return best


def _detect_time_of_day_bias(records: Sequence[CompletionRecord]) -> Optional[PatternFinding]:
    """
    Find the clock bucket that stands out.

    Only records with a known completion time take part. When some timed
    records are misses, buckets are scored by completion rate and confidence
    is the gap between the best bucket's rate and the mean rate of the other
    populated buckets, normalized by BIAS_SCALE.

    Misses usually carry no time, so when every timed record is a completion
    buckets are scored by their share of timed completions instead, and
    confidence is the best share minus the mean share of the other three
    buckets.
    """
    buckets: Dict[TimeBucket, List[CompletionRecord]] = defaultdict(list)
    for record in records:
        bucket = time_bucket(record.completion_time)
        if bucket is not None:
            buckets[bucket].append(record)

    timed_count = sum(len(group) for group in buckets.values())
    if timed_count < MIN_TIMED_RECORDS or len(buckets) < MIN_TIMED_BUCKETS:
        return None

    has_timed_misses = any(not r.is_completed for group in buckets.values() for r in group)

    if has_timed_misses:
        rates = {bucket: _rate(group) for bucket, group in buckets.items()}
        best = _best_bucket(rates)
        others = [rate for bucket, rate in rates.items() if bucket != best]
        gap = rates[best] - sum(others) / len(others)
        confidence = _bias_confidence(gap)
        parameters = {
            "bucket_rate": float(rates[best]),
            "other_buckets_rate": float(sum(others) / len(others)),
            "timed_records": timed_count,
        }
    else:
        shares = {bucket: exact_rate(len(group), timed_count) for bucket, group in buckets.items()}
        best = _best_bucket(shares)
        gap = shares[best] - (1 - shares[best]) / (len(TimeBucket) - 1)
        confidence = clamp(float(gap))
        parameters = {
            "bucket_share": float(shares[best]),
            "timed_records": timed_count,
        }

    if gap <= 0 or confidence < DETECTION_FLOOR:
        logger.debug(f"No time-of-day bias (best={best.value}, gap={float(gap):.2f})")
        return None

    return PatternFinding(
        tag=TIME_BUCKET_TAGS[best],
        confidence=confidence,
        parameters=parameters
    )


# ================================================================
# Detector 3: Trend
# ================================================================

def _detect_trend(records: Sequence[CompletionRecord]) -> Optional[PatternFinding]:
    """
    Classify the trend between the first and second half of the history.

    Halves are equal by record count (the middle record of an odd-sized
    history belongs to neither). Exactly one trend tag is produced.
    """
    half = len(records) // 2
    if half == 0:
        return None

    ordered = sort_records(records)
    first_rate = _rate(ordered[:half])
    second_rate = _rate(ordered[-half:])

    deviation = ratio_deviation(first_rate, second_rate)

    if second_rate > first_rate and second_rate >= first_rate * TREND_UPPER_RATIO:
        tag = PatternTag.IMPROVING_TREND
    elif second_rate < first_rate and second_rate <= first_rate * TREND_LOWER_RATIO:
        tag = PatternTag.DECLINING_TREND
    elif (
        abs(second_rate - first_rate) < STABLE_RATE_DELTA
        and bernoulli_variance(_rate(records)) <= STABLE_VARIANCE_CEILING
    ):
        tag = PatternTag.STABLE_TREND
    else:
        tag = PatternTag.FLUCTUATING_TREND

    if tag == PatternTag.STABLE_TREND:
        confidence = clamp(float(1 - deviation / STABLE_BAND))
    else:
        # An infinite deviation (first half all misses) saturates at 1
        confidence = float(min(Fraction(1), TREND_BASE_CONFIDENCE + deviation))

    logger.debug(
        f"Trend {tag.value}: first={float(first_rate):.2f}, second={float(second_rate):.2f}, "
        f"confidence={confidence:.2f}"
    )

    return PatternFinding(
        tag=tag,
        confidence=confidence,
        parameters={
            "first_half_rate": float(first_rate),
            "second_half_rate": float(second_rate),
            "half_size": half,
        }
    )


# ================================================================
# Detector 4: Streak-Driven Completion
# ================================================================

def _detect_streak_driven(records: Sequence[CompletionRecord]) -> Optional[PatternFinding]:
    """Majority of tracked records sit inside completion runs of LONG_RUN_LENGTH or more"""
    if not records:
        return None

    in_long_runs = sum(run for run in run_lengths(records) if run >= LONG_RUN_LENGTH)
    share = exact_rate(in_long_runs, len(records))

    if share <= Fraction(1, 2):
        return None

    return PatternFinding(
        tag=PatternTag.STREAK_DRIVEN,
        confidence=float(share),
        parameters={
            "records_in_long_runs": in_long_runs,
            "longest_streak": longest_streak(records),
        }
    )


# ================================================================
# Detector 5: Specific-Day Bias
# ================================================================

def _detect_specific_day_bias(records: Sequence[CompletionRecord]) -> Optional[PatternFinding]:
    """One weekday outperforms the overall rate by more than SPECIFIC_DAY_MARGIN"""
    overall = _rate(records)

    by_day: Dict[int, List[CompletionRecord]] = defaultdict(list)
    for record in records:
        by_day[record.date.weekday()].append(record)

    best_day = None
    best_excess = SPECIFIC_DAY_MARGIN
    for weekday in range(7):
        samples = by_day.get(weekday, [])
        if len(samples) < SPECIFIC_DAY_MIN_SAMPLES:
            continue
        excess = _rate(samples) - overall
        if excess > best_excess:
            best_day, best_excess = weekday, excess

    if best_day is None:
        return None

    logger.debug(f"Specific-day bias on {weekday_name(best_day)} (+{float(best_excess):.2f} over overall)")

    return PatternFinding(
        tag=PatternTag.SPECIFIC_DAY_BIAS,
        confidence=_bias_confidence(best_excess),
        parameters={
            "weekday": best_day,
            "weekday_rate": float(_rate(by_day[best_day])),
            "overall_rate": float(overall),
        }
    )


DETECTORS = (
    _detect_weekday_bias,
    _detect_time_of_day_bias,
    _detect_trend,
    _detect_streak_driven,
    _detect_specific_day_bias,
)


# ================================================================
# Public API
# ================================================================

def detect_pattern_findings(records: Sequence[CompletionRecord]) -> List[PatternFinding]:
    """
    Run every detector over one habit's records.

    Args:
        records: Records of one habit, in any order

    Returns:
        One PatternFinding per PatternTag, in PatternTag declaration order.
        Undetected tags carry confidence 0.0. With fewer than MIN_RECORDS
        records only InsufficientData is set (confidence 1.0).
    """
    findings = {tag: PatternFinding(tag=tag, confidence=0.0) for tag in PatternTag}

    if len(records) < MIN_RECORDS:
        logger.debug(f"Not enough records for pattern detection (have {len(records)}, need {MIN_RECORDS})")
        findings[PatternTag.INSUFFICIENT_DATA] = PatternFinding(
            tag=PatternTag.INSUFFICIENT_DATA,
            confidence=1.0,
            parameters={"record_count": len(records), "required": MIN_RECORDS}
        )
        return list(findings.values())

    ordered = sort_records(records)
    for detector in DETECTORS:
        finding = detector(ordered)
        if finding is not None:
            findings[finding.tag] = finding

    return list(findings.values())


def detect_patterns(records: Sequence[CompletionRecord]) -> Dict[PatternTag, float]:
    """
    Pattern tag to confidence mapping for one habit's records.

    Every PatternTag is present; 0.0 means "not detected".
    """
    return {finding.tag: finding.confidence for finding in detect_pattern_findings(records)}


def detect_anomalies(
    records: Sequence[CompletionRecord],
    sensitivity: float = 2.0
) -> List[AnomalousRecord]:
    """
    Find records that deviate from their expected completion probability.

    Expected probability is the mean of the record's weekday baseline and the
    trailing ANOMALY_WINDOW-record moving average (records before the first
    full window use the overall rate). Score:

        |actual - expected| / (expected * (1 - expected) + 0.1)

    Args:
        records: Records of one habit, in any order
        sensitivity: Score above which a record is anomalous (lower = more)

    Returns:
        Anomalous records in chronological order; empty with fewer than
        ANOMALY_MIN_RECORDS records

    Raises:
        ValidationError: If sensitivity is not positive
    """
    if sensitivity <= 0:
        raise ValidationError(
            message="Sensitivity must be positive",
            field="sensitivity",
            value=sensitivity,
            operation="detect_anomalies",
        )

    if len(records) < ANOMALY_MIN_RECORDS:
        return []

    ordered = sort_records(records)
    overall = outcome_rate(r.is_completed for r in ordered)

    by_day: Dict[int, List[bool]] = defaultdict(list)
    for record in ordered:
        by_day[record.date.weekday()].append(record.is_completed)
    day_baselines = {day: outcome_rate(values) for day, values in by_day.items()}

    outcomes = [1.0 if r.is_completed else 0.0 for r in ordered]
    averages = moving_averages(outcomes, ANOMALY_WINDOW)

    anomalies = []
    for i, record in enumerate(ordered):
        moving = averages[i - ANOMALY_WINDOW + 1] if i >= ANOMALY_WINDOW - 1 else overall
        expected = (day_baselines[record.date.weekday()] + moving) / 2
        score = abs(outcomes[i] - expected) / (expected * (1 - expected) + ANOMALY_SMOOTHING)

        if score > sensitivity:
            anomalies.append(AnomalousRecord(record=record, expected=expected, score=score))

    logger.debug(f"Found {len(anomalies)} anomalous records out of {len(ordered)}")
    return anomalies
