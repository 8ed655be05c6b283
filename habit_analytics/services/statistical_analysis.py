"""
Statistical Analysis Utilities

Small, dependency-free helpers shared by the pattern detector, the insight
selector and the periodic aggregator. Every function is total: degenerate
input (empty samples, zero baselines) yields a defined value instead of an
exception, so callers never see a division-by-zero fault.

Key Features:
- Proportions and Bernoulli variance of completion outcomes
- Ratio deviation between two completion rates
- Normalized gaps used as confidence scores
- Trailing moving averages
"""

import logging
import math
from fractions import Fraction
from typing import Dict, Iterable, List, Optional, Sequence, TypeVar

logger = logging.getLogger(__name__)

K = TypeVar("K")


def proportion(successes: int, total: int) -> float:
    """
    Share of successes, 0.0 when there were no trials.

    Args:
        successes: Number of successful outcomes (completions)
        total: Number of trials (records)

    Returns:
        successes / total, or 0.0 for total == 0

    Raises:
        ValueError: If counts are negative or successes exceed total
    """
    if total < 0 or successes < 0:
        raise ValueError(f"Counts must be non-negative (got {successes}/{total})")
    if successes > total:
        raise ValueError(f"Successes cannot exceed total (got {successes}/{total})")
    if total == 0:
        return 0.0
    return successes / total


def exact_rate(successes: int, total: int) -> Fraction:
    """
    Completion rate as an exact fraction.

    Used for threshold comparisons (e.g. "second half >= 1.2x first half")
    so boundary cases classify the same way regardless of float rounding.
    """
    if total == 0:
        return Fraction(0)
    return Fraction(successes, total)


def outcome_rate(outcomes: Iterable[bool]) -> float:
    """Completion rate of a sequence of boolean outcomes"""
    values = list(outcomes)
    return proportion(sum(1 for v in values if v), len(values))


def bernoulli_variance(rate: float) -> float:
    """
    Variance of a per-record 0/1 outcome with the given success rate.

    Peaks at 0.25 for rate 0.5 and falls to 0 for all-completed or
    all-missed histories. Exact for Fraction input.
    """
    return rate * (1 - rate)


def ratio_deviation(baseline: float, observed: float) -> float:
    """
    Absolute deviation of observed/baseline from 1.

    Example:
        >>> ratio_deviation(0.5, 0.75)   # 0.75 is 1.5x of 0.5
        0.5

    Fraction inputs give an exact Fraction result.

    Returns:
        |observed / baseline - 1|; 0.0 when both are zero and
        math.inf when only the baseline is zero.
    """
    if baseline == 0:
        return 0.0 if observed == 0 else math.inf
    return abs(observed / baseline - 1)


def normalized_gap(gap: float, scale: float) -> float:
    """
    Map a non-negative gap onto [0, 1] by dividing by a saturation scale.

    A gap equal to or larger than `scale` yields full confidence. Exact for
    Fraction inputs, so boundary gaps are not subject to rounding.
    """
    if scale <= 0:
        raise ValueError(f"Scale must be positive (got {scale})")
    return clamp(abs(gap) / scale)


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    """Clamp value into [lower, upper]"""
    return max(lower, min(upper, value))


def group_rates(groups: Dict[K, Sequence[bool]]) -> Dict[K, float]:
    """Completion rate per group, skipping empty groups"""
    return {key: outcome_rate(values) for key, values in groups.items() if values}


def pick_extremes(
    rates: Dict[K, float],
    order: Sequence[K]
) -> Optional[tuple]:
    """
    Best and worst keys of a rate mapping.

    Ties are broken by position in `order` (earlier wins) so the result
    does not depend on mapping insertion order.

    Returns:
        (best, worst) when at least two keys have data and their rates
        differ, otherwise None.
    """
    if len(rates) < 2:
        return None

    ranked = [key for key in order if key in rates]
    best = max(ranked, key=lambda k: (rates[k], -ranked.index(k)))
    worst = min(ranked, key=lambda k: (rates[k], ranked.index(k)))

    if rates[best] == rates[worst]:
        return None
    return best, worst


def moving_averages(values: Sequence[float], window: int) -> List[float]:
    """
    Trailing moving averages.

    Element i of the result is the mean of values[i - window + 1 .. i];
    the first `window - 1` positions have no full window and are omitted,
    so result[j] belongs to values[j + window - 1].

    Raises:
        ValueError: If window is not positive
    """
    if window <= 0:
        raise ValueError(f"Window must be positive (got {window})")

    if len(values) < window:
        return []

    result = []
    running = sum(values[:window])
    result.append(running / window)
    for i in range(window, len(values)):
        running += values[i] - values[i - window]
        result.append(running / window)
    return result
