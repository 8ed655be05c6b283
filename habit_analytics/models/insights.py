"""Output models for habit analytics findings and reports"""
from enum import Enum
from typing import Optional, Union
from datetime import date as dt_date
from pydantic import BaseModel, ConfigDict, Field

from habit_analytics.models.records import CompletionRecord, HabitCategory


class PatternTag(str, Enum):
    """Temporal regularities the pattern detector can report"""
    WEEKDAY_BIAS = "weekday_bias"
    WEEKEND_BIAS = "weekend_bias"
    MORNING_BIAS = "morning_bias"
    AFTERNOON_BIAS = "afternoon_bias"
    EVENING_BIAS = "evening_bias"
    NIGHT_BIAS = "night_bias"
    IMPROVING_TREND = "improving_trend"
    DECLINING_TREND = "declining_trend"
    STABLE_TREND = "stable_trend"
    FLUCTUATING_TREND = "fluctuating_trend"
    STREAK_DRIVEN = "streak_driven"
    SPECIFIC_DAY_BIAS = "specific_day_bias"
    INSUFFICIENT_DATA = "insufficient_data"


TREND_TAGS = (
    PatternTag.IMPROVING_TREND,
    PatternTag.DECLINING_TREND,
    PatternTag.STABLE_TREND,
    PatternTag.FLUCTUATING_TREND,
)

TIME_OF_DAY_TAGS = (
    PatternTag.MORNING_BIAS,
    PatternTag.AFTERNOON_BIAS,
    PatternTag.EVENING_BIAS,
    PatternTag.NIGHT_BIAS,
)

DAY_TAGS = (
    PatternTag.WEEKDAY_BIAS,
    PatternTag.WEEKEND_BIAS,
    PatternTag.SPECIFIC_DAY_BIAS,
)

# Tie-break order when two findings share a confidence: trend first, then
# time-of-day buckets, then day tags, then streak-driven.
TAG_PRIORITY = TREND_TAGS + TIME_OF_DAY_TAGS + DAY_TAGS + (
    PatternTag.STREAK_DRIVEN,
    PatternTag.INSUFFICIENT_DATA,
)


class CategoryFraming(str, Enum):
    """How category-specific messaging should be framed"""
    POSITIVE = "positive"
    NEEDS_SUPPORT = "needs_support"


class TenureTier(str, Enum):
    """Coarse bucket of how long a habit has been tracked"""
    NEW = "new"
    ONE_MONTH = "one_month"
    THREE_MONTHS = "three_months"
    SIX_MONTHS_PLUS = "six_months_plus"


class HeadlineTag(str, Enum):
    """Single most relevant finding for compact display"""
    NO_DATA = "no_data"
    KEEP_TRACKING = "keep_tracking"
    STREAK_RUN = "streak_run"
    MISS_RUN = "miss_run"
    HIGH_COMPLETION = "high_completion"
    LOW_COMPLETION = "low_completion"
    RECENT_IMPROVEMENT = "recent_improvement"
    RECENT_DECLINE = "recent_decline"
    STEADY = "steady"


class FeedbackKind(str, Enum):
    """Kind of feedback to show after a check-in, derived from the streak"""
    MILESTONE = "milestone"
    STREAK = "streak"
    COMPLETION = "completion"
    MISSED = "missed"
    GENERAL = "general"


class SuggestionType(str, Enum):
    """Optimization suggestion categories"""
    TIME_CHANGE = "time_change"
    DIFFICULTY_ADJUST = "difficulty_adjust"
    HABIT_COMBINATION = "habit_combination"


class TrendDirection(str, Enum):
    """First-half vs second-half comparison over a report window"""
    IMPROVED = "improved"
    DECLINED = "declined"
    FLAT = "flat"
    INDETERMINATE = "indeterminate"


class RecommendationTag(str, Enum):
    """Opaque recommendation tags for the periodic report"""
    WEEKDAY_DISPARITY = "weekday_disparity"
    CATEGORY_DISPARITY = "category_disparity"
    REDUCE_SCOPE = "reduce_scope"
    RAISE_CHALLENGE = "raise_challenge"
    ADD_FIRST_HABIT = "add_first_habit"


class SummaryTier(str, Enum):
    """Overall performance band of a periodic report"""
    NO_DATA = "no_data"
    EXCELLENT = "excellent"
    GOOD = "good"
    NEEDS_IMPROVEMENT = "needs_improvement"


class ReportPeriod(str, Enum):
    """Standard report lengths"""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class PatternFinding(BaseModel):
    """A detected temporal regularity with its confidence"""
    model_config = ConfigDict(frozen=True)

    tag: PatternTag
    confidence: float = Field(ge=0.0, le=1.0)
    parameters: dict[str, Union[int, float]] = Field(default_factory=dict)


class HabitMetrics(BaseModel):
    """Raw metrics for one record set"""
    model_config = ConfigDict(frozen=True)

    completion_rate: float = Field(ge=0.0, le=1.0)
    current_streak: int
    record_count: int = Field(ge=0)


class OptimizationSuggestion(BaseModel):
    """Structured suggestion for improving a habit's completion"""
    model_config = ConfigDict(frozen=True)

    type: SuggestionType
    confidence: float = Field(ge=0.0, le=1.0)
    weekdays: list[int] = Field(default_factory=list)  # 0=Monday


class AnomalousRecord(BaseModel):
    """A record that deviates from its expected completion probability"""
    model_config = ConfigDict(frozen=True)

    record: CompletionRecord
    expected: float
    score: float


class HabitInsightResult(BaseModel):
    """Per-habit analysis result"""
    model_config = ConfigDict(frozen=True)

    habit_id: str
    category: HabitCategory
    record_count: int = 0
    completion_rate: float = Field(0.0, ge=0.0, le=1.0)
    current_streak: int = 0
    selected_patterns: list[PatternFinding] = Field(default_factory=list, max_length=2)
    category_framing: CategoryFraming = CategoryFraming.NEEDS_SUPPORT
    tenure_tier: TenureTier = TenureTier.NEW
    days_tracked: int = 0
    headline: HeadlineTag = HeadlineTag.NO_DATA
    feedback_kind: FeedbackKind = FeedbackKind.GENERAL
    best_weekdays: list[int] = Field(default_factory=list)
    suggestions: list[OptimizationSuggestion] = Field(default_factory=list)

    @property
    def has_data(self) -> bool:
        return self.record_count > 0

    @property
    def show_streak(self) -> bool:
        """Streak framing is only surfaced for runs of three or more"""
        return abs(self.current_streak) >= 3


class HabitRate(BaseModel):
    """One entry of a habit ranking"""
    model_config = ConfigDict(frozen=True)

    habit_id: str
    rate: float = Field(ge=0.0, le=1.0)
    record_count: int = 0


class PeriodicReportResult(BaseModel):
    """Cross-habit aggregation over a date window"""
    model_config = ConfigDict(frozen=True)

    start_date: dt_date
    end_date: dt_date
    record_count: int = 0
    overall_completion_rate: float = Field(0.0, ge=0.0, le=1.0)
    habit_ranking: list[HabitRate] = Field(default_factory=list)
    habits_without_data: list[str] = Field(default_factory=list)
    best_weekday: Optional[int] = None  # 0=Monday
    worst_weekday: Optional[int] = None
    best_category: Optional[HabitCategory] = None
    worst_category: Optional[HabitCategory] = None
    trend_direction: TrendDirection = TrendDirection.INDETERMINATE
    recommendations: list[RecommendationTag] = Field(default_factory=list, max_length=3)
    summary_tier: SummaryTier = SummaryTier.NO_DATA
    top_habit: Optional[HabitRate] = None
    struggling_habit: Optional[HabitRate] = None
