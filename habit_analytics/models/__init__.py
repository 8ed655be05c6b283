"""Pydantic models for habit analytics inputs and outputs"""

from habit_analytics.models.records import (
    CompletionRecord,
    HabitCategory,
    HabitDescriptor,
    Mood,
)
from habit_analytics.models.insights import (
    AnomalousRecord,
    CategoryFraming,
    DAY_TAGS,
    FeedbackKind,
    HabitInsightResult,
    HabitMetrics,
    HabitRate,
    HeadlineTag,
    OptimizationSuggestion,
    PatternFinding,
    PatternTag,
    PeriodicReportResult,
    RecommendationTag,
    ReportPeriod,
    SuggestionType,
    SummaryTier,
    TAG_PRIORITY,
    TenureTier,
    TIME_OF_DAY_TAGS,
    TREND_TAGS,
    TrendDirection,
)

__all__ = [
    "CompletionRecord",
    "HabitCategory",
    "HabitDescriptor",
    "Mood",
    "AnomalousRecord",
    "CategoryFraming",
    "DAY_TAGS",
    "FeedbackKind",
    "HabitInsightResult",
    "HabitMetrics",
    "HabitRate",
    "HeadlineTag",
    "OptimizationSuggestion",
    "PatternFinding",
    "PatternTag",
    "PeriodicReportResult",
    "RecommendationTag",
    "ReportPeriod",
    "SuggestionType",
    "SummaryTier",
    "TAG_PRIORITY",
    "TenureTier",
    "TIME_OF_DAY_TAGS",
    "TREND_TAGS",
    "TrendDirection",
]
