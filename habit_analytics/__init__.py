"""
Habit analytics engine

Pure, synchronous analysis of habit completion records:
- Metrics (completion rate, signed current streak)
- Pattern detection with confidence scores
- Per-habit insight selection
- Cross-habit periodic reports

Results are structured pydantic models; turning tags into text is left to
the presentation layer.
"""

from habit_analytics.models import (
    CompletionRecord,
    HabitCategory,
    HabitDescriptor,
    HabitInsightResult,
    HabitMetrics,
    PatternFinding,
    PatternTag,
    PeriodicReportResult,
)
from habit_analytics.services.metrics import compute_metrics
from habit_analytics.services.pattern_detection import detect_patterns, detect_pattern_findings, detect_anomalies
from habit_analytics.services.insight_selection import analyze_habit
from habit_analytics.services.periodic_report import build_periodic_report, report_window

__version__ = "0.1.0"

__all__ = [
    "compute_metrics",
    "detect_patterns",
    "detect_pattern_findings",
    "detect_anomalies",
    "analyze_habit",
    "build_periodic_report",
    "report_window",
    "CompletionRecord",
    "HabitCategory",
    "HabitDescriptor",
    "HabitInsightResult",
    "HabitMetrics",
    "PatternFinding",
    "PatternTag",
    "PeriodicReportResult",
]
