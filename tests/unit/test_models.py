"""Unit tests for Pydantic models"""
import pytest
from datetime import date, time
from pydantic import ValidationError

from habit_analytics.models import (
    TAG_PRIORITY,
    CompletionRecord,
    HabitCategory,
    HabitDescriptor,
    HabitInsightResult,
    Mood,
    PatternFinding,
    PatternTag,
    PeriodicReportResult,
    RecommendationTag,
)


def test_completion_record_creation():
    """Test CompletionRecord with optional fields"""
    record = CompletionRecord(
        date=date(2024, 1, 1),
        is_completed=True,
        completion_time=time(7, 30),
        habit_id="meditate",
        user_id="user-1",
        mood=Mood.HAPPY,
        difficulty=2,
    )

    assert record.date == date(2024, 1, 1)
    assert record.completion_time == time(7, 30)
    assert record.mood == Mood.HAPPY
    assert record.note is None


def test_completion_record_strips_identifiers():
    record = CompletionRecord(date=date(2024, 1, 1), is_completed=False, habit_id="  run ", user_id="u1")
    assert record.habit_id == "run"


def test_completion_record_blank_id_rejected():
    with pytest.raises(ValidationError):
        CompletionRecord(date=date(2024, 1, 1), is_completed=True, habit_id="   ", user_id="u1")


def test_completion_record_difficulty_range():
    """Difficulty feedback must be 1-5"""
    with pytest.raises(ValidationError):
        CompletionRecord(date=date(2024, 1, 1), is_completed=True, habit_id="h", user_id="u", difficulty=9)


def test_completion_record_is_immutable():
    record = CompletionRecord(date=date(2024, 1, 1), is_completed=True, habit_id="h", user_id="u")

    with pytest.raises(ValidationError):
        record.is_completed = False


def test_sort_key_puts_unknown_time_first():
    day = date(2024, 1, 1)
    timed = CompletionRecord(date=day, is_completed=True, completion_time=time(0, 0), habit_id="h", user_id="u")
    untimed = CompletionRecord(date=day, is_completed=True, habit_id="h", user_id="u")

    assert untimed.sort_key() < timed.sort_key()


def test_habit_descriptor_defaults():
    habit = HabitDescriptor(id="read", start_date=date(2024, 1, 1))

    assert habit.category == HabitCategory.OTHER
    assert habit.name == ""


def test_habit_descriptor_usable_as_mapping_key():
    """Frozen descriptors are hashable"""
    habit = HabitDescriptor(id="read", category=HabitCategory.LEARNING, start_date=date(2024, 1, 1))
    same = HabitDescriptor(id="read", category=HabitCategory.LEARNING, start_date=date(2024, 1, 1))

    assert {habit: 1}[same] == 1


def test_pattern_finding_confidence_range():
    with pytest.raises(ValidationError):
        PatternFinding(tag=PatternTag.WEEKDAY_BIAS, confidence=1.5)


def test_insight_result_limits_selected_patterns():
    findings = [PatternFinding(tag=tag, confidence=0.9) for tag in (
        PatternTag.WEEKDAY_BIAS,
        PatternTag.MORNING_BIAS,
        PatternTag.STREAK_DRIVEN,
    )]

    with pytest.raises(ValidationError):
        HabitInsightResult(habit_id="h", category=HabitCategory.HEALTH, selected_patterns=findings)


@pytest.mark.parametrize("streak,visible", [(0, False), (2, False), (3, True), (-3, True), (-2, False)])
def test_insight_result_show_streak(streak, visible):
    """Streak framing only for runs of three or more"""
    result = HabitInsightResult(habit_id="h", category=HabitCategory.HEALTH, current_streak=streak)
    assert result.show_streak is visible


def test_report_limits_recommendations():
    with pytest.raises(ValidationError):
        PeriodicReportResult(
            start_date=date(2024, 1, 1),
            end_date=date(2024, 1, 7),
            recommendations=[RecommendationTag.REDUCE_SCOPE] * 4,
        )


def test_tag_priority_covers_every_tag_once():
    assert sorted(TAG_PRIORITY) == sorted(PatternTag)
    assert len(TAG_PRIORITY) == len(set(TAG_PRIORITY))
