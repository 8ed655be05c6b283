"""Input models: completion records and habit descriptors"""
from enum import Enum
from typing import Optional
from datetime import date as dt_date, time as dt_time
from pydantic import BaseModel, ConfigDict, Field, field_validator


class HabitCategory(str, Enum):
    """Habit categories"""
    HEALTH = "health"
    FITNESS = "fitness"
    MINDFULNESS = "mindfulness"
    PRODUCTIVITY = "productivity"
    LEARNING = "learning"
    SOCIAL = "social"
    CREATIVITY = "creativity"
    FINANCE = "finance"
    OTHER = "other"


class Mood(str, Enum):
    """Self-reported mood attached to a record"""
    VERY_HAPPY = "very_happy"
    HAPPY = "happy"
    NEUTRAL = "neutral"
    UNHAPPY = "unhappy"
    VERY_UNHAPPY = "very_unhappy"


class CompletionRecord(BaseModel):
    """One dated observation of whether a habit was performed"""
    model_config = ConfigDict(frozen=True)

    date: dt_date
    is_completed: bool
    completion_time: Optional[dt_time] = None  # time of day, when known
    habit_id: str
    user_id: str
    note: Optional[str] = None
    mood: Optional[Mood] = None
    difficulty: Optional[int] = Field(None, ge=1, le=5)  # user feedback 1-5

    @field_validator('habit_id', 'user_id')
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        """Identifiers must be non-blank"""
        trimmed = v.strip()
        if not trimmed:
            raise ValueError("Identifier cannot be empty or only whitespace")
        return trimmed

    def sort_key(self) -> tuple:
        """
        Total ordering key for records.

        Orders by date first; same-day records fall back to completion time
        (unknown times first), then status, then identifiers so that any
        permutation of the same record set sorts identically.
        """
        return (
            self.date,
            self.completion_time is not None,
            self.completion_time or dt_time.min,
            self.is_completed,
            self.habit_id,
            self.user_id,
        )


class HabitDescriptor(BaseModel):
    """Habit metadata supplied alongside its records"""
    model_config = ConfigDict(frozen=True)

    id: str
    category: HabitCategory = HabitCategory.OTHER
    start_date: dt_date
    name: str = ""  # opaque, never interpreted

    @field_validator('id')
    @classmethod
    def validate_id(cls, v: str) -> str:
        """Habit id must be non-blank"""
        trimmed = v.strip()
        if not trimmed:
            raise ValueError("Habit id cannot be empty or only whitespace")
        return trimmed
