"""Global test fixtures and utilities for habit-analytics tests"""
import random
import pytest
from datetime import date, timedelta

from habit_analytics.models import CompletionRecord, HabitCategory, HabitDescriptor


BASE_DATE = date(2024, 1, 1)  # a Monday


# ============================================================================
# Record Fixtures
# ============================================================================

@pytest.fixture
def base_date():
    """Day 0 of every generated series (Monday 2024-01-01)"""
    return BASE_DATE


@pytest.fixture
def record_factory():
    """Factory for single completion records, dated by offset from BASE_DATE"""
    def _create(day=0, completed=True, completion_time=None, habit_id="habit-1", user_id="user-1", **kwargs):
        record_date = day if isinstance(day, date) else BASE_DATE + timedelta(days=day)
        return CompletionRecord(
            date=record_date,
            is_completed=completed,
            completion_time=completion_time,
            habit_id=habit_id,
            user_id=user_id,
            **kwargs
        )

    return _create


@pytest.fixture
def series_factory(record_factory):
    """Factory for consecutive daily records from a list of outcomes"""
    def _create(outcomes, start=0, **kwargs):
        return [
            record_factory(start + offset, completed, **kwargs)
            for offset, completed in enumerate(outcomes)
        ]

    return _create


@pytest.fixture
def weekday_only_records(series_factory):
    """Two weeks completed Monday-Friday, missed on weekends"""
    return series_factory([True] * 5 + [False] * 2 + [True] * 5 + [False] * 2)


# ============================================================================
# Habit Fixtures
# ============================================================================

@pytest.fixture
def habit_factory():
    """Factory for habit descriptors"""
    def _create(habit_id="habit-1", category=HabitCategory.HEALTH, start_date=BASE_DATE, name=""):
        return HabitDescriptor(id=habit_id, category=category, start_date=start_date, name=name)

    return _create


@pytest.fixture
def habit(habit_factory):
    """Standard health habit started on BASE_DATE"""
    return habit_factory()


# ============================================================================
# Utilities
# ============================================================================

@pytest.fixture
def shuffled():
    """Return a shuffled copy of a list with a fixed seed"""
    def _shuffle(items, seed=42):
        copy = list(items)
        random.Random(seed).shuffle(copy)
        return copy

    return _shuffle
