"""Test fixtures for timetable engine tests."""

import random

import pytest

from timetable_engine.models import (
    PeriodSlotTemplate,
    SlotType,
    TeachableUnit,
    TeacherLoad,
)


def lesson(start: str, end: str, label: str | None = None) -> PeriodSlotTemplate:
    return PeriodSlotTemplate(start, end, SlotType.LESSON, label)


@pytest.fixture
def rng():
    """Seeded random source for reproducible generation."""
    return random.Random(42)


@pytest.fixture
def five_lesson_template():
    """Template with 5 lesson slots and a break."""
    return [
        lesson("08:00", "08:40", "Period 1"),
        lesson("08:40", "09:20", "Period 2"),
        lesson("09:20", "10:00", "Period 3"),
        PeriodSlotTemplate("10:00", "10:30", SlotType.BREAK, "Break"),
        lesson("10:30", "11:10", "Period 4"),
        lesson("11:10", "11:50", "Period 5"),
    ]


@pytest.fixture
def two_units():
    """One core and one non-core unit, no teachers."""
    return [
        TeachableUnit(id="math", name="Mathematics"),
        TeachableUnit(id="art", name="Fine Art"),
    ]


@pytest.fixture
def staffed_units():
    """Units with qualified teachers and external loads."""
    ada = TeacherLoad("t-ada", "Ada", "Obi", external_period_count=5)
    bola = TeacherLoad("t-bola", "Bola", "Ade", external_period_count=2)
    chidi = TeacherLoad("t-chidi", "Chidi", "Eze", external_period_count=12)
    return [
        TeachableUnit(id="eng", name="English Language", qualified_teachers=(ada, bola)),
        TeachableUnit(id="math", name="Mathematics", qualified_teachers=(chidi,)),
        TeachableUnit(id="civic", name="Civic Education"),
    ]
