"""Tests for applying generated periods to stored timetables."""

import pytest

from timetable_engine.apply import (
    ApplyResult,
    ConflictType,
    InMemoryPeriodRepository,
    apply_periods,
)
from timetable_engine.exceptions import SchedulingConflictError
from timetable_engine.models import Day, GeneratedPeriod, SlotType

SCHOOL = "school-1"
TERM = "term-1"


def _maths(day=Day.MONDAY, start="08:00", end="08:40", teacher_id="t1"):
    return GeneratedPeriod(
        day,
        start,
        end,
        unit_id="math",
        unit_name="Mathematics",
        teacher_id=teacher_id,
        teacher_name="Ada Obi" if teacher_id else None,
    )


@pytest.fixture
def repository():
    return InMemoryPeriodRepository()


class TestApplyPeriods:
    """Tests for apply_periods."""

    def test_creates_missing_periods(self, repository):
        periods = [
            _maths(),
            GeneratedPeriod(Day.MONDAY, "10:00", "10:30", SlotType.BREAK),
            GeneratedPeriod.free(Day.MONDAY, "08:40", "09:20"),
        ]

        result = apply_periods(repository, SCHOOL, "class-a", TERM, periods)

        assert result == ApplyResult(created=3, updated=0, unchanged=0)
        assert len(repository.list_periods(SCHOOL, "class-a", TERM)) == 3

    def test_second_apply_is_noop(self, repository):
        periods = [
            _maths(),
            GeneratedPeriod(Day.MONDAY, "10:00", "10:30", SlotType.BREAK),
            GeneratedPeriod.free(Day.MONDAY, "08:40", "09:20"),
        ]
        apply_periods(repository, SCHOOL, "class-a", TERM, periods)
        before = repository.all_periods()

        result = apply_periods(repository, SCHOOL, "class-a", TERM, periods)

        assert result.is_noop
        assert result.unchanged == 3
        assert repository.all_periods() == before

    def test_fills_empty_stored_slot(self, repository):
        repository.create_period(SCHOOL, "class-a", TERM, GeneratedPeriod(Day.MONDAY, "08:00", "08:40"))

        result = apply_periods(repository, SCHOOL, "class-a", TERM, [_maths()])

        assert result.updated == 1
        stored = repository.list_periods(SCHOOL, "class-a", TERM)[0]
        assert stored.period.unit_id == "math"
        assert stored.period.teacher_id == "t1"

    def test_filled_stored_slot_not_overwritten(self, repository):
        history = GeneratedPeriod(
            Day.MONDAY, "08:00", "08:40", unit_id="hist", unit_name="History"
        )
        repository.create_period(SCHOOL, "class-a", TERM, history)

        result = apply_periods(repository, SCHOOL, "class-a", TERM, [_maths()])

        assert result == ApplyResult(created=0, updated=0, unchanged=1)
        assert repository.list_periods(SCHOOL, "class-a", TERM)[0].period.unit_id == "hist"

    def test_free_period_does_not_clear_stored_unit(self, repository):
        repository.create_period(SCHOOL, "class-a", TERM, _maths())

        result = apply_periods(
            repository, SCHOOL, "class-a", TERM, [GeneratedPeriod.free(Day.MONDAY, "08:00", "08:40")]
        )

        assert result.unchanged == 1
        assert repository.list_periods(SCHOOL, "class-a", TERM)[0].period.unit_id == "math"

    def test_slot_type_change_updates(self, repository):
        repository.create_period(SCHOOL, "class-a", TERM, GeneratedPeriod(Day.MONDAY, "10:00", "10:30"))

        result = apply_periods(
            repository,
            SCHOOL,
            "class-a",
            TERM,
            [GeneratedPeriod(Day.MONDAY, "10:00", "10:30", SlotType.BREAK)],
        )

        assert result.updated == 1
        stored = repository.list_periods(SCHOOL, "class-a", TERM)[0]
        assert stored.period.slot_type == SlotType.BREAK

    def test_warnings_not_stored(self, repository):
        flagged = GeneratedPeriod(
            Day.MONDAY,
            "08:00",
            "08:40",
            unit_id="civic",
            unit_name="Civic Education",
            has_warning=True,
            warning_message="No teachers assigned to Civic Education",
        )
        apply_periods(repository, SCHOOL, "class-a", TERM, [flagged])

        stored = repository.list_periods(SCHOOL, "class-a", TERM)[0]
        assert not stored.period.has_warning
        assert stored.period.warning_message is None

    def test_other_classes_untouched(self, repository):
        other = repository.create_period(
            SCHOOL, "class-b", TERM, GeneratedPeriod(Day.MONDAY, "08:00", "08:40")
        )

        result = apply_periods(repository, SCHOOL, "class-a", TERM, [_maths(teacher_id=None)])

        assert result.created == 1
        assert repository.list_periods(SCHOOL, "class-b", TERM) == [other]


class TestConflicts:
    """Tests for double-booking detection."""

    def test_teacher_conflict_across_classes(self, repository):
        apply_periods(repository, SCHOOL, "class-a", TERM, [_maths()])

        overlapping = _maths(start="08:20", end="09:00")
        with pytest.raises(SchedulingConflictError) as exc_info:
            apply_periods(repository, SCHOOL, "class-b", TERM, [overlapping])

        error = exc_info.value
        assert error.conflict_type == ConflictType.TEACHER.value
        assert error.day == "MONDAY"
        assert error.start_time == "08:20"
        assert error.resource_id == "t1"
        assert error.conflicting_period_id == "period-1"
        assert str(error) == "Ada Obi is already teaching class class-a at 08:00 on MONDAY"

    def test_adjacent_periods_do_not_conflict(self, repository):
        apply_periods(repository, SCHOOL, "class-a", TERM, [_maths()])

        result = apply_periods(
            repository, SCHOOL, "class-b", TERM, [_maths(start="08:40", end="09:20")]
        )
        assert result.created == 1

    def test_same_time_other_day_or_term_allowed(self, repository):
        apply_periods(repository, SCHOOL, "class-a", TERM, [_maths()])

        apply_periods(repository, SCHOOL, "class-b", TERM, [_maths(day=Day.TUESDAY)])
        apply_periods(repository, SCHOOL, "class-b", "term-2", [_maths()])
        apply_periods(repository, "school-2", "class-b", TERM, [_maths()])

        assert len(repository) == 4

    def test_earlier_periods_stay_applied(self, repository):
        apply_periods(repository, SCHOOL, "class-a", TERM, [_maths(start="09:20", end="10:00")])

        periods = [
            _maths(start="08:00", end="08:40"),
            _maths(start="09:20", end="10:00"),
            _maths(start="10:30", end="11:10"),
        ]
        with pytest.raises(SchedulingConflictError):
            apply_periods(repository, SCHOOL, "class-b", TERM, periods)

        stored = repository.list_periods(SCHOOL, "class-b", TERM)
        assert [s.period.start_time for s in stored] == ["08:00"]

    def test_room_conflict(self, repository):
        repository.create_period(
            SCHOOL, "class-a", TERM, _maths(teacher_id=None), room_id="lab-1"
        )

        with pytest.raises(SchedulingConflictError) as exc_info:
            repository.create_period(
                SCHOOL, "class-b", TERM, _maths(teacher_id="t9"), room_id="lab-1"
            )

        error = exc_info.value
        assert error.conflict_type == "ROOM"
        assert error.resource_id == "lab-1"
        assert str(error) == "Room lab-1 is already occupied by class class-a at 08:00 on MONDAY"

    def test_update_checks_conflicts(self, repository):
        repository.create_period(SCHOOL, "class-a", TERM, _maths())
        empty = repository.create_period(
            SCHOOL, "class-b", TERM, GeneratedPeriod(Day.MONDAY, "08:00", "08:40")
        )

        with pytest.raises(SchedulingConflictError):
            repository.update_period(empty.id, _maths())

    def test_conflict_to_dict(self, repository):
        apply_periods(repository, SCHOOL, "class-a", TERM, [_maths()])
        with pytest.raises(SchedulingConflictError) as exc_info:
            apply_periods(repository, SCHOOL, "class-b", TERM, [_maths()])

        details = exc_info.value.to_dict()
        assert details["conflict_type"] == "TEACHER"
        assert details["end_time"] == "08:40"
        assert details["conflicting_period_id"] == "period-1"


class TestInMemoryPeriodRepository:
    """Tests for the in-memory repository."""

    def test_update_unknown_period(self, repository):
        with pytest.raises(KeyError):
            repository.update_period("period-99", _maths())

    def test_save_and_load(self, repository, tmp_path):
        apply_periods(repository, SCHOOL, "class-a", TERM, [_maths()])
        repository.create_period(
            SCHOOL, "class-a", TERM, GeneratedPeriod(Day.MONDAY, "10:00", "10:30", SlotType.BREAK),
            room_id="hall",
        )
        path = tmp_path / "store" / "timetables.json"

        repository.save(path)
        loaded = InMemoryPeriodRepository.load(path)

        assert loaded.all_periods() == repository.all_periods()
        created = loaded.create_period(SCHOOL, "class-a", TERM, _maths(day=Day.FRIDAY))
        assert created.id == "period-3"

    def test_load_missing_file(self, tmp_path):
        assert len(InMemoryPeriodRepository.load(tmp_path / "missing.json")) == 0
