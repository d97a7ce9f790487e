"""Conflict-aware merge of generated periods into stored timetables."""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any, Iterable

from .exceptions import SchedulingConflictError
from .models import GeneratedPeriod, SlotType
from .utils import times_overlap

logger = logging.getLogger(__name__)


class ConflictType(str, Enum):
    """Resource that would be double-booked."""

    TEACHER = "TEACHER"
    ROOM = "ROOM"


@dataclass(frozen=True)
class StoredPeriod:
    """A persisted timetable period of one class and term."""

    id: str
    school_id: str
    class_id: str
    term_id: str
    period: GeneratedPeriod
    room_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StoredPeriod":
        return cls(
            id=data["id"],
            school_id=data["school_id"],
            class_id=data["class_id"],
            term_id=data["term_id"],
            period=GeneratedPeriod.from_dict(data["period"]),
            room_id=data.get("room_id"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "school_id": self.school_id,
            "class_id": self.class_id,
            "term_id": self.term_id,
            "period": self.period.to_dict(),
            "room_id": self.room_id,
        }


@dataclass
class ApplyResult:
    """Outcome of applying a period list."""

    created: int = 0
    updated: int = 0
    unchanged: int = 0

    @property
    def total_changes(self) -> int:
        return self.created + self.updated

    @property
    def is_noop(self) -> bool:
        return self.total_changes == 0

    def to_dict(self) -> dict[str, int]:
        return {
            "created": self.created,
            "updated": self.updated,
            "unchanged": self.unchanged,
        }


class PeriodRepository(ABC):
    """Persistence collaborator for class timetables.

    Implementations must reject a teacher or room booked for two classes at
    an overlapping day and time by raising SchedulingConflictError.
    """

    @abstractmethod
    def list_periods(self, school_id: str, class_id: str, term_id: str) -> list[StoredPeriod]:
        """Get the stored periods of a class for a term."""
        pass

    @abstractmethod
    def create_period(
        self,
        school_id: str,
        class_id: str,
        term_id: str,
        period: GeneratedPeriod,
        room_id: str | None = None,
    ) -> StoredPeriod:
        """Store a new period."""
        pass

    @abstractmethod
    def update_period(self, period_id: str, period: GeneratedPeriod) -> StoredPeriod:
        """Replace the slot type, unit and teacher of a stored period."""
        pass


def _storable(period: GeneratedPeriod) -> GeneratedPeriod:
    """Strip preview-only fields before a period is stored."""
    return replace(
        period,
        unit_name=period.unit_name if period.unit_id else None,
        has_warning=False,
        warning_message=None,
    )


class InMemoryPeriodRepository(PeriodRepository):
    """Dictionary-backed repository that enforces the double-booking rule.

    Not thread-safe; meant for tests and single-process tools. The contents
    can be saved to and loaded from a JSON file.
    """

    def __init__(self, periods: Iterable[StoredPeriod] = ()) -> None:
        # period_id -> stored period
        self._periods: dict[str, StoredPeriod] = {}
        self._next_id = 1
        for stored in periods:
            self._periods[stored.id] = stored
            self._next_id += 1

    def __len__(self) -> int:
        return len(self._periods)

    def all_periods(self) -> list[StoredPeriod]:
        return list(self._periods.values())

    def list_periods(self, school_id: str, class_id: str, term_id: str) -> list[StoredPeriod]:
        return [
            stored
            for stored in self._periods.values()
            if stored.school_id == school_id
            and stored.class_id == class_id
            and stored.term_id == term_id
        ]

    def create_period(
        self,
        school_id: str,
        class_id: str,
        term_id: str,
        period: GeneratedPeriod,
        room_id: str | None = None,
    ) -> StoredPeriod:
        period = _storable(period)
        self._check_conflicts(school_id, class_id, term_id, period, room_id)

        stored = StoredPeriod(
            id=self._new_id(),
            school_id=school_id,
            class_id=class_id,
            term_id=term_id,
            period=period,
            room_id=room_id,
        )
        self._periods[stored.id] = stored
        return stored

    def update_period(self, period_id: str, period: GeneratedPeriod) -> StoredPeriod:
        current = self._periods.get(period_id)
        if current is None:
            raise KeyError(f"Period '{period_id}' not found")

        updated_period = replace(
            current.period,
            slot_type=period.slot_type,
            unit_id=period.unit_id,
            unit_name=period.unit_name if period.unit_id else None,
            teacher_id=period.teacher_id,
            teacher_name=period.teacher_name,
        )
        self._check_conflicts(
            current.school_id,
            current.class_id,
            current.term_id,
            updated_period,
            current.room_id,
            exclude_id=period_id,
        )

        stored = replace(current, period=updated_period)
        self._periods[period_id] = stored
        return stored

    def _new_id(self) -> str:
        while f"period-{self._next_id}" in self._periods:
            self._next_id += 1
        period_id = f"period-{self._next_id}"
        self._next_id += 1
        return period_id

    def _check_conflicts(
        self,
        school_id: str,
        class_id: str,
        term_id: str,
        period: GeneratedPeriod,
        room_id: str | None,
        exclude_id: str | None = None,
    ) -> None:
        """Raise if the period's teacher or room is busy with another class.

        Only lesson periods with a teacher or room take part.
        """
        if period.slot_type != SlotType.LESSON or (not period.teacher_id and not room_id):
            return

        overlapping = [
            other
            for other in self._periods.values()
            if other.id != exclude_id
            and other.school_id == school_id
            and other.term_id == term_id
            and other.class_id != class_id
            and other.period.day == period.day
            and other.period.slot_type == SlotType.LESSON
            and times_overlap(
                period.start_time,
                period.end_time,
                other.period.start_time,
                other.period.end_time,
            )
        ]

        if period.teacher_id:
            for other in overlapping:
                if other.period.teacher_id == period.teacher_id:
                    name = period.teacher_name or period.teacher_id
                    raise SchedulingConflictError(
                        conflict_type=ConflictType.TEACHER.value,
                        day=period.day.value,
                        start_time=period.start_time,
                        end_time=period.end_time,
                        resource_id=period.teacher_id,
                        conflicting_period_id=other.id,
                        message=(
                            f"{name} is already teaching class {other.class_id} "
                            f"at {other.period.start_time} on {period.day.value}"
                        ),
                    )

        if room_id:
            for other in overlapping:
                if other.room_id == room_id:
                    raise SchedulingConflictError(
                        conflict_type=ConflictType.ROOM.value,
                        day=period.day.value,
                        start_time=period.start_time,
                        end_time=period.end_time,
                        resource_id=room_id,
                        conflicting_period_id=other.id,
                        message=(
                            f"Room {room_id} is already occupied by class {other.class_id} "
                            f"at {other.period.start_time} on {period.day.value}"
                        ),
                    )

    @classmethod
    def load(cls, path: Path | str) -> "InMemoryPeriodRepository":
        """Load a repository from a JSON file (empty if the file is missing)."""
        path = Path(path)
        if not path.exists():
            return cls()
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
        return cls(StoredPeriod.from_dict(item) for item in data.get("periods", []))

    def save(self, path: Path | str) -> None:
        """Save the repository contents to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(
                {"periods": [stored.to_dict() for stored in self._periods.values()]},
                f,
                ensure_ascii=False,
                indent=2,
            )


def apply_periods(
    repository: PeriodRepository,
    school_id: str,
    class_id: str,
    term_id: str,
    periods: Iterable[GeneratedPeriod],
) -> ApplyResult:
    """Merge an approved preview into the stored timetable of a class.

    A stored period at the same (day, start, end) is updated only when it
    has no unit and the new period has one, or when the slot type changes.
    Periods without a stored counterpart are created. Conflicts raised by
    the repository propagate unchanged; periods applied before the
    conflicting one stay applied.

    Args:
        repository: Persistence collaborator
        school_id: School owning the class
        class_id: Class whose timetable is applied
        term_id: Term of the timetable
        periods: Approved periods

    Returns:
        ApplyResult with created/updated/unchanged counts

    Raises:
        SchedulingConflictError: If a teacher or room would be double-booked
    """
    existing = {
        stored.period.key: stored
        for stored in repository.list_periods(school_id, class_id, term_id)
    }
    result = ApplyResult()

    for period in periods:
        stored = existing.get(period.key)

        if stored is None:
            existing[period.key] = repository.create_period(
                school_id, class_id, term_id, period
            )
            result.created += 1
            continue

        fills_empty_slot = not stored.period.unit_id and bool(period.unit_id)
        changes_type = period.slot_type != stored.period.slot_type
        if fills_empty_slot or changes_type:
            existing[period.key] = repository.update_period(stored.id, period)
            result.updated += 1
        else:
            result.unchanged += 1

    logger.info(
        f"Applied timetable for class {class_id}: {result.created} created, "
        f"{result.updated} updated, {result.unchanged} unchanged"
    )
    return result
