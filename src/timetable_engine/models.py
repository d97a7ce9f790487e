"""Data models for timetable generation and workload analysis."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Iterable

from .constants import (
    DEFAULT_FREE_PERIODS_PER_DAY,
    DEFAULT_MAX_SAME_UNIT_PER_DAY,
    FREE_PERIOD_LABEL,
)
from .exceptions import InvalidPeriodError
from .utils import normalize_time, slot_key

logger = logging.getLogger(__name__)


class Day(str, Enum):
    """Days of the working week."""

    MONDAY = "MONDAY"
    TUESDAY = "TUESDAY"
    WEDNESDAY = "WEDNESDAY"
    THURSDAY = "THURSDAY"
    FRIDAY = "FRIDAY"


class SlotType(str, Enum):
    """Type of a period slot."""

    LESSON = "LESSON"
    BREAK = "BREAK"
    LUNCH = "LUNCH"
    ASSEMBLY = "ASSEMBLY"


class InstitutionCategory(str, Enum):
    """Institution category that selects the daily period template."""

    PRIMARY = "PRIMARY"
    SECONDARY = "SECONDARY"
    TERTIARY = "TERTIARY"

    @classmethod
    def parse(cls, value: object) -> "InstitutionCategory | None":
        """Parse a category, returning None for unknown values."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class WorkloadStatus(str, Enum):
    """Coarse classification of a teacher's weekly period count."""

    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    OVERLOADED = "OVERLOADED"


def _pick(data: dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present, non-None value among alternative keys."""
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return default


@dataclass(frozen=True)
class PeriodSlotTemplate:
    """A slot in a category's daily period template."""

    start_time: str
    end_time: str
    slot_type: SlotType
    label: str | None = None

    @property
    def is_lesson(self) -> bool:
        return self.slot_type == SlotType.LESSON

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PeriodSlotTemplate":
        """Create a template slot from a dictionary."""
        start = normalize_time(_pick(data, "start_time", "startTime"))
        end = normalize_time(_pick(data, "end_time", "endTime"))
        if start is None or end is None:
            raise InvalidPeriodError("template slot needs valid start and end times", data)
        return cls(
            start_time=start,
            end_time=end,
            slot_type=SlotType(_pick(data, "slot_type", "type", default="LESSON")),
            label=data.get("label"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert template slot to dictionary."""
        return {
            "start_time": self.start_time,
            "end_time": self.end_time,
            "slot_type": self.slot_type.value,
            "label": self.label,
        }


@dataclass(frozen=True)
class TeacherLoad:
    """A qualified teacher with the load already committed outside this run."""

    teacher_id: str
    first_name: str
    last_name: str
    external_period_count: int = 0

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TeacherLoad":
        """Create a TeacherLoad from a dictionary."""
        return cls(
            teacher_id=str(_pick(data, "teacher_id", "id")),
            first_name=_pick(data, "first_name", "firstName", default=""),
            last_name=_pick(data, "last_name", "lastName", default=""),
            external_period_count=int(
                _pick(data, "external_period_count", "period_count", "periodCount", default=0)
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "teacher_id": self.teacher_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "external_period_count": self.external_period_count,
        }


@dataclass(frozen=True)
class TeachableUnit:
    """A subject or course that can occupy a lesson slot."""

    id: str
    name: str
    code: str | None = None
    qualified_teachers: tuple[TeacherLoad, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TeachableUnit":
        """Create a TeachableUnit from a dictionary."""
        teachers = _pick(data, "qualified_teachers", "teachers", default=[])
        return cls(
            id=str(data["id"]),
            name=data["name"],
            code=data.get("code"),
            qualified_teachers=tuple(TeacherLoad.from_dict(t) for t in teachers),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "code": self.code,
            "qualified_teachers": [t.to_dict() for t in self.qualified_teachers],
        }


@dataclass(frozen=True)
class GeneratedPeriod:
    """A period of a class timetable, generated or carried over.

    A LESSON period without a unit is an explicit free period.
    """

    day: Day
    start_time: str
    end_time: str
    slot_type: SlotType = SlotType.LESSON
    unit_id: str | None = None
    unit_name: str | None = None
    teacher_id: str | None = None
    teacher_name: str | None = None
    has_warning: bool = False
    warning_message: str | None = None

    @property
    def key(self) -> tuple[str, str, str]:
        """Natural key (day, start, end)."""
        return slot_key(self.day, self.start_time, self.end_time)

    @property
    def is_lesson(self) -> bool:
        return self.slot_type == SlotType.LESSON

    @property
    def is_free(self) -> bool:
        return self.is_lesson and not self.unit_id

    @classmethod
    def free(cls, day: Day, start_time: str, end_time: str) -> "GeneratedPeriod":
        """Create an explicit free lesson period."""
        return cls(
            day=day,
            start_time=start_time,
            end_time=end_time,
            slot_type=SlotType.LESSON,
            unit_name=FREE_PERIOD_LABEL,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GeneratedPeriod":
        """Create a period from a dictionary.

        Accepts snake_case keys and the camelCase keys used by stored records.

        Raises:
            InvalidPeriodError: If day, times or slot type are invalid
        """
        raw_day = _pick(data, "day", "day_of_week", "dayOfWeek")
        try:
            day = Day(str(raw_day).upper())
        except ValueError:
            raise InvalidPeriodError(f"unknown day '{raw_day}'", data) from None

        start = normalize_time(_pick(data, "start_time", "startTime"))
        end = normalize_time(_pick(data, "end_time", "endTime"))
        if start is None or end is None:
            raise InvalidPeriodError("start and end times must be HH:MM", data)
        if start >= end:
            raise InvalidPeriodError(f"empty time range {start}-{end}", data)

        raw_type = _pick(data, "slot_type", "type", default=SlotType.LESSON.value)
        try:
            slot_type = SlotType(str(raw_type).upper())
        except ValueError:
            raise InvalidPeriodError(f"unknown slot type '{raw_type}'", data) from None

        unit_id = _pick(data, "unit_id", "subject_id", "subjectId", "course_id", "courseId")
        unit_name = _pick(
            data, "unit_name", "subject_name", "subjectName", "course_name", "courseName"
        )
        teacher_id = _pick(data, "teacher_id", "teacherId")
        warning_message = _pick(data, "warning_message", "warningMessage")
        return cls(
            day=day,
            start_time=start,
            end_time=end,
            slot_type=slot_type,
            unit_id=str(unit_id) if unit_id else None,
            unit_name=unit_name,
            teacher_id=str(teacher_id) if teacher_id else None,
            teacher_name=_pick(data, "teacher_name", "teacherName"),
            has_warning=bool(
                _pick(data, "has_warning", "hasWarning", "hasTeacherWarning", default=False)
            ),
            warning_message=warning_message,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert period to dictionary."""
        return {
            "day": self.day.value,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "slot_type": self.slot_type.value,
            "unit_id": self.unit_id,
            "unit_name": self.unit_name,
            "teacher_id": self.teacher_id,
            "teacher_name": self.teacher_name,
            "has_warning": self.has_warning,
            "warning_message": self.warning_message,
        }


def periods_from_records(records: Iterable[dict[str, Any]]) -> list[GeneratedPeriod]:
    """Parse stored period records, skipping malformed ones.

    Generation must always produce a usable preview, so a bad record is
    logged and dropped rather than failing the whole batch.

    Args:
        records: Period dictionaries (snake_case or camelCase keys)

    Returns:
        List of parsed periods, in input order
    """
    periods: list[GeneratedPeriod] = []
    for record in records:
        if not isinstance(record, dict):
            logger.debug(f"Skipping non-mapping period record: {record!r}")
            continue
        try:
            periods.append(GeneratedPeriod.from_dict(record))
        except InvalidPeriodError as e:
            logger.debug(f"Skipping period record: {e}")
    return periods


@dataclass
class GenerationOptions:
    """Per-call knobs for the slot filler."""

    max_same_unit_per_day: int = DEFAULT_MAX_SAME_UNIT_PER_DAY
    free_periods_per_day: int = DEFAULT_FREE_PERIODS_PER_DAY
    randomize_free_periods: bool = True
    requires_teacher_assignment: bool = False
    seed_existing_load: bool = True

    def __post_init__(self) -> None:
        if self.max_same_unit_per_day < 1:
            raise ValueError("max_same_unit_per_day must be at least 1")
        if self.free_periods_per_day < 0:
            raise ValueError("free_periods_per_day cannot be negative")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GenerationOptions":
        """Create options from a dictionary, keeping defaults for missing keys."""
        defaults = cls()
        return cls(
            max_same_unit_per_day=int(
                _pick(data, "max_same_unit_per_day", "maxSameSubjectPerDay",
                      default=defaults.max_same_unit_per_day)
            ),
            free_periods_per_day=int(
                _pick(data, "free_periods_per_day", "freePeriodsPerDay",
                      default=defaults.free_periods_per_day)
            ),
            randomize_free_periods=bool(
                data.get("randomize_free_periods", defaults.randomize_free_periods)
            ),
            requires_teacher_assignment=bool(
                data.get("requires_teacher_assignment", defaults.requires_teacher_assignment)
            ),
            seed_existing_load=bool(
                data.get("seed_existing_load", defaults.seed_existing_load)
            ),
        )


@dataclass
class TeacherAssignmentSummary:
    """Load of one teacher for one unit in a generated timetable."""

    teacher_id: str
    teacher_name: str
    unit_id: str
    unit_name: str
    period_count: int
    total_load: int
    status: WorkloadStatus

    def to_dict(self) -> dict[str, Any]:
        return {
            "teacher_id": self.teacher_id,
            "teacher_name": self.teacher_name,
            "unit_id": self.unit_id,
            "unit_name": self.unit_name,
            "period_count": self.period_count,
            "total_load": self.total_load,
            "status": self.status.value,
        }


@dataclass
class UnitCoverageGap:
    """A unit scheduled without a teacher."""

    unit_id: str
    unit_name: str
    period_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "unit_id": self.unit_id,
            "unit_name": self.unit_name,
            "period_count": self.period_count,
        }


@dataclass
class GenerationAnalysis:
    """Advisory statistics about a generated timetable."""

    total_periods: int = 0
    assigned_with_teacher: int = 0
    unassigned_teacher: int = 0
    free_periods: int = 0
    units_used: int = 0
    teachers_involved: int = 0
    teacher_assignments: list[TeacherAssignmentSummary] = field(default_factory=list)
    units_without_teachers: list[UnitCoverageGap] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_periods": self.total_periods,
            "assigned_with_teacher": self.assigned_with_teacher,
            "unassigned_teacher": self.unassigned_teacher,
            "free_periods": self.free_periods,
            "units_used": self.units_used,
            "teachers_involved": self.teachers_involved,
            "teacher_assignments": [a.to_dict() for a in self.teacher_assignments],
            "units_without_teachers": [u.to_dict() for u in self.units_without_teachers],
            "warnings": self.warnings,
        }


@dataclass
class GenerationPreview:
    """A generated timetable and its analysis, awaiting approval."""

    periods: list[GeneratedPeriod] = field(default_factory=list)
    analysis: GenerationAnalysis = field(default_factory=GenerationAnalysis)
    units: list[TeachableUnit] = field(default_factory=list)
    category: str | None = None
    generation_date: str = field(default_factory=lambda: datetime.now().isoformat())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GenerationPreview":
        """Create a preview from a dictionary; the analysis is not read back."""
        return cls(
            periods=periods_from_records(data.get("periods", [])),
            units=[TeachableUnit.from_dict(u) for u in data.get("units", [])],
            category=data.get("category"),
            generation_date=data.get("generation_date", datetime.now().isoformat()),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "generation_date": self.generation_date,
            "category": self.category,
            "periods": [p.to_dict() for p in self.periods],
            "units": [u.to_dict() for u in self.units],
            "analysis": self.analysis.to_dict(),
        }
