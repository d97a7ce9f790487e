"""Engine configuration and its JSON loader."""

import json
from dataclasses import dataclass, field
from pathlib import Path

from .constants import (
    CORE_SUBJECT_MARKERS,
    CORE_UNIT_WEIGHT,
    DEFAULT_UNIT_WEIGHT,
    WORKLOAD_HIGH_THRESHOLD,
    WORKLOAD_LOW_THRESHOLD,
    WORKLOAD_NORMAL_THRESHOLD,
)
from .exceptions import ConfigurationError, InvalidPeriodError
from .models import InstitutionCategory, PeriodSlotTemplate
from .utils import times_overlap


@dataclass(frozen=True)
class WorkloadThresholds:
    """Period-count boundaries between workload statuses.

    LOW < low <= NORMAL <= normal < HIGH <= high < OVERLOADED
    """

    low: int = WORKLOAD_LOW_THRESHOLD
    normal: int = WORKLOAD_NORMAL_THRESHOLD
    high: int = WORKLOAD_HIGH_THRESHOLD

    def __post_init__(self) -> None:
        if not (0 <= self.low <= self.normal <= self.high):
            raise ValueError(
                f"Workload thresholds must be non-decreasing: "
                f"low={self.low}, normal={self.normal}, high={self.high}"
            )


@dataclass(frozen=True)
class EngineConfig:
    """Institution-tunable settings for the engine."""

    core_subject_markers: tuple[str, ...] = tuple(CORE_SUBJECT_MARKERS)
    core_weight: int = CORE_UNIT_WEIGHT
    default_weight: int = DEFAULT_UNIT_WEIGHT
    thresholds: WorkloadThresholds = field(default_factory=WorkloadThresholds)
    # category -> template overriding the built-in one
    templates: dict[InstitutionCategory, tuple[PeriodSlotTemplate, ...]] = field(
        default_factory=dict
    )


def validate_template(slots: list[PeriodSlotTemplate]) -> None:
    """Check that template slots are ordered by start time and do not overlap.

    Raises:
        ValueError: If the template is out of order or overlapping
    """
    for previous, current in zip(slots, slots[1:]):
        if current.start_time < previous.start_time:
            raise ValueError(
                f"Slot {current.start_time}-{current.end_time} is out of order"
            )
        if times_overlap(
            previous.start_time, previous.end_time, current.start_time, current.end_time
        ):
            raise ValueError(
                f"Slot {current.start_time}-{current.end_time} overlaps "
                f"{previous.start_time}-{previous.end_time}"
            )


def load_engine_config(path: Path | str | None = None) -> EngineConfig:
    """Load engine configuration from a JSON file.

    Expected keys (all optional):
    - core_subject_markers: list of lower-case name fragments
    - core_weight / default_weight: pool copies per unit
    - workload_thresholds: {"low": 10, "normal": 25, "high": 30}
    - templates: {"PRIMARY": [{"start_time", "end_time", "slot_type", "label"}]}

    Args:
        path: Path to the JSON file, or None for the defaults

    Returns:
        EngineConfig instance

    Raises:
        ConfigurationError: If the file is unreadable or holds invalid values
    """
    if path is None:
        return EngineConfig()

    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(str(e), str(path)) from e

    if not isinstance(data, dict):
        raise ConfigurationError("top level must be an object", str(path))

    defaults = EngineConfig()

    markers = data.get("core_subject_markers", list(defaults.core_subject_markers))
    if not isinstance(markers, list) or not all(isinstance(m, str) for m in markers):
        raise ConfigurationError("core_subject_markers must be a list of strings", str(path))

    core_weight = data.get("core_weight", defaults.core_weight)
    default_weight = data.get("default_weight", defaults.default_weight)
    for name, weight in (("core_weight", core_weight), ("default_weight", default_weight)):
        if not isinstance(weight, int) or weight < 1:
            raise ConfigurationError(f"{name} must be a positive integer", str(path))

    raw_thresholds = data.get("workload_thresholds", {})
    try:
        thresholds = WorkloadThresholds(
            low=int(raw_thresholds.get("low", WORKLOAD_LOW_THRESHOLD)),
            normal=int(raw_thresholds.get("normal", WORKLOAD_NORMAL_THRESHOLD)),
            high=int(raw_thresholds.get("high", WORKLOAD_HIGH_THRESHOLD)),
        )
    except (AttributeError, TypeError, ValueError) as e:
        raise ConfigurationError(f"workload_thresholds: {e}", str(path)) from e

    templates: dict[InstitutionCategory, tuple[PeriodSlotTemplate, ...]] = {}
    for raw_category, raw_slots in data.get("templates", {}).items():
        category = InstitutionCategory.parse(raw_category)
        if category is None:
            raise ConfigurationError(f"unknown template category '{raw_category}'", str(path))
        try:
            slots = [PeriodSlotTemplate.from_dict(slot) for slot in raw_slots]
            validate_template(slots)
        except (InvalidPeriodError, KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"template {category.value}: {e}", str(path)) from e
        templates[category] = tuple(slots)

    return EngineConfig(
        core_subject_markers=tuple(m.lower() for m in markers),
        core_weight=core_weight,
        default_weight=default_weight,
        thresholds=thresholds,
        templates=templates,
    )
