"""Tests for engine configuration loading."""

import json

import pytest

from timetable_engine.config import (
    EngineConfig,
    WorkloadThresholds,
    load_engine_config,
    validate_template,
)
from timetable_engine.exceptions import ConfigurationError
from timetable_engine.models import InstitutionCategory, PeriodSlotTemplate, SlotType
from timetable_engine.templates import TemplateProvider


def _write(tmp_path, data):
    path = tmp_path / "engine.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


class TestWorkloadThresholds:
    """Tests for WorkloadThresholds."""

    def test_defaults(self):
        thresholds = WorkloadThresholds()
        assert (thresholds.low, thresholds.normal, thresholds.high) == (10, 25, 30)

    def test_rejects_decreasing_values(self):
        with pytest.raises(ValueError):
            WorkloadThresholds(low=20, normal=10, high=30)

    def test_rejects_negative(self):
        with pytest.raises(ValueError):
            WorkloadThresholds(low=-1)


class TestLoadEngineConfig:
    """Tests for load_engine_config."""

    def test_none_gives_defaults(self):
        assert load_engine_config(None) == EngineConfig()

    def test_empty_object_gives_defaults(self, tmp_path):
        assert load_engine_config(_write(tmp_path, {})) == EngineConfig()

    def test_full_config(self, tmp_path):
        path = _write(
            tmp_path,
            {
                "core_subject_markers": ["Literacy", "Numeracy"],
                "core_weight": 4,
                "default_weight": 1,
                "workload_thresholds": {"low": 5, "normal": 20, "high": 24},
                "templates": {
                    "primary": [
                        {"start_time": "8:00", "end_time": "8:45", "slot_type": "LESSON"},
                        {"startTime": "08:45", "endTime": "09:00", "type": "BREAK"},
                        {"start_time": "09:00", "end_time": "09:45"},
                    ]
                },
            },
        )

        config = load_engine_config(path)

        assert config.core_subject_markers == ("literacy", "numeracy")
        assert config.core_weight == 4
        assert config.default_weight == 1
        assert config.thresholds == WorkloadThresholds(low=5, normal=20, high=24)
        slots = config.templates[InstitutionCategory.PRIMARY]
        assert [s.start_time for s in slots] == ["08:00", "08:45", "09:00"]
        assert slots[1].slot_type == SlotType.BREAK

    def test_template_override_used_by_provider(self, tmp_path):
        path = _write(
            tmp_path,
            {"templates": {"TERTIARY": [{"start_time": "09:00", "end_time": "11:00"}]}},
        )
        provider = TemplateProvider(load_engine_config(path))

        assert provider.template_for("TERTIARY") == [
            PeriodSlotTemplate("09:00", "11:00", SlotType.LESSON)
        ]
        assert len(provider.template_for("SECONDARY")) > 1

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            load_engine_config(tmp_path / "missing.json")
        assert exc_info.value.path.endswith("missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "engine.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_engine_config(path)

    @pytest.mark.parametrize(
        "data",
        [
            [],
            {"core_subject_markers": "english"},
            {"core_weight": 0},
            {"default_weight": "2"},
            {"workload_thresholds": {"low": 30, "normal": 20, "high": 10}},
            {"workload_thresholds": {"low": "many"}},
            {"templates": {"KINDERGARTEN": []}},
            {"templates": {"PRIMARY": [{"start_time": "08:00"}]}},
            {"templates": {"PRIMARY": [{"start_time": "08:00", "end_time": "08:40", "slot_type": "NAP"}]}},
        ],
    )
    def test_invalid_values(self, tmp_path, data):
        with pytest.raises(ConfigurationError):
            load_engine_config(_write(tmp_path, data))

    def test_overlapping_template_rejected(self, tmp_path):
        path = _write(
            tmp_path,
            {
                "templates": {
                    "SECONDARY": [
                        {"start_time": "08:00", "end_time": "08:40"},
                        {"start_time": "08:30", "end_time": "09:10"},
                    ]
                }
            },
        )
        with pytest.raises(ConfigurationError, match="overlaps"):
            load_engine_config(path)


class TestValidateTemplate:
    """Tests for validate_template."""

    def test_back_to_back_slots_valid(self):
        validate_template(
            [
                PeriodSlotTemplate("08:00", "08:40", SlotType.LESSON),
                PeriodSlotTemplate("08:40", "09:20", SlotType.LESSON),
            ]
        )

    def test_out_of_order(self):
        with pytest.raises(ValueError, match="out of order"):
            validate_template(
                [
                    PeriodSlotTemplate("09:00", "09:40", SlotType.LESSON),
                    PeriodSlotTemplate("08:00", "08:40", SlotType.LESSON),
                ]
            )
