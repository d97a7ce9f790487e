"""Timetable Engine - weekly timetable generation and teacher workload balancing.

This package fills a class's weekly period template with subjects or
courses, assigns the least-loaded qualified teacher to each lesson, reports
workload and coverage warnings, and merges an approved preview into stored
timetables without overwriting filled slots.

Example usage:
    import random

    from timetable_engine import (
        GenerationOptions,
        TeachableUnit,
        analyze_generation,
        generate_timetable,
        template_for,
    )

    units = [TeachableUnit(id="math", name="Mathematics")]
    options = GenerationOptions(requires_teacher_assignment=False)
    periods = generate_timetable(
        template_for("PRIMARY"), units, [], options, rng=random.Random(7)
    )

    analysis = analyze_generation(periods, requires_teacher_assignment=False)
    for warning in analysis.warnings:
        print(warning)
"""

from .analysis import analyze_generation
from .apply import (
    ApplyResult,
    ConflictType,
    InMemoryPeriodRepository,
    PeriodRepository,
    StoredPeriod,
    apply_periods,
)
from .config import EngineConfig, WorkloadThresholds, load_engine_config
from .exceptions import (
    ConfigurationError,
    InvalidPeriodError,
    SchedulingConflictError,
    TimetableEngineError,
)
from .exporters import CSVExporter, ExcelExporter, JSONExporter, get_exporter
from .generator import TimetableGenerator, generate_timetable
from .models import (
    Day,
    GeneratedPeriod,
    GenerationAnalysis,
    GenerationOptions,
    GenerationPreview,
    InstitutionCategory,
    PeriodSlotTemplate,
    SlotType,
    TeachableUnit,
    TeacherAssignmentSummary,
    TeacherLoad,
    UnitCoverageGap,
    WorkloadStatus,
    periods_from_records,
)
from .pool import PoolEntry, build_pool
from .templates import TemplateProvider, requires_teacher_assignment, template_for
from .workload import TeacherLoadBalancer, WorkloadTracker, get_workload_status

__version__ = "0.1.0"

__all__ = [
    # Engine operations
    "generate_timetable",
    "analyze_generation",
    "apply_periods",
    "TimetableGenerator",
    # Components
    "TemplateProvider",
    "template_for",
    "requires_teacher_assignment",
    "build_pool",
    "PoolEntry",
    "TeacherLoadBalancer",
    "WorkloadTracker",
    "get_workload_status",
    # Persistence contract
    "PeriodRepository",
    "InMemoryPeriodRepository",
    "StoredPeriod",
    "ApplyResult",
    "ConflictType",
    # Configuration
    "EngineConfig",
    "WorkloadThresholds",
    "load_engine_config",
    # Models
    "Day",
    "SlotType",
    "InstitutionCategory",
    "WorkloadStatus",
    "PeriodSlotTemplate",
    "TeacherLoad",
    "TeachableUnit",
    "GeneratedPeriod",
    "GenerationOptions",
    "GenerationAnalysis",
    "GenerationPreview",
    "TeacherAssignmentSummary",
    "UnitCoverageGap",
    "periods_from_records",
    # Exporters
    "JSONExporter",
    "CSVExporter",
    "ExcelExporter",
    "get_exporter",
    # Exceptions
    "TimetableEngineError",
    "ConfigurationError",
    "InvalidPeriodError",
    "SchedulingConflictError",
]
