"""Workload and coverage analysis of a generated timetable."""

import logging
from collections import defaultdict
from typing import Iterable

from .config import EngineConfig
from .models import (
    GeneratedPeriod,
    GenerationAnalysis,
    TeachableUnit,
    TeacherAssignmentSummary,
    UnitCoverageGap,
    WorkloadStatus,
)
from .workload import get_workload_status

logger = logging.getLogger(__name__)

UNKNOWN_NAME = "Unknown"


def _external_loads(units: Iterable[TeachableUnit]) -> dict[tuple[str, str], int]:
    """Map (unit_id, teacher_id) to the teacher's external period count."""
    loads: dict[tuple[str, str], int] = {}
    for unit in units:
        for teacher in unit.qualified_teachers:
            loads[(unit.id, teacher.teacher_id)] = teacher.external_period_count
    return loads


def analyze_generation(
    periods: Iterable[GeneratedPeriod],
    requires_teacher_assignment: bool,
    units: Iterable[TeachableUnit] = (),
    config: EngineConfig | None = None,
) -> GenerationAnalysis:
    """Compute advisory statistics and warnings for a set of periods.

    The analysis is recomputed from the periods alone (plus the units'
    external teacher loads) and never modifies them, so it can run on a
    preview that has not been applied yet.

    Args:
        periods: Generated or merged periods of one class
        requires_teacher_assignment: Whether lessons without a teacher count
            as coverage gaps
        units: Units with qualified teachers, used to look up external loads
        config: Engine configuration (workload thresholds)

    Returns:
        GenerationAnalysis with counts, per-teacher loads and warnings
    """
    config = config or EngineConfig()
    external_loads = _external_loads(units)

    lessons = [p for p in periods if p.is_lesson]
    free_count = sum(1 for p in lessons if p.is_free)

    # teacher_id -> name, teacher_id -> total periods, (teacher_id, unit_id) -> count
    teacher_names: dict[str, str] = {}
    teacher_totals: dict[str, int] = defaultdict(int)
    teacher_unit_counts: dict[tuple[str, str], int] = defaultdict(int)
    unit_names: dict[str, str] = {}
    missing: dict[str, UnitCoverageGap] = {}
    used_units: set[str] = set()

    assigned_with_teacher = 0
    unassigned_teacher = 0

    for period in lessons:
        if not period.unit_id:
            continue

        used_units.add(period.unit_id)
        unit_names.setdefault(period.unit_id, period.unit_name or UNKNOWN_NAME)

        if period.teacher_id:
            assigned_with_teacher += 1
            teacher_names.setdefault(period.teacher_id, period.teacher_name or UNKNOWN_NAME)
            teacher_totals[period.teacher_id] += 1
            teacher_unit_counts[(period.teacher_id, period.unit_id)] += 1
        elif requires_teacher_assignment:
            unassigned_teacher += 1
            gap = missing.setdefault(
                period.unit_id,
                UnitCoverageGap(
                    unit_id=period.unit_id,
                    unit_name=period.unit_name or UNKNOWN_NAME,
                ),
            )
            gap.period_count += 1

    assignments: list[TeacherAssignmentSummary] = []
    for (teacher_id, unit_id), count in teacher_unit_counts.items():
        base_load = external_loads.get((unit_id, teacher_id), 0)
        total_load = base_load + teacher_totals[teacher_id]
        assignments.append(
            TeacherAssignmentSummary(
                teacher_id=teacher_id,
                teacher_name=teacher_names[teacher_id],
                unit_id=unit_id,
                unit_name=unit_names[unit_id],
                period_count=count,
                total_load=total_load,
                status=get_workload_status(total_load, config.thresholds),
            )
        )
    assignments.sort(key=lambda a: a.total_load, reverse=True)

    warnings: list[str] = []
    if unassigned_teacher > 0:
        warnings.append(f"{unassigned_teacher} periods have no teacher assigned")

    for summary in assignments:
        if summary.status == WorkloadStatus.OVERLOADED:
            warnings.append(
                f"{summary.teacher_name} is overloaded with {summary.total_load} periods"
            )
        elif summary.status == WorkloadStatus.HIGH:
            warnings.append(
                f"{summary.teacher_name} has high workload ({summary.total_load} periods)"
            )

    for gap in missing.values():
        warnings.append(f'"{gap.unit_name}" has {gap.period_count} periods without a teacher')

    analysis = GenerationAnalysis(
        total_periods=len(lessons) - free_count,
        assigned_with_teacher=assigned_with_teacher,
        unassigned_teacher=unassigned_teacher,
        free_periods=free_count,
        units_used=len(used_units),
        teachers_involved=len(teacher_totals),
        teacher_assignments=assignments,
        units_without_teachers=list(missing.values()),
        warnings=warnings,
    )

    if analysis.has_warnings:
        logger.info(f"Analysis found {len(warnings)} warnings")
    return analysis
