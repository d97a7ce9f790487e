"""Teacher load balancing for per-period teacher assignment."""

import logging
from collections import defaultdict
from dataclasses import replace

from .config import EngineConfig, WorkloadThresholds
from .models import GeneratedPeriod, TeachableUnit, TeacherLoad, WorkloadStatus

logger = logging.getLogger(__name__)


def get_workload_status(
    period_count: int, thresholds: WorkloadThresholds | None = None
) -> WorkloadStatus:
    """Classify a weekly period count.

    Args:
        period_count: Total periods (external + this run)
        thresholds: Status boundaries, defaults to 10/25/30

    Returns:
        LOW below `low`, NORMAL up to `normal`, HIGH up to `high`,
        OVERLOADED above it
    """
    thresholds = thresholds or WorkloadThresholds()
    if period_count < thresholds.low:
        return WorkloadStatus.LOW
    if period_count <= thresholds.normal:
        return WorkloadStatus.NORMAL
    if period_count <= thresholds.high:
        return WorkloadStatus.HIGH
    return WorkloadStatus.OVERLOADED


class WorkloadTracker:
    """Periods assigned to each teacher during one generation run.

    Created per generation call and discarded afterwards; committed load is
    recomputed by the persistence layer.
    """

    def __init__(self) -> None:
        # teacher_id -> periods assigned this run
        self._counts: dict[str, int] = defaultdict(int)

    def get(self, teacher_id: str) -> int:
        return self._counts.get(teacher_id, 0)

    def record(self, teacher_id: str, periods: int = 1) -> int:
        """Add periods to a teacher and return the new run count."""
        self._counts[teacher_id] += periods
        return self._counts[teacher_id]

    def current_load(self, teacher: TeacherLoad) -> int:
        """External load plus periods assigned this run."""
        return teacher.external_period_count + self.get(teacher.teacher_id)

    def as_dict(self) -> dict[str, int]:
        return dict(self._counts)

    def __len__(self) -> int:
        return len(self._counts)


class TeacherLoadBalancer:
    """Picks the least-loaded qualified teacher for each lesson.

    Slots must be evaluated one after another: every assignment updates the
    tracker, and later slots see the updated counts.
    """

    def __init__(
        self,
        tracker: WorkloadTracker | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self.tracker = tracker if tracker is not None else WorkloadTracker()
        self.config = config or EngineConfig()

    def select(self, teachers: tuple[TeacherLoad, ...] | list[TeacherLoad]) -> TeacherLoad | None:
        """Select a teacher without recording the assignment.

        Ties go to the first teacher in input order.
        """
        if not teachers:
            return None
        if len(teachers) == 1:
            return teachers[0]

        least_loaded = teachers[0]
        min_load = self.tracker.current_load(least_loaded)
        for teacher in teachers[1:]:
            load = self.tracker.current_load(teacher)
            if load < min_load:
                least_loaded = teacher
                min_load = load
        return least_loaded

    def assign(self, unit: TeachableUnit) -> TeacherLoad | None:
        """Select a teacher for one period of a unit and record it."""
        teacher = self.select(unit.qualified_teachers)
        if teacher is not None:
            self.tracker.record(teacher.teacher_id)
        return teacher

    def assign_period(self, period: GeneratedPeriod, unit: TeachableUnit) -> GeneratedPeriod:
        """Return a copy of the period with a teacher and any load warning.

        Args:
            period: Lesson period already carrying the unit
            unit: The unit, with its qualified teachers

        Returns:
            Period with teacher fields set, or flagged when no teacher exists
        """
        teacher = self.assign(unit)
        if teacher is None:
            logger.debug(f"No teachers assigned to {unit.name}")
            return replace(
                period,
                has_warning=True,
                warning_message=f"No teachers assigned to {unit.name}",
            )

        period = replace(period, teacher_id=teacher.teacher_id, teacher_name=teacher.full_name)

        total_load = self.tracker.current_load(teacher)
        if total_load > self.config.thresholds.high:
            logger.debug(f"{teacher.full_name} reached {total_load} periods")
            period = replace(
                period,
                has_warning=True,
                warning_message=f"{teacher.full_name} has {total_load} periods (high load)",
            )
        return period
