"""Greedy slot filler that builds a weekly class timetable."""

import logging
import random
from dataclasses import replace
from typing import Any, Iterable

from .config import EngineConfig
from .constants import EXTRA_FREE_PERIOD_PROBABILITY
from .exceptions import InvalidPeriodError
from .models import (
    Day,
    GeneratedPeriod,
    GenerationOptions,
    PeriodSlotTemplate,
    SlotType,
    TeachableUnit,
)
from .pool import PoolEntry, build_pool
from .templates import lesson_slots, non_lesson_slots
from .utils import day_index, is_valid_range, normalize_time, slot_key
from .workload import TeacherLoadBalancer, WorkloadTracker

logger = logging.getLogger(__name__)

PeriodMap = dict[tuple[str, str, str], GeneratedPeriod]


def sort_periods(periods: Iterable[GeneratedPeriod]) -> list[GeneratedPeriod]:
    """Sort periods by day of week, then start time."""
    return sorted(periods, key=lambda p: (day_index(p.day), p.start_time, p.end_time))


def normalize_existing_periods(
    periods: Iterable[GeneratedPeriod | dict[str, Any]],
) -> list[GeneratedPeriod]:
    """Drop existing periods that cannot take part in generation.

    Skips records that fail to parse, periods with an empty or invalid time
    range, and any period repeating an earlier period's (day, start, end).
    Kept periods carry zero-padded HH:MM times.
    """
    normalized: list[GeneratedPeriod] = []
    seen: set[tuple[str, str, str]] = set()

    for item in periods:
        if isinstance(item, dict):
            try:
                period = GeneratedPeriod.from_dict(item)
            except InvalidPeriodError as e:
                logger.debug(f"Skipping existing period: {e}")
                continue
        elif isinstance(item, GeneratedPeriod):
            period = item
        else:
            logger.debug(f"Skipping unsupported existing period: {item!r}")
            continue

        if not isinstance(period.day, Day) or not is_valid_range(
            period.start_time, period.end_time
        ):
            logger.debug(
                f"Skipping existing period with invalid slot: "
                f"{period.day} {period.start_time}-{period.end_time}"
            )
            continue

        period = replace(
            period,
            start_time=normalize_time(period.start_time),
            end_time=normalize_time(period.end_time),
        )
        if period.key in seen:
            logger.debug(f"Skipping duplicate existing period at {period.key}")
            continue

        seen.add(period.key)
        normalized.append(period)

    return normalized


class TimetableGenerator:
    """Fills a class's weekly timetable one lesson slot at a time.

    For every weekday the generator walks the lesson slots in order and
    either keeps an existing assignment, leaves the slot as an explicit free
    period, or picks a unit from the shuffled weighted pool:

    1. Slots that already carry a unit are never changed
    2. Free periods are drawn against a per-day budget
    3. A unit is not repeated back-to-back and not placed more than
       max_same_unit_per_day times a day; if no unit satisfies both, the
       first shuffled candidate is placed anyway
    4. When teacher assignment is required, the least-loaded qualified
       teacher is attached to each newly filled slot
    """

    def __init__(
        self,
        options: GenerationOptions | None = None,
        config: EngineConfig | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the generator.

        Args:
            options: Per-call generation knobs
            config: Engine configuration (pool weights, thresholds)
            rng: Random source for shuffling and free-period draws; a
                 seeded random.Random makes runs reproducible
        """
        self.options = options or GenerationOptions()
        self.config = config or EngineConfig()
        self.rng = rng if rng is not None else random.Random()

    def generate(
        self,
        template: list[PeriodSlotTemplate],
        units: Iterable[TeachableUnit],
        existing_periods: Iterable[GeneratedPeriod | dict[str, Any]] = (),
    ) -> list[GeneratedPeriod]:
        """Generate a timetable.

        Args:
            template: Daily slot template of the institution category
            units: Subjects or courses available to the class
            existing_periods: Periods already stored for the class and term

        Returns:
            Periods for every slot of every weekday, sorted by day and time
        """
        units = list(units)
        unit_map = {unit.id: unit for unit in units}
        existing = normalize_existing_periods(existing_periods)

        tracker = WorkloadTracker()
        if self.options.seed_existing_load:
            for period in existing:
                if period.teacher_id:
                    tracker.record(period.teacher_id)
        balancer = TeacherLoadBalancer(tracker, self.config)

        result: PeriodMap = {period.key: period for period in existing}

        if existing:
            # Respect the structure of an existing timetable: iterate only the
            # lesson slots it already has, never add breaks on top of it
            slots = sorted(
                {(p.start_time, p.end_time) for p in existing if p.is_lesson}
            )
        else:
            for slot in non_lesson_slots(template):
                for day in Day:
                    period = GeneratedPeriod(
                        day=day,
                        start_time=slot.start_time,
                        end_time=slot.end_time,
                        slot_type=slot.slot_type,
                    )
                    result.setdefault(period.key, period)
            slots = sorted((s.start_time, s.end_time) for s in lesson_slots(template))

        pool = build_pool(units, self.config)
        if not pool:
            logger.warning("No subjects or courses available, lesson slots stay free")

        for day in Day:
            self._fill_day(day, slots, result, pool, unit_map, balancer)

        periods = sort_periods(result.values())
        free_count = sum(1 for p in periods if p.is_free)
        logger.info(
            f"Generated {len(periods)} periods ({free_count} free) "
            f"from {len(units)} units and {len(existing)} existing periods"
        )
        return periods

    def _fill_day(
        self,
        day: Day,
        slots: list[tuple[str, str]],
        result: PeriodMap,
        pool: list[PoolEntry],
        unit_map: dict[str, TeachableUnit],
        balancer: TeacherLoadBalancer,
    ) -> None:
        """Fill the open lesson slots of one day in chronological order."""
        total_slots = len(slots)
        free_budget = self.options.free_periods_per_day
        if (
            self.options.randomize_free_periods
            and self.rng.random() < EXTRA_FREE_PERIOD_PROBABILITY
        ):
            free_budget += 1
        free_budget = min(free_budget, total_slots)
        free_used = 0

        for index, (start_time, end_time) in enumerate(slots):
            key = slot_key(day, start_time, end_time)
            current = result.get(key)

            if current is not None and (current.unit_id or not current.is_lesson):
                continue

            if not pool:
                if current is None:
                    result[key] = GeneratedPeriod.free(day, start_time, end_time)
                continue

            candidates = list(pool)
            self.rng.shuffle(candidates)

            if free_used < free_budget:
                chance = (free_budget - free_used) / (total_slots - index)
                if self.rng.random() < chance:
                    free_used += 1
                    if current is None:
                        result[key] = GeneratedPeriod.free(day, start_time, end_time)
                    continue

            selected = self._select_unit(day, start_time, candidates, result)

            base = current or GeneratedPeriod(day=day, start_time=start_time, end_time=end_time)
            period = replace(
                base,
                slot_type=SlotType.LESSON,
                unit_id=selected.id,
                unit_name=selected.name,
            )
            if self.options.requires_teacher_assignment:
                period = balancer.assign_period(period, unit_map[selected.id])

            result[key] = period

    def _select_unit(
        self,
        day: Day,
        start_time: str,
        candidates: list[PoolEntry],
        result: PeriodMap,
    ) -> PoolEntry:
        """Pick the first candidate that respects the repetition rules."""
        previous = self._previous_unit(day, start_time, result)
        limit = self.options.max_same_unit_per_day

        for candidate in candidates:
            if candidate.id == previous:
                continue
            if self._count_on_day(day, candidate.id, result) >= limit:
                continue
            return candidate

        logger.debug(
            f"No candidate satisfies repetition rules on {day.value} {start_time}, "
            f"placing {candidates[0].name}"
        )
        return candidates[0]

    @staticmethod
    def _previous_unit(day: Day, start_time: str, result: PeriodMap) -> str | None:
        """Unit of the latest earlier lesson on the same day, if any."""
        earlier = [
            p
            for p in result.values()
            if p.day == day and p.is_lesson and p.unit_id and p.start_time < start_time
        ]
        if not earlier:
            return None
        return max(earlier, key=lambda p: p.start_time).unit_id

    @staticmethod
    def _count_on_day(day: Day, unit_id: str, result: PeriodMap) -> int:
        return sum(1 for p in result.values() if p.day == day and p.unit_id == unit_id)


def generate_timetable(
    template: list[PeriodSlotTemplate],
    units: Iterable[TeachableUnit],
    existing_periods: Iterable[GeneratedPeriod | dict[str, Any]] = (),
    options: GenerationOptions | None = None,
    *,
    config: EngineConfig | None = None,
    rng: random.Random | None = None,
) -> list[GeneratedPeriod]:
    """Generate a weekly timetable (see TimetableGenerator).

    Pure with respect to its inputs: nothing passed in is modified and the
    workload tracker lives only for this call.
    """
    return TimetableGenerator(options=options, config=config, rng=rng).generate(
        template, units, existing_periods
    )
