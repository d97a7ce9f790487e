"""Weighted subject pool for the slot filler."""

import logging
from typing import Iterable, NamedTuple

from .config import EngineConfig
from .models import TeachableUnit

logger = logging.getLogger(__name__)


class PoolEntry(NamedTuple):
    """One copy of a unit in the weighted pool."""

    id: str
    name: str


def is_core_unit(name: str, markers: Iterable[str]) -> bool:
    """Check if a unit name contains a core-subject marker (case-insensitive)."""
    lowered = name.lower()
    return any(marker in lowered for marker in markers)


def build_pool(
    units: Iterable[TeachableUnit], config: EngineConfig | None = None
) -> list[PoolEntry]:
    """Build the weighted candidate list.

    Each unit contributes `core_weight` copies when its name contains a core
    marker, else `default_weight` copies. Entries keep input order; the
    caller shuffles.

    Args:
        units: Teachable units of the class
        config: Engine configuration (markers and weights)

    Returns:
        Weighted list of pool entries (empty when there are no units)
    """
    config = config or EngineConfig()
    pool: list[PoolEntry] = []

    for unit in units:
        core = is_core_unit(unit.name, config.core_subject_markers)
        weight = config.core_weight if core else config.default_weight
        pool.extend(PoolEntry(unit.id, unit.name) for _ in range(weight))

    if not pool:
        logger.debug("No subjects or courses available for the pool")

    return pool
