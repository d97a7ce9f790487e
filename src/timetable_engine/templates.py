"""Daily period templates per institution category."""

import logging

from .config import EngineConfig
from .constants import DEFAULT_CATEGORY
from .models import InstitutionCategory, PeriodSlotTemplate, SlotType

logger = logging.getLogger(__name__)


def _slot(start: str, end: str, slot_type: SlotType, label: str) -> PeriodSlotTemplate:
    return PeriodSlotTemplate(start_time=start, end_time=end, slot_type=slot_type, label=label)


# Primary school day (07:30 - 14:10)
PRIMARY_TEMPLATE = (
    _slot("07:30", "07:45", SlotType.ASSEMBLY, "Assembly"),
    _slot("07:45", "08:25", SlotType.LESSON, "Period 1"),
    _slot("08:25", "09:05", SlotType.LESSON, "Period 2"),
    _slot("09:05", "09:45", SlotType.LESSON, "Period 3"),
    _slot("09:45", "10:25", SlotType.LESSON, "Period 4"),
    _slot("10:25", "11:00", SlotType.LESSON, "Period 5"),
    _slot("11:00", "11:40", SlotType.BREAK, "Break"),
    _slot("11:40", "12:20", SlotType.LESSON, "Period 6"),
    _slot("12:20", "12:30", SlotType.LESSON, "Period 7"),
    _slot("12:30", "13:00", SlotType.LUNCH, "Lunch"),
    _slot("13:00", "13:40", SlotType.LESSON, "Period 8"),
    _slot("13:40", "14:10", SlotType.LESSON, "Period 9"),
)

# Secondary school day (08:00 - 14:35)
SECONDARY_TEMPLATE = (
    _slot("08:00", "08:15", SlotType.ASSEMBLY, "Assembly"),
    _slot("08:15", "09:00", SlotType.LESSON, "Period 1"),
    _slot("09:00", "09:45", SlotType.LESSON, "Period 2"),
    _slot("09:45", "10:30", SlotType.LESSON, "Period 3"),
    _slot("10:30", "11:00", SlotType.BREAK, "Break"),
    _slot("11:00", "11:45", SlotType.LESSON, "Period 4"),
    _slot("11:45", "12:30", SlotType.LESSON, "Period 5"),
    _slot("12:30", "13:15", SlotType.LUNCH, "Lunch"),
    _slot("13:15", "14:00", SlotType.LESSON, "Period 6"),
    _slot("14:00", "14:35", SlotType.LESSON, "Period 7"),
)

# Tertiary day (08:00 - 16:00), no assembly
TERTIARY_TEMPLATE = (
    _slot("08:00", "09:00", SlotType.LESSON, "Period 1"),
    _slot("09:00", "10:00", SlotType.LESSON, "Period 2"),
    _slot("10:00", "10:30", SlotType.LESSON, "Period 3"),
    _slot("10:30", "11:00", SlotType.BREAK, "Break"),
    _slot("11:00", "12:00", SlotType.LESSON, "Period 4"),
    _slot("12:00", "13:00", SlotType.LESSON, "Period 5"),
    _slot("13:00", "14:00", SlotType.LUNCH, "Lunch"),
    _slot("14:00", "15:00", SlotType.LESSON, "Period 6"),
    _slot("15:00", "16:00", SlotType.LESSON, "Period 7"),
)

BUILTIN_TEMPLATES = {
    InstitutionCategory.PRIMARY: PRIMARY_TEMPLATE,
    InstitutionCategory.SECONDARY: SECONDARY_TEMPLATE,
    InstitutionCategory.TERTIARY: TERTIARY_TEMPLATE,
}


class TemplateProvider:
    """Looks up the daily period template of an institution category.

    Built-in templates can be replaced per category through
    EngineConfig.templates.
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        config = config or EngineConfig()
        self._templates = dict(BUILTIN_TEMPLATES)
        self._templates.update(config.templates)

    def template_for(
        self, category: InstitutionCategory | str | None
    ) -> list[PeriodSlotTemplate]:
        """Get the ordered slots for a category.

        Unknown categories fall back to the default (secondary) template.
        """
        parsed = InstitutionCategory.parse(category)
        if parsed is None:
            logger.debug(
                f"Unknown institution category {category!r}, using {DEFAULT_CATEGORY} template"
            )
            parsed = InstitutionCategory(DEFAULT_CATEGORY)
        return list(self._templates[parsed])


def template_for(
    category: InstitutionCategory | str | None, config: EngineConfig | None = None
) -> list[PeriodSlotTemplate]:
    """Get the ordered daily template for a category (see TemplateProvider)."""
    return TemplateProvider(config).template_for(category)


def lesson_slots(template: list[PeriodSlotTemplate]) -> list[PeriodSlotTemplate]:
    """Get only the lesson slots of a template."""
    return [slot for slot in template if slot.slot_type == SlotType.LESSON]


def non_lesson_slots(template: list[PeriodSlotTemplate]) -> list[PeriodSlotTemplate]:
    """Get the break, lunch and assembly slots of a template."""
    return [slot for slot in template if slot.slot_type != SlotType.LESSON]


def requires_teacher_assignment(category: InstitutionCategory | str | None) -> bool:
    """Whether lessons of this category get a teacher per period.

    Only secondary schools assign subject teachers per period; primary
    classes have a class teacher and tertiary courses a course lecturer.
    """
    return InstitutionCategory.parse(category) == InstitutionCategory.SECONDARY
