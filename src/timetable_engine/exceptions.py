"""Custom exceptions for the timetable engine."""


class TimetableEngineError(Exception):
    """Base exception for timetable engine errors."""

    pass


class ConfigurationError(TimetableEngineError):
    """Engine configuration file is malformed."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        location = f" in '{path}'" if path else ""
        super().__init__(f"Invalid configuration{location}: {message}")


class InvalidPeriodError(TimetableEngineError):
    """A period record cannot be turned into a period."""

    def __init__(self, message: str, record: dict | None = None):
        self.record = record or {}
        super().__init__(f"Invalid period: {message}")


class SchedulingConflictError(TimetableEngineError):
    """A teacher or room would be double-booked at an overlapping time."""

    def __init__(
        self,
        conflict_type: str,
        day: str,
        start_time: str,
        end_time: str,
        resource_id: str,
        conflicting_period_id: str | None = None,
        message: str | None = None,
    ):
        self.conflict_type = conflict_type
        self.day = day
        self.start_time = start_time
        self.end_time = end_time
        self.resource_id = resource_id
        self.conflicting_period_id = conflicting_period_id
        if message is None:
            message = (
                f"{conflict_type.capitalize()} '{resource_id}' is already booked "
                f"at {start_time}-{end_time} on {day}"
            )
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert conflict details to a dictionary."""
        return {
            "conflict_type": self.conflict_type,
            "day": self.day,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "resource_id": self.resource_id,
            "conflicting_period_id": self.conflicting_period_id,
            "message": str(self),
        }
