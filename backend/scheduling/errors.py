from __future__ import annotations

from typing import Any


class TimetableDomainError(ValueError):
    """Base class for timetable rule violations.

    `code` is a stable identifier surfaced to API clients, `message` is human readable.
    """

    code = "TIMETABLE_DOMAIN_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


# Generation preconditions. Raised before any slot is processed.


class GenerationPreconditionError(TimetableDomainError):
    code = "INVALID_GENERATION_REQUEST"


class MissingSectionError(GenerationPreconditionError):
    code = "SECTION_REQUIRED"

    def __init__(self, message: str = "A section is required to generate a timetable"):
        super().__init__(message)


class NoSubjectsError(GenerationPreconditionError):
    code = "NO_SUBJECTS"

    def __init__(self, message: str = "Cannot generate timetable without subjects"):
        super().__init__(message)


class InvalidPeriodCountError(GenerationPreconditionError):
    code = "INVALID_PERIOD_COUNT"

    def __init__(self, periods_per_day: int, maximum: int):
        super().__init__(f"Periods per day must be between 1 and {maximum} (got {periods_per_day})")
        self.periods_per_day = periods_per_day
        self.maximum = maximum


class InvalidPeriodDurationError(GenerationPreconditionError):
    code = "INVALID_PERIOD_DURATION"

    def __init__(self, period_duration: int, minimum: int, maximum: int):
        super().__init__(
            f"Period duration must be between {minimum} and {maximum} minutes (got {period_duration})"
        )
        self.period_duration = period_duration


class MissingRoomError(GenerationPreconditionError):
    code = "SECTION_ROOM_REQUIRED"

    def __init__(self, message: str = "Section must have a room number assigned"):
        super().__init__(message)


class NoWorkingDaysError(GenerationPreconditionError):
    code = "NO_WORKING_DAYS"

    def __init__(self, message: str = "At least one working day must be specified"):
        super().__init__(message)


# Entry construction. Recovered as warnings during generation.


class InvalidTimetableEntryError(TimetableDomainError):
    code = "INVALID_TIMETABLE_ENTRY"


class InvalidRoomNumberError(InvalidTimetableEntryError):
    code = "INVALID_ROOM_NUMBER"

    def __init__(self, value: str | None, reason: str):
        super().__init__(f"Invalid room number '{value if value is not None else 'null'}': {reason}")
        self.value = value
        self.reason = reason


class InvalidTimePeriodError(InvalidTimetableEntryError):
    code = "INVALID_TIME_PERIOD"


class EntryAlreadyCancelledError(TimetableDomainError):
    code = "ENTRY_ALREADY_CANCELLED"

    def __init__(self, message: str = "Timetable entry is already cancelled"):
        super().__init__(message)


class InvalidSlotRequestError(TimetableDomainError):
    code = "INVALID_SLOT_REQUEST"


class TimetableConflictError(TimetableDomainError):
    """The requested slot collides with existing entries."""

    code = "TIMETABLE_CONFLICT"

    def __init__(self, message: str, *, conflicts: tuple[Any, ...] = ()):
        super().__init__(message)
        self.conflicts = conflicts
