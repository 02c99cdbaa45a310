from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum

from scheduling.entry import ROOM_NUMBER_MAX_LENGTH, TimetableEntry, normalize_room_number
from scheduling.errors import InvalidRoomNumberError, InvalidSlotRequestError
from scheduling.types import DayOfWeek


MAX_PERIOD_NUMBER = 10


class ConflictKind(str, Enum):
    SECTION = "SECTION"
    TEACHER = "TEACHER"
    ROOM = "ROOM"

    @property
    def label(self) -> str:
        return self.value.capitalize()


@dataclass(frozen=True)
class SlotAvailabilityRequest:
    section_id: uuid.UUID
    teacher_id: uuid.UUID
    room_number: str | None
    day_of_week: DayOfWeek
    period_number: int

    def __post_init__(self) -> None:
        if self.section_id is None:
            raise InvalidSlotRequestError("Section ID is required")
        if self.teacher_id is None:
            raise InvalidSlotRequestError("Teacher ID is required")
        try:
            day = DayOfWeek.parse(self.day_of_week)
        except ValueError as exc:
            raise InvalidSlotRequestError("Invalid day of week") from exc
        if day == DayOfWeek.SUNDAY:
            raise InvalidSlotRequestError("Cannot schedule classes on Sunday")
        if not isinstance(self.period_number, int) or not 1 <= self.period_number <= MAX_PERIOD_NUMBER:
            raise InvalidSlotRequestError(f"Period number must be between 1 and {MAX_PERIOD_NUMBER}")

        room = None
        if self.room_number is not None and str(self.room_number).strip():
            try:
                room = normalize_room_number(self.room_number)
            except InvalidRoomNumberError as exc:
                raise InvalidSlotRequestError(
                    f"Room number cannot exceed {ROOM_NUMBER_MAX_LENGTH} characters"
                ) from exc

        # Frozen dataclass: normalised values are written through object.__setattr__.
        object.__setattr__(self, "day_of_week", day)
        object.__setattr__(self, "room_number", room)

    @property
    def has_room(self) -> bool:
        return self.room_number is not None


@dataclass(frozen=True)
class SlotConflict:
    kind: ConflictKind
    entry_id: uuid.UUID
    description: str
    start_time: timedelta
    end_time: timedelta
    section_id: uuid.UUID | None = None
    teacher_id: uuid.UUID | None = None
    subject_id: uuid.UUID | None = None
    room_number: str | None = None

    @classmethod
    def from_entry(cls, kind: ConflictKind, entry: TimetableEntry, description: str) -> "SlotConflict":
        return cls(
            kind=kind,
            entry_id=entry.id,
            description=description,
            start_time=entry.start_time,
            end_time=entry.end_time,
            section_id=entry.section_id,
            teacher_id=entry.teacher_id,
            subject_id=entry.subject_id,
            room_number=entry.room_number,
        )


@dataclass(frozen=True)
class SlotAvailabilityResult:
    can_schedule: bool
    conflicts: tuple[SlotConflict, ...] = ()

    @classmethod
    def available(cls) -> "SlotAvailabilityResult":
        return cls(can_schedule=True)

    @classmethod
    def unavailable(cls, conflicts: tuple[SlotConflict, ...]) -> "SlotAvailabilityResult":
        return cls(can_schedule=False, conflicts=tuple(conflicts))

    def conflict_for(self, kind: ConflictKind) -> SlotConflict | None:
        for c in self.conflicts:
            if c.kind == kind:
                return c
        return None

    @property
    def message(self) -> str:
        if self.can_schedule:
            return "Time slot is available for scheduling"
        kinds: list[str] = []
        for c in self.conflicts:
            name = c.kind.value.lower()
            if name not in kinds:
                kinds.append(name)
        return f"Time slot has conflicts: {', '.join(kinds)}"


def _slot_text(request: SlotAvailabilityRequest) -> str:
    return f"{request.day_of_week.label}, Period {request.period_number}"


def check_availability(
    request: SlotAvailabilityRequest,
    section_entry: TimetableEntry | None,
    teacher_entry: TimetableEntry | None,
    room_entry: TimetableEntry | None,
) -> SlotAvailabilityResult:
    """Judge one candidate slot against the entries already holding it.

    Each argument is the entry occupying the slot along that dimension, or
    None. All three dimensions are reported independently.
    """

    conflicts: list[SlotConflict] = []

    if section_entry is not None:
        conflicts.append(
            SlotConflict.from_entry(
                ConflictKind.SECTION,
                section_entry,
                f"Section already has a class scheduled at {_slot_text(request)}",
            )
        )

    if teacher_entry is not None:
        conflicts.append(
            SlotConflict.from_entry(
                ConflictKind.TEACHER,
                teacher_entry,
                f"Teacher is already teaching Section {teacher_entry.section_id} at {_slot_text(request)}",
            )
        )

    if request.has_room and room_entry is not None:
        conflicts.append(
            SlotConflict.from_entry(
                ConflictKind.ROOM,
                room_entry,
                f"Room {request.room_number} is already occupied by Section {room_entry.section_id} "
                f"at {_slot_text(request)}",
            )
        )

    if conflicts:
        return SlotAvailabilityResult.unavailable(tuple(conflicts))
    return SlotAvailabilityResult.available()
