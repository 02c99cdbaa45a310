from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from scheduling.clock import format_clock
from scheduling.errors import (
    EntryAlreadyCancelledError,
    InvalidRoomNumberError,
    InvalidTimePeriodError,
    InvalidTimetableEntryError,
)
from scheduling.types import DayOfWeek


ROOM_NUMBER_MAX_LENGTH = 20

MIN_PERIOD_DURATION = timedelta(minutes=30)
MAX_PERIOD_DURATION = timedelta(hours=3)
_DAY = timedelta(hours=24)


def normalize_room_number(value: str | None) -> str:
    """Canonical room form: trimmed and upper-cased ("  b-12 " -> "B-12")."""

    if value is None or not str(value).strip():
        raise InvalidRoomNumberError(value, "Room number cannot be empty or whitespace")
    trimmed = str(value).strip()
    if len(trimmed) > ROOM_NUMBER_MAX_LENGTH:
        raise InvalidRoomNumberError(value, f"Room number cannot exceed {ROOM_NUMBER_MAX_LENGTH} characters")
    return trimmed.upper()


@dataclass(frozen=True)
class TimePeriod:
    start: timedelta
    end: timedelta

    def __post_init__(self) -> None:
        if self.start < timedelta(0) or self.start >= _DAY:
            raise InvalidTimePeriodError(f"Start time {format_clock(self.start)} must be between 00:00 and 23:59")
        if self.end <= timedelta(0) or self.end > _DAY:
            raise InvalidTimePeriodError(f"End time {format_clock(self.end)} must be between 00:00 and 24:00")
        if self.start >= self.end:
            raise InvalidTimePeriodError(
                f"Start time {format_clock(self.start)} must be before end time {format_clock(self.end)}"
            )
        if self.duration < MIN_PERIOD_DURATION:
            raise InvalidTimePeriodError(
                f"Period duration of {self.minutes} minutes is below the minimum of "
                f"{int(MIN_PERIOD_DURATION.total_seconds() // 60)} minutes"
            )
        if self.duration > MAX_PERIOD_DURATION:
            raise InvalidTimePeriodError(
                f"Period duration of {self.minutes} minutes exceeds maximum allowed "
                f"{int(MAX_PERIOD_DURATION.total_seconds() // 60)} minutes"
            )

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    @property
    def minutes(self) -> int:
        return int(self.duration.total_seconds() // 60)

    def __str__(self) -> str:
        return f"{format_clock(self.start)} - {format_clock(self.end)} ({self.minutes} mins)"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class TimetableEntry:
    """One scheduled class: a section taking a subject with a teacher in a room at a slot.

    Build new entries through `TimetableEntry.create`, which validates and
    normalises; the plain constructor is used to rehydrate stored rows.
    """

    section_id: uuid.UUID
    subject_id: uuid.UUID
    teacher_id: uuid.UUID
    day_of_week: DayOfWeek
    period_number: int
    time_period: TimePeriod
    room_number: str
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    is_deleted: bool = False
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime | None = None

    @classmethod
    def create(
        cls,
        section_id: uuid.UUID,
        subject_id: uuid.UUID,
        teacher_id: uuid.UUID,
        day_of_week: DayOfWeek | int | str,
        period_number: int,
        start_time: timedelta,
        end_time: timedelta,
        room_number: str | None,
    ) -> "TimetableEntry":
        try:
            day = DayOfWeek.parse(day_of_week)
        except ValueError as exc:
            raise InvalidTimetableEntryError("Invalid day of week") from exc
        if period_number <= 0:
            raise InvalidTimetableEntryError("Period number must be greater than zero")

        return cls(
            section_id=section_id,
            subject_id=subject_id,
            teacher_id=teacher_id,
            day_of_week=day,
            period_number=int(period_number),
            time_period=TimePeriod(start_time, end_time),
            room_number=normalize_room_number(room_number),
        )

    @property
    def start_time(self) -> timedelta:
        return self.time_period.start

    @property
    def end_time(self) -> timedelta:
        return self.time_period.end

    @property
    def slot(self) -> tuple[DayOfWeek, int]:
        return self.day_of_week, self.period_number

    def update_schedule(
        self,
        subject_id: uuid.UUID,
        teacher_id: uuid.UUID,
        start_time: timedelta,
        end_time: timedelta,
        room_number: str | None,
    ) -> None:
        # Validate everything before mutating so a failed update leaves the entry intact.
        time_period = TimePeriod(start_time, end_time)
        room = normalize_room_number(room_number)

        self.subject_id = subject_id
        self.teacher_id = teacher_id
        self.time_period = time_period
        self.room_number = room
        self.updated_at = _utcnow()

    def cancel(self) -> None:
        if self.is_deleted:
            raise EntryAlreadyCancelledError()
        self.is_deleted = True
        self.updated_at = _utcnow()
