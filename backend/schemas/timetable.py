from __future__ import annotations

import uuid
from datetime import timedelta
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from scheduling.availability import ConflictKind, SlotAvailabilityResult, SlotConflict
from scheduling.clock import format_clock, parse_clock
from scheduling.entry import ROOM_NUMBER_MAX_LENGTH, TimetableEntry
from scheduling.generator import GenerationResult
from scheduling.types import DayOfWeek, DistributionPolicy


def _parse_day(v):
    try:
        return DayOfWeek.parse(v)
    except ValueError as exc:
        raise ValueError(str(exc)) from exc


def _check_clock(v: str) -> str:
    parse_clock(v)
    return v.strip()


class GenerateTimetableRequest(BaseModel):
    """Generation options; omitted fields fall back to the configured defaults."""

    working_days: list[DayOfWeek] | None = None
    periods_per_day: int | None = Field(default=None, ge=1, le=10)
    period_duration: int | None = Field(default=None, ge=30, le=120)
    break_after_period: int | None = Field(default=None, ge=0)
    break_duration: int | None = Field(default=None, ge=15, le=60)
    school_start_time: str | None = None
    policy: DistributionPolicy = DistributionPolicy.ROUND_ROBIN

    @field_validator("working_days", mode="before")
    @classmethod
    def _parse_working_days(cls, v):
        if v is None:
            return None
        return [_parse_day(d) for d in v]

    @field_validator("working_days")
    @classmethod
    def _validate_working_days(cls, v: list[DayOfWeek] | None) -> list[DayOfWeek] | None:
        if v is None:
            return None
        if not v:
            raise ValueError("At least one working day must be specified")
        if DayOfWeek.SUNDAY in v:
            raise ValueError("Sunday cannot be a working day")
        if len(set(v)) != len(v):
            raise ValueError("Working days cannot contain duplicates")
        return v

    @field_validator("school_start_time")
    @classmethod
    def _validate_school_start_time(cls, v: str | None) -> str | None:
        if v is None:
            return None
        start = parse_clock(v)
        if start < timedelta(hours=6) or start > timedelta(hours=10):
            raise ValueError("School start time must be between 06:00 and 10:00")
        return format_clock(start)


class SkippedSlotOut(BaseModel):
    day_of_week: str
    period_number: int
    subject_name: str
    reason: str


class TimetableEntryOut(BaseModel):
    id: uuid.UUID
    section_id: uuid.UUID
    subject_id: uuid.UUID
    teacher_id: uuid.UUID
    day_of_week: str
    period_number: int
    start_time: str
    end_time: str
    room_number: str

    @classmethod
    def from_entry(cls, entry: TimetableEntry) -> "TimetableEntryOut":
        return cls(
            id=entry.id,
            section_id=entry.section_id,
            subject_id=entry.subject_id,
            teacher_id=entry.teacher_id,
            day_of_week=entry.day_of_week.name,
            period_number=entry.period_number,
            start_time=format_clock(entry.start_time),
            end_time=format_clock(entry.end_time),
            room_number=entry.room_number,
        )


class GenerateTimetableResponse(BaseModel):
    section_id: uuid.UUID
    message: str
    total_entries_created: int
    entries_skipped: int
    skipped_slots: list[SkippedSlotOut] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    entries: list[TimetableEntryOut] = Field(default_factory=list)

    @classmethod
    def from_result(cls, section_id: uuid.UUID, result: GenerationResult) -> "GenerateTimetableResponse":
        return cls(
            section_id=section_id,
            message=result.message,
            total_entries_created=result.entries_created,
            entries_skipped=result.entries_skipped,
            skipped_slots=[
                SkippedSlotOut(
                    day_of_week=s.day_of_week.name,
                    period_number=s.period_number,
                    subject_name=s.subject_name,
                    reason=s.reason,
                )
                for s in result.skipped_slots
            ],
            warnings=list(result.warnings),
            entries=[TimetableEntryOut.from_entry(e) for e in result.new_entries],
        )


class SlotAvailabilityQuery(BaseModel):
    section_id: uuid.UUID
    teacher_id: uuid.UUID
    room_number: str | None = Field(default=None, max_length=ROOM_NUMBER_MAX_LENGTH)
    day_of_week: DayOfWeek
    period_number: int = Field(ge=1, le=10)

    @field_validator("day_of_week", mode="before")
    @classmethod
    def _parse_day_of_week(cls, v):
        return _parse_day(v)

    @field_validator("day_of_week")
    @classmethod
    def _not_sunday(cls, v: DayOfWeek) -> DayOfWeek:
        if v == DayOfWeek.SUNDAY:
            raise ValueError("Cannot schedule classes on Sunday")
        return v


class ConflictInfo(BaseModel):
    has_conflict: bool = True
    conflict_type: Literal["SECTION", "TEACHER", "ROOM"]
    conflicting_entry_id: uuid.UUID
    conflict_details: str
    conflicting_section_id: uuid.UUID | None = None
    conflicting_teacher_id: uuid.UUID | None = None
    conflicting_subject_id: uuid.UUID | None = None
    conflicting_room_number: str | None = None
    time_slot: str

    @classmethod
    def from_conflict(cls, conflict: SlotConflict) -> "ConflictInfo":
        return cls(
            conflict_type=conflict.kind.value,
            conflicting_entry_id=conflict.entry_id,
            conflict_details=conflict.description,
            conflicting_section_id=conflict.section_id,
            conflicting_teacher_id=conflict.teacher_id,
            conflicting_subject_id=conflict.subject_id,
            conflicting_room_number=conflict.room_number,
            time_slot=f"{format_clock(conflict.start_time)} - {format_clock(conflict.end_time)}",
        )


class SlotAvailabilityOut(BaseModel):
    section_id: uuid.UUID
    teacher_id: uuid.UUID
    room_number: str | None = None
    day_of_week: str
    period_number: int
    is_available: bool
    message: str
    section_conflict: ConflictInfo | None = None
    teacher_conflict: ConflictInfo | None = None
    room_conflict: ConflictInfo | None = None
    conflicts: list[str] = Field(default_factory=list)

    @classmethod
    def from_result(cls, query: SlotAvailabilityQuery, result: SlotAvailabilityResult) -> "SlotAvailabilityOut":
        def _info(kind: ConflictKind) -> ConflictInfo | None:
            c = result.conflict_for(kind)
            return ConflictInfo.from_conflict(c) if c is not None else None

        return cls(
            section_id=query.section_id,
            teacher_id=query.teacher_id,
            room_number=query.room_number,
            day_of_week=query.day_of_week.name,
            period_number=query.period_number,
            is_available=result.can_schedule,
            message=result.message,
            section_conflict=_info(ConflictKind.SECTION),
            teacher_conflict=_info(ConflictKind.TEACHER),
            room_conflict=_info(ConflictKind.ROOM),
            conflicts=[f"{c.kind.label}: {c.description}" for c in result.conflicts],
        )


class TimetableEntryCreate(BaseModel):
    section_id: uuid.UUID
    subject_id: uuid.UUID
    teacher_id: uuid.UUID
    day_of_week: DayOfWeek
    period_number: int = Field(ge=1, le=10)
    start_time: str
    end_time: str
    room_number: str = Field(min_length=1, max_length=ROOM_NUMBER_MAX_LENGTH)

    @field_validator("day_of_week", mode="before")
    @classmethod
    def _parse_day_of_week(cls, v):
        return _parse_day(v)

    @field_validator("start_time", "end_time")
    @classmethod
    def _validate_clock(cls, v: str) -> str:
        return _check_clock(v)

    @model_validator(mode="after")
    def _check_interval(self) -> "TimetableEntryCreate":
        if parse_clock(self.start_time) >= parse_clock(self.end_time):
            raise ValueError("Start time must be before end time")
        return self


class TimetableEntryUpdate(BaseModel):
    subject_id: uuid.UUID
    teacher_id: uuid.UUID
    start_time: str
    end_time: str
    room_number: str = Field(min_length=1, max_length=ROOM_NUMBER_MAX_LENGTH)

    @field_validator("start_time", "end_time")
    @classmethod
    def _validate_clock(cls, v: str) -> str:
        return _check_clock(v)

    @model_validator(mode="after")
    def _check_interval(self) -> "TimetableEntryUpdate":
        start, end = parse_clock(self.start_time), parse_clock(self.end_time)
        if start >= end:
            raise ValueError("Start time must be before end time")
        if end - start < timedelta(minutes=30):
            raise ValueError("Period duration must be at least 30 minutes")
        return self


class EntryCancelledOut(BaseModel):
    id: uuid.UUID
    message: str = "Timetable entry deleted successfully"


class SectionTimetableClearedOut(BaseModel):
    section_id: uuid.UUID
    deleted_count: int
    message: str
