from __future__ import annotations

import logging
import uuid
from collections.abc import Sequence
from dataclasses import dataclass

from scheduling.clock import compute_period_interval
from scheduling.conflict_index import ConflictIndex
from scheduling.entry import TimetableEntry
from scheduling.errors import (
    GenerationPreconditionError,
    InvalidPeriodCountError,
    InvalidPeriodDurationError,
    MissingRoomError,
    MissingSectionError,
    NoSubjectsError,
    NoWorkingDaysError,
    TimetableDomainError,
)
from scheduling.strategies import make_rotation
from scheduling.types import DayOfWeek, GenerationOptions, SectionInfo, SectionSubjectAssignment


logger = logging.getLogger(__name__)


MAX_PERIODS_PER_DAY = 10
MIN_PERIOD_DURATION = 30
MAX_PERIOD_DURATION = 120

SLOT_OCCUPIED_REASON = "Time slot already occupied"
UNKNOWN_SUBJECT = "Unknown"


@dataclass(frozen=True)
class SkippedSlot:
    day_of_week: DayOfWeek
    period_number: int
    subject_name: str
    reason: str


@dataclass(frozen=True)
class GenerationResult:
    new_entries: tuple[TimetableEntry, ...]
    skipped_slots: tuple[SkippedSlot, ...]
    entries_created: int
    entries_skipped: int
    warnings: tuple[str, ...]

    @property
    def message(self) -> str:
        text = f"Successfully created {self.entries_created} timetable entries."
        if self.entries_skipped > 0:
            text += f" Skipped {self.entries_skipped} time slots that are already occupied."
        return text


def validate_generation_input(
    section: SectionInfo | None,
    subjects: Sequence[SectionSubjectAssignment] | None,
    options: GenerationOptions,
) -> list[DayOfWeek]:
    if section is None:
        raise MissingSectionError()
    if not subjects:
        raise NoSubjectsError()
    if options.periods_per_day < 1 or options.periods_per_day > MAX_PERIODS_PER_DAY:
        raise InvalidPeriodCountError(options.periods_per_day, MAX_PERIODS_PER_DAY)
    if options.period_duration < MIN_PERIOD_DURATION or options.period_duration > MAX_PERIOD_DURATION:
        raise InvalidPeriodDurationError(options.period_duration, MIN_PERIOD_DURATION, MAX_PERIOD_DURATION)
    if section.room_number is None or not str(section.room_number).strip():
        raise MissingRoomError()
    if not options.working_days:
        raise NoWorkingDaysError()
    try:
        days = [DayOfWeek.parse(d) for d in options.working_days]
    except ValueError as exc:
        raise GenerationPreconditionError(str(exc)) from exc
    # A repeated day would place two entries in every one of its slots.
    if len(set(days)) != len(days):
        raise GenerationPreconditionError("Working days cannot contain duplicates")
    return days


def generate_timetable(
    section: SectionInfo | None,
    subjects: Sequence[SectionSubjectAssignment] | None,
    existing_entries: Sequence[TimetableEntry] | None,
    options: GenerationOptions,
) -> GenerationResult:
    """Fill every free (day, period) of one section's week.

    Preconditions raise a `GenerationPreconditionError` subclass before any
    slot is processed. Once the sweep starts it always completes: occupied
    slots are recorded as skipped and entries that fail domain validation are
    reported as warnings.
    """

    working_days = validate_generation_input(section, subjects, options)

    existing = list(existing_entries or ())
    index = ConflictIndex(existing)
    rotation = make_rotation(
        options.policy,
        subjects,
        already_scheduled=(e.subject_id for e in existing),
    )
    subject_names: dict[uuid.UUID, str] = {}
    for s in subjects:
        subject_names.setdefault(s.subject_id, s.subject_name)

    new_entries: list[TimetableEntry] = []
    skipped: list[SkippedSlot] = []
    warnings: list[str] = []

    for day in working_days:
        for period in range(1, options.periods_per_day + 1):
            if period == options.break_after_period:
                continue

            occupant = index.occupant(day, period)
            if occupant is not None:
                skipped.append(
                    SkippedSlot(
                        day_of_week=day,
                        period_number=period,
                        subject_name=subject_names.get(occupant.subject_id, UNKNOWN_SUBJECT),
                        reason=SLOT_OCCUPIED_REASON,
                    )
                )
                continue

            subject = rotation.next_subject()
            start, end = compute_period_interval(
                period,
                options.period_duration,
                options.break_after_period,
                options.break_duration,
                options.school_start_time,
            )
            try:
                entry = TimetableEntry.create(
                    section.id,
                    subject.subject_id,
                    subject.teacher_id,
                    day,
                    period,
                    start,
                    end,
                    section.room_number,
                )
            except TimetableDomainError as exc:
                logger.debug("Entry construction failed for section=%s %s P%s: %s", section.id, day.name, period, exc)
                warnings.append(f"Failed to create entry for {day.label} Period {period}: {exc.message}")
            else:
                new_entries.append(entry)
            rotation.advance(subject)

    total_slots = len(options.working_days) * (options.periods_per_day - 1)
    slots_per_subject = total_slots // len(subjects)
    if total_slots % len(subjects) != 0:
        warnings.append(
            f"Subjects may not be evenly distributed. Total slots: {total_slots}, "
            f"Subjects: {len(subjects)}, Average slots per subject: {slots_per_subject}"
        )

    logger.info(
        "Generated timetable for section=%s: created=%d skipped=%d warnings=%d",
        section.id,
        len(new_entries),
        len(skipped),
        len(warnings),
    )

    return GenerationResult(
        new_entries=tuple(new_entries),
        skipped_slots=tuple(skipped),
        entries_created=len(new_entries),
        entries_skipped=len(skipped),
        warnings=tuple(warnings),
    )
