from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from scheduling.availability import SlotAvailabilityRequest, SlotAvailabilityResult
from scheduling.entry import TimetableEntry
from scheduling.errors import TimetableConflictError
from scheduling.generator import GenerationResult, generate_timetable
from scheduling.orchestrator import SlotAvailabilityOrchestrator
from scheduling.types import DayOfWeek, GenerationOptions
from services import timetable_repository as repo


logger = logging.getLogger(__name__)


CONCURRENT_SLOT_CHANGE = "Time slot was taken by a concurrent change; reload the timetable and retry"


class SectionNotFoundError(LookupError):
    pass


class EntryNotFoundError(LookupError):
    pass


@dataclass(frozen=True)
class NewEntry:
    section_id: uuid.UUID
    subject_id: uuid.UUID
    teacher_id: uuid.UUID
    day_of_week: DayOfWeek
    period_number: int
    start_time: timedelta
    end_time: timedelta
    room_number: str


@dataclass(frozen=True)
class EntryChanges:
    subject_id: uuid.UUID
    teacher_id: uuid.UUID
    start_time: timedelta
    end_time: timedelta
    room_number: str


def _commit(db: Session) -> None:
    # The unique (section, day, period) index is the last line against double-booking.
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.info("Timetable commit rejected by slot constraint: %s", exc.orig)
        raise TimetableConflictError(CONCURRENT_SLOT_CHANGE) from exc


def generate_section_timetable(db: Session, *, section_id: uuid.UUID, options: GenerationOptions) -> GenerationResult:
    """Load a section's inputs, run the generation sweep and persist what it created."""

    section = repo.load_section(db, section_id)
    if section is None:
        raise SectionNotFoundError(str(section_id))

    subjects = repo.load_section_subjects(db, section_id)
    existing = repo.list_section_entries(db, section_id)

    result = generate_timetable(section, subjects, existing, options)

    repo.add_entries(db, result.new_entries)
    _commit(db)

    if result.warnings:
        logger.warning(
            "Timetable generation for section=%s finished with %d warning(s): %s",
            section_id,
            len(result.warnings),
            "; ".join(result.warnings),
        )
    return result


def _raise_on_conflicts(result: SlotAvailabilityResult) -> None:
    if result.can_schedule:
        return
    raise TimetableConflictError(
        "; ".join(f"{c.kind.label}: {c.description}" for c in result.conflicts),
        conflicts=result.conflicts,
    )


def _slot_request(entry: TimetableEntry) -> SlotAvailabilityRequest:
    return SlotAvailabilityRequest(
        section_id=entry.section_id,
        teacher_id=entry.teacher_id,
        room_number=entry.room_number,
        day_of_week=entry.day_of_week,
        period_number=entry.period_number,
    )


async def create_entry(
    db: Session,
    orchestrator: SlotAvailabilityOrchestrator,
    data: NewEntry,
) -> TimetableEntry:
    """Manually place one entry after checking section, teacher and room availability."""

    logger.info(
        "Creating timetable entry section=%s subject=%s %s P%s",
        data.section_id,
        data.subject_id,
        DayOfWeek(data.day_of_week).name,
        data.period_number,
    )

    # Construct first so malformed input is rejected before touching storage.
    entry = TimetableEntry.create(
        data.section_id,
        data.subject_id,
        data.teacher_id,
        data.day_of_week,
        data.period_number,
        data.start_time,
        data.end_time,
        data.room_number,
    )

    result = await orchestrator.check_availability(_slot_request(entry))
    _raise_on_conflicts(result)

    await run_in_threadpool(_persist_new_entry, db, entry)
    logger.info("Timetable entry %s created", entry.id)
    return entry


def _persist_new_entry(db: Session, entry: TimetableEntry) -> None:
    repo.add_entries(db, [entry])
    _commit(db)


async def update_entry(
    db: Session,
    orchestrator: SlotAvailabilityOrchestrator,
    entry_id: uuid.UUID,
    changes: EntryChanges,
) -> TimetableEntry:
    """Change subject, teacher, time or room of an entry, keeping its slot."""

    row = await run_in_threadpool(repo.get_entry_row, db, entry_id)
    if row is None:
        raise EntryNotFoundError(str(entry_id))

    entry = repo.row_to_entry(row)
    entry.update_schedule(
        changes.subject_id,
        changes.teacher_id,
        changes.start_time,
        changes.end_time,
        changes.room_number,
    )

    # The entry still occupies its own slot in storage; look past it.
    result = await orchestrator.check_availability(_slot_request(entry), exclude_entry_id=entry.id)
    _raise_on_conflicts(result)

    await run_in_threadpool(_persist_changes, db, row, entry)
    logger.info("Timetable entry %s updated", entry.id)
    return entry


def _persist_changes(db: Session, row, entry: TimetableEntry) -> None:
    repo.copy_entry_to_row(entry, row)
    _commit(db)


def get_entry(db: Session, entry_id: uuid.UUID) -> TimetableEntry:
    row = repo.get_entry_row(db, entry_id)
    if row is None:
        raise EntryNotFoundError(str(entry_id))
    return repo.row_to_entry(row)


def cancel_entry(db: Session, entry_id: uuid.UUID) -> TimetableEntry:
    """Soft-delete one entry; its slot becomes free for new entries."""

    row = repo.get_entry_row(db, entry_id, include_deleted=True)
    if row is None:
        raise EntryNotFoundError(str(entry_id))

    entry = repo.row_to_entry(row)
    entry.cancel()
    repo.copy_entry_to_row(entry, row)
    db.commit()
    logger.info("Timetable entry %s cancelled", entry.id)
    return entry


def clear_section_timetable(db: Session, section_id: uuid.UUID) -> int:
    """Cancel every active entry of a section. Returns how many were cancelled."""

    if repo.load_section(db, section_id) is None:
        raise SectionNotFoundError(str(section_id))

    rows = repo.list_section_rows(db, section_id)
    for row in rows:
        entry = repo.row_to_entry(row)
        entry.cancel()
        repo.copy_entry_to_row(entry, row)
    db.commit()
    logger.info("Cleared timetable of section=%s (%d entries cancelled)", section_id, len(rows))
    return len(rows)
