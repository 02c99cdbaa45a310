from __future__ import annotations

import uuid
from datetime import timedelta
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from models.section import Section
from models.section_subject import SectionSubject
from models.subject import Subject
from models.teacher import Teacher
from models.timetable_entry import TimetableEntry as TimetableEntryRow
from scheduling.entry import TimePeriod, TimetableEntry
from scheduling.types import DayOfWeek, SectionInfo, SectionSubjectAssignment


def _minutes(value: timedelta) -> int:
    return int(value.total_seconds() // 60)


def row_to_entry(row: TimetableEntryRow) -> TimetableEntry:
    return TimetableEntry(
        id=row.id,
        section_id=row.section_id,
        subject_id=row.subject_id,
        teacher_id=row.teacher_id,
        day_of_week=DayOfWeek(int(row.day_of_week)),
        period_number=int(row.period_number),
        time_period=TimePeriod(timedelta(minutes=int(row.start_minute)), timedelta(minutes=int(row.end_minute))),
        room_number=str(row.room_number),
        is_deleted=bool(row.is_deleted),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def entry_to_row(entry: TimetableEntry) -> TimetableEntryRow:
    return TimetableEntryRow(
        id=entry.id,
        section_id=entry.section_id,
        subject_id=entry.subject_id,
        teacher_id=entry.teacher_id,
        day_of_week=int(entry.day_of_week),
        period_number=int(entry.period_number),
        start_minute=_minutes(entry.start_time),
        end_minute=_minutes(entry.end_time),
        room_number=entry.room_number,
        is_deleted=entry.is_deleted,
        created_at=entry.created_at,
        updated_at=entry.updated_at,
    )


def copy_entry_to_row(entry: TimetableEntry, row: TimetableEntryRow) -> None:
    row.subject_id = entry.subject_id
    row.teacher_id = entry.teacher_id
    row.start_minute = _minutes(entry.start_time)
    row.end_minute = _minutes(entry.end_time)
    row.room_number = entry.room_number
    row.is_deleted = entry.is_deleted
    row.updated_at = entry.updated_at


def _active_entries():
    return select(TimetableEntryRow).where(TimetableEntryRow.is_deleted.is_(False))


def load_section(db: Session, section_id: uuid.UUID) -> SectionInfo | None:
    section = db.get(Section, section_id)
    if section is None:
        return None
    return SectionInfo(id=section.id, room_number=section.room_number, code=section.code)


def load_section_subjects(db: Session, section_id: uuid.UUID) -> list[SectionSubjectAssignment]:
    q = (
        select(
            SectionSubject.subject_id,
            Subject.name.label("subject_name"),
            SectionSubject.teacher_id,
            Teacher.full_name.label("teacher_name"),
            SectionSubject.weekly_periods,
            SectionSubject.is_mandatory,
        )
        .select_from(SectionSubject)
        .join(Subject, Subject.id == SectionSubject.subject_id)
        .join(Teacher, Teacher.id == SectionSubject.teacher_id)
        .where(SectionSubject.section_id == section_id)
        .where(Subject.is_active.is_(True))
        .order_by(SectionSubject.created_at, Subject.code)
    )
    return [
        SectionSubjectAssignment(
            subject_id=r.subject_id,
            subject_name=str(r.subject_name),
            teacher_id=r.teacher_id,
            teacher_name=str(r.teacher_name),
            weekly_periods=int(r.weekly_periods or 0),
            is_mandatory=bool(r.is_mandatory),
        )
        for r in db.execute(q).all()
    ]


def list_section_entries(db: Session, section_id: uuid.UUID) -> list[TimetableEntry]:
    q = (
        _active_entries()
        .where(TimetableEntryRow.section_id == section_id)
        .order_by(TimetableEntryRow.day_of_week, TimetableEntryRow.period_number)
    )
    return [row_to_entry(r) for r in db.execute(q).scalars().all()]


def list_teacher_entries(db: Session, teacher_id: uuid.UUID) -> list[TimetableEntry]:
    q = (
        _active_entries()
        .where(TimetableEntryRow.teacher_id == teacher_id)
        .order_by(TimetableEntryRow.day_of_week, TimetableEntryRow.period_number)
    )
    return [row_to_entry(r) for r in db.execute(q).scalars().all()]


def list_section_day_entries(db: Session, section_id: uuid.UUID, day_of_week: DayOfWeek) -> list[TimetableEntry]:
    q = (
        _active_entries()
        .where(TimetableEntryRow.section_id == section_id)
        .where(TimetableEntryRow.day_of_week == int(day_of_week))
        .order_by(TimetableEntryRow.period_number)
    )
    return [row_to_entry(r) for r in db.execute(q).scalars().all()]


def list_section_rows(db: Session, section_id: uuid.UUID) -> list[TimetableEntryRow]:
    q = _active_entries().where(TimetableEntryRow.section_id == section_id)
    return list(db.execute(q).scalars().all())


def _first_at_slot(
    db: Session,
    q,
    day_of_week: DayOfWeek,
    period_number: int,
    exclude_entry_id: uuid.UUID | None,
) -> TimetableEntry | None:
    q = q.where(TimetableEntryRow.day_of_week == int(day_of_week)).where(
        TimetableEntryRow.period_number == int(period_number)
    )
    if exclude_entry_id is not None:
        q = q.where(TimetableEntryRow.id != exclude_entry_id)
    row = db.execute(q.order_by(TimetableEntryRow.created_at).limit(1)).scalars().first()
    return row_to_entry(row) if row is not None else None


def find_section_entry(
    db: Session,
    section_id: uuid.UUID,
    day_of_week: DayOfWeek,
    period_number: int,
    exclude_entry_id: uuid.UUID | None = None,
) -> TimetableEntry | None:
    q = _active_entries().where(TimetableEntryRow.section_id == section_id)
    return _first_at_slot(db, q, day_of_week, period_number, exclude_entry_id)


def find_teacher_entry(
    db: Session,
    teacher_id: uuid.UUID,
    day_of_week: DayOfWeek,
    period_number: int,
    exclude_entry_id: uuid.UUID | None = None,
) -> TimetableEntry | None:
    q = _active_entries().where(TimetableEntryRow.teacher_id == teacher_id)
    return _first_at_slot(db, q, day_of_week, period_number, exclude_entry_id)


def find_room_entry(
    db: Session,
    room_number: str,
    day_of_week: DayOfWeek,
    period_number: int,
    exclude_entry_id: uuid.UUID | None = None,
) -> TimetableEntry | None:
    # Stored room numbers are already in canonical (trimmed, upper-case) form.
    q = _active_entries().where(TimetableEntryRow.room_number == room_number)
    return _first_at_slot(db, q, day_of_week, period_number, exclude_entry_id)


def get_entry_row(db: Session, entry_id: uuid.UUID, *, include_deleted: bool = False) -> TimetableEntryRow | None:
    row = db.get(TimetableEntryRow, entry_id)
    if row is None or (row.is_deleted and not include_deleted):
        return None
    return row


def add_entries(db: Session, entries: Iterable[TimetableEntry]) -> int:
    count = 0
    for entry in entries:
        db.add(entry_to_row(entry))
        count += 1
    return count
