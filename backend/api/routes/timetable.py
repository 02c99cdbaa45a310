from __future__ import annotations

import logging
import uuid
from datetime import time

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from api.deps import get_slot_orchestrator
from core.config import settings
from core.db import get_db
from models.section import Section
from models.teacher import Teacher
from scheduling.availability import SlotAvailabilityRequest
from scheduling.clock import parse_clock
from scheduling.orchestrator import SlotAvailabilityOrchestrator
from scheduling.types import DayOfWeek, GenerationOptions
from schemas.timetable import (
    EntryCancelledOut,
    GenerateTimetableRequest,
    GenerateTimetableResponse,
    SectionTimetableClearedOut,
    SlotAvailabilityOut,
    SlotAvailabilityQuery,
    TimetableEntryCreate,
    TimetableEntryOut,
    TimetableEntryUpdate,
)
from services import timetable_repository as repo
from services.timetable_service import (
    EntryChanges,
    EntryNotFoundError,
    NewEntry,
    SectionNotFoundError,
    cancel_entry,
    clear_section_timetable,
    create_entry,
    generate_section_timetable,
    get_entry,
    update_entry,
)


logger = logging.getLogger(__name__)


router = APIRouter()


MAX_SCHOOL_DAY_MINUTES = 12 * 60


def _build_generation_options(payload: GenerateTimetableRequest) -> GenerationOptions:
    working_days = payload.working_days or [DayOfWeek.parse(d) for d in settings.working_day_names]
    periods_per_day = payload.periods_per_day or settings.default_periods_per_day
    period_duration = payload.period_duration or settings.default_period_duration
    break_after_period = (
        payload.break_after_period if payload.break_after_period is not None else settings.default_break_after_period
    )
    break_duration = payload.break_duration if payload.break_duration is not None else settings.default_break_duration
    start = parse_clock(payload.school_start_time or settings.default_school_start_time)

    if break_after_period > periods_per_day:
        raise HTTPException(status_code=422, detail="BREAK_AFTER_PERIOD_OUT_OF_RANGE")
    if periods_per_day * period_duration + break_duration > MAX_SCHOOL_DAY_MINUTES:
        raise HTTPException(status_code=422, detail="SCHOOL_DAY_TOO_LONG")

    hours, minutes = divmod(int(start.total_seconds() // 60), 60)
    return GenerationOptions(
        working_days=tuple(working_days),
        periods_per_day=periods_per_day,
        period_duration=period_duration,
        break_after_period=break_after_period,
        break_duration=break_duration,
        school_start_time=time(hours, minutes),
        policy=payload.policy,
    )


@router.post("/sections/{section_id}/generate", response_model=GenerateTimetableResponse)
def generate_for_section(
    section_id: uuid.UUID,
    payload: GenerateTimetableRequest,
    db: Session = Depends(get_db),
) -> GenerateTimetableResponse:
    options = _build_generation_options(payload)
    try:
        result = generate_section_timetable(db, section_id=section_id, options=options)
    except SectionNotFoundError:
        raise HTTPException(status_code=404, detail="SECTION_NOT_FOUND")
    except Exception:
        db.rollback()
        raise
    return GenerateTimetableResponse.from_result(section_id, result)


@router.post("/availability", response_model=SlotAvailabilityOut)
async def check_slot_availability(
    payload: SlotAvailabilityQuery,
    orchestrator: SlotAvailabilityOrchestrator = Depends(get_slot_orchestrator),
) -> SlotAvailabilityOut:
    logger.info(
        "Checking slot availability section=%s teacher=%s room=%s %s P%s",
        payload.section_id,
        payload.teacher_id,
        payload.room_number,
        payload.day_of_week.name,
        payload.period_number,
    )
    request = SlotAvailabilityRequest(
        section_id=payload.section_id,
        teacher_id=payload.teacher_id,
        room_number=payload.room_number,
        day_of_week=payload.day_of_week,
        period_number=payload.period_number,
    )
    result = await orchestrator.check_availability(request)
    return SlotAvailabilityOut.from_result(payload, result)


@router.post("/entries", response_model=TimetableEntryOut, status_code=201)
async def create_timetable_entry(
    payload: TimetableEntryCreate,
    db: Session = Depends(get_db),
    orchestrator: SlotAvailabilityOrchestrator = Depends(get_slot_orchestrator),
) -> TimetableEntryOut:
    entry = await create_entry(
        db,
        orchestrator,
        NewEntry(
            section_id=payload.section_id,
            subject_id=payload.subject_id,
            teacher_id=payload.teacher_id,
            day_of_week=payload.day_of_week,
            period_number=payload.period_number,
            start_time=parse_clock(payload.start_time),
            end_time=parse_clock(payload.end_time),
            room_number=payload.room_number,
        ),
    )
    return TimetableEntryOut.from_entry(entry)


@router.put("/entries/{entry_id}", response_model=TimetableEntryOut)
async def update_timetable_entry(
    entry_id: uuid.UUID,
    payload: TimetableEntryUpdate,
    db: Session = Depends(get_db),
    orchestrator: SlotAvailabilityOrchestrator = Depends(get_slot_orchestrator),
) -> TimetableEntryOut:
    try:
        entry = await update_entry(
            db,
            orchestrator,
            entry_id,
            EntryChanges(
                subject_id=payload.subject_id,
                teacher_id=payload.teacher_id,
                start_time=parse_clock(payload.start_time),
                end_time=parse_clock(payload.end_time),
                room_number=payload.room_number,
            ),
        )
    except EntryNotFoundError:
        raise HTTPException(status_code=404, detail="ENTRY_NOT_FOUND")
    return TimetableEntryOut.from_entry(entry)


@router.get("/section/{section_id}", response_model=list[TimetableEntryOut])
def get_section_timetable(
    section_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> list[TimetableEntryOut]:
    if db.get(Section, section_id) is None:
        raise HTTPException(status_code=404, detail="SECTION_NOT_FOUND")
    return [TimetableEntryOut.from_entry(e) for e in repo.list_section_entries(db, section_id)]


@router.get("/teacher/{teacher_id}", response_model=list[TimetableEntryOut])
def get_teacher_timetable(
    teacher_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> list[TimetableEntryOut]:
    if db.get(Teacher, teacher_id) is None:
        raise HTTPException(status_code=404, detail="TEACHER_NOT_FOUND")
    return [TimetableEntryOut.from_entry(e) for e in repo.list_teacher_entries(db, teacher_id)]


@router.get("/section/{section_id}/days/{day_of_week}", response_model=list[TimetableEntryOut])
def get_section_day_schedule(
    section_id: uuid.UUID,
    day_of_week: str,
    db: Session = Depends(get_db),
) -> list[TimetableEntryOut]:
    try:
        day = DayOfWeek.parse(day_of_week)
    except ValueError:
        raise HTTPException(status_code=422, detail="INVALID_DAY_OF_WEEK")
    if db.get(Section, section_id) is None:
        raise HTTPException(status_code=404, detail="SECTION_NOT_FOUND")
    return [TimetableEntryOut.from_entry(e) for e in repo.list_section_day_entries(db, section_id, day)]


@router.get("/entries/{entry_id}", response_model=TimetableEntryOut)
def get_timetable_entry(
    entry_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> TimetableEntryOut:
    try:
        entry = get_entry(db, entry_id)
    except EntryNotFoundError:
        raise HTTPException(status_code=404, detail="ENTRY_NOT_FOUND")
    return TimetableEntryOut.from_entry(entry)


@router.delete("/entries/{entry_id}", response_model=EntryCancelledOut)
def cancel_timetable_entry(
    entry_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> EntryCancelledOut:
    try:
        entry = cancel_entry(db, entry_id)
    except EntryNotFoundError:
        raise HTTPException(status_code=404, detail="ENTRY_NOT_FOUND")
    return EntryCancelledOut(id=entry.id)


@router.delete("/sections/{section_id}", response_model=SectionTimetableClearedOut)
def clear_section(
    section_id: uuid.UUID,
    db: Session = Depends(get_db),
) -> SectionTimetableClearedOut:
    try:
        count = clear_section_timetable(db, section_id)
    except SectionNotFoundError:
        raise HTTPException(status_code=404, detail="SECTION_NOT_FOUND")
    except Exception:
        db.rollback()
        raise
    return SectionTimetableClearedOut(
        section_id=section_id,
        deleted_count=count,
        message=f"Deleted {count} timetable entries.",
    )
