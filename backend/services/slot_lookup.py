from __future__ import annotations

import uuid

from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from scheduling.entry import TimetableEntry
from scheduling.types import DayOfWeek
from services import timetable_repository as repo


class SqlSlotLookup:
    """`SlotLookup` over one request-scoped SQLAlchemy session.

    Each query runs in Starlette's threadpool so the event loop is not blocked;
    the session itself is only ever touched by one query at a time.
    """

    def __init__(self, db: Session):
        self._db = db

    async def find_section_entry(
        self,
        section_id: uuid.UUID,
        day_of_week: DayOfWeek,
        period_number: int,
        exclude_entry_id: uuid.UUID | None = None,
    ) -> TimetableEntry | None:
        return await run_in_threadpool(
            repo.find_section_entry, self._db, section_id, day_of_week, period_number, exclude_entry_id
        )

    async def find_teacher_entry(
        self,
        teacher_id: uuid.UUID,
        day_of_week: DayOfWeek,
        period_number: int,
        exclude_entry_id: uuid.UUID | None = None,
    ) -> TimetableEntry | None:
        return await run_in_threadpool(
            repo.find_teacher_entry, self._db, teacher_id, day_of_week, period_number, exclude_entry_id
        )

    async def find_room_entry(
        self,
        room_number: str,
        day_of_week: DayOfWeek,
        period_number: int,
        exclude_entry_id: uuid.UUID | None = None,
    ) -> TimetableEntry | None:
        return await run_in_threadpool(
            repo.find_room_entry, self._db, room_number, day_of_week, period_number, exclude_entry_id
        )
