from __future__ import annotations

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Protocol

from scheduling.availability import SlotAvailabilityRequest, SlotAvailabilityResult, check_availability
from scheduling.entry import TimetableEntry
from scheduling.types import DayOfWeek


logger = logging.getLogger(__name__)


class SlotLookup(Protocol):
    """Read access to stored entries, one method per conflict dimension.

    `exclude_entry_id` hides one entry from the lookup, so an entry being
    edited never masks another occupant of the same slot.
    """

    async def find_section_entry(
        self,
        section_id: uuid.UUID,
        day_of_week: DayOfWeek,
        period_number: int,
        exclude_entry_id: uuid.UUID | None = None,
    ) -> TimetableEntry | None: ...

    async def find_teacher_entry(
        self,
        teacher_id: uuid.UUID,
        day_of_week: DayOfWeek,
        period_number: int,
        exclude_entry_id: uuid.UUID | None = None,
    ) -> TimetableEntry | None: ...

    async def find_room_entry(
        self,
        room_number: str,
        day_of_week: DayOfWeek,
        period_number: int,
        exclude_entry_id: uuid.UUID | None = None,
    ) -> TimetableEntry | None: ...


class SlotAvailabilityOrchestrator:
    """Run the three slot lookups against one storage handle, then judge the slot.

    The handle (typically wrapping a single database session) is not safe for
    concurrent use, so it is checked out for the whole call and the lookups run
    strictly one after another: section, teacher, then room when the request
    names one. Concurrent calls on the same orchestrator wait for the handle.
    """

    def __init__(self, lookup: SlotLookup):
        self._lookup = lookup
        self._handle_lock = asyncio.Lock()

    @asynccontextmanager
    async def _checkout(self) -> AsyncIterator[SlotLookup]:
        async with self._handle_lock:
            yield self._lookup

    async def check_availability(
        self,
        request: SlotAvailabilityRequest,
        *,
        exclude_entry_id: uuid.UUID | None = None,
    ) -> SlotAvailabilityResult:
        day, period = request.day_of_week, request.period_number
        async with self._checkout() as lookup:
            section_entry = await lookup.find_section_entry(request.section_id, day, period, exclude_entry_id)
            teacher_entry = await lookup.find_teacher_entry(request.teacher_id, day, period, exclude_entry_id)
            room_entry = None
            if request.has_room:
                room_entry = await lookup.find_room_entry(request.room_number, day, period, exclude_entry_id)

        result = check_availability(request, section_entry, teacher_entry, room_entry)
        logger.debug(
            "Slot check section=%s teacher=%s room=%s %s P%s -> can_schedule=%s conflicts=%d",
            request.section_id,
            request.teacher_id,
            request.room_number,
            day.name,
            period,
            result.can_schedule,
            len(result.conflicts),
        )
        return result
