from __future__ import annotations

import logging
from typing import Iterable

from scheduling.entry import TimetableEntry
from scheduling.types import DayOfWeek


logger = logging.getLogger(__name__)


SlotKey = tuple[DayOfWeek, int]


class ConflictIndex:
    """Existing entries of one section keyed by (day, period)."""

    def __init__(self, entries: Iterable[TimetableEntry] = ()):
        self._by_slot: dict[SlotKey, TimetableEntry] = {}
        for entry in entries:
            key = (DayOfWeek(entry.day_of_week), int(entry.period_number))
            if key in self._by_slot:
                # First occupant wins; a duplicate means the stored data already breaks the slot invariant.
                logger.warning(
                    "Duplicate timetable entry for slot day=%s period=%s (kept=%s ignored=%s)",
                    key[0].name,
                    key[1],
                    self._by_slot[key].id,
                    entry.id,
                )
                continue
            self._by_slot[key] = entry

    def occupant(self, day: DayOfWeek, period: int) -> TimetableEntry | None:
        return self._by_slot.get((day, period))
