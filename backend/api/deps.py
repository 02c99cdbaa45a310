from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from core.db import get_db
from scheduling.orchestrator import SlotAvailabilityOrchestrator
from services.slot_lookup import SqlSlotLookup


def get_slot_orchestrator(db: Session = Depends(get_db)) -> SlotAvailabilityOrchestrator:
    """One orchestrator per request, owning the request's session for its lookups."""

    return SlotAvailabilityOrchestrator(SqlSlotLookup(db))
