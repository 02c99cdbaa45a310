from __future__ import annotations

import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, Integer, Text, Uuid, text
from sqlalchemy.sql import func

from models.base import Base


class TimetableEntry(Base):
    __tablename__ = "timetable_entries"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    section_id = Column(Uuid, ForeignKey("sections.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(Uuid, ForeignKey("subjects.id"), nullable=False)
    teacher_id = Column(Uuid, ForeignKey("teachers.id"), nullable=False)
    day_of_week = Column(Integer, nullable=False)
    period_number = Column(Integer, nullable=False)
    # Minutes from midnight; an end of 1440 (24:00) is valid.
    start_minute = Column(Integer, nullable=False)
    end_minute = Column(Integer, nullable=False)
    room_number = Column(Text, nullable=False)
    is_deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        CheckConstraint("day_of_week >= 0 and day_of_week <= 6", name="ck_timetable_entries_day"),
        CheckConstraint("period_number >= 1", name="ck_timetable_entries_period"),
        CheckConstraint("start_minute >= 0 and end_minute <= 1440", name="ck_timetable_entries_minutes"),
        # One active entry per section slot; cancelled rows do not hold the slot.
        Index(
            "ux_timetable_entries_section_slot",
            "section_id",
            "day_of_week",
            "period_number",
            unique=True,
            postgresql_where=text("is_deleted = false"),
            sqlite_where=text("is_deleted = 0"),
        ),
        Index("ix_timetable_entries_teacher_slot", "teacher_id", "day_of_week", "period_number"),
        Index("ix_timetable_entries_room_slot", "room_number", "day_of_week", "period_number"),
    )
