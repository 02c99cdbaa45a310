from __future__ import annotations

import uuid

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Integer, UniqueConstraint, Uuid
from sqlalchemy.sql import func

from models.base import Base


class SectionSubject(Base):
    __tablename__ = "section_subjects"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    section_id = Column(Uuid, ForeignKey("sections.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(Uuid, ForeignKey("subjects.id"), nullable=False)
    teacher_id = Column(Uuid, ForeignKey("teachers.id"), nullable=False)
    weekly_periods = Column(Integer, nullable=False, default=0)
    is_mandatory = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint("weekly_periods >= 0", name="ck_section_subjects_weekly_periods"),
        UniqueConstraint("section_id", "subject_id", name="uq_section_subjects_section_subject"),
    )
