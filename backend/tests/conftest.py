from __future__ import annotations

import os
import uuid
from datetime import time

# Settings and the engine are built at import time; point them at in-memory SQLite first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

import pytest

from scheduling.types import GenerationOptions, SectionInfo, SectionSubjectAssignment, WEEKDAYS


@pytest.fixture
def section() -> SectionInfo:
    return SectionInfo(id=uuid.uuid4(), room_number="r-101", code="7A")


@pytest.fixture
def two_subjects() -> list[SectionSubjectAssignment]:
    return [
        SectionSubjectAssignment(
            subject_id=uuid.uuid4(),
            subject_name="Mathematics",
            teacher_id=uuid.uuid4(),
            teacher_name="A. Rao",
            weekly_periods=13,
        ),
        SectionSubjectAssignment(
            subject_id=uuid.uuid4(),
            subject_name="Physics",
            teacher_id=uuid.uuid4(),
            teacher_name="B. Sen",
            weekly_periods=12,
        ),
    ]


@pytest.fixture
def scenario_options() -> GenerationOptions:
    return GenerationOptions(
        working_days=WEEKDAYS,
        periods_per_day=6,
        period_duration=45,
        break_after_period=3,
        break_duration=30,
        school_start_time=time(8, 0),
    )
