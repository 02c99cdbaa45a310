from __future__ import annotations

import uuid

import pytest
from sqlalchemy.exc import IntegrityError

from core.db import ENGINE, SessionLocal, init_db
from models.base import Base
from models.section import Section
from models.subject import Subject
from models.teacher import Teacher
from scheduling.types import DayOfWeek
from services import timetable_repository as repo
from tests.factories import make_entry


@pytest.fixture
def db():
    init_db(ENGINE)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(ENGINE)


@pytest.fixture
def refs(db) -> dict:
    section = Section(code="8A", name="Grade 8 A", room_number="R-201")
    subject = Subject(code="CHEM", name="Chemistry")
    teachers = [Teacher(code="T9", full_name="C. Iyer"), Teacher(code="T10", full_name="D. Kaur")]
    db.add_all([section, subject, *teachers])
    db.commit()
    return {"section_id": section.id, "subject_id": subject.id, "teachers": [t.id for t in teachers]}


def _entry(refs: dict, teacher: int = 0, **kwargs):
    return make_entry(
        section_id=refs["section_id"],
        subject_id=refs["subject_id"],
        teacher_id=refs["teachers"][teacher],
        **kwargs,
    )


def test_section_slot_holds_one_active_entry(db, refs):
    repo.add_entries(db, [_entry(refs, room="R-201")])
    db.commit()

    repo.add_entries(db, [_entry(refs, teacher=1, room="R-202")])
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()

    assert len(repo.list_section_entries(db, refs["section_id"])) == 1


def test_cancelled_entry_releases_the_slot(db, refs):
    first = _entry(refs)
    repo.add_entries(db, [first])
    db.commit()

    row = repo.get_entry_row(db, first.id)
    first.cancel()
    repo.copy_entry_to_row(first, row)
    db.commit()

    repo.add_entries(db, [_entry(refs, teacher=1)])
    db.commit()

    assert [e.teacher_id for e in repo.list_section_entries(db, refs["section_id"])] == [refs["teachers"][1]]
    assert repo.get_entry_row(db, first.id) is None
    assert repo.get_entry_row(db, first.id, include_deleted=True) is not None


def test_slot_lookups_can_skip_one_entry(db, refs):
    older = _entry(refs, day=DayOfWeek.TUESDAY, period=3)
    repo.add_entries(db, [older])
    db.commit()

    found = repo.find_teacher_entry(db, refs["teachers"][0], DayOfWeek.TUESDAY, 3)
    assert found is not None and found.id == older.id
    assert repo.find_teacher_entry(db, refs["teachers"][0], DayOfWeek.TUESDAY, 3, older.id) is None
    assert repo.find_section_entry(db, refs["section_id"], DayOfWeek.TUESDAY, 3, uuid.uuid4()).id == older.id
