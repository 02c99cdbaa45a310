from __future__ import annotations

import uuid

import pytest
from fastapi.testclient import TestClient

from api.deps import get_slot_orchestrator
from core.db import ENGINE, SessionLocal, init_db
from main import app
from models.base import Base
from models.section import Section
from models.section_subject import SectionSubject
from models.subject import Subject
from models.teacher import Teacher
from scheduling.orchestrator import SlotAvailabilityOrchestrator


SCENARIO = {
    "working_days": ["MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY"],
    "periods_per_day": 6,
    "period_duration": 45,
    "break_after_period": 3,
    "break_duration": 30,
    "school_start_time": "08:00",
}


@pytest.fixture
def client():
    init_db(ENGINE)
    try:
        with TestClient(app) as c:
            yield c
    finally:
        Base.metadata.drop_all(ENGINE)


@pytest.fixture
def school(client) -> dict:
    """Two sections, two subjects and two teachers; section 7A takes both subjects."""

    with SessionLocal() as db:
        teachers = [Teacher(code="T1", full_name="A. Rao"), Teacher(code="T2", full_name="B. Sen")]
        subjects = [Subject(code="MATH", name="Mathematics"), Subject(code="PHY", name="Physics")]
        sec_a = Section(code="7A", name="Grade 7 A", room_number="R-101")
        sec_b = Section(code="7B", name="Grade 7 B", room_number="R-102")
        no_room = Section(code="7C", name="Grade 7 C", room_number=None)
        db.add_all([*teachers, *subjects, sec_a, sec_b, no_room])
        db.flush()
        for subject, teacher in zip(subjects, teachers):
            db.add(SectionSubject(section_id=sec_a.id, subject_id=subject.id, teacher_id=teacher.id, weekly_periods=12))
        db.add(SectionSubject(section_id=no_room.id, subject_id=subjects[0].id, teacher_id=teachers[0].id))
        db.commit()
        return {
            "section_a": sec_a.id,
            "section_b": sec_b.id,
            "section_no_room": no_room.id,
            "subjects": [s.id for s in subjects],
            "teachers": [t.id for t in teachers],
        }


def _entry_payload(school: dict, **overrides) -> dict:
    payload = {
        "section_id": str(school["section_b"]),
        "subject_id": str(school["subjects"][0]),
        "teacher_id": str(school["teachers"][0]),
        "day_of_week": "MONDAY",
        "period_number": 1,
        "start_time": "08:00",
        "end_time": "08:45",
        "room_number": "r-102",
    }
    payload.update({k: str(v) if isinstance(v, uuid.UUID) else v for k, v in overrides.items()})
    return payload


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"app": "ok", "database": "ok"}


def test_generate_fills_the_week_and_persists(client, school):
    section_id = school["section_a"]

    resp = client.post(f"/api/timetable/sections/{section_id}/generate", json=SCENARIO)

    assert resp.status_code == 200
    body = resp.json()
    assert body["total_entries_created"] == 25
    assert body["entries_skipped"] == 0
    assert body["message"] == "Successfully created 25 timetable entries."
    monday_p4 = next(e for e in body["entries"] if e["day_of_week"] == "MONDAY" and e["period_number"] == 4)
    assert (monday_p4["start_time"], monday_p4["end_time"]) == ("10:15", "11:00")

    stored = client.get(f"/api/timetable/section/{section_id}").json()
    assert len(stored) == 25
    assert stored[0]["day_of_week"] == "MONDAY" and stored[0]["period_number"] == 1


def test_second_generation_skips_every_slot(client, school):
    section_id = school["section_a"]
    client.post(f"/api/timetable/sections/{section_id}/generate", json=SCENARIO)

    body = client.post(f"/api/timetable/sections/{section_id}/generate", json=SCENARIO).json()

    assert body["total_entries_created"] == 0
    assert body["entries_skipped"] == 25
    first = body["skipped_slots"][0]
    assert first == {
        "day_of_week": "MONDAY",
        "period_number": 1,
        "subject_name": "Mathematics",
        "reason": "Time slot already occupied",
    }


def test_generate_uses_configured_defaults(client, school):
    resp = client.post(f"/api/timetable/sections/{school['section_a']}/generate", json={})

    assert resp.status_code == 200
    # 5 weekdays x 8 periods, period 4 is the break.
    assert resp.json()["total_entries_created"] == 35


def test_generate_unknown_section(client, school):
    resp = client.post(f"/api/timetable/sections/{uuid.uuid4()}/generate", json=SCENARIO)
    assert resp.status_code == 404
    assert resp.json()["detail"] == "SECTION_NOT_FOUND"


def test_generate_section_without_room(client, school):
    resp = client.post(f"/api/timetable/sections/{school['section_no_room']}/generate", json=SCENARIO)
    assert resp.status_code == 422
    assert resp.json()["code"] == "SECTION_ROOM_REQUIRED"


def test_generate_section_without_subjects(client, school):
    resp = client.post(f"/api/timetable/sections/{school['section_b']}/generate", json=SCENARIO)
    assert resp.status_code == 422
    assert resp.json()["code"] == "NO_SUBJECTS"


@pytest.mark.parametrize(
    "overrides",
    [
        {"working_days": ["MONDAY", "SUNDAY"]},
        {"working_days": ["MONDAY", "MONDAY"]},
        {"periods_per_day": 11},
        {"period_duration": 20},
        {"break_duration": 90},
        {"school_start_time": "05:30"},
    ],
)
def test_generate_request_validation(client, school, overrides):
    resp = client.post(f"/api/timetable/sections/{school['section_a']}/generate", json={**SCENARIO, **overrides})
    assert resp.status_code == 422


def test_generate_break_outside_day(client, school):
    payload = {**SCENARIO, "break_after_period": 7}
    resp = client.post(f"/api/timetable/sections/{school['section_a']}/generate", json=payload)
    assert resp.status_code == 422
    assert resp.json()["detail"] == "BREAK_AFTER_PERIOD_OUT_OF_RANGE"


def test_availability_reports_teacher_conflict(client, school):
    created = client.post("/api/timetable/entries", json=_entry_payload(school))
    assert created.status_code == 201

    resp = client.post(
        "/api/timetable/availability",
        json={
            "section_id": str(school["section_a"]),
            "teacher_id": str(school["teachers"][0]),
            "room_number": "R-101",
            "day_of_week": "monday",
            "period_number": 1,
        },
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["is_available"] is False
    assert body["section_conflict"] is None
    assert body["room_conflict"] is None
    assert body["teacher_conflict"]["conflicting_entry_id"] == created.json()["id"]
    assert body["teacher_conflict"]["time_slot"] == "08:00 - 08:45"
    assert len(body["conflicts"]) == 1
    assert body["conflicts"][0].startswith("Teacher: ")
    assert body["message"] == "Time slot has conflicts: teacher"


def test_availability_free_slot(client, school):
    resp = client.post(
        "/api/timetable/availability",
        json={
            "section_id": str(school["section_a"]),
            "teacher_id": str(school["teachers"][1]),
            "day_of_week": "TUESDAY",
            "period_number": 2,
        },
    )
    assert resp.status_code == 200
    assert resp.json()["is_available"] is True
    assert resp.json()["conflicts"] == []


def test_availability_rejects_sunday(client, school):
    resp = client.post(
        "/api/timetable/availability",
        json={
            "section_id": str(school["section_a"]),
            "teacher_id": str(school["teachers"][1]),
            "day_of_week": "SUNDAY",
            "period_number": 2,
        },
    )
    assert resp.status_code == 422


def test_create_entry_room_conflict(client, school):
    assert client.post("/api/timetable/entries", json=_entry_payload(school)).status_code == 201

    clash = _entry_payload(
        school,
        section_id=school["section_a"],
        teacher_id=school["teachers"][1],
        room_number=" R-102 ",
    )
    resp = client.post("/api/timetable/entries", json=clash)

    assert resp.status_code == 409
    body = resp.json()
    assert body["code"] == "TIMETABLE_CONFLICT"
    assert [c["type"] for c in body["conflicts"]] == ["ROOM"]


def test_create_entry_rejects_short_period(client, school):
    resp = client.post("/api/timetable/entries", json=_entry_payload(school, end_time="08:15"))
    assert resp.status_code == 422
    assert resp.json()["code"] == "INVALID_TIME_PERIOD"


def test_update_entry(client, school):
    entry = client.post("/api/timetable/entries", json=_entry_payload(school)).json()

    resp = client.put(
        f"/api/timetable/entries/{entry['id']}",
        json={
            "subject_id": str(school["subjects"][1]),
            "teacher_id": str(school["teachers"][1]),
            "start_time": "08:00",
            "end_time": "09:00",
            "room_number": "lab-1",
        },
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["room_number"] == "LAB-1"
    assert body["end_time"] == "09:00"
    assert body["teacher_id"] == str(school["teachers"][1])

    teacher_view = client.get(f"/api/timetable/teacher/{school['teachers'][1]}").json()
    assert [e["id"] for e in teacher_view] == [entry["id"]]


def test_update_entry_teacher_conflict(client, school):
    client.post(
        "/api/timetable/entries",
        json=_entry_payload(
            school,
            section_id=school["section_a"],
            teacher_id=school["teachers"][1],
            room_number="R-101",
        ),
    )
    entry = client.post("/api/timetable/entries", json=_entry_payload(school)).json()

    resp = client.put(
        f"/api/timetable/entries/{entry['id']}",
        json={
            "subject_id": str(school["subjects"][0]),
            "teacher_id": str(school["teachers"][1]),
            "start_time": "08:00",
            "end_time": "08:45",
            "room_number": "R-102",
        },
    )

    assert resp.status_code == 409
    assert [c["type"] for c in resp.json()["conflicts"]] == ["TEACHER"]


def test_update_unknown_entry(client, school):
    resp = client.put(
        f"/api/timetable/entries/{uuid.uuid4()}",
        json={
            "subject_id": str(school["subjects"][0]),
            "teacher_id": str(school["teachers"][0]),
            "start_time": "08:00",
            "end_time": "08:45",
            "room_number": "R-102",
        },
    )
    assert resp.status_code == 404


def test_views_for_unknown_resources(client, school):
    assert client.get(f"/api/timetable/section/{uuid.uuid4()}").status_code == 404
    assert client.get(f"/api/timetable/teacher/{uuid.uuid4()}").status_code == 404


def _assign(section_id, subject_id, teacher_id) -> None:
    with SessionLocal() as db:
        db.add(SectionSubject(section_id=section_id, subject_id=subject_id, teacher_id=teacher_id))
        db.commit()


def _entry_at(entries: list[dict], day: str, period: int) -> dict:
    return next(e for e in entries if e["day_of_week"] == day and e["period_number"] == period)


def test_update_sees_teacher_booked_by_a_later_section(client, school):
    # Generation does not check teachers across sections, so both sections book T1 on Monday P1.
    _assign(school["section_b"], school["subjects"][0], school["teachers"][0])
    client.post(f"/api/timetable/sections/{school['section_a']}/generate", json=SCENARIO)
    client.post(f"/api/timetable/sections/{school['section_b']}/generate", json=SCENARIO)
    older = _entry_at(client.get(f"/api/timetable/section/{school['section_a']}").json(), "MONDAY", 1)
    assert older["teacher_id"] == str(school["teachers"][0])

    resp = client.put(
        f"/api/timetable/entries/{older['id']}",
        json={
            "subject_id": older["subject_id"],
            "teacher_id": older["teacher_id"],
            "start_time": older["start_time"],
            "end_time": older["end_time"],
            "room_number": older["room_number"],
        },
    )

    assert resp.status_code == 409
    conflicts = resp.json()["conflicts"]
    assert [c["type"] for c in conflicts] == ["TEACHER"]
    assert conflicts[0]["conflicting_entry_id"] != older["id"]


class _BlindLookup:
    """Sees an empty timetable, like a check that ran before a concurrent write landed."""

    async def find_section_entry(self, *args, **kwargs):
        return None

    async def find_teacher_entry(self, *args, **kwargs):
        return None

    async def find_room_entry(self, *args, **kwargs):
        return None


def test_stale_availability_check_still_cannot_double_book_a_section(client, school):
    assert client.post("/api/timetable/entries", json=_entry_payload(school)).status_code == 201

    app.dependency_overrides[get_slot_orchestrator] = lambda: SlotAvailabilityOrchestrator(_BlindLookup())
    try:
        resp = client.post(
            "/api/timetable/entries",
            json=_entry_payload(school, teacher_id=school["teachers"][1], room_number="R-999"),
        )
    finally:
        app.dependency_overrides.pop(get_slot_orchestrator, None)

    assert resp.status_code == 409
    assert resp.json()["code"] == "TIMETABLE_CONFLICT"
    assert len(client.get(f"/api/timetable/section/{school['section_b']}").json()) == 1


def test_get_entry_by_id(client, school):
    entry = client.post("/api/timetable/entries", json=_entry_payload(school)).json()

    resp = client.get(f"/api/timetable/entries/{entry['id']}")

    assert resp.status_code == 200
    assert resp.json() == entry
    assert client.get(f"/api/timetable/entries/{uuid.uuid4()}").status_code == 404


def test_cancel_entry_frees_the_slot(client, school):
    entry = client.post("/api/timetable/entries", json=_entry_payload(school)).json()

    resp = client.delete(f"/api/timetable/entries/{entry['id']}")

    assert resp.status_code == 200
    assert resp.json() == {"id": entry["id"], "message": "Timetable entry deleted successfully"}
    assert client.get(f"/api/timetable/entries/{entry['id']}").status_code == 404
    assert client.get(f"/api/timetable/section/{school['section_b']}").json() == []
    assert client.post("/api/timetable/entries", json=_entry_payload(school)).status_code == 201


def test_cancel_entry_twice(client, school):
    entry = client.post("/api/timetable/entries", json=_entry_payload(school)).json()
    client.delete(f"/api/timetable/entries/{entry['id']}")

    resp = client.delete(f"/api/timetable/entries/{entry['id']}")

    assert resp.status_code == 422
    assert resp.json()["code"] == "ENTRY_ALREADY_CANCELLED"
    assert client.delete(f"/api/timetable/entries/{uuid.uuid4()}").status_code == 404


def test_clear_section_then_regenerate(client, school):
    section_id = school["section_a"]
    client.post(f"/api/timetable/sections/{section_id}/generate", json=SCENARIO)

    resp = client.delete(f"/api/timetable/sections/{section_id}")

    assert resp.status_code == 200
    assert resp.json()["deleted_count"] == 25
    assert resp.json()["message"] == "Deleted 25 timetable entries."
    assert client.get(f"/api/timetable/section/{section_id}").json() == []

    again = client.post(f"/api/timetable/sections/{section_id}/generate", json=SCENARIO).json()
    assert again["total_entries_created"] == 25
    assert again["entries_skipped"] == 0


def test_clear_unknown_section(client, school):
    assert client.delete(f"/api/timetable/sections/{uuid.uuid4()}").status_code == 404


def test_section_day_schedule(client, school):
    section_id = school["section_a"]
    client.post(f"/api/timetable/sections/{section_id}/generate", json=SCENARIO)

    resp = client.get(f"/api/timetable/section/{section_id}/days/tuesday")

    assert resp.status_code == 200
    body = resp.json()
    assert [e["period_number"] for e in body] == [1, 2, 4, 5, 6]
    assert {e["day_of_week"] for e in body} == {"TUESDAY"}


def test_section_day_schedule_errors(client, school):
    assert client.get(f"/api/timetable/section/{school['section_a']}/days/someday").status_code == 422
    assert client.get(f"/api/timetable/section/{uuid.uuid4()}/days/MONDAY").status_code == 404
