from __future__ import annotations

import io
import random

import pytest
from openpyxl import load_workbook

from classroom_attendance.container import build_services
from classroom_attendance.main import create_app


@pytest.fixture
def app(monkeypatch, users, roster, sessions, records, clock):
    monkeypatch.setenv("APP_ENV", "testing")
    container = build_services(
        users_repo=users,
        roster_repo=roster,
        sessions_repo=sessions,
        records_repo=records,
        rng=random.Random(3),
        clock=clock,
    )
    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


def _login(client, user_name, password):
    return client.post("/api/v1/auth/login", json={"user_name": user_name, "password": password})


@pytest.fixture
def admin(client):
    assert _login(client, "admin", "admin123").status_code == 200
    return client


def test_login_and_me(client):
    resp = _login(client, "alice", "student123")

    assert resp.status_code == 200
    assert resp.get_json()["body"]["student_id"] == "S001"
    assert client.get("/api/v1/auth/me").get_json()["body"]["role"] == "student"


def test_bad_login_uses_envelope(client):
    resp = _login(client, "alice", "nope")

    assert resp.status_code == 401
    assert resp.get_json()["code"] == 401
    assert resp.get_json()["body"] is None


def test_endpoints_require_login_and_role(client):
    assert client.get("/api/v1/attendance/active-sessions").status_code == 401

    _login(client, "alice", "student123")
    resp = client.post("/api/v1/attendance/start-session", json={"course_id": 1})
    assert resp.status_code == 403


def test_start_check_in_and_duplicate(app, admin):
    started = admin.post(
        "/api/v1/attendance/start-session",
        json={"course_id": 1, "session_date": "2025-03-10", "attendance_mode": "code"},
    ).get_json()
    assert started["code"] == 200
    code = started["body"]["session_code"]

    student = app.test_client()
    _login(student, "alice", "student123")

    first = student.post("/api/v1/attendance/check-in", json={"attendance_code": code})
    second = student.post("/api/v1/attendance/check-in", json={"attendance_code": code})

    assert first.status_code == 200
    assert first.get_json()["body"]["status"] == "present"
    assert second.status_code == 400
    assert second.get_json()["message"] == "You have already checked in"

    records = student.get("/api/v1/attendance/student-records").get_json()["body"]
    assert len(records) == 1

    stats = admin.get(f"/api/v1/attendance/course-stats/1?session_id={started['body']['session_id']}")
    assert stats.get_json()["body"] == {"total": 1, "present": 1, "absent": 0, "late": 0}


def test_check_in_with_bad_code(app):
    student = app.test_client()
    _login(student, "alice", "student123")

    resp = student.post("/api/v1/attendance/check-in", json={"attendance_code": "111111"})

    assert resp.status_code == 400


def test_student_account_without_roster_link_cannot_check_in(app):
    student = app.test_client()
    _login(student, "orphan", "student123")

    assert student.post("/api/v1/attendance/check-in", json={"attendance_code": "111111"}).status_code == 403


def test_start_session_errors(admin):
    assert admin.post("/api/v1/attendance/start-session", json={"course_id": 99}).status_code == 404
    assert admin.post("/api/v1/attendance/start-session", json={}).status_code == 400
    resp = admin.post("/api/v1/attendance/start-session", json={"course_id": 1, "session_date": "10/03/2025"})
    assert resp.status_code == 400


def test_manual_marking_flow_and_random_selection(admin):
    sid = admin.post(
        "/api/v1/attendance/start-session", json={"course_id": 1, "attendance_mode": "manual"}
    ).get_json()["body"]["session_id"]

    for student_id in ("S001", "S002", "S003", "S004"):
        resp = admin.post(
            "/api/v1/attendance/manual-attendance",
            json={"session_id": sid, "student_id": student_id, "status": "present"},
        )
        assert resp.status_code == 200

    resp = admin.put(
        "/api/v1/attendance/update-attendance-status",
        json={"session_id": sid, "student_id": "S004", "new_status": "excused", "notes": "sick"},
    )
    body = resp.get_json()["body"]
    assert resp.get_json()["message"] == "Student Dave marked as excused"
    assert [e["student_id"] for e in body["excused_students"]] == ["S004"]
    assert body["excused_students"][0]["notes"] == "sick"
    assert body["attendance_count"] == 3

    # Nothing ended yet
    assert admin.get("/api/v1/attendance/random-selection/1").status_code == 404

    ended = admin.post(f"/api/v1/attendance/end-session/{sid}").get_json()["body"]
    assert ended["status"] == "ended"

    picked = admin.get("/api/v1/attendance/random-selection/1?date=2025-03-10").get_json()["body"]
    ids = [s["student_id"] for s in picked["selected_students"]]
    assert len(ids) == 3 and len(set(ids)) == 3
    assert set(ids) == {"S001", "S002", "S003"}
    assert picked["total_attended"] == 3


def test_manual_attendance_bad_status(admin):
    sid = admin.post(
        "/api/v1/attendance/start-session", json={"course_id": 1, "attendance_mode": "manual"}
    ).get_json()["body"]["session_id"]

    resp = admin.post(
        "/api/v1/attendance/manual-attendance",
        json={"session_id": sid, "student_id": "S001", "status": "excused"},
    )

    assert resp.status_code == 400


def test_session_listing_and_roster(admin):
    admin.post("/api/v1/attendance/start-session", json={"course_id": 1})
    admin.post("/api/v1/attendance/start-session", json={"course_id": 2})

    active = admin.get("/api/v1/attendance/active-sessions").get_json()["body"]
    students = admin.get("/api/v1/attendance/course-students/2").get_json()["body"]

    assert len(active) == 2
    assert all(s["attendance_count"] == 0 for s in active)
    assert students == [
        {
            "student_id": "S001",
            "name": "Alice",
            "department": "CS",
            "grade": "",
            "class_name": "CS-2A",
            "email": "alice@school.edu",
        }
    ]
    assert admin.get("/api/v1/attendance/end-session/77").status_code == 405
    assert admin.post("/api/v1/attendance/end-session/77").status_code == 404


def test_export_excel(admin):
    sid = admin.post(
        "/api/v1/attendance/start-session", json={"course_id": 1, "attendance_mode": "manual"}
    ).get_json()["body"]["session_id"]
    admin.post("/api/v1/attendance/manual-attendance", json={"session_id": sid, "student_id": "S002", "status": "absent"})

    resp = admin.get("/api/v1/attendance/export-excel/1?date=2025-03-10")

    assert resp.status_code == 200
    assert resp.mimetype.endswith("spreadsheetml.sheet")
    rows = list(load_workbook(io.BytesIO(resp.data)).active.iter_rows(values_only=True))
    assert rows[1][3] == "S002"
    assert admin.get("/api/v1/attendance/export-excel/2").status_code == 404


def test_session_qr(admin):
    body = admin.post("/api/v1/attendance/start-session", json={"course_id": 1}).get_json()["body"]
    manual = admin.post(
        "/api/v1/attendance/start-session", json={"course_id": 1, "attendance_mode": "manual"}
    ).get_json()["body"]

    resp = admin.get(f"/api/v1/attendance/session/{body['session_id']}/qr")

    assert resp.status_code == 200
    assert resp.mimetype == "image/png"
    assert resp.data[:8] == b"\x89PNG\r\n\x1a\n"
    assert admin.get(f"/api/v1/attendance/session/{manual['session_id']}/qr").status_code == 400


def test_login_with_non_object_body_is_rejected(client, caplog):
    resp = client.post("/api/v1/auth/login", json=["admin"])

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Request body must be a JSON object"
    assert not [r for r in caplog.records if r.levelname == "ERROR"]


def test_attendance_endpoint_with_non_object_body_is_rejected(admin):
    resp = admin.post("/api/v1/attendance/start-session", json=[1])

    assert resp.status_code == 400
    assert resp.get_json()["body"] is None
