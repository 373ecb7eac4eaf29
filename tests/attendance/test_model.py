from __future__ import annotations

import json
from datetime import datetime

from classroom_attendance.attendance.model import AttendanceSession, SessionStudent
from classroom_attendance.attendance.mysql_session_repository import _dump_students, _load_students
from classroom_attendance.core.enums import AttendanceStatus, SessionStatus


def _session():
    return AttendanceSession(
        session_id=1,
        course_id=1,
        course_name="Data Structures",
        session_code="123456",
        start_time=datetime(2025, 3, 10, 9),
    )


def test_place_appends_after_removing_from_every_list():
    s = _session()
    s.place(SessionStudent("S001", "Alice", datetime(2025, 3, 10, 9, 1)), AttendanceStatus.PRESENT)
    s.place(SessionStudent("S002", "Bob"), AttendanceStatus.ABSENT)
    s.place(SessionStudent("S001", "Alice", notes="flu"), AttendanceStatus.EXCUSED)

    assert s.attended_students == []
    assert [e.student_id for e in s.absent_students] == ["S002"]
    assert s.excused_students[0].notes == "flu"
    assert s.attendance_count == 0


def test_to_dict_reports_attendance_count_and_status():
    s = _session()
    s.place(SessionStudent("S001", "Alice", datetime(2025, 3, 10, 9, 1)), AttendanceStatus.PRESENT)

    data = s.to_dict()

    assert data["status"] == SessionStatus.ACTIVE.value
    assert data["attendance_count"] == 1
    assert data["attended_students"][0] == {
        "student_id": "S001",
        "user_name": "Alice",
        "check_in_time": "2025-03-10T09:01:00",
    }
    assert data["end_time"] is None


def test_student_list_column_decodes_str_bytes_and_null():
    entries = [SessionStudent("S001", "Alice", datetime(2025, 3, 10, 9, 1), "")]
    raw = _dump_students(entries)

    assert _load_students(raw) == entries
    assert _load_students(raw.encode("utf-8")) == entries
    assert _load_students(json.loads(raw)) == entries
    assert _load_students(None) == []
    assert _load_students("") == []
