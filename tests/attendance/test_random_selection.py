from __future__ import annotations

import random
from datetime import date

import pytest

from classroom_attendance.attendance.service import AttendanceSessionService
from classroom_attendance.core.exceptions import NotFoundError


def _ended_session(service, present, *, course_id=1, notes=None):
    s = service.start_session(course_id, mode="manual")
    for student_id in present:
        service.update_attendance_status(s.session_id, student_id, "present", notes)
    return service.end_session(s.session_id)


def test_selects_at_most_three_distinct_students(service):
    _ended_session(service, ["S001", "S002", "S003", "S004", "S005"])

    result = service.random_selection(1)

    ids = [s.student_id for s in result.selected_students]
    assert len(ids) == 3
    assert len(set(ids)) == 3
    assert set(ids) <= {"S001", "S002", "S003", "S004", "S005"}
    assert result.total_attended == 5
    assert result.total_sessions == 1
    assert result.target_date == date(2025, 3, 10)


def test_selects_everyone_when_fewer_than_three(service):
    _ended_session(service, ["S001", "S002"])

    result = service.random_selection(1, date(2025, 3, 10))

    assert sorted(s.student_id for s in result.selected_students) == ["S001", "S002"]


def test_union_across_sessions_newest_entry_wins(service, clock):
    _ended_session(service, ["S001"], notes="first")
    clock.advance(hours=2)
    _ended_session(service, ["S001"], notes="second")

    result = service.random_selection(1)

    assert result.total_sessions == 2
    assert result.total_attended == 1
    assert result.selected_students[0].notes == "second"


def test_active_sessions_are_ignored(service):
    s = service.start_session(1, mode="manual")
    service.manual_attendance(s.session_id, "S001", "present")

    with pytest.raises(NotFoundError):
        service.random_selection(1)


def test_other_days_are_ignored(service, clock):
    _ended_session(service, ["S001"])

    with pytest.raises(NotFoundError):
        service.random_selection(1, date(2025, 3, 11))


def test_ended_sessions_without_attendees_is_not_found(service):
    _ended_session(service, [])

    with pytest.raises(NotFoundError):
        service.random_selection(1)


def test_absent_and_excused_students_are_not_drawn(service):
    s = service.start_session(1, mode="manual")
    service.manual_attendance(s.session_id, "S001", "present")
    service.manual_attendance(s.session_id, "S002", "absent")
    service.update_attendance_status(s.session_id, "S003", "excused")
    service.end_session(s.session_id)

    result = service.random_selection(1)

    assert [x.student_id for x in result.selected_students] == ["S001"]


def test_selection_enriched_from_roster(service, roster):
    _ended_session(service, ["S001"])

    picked = service.random_selection(1).selected_students[0]

    assert picked.department == "CS"
    assert picked.class_name == "CS-2A"
    assert picked.email == "alice@school.edu"
    assert picked.check_in_time is not None


def test_missing_roster_data_becomes_empty_strings(service, roster):
    _ended_session(service, ["S004", "S005"])
    del roster.students["S005"]

    result = service.random_selection(1)

    for picked in result.selected_students:
        assert picked.department == ""
        assert picked.class_name == ""
        assert picked.email == ""


@pytest.mark.parametrize("configured, expected", [(5, 3), (3, 3), (2, 2), (0, 1)])
def test_configured_size_is_capped_at_three(sessions, records, roster, clock, configured, expected):
    service = AttendanceSessionService(
        sessions, records, roster, rng=random.Random(7), clock=clock, selection_size=configured
    )
    _ended_session(service, ["S001", "S002", "S003", "S004", "S005"])

    result = service.random_selection(1)

    assert len(result.selected_students) == expected
    assert result.total_attended == 5
