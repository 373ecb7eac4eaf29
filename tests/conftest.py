from __future__ import annotations

import copy
import random
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Dict, List, Optional

import pytest
from werkzeug.security import generate_password_hash

from classroom_attendance.attendance.model import AttendanceRecord, AttendanceSession
from classroom_attendance.attendance.service import AttendanceSessionService
from classroom_attendance.core.enums import Role, SessionStatus
from classroom_attendance.roster.model import Course, Student
from classroom_attendance.users.model import User


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@dataclass
class InMemoryRoster:
    courses: Dict[int, Course] = field(default_factory=dict)
    students: Dict[str, Student] = field(default_factory=dict)
    enrollments: Dict[int, List[str]] = field(default_factory=dict)

    def find_course(self, course_id: int) -> Optional[Course]:
        return self.courses.get(course_id)

    def list_enrolled_students(self, course_id: int):
        return [self.students[sid] for sid in self.enrollments.get(course_id, []) if sid in self.students]

    def find_student(self, student_id: str) -> Optional[Student]:
        return self.students.get(student_id)


class InMemorySessions:
    def __init__(self):
        self._rows: Dict[int, AttendanceSession] = {}
        self._id = 0

    def create(self, session: AttendanceSession) -> AttendanceSession:
        self._id += 1
        session.session_id = self._id
        self._rows[self._id] = copy.deepcopy(session)
        return session

    def find_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        row = self._rows.get(session_id)
        return copy.deepcopy(row) if row else None

    def find_by_code(self, code: str, *, active_only: bool = True) -> Optional[AttendanceSession]:
        for row in sorted(self._rows.values(), key=lambda s: s.start_time, reverse=True):
            if row.session_code == code and (not active_only or row.status == SessionStatus.ACTIVE):
                return copy.deepcopy(row)
        return None

    def update_by_id(self, session_id: int, patch) -> Optional[AttendanceSession]:
        row = self._rows.get(session_id)
        if not row:
            return None
        for key, value in patch.items():
            setattr(row, key, value)
        return copy.deepcopy(row)

    def query(self, *, course_id=None, status=None, start=None, end=None):
        out = [
            s
            for s in self._rows.values()
            if (course_id is None or s.course_id == course_id)
            and (status is None or s.status == status)
            and (start is None or s.start_time >= start)
            and (end is None or s.start_time < end)
        ]
        out.sort(key=lambda s: (s.start_time, s.session_id), reverse=True)
        return [copy.deepcopy(s) for s in out]

    def save(self, session: AttendanceSession) -> AttendanceSession:
        self._rows[session.session_id] = copy.deepcopy(session)
        return session

    # test helper
    def put(self, session: AttendanceSession) -> AttendanceSession:
        return self.create(session)


class InMemoryRecords:
    def __init__(self):
        self.rows: List[AttendanceRecord] = []

    def find(self, *, course_id=None, student_id=None, start=None, end=None):
        out = [
            r
            for r in self.rows
            if (course_id is None or r.course_id == course_id)
            and (student_id is None or r.student_id == student_id)
            and (start is None or r.attendance_date >= start)
            and (end is None or r.attendance_date < end)
        ]
        return sorted(out, key=lambda r: r.attendance_date, reverse=True)

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        saved = replace(record, record_id=len(self.rows) + 1)
        self.rows.append(saved)
        return saved

    def aggregate_by_status(self, *, course_id, start=None, end=None):
        counts: Dict[str, int] = {}
        for r in self.find(course_id=course_id, start=start, end=end):
            counts[r.status.value] = counts.get(r.status.value, 0) + 1
        return counts


@dataclass
class InMemoryUsers:
    users: Dict[str, User] = field(default_factory=dict)

    def get_by_username(self, user_name: str) -> Optional[User]:
        return self.users.get(user_name)


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2025, 3, 10, 9, 0, 0)


@pytest.fixture
def clock(fixed_now) -> FakeClock:
    return FakeClock(fixed_now)


@pytest.fixture
def roster() -> InMemoryRoster:
    students = {
        "S001": Student("S001", "Alice", department="CS", class_name="CS-2A", email="alice@school.edu"),
        "S002": Student("S002", "Bob", department="CS", class_name="CS-2A"),
        "S003": Student("S003", "Carol", department="EE", class_name="EE-1B", email="carol@school.edu"),
        "S004": Student("S004", "Dave"),
        "S005": Student("S005", "Erin", department="IM", class_name="IM-3A", email="erin@school.edu"),
    }
    return InMemoryRoster(
        courses={1: Course(1, "Data Structures", "CS201"), 2: Course(2, "Networks", "CS305")},
        students=students,
        enrollments={1: ["S001", "S002", "S003", "S004", "S005"], 2: ["S001"]},
    )


@pytest.fixture
def sessions() -> InMemorySessions:
    return InMemorySessions()


@pytest.fixture
def records() -> InMemoryRecords:
    return InMemoryRecords()


@pytest.fixture
def service(sessions, records, roster, clock) -> AttendanceSessionService:
    return AttendanceSessionService(sessions, records, roster, rng=random.Random(42), clock=clock)


@pytest.fixture
def users() -> InMemoryUsers:
    return InMemoryUsers(
        {
            "admin": User(1, "admin", generate_password_hash("admin123"), Role.ADMIN),
            "alice": User(2, "alice", generate_password_hash("student123"), Role.STUDENT, student_id="S001"),
            "orphan": User(3, "orphan", generate_password_hash("student123"), Role.STUDENT),
        }
    )
