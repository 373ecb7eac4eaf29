from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User role used for authorization."""

    ADMIN = "admin"
    STUDENT = "student"


class SessionStatus(str, Enum):
    """Lifecycle of an attendance session. Only ACTIVE -> ENDED is allowed."""

    ACTIVE = "active"
    ENDED = "ended"


class AttendanceMode(str, Enum):
    CODE = "code"
    MANUAL = "manual"


class AttendanceStatus(str, Enum):
    """Attendance status of a student.

    LATE is only an aggregation bucket: nothing writes it today.
    """

    PRESENT = "present"
    ABSENT = "absent"
    EXCUSED = "excused"
    LATE = "late"
