from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional

from ..common.datetime_utils import isoformat_or_none, parse_iso_datetime
from ..core.enums import AttendanceStatus, SessionStatus


@dataclass(frozen=True)
class SessionStudent:
    """One entry of a session's attended/absent/excused list."""

    student_id: str
    user_name: str
    check_in_time: Optional[datetime] = None
    notes: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"student_id": self.student_id, "user_name": self.user_name}
        if self.check_in_time is not None:
            data["check_in_time"] = isoformat_or_none(self.check_in_time)
        if self.notes is not None:
            data["notes"] = self.notes
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "SessionStudent":
        return cls(
            student_id=str(data["student_id"]),
            user_name=data.get("user_name") or "",
            check_in_time=parse_iso_datetime(data.get("check_in_time")),
            notes=data.get("notes"),
        )


@dataclass
class AttendanceSession:
    """A classroom attendance session.

    The three student lists are mutually exclusive. Moving a student always
    goes through :meth:`place`, which removes the id from every list first and
    then appends, so a re-marked student ends up last in the target list.
    """

    session_id: Optional[int]
    course_id: int
    course_name: str
    session_code: str
    start_time: datetime
    status: SessionStatus = SessionStatus.ACTIVE
    end_time: Optional[datetime] = None
    session_date: Optional[date] = None
    attended_students: List[SessionStudent] = field(default_factory=list)
    absent_students: List[SessionStudent] = field(default_factory=list)
    excused_students: List[SessionStudent] = field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.status == SessionStatus.ACTIVE

    @property
    def attendance_count(self) -> int:
        return len(self.attended_students)

    def _list_for(self, status: AttendanceStatus) -> List[SessionStudent]:
        if status == AttendanceStatus.PRESENT:
            return self.attended_students
        if status == AttendanceStatus.ABSENT:
            return self.absent_students
        if status == AttendanceStatus.EXCUSED:
            return self.excused_students
        raise ValueError(f"No session list for status {status!r}")

    def remove_student(self, student_id: str) -> None:
        self.attended_students = [s for s in self.attended_students if s.student_id != student_id]
        self.absent_students = [s for s in self.absent_students if s.student_id != student_id]
        self.excused_students = [s for s in self.excused_students if s.student_id != student_id]

    def place(self, entry: SessionStudent, status: AttendanceStatus) -> None:
        self.remove_student(entry.student_id)
        self._list_for(status).append(entry)

    def find_status(self, student_id: str) -> Optional[AttendanceStatus]:
        for status in (AttendanceStatus.PRESENT, AttendanceStatus.ABSENT, AttendanceStatus.EXCUSED):
            if any(s.student_id == student_id for s in self._list_for(status)):
                return status
        return None

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "course_id": self.course_id,
            "course_name": self.course_name,
            "session_code": self.session_code,
            "start_time": isoformat_or_none(self.start_time),
            "end_time": isoformat_or_none(self.end_time),
            "session_date": self.session_date.isoformat() if self.session_date else None,
            "status": self.status.value,
            "attended_students": [s.to_dict() for s in self.attended_students],
            "absent_students": [s.to_dict() for s in self.absent_students],
            "excused_students": [s.to_dict() for s in self.excused_students],
            "attendance_count": self.attendance_count,
        }


@dataclass(frozen=True)
class AttendanceRecord:
    """A code check-in record (code check-in path only)."""

    record_id: Optional[int]
    course_id: int
    student_id: str
    attendance_date: datetime
    status: AttendanceStatus
    check_in_time: datetime

    def to_dict(self) -> dict:
        return {
            "record_id": self.record_id,
            "course_id": self.course_id,
            "student_id": self.student_id,
            "attendance_date": isoformat_or_none(self.attendance_date),
            "status": self.status.value,
            "check_in_time": isoformat_or_none(self.check_in_time),
        }


@dataclass(frozen=True)
class AttendanceStats:
    total: int
    present: int
    absent: int
    late: int

    def to_dict(self) -> dict:
        return {"total": self.total, "present": self.present, "absent": self.absent, "late": self.late}


@dataclass(frozen=True)
class SelectedStudent:
    student_id: str
    user_name: str
    check_in_time: Optional[datetime]
    notes: str
    department: str
    class_name: str
    email: str

    def to_dict(self) -> dict:
        return {
            "student_id": self.student_id,
            "user_name": self.user_name,
            "check_in_time": isoformat_or_none(self.check_in_time),
            "notes": self.notes,
            "department": self.department,
            "class_name": self.class_name,
            "email": self.email,
        }


@dataclass(frozen=True)
class RandomSelection:
    """Result of a random draw, with totals kept for transparency."""

    selected_students: List[SelectedStudent]
    total_attended: int
    total_sessions: int
    target_date: date

    def to_dict(self) -> dict:
        return {
            "selected_students": [s.to_dict() for s in self.selected_students],
            "total_attended": self.total_attended,
            "total_sessions": self.total_sessions,
            "selected_count": len(self.selected_students),
            "target_date": self.target_date.isoformat(),
        }
