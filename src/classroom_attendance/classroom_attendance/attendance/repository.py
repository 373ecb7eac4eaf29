from __future__ import annotations

from datetime import datetime
from typing import Dict, Mapping, Optional, Protocol, Sequence

from ..core.enums import SessionStatus
from .model import AttendanceRecord, AttendanceSession


class SessionRepository(Protocol):
    """Attendance sessions, one row per session with embedded student lists."""

    def create(self, session: AttendanceSession) -> AttendanceSession:
        """Persist a new session and return it with ``session_id`` set."""

        raise NotImplementedError

    def find_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def find_by_code(self, code: str, *, active_only: bool = True) -> Optional[AttendanceSession]:
        raise NotImplementedError

    def update_by_id(self, session_id: int, patch: Mapping[str, object]) -> Optional[AttendanceSession]:
        """Partial update (``status`` / ``end_time`` only). Returns the new state."""

        raise NotImplementedError

    def query(
        self,
        *,
        course_id: Optional[int] = None,
        status: Optional[SessionStatus] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[AttendanceSession]:
        """Sessions matching every given filter, newest ``start_time`` first.

        ``start`` is inclusive and ``end`` exclusive.
        """

        raise NotImplementedError

    def save(self, session: AttendanceSession) -> AttendanceSession:
        """Full replace of the stored session."""

        raise NotImplementedError


class AttendanceRecordRepository(Protocol):
    """Per-student-per-day records written by the code check-in path."""

    def find(
        self,
        *,
        course_id: Optional[int] = None,
        student_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        raise NotImplementedError

    def aggregate_by_status(
        self,
        *,
        course_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Dict[str, int]:
        raise NotImplementedError
