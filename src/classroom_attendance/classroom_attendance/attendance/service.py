from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Sequence

from ..common.boundary import service_boundary
from ..common.datetime_utils import day_window, now_local, to_epoch_millis
from ..common.validators import require_choice, require_non_empty
from ..core.constants import (
    CODE_GENERATION_ATTEMPTS,
    CODE_MAX,
    CODE_MIN,
    DEFAULT_RANDOM_SELECTION_SIZE,
    MANUAL_CODE_PREFIX,
)
from ..core.enums import AttendanceMode, AttendanceStatus, SessionStatus
from ..core.exceptions import AlreadyCheckedInError, InternalError, NotFoundError, ValidationError
from ..roster.model import Course, Student
from ..roster.repository import RosterRepository
from .model import (
    AttendanceRecord,
    AttendanceSession,
    AttendanceStats,
    RandomSelection,
    SelectedStudent,
    SessionStudent,
)
from .repository import AttendanceRecordRepository, SessionRepository
from .selection import pick_random

logger = logging.getLogger(__name__)

_STATUS_LABELS = {
    AttendanceStatus.PRESENT: "present",
    AttendanceStatus.ABSENT: "absent",
    AttendanceStatus.EXCUSED: "excused",
}


@dataclass(frozen=True)
class MarkOutcome:
    """Result of a manual mark / status edit."""

    session: AttendanceSession
    student: Student
    status: AttendanceStatus

    @property
    def message(self) -> str:
        return f"Student {self.student.name} marked as {_STATUS_LABELS[self.status]}"


class AttendanceSessionService:
    """Use cases of the attendance session lifecycle.

    Two attendance representations live side by side:
    - code check-in writes ``AttendanceRecord`` rows (record store);
    - manual marking and status edits write the session's student lists.
    They are not synchronised: a code check-in does not show up in
    ``attended_students`` and a manual mark does not create a record.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        records: AttendanceRecordRepository,
        roster: RosterRepository,
        *,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], datetime]] = None,
        selection_size: int = DEFAULT_RANDOM_SELECTION_SIZE,
    ):
        self._sessions = sessions
        self._records = records
        self._roster = roster
        self._rng = rng or random.SystemRandom()
        self._clock = clock or now_local
        # Configurable, but capped at three picks.
        self._selection_size = max(1, min(int(selection_size), DEFAULT_RANDOM_SELECTION_SIZE))

    # ----- helpers -----

    def _require_course(self, course_id: int) -> Course:
        course = self._roster.find_course(course_id)
        if not course:
            raise NotFoundError("Course not found")
        return course

    def _require_session(self, session_id: int) -> AttendanceSession:
        session = self._sessions.find_by_id(session_id)
        if not session:
            raise NotFoundError("Attendance session not found")
        return session

    def _require_student(self, student_id: str) -> Student:
        student = self._roster.find_student(student_id)
        if not student:
            raise NotFoundError("Student not found")
        return student

    def _random_code(self) -> str:
        return str(self._rng.randint(CODE_MIN, CODE_MAX))

    def _generate_code(self, mode: AttendanceMode, now: datetime) -> str:
        if mode == AttendanceMode.MANUAL:
            # Unique as long as the clock does not go backwards.
            return f"{MANUAL_CODE_PREFIX}{to_epoch_millis(now)}"

        for _ in range(CODE_GENERATION_ATTEMPTS):
            code = self._random_code()
            if self._sessions.find_by_code(code, active_only=True) is None:
                return code
            logger.info("Session code %s already active, drawing again", code)

        raise InternalError("Could not allocate a unique session code")

    # ----- lifecycle -----

    @service_boundary("start_session")
    def start_session(
        self,
        course_id: int,
        session_date: Optional[date] = None,
        mode: AttendanceMode | str = AttendanceMode.CODE,
    ) -> AttendanceSession:
        mode = require_choice(mode or AttendanceMode.CODE, AttendanceMode, "Attendance mode")
        course = self._require_course(course_id)

        now = self._clock()
        session = AttendanceSession(
            session_id=None,
            course_id=course.course_id,
            course_name=course.course_name,
            session_code=self._generate_code(mode, now),
            # start_time is the wall clock; the caller's date is only kept for display.
            start_time=now,
            session_date=session_date,
            status=SessionStatus.ACTIVE,
        )
        created = self._sessions.create(session)
        logger.info(
            "Started %s session %s for course %s", mode.value, created.session_id, course.course_id
        )
        return created

    @service_boundary("end_session")
    def end_session(self, session_id: int) -> AttendanceSession:
        # Re-ending an ended session is allowed and only refreshes end_time.
        session = self._sessions.update_by_id(
            session_id, {"status": SessionStatus.ENDED, "end_time": self._clock()}
        )
        if not session:
            raise NotFoundError("Attendance session not found")
        logger.info("Ended session %s", session.session_id)
        return session

    @service_boundary("check_in")
    def check_in(self, student_id: str, attendance_code: str) -> AttendanceRecord:
        student_id = require_non_empty(student_id, "Student")
        attendance_code = require_non_empty(attendance_code, "Attendance code")

        session = self._sessions.find_by_code(attendance_code, active_only=True)
        if not session:
            raise ValidationError("Attendance code is invalid or has expired")

        day_start, day_end = day_window(session.start_time)
        # Lookup-then-insert is not atomic: two concurrent check-ins can both pass.
        existing = self._records.find(
            course_id=session.course_id, student_id=student_id, start=day_start, end=day_end
        )
        if existing:
            raise AlreadyCheckedInError("You have already checked in")

        record = self._records.create(
            AttendanceRecord(
                record_id=None,
                course_id=session.course_id,
                student_id=student_id,
                attendance_date=session.start_time,
                status=AttendanceStatus.PRESENT,
                check_in_time=self._clock(),
            )
        )
        logger.info("Student %s checked in to session %s", student_id, session.session_id)
        return record

    # ----- roster reconciliation -----

    def _mark(
        self,
        session_id: int,
        student_id: str,
        status: AttendanceStatus,
        *,
        notes: Optional[str],
    ) -> MarkOutcome:
        session = self._require_session(session_id)
        student = self._require_student(student_id)

        entry = SessionStudent(
            student_id=student.student_id,
            user_name=student.name,
            check_in_time=self._clock() if status == AttendanceStatus.PRESENT else None,
            notes=notes,
        )
        session.place(entry, status)
        saved = self._sessions.save(session)
        logger.info("Session %s: student %s -> %s", session_id, student.student_id, status.value)
        return MarkOutcome(session=saved, student=student, status=status)

    @service_boundary("manual_attendance")
    def manual_attendance(self, session_id: int, student_id: str, status: AttendanceStatus | str) -> MarkOutcome:
        status = require_choice(
            status, AttendanceStatus, "Status", allowed={AttendanceStatus.PRESENT, AttendanceStatus.ABSENT}
        )
        return self._mark(session_id, student_id, status, notes=None)

    @service_boundary("update_attendance_status")
    def update_attendance_status(
        self,
        session_id: int,
        student_id: str,
        new_status: AttendanceStatus | str,
        notes: Optional[str] = None,
    ) -> MarkOutcome:
        new_status = require_choice(
            new_status,
            AttendanceStatus,
            "Status",
            allowed={AttendanceStatus.PRESENT, AttendanceStatus.ABSENT, AttendanceStatus.EXCUSED},
        )
        return self._mark(session_id, student_id, new_status, notes=notes or "")

    # ----- statistics / reads -----

    @service_boundary("get_course_attendance_stats")
    def get_course_attendance_stats(self, course_id: int, session_id: Optional[int] = None) -> AttendanceStats:
        start = end = None
        if session_id is not None:
            session = self._sessions.find_by_id(session_id)
            if session:
                start, end = day_window(session.start_time)
            else:
                logger.info("Stats for unknown session %s: using whole course %s", session_id, course_id)

        counts = self._records.aggregate_by_status(course_id=course_id, start=start, end=end)
        return AttendanceStats(
            total=sum(counts.values()),
            present=counts.get(AttendanceStatus.PRESENT.value, 0),
            absent=counts.get(AttendanceStatus.ABSENT.value, 0),
            late=counts.get(AttendanceStatus.LATE.value, 0),
        )

    @service_boundary("get_student_attendance")
    def get_student_attendance(self, student_id: str, course_id: Optional[int] = None) -> Sequence[AttendanceRecord]:
        student_id = require_non_empty(student_id, "Student")
        return self._records.find(course_id=course_id, student_id=student_id)

    @service_boundary("get_session")
    def get_session(self, session_id: int) -> AttendanceSession:
        return self._require_session(session_id)

    @service_boundary("get_active_sessions")
    def get_active_sessions(self) -> Sequence[AttendanceSession]:
        return self._sessions.query(status=SessionStatus.ACTIVE)

    @service_boundary("get_all_sessions")
    def get_all_sessions(self) -> Sequence[AttendanceSession]:
        return self._sessions.query()

    @service_boundary("get_course_sessions")
    def get_course_sessions(self, course_id: int, day: Optional[date] = None) -> Sequence[AttendanceSession]:
        self._require_course(course_id)
        start = end = None
        if day is not None:
            start, end = day_window(day)
        return self._sessions.query(course_id=course_id, start=start, end=end)

    @service_boundary("get_course_students")
    def get_course_students(self, course_id: int) -> Sequence[Student]:
        self._require_course(course_id)
        return self._roster.list_enrolled_students(course_id)

    # ----- random selection -----

    @service_boundary("random_selection")
    def random_selection(self, course_id: int, target_date: Optional[date] = None) -> RandomSelection:
        target_date = target_date or self._clock().date()
        day_start, day_end = day_window(target_date)

        # Newest first, so the latest session's entry wins for duplicates.
        sessions = self._sessions.query(
            course_id=course_id, status=SessionStatus.ENDED, start=day_start, end=day_end
        )
        if not sessions:
            raise NotFoundError("No ended attendance session for this course on that day")

        seen: Dict[str, SessionStudent] = {}
        for session in sessions:
            for entry in session.attended_students:
                seen.setdefault(entry.student_id, entry)
        attended: List[SessionStudent] = list(seen.values())
        if not attended:
            raise NotFoundError("No attended students for this course on that day")

        picked = pick_random(attended, self._selection_size, self._rng)
        selected = [self._enrich(entry) for entry in picked]
        logger.info(
            "Random selection for course %s on %s: %d of %d",
            course_id,
            target_date,
            len(selected),
            len(attended),
        )
        return RandomSelection(
            selected_students=selected,
            total_attended=len(attended),
            total_sessions=len(sessions),
            target_date=target_date,
        )

    def _enrich(self, entry: SessionStudent) -> SelectedStudent:
        student = self._roster.find_student(entry.student_id)
        return SelectedStudent(
            student_id=entry.student_id,
            user_name=entry.user_name,
            check_in_time=entry.check_in_time,
            notes=entry.notes or "",
            department=(student.department if student else None) or "",
            class_name=(student.class_name if student else None) or "",
            email=(student.email if student else None) or "",
        )
