from __future__ import annotations

import json
from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence

from ..core.enums import SessionStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceSession, SessionStudent
from .repository import SessionRepository

_COLUMNS = """
    session_id, course_id, course_name, session_code, session_date,
    start_time, end_time, status, attended_students, absent_students, excused_students
"""

# Columns update_by_id is allowed to touch.
_PATCHABLE = {"status", "end_time"}


def _load_students(value: Any) -> List[SessionStudent]:
    """Decode a JSON list column.

    mysql-connector can return JSON as str or bytes depending on the implementation.
    """

    if value is None:
        return []
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        value = json.loads(value) if value.strip() else []
    return [SessionStudent.from_dict(item) for item in value]


def _dump_students(items: Sequence[SessionStudent]) -> str:
    return json.dumps([s.to_dict() for s in items], ensure_ascii=False)


def _to_session(r: dict) -> AttendanceSession:
    return AttendanceSession(
        session_id=int(r["session_id"]),
        course_id=int(r["course_id"]),
        course_name=r["course_name"],
        session_code=str(r["session_code"]),
        session_date=r.get("session_date"),
        start_time=r["start_time"],
        end_time=r.get("end_time"),
        status=SessionStatus(r["status"]),
        attended_students=_load_students(r.get("attended_students")),
        absent_students=_load_students(r.get("absent_students")),
        excused_students=_load_students(r.get("excused_students")),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, session: AttendanceSession) -> AttendanceSession:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_sessions(
                    course_id, course_name, session_code, session_date, start_time, end_time, status,
                    attended_students, absent_students, excused_students
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(session.course_id),
                    session.course_name,
                    session.session_code,
                    session.session_date,
                    session.start_time,
                    session.end_time,
                    session.status.value,
                    _dump_students(session.attended_students),
                    _dump_students(session.absent_students),
                    _dump_students(session.excused_students),
                ),
            )
            session.session_id = int(cur.lastrowid)
            return session

    def find_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_sessions WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def find_by_code(self, code: str, *, active_only: bool = True) -> Optional[AttendanceSession]:
        clauses = ["session_code=%s"]
        params: list[object] = [str(code)]
        if active_only:
            clauses.append("status=%s")
            params.append(SessionStatus.ACTIVE.value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_sessions WHERE {where} ORDER BY start_time DESC LIMIT 1",
                tuple(params),
            )
            r = fetchone(cur)
            return _to_session(r) if r else None

    def update_by_id(self, session_id: int, patch: Mapping[str, object]) -> Optional[AttendanceSession]:
        unknown = set(patch) - _PATCHABLE
        if unknown:
            raise ValueError(f"Unsupported session fields: {sorted(unknown)}")

        assignments = []
        params: list[object] = []
        for column, value in patch.items():
            assignments.append(f"{column}=%s")
            params.append(value.value if isinstance(value, SessionStatus) else value)
        params.append(int(session_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE attendance_sessions SET {', '.join(assignments)} WHERE session_id=%s",
                tuple(params),
            )
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_sessions WHERE session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def query(
        self,
        *,
        course_id: Optional[int] = None,
        status: Optional[SessionStatus] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[AttendanceSession]:
        clauses = ["1=1"]
        params: list[object] = []

        if course_id is not None:
            clauses.append("course_id=%s")
            params.append(int(course_id))
        if status is not None:
            clauses.append("status=%s")
            params.append(status.value)
        if start is not None:
            clauses.append("start_time >= %s")
            params.append(start)
        if end is not None:
            clauses.append("start_time < %s")
            params.append(end)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_sessions WHERE {where} ORDER BY start_time DESC, session_id DESC",
                tuple(params),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def save(self, session: AttendanceSession) -> AttendanceSession:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_sessions
                SET course_id=%s, course_name=%s, session_code=%s, session_date=%s,
                    start_time=%s, end_time=%s, status=%s,
                    attended_students=%s, absent_students=%s, excused_students=%s
                WHERE session_id=%s
                """,
                (
                    int(session.course_id),
                    session.course_name,
                    session.session_code,
                    session.session_date,
                    session.start_time,
                    session.end_time,
                    session.status.value,
                    _dump_students(session.attended_students),
                    _dump_students(session.absent_students),
                    _dump_students(session.excused_students),
                    int(session.session_id),
                ),
            )
            return session
