from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Dict, Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import AttendanceRecord
from .repository import AttendanceRecordRepository


def _where(
    *,
    course_id: Optional[int],
    student_id: Optional[str],
    start: Optional[datetime],
    end: Optional[datetime],
) -> tuple[str, list[object]]:
    clauses = ["1=1"]
    params: list[object] = []

    if course_id is not None:
        clauses.append("course_id=%s")
        params.append(int(course_id))
    if student_id is not None:
        clauses.append("student_id=%s")
        params.append(str(student_id))
    if start is not None:
        clauses.append("attendance_date >= %s")
        params.append(start)
    if end is not None:
        clauses.append("attendance_date < %s")
        params.append(end)

    return " AND ".join(clauses), params


class MySQLAttendanceRecordRepository(AttendanceRecordRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find(
        self,
        *,
        course_id: Optional[int] = None,
        student_id: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Sequence[AttendanceRecord]:
        where, params = _where(course_id=course_id, student_id=student_id, start=start, end=end)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT record_id, course_id, student_id, attendance_date, status, check_in_time
                FROM attendance_records
                WHERE {where}
                ORDER BY attendance_date DESC, record_id DESC
                """,
                tuple(params),
            )
            return [
                AttendanceRecord(
                    record_id=int(r["record_id"]),
                    course_id=int(r["course_id"]),
                    student_id=str(r["student_id"]),
                    attendance_date=r["attendance_date"],
                    status=AttendanceStatus(r["status"]),
                    check_in_time=r["check_in_time"],
                )
                for r in fetchall(cur)
            ]

    def create(self, record: AttendanceRecord) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(course_id, student_id, attendance_date, status, check_in_time)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (
                    int(record.course_id),
                    record.student_id,
                    record.attendance_date,
                    record.status.value,
                    record.check_in_time,
                ),
            )
            return replace(record, record_id=int(cur.lastrowid))

    def aggregate_by_status(
        self,
        *,
        course_id: int,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> Dict[str, int]:
        where, params = _where(course_id=course_id, student_id=None, start=start, end=end)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT status, COUNT(*) AS cnt
                FROM attendance_records
                WHERE {where}
                GROUP BY status
                """,
                tuple(params),
            )
            return {str(r["status"]): int(r["cnt"]) for r in fetchall(cur)}
