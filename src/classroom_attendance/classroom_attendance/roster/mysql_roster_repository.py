from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Course, Student
from .repository import RosterRepository


def _to_student(r: dict) -> Student:
    return Student(
        student_id=str(r["student_id"]),
        name=r["name"],
        department=r.get("department"),
        grade=r.get("grade"),
        class_name=r.get("class_name"),
        email=r.get("email"),
    )


class MySQLRosterRepository(RosterRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def find_course(self, course_id: int) -> Optional[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT course_id, course_name, course_code FROM courses WHERE course_id=%s",
                (int(course_id),),
            )
            r = fetchone(cur)
            if not r:
                return None
            return Course(
                course_id=int(r["course_id"]),
                course_name=r["course_name"],
                course_code=r.get("course_code"),
            )

    def list_enrolled_students(self, course_id: int) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.student_id, s.name, s.department, s.grade, s.class_name, s.email
                FROM course_students cs
                JOIN students s ON s.student_id = cs.student_id
                WHERE cs.course_id=%s
                ORDER BY s.student_id ASC
                """,
                (int(course_id),),
            )
            return [_to_student(r) for r in fetchall(cur)]

    def find_student(self, student_id: str) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, name, department, grade, class_name, email
                FROM students
                WHERE student_id=%s
                """,
                (str(student_id),),
            )
            r = fetchone(cur)
            return _to_student(r) if r else None
