from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Course, Student


class RosterRepository(Protocol):
    """Course -> enrolled Student associations.

    The attendance core only reads from it; enrollment is managed elsewhere.
    """

    def find_course(self, course_id: int) -> Optional[Course]:
        raise NotImplementedError

    def list_enrolled_students(self, course_id: int) -> Sequence[Student]:
        raise NotImplementedError

    def find_student(self, student_id: str) -> Optional[Student]:
        raise NotImplementedError
