from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Course:
    """A course on the roster."""

    course_id: int
    course_name: str
    course_code: Optional[str] = None


@dataclass(frozen=True)
class Student:
    """A roster student.

    ``student_id`` is the school-issued student number, not a row id.
    """

    student_id: str
    name: str
    department: Optional[str] = None
    grade: Optional[str] = None
    class_name: Optional[str] = None
    email: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "student_id": self.student_id,
            "name": self.name,
            "department": self.department or "",
            "grade": self.grade or "",
            "class_name": self.class_name or "",
            "email": self.email or "",
        }
