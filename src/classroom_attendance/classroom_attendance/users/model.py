from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """A login account.

    Student accounts link to a roster student through ``student_id``.
    """

    user_id: int
    user_name: str
    password_hash: str
    role: Role
    student_id: Optional[str] = None
