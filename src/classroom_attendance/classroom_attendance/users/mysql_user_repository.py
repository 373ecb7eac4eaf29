from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import User
from .repository import UserRepository


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        user_name=row["user_name"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        student_id=row.get("student_id"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_username(self, user_name: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, user_name, password_hash, role, student_id FROM users WHERE user_name=%s",
                (user_name,),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None
