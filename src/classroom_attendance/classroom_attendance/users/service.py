from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from werkzeug.security import check_password_hash

from ..common.validators import require_non_empty
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ValidationError
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into Flask session after login."""

    user_id: int
    user_name: str
    role: Role
    student_id: Optional[str]

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "user_name": self.user_name,
            "role": self.role.value,
            "student_id": self.student_id,
        }


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def authenticate(self, user_name: str, password: str) -> SessionUser:
        try:
            user_name = require_non_empty(user_name, "User name")
        except ValidationError:
            raise AuthenticationError("Wrong user name or password") from None

        user = self._users.get_by_username(user_name)
        if not user:
            raise AuthenticationError("Wrong user name or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except Exception:
            # e.g. placeholder hashes like 'CHANGE_ME' or corrupted values
            ok = False

        if not ok:
            logger.info("Failed login for %s", user_name)
            raise AuthenticationError("Wrong user name or password")

        return SessionUser(
            user_id=user.user_id,
            user_name=user.user_name,
            role=user.role,
            student_id=user.student_id,
        )
