from __future__ import annotations

from typing import Optional, Protocol

from .model import User


class UserRepository(Protocol):
    def get_by_username(self, user_name: str) -> Optional[User]:
        raise NotImplementedError
