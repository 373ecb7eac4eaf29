from __future__ import annotations

import pytest

from classroom_attendance.core.enums import Role
from classroom_attendance.core.exceptions import AuthenticationError
from classroom_attendance.users.service import AuthService


def test_auth_returns_session_user(users):
    s_user = AuthService(users).authenticate("alice", "student123")

    assert s_user.role == Role.STUDENT
    assert s_user.student_id == "S001"


@pytest.mark.parametrize("user_name,password", [("alice", "wrong"), ("nobody", "x"), ("", "x")])
def test_auth_wrong_credentials_raise(users, user_name, password):
    with pytest.raises(AuthenticationError):
        AuthService(users).authenticate(user_name, password)
