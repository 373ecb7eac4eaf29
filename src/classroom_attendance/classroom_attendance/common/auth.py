from __future__ import annotations

from functools import wraps

from flask import session

from ..core.enums import Role
from .responses import envelope


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return envelope(401, "Please log in first")
        return view(*args, **kwargs)

    return wrapper


def role_required(role: Role):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return envelope(401, "Please log in first")
            if session.get("role") != role.value:
                return envelope(403, "You do not have permission for this action")
            return view(*args, **kwargs)

        return wrapper

    return decorator


admin_required = role_required(Role.ADMIN)
student_required = role_required(Role.STUDENT)
