from __future__ import annotations

import logging

from flask import Flask, request, session

from ..common.auth import login_required
from ..common.responses import envelope
from ..common.validators import require_json_object
from ..core.exceptions import AuthenticationError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/v1/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        try:
            data = require_json_object(request.get_json(silent=True))
            s_user = container.auth_service.authenticate(data.get("user_name", ""), data.get("password", ""))
        except (AuthenticationError, ValidationError) as e:
            return envelope(e.code, e.message)
        except Exception:
            logger.exception("Login failed")
            return envelope(500, "Internal server error")

        session.clear()
        session["user_id"] = s_user.user_id
        session["user_name"] = s_user.user_name
        session["role"] = s_user.role.value
        session["student_id"] = s_user.student_id
        return envelope(200, "Logged in", s_user.to_dict())

    @app.route("/api/v1/auth/logout", methods=["POST"], endpoint="auth_logout")
    def logout():
        session.clear()
        return envelope(200, "Logged out")

    @app.route("/api/v1/auth/me", methods=["GET"], endpoint="auth_me")
    @login_required
    def me():
        return envelope(
            200,
            "",
            {
                "user_id": session.get("user_id"),
                "user_name": session.get("user_name"),
                "role": session.get("role"),
                "student_id": session.get("student_id"),
            },
        )
