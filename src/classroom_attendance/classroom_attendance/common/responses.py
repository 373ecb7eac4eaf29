from __future__ import annotations

from typing import Any

from flask import jsonify


def envelope(code: int, message: str = "", body: Any = None):
    """Uniform API envelope: ``{code, message, body}`` with HTTP status = code."""
    return jsonify({"code": int(code), "message": message, "body": body}), int(code)
