"""Example: drive the service layer directly (no Flask).

Controllers are a thin layer; the attendance rules live in the services.
"""

import importlib

from classroom_attendance.config import get_settings_module
from classroom_attendance.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    svc = container.attendance_service

    session = svc.start_session(1, mode="code")
    print("started", session.session_id, "code", session.session_code)
    print(svc.get_course_attendance_stats(1, session.session_id))
    svc.end_session(session.session_id)


if __name__ == "__main__":
    main()
