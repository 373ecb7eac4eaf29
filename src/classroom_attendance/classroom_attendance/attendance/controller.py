from __future__ import annotations

import io
import logging
from functools import wraps

import qrcode
from flask import Flask, request, send_file, session

from ..common.auth import admin_required, student_required
from ..common.datetime_utils import parse_iso_date
from ..common.responses import envelope
from ..common.validators import require_json_object, require_non_empty, require_positive_int
from ..core.constants import MANUAL_CODE_PREFIX
from ..core.enums import AttendanceMode
from ..core.exceptions import DomainError, ValidationError
from ..container import Container
from .export import XLSX_MIMETYPE, build_session_workbook

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    svc = container.attendance_service

    def json_api(view):
        """Translate domain errors into the response envelope."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            try:
                return view(*args, **kwargs)
            except DomainError as e:
                return envelope(e.code, e.message)
            except Exception:
                logger.exception("Unhandled error in %s", request.path)
                return envelope(500, "Internal server error")

        return wrapper

    def _body() -> dict:
        return require_json_object(request.get_json(silent=True))

    def _date_arg(value):
        if not value:
            return None
        try:
            return parse_iso_date(str(value))
        except ValueError:
            raise ValidationError("Date must be YYYY-MM-DD") from None

    @app.route("/api/v1/attendance/start-session", methods=["POST"], endpoint="attendance_start_session")
    @admin_required
    @json_api
    def start_session():
        data = _body()
        s = svc.start_session(
            require_positive_int(data.get("course_id"), "Course"),
            _date_arg(data.get("session_date")),
            data.get("attendance_mode") or AttendanceMode.CODE.value,
        )
        return envelope(200, "Attendance session started", s.to_dict())

    @app.route(
        "/api/v1/attendance/end-session/<int:session_id>",
        methods=["POST", "PUT"],
        endpoint="attendance_end_session",
    )
    @admin_required
    @json_api
    def end_session(session_id: int):
        s = svc.end_session(session_id)
        return envelope(200, "Attendance session ended", s.to_dict())

    @app.route("/api/v1/attendance/check-in", methods=["POST"], endpoint="attendance_check_in")
    @student_required
    @json_api
    def check_in():
        student_id = session.get("student_id")
        if not student_id:
            return envelope(403, "This account is not linked to a student")

        data = _body()
        record = svc.check_in(student_id, str(data.get("attendance_code") or ""))
        return envelope(200, "Checked in", record.to_dict())

    @app.route("/api/v1/attendance/student-records", methods=["GET"], endpoint="attendance_student_records")
    @student_required
    @json_api
    def student_records():
        student_id = session.get("student_id")
        if not student_id:
            return envelope(403, "This account is not linked to a student")

        course_id = request.args.get("course_id")
        records = svc.get_student_attendance(
            student_id, require_positive_int(course_id, "Course") if course_id else None
        )
        return envelope(200, "", [r.to_dict() for r in records])

    @app.route("/api/v1/attendance/course-stats/<int:course_id>", methods=["GET"], endpoint="attendance_course_stats")
    @admin_required
    @json_api
    def course_stats(course_id: int):
        session_id = request.args.get("session_id")
        stats = svc.get_course_attendance_stats(
            course_id, require_positive_int(session_id, "Session") if session_id else None
        )
        return envelope(200, "", stats.to_dict())

    @app.route("/api/v1/attendance/active-sessions", methods=["GET"], endpoint="attendance_active_sessions")
    @admin_required
    @json_api
    def active_sessions():
        return envelope(200, "", [s.to_dict() for s in svc.get_active_sessions()])

    @app.route("/api/v1/attendance/all-sessions", methods=["GET"], endpoint="attendance_all_sessions")
    @admin_required
    @json_api
    def all_sessions():
        return envelope(200, "", [s.to_dict() for s in svc.get_all_sessions()])

    @app.route("/api/v1/attendance/session/<int:session_id>", methods=["GET"], endpoint="attendance_session")
    @admin_required
    @json_api
    def get_session(session_id: int):
        return envelope(200, "", svc.get_session(session_id).to_dict())

    @app.route(
        "/api/v1/attendance/course-students/<int:course_id>",
        methods=["GET"],
        endpoint="attendance_course_students",
    )
    @admin_required
    @json_api
    def course_students(course_id: int):
        return envelope(200, "", [s.to_dict() for s in svc.get_course_students(course_id)])

    @app.route("/api/v1/attendance/manual-attendance", methods=["POST"], endpoint="attendance_manual")
    @admin_required
    @json_api
    def manual_attendance():
        data = _body()
        outcome = svc.manual_attendance(
            require_positive_int(data.get("session_id"), "Session"),
            require_non_empty(data.get("student_id"), "Student"),
            data.get("status"),
        )
        return envelope(200, outcome.message, outcome.session.to_dict())

    @app.route(
        "/api/v1/attendance/update-attendance-status",
        methods=["PUT", "POST"],
        endpoint="attendance_update_status",
    )
    @admin_required
    @json_api
    def update_attendance_status():
        data = _body()
        outcome = svc.update_attendance_status(
            require_positive_int(data.get("session_id"), "Session"),
            require_non_empty(data.get("student_id"), "Student"),
            data.get("new_status"),
            data.get("notes"),
        )
        return envelope(200, outcome.message, outcome.session.to_dict())

    @app.route("/api/v1/attendance/export-excel/<int:course_id>", methods=["GET"], endpoint="attendance_export")
    @admin_required
    @json_api
    def export_excel(course_id: int):
        day = _date_arg(request.args.get("date"))
        sessions = svc.get_course_sessions(course_id, day)
        if not sessions:
            return envelope(404, "No attendance sessions to export")

        suffix = day.strftime("%Y%m%d") if day else "all"
        return send_file(
            io.BytesIO(build_session_workbook(sessions)),
            mimetype=XLSX_MIMETYPE,
            as_attachment=True,
            download_name=f"attendance_course{course_id}_{suffix}.xlsx",
        )

    @app.route(
        "/api/v1/attendance/random-selection/<int:course_id>",
        methods=["GET"],
        endpoint="attendance_random_selection",
    )
    @admin_required
    @json_api
    def random_selection(course_id: int):
        result = svc.random_selection(course_id, _date_arg(request.args.get("date")))
        return envelope(200, "Random selection done", result.to_dict())

    @app.route("/api/v1/attendance/session/<int:session_id>/qr", methods=["GET"], endpoint="attendance_session_qr")
    @admin_required
    @json_api
    def session_qr(session_id: int):
        """QR image of a code-mode session's check-in code, for projecting in class."""
        s = svc.get_session(session_id)
        if not s.is_active:
            return envelope(400, "Attendance session has ended")
        if s.session_code.startswith(MANUAL_CODE_PREFIX):
            return envelope(400, "Manual sessions have no check-in code")

        qr = qrcode.QRCode(
            version=1,
            error_correction=qrcode.constants.ERROR_CORRECT_L,
            box_size=10,
            border=2,
        )
        qr.add_data(s.session_code)
        qr.make(fit=True)
        img = qr.make_image(fill_color="black", back_color="white")

        buf = io.BytesIO()
        img.save(buf, format="PNG")
        buf.seek(0)
        return send_file(buf, mimetype="image/png")
