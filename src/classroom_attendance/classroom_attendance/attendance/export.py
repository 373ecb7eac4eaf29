from __future__ import annotations

import io
from typing import Iterable, Iterator, List

from openpyxl import Workbook
from openpyxl.styles import Font

from ..core.enums import AttendanceStatus
from .model import AttendanceSession

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

HEADER = [
    "Date",
    "Course",
    "Session code",
    "Student ID",
    "Name",
    "Status",
    "Check-in time",
    "Notes",
]


def iter_session_rows(sessions: Iterable[AttendanceSession]) -> Iterator[List[str]]:
    """Flatten sessions into one row per student entry."""
    for session in sessions:
        day = session.start_time.strftime("%Y-%m-%d")
        lists = (
            (AttendanceStatus.PRESENT, session.attended_students),
            (AttendanceStatus.ABSENT, session.absent_students),
            (AttendanceStatus.EXCUSED, session.excused_students),
        )
        for status, entries in lists:
            for entry in entries:
                yield [
                    day,
                    session.course_name,
                    session.session_code,
                    entry.student_id,
                    entry.user_name,
                    status.value,
                    entry.check_in_time.strftime("%H:%M:%S") if entry.check_in_time else "-",
                    entry.notes or "",
                ]


def build_session_workbook(sessions: Iterable[AttendanceSession]) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = "Attendance"
    ws.append(HEADER)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    for row in iter_session_rows(sessions):
        ws.append(row)

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()
