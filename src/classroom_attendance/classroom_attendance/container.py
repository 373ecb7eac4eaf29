from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_record_repository import MySQLAttendanceRecordRepository
from .attendance.mysql_session_repository import MySQLSessionRepository
from .attendance.repository import AttendanceRecordRepository, SessionRepository
from .attendance.service import AttendanceSessionService
from .core.constants import DEFAULT_RANDOM_SELECTION_SIZE
from .database.connection import DatabaseConnection, DBConfig
from .roster.mysql_roster_repository import MySQLRosterRepository
from .roster.repository import RosterRepository
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    roster_repo: RosterRepository
    sessions_repo: SessionRepository
    records_repo: AttendanceRecordRepository

    auth_service: AuthService
    attendance_service: AttendanceSessionService


def build_services(
    *,
    users_repo: UserRepository,
    roster_repo: RosterRepository,
    sessions_repo: SessionRepository,
    records_repo: AttendanceRecordRepository,
    conn: Optional[DatabaseConnection] = None,
    **service_options,
) -> Container:
    """Wire services on top of any repository implementations (MySQL or in-memory)."""
    return Container(
        conn=conn,
        users_repo=users_repo,
        roster_repo=roster_repo,
        sessions_repo=sessions_repo,
        records_repo=records_repo,
        auth_service=AuthService(users_repo),
        attendance_service=AttendanceSessionService(
            sessions_repo,
            records_repo,
            roster_repo,
            **service_options,
        ),
    )


def build_container(*, db_config: dict, selection_size: int = DEFAULT_RANDOM_SELECTION_SIZE) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return build_services(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        roster_repo=MySQLRosterRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        records_repo=MySQLAttendanceRecordRepository(conn),
        selection_size=selection_size,
    )
