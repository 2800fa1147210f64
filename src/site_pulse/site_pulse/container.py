from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .common.datetime_utils import now_local
from .core.constants import DEFAULT_FIXED_BREAK_HOURS, DEFAULT_JWT_EXPIRES_HOURS, DEFAULT_REGULAR_HOURS
from .database.connection import DBConfig, DatabaseConnection
from .reports.service import TeamAttendanceService
from .tracking.calculator.standard_calculator import StandardTotalsCalculator
from .tracking.mysql_tracking_repository import MySQLTimeTrackingRepository
from .tracking.repository import TimeTrackingRepository
from .tracking.service import TimeTrackingService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService
from .users.tokens import TokenService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    tracking_repo: TimeTrackingRepository

    token_service: TokenService
    auth_service: AuthService
    tracking_service: TimeTrackingService
    team_attendance_service: TeamAttendanceService

    clock: Callable[[], datetime] = now_local


def wire(
    *,
    users_repo: UserRepository,
    tracking_repo: TimeTrackingRepository,
    jwt_secret: str,
    jwt_expires_hours: int = DEFAULT_JWT_EXPIRES_HOURS,
    regular_hours: float = DEFAULT_REGULAR_HOURS,
    fixed_break_hours: float = DEFAULT_FIXED_BREAK_HOURS,
    clock: Callable[[], datetime] = now_local,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Assemble services on top of the given repositories."""

    token_service = TokenService(jwt_secret, expires_hours=jwt_expires_hours)
    calculator = StandardTotalsCalculator(regular_hours=regular_hours, fixed_break_hours=fixed_break_hours)

    return Container(
        conn=conn,
        users_repo=users_repo,
        tracking_repo=tracking_repo,
        token_service=token_service,
        auth_service=AuthService(users_repo, token_service),
        tracking_service=TimeTrackingService(tracking_repo, calculator=calculator, clock=clock),
        team_attendance_service=TeamAttendanceService(tracking_repo, users_repo),
        clock=clock,
    )


def build_container(
    *,
    db_config: dict,
    jwt_secret: str,
    jwt_expires_hours: int = DEFAULT_JWT_EXPIRES_HOURS,
    regular_hours: float = DEFAULT_REGULAR_HOURS,
    fixed_break_hours: float = DEFAULT_FIXED_BREAK_HOURS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire(
        users_repo=MySQLUserRepository(conn),
        tracking_repo=MySQLTimeTrackingRepository(conn),
        jwt_secret=jwt_secret,
        jwt_expires_hours=jwt_expires_hours,
        regular_hours=regular_hours,
        fixed_break_hours=fixed_break_hours,
        conn=conn,
    )
