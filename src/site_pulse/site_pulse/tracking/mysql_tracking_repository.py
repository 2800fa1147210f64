from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import SessionStatus
from ..core.exceptions import AlreadyClockedIn, AlreadyOnBreak, StateConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    is_duplicate_key,
    placeholders,
    to_decimal,
    to_float,
)
from .model import ActivitySession, AttendanceSession, BreakRecord, Location
from .repository import TimeTrackingRepository

SESSION_COLUMNS = """
    id, user_id, clock_in_time, clock_in_lat, clock_in_lng, location_name,
    clock_out_time, clock_out_lat, clock_out_lng, clock_out_location_name,
    total_hours, overtime_hours, break_minutes, status
"""

ACTIVITY_COLUMNS = """
    id, time_tracking_id, user_id, project_id, activity_type, task_description,
    start_time, end_time, duration_minutes
"""

BREAK_COLUMNS = "id, time_tracking_id, break_type, start_time, end_time, duration_minutes, notes"


def _session_from_row(r: dict) -> AttendanceSession:
    return AttendanceSession(
        session_id=int(r["id"]),
        user_id=int(r["user_id"]),
        clock_in_time=r["clock_in_time"],
        status=SessionStatus(r["status"]),
        clock_in_location=Location(
            latitude=to_float(r.get("clock_in_lat")),
            longitude=to_float(r.get("clock_in_lng")),
            name=r.get("location_name"),
        ),
        clock_out_time=r.get("clock_out_time"),
        clock_out_location=Location(
            latitude=to_float(r.get("clock_out_lat")),
            longitude=to_float(r.get("clock_out_lng")),
            name=r.get("clock_out_location_name"),
        ),
        total_hours=to_decimal(r.get("total_hours")),
        overtime_hours=to_decimal(r.get("overtime_hours")),
        break_minutes=int(r.get("break_minutes") or 0),
    )


def _activity_from_row(r: dict) -> ActivitySession:
    return ActivitySession(
        activity_id=int(r["id"]),
        session_id=int(r["time_tracking_id"]),
        user_id=int(r["user_id"]),
        start_time=r["start_time"],
        project_id=r.get("project_id"),
        activity_type=r.get("activity_type"),
        task_description=r.get("task_description"),
        end_time=r.get("end_time"),
        duration_minutes=r.get("duration_minutes"),
    )


def _break_from_row(r: dict) -> BreakRecord:
    return BreakRecord(
        break_id=int(r["id"]),
        session_id=int(r["time_tracking_id"]),
        break_type=r["break_type"],
        start_time=r["start_time"],
        end_time=r.get("end_time"),
        duration_minutes=r.get("duration_minutes"),
        notes=r.get("notes"),
    )


class MySQLTimeTrackingRepository(TimeTrackingRepository):
    """time_tracking / activity_sessions / breaks tables.

    The unique indexes on the generated open_* columns reject a second open
    row; a duplicate-key error is reported as the matching state conflict.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_open_session(self, user_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {SESSION_COLUMNS}
                FROM time_tracking
                WHERE user_id=%s AND status <> %s
                ORDER BY clock_in_time DESC
                LIMIT 1
                """,
                (user_id, SessionStatus.CLOCKED_OUT.value),
            )
            row = fetchone(cur)
            return _session_from_row(row) if row else None

    def create_session(self, *, user_id: int, clock_in_time: datetime, location: Location) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO time_tracking
                        (user_id, clock_in_time, clock_in_lat, clock_in_lng, location_name, status)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    """,
                    (
                        user_id,
                        clock_in_time,
                        location.latitude,
                        location.longitude,
                        location.name,
                        SessionStatus.CLOCKED_IN.value,
                    ),
                )
                return int(cur.lastrowid)
        except IntegrityError as e:
            if is_duplicate_key(e):
                raise AlreadyClockedIn() from e
            raise

    def close_session(
        self,
        *,
        session_id: int,
        clock_out_time: datetime,
        location: Location,
        total_hours: Decimal,
        overtime_hours: Decimal,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE time_tracking
                SET clock_out_time=%s,
                    clock_out_lat=%s,
                    clock_out_lng=%s,
                    clock_out_location_name=%s,
                    total_hours=%s,
                    overtime_hours=%s,
                    status=%s
                WHERE id=%s AND status <> %s
                """,
                (
                    clock_out_time,
                    location.latitude,
                    location.longitude,
                    location.name,
                    total_hours,
                    overtime_hours,
                    SessionStatus.CLOCKED_OUT.value,
                    session_id,
                    SessionStatus.CLOCKED_OUT.value,
                ),
            )
            return cur.rowcount > 0

    def list_sessions(
        self,
        *,
        start_date: date,
        end_date: date,
        user_id: Optional[int] = None,
    ) -> Sequence[AttendanceSession]:
        where = ["DATE(clock_in_time) BETWEEN %s AND %s"]
        params: list = [start_date, end_date]
        if user_id is not None:
            where.append("user_id=%s")
            params.append(user_id)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {SESSION_COLUMNS}
                FROM time_tracking
                WHERE {" AND ".join(where)}
                ORDER BY clock_in_time DESC
                """,
                tuple(params),
            )
            return [_session_from_row(r) for r in fetchall(cur)]

    def get_open_activity(self, user_id: int) -> Optional[ActivitySession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {ACTIVITY_COLUMNS}
                FROM activity_sessions
                WHERE user_id=%s AND end_time IS NULL
                ORDER BY start_time DESC
                LIMIT 1
                """,
                (user_id,),
            )
            row = fetchone(cur)
            return _activity_from_row(row) if row else None

    def create_activity(
        self,
        *,
        session_id: int,
        user_id: int,
        start_time: datetime,
        project_id: Optional[int] = None,
        activity_type: Optional[str] = None,
        task_description: Optional[str] = None,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO activity_sessions
                        (time_tracking_id, user_id, project_id, activity_type, task_description, start_time)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    """,
                    (session_id, user_id, project_id, activity_type, task_description, start_time),
                )
                return int(cur.lastrowid)
        except IntegrityError as e:
            if is_duplicate_key(e):
                raise StateConflictError("Another activity is already running") from e
            raise

    def close_activity(self, *, activity_id: int, end_time: datetime, duration_minutes: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE activity_sessions
                SET end_time=%s, duration_minutes=%s
                WHERE id=%s AND end_time IS NULL
                """,
                (end_time, int(duration_minutes), activity_id),
            )
            return cur.rowcount > 0

    def list_activities(self, session_ids: Sequence[int]) -> Sequence[ActivitySession]:
        if not session_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {ACTIVITY_COLUMNS}
                FROM activity_sessions
                WHERE time_tracking_id IN ({placeholders(len(session_ids))})
                ORDER BY start_time DESC
                """,
                tuple(session_ids),
            )
            return [_activity_from_row(r) for r in fetchall(cur)]

    def get_open_break(self, session_id: int) -> Optional[BreakRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {BREAK_COLUMNS}
                FROM breaks
                WHERE time_tracking_id=%s AND end_time IS NULL
                ORDER BY start_time DESC
                LIMIT 1
                """,
                (session_id,),
            )
            row = fetchone(cur)
            return _break_from_row(row) if row else None

    def open_break(
        self,
        *,
        session_id: int,
        break_type: str,
        start_time: datetime,
        notes: Optional[str] = None,
    ) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO breaks (time_tracking_id, break_type, start_time, notes)
                    VALUES (%s, %s, %s, %s)
                    """,
                    (session_id, break_type, start_time, notes),
                )
                break_id = int(cur.lastrowid)
                cur.execute(
                    "UPDATE time_tracking SET status=%s WHERE id=%s",
                    (SessionStatus.ON_BREAK.value, session_id),
                )
                return break_id
        except IntegrityError as e:
            if is_duplicate_key(e):
                raise AlreadyOnBreak() from e
            raise

    def close_break(self, *, break_id: int, session_id: int, end_time: datetime, duration_minutes: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE breaks
                SET end_time=%s, duration_minutes=%s
                WHERE id=%s AND end_time IS NULL
                """,
                (end_time, int(duration_minutes), break_id),
            )
            if cur.rowcount == 0:
                return False
            cur.execute(
                """
                UPDATE time_tracking
                SET status=%s, break_minutes=break_minutes + %s
                WHERE id=%s
                """,
                (SessionStatus.CLOCKED_IN.value, int(duration_minutes), session_id),
            )
            return True

    def list_breaks(self, session_ids: Sequence[int]) -> Sequence[BreakRecord]:
        if not session_ids:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {BREAK_COLUMNS}
                FROM breaks
                WHERE time_tracking_id IN ({placeholders(len(session_ids))})
                ORDER BY start_time DESC
                """,
                tuple(session_ids),
            )
            return [_break_from_row(r) for r in fetchall(cur)]
