from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import ActivitySession, AttendanceSession, BreakRecord, Location


class TimeTrackingRepository(Protocol):
    """Storage interface for sessions, activities and breaks.

    Implementations must keep "at most one open record per owner" for all three
    tables and report a violated insert with the matching StateConflictError.
    """

    # Attendance sessions

    def get_open_session(self, user_id: int) -> Optional[AttendanceSession]:
        """Most recent session (by clock-in) whose status is not clocked_out."""
        raise NotImplementedError

    def create_session(self, *, user_id: int, clock_in_time: datetime, location: Location) -> int:
        raise NotImplementedError

    def close_session(
        self,
        *,
        session_id: int,
        clock_out_time: datetime,
        location: Location,
        total_hours: Decimal,
        overtime_hours: Decimal,
    ) -> bool:
        raise NotImplementedError

    def list_sessions(
        self,
        *,
        start_date: date,
        end_date: date,
        user_id: Optional[int] = None,
    ) -> Sequence[AttendanceSession]:
        """Sessions whose clock-in calendar date is within [start_date, end_date]."""
        raise NotImplementedError

    # Activity timer

    def get_open_activity(self, user_id: int) -> Optional[ActivitySession]:
        raise NotImplementedError

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
        raise NotImplementedError

    def close_activity(self, *, activity_id: int, end_time: datetime, duration_minutes: int) -> bool:
        raise NotImplementedError

    def list_activities(self, session_ids: Sequence[int]) -> Sequence[ActivitySession]:
        raise NotImplementedError

    # Breaks

    def get_open_break(self, session_id: int) -> Optional[BreakRecord]:
        raise NotImplementedError

    def open_break(
        self,
        *,
        session_id: int,
        break_type: str,
        start_time: datetime,
        notes: Optional[str] = None,
    ) -> int:
        """Insert a break and set the session to on_break, atomically."""
        raise NotImplementedError

    def close_break(self, *, break_id: int, session_id: int, end_time: datetime, duration_minutes: int) -> bool:
        """Close a break, set the session back to clocked_in and add the minutes, atomically."""
        raise NotImplementedError

    def list_breaks(self, session_ids: Sequence[int]) -> Sequence[BreakRecord]:
        raise NotImplementedError
