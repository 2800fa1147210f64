from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Optional, Sequence

from site_pulse.core.enums import SessionStatus
from site_pulse.core.exceptions import AlreadyClockedIn, AlreadyOnBreak, StateConflictError
from site_pulse.tracking.model import ActivitySession, AttendanceSession, BreakRecord, Location
from site_pulse.users.model import User


class InMemoryTracking:
    """In-memory TimeTrackingRepository.

    Mirrors the unique "one open row per owner" indexes of schema.sql.
    """

    def __init__(self):
        self.sessions: dict[int, AttendanceSession] = {}
        self.activities: dict[int, ActivitySession] = {}
        self.breaks: dict[int, BreakRecord] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    # sessions

    def get_open_session(self, user_id: int) -> Optional[AttendanceSession]:
        open_sessions = [s for s in self.sessions.values() if s.user_id == user_id and s.is_open]
        if not open_sessions:
            return None
        return max(open_sessions, key=lambda s: s.clock_in_time)

    def create_session(self, *, user_id: int, clock_in_time: datetime, location: Location) -> int:
        with self._lock:
            if any(s.user_id == user_id and s.is_open for s in self.sessions.values()):
                raise AlreadyClockedIn()
            sid = next(self._ids)
            self.sessions[sid] = AttendanceSession(
                session_id=sid,
                user_id=user_id,
                clock_in_time=clock_in_time,
                status=SessionStatus.CLOCKED_IN,
                clock_in_location=location,
            )
            return sid

    def close_session(self, *, session_id, clock_out_time, location, total_hours, overtime_hours) -> bool:
        with self._lock:
            s = self.sessions.get(session_id)
            if not s or not s.is_open:
                return False
            self.sessions[session_id] = replace(
                s,
                clock_out_time=clock_out_time,
                clock_out_location=location,
                total_hours=total_hours,
                overtime_hours=overtime_hours,
                status=SessionStatus.CLOCKED_OUT,
            )
            return True

    def list_sessions(self, *, start_date: date, end_date: date, user_id: Optional[int] = None):
        items = [
            s
            for s in self.sessions.values()
            if start_date <= s.clock_in_time.date() <= end_date and (user_id is None or s.user_id == user_id)
        ]
        items.sort(key=lambda s: s.clock_in_time, reverse=True)
        return items

    # activities

    def get_open_activity(self, user_id: int) -> Optional[ActivitySession]:
        for a in self.activities.values():
            if a.user_id == user_id and a.is_open:
                return a
        return None

    def create_activity(self, *, session_id, user_id, start_time, project_id=None, activity_type=None, task_description=None) -> int:
        with self._lock:
            if self.get_open_activity(user_id):
                raise StateConflictError("Another activity is already running")
            aid = next(self._ids)
            self.activities[aid] = ActivitySession(
                activity_id=aid,
                session_id=session_id,
                user_id=user_id,
                start_time=start_time,
                project_id=project_id,
                activity_type=activity_type,
                task_description=task_description,
            )
            return aid

    def close_activity(self, *, activity_id, end_time, duration_minutes) -> bool:
        with self._lock:
            a = self.activities.get(activity_id)
            if not a or not a.is_open:
                return False
            self.activities[activity_id] = replace(a, end_time=end_time, duration_minutes=duration_minutes)
            return True

    def list_activities(self, session_ids: Sequence[int]):
        return [a for a in self.activities.values() if a.session_id in set(session_ids)]

    # breaks

    def get_open_break(self, session_id: int) -> Optional[BreakRecord]:
        for b in self.breaks.values():
            if b.session_id == session_id and b.is_open:
                return b
        return None

    def open_break(self, *, session_id, break_type, start_time, notes=None) -> int:
        with self._lock:
            if self.get_open_break(session_id):
                raise AlreadyOnBreak()
            bid = next(self._ids)
            self.breaks[bid] = BreakRecord(
                break_id=bid,
                session_id=session_id,
                break_type=break_type,
                start_time=start_time,
                notes=notes,
            )
            self.sessions[session_id] = replace(self.sessions[session_id], status=SessionStatus.ON_BREAK)
            return bid

    def close_break(self, *, break_id, session_id, end_time, duration_minutes) -> bool:
        with self._lock:
            b = self.breaks.get(break_id)
            if not b or not b.is_open:
                return False
            self.breaks[break_id] = replace(b, end_time=end_time, duration_minutes=duration_minutes)
            s = self.sessions[session_id]
            self.sessions[session_id] = replace(
                s,
                status=SessionStatus.CLOCKED_IN,
                break_minutes=s.break_minutes + duration_minutes,
            )
            return True

    def list_breaks(self, session_ids: Sequence[int]):
        return [b for b in self.breaks.values() if b.session_id in set(session_ids)]

    # test helpers

    def add_closed_session(
        self,
        *,
        user_id: int,
        clock_in: datetime,
        hours: float,
        overtime: str = "0.00",
        break_minutes: int = 0,
    ) -> int:
        sid = next(self._ids)
        self.sessions[sid] = AttendanceSession(
            session_id=sid,
            user_id=user_id,
            clock_in_time=clock_in,
            clock_out_time=clock_in + timedelta(hours=hours),
            status=SessionStatus.CLOCKED_OUT,
            total_hours=Decimal(str(hours)).quantize(Decimal("0.01")),
            overtime_hours=Decimal(overtime),
            break_minutes=break_minutes,
        )
        return sid


class InMemoryUsers:
    def __init__(self, users: Sequence[User] = ()):
        self.users_by_id = {u.user_id: u for u in users}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users_by_id.get(user_id)

    def get_by_username(self, username: str) -> Optional[User]:
        for u in self.users_by_id.values():
            if u.username == username:
                return u
        return None

    def list_active(self):
        return sorted((u for u in self.users_by_id.values() if u.is_active), key=lambda u: u.username)


class FakeClock:
    """Callable clock that tests can move forward."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def set(self, hour: int, minute: int = 0) -> datetime:
        self.now = self.now.replace(hour=hour, minute=minute, second=0)
        return self.now
