from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from ..common.datetime_utils import iso_or_none
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..tracking.model import AttendanceSession
from ..tracking.repository import TimeTrackingRepository
from ..tracking.results import format_hours
from ..users.repository import UserRepository


@dataclass(frozen=True)
class PresentRow:
    user_id: int
    username: str
    full_name: str
    session_count: int
    first_clock_in: datetime
    last_clock_out: Optional[datetime]
    total_hours: Decimal
    overtime_hours: Decimal
    break_minutes: int
    current_status: str

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "username": self.username,
            "fullName": self.full_name,
            "sessionCount": self.session_count,
            "firstClockIn": self.first_clock_in.isoformat(),
            "lastClockOut": iso_or_none(self.last_clock_out),
            "totalHours": format_hours(self.total_hours),
            "overtimeHours": format_hours(self.overtime_hours),
            "breakMinutes": self.break_minutes,
            "currentStatus": self.current_status,
        }


@dataclass(frozen=True)
class AbsentRow:
    user_id: int
    username: str
    full_name: str
    employee_id: Optional[str]
    role: str

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "username": self.username,
            "fullName": self.full_name,
            "employeeId": self.employee_id,
            "role": self.role,
        }


@dataclass(frozen=True)
class TeamAttendance:
    day: date
    present: List[PresentRow] = field(default_factory=list)
    absentees: List[AbsentRow] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "present": [r.to_dict() for r in self.present],
            "absentees": [r.to_dict() for r in self.absentees],
            "totalPresent": len(self.present),
            "totalAbsent": len(self.absentees),
        }


class TeamAttendanceService:
    """Manager view of one calendar day: who clocked in and who did not."""

    def __init__(self, tracking: TimeTrackingRepository, users: UserRepository):
        self._tracking = tracking
        self._users = users

    def build(self, *, day: date, viewer_role: Role) -> TeamAttendance:
        if not viewer_role.can_review_team:
            raise AuthorizationError("Only managers and team leaders can view team attendance")

        sessions_by_user: dict[int, list[AttendanceSession]] = defaultdict(list)
        for s in self._tracking.list_sessions(start_date=day, end_date=day):
            sessions_by_user[s.user_id].append(s)

        present: list[PresentRow] = []
        absentees: list[AbsentRow] = []
        for user in self._users.list_active():
            sessions = sessions_by_user.get(user.user_id)
            if sessions:
                present.append(self._present_row(user, sessions))
            elif user.role != Role.MANAGER:
                absentees.append(
                    AbsentRow(
                        user_id=user.user_id,
                        username=user.username,
                        full_name=user.full_name,
                        employee_id=user.employee_id,
                        role=user.role.value,
                    )
                )

        present.sort(key=lambda r: r.total_hours, reverse=True)
        return TeamAttendance(day=day, present=present, absentees=absentees)

    @staticmethod
    def _present_row(user, sessions: list[AttendanceSession]) -> PresentRow:
        ordered = sorted(sessions, key=lambda s: s.clock_in_time)
        latest = ordered[-1]
        clock_outs = [s.clock_out_time for s in ordered if s.clock_out_time]
        return PresentRow(
            user_id=user.user_id,
            username=user.username,
            full_name=user.full_name,
            session_count=len(ordered),
            first_clock_in=ordered[0].clock_in_time,
            last_clock_out=max(clock_outs) if clock_outs and not latest.is_open else None,
            total_hours=sum((s.total_hours or Decimal("0") for s in ordered), Decimal("0.00")),
            overtime_hours=sum((s.overtime_hours or Decimal("0") for s in ordered), Decimal("0.00")),
            break_minutes=sum(int(s.break_minutes or 0) for s in ordered),
            current_status=latest.status.value,
        )
