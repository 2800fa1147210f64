"""Read/return models of the time-tracking use cases.

Each result knows how to render itself as the camelCase JSON payload the
clients expect; hours are rendered as 2-decimal strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from ..common.datetime_utils import iso_or_none
from .model import ActivitySession, BreakRecord, Location


def format_hours(value: Optional[Decimal]) -> Optional[str]:
    if value is None:
        return None
    return f"{Decimal(value):.2f}"


@dataclass(frozen=True)
class ClockInResult:
    session_id: int
    clock_in_time: datetime
    location: Location

    def to_dict(self) -> dict:
        return {
            "sessionId": self.session_id,
            "clockInTime": self.clock_in_time.isoformat(),
            "location": self.location.name,
            "latitude": self.location.latitude,
            "longitude": self.location.longitude,
        }


@dataclass(frozen=True)
class ActivityStopResult:
    activity_id: int
    duration_minutes: int
    start_time: datetime
    end_time: datetime

    def to_dict(self) -> dict:
        return {
            "activityId": self.activity_id,
            "durationMinutes": self.duration_minutes,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
        }


@dataclass(frozen=True)
class ActivityStartResult:
    activity_id: int
    session_id: int
    start_time: datetime
    # Set when starting this activity closed the one that was still running.
    superseded: Optional[ActivityStopResult] = None

    def to_dict(self) -> dict:
        return {
            "activityId": self.activity_id,
            "sessionId": self.session_id,
            "startTime": self.start_time.isoformat(),
            "superseded": self.superseded.to_dict() if self.superseded else None,
        }


@dataclass(frozen=True)
class BreakStartResult:
    break_id: int
    start_time: datetime
    break_type: str

    def to_dict(self) -> dict:
        return {
            "breakId": self.break_id,
            "startTime": self.start_time.isoformat(),
            "breakType": self.break_type,
        }


@dataclass(frozen=True)
class BreakEndResult:
    break_id: int
    duration_minutes: int
    start_time: datetime
    end_time: datetime

    def to_dict(self) -> dict:
        return {
            "breakId": self.break_id,
            "durationMinutes": self.duration_minutes,
            "startTime": self.start_time.isoformat(),
            "endTime": self.end_time.isoformat(),
        }


@dataclass(frozen=True)
class DayTotals:
    day: date
    session_count: int
    total_hours: Decimal
    overtime_hours: Decimal

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "totalSessions": self.session_count,
            "totalHours": format_hours(self.total_hours),
            "totalOvertime": format_hours(self.overtime_hours),
        }


@dataclass(frozen=True)
class ClockOutResult:
    session_id: int
    clock_out_time: datetime
    total_hours: Decimal
    overtime_hours: Decimal
    break_minutes: int
    today_summary: DayTotals
    closed_activity: Optional[ActivityStopResult] = None
    closed_break: Optional[BreakEndResult] = None

    def to_dict(self) -> dict:
        return {
            "sessionId": self.session_id,
            "clockOutTime": self.clock_out_time.isoformat(),
            "totalHours": format_hours(self.total_hours),
            "overtimeHours": format_hours(self.overtime_hours),
            "breakMinutes": self.break_minutes,
            "todaySummary": self.today_summary.to_dict(),
            "closedActivityId": self.closed_activity.activity_id if self.closed_activity else None,
            "closedBreakId": self.closed_break.break_id if self.closed_break else None,
        }


@dataclass(frozen=True)
class SessionSummary:
    session_id: int
    clock_in_time: datetime
    clock_out_time: Optional[datetime]
    total_hours: Optional[Decimal]
    overtime_hours: Optional[Decimal]
    break_minutes: int
    status: str
    location_name: Optional[str]
    activity_count: int
    total_activity_minutes: int
    break_count: int
    total_break_minutes: int

    def to_dict(self) -> dict:
        return {
            "id": self.session_id,
            "clockInTime": self.clock_in_time.isoformat(),
            "clockOutTime": iso_or_none(self.clock_out_time),
            "totalHours": format_hours(self.total_hours),
            "overtimeHours": format_hours(self.overtime_hours),
            "breakMinutes": self.break_minutes,
            "status": self.status,
            "locationName": self.location_name,
            "activityCount": self.activity_count,
            "totalActivityMinutes": self.total_activity_minutes,
            "breakCount": self.break_count,
            "totalBreakMinutes": self.total_break_minutes,
        }


def activity_to_dict(a: ActivitySession) -> dict:
    return {
        "id": a.activity_id,
        "projectId": a.project_id,
        "activityType": a.activity_type,
        "taskDescription": a.task_description,
        "startTime": a.start_time.isoformat(),
        "endTime": iso_or_none(a.end_time),
        "durationMinutes": a.duration_minutes,
    }


def break_to_dict(b: BreakRecord) -> dict:
    return {
        "id": b.break_id,
        "breakType": b.break_type,
        "startTime": b.start_time.isoformat(),
        "endTime": iso_or_none(b.end_time),
        "durationMinutes": b.duration_minutes,
        "notes": b.notes,
    }


@dataclass(frozen=True)
class TodaySummary:
    summary: Optional[SessionSummary] = None
    activities: List[ActivitySession] = field(default_factory=list)
    breaks: List[BreakRecord] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "summary": self.summary.to_dict() if self.summary else None,
            "activities": [activity_to_dict(a) for a in self.activities],
            "breaks": [break_to_dict(b) for b in self.breaks],
        }


@dataclass(frozen=True)
class DailyAggregate:
    day: date
    days_worked: int
    total_hours: Decimal
    overtime_hours: Decimal
    break_minutes: int
    activity_count: int
    break_count: int

    def to_dict(self) -> dict:
        return {
            "date": self.day.isoformat(),
            "daysWorked": self.days_worked,
            "totalHours": format_hours(self.total_hours),
            "overtimeHours": format_hours(self.overtime_hours),
            "breakMinutes": self.break_minutes,
            "activityCount": self.activity_count,
            "breakCount": self.break_count,
        }
