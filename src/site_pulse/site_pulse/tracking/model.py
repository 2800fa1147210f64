from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import SessionStatus


@dataclass(frozen=True)
class Location:
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    name: Optional[str] = None

    def to_dict(self) -> dict:
        return {"latitude": self.latitude, "longitude": self.longitude, "locationName": self.name}


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: one clock-in to clock-out window (time_tracking row)."""

    session_id: int
    user_id: int
    clock_in_time: datetime
    status: SessionStatus
    clock_in_location: Location = Location()
    clock_out_time: Optional[datetime] = None
    clock_out_location: Location = Location()
    total_hours: Optional[Decimal] = None
    overtime_hours: Optional[Decimal] = None
    break_minutes: int = 0

    @property
    def is_open(self) -> bool:
        return self.status.is_open


@dataclass(frozen=True)
class ActivitySession:
    """Domain entity: task-level interval inside an attendance session."""

    activity_id: int
    session_id: int
    user_id: int
    start_time: datetime
    project_id: Optional[int] = None
    activity_type: Optional[str] = None
    task_description: Optional[str] = None
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.end_time is None


@dataclass(frozen=True)
class BreakRecord:
    """Domain entity: a pause inside an attendance session."""

    break_id: int
    session_id: int
    break_type: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    notes: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.end_time is None
