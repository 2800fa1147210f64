from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for access control."""

    MANAGER = "manager"
    TEAM_LEADER = "team_leader"
    ENGINEER = "engineer"

    @property
    def can_review_team(self) -> bool:
        return self in (Role.MANAGER, Role.TEAM_LEADER)


class SessionStatus(str, Enum):
    """Attendance session state stored in the time_tracking table."""

    CLOCKED_IN = "clocked_in"
    ON_BREAK = "on_break"
    CLOCKED_OUT = "clocked_out"

    @property
    def is_open(self) -> bool:
        return self is not SessionStatus.CLOCKED_OUT
