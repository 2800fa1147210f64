from __future__ import annotations

import logging
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_REPORT_DAYS
from ..core.enums import SessionStatus
from ..core.exceptions import (
    AlreadyClockedIn,
    AlreadyOnBreak,
    NoActiveActivity,
    NoActiveBreak,
    NoActiveSession,
    NotClockedIn,
    ValidationError,
)
from .calculator.base import TotalsCalculator
from .calculator.standard_calculator import StandardTotalsCalculator, duration_minutes
from .model import ActivitySession, AttendanceSession, BreakRecord, Location
from .repository import TimeTrackingRepository
from .results import (
    ActivityStartResult,
    ActivityStopResult,
    BreakEndResult,
    BreakStartResult,
    ClockInResult,
    ClockOutResult,
    DailyAggregate,
    DayTotals,
    SessionSummary,
    TodaySummary,
)

logger = logging.getLogger(__name__)

DEFAULT_BREAK_TYPE = "short"


def _sum_hours(values) -> Decimal:
    return sum((Decimal(v) for v in values if v is not None), Decimal("0.00"))


class TimeTrackingService:
    """Use cases of the attendance session state machine.

    clocked_in -> on_break -> clocked_in -> ... -> clocked_out. Activities and
    breaks are nested open/closed intervals inside an open session. All
    timestamps come from the server clock; ``now`` is only for tests.
    """

    def __init__(
        self,
        tracking: TimeTrackingRepository,
        *,
        calculator: TotalsCalculator | None = None,
        clock: Callable[[], datetime] = now_local,
        report_days: int = DEFAULT_REPORT_DAYS,
    ):
        self._tracking = tracking
        self._calculator = calculator or StandardTotalsCalculator()
        self._clock = clock
        self._report_days = int(report_days)

    def _now(self, now: datetime | None) -> datetime:
        return now or self._clock()

    def _require_open_session(self, user_id: int) -> AttendanceSession:
        session = self._tracking.get_open_session(user_id)
        if not session:
            raise NotClockedIn()
        return session

    # Attendance session

    def clock_in(self, user_id: int, *, location: Location = Location(), now: datetime | None = None) -> ClockInResult:
        now = self._now(now)

        if self._tracking.get_open_session(user_id):
            raise AlreadyClockedIn()

        session_id = self._tracking.create_session(user_id=user_id, clock_in_time=now, location=location)
        logger.info("User %s clocked in (session=%s)", user_id, session_id)
        return ClockInResult(session_id=session_id, clock_in_time=now, location=location)

    def clock_out(self, user_id: int, *, location: Location = Location(), now: datetime | None = None) -> ClockOutResult:
        now = self._now(now)

        session = self._tracking.get_open_session(user_id)
        if not session:
            raise NoActiveSession()

        closed_break = None
        open_break = self._tracking.get_open_break(session.session_id)
        if open_break:
            closed_break = self._finish_break(session, open_break, now)
            if closed_break is None:
                # ended by a concurrent request; pick up its stored minutes
                session = self._tracking.get_open_session(user_id)
                if not session:
                    raise NoActiveSession()

        break_minutes = int(session.break_minutes or 0)
        if closed_break:
            break_minutes += closed_break.duration_minutes

        closed_activity = None
        open_activity = self._tracking.get_open_activity(user_id)
        if open_activity:
            closed_activity = self._finish_activity(open_activity, now)

        totals = self._calculator.totals(session.clock_in_time, now, break_minutes=break_minutes)
        closed = self._tracking.close_session(
            session_id=session.session_id,
            clock_out_time=now,
            location=location,
            total_hours=totals.total_hours,
            overtime_hours=totals.overtime_hours,
        )
        if not closed:
            raise NoActiveSession()
        logger.info(
            "User %s clocked out (session=%s, total=%s, overtime=%s)",
            user_id,
            session.session_id,
            totals.total_hours,
            totals.overtime_hours,
        )

        return ClockOutResult(
            session_id=session.session_id,
            clock_out_time=now,
            total_hours=totals.total_hours,
            overtime_hours=totals.overtime_hours,
            break_minutes=break_minutes,
            today_summary=self.get_day_totals(user_id, now.date()),
            closed_activity=closed_activity,
            closed_break=closed_break,
        )

    def get_day_totals(self, user_id: int, day: date) -> DayTotals:
        sessions = self._tracking.list_sessions(start_date=day, end_date=day, user_id=user_id)
        return DayTotals(
            day=day,
            session_count=len(sessions),
            total_hours=_sum_hours(s.total_hours for s in sessions),
            overtime_hours=_sum_hours(s.overtime_hours for s in sessions),
        )

    # Activity timer

    def start_activity(
        self,
        user_id: int,
        *,
        project_id: Optional[int] = None,
        activity_type: Optional[str] = None,
        task_description: Optional[str] = None,
        now: datetime | None = None,
    ) -> ActivityStartResult:
        now = self._now(now)
        session = self._require_open_session(user_id)

        superseded = None
        current = self._tracking.get_open_activity(user_id)
        if current:
            superseded = self._finish_activity(current, now)

        activity_id = self._tracking.create_activity(
            session_id=session.session_id,
            user_id=user_id,
            start_time=now,
            project_id=project_id,
            activity_type=activity_type,
            task_description=task_description,
        )
        logger.info(
            "User %s started activity %s%s",
            user_id,
            activity_id,
            f" (superseded {superseded.activity_id})" if superseded else "",
        )
        return ActivityStartResult(
            activity_id=activity_id,
            session_id=session.session_id,
            start_time=now,
            superseded=superseded,
        )

    def stop_activity(self, user_id: int, *, now: datetime | None = None) -> ActivityStopResult:
        now = self._now(now)

        activity = self._tracking.get_open_activity(user_id)
        if not activity:
            raise NoActiveActivity()

        result = self._finish_activity(activity, now)
        if result is None:
            raise NoActiveActivity()
        logger.info("User %s stopped activity %s (%s min)", user_id, result.activity_id, result.duration_minutes)
        return result

    def _finish_activity(self, activity: ActivitySession, now: datetime) -> Optional[ActivityStopResult]:
        """Close ``activity``; None when another request already closed it."""

        minutes = duration_minutes(activity.start_time, now)
        if not self._tracking.close_activity(activity_id=activity.activity_id, end_time=now, duration_minutes=minutes):
            return None
        return ActivityStopResult(
            activity_id=activity.activity_id,
            duration_minutes=minutes,
            start_time=activity.start_time,
            end_time=now,
        )

    # Breaks

    def start_break(
        self,
        user_id: int,
        *,
        break_type: Optional[str] = None,
        notes: Optional[str] = None,
        now: datetime | None = None,
    ) -> BreakStartResult:
        now = self._now(now)
        session = self._require_open_session(user_id)

        if session.status == SessionStatus.ON_BREAK or self._tracking.get_open_break(session.session_id):
            raise AlreadyOnBreak()

        break_type = break_type or DEFAULT_BREAK_TYPE
        break_id = self._tracking.open_break(
            session_id=session.session_id,
            break_type=break_type,
            start_time=now,
            notes=notes,
        )
        logger.info("User %s started %s break %s", user_id, break_type, break_id)
        return BreakStartResult(break_id=break_id, start_time=now, break_type=break_type)

    def end_break(self, user_id: int, *, now: datetime | None = None) -> BreakEndResult:
        now = self._now(now)

        session = self._tracking.get_open_session(user_id)
        if not session or session.status != SessionStatus.ON_BREAK:
            raise NoActiveBreak()

        open_break = self._tracking.get_open_break(session.session_id)
        if not open_break:
            raise NoActiveBreak()

        result = self._finish_break(session, open_break, now)
        if result is None:
            raise NoActiveBreak()
        logger.info("User %s ended break %s (%s min)", user_id, result.break_id, result.duration_minutes)
        return result

    def _finish_break(self, session: AttendanceSession, brk: BreakRecord, now: datetime) -> Optional[BreakEndResult]:
        minutes = duration_minutes(brk.start_time, now)
        closed = self._tracking.close_break(
            break_id=brk.break_id,
            session_id=session.session_id,
            end_time=now,
            duration_minutes=minutes,
        )
        if not closed:
            return None
        return BreakEndResult(break_id=brk.break_id, duration_minutes=minutes, start_time=brk.start_time, end_time=now)

    # Read models

    def get_today_summary(self, user_id: int, *, today: date | None = None) -> TodaySummary:
        today = today or self._clock().date()

        sessions = self._tracking.list_sessions(start_date=today, end_date=today, user_id=user_id)
        if not sessions:
            return TodaySummary()

        session_ids = [s.session_id for s in sessions]
        activities = sorted(self._tracking.list_activities(session_ids), key=lambda a: a.start_time, reverse=True)
        breaks = sorted(self._tracking.list_breaks(session_ids), key=lambda b: b.start_time, reverse=True)

        latest = max(sessions, key=lambda s: s.clock_in_time)
        own_activities = [a for a in activities if a.session_id == latest.session_id]
        own_breaks = [b for b in breaks if b.session_id == latest.session_id]

        summary = SessionSummary(
            session_id=latest.session_id,
            clock_in_time=latest.clock_in_time,
            clock_out_time=latest.clock_out_time,
            total_hours=latest.total_hours,
            overtime_hours=latest.overtime_hours,
            break_minutes=int(latest.break_minutes or 0),
            status=latest.status.value,
            location_name=latest.clock_in_location.name,
            activity_count=len(own_activities),
            total_activity_minutes=sum(int(a.duration_minutes or 0) for a in own_activities),
            break_count=len(own_breaks),
            total_break_minutes=sum(int(b.duration_minutes or 0) for b in own_breaks),
        )
        return TodaySummary(summary=summary, activities=activities, breaks=breaks)

    def get_weekly_report(
        self,
        user_id: int,
        *,
        start_date: date | None = None,
        end_date: date | None = None,
        today: date | None = None,
    ) -> list[DailyAggregate]:
        today = today or self._clock().date()
        end_date = end_date or today
        start_date = start_date or (today - timedelta(days=self._report_days))
        if start_date > end_date:
            raise ValidationError("startDate must not be after endDate")

        sessions = self._tracking.list_sessions(start_date=start_date, end_date=end_date, user_id=user_id)
        return self._aggregate_by_day(sessions)

    def _aggregate_by_day(self, sessions: Sequence[AttendanceSession]) -> list[DailyAggregate]:
        if not sessions:
            return []

        session_ids = [s.session_id for s in sessions]
        activity_counts: dict[int, int] = defaultdict(int)
        for a in self._tracking.list_activities(session_ids):
            activity_counts[a.session_id] += 1
        break_counts: dict[int, int] = defaultdict(int)
        for b in self._tracking.list_breaks(session_ids):
            break_counts[b.session_id] += 1

        by_day: dict[date, list[AttendanceSession]] = defaultdict(list)
        for s in sessions:
            by_day[s.clock_in_time.date()].append(s)

        rows = []
        for day, day_sessions in by_day.items():
            rows.append(
                DailyAggregate(
                    day=day,
                    days_worked=len(day_sessions),
                    total_hours=_sum_hours(s.total_hours for s in day_sessions),
                    overtime_hours=_sum_hours(s.overtime_hours for s in day_sessions),
                    break_minutes=sum(int(s.break_minutes or 0) for s in day_sessions),
                    activity_count=sum(activity_counts[s.session_id] for s in day_sessions),
                    break_count=sum(break_counts[s.session_id] for s in day_sessions),
                )
            )

        rows.sort(key=lambda r: r.day, reverse=True)
        return rows
