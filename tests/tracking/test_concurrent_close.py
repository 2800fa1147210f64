"""Two requests racing past an "is it still open?" lookup and both trying to close.

Only the request whose conditional update matched a row may report success;
the other gets the matching "nothing open" error and nothing it computed is
reported as stored.
"""

from __future__ import annotations

import threading
from datetime import datetime

from fakes import InMemoryTracking

from site_pulse.core.enums import SessionStatus
from site_pulse.core.exceptions import NoActiveActivity, NoActiveBreak, NoActiveSession
from site_pulse.tracking.service import TimeTrackingService


class RacingTracking(InMemoryTracking):
    """Holds the armed lookup until every request has made it."""

    def __init__(self, parties: int):
        super().__init__()
        self._barrier = threading.Barrier(parties, timeout=5)
        self.armed: set[str] = set()

    def _hold(self, lookup: str) -> None:
        if lookup in self.armed:
            self._barrier.wait()

    def get_open_session(self, user_id):
        result = super().get_open_session(user_id)
        self._hold("session")
        return result

    def get_open_activity(self, user_id):
        result = super().get_open_activity(user_id)
        self._hold("activity")
        return result

    def get_open_break(self, session_id):
        result = super().get_open_break(session_id)
        self._hold("break")
        return result


def _race(*calls):
    outcomes = []
    lock = threading.Lock()

    def attempt(call):
        try:
            outcome = ("ok", call())
        except (NoActiveActivity, NoActiveBreak, NoActiveSession) as e:
            outcome = ("conflict", type(e))
        with lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=attempt, args=(c,)) for c in calls]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)
    return outcomes


def test_concurrent_end_break_stores_only_the_reported_duration():
    repo = RacingTracking(parties=2)
    svc = TimeTrackingService(repo)
    session_id = svc.clock_in(1, now=datetime(2026, 3, 2, 9, 0)).session_id
    svc.start_break(1, now=datetime(2026, 3, 2, 13, 0))
    repo.armed.add("break")

    outcomes = _race(
        lambda: svc.end_break(1, now=datetime(2026, 3, 2, 13, 30)),
        lambda: svc.end_break(1, now=datetime(2026, 3, 2, 13, 45)),
    )

    winners = [value for kind, value in outcomes if kind == "ok"]
    assert len(winners) == 1
    assert [value for kind, value in outcomes if kind == "conflict"] == [NoActiveBreak]
    session = repo.sessions[session_id]
    assert session.break_minutes == winners[0].duration_minutes
    assert session.status == SessionStatus.CLOCKED_IN


def test_concurrent_stop_activity_reports_one_stop():
    repo = RacingTracking(parties=2)
    svc = TimeTrackingService(repo)
    svc.clock_in(1, now=datetime(2026, 3, 2, 9, 0))
    activity_id = svc.start_activity(1, now=datetime(2026, 3, 2, 9, 10)).activity_id
    repo.armed.add("activity")

    outcomes = _race(
        lambda: svc.stop_activity(1, now=datetime(2026, 3, 2, 10, 0)),
        lambda: svc.stop_activity(1, now=datetime(2026, 3, 2, 10, 20)),
    )

    winners = [value for kind, value in outcomes if kind == "ok"]
    assert len(winners) == 1
    assert [value for kind, value in outcomes if kind == "conflict"] == [NoActiveActivity]
    assert repo.activities[activity_id].duration_minutes == winners[0].duration_minutes


def test_concurrent_clock_out_closes_the_session_once():
    repo = RacingTracking(parties=2)
    svc = TimeTrackingService(repo)
    session_id = svc.clock_in(1, now=datetime(2026, 3, 2, 8, 0)).session_id
    repo.armed.add("session")

    outcomes = _race(
        lambda: svc.clock_out(1, now=datetime(2026, 3, 2, 17, 0)),
        lambda: svc.clock_out(1, now=datetime(2026, 3, 2, 18, 0)),
    )

    winners = [value for kind, value in outcomes if kind == "ok"]
    assert len(winners) == 1
    assert [value for kind, value in outcomes if kind == "conflict"] == [NoActiveSession]
    assert repo.sessions[session_id].total_hours == winners[0].total_hours


def test_clock_out_after_break_ended_elsewhere_uses_stored_minutes():
    class BreakEndedElsewhere(InMemoryTracking):
        def get_open_break(self, session_id):
            brk = super().get_open_break(session_id)
            if brk and self.interfere:
                self.interfere = False
                self.close_break(
                    break_id=brk.break_id,
                    session_id=session_id,
                    end_time=datetime(2026, 3, 2, 12, 30),
                    duration_minutes=30,
                )
            return brk

    repo = BreakEndedElsewhere()
    repo.interfere = False
    svc = TimeTrackingService(repo)
    svc.clock_in(1, now=datetime(2026, 3, 2, 8, 0))
    svc.start_break(1, now=datetime(2026, 3, 2, 12, 0))
    repo.interfere = True

    result = svc.clock_out(1, now=datetime(2026, 3, 2, 17, 0))

    assert result.closed_break is None
    assert result.break_minutes == 30
