from __future__ import annotations

from datetime import datetime

import pytest
from fakes import FakeClock, InMemoryTracking, InMemoryUsers
from werkzeug.security import generate_password_hash

from site_pulse.container import wire
from site_pulse.core.enums import Role
from site_pulse.main import create_app
from site_pulse.users.model import User

BASE = "/api/time-tracking"

ENGINEER = User(
    user_id=3,
    username="ravi",
    full_name="Ravi Kumar",
    password_hash=generate_password_hash("pw"),
    role=Role.ENGINEER,
    employee_id="EMP003",
)
MANAGER = User(
    user_id=1,
    username="boss",
    full_name="Boss",
    password_hash=generate_password_hash("pw"),
    role=Role.MANAGER,
)


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 3, 2, 9, 0))


@pytest.fixture
def container(clock):
    return wire(
        users_repo=InMemoryUsers([ENGINEER, MANAGER]),
        tracking_repo=InMemoryTracking(),
        jwt_secret="test-jwt-secret",
        clock=clock,
    )


@pytest.fixture
def client(container):
    app = create_app(container=container, settings_module="config.testing")
    return app.test_client()


def auth(container, user=ENGINEER) -> dict:
    return {"Authorization": f"Bearer {container.token_service.issue(user)}"}


def test_health_needs_no_token(client):
    resp = client.get("/api/auth/health")

    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "data": {"status": "ok"}}


def test_login_returns_token_usable_on_tracking_routes(client):
    resp = client.post("/api/auth/login", json={"username": "ravi", "password": "pw"})
    assert resp.status_code == 200
    token = resp.get_json()["data"]["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.get_json()["data"]["user"]["username"] == "ravi"


def test_login_with_bad_password_is_401(client):
    resp = client.post("/api/auth/login", json={"username": "ravi", "password": "nope"})

    assert resp.status_code == 401
    assert resp.get_json()["success"] is False


@pytest.mark.parametrize("header", [None, "Bearer", "Token abc", "Bearer not-a-jwt"])
def test_tracking_routes_require_valid_bearer_token(client, header):
    headers = {"Authorization": header} if header else {}
    resp = client.post(f"{BASE}/clock-in", json={}, headers=headers)

    assert resp.status_code == 401
    body = resp.get_json()
    assert body["success"] is False
    assert body["message"]


def test_full_day_over_http(client, container, clock):
    h = auth(container)

    resp = client.post(
        f"{BASE}/clock-in",
        json={"latitude": 12.97, "longitude": 77.59, "locationName": "Site A"},
        headers=h,
    )
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["location"] == "Site A"
    assert data["clockInTime"] == "2026-03-02T09:00:00"

    clock.set(9, 5)
    resp = client.post(f"{BASE}/activity/start", json={"projectId": 7, "activityType": "wiring"}, headers=h)
    assert resp.status_code == 200
    activity_id = resp.get_json()["data"]["activityId"]

    clock.set(10, 5)
    resp = client.post(f"{BASE}/activity/stop", json={}, headers=h)
    assert resp.get_json()["data"] == {
        "activityId": activity_id,
        "durationMinutes": 60,
        "startTime": "2026-03-02T09:05:00",
        "endTime": "2026-03-02T10:05:00",
    }

    clock.set(13, 0)
    resp = client.post(f"{BASE}/break/start", json={"breakType": "lunch", "notes": "canteen"}, headers=h)
    assert resp.get_json()["data"]["breakType"] == "lunch"

    clock.set(13, 30)
    resp = client.post(f"{BASE}/break/end", headers=h)
    assert resp.get_json()["data"]["durationMinutes"] == 30

    summary = client.get(f"{BASE}/today-summary", headers=h).get_json()["data"]
    assert summary["summary"]["status"] == "clocked_in"
    assert summary["summary"]["breakMinutes"] == 30
    assert len(summary["activities"]) == 1

    clock.set(19, 30)
    resp = client.post(f"{BASE}/clock-out", json={"locationName": "Site A"}, headers=h)
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["totalHours"] == "10.50"
    assert data["overtimeHours"] == "1.50"
    assert data["todaySummary"]["totalHours"] == "10.50"

    report = client.get(f"{BASE}/weekly-report", headers=h).get_json()["data"]
    assert report == [
        {
            "date": "2026-03-02",
            "daysWorked": 1,
            "totalHours": "10.50",
            "overtimeHours": "1.50",
            "breakMinutes": 30,
            "activityCount": 1,
            "breakCount": 1,
        }
    ]


@pytest.mark.parametrize(
    "path, message",
    [
        ("/clock-out", "No active clock-in found"),
        ("/activity/start", "Please clock in first"),
        ("/activity/stop", "No active activity found"),
        ("/break/start", "Please clock in first"),
        ("/break/end", "No active break found"),
    ],
)
def test_state_conflicts_are_400_with_message(client, container, path, message):
    resp = client.post(f"{BASE}{path}", json={}, headers=auth(container))

    assert resp.status_code == 400
    assert resp.get_json() == {"success": False, "message": message}


def test_double_clock_in_is_400(client, container):
    h = auth(container)
    client.post(f"{BASE}/clock-in", json={}, headers=h)

    resp = client.post(f"{BASE}/clock-in", json={}, headers=h)

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "You are already clocked in"


def test_invalid_coordinates_are_rejected(client, container):
    resp = client.post(f"{BASE}/clock-in", json={"latitude": "north"}, headers=auth(container))

    assert resp.status_code == 400
    assert "latitude" in resp.get_json()["message"]


@pytest.mark.parametrize("project_id", [True, 1.7, "abc"])
def test_activity_start_rejects_non_integer_project_id(client, container, project_id):
    h = auth(container)
    client.post(f"{BASE}/clock-in", json={}, headers=h)

    resp = client.post(f"{BASE}/activity/start", json={"projectId": project_id}, headers=h)

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "projectId must be an integer"


def test_weekly_report_validates_dates(client, container):
    h = auth(container)

    bad_format = client.get(f"{BASE}/weekly-report?startDate=03/01/2026", headers=h)
    inverted = client.get(f"{BASE}/weekly-report?startDate=2026-03-07&endDate=2026-03-01", headers=h)

    assert bad_format.status_code == 400
    assert inverted.status_code == 400


def test_today_summary_empty_is_not_an_error(client, container):
    resp = client.get(f"{BASE}/today-summary", headers=auth(container))

    assert resp.status_code == 200
    assert resp.get_json()["data"] == {"summary": None, "activities": [], "breaks": []}


def test_team_attendance_is_manager_only(client, container):
    client.post(f"{BASE}/clock-in", json={}, headers=auth(container))

    forbidden = client.get(f"{BASE}/team-attendance", headers=auth(container))
    allowed = client.get(f"{BASE}/team-attendance?date=2026-03-02", headers=auth(container, MANAGER))

    assert forbidden.status_code == 403
    data = allowed.get_json()["data"]
    assert data["totalPresent"] == 1
    assert data["present"][0]["username"] == "ravi"
    assert data["absentees"] == []


def test_unexpected_errors_are_500_with_detail_outside_production(client, container, monkeypatch):
    def boom(*args, **kwargs):
        raise RuntimeError("db went away")

    monkeypatch.setattr(container.tracking_repo, "get_open_session", boom)

    resp = client.post(f"{BASE}/clock-in", json={}, headers=auth(container))

    assert resp.status_code == 500
    assert resp.get_json() == {"success": False, "message": "Internal server error", "error": "db went away"}


def test_production_hides_error_detail(container, monkeypatch):
    app = create_app(container=container, settings_module="config.production")

    def boom(*args, **kwargs):
        raise RuntimeError("db went away")

    monkeypatch.setattr(container.tracking_repo, "get_open_session", boom)

    resp = app.test_client().post(f"{BASE}/clock-in", json={}, headers=auth(container))

    assert resp.status_code == 500
    assert "error" not in resp.get_json()


def test_unknown_route_uses_envelope(client):
    resp = client.get("/api/nope")

    assert resp.status_code == 404
    assert resp.get_json()["success"] is False
