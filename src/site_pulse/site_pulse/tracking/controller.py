from __future__ import annotations

from datetime import date
from typing import Optional

from flask import Flask, g, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import json_body, make_token_required, ok
from ..common.validators import optional_coordinate, optional_int, optional_text
from ..core.constants import API_PREFIX
from ..core.exceptions import ValidationError
from ..container import Container
from .model import Location


def _location_from(body: dict) -> Location:
    return Location(
        latitude=optional_coordinate(body.get("latitude"), "latitude", limit=90),
        longitude=optional_coordinate(body.get("longitude"), "longitude", limit=180),
        name=optional_text(body.get("locationName"), "locationName"),
    )


def _date_arg(name: str) -> Optional[date]:
    value = request.args.get(name)
    if not value:
        return None
    try:
        return parse_iso_date(value)
    except ValueError:
        raise ValidationError(f"{name} must be a YYYY-MM-DD date") from None


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.token_service)
    service = container.tracking_service

    def current_user_id() -> int:
        return g.current_user.user_id

    @app.route(f"{API_PREFIX}/clock-in", methods=["POST"], endpoint="clock_in")
    @token_required
    def clock_in():
        result = service.clock_in(current_user_id(), location=_location_from(json_body()))
        return ok(result.to_dict(), message="Clocked in successfully")

    @app.route(f"{API_PREFIX}/clock-out", methods=["POST"], endpoint="clock_out")
    @token_required
    def clock_out():
        result = service.clock_out(current_user_id(), location=_location_from(json_body()))
        return ok(result.to_dict(), message="Clocked out successfully")

    @app.route(f"{API_PREFIX}/activity/start", methods=["POST"], endpoint="activity_start")
    @token_required
    def activity_start():
        body = json_body()
        result = service.start_activity(
            current_user_id(),
            project_id=optional_int(body.get("projectId"), "projectId"),
            activity_type=optional_text(body.get("activityType"), "activityType", max_len=100),
            task_description=optional_text(body.get("taskDescription"), "taskDescription", max_len=5000),
        )
        return ok(result.to_dict(), message="Activity timer started")

    @app.route(f"{API_PREFIX}/activity/stop", methods=["POST"], endpoint="activity_stop")
    @token_required
    def activity_stop():
        result = service.stop_activity(current_user_id())
        return ok(result.to_dict(), message="Activity timer stopped")

    @app.route(f"{API_PREFIX}/break/start", methods=["POST"], endpoint="break_start")
    @token_required
    def break_start():
        body = json_body()
        result = service.start_break(
            current_user_id(),
            break_type=optional_text(body.get("breakType"), "breakType", max_len=50),
            notes=optional_text(body.get("notes"), "notes", max_len=5000),
        )
        return ok(result.to_dict(), message="Break started")

    @app.route(f"{API_PREFIX}/break/end", methods=["POST"], endpoint="break_end")
    @token_required
    def break_end():
        result = service.end_break(current_user_id())
        return ok(result.to_dict(), message="Break ended")

    @app.route(f"{API_PREFIX}/today-summary", methods=["GET"], endpoint="today_summary")
    @token_required
    def today_summary():
        return ok(service.get_today_summary(current_user_id()).to_dict())

    @app.route(f"{API_PREFIX}/weekly-report", methods=["GET"], endpoint="weekly_report")
    @token_required
    def weekly_report():
        rows = service.get_weekly_report(
            current_user_id(),
            start_date=_date_arg("startDate"),
            end_date=_date_arg("endDate"),
        )
        return ok([r.to_dict() for r in rows])

    @app.route(f"{API_PREFIX}/team-attendance", methods=["GET"], endpoint="team_attendance")
    @token_required
    def team_attendance():
        day = _date_arg("date") or container.clock().date()
        report = container.team_attendance_service.build(day=day, viewer_role=g.current_user.role)
        return ok(report.to_dict())
