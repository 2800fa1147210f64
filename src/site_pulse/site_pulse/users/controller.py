from __future__ import annotations

import logging

from flask import Flask, g

from ..common.http import json_body, make_token_required, ok
from ..core.constants import AUTH_PREFIX
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.token_service)

    @app.route(f"{AUTH_PREFIX}/login", methods=["POST"], endpoint="login")
    def login():
        body = json_body()
        result = container.auth_service.authenticate(str(body.get("username") or ""), str(body.get("password") or ""))
        logger.info("User %s logged in", result.user.username)
        return ok(result.to_dict(), message="Login successful")

    @app.route(f"{AUTH_PREFIX}/me", methods=["GET"], endpoint="me")
    @token_required
    def me():
        user = container.auth_service.get_current_user(g.current_user.user_id)
        return ok({"user": user.to_public_dict()})

    @app.route(f"{AUTH_PREFIX}/health", methods=["GET"], endpoint="health")
    def health():
        return ok({"status": "ok"})
