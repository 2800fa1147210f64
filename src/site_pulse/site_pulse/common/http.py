"""JSON envelope, error translation and Bearer-token guard shared by controllers.

Every response uses one envelope:
    success -> {"success": true, "message"?: str, "data": ...}
    failure -> {"success": false, "message": str, "error"?: str}
"""

from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import Flask, current_app, g, jsonify, request
from werkzeug.exceptions import HTTPException

from ..core.exceptions import AuthenticationError, AuthorizationError, DomainError, ValidationError

logger = logging.getLogger(__name__)


def ok(data: Any = None, *, message: Optional[str] = None, status: int = 200):
    body: dict = {"success": True}
    if message:
        body["message"] = message
    body["data"] = data
    return jsonify(body), status


def fail(message: str, *, status: int = 400, error: Optional[str] = None):
    body: dict = {"success": False, "message": message}
    if error:
        body["error"] = error
    return jsonify(body), status


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _is_production() -> bool:
    return str(current_app.config.get("ENV_NAME", "development")).lower() in {"prod", "production"}


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ValidationError)
    def _validation(e: ValidationError):
        return fail(str(e), status=400)

    @app.errorhandler(AuthenticationError)
    def _authentication(e: AuthenticationError):
        return fail(str(e), status=401)

    @app.errorhandler(AuthorizationError)
    def _authorization(e: AuthorizationError):
        return fail(str(e), status=403)

    @app.errorhandler(DomainError)
    def _domain(e: DomainError):
        return fail(str(e), status=400)

    @app.errorhandler(HTTPException)
    def _http(e: HTTPException):
        return fail(e.description or e.name, status=e.code or 500)

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return fail("Internal server error", status=500, error=None if _is_production() else str(e))


def make_token_required(tokens):
    """Build a decorator that requires ``Authorization: Bearer <token>``.

    The verified claims are stored on ``flask.g.current_user``.
    """

    def token_required(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            header = request.headers.get("Authorization", "")
            parts = header.split()
            if len(parts) != 2 or parts[0].lower() != "bearer":
                raise AuthenticationError("No token provided")
            g.current_user = tokens.decode(parts[1])
            return view(*args, **kwargs)

        return wrapper

    return token_required
