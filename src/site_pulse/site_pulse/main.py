from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.http import register_error_handlers
from .common.logging_setup import setup_logging
from .container import Container, build_container
from .core.constants import DEFAULT_FIXED_BREAK_HOURS, DEFAULT_JWT_EXPIRES_HOURS, DEFAULT_REGULAR_HOURS
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables
from .tracking.controller import register as register_tracking
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(*, container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    """Application factory.

    A prebuilt ``container`` skips all database setup (used by tests).
    """

    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["ENV_NAME"] = getattr(settings, "ENV_NAME", "development")

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_users(db_config)

        container = build_container(
            db_config=db_config,
            jwt_secret=getattr(settings, "JWT_SECRET", app.secret_key),
            jwt_expires_hours=int(getattr(settings, "JWT_EXPIRES_HOURS", DEFAULT_JWT_EXPIRES_HOURS)),
            regular_hours=float(getattr(settings, "OVERTIME_REGULAR_HOURS", DEFAULT_REGULAR_HOURS)),
            fixed_break_hours=float(getattr(settings, "OVERTIME_BREAK_DEDUCTION_HOURS", DEFAULT_FIXED_BREAK_HOURS)),
        )

    app.extensions["site_pulse"] = container

    register_error_handlers(app)
    register_users(app, container)
    register_tracking(app, container)

    return app
