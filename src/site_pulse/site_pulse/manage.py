"""Database housekeeping commands (``site-pulse-db init|seed|tables``)."""

from __future__ import annotations

import argparse
import importlib
import logging
from typing import Optional, Sequence

from dotenv import load_dotenv

from config import get_settings_module

from .common.logging_setup import setup_logging
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables

logger = logging.getLogger(__name__)


def _target(db_config: dict) -> str:
    return (
        f"{db_config.get('user')}@{db_config.get('host')}:"
        f"{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


def init(db_config: dict) -> None:
    apply_schema(db_config)
    logger.info("Schema ready on %s (tables=%s)", _target(db_config), len(list_tables(db_config)))


def seed(db_config: dict) -> None:
    ensure_demo_users(db_config)
    logger.info("Demo users seeded on %s", _target(db_config))


def tables(db_config: dict) -> None:
    for name in list_tables(db_config):
        print(name)


COMMANDS = {"init": init, "seed": seed, "tables": tables}


def main(argv: Optional[Sequence[str]] = None) -> None:
    ap = argparse.ArgumentParser(prog="site-pulse-db", description=__doc__)
    ap.add_argument("--settings", help="settings module (default: from APP_ENV)")
    sub = ap.add_subparsers(dest="cmd", required=True)
    sub.add_parser("init", help="create the database and apply the schema")
    sub.add_parser("seed", help="upsert one demo user per role")
    sub.add_parser("tables", help="list tables in the configured database")
    args = ap.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(args.settings or get_settings_module())
    setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    COMMANDS[args.cmd](dict(settings.DB_CONFIG))


if __name__ == "__main__":
    main()
