from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)

DEMO_USERS = (
    # (full_name, username, employee_id, password, role)
    ("Demo Manager", "manager", "EMP001", "manager123", "manager"),
    ("Demo Team Leader", "teamlead", "EMP002", "lead123", "team_leader"),
    ("Demo Engineer", "engineer", "EMP003", "engineer123", "engineer"),
)

SCHEMA_PATH = Path(__file__).with_name("schema.sql")

# quoted literal, statement terminator, run of plain text, or a stray quote
_SQL_TOKEN = re.compile(r"""'(?:[^'\\]|\\.)*'|"(?:[^"\\]|\\.)*"|;|[^'";]+|['"]""", re.S)
_DB_SCOPED = re.compile(r"(?im)^\s*(?:CREATE\s+DATABASE|USE)\b[^;]*;")
_LINE_COMMENT = re.compile(r"(?m)^\s*--.*$")


def prepare_schema_sql(sql: str) -> str:
    """Drop comment lines and CREATE DATABASE / USE so the target DB comes from config."""

    return _LINE_COMMENT.sub("", _DB_SCOPED.sub("", sql))


def split_statements(sql: str) -> Iterator[str]:
    """Yield the statements of ``sql``; semicolons inside quotes do not split."""

    statement: list[str] = []
    for token in _SQL_TOKEN.findall(sql):
        if token != ";":
            statement.append(token)
            continue
        text = "".join(statement).strip()
        statement = []
        if text:
            yield text
    tail = "".join(statement).strip()
    if tail:
        yield tail


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(
        host=target.host,
        port=target.port,
        user=target.user,
        password=target.password,
        use_pure=True,
    )
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    """Apply the bundled schema (idempotent: CREATE ... IF NOT EXISTS)."""

    target = DBConfig.from_dict(db_config)
    ensure_database_exists(db_config)

    schema_path = Path(schema_path)
    sql = prepare_schema_sql(schema_path.read_text(encoding="utf-8"))

    conn = _connect(target)
    try:
        cur = conn.cursor()
        for stmt in split_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()
    logger.info("Schema applied from %s to %s", schema_path.name, target.database)


def ensure_demo_users(db_config: dict) -> None:
    """Upsert one demo user per role (passwords are reset on every run)."""

    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor(dictionary=True)
        for full_name, username, employee_id, password, role in DEMO_USERS:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE username=%s", (username,))
            existing = cur.fetchone()
            if existing:
                cur.execute(
                    """
                    UPDATE users
                    SET full_name=%s, employee_id=%s, password_hash=%s, role=%s, is_active=1
                    WHERE username=%s
                    """,
                    (full_name, employee_id, password_hash, role, username),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO users (full_name, username, employee_id, password_hash, role)
                    VALUES (%s, %s, %s, %s, %s)
                    """,
                    (full_name, username, employee_id, password_hash, role),
                )
        conn.commit()
    finally:
        conn.close()
    logger.info("Demo users ready (%s)", ", ".join(u[1] for u in DEMO_USERS))


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
