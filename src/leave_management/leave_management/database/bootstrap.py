from __future__ import annotations

import logging
import re
from contextlib import closing
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)

# (name, email, password, role, casual, sick, annual, reports to email)
DEMO_USERS = (
    ("Admin User", "admin@example.com", "Admin@1234", "admin", 10, 10, 20, None),
    ("John Doe", "john@example.com", "User@1234", "employee", 8, 5, 15, "admin@example.com"),
)


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = {
        "host": target.host,
        "port": target.port,
        "user": target.user,
        "password": target.password,
        "use_pure": True,
    }
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a schema/seed file on ';' outside quotes, dropping '--' comment lines."""
    buf: list[str] = []
    quote = ""
    escape = False

    lines = [ln for ln in sql.splitlines() if not ln.lstrip().startswith("--")]
    for ch in "\n".join(lines):
        if escape:
            escape = False
        elif ch == "\\":
            escape = True
        elif quote:
            if ch == quote:
                quote = ""
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue
        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_sql_file(db_config: dict, path: str | Path) -> None:
    target = DBConfig.from_dict(db_config)
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))

    with closing(_connect(target)) as conn:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    with closing(_connect(target, with_database=False)) as conn:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    _run_sql_file(db_config, schema_path)
    logger.info("Applied schema %s", schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _run_sql_file(db_config, seed_path)
    logger.info("Applied seed %s", seed_path)


def ensure_demo_users(db_config: dict) -> None:
    """Create or refresh the demo accounts (managers first, so reporting lines resolve)."""
    target = DBConfig.from_dict(db_config)

    with closing(_connect(target)) as conn:
        cur = conn.cursor(dictionary=True)

        for name, email, password, role, casual, sick, annual, manager_email in DEMO_USERS:
            manager_id = None
            if manager_email:
                cur.execute("SELECT user_id FROM users WHERE email=%s", (manager_email,))
                row = cur.fetchone()
                if not row:
                    raise RuntimeError(f"Missing demo manager {manager_email}")
                manager_id = int(row["user_id"])

            cur.execute(
                """
                INSERT INTO users(
                    name, email, password_hash, role,
                    casual_balance, sick_balance, annual_balance, reporting_to
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE
                    name=VALUES(name), password_hash=VALUES(password_hash), role=VALUES(role),
                    reporting_to=VALUES(reporting_to)
                """,
                (name, email, generate_password_hash(password), role, casual, sick, annual, manager_id),
            )

        conn.commit()


def list_tables(db_config: dict) -> list[str]:
    target = DBConfig.from_dict(db_config)
    with closing(_connect(target)) as conn:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
