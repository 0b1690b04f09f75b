from __future__ import annotations

import logging
import re
from datetime import date
from pathlib import Path
from typing import Iterable, Optional

from werkzeug.security import generate_password_hash

from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..users.model import NewProfile
from ..users.repository import UserRepository
from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ``;`` outside quoted strings."""

    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue

        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _connect(target: DBConfig, *, with_database: bool = True):
    # Not the shared singleton: bootstrap may target a database that does not exist yet.
    return DatabaseConnection(target).connect(with_database=with_database)


def _run_script(db_config: dict, path: Path) -> int:
    target = DBConfig.from_dict(db_config)
    sql = _strip_comments(_strip_create_db_and_use(path.read_text(encoding="utf-8")))

    conn = _connect(target)
    count = 0
    try:
        cur = conn.cursor()
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
    finally:
        conn.close()
    return count


def ensure_database_exists(db_config: dict) -> None:
    target = DBConfig.from_dict(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _run_script(db_config, Path(schema_path))
    logger.info("Applied %s (%d statements)", Path(schema_path).name, count)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _run_script(db_config, Path(seed_path))
    logger.info("Applied %s (%d statements)", Path(seed_path).name, count)


def ensure_admin_user(
    users: UserRepository,
    *,
    email: Optional[str],
    password: Optional[str],
    today: Optional[date] = None,
) -> bool:
    """Create the first admin account from settings; no-op once any admin exists."""

    if users.admin_exists():
        return False
    if not email or not password:
        logger.warning("No admin account exists and ADMIN_EMAIL/ADMIN_PASSWORD are not set")
        return False
    if len(password) < MIN_PASSWORD_LENGTH:
        logger.warning("ADMIN_PASSWORD is shorter than %d characters; admin not created", MIN_PASSWORD_LENGTH)
        return False

    email = email.strip().lower()
    users.create_user(
        email=email,
        password_hash=generate_password_hash(password),
        role=Role.ADMIN,
        profile=NewProfile(
            first_name="System",
            last_name="Admin",
            email=email,
            joining_date=today or date.today(),
        ),
    )
    logger.info("Created initial admin account %s", email)
    return True


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(DBConfig.from_dict(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
