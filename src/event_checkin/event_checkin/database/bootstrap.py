from __future__ import annotations

import logging
import re
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)

# Quoted literals are matched whole so a ';' inside them never ends a statement.
_SQL_TOKEN = re.compile(r"""'(?:\\.|[^'\\])*'|"(?:\\.|[^"\\])*"|--[^\n]*|;|[^'";-]+|.""", re.S)
_DB_SWITCH = re.compile(r"^\s*(CREATE\s+DATABASE|USE)\b", re.I)


@contextmanager
def _session(db_config: dict, *, with_database: bool = True, dictionary: bool = False) -> Iterator:
    target = DBConfig.from_dict(db_config)
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    conn = mysql.connector.connect(**kwargs)
    try:
        yield conn.cursor(dictionary=dictionary)
        conn.commit()
    finally:
        conn.close()


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a script on ';', skipping `--` comments and the file's own CREATE DATABASE/USE lines."""
    buf: list[str] = []
    for token in _SQL_TOKEN.findall(sql):
        if token.startswith("--"):
            continue
        if token != ";":
            buf.append(token)
            continue
        stmt = "".join(buf).strip()
        buf.clear()
        if stmt and not _DB_SWITCH.match(stmt):
            yield stmt
    tail = "".join(buf).strip()
    if tail and not _DB_SWITCH.match(tail):
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    name = DBConfig.from_dict(db_config).database
    with _session(db_config, with_database=False) as cur:
        cur.execute(f"CREATE DATABASE IF NOT EXISTS `{name}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci")


def _apply_sql_file(db_config: dict, path: str | Path) -> int:
    statements = list(iter_sql_statements(Path(path).read_text(encoding="utf-8")))
    with _session(db_config) as cur:
        for stmt in statements:
            cur.execute(stmt)
    return len(statements)


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _apply_sql_file(db_config, schema_path)
    logger.info("Applied schema %s (%s statements)", schema_path, count)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _apply_sql_file(db_config, seed_path)
    logger.info("Applied seed %s (%s statements)", seed_path, count)


def ensure_demo_organizer(db_config: dict, *, username: str = "admin", password: str = "admin123") -> str:
    """Create (or reset the password of) the demo organizer account. Returns its user id."""
    password_hash = generate_password_hash(password)

    with _session(db_config, dictionary=True) as cur:
        cur.execute("SELECT user_id FROM local_auth WHERE username=%s", (username,))
        existing = cur.fetchone()
        if existing:
            cur.execute(
                "UPDATE local_auth SET password_hash=%s, updated_at=NOW() WHERE username=%s",
                (password_hash, username),
            )
            return existing["user_id"]

        user_id = str(uuid.uuid4())
        cur.execute(
            "INSERT INTO users (id, email, first_name, last_name) VALUES (%s, %s, %s, %s)",
            (user_id, "admin@example.com", "Ban", "Tổ chức"),
        )
        cur.execute(
            "INSERT INTO local_auth (user_id, username, password_hash) VALUES (%s, %s, %s)",
            (user_id, username, password_hash),
        )
        return user_id


def list_tables(db_config: dict) -> list[str]:
    with _session(db_config) as cur:
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
