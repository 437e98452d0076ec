from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, time, timedelta
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .connection import DatabaseConnection


@contextmanager
def db_cursor(conn_factory: DatabaseConnection, *, dictionary: bool = True) -> Iterator[Tuple[Any, Any]]:
    """One connection per unit of work: commit on success, roll back on any error."""
    conn = conn_factory.connect()
    cur = conn.cursor(dictionary=dictionary)
    try:
        yield conn, cur
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        cur.close()
        conn.close()


def fetchone(cur) -> Optional[Dict[str, Any]]:
    return cur.fetchone() or None


def fetchall(cur) -> List[Dict[str, Any]]:
    return list(cur.fetchall() or [])


def placeholders(count: int) -> str:
    """`%s,%s,...` for IN (...) clauses."""
    return ",".join(["%s"] * int(count))


def to_time(value: Any) -> Optional[time]:
    """Event start/end columns are TIME; the connector hands them back as timedelta."""
    if value is None or isinstance(value, time):
        return value
    if isinstance(value, timedelta):
        return (datetime.min + timedelta(seconds=int(value.total_seconds()) % 86400)).time()
    if isinstance(value, str):
        fmt = "%H:%M:%S" if value.count(":") == 2 else "%H:%M"
        return datetime.strptime(value.strip(), fmt).time()
    raise TypeError(f"Unsupported TIME value: {value!r}")
