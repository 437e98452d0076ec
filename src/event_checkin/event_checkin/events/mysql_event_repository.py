from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, to_time
from .model import Event
from .repository import EventRepository

_COLUMNS = "e.id, e.user_id, e.name, e.description, e.event_date, e.start_time, e.end_time, e.location, e.is_active, e.created_at"

# Whitelist of columns a caller may write.
_WRITABLE = ("name", "description", "event_date", "start_time", "end_time", "location", "is_active")


def row_to_event(row: dict, prefix: str = "") -> Event:
    return Event(
        id=int(row[f"{prefix}id"]),
        user_id=str(row[f"{prefix}user_id"]),
        name=row[f"{prefix}name"],
        description=row.get(f"{prefix}description"),
        event_date=row[f"{prefix}event_date"],
        start_time=to_time(row.get(f"{prefix}start_time")),
        end_time=to_time(row.get(f"{prefix}end_time")),
        location=row.get(f"{prefix}location"),
        is_active=bool(row.get(f"{prefix}is_active", True)),
        created_at=row.get(f"{prefix}created_at"),
    )


class MySQLEventRepository(EventRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, event_id: int) -> Optional[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM events e WHERE e.id=%s", (int(event_id),))
            row = fetchone(cur)
            return row_to_event(row) if row else None

    def list_accessible(self, user_id: str) -> Sequence[Event]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM events e
                LEFT JOIN event_collaborators ec ON ec.event_id = e.id AND ec.user_id = %s
                WHERE e.user_id = %s OR ec.id IS NOT NULL
                ORDER BY e.created_at DESC, e.id DESC
                """,
                (user_id, user_id),
            )
            return [row_to_event(r) for r in fetchall(cur)]

    def create(self, *, user_id: str, fields: Mapping[str, Any]) -> Event:
        cols = [c for c in _WRITABLE if c in fields]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO events(user_id, {', '.join(cols)}) VALUES(%s, {', '.join(['%s'] * len(cols))})",
                (user_id, *[fields[c] for c in cols]),
            )
            event_id = int(cur.lastrowid)
            cur.execute(f"SELECT {_COLUMNS} FROM events e WHERE e.id=%s", (event_id,))
            return row_to_event(fetchone(cur))

    def update(self, event_id: int, fields: Mapping[str, Any]) -> Optional[Event]:
        cols = [c for c in _WRITABLE if c in fields]
        with db_cursor(self._conn_factory) as (_, cur):
            if cols:
                cur.execute(
                    f"UPDATE events SET {', '.join(f'{c}=%s' for c in cols)} WHERE id=%s",
                    (*[fields[c] for c in cols], int(event_id)),
                )
            cur.execute(f"SELECT {_COLUMNS} FROM events e WHERE e.id=%s", (int(event_id),))
            row = fetchone(cur)
            return row_to_event(row) if row else None

    def delete(self, event_id: int, *, owner_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM events WHERE id=%s AND user_id=%s", (int(event_id), owner_id))
            return cur.rowcount > 0
