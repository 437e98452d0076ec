from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..core.enums import AttendeeStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, placeholders
from .model import Attendee
from .repository import AttendeeRepository

_COLUMNS = (
    "a.id, a.event_id, a.name, a.student_id, a.email, a.faculty, a.major, a.qr_code, "
    "a.status, a.checkin_time, a.checkout_time, a.created_at"
)

_WRITABLE = ("name", "student_id", "email", "faculty", "major", "qr_code")


def row_to_attendee(row: dict, prefix: str = "") -> Attendee:
    return Attendee(
        id=int(row[f"{prefix}id"]),
        event_id=int(row[f"{prefix}event_id"]),
        name=row[f"{prefix}name"],
        student_id=row[f"{prefix}student_id"],
        email=row.get(f"{prefix}email"),
        faculty=row.get(f"{prefix}faculty"),
        major=row.get(f"{prefix}major"),
        qr_code=row.get(f"{prefix}qr_code"),
        status=AttendeeStatus(row.get(f"{prefix}status") or AttendeeStatus.PENDING.value),
        checkin_time=row.get(f"{prefix}checkin_time"),
        checkout_time=row.get(f"{prefix}checkout_time"),
        created_at=row.get(f"{prefix}created_at"),
    )


class MySQLAttendeeRepository(AttendeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get(self, cur, attendee_id: int) -> Optional[Attendee]:
        cur.execute(f"SELECT {_COLUMNS} FROM attendees a WHERE a.id=%s", (int(attendee_id),))
        row = fetchone(cur)
        return row_to_attendee(row) if row else None

    def get_by_id(self, attendee_id: int) -> Optional[Attendee]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._get(cur, attendee_id)

    def get_by_qr_code(self, qr_code: str) -> Optional[Attendee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendees a WHERE a.qr_code=%s", (qr_code,))
            row = fetchone(cur)
            return row_to_attendee(row) if row else None

    def qr_code_exists(self, qr_code: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS ok FROM attendees WHERE qr_code=%s LIMIT 1", (qr_code,))
            return fetchone(cur) is not None

    def list_for_event(self, event_id: int) -> Sequence[Attendee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendees a WHERE a.event_id=%s ORDER BY a.created_at DESC, a.id DESC",
                (int(event_id),),
            )
            return [row_to_attendee(r) for r in fetchall(cur)]

    def find_by_student_id(self, event_id: int, student_id: str) -> Optional[Attendee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendees a WHERE a.event_id=%s AND a.student_id=%s",
                (int(event_id), student_id),
            )
            row = fetchone(cur)
            return row_to_attendee(row) if row else None

    def create(self, *, event_id: int, fields: Mapping[str, Any]) -> Attendee:
        cols = [c for c in _WRITABLE if c in fields]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"INSERT INTO attendees(event_id, status, {', '.join(cols)}) "
                f"VALUES(%s, %s, {placeholders(len(cols))})",
                (int(event_id), AttendeeStatus.PENDING.value, *[fields[c] for c in cols]),
            )
            return self._get(cur, int(cur.lastrowid))

    def update(self, attendee_id: int, fields: Mapping[str, Any]) -> Optional[Attendee]:
        cols = [c for c in _WRITABLE if c in fields]
        with db_cursor(self._conn_factory) as (_, cur):
            if cols:
                cur.execute(
                    f"UPDATE attendees SET {', '.join(f'{c}=%s' for c in cols)} WHERE id=%s",
                    (*[fields[c] for c in cols], int(attendee_id)),
                )
            return self._get(cur, attendee_id)

    def set_qr_code(self, attendee_id: int, qr_code: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE attendees SET qr_code=%s WHERE id=%s", (qr_code, int(attendee_id)))

    def delete(self, attendee_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM attendees WHERE id=%s", (int(attendee_id),))
            return cur.rowcount > 0

    def delete_many(self, attendee_ids: Sequence[int]) -> int:
        ids = [int(i) for i in attendee_ids]
        if not ids:
            return 0
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"DELETE FROM attendees WHERE id IN ({placeholders(len(ids))})", tuple(ids))
            return int(cur.rowcount)

