from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import EventRole, Permission
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from ..users.model import User
from .model import Collaborator, normalize_permissions
from .repository import CollaboratorRepository


def _to_collaborator(row: dict, *, with_user: bool = False) -> Collaborator:
    user = None
    if with_user:
        user = User(
            id=str(row["user_id"]),
            email=row.get("email"),
            first_name=row.get("first_name"),
            last_name=row.get("last_name"),
            profile_image_url=row.get("profile_image_url"),
        )
    return Collaborator(
        id=int(row["id"]),
        event_id=int(row["event_id"]),
        user_id=str(row["user_id"]),
        role=EventRole(row.get("role") or EventRole.COLLABORATOR.value),
        permissions=normalize_permissions(row.get("permissions") or ""),
        invited_by=row.get("invited_by"),
        created_at=row.get("created_at"),
        user=user,
    )


def _join(permissions: Sequence[Permission]) -> str:
    return ",".join(p.value for p in permissions)


class MySQLCollaboratorRepository(CollaboratorRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, event_id: int, user_id: str) -> Optional[Collaborator]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT id, event_id, user_id, role, permissions, invited_by, created_at
                FROM event_collaborators
                WHERE event_id=%s AND user_id=%s
                """,
                (int(event_id), user_id),
            )
            row = fetchone(cur)
            return _to_collaborator(row) if row else None

    def list_for_event(self, event_id: int) -> Sequence[Collaborator]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT ec.id, ec.event_id, ec.user_id, ec.role, ec.permissions, ec.invited_by, ec.created_at,
                       u.email, u.first_name, u.last_name, u.profile_image_url
                FROM event_collaborators ec
                JOIN users u ON u.id = ec.user_id
                WHERE ec.event_id=%s
                ORDER BY ec.created_at ASC, ec.id ASC
                """,
                (int(event_id),),
            )
            return [_to_collaborator(r, with_user=True) for r in fetchall(cur)]

    def create(
        self,
        *,
        event_id: int,
        user_id: str,
        permissions: Sequence[Permission],
        invited_by: str,
    ) -> Collaborator:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO event_collaborators(event_id, user_id, role, permissions, invited_by)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(event_id), user_id, EventRole.COLLABORATOR.value, _join(permissions), invited_by),
            )
            new_id = int(cur.lastrowid)
            cur.execute(
                """
                SELECT id, event_id, user_id, role, permissions, invited_by, created_at
                FROM event_collaborators WHERE id=%s
                """,
                (new_id,),
            )
            return _to_collaborator(fetchone(cur))

    def update_permissions(self, *, event_id: int, user_id: str, permissions: Sequence[Permission]) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE event_collaborators SET permissions=%s WHERE event_id=%s AND user_id=%s",
                (_join(permissions), int(event_id), user_id),
            )
            # MySQL reports 0 changed rows when the value is identical, so re-check existence.
            if cur.rowcount > 0:
                return True
            cur.execute(
                "SELECT 1 AS ok FROM event_collaborators WHERE event_id=%s AND user_id=%s",
                (int(event_id), user_id),
            )
            return fetchone(cur) is not None

    def delete(self, event_id: int, user_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM event_collaborators WHERE event_id=%s AND user_id=%s",
                (int(event_id), user_id),
            )
            return cur.rowcount > 0
