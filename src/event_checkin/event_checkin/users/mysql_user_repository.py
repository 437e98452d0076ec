from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import LocalCredential, User
from .repository import UserRepository

_USER_COLUMNS = "id, email, first_name, last_name, profile_image_url, created_at, updated_at"


def _to_user(row: dict) -> User:
    return User(
        id=str(row["id"]),
        email=row.get("email"),
        first_name=row.get("first_name"),
        last_name=row.get("last_name"),
        profile_image_url=row.get("profile_image_url"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, user_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE id=%s", (user_id,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE email=%s", (email,))
            row = fetchone(cur)
            return _to_user(row) if row else None

    def upsert(
        self,
        *,
        user_id: str,
        email: Optional[str],
        first_name: Optional[str],
        last_name: Optional[str],
        profile_image_url: Optional[str] = None,
    ) -> User:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(id, email, first_name, last_name, profile_image_url)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    email=VALUES(email),
                    first_name=VALUES(first_name),
                    last_name=VALUES(last_name),
                    profile_image_url=VALUES(profile_image_url),
                    updated_at=NOW()
                """,
                (user_id, email, first_name, last_name, profile_image_url),
            )
            cur.execute(f"SELECT {_USER_COLUMNS} FROM users WHERE id=%s", (user_id,))
            return _to_user(fetchone(cur))

    def get_credential_by_username(self, username: str) -> Optional[LocalCredential]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT user_id, username, password_hash, created_at FROM local_auth WHERE username=%s",
                (username,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return LocalCredential(
                user_id=str(row["user_id"]),
                username=row["username"],
                password_hash=row["password_hash"],
                created_at=row.get("created_at"),
            )

    def create_credential(self, *, user_id: str, username: str, password_hash: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO local_auth(user_id, username, password_hash) VALUES(%s,%s,%s)",
                (user_id, username, password_hash),
            )

    def search(self, query: str, *, exclude_user_id: Optional[str], limit: int) -> Sequence[User]:
        like = f"%{query}%"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.id, u.email, u.first_name, u.last_name, u.profile_image_url, u.created_at, u.updated_at
                FROM users u
                LEFT JOIN local_auth la ON la.user_id = u.id
                WHERE (u.email LIKE %s OR u.first_name LIKE %s OR u.last_name LIKE %s OR la.username LIKE %s)
                  AND (%s IS NULL OR u.id <> %s)
                ORDER BY u.email ASC
                LIMIT %s
                """,
                (like, like, like, like, exclude_user_id, exclude_user_id, int(limit)),
            )
            return [_to_user(r) for r in fetchall(cur)]
