from __future__ import annotations

from datetime import date

from ..core.enums import CheckinAction
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import DashboardStats
from .repository import DashboardRepository


class MySQLDashboardRepository(DashboardRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def stats_for_owner(self, user_id: str, today: date) -> DashboardStats:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT
                    COUNT(DISTINCT e.id) AS total_events,
                    COUNT(DISTINCT a.id) AS total_students,
                    COUNT(DISTINCT CASE
                        WHEN DATE(l.timestamp) = %s AND l.action = %s THEN l.id
                    END) AS today_checkins,
                    COUNT(DISTINCT CASE
                        WHEN e.is_active = 1 AND e.event_date >= %s THEN e.id
                    END) AS active_events
                FROM events e
                LEFT JOIN attendees a ON a.event_id = e.id
                LEFT JOIN checkin_logs l ON l.attendee_id = a.id
                WHERE e.user_id = %s
                """,
                (today, CheckinAction.CHECK_IN.value, today, user_id),
            )
            row = fetchone(cur) or {}
            return DashboardStats(
                total_events=int(row.get("total_events") or 0),
                total_students=int(row.get("total_students") or 0),
                today_checkins=int(row.get("today_checkins") or 0),
                active_events=int(row.get("active_events") or 0),
            )
