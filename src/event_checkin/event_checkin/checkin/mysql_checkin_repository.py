from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence

from ..attendees.mysql_attendee_repository import row_to_attendee
from ..core.enums import AttendeeStatus, CheckinAction
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from ..events.mysql_event_repository import row_to_event
from .model import CheckinLog, RecentCheckin
from .repository import CheckinLogRepository

# Column that records the moment a status was reached.
_TIME_COLUMN = {
    AttendeeStatus.CHECKED_IN: "checkin_time",
    AttendeeStatus.CHECKED_OUT: "checkout_time",
}


class MySQLCheckinLogRepository(CheckinLogRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def record_transition(
        self,
        attendee_id: int,
        *,
        from_status: AttendeeStatus,
        to_status: AttendeeStatus,
        action: CheckinAction,
        at: datetime,
        ip_address: Optional[str],
        user_agent: Optional[str],
    ) -> Optional[CheckinLog]:
        time_col = _TIME_COLUMN[to_status]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE attendees SET status=%s, {time_col}=%s WHERE id=%s AND status=%s",
                (to_status.value, at, int(attendee_id), from_status.value),
            )
            if cur.rowcount != 1:
                return None

            cur.execute(
                """
                INSERT INTO checkin_logs(attendee_id, action, timestamp, ip_address, user_agent)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(attendee_id), action.value, at, ip_address, user_agent),
            )
            return CheckinLog(
                id=int(cur.lastrowid),
                attendee_id=int(attendee_id),
                action=action,
                timestamp=at,
                ip_address=ip_address,
                user_agent=user_agent,
            )

    def recent_for_user(self, user_id: str, limit: int) -> Sequence[RecentCheckin]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT l.id AS log_id, l.attendee_id AS log_attendee_id, l.action AS log_action,
                       l.timestamp AS log_timestamp, l.ip_address AS log_ip_address,
                       l.user_agent AS log_user_agent,
                       a.id AS a_id, a.event_id AS a_event_id, a.name AS a_name,
                       a.student_id AS a_student_id, a.email AS a_email, a.faculty AS a_faculty,
                       a.major AS a_major, a.qr_code AS a_qr_code, a.status AS a_status,
                       a.checkin_time AS a_checkin_time, a.checkout_time AS a_checkout_time,
                       a.created_at AS a_created_at,
                       e.id AS e_id, e.user_id AS e_user_id, e.name AS e_name,
                       e.description AS e_description, e.event_date AS e_event_date,
                       e.start_time AS e_start_time, e.end_time AS e_end_time,
                       e.location AS e_location, e.is_active AS e_is_active,
                       e.created_at AS e_created_at
                FROM checkin_logs l
                JOIN attendees a ON a.id = l.attendee_id
                JOIN events e ON e.id = a.event_id
                LEFT JOIN event_collaborators ec ON ec.event_id = e.id AND ec.user_id = %s
                WHERE e.user_id = %s OR ec.id IS NOT NULL
                ORDER BY l.timestamp DESC, l.id DESC
                LIMIT %s
                """,
                (user_id, user_id, int(limit)),
            )
            out = []
            for r in fetchall(cur):
                log = CheckinLog(
                    id=int(r["log_id"]),
                    attendee_id=int(r["log_attendee_id"]),
                    action=CheckinAction(r["log_action"]),
                    timestamp=r["log_timestamp"],
                    ip_address=r.get("log_ip_address"),
                    user_agent=r.get("log_user_agent"),
                )
                out.append(RecentCheckin(log=log, attendee=row_to_attendee(r, "a_"), event=row_to_event(r, "e_")))
            return out
