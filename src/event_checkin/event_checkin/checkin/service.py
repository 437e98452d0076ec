from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import BinaryIO, Optional, Sequence

from ..attendees import qr
from ..attendees.repository import AttendeeRepository
from ..collaborators.access import AccessPolicy
from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_RECENT_LIMIT, MAX_RECENT_LIMIT, USER_AGENT_MAX_LENGTH
from ..core.enums import AttendeeStatus, CheckinAction, Permission
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..dashboard.service import DashboardService
from ..events.model import Event
from ..events.repository import EventRepository
from ..realtime.notifier import Notifier
from .model import CheckinLog, CheckinResult, RecentCheckin
from .repository import CheckinLogRepository

logger = logging.getLogger(__name__)

UNKNOWN_CODE_MESSAGE = "Mã QR không hợp lệ hoặc không tìm thấy người tham dự"


@dataclass(frozen=True)
class Transition:
    to_status: AttendeeStatus
    action: CheckinAction
    message: str


# A scan moves the attendee one step forward; checked_out is terminal.
TRANSITIONS = {
    AttendeeStatus.PENDING: Transition(AttendeeStatus.CHECKED_IN, CheckinAction.CHECK_IN, "Check-in thành công!"),
    AttendeeStatus.CHECKED_IN: Transition(AttendeeStatus.CHECKED_OUT, CheckinAction.CHECK_OUT, "Check-out thành công!"),
}


def clamp_limit(raw) -> int:
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_RECENT_LIMIT
    if limit < 1:
        return DEFAULT_RECENT_LIMIT
    return min(limit, MAX_RECENT_LIMIT)


class CheckinService:
    def __init__(
        self,
        attendees: AttendeeRepository,
        events: EventRepository,
        logs: CheckinLogRepository,
        access: AccessPolicy,
        dashboard: DashboardService,
        notifier: Notifier,
    ):
        self._attendees = attendees
        self._events = events
        self._logs = logs
        self._access = access
        self._dashboard = dashboard
        self._notifier = notifier

    def process(
        self,
        raw_code,
        user_id: str,
        *,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> CheckinResult:
        now = now or now_local()

        code = qr.normalize_code(raw_code)
        if not code:
            raise ValidationError("Mã QR không được để trống")

        attendee = self._attendees.get_by_qr_code(code)
        if not attendee:
            raise NotFoundError(UNKNOWN_CODE_MESSAGE)
        event = self._events.get_by_id(attendee.event_id)
        if not event:
            raise NotFoundError(UNKNOWN_CODE_MESSAGE)

        self._access.require(event, user_id, Permission.CHECKIN)

        step = TRANSITIONS.get(attendee.status)
        if step is None:
            raise ValidationError("Người tham dự này đã check-out")

        log = self._logs.record_transition(
            attendee.id,
            from_status=attendee.status,
            to_status=step.to_status,
            action=step.action,
            at=now,
            ip_address=(ip_address or None),
            user_agent=(user_agent or "")[:USER_AGENT_MAX_LENGTH] or None,
        )
        if log is None:
            logger.info("Lost check-in race for attendee %s (%s)", attendee.id, code)
            raise ConflictError("Mã QR vừa được xử lý, vui lòng thử lại")

        updated = attendee.with_status(step.to_status, now)
        logger.info("Attendee %s %s by %s (event %s)", attendee.id, step.action.value, user_id, event.id)

        result = CheckinResult(action=step.action, message=step.message, attendee=updated, event=event)
        self._publish(event, result, log)
        return result

    def process_image(self, stream: BinaryIO, user_id: str, **kwargs) -> CheckinResult:
        return self.process(qr.decode_image(stream), user_id, **kwargs)

    def _publish(self, event: Event, result: CheckinResult, log: CheckinLog) -> None:
        audience = self._access.audience(event)
        self._dashboard.invalidate_many(audience)

        attendee = result.attendee.to_dict()
        payload = log.to_dict()
        payload.update({"attendee": attendee, "event": event.to_dict(), "action": result.action.value})

        for uid in audience:
            try:
                self._notifier.broadcast_checkin_update(uid, payload)
                self._notifier.broadcast_stats_update(uid, self._dashboard.stats(uid).to_dict())
                self._notifier.broadcast_attendee_update(uid, event.id, attendee)
            except Exception:
                # The transition is committed; live updates are best effort.
                logger.exception("Failed to publish check-in update to user %s", uid)

    def recent(self, user_id: str, limit=None) -> Sequence[RecentCheckin]:
        return list(self._logs.recent_for_user(user_id, clamp_limit(limit)))
