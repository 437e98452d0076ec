from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendeeStatus, CheckinAction
from .model import CheckinLog, RecentCheckin


class CheckinLogRepository(Protocol):
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
        """Move the attendee to `to_status` and append the log row in one transaction.

        The status only changes if it is still `from_status`; returns None when
        another request changed it first. If the log row cannot be written the
        status change is rolled back too.
        """

        raise NotImplementedError

    def recent_for_user(self, user_id: str, limit: int) -> Sequence[RecentCheckin]:
        """Newest logs on events the user owns or collaborates on."""

        raise NotImplementedError
