from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..attendees.model import Attendee
from ..common.datetime_utils import isoformat_or_none
from ..core.enums import CheckinAction
from ..events.model import Event


@dataclass(frozen=True)
class CheckinLog:
    """Một dòng nhật ký check-in/check-out (chỉ thêm, không sửa)."""

    id: int
    attendee_id: int
    action: CheckinAction
    timestamp: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "attendeeId": self.attendee_id,
            "action": self.action.value,
            "timestamp": isoformat_or_none(self.timestamp),
            "ipAddress": self.ip_address,
            "userAgent": self.user_agent,
        }


@dataclass(frozen=True)
class RecentCheckin:
    log: CheckinLog
    attendee: Attendee
    event: Event

    def to_dict(self) -> dict:
        data = self.log.to_dict()
        data["attendee"] = self.attendee.to_dict()
        data["event"] = self.event.to_dict()
        return data


@dataclass(frozen=True)
class CheckinResult:
    action: CheckinAction
    message: str
    attendee: Attendee
    event: Event

    def to_dict(self) -> dict:
        return {
            "success": True,
            "action": self.action.value,
            "message": self.message,
            "attendee": self.attendee.to_dict(),
            "event": self.event.to_dict(),
        }
