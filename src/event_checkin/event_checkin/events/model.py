from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional

from ..common.datetime_utils import format_time, isoformat_or_none


@dataclass(frozen=True)
class Event:
    """Thực thể miền (domain): Sự kiện do ban tổ chức sở hữu."""

    id: int
    user_id: str
    name: str
    event_date: date
    description: Optional[str] = None
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    location: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "description": self.description,
            "eventDate": self.event_date.isoformat(),
            "startTime": format_time(self.start_time),
            "endTime": format_time(self.end_time),
            "location": self.location,
            "isActive": self.is_active,
            "createdAt": isoformat_or_none(self.created_at),
        }
