from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from ..collaborators.access import AccessPolicy
from ..collaborators.model import EventAccess
from ..common.datetime_utils import parse_event_date, parse_optional_time
from ..common.validators import optional_text, require_max_length, require_non_empty
from ..core.enums import Permission
from ..core.exceptions import NotFoundError, ValidationError
from .model import Event
from .repository import EventRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventView:
    """Event plus what the current user may do on it."""

    event: Event
    access: EventAccess

    def to_dict(self) -> dict:
        data = self.event.to_dict()
        data["role"] = self.access.role.value
        data["permissions"] = self.access.permission_values()
        return data


def _parse_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def parse_event_fields(data: Mapping[str, Any], *, partial: bool) -> dict:
    """Map the JSON payload (camelCase) onto event columns."""
    fields: dict = {}

    if not partial or "name" in data:
        name = require_non_empty(data.get("name"), "Tên sự kiện")
        fields["name"] = require_max_length(name, "Tên sự kiện", 255)
    if not partial or "eventDate" in data:
        if not data.get("eventDate"):
            raise ValidationError("Ngày diễn ra sự kiện là bắt buộc")
        fields["event_date"] = parse_event_date(data["eventDate"])
    if "description" in data:
        fields["description"] = optional_text(data.get("description"))
    if "location" in data:
        fields["location"] = require_max_length(optional_text(data.get("location")), "Địa điểm", 255)
    if "startTime" in data:
        fields["start_time"] = parse_optional_time(data.get("startTime"))
    if "endTime" in data:
        fields["end_time"] = parse_optional_time(data.get("endTime"))
    if "isActive" in data:
        fields["is_active"] = _parse_bool(data.get("isActive"))
    elif not partial:
        fields["is_active"] = True

    return fields


class EventService:
    def __init__(
        self,
        events: EventRepository,
        access: AccessPolicy,
        *,
        on_change: Optional[Callable[[str], None]] = None,
    ):
        self._events = events
        self._access = access
        self._on_change = on_change or (lambda owner_id: None)

    def get_event(self, event_id: int) -> Event:
        event = self._events.get_by_id(int(event_id))
        if not event:
            raise NotFoundError("Sự kiện không tồn tại")
        return event

    def get_with_permission(self, event_id: int, user_id: str, permission: Permission) -> Event:
        event = self.get_event(event_id)
        self._access.require(event, user_id, permission)
        return event

    def list_for_user(self, user_id: str) -> list[EventView]:
        out: list[EventView] = []
        for event in self._events.list_accessible(user_id):
            access = self._access.resolve(event, user_id)
            if access is not None:
                out.append(EventView(event=event, access=access))
        return out

    def get(self, event_id: int, user_id: str) -> EventView:
        event = self.get_event(event_id)
        access = self._access.require(event, user_id, Permission.VIEW)
        return EventView(event=event, access=access)

    def create(self, user_id: str, data: Mapping[str, Any]) -> Event:
        fields = parse_event_fields(data, partial=False)
        event = self._events.create(user_id=user_id, fields=fields)
        logger.info("Event %s created by %s", event.id, user_id)
        self._on_change(user_id)
        return event

    def update(self, event_id: int, user_id: str, data: Mapping[str, Any]) -> Event:
        event = self.get_with_permission(event_id, user_id, Permission.EDIT_EVENT)
        fields = parse_event_fields(data, partial=True)
        updated = self._events.update(event.id, fields)
        if not updated:
            raise NotFoundError("Sự kiện không tồn tại")
        self._on_change(event.user_id)
        return updated

    def delete(self, event_id: int, user_id: str) -> None:
        # Only the owner may delete; anyone else sees the event as missing.
        if not self._events.delete(int(event_id), owner_id=user_id):
            raise NotFoundError("Sự kiện không tồn tại")
        logger.info("Event %s deleted by %s", event_id, user_id)
        self._on_change(user_id)
