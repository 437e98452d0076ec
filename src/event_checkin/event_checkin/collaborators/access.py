from __future__ import annotations

from typing import Optional

from ..core.enums import EventRole, Permission
from ..core.exceptions import AuthorizationError
from ..events.model import Event
from .model import OWNER_ACCESS, EventAccess
from .repository import CollaboratorRepository

_DENIED_MESSAGES = {
    Permission.VIEW: "Bạn không có quyền xem sự kiện này",
    Permission.CHECKIN: "Bạn không có quyền check-in cho sự kiện này",
    Permission.MANAGE_ATTENDEES: "Không có quyền thao tác",
    Permission.EDIT_EVENT: "Bạn không có quyền chỉnh sửa sự kiện này",
}


class AccessPolicy:
    """Resolves what a user may do on an event: the owner may do everything,
    collaborators only what their record grants."""

    def __init__(self, collaborators: CollaboratorRepository):
        self._collaborators = collaborators

    def resolve(self, event: Event, user_id: str) -> Optional[EventAccess]:
        if event.user_id == user_id:
            return OWNER_ACCESS
        collab = self._collaborators.get(event.id, user_id)
        if not collab:
            return None
        return EventAccess(role=EventRole.COLLABORATOR, permissions=frozenset(collab.permissions))

    def require(self, event: Event, user_id: str, permission: Permission) -> EventAccess:
        access = self.resolve(event, user_id)
        if access is None or not access.can(permission):
            raise AuthorizationError(_DENIED_MESSAGES[permission])
        return access

    def require_owner(self, event: Event, user_id: str) -> None:
        if event.user_id != user_id:
            raise AuthorizationError("Chỉ chủ sự kiện mới có quyền quản lý cộng tác viên")

    def audience(self, event: Event) -> list[str]:
        """Users who can see the event: owner first, then collaborators."""
        user_ids = [event.user_id]
        for c in self._collaborators.list_for_event(event.id):
            if c.user_id not in user_ids:
                user_ids.append(c.user_id)
        return user_ids
