from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from ..core.enums import Permission
from ..core.exceptions import NotFoundError, ValidationError
from ..events.repository import EventRepository
from ..users.repository import UserRepository
from .access import AccessPolicy
from .model import Collaborator, normalize_permissions
from .repository import CollaboratorRepository

logger = logging.getLogger(__name__)


class CollaboratorService:
    """Use cases: the owner shares an event with other users."""

    def __init__(
        self,
        collaborators: CollaboratorRepository,
        events: EventRepository,
        users: UserRepository,
        access: AccessPolicy,
    ):
        self._collaborators = collaborators
        self._events = events
        self._users = users
        self._access = access

    def _event(self, event_id: int):
        event = self._events.get_by_id(int(event_id))
        if not event:
            raise NotFoundError("Sự kiện không tồn tại")
        return event

    def list(self, event_id: int, user_id: str) -> Sequence[Collaborator]:
        event = self._event(event_id)
        self._access.require(event, user_id, Permission.VIEW)
        return list(self._collaborators.list_for_event(event.id))

    def add(
        self,
        event_id: int,
        owner_id: str,
        target_user_id: str,
        permissions: Optional[Iterable] = None,
    ) -> Collaborator:
        event = self._event(event_id)
        self._access.require_owner(event, owner_id)

        target_user_id = (target_user_id or "").strip()
        if not target_user_id:
            raise ValidationError("Vui lòng chọn người dùng")
        target = self._users.get_by_id(target_user_id)
        if not target:
            raise NotFoundError("Người dùng không tồn tại")
        if target.id == event.user_id:
            raise ValidationError("Chủ sự kiện không thể là cộng tác viên")
        if self._collaborators.get(event.id, target.id):
            raise ValidationError("Người dùng đã là cộng tác viên")

        collab = self._collaborators.create(
            event_id=event.id,
            user_id=target.id,
            permissions=normalize_permissions(permissions),
            invited_by=owner_id,
        )
        logger.info("User %s added as collaborator on event %s", target.id, event.id)
        return collab

    def update_permissions(self, event_id: int, owner_id: str, target_user_id: str, permissions) -> Collaborator:
        event = self._event(event_id)
        self._access.require_owner(event, owner_id)
        if permissions is None:
            raise ValidationError("Danh sách quyền không hợp lệ")

        if not self._collaborators.update_permissions(
            event_id=event.id, user_id=target_user_id, permissions=normalize_permissions(permissions)
        ):
            raise NotFoundError("Cộng tác viên không tồn tại")
        return self._collaborators.get(event.id, target_user_id)

    def remove(self, event_id: int, owner_id: str, target_user_id: str) -> None:
        event = self._event(event_id)
        self._access.require_owner(event, owner_id)
        if not self._collaborators.delete(event.id, target_user_id):
            raise NotFoundError("Cộng tác viên không tồn tại")
        logger.info("User %s removed from event %s", target_user_id, event.id)
