from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import FrozenSet, Iterable, Optional

from ..common.datetime_utils import isoformat_or_none
from ..core.enums import EventRole, Permission
from ..core.exceptions import ValidationError
from ..users.model import User

ALL_PERMISSIONS: tuple[Permission, ...] = tuple(Permission)
DEFAULT_PERMISSIONS: tuple[Permission, ...] = (Permission.VIEW, Permission.CHECKIN)


def normalize_permissions(values: Optional[Iterable]) -> tuple[Permission, ...]:
    """Validate and order permissions; collaborators can always view the event."""
    if values is None:
        return DEFAULT_PERMISSIONS
    if isinstance(values, str):
        values = [v for v in values.split(",") if v.strip()]

    chosen = {Permission.VIEW}
    for v in values:
        try:
            chosen.add(Permission(str(v).strip()))
        except ValueError:
            raise ValidationError(f"Quyền không hợp lệ: {v}")
    return tuple(p for p in ALL_PERMISSIONS if p in chosen)


@dataclass(frozen=True)
class Collaborator:
    """Người dùng phụ được cấp quyền trên sự kiện của người khác."""

    id: int
    event_id: int
    user_id: str
    permissions: tuple[Permission, ...]
    role: EventRole = EventRole.COLLABORATOR
    invited_by: Optional[str] = None
    created_at: Optional[datetime] = None
    user: Optional[User] = field(default=None, compare=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "eventId": self.event_id,
            "userId": self.user_id,
            "role": self.role.value,
            "permissions": [p.value for p in self.permissions],
            "invitedBy": self.invited_by,
            "createdAt": isoformat_or_none(self.created_at),
            "user": self.user.to_dict() if self.user else None,
        }


@dataclass(frozen=True)
class EventAccess:
    role: EventRole
    permissions: FrozenSet[Permission]

    def can(self, permission: Permission) -> bool:
        return permission in self.permissions

    def permission_values(self) -> list[str]:
        return [p.value for p in ALL_PERMISSIONS if p in self.permissions]


OWNER_ACCESS = EventAccess(role=EventRole.OWNER, permissions=frozenset(ALL_PERMISSIONS))
