from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Permission
from .model import Collaborator


class CollaboratorRepository(Protocol):
    def get(self, event_id: int, user_id: str) -> Optional[Collaborator]:
        raise NotImplementedError

    def list_for_event(self, event_id: int) -> Sequence[Collaborator]:
        """Collaborators of an event, with `user` populated."""

        raise NotImplementedError

    def create(
        self,
        *,
        event_id: int,
        user_id: str,
        permissions: Sequence[Permission],
        invited_by: str,
    ) -> Collaborator:
        raise NotImplementedError

    def update_permissions(self, *, event_id: int, user_id: str, permissions: Sequence[Permission]) -> bool:
        raise NotImplementedError

    def delete(self, event_id: int, user_id: str) -> bool:
        raise NotImplementedError
