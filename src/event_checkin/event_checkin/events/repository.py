from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import Event


class EventRepository(Protocol):
    def get_by_id(self, event_id: int) -> Optional[Event]:
        raise NotImplementedError

    def list_accessible(self, user_id: str) -> Sequence[Event]:
        """Events owned by the user or shared with them, newest first."""

        raise NotImplementedError

    def create(self, *, user_id: str, fields: Mapping[str, Any]) -> Event:
        raise NotImplementedError

    def update(self, event_id: int, fields: Mapping[str, Any]) -> Optional[Event]:
        raise NotImplementedError

    def delete(self, event_id: int, *, owner_id: str) -> bool:
        raise NotImplementedError
