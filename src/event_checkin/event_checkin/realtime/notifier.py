from __future__ import annotations

import logging
from typing import Any, Protocol

from .registry import ConnectionRegistry, user_room

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def broadcast_checkin_update(self, user_id: str, data: dict) -> None:
        raise NotImplementedError

    def broadcast_stats_update(self, user_id: str, stats: dict) -> None:
        raise NotImplementedError

    def broadcast_attendee_update(self, user_id: str, event_id: int, attendee: dict) -> None:
        raise NotImplementedError


class RealtimeNotifier(Notifier):
    """Pushes updates to every socket of a user through their `user_<id>` room."""

    def __init__(self, socketio: Any, registry: ConnectionRegistry):
        self._socketio = socketio
        self._registry = registry

    def _emit(self, user_id: str, event: str, data: Any) -> None:
        if not self._registry.is_connected(user_id):
            return
        try:
            self._socketio.emit(event, data, to=user_room(user_id))
        except Exception:
            # Check-ins are already committed; a failed push must not fail the request.
            logger.exception("Failed to emit %s to user %s", event, user_id)

    def broadcast_checkin_update(self, user_id: str, data: dict) -> None:
        self._emit(user_id, "checkin_update", data)

    def broadcast_stats_update(self, user_id: str, stats: dict) -> None:
        self._emit(user_id, "stats_update", stats)

    def broadcast_attendee_update(self, user_id: str, event_id: int, attendee: dict) -> None:
        self._emit(user_id, "attendee_update", {"eventId": event_id, "attendee": attendee})
