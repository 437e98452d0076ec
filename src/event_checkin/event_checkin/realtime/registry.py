from __future__ import annotations

import threading
from typing import Dict, List, Optional


def user_room(user_id: str) -> str:
    return f"user_{user_id}"


class ConnectionRegistry:
    """Socket session id -> user id, for every live browser connection."""

    def __init__(self):
        self._by_sid: Dict[str, str] = {}
        self._lock = threading.Lock()

    def register(self, sid: str, user_id: str) -> None:
        with self._lock:
            self._by_sid[sid] = str(user_id)

    def unregister(self, sid: str) -> Optional[str]:
        with self._lock:
            return self._by_sid.pop(sid, None)

    def user_for(self, sid: str) -> Optional[str]:
        with self._lock:
            return self._by_sid.get(sid)

    def sids_for(self, user_id: str) -> List[str]:
        with self._lock:
            return [sid for sid, uid in self._by_sid.items() if uid == str(user_id)]

    def is_connected(self, user_id: str) -> bool:
        return bool(self.sids_for(user_id))

    def user_ids(self) -> List[str]:
        with self._lock:
            return sorted(set(self._by_sid.values()))

    def count(self) -> int:
        with self._lock:
            return len(self._by_sid)
