from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

from ..core.constants import CACHE_CLEANUP_INTERVAL_SECONDS, DEFAULT_CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)


class CacheManager:
    """In-process map of short-lived values (expiry checked on read and by a sweeper).

    `clock` returns seconds; tests pass a fake one to move time forward.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_CACHE_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._default_ttl = float(default_ttl)
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        expires_at = self._clock() + (self._default_ttl if ttl is None else float(ttl))
        with self._lock:
            self._entries[key] = (value, expires_at)

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if self._clock() > expires_at:
                del self._entries[key]
                return None
            return value

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def invalidate_pattern(self, pattern: str) -> int:
        """Drop every key containing `pattern` (substring match)."""
        with self._lock:
            doomed = [k for k in self._entries if pattern in k]
            for k in doomed:
                del self._entries[k]
            return len(doomed)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def purge_expired(self) -> int:
        now = self._clock()
        with self._lock:
            doomed = [k for k, (_, expires_at) in self._entries.items() if now > expires_at]
            for k in doomed:
                del self._entries[k]
        if doomed:
            logger.debug("Purged %s expired cache entries", len(doomed))
        return len(doomed)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def run_cleanup(
        self,
        sleep: Callable[[float], None],
        interval: float = CACHE_CLEANUP_INTERVAL_SECONDS,
    ) -> None:
        """Sweeper loop, meant to run as a Socket.IO background task."""
        logger.info("Cache cleanup running every %ss", interval)
        while True:
            sleep(interval)
            try:
                self.purge_expired()
            except Exception:
                logger.exception("Cache cleanup failed")
