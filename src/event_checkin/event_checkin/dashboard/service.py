from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Iterable

from ..common.datetime_utils import now_local
from ..core.constants import STATS_CACHE_TTL_SECONDS
from ..realtime.cache import CacheManager
from .model import DashboardStats
from .repository import DashboardRepository

logger = logging.getLogger(__name__)


def stats_cache_key(user_id: str) -> str:
    return f"stats:{user_id}"


class DashboardService:
    """Dashboard statistics, read through a short-TTL cache."""

    def __init__(
        self,
        repo: DashboardRepository,
        cache: CacheManager,
        *,
        ttl: float = STATS_CACHE_TTL_SECONDS,
        clock: Callable[[], datetime] = now_local,
    ):
        self._repo = repo
        self._cache = cache
        self._ttl = ttl
        self._clock = clock

    def stats(self, user_id: str) -> DashboardStats:
        key = stats_cache_key(user_id)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        stats = self._repo.stats_for_owner(user_id, self._clock().date())
        self._cache.set(key, stats, self._ttl)
        return stats

    def invalidate(self, user_id: str) -> None:
        self._cache.invalidate(stats_cache_key(user_id))

    def invalidate_many(self, user_ids: Iterable[str]) -> None:
        for uid in user_ids:
            self.invalidate(uid)
