from __future__ import annotations

from datetime import date
from typing import Protocol

from .model import DashboardStats


class DashboardRepository(Protocol):
    def stats_for_owner(self, user_id: str, today: date) -> DashboardStats:
        raise NotImplementedError
