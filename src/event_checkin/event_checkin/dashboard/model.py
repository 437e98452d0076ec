from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DashboardStats:
    """Số liệu tổng quan của ban tổ chức (trên các sự kiện mình sở hữu)."""

    total_events: int = 0
    total_students: int = 0
    today_checkins: int = 0
    active_events: int = 0

    def to_dict(self) -> dict:
        return {
            "totalEvents": self.total_events,
            "totalStudents": self.total_students,
            "todayCheckins": self.today_checkins,
            "activeEvents": self.active_events,
        }
