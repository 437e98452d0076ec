from __future__ import annotations

from enum import Enum


class AttendeeStatus(str, Enum):
    """Trạng thái tham dự lưu trong CSDL (pending -> checked_in -> checked_out)."""

    PENDING = "pending"
    CHECKED_IN = "checked_in"
    CHECKED_OUT = "checked_out"


class CheckinAction(str, Enum):
    """Loại thao tác ghi vào nhật ký check-in."""

    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"


class Permission(str, Enum):
    """Quyền của cộng tác viên trên một sự kiện."""

    VIEW = "view"
    CHECKIN = "checkin"
    MANAGE_ATTENDEES = "manage_attendees"
    EDIT_EVENT = "edit_event"


class EventRole(str, Enum):
    OWNER = "owner"
    COLLABORATOR = "collaborator"


STATUS_LABELS = {
    AttendeeStatus.PENDING: "Chờ check-in",
    AttendeeStatus.CHECKED_IN: "Đã check-in",
    AttendeeStatus.CHECKED_OUT: "Đã check-out",
}
