from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional

from ..common.datetime_utils import isoformat_or_none
from ..core.enums import STATUS_LABELS, AttendeeStatus


@dataclass(frozen=True)
class Attendee:
    """Thực thể miền (domain): người tham dự (sinh viên / nhân viên) của một sự kiện.

    Mỗi người có một mã QR duy nhất; trạng thái đi theo một chiều
    pending -> checked_in -> checked_out.
    """

    id: int
    event_id: int
    name: str
    student_id: str
    email: Optional[str] = None
    faculty: Optional[str] = None
    major: Optional[str] = None
    qr_code: Optional[str] = None
    status: AttendeeStatus = AttendeeStatus.PENDING
    checkin_time: Optional[datetime] = None
    checkout_time: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def status_label(self) -> str:
        return STATUS_LABELS[self.status]

    def with_status(self, status: AttendeeStatus, at: datetime) -> "Attendee":
        if status == AttendeeStatus.CHECKED_IN:
            return replace(self, status=status, checkin_time=at)
        if status == AttendeeStatus.CHECKED_OUT:
            return replace(self, status=status, checkout_time=at)
        return replace(self, status=status)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "eventId": self.event_id,
            "name": self.name,
            "studentId": self.student_id,
            "email": self.email,
            "faculty": self.faculty,
            "major": self.major,
            "qrCode": self.qr_code,
            "status": self.status.value,
            "checkinTime": isoformat_or_none(self.checkin_time),
            "checkoutTime": isoformat_or_none(self.checkout_time),
            "createdAt": isoformat_or_none(self.created_at),
        }
