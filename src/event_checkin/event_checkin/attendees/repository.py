from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from .model import Attendee


class AttendeeRepository(Protocol):
    def get_by_id(self, attendee_id: int) -> Optional[Attendee]:
        raise NotImplementedError

    def get_by_qr_code(self, qr_code: str) -> Optional[Attendee]:
        raise NotImplementedError

    def qr_code_exists(self, qr_code: str) -> bool:
        raise NotImplementedError

    def list_for_event(self, event_id: int) -> Sequence[Attendee]:
        """Attendees of one event, newest first."""

        raise NotImplementedError

    def find_by_student_id(self, event_id: int, student_id: str) -> Optional[Attendee]:
        raise NotImplementedError

    def create(self, *, event_id: int, fields: Mapping[str, Any]) -> Attendee:
        raise NotImplementedError

    def update(self, attendee_id: int, fields: Mapping[str, Any]) -> Optional[Attendee]:
        raise NotImplementedError

    def set_qr_code(self, attendee_id: int, qr_code: str) -> None:
        raise NotImplementedError

    def delete(self, attendee_id: int) -> bool:
        raise NotImplementedError

    def delete_many(self, attendee_ids: Sequence[int]) -> int:
        raise NotImplementedError

