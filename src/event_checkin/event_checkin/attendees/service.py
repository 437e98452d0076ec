from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional, Sequence

from ..collaborators.access import AccessPolicy
from ..common.datetime_utils import now_local
from ..common.validators import optional_email, optional_text, require_max_length
from ..core.enums import Permission
from ..core.exceptions import AuthorizationError, DomainError, NotFoundError, ValidationError
from ..events.model import Event
from ..events.service import EventService
from . import qr, spreadsheet
from .model import Attendee
from .repository import AttendeeRepository

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Sinh viên không tồn tại"
ZIP_MIMETYPE = "application/zip"


@dataclass(frozen=True)
class ExportFile:
    filename: str
    data: bytes
    mimetype: str


@dataclass
class BulkImportResult:
    created: List[Attendee] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        payload = {
            "message": f"Đã thêm {len(self.created)} sinh viên thành công",
            "created": len(self.created),
            "failed": len(self.errors),
        }
        if self.errors:
            payload["errors"] = list(self.errors)
        return payload


def parse_attendee_fields(data: Mapping[str, Any], *, partial: bool) -> dict:
    """Map the JSON payload (camelCase) onto attendee columns."""
    fields: dict = {}

    if not partial or "studentId" in data:
        student_id = optional_text(data.get("studentId"))
        if not student_id:
            raise ValidationError("MSSV/MSNV là bắt buộc")
        fields["student_id"] = require_max_length(student_id, "MSSV/MSNV", 50)
    if not partial or "name" in data:
        name = optional_text(data.get("name"))
        if not name:
            raise ValidationError("Tên là bắt buộc")
        fields["name"] = require_max_length(name, "Tên", 100)
    if "email" in data:
        fields["email"] = require_max_length(optional_email(data.get("email")), "Email", 100)
    if "faculty" in data:
        fields["faculty"] = require_max_length(optional_text(data.get("faculty")), "Khoa", 100)
    if "major" in data:
        fields["major"] = require_max_length(optional_text(data.get("major")), "Ngành", 100)

    return fields


class AttendeeService:
    def __init__(
        self,
        attendees: AttendeeRepository,
        events: EventService,
        access: AccessPolicy,
        *,
        on_change: Optional[Callable[[str], None]] = None,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendees = attendees
        self._events = events
        self._access = access
        self._on_change = on_change or (lambda owner_id: None)
        self._clock = clock

    # --- lookups -----------------------------------------------------------

    def _attendee_with_event(self, attendee_id: int, user_id: str, permission: Permission):
        attendee = self._attendees.get_by_id(int(attendee_id))
        if not attendee:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        event = self._events.get_with_permission(attendee.event_id, user_id, permission)
        return attendee, event

    def _new_code(self) -> str:
        return qr.ensure_unique_code(self._attendees.qr_code_exists)

    def list_for_event(self, event_id: int, user_id: str) -> Sequence[Attendee]:
        event = self._events.get_with_permission(event_id, user_id, Permission.VIEW)
        return list(self._attendees.list_for_event(event.id))

    # --- mutations ---------------------------------------------------------

    def _create_in(self, event: Event, data: Mapping[str, Any]) -> Attendee:
        fields = parse_attendee_fields(data, partial=False)
        if self._attendees.find_by_student_id(event.id, fields["student_id"]):
            raise ValidationError("MSSV/MSNV đã tồn tại trong sự kiện này")
        fields["qr_code"] = self._new_code()
        return self._attendees.create(event_id=event.id, fields=fields)

    def create(self, event_id: int, user_id: str, data: Mapping[str, Any]) -> Attendee:
        event = self._events.get_with_permission(event_id, user_id, Permission.MANAGE_ATTENDEES)
        attendee = self._create_in(event, data)
        logger.info("Attendee %s added to event %s", attendee.id, event.id)
        self._on_change(event.user_id)
        return attendee

    def bulk_import(self, event_id: int, user_id: str, rows: Sequence[Mapping[str, str]]) -> BulkImportResult:
        """Create attendees from parsed spreadsheet rows; bad rows are reported, not fatal."""
        event = self._events.get_with_permission(event_id, user_id, Permission.MANAGE_ATTENDEES)

        result = BulkImportResult()
        for row in rows:
            data = {
                "name": row.get("name"),
                "studentId": row.get("student_id"),
                "email": row.get("email"),
                "faculty": row.get("faculty"),
                "major": row.get("major"),
            }
            try:
                result.created.append(self._create_in(event, data))
            except DomainError as e:
                result.errors.append(f"{row.get('name')} ({row.get('student_id')}): {e}")
            except Exception as e:
                logger.exception("Import of row %s into event %s failed", row.get("student_id"), event.id)
                result.errors.append(f"{row.get('name')} ({row.get('student_id')}): {e}")

        logger.info(
            "Bulk import into event %s: %s created, %s failed",
            event.id,
            len(result.created),
            len(result.errors),
        )
        if result.created:
            self._on_change(event.user_id)
        return result

    def update(self, attendee_id: int, user_id: str, data: Mapping[str, Any]) -> Attendee:
        attendee, event = self._attendee_with_event(attendee_id, user_id, Permission.MANAGE_ATTENDEES)
        fields = parse_attendee_fields(data, partial=True)

        new_sid = fields.get("student_id")
        if new_sid and new_sid != attendee.student_id:
            other = self._attendees.find_by_student_id(event.id, new_sid)
            if other and other.id != attendee.id:
                raise ValidationError("MSSV/MSNV đã tồn tại trong sự kiện này")

        updated = self._attendees.update(attendee.id, fields)
        if not updated:
            raise NotFoundError(NOT_FOUND_MESSAGE)
        self._on_change(event.user_id)
        return updated

    def delete(self, attendee_id: int, user_id: str) -> None:
        attendee, event = self._attendee_with_event(attendee_id, user_id, Permission.MANAGE_ATTENDEES)
        if not self._attendees.delete(attendee.id):
            raise NotFoundError(NOT_FOUND_MESSAGE)
        self._on_change(event.user_id)

    def bulk_delete(self, attendee_ids, user_id: str) -> dict:
        if not isinstance(attendee_ids, list) or not attendee_ids:
            raise ValidationError("Danh sách ID sinh viên không hợp lệ")

        valid_ids: List[int] = []
        owners: set = set()
        for raw in attendee_ids:
            try:
                attendee, event = self._attendee_with_event(int(raw), user_id, Permission.MANAGE_ATTENDEES)
            except (TypeError, ValueError, DomainError):
                continue
            if attendee.id not in valid_ids:
                valid_ids.append(attendee.id)
                owners.add(event.user_id)

        if not valid_ids:
            raise AuthorizationError("Bạn không có quyền xóa những sinh viên này")

        deleted = self._attendees.delete_many(valid_ids)
        errors: List[str] = []
        if deleted < len(valid_ids):
            errors.append(f"{len(valid_ids) - deleted} sinh viên không thể xóa")

        for owner_id in owners:
            self._on_change(owner_id)

        logger.info("User %s bulk deleted %s/%s attendees", user_id, deleted, len(attendee_ids))
        return {
            "message": f"Đã xóa thành công {deleted}/{len(attendee_ids)} sinh viên",
            "deletedCount": deleted,
            "totalRequested": len(attendee_ids),
            "errors": errors,
        }

    # --- QR ----------------------------------------------------------------

    def ensure_qr_code(self, attendee_id: int, user_id: str) -> str:
        """Return the attendee's token, issuing a new one if it is missing."""
        attendee, _ = self._attendee_with_event(attendee_id, user_id, Permission.VIEW)
        if attendee.qr_code:
            return attendee.qr_code
        code = self._new_code()
        self._attendees.set_qr_code(attendee.id, code)
        logger.info("Regenerated QR code for attendee %s", attendee.id)
        return code

    def get_qr_data_url(self, attendee_id: int, user_id: str) -> str:
        return qr.render_data_url(self.ensure_qr_code(attendee_id, user_id))

    def get_qr_png(self, attendee_id: int, user_id: str) -> bytes:
        return qr.render_png(self.ensure_qr_code(attendee_id, user_id))

    # --- spreadsheets ------------------------------------------------------

    def export_workbook(self, event_id: int, user_id: str) -> ExportFile:
        event = self._events.get_with_permission(event_id, user_id, Permission.VIEW)
        attendees = self._attendees.list_for_event(event.id)
        return ExportFile(
            filename=spreadsheet.export_filename(event.name, self._clock().date()),
            data=spreadsheet.build_export(attendees),
            mimetype=spreadsheet.XLSX_MIMETYPE,
        )

    def export_zip(self, event_id: int, user_id: str) -> ExportFile:
        event = self._events.get_with_permission(event_id, user_id, Permission.VIEW)
        attendees = self._attendees.list_for_event(event.id)
        today = self._clock().date()
        return ExportFile(
            filename=spreadsheet.export_filename(event.name, today, prefix="DS_SinhVien_QR", ext="zip"),
            data=spreadsheet.build_export_zip(event.name, attendees, today, qr.render_png),
            mimetype=ZIP_MIMETYPE,
        )
