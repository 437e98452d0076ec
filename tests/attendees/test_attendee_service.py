from __future__ import annotations

import re

import pytest

from src.event_checkin.event_checkin.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.event_checkin.event_checkin.dashboard.service import stats_cache_key


@pytest.fixture
def event(make_user, make_event):
    make_user("owner")
    make_user("helper")
    return make_event("owner")


def test_create_assigns_unique_qr_code(container, event, make_attendee):
    a = make_attendee(event.id, "owner", "SV001")
    b = make_attendee(event.id, "owner", "SV002", name="Trần Thị B")

    assert re.fullmatch(r"CK_\d{10}", a.qr_code)
    assert a.qr_code != b.qr_code
    assert a.status.value == "pending"


def test_create_requires_student_id_and_name(container, event):
    with pytest.raises(ValidationError, match="MSSV/MSNV là bắt buộc"):
        container.attendee_service.create(event.id, "owner", {"name": "A"})
    with pytest.raises(ValidationError):
        container.attendee_service.create(event.id, "owner", {"studentId": "SV001"})


def test_duplicate_student_id_in_same_event(container, event, make_attendee, make_event):
    make_attendee(event.id, "owner", "SV001")

    with pytest.raises(ValidationError):
        make_attendee(event.id, "owner", "SV001")

    other = make_event("owner", "Sự kiện khác")
    assert make_attendee(other.id, "owner", "SV001").event_id == other.id


def test_collaborator_needs_manage_permission(container, event):
    container.collaborator_service.add(event.id, "owner", "helper", ["checkin"])

    with pytest.raises(AuthorizationError):
        container.attendee_service.create(event.id, "helper", {"name": "A", "studentId": "SV001"})

    container.collaborator_service.update_permissions(event.id, "owner", "helper", ["manage_attendees"])
    created = container.attendee_service.create(event.id, "helper", {"name": "A", "studentId": "SV001"})
    assert created.event_id == event.id


def test_list_is_newest_first(container, event, make_attendee):
    first = make_attendee(event.id, "owner", "SV001")
    second = make_attendee(event.id, "owner", "SV002")

    assert [a.id for a in container.attendee_service.list_for_event(event.id, "owner")] == [second.id, first.id]


def test_update_and_delete(container, event, make_attendee):
    a = make_attendee(event.id, "owner", "SV001")

    updated = container.attendee_service.update(a.id, "owner", {"faculty": "CNTT", "email": ""})
    assert updated.faculty == "CNTT"
    assert updated.email is None

    container.attendee_service.delete(a.id, "owner")
    with pytest.raises(NotFoundError, match="Sinh viên không tồn tại"):
        container.attendee_service.delete(a.id, "owner")


def test_bulk_delete_skips_what_caller_cannot_manage(container, event, make_attendee, make_event):
    mine = [make_attendee(event.id, "owner", f"SV00{i}") for i in range(3)]
    foreign_event = make_event("helper", "Của người khác")
    foreign = make_attendee(foreign_event.id, "helper", "SV900")

    result = container.attendee_service.bulk_delete([a.id for a in mine] + [foreign.id, 99999], "owner")

    assert result["deletedCount"] == 3
    assert result["totalRequested"] == 5
    assert result["message"] == "Đã xóa thành công 3/5 sinh viên"
    assert container.attendees_repo.get_by_id(foreign.id) is not None


def test_bulk_delete_input_validation(container, event, make_attendee, make_event):
    with pytest.raises(ValidationError, match="Danh sách ID sinh viên không hợp lệ"):
        container.attendee_service.bulk_delete([], "owner")
    with pytest.raises(ValidationError):
        container.attendee_service.bulk_delete("1,2", "owner")

    foreign_event = make_event("helper", "Của người khác")
    foreign = make_attendee(foreign_event.id, "helper", "SV900")
    with pytest.raises(AuthorizationError, match="Bạn không có quyền xóa những sinh viên này"):
        container.attendee_service.bulk_delete([foreign.id], "owner")


def test_bulk_import_reports_failures(container, event, make_attendee):
    make_attendee(event.id, "owner", "SV001")
    rows = [
        {"name": "A", "student_id": "SV001", "email": "", "faculty": "", "major": ""},
        {"name": "B", "student_id": "SV002", "email": "b@example.com", "faculty": "", "major": ""},
        {"name": "C", "student_id": "SV003", "email": "not-an-email", "faculty": "", "major": ""},
    ]

    result = container.attendee_service.bulk_import(event.id, "owner", rows).to_dict()

    assert result["created"] == 1
    assert result["failed"] == 2
    assert result["message"] == "Đã thêm 1 sinh viên thành công"
    assert result["errors"][0].startswith("A (SV001): ")


def test_qr_is_regenerated_when_missing(container, event, make_attendee, db):
    a = make_attendee(event.id, "owner", "SV001")
    container.attendees_repo.update(a.id, {"qr_code": None})

    data_url = container.attendee_service.get_qr_data_url(a.id, "owner")

    assert data_url.startswith("data:image/png;base64,")
    assert db.attendees[a.id].qr_code is not None


def test_attendee_changes_invalidate_owner_stats(container, event, make_attendee):
    container.dashboard_service.stats("owner")

    make_attendee(event.id, "owner", "SV001")

    assert container.cache.get(stats_cache_key("owner")) is None


def test_attendee_update_invalidates_owner_stats(container, event, make_attendee):
    a = make_attendee(event.id, "owner", "SV001")
    container.dashboard_service.stats("owner")

    container.attendee_service.update(a.id, "owner", {"major": "KHMT"})

    assert container.cache.get(stats_cache_key("owner")) is None


def test_bulk_import_keeps_going_after_storage_error(container, event, db, monkeypatch):
    real_create = container.attendees_repo.create

    def flaky_create(*, event_id, fields):
        if fields["student_id"] == "SV002":
            raise RuntimeError("Duplicate entry 'SV002' for key 'uq_attendee_student'")
        return real_create(event_id=event_id, fields=fields)

    monkeypatch.setattr(container.attendees_repo, "create", flaky_create)
    rows = [
        {"name": "A", "student_id": "SV001", "email": "", "faculty": "", "major": ""},
        {"name": "B", "student_id": "SV002", "email": "", "faculty": "", "major": ""},
        {"name": "C", "student_id": "SV003", "email": "", "faculty": "", "major": ""},
    ]

    result = container.attendee_service.bulk_import(event.id, "owner", rows).to_dict()

    assert result["created"] == 2
    assert result["errors"] == ["B (SV002): Duplicate entry 'SV002' for key 'uq_attendee_student'"]
    assert sorted(a.student_id for a in db.attendees.values()) == ["SV001", "SV003"]
