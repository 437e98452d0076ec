from __future__ import annotations

from datetime import date, time

import pytest

from src.event_checkin.event_checkin.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.event_checkin.event_checkin.dashboard.service import stats_cache_key


def test_create_event_parses_dates_and_times(container, make_user):
    make_user("owner")

    event = container.event_service.create(
        "owner",
        {"name": "Ngày hội việc làm", "eventDate": "2026-10-20", "startTime": "08:00", "endTime": "", "location": "Hội trường A"},
    )

    assert event.event_date == date(2026, 10, 20)
    assert event.start_time == time(8, 0)
    assert event.end_time is None
    assert event.is_active is True
    assert event.to_dict()["startTime"] == "08:00:00"


def test_create_event_requires_name_and_date(container):
    with pytest.raises(ValidationError):
        container.event_service.create("owner", {"eventDate": "2026-10-20"})
    with pytest.raises(ValidationError, match="Ngày diễn ra sự kiện là bắt buộc"):
        container.event_service.create("owner", {"name": "X"})


def test_invalid_time_format_is_rejected(container):
    with pytest.raises(ValidationError, match="Định dạng thời gian không hợp lệ"):
        container.event_service.create("owner", {"name": "X", "eventDate": "2026-10-20", "startTime": "8h sáng"})


@pytest.mark.parametrize("raw", ["2026-10-20garbage", "2026-13-01", "20/10/2026"])
def test_malformed_event_date_is_rejected(container, raw):
    with pytest.raises(ValidationError, match="Định dạng thời gian không hợp lệ"):
        container.event_service.create("owner", {"name": "X", "eventDate": raw})


def test_event_date_accepts_iso_datetime(container):
    event = container.event_service.create("owner", {"name": "X", "eventDate": "2026-10-20T00:00:00.000Z"})

    assert event.event_date == date(2026, 10, 20)


def test_list_includes_shared_events_with_role(container, make_user, make_event):
    make_user("owner")
    make_user("helper")
    mine = make_event("helper", "Của tôi")
    shared = make_event("owner", "Được chia sẻ")
    container.collaborator_service.add(shared.id, "owner", "helper", ["checkin"])

    views = container.event_service.list_for_user("helper")

    assert [v.event.id for v in views] == [shared.id, mine.id]
    by_id = {v.event.id: v.to_dict() for v in views}
    assert by_id[mine.id]["role"] == "owner"
    assert by_id[shared.id]["role"] == "collaborator"
    assert by_id[shared.id]["permissions"] == ["view", "checkin"]


def test_get_requires_access(container, make_user, make_event):
    make_user("owner")
    event = make_event("owner")

    with pytest.raises(AuthorizationError):
        container.event_service.get(event.id, "stranger")
    with pytest.raises(NotFoundError, match="Sự kiện không tồn tại"):
        container.event_service.get(9999, "owner")


def test_update_needs_edit_permission(container, make_user, make_event):
    make_user("owner")
    make_user("helper")
    event = make_event("owner")
    container.collaborator_service.add(event.id, "owner", "helper", ["checkin"])

    with pytest.raises(AuthorizationError):
        container.event_service.update(event.id, "helper", {"name": "Đổi tên"})

    container.collaborator_service.update_permissions(event.id, "owner", "helper", ["edit_event"])
    updated = container.event_service.update(event.id, "helper", {"name": "Đổi tên", "isActive": "false"})

    assert updated.name == "Đổi tên"
    assert updated.is_active is False
    assert updated.event_date == event.event_date


def test_only_owner_can_delete(container, make_user, make_event, make_attendee, db):
    make_user("owner")
    make_user("helper")
    event = make_event("owner")
    make_attendee(event.id, "owner")
    container.collaborator_service.add(event.id, "owner", "helper", ["edit_event"])

    with pytest.raises(NotFoundError):
        container.event_service.delete(event.id, "helper")

    container.event_service.delete(event.id, "owner")

    assert event.id not in db.events
    assert db.attendees == {}


def test_mutations_invalidate_owner_stats(container, make_user, make_event):
    make_user("owner")
    container.dashboard_service.stats("owner")
    assert container.cache.get(stats_cache_key("owner")) is not None

    make_event("owner")

    assert container.cache.get(stats_cache_key("owner")) is None
