from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional

import pytest

from src.event_checkin.event_checkin.attendees.model import Attendee
from src.event_checkin.event_checkin.checkin.model import CheckinLog, RecentCheckin
from src.event_checkin.event_checkin.collaborators.model import Collaborator
from src.event_checkin.event_checkin.container import assemble_container
from src.event_checkin.event_checkin.core.enums import CheckinAction
from src.event_checkin.event_checkin.dashboard.model import DashboardStats
from src.event_checkin.event_checkin.events.model import Event
from src.event_checkin.event_checkin.realtime.cache import CacheManager
from src.event_checkin.event_checkin.users.model import LocalCredential, User


class MemoryDB:
    """Tables kept in dicts; ids and created_at increase with every insert."""

    def __init__(self):
        self.users: dict[str, User] = {}
        self.credentials: dict[str, LocalCredential] = {}
        self.events: dict[int, Event] = {}
        self.collaborators: dict[int, Collaborator] = {}
        self.attendees: dict[int, Attendee] = {}
        self.logs: dict[int, CheckinLog] = {}
        self._seq = 0
        self._tick = datetime(2026, 1, 1, 8, 0, 0)

    def next_id(self) -> int:
        self._seq += 1
        return self._seq

    def stamp(self) -> datetime:
        self._tick += timedelta(seconds=1)
        return self._tick


class InMemoryUsers:
    def __init__(self, db: MemoryDB):
        self.db = db

    def get_by_id(self, user_id):
        return self.db.users.get(user_id)

    def get_by_email(self, email):
        return next((u for u in self.db.users.values() if u.email and u.email == email), None)

    def upsert(self, *, user_id, email, first_name, last_name, profile_image_url=None):
        existing = self.db.users.get(user_id)
        user = User(
            id=user_id,
            email=email,
            first_name=first_name,
            last_name=last_name,
            profile_image_url=profile_image_url,
            created_at=existing.created_at if existing else self.db.stamp(),
            updated_at=self.db.stamp(),
        )
        self.db.users[user_id] = user
        return user

    def get_credential_by_username(self, username):
        return self.db.credentials.get(username)

    def create_credential(self, *, user_id, username, password_hash):
        self.db.credentials[username] = LocalCredential(user_id=user_id, username=username, password_hash=password_hash)

    def search(self, query, *, exclude_user_id, limit):
        q = query.lower()
        usernames = {c.user_id: c.username for c in self.db.credentials.values()}
        out = []
        for u in self.db.users.values():
            if u.id == exclude_user_id:
                continue
            haystack = [u.email, u.first_name, u.last_name, usernames.get(u.id)]
            if any(h and q in h.lower() for h in haystack):
                out.append(u)
        return out[:limit]


class InMemoryEvents:
    def __init__(self, db: MemoryDB):
        self.db = db

    def get_by_id(self, event_id):
        return self.db.events.get(int(event_id))

    def list_accessible(self, user_id):
        shared = {c.event_id for c in self.db.collaborators.values() if c.user_id == user_id}
        items = [e for e in self.db.events.values() if e.user_id == user_id or e.id in shared]
        return sorted(items, key=lambda e: (e.created_at, e.id), reverse=True)

    def create(self, *, user_id, fields):
        event = Event(id=self.db.next_id(), user_id=user_id, created_at=self.db.stamp(), **fields)
        self.db.events[event.id] = event
        return event

    def update(self, event_id, fields):
        event = self.db.events.get(int(event_id))
        if not event:
            return None
        event = replace(event, **fields)
        self.db.events[event.id] = event
        return event

    def delete(self, event_id, *, owner_id):
        event = self.db.events.get(int(event_id))
        if not event or event.user_id != owner_id:
            return False
        del self.db.events[event.id]
        doomed = [a.id for a in self.db.attendees.values() if a.event_id == event.id]
        for aid in doomed:
            del self.db.attendees[aid]
        for lid in [l.id for l in self.db.logs.values() if l.attendee_id in doomed]:
            del self.db.logs[lid]
        for cid in [c.id for c in self.db.collaborators.values() if c.event_id == event.id]:
            del self.db.collaborators[cid]
        return True


class InMemoryCollaborators:
    def __init__(self, db: MemoryDB):
        self.db = db

    def get(self, event_id, user_id):
        return next(
            (c for c in self.db.collaborators.values() if c.event_id == int(event_id) and c.user_id == user_id),
            None,
        )

    def list_for_event(self, event_id):
        items = [c for c in self.db.collaborators.values() if c.event_id == int(event_id)]
        return [replace(c, user=self.db.users.get(c.user_id)) for c in sorted(items, key=lambda c: c.id)]

    def create(self, *, event_id, user_id, permissions, invited_by):
        collab = Collaborator(
            id=self.db.next_id(),
            event_id=int(event_id),
            user_id=user_id,
            permissions=tuple(permissions),
            invited_by=invited_by,
            created_at=self.db.stamp(),
        )
        self.db.collaborators[collab.id] = collab
        return collab

    def update_permissions(self, *, event_id, user_id, permissions):
        collab = self.get(event_id, user_id)
        if not collab:
            return False
        self.db.collaborators[collab.id] = replace(collab, permissions=tuple(permissions))
        return True

    def delete(self, event_id, user_id):
        collab = self.get(event_id, user_id)
        if not collab:
            return False
        del self.db.collaborators[collab.id]
        return True


class InMemoryAttendees:
    def __init__(self, db: MemoryDB):
        self.db = db

    def get_by_id(self, attendee_id):
        return self.db.attendees.get(int(attendee_id))

    def get_by_qr_code(self, qr_code):
        return next((a for a in self.db.attendees.values() if a.qr_code == qr_code), None)

    def qr_code_exists(self, qr_code):
        return self.get_by_qr_code(qr_code) is not None

    def list_for_event(self, event_id):
        items = [a for a in self.db.attendees.values() if a.event_id == int(event_id)]
        return sorted(items, key=lambda a: (a.created_at, a.id), reverse=True)

    def find_by_student_id(self, event_id, student_id):
        return next(
            (a for a in self.db.attendees.values() if a.event_id == int(event_id) and a.student_id == student_id),
            None,
        )

    def create(self, *, event_id, fields):
        attendee = Attendee(id=self.db.next_id(), event_id=int(event_id), created_at=self.db.stamp(), **fields)
        self.db.attendees[attendee.id] = attendee
        return attendee

    def update(self, attendee_id, fields):
        attendee = self.db.attendees.get(int(attendee_id))
        if not attendee:
            return None
        attendee = replace(attendee, **fields)
        self.db.attendees[attendee.id] = attendee
        return attendee

    def set_qr_code(self, attendee_id, qr_code):
        self.update(attendee_id, {"qr_code": qr_code})

    def delete(self, attendee_id):
        return self.db.attendees.pop(int(attendee_id), None) is not None

    def delete_many(self, attendee_ids):
        return sum(1 for i in attendee_ids if self.delete(i))


class InMemoryCheckinLogs:
    def __init__(self, db: MemoryDB):
        self.db = db

    def new_log(self, *, attendee_id, action, timestamp, ip_address, user_agent):
        return CheckinLog(
            id=self.db.next_id(),
            attendee_id=int(attendee_id),
            action=action,
            timestamp=timestamp,
            ip_address=ip_address,
            user_agent=user_agent,
        )

    def record_transition(self, attendee_id, *, from_status, to_status, action, at, ip_address, user_agent):
        attendee = self.db.attendees.get(int(attendee_id))
        if not attendee or attendee.status != from_status:
            return None
        # Both rows are written only once the log row exists.
        log = self.new_log(
            attendee_id=attendee.id, action=action, timestamp=at, ip_address=ip_address, user_agent=user_agent
        )
        self.db.attendees[attendee.id] = attendee.with_status(to_status, at)
        self.db.logs[log.id] = log
        return log

    def recent_for_user(self, user_id, limit):
        events = InMemoryEvents(self.db)
        visible = {e.id for e in events.list_accessible(user_id)}
        out = []
        for log in sorted(self.db.logs.values(), key=lambda l: (l.timestamp, l.id), reverse=True):
            attendee = self.db.attendees.get(log.attendee_id)
            if attendee and attendee.event_id in visible:
                out.append(RecentCheckin(log=log, attendee=attendee, event=self.db.events[attendee.event_id]))
        return out[:limit]


class InMemoryDashboard:
    def __init__(self, db: MemoryDB):
        self.db = db
        self.calls = 0

    def stats_for_owner(self, user_id, today: date):
        self.calls += 1
        events = [e for e in self.db.events.values() if e.user_id == user_id]
        event_ids = {e.id for e in events}
        attendee_ids = {a.id for a in self.db.attendees.values() if a.event_id in event_ids}
        today_checkins = sum(
            1
            for l in self.db.logs.values()
            if l.attendee_id in attendee_ids and l.action == CheckinAction.CHECK_IN and l.timestamp.date() == today
        )
        return DashboardStats(
            total_events=len(events),
            total_students=len(attendee_ids),
            today_checkins=today_checkins,
            active_events=sum(1 for e in events if e.is_active and e.event_date >= today),
        )


class FakeNotifier:
    def __init__(self):
        self.sent: list[tuple[str, str, dict]] = []

    def broadcast_checkin_update(self, user_id, data):
        self.sent.append(("checkin_update", user_id, data))

    def broadcast_stats_update(self, user_id, stats):
        self.sent.append(("stats_update", user_id, stats))

    def broadcast_attendee_update(self, user_id, event_id, attendee):
        self.sent.append(("attendee_update", user_id, {"eventId": event_id, "attendee": attendee}))

    def kinds_for(self, user_id):
        return [kind for kind, uid, _ in self.sent if uid == user_id]


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 10, 18, 9, 30, 0)


@pytest.fixture
def db() -> MemoryDB:
    return MemoryDB()


@pytest.fixture
def cache_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


def _build(db: MemoryDB, **kwargs):
    return assemble_container(
        users_repo=InMemoryUsers(db),
        events_repo=InMemoryEvents(db),
        collaborators_repo=InMemoryCollaborators(db),
        attendees_repo=InMemoryAttendees(db),
        checkin_logs_repo=InMemoryCheckinLogs(db),
        dashboard_repo=InMemoryDashboard(db),
        **kwargs,
    )


@pytest.fixture
def container(db, notifier, cache_clock):
    return _build(db, notifier=notifier, cache=CacheManager(10, clock=cache_clock))


@pytest.fixture
def make_user(db):
    def _make(user_id: str, *, email: Optional[str] = None, first_name="Test", last_name=None) -> User:
        user = User(
            id=user_id,
            email=email or f"{user_id}@example.com",
            first_name=first_name,
            last_name=last_name or user_id,
        )
        db.users[user_id] = user
        return user

    return _make


@pytest.fixture
def make_event(container):
    def _make(owner_id: str, name: str = "Hội thảo AI", **data):
        payload = {"name": name, "eventDate": "2026-10-20"}
        payload.update(data)
        return container.event_service.create(owner_id, payload)

    return _make


@pytest.fixture
def make_attendee(container):
    def _make(event_id: int, owner_id: str, student_id: str = "SV001", name: str = "Nguyễn Văn A", **data):
        payload = {"name": name, "studentId": student_id}
        payload.update(data)
        return container.attendee_service.create(event_id, owner_id, payload)

    return _make


@pytest.fixture
def app(container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.event_checkin.event_checkin.main import create_app

    return create_app(container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def login():
    def _login(client, user_id: str) -> None:
        with client.session_transaction() as sess:
            sess["user_id"] = user_id

    return _login


@pytest.fixture
def socket_container(db):
    """Container whose notifier pushes through the real Socket.IO server."""
    from src.event_checkin.event_checkin.extensions import socketio

    return _build(db, socketio=socketio)


@pytest.fixture
def socket_app(socket_container, monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.event_checkin.event_checkin.main import create_app

    return create_app(socket_container)
