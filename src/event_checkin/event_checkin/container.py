from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendees.mysql_attendee_repository import MySQLAttendeeRepository
from .attendees.repository import AttendeeRepository
from .attendees.service import AttendeeService
from .checkin.mysql_checkin_repository import MySQLCheckinLogRepository
from .checkin.repository import CheckinLogRepository
from .checkin.service import CheckinService
from .collaborators.access import AccessPolicy
from .collaborators.mysql_collaborator_repository import MySQLCollaboratorRepository
from .collaborators.repository import CollaboratorRepository
from .collaborators.service import CollaboratorService
from .core.constants import DEFAULT_CACHE_TTL_SECONDS, STATS_CACHE_TTL_SECONDS
from .dashboard.mysql_dashboard_repository import MySQLDashboardRepository
from .dashboard.repository import DashboardRepository
from .dashboard.service import DashboardService
from .database.connection import DBConfig, DatabaseConnection
from .events.mysql_event_repository import MySQLEventRepository
from .events.repository import EventRepository
from .events.service import EventService
from .realtime.cache import CacheManager
from .realtime.notifier import Notifier, RealtimeNotifier
from .realtime.registry import ConnectionRegistry
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    events_repo: EventRepository
    collaborators_repo: CollaboratorRepository
    attendees_repo: AttendeeRepository
    checkin_logs_repo: CheckinLogRepository
    dashboard_repo: DashboardRepository

    cache: CacheManager
    connections: ConnectionRegistry
    notifier: Notifier

    access: AccessPolicy
    auth_service: AuthService
    user_service: UserService
    event_service: EventService
    collaborator_service: CollaboratorService
    attendee_service: AttendeeService
    checkin_service: CheckinService
    dashboard_service: DashboardService


def assemble_container(
    *,
    users_repo: UserRepository,
    events_repo: EventRepository,
    collaborators_repo: CollaboratorRepository,
    attendees_repo: AttendeeRepository,
    checkin_logs_repo: CheckinLogRepository,
    dashboard_repo: DashboardRepository,
    socketio: Any = None,
    notifier: Optional[Notifier] = None,
    cache: Optional[CacheManager] = None,
    stats_ttl: float = STATS_CACHE_TTL_SECONDS,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of any set of repositories (MySQL or in-memory)."""
    cache = cache or CacheManager(DEFAULT_CACHE_TTL_SECONDS)
    connections = ConnectionRegistry()
    if notifier is None:
        if socketio is None:
            from .extensions import socketio
        notifier = RealtimeNotifier(socketio, connections)

    access = AccessPolicy(collaborators_repo)
    dashboard_service = DashboardService(dashboard_repo, cache, ttl=stats_ttl)
    event_service = EventService(events_repo, access, on_change=dashboard_service.invalidate)

    return Container(
        conn=conn,
        users_repo=users_repo,
        events_repo=events_repo,
        collaborators_repo=collaborators_repo,
        attendees_repo=attendees_repo,
        checkin_logs_repo=checkin_logs_repo,
        dashboard_repo=dashboard_repo,
        cache=cache,
        connections=connections,
        notifier=notifier,
        access=access,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        event_service=event_service,
        collaborator_service=CollaboratorService(collaborators_repo, events_repo, users_repo, access),
        attendee_service=AttendeeService(
            attendees_repo,
            event_service,
            access,
            on_change=dashboard_service.invalidate,
        ),
        checkin_service=CheckinService(
            attendees_repo,
            events_repo,
            checkin_logs_repo,
            access,
            dashboard_service,
            notifier,
        ),
        dashboard_service=dashboard_service,
    )


def build_container(*, db_config: dict, stats_ttl: float = STATS_CACHE_TTL_SECONDS, socketio: Any = None) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return assemble_container(
        users_repo=MySQLUserRepository(conn),
        events_repo=MySQLEventRepository(conn),
        collaborators_repo=MySQLCollaboratorRepository(conn),
        attendees_repo=MySQLAttendeeRepository(conn),
        checkin_logs_repo=MySQLCheckinLogRepository(conn),
        dashboard_repo=MySQLDashboardRepository(conn),
        socketio=socketio,
        stats_ttl=stats_ttl,
        conn=conn,
    )
