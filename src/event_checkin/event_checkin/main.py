from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendees.controller import register as register_attendees
from .checkin.controller import register as register_checkin
from .collaborators.controller import register as register_collaborators
from .container import Container, build_container
from .core.constants import CACHE_CLEANUP_INTERVAL_SECONDS, SESSION_LIFETIME_DAYS, STATS_CACHE_TTL_SECONDS
from .dashboard.controller import register as register_dashboard
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_organizer, list_tables
from .events.controller import register as register_events
from .extensions import socketio
from .realtime.controller import register as register_realtime
from .realtime.socket_handlers import register_socketio_handlers
from .users.controller import register as register_users
from .users.oidc import init_oidc

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def _bootstrap_database(settings, db_config: dict) -> None:
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
        logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
        ensure_demo_organizer(db_config)
        logger.info("Demo seed ready")


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app; tests pass a container wired with in-memory repositories."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.permanent_session_lifetime = timedelta(days=SESSION_LIFETIME_DAYS)
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["MAX_CONTENT_LENGTH"] = getattr(settings, "MAX_CONTENT_LENGTH", None)
    app.config["STATS_CACHE_TTL"] = float(getattr(settings, "STATS_CACHE_TTL", STATS_CACHE_TTL_SECONDS))
    app.config["CACHE_CLEANUP_INTERVAL"] = float(
        getattr(settings, "CACHE_CLEANUP_INTERVAL", CACHE_CLEANUP_INTERVAL_SECONDS)
    )
    for key in ("OIDC_CLIENT_ID", "OIDC_CLIENT_SECRET", "OIDC_DISCOVERY_URL"):
        app.config[key] = getattr(settings, key, None)

    logger.info("Starting with settings=%s", settings_module)

    if container is None:
        _bootstrap_database(settings, db_config)
        container = build_container(db_config=db_config, stats_ttl=app.config["STATS_CACHE_TTL"], socketio=socketio)

    oauth = init_oidc(app)

    register_users(app, container, oauth=oauth)
    register_events(app, container)
    register_collaborators(app, container)
    register_attendees(app, container)
    register_checkin(app, container)
    register_dashboard(app, container)
    register_realtime(app, container)

    socketio.init_app(
        app,
        cors_allowed_origins=getattr(settings, "CORS_ALLOWED_ORIGINS", "*"),
        async_mode="threading",
    )
    register_socketio_handlers(socketio, container)

    if not app.config["TESTING"]:
        socketio.start_background_task(
            container.cache.run_cleanup, socketio.sleep, app.config["CACHE_CLEANUP_INTERVAL"]
        )

    return app
