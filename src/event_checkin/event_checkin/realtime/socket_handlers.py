from __future__ import annotations

import logging

from flask import request, session
from flask_socketio import ConnectionRefusedError, SocketIO, emit, join_room

from ..container import Container
from .registry import user_room

logger = logging.getLogger(__name__)


def register_socketio_handlers(socketio: SocketIO, container: Container) -> None:
    registry = container.connections

    @socketio.on("connect")
    def on_connect(auth=None):
        user_id = session.get("user_id")
        if not user_id:
            logger.info("Socket %s refused: no session", request.sid)
            raise ConnectionRefusedError("User ID required")

        user = container.user_service.get(str(user_id))
        if not user:
            logger.info("Socket %s refused: unknown user %s", request.sid, user_id)
            raise ConnectionRefusedError("Invalid user")

        registry.register(request.sid, user.id)
        join_room(user_room(user.id))
        logger.info("Socket connected: %s (user %s)", request.sid, user.id)
        emit("connected", {"clientId": request.sid, "userId": user.id})

    @socketio.on("disconnect")
    def on_disconnect(*args):
        user_id = registry.unregister(request.sid)
        logger.info("Socket disconnected: %s (user %s)", request.sid, user_id)

    @socketio.on("ping")
    def on_ping(data=None):
        emit("pong")

    @socketio.on("subscribe")
    def on_subscribe(data=None):
        logger.info("Socket %s subscribing to: %s", request.sid, data)
        return {"ok": True, "subscribed": data}

    @socketio.on_error_default
    def on_error(e):
        logger.exception("Socket.IO handler error on %s", request.sid)

    @socketio.on("*")
    def on_unknown(event, data=None):
        logger.info("Unknown message type from %s: %s", request.sid, event)
