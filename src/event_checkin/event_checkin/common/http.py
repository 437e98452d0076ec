"""Helpers shared by the JSON controllers."""
from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, request, session

from ..core.exceptions import DomainError

logger = logging.getLogger(__name__)


def json_error(message: str, status: int, **extra):
    payload = {"message": message}
    payload.update(extra)
    return jsonify(payload), status


def domain_error_response(err: DomainError):
    return json_error(str(err), getattr(err, "status_code", 400))


def server_error(message: str):
    """Log the active exception and return a generic 500."""
    logger.exception("%s [%s %s]", message, request.method, request.path)
    return json_error(message, 500)


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return json_error("Unauthorized", 401)
        return view(*args, **kwargs)

    return wrapper


def current_user_id() -> str:
    return str(session["user_id"])


def json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def client_ip() -> str | None:
    forwarded = request.headers.get("X-Forwarded-For", "")
    if forwarded:
        return forwarded.split(",")[0].strip()[:45]
    return (request.remote_addr or "")[:45] or None
