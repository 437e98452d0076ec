from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user_id, domain_error_response, json_body, login_required, server_error
from ..container import Container
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/events", methods=["GET"], endpoint="api_events_list")
    @login_required
    def api_events_list():
        try:
            views = container.event_service.list_for_user(current_user_id())
            return jsonify([v.to_dict() for v in views])
        except Exception:
            return server_error("Failed to fetch events")

    @app.route("/api/events/<int:event_id>", methods=["GET"], endpoint="api_event_get")
    @login_required
    def api_event_get(event_id: int):
        try:
            return jsonify(container.event_service.get(event_id, current_user_id()).to_dict())
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Failed to fetch event")

    @app.route("/api/events", methods=["POST"], endpoint="api_event_create")
    @login_required
    def api_event_create():
        try:
            event = container.event_service.create(current_user_id(), json_body())
            return jsonify(event.to_dict()), 201
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Không thể tạo sự kiện")

    @app.route("/api/events/<int:event_id>", methods=["PUT", "PATCH"], endpoint="api_event_update")
    @login_required
    def api_event_update(event_id: int):
        try:
            event = container.event_service.update(event_id, current_user_id(), json_body())
            return jsonify(event.to_dict())
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Không thể cập nhật sự kiện")

    @app.route("/api/events/<int:event_id>", methods=["DELETE"], endpoint="api_event_delete")
    @login_required
    def api_event_delete(event_id: int):
        try:
            container.event_service.delete(event_id, current_user_id())
            return "", 204
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Failed to delete event")
