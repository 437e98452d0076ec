from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user_id, domain_error_response, json_body, login_required, server_error
from ..container import Container
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/events/<int:event_id>/collaborators", methods=["GET"], endpoint="api_collaborators_list")
    @login_required
    def api_collaborators_list(event_id: int):
        try:
            collabs = container.collaborator_service.list(event_id, current_user_id())
            return jsonify([c.to_dict() for c in collabs])
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Lỗi khi tải danh sách cộng tác viên")

    @app.route("/api/events/<int:event_id>/collaborators", methods=["POST"], endpoint="api_collaborators_add")
    @login_required
    def api_collaborators_add(event_id: int):
        data = json_body()
        try:
            collab = container.collaborator_service.add(
                event_id,
                current_user_id(),
                str(data.get("userId") or ""),
                data.get("permissions"),
            )
            return jsonify(collab.to_dict()), 201
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Lỗi khi thêm cộng tác viên")

    @app.route(
        "/api/events/<int:event_id>/collaborators/<user_id>",
        methods=["PATCH"],
        endpoint="api_collaborators_update",
    )
    @login_required
    def api_collaborators_update(event_id: int, user_id: str):
        try:
            collab = container.collaborator_service.update_permissions(
                event_id, current_user_id(), user_id, json_body().get("permissions")
            )
            return jsonify(collab.to_dict())
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Lỗi khi cập nhật quyền")

    @app.route(
        "/api/events/<int:event_id>/collaborators/<user_id>",
        methods=["DELETE"],
        endpoint="api_collaborators_remove",
    )
    @login_required
    def api_collaborators_remove(event_id: int, user_id: str):
        try:
            container.collaborator_service.remove(event_id, current_user_id(), user_id)
            return "", 204
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Lỗi khi xóa cộng tác viên")
