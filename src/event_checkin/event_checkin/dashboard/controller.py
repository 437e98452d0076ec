from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user_id, login_required, server_error
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/dashboard/stats", methods=["GET"], endpoint="api_dashboard_stats")
    @login_required
    def api_dashboard_stats():
        try:
            return jsonify(container.dashboard_service.stats(current_user_id()).to_dict())
        except Exception:
            return server_error("Failed to fetch dashboard stats")
