from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user_id, login_required
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/api/realtime/status", methods=["GET"], endpoint="api_realtime_status")
    @login_required
    def api_realtime_status():
        sids = container.connections.sids_for(current_user_id())
        return jsonify({"connected": bool(sids), "clients": len(sids)})
