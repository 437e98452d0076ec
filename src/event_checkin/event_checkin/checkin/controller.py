from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import (
    client_ip,
    current_user_id,
    domain_error_response,
    json_body,
    json_error,
    login_required,
    server_error,
)
from ..container import Container
from ..core.exceptions import DomainError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/checkin", methods=["POST"], endpoint="api_checkin")
    @login_required
    def api_checkin():
        """Manual entry or camera scan: `{"qrCode": "CK_..."}`."""
        try:
            result = container.checkin_service.process(
                json_body().get("qrCode"),
                current_user_id(),
                ip_address=client_ip(),
                user_agent=request.headers.get("User-Agent", ""),
            )
            return jsonify(result.to_dict())
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Failed to process check-in")

    @app.route("/api/checkin/image", methods=["POST"], endpoint="api_checkin_image")
    @login_required
    def api_checkin_image():
        """Accept an uploaded photo, decode the QR code and run the same transition."""
        upload = request.files.get("image")
        if upload is None:
            return json_error("Thiếu file ảnh", 400)
        try:
            result = container.checkin_service.process_image(
                upload.stream,
                current_user_id(),
                ip_address=client_ip(),
                user_agent=request.headers.get("User-Agent", ""),
            )
            return jsonify(result.to_dict())
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Failed to process check-in")

    @app.route("/api/checkin/recent", methods=["GET"], endpoint="api_checkin_recent")
    @login_required
    def api_checkin_recent():
        try:
            rows = container.checkin_service.recent(current_user_id(), request.args.get("limit"))
            return jsonify([r.to_dict() for r in rows])
        except Exception:
            return server_error("Failed to fetch recent check-ins")
