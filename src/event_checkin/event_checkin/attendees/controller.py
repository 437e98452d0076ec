from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..common.http import (
    current_user_id,
    domain_error_response,
    json_body,
    json_error,
    login_required,
    server_error,
)
from ..container import Container
from ..core.exceptions import DomainError
from . import spreadsheet
from .service import ExportFile


def _download(export: ExportFile):
    return send_file(
        io.BytesIO(export.data),
        download_name=export.filename,
        as_attachment=True,
        mimetype=export.mimetype,
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/api/events/<int:event_id>/attendees", methods=["GET"], endpoint="api_attendees_list")
    @login_required
    def api_attendees_list(event_id: int):
        try:
            attendees = container.attendee_service.list_for_event(event_id, current_user_id())
            return jsonify([a.to_dict() for a in attendees])
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Failed to fetch attendees")

    @app.route("/api/events/<int:event_id>/attendees", methods=["POST"], endpoint="api_attendee_create")
    @login_required
    def api_attendee_create(event_id: int):
        try:
            attendee = container.attendee_service.create(event_id, current_user_id(), json_body())
            return jsonify(attendee.to_dict()), 201
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Failed to create attendee")

    @app.route("/api/events/<int:event_id>/attendees/bulk", methods=["POST"], endpoint="api_attendees_import")
    @login_required
    def api_attendees_import(event_id: int):
        upload = request.files.get("file")
        if upload is None or not upload.filename:
            return json_error("Vui lòng chọn file", 400)
        try:
            rows = spreadsheet.read_attendee_rows(upload.filename, upload.mimetype, upload.read())
            result = container.attendee_service.bulk_import(event_id, current_user_id(), rows)
            return jsonify(result.to_dict())
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Lỗi khi nhập danh sách sinh viên")

    @app.route("/api/events/<int:event_id>/attendees/export", methods=["GET"], endpoint="api_attendees_export")
    @login_required
    def api_attendees_export(event_id: int):
        try:
            return _download(container.attendee_service.export_workbook(event_id, current_user_id()))
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Lỗi khi xuất file")

    @app.route(
        "/api/events/<int:event_id>/attendees/export-zip",
        methods=["GET"],
        endpoint="api_attendees_export_zip",
    )
    @login_required
    def api_attendees_export_zip(event_id: int):
        try:
            return _download(container.attendee_service.export_zip(event_id, current_user_id()))
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Lỗi khi xuất file ZIP")

    @app.route("/api/attendees/template", methods=["GET"], endpoint="api_attendees_template")
    def api_attendees_template():
        try:
            return send_file(
                io.BytesIO(spreadsheet.build_template()),
                download_name=spreadsheet.TEMPLATE_FILENAME,
                as_attachment=True,
                mimetype=spreadsheet.XLSX_MIMETYPE,
            )
        except Exception:
            return server_error("Lỗi khi tạo file mẫu")

    @app.route("/api/attendees/bulk", methods=["DELETE"], endpoint="api_attendees_bulk_delete")
    @login_required
    def api_attendees_bulk_delete():
        try:
            result = container.attendee_service.bulk_delete(json_body().get("attendeeIds"), current_user_id())
            return jsonify(result)
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Lỗi khi xóa sinh viên")

    @app.route("/api/attendees/<int:attendee_id>", methods=["PUT", "PATCH"], endpoint="api_attendee_update")
    @login_required
    def api_attendee_update(attendee_id: int):
        try:
            attendee = container.attendee_service.update(attendee_id, current_user_id(), json_body())
            return jsonify(attendee.to_dict())
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Failed to update attendee")

    @app.route("/api/attendees/<int:attendee_id>", methods=["DELETE"], endpoint="api_attendee_delete")
    @login_required
    def api_attendee_delete(attendee_id: int):
        try:
            container.attendee_service.delete(attendee_id, current_user_id())
            return "", 204
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Failed to delete attendee")

    @app.route("/api/attendees/<int:attendee_id>/qr", methods=["GET"], endpoint="api_attendee_qr")
    @login_required
    def api_attendee_qr(attendee_id: int):
        try:
            return jsonify({"qrCode": container.attendee_service.get_qr_data_url(attendee_id, current_user_id())})
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Lỗi khi lấy mã QR")

    @app.route("/api/attendees/<int:attendee_id>/qr.png", methods=["GET"], endpoint="api_attendee_qr_png")
    @login_required
    def api_attendee_qr_png(attendee_id: int):
        try:
            png = container.attendee_service.get_qr_png(attendee_id, current_user_id())
            return send_file(io.BytesIO(png), mimetype="image/png")
        except DomainError as e:
            return domain_error_response(e)
        except Exception:
            return server_error("Lỗi khi lấy mã QR")
