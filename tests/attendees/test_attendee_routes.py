from __future__ import annotations

import io
import zipfile

import pytest


@pytest.fixture
def event(make_user, make_event, login, client):
    make_user("owner")
    login(client, "owner")
    return make_event("owner", "Demo")


def test_create_and_list(client, event):
    resp = client.post(f"/api/events/{event.id}/attendees", json={"name": "Nguyễn Văn A", "studentId": "SV001"})
    assert resp.status_code == 201
    assert resp.get_json()["qrCode"].startswith("CK_")

    resp = client.get(f"/api/events/{event.id}/attendees")
    assert [a["studentId"] for a in resp.get_json()] == ["SV001"]


def test_missing_student_id_is_400(client, event):
    resp = client.post(f"/api/events/{event.id}/attendees", json={"name": "A"})

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "MSSV/MSNV là bắt buộc"


def test_bulk_import_csv(client, event):
    csv = "Tên,MSSV/MSNV\nNguyễn Văn A,SV001\nTrần Thị B,SV002\n".encode("utf-8")

    resp = client.post(
        f"/api/events/{event.id}/attendees/bulk",
        data={"file": (io.BytesIO(csv), "ds.csv", "text/csv")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 200
    assert resp.get_json() == {"message": "Đã thêm 2 sinh viên thành công", "created": 2, "failed": 0}


def test_bulk_import_without_file(client, event):
    resp = client.post(f"/api/events/{event.id}/attendees/bulk", data={}, content_type="multipart/form-data")

    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Vui lòng chọn file"


def test_template_is_public(app):
    resp = app.test_client().get("/api/attendees/template")

    assert resp.status_code == 200
    assert "mau_danh_sach_sinh_vien.xlsx" in resp.headers["Content-Disposition"]


def test_exports(client, event, make_attendee):
    make_attendee(event.id, "owner", "SV001")

    resp = client.get(f"/api/events/{event.id}/attendees/export")
    assert resp.status_code == 200
    assert "DS_SinhVien_Demo_" in resp.headers["Content-Disposition"]

    resp = client.get(f"/api/events/{event.id}/attendees/export-zip")
    assert resp.status_code == 200
    with zipfile.ZipFile(io.BytesIO(resp.data)) as zf:
        assert any(n.startswith("qr-codes/") for n in zf.namelist())


def test_bulk_delete_route_is_not_shadowed(client, event, make_attendee):
    a = make_attendee(event.id, "owner", "SV001")

    resp = client.delete("/api/attendees/bulk", json={"attendeeIds": [a.id]})

    assert resp.status_code == 200
    assert resp.get_json()["deletedCount"] == 1


def test_qr_endpoints(client, event, make_attendee):
    a = make_attendee(event.id, "owner", "SV001")

    assert client.get(f"/api/attendees/{a.id}/qr").get_json()["qrCode"].startswith("data:image/png;base64,")

    resp = client.get(f"/api/attendees/{a.id}/qr.png")
    assert resp.mimetype == "image/png"
    assert resp.data.startswith(b"\x89PNG")


def test_unknown_attendee_is_404(client, event):
    resp = client.delete("/api/attendees/4242")

    assert resp.status_code == 404
    assert resp.get_json()["message"] == "Sinh viên không tồn tại"
