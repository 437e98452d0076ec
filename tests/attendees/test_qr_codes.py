from __future__ import annotations

import io
import re

import pytest

from src.event_checkin.event_checkin.attendees import qr
from src.event_checkin.event_checkin.core.exceptions import ValidationError


def test_generated_code_format():
    for _ in range(20):
        assert re.fullmatch(r"CK_\d{10}", qr.generate_code())


def test_unique_code_retries_until_free():
    seen = []

    def exists(code):
        seen.append(code)
        return len(seen) < 3

    code = qr.ensure_unique_code(exists)

    assert code == seen[-1]
    assert len(seen) == 3


def test_unique_code_falls_back_to_timestamp():
    code = qr.ensure_unique_code(lambda c: True, clock=lambda: 1760000000.123)

    assert code == "CK_1760000000123"


def test_normalize_manual_entry():
    assert qr.normalize_code("  ck_0123456789 \n") == "CK_0123456789"
    assert qr.normalize_code(None) == ""


def test_render_png_and_data_url():
    png = qr.render_png("CK_0000000001")

    assert png.startswith(b"\x89PNG")
    assert qr.render_data_url("CK_0000000001").startswith("data:image/png;base64,")


def test_decode_rendered_image():
    pytest.importorskip("pyzbar.pyzbar")

    assert qr.decode_image(io.BytesIO(qr.render_png("CK_1234567890"))) == "CK_1234567890"


def test_decode_rejects_non_images():
    pytest.importorskip("pyzbar.pyzbar")

    with pytest.raises(ValidationError, match="Không phát hiện mã QR trong ảnh"):
        qr.decode_image(io.BytesIO(b"not an image"))
