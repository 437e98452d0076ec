"""QR tokens for attendees: generation, rendering and decoding uploaded photos."""
from __future__ import annotations

import base64
import io
import logging
import secrets
import time
from typing import BinaryIO, Callable, Optional

import qrcode
from PIL import Image, UnidentifiedImageError

from ..core.constants import QR_CODE_DIGITS, QR_CODE_PREFIX, QR_UNIQUE_ATTEMPTS
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)

NO_QR_FOUND_MESSAGE = "Không phát hiện mã QR trong ảnh"


def generate_code() -> str:
    """`CK_` followed by 10 random digits (zero padded)."""
    number = secrets.randbelow(10 ** QR_CODE_DIGITS)
    return f"{QR_CODE_PREFIX}{number:0{QR_CODE_DIGITS}d}"


def ensure_unique_code(
    exists: Callable[[str], bool],
    *,
    attempts: int = QR_UNIQUE_ATTEMPTS,
    clock: Optional[Callable[[], float]] = None,
) -> str:
    for _ in range(attempts):
        code = generate_code()
        if not exists(code):
            return code

    clock = clock or time.time
    fallback = f"{QR_CODE_PREFIX}{int(clock() * 1000)}"
    logger.warning("No unique QR code after %s attempts, falling back to %s", attempts, fallback)
    return fallback


def normalize_code(raw) -> str:
    """Manual entry is case-insensitive and may carry stray whitespace."""
    return str(raw or "").strip().upper()


def render_png(code: str) -> bytes:
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=2,
    )
    qr.add_data(code)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def render_data_url(code: str) -> str:
    encoded = base64.b64encode(render_png(code)).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def decode_image(stream: BinaryIO) -> str:
    """Return the text of the first QR symbol found in an uploaded image."""
    # pyzbar loads the native zbar library on import.
    from pyzbar.pyzbar import decode as pyzbar_decode

    try:
        img = Image.open(stream).convert("RGB")
    except (UnidentifiedImageError, OSError):
        raise ValidationError(NO_QR_FOUND_MESSAGE)

    decoded = pyzbar_decode(img)
    if not decoded:
        raise ValidationError(NO_QR_FOUND_MESSAGE)

    return decoded[0].data.decode("utf-8").strip()
