from __future__ import annotations

import re
from typing import Optional

from ..core.exceptions import ValidationError

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} không hợp lệ")
    return str(value).strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} tối thiểu {min_len} ký tự")
    return value


def require_max_length(value: Optional[str], field_name: str, max_len: int) -> Optional[str]:
    if value is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} tối đa {max_len} ký tự")
    return value


def optional_text(value) -> Optional[str]:
    """Empty strings from forms/JSON mean "not set"."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def optional_email(value) -> Optional[str]:
    value = optional_text(value)
    if value is not None and not _EMAIL_RE.match(value):
        raise ValidationError("Email không hợp lệ")
    return value
