from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from ..core.exceptions import ValidationError

TIME_FORMAT_MESSAGE = (
    "Định dạng thời gian không hợp lệ. Vui lòng kiểm tra lại thời gian bắt đầu và kết thúc."
)


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_event_date(value) -> date:
    """YYYY-MM-DD, or a full ISO datetime such as `2026-10-20T00:00:00.000Z` from a date picker."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return parse_iso_date(text)
    except ValueError:
        pass
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise ValidationError(TIME_FORMAT_MESSAGE)


def parse_optional_time(value) -> Optional[time]:
    """Accept HH:MM or HH:MM:SS; empty string/None mean the time is not set."""
    if value is None or isinstance(value, time):
        return value
    value = str(value).strip()
    if not value:
        return None
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            return datetime.strptime(value, fmt).time()
        except ValueError:
            continue
    raise ValidationError(TIME_FORMAT_MESSAGE)


def format_time(value: Optional[time]) -> Optional[str]:
    return value.strftime("%H:%M:%S") if value else None


def format_vn_datetime(value: Optional[datetime]) -> str:
    """Vietnamese display format used in exported spreadsheets."""
    return value.strftime("%H:%M:%S %d/%m/%Y") if value else ""


def isoformat_or_none(value) -> Optional[str]:
    return value.isoformat() if value else None


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
