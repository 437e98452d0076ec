"""Attendee lists as spreadsheets: bulk import, template and exports.

Parsing and writing go through pandas (openpyxl engine); nothing here reads
the file formats by hand.
"""
from __future__ import annotations

import io
import logging
import re
import zipfile
from datetime import date
from typing import Callable, Dict, List, Optional, Sequence

import pandas as pd
from openpyxl.utils import get_column_letter

from ..common.datetime_utils import format_vn_datetime
from ..core.exceptions import ValidationError
from .model import Attendee

logger = logging.getLogger(__name__)

SHEET_NAME = "Danh sách sinh viên"
TEMPLATE_FILENAME = "mau_danh_sach_sinh_vien.xlsx"
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

_CSV_MIMETYPES = {"text/csv"}
_EXCEL_MIMETYPES = {XLSX_MIMETYPE, "application/vnd.ms-excel"}

# field -> accepted headers, Vietnamese first
COLUMN_ALIASES: Dict[str, tuple] = {
    "name": ("Tên", "name"),
    "student_id": ("MSSV/MSNV", "studentId"),
    "email": ("Email", "email"),
    "faculty": ("Khoa", "faculty"),
    "major": ("Ngành", "major"),
}

_TEMPLATE_ROWS = [
    {
        "Tên": "Nguyễn Văn A",
        "MSSV/MSNV": "SV001",
        "Email": "nguyenvana@example.com",
        "Khoa": "Công nghệ thông tin",
        "Ngành": "Kỹ thuật phần mềm",
    },
    {
        "Tên": "Trần Thị B",
        "MSSV/MSNV": "SV002",
        "Email": "tranthib@example.com",
        "Khoa": "Kinh tế",
        "Ngành": "Quản trị kinh doanh",
    },
]

_EXPORT_WIDTHS = {
    "STT": 5,
    "Tên": 25,
    "MSSV/MSNV": 15,
    "Email": 25,
    "Khoa": 20,
    "Ngành": 20,
    "Mã QR": 15,
    "File QR": 30,
    "Trạng thái": 15,
    "Thời gian check-in": 20,
    "Thời gian check-out": 20,
}


def _is_csv(filename: str, content_type: str) -> bool:
    return content_type in _CSV_MIMETYPES or filename.lower().endswith(".csv")


def _is_excel(filename: str, content_type: str) -> bool:
    lower = filename.lower()
    return content_type in _EXCEL_MIMETYPES or lower.endswith(".xlsx") or lower.endswith(".xls")


def _cell(row: dict, headers: tuple) -> str:
    for h in headers:
        value = row.get(h)
        if value is None or (isinstance(value, float) and pd.isna(value)):
            continue
        text = str(value).strip()
        if text:
            return text
    return ""


def read_attendee_rows(filename: str, content_type: str, data: bytes) -> List[dict]:
    """Parse an uploaded CSV/Excel file into attendee field dicts.

    Rows lacking a name or a student id are dropped.
    """
    filename = filename or ""
    content_type = (content_type or "").split(";")[0].strip().lower()

    if _is_csv(filename, content_type):
        reader = lambda buf: pd.read_csv(buf, dtype=str, keep_default_na=False, encoding="utf-8-sig")
    elif _is_excel(filename, content_type):
        reader = lambda buf: pd.read_excel(buf, dtype=str, keep_default_na=False)
    else:
        raise ValidationError("Định dạng file không hợp lệ. Vui lòng sử dụng CSV hoặc Excel")

    try:
        df = reader(io.BytesIO(data))
    except Exception:
        logger.warning("Could not parse uploaded file %r", filename, exc_info=True)
        raise ValidationError("Không tìm thấy dữ liệu hợp lệ trong file")

    rows: List[dict] = []
    for record in df.to_dict(orient="records"):
        item = {field: _cell(record, headers) for field, headers in COLUMN_ALIASES.items()}
        if item["name"] and item["student_id"]:
            rows.append(item)

    if not rows:
        raise ValidationError("Không tìm thấy dữ liệu hợp lệ trong file")
    return rows


def _write_workbook(df: pd.DataFrame, widths: Optional[Dict[str, int]] = None) -> bytes:
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=SHEET_NAME)
        if widths:
            ws = writer.sheets[SHEET_NAME]
            for idx, column in enumerate(df.columns, start=1):
                if column in widths:
                    ws.column_dimensions[get_column_letter(idx)].width = widths[column]
    return output.getvalue()


def build_template() -> bytes:
    return _write_workbook(pd.DataFrame(_TEMPLATE_ROWS))


def qr_file_name(attendee: Attendee) -> str:
    formatted = "_".join(attendee.name.split(" "))
    return f"qr-codes/{formatted}_{attendee.qr_code}.png"


def export_filename(event_name: str, today: date, *, prefix: str = "DS_SinhVien", ext: str = "xlsx") -> str:
    safe = re.sub(r"[^a-zA-Z0-9]", "_", event_name or "")
    return f"{prefix}_{safe}_{today.strftime('%d-%m-%Y')}.{ext}"


def _export_frame(attendees: Sequence[Attendee], *, with_qr_files: bool) -> pd.DataFrame:
    data = []
    for index, a in enumerate(attendees, start=1):
        row = {
            "STT": index,
            "Tên": a.name,
            "MSSV/MSNV": a.student_id or "",
            "Email": a.email or "",
            "Khoa": a.faculty or "",
            "Ngành": a.major or "",
            "Mã QR": a.qr_code or "",
        }
        if with_qr_files:
            row["File QR"] = qr_file_name(a) if a.qr_code else ""
        row["Trạng thái"] = a.status_label
        row["Thời gian check-in"] = format_vn_datetime(a.checkin_time)
        row["Thời gian check-out"] = format_vn_datetime(a.checkout_time)
        data.append(row)

    columns = [c for c in _EXPORT_WIDTHS if with_qr_files or c != "File QR"]
    return pd.DataFrame(data, columns=columns)


def build_export(attendees: Sequence[Attendee], *, with_qr_files: bool = False) -> bytes:
    return _write_workbook(_export_frame(attendees, with_qr_files=with_qr_files), _EXPORT_WIDTHS)


def build_export_zip(
    event_name: str,
    attendees: Sequence[Attendee],
    today: date,
    render_png: Callable[[str], bytes],
) -> bytes:
    """Workbook (with a "File QR" column) plus one PNG per attendee under qr-codes/."""
    output = io.BytesIO()
    with zipfile.ZipFile(output, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
        zf.writestr(export_filename(event_name, today), build_export(attendees, with_qr_files=True))
        for a in attendees:
            if a.qr_code:
                zf.writestr(qr_file_name(a), render_png(a.qr_code))
    return output.getvalue()
