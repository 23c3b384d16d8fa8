"""Convert uploaded CSV/XLS/XLSX payloads into header-keyed row mappings."""

from __future__ import annotations

import csv
from datetime import date, datetime
from io import BytesIO, StringIO
from pathlib import Path
from typing import Any, Iterable, Sequence

import xlrd
from openpyxl import load_workbook

from ...config import settings
from ...errors import ParseError, UnsupportedFormatError

RawRow = dict[str, str]

CSV_EXTENSIONS = {".csv"}
WORKBOOK_EXTENSIONS = {".xlsx"}
LEGACY_WORKBOOK_EXTENSIONS = {".xls"}
SUPPORTED_EXTENSIONS = CSV_EXTENSIONS | WORKBOOK_EXTENSIONS | LEGACY_WORKBOOK_EXTENSIONS


def _enabled_extensions() -> set[str]:
    return SUPPORTED_EXTENSIONS & set(settings.allowed_extensions)


def normalize_extension(extension: str | None) -> str:
    """Return a declared extension (``csv`` or ``.CSV``) lower-cased and dot-prefixed."""
    value = (extension or "").strip().lower()
    if not value.lstrip("."):
        raise UnsupportedFormatError()
    value = value if value.startswith(".") else f".{value}"
    if value not in _enabled_extensions():
        raise UnsupportedFormatError()
    return value


def resolve_extension(filename: str | None) -> str:
    """Return the enabled extension of an uploaded filename.

    A name without a suffix (``csv``, ``.csv``, ``leads``) is rejected.
    """
    if not filename or not filename.strip():
        raise UnsupportedFormatError()
    suffix = Path(filename.strip()).suffix
    if not suffix:
        raise UnsupportedFormatError()
    return normalize_extension(suffix)


def cell_to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return str(value).upper()
    if isinstance(value, float) and value.is_integer():
        # Spreadsheet apps store phone numbers as floats.
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _is_blank(values: Iterable[Any]) -> bool:
    return all(cell_to_text(value).strip() == "" for value in values)


def _rows_from_grid(header: Sequence[Any], body: Iterable[Sequence[Any]]) -> list[RawRow]:
    headers = [cell_to_text(cell) for cell in header]
    rows: list[RawRow] = []
    for values in body:
        if values is None or _is_blank(values):
            continue
        row: RawRow = {}
        for index, name in enumerate(headers):
            if not name:
                continue
            row[name] = cell_to_text(values[index]) if index < len(values) else ""
        rows.append(row)
    return rows


def _rows_from_records(grid: Iterable[Sequence[Any]]) -> list[RawRow]:
    """Use the first non-blank row as the header and map the rows after it."""
    records = iter(grid)
    for header in records:
        if header is not None and not _is_blank(header):
            return _rows_from_grid(header, records)
    return []


def parse_csv(payload: bytes) -> list[RawRow]:
    try:
        text = payload.decode("utf-8-sig")
        return _rows_from_records(csv.reader(StringIO(text, newline=""), strict=True))
    except (UnicodeDecodeError, csv.Error) as exc:
        raise ParseError(f"Failed to parse CSV file: {exc}") from exc


def parse_xlsx(payload: bytes) -> list[RawRow]:
    try:
        workbook = load_workbook(filename=BytesIO(payload), read_only=True, data_only=True)
    except Exception as exc:
        raise ParseError(f"Failed to parse XLSX workbook: {exc}") from exc
    try:
        if not workbook.worksheets:
            return []
        worksheet = workbook.worksheets[0]
        return _rows_from_records(worksheet.iter_rows(values_only=True))
    except Exception as exc:
        raise ParseError(f"Failed to read XLSX worksheet: {exc}") from exc
    finally:
        workbook.close()


def parse_xls(payload: bytes) -> list[RawRow]:
    try:
        book = xlrd.open_workbook(file_contents=payload, on_demand=True)
    except Exception as exc:
        raise ParseError(f"Failed to parse XLS workbook: {exc}") from exc
    try:
        if book.nsheets == 0:
            return []
        sheet = book.sheet_by_index(0)
        return _rows_from_records(sheet.row_values(index) for index in range(sheet.nrows))
    except Exception as exc:
        # Damaged BIFF records surface as struct, index or assertion errors.
        raise ParseError(f"Failed to read XLS worksheet: {exc}") from exc
    finally:
        book.release_resources()


def extract_rows(payload: bytes, extension: str) -> list[RawRow]:
    """Parse ``payload`` according to its declared extension.

    Only the first worksheet of a workbook is read. The first non-blank row
    supplies the column headers; blank rows are skipped.
    """
    suffix = normalize_extension(extension)
    if suffix in CSV_EXTENSIONS:
        return parse_csv(payload)
    if suffix in WORKBOOK_EXTENSIONS:
        return parse_xlsx(payload)
    return parse_xls(payload)
