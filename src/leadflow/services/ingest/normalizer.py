"""Coerce raw upload rows into canonical customer records."""

from __future__ import annotations

import logging
from typing import Iterable, Mapping

from ...errors import NoValidRecordsError
from ...models.domain import CustomerRecord

logger = logging.getLogger(__name__)

FIRST_NAME = "FirstName"
PHONE = "Phone"
NOTES = "Notes"


def trim_keys(row: Mapping) -> dict[str, str]:
    """Strip padding from header names; later duplicates win."""
    cleaned: dict[str, str] = {}
    for key, value in row.items():
        if not isinstance(key, str):
            continue
        cleaned[key.strip()] = "" if value is None else str(value)
    return cleaned


def normalize_row(row: Mapping) -> CustomerRecord | None:
    """Return a record, or ``None`` when the row has neither a name nor a phone."""
    cleaned = trim_keys(row)
    first_name = cleaned.get(FIRST_NAME, "").strip()
    phone = cleaned.get(PHONE, "").strip()
    if not first_name and not phone:
        return None
    return CustomerRecord(first_name=first_name, phone=phone, notes=cleaned.get(NOTES, "").strip())


def normalize_rows(rows: Iterable[Mapping]) -> list[CustomerRecord]:
    customers: list[CustomerRecord] = []
    dropped = 0
    for row in rows:
        record = normalize_row(row)
        if record is None:
            dropped += 1
            continue
        customers.append(record)

    if dropped:
        logger.info(f"Dropped {dropped} row(s) without FirstName or Phone")
    if not customers:
        raise NoValidRecordsError()
    return customers
