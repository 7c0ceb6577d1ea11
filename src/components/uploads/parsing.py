"""
CSV and Excel parsing for bulk uploads.

Both parsers return records as ``{header: value}`` dicts with blank rows
dropped. Excel dates are rendered as ``DD-Mon-YYYY`` so they read the same
as the CSV templates; budget columns keep full numeric precision.
"""

from __future__ import annotations

import csv
import io
import logging
import zipfile
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from src.core.services.values import format_date

logger = logging.getLogger(__name__)

GAME_PLAN_SHEET = "NIVEA Game Plan Table"
REACH_PLANNING_SHEET = "NIVEA Reach Sufficiency Table"

BUDGET_FIELDS = frozenset(
    ["Total Budget", "Jan", "Feb", "Mar", "Apr", "May", "Jun",
     "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
)


class UploadParseError(ValueError):
    """The uploaded file could not be read as a spreadsheet."""


@dataclass
class ParsedSheet:
    records: list[dict[str, Any]]
    headers: list[str]
    sheet_used: str | None = None
    available_sheets: list[str] = field(default_factory=list)


def is_excel_file(filename: str) -> bool:
    name = filename.lower()
    return name.endswith(".xlsx") or name.endswith(".xls")


def is_csv_file(filename: str) -> bool:
    return filename.lower().endswith(".csv")


def _has_data(record: dict[str, Any]) -> bool:
    return any(v not in (None, "") for v in record.values())


def parse_csv(content: bytes | str) -> ParsedSheet:
    """Parse CSV text (BOM tolerant); headers and values are stripped."""
    if isinstance(content, bytes):
        try:
            text = content.decode("utf-8-sig")
        except UnicodeDecodeError as e:
            raise UploadParseError(f"CSV file is not valid UTF-8: {e}") from e
    else:
        text = content.lstrip("﻿")

    reader = csv.reader(io.StringIO(text))
    try:
        rows = list(reader)
    except csv.Error as e:
        raise UploadParseError(f"Failed to parse CSV file: {e}") from e

    if not rows:
        raise UploadParseError("CSV file is empty")

    headers = [h.strip() for h in rows[0]]
    records: list[dict[str, Any]] = []
    for row in rows[1:]:
        record = {
            header: (row[i].strip() if i < len(row) else "")
            for i, header in enumerate(headers)
            if header
        }
        if _has_data(record):
            records.append(record)
    return ParsedSheet(records=records, headers=[h for h in headers if h])


def _find_sheet(available: list[str], sheet_name: str) -> str | None:
    wanted = sheet_name.lower()
    for name in available:
        lower = name.lower()
        if wanted in lower or lower in wanted:
            return name
    return None


def _cell_to_value(header: str, value: Any) -> Any:
    if value is None:
        return ""
    if isinstance(value, datetime | date):
        return format_date(value)
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        if header in BUDGET_FIELDS:
            return value
        return int(value) if value.is_integer() else value
    if isinstance(value, int):
        return value
    return str(value).strip()


def parse_excel_file(
    content: bytes,
    sheet_name: str | None = None,
    fallback_to_first_sheet: bool = True,
) -> ParsedSheet:
    """
    Parse an Excel workbook.

    The sheet is located by case-insensitive substring match on ``sheet_name``;
    when not found the first sheet is used unless ``fallback_to_first_sheet``
    is False. Raises UploadParseError when the workbook cannot be read.
    """
    try:
        wb = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        raise UploadParseError(f"Failed to parse Excel file: {e}") from e

    try:
        available = list(wb.sheetnames)
        if not available:
            raise UploadParseError("No worksheets found in Excel file")

        target = _find_sheet(available, sheet_name) if sheet_name else None
        if target is None and fallback_to_first_sheet:
            target = available[0]
        if target is None:
            raise UploadParseError(
                f'Sheet "{sheet_name}" not found. Available sheets: {", ".join(available)}'
            )

        rows = wb[target].iter_rows(values_only=True)
        header_row = next(rows, None)
        if not header_row or all(h is None for h in header_row):
            raise UploadParseError("No headers found in first row")

        headers = [str(h).strip() if h is not None else "" for h in header_row]
        records: list[dict[str, Any]] = []
        for row in rows:
            record = {
                header: _cell_to_value(header, row[i] if i < len(row) else None)
                for i, header in enumerate(headers)
                if header
            }
            if _has_data(record):
                records.append(record)
    finally:
        wb.close()

    logger.debug("Parsed %d records from sheet %r", len(records), target)
    return ParsedSheet(
        records=records,
        headers=[h for h in headers if h],
        sheet_used=target,
        available_sheets=available,
    )


def parse_game_plans_excel(content: bytes, sheet_name: str = GAME_PLAN_SHEET) -> ParsedSheet:
    return parse_excel_file(content, sheet_name=sheet_name, fallback_to_first_sheet=True)


def parse_reach_planning_excel(content: bytes, sheet_name: str = REACH_PLANNING_SHEET) -> ParsedSheet:
    return parse_excel_file(content, sheet_name=sheet_name, fallback_to_first_sheet=True)


def parse_upload(filename: str, content: bytes, sheet_name: str | None = None) -> ParsedSheet:
    """Dispatch on file extension."""
    if is_csv_file(filename):
        return parse_csv(content)
    if is_excel_file(filename):
        return parse_excel_file(content, sheet_name=sheet_name)
    raise UploadParseError("Unsupported file type. Please upload a CSV or Excel file.")
