"""
Pre-import readiness check: a quick pass over staged records that decides
whether the importer can run, independent of the full rule set.
"""

from typing import Any

from src.core.services.values import is_blank, parse_date

from ._impl import column_value, is_record_empty
from .master_data import MasterDataIndex
from .models import ImportReadiness

READINESS_FIELDS: tuple[str, ...] = ("Campaign", "Range", "Media Subtype", "Initial Date", "End Date")

_FIELD_LABELS = {"Initial Date": "Start Date"}

_CREATABLE = (("Campaign", "campaigns"), ("Range", "ranges"), ("Media Subtype", "mediaSubTypes"))


def check_import_readiness(records: list[dict[str, Any]], master_data: dict[str, Any] | None) -> ImportReadiness:
    rows = [r for r in records if not is_record_empty(r)]
    if not rows:
        return ImportReadiness(
            is_valid=False,
            errors=["No records found in the import file"],
            warnings=[],
            record_count=0,
            invalid_records=0,
        )

    index = MasterDataIndex(master_data)
    errors: list[str] = []
    warnings: list[str] = []
    invalid = 0

    for i, record in enumerate(rows, start=1):
        row_errors: list[str] = []
        for field in READINESS_FIELDS:
            if is_blank(column_value(record, field)):
                row_errors.append(
                    f"Row {i}: Missing required field '{_FIELD_LABELS.get(field, field)}'"
                )

        start = parse_date(column_value(record, "Initial Date"))
        end = parse_date(column_value(record, "End Date"))
        if not is_blank(column_value(record, "Initial Date")) and start is None:
            row_errors.append(f"Row {i}: Start Date is not a valid date")
        if not is_blank(column_value(record, "End Date")) and end is None:
            row_errors.append(f"Row {i}: End Date is not a valid date")
        if start and end and start >= end:
            row_errors.append(f"Row {i}: Start Date must be before End Date")

        for field, key in _CREATABLE:
            value = column_value(record, field)
            if not is_blank(value) and index.known(key) and not index.has(key, value):
                warnings.append(f"Row {i}: {field} '{str(value).strip()}' does not exist and will be created")

        if row_errors:
            invalid += 1
            errors.extend(row_errors)

    return ImportReadiness(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        record_count=len(rows),
        invalid_records=invalid,
    )
