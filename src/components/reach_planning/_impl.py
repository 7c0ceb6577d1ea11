"""
Reach planning sheet validation and row mapping.

Reach planning rows are stored as-is in ``media_sufficiency``; validation
only checks that the figures parse and that the taxonomy names look right.
Master data mismatches are warnings because reach rows are not linked to
game plans by id.
"""

from __future__ import annotations

from typing import Any

from src.components.validation import MasterDataIndex, ValidationIssue
from src.core.services.values import clean_text, is_blank, is_number, parse_number, parse_reach
from src.domain.entities import MediaSufficiency

from .models import ReachColumn

COLUMNS: tuple[ReachColumn, ...] = (
    ReachColumn("last_update", ("Last Update",)),
    ReachColumn("sub_region", ("Sub Region",)),
    ReachColumn("country", ("Country",)),
    ReachColumn("bu", ("BU", "Business Unit")),
    ReachColumn("category", ("Category",)),
    ReachColumn("range", ("Range",)),
    ReachColumn("campaign", ("Campaign",)),
    ReachColumn("franchise_ns", ("Franchise NS (Actual or Projected)", "Franchise NS")),
    ReachColumn("campaign_socio_demo_target", ("Campaign Socio-Demo Target",)),
    ReachColumn(
        "total_country_population_on_target",
        ("Total Country Population On Target (Abs)", "Total Country Population On Target"),
        "number",
    ),
    ReachColumn("tv_copy_length", ("TV Copy Length",)),
    ReachColumn("tv_target_size", ("TV Target Size (Abs)", "TV Target Size"), "number"),
    ReachColumn("woa_open_tv", ("WOA Open TV",), "number"),
    ReachColumn("woa_paid_tv", ("WOA Paid TV",), "number"),
    ReachColumn("total_trps", ("Total TRPs",), "number"),
    ReachColumn("tv_planned_r1_plus", ("TV R1+ (Total)", "TV R1+"), "percentage"),
    ReachColumn("tv_planned_r3_plus", ("TV R3+ (Total)", "TV R3+"), "percentage"),
    ReachColumn("tv_potential_r1_plus", ("TV IDEAL Reach", "TV Ideal Reach"), "percentage"),
    ReachColumn("cpp_2024", ("CPP 2024",), "number"),
    ReachColumn("cpp_2025", ("CPP 2025",), "number"),
    ReachColumn("digital_target", ("Digital Target",)),
    ReachColumn(
        "digital_target_size_abs", ("Digital Target Size (Abs)", "Digital Target Size"), "number"
    ),
    ReachColumn("woa_pm_ff", ("WOA PM & FF", "WOA PM FF"), "number"),
    ReachColumn(
        "woa_influencers_amplification",
        ("WOA Influencers (Amplification)", "WOA Influencers Amplification"),
        "number",
    ),
    ReachColumn("digital_planned_r1_plus", ("Digital R1+ (Total)", "Digital R1+"), "percentage"),
    ReachColumn(
        "digital_potential_r1_plus", ("Digital IDEAL Reach", "Digital Ideal Reach"), "percentage"
    ),
    ReachColumn("planned_combined_reach", ("Planned Combined Reach",), "percentage"),
    ReachColumn(
        "combined_potential_reach", ("Combined IDEAL Reach", "Combined Ideal Reach"), "percentage"
    ),
    ReachColumn("digital_reach_level_check", ("Digital Reach Level Check",), "level"),
    ReachColumn("tv_reach_level_check", ("TV Reach Level Check",), "level"),
    ReachColumn("combined_reach_level_check", ("Combined Reach Level Check",), "level"),
)

REQUIRED_COLUMNS = ("Last Update", "Sub Region", "Country", "Category", "Range", "Campaign")

_BY_LABEL = {c.label: c for c in COLUMNS}


def cell(record: dict[str, Any], column: ReachColumn) -> Any:
    for header in column.headers:
        if header in record and not is_blank(record[header]):
            return record[header]
    return None


def is_valid_percentage(value: Any) -> bool:
    """"45%" must be within 0..100; a bare number must be a 0..1 fraction."""
    text = str(value).strip()
    if text.endswith("%"):
        number = parse_number(text[:-1])
        return number is not None and 0 <= number <= 100
    if not is_number(text):
        return False
    return 0 <= float(text.replace(",", "")) <= 1


class ReachPlanningValidator:
    def __init__(self, master_data: dict[str, Any] | None, reach_levels: list[str]):
        self.index = MasterDataIndex(master_data)
        self.reach_levels = reach_levels
        self._levels = {level.lower() for level in reach_levels}

    def _issue(
        self, row: int, column: str, severity: str, message: str, value: Any
    ) -> ValidationIssue:
        return ValidationIssue(
            row_index=row,
            column_name=column,
            severity=severity,  # type: ignore[arg-type]
            message=message,
            current_value=value,
        )

    def validate_record(self, record: dict[str, Any], row: int) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []

        for label in REQUIRED_COLUMNS:
            value = cell(record, _BY_LABEL[label])
            if is_blank(value):
                issues.append(self._issue(row, label, "critical", f"{label} is required", value))

        for column in COLUMNS:
            value = cell(record, column)
            if is_blank(value):
                continue
            if column.kind == "number" and not is_number(value):
                issues.append(
                    self._issue(row, column.label, "critical", f"{column.label} must be a valid number", value)
                )
            elif column.kind == "percentage" and not is_valid_percentage(value):
                issues.append(
                    self._issue(
                        row,
                        column.label,
                        "critical",
                        f"{column.label} must be a valid percentage (0-100% or 0-1)",
                        value,
                    )
                )
            elif column.kind == "level" and str(value).strip().lower() not in self._levels:
                issues.append(
                    self._issue(
                        row,
                        column.label,
                        "warning",
                        f"{column.label} should be one of: {', '.join(self.reach_levels)}",
                        value,
                    )
                )

        issues.extend(self._check_master_data(record, row))
        return issues

    def _check_master_data(self, record: dict[str, Any], row: int) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        for label, key in (
            ("Country", "countries"),
            ("Category", "categories"),
            ("Range", "ranges"),
            ("Campaign", "campaigns"),
        ):
            value = cell(record, _BY_LABEL[label])
            if is_blank(value) or not self.index.known(key):
                continue
            if not self.index.has(key, value):
                issues.append(
                    self._issue(
                        row, label, "warning", f'{label} "{clean_text(value)}" does not exist in master data', value
                    )
                )

        country = cell(record, _BY_LABEL["Country"])
        sub_region = cell(record, _BY_LABEL["Sub Region"])
        if not is_blank(country) and not is_blank(sub_region):
            expected = self.index.lookup("countryToSubRegionMap", country)
            if expected and str(expected).strip().lower() != str(sub_region).strip().lower():
                issues.append(
                    self._issue(
                        row,
                        "Sub Region",
                        "warning",
                        f'Sub Region "{clean_text(sub_region)}" may not match Country '
                        f'"{clean_text(country)}". Expected: "{expected}"',
                        sub_region,
                    )
                )
        return issues

    def validate_all(self, records: list[dict[str, Any]]) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        for i, record in enumerate(records):
            issues.extend(self.validate_record(record, i))
        return issues


def percentage_value(value: Any) -> float | None:
    """
    A percentage cell as a 0..1 fraction.

    "45%" is always divided by 100; a bare number goes through ``parse_reach``.
    """
    if is_blank(value):
        return None
    text = str(value).strip()
    if text.endswith("%"):
        number = parse_number(text[:-1])
        return min(number / 100, 1.0) if number is not None else None
    return parse_reach(text)


def transform_record(record: dict[str, Any]) -> dict[str, Any]:
    """Map a sheet row onto media_sufficiency fields."""
    row: dict[str, Any] = {}
    for column in COLUMNS:
        value = cell(record, column)
        if column.kind == "number":
            row[column.field] = parse_number(value)
        elif column.kind == "percentage":
            row[column.field] = percentage_value(value)
        else:
            row[column.field] = clean_text(value) or None
    return row


def to_media_sufficiency(record: dict[str, Any], **extra: Any) -> MediaSufficiency:
    return MediaSufficiency(**transform_record(record), **extra)
