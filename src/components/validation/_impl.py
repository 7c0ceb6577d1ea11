"""
Row validator for media sufficiency (game plan) uploads.

Each rule inspects one column of one record, with the whole upload
available for cross-row checks. A rule returns None when the value passes
or a message describing the problem.

Key behaviors:
- Completely empty records produce no issues
- Missing expected columns are reported once, on row 0
- Rules for columns absent from a record are skipped
- A rule that raises becomes a critical "Validation error" issue
- In auto-create mode, unknown or mismatched ranges and campaigns are
  downgraded to warnings because the importer will create them
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from src.core.services.values import (
    extract_year,
    is_blank,
    normalise_key,
    parse_date,
    parse_number,
    to_iso_date,
)
from src.domain.entities import Severity
from src.rules.models import ValidationRules

from .master_data import MasterDataIndex
from .models import ValidationIssue, ValidationSummary

logger = logging.getLogger(__name__)

MONTH_COLUMNS: tuple[str, ...] = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

EXPECTED_COLUMNS: tuple[str, ...] = (
    "Category", "Range", "Campaign", "Playbook ID", "Campaign Archetype", "Burst",
    "Media", "Media Subtype", "Initial Date", "End Date", "Total Weeks", "Total Budget",
    *MONTH_COLUMNS,
    "Total WOA", "Total WOFF", "Total TRPs", "Total R1+ (%)", "Total R3+ (%)",
)

COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "Media": ("Media", "Media Type"),
    "Media Subtype": ("Media Subtype", "Media Sub Type"),
    "Initial Date": ("Initial Date", "Start Date"),
    "Total Budget": ("Total Budget", "Budget"),
    "Total R1+ (%)": ("Total R1+ (%)", "Total R1+", "R1+"),
    "Total R3+ (%)": ("Total R3+ (%)", "Total R3+", "R3+"),
}

REQUIRED_FIELDS: tuple[str, ...] = (
    "Category", "Range", "Campaign", "Campaign Archetype", "Media", "Media Subtype",
    "Initial Date", "End Date", "Total Budget", "Burst", "Playbook ID",
    "Total Weeks", "Total WOA", "Total WOFF",
)

TOLERANCE = 0.01


def column_present(record: dict[str, Any], column: str) -> bool:
    return any(name in record for name in COLUMN_ALIASES.get(column, (column,)))


def column_value(record: dict[str, Any], column: str) -> Any:
    """Value of ``column`` or its first non-blank alias."""
    names = COLUMN_ALIASES.get(column, (column,))
    for name in names:
        if name in record and not is_blank(record[name]):
            return record[name]
    for name in names:
        if name in record:
            return record[name]
    return None


def is_record_empty(record: dict[str, Any]) -> bool:
    return all(is_blank(v) for v in record.values())


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _preview(values: list[str], limit: int = 5) -> str:
    shown = ", ".join(values[:limit])
    return shown + ("..." if len(values) > limit else "")


def _contains(values: list[str], value: Any) -> bool:
    key = normalise_key(value)
    return any(normalise_key(v) == key for v in values)


@dataclass(frozen=True)
class Rule:
    field: str
    severity: Severity
    check: Callable[[Any, dict[str, Any], list[dict[str, Any]]], str | None]


class MediaSufficiencyValidator:
    def __init__(
        self,
        master_data: dict[str, Any] | None,
        config: ValidationRules,
        auto_create: bool = False,
        financial_cycle: str | None = None,
    ):
        self.index = MasterDataIndex(master_data)
        self.config = config
        self.auto_create = auto_create
        self.cycle_year = extract_year(financial_cycle)
        self.rules = self._build_rules()
        self._duplicates: tuple[int, Counter[tuple[str, ...]]] | None = None

    # --- Rule table ---

    def _build_rules(self) -> list[Rule]:
        relation = "warning" if self.auto_create else "critical"
        rules = [Rule(f, "critical", self._required(f)) for f in REQUIRED_FIELDS]
        rules += [
            Rule("Total TRPs", "critical", self._check_trps),
            Rule("Total R1+ (%)", "critical", self._check_r1),
            Rule("Total R3+ (%)", "critical", self._check_r3),
            Rule("Category", "critical", self._check_category_exists),
            Rule("Range", "warning", self._check_range_exists),
            Rule("Range", relation, self._check_range_in_category),
            Rule("Campaign", "warning", self._check_campaign_exists),
            Rule("Campaign", relation, self._check_campaign_in_range),
            Rule("Campaign", "critical", self._check_campaign_category),
            Rule("Campaign", "warning", self._check_campaign_linked_range),
            Rule("Year", "warning", self._check_year_blank),
            Rule("Year", "critical", self._check_year_format),
            Rule("Year", "critical", self._check_year_matches_dates),
            Rule("Initial Date", "critical", self._check_date_format("Initial Date")),
            Rule("End Date", "critical", self._check_date_format("End Date")),
            Rule("Initial Date", "critical", self._check_cycle_year("Initial Date")),
            Rule("End Date", "critical", self._check_cycle_year("End Date")),
            Rule("End Date", "critical", self._check_date_order),
            Rule("End Date", "critical", self._check_same_year),
            Rule("Country", "critical", self._check_country_required),
            Rule("Country", "critical", self._check_country_exists),
            Rule("Country", "critical", self._check_country_selected),
            Rule("Sub Region", "critical", self._check_sub_region),
            Rule("Total Budget", "critical", self._check_budget_positive),
            Rule("Total Budget", "critical", self._check_budget_months),
            Rule("Total WOFF", "critical", self._check_woff),
            Rule("Media", "critical", self._check_media),
            Rule("Media Subtype", "critical", self._check_media_subtype),
            Rule("PM Type", "warning", self._check_pm_type_exists),
            Rule("PM Type", "critical", self._check_pm_type_compatibility),
            Rule("Campaign", "critical", self._check_duplicate),
            Rule("Burst", "critical", self._check_burst),
            Rule("Campaign Archetype", "critical", self._check_archetype),
        ]
        return rules

    # --- Required / presence ---

    @staticmethod
    def _required(field: str) -> Callable[[Any, dict[str, Any], list[dict[str, Any]]], str | None]:
        def check(value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
            if is_blank(value):
                return f"{field} is required and cannot be empty"
            return None

        return check

    def _subtype(self, record: dict[str, Any]) -> str:
        return normalise_key(column_value(record, "Media Subtype"))

    def _is_tv(self, record: dict[str, Any]) -> bool:
        return self._subtype(record) in {s.lower() for s in self.config.tv_subtypes}

    # --- Reach / TRPs ---

    def _check_trps(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        subtype = _text(column_value(record, "Media Subtype"))
        if self._is_tv(record):
            if is_blank(value):
                return (
                    f"Total TRPs is required for TV campaign with Media Subtype "
                    f"'{subtype}' and cannot be empty"
                )
            trps = parse_number(value)
            if trps is None or trps < 0:
                return (
                    "Total TRPs must be a valid positive number for TV campaigns. "
                    f"Current value: '{value}'"
                )
            return None

        if not is_blank(value) and parse_number(value) != 0:
            return (
                f"Total TRPs should only be used for TV campaigns. Media Subtype "
                f"'{subtype}' should not have TRP values."
            )
        return None

    def _check_percentage(self, label: str, value: Any, required: bool, subtype: str) -> str | None:
        if is_blank(value):
            if required:
                return f"{label} is required for Media Subtype '{subtype}' and cannot be empty"
            return None
        pct = parse_number(str(value).strip().rstrip("%"))
        if pct is None or pct < 0 or pct > 100:
            return f"{label} must be a valid percentage (0-100%). Current value: '{value}'"
        return None

    def _check_r1(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        subtype = self._subtype(record)
        required = any(k in subtype for k in self.config.r1_required_keywords)
        return self._check_percentage(
            "Total R1+ (%)", value, required, _text(column_value(record, "Media Subtype"))
        )

    def _check_r3(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        required = self._subtype(record) in {s.lower() for s in self.config.r3_required_subtypes}
        return self._check_percentage(
            "Total R3+ (%)", value, required, _text(column_value(record, "Media Subtype"))
        )

    # --- Taxonomy ---

    def _check_category_exists(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        if is_blank(value) or not self.index.known("categories"):
            return None
        if not self.index.has("categories", value):
            return f"Category '{_text(value)}' does not exist in master data"
        return None

    def _check_range_exists(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        if is_blank(value) or self.index.has("ranges", value):
            return None
        return f"Range '{_text(value)}' does not exist and will be auto-created during import"

    def _check_range_in_category(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        category = column_value(record, "Category")
        if is_blank(value) or is_blank(category):
            return None
        if not self.index.has("categories", category) or not self.index.has("ranges", value):
            return None
        valid = self.index.related("categoryToRanges", category)
        if not valid or _contains(valid, value):
            return None
        if self.auto_create:
            return f"Range '{_text(value)}' will be linked to Category '{_text(category)}' for review"
        return (
            f"Range '{_text(value)}' is not valid for Category '{_text(category)}'. "
            f"Valid ranges: {_preview(valid)}"
        )

    def _check_campaign_exists(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        if is_blank(value) or self.index.has("campaigns", value):
            return None
        return f"Campaign '{_text(value)}' does not exist and will be auto-created during import"

    def _check_campaign_in_range(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        range_name = column_value(record, "Range")
        if is_blank(value) or is_blank(range_name):
            return None
        if not self.index.has("campaigns", value) or not self.index.has("ranges", range_name):
            return None
        valid = self.index.related("rangeToCampaigns", range_name)
        if not valid or _contains(valid, value):
            return None
        if self.auto_create:
            return f"Campaign '{_text(value)}' will be linked to Range '{_text(range_name)}' for review"
        return (
            f"Campaign '{_text(value)}' is not valid for Range '{_text(range_name)}'. "
            f"Valid campaigns: {_preview(valid)}"
        )

    def _check_campaign_category(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        category = column_value(record, "Category")
        if is_blank(value) or is_blank(category):
            return None
        linked_range = self.index.lookup("campaignToRangeMap", value)
        if not linked_range:
            return None
        categories = self.index.related("rangeToCategories", linked_range)
        if categories and not _contains(categories, category):
            return (
                f"Campaign '{_text(value)}' belongs to Range '{linked_range}', which is not "
                f"linked to Category '{_text(category)}'"
            )
        return None

    def _check_campaign_linked_range(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        range_name = column_value(record, "Range")
        if is_blank(value) or is_blank(range_name):
            return None
        linked_range = self.index.lookup("campaignToRangeMap", value)
        if linked_range and normalise_key(linked_range) != normalise_key(range_name):
            return (
                f"Campaign '{_text(value)}' exists but is linked to range '{linked_range}', "
                f"not '{_text(range_name)}' as specified in your data. This may indicate a "
                "data inconsistency that should be reviewed."
            )
        return None

    # --- Year and dates ---

    def _check_year_blank(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        if not is_blank(value):
            return None
        if is_blank(column_value(record, "Initial Date")) and is_blank(column_value(record, "End Date")):
            return "Year field is required when no Initial Date or End Date is provided"
        return None

    def _check_year_format(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        if is_blank(value):
            return None
        year = parse_number(value)
        if year is None or not float(year).is_integer() or not 2000 <= year <= 2100:
            return f"Year must be a valid 4-digit year between 2000-2100. Current value: '{value}'"
        return None

    def _check_year_matches_dates(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        year = parse_number(value)
        if year is None or not 2000 <= year <= 2100:
            return None
        for column in ("Initial Date", "End Date"):
            parsed = parse_date(column_value(record, column))
            if parsed and parsed.year != int(year):
                return "Year field must match the year in Initial Date and End Date"
        return None

    @staticmethod
    def _check_date_format(field: str) -> Callable[[Any, dict[str, Any], list[dict[str, Any]]], str | None]:
        def check(value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
            if not is_blank(value) and parse_date(value) is None:
                return f"{field} must be a valid date"
            return None

        return check

    def _check_cycle_year(self, field: str) -> Callable[[Any, dict[str, Any], list[dict[str, Any]]], str | None]:
        def check(value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
            if self.cycle_year is None:
                return None
            parsed = parse_date(value)
            if parsed and parsed.year != self.cycle_year:
                return f"{field} must be in {self.cycle_year} to match the selected financial cycle"
            return None

        return check

    def _dates(self, record: dict[str, Any]) -> tuple[Any, Any]:
        return (
            parse_date(column_value(record, "Initial Date")),
            parse_date(column_value(record, "End Date")),
        )

    def _check_date_order(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        start, end = self._dates(record)
        if start and end and end < start:
            return "End Date must be after Initial Date"
        return None

    def _check_same_year(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        start, end = self._dates(record)
        if start and end and start.year != end.year:
            return (
                "Initial Date and End Date must be in the same year - "
                "campaigns cannot span multiple years"
            )
        return None

    # --- Geography ---

    def _check_country_required(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        if is_blank(value) and not self.index.selected_country:
            return "Country field is required when no country is pre-selected"
        return None

    def _check_country_exists(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        if is_blank(value) or not self.index.known("countries"):
            return None
        if not self.index.has("countries", value):
            return f"Country '{_text(value)}' does not exist in master data"
        return None

    def _check_country_selected(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        selected = self.index.selected_country
        if is_blank(value) or not selected:
            return None
        if normalise_key(value) != normalise_key(selected):
            return (
                f"Country '{_text(value)}' does not match the selected country "
                f"'{selected}' for this upload"
            )
        return None

    def _check_sub_region(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        if is_blank(value):
            return None
        if self.index.known("subRegions") and not self.index.has("subRegions", value):
            return f"Sub-region '{_text(value)}' not found in master data"
        country = column_value(record, "Country")
        if is_blank(country):
            country = self.index.selected_country
        expected = self.index.lookup("countryToSubRegionMap", country) if country else None
        if expected and normalise_key(expected) != normalise_key(value):
            return (
                f"Sub-region '{_text(value)}' does not belong to country '{_text(country)}'. "
                f"Expected: '{expected}'"
            )
        return None

    # --- Budget and weeks ---

    def _check_budget_positive(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        if is_blank(value):
            return None
        budget = parse_number(value)
        if budget is None or budget <= 0:
            return "Total Budget must be a valid number greater than zero"
        return None

    def _check_budget_months(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        budget = parse_number(value)
        if budget is None or budget <= 0:
            return None
        months = [parse_number(record.get(m)) or 0.0 for m in MONTH_COLUMNS]
        non_zero = [m for m in months if m > 0]
        if not non_zero:
            return (
                "Total Budget should equal the sum of monthly budgets (Jan-Dec). "
                "Budget must be distributed across months."
            )
        if len(non_zero) == 1 and abs(non_zero[0] - budget) < self.config.money_tolerance:
            return None
        total = sum(months)
        if abs(total - budget) < self.config.money_tolerance:
            return None
        return (
            f"Total Budget ({budget:,.2f}) should equal the sum of monthly budgets "
            f"Jan-Dec ({total:,.2f})"
        )

    def _check_woff(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        woff = parse_number(value)
        weeks = parse_number(record.get("Total Weeks"))
        woa = parse_number(record.get("Total WOA"))
        if woff is None or weeks is None or woa is None:
            return None
        expected = weeks - woa
        if abs(woff - expected) > TOLERANCE:
            return (
                "Total WOFF should equal Total Weeks minus Total WOA "
                f"(expected {expected:g}, got {woff:g})"
            )
        return None

    # --- Media ---

    def _media_types(self) -> list[str]:
        if self.index.known("mediaTypes"):
            return list(self.index.data.get("mediaTypes", []))
        return list(self.config.default_media_types)

    def _check_media(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        if is_blank(value):
            return None
        valid = self._media_types()
        if not _contains(valid, value):
            return f"Media '{_text(value)}' must be one of: {', '.join(valid)}"
        return None

    def _check_media_subtype(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        media = column_value(record, "Media")
        if is_blank(value) or is_blank(media):
            return None
        valid = self.index.related("mediaToSubtypes", media)
        if valid and not _contains(valid, value):
            return (
                f"Media Subtype '{_text(value)}' is not valid for Media '{_text(media)}'. "
                f"Valid subtypes: {_preview(valid)}"
            )
        return None

    def _check_pm_type_exists(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        if is_blank(value) or not self.index.known("pmTypes"):
            return None
        if not self.index.has("pmTypes", value):
            return f"PM Type '{_text(value)}' is not a known PM type"
        return None

    def _check_pm_type_compatibility(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        subtype = self._subtype(record)
        if is_blank(value) or not subtype:
            return None
        for entry in self.config.pm_type_compatibility:
            if subtype in {s.lower() for s in entry.subtypes}:
                if not _contains(entry.allowed, value):
                    return (
                        f"PM Type '{_text(value)}' is not valid for Media Subtype "
                        f"'{_text(column_value(record, 'Media Subtype'))}'. "
                        f"Allowed PM Types: {', '.join(entry.allowed)}"
                    )
                return None
        return None

    # --- Cross-row ---

    @staticmethod
    def duplicate_key(record: dict[str, Any]) -> tuple[str, ...]:
        return (
            normalise_key(record.get("Campaign")),
            normalise_key(record.get("Country")),
            normalise_key(record.get("Category")),
            normalise_key(record.get("Range")),
            normalise_key(column_value(record, "Media")),
            normalise_key(column_value(record, "Media Subtype")),
            normalise_key(record.get("PM Type")),
            normalise_key(record.get("Business Unit")),
            to_iso_date(column_value(record, "Initial Date")) or "",
            to_iso_date(column_value(record, "End Date")) or "",
        )

    def _duplicate_counts(self, all_records: list[dict[str, Any]]) -> Counter[tuple[str, ...]]:
        if self._duplicates is None or self._duplicates[0] != id(all_records):
            counts = Counter(
                self.duplicate_key(r) for r in all_records if not is_record_empty(r)
            )
            self._duplicates = (id(all_records), counts)
        return self._duplicates[1]

    def _check_duplicate(self, value: Any, record: dict[str, Any], all_records: list[dict[str, Any]]) -> str | None:
        if is_blank(value):
            return None
        if self._duplicate_counts(all_records)[self.duplicate_key(record)] > 1:
            return (
                "Duplicate campaign found: same Campaign, Country, Category, Range, Media, "
                "Media SubType, and dates combination already exists"
            )
        return None

    # --- Misc ---

    def _check_burst(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        if is_blank(value):
            return None
        burst = parse_number(value)
        if burst is None or not float(burst).is_integer() or burst < 1:
            return f"Burst must be a positive integer (1 or greater). Current value: '{value}'"
        return None

    def _check_archetype(self, value: Any, record: dict[str, Any], _all: list[dict[str, Any]]) -> str | None:
        if is_blank(value):
            return None
        if not _contains(self.config.campaign_archetypes, value):
            return (
                f"Campaign Archetype '{_text(value)}' must be one of: "
                f"{', '.join(self.config.campaign_archetypes)}"
            )
        return None

    # --- Entry points ---

    def missing_columns(self, record: dict[str, Any]) -> list[str]:
        return [c for c in EXPECTED_COLUMNS if not column_present(record, c)]

    def validate_record(
        self, record: dict[str, Any], index: int, all_records: list[dict[str, Any]]
    ) -> list[ValidationIssue]:
        if is_record_empty(record):
            return []

        issues: list[ValidationIssue] = []
        if index == 0:
            for column in self.missing_columns(record):
                issues.append(
                    ValidationIssue(
                        row_index=0,
                        column_name=column,
                        severity="critical",
                        message=f"Missing required column '{column}' - all template columns must be present",
                    )
                )

        for rule in self.rules:
            if not column_present(record, rule.field):
                continue
            value = column_value(record, rule.field)
            try:
                message = rule.check(value, record, all_records)
            except Exception as e:
                logger.warning("Rule for %s failed at row %d: %s", rule.field, index + 1, e)
                issues.append(
                    ValidationIssue(index, rule.field, "critical", f"Validation error: {e}", value)
                )
                continue
            if message:
                issues.append(ValidationIssue(index, rule.field, rule.severity, message, value))
        return issues

    def validate_all(self, records: list[dict[str, Any]], row_offset: int = 0) -> list[ValidationIssue]:
        logger.debug("Validating %d records (offset %d)", len(records), row_offset)
        issues: list[ValidationIssue] = []
        for i, record in enumerate(records):
            issues.extend(self.validate_record(record, row_offset + i, records))
        return issues


def validation_summary(issues: list[ValidationIssue]) -> ValidationSummary:
    severities = Counter(i.severity for i in issues)
    return ValidationSummary(
        total=len(issues),
        critical=severities["critical"],
        warning=severities["warning"],
        suggestion=severities["suggestion"],
        by_field=dict(Counter(i.column_name for i in issues)),
        unique_rows=len({i.row_index for i in issues}),
    )


def can_import(issues: list[ValidationIssue]) -> bool:
    return not any(i.severity == "critical" for i in issues)
