"""
Share of voice validation and grid normalisation.

An upload holds one row per (category, company) for a single country and
business unit. The business unit's own brand must appear in every category
so its share can be computed against the competitors listed beside it.
"""

from __future__ import annotations

import re
from collections import defaultdict
from typing import Any

from src.components.validation import ValidationIssue
from src.core.services.values import clean_text, is_blank, parse_number
from src.domain.entities import ShareOfVoice

from .models import SovGridRow, SovMediaType

COMPANY_PATTERNS = (
    re.compile(r"^nivea$", re.IGNORECASE),
    re.compile(r"^derma$", re.IGNORECASE),
    re.compile(r"^competitor\s*[1-5]$", re.IGNORECASE),
)

NUMERIC_FIELDS: dict[str, tuple[str, str]] = {
    "tv": ("Total TV Investment", "Total TV TRPs"),
    "digital": ("Total Digital Spend", "Total Digital Impressions"),
}


def is_valid_company_format(company: Any) -> bool:
    text = clean_text(company)
    return any(p.match(text) for p in COMPANY_PATTERNS)


def _key(value: Any) -> str:
    return clean_text(value).lower()


class ShareOfVoiceValidator:
    def __init__(self, business_unit: str, valid_categories: list[str], media_type: SovMediaType = "tv"):
        self.business_unit = business_unit
        self.valid_categories = valid_categories
        self.media_type = media_type
        self._valid = {c.lower() for c in valid_categories}

    def _issue(self, row: int, column: str, severity: str, message: str, value: Any) -> ValidationIssue:
        return ValidationIssue(
            row_index=row,
            column_name=column,
            severity=severity,  # type: ignore[arg-type]
            message=message,
            current_value=value,
        )

    def validate_record(
        self, record: dict[str, Any], row: int, records: list[dict[str, Any]]
    ) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        category = record.get("Category")
        company = record.get("Company")

        if is_blank(category):
            issues.append(
                self._issue(row, "Category", "critical", "Category is required and cannot be empty", category)
            )
        elif _key(category) not in self._valid:
            issues.append(
                self._issue(
                    row,
                    "Category",
                    "critical",
                    f"Category must be valid for {self.business_unit} business unit. "
                    f"Valid categories: {', '.join(self.valid_categories)}",
                    category,
                )
            )

        if is_blank(company):
            issues.append(
                self._issue(row, "Company", "critical", "Company is required and cannot be empty", company)
            )
        elif not is_valid_company_format(company):
            issues.append(
                self._issue(
                    row,
                    "Company",
                    "suggestion",
                    'Company name format suggestion: "Nivea", "Derma" or "Competitor 1-5". '
                    "Other competitor names are allowed.",
                    company,
                )
            )

        for field in NUMERIC_FIELDS[self.media_type]:
            value = record.get(field)
            if is_blank(value):
                issues.append(
                    self._issue(row, field, "critical", f"{field} is required and cannot be empty", value)
                )
            elif parse_number(value) is None:
                issues.append(
                    self._issue(row, field, "warning", f"{field} should be a valid number if provided", value)
                )

        if not is_blank(category) and not is_blank(company):
            duplicates = [
                i + 1
                for i, other in enumerate(records)
                if i != row
                and _key(other.get("Category")) == _key(category)
                and _key(other.get("Company")) == _key(company)
            ]
            if duplicates:
                issues.append(
                    self._issue(
                        row,
                        "Category",
                        "critical",
                        "Duplicate combination: same Category and Company combination already exists "
                        f"in this upload. Found duplicates at rows: {', '.join(map(str, duplicates))}",
                        f"{clean_text(category)} + {clean_text(company)}",
                    )
                )

        if not is_blank(category) and not self._brand_present(category, records):
            issues.append(
                self._issue(
                    row,
                    "Category",
                    "critical",
                    f"Each category must have a {self.business_unit} entry. "
                    f"Missing {self.business_unit} entry for this category.",
                    category,
                )
            )
        return issues

    def _brand_present(self, category: Any, records: list[dict[str, Any]]) -> bool:
        brand = self.business_unit.lower()
        return any(
            _key(r.get("Category")) == _key(category) and _key(r.get("Company")) == brand
            for r in records
        )

    def validate_all(self, records: list[dict[str, Any]]) -> list[ValidationIssue]:
        issues: list[ValidationIssue] = []
        for i, record in enumerate(records):
            issues.extend(self.validate_record(record, i, records))
        return issues


def rows_from_records(records: list[dict[str, Any]]) -> list[SovGridRow]:
    """Convert staged sheet rows into grid rows."""
    return [
        SovGridRow(
            category=clean_text(r.get("Category")),
            company=clean_text(r.get("Company")),
            total_tv_investment=parse_number(r.get("Total TV Investment")),
            total_tv_trps=parse_number(r.get("Total TV TRPs")),
            total_digital_spend=parse_number(r.get("Total Digital Spend")),
            total_digital_impressions=parse_number(r.get("Total Digital Impressions")),
        )
        for r in records
    ]


def group_by_category(rows: list[SovGridRow]) -> tuple[dict[str, list[SovGridRow]], int]:
    """
    Group rows by category in first-seen order.

    A company repeated within a category keeps only its first row; the
    number of dropped rows is returned alongside the groups.
    """
    groups: dict[str, list[SovGridRow]] = defaultdict(list)
    seen: dict[str, set[str]] = defaultdict(set)
    dropped = 0
    for row in rows:
        category = row.category.strip()
        company = row.company.strip()
        if company in seen[category]:
            dropped += 1
            continue
        seen[category].add(company)
        groups[category].append(row)
    return dict(groups), dropped


def build_entities(
    groups: dict[str, list[SovGridRow]],
    country_id: int,
    business_unit_id: int,
    media_type: SovMediaType,
    uploaded_by: str,
    upload_session: str,
) -> list[ShareOfVoice]:
    entities: list[ShareOfVoice] = []
    for category, rows in groups.items():
        for position, row in enumerate(rows):
            tv = media_type == "tv"
            entities.append(
                ShareOfVoice(
                    country_id=country_id,
                    business_unit_id=business_unit_id,
                    category=category,
                    company=row.company.strip(),
                    position=position,
                    total_tv_investment=row.total_tv_investment if tv else None,
                    total_tv_trps=row.total_tv_trps if tv else None,
                    total_digital_spend=None if tv else row.total_digital_spend,
                    total_digital_impressions=None if tv else row.total_digital_impressions,
                    uploaded_by=uploaded_by,
                    upload_session=upload_session,
                )
            )
    return entities
