"""
Share of voice component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from src.components.validation import ValidationIssue, ValidationSummary

SovMediaType = Literal["tv", "digital"]

MEDIA_TYPES: tuple[str, ...] = ("tv", "digital")


@dataclass(frozen=True)
class SovGridRow:
    """One company's figures within a category, as edited in the grid."""

    category: str
    company: str
    total_tv_investment: float | None = None
    total_tv_trps: float | None = None
    total_digital_spend: float | None = None
    total_digital_impressions: float | None = None


@dataclass(frozen=True)
class SovValidateInput:
    records: list[dict[str, Any]]
    business_unit: str
    valid_categories: list[str]
    media_type: SovMediaType = "tv"


@dataclass(frozen=True)
class SovValidateOutput:
    issues: list[ValidationIssue]
    summary: ValidationSummary
    can_import: bool


@dataclass(frozen=True)
class SovSaveInput:
    country_id: int
    business_unit_id: int
    media_type: SovMediaType
    rows: list[SovGridRow]
    uploaded_by: str = "admin"
    upload_session: str | None = None


@dataclass(frozen=True)
class SovSaveOutput:
    success: bool
    saved: int = 0
    total: int = 0
    duplicates_dropped: int = 0
    errors: list[str] = field(default_factory=list)
