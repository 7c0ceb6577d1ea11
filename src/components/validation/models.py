"""
Validation component input/output models.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

from src.domain.entities import Severity


@dataclass(frozen=True)
class ValidationIssue:
    """One problem found in an uploaded row."""

    row_index: int
    column_name: str
    severity: Severity
    message: str
    current_value: Any = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ValidationIssue:
        return cls(
            row_index=int(data["row_index"]),
            column_name=str(data["column_name"]),
            severity=data["severity"],
            message=str(data["message"]),
            current_value=data.get("current_value"),
        )


@dataclass(frozen=True)
class ValidationSummary:
    total: int
    critical: int
    warning: int
    suggestion: int
    by_field: dict[str, int]
    unique_rows: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ValidateInput:
    records: list[dict[str, Any]]
    master_data: dict[str, Any]
    auto_create: bool = False
    financial_cycle: str | None = None
    row_offset: int = 0


@dataclass(frozen=True)
class ValidateOutput:
    issues: list[ValidationIssue]
    summary: ValidationSummary
    can_import: bool
    success: bool = True
    error: str | None = None


@dataclass(frozen=True)
class FieldMappingSuggestion:
    header: str
    suggestions: list[str] = field(default_factory=list)
    match_type: str = "none"  # exact | variation | similar | none


@dataclass(frozen=True)
class ImportReadiness:
    is_valid: bool
    errors: list[str]
    warnings: list[str]
    record_count: int
    invalid_records: int
