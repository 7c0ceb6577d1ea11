"""
Reach planning component - Data models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from src.components.validation import ValidationIssue, ValidationSummary

ColumnKind = Literal["text", "number", "percentage", "level"]


@dataclass(frozen=True)
class ReachColumn:
    """A sheet column and the media_sufficiency field it fills."""

    field: str
    headers: tuple[str, ...]
    kind: ColumnKind = "text"

    @property
    def label(self) -> str:
        return self.headers[0]


@dataclass(frozen=True)
class ReachValidateInput:
    records: list[dict[str, Any]]
    master_data: dict[str, Any] | None = None


@dataclass(frozen=True)
class ReachValidateOutput:
    issues: list[ValidationIssue]
    summary: ValidationSummary
    can_import: bool


@dataclass(frozen=True)
class ReachImportInput:
    records: list[dict[str, Any]]
    session_id: str
    uploaded_by: str = "system"


@dataclass(frozen=True)
class ReachImportOutput:
    success: bool
    total: int = 0
    imported: int = 0
    failed: int = 0
    row_errors: list[str] = field(default_factory=list)
    error: str | None = None
