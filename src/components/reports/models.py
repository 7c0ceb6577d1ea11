"""
Reports component - Input/Output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class MediaSufficiencyReportInput:
    country_ids: list[int] | None = None
    last_update_id: int | None = None


@dataclass(frozen=True)
class ReachReportInput:
    last_updates: list[str] = field(default_factory=list)
    country_ids: list[int] | None = None


@dataclass(frozen=True)
class AdminReportInput:
    country_ids: list[int] | None = None
    user_access: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ReportOutput:
    """A dashboard payload, already shaped for JSON."""

    data: dict[str, Any]
    success: bool = True
    error: str | None = None
