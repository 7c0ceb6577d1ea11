"""
Importer component - Data models.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import asdict, dataclass, field
from typing import Any

from .ports import (
    BusinessUnitRepoPort,
    CampaignRepoPort,
    CategoryRepoPort,
    CountryRepoPort,
    GamePlanRepoPort,
    MediaRepoPort,
    RangeRepoPort,
    RegionRepoPort,
)


@dataclass(frozen=True)
class ImportProgress:
    current: int
    total: int
    stage: str

    @property
    def percentage(self) -> int:
        if self.total <= 0:
            return 0
        return round(self.current * 100 / self.total)

    def to_dict(self) -> dict[str, Any]:
        return {
            "current": self.current,
            "total": self.total,
            "percentage": self.percentage,
            "stage": self.stage,
        }


ProgressCallback = Callable[[ImportProgress], None]


@dataclass
class ImportRepos:
    """Repositories the game plan importer writes through."""

    regions: RegionRepoPort
    countries: CountryRepoPort
    business_units: BusinessUnitRepoPort
    categories: CategoryRepoPort
    ranges: RangeRepoPort
    campaigns: CampaignRepoPort
    media: MediaRepoPort
    game_plans: GamePlanRepoPort


@dataclass(frozen=True)
class ImportInput:
    records: list[dict[str, Any]]
    last_update_id: int
    selected_country: str | None = None
    auto_create: bool = False
    session_id: str | None = None


@dataclass(frozen=True)
class ImportOutput:
    success: bool
    created: int = 0
    updated: int = 0
    deleted: int = 0
    failed: int = 0
    total: int = 0
    auto_created: dict[str, list[str]] = field(default_factory=dict)
    row_errors: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
