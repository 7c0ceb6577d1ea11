"""
Taxonomy component - Input/Output models.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

TaxonomyErrorCode = Literal["invalid", "not_found", "conflict"]


@dataclass(frozen=True)
class CountryInput:
    name: str
    region_id: int | None = None
    sub_region_id: int | None = None
    cluster_id: int | None = None


@dataclass(frozen=True)
class MediaSubTypeInput:
    name: str
    media_type_id: int | None


@dataclass(frozen=True)
class CategoryInput:
    name: str
    business_unit_id: int | None


@dataclass(frozen=True)
class RangeInput:
    name: str
    category_ids: list[int]


@dataclass(frozen=True)
class CampaignInput:
    name: str
    range_id: int | None = None


@dataclass(frozen=True)
class TaxonomyOutput:
    """Result of a taxonomy write; ``item`` is the saved entity."""

    success: bool
    item: Any = None
    error: str | None = None
    error_code: TaxonomyErrorCode | None = None

    @classmethod
    def ok(cls, item: Any = None) -> TaxonomyOutput:
        return cls(success=True, item=item)

    @classmethod
    def fail(cls, error: str, code: TaxonomyErrorCode = "invalid") -> TaxonomyOutput:
        return cls(success=False, error=error, error_code=code)
