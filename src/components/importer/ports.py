"""
Importer component - Port interfaces.

Only the repository methods the importer calls are listed.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.entities import (
    BusinessUnit,
    Campaign,
    Category,
    Country,
    GamePlan,
    MediaSubType,
    MediaType,
    PMType,
    Range,
    Region,
    SubRegion,
)


class RegionRepoPort(Protocol):
    def get_region_by_name(self, name: str) -> Region | None: ...
    def save_region(self, region: Region) -> Region: ...
    def get_sub_region_by_name(self, name: str) -> SubRegion | None: ...
    def save_sub_region(self, sub_region: SubRegion) -> SubRegion: ...


class CountryRepoPort(Protocol):
    def get_by_name(self, name: str) -> Country | None: ...
    def save(self, country: Country) -> Country: ...


class BusinessUnitRepoPort(Protocol):
    def get_by_name(self, name: str) -> BusinessUnit | None: ...
    def save(self, bu: BusinessUnit) -> BusinessUnit: ...
    def link_category(self, bu_id: int, category_id: int) -> None: ...


class CategoryRepoPort(Protocol):
    def get_by_name(self, name: str) -> Category | None: ...
    def find_in_business_unit(self, name: str, bu_id: int) -> Category | None: ...
    def save(self, category: Category) -> Category: ...


class RangeRepoPort(Protocol):
    def get_by_name(self, name: str) -> Range | None: ...
    def save(self, item: Range) -> Range: ...
    def category_ids(self, range_id: int) -> list[int]: ...
    def add_category(self, range_id: int, category_id: int) -> None: ...


class CampaignRepoPort(Protocol):
    def get_by_name(self, name: str) -> Campaign | None: ...
    def save(self, campaign: Campaign) -> Campaign: ...


class MediaRepoPort(Protocol):
    def get_media_type_by_name(self, name: str) -> MediaType | None: ...
    def save_media_type(self, media_type: MediaType) -> MediaType: ...
    def find_sub_type(self, name: str, media_type_id: int) -> MediaSubType | None: ...
    def save_sub_type(self, sub_type: MediaSubType) -> MediaSubType: ...
    def get_pm_type_by_name(self, name: str) -> PMType | None: ...
    def save_pm_type(self, pm_type: PMType) -> PMType: ...


class GamePlanRepoPort(Protocol):
    def get_by_id(self, plan_id: int) -> GamePlan | None: ...
    def save(self, plan: GamePlan) -> GamePlan: ...

    def find_duplicate(
        self,
        campaign_id: int,
        media_sub_type_id: int,
        start_date: str,
        end_date: str,
        last_update_id: int | None,
        country_id: int | None,
    ) -> GamePlan | None: ...

    def delete_for_countries(self, country_ids: list[int], last_update_id: int) -> int: ...
