"""
Taxonomy component - Port definitions.
"""

from __future__ import annotations

from typing import Protocol

from src.domain.entities import (
    BusinessUnit,
    Campaign,
    Category,
    Cluster,
    Country,
    LastUpdate,
    MediaSubType,
    MediaType,
    Range,
    Region,
    SubRegion,
)


class RegionRepoPort(Protocol):
    def get_region(self, region_id: int) -> Region | None: ...
    def get_region_by_name(self, name: str) -> Region | None: ...
    def save_region(self, region: Region) -> Region: ...
    def get_sub_region(self, sub_region_id: int) -> SubRegion | None: ...
    def get_sub_region_by_name(self, name: str) -> SubRegion | None: ...
    def save_sub_region(self, sub_region: SubRegion) -> SubRegion: ...
    def get_cluster(self, cluster_id: int) -> Cluster | None: ...


class CountryRepoPort(Protocol):
    def get_by_id(self, country_id: int) -> Country | None: ...
    def get_by_name(self, name: str) -> Country | None: ...
    def save(self, country: Country) -> Country: ...
    def delete(self, country_id: int) -> None: ...
    def count_game_plans(self, country_id: int) -> int: ...


class BusinessUnitRepoPort(Protocol):
    def get_by_id(self, bu_id: int) -> BusinessUnit | None: ...
    def get_by_name(self, name: str) -> BusinessUnit | None: ...
    def save(self, bu: BusinessUnit) -> BusinessUnit: ...
    def link_category(self, bu_id: int, category_id: int) -> None: ...


class CategoryRepoPort(Protocol):
    def get_by_id(self, category_id: int) -> Category | None: ...
    def find_in_business_unit(self, name: str, bu_id: int) -> Category | None: ...
    def save(self, category: Category) -> Category: ...
    def delete(self, category_id: int) -> None: ...
    def count_ranges(self, category_id: int) -> int: ...
    def count_game_plans(self, category_id: int) -> int: ...


class RangeRepoPort(Protocol):
    def get_by_id(self, range_id: int) -> Range | None: ...
    def get_by_name(self, name: str) -> Range | None: ...
    def save(self, item: Range) -> Range: ...
    def delete(self, range_id: int) -> None: ...
    def set_categories(self, range_id: int, category_ids: list[int]) -> None: ...
    def count_campaigns(self, range_id: int) -> int: ...


class CampaignRepoPort(Protocol):
    def get_by_id(self, campaign_id: int) -> Campaign | None: ...
    def get_by_name(self, name: str) -> Campaign | None: ...
    def save(self, campaign: Campaign) -> Campaign: ...
    def delete(self, campaign_id: int) -> None: ...
    def count_game_plans(self, campaign_id: int) -> int: ...


class MediaRepoPort(Protocol):
    def get_media_type(self, media_type_id: int) -> MediaType | None: ...
    def get_sub_type(self, sub_type_id: int) -> MediaSubType | None: ...
    def find_sub_type(self, name: str, media_type_id: int) -> MediaSubType | None: ...
    def save_sub_type(self, sub_type: MediaSubType) -> MediaSubType: ...
    def delete_sub_type(self, sub_type_id: int) -> None: ...
    def count_sub_type_game_plans(self, sub_type_id: int) -> int: ...


class LastUpdateRepoPort(Protocol):
    def get_by_id(self, last_update_id: int) -> LastUpdate | None: ...
    def get_by_name(self, name: str) -> LastUpdate | None: ...
    def save(self, item: LastUpdate) -> LastUpdate: ...
    def delete(self, last_update_id: int) -> None: ...
    def count_game_plans(self, last_update_id: int) -> int: ...
