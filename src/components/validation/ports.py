from typing import Protocol


class MasterDataSourcePort(Protocol):
    def names(self, table: str) -> list[str]: ...
    def category_ranges(self) -> list[tuple[str, str]]: ...
    def range_campaigns(self) -> list[tuple[str, str]]: ...
    def country_sub_regions(self) -> list[tuple[str, str]]: ...
    def media_sub_types(self) -> list[tuple[str, str]]: ...
