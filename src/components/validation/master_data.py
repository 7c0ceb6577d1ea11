"""
Master data snapshot: the taxonomy values bulk uploads are validated against.

The snapshot is a plain JSON-compatible dict so it can be embedded in upload
sessions and served to clients unchanged.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import os
from collections.abc import Iterable
from typing import Any

from .ports import MasterDataSourcePort

logger = logging.getLogger(__name__)

LIST_KEYS = (
    "categories",
    "ranges",
    "campaigns",
    "countries",
    "subRegions",
    "mediaTypes",
    "mediaSubTypes",
    "pmTypes",
    "businessUnits",
)
MAP_KEYS = (
    "categoryToRanges",
    "rangeToCategories",
    "rangeToCampaigns",
    "campaignToRangeMap",
    "countryToSubRegionMap",
    "subRegionToCountriesMap",
    "mediaToSubtypes",
)


def empty_master_data() -> dict[str, Any]:
    data: dict[str, Any] = {key: [] for key in LIST_KEYS}
    data.update({key: {} for key in MAP_KEYS})
    return data


def _append_unique(mapping: dict[str, list[str]], key: str, value: str) -> None:
    values = mapping.setdefault(key, [])
    if value not in values:
        values.append(value)


def _link_pairs(data: dict[str, Any], pairs: Iterable[tuple[str, str]], forward: str, backward: str) -> None:
    for left, right in pairs:
        _append_unique(data[forward], left, right)
        _append_unique(data[backward], right, left)


def load_master_data(path: str) -> dict[str, Any] | None:
    """Read the snapshot file. Returns None when it does not exist."""
    if not os.path.exists(path):
        return None
    with open(path, encoding="utf-8") as f:
        data: dict[str, Any] = json.load(f)
    for key in (*LIST_KEYS, *MAP_KEYS):
        data.setdefault(key, [] if key in LIST_KEYS else {})
    return data


def save_master_data(path: str, data: dict[str, Any]) -> None:
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    tmp_path = f"{path}.tmp"
    with open(tmp_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    os.replace(tmp_path, path)
    logger.info("Saved master data snapshot to %s", path)


def build_master_data(source: MasterDataSourcePort) -> dict[str, Any]:
    """Build a fresh snapshot from the database."""
    data = empty_master_data()
    data["categories"] = source.names("categories")
    data["ranges"] = source.names("ranges")
    data["campaigns"] = source.names("campaigns")
    data["countries"] = source.names("countries")
    data["subRegions"] = source.names("sub_regions")
    data["mediaTypes"] = source.names("media_types")
    data["mediaSubTypes"] = source.names("media_sub_types")
    data["pmTypes"] = source.names("pm_types")
    data["businessUnits"] = source.names("business_units")

    _link_pairs(data, source.category_ranges(), "categoryToRanges", "rangeToCategories")

    for range_name, campaign in source.range_campaigns():
        _append_unique(data["rangeToCampaigns"], range_name, campaign)
        data["campaignToRangeMap"][campaign] = range_name

    for country, sub_region in source.country_sub_regions():
        data["countryToSubRegionMap"][country] = sub_region
        _append_unique(data["subRegionToCountriesMap"], sub_region, country)

    for media, sub_type in source.media_sub_types():
        _append_unique(data["mediaToSubtypes"], media, sub_type)

    logger.debug(
        "Built master data: %d categories, %d ranges, %d campaigns",
        len(data["categories"]),
        len(data["ranges"]),
        len(data["campaigns"]),
    )
    return data


def master_data_from_csv(text: str) -> dict[str, Any]:
    """
    Build category/range relationships from a two-column
    ``Categories,Range`` CSV export.
    """
    data = empty_master_data()
    reader = csv.DictReader(io.StringIO(text.lstrip("﻿")))
    for row in reader:
        category = (row.get("Categories") or "").strip()
        range_name = (row.get("Range") or "").strip()
        if not category or not range_name:
            continue
        _append_unique(data["categoryToRanges"], category, range_name)
        _append_unique(data["rangeToCategories"], range_name, category)

    data["categories"] = sorted(data["categoryToRanges"])
    data["ranges"] = sorted(data["rangeToCategories"])
    return data


def _lower_map(mapping: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {}
    for key, value in mapping.items():
        if isinstance(value, list):
            result[key.strip().lower()] = [_item_name(v) for v in value]
        else:
            result[key.strip().lower()] = value
    return result


def _item_name(item: Any) -> str:
    # mediaToSubtypes entries may be {"name": ...} objects in older snapshots
    if isinstance(item, dict):
        return str(item.get("name", ""))
    return str(item)


class MasterDataIndex:
    """Case-insensitive lookups over a master data snapshot."""

    def __init__(self, data: dict[str, Any] | None):
        self.data = data or empty_master_data()
        self._sets = {
            key: {_item_name(v).strip().lower() for v in self.data.get(key, []) or []}
            for key in LIST_KEYS
        }
        self._maps = {key: _lower_map(self.data.get(key, {}) or {}) for key in MAP_KEYS}

        # Relationship keys count as known values too
        self._sets["categories"] |= set(self._maps["categoryToRanges"])
        self._sets["ranges"] |= set(self._maps["rangeToCategories"]) | set(self._maps["rangeToCampaigns"])
        self._sets["campaigns"] |= set(self._maps["campaignToRangeMap"])

    @property
    def selected_country(self) -> str | None:
        value = self.data.get("selectedCountry")
        return str(value).strip() if value else None

    def has(self, key: str, value: Any) -> bool:
        return str(value or "").strip().lower() in self._sets.get(key, set())

    def known(self, key: str) -> bool:
        """Whether the snapshot carries any values for ``key``."""
        return bool(self._sets.get(key))

    def lookup(self, map_key: str, name: Any) -> Any:
        return self._maps[map_key].get(str(name or "").strip().lower())

    def related(self, map_key: str, name: Any) -> list[str]:
        value = self.lookup(map_key, name)
        if value is None:
            return []
        if isinstance(value, list):
            return value
        return [str(value)]
