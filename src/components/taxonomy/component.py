"""
Taxonomy component - admin maintenance of the organisational, product and
media hierarchies and the financial cycles.

Each run_* function validates references and uniqueness, then writes
through its repository. Deletes are refused while anything still points at
the row.
"""

from __future__ import annotations

from src.domain.entities import (
    BusinessUnit,
    Campaign,
    Category,
    Country,
    LastUpdate,
    MediaSubType,
    Range,
    Region,
    SubRegion,
)

from .models import (
    CampaignInput,
    CategoryInput,
    CountryInput,
    MediaSubTypeInput,
    RangeInput,
    TaxonomyOutput,
)
from .ports import (
    BusinessUnitRepoPort,
    CampaignRepoPort,
    CategoryRepoPort,
    CountryRepoPort,
    LastUpdateRepoPort,
    MediaRepoPort,
    RangeRepoPort,
    RegionRepoPort,
)


def _name(value: str | None) -> str:
    return (value or "").strip()


def _same(item_id: int | None, other_id: int | None) -> bool:
    return item_id is not None and item_id == other_id


# --- Countries ---


def _check_country_refs(inp: CountryInput, regions: RegionRepoPort) -> str | None:
    if inp.region_id is not None and regions.get_region(inp.region_id) is None:
        return "Invalid region ID"
    if inp.sub_region_id is not None and regions.get_sub_region(inp.sub_region_id) is None:
        return "Invalid sub-region ID"
    if inp.cluster_id is not None and regions.get_cluster(inp.cluster_id) is None:
        return "Invalid cluster ID"
    return None


def run_save_country(
    inp: CountryInput,
    countries: CountryRepoPort,
    regions: RegionRepoPort,
    country_id: int | None = None,
) -> TaxonomyOutput:
    """Create a country, or update it when ``country_id`` is given."""
    name = _name(inp.name)
    if not name:
        return TaxonomyOutput.fail("Country name is required")

    existing = None
    if country_id is not None:
        existing = countries.get_by_id(country_id)
        if existing is None:
            return TaxonomyOutput.fail("Country not found", "not_found")

    error = _check_country_refs(inp, regions)
    if error:
        return TaxonomyOutput.fail(error)

    duplicate = countries.get_by_name(name)
    if duplicate and not _same(country_id, duplicate.id):
        return TaxonomyOutput.fail("A country with this name already exists", "conflict")

    country = existing or Country(name=name)
    country.name = name
    country.region_id = inp.region_id
    country.sub_region_id = inp.sub_region_id
    country.cluster_id = inp.cluster_id
    return TaxonomyOutput.ok(countries.save(country))


def run_delete_country(country_id: int, countries: CountryRepoPort) -> TaxonomyOutput:
    country = countries.get_by_id(country_id)
    if country is None:
        return TaxonomyOutput.fail("Country not found", "not_found")
    in_use = countries.count_game_plans(country_id)
    if in_use:
        return TaxonomyOutput.fail(
            f"Cannot delete country. It is being used by {in_use} game plan(s).", "conflict"
        )
    countries.delete(country_id)
    return TaxonomyOutput.ok(country)


# --- Regions, sub-regions, business units ---


def run_create_region(name: str, regions: RegionRepoPort) -> TaxonomyOutput:
    name = _name(name)
    if not name:
        return TaxonomyOutput.fail("Region name is required")
    if regions.get_region_by_name(name):
        return TaxonomyOutput.fail("A region with this name already exists", "conflict")
    return TaxonomyOutput.ok(regions.save_region(Region(name=name)))


def run_create_sub_region(
    name: str, region_id: int | None, regions: RegionRepoPort
) -> TaxonomyOutput:
    name = _name(name)
    if not name:
        return TaxonomyOutput.fail("Sub-region name is required")
    if region_id is not None and regions.get_region(region_id) is None:
        return TaxonomyOutput.fail("Invalid region ID")
    if regions.get_sub_region_by_name(name):
        return TaxonomyOutput.fail("A sub-region with this name already exists", "conflict")
    return TaxonomyOutput.ok(regions.save_sub_region(SubRegion(name=name, region_id=region_id)))


def run_create_business_unit(name: str, business_units: BusinessUnitRepoPort) -> TaxonomyOutput:
    name = _name(name)
    if not name:
        return TaxonomyOutput.fail("Business unit name is required")
    if business_units.get_by_name(name):
        return TaxonomyOutput.fail("A business unit with this name already exists", "conflict")
    return TaxonomyOutput.ok(business_units.save(BusinessUnit(name=name)))


# --- Media sub types ---


def run_save_media_sub_type(
    inp: MediaSubTypeInput, media: MediaRepoPort, sub_type_id: int | None = None
) -> TaxonomyOutput:
    name = _name(inp.name)
    if not name:
        return TaxonomyOutput.fail("Media subtype name is required")
    if inp.media_type_id is None or media.get_media_type(inp.media_type_id) is None:
        return TaxonomyOutput.fail("Invalid media type ID")

    existing = None
    if sub_type_id is not None:
        existing = media.get_sub_type(sub_type_id)
        if existing is None:
            return TaxonomyOutput.fail("Media subtype not found", "not_found")

    duplicate = media.find_sub_type(name, inp.media_type_id)
    if duplicate and not _same(sub_type_id, duplicate.id):
        return TaxonomyOutput.fail(
            "A media subtype with this name already exists for this media type", "conflict"
        )

    sub_type = existing or MediaSubType(name=name)
    sub_type.name = name
    sub_type.media_type_id = inp.media_type_id
    return TaxonomyOutput.ok(media.save_sub_type(sub_type))


def run_delete_media_sub_type(sub_type_id: int, media: MediaRepoPort) -> TaxonomyOutput:
    sub_type = media.get_sub_type(sub_type_id)
    if sub_type is None:
        return TaxonomyOutput.fail("Media subtype not found", "not_found")
    in_use = media.count_sub_type_game_plans(sub_type_id)
    if in_use:
        return TaxonomyOutput.fail(
            f"Cannot delete media subtype. It is being used by {in_use} game plan(s).", "conflict"
        )
    media.delete_sub_type(sub_type_id)
    return TaxonomyOutput.ok(sub_type)


# --- Categories ---


def run_create_category(
    inp: CategoryInput, categories: CategoryRepoPort, business_units: BusinessUnitRepoPort
) -> TaxonomyOutput:
    name = _name(inp.name)
    if not name or inp.business_unit_id is None:
        return TaxonomyOutput.fail("Name and businessUnitId are required")
    if business_units.get_by_id(inp.business_unit_id) is None:
        return TaxonomyOutput.fail("Invalid business unit ID")
    if categories.find_in_business_unit(name, inp.business_unit_id):
        return TaxonomyOutput.fail(
            "A category with this name already exists in this business unit", "conflict"
        )

    category = categories.save(Category(name=name))
    assert category.id is not None
    business_units.link_category(inp.business_unit_id, category.id)
    return TaxonomyOutput.ok(category)


def run_rename_category(
    category_id: int, name: str, categories: CategoryRepoPort
) -> TaxonomyOutput:
    name = _name(name)
    if not name:
        return TaxonomyOutput.fail("Category name is required")
    category = categories.get_by_id(category_id)
    if category is None:
        return TaxonomyOutput.fail("Category not found", "not_found")
    category.name = name
    return TaxonomyOutput.ok(categories.save(category))


def run_delete_category(category_id: int, categories: CategoryRepoPort) -> TaxonomyOutput:
    category = categories.get_by_id(category_id)
    if category is None:
        return TaxonomyOutput.fail("Category not found", "not_found")
    ranges = categories.count_ranges(category_id)
    if ranges:
        return TaxonomyOutput.fail(
            f"Cannot delete category. It has {ranges} associated range(s).", "conflict"
        )
    plans = categories.count_game_plans(category_id)
    if plans:
        return TaxonomyOutput.fail(
            f"Cannot delete category. It is being used by {plans} game plan(s).", "conflict"
        )
    categories.delete(category_id)
    return TaxonomyOutput.ok(category)


# --- Ranges ---


def run_save_range(
    inp: RangeInput,
    ranges: RangeRepoPort,
    categories: CategoryRepoPort,
    range_id: int | None = None,
) -> TaxonomyOutput:
    """Create or update a range; the category links are replaced wholesale."""
    name = _name(inp.name)
    if not name:
        return TaxonomyOutput.fail("Range name is required")
    missing = [cid for cid in inp.category_ids if categories.get_by_id(cid) is None]
    if missing:
        return TaxonomyOutput.fail(f"Invalid category ID(s): {', '.join(map(str, missing))}")

    existing = None
    if range_id is not None:
        existing = ranges.get_by_id(range_id)
        if existing is None:
            return TaxonomyOutput.fail("Range not found", "not_found")

    duplicate = ranges.get_by_name(name)
    if duplicate and not _same(range_id, duplicate.id):
        return TaxonomyOutput.fail("A range with this name already exists", "conflict")

    item = existing or Range(name=name)
    item.name = name
    saved = ranges.save(item)
    assert saved.id is not None
    ranges.set_categories(saved.id, inp.category_ids)
    return TaxonomyOutput.ok(saved)


def run_delete_range(range_id: int, ranges: RangeRepoPort) -> TaxonomyOutput:
    item = ranges.get_by_id(range_id)
    if item is None:
        return TaxonomyOutput.fail("Range not found", "not_found")
    campaigns = ranges.count_campaigns(range_id)
    if campaigns:
        return TaxonomyOutput.fail(
            f"Cannot delete range. It has {campaigns} associated campaign(s).", "conflict"
        )
    ranges.delete(range_id)
    return TaxonomyOutput.ok(item)


# --- Campaigns ---


def run_save_campaign(
    inp: CampaignInput,
    campaigns: CampaignRepoPort,
    ranges: RangeRepoPort,
    campaign_id: int | None = None,
) -> TaxonomyOutput:
    name = _name(inp.name)
    if not name:
        return TaxonomyOutput.fail("Campaign name is required")
    if inp.range_id is not None and ranges.get_by_id(inp.range_id) is None:
        return TaxonomyOutput.fail("Invalid range ID")

    existing = None
    if campaign_id is not None:
        existing = campaigns.get_by_id(campaign_id)
        if existing is None:
            return TaxonomyOutput.fail("Campaign not found", "not_found")

    duplicate = campaigns.get_by_name(name)
    if duplicate and not _same(campaign_id, duplicate.id):
        return TaxonomyOutput.fail("A campaign with this name already exists", "conflict")

    campaign = existing or Campaign(name=name)
    campaign.name = name
    campaign.range_id = inp.range_id
    return TaxonomyOutput.ok(campaigns.save(campaign))


def run_delete_campaign(campaign_id: int, campaigns: CampaignRepoPort) -> TaxonomyOutput:
    campaign = campaigns.get_by_id(campaign_id)
    if campaign is None:
        return TaxonomyOutput.fail("Campaign not found", "not_found")
    plans = campaigns.count_game_plans(campaign_id)
    if plans:
        return TaxonomyOutput.fail(
            f"Cannot delete campaign. It is being used by {plans} game plan(s).", "conflict"
        )
    campaigns.delete(campaign_id)
    return TaxonomyOutput.ok(campaign)


# --- Financial cycles ---


def run_save_financial_cycle(
    name: str, last_updates: LastUpdateRepoPort, cycle_id: int | None = None
) -> TaxonomyOutput:
    name = _name(name)
    if not name:
        return TaxonomyOutput.fail("Financial cycle name is required")

    existing = None
    if cycle_id is not None:
        existing = last_updates.get_by_id(cycle_id)
        if existing is None:
            return TaxonomyOutput.fail("Financial cycle not found", "not_found")

    duplicate = last_updates.get_by_name(name)
    if duplicate and not _same(cycle_id, duplicate.id):
        return TaxonomyOutput.fail("A financial cycle with this name already exists", "conflict")

    cycle = existing or LastUpdate(name=name)
    cycle.name = name
    return TaxonomyOutput.ok(last_updates.save(cycle))


def run_delete_financial_cycle(cycle_id: int, last_updates: LastUpdateRepoPort) -> TaxonomyOutput:
    cycle = last_updates.get_by_id(cycle_id)
    if cycle is None:
        return TaxonomyOutput.fail("Financial cycle not found", "not_found")
    plans = last_updates.count_game_plans(cycle_id)
    if plans:
        return TaxonomyOutput.fail(
            f"Cannot delete financial cycle. It is being used by {plans} game plan(s).", "conflict"
        )
    last_updates.delete(cycle_id)
    return TaxonomyOutput.ok(cycle)
