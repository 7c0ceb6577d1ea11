import pytest

from src.adapters.sqlite.repos import (
    SQLiteBusinessUnitRepo,
    SQLiteCampaignRepo,
    SQLiteCategoryRepo,
    SQLiteCountryRepo,
    SQLiteGamePlanRepo,
    SQLiteLastUpdateRepo,
    SQLiteMediaRepo,
    SQLiteRangeRepo,
    SQLiteRegionRepo,
)
from src.components.taxonomy import (
    CampaignInput,
    CategoryInput,
    CountryInput,
    MediaSubTypeInput,
    RangeInput,
    run_create_business_unit,
    run_create_category,
    run_create_region,
    run_create_sub_region,
    run_delete_campaign,
    run_delete_category,
    run_delete_country,
    run_delete_financial_cycle,
    run_delete_media_sub_type,
    run_delete_range,
    run_rename_category,
    run_save_campaign,
    run_save_country,
    run_save_financial_cycle,
    run_save_media_sub_type,
    run_save_range,
)
from src.domain.entities import GamePlan


@pytest.fixture
def repos(seeded_db):
    return {
        "regions": SQLiteRegionRepo(seeded_db),
        "countries": SQLiteCountryRepo(seeded_db),
        "business_units": SQLiteBusinessUnitRepo(seeded_db),
        "categories": SQLiteCategoryRepo(seeded_db),
        "ranges": SQLiteRangeRepo(seeded_db),
        "campaigns": SQLiteCampaignRepo(seeded_db),
        "media": SQLiteMediaRepo(seeded_db),
        "last_updates": SQLiteLastUpdateRepo(seeded_db),
        "game_plans": SQLiteGamePlanRepo(seeded_db),
    }


def add_plan(repos, **overrides):
    values = {
        "campaign_id": repos["campaigns"].get_by_name("Cellular Epigenetics").id,
        "media_sub_type_id": repos["media"].get_sub_type_by_name("Meta").id,
        "country_id": repos["countries"].get_by_name("Germany").id,
        "category_id": repos["categories"].get_by_name("Face Care").id,
        "last_update_id": repos["last_updates"].get_by_name("ABP 2025").id,
        "start_date": "2025-01-06",
        "end_date": "2025-03-30",
    }
    values.update(overrides)
    return repos["game_plans"].save(GamePlan(**values))


def test_create_and_rename_country(repos):
    region = repos["regions"].get_region_by_name("EMEA")
    out = run_save_country(
        CountryInput(" Spain ", region_id=region.id), repos["countries"], repos["regions"]
    )

    assert out.success is True
    assert out.item.name == "Spain"

    renamed = run_save_country(
        CountryInput("Espana", region_id=region.id), repos["countries"], repos["regions"], out.item.id
    )
    assert renamed.item.name == "Espana"
    assert repos["countries"].get_by_name("Spain") is None


def test_country_validation(repos):
    countries, regions = repos["countries"], repos["regions"]

    assert run_save_country(CountryInput(""), countries, regions).error == "Country name is required"
    assert run_save_country(CountryInput("X", region_id=999), countries, regions).error == (
        "Invalid region ID"
    )
    duplicate = run_save_country(CountryInput("germany"), countries, regions)
    assert duplicate.error_code == "conflict"
    assert run_save_country(CountryInput("X"), countries, regions, 999).error_code == "not_found"


def test_country_delete_blocked_by_plans(repos):
    germany = repos["countries"].get_by_name("Germany")
    add_plan(repos)

    out = run_delete_country(germany.id, repos["countries"])
    assert out.error_code == "conflict"
    assert out.error == "Cannot delete country. It is being used by 1 game plan(s)."

    mexico = repos["countries"].get_by_name("Mexico")
    assert run_delete_country(mexico.id, repos["countries"]).success is True
    assert repos["countries"].get_by_id(mexico.id) is None


def test_regions_and_business_units(repos):
    region = run_create_region("APAC", repos["regions"])
    assert region.success is True
    assert run_create_region("apac", repos["regions"]).error_code == "conflict"

    sub_region = run_create_sub_region("South East Asia", region.item.id, repos["regions"])
    assert sub_region.item.region_id == region.item.id
    assert run_create_sub_region("Pacific", 999, repos["regions"]).error == "Invalid region ID"

    assert run_create_business_unit("Nivea", repos["business_units"]).error_code == "conflict"
    assert run_create_business_unit("Hansaplast", repos["business_units"]).success is True


def test_media_sub_types(repos):
    media = repos["media"]
    digital = media.get_media_type_by_name("Digital")

    out = run_save_media_sub_type(MediaSubTypeInput("Snapchat", digital.id), media)
    assert out.success is True
    assert run_save_media_sub_type(MediaSubTypeInput("meta", digital.id), media).error_code == (
        "conflict"
    )
    assert run_save_media_sub_type(MediaSubTypeInput("Print", 999), media).error == (
        "Invalid media type ID"
    )

    assert run_delete_media_sub_type(out.item.id, media).success is True
    add_plan(repos)
    meta = media.get_sub_type_by_name("Meta")
    assert run_delete_media_sub_type(meta.id, media).error_code == "conflict"


def test_categories(repos):
    categories, business_units = repos["categories"], repos["business_units"]
    derma = business_units.get_by_name("Derma")

    out = run_create_category(CategoryInput("Body", derma.id), categories, business_units)
    assert out.success is True
    assert "Body" in business_units.category_names(derma.id)
    assert run_create_category(
        CategoryInput("body", derma.id), categories, business_units
    ).error_code == "conflict"
    assert run_create_category(CategoryInput("Lips", None), categories, business_units).error == (
        "Name and businessUnitId are required"
    )

    renamed = run_rename_category(out.item.id, "Body Care", categories)
    assert renamed.item.name == "Body Care"

    face_care = categories.get_by_name("Face Care")
    blocked = run_delete_category(face_care.id, categories)
    assert blocked.error == "Cannot delete category. It has 2 associated range(s)."
    assert run_delete_category(out.item.id, categories).success is True


def test_ranges_replace_category_links(repos):
    ranges, categories = repos["ranges"], repos["categories"]
    deo = categories.get_by_name("Deo")
    sun = categories.get_by_name("Sun")

    out = run_save_range(RangeInput("Protect & Care", [deo.id]), ranges, categories)
    assert ranges.category_ids(out.item.id) == [deo.id]

    run_save_range(RangeInput("Protect & Care", [sun.id]), ranges, categories, out.item.id)
    assert ranges.category_ids(out.item.id) == [sun.id]

    assert run_save_range(RangeInput("X", [999]), ranges, categories).error == (
        "Invalid category ID(s): 999"
    )
    cellular = ranges.get_by_name("Cellular")
    assert run_delete_range(cellular.id, ranges).error_code == "conflict"
    assert run_delete_range(out.item.id, ranges).success is True


def test_campaigns(repos):
    campaigns, ranges = repos["campaigns"], repos["ranges"]
    luminous = ranges.get_by_name("Luminous")

    out = run_save_campaign(CampaignInput("Luminous Relaunch", luminous.id), campaigns, ranges)
    assert out.item.range_id == luminous.id
    assert run_save_campaign(CampaignInput("Luminous 630"), campaigns, ranges).error_code == (
        "conflict"
    )
    assert run_save_campaign(CampaignInput("X", 999), campaigns, ranges).error == "Invalid range ID"

    add_plan(repos)
    used = campaigns.get_by_name("Cellular Epigenetics")
    assert run_delete_campaign(used.id, campaigns).error_code == "conflict"
    assert run_delete_campaign(out.item.id, campaigns).success is True


def test_financial_cycles(repos):
    last_updates = repos["last_updates"]

    out = run_save_financial_cycle("ABP 2026", last_updates)
    assert out.success is True
    assert run_save_financial_cycle("abp 2025", last_updates).error_code == "conflict"

    renamed = run_save_financial_cycle("ABP 2026 Q2", last_updates, out.item.id)
    assert renamed.item.name == "ABP 2026 Q2"

    add_plan(repos)
    current = last_updates.get_by_name("ABP 2025")
    assert run_delete_financial_cycle(current.id, last_updates).error == (
        "Cannot delete financial cycle. It is being used by 1 game plan(s)."
    )
    assert run_delete_financial_cycle(out.item.id, last_updates).success is True
    assert run_delete_financial_cycle(out.item.id, last_updates).error_code == "not_found"
