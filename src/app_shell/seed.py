"""
Demo reference data: a small hierarchy, taxonomy and governance checklist so
a fresh install has something to upload against. Safe to run repeatedly.
"""

import logging
from typing import Any

from src.adapters.sqlite.governance_repos import SQLiteBrandRepo, SQLiteComplianceRuleRepo
from src.adapters.sqlite.repos import (
    SQLiteBusinessUnitRepo,
    SQLiteCampaignRepo,
    SQLiteCategoryRepo,
    SQLiteCountryRepo,
    SQLiteLastUpdateRepo,
    SQLiteMediaRepo,
    SQLiteRangeRepo,
    SQLiteRegionRepo,
)
from src.domain.entities import (
    Brand,
    BusinessUnit,
    Campaign,
    Category,
    Cluster,
    ComplianceRule,
    Country,
    LastUpdate,
    MediaSubType,
    Range,
    Region,
    SubRegion,
)

logger = logging.getLogger(__name__)

GEOGRAPHY: dict[str, dict[str, list[str]]] = {
    "EMEA": {"Western Europe": ["Germany", "France"], "Middle East": ["UAE"]},
    "Americas": {"Latin America": ["Brazil", "Mexico"]},
}

# business unit -> category -> range -> campaigns
TAXONOMY: dict[str, dict[str, dict[str, list[str]]]] = {
    "Nivea": {
        "Face Care": {"Cellular": ["Cellular Epigenetics"], "Luminous": ["Luminous 630"]},
        "Deo": {"Black & White": ["Invisible Fresh"]},
    },
    "Derma": {
        "Acne": {"DermoPure": ["DermoPure Launch"]},
        "Sun": {"Sun Protect": ["Summer Shield"]},
    },
}

MEDIA_SUB_TYPES: dict[str, list[str]] = {
    "Digital": ["Meta", "YouTube", "Programmatic", "TikTok"],
    "Traditional": ["Open TV", "Paid TV", "OOH", "Radio"],
}

BRANDS = ("Nivea", "Eucerin", "La Prairie")

COMPLIANCE_RULES = (
    ("Meta", "Vertical video assets", "Creative"),
    ("Meta", "Frequency cap applied", "Delivery"),
    ("Google DV360", "Viewability above 70%", "Quality"),
    ("Google DV360", "Brand safety list attached", "Brand Safety"),
)

FINANCIAL_CYCLES = ("ABP 2025",)


def seed_demo(db_path: str) -> dict[str, Any]:
    """Insert the demo data that is not already present. Returns counts of new rows."""
    created: dict[str, int] = {}

    def bump(key: str) -> None:
        created[key] = created.get(key, 0) + 1

    regions = SQLiteRegionRepo(db_path)
    countries = SQLiteCountryRepo(db_path)
    cluster = regions.list_clusters()[0] if regions.list_clusters() else None
    if cluster is None:
        cluster = regions.save_cluster(Cluster(name="Cluster 1"))
        bump("clusters")

    for region_name, sub_regions in GEOGRAPHY.items():
        region = regions.get_region_by_name(region_name)
        if region is None:
            region = regions.save_region(Region(name=region_name))
            bump("regions")
        for sub_name, country_names in sub_regions.items():
            sub_region = regions.get_sub_region_by_name(sub_name)
            if sub_region is None:
                sub_region = regions.save_sub_region(SubRegion(name=sub_name, region_id=region.id))
                bump("sub_regions")
            for country_name in country_names:
                if countries.get_by_name(country_name) is None:
                    countries.save(
                        Country(
                            name=country_name,
                            region_id=region.id,
                            sub_region_id=sub_region.id,
                            cluster_id=cluster.id,
                        )
                    )
                    bump("countries")

    business_units = SQLiteBusinessUnitRepo(db_path)
    categories = SQLiteCategoryRepo(db_path)
    ranges = SQLiteRangeRepo(db_path)
    campaigns = SQLiteCampaignRepo(db_path)
    for bu_name, bu_categories in TAXONOMY.items():
        bu = business_units.get_by_name(bu_name)
        if bu is None or bu.id is None:
            bu = business_units.save(BusinessUnit(name=bu_name))
            bump("business_units")
        for category_name, category_ranges in bu_categories.items():
            category = categories.find_in_business_unit(category_name, bu.id or 0)
            if category is None or category.id is None:
                category = categories.save(Category(name=category_name))
                bump("categories")
            business_units.link_category(bu.id or 0, category.id or 0)
            for range_name, campaign_names in category_ranges.items():
                item = ranges.get_by_name(range_name)
                if item is None or item.id is None:
                    item = ranges.save(Range(name=range_name, created_by="seed"))
                    bump("ranges")
                ranges.add_category(item.id or 0, category.id or 0)
                for campaign_name in campaign_names:
                    if campaigns.get_by_name(campaign_name) is None:
                        campaigns.save(
                            Campaign(name=campaign_name, range_id=item.id, created_by="seed")
                        )
                        bump("campaigns")

    media = SQLiteMediaRepo(db_path)
    for media_name, sub_types in MEDIA_SUB_TYPES.items():
        media_type = media.get_media_type_by_name(media_name)
        if media_type is None:
            continue
        for sub_name in sub_types:
            if media.get_sub_type_by_name(sub_name) is None:
                media.save_sub_type(MediaSubType(name=sub_name, media_type_id=media_type.id))
                bump("media_sub_types")

    last_updates = SQLiteLastUpdateRepo(db_path)
    for cycle in FINANCIAL_CYCLES:
        if last_updates.get_by_name(cycle) is None:
            last_updates.save(LastUpdate(name=cycle))
            bump("financial_cycles")

    brands = SQLiteBrandRepo(db_path)
    for brand in BRANDS:
        if brands.get_by_name(brand) is None:
            brands.save(Brand(name=brand))
            bump("brands")

    rules = SQLiteComplianceRuleRepo(db_path)
    existing = {(r.platform, r.title) for r in rules.list_all()}
    for platform, title, category_name in COMPLIANCE_RULES:
        if (platform, title) not in existing:
            rules.save(ComplianceRule(platform=platform, title=title, category=category_name))
            bump("compliance_rules")

    logger.info("Demo seed complete: %s", created or "nothing new")
    return created
