"""
Taxonomy component - admin CRUD rules for countries, taxonomies and
financial cycles.
"""

from .component import (
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
from .models import (
    CampaignInput,
    CategoryInput,
    CountryInput,
    MediaSubTypeInput,
    RangeInput,
    TaxonomyOutput,
)

__all__ = [
    "run_save_country",
    "run_delete_country",
    "run_create_region",
    "run_create_sub_region",
    "run_create_business_unit",
    "run_save_media_sub_type",
    "run_delete_media_sub_type",
    "run_create_category",
    "run_rename_category",
    "run_delete_category",
    "run_save_range",
    "run_delete_range",
    "run_save_campaign",
    "run_delete_campaign",
    "run_save_financial_cycle",
    "run_delete_financial_cycle",
    "CountryInput",
    "MediaSubTypeInput",
    "CategoryInput",
    "RangeInput",
    "CampaignInput",
    "TaxonomyOutput",
]
