"""
Admin routes for the product and media taxonomies and financial cycles.
"""

from typing import Any

from fastapi import APIRouter, Depends

from src.adapters.sqlite.repos import (
    SQLiteBusinessUnitRepo,
    SQLiteCampaignRepo,
    SQLiteCategoryRepo,
    SQLiteLastUpdateRepo,
    SQLiteMediaRepo,
    SQLiteRangeRepo,
)
from src.api.deps import (
    get_business_unit_repo,
    get_campaign_repo,
    get_category_repo,
    get_last_update_repo,
    get_media_repo,
    get_range_repo,
    require_admin,
)
from src.api.schemas import (
    CampaignRequest,
    CategoryCreateRequest,
    MediaSubTypeRequest,
    NameRequest,
    RangeRequest,
    camelize,
    raise_for_error,
    serialize,
)
from src.components.taxonomy import (
    CampaignInput,
    CategoryInput,
    MediaSubTypeInput,
    RangeInput,
    TaxonomyOutput,
    run_create_business_unit,
    run_create_category,
    run_delete_campaign,
    run_delete_category,
    run_delete_financial_cycle,
    run_delete_media_sub_type,
    run_delete_range,
    run_rename_category,
    run_save_campaign,
    run_save_financial_cycle,
    run_save_media_sub_type,
    run_save_range,
)

router = APIRouter(dependencies=[Depends(require_admin)])


def _unwrap(result: TaxonomyOutput) -> dict[str, Any]:
    if not result.success:
        raise_for_error(result.error, result.error_code)
    return serialize(result.item)


def _deleted(result: TaxonomyOutput, label: str) -> dict[str, Any]:
    _unwrap(result)
    return {"success": True, "message": f"{label} deleted successfully"}


# --- Business units ---


@router.get("/business-units")
def list_business_units(
    repo: SQLiteBusinessUnitRepo = Depends(get_business_unit_repo),
) -> dict[str, Any]:
    return {"businessUnits": [serialize(b) for b in repo.list_all()]}


@router.post("/business-units", status_code=201)
def create_business_unit(
    req: NameRequest, repo: SQLiteBusinessUnitRepo = Depends(get_business_unit_repo)
) -> dict[str, Any]:
    return {"businessUnit": _unwrap(run_create_business_unit(req.name, repo))}


# --- Media types / sub types / PM types ---


@router.get("/media-types")
def list_media_types(media: SQLiteMediaRepo = Depends(get_media_repo)) -> dict[str, Any]:
    return {"mediaTypes": [serialize(m) for m in media.list_media_types()]}


@router.get("/pm-types")
def list_pm_types(media: SQLiteMediaRepo = Depends(get_media_repo)) -> dict[str, Any]:
    return {"pmTypes": [serialize(p) for p in media.list_pm_types()]}


@router.get("/media-sub-types")
def list_media_sub_types(media: SQLiteMediaRepo = Depends(get_media_repo)) -> dict[str, Any]:
    return {"mediaSubTypes": [camelize(r) for r in media.list_sub_types()]}


@router.post("/media-sub-types", status_code=201)
def create_media_sub_type(
    req: MediaSubTypeRequest, media: SQLiteMediaRepo = Depends(get_media_repo)
) -> dict[str, Any]:
    inp = MediaSubTypeInput(req.name, req.media_type_id)
    return {"mediaSubType": _unwrap(run_save_media_sub_type(inp, media))}


@router.put("/media-sub-types/{sub_type_id}")
def update_media_sub_type(
    sub_type_id: int,
    req: MediaSubTypeRequest,
    media: SQLiteMediaRepo = Depends(get_media_repo),
) -> dict[str, Any]:
    inp = MediaSubTypeInput(req.name, req.media_type_id)
    return {"mediaSubType": _unwrap(run_save_media_sub_type(inp, media, sub_type_id))}


@router.delete("/media-sub-types/{sub_type_id}")
def delete_media_sub_type(
    sub_type_id: int, media: SQLiteMediaRepo = Depends(get_media_repo)
) -> dict[str, Any]:
    return _deleted(run_delete_media_sub_type(sub_type_id, media), "Media subtype")


# --- Categories ---


@router.get("/categories")
def list_categories(repo: SQLiteCategoryRepo = Depends(get_category_repo)) -> dict[str, Any]:
    """Business units, each with its categories and their ranges."""
    return {"businessUnits": repo.hierarchy()}


@router.post("/categories", status_code=201)
def create_category(
    req: CategoryCreateRequest,
    repo: SQLiteCategoryRepo = Depends(get_category_repo),
    business_units: SQLiteBusinessUnitRepo = Depends(get_business_unit_repo),
) -> dict[str, Any]:
    inp = CategoryInput(req.name, req.business_unit_id)
    return {"category": _unwrap(run_create_category(inp, repo, business_units))}


@router.put("/categories/{category_id}")
def rename_category(
    category_id: int, req: NameRequest, repo: SQLiteCategoryRepo = Depends(get_category_repo)
) -> dict[str, Any]:
    return {"category": _unwrap(run_rename_category(category_id, req.name, repo))}


@router.delete("/categories/{category_id}")
def delete_category(
    category_id: int, repo: SQLiteCategoryRepo = Depends(get_category_repo)
) -> dict[str, Any]:
    return _deleted(run_delete_category(category_id, repo), "Category")


# --- Ranges ---


@router.get("/ranges")
def list_ranges(repo: SQLiteRangeRepo = Depends(get_range_repo)) -> dict[str, Any]:
    return {"ranges": [camelize(r) for r in repo.list_with_details()]}


@router.post("/ranges", status_code=201)
def create_range(
    req: RangeRequest,
    repo: SQLiteRangeRepo = Depends(get_range_repo),
    categories: SQLiteCategoryRepo = Depends(get_category_repo),
) -> dict[str, Any]:
    inp = RangeInput(req.name, req.category_ids)
    return {"range": _unwrap(run_save_range(inp, repo, categories))}


@router.put("/ranges/{range_id}")
def update_range(
    range_id: int,
    req: RangeRequest,
    repo: SQLiteRangeRepo = Depends(get_range_repo),
    categories: SQLiteCategoryRepo = Depends(get_category_repo),
) -> dict[str, Any]:
    inp = RangeInput(req.name, req.category_ids)
    return {"range": _unwrap(run_save_range(inp, repo, categories, range_id))}


@router.delete("/ranges/{range_id}")
def delete_range(range_id: int, repo: SQLiteRangeRepo = Depends(get_range_repo)) -> dict[str, Any]:
    return _deleted(run_delete_range(range_id, repo), "Range")


# --- Campaigns ---


@router.get("/campaigns")
def list_campaigns(repo: SQLiteCampaignRepo = Depends(get_campaign_repo)) -> dict[str, Any]:
    return {"campaigns": [camelize(r) for r in repo.list_with_details()]}


@router.post("/campaigns", status_code=201)
def create_campaign(
    req: CampaignRequest,
    repo: SQLiteCampaignRepo = Depends(get_campaign_repo),
    ranges: SQLiteRangeRepo = Depends(get_range_repo),
) -> dict[str, Any]:
    inp = CampaignInput(req.name, req.range_id)
    return {"campaign": _unwrap(run_save_campaign(inp, repo, ranges))}


@router.put("/campaigns/{campaign_id}")
def update_campaign(
    campaign_id: int,
    req: CampaignRequest,
    repo: SQLiteCampaignRepo = Depends(get_campaign_repo),
    ranges: SQLiteRangeRepo = Depends(get_range_repo),
) -> dict[str, Any]:
    inp = CampaignInput(req.name, req.range_id)
    return {"campaign": _unwrap(run_save_campaign(inp, repo, ranges, campaign_id))}


@router.delete("/campaigns/{campaign_id}")
def delete_campaign(
    campaign_id: int, repo: SQLiteCampaignRepo = Depends(get_campaign_repo)
) -> dict[str, Any]:
    return _deleted(run_delete_campaign(campaign_id, repo), "Campaign")


# --- Financial cycles (last updates) ---


@router.get("/financial-cycles")
def list_financial_cycles(
    repo: SQLiteLastUpdateRepo = Depends(get_last_update_repo),
) -> dict[str, Any]:
    return {"financialCycles": [camelize(r) for r in repo.list_with_counts()]}


@router.get("/financial-cycles/{cycle_id}")
def get_financial_cycle(
    cycle_id: int, repo: SQLiteLastUpdateRepo = Depends(get_last_update_repo)
) -> dict[str, Any]:
    cycle = repo.get_by_id(cycle_id)
    if cycle is None:
        raise_for_error("Financial cycle not found", "not_found")
    data = serialize(cycle)
    data["gamePlansCount"] = repo.count_game_plans(cycle_id)
    return {"financialCycle": data}


@router.post("/financial-cycles", status_code=201)
def create_financial_cycle(
    req: NameRequest, repo: SQLiteLastUpdateRepo = Depends(get_last_update_repo)
) -> dict[str, Any]:
    return {"financialCycle": _unwrap(run_save_financial_cycle(req.name, repo))}


@router.put("/financial-cycles/{cycle_id}")
def rename_financial_cycle(
    cycle_id: int, req: NameRequest, repo: SQLiteLastUpdateRepo = Depends(get_last_update_repo)
) -> dict[str, Any]:
    return {"financialCycle": _unwrap(run_save_financial_cycle(req.name, repo, cycle_id))}


@router.delete("/financial-cycles/{cycle_id}")
def delete_financial_cycle(
    cycle_id: int, repo: SQLiteLastUpdateRepo = Depends(get_last_update_repo)
) -> dict[str, Any]:
    return _deleted(run_delete_financial_cycle(cycle_id, repo), "Financial cycle")
