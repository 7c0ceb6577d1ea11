"""
Admin routes for the organisational hierarchy: countries, regions,
sub-regions and clusters.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException

from src.adapters.sqlite.repos import SQLiteCountryRepo, SQLiteRegionRepo
from src.api.deps import get_country_repo, get_country_scope, get_region_repo, require_admin
from src.api.schemas import (
    CountryRequest,
    NameRequest,
    SubRegionRequest,
    camelize,
    raise_for_error,
    serialize,
)
from src.components.taxonomy import (
    CountryInput,
    TaxonomyOutput,
    run_create_region,
    run_create_sub_region,
    run_delete_country,
    run_save_country,
)

router = APIRouter(dependencies=[Depends(require_admin)])


def _unwrap(result: TaxonomyOutput) -> dict[str, Any]:
    if not result.success:
        raise_for_error(result.error, result.error_code)
    return serialize(result.item)


# --- Countries ---


@router.get("/countries")
def list_countries(
    repo: SQLiteCountryRepo = Depends(get_country_repo),
    country_ids: list[int] | None = Depends(get_country_scope),
) -> dict[str, Any]:
    return {"countries": [camelize(r) for r in repo.list_with_details(country_ids)]}


@router.get("/countries/{country_id}")
def get_country(
    country_id: int, repo: SQLiteCountryRepo = Depends(get_country_repo)
) -> dict[str, Any]:
    row = repo.get_details(country_id)
    if not row:
        raise HTTPException(status_code=404, detail="Country not found")
    return {"country": camelize(row)}


@router.post("/countries", status_code=201)
def create_country(
    req: CountryRequest,
    repo: SQLiteCountryRepo = Depends(get_country_repo),
    regions: SQLiteRegionRepo = Depends(get_region_repo),
) -> dict[str, Any]:
    inp = CountryInput(req.name, req.region_id, req.sub_region_id, req.cluster_id)
    return {"country": _unwrap(run_save_country(inp, repo, regions))}


@router.put("/countries/{country_id}")
def update_country(
    country_id: int,
    req: CountryRequest,
    repo: SQLiteCountryRepo = Depends(get_country_repo),
    regions: SQLiteRegionRepo = Depends(get_region_repo),
) -> dict[str, Any]:
    inp = CountryInput(req.name, req.region_id, req.sub_region_id, req.cluster_id)
    return {"country": _unwrap(run_save_country(inp, repo, regions, country_id))}


@router.delete("/countries/{country_id}")
def delete_country(
    country_id: int, repo: SQLiteCountryRepo = Depends(get_country_repo)
) -> dict[str, Any]:
    _unwrap(run_delete_country(country_id, repo))
    return {"success": True, "message": "Country deleted successfully"}


# --- Regions / sub-regions / clusters ---


@router.get("/regions")
def list_regions(regions: SQLiteRegionRepo = Depends(get_region_repo)) -> dict[str, Any]:
    return {"regions": [serialize(r) for r in regions.list_regions()]}


@router.post("/regions", status_code=201)
def create_region(
    req: NameRequest, regions: SQLiteRegionRepo = Depends(get_region_repo)
) -> dict[str, Any]:
    return {"region": _unwrap(run_create_region(req.name, regions))}


@router.get("/sub-regions")
def list_sub_regions(regions: SQLiteRegionRepo = Depends(get_region_repo)) -> dict[str, Any]:
    return {"subRegions": [camelize(r) for r in regions.list_sub_regions()]}


@router.post("/sub-regions", status_code=201)
def create_sub_region(
    req: SubRegionRequest, regions: SQLiteRegionRepo = Depends(get_region_repo)
) -> dict[str, Any]:
    return {"subRegion": _unwrap(run_create_sub_region(req.name, req.region_id, regions))}


@router.get("/clusters")
def list_clusters(regions: SQLiteRegionRepo = Depends(get_region_repo)) -> dict[str, Any]:
    return {"clusters": [serialize(c) for c in regions.list_clusters()]}
