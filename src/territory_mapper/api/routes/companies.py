"""Company dataset endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Query, status

from ...data.workspace import get_workspace
from ...models.domain import LifecycleStage
from ...schemas.companies import (
    AreaAnalysisRequest,
    AreaAnalysisResponse,
    CompanyDatasetStatsResponse,
    CompanyListResponse,
    CompanyModel,
    PUMSummaryResponse,
)
from ...services.aggregation import (
    CompanyFilters,
    CustomerFilter,
    analyze_area,
    calculate_territory_pum,
    derive_company_territories,
    filter_companies,
    summarize_companies,
)
from ...services.outputs.formatter import (
    area_analysis_to_json,
    company_stats_to_json,
    company_to_json,
    pum_summary_to_json,
)
from ...services.spatial_query import companies_in_polygon, select_companies

router = APIRouter(prefix="/companies", tags=["companies"])


@router.get("", response_model=CompanyListResponse, status_code=status.HTTP_200_OK)
def list_companies(
    region: str | None = Query(default=None, description="Optional state filter"),
    owner: List[str] = Query(default=[], description="Restrict to these company owners"),
    stage: List[LifecycleStage] = Query(default=[], description="Restrict to these lifecycle stages"),
    customers: CustomerFilter = Query(default=CustomerFilter.ALL, description="Platform customer filter"),
    min_pum: int | None = Query(default=None, ge=0),
    max_pum: int | None = Query(default=None, ge=0),
    search: str = Query(default="", description="Case-insensitive company name search"),
    page: int = Query(default=1, ge=1, description="1-based page index for pagination"),
    page_size: int = Query(default=1000, ge=1, le=5000, description="Maximum number of records per page"),
) -> CompanyListResponse:
    workspace = get_workspace()
    filters = CompanyFilters(
        owners=owner,
        stages=stage,
        customer_filter=customers,
        min_pum=min_pum,
        max_pum=max_pum,
        search=search.strip(),
    )
    matches = filter_companies(workspace.companies, filters, region)
    offset = (page - 1) * page_size
    page_items = matches[offset : offset + page_size]
    with workspace.lock:
        territories = derive_company_territories(page_items, workspace.postal_areas)
    items = [CompanyModel(**company_to_json(company, territories[company.id])) for company in page_items]
    return CompanyListResponse(items=items, total=len(matches))


@router.get("/stats", response_model=CompanyDatasetStatsResponse, status_code=status.HTTP_200_OK)
def get_company_stats() -> CompanyDatasetStatsResponse:
    workspace = get_workspace()
    return CompanyDatasetStatsResponse(**company_stats_to_json(summarize_companies(workspace.companies)))


@router.get("/pum", response_model=PUMSummaryResponse, status_code=status.HTTP_200_OK)
def get_territory_pum(
    region: str | None = Query(default=None, description="Optional state filter"),
) -> PUMSummaryResponse:
    workspace = get_workspace()
    with workspace.lock:
        summary = calculate_territory_pum(
            workspace.companies,
            workspace.registry,
            workspace.postal_areas,
            region,
        )
    return PUMSummaryResponse.model_validate(pum_summary_to_json(summary))


@router.post("/area-analysis", response_model=AreaAnalysisResponse, status_code=status.HTTP_200_OK)
def analyze_drawn_area(payload: AreaAnalysisRequest) -> AreaAnalysisResponse:
    """Summarise the companies inside a drawn polygon."""
    workspace = get_workspace()
    candidates = filter_companies(workspace.companies, region_filter=payload.region)
    inside = select_companies(companies_in_polygon(payload.coordinates, candidates), candidates)
    result = analyze_area(inside)
    with workspace.lock:
        territories = derive_company_territories(result.companies, workspace.postal_areas)
    return AreaAnalysisResponse.model_validate(area_analysis_to_json(result, territories))
