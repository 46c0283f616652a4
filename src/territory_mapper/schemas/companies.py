"""Company-facing API schemas."""

from __future__ import annotations

from typing import List, Optional, Sequence

from pydantic import BaseModel


class CompanyModel(BaseModel):
    id: str
    name: str
    state: str
    postcode: str
    latitude: float | None = None
    longitude: float | None = None
    owner: str
    lifecycleStage: str
    pum: int
    phase: str | None = None
    hubspotUrl: str | None = None
    coordSource: str
    territory: str | None = None


class CompanyListResponse(BaseModel):
    items: List[CompanyModel]
    total: int


class PUMStatsModel(BaseModel):
    pum: int
    companyCount: int


class PUMSummaryResponse(BaseModel):
    byTerritory: dict[str, PUMStatsModel]
    unassigned: PUMStatsModel
    total: PUMStatsModel


class AreaAnalysisRequest(BaseModel):
    coordinates: Sequence[tuple[float, float]]
    region: Optional[str] = None


class GroupStatsModel(BaseModel):
    count: int
    pum: int


class AreaAnalysisResponse(BaseModel):
    companies: List[CompanyModel]
    totalPUM: int
    companyCount: int
    byStage: dict[str, GroupStatsModel]
    byOwner: dict[str, GroupStatsModel]


class CompanyDatasetStatsResponse(BaseModel):
    total: int
    withCoords: int
    missingCoords: int
    byLifecycle: dict[str, int]
