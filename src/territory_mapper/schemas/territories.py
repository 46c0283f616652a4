"""Pydantic request/response models for territory endpoints."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from pydantic import BaseModel, Field, field_validator

from ..models.domain import AssignmentMode


class TerritoryModel(BaseModel):
    id: str
    name: str
    color: str
    postalAreaCount: int = 0


class TerritoryCreateRequest(BaseModel):
    name: str = Field(..., description="Display name, unique ignoring case.")
    color: Optional[str] = Field(default=None, description="Hex colour; the next palette colour when omitted.")


class TerritoryUpdateRequest(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None


class TerritoryDeleteResponse(BaseModel):
    id: str
    name: str
    clearedCount: int


class TerritoryClearRequest(BaseModel):
    region: Optional[str] = Field(default=None, description="Only clear postal areas in this state.")


class TerritoryClearResponse(BaseModel):
    id: str
    clearedCount: int


class PolygonAssignmentRequest(BaseModel):
    territory: str = Field(..., description="Name of the territory receiving the postal areas.")
    coordinates: Sequence[tuple[float, float]] = Field(..., description="Drawn ring as (lat, lon) pairs.")
    mode: AssignmentMode = AssignmentMode.FILL_UNASSIGNED
    region: Optional[str] = Field(default=None, description="Only assign postal areas in this state.")

    @field_validator("territory")
    @classmethod
    def validate_territory(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("territory must not be empty")
        return value.strip()


class PolygonUnassignRequest(BaseModel):
    coordinates: Sequence[tuple[float, float]]
    region: Optional[str] = None


class SkippedModel(BaseModel):
    postcode: str
    currentTerritory: str


class ReassignedModel(BaseModel):
    postcode: str
    # "from" is reserved in Python
    from_: str = Field(..., alias="from")
    to: str

    model_config = {"populate_by_name": True}


class AssignmentResultModel(BaseModel):
    assigned: list[str]
    skipped: list[SkippedModel]
    reassigned: list[ReassignedModel]
    outsideRegion: list[str]


class UnassignResponse(BaseModel):
    cleared: list[str]


class StateCountModel(BaseModel):
    total: int
    assigned: int


class AssignmentStatsResponse(BaseModel):
    total: int
    assigned: int
    unassigned: int
    territoryCounts: dict[str, int]
    stateCounts: dict[str, StateCountModel]


class SavedStateModel(BaseModel):
    territories: dict[str, dict[str, Any]]
    postcodeAssignments: dict[str, str]


class StateImportResponse(BaseModel):
    territories: int
    assignments: int


class ExportBundleResponse(BaseModel):
    directory: str
    files: list[str]
