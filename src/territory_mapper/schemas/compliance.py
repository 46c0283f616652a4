"""Pydantic models for compliance zone endpoints."""

from __future__ import annotations

from typing import List, Sequence

from pydantic import BaseModel, Field


class ComplianceZoneModel(BaseModel):
    id: str
    coordinates: List[tuple[float, float]] = Field(..., description="Closed ring as (lat, lon) pairs.")
    createdAt: str
    updatedAt: str


class ComplianceZoneCreateRequest(BaseModel):
    coordinates: Sequence[tuple[float, float]]


class ComplianceStatsResponse(BaseModel):
    zoneCount: int
    companyCount: int
    totalPUM: int
