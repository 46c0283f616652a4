"""Compliance zone endpoints."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, BackgroundTasks, HTTPException, status

from ...data.workspace import ComplianceZoneError, ComplianceZoneNotFoundError, get_workspace
from ...models.domain import ComplianceZone
from ...persistence.database import delete_compliance_zone_from_database, save_compliance_zone_to_database
from ...schemas.compliance import ComplianceStatsResponse, ComplianceZoneCreateRequest, ComplianceZoneModel
from ...services.aggregation import compute_compliance_stats

router = APIRouter(prefix="/compliance", tags=["compliance"])


def _zone_model(zone: ComplianceZone) -> ComplianceZoneModel:
    return ComplianceZoneModel(
        id=zone.id,
        coordinates=list(zone.polygon),
        createdAt=zone.created_at,
        updatedAt=zone.updated_at,
    )


@router.get("/zones", response_model=List[ComplianceZoneModel], status_code=status.HTTP_200_OK)
def list_compliance_zones() -> List[ComplianceZoneModel]:
    workspace = get_workspace()
    with workspace.lock:
        zones = list(workspace.compliance_zones)
    return [_zone_model(zone) for zone in zones]


@router.post("/zones", response_model=ComplianceZoneModel, status_code=status.HTTP_201_CREATED)
def create_compliance_zone(
    payload: ComplianceZoneCreateRequest,
    background_tasks: BackgroundTasks,
) -> ComplianceZoneModel:
    workspace = get_workspace()
    with workspace.lock:
        try:
            zone = workspace.add_compliance_zone(payload.coordinates)
        except ComplianceZoneError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    background_tasks.add_task(save_compliance_zone_to_database, zone)
    return _zone_model(zone)


@router.delete("/zones/{zone_id}", status_code=status.HTTP_200_OK)
def delete_compliance_zone(zone_id: str, background_tasks: BackgroundTasks) -> dict:
    workspace = get_workspace()
    with workspace.lock:
        try:
            workspace.delete_compliance_zone(zone_id)
        except ComplianceZoneNotFoundError as exc:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

    background_tasks.add_task(delete_compliance_zone_from_database, zone_id)
    return {"id": zone_id, "deleted": True}


@router.get("/stats", response_model=ComplianceStatsResponse, status_code=status.HTTP_200_OK)
def get_compliance_stats() -> ComplianceStatsResponse:
    workspace = get_workspace()
    with workspace.lock:
        zones = list(workspace.compliance_zones)
    stats = compute_compliance_stats(workspace.companies, zones)
    return ComplianceStatsResponse(
        zoneCount=len(zones),
        companyCount=stats.company_count,
        totalPUM=stats.total_pum,
    )
