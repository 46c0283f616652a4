"""API routes for territory management and assignment."""

from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, BackgroundTasks, HTTPException, Query, Response, status

from ...data.workspace import TerritoryWorkspace, get_workspace
from ...models.domain import Territory, normalize_region
from ...persistence.database import (
    clear_postcode_assignments_from_database,
    delete_territory_from_database,
    remove_postcode_assignments_from_database,
    replace_state_in_database,
    save_postcode_assignments_to_database,
    save_territory_to_database,
    update_territory_in_database,
)
from ...persistence.exports import write_export_bundle
from ...persistence.state import InvalidStateError, apply_state, export_state, parse_state, save_state_file
from ...schemas.territories import (
    AssignmentResultModel,
    AssignmentStatsResponse,
    ExportBundleResponse,
    PolygonAssignmentRequest,
    PolygonUnassignRequest,
    SavedStateModel,
    StateImportResponse,
    TerritoryClearRequest,
    TerritoryClearResponse,
    TerritoryCreateRequest,
    TerritoryDeleteResponse,
    TerritoryModel,
    TerritoryUpdateRequest,
    UnassignResponse,
)
from ...services.aggregation import calculate_assignment_stats
from ...services.assignment import assign_polygon, unassign_postal_areas
from ...services.boundaries import composite_boundaries
from ...services.export import (
    all_territories_to_csv,
    hubspot_filename,
    hubspot_postcode_list,
    outlines_to_feature_collection,
    territory_csv_filename,
    territory_to_csv,
    unassigned_csv_filename,
    unassigned_to_csv,
)
from ...services.outputs.formatter import assignment_result_to_json, assignment_stats_to_json
from ...services.spatial_query import postal_areas_in_polygon
from ...services.territories import (
    DuplicateTerritoryError,
    TerritoryError,
    TerritoryNotFoundError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/territories", tags=["territories"])


def _http_error(exc: TerritoryError) -> HTTPException:
    if isinstance(exc, TerritoryNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, DuplicateTerritoryError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _territory_model(territory: Territory, counts: dict[str, int]) -> TerritoryModel:
    return TerritoryModel(
        id=territory.id,
        name=territory.name,
        color=territory.color,
        postalAreaCount=counts.get(territory.name, 0),
    )


def _require_territory(workspace: TerritoryWorkspace, territory_id: str) -> Territory:
    territory = workspace.registry.get(territory_id)
    if territory is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Territory '{territory_id}' not found")
    return territory


def _snapshot(workspace: TerritoryWorkspace) -> None:
    """Write the local JSON backup of the current state."""
    try:
        with workspace.lock:
            save_state_file(workspace.registry, workspace.postal_areas)
    except OSError as exc:
        logger.warning(f"Failed to write territory state snapshot: {exc}")


def _csv_response(content: str, filename: str, media_type: str = "text/csv") -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("", response_model=List[TerritoryModel], status_code=status.HTTP_200_OK)
def list_territories() -> List[TerritoryModel]:
    workspace = get_workspace()
    with workspace.lock:
        counts = calculate_assignment_stats(workspace.postal_areas).territory_counts
        return [_territory_model(territory, counts) for territory in workspace.registry]


@router.post("", response_model=TerritoryModel, status_code=status.HTTP_201_CREATED)
def create_territory(payload: TerritoryCreateRequest, background_tasks: BackgroundTasks) -> TerritoryModel:
    workspace = get_workspace()
    with workspace.lock:
        try:
            territory = workspace.registry.create(payload.name, payload.color)
        except TerritoryError as exc:
            raise _http_error(exc) from exc

    background_tasks.add_task(save_territory_to_database, territory)
    background_tasks.add_task(_snapshot, workspace)
    return _territory_model(territory, {})


@router.get("/stats", response_model=AssignmentStatsResponse, status_code=status.HTTP_200_OK)
def get_assignment_stats(
    region: str | None = Query(default=None, description="Optional state filter"),
) -> AssignmentStatsResponse:
    workspace = get_workspace()
    with workspace.lock:
        stats = calculate_assignment_stats(workspace.postal_areas, region)
    return AssignmentStatsResponse.model_validate(assignment_stats_to_json(stats))


@router.get("/boundaries", status_code=status.HTTP_200_OK)
def get_territory_boundaries(
    region: str | None = Query(default=None, description="Optional state filter"),
) -> dict:
    """Composite outline of every territory as a GeoJSON FeatureCollection."""
    workspace = get_workspace()
    with workspace.lock:
        outlines = composite_boundaries(workspace.registry, workspace.postal_areas, workspace.boundaries, region)
        counts = calculate_assignment_stats(workspace.postal_areas, region).territory_counts
        territories = list(workspace.registry)
    return outlines_to_feature_collection(outlines, territories, counts)


@router.post("/assign", response_model=AssignmentResultModel, status_code=status.HTTP_200_OK)
def assign_drawn_polygon(payload: PolygonAssignmentRequest, background_tasks: BackgroundTasks) -> AssignmentResultModel:
    workspace = get_workspace()
    with workspace.lock:
        territory = workspace.registry.get_by_name(payload.territory)
        if territory is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Territory '{payload.territory}' not found",
            )
        result = assign_polygon(
            payload.coordinates,
            territory.name,
            workspace.postal_areas,
            region_filter=payload.region,
            mode=payload.mode,
        )

    logger.info(
        f"Assigned {len(result.assigned)} and reassigned {len(result.reassigned)} postal areas to {territory.name}"
    )
    if result.changed:
        background_tasks.add_task(save_postcode_assignments_to_database, result.changed, territory.id)
        background_tasks.add_task(_snapshot, workspace)
    return AssignmentResultModel.model_validate(assignment_result_to_json(result))


@router.post("/unassign", response_model=UnassignResponse, status_code=status.HTTP_200_OK)
def unassign_drawn_polygon(payload: PolygonUnassignRequest, background_tasks: BackgroundTasks) -> UnassignResponse:
    workspace = get_workspace()
    with workspace.lock:
        candidates = postal_areas_in_polygon(payload.coordinates, workspace.postal_areas)
        cleared = unassign_postal_areas(candidates, workspace.postal_areas, payload.region)

    if cleared:
        background_tasks.add_task(remove_postcode_assignments_from_database, cleared)
        background_tasks.add_task(_snapshot, workspace)
    return UnassignResponse(cleared=cleared)


@router.get("/state", response_model=SavedStateModel, status_code=status.HTTP_200_OK)
def export_territory_state() -> SavedStateModel:
    workspace = get_workspace()
    with workspace.lock:
        return SavedStateModel.model_validate(export_state(workspace.registry, workspace.postal_areas))


@router.put("/state", response_model=StateImportResponse, status_code=status.HTTP_200_OK)
def import_territory_state(payload: dict, background_tasks: BackgroundTasks) -> StateImportResponse:
    try:
        state = parse_state(payload)
    except InvalidStateError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    workspace = get_workspace()
    with workspace.lock:
        applied = apply_state(state, workspace.registry, workspace.postal_areas)

    background_tasks.add_task(replace_state_in_database, state)
    background_tasks.add_task(_snapshot, workspace)
    return StateImportResponse(territories=len(state.territories), assignments=applied)


@router.get("/export.csv", status_code=status.HTTP_200_OK)
def export_all_territories() -> Response:
    workspace = get_workspace()
    with workspace.lock:
        content = all_territories_to_csv(workspace.postal_areas)
    return _csv_response(content, "territory_assignments.csv")


@router.post("/export", response_model=ExportBundleResponse, status_code=status.HTTP_201_CREATED)
def export_bundle(
    region: str | None = Query(default=None, description="Optional state filter"),
) -> ExportBundleResponse:
    """Write every export for the current assignments to a new directory on disk."""
    workspace = get_workspace()
    with workspace.lock:
        export_dir = write_export_bundle(
            workspace.registry,
            workspace.postal_areas,
            workspace.boundaries,
            region,
        )
    files = sorted(path.name for path in export_dir.iterdir())
    return ExportBundleResponse(directory=str(export_dir), files=files)


@router.get("/unassigned.csv", status_code=status.HTTP_200_OK)
def export_unassigned(region: str | None = Query(default=None, description="Optional state filter")) -> Response:
    workspace = get_workspace()
    with workspace.lock:
        content = unassigned_to_csv(workspace.postal_areas, region)
    return _csv_response(content, unassigned_csv_filename(region))


@router.patch("/{territory_id}", response_model=TerritoryModel, status_code=status.HTTP_200_OK)
def update_territory(
    territory_id: str,
    payload: TerritoryUpdateRequest,
    background_tasks: BackgroundTasks,
) -> TerritoryModel:
    workspace = get_workspace()
    with workspace.lock:
        try:
            territory = workspace.registry.update(territory_id, name=payload.name, color=payload.color)
        except TerritoryError as exc:
            raise _http_error(exc) from exc
        counts = calculate_assignment_stats(workspace.postal_areas).territory_counts

    background_tasks.add_task(update_territory_in_database, territory)
    background_tasks.add_task(_snapshot, workspace)
    return _territory_model(territory, counts)


@router.delete("/{territory_id}", response_model=TerritoryDeleteResponse, status_code=status.HTTP_200_OK)
def delete_territory(territory_id: str, background_tasks: BackgroundTasks) -> TerritoryDeleteResponse:
    workspace = get_workspace()
    with workspace.lock:
        territory = _require_territory(workspace, territory_id)
        try:
            cleared = workspace.registry.delete(territory_id)
        except TerritoryError as exc:
            raise _http_error(exc) from exc

    background_tasks.add_task(delete_territory_from_database, territory_id)
    background_tasks.add_task(_snapshot, workspace)
    return TerritoryDeleteResponse(id=territory_id, name=territory.name, clearedCount=cleared)


@router.post("/{territory_id}/clear", response_model=TerritoryClearResponse, status_code=status.HTTP_200_OK)
def clear_territory(
    territory_id: str,
    background_tasks: BackgroundTasks,
    payload: TerritoryClearRequest | None = None,
) -> TerritoryClearResponse:
    region = normalize_region(payload.region) if payload else None
    workspace = get_workspace()
    with workspace.lock:
        try:
            cleared = workspace.registry.clear(territory_id, region)
        except TerritoryError as exc:
            raise _http_error(exc) from exc

    background_tasks.add_task(
        clear_postcode_assignments_from_database,
        territory_id,
        region,
    )
    background_tasks.add_task(_snapshot, workspace)
    return TerritoryClearResponse(id=territory_id, clearedCount=cleared)


@router.get("/{territory_id}/export.csv", status_code=status.HTTP_200_OK)
def export_territory(territory_id: str) -> Response:
    workspace = get_workspace()
    with workspace.lock:
        territory = _require_territory(workspace, territory_id)
        content = territory_to_csv(workspace.postal_areas, territory.name)
    return _csv_response(content, territory_csv_filename(territory.name))


@router.get("/{territory_id}/hubspot", status_code=status.HTTP_200_OK)
def export_territory_hubspot_list(territory_id: str) -> Response:
    workspace = get_workspace()
    with workspace.lock:
        territory = _require_territory(workspace, territory_id)
        content = hubspot_postcode_list(workspace.postal_areas, territory.name)
    return _csv_response(
        content,
        hubspot_filename(territory.name),
        media_type="text/plain",
    )
