"""Database persistence for territories, postcode assignments and compliance zones."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Sequence

from ..db.supabase import (
    ASSIGNMENTS_TABLE,
    COMPLIANCE_ZONES_TABLE,
    TERRITORIES_TABLE,
    get_supabase_client,
)
from ..models.domain import ComplianceZone, Territory
from .state import SavedTerritoryState

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def load_territories_from_database() -> dict[str, Territory]:
    supabase = get_supabase_client()
    if not supabase:
        return {}

    try:
        response = supabase.table(TERRITORIES_TABLE).select("*").execute()
    except Exception as e:
        logger.error(f"Error loading territories from database: {e}")
        return {}

    territories: dict[str, Territory] = {}
    for row in response.data or []:
        try:
            territories[row["id"]] = Territory(id=row["id"], name=row["name"], color=row.get("colour") or "")
        except (KeyError, TypeError) as e:
            logger.warning(f"Skipping invalid territory row: {e}")
    return territories


def load_postcode_assignments_from_database() -> dict[str, str]:
    """Return postal area id -> territory id."""
    supabase = get_supabase_client()
    if not supabase:
        return {}

    try:
        response = supabase.table(ASSIGNMENTS_TABLE).select("*").execute()
    except Exception as e:
        logger.error(f"Error loading postcode assignments from database: {e}")
        return {}

    return {
        str(row["postcode"]): str(row["territory_id"])
        for row in response.data or []
        if row.get("postcode") and row.get("territory_id")
    }


def load_state_from_database() -> SavedTerritoryState | None:
    """Rebuild the saved state from the territory and assignment tables."""
    territories = load_territories_from_database()
    if not territories:
        return None
    names_by_id = {territory_id: territory.name for territory_id, territory in territories.items()}
    assignments = {
        postal_area_id: names_by_id[territory_id]
        for postal_area_id, territory_id in load_postcode_assignments_from_database().items()
        if territory_id in names_by_id
    }
    return SavedTerritoryState(territories=territories, postcode_assignments=assignments)


def save_territory_to_database(territory: Territory) -> bool:
    supabase = get_supabase_client()
    if not supabase:
        logger.info("Supabase not configured - territory kept in memory only")
        return False

    try:
        supabase.table(TERRITORIES_TABLE).upsert(
            {
                "id": territory.id,
                "name": territory.name,
                "colour": territory.color,
                "updated_at": _now(),
            }
        ).execute()
        return True
    except Exception as e:
        logger.error(f"Error saving territory {territory.id}: {e}")
        return False


def update_territory_in_database(territory: Territory) -> bool:
    supabase = get_supabase_client()
    if not supabase:
        return False

    try:
        supabase.table(TERRITORIES_TABLE).update(
            {"name": territory.name, "colour": territory.color, "updated_at": _now()}
        ).eq("id", territory.id).execute()
        return True
    except Exception as e:
        logger.error(f"Error updating territory {territory.id}: {e}")
        return False


def delete_territory_from_database(territory_id: str) -> bool:
    """Delete a territory after clearing its postcode assignments."""
    supabase = get_supabase_client()
    if not supabase:
        return False

    try:
        supabase.table(ASSIGNMENTS_TABLE).delete().eq("territory_id", territory_id).execute()
    except Exception as e:
        logger.error(f"Error clearing assignments of territory {territory_id}: {e}")
        return False

    try:
        supabase.table(TERRITORIES_TABLE).delete().eq("id", territory_id).execute()
        return True
    except Exception as e:
        logger.error(f"Error deleting territory {territory_id}: {e}")
        return False


def save_postcode_assignments_to_database(
    postal_area_ids: Sequence[str],
    territory_id: str,
    state: str | None = None,
) -> bool:
    if not postal_area_ids:
        return True
    supabase = get_supabase_client()
    if not supabase:
        return False

    assigned_at = _now()
    records = [
        {
            "postcode": postal_area_id,
            "territory_id": territory_id,
            "state": state or postal_area_id.rsplit("-", 1)[-1],
            "assigned_at": assigned_at,
        }
        for postal_area_id in postal_area_ids
    ]
    try:
        supabase.table(ASSIGNMENTS_TABLE).upsert(records).execute()
        return True
    except Exception as e:
        logger.error(f"Error saving {len(records)} postcode assignments: {e}")
        return False


def clear_postcode_assignments_from_database(territory_id: str, state: str | None = None) -> bool:
    supabase = get_supabase_client()
    if not supabase:
        return False

    try:
        query = supabase.table(ASSIGNMENTS_TABLE).delete().eq("territory_id", territory_id)
        if state:
            query = query.eq("state", state)
        query.execute()
        return True
    except Exception as e:
        logger.error(f"Error clearing postcode assignments of {territory_id}: {e}")
        return False


def remove_postcode_assignments_from_database(postal_area_ids: Sequence[str]) -> bool:
    if not postal_area_ids:
        return True
    supabase = get_supabase_client()
    if not supabase:
        return False

    try:
        supabase.table(ASSIGNMENTS_TABLE).delete().in_("postcode", list(postal_area_ids)).execute()
        return True
    except Exception as e:
        logger.error(f"Error removing postcode assignments: {e}")
        return False


def replace_state_in_database(state: SavedTerritoryState) -> bool:
    """Overwrite both tables with an imported state."""
    supabase = get_supabase_client()
    if not supabase:
        return False

    try:
        supabase.table(ASSIGNMENTS_TABLE).delete().neq("postcode", "").execute()
        supabase.table(TERRITORIES_TABLE).delete().neq("id", "").execute()
    except Exception as e:
        logger.error(f"Error clearing stored territory state: {e}")
        return False

    ids_by_name = {territory.name: territory.id for territory in state.territories.values()}
    ok = all(save_territory_to_database(territory) for territory in state.territories.values())
    grouped: dict[str, list[str]] = {}
    for postal_area_id, territory_name in state.postcode_assignments.items():
        territory_id = ids_by_name.get(territory_name)
        if territory_id:
            grouped.setdefault(territory_id, []).append(postal_area_id)
    for territory_id, postal_area_ids in grouped.items():
        ok = save_postcode_assignments_to_database(postal_area_ids, territory_id) and ok
    return ok


def _zone_from_row(row: dict[str, Any]) -> ComplianceZone:
    # stored as [lng, lat] pairs
    polygon = [(float(lat), float(lng)) for lng, lat in row["polygon"]]
    return ComplianceZone(
        id=str(row["id"]),
        polygon=polygon,
        created_at=str(row.get("created_at") or ""),
        updated_at=str(row.get("updated_at") or ""),
    )


def load_compliance_zones_from_database() -> list[ComplianceZone]:
    supabase = get_supabase_client()
    if not supabase:
        return []

    try:
        response = supabase.table(COMPLIANCE_ZONES_TABLE).select("*").execute()
    except Exception as e:
        logger.error(f"Error loading compliance zones: {e}")
        return []

    zones: list[ComplianceZone] = []
    for row in response.data or []:
        try:
            zones.append(_zone_from_row(row))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping invalid compliance zone row: {e}")
    return zones


def save_compliance_zone_to_database(zone: ComplianceZone) -> bool:
    supabase = get_supabase_client()
    if not supabase:
        return False

    try:
        supabase.table(COMPLIANCE_ZONES_TABLE).upsert(
            {
                "id": zone.id,
                "polygon": [[lng, lat] for lat, lng in zone.polygon],
                "created_at": zone.created_at,
                "updated_at": zone.updated_at,
            }
        ).execute()
        return True
    except Exception as e:
        logger.error(f"Error saving compliance zone {zone.id}: {e}")
        return False


def delete_compliance_zone_from_database(zone_id: str) -> bool:
    supabase = get_supabase_client()
    if not supabase:
        return False

    try:
        supabase.table(COMPLIANCE_ZONES_TABLE).delete().eq("id", zone_id).execute()
        return True
    except Exception as e:
        logger.error(f"Error deleting compliance zone {zone_id}: {e}")
        return False
