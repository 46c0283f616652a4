"""Import and export of the territory registry with its postcode assignments."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from ..config import settings
from ..models.domain import Territory
from ..models.store import PostalAreaStore
from ..services.territories import TerritoryRegistry
from .filesystem import FileStorage

logger = logging.getLogger(__name__)


class InvalidStateError(ValueError):
    """Raised when a saved state document does not have the expected structure."""


@dataclass(slots=True)
class SavedTerritoryState:
    territories: dict[str, Territory] = field(default_factory=dict)
    # postal area id -> territory name
    postcode_assignments: dict[str, str] = field(default_factory=dict)


def export_state(registry: TerritoryRegistry, postal_areas: PostalAreaStore) -> dict[str, Any]:
    """Serialize territories and assignments into a JSON-ready document."""

    return {
        "territories": {
            territory.id: {"id": territory.id, "name": territory.name, "color": territory.color}
            for territory in registry
        },
        "postcodeAssignments": postal_areas.assignments(),
    }


def parse_state(payload: Any) -> SavedTerritoryState:
    if not isinstance(payload, Mapping):
        raise InvalidStateError("Invalid state file format")
    raw_territories = payload.get("territories")
    raw_assignments = payload.get("postcodeAssignments")
    if not isinstance(raw_territories, Mapping) or not isinstance(raw_assignments, Mapping):
        raise InvalidStateError("Invalid state file format")

    territories: dict[str, Territory] = {}
    for key, entry in raw_territories.items():
        if not isinstance(entry, Mapping) or not entry.get("name"):
            raise InvalidStateError(f"Territory entry '{key}' is missing a name")
        territory_id = str(entry.get("id") or key)
        territories[territory_id] = Territory(
            id=territory_id,
            name=str(entry["name"]),
            color=str(entry.get("color") or entry.get("colour") or ""),
        )

    assignments = {str(key): str(value) for key, value in raw_assignments.items() if value}
    return SavedTerritoryState(territories=territories, postcode_assignments=assignments)


def apply_state(state: SavedTerritoryState, registry: TerritoryRegistry, postal_areas: PostalAreaStore) -> int:
    """Replace the registry and every assignment; returns the number of areas assigned.

    Assignments for postal areas that are not in the store are ignored.
    """

    registry.replace_all(state.territories.values())
    postal_areas.clear_all()
    applied = 0
    for postal_area_id, territory_name in state.postcode_assignments.items():
        if postal_area_id in postal_areas:
            postal_areas.set_territory(postal_area_id, territory_name)
            applied += 1
    return applied


def save_state_file(
    registry: TerritoryRegistry,
    postal_areas: PostalAreaStore,
    path: Optional[Path] = None,
    storage: Optional[FileStorage] = None,
) -> Path:
    target = path or settings.state_file
    (storage or FileStorage()).write_json(target, export_state(registry, postal_areas))
    return target


def load_state_file(path: Optional[Path] = None, storage: Optional[FileStorage] = None) -> Optional[SavedTerritoryState]:
    """Read a saved state, returning None when it is absent or unreadable."""

    target = path or settings.state_file
    if not target.exists():
        return None
    try:
        return parse_state((storage or FileStorage()).read_json(target))
    except (OSError, ValueError) as exc:
        logger.warning(f"Ignoring unreadable state file {target}: {exc}")
        return None
