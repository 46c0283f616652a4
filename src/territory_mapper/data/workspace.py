"""In-memory session state and its bootstrap from reference data and stores."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable, Optional, Sequence

from ..config import settings
from ..models.domain import Company, ComplianceZone, Coordinate, PostalArea, Territory
from ..models.store import PostalAreaStore
from ..persistence.database import load_compliance_zones_from_database, load_state_from_database
from ..persistence.state import SavedTerritoryState, apply_state, load_state_file
from ..services.boundaries import BoundarySource
from ..services.geospatial import close_ring, ring_to_polygon
from ..services.territories import TerritoryRegistry
from .companies_repository import get_companies
from .postcodes_repository import load_boundaries, load_postcodes

logger = logging.getLogger(__name__)

StateLoader = Callable[[], Optional[SavedTerritoryState]]


class ComplianceZoneError(ValueError):
    pass


class ComplianceZoneNotFoundError(ComplianceZoneError):
    pass


@dataclass
class TerritoryWorkspace:
    """Everything one dashboard session reads and writes.

    ``lock`` is held by every request that touches the postal areas, the
    registry or the compliance zones, so a bulk assignment is never
    observed half-applied.
    """

    postal_areas: PostalAreaStore
    registry: TerritoryRegistry
    companies: tuple[Company, ...] = ()
    compliance_zones: list[ComplianceZone] = field(default_factory=list)
    boundaries: BoundarySource = field(default_factory=BoundarySource)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @classmethod
    def build(
        cls,
        postal_areas: Iterable[PostalArea],
        *,
        territories: Iterable[Territory] = (),
        companies: Iterable[Company] = (),
        compliance_zones: Iterable[ComplianceZone] = (),
        boundaries: Optional[BoundarySource] = None,
    ) -> "TerritoryWorkspace":
        store = PostalAreaStore(postal_areas)
        return cls(
            postal_areas=store,
            registry=TerritoryRegistry(store, territories),
            companies=tuple(companies),
            compliance_zones=list(compliance_zones),
            boundaries=boundaries or BoundarySource(),
        )

    def replace_companies(self, companies: Iterable[Company]) -> None:
        self.companies = tuple(companies)

    def add_compliance_zone(self, polygon: Sequence[Coordinate]) -> ComplianceZone:
        if ring_to_polygon(polygon) is None:
            raise ComplianceZoneError("Compliance zone needs at least three distinct points")
        timestamp = datetime.now(timezone.utc).isoformat()
        zone = ComplianceZone(
            id=str(uuid.uuid4()),
            polygon=close_ring(polygon),
            created_at=timestamp,
            updated_at=timestamp,
        )
        self.compliance_zones.append(zone)
        return zone

    def delete_compliance_zone(self, zone_id: str) -> ComplianceZone:
        for index, zone in enumerate(self.compliance_zones):
            if zone.id == zone_id:
                return self.compliance_zones.pop(index)
        raise ComplianceZoneNotFoundError(f"Compliance zone '{zone_id}' not found")


def restore_saved_state(
    workspace: TerritoryWorkspace,
    loaders: Sequence[StateLoader] | None = None,
) -> bool:
    """Apply the first saved state found (database, then local file)."""

    for loader in loaders or (load_state_from_database, load_state_file):
        state = loader()
        if state is None:
            continue
        applied = apply_state(state, workspace.registry, workspace.postal_areas)
        logger.info(
            f"Restored {len(state.territories)} territories and {applied} assignments via {loader.__name__}"
        )
        return True
    return False


def load_workspace() -> TerritoryWorkspace:
    """Build a workspace from the configured reference data and stores."""

    postal_areas = load_postcodes()
    lookup = {area.id: area for area in postal_areas}
    workspace = TerritoryWorkspace.build(
        postal_areas,
        companies=get_companies(lookup),
        compliance_zones=load_compliance_zones_from_database(),
        boundaries=load_boundaries(settings.boundary_region),
    )
    restore_saved_state(workspace)
    return workspace


_active_workspace: Optional[TerritoryWorkspace] = None
_workspace_guard = threading.Lock()


def get_workspace() -> TerritoryWorkspace:
    global _active_workspace
    with _workspace_guard:
        if _active_workspace is None:
            _active_workspace = load_workspace()
        return _active_workspace


def set_workspace(workspace: Optional[TerritoryWorkspace]) -> None:
    """Install a workspace (or reset to lazy loading with None)."""

    global _active_workspace
    with _workspace_guard:
        _active_workspace = workspace
