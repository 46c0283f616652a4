"""Write a full set of territory exports into a timestamped directory."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..models.store import PostalAreaStore
from ..services.aggregation import calculate_assignment_stats
from ..services.boundaries import BoundarySource, composite_boundaries
from ..services.export import (
    all_territories_to_csv,
    hubspot_filename,
    hubspot_postcode_list,
    outlines_to_feature_collection,
    territory_csv_filename,
    territory_to_csv,
    unassigned_csv_filename,
    unassigned_to_csv,
)
from ..services.territories import TerritoryRegistry
from .filesystem import FileStorage
from .state import export_state

logger = logging.getLogger(__name__)


def write_export_bundle(
    registry: TerritoryRegistry,
    postal_areas: PostalAreaStore,
    boundary_source: Optional[BoundarySource] = None,
    region_filter: Optional[str] = None,
    storage: Optional[FileStorage] = None,
) -> Path:
    """Write state, CSVs, CRM lists and outlines for every territory.

    Returns the export directory.
    """

    storage = storage or FileStorage()
    export_dir = storage.make_export_directory(prefix="territories")

    storage.write_json(export_dir / "territory_state.json", export_state(registry, postal_areas))
    storage.write_text(export_dir / "all_territories.csv", all_territories_to_csv(postal_areas))
    storage.write_text(
        export_dir / unassigned_csv_filename(region_filter),
        unassigned_to_csv(postal_areas, region_filter),
    )
    # distinct names can share a slug ("North East" and "North_East")
    taken = {unassigned_csv_filename(region_filter)}
    for territory in registry:
        suffix = None
        if territory_csv_filename(territory.name) in taken:
            suffix = territory.id
        taken.add(territory_csv_filename(territory.name, suffix))
        storage.write_text(
            export_dir / territory_csv_filename(territory.name, suffix),
            territory_to_csv(postal_areas, territory.name),
        )
        storage.write_text(
            export_dir / hubspot_filename(territory.name, suffix),
            hubspot_postcode_list(postal_areas, territory.name),
        )

    outlines = composite_boundaries(registry, postal_areas, boundary_source, region_filter)
    counts = calculate_assignment_stats(postal_areas, region_filter).territory_counts
    storage.write_json(
        export_dir / "boundaries.geojson",
        outlines_to_feature_collection(outlines, list(registry), counts),
    )

    logger.info(f"Wrote exports for {len(registry)} territories to {export_dir}")
    return export_dir
