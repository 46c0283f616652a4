"""Bulk assignment of postal areas to a territory."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from ...models.domain import AssignmentMode, Coordinate, normalize_region
from ...models.store import PostalAreaStore
from ..spatial_query import postal_areas_in_polygon
from .base import AssignmentDecision, AssignmentResult, ReassignedPostalArea, SkippedPostalArea
from .dispatcher import get_policy

logger = logging.getLogger(__name__)


def assign_postal_areas(
    postal_area_ids: Iterable[str],
    territory_name: str,
    postal_areas: PostalAreaStore,
    region_filter: Optional[str] = None,
    mode: AssignmentMode | str = AssignmentMode.FILL_UNASSIGNED,
) -> AssignmentResult:
    """Assign postal areas to ``territory_name`` under the given conflict policy.

    Best effort: ids that do not resolve to a postal area are ignored, every
    other id lands in exactly one bucket of the result (or in none when it
    already belongs to the target). Ownership is written before returning.
    """

    policy = get_policy(mode)
    region = normalize_region(region_filter)
    result = AssignmentResult()

    for postal_area_id in dict.fromkeys(postal_area_ids):
        area = postal_areas.get(postal_area_id)
        if area is None:
            continue

        if region is not None and area.state != region:
            result.outside_region.append(postal_area_id)
            continue

        current = area.territory
        decision = policy.decide(current, territory_name)
        match decision:
            case AssignmentDecision.ASSIGN:
                postal_areas.set_territory(postal_area_id, territory_name)
                result.assigned.append(postal_area_id)
            case AssignmentDecision.REASSIGN:
                postal_areas.set_territory(postal_area_id, territory_name)
                result.reassigned.append(
                    ReassignedPostalArea(
                        postcode=postal_area_id,
                        from_territory=current,
                        to_territory=territory_name,
                    )
                )
            case AssignmentDecision.SKIP:
                result.skipped.append(
                    SkippedPostalArea(postcode=postal_area_id, current_territory=current)
                )
            case AssignmentDecision.NOOP:
                pass

    logger.debug(
        f"{policy.mode} into {territory_name}: {len(result.assigned)} assigned, "
        f"{len(result.reassigned)} reassigned, {len(result.skipped)} skipped"
    )
    return result


def assign_polygon(
    ring: Sequence[Coordinate],
    territory_name: str,
    postal_areas: PostalAreaStore,
    region_filter: Optional[str] = None,
    mode: AssignmentMode | str = AssignmentMode.FILL_UNASSIGNED,
) -> AssignmentResult:
    """Assign every postal area whose centroid lies inside the drawn ring."""

    candidates = postal_areas_in_polygon(ring, postal_areas)
    return assign_postal_areas(candidates, territory_name, postal_areas, region_filter, mode)


def unassign_postal_areas(
    postal_area_ids: Iterable[str],
    postal_areas: PostalAreaStore,
    region_filter: Optional[str] = None,
) -> list[str]:
    """Clear ownership of the given postal areas and return the ids that changed."""

    region = normalize_region(region_filter)
    cleared: list[str] = []
    for postal_area_id in dict.fromkeys(postal_area_ids):
        area = postal_areas.get(postal_area_id)
        if area is None or not area.territory:
            continue
        if region is not None and area.state != region:
            continue
        postal_areas.set_territory(postal_area_id, None)
        cleared.append(postal_area_id)
    return cleared
