"""Composite territory outlines built from postal area boundaries."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from shapely.errors import GEOSException
from shapely.geometry import MultiPoint
from shapely.geometry.base import BaseGeometry

from ...config import settings
from ...models.domain import PostalArea, Territory, normalize_region
from ...models.store import PostalAreaStore
from ..geospatial import km_to_degrees

logger = logging.getLogger(__name__)

# The NSW boundary file carries ACT postcodes as well
COMBINED_STATE_GROUPS: dict[str, tuple[str, ...]] = {
    "NSW": ("NSW", "ACT"),
    "ACT": ("NSW", "ACT"),
}

MIN_HULL_POINTS = 3


def in_region_group(state: str, region: Optional[str]) -> bool:
    """True if ``state`` belongs to the selected region, treating NSW and ACT as one."""

    normalized = normalize_region(region)
    if normalized is None:
        return True
    group = COMBINED_STATE_GROUPS.get(normalized)
    if group:
        return state in group
    return state == normalized


@dataclass(slots=True)
class BoundarySource:
    """Authoritative postal area shapes keyed by postcode."""

    features: dict[str, BaseGeometry] = field(default_factory=dict)
    loaded_region: Optional[str] = None

    @property
    def loaded(self) -> bool:
        return bool(self.features)

    def get(self, postcode: str) -> Optional[BaseGeometry]:
        return self.features.get(postcode)

    def matches_region(self, region: Optional[str]) -> bool:
        """Whether these shapes may be drawn for the selected region."""

        if not self.loaded:
            return False
        if self.loaded_region is None:
            return True
        return in_region_group(self.loaded_region, region)


def boundaries_available(boundary_source: Optional[BoundarySource], region: Optional[str]) -> bool:
    return boundary_source is not None and boundary_source.matches_region(region)


class CompositeStrategy(ABC):
    """One step of the outline fallback chain."""

    name: str

    @abstractmethod
    def compose(
        self,
        owned: Sequence[PostalArea],
        boundary_source: Optional[BoundarySource],
        region: Optional[str],
    ) -> Optional[BaseGeometry]:
        raise NotImplementedError


class BoundaryUnionStrategy(CompositeStrategy):
    """Merge the authoritative shapes of the owned postal areas."""

    name = "boundary_union"

    def compose(
        self,
        owned: Sequence[PostalArea],
        boundary_source: Optional[BoundarySource],
        region: Optional[str],
    ) -> Optional[BaseGeometry]:
        if not boundaries_available(boundary_source, region):
            return None

        shapes = [shape for shape in (boundary_source.get(area.postcode) for area in owned) if shape is not None]
        if not shapes:
            return None
        if len(shapes) == 1:
            return shapes[0]

        merged = shapes[0]
        for shape in shapes[1:]:
            try:
                merged = merged.union(shape)
            except (GEOSException, ValueError) as exc:
                logger.debug(f"{self.name}: skipping boundary that failed to merge: {exc}")
        return merged


class ConvexHullStrategy(CompositeStrategy):
    """Approximate an outline from centroids when no shapes are loaded."""

    name = "convex_hull"

    def __init__(self, buffer_km: Optional[float] = None) -> None:
        self.buffer_km = settings.hull_buffer_km if buffer_km is None else buffer_km

    def compose(
        self,
        owned: Sequence[PostalArea],
        boundary_source: Optional[BoundarySource],
        region: Optional[str],
    ) -> Optional[BaseGeometry]:
        if boundaries_available(boundary_source, region):
            return None
        if len(owned) < MIN_HULL_POINTS:
            return None

        hull = MultiPoint([(area.longitude, area.latitude) for area in owned]).convex_hull
        if hull.is_empty:
            return None
        buffered = hull.buffer(km_to_degrees(self.buffer_km)) if self.buffer_km > 0 else hull
        if buffered.is_empty or buffered.geom_type != "Polygon":
            return None
        return buffered


def default_strategies(hull_buffer_km: Optional[float] = None) -> list[CompositeStrategy]:
    return [BoundaryUnionStrategy(), ConvexHullStrategy(hull_buffer_km)]


def composite_boundary(
    territory_name: str,
    postal_areas: PostalAreaStore,
    boundary_source: Optional[BoundarySource] = None,
    region_filter: Optional[str] = None,
    *,
    strategies: Optional[Sequence[CompositeStrategy]] = None,
) -> Optional[BaseGeometry]:
    """Return the merged outline of a territory, or None when there is nothing to draw."""

    region = normalize_region(region_filter)
    owned = [area for area in postal_areas.owned_by(territory_name) if in_region_group(area.state, region)]
    if not owned:
        return None

    for strategy in strategies or default_strategies():
        geometry = strategy.compose(owned, boundary_source, region)
        if geometry is not None:
            logger.debug(f"Outline for {territory_name} built by {strategy.name}")
            return geometry
    return None


def composite_boundaries(
    territories: Iterable[Territory],
    postal_areas: PostalAreaStore,
    boundary_source: Optional[BoundarySource] = None,
    region_filter: Optional[str] = None,
) -> dict[str, BaseGeometry]:
    """Outline every territory that has something to render."""

    strategies = default_strategies()
    outlines: dict[str, BaseGeometry] = {}
    for territory in territories:
        geometry = composite_boundary(
            territory.name,
            postal_areas,
            boundary_source,
            region_filter,
            strategies=strategies,
        )
        if geometry is not None:
            outlines[territory.name] = geometry
    return outlines
