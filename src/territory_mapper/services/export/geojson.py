"""GeoJSON export utilities for territory outlines."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping

from shapely.geometry import mapping
from shapely.geometry.base import BaseGeometry

from ...models.domain import Territory


def outline_to_feature(
    territory: Territory,
    geometry: BaseGeometry,
    *,
    postal_area_count: int = 0,
) -> Dict[str, Any]:
    """Convert a territory outline to a GeoJSON feature.

    Args:
        territory: Territory the outline belongs to
        geometry: Polygon or MultiPolygon in (lon, lat) order
        postal_area_count: Number of postal areas behind the outline

    Returns:
        GeoJSON Feature with styling hints in its properties
    """
    centroid = geometry.centroid
    return {
        "type": "Feature",
        "id": territory.id,
        "geometry": mapping(geometry),
        "properties": {
            "territory": territory.name,
            "color": territory.color,
            "postalAreaCount": postal_area_count,
            "labelPoint": [centroid.y, centroid.x],
        },
    }


def outlines_to_feature_collection(
    outlines: Mapping[str, BaseGeometry],
    territories: List[Territory],
    counts: Mapping[str, int] | None = None,
) -> Dict[str, Any]:
    """Bundle territory outlines into a FeatureCollection, in registry order."""
    counts = counts or {}
    features: List[Dict[str, Any]] = []
    for territory in territories:
        geometry = outlines.get(territory.name)
        if geometry is None or geometry.is_empty:
            continue
        features.append(
            outline_to_feature(
                territory,
                geometry,
                postal_area_count=counts.get(territory.name, 0),
            )
        )
    return {"type": "FeatureCollection", "features": features}
