"""Selection of postal areas and companies inside a drawn polygon."""

from __future__ import annotations

from typing import Iterable, Sequence

from ..models.domain import Company, Coordinate, PostalArea
from .geospatial import covers_point, prepare_ring


def postal_areas_in_polygon(ring: Sequence[Coordinate], postal_areas: Iterable[PostalArea]) -> list[str]:
    """Return ids of postal areas whose centroid falls inside the ring."""

    prepared = prepare_ring(ring)
    if prepared is None:
        return []
    return [
        area.id
        for area in postal_areas
        if covers_point(prepared, area.latitude, area.longitude)
    ]


def companies_in_polygon(ring: Sequence[Coordinate], companies: Iterable[Company]) -> list[str]:
    """Return ids of located companies inside the ring."""

    prepared = prepare_ring(ring)
    if prepared is None:
        return []
    found: list[str] = []
    for company in companies:
        if not company.has_coordinates:
            continue
        if covers_point(prepared, company.latitude, company.longitude):
            found.append(company.id)
    return found


def select_companies(company_ids: Iterable[str], companies: Iterable[Company]) -> list[Company]:
    wanted = set(company_ids)
    return [company for company in companies if company.id in wanted]
