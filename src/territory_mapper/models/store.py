"""Owned collection of postal areas keyed by id."""

from __future__ import annotations

from typing import Iterable, Iterator, Optional

from .domain import PostalArea, normalize_region


class PostalAreaStore:
    """Arena of postal areas.

    Ownership changes go through :meth:`set_territory` and the bulk helpers
    below; they are called by the assignment engine, the territory registry
    and state import only.
    """

    def __init__(self, postal_areas: Iterable[PostalArea] = ()) -> None:
        self._areas: dict[str, PostalArea] = {}
        for area in postal_areas:
            self._areas[area.id] = area

    def __len__(self) -> int:
        return len(self._areas)

    def __iter__(self) -> Iterator[PostalArea]:
        return iter(self._areas.values())

    def __contains__(self, postal_area_id: object) -> bool:
        return postal_area_id in self._areas

    def get(self, postal_area_id: str) -> Optional[PostalArea]:
        return self._areas.get(postal_area_id)

    def in_region(self, region: Optional[str] = None) -> Iterator[PostalArea]:
        normalized = normalize_region(region)
        for area in self._areas.values():
            if normalized is None or area.state == normalized:
                yield area

    def owned_by(self, territory_name: str) -> list[PostalArea]:
        return [area for area in self._areas.values() if area.territory == territory_name]

    def territory_of(self, postal_area_id: str) -> Optional[str]:
        area = self._areas.get(postal_area_id)
        return area.territory if area else None

    def assignments(self) -> dict[str, str]:
        """Return postal area id -> territory name for every owned area."""

        return {area_id: area.territory for area_id, area in self._areas.items() if area.territory}

    def set_territory(self, postal_area_id: str, territory_name: Optional[str]) -> Optional[str]:
        """Set the owner of one postal area and return the previous owner."""

        area = self._areas[postal_area_id]
        previous = area.territory
        area.territory = territory_name or None
        return previous

    def rename_territory(self, old_name: str, new_name: str) -> int:
        count = 0
        for area in self._areas.values():
            if area.territory == old_name:
                area.territory = new_name
                count += 1
        return count

    def clear_territory(self, territory_name: str, region: Optional[str] = None) -> int:
        count = 0
        for area in self.in_region(region):
            if area.territory == territory_name:
                area.territory = None
                count += 1
        return count

    def clear_all(self) -> None:
        for area in self._areas.values():
            area.territory = None
