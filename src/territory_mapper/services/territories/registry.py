"""Operator-managed registry of named territories."""

from __future__ import annotations

import secrets
import string
import time
from typing import Iterable, Iterator, Optional

from ...models.domain import Territory
from ...models.store import PostalAreaStore

COLOR_PALETTE: tuple[str, ...] = (
    "#3B82F6",  # Blue
    "#22C55E",  # Green
    "#F59E0B",  # Orange
    "#EF4444",  # Red
    "#8B5CF6",  # Purple
    "#EC4899",  # Pink
    "#14B8A6",  # Teal
    "#F97316",  # Dark Orange
    "#6366F1",  # Indigo
    "#84CC16",  # Lime
)
UNASSIGNED_COLOR = "#9CA3AF"

_ID_ALPHABET = string.ascii_lowercase + string.digits


class TerritoryError(ValueError):
    """Base class for registry validation failures."""


class TerritoryValidationError(TerritoryError):
    pass


class DuplicateTerritoryError(TerritoryError):
    pass


class TerritoryNotFoundError(TerritoryError):
    pass


def generate_territory_id() -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(7))
    return f"t_{int(time.time() * 1000)}_{suffix}"


class TerritoryRegistry:
    """Territories keyed by id, bound to the postal areas they own.

    Every operation validates before it mutates, so a rejected call leaves
    both the registry and the postal areas untouched.
    """

    def __init__(self, postal_areas: PostalAreaStore, territories: Iterable[Territory] = ()) -> None:
        self._postal_areas = postal_areas
        self._territories: dict[str, Territory] = {}
        for territory in territories:
            self._territories[territory.id] = territory

    def __iter__(self) -> Iterator[Territory]:
        return iter(self._territories.values())

    def __len__(self) -> int:
        return len(self._territories)

    def __contains__(self, territory_id: object) -> bool:
        return territory_id in self._territories

    def get(self, territory_id: str) -> Optional[Territory]:
        return self._territories.get(territory_id)

    def get_by_name(self, name: str) -> Optional[Territory]:
        normalized = name.strip().lower()
        for territory in self._territories.values():
            if territory.name.lower() == normalized:
                return territory
        return None

    def names(self) -> list[str]:
        return [territory.name for territory in self._territories.values()]

    def color_for(self, name: Optional[str]) -> str:
        if not name:
            return UNASSIGNED_COLOR
        for territory in self._territories.values():
            if territory.name == name:
                return territory.color
        return UNASSIGNED_COLOR

    def next_color(self) -> str:
        used = {territory.color for territory in self._territories.values()}
        for color in COLOR_PALETTE:
            if color not in used:
                return color
        return COLOR_PALETTE[len(self._territories) % len(COLOR_PALETTE)]

    def create(self, name: str, color: Optional[str] = None) -> Territory:
        trimmed = self._validate_name(name)
        territory = Territory(id=generate_territory_id(), name=trimmed, color=color or self.next_color())
        self._territories[territory.id] = territory
        return territory

    def update(self, territory_id: str, *, name: Optional[str] = None, color: Optional[str] = None) -> Territory:
        """Rename and/or recolour a territory; a rename follows through to its postal areas."""

        territory = self._require(territory_id)
        old_name = territory.name
        new_name = old_name
        if name is not None and name.strip():
            new_name = self._validate_name(name, exclude_id=territory_id)

        territory.name = new_name
        if color:
            territory.color = color
        if new_name != old_name:
            self._postal_areas.rename_territory(old_name, new_name)
        return territory

    def delete(self, territory_id: str) -> int:
        """Remove a territory and unassign its postal areas; returns how many were cleared."""

        territory = self._require(territory_id)
        cleared = self._postal_areas.clear_territory(territory.name)
        del self._territories[territory_id]
        return cleared

    def clear(self, territory_id: str, region_filter: Optional[str] = None) -> int:
        """Unassign a territory's postal areas (optionally within one region) but keep it."""

        territory = self._require(territory_id)
        return self._postal_areas.clear_territory(territory.name, region_filter)

    def replace_all(self, territories: Iterable[Territory]) -> None:
        self._territories = {territory.id: territory for territory in territories}

    def _require(self, territory_id: str) -> Territory:
        territory = self._territories.get(territory_id)
        if territory is None:
            raise TerritoryNotFoundError(f"Territory '{territory_id}' not found")
        return territory

    def _validate_name(self, name: str, exclude_id: Optional[str] = None) -> str:
        trimmed = (name or "").strip()
        if not trimmed:
            raise TerritoryValidationError("Territory name cannot be empty")
        for territory in self._territories.values():
            if territory.id == exclude_id:
                continue
            if territory.name.lower() == trimmed.lower():
                raise DuplicateTerritoryError(f'Territory "{trimmed}" already exists')
        return trimmed
