import re

import pytest

from territory_mapper.models.domain import PostalArea, Territory
from territory_mapper.models.store import PostalAreaStore
from territory_mapper.services.territories import (
    COLOR_PALETTE,
    UNASSIGNED_COLOR,
    DuplicateTerritoryError,
    TerritoryNotFoundError,
    TerritoryRegistry,
    TerritoryValidationError,
)
from territory_mapper.services.territories.registry import generate_territory_id


def _area(postcode: str, state: str, territory: str | None = None) -> PostalArea:
    return PostalArea(postcode=postcode, state=state, latitude=-33.8, longitude=151.2, territory=territory)


def _registry(*areas: PostalArea) -> tuple[TerritoryRegistry, PostalAreaStore]:
    store = PostalAreaStore(areas)
    return TerritoryRegistry(store), store


def test_create_trims_name_and_picks_palette_colour() -> None:
    registry, _ = _registry()

    first = registry.create("  Sydney Metro  ")
    second = registry.create("Regional NSW", "#000000")
    third = registry.create("Hunter")

    assert first.name == "Sydney Metro"
    assert first.color == COLOR_PALETTE[0]
    assert second.color == "#000000"
    assert third.color == COLOR_PALETTE[1]
    assert len(registry) == 3
    assert registry.get(first.id) is first


def test_create_rejects_empty_name() -> None:
    registry, _ = _registry()

    with pytest.raises(TerritoryValidationError, match="cannot be empty"):
        registry.create("   ")
    assert len(registry) == 0


def test_create_rejects_duplicate_name_ignoring_case() -> None:
    registry, _ = _registry()
    registry.create("East")

    with pytest.raises(DuplicateTerritoryError, match='Territory "east" already exists'):
        registry.create("east")
    assert registry.names() == ["East"]


def test_rename_cascades_to_postal_areas() -> None:
    registry, store = _registry(_area("2000", "NSW", "East"), _area("2010", "NSW", "East"), _area("3000", "VIC"))
    east = Territory(id="t_1", name="East", color="#3B82F6")
    registry.replace_all([east])

    registry.update("t_1", name="Eastern Suburbs")

    assert [area.id for area in store.owned_by("Eastern Suburbs")] == ["2000-NSW", "2010-NSW"]
    assert store.owned_by("East") == []
    assert registry.color_for("Eastern Suburbs") == "#3B82F6"


def test_rename_to_existing_name_leaves_everything_untouched() -> None:
    registry, store = _registry(_area("2000", "NSW", "East"))
    registry.replace_all([Territory("t_1", "East", "#111111"), Territory("t_2", "West", "#222222")])

    with pytest.raises(DuplicateTerritoryError):
        registry.update("t_1", name="WEST", color="#333333")

    assert registry.get("t_1").name == "East"
    assert registry.get("t_1").color == "#111111"
    assert store.territory_of("2000-NSW") == "East"


def test_update_can_change_case_of_own_name() -> None:
    registry, _ = _registry()
    territory = registry.create("east")

    registry.update(territory.id, name="East")

    assert registry.get(territory.id).name == "East"


def test_delete_clears_owned_postal_areas() -> None:
    registry, store = _registry(
        _area("2000", "NSW", "East"),
        _area("2010", "NSW", "East"),
        _area("2600", "ACT", "East"),
        _area("3000", "VIC", "West"),
    )
    registry.replace_all([Territory("t_1", "East", "#111111"), Territory("t_2", "West", "#222222")])

    cleared = registry.delete("t_1")

    assert cleared == 3
    assert "t_1" not in registry
    assert store.owned_by("East") == []
    assert store.territory_of("3000-VIC") == "West"


def test_delete_unknown_territory_raises() -> None:
    registry, _ = _registry()

    with pytest.raises(TerritoryNotFoundError, match="Territory 'missing' not found"):
        registry.delete("missing")


def test_clear_with_region_keeps_other_states() -> None:
    registry, store = _registry(_area("2000", "NSW", "East"), _area("2600", "ACT", "East"))
    registry.replace_all([Territory("t_1", "East", "#111111")])

    cleared = registry.clear("t_1", region_filter="ACT")

    assert cleared == 1
    assert store.territory_of("2000-NSW") == "East"
    assert store.territory_of("2600-ACT") is None
    assert "t_1" in registry


def test_get_by_name_and_colours() -> None:
    registry, _ = _registry()
    territory = registry.create("North Shore", "#22C55E")

    assert registry.get_by_name("north shore") is territory
    assert registry.get_by_name("South") is None
    assert registry.color_for(None) == UNASSIGNED_COLOR
    assert registry.color_for("Unknown") == UNASSIGNED_COLOR


def test_generated_ids_are_unique_and_prefixed() -> None:
    ids = {generate_territory_id() for _ in range(50)}

    assert len(ids) == 50
    assert all(re.fullmatch(r"t_\d+_[a-z0-9]{7}", territory_id) for territory_id in ids)
