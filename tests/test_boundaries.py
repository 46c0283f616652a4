import logging

import pytest
from shapely.errors import GEOSException
from shapely.geometry import Point, Polygon, box
from shapely.geometry.base import BaseGeometry

from territory_mapper.models.domain import PostalArea, Territory
from territory_mapper.models.store import PostalAreaStore
from territory_mapper.services.boundaries import (
    BoundarySource,
    BoundaryUnionStrategy,
    ConvexHullStrategy,
    composite_boundaries,
    composite_boundary,
    in_region_group,
)


def _area(postcode: str, state: str, lat: float, lon: float, territory: str | None = "East") -> PostalArea:
    return PostalArea(postcode=postcode, state=state, latitude=lat, longitude=lon, territory=territory)


def _source(region: str | None = "NSW", **shapes: Polygon) -> BoundarySource:
    return BoundarySource(features={key.lstrip("p"): shape for key, shape in shapes.items()}, loaded_region=region)


def test_no_owned_postal_areas_yields_nothing() -> None:
    store = PostalAreaStore([_area("2000", "NSW", -33.87, 151.21, territory=None)])

    assert composite_boundary("East", store, _source(p2000=box(151.0, -34.0, 151.5, -33.5))) is None
    assert composite_boundary("East", store) is None


def test_single_boundary_is_returned_unchanged() -> None:
    shape = box(151.0, -34.0, 151.5, -33.5)
    store = PostalAreaStore([_area("2000", "NSW", -33.87, 151.21)])

    assert composite_boundary("East", store, _source(p2000=shape)) is shape


def test_adjacent_boundaries_are_merged() -> None:
    store = PostalAreaStore([_area("2000", "NSW", -33.87, 151.21), _area("2010", "NSW", -33.88, 151.22)])
    source = _source(p2000=box(151.0, -34.0, 151.5, -33.5), p2010=box(151.5, -34.0, 152.0, -33.5))

    merged = composite_boundary("East", store, source)

    assert merged.geom_type == "Polygon"
    assert merged.area == pytest.approx(0.5)
    assert merged.bounds == (151.0, -34.0, 152.0, -33.5)


def test_disjoint_boundaries_form_a_multipolygon() -> None:
    store = PostalAreaStore([_area("2000", "NSW", -33.87, 151.21), _area("2500", "NSW", -34.42, 150.89)])
    source = _source(p2000=box(151.0, -34.0, 151.5, -33.5), p2500=box(150.5, -35.0, 150.9, -34.6))

    assert composite_boundary("East", store, source).geom_type == "MultiPolygon"


def test_loaded_boundaries_without_matching_shapes_render_nothing() -> None:
    store = PostalAreaStore(
        [
            _area("2000", "NSW", -33.87, 151.21),
            _area("2010", "NSW", -33.88, 151.22),
            _area("2020", "NSW", -33.94, 151.17),
        ]
    )

    assert composite_boundary("East", store, _source(p9999=box(0, 0, 1, 1))) is None


def test_convex_hull_fallback_when_no_boundaries_loaded() -> None:
    store = PostalAreaStore(
        [
            _area("2000", "NSW", -33.87, 151.21),
            _area("2100", "NSW", -33.75, 151.29),
            _area("2150", "NSW", -33.81, 151.00),
        ]
    )

    outline = composite_boundary("East", store)

    assert outline is not None
    assert outline.geom_type == "Polygon"
    for area in store:
        assert outline.contains(Point(area.longitude, area.latitude))


def test_convex_hull_needs_three_postal_areas() -> None:
    store = PostalAreaStore([_area("2000", "NSW", -33.87, 151.21), _area("2100", "NSW", -33.75, 151.29)])

    assert composite_boundary("East", store) is None
    assert composite_boundary("East", store, BoundarySource()) is None


def test_convex_hull_buffer_is_applied() -> None:
    areas = [
        _area("2000", "NSW", -33.87, 151.21),
        _area("2100", "NSW", -33.75, 151.29),
        _area("2150", "NSW", -33.81, 151.00),
    ]
    bare = ConvexHullStrategy(buffer_km=0).compose(areas, None, None)
    buffered = ConvexHullStrategy(buffer_km=2).compose(areas, None, None)

    assert buffered.area > bare.area
    assert buffered.contains(bare)


def test_region_filter_limits_contributing_postal_areas() -> None:
    store = PostalAreaStore(
        [
            _area("2000", "NSW", -33.87, 151.21),
            _area("2600", "ACT", -35.30, 149.13),
            _area("3000", "VIC", -37.81, 144.96),
        ]
    )
    source = _source(
        p2000=box(151.0, -34.0, 151.5, -33.5),
        p2600=box(149.0, -35.5, 149.3, -35.1),
        p3000=box(144.8, -38.0, 145.1, -37.6),
    )

    outline = composite_boundary("East", store, source, region_filter="NSW")

    # NSW and ACT render together, VIC is left out
    assert outline.bounds == (149.0, -35.5, 151.5, -33.5)


def test_boundary_source_for_another_state_falls_back_to_hull() -> None:
    store = PostalAreaStore(
        [
            _area("3000", "VIC", -37.81, 144.96),
            _area("3050", "VIC", -37.80, 144.95),
            _area("3121", "VIC", -37.82, 145.00),
        ]
    )
    source = _source(p3000=box(144.8, -38.0, 145.1, -37.6))

    assert BoundaryUnionStrategy().compose(list(store), source, "VIC") is None
    assert composite_boundary("East", store, source, region_filter="VIC") is not None


def test_in_region_group_treats_nsw_and_act_as_one() -> None:
    assert in_region_group("ACT", "NSW")
    assert in_region_group("NSW", "act")
    assert not in_region_group("VIC", "NSW")
    assert in_region_group("VIC", None)
    assert in_region_group("VIC", "ALL")


def test_composite_boundaries_skips_empty_territories() -> None:
    store = PostalAreaStore([_area("2000", "NSW", -33.87, 151.21)])
    source = _source(p2000=box(151.0, -34.0, 151.5, -33.5))
    territories = [Territory("t_1", "East", "#111111"), Territory("t_2", "West", "#222222")]

    outlines = composite_boundaries(territories, store, source)

    assert list(outlines) == ["East"]


def test_boundary_that_fails_to_merge_is_skipped(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    left = box(150.5, -34.0, 151.0, -33.5)
    broken = box(151.5, -34.0, 152.0, -33.5)
    middle = box(151.0, -34.0, 151.5, -33.5)
    store = PostalAreaStore(
        [
            _area("2000", "NSW", -33.87, 151.21),
            _area("2010", "NSW", -33.88, 151.22),
            _area("2150", "NSW", -33.81, 151.00),
        ]
    )
    source = _source(p2000=left, p2010=broken, p2150=middle)
    original_union = BaseGeometry.union

    def union_rejecting_broken(self, other, grid_size=None):
        if other is broken:
            raise GEOSException("TopologyException: side location conflict")
        return original_union(self, other, grid_size=grid_size)

    monkeypatch.setattr(BaseGeometry, "union", union_rejecting_broken)
    caplog.set_level(logging.DEBUG, logger="territory_mapper.services.boundaries.compositor")

    merged = composite_boundary("East", store, source)

    assert merged.geom_type == "Polygon"
    assert merged.area == pytest.approx(0.5)
    assert merged.bounds == (150.5, -34.0, 151.5, -33.5)
    assert "boundary_union: skipping boundary that failed to merge" in caplog.text
    assert "Outline for East built by boundary_union" in caplog.text
