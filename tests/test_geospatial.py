import pytest

from territory_mapper.services.geospatial import (
    KM_PER_DEGREE,
    close_ring,
    covers_point,
    km_to_degrees,
    point_in_polygon,
    prepare_ring,
    ring_to_polygon,
)

SYDNEY_BOX = [(-34.0, 151.0), (-34.0, 152.0), (-33.0, 152.0), (-33.0, 151.0)]


def test_point_inside_ring() -> None:
    assert point_in_polygon((-33.5, 151.5), SYDNEY_BOX)


def test_point_outside_ring() -> None:
    assert not point_in_polygon((-35.0, 151.5), SYDNEY_BOX)
    assert not point_in_polygon((-33.5, 150.5), SYDNEY_BOX)


def test_points_on_edge_and_vertex_count_as_inside() -> None:
    assert point_in_polygon((-34.0, 151.5), SYDNEY_BOX)
    assert point_in_polygon((-33.0, 152.0), SYDNEY_BOX)


def test_latitude_and_longitude_are_not_swapped() -> None:
    # a tall, narrow ring: 10 degrees of latitude, 1 degree of longitude
    ring = [(-40.0, 150.0), (-40.0, 151.0), (-30.0, 151.0), (-30.0, 150.0)]

    assert point_in_polygon((-35.0, 150.5), ring)
    assert not point_in_polygon((-35.0, 155.0), ring)


def test_degenerate_rings_contain_nothing() -> None:
    assert ring_to_polygon([]) is None
    assert ring_to_polygon([(-33.0, 151.0), (-34.0, 152.0)]) is None
    assert ring_to_polygon([(0.0, 0.0), (0.0, 1.0), (0.0, 2.0)]) is None
    assert not point_in_polygon((0.0, 1.0), [(0.0, 0.0), (0.0, 1.0), (0.0, 2.0)])
    assert not point_in_polygon((-33.0, 151.0), [(-33.0, 151.0), (-33.0, 151.0), (-33.0, 151.0)])


def test_self_intersecting_ring_covers_both_lobes() -> None:
    # a symmetric bow-tie: the lobes cancel out in the signed area
    bow_tie = [(-34.0, 150.0), (-33.0, 152.0), (-34.0, 152.0), (-33.0, 150.0)]

    assert ring_to_polygon(bow_tie) is not None
    assert point_in_polygon((-33.5, 150.2), bow_tie)
    assert point_in_polygon((-33.5, 151.8), bow_tie)
    assert not point_in_polygon((-33.1, 151.0), bow_tie)


def test_close_ring_repeats_first_vertex_once() -> None:
    closed = close_ring(SYDNEY_BOX)

    assert closed[0] == closed[-1]
    assert len(closed) == len(SYDNEY_BOX) + 1
    assert close_ring(closed) == closed


def test_ring_to_polygon_uses_lon_lat_axis_order() -> None:
    polygon = ring_to_polygon(SYDNEY_BOX)

    assert polygon is not None
    min_x, min_y, max_x, max_y = polygon.bounds
    assert (min_x, max_x) == (151.0, 152.0)
    assert (min_y, max_y) == (-34.0, -33.0)


def test_covers_point_without_prepared_geometry_is_false() -> None:
    assert covers_point(None, -33.5, 151.5) is False
    prepared = prepare_ring(SYDNEY_BOX)
    assert covers_point(prepared, -33.5, 151.5) is True


def test_km_to_degrees() -> None:
    assert km_to_degrees(KM_PER_DEGREE) == pytest.approx(1.0)
    assert km_to_degrees(2.0) == pytest.approx(0.018, abs=1e-3)
    assert km_to_degrees(0.0) == 0.0
