"""Tests for the geographic and screen value types."""

import numpy as np
import pytest

from common.types import (
    GeoCoordinate,
    GeoLinearRing,
    GeoLineString,
    LatLonAltBox,
    RepeatedScreenPosition,
    ScreenPolygon,
    ScreenRect,
    TessellationFlags,
)
from common.units import Q_, AngleUnit

# ---------------------------------------------------------------------------
# GeoCoordinate
# ---------------------------------------------------------------------------


class TestGeoCoordinate:
    def test_degrees_round_trip(self) -> None:
        coord = GeoCoordinate.from_degrees(-80.1918, 25.7617, 12.0)
        lon, lat = coord.to_degrees()
        assert lon == pytest.approx(-80.1918)
        assert lat == pytest.approx(25.7617)
        assert coord.altitude == 12.0

    def test_longitude_wraps_into_range(self) -> None:
        lon, _ = GeoCoordinate.from_degrees(190.0, 0.0).to_degrees()
        assert lon == pytest.approx(-170.0)
        assert GeoCoordinate(np.pi, 0.0).longitude == pytest.approx(np.pi)
        assert GeoCoordinate(-np.pi, 0.0).longitude == pytest.approx(np.pi)

    def test_latitude_folds_over_the_pole(self) -> None:
        lon, lat = GeoCoordinate.from_degrees(10.0, 100.0).to_degrees()
        assert lat == pytest.approx(80.0)
        assert lon == pytest.approx(-170.0)

    def test_non_finite_rejected(self) -> None:
        with pytest.raises(ValueError):
            GeoCoordinate(float("nan"), 0.0)
        with pytest.raises(ValueError):
            GeoCoordinate(0.0, 0.0, float("inf"))

    def test_from_unit_accepts_quantities(self) -> None:
        coord = GeoCoordinate.from_unit(Q_(90, "degree"), Q_(30, "arcminute"))
        assert coord.longitude == pytest.approx(np.pi / 2)
        assert coord.latitude_in(AngleUnit.DEGREE) == pytest.approx(0.5)

    def test_unit_vector_frame(self) -> None:
        assert np.allclose(GeoCoordinate(0.0, 0.0).unit_vector(), [0.0, 0.0, 1.0])
        assert np.allclose(GeoCoordinate(np.pi / 2, 0.0).unit_vector(), [1.0, 0.0, 0.0])
        assert np.allclose(GeoCoordinate(0.0, np.pi / 2).unit_vector(), [0.0, 1.0, 0.0])

    def test_with_altitude_keeps_position(self) -> None:
        coord = GeoCoordinate(0.5, 0.25, 100.0).with_altitude(0.0)
        assert coord.longitude == pytest.approx(0.5)
        assert coord.latitude == pytest.approx(0.25)
        assert coord.altitude == 0.0


# ---------------------------------------------------------------------------
# Line strings
# ---------------------------------------------------------------------------


class TestLineStrings:
    def test_open_line_string_segments(self) -> None:
        line = GeoLineString.from_degrees([(0, 0), (10, 0), (10, 10)])
        assert len(list(line.segments())) == 2
        assert line.tessellate
        assert line.flags == TessellationFlags.FOLLOW_GREAT_CIRCLE

    def test_ring_adds_closing_segment(self) -> None:
        ring = GeoLinearRing.from_degrees([(0, 0), (10, 0), (10, 10)])
        segments = list(ring.segments())
        assert len(segments) == 3
        assert segments[-1] == (ring[2], ring[0])

    def test_explicitly_closed_ring_is_not_closed_twice(self) -> None:
        ring = GeoLinearRing.from_degrees([(0, 0), (10, 0), (10, 10), (0, 0)])
        assert len(list(ring.segments())) == 3

    def test_bounding_box_of_line_string(self) -> None:
        box = GeoLineString.from_degrees([(170, -5), (-170, 5)]).lat_lon_alt_box()
        assert box.crosses_date_line
        assert np.degrees(box.width) == pytest.approx(20.0)


# ---------------------------------------------------------------------------
# LatLonAltBox
# ---------------------------------------------------------------------------


class TestLatLonAltBox:
    def test_empty_box_contains_nothing(self) -> None:
        assert not LatLonAltBox.empty_box().contains(GeoCoordinate(0.0, 0.0))

    def test_from_coordinates_picks_smallest_interval(self) -> None:
        coords = [GeoCoordinate.from_degrees(lon, 0) for lon in (-20, 0, 30)]
        box = LatLonAltBox.from_coordinates(coords)
        assert np.degrees(box.west) == pytest.approx(-20.0)
        assert np.degrees(box.east) == pytest.approx(30.0)
        assert not box.crosses_date_line

    def test_contains_across_date_line(self) -> None:
        box = LatLonAltBox(np.radians(170), np.radians(-170), -0.1, 0.1)
        assert box.contains(GeoCoordinate.from_degrees(180, 0))
        assert box.contains(GeoCoordinate.from_degrees(-175, 0))
        assert not box.contains(GeoCoordinate.from_degrees(0, 0))

    def test_contains_with_tolerance(self) -> None:
        box = LatLonAltBox(0.0, 0.5, 0.0, 0.5)
        outside = GeoCoordinate(-1e-8, 0.25)
        assert not box.contains(outside)
        assert box.contains(outside, tolerance=1e-6)

    def test_padding_saturates_to_global(self) -> None:
        box = LatLonAltBox(-3.0, 3.0, 1.4, 1.5).padded(0.2, 0.2)
        assert box.is_global_longitude
        assert box.north == pytest.approx(np.pi / 2)

    def test_union_prefers_shorter_span(self) -> None:
        west = LatLonAltBox(np.radians(160), np.radians(170), 0.0, 0.1)
        east = LatLonAltBox(np.radians(-170), np.radians(-160), -0.1, 0.0)
        merged = west.union(east)
        assert merged.crosses_date_line
        assert np.degrees(merged.width) == pytest.approx(40.0)
        assert merged.south == pytest.approx(-0.1)
        assert merged.north == pytest.approx(0.1)

    def test_union_with_empty(self) -> None:
        box = LatLonAltBox(0.0, 0.1, 0.0, 0.1)
        assert box.union(LatLonAltBox.empty_box()) == box
        assert LatLonAltBox.empty_box().union(box) == box

    def test_center(self) -> None:
        center = LatLonAltBox(np.radians(170), np.radians(-170), -0.2, 0.4).center()
        assert abs(center.longitude) == pytest.approx(np.pi)
        assert center.latitude == pytest.approx(0.1)


# ---------------------------------------------------------------------------
# Screen types
# ---------------------------------------------------------------------------


class TestScreenTypes:
    def test_polygon_accumulates_points(self) -> None:
        polygon = ScreenPolygon()
        assert not polygon
        polygon.append((1, 2))
        polygon.extend([(3.0, 4.0), (5.0, 6.0)])
        assert len(polygon) == 3
        assert polygon.first == (1.0, 2.0)
        assert polygon.last == (5.0, 6.0)
        assert polygon.as_array().shape == (3, 2)

    def test_empty_polygon_array_shape(self) -> None:
        assert ScreenPolygon().as_array().shape == (0, 2)

    def test_rect_intersection(self) -> None:
        a = ScreenRect(0, 0, 100, 100)
        b = ScreenRect(50, 80, 100, 100)
        assert a.intersected(b) == ScreenRect(50, 80, 50, 20)
        assert a.intersected(ScreenRect(200, 200, 10, 10)).is_empty

    def test_repeated_position_count(self) -> None:
        repeated = RepeatedScreenPosition([0.0, 400.0], 300.0)
        assert repeated.repeat_count == 2
        assert repeated.visible
        assert not RepeatedScreenPosition([], 300.0, True).visible
