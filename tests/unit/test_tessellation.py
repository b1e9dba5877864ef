"""Tests for adaptive line segment tessellation."""

from typing import List

import numpy as np
import pytest

from common.logging_config import debug_logging
from common.types import GeoCoordinate, ScreenPolygon, TessellationFlags
from projections import SphericalProjection
from tessellation import TessellationConfig, segment_arc, segment_interpolator, tessellate_line_segment
from validation import ProjectionConsistencyChecker

GREAT_CIRCLE = TessellationFlags.FOLLOW_GREAT_CIRCLE


def deg(lon: float, lat: float, alt: float = 0.0) -> GeoCoordinate:
    return GeoCoordinate.from_degrees(lon, lat, alt)


def max_step(start, fragments: List[ScreenPolygon]) -> float:
    """Largest Manhattan distance between neighbouring points of fragment 0."""
    points = [start] + list(fragments[0].points)
    return max(abs(x1 - x0) + abs(y1 - y0) for (x0, y0), (x1, y1) in zip(points, points[1:]))


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class TestTessellationConfig:
    def test_defaults(self) -> None:
        config = TessellationConfig()
        assert config.precision_px == 10.0
        assert config.max_nodes == 200

    @pytest.mark.parametrize("kwargs", [
        {"precision_px": 0.0},
        {"precision_px": -1.0},
        {"max_nodes": -1},
        {"horizon_iterations": 0},
    ])
    def test_invalid(self, kwargs) -> None:
        with pytest.raises(ValueError):
            TessellationConfig(**kwargs)


# ---------------------------------------------------------------------------
# Interpolation
# ---------------------------------------------------------------------------


class TestInterpolation:
    def test_great_circle_midpoint_bulges_poleward(self) -> None:
        mid = segment_interpolator(deg(-60.0, 50.0), deg(60.0, 50.0), GREAT_CIRCLE)(0.5)
        assert mid.longitude == pytest.approx(0.0, abs=1e-12)
        assert np.degrees(mid.latitude) > 55.0

    def test_linear_midpoint(self) -> None:
        mid = segment_interpolator(deg(-60.0, 50.0), deg(60.0, 50.0), TessellationFlags.NONE)(0.5)
        assert mid.to_degrees() == pytest.approx((0.0, 50.0))

    def test_linear_takes_short_way_across_date_line(self) -> None:
        mid = segment_interpolator(deg(170.0, 0.0), deg(-170.0, 10.0), TessellationFlags.NONE)(0.5)
        assert abs(mid.longitude) == pytest.approx(np.pi)
        assert np.degrees(mid.latitude) == pytest.approx(5.0)

    def test_altitude_is_linear(self) -> None:
        at = segment_interpolator(deg(0.0, 0.0, 0.0), deg(10.0, 0.0, 1000.0), GREAT_CIRCLE)
        assert at(0.25).altitude == pytest.approx(250.0)

    def test_endpoints_are_exact(self) -> None:
        a, b = deg(-60.0, 50.0), deg(60.0, 50.0)
        at = segment_interpolator(a, b, GREAT_CIRCLE)
        assert at(0.0) is a
        assert at(1.0) is b

    def test_arc(self) -> None:
        a, b = deg(-60.0, 50.0), deg(60.0, 50.0)
        assert np.degrees(segment_arc(a, b, TessellationFlags.NONE)) == pytest.approx(120.0)
        assert segment_arc(a, b, GREAT_CIRCLE) < segment_arc(a, b, TessellationFlags.NONE)


# ---------------------------------------------------------------------------
# Visible segments
# ---------------------------------------------------------------------------


class TestVisibleSegment:
    def test_single_fragment_ending_at_b(self, spherical, viewport) -> None:
        a, b = deg(-30.0, -20.0), deg(40.0, 30.0)
        fragments = spherical.tessellate_line_segment(a, b, viewport)
        end = spherical.screen_position(b, viewport)
        assert len(fragments) == 1
        assert fragments[0].last == pytest.approx((end.x, end.y))

    def test_start_is_not_emitted(self, spherical, viewport) -> None:
        a, b = deg(-30.0, -20.0), deg(40.0, 30.0)
        start = spherical.screen_position(a, viewport)
        fragments = spherical.tessellate_line_segment(a, b, viewport)
        assert fragments[0].first != pytest.approx((start.x, start.y))

    def test_precision_bound(self, spherical, viewport) -> None:
        a, b = deg(-30.0, -20.0), deg(40.0, 30.0)
        start = spherical.screen_position(a, viewport)
        fragments = spherical.tessellate_line_segment(a, b, viewport)
        assert max_step((start.x, start.y), fragments) <= 10.0

    def test_finer_precision_adds_points(self, viewport) -> None:
        a, b = deg(-30.0, -20.0), deg(40.0, 30.0)
        coarse = SphericalProjection().tessellate_line_segment(a, b, viewport)
        fine = SphericalProjection(TessellationConfig(precision_px=2.0)).tessellate_line_segment(a, b, viewport)
        assert len(fine[0]) > len(coarse[0])

    def test_without_subdivision(self, spherical, viewport) -> None:
        a, b = deg(-30.0, -20.0), deg(40.0, 30.0)
        fragments = spherical.tessellate_line_segment(a, b, viewport, subdivide=False)
        end = spherical.screen_position(b, viewport)
        assert len(fragments) == 1
        assert fragments[0].points == [(end.x, end.y)]

    def test_idempotent(self, spherical, tilted_viewport) -> None:
        a, b = deg(-10.0, 20.0), deg(80.0, 60.0)
        first = spherical.tessellate_line_segment(a, b, tilted_viewport)
        second = spherical.tessellate_line_segment(a, b, tilted_viewport)
        assert [f.points for f in first] == [f.points for f in second]

    def test_great_circle_differs_from_linear(self, spherical, viewport) -> None:
        a, b = deg(-60.0, 50.0), deg(60.0, 50.0)
        great = spherical.tessellate_line_segment(a, b, viewport, GREAT_CIRCLE)
        linear = spherical.tessellate_line_segment(a, b, viewport, TessellationFlags.NONE)
        great_top = great[0].as_array()[:, 1].min()
        linear_top = linear[0].as_array()[:, 1].min()
        assert great_top < linear_top - 20.0


# ---------------------------------------------------------------------------
# Horizon handling
# ---------------------------------------------------------------------------


class TestHorizon:
    def test_disappearing_segment(self, spherical, viewport) -> None:
        fragments = spherical.tessellate_line_segment(deg(0.0, 0.0), deg(150.0, 0.0), viewport)
        assert len(fragments) == 2
        assert fragments[0].last == pytest.approx((600.0, 300.0), abs=1e-6)
        assert not fragments[1]

    def test_disappearing_without_subdivision(self, spherical, viewport) -> None:
        fragments = spherical.tessellate_line_segment(
            deg(0.0, 0.0), deg(150.0, 0.0), viewport, subdivide=False)
        assert len(fragments) == 2
        assert len(fragments[0]) == 1
        assert fragments[0].first == pytest.approx((600.0, 300.0), abs=1e-6)

    def test_reappearing_segment(self, spherical, viewport) -> None:
        fragments = spherical.tessellate_line_segment(deg(150.0, 0.0), deg(0.0, 0.0), viewport)
        assert len(fragments) == 1
        assert fragments[0].first == pytest.approx((600.0, 300.0), abs=1e-6)
        assert fragments[0].last == pytest.approx((400.0, 300.0))

    def test_fully_hidden_segment(self, spherical, viewport) -> None:
        fragments = spherical.tessellate_line_segment(deg(150.0, 0.0), deg(-150.0, 0.0), viewport)
        assert len(fragments) == 1
        assert not fragments[0]

    def test_hidden_points_are_never_emitted(self, spherical, viewport) -> None:
        fragments = spherical.tessellate_line_segment(deg(-60.0, 10.0), deg(150.0, -10.0), viewport)
        for fragment in fragments:
            for x, y in fragment:
                assert np.hypot(x - 400.0, y - 300.0) <= 200.0 + 1e-6


# ---------------------------------------------------------------------------
# Seams, ground clamping, limits
# ---------------------------------------------------------------------------


class TestSeam:
    def test_date_line_split(self, equirect, viewport) -> None:
        fragments = equirect.tessellate_line_segment(deg(170.0, 0.0), deg(-170.0, 0.0), viewport)
        assert len(fragments) == 2
        assert fragments[0].last == pytest.approx((800.0, 300.0))
        assert fragments[1].first == pytest.approx((0.0, 300.0))

    def test_linear_path_crosses_date_line(self, equirect, viewport) -> None:
        fragments = equirect.tessellate_line_segment(deg(-170.0, 0.0), deg(170.0, 10.0), viewport,
                                                     TessellationFlags.NONE)
        assert len(fragments) == 2

    @pytest.mark.parametrize("subdivide", [False, True])
    def test_end_on_seam_is_not_repeated(self, equirect, viewport, subdivide: bool) -> None:
        fragments = equirect.tessellate_line_segment(deg(-170.0, 10.0), deg(180.0, 20.0), viewport,
                                                     TessellationFlags.NONE, subdivide=subdivide)
        assert len(fragments) == 2
        assert fragments[0].last[0] == pytest.approx(0.0)
        assert len(fragments[1]) == 1
        assert fragments[1].first[0] == pytest.approx(800.0)
        for fragment in fragments:
            points = fragment.as_array()
            assert np.all(np.abs(np.diff(points, axis=0)).sum(axis=1) > 1e-9)


class TestClampToGround:
    def test_ground_points_added(self, spherical, viewport) -> None:
        a, b = deg(0.0, 0.0, 1_000_000.0), deg(10.0, 0.0, 1_000_000.0)
        flags = GREAT_CIRCLE | TessellationFlags.CLAMP_TO_GROUND
        fragments = spherical.tessellate_line_segment(a, b, viewport, flags)
        ground_a = spherical.screen_position(a.with_altitude(0.0), viewport)
        ground_b = spherical.screen_position(b.with_altitude(0.0), viewport)
        elevated_b = spherical.screen_position(b, viewport)
        assert len(fragments) == 1
        assert fragments[0].first == pytest.approx((ground_a.x, ground_a.y))
        assert fragments[0].last == pytest.approx((ground_b.x, ground_b.y))
        assert fragments[0].points[-2] == pytest.approx((elevated_b.x, elevated_b.y))

    def test_without_flag(self, spherical, viewport) -> None:
        a, b = deg(0.0, 0.0, 1_000_000.0), deg(10.0, 0.0, 1_000_000.0)
        fragments = spherical.tessellate_line_segment(a, b, viewport)
        elevated_b = spherical.screen_position(b, viewport)
        assert fragments[0].last == pytest.approx((elevated_b.x, elevated_b.y))


class TestLimits:
    def test_node_cap(self, viewport) -> None:
        projection = SphericalProjection(TessellationConfig(precision_px=0.01, max_nodes=5))
        fragments = projection.tessellate_line_segment(deg(-30.0, -20.0), deg(40.0, 30.0), viewport)
        assert len(fragments[0]) <= 6

    def test_node_cap_is_accepted_by_bound_check(self, viewport) -> None:
        projection = SphericalProjection(TessellationConfig(precision_px=0.01, max_nodes=5))
        checker = ProjectionConsistencyChecker(projection, log_violations=False)
        result = checker.check_tessellation_bound(viewport, deg(-30.0, -20.0), deg(40.0, 30.0))
        assert result.passed
        assert result.details['node_cap_reached']

    def test_node_cap_is_logged(self, viewport, caplog) -> None:
        projection = SphericalProjection(TessellationConfig(precision_px=0.01, max_nodes=5))
        with debug_logging("tessellation.engine"):
            projection.tessellate_line_segment(deg(-30.0, -20.0), deg(40.0, 30.0), viewport)
        assert any("node cap" in record.getMessage() for record in caplog.records)

    def test_degenerate_viewport(self, spherical, degenerate_viewport) -> None:
        assert spherical.tessellate_line_segment(deg(0.0, 0.0), deg(10.0, 0.0), degenerate_viewport) == []

    def test_module_function_matches_method(self, spherical, viewport) -> None:
        a, b = deg(-30.0, -20.0), deg(40.0, 30.0)
        direct = tessellate_line_segment(spherical, a, b, viewport)
        assert [f.points for f in direct] == [f.points for f in spherical.tessellate_line_segment(a, b, viewport)]
