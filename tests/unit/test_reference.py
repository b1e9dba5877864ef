"""Cross-checks of the projections against PROJ."""

import numpy as np
import pytest

from common.types import GeoCoordinate
from projections import CylindricalProjection
from validation import ReferenceProjectionCheck, default_sample_coordinates
from viewport import ViewportParams


class EqualAreaProjection(CylindricalProjection):
    """Lambert cylindrical equal-area map (no PROJ counterpart wired up)."""

    name = "Equal Area"

    def projected_y(self, lat: float) -> float:
        return float(np.sin(lat))

    def inverse_projected_y(self, value: float) -> float:
        return float(np.arcsin(np.clip(value, -1.0, 1.0)))


@pytest.fixture(params=[(0.0, 0.0), (30.0, 40.0), (100.0, -20.0), (-150.0, 65.0)])
def north_up_viewport(request) -> ViewportParams:
    lon, lat = request.param
    return ViewportParams.centered_on(np.radians(lon), np.radians(lat), 250.0, 800, 600)


class TestReference:
    def test_matches_proj(self, any_projection, north_up_viewport) -> None:
        check = ReferenceProjectionCheck(any_projection)
        error = check.max_pixel_error(default_sample_coordinates(10.0), north_up_viewport)
        assert error < 1e-6

    def test_check_result(self, spherical, tilted_viewport) -> None:
        result = ReferenceProjectionCheck(spherical).check(default_sample_coordinates(), tilted_viewport)
        assert result.passed
        assert result.test_name == "reference_ortho"
        assert "+proj=ortho" in result.details['proj_string']

    def test_proj_strings(self, spherical, mercator, equirect, tilted_viewport) -> None:
        ortho = ReferenceProjectionCheck(spherical).proj_string(tilted_viewport)
        assert ortho.startswith("+proj=ortho") and "+lat_0=" in ortho
        assert ReferenceProjectionCheck(mercator).proj_string(tilted_viewport).startswith("+proj=merc")
        assert ReferenceProjectionCheck(equirect).proj_string(tilted_viewport).startswith("+proj=eqc")

    def test_reference_positions(self, spherical, viewport) -> None:
        positions = ReferenceProjectionCheck(spherical).reference_screen_positions(
            [GeoCoordinate.from_degrees(0.0, 0.0), GeoCoordinate.from_degrees(30.0, 0.0)], viewport)
        assert positions[0] == pytest.approx([400.0, 300.0])
        assert positions[1] == pytest.approx([500.0, 300.0])

    def test_points_beyond_latitude_bounds_are_skipped(self, equirect, viewport) -> None:
        check = ReferenceProjectionCheck(equirect)
        equirect.set_latitude_bounds(-0.5, 0.5)
        assert check.max_pixel_error(default_sample_coordinates(), viewport) < 1e-6

    def test_unsupported_projection(self) -> None:
        with pytest.raises(ValueError, match="No PROJ reference"):
            ReferenceProjectionCheck(EqualAreaProjection())
