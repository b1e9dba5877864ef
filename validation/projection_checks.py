"""
Consistency Tests for Projections.

This module provides checks that a projection's forward and inverse
mappings, bounding boxes and tessellation agree with each other for a given
viewport.

Test Categories
---------------
1. Round trip (project then inverse-project returns the coordinate)
2. Visibility consistency (a pixel on the globe projects back as visible)
3. Bounding box soundness (every on-globe pixel of a rectangle is inside
   the box computed for it)
4. Tessellation bound (neighbouring emitted points are close on screen)
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
import numpy as np

from common.logging_config import get_logger
from common.types import GeoCoordinate, ScreenRect, TessellationFlags
from common.units import AngleUnit
from geospatial.spherical_geometry import central_angle
from projections.abstract import AbstractProjection
from viewport.params import ViewportParams

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check.

    Attributes
    ----------
    test_name : str
        Name of the test.
    passed : bool
        Whether the test passed.
    message : str
        Description of result.
    details : dict
        Additional details.
    """
    test_name: str
    passed: bool
    message: str
    details: Dict[str, Any]


def default_sample_coordinates(step_deg: float = 15.0) -> List[GeoCoordinate]:
    """Regular lon/lat lattice, poles and the date line excluded."""
    lons = np.arange(-180.0 + step_deg, 180.0, step_deg)
    lats = np.arange(-90.0 + step_deg, 90.0, step_deg)
    return [GeoCoordinate.from_degrees(lon, lat) for lat in lats for lon in lons]


class ProjectionConsistencyChecker:
    """Checker for the internal consistency of a projection.

    Parameters
    ----------
    projection : AbstractProjection
        Projection under test.
    tolerance_rad : float
        Angular tolerance for round trips and bounding boxes.
    strict_mode : bool
        If True, raise `ValueError` on the first failed check.
    log_violations : bool
        Whether to log failed checks.
    """

    def __init__(
        self,
        projection: AbstractProjection,
        tolerance_rad: float = 1e-6,
        strict_mode: bool = False,
        log_violations: bool = True
    ):
        self.projection = projection
        self.tolerance_rad = tolerance_rad
        self.strict_mode = strict_mode
        self.log_violations = log_violations
        self._logger = get_logger("ProjectionConsistencyChecker")

    def check_all(
        self,
        viewport: ViewportParams,
        coordinates: Optional[Sequence[GeoCoordinate]] = None
    ) -> List[ValidationResult]:
        """Run all consistency checks for one viewport.

        Parameters
        ----------
        viewport : ViewportParams
            The viewport parameters.
        coordinates : Sequence[GeoCoordinate], optional
            Sample coordinates; a 15° lattice by default.

        Returns
        -------
        List[ValidationResult]
            Results of all checks.
        """
        if coordinates is None:
            coordinates = default_sample_coordinates()

        results = []

        # 1. Round trip
        results.append(self.check_round_trip(viewport, coordinates))

        # 2. Visibility consistency
        results.append(self.check_visibility_consistency(viewport))

        # 3. Bounding box soundness
        results.append(self.check_bounding_box_soundness(viewport))

        # 4. Tessellation bound along a long great circle arc
        results.append(self.check_tessellation_bound(
            viewport,
            GeoCoordinate.from_degrees(-60.0, -30.0),
            GeoCoordinate.from_degrees(70.0, 50.0),
        ))

        return results

    def _report(self, result: ValidationResult) -> ValidationResult:
        if not result.passed:
            if self.log_violations:
                self._logger.warning(f"{self.projection.name}: {result.message}")
            if self.strict_mode:
                raise ValueError(f"{result.test_name} failed: {result.message}")
        return result

    def check_round_trip(
        self,
        viewport: ViewportParams,
        coordinates: Sequence[GeoCoordinate]
    ) -> ValidationResult:
        """Visible coordinates must inverse-project onto themselves."""
        errors = []
        for coordinate in coordinates:
            if self.projection.exceeds_latitude_range(coordinate):
                continue
            position = self.projection.screen_position(coordinate.with_altitude(0.0), viewport)
            if not position.visible:
                continue
            lon, lat, on_globe = self.projection.geo_coordinates(
                position.x, position.y, viewport, AngleUnit.RADIAN)
            if not on_globe:
                errors.append(np.inf)
                continue
            errors.append(central_angle(coordinate.unit_vector(), GeoCoordinate(lon, lat).unit_vector()))

        max_error = float(max(errors)) if errors else 0.0
        num_violations = int(sum(e > self.tolerance_rad for e in errors))
        return self._report(ValidationResult(
            test_name="round_trip",
            passed=num_violations == 0,
            message=f"Round trip check: {num_violations} violations",
            details={
                'num_checked': len(errors),
                'max_error_rad': max_error,
                'tolerance_rad': self.tolerance_rad,
            }
        ))

    def check_visibility_consistency(
        self,
        viewport: ViewportParams,
        step_px: int = 16
    ) -> ValidationResult:
        """Every pixel reported on the globe must project back as visible."""
        if viewport.is_degenerate:
            return ValidationResult(
                test_name="visibility_consistency",
                passed=True,
                message="Degenerate viewport, nothing to check",
                details={}
            )

        checked = 0
        violations = []
        for y in np.arange(0.5, viewport.height, step_px):
            for x in np.arange(0.5, viewport.width, step_px):
                lon, lat, on_globe = self.projection.geo_coordinates(x, y, viewport, AngleUnit.RADIAN)
                if not on_globe:
                    continue
                checked += 1
                _, _, visible = self.projection.screen_coordinates(lon, lat, viewport)
                if not visible:
                    violations.append((float(x), float(y)))

        return self._report(ValidationResult(
            test_name="visibility_consistency",
            passed=not violations,
            message=f"Visibility consistency check: {len(violations)} violations",
            details={
                'num_checked': checked,
                'violations': violations[:10],
            }
        ))

    def check_bounding_box_soundness(
        self,
        viewport: ViewportParams,
        screen_rect: Optional[ScreenRect] = None,
        step_px: int = 3
    ) -> ValidationResult:
        """Every on-globe pixel of the rectangle lies inside its bounding box."""
        rect = screen_rect if screen_rect is not None else viewport.rect()
        box = self.projection.lat_lon_alt_box(rect, viewport)

        checked = 0
        outside = []
        for y in np.arange(rect.y, rect.bottom, step_px):
            for x in np.arange(rect.x, rect.right, step_px):
                lon, lat, on_globe = self.projection.geo_coordinates(x, y, viewport, AngleUnit.RADIAN)
                if not on_globe:
                    continue
                checked += 1
                if not box.contains(GeoCoordinate(lon, lat), self.tolerance_rad):
                    outside.append((float(x), float(y)))

        return self._report(ValidationResult(
            test_name="bounding_box_soundness",
            passed=not outside,
            message=f"Bounding box soundness check: {len(outside)} pixels outside the box",
            details={
                'box': box,
                'num_checked': checked,
                'outside': outside[:10],
            }
        ))

    def check_tessellation_bound(
        self,
        viewport: ViewportParams,
        a: GeoCoordinate,
        b: GeoCoordinate,
        flags: TessellationFlags = TessellationFlags.FOLLOW_GREAT_CIRCLE
    ) -> ValidationResult:
        """Neighbouring emitted points are within the precision threshold,
        unless the node cap was reached."""
        config = self.projection.tessellation_config
        fragments = self.projection.tessellate_line_segment(a, b, viewport, flags)

        start = self.projection.screen_position(a, viewport)
        max_distance = 0.0
        num_points = 0
        for i, fragment in enumerate(fragments):
            points = list(fragment.points)
            if i == 0 and not start.globe_hides_point:
                points.insert(0, (start.x, start.y))
            num_points += len(fragment)
            for (x0, y0), (x1, y1) in zip(points, points[1:]):
                max_distance = max(max_distance, abs(x1 - x0) + abs(y1 - y0))

        capped = num_points >= config.max_nodes
        passed = max_distance <= config.precision_px * (1.0 + 1e-9) or capped
        return self._report(ValidationResult(
            test_name="tessellation_bound",
            passed=passed,
            message=f"Tessellation bound check: max step {max_distance:.2f} px",
            details={
                'max_distance_px': max_distance,
                'precision_px': config.precision_px,
                'num_points': num_points,
                'node_cap_reached': capped,
            }
        ))
