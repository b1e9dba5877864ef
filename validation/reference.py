"""
Cross-check Against PROJ.

Compares the screen positions produced by our projections with the same
projection evaluated by PROJ through pyproj on a sphere of radius 1. PROJ's
easting/northing is scaled into pixels the way each family scales its map:

- ortho: ``x = cx + R·E``, ``y = cy - R·N`` (N measured from the centre)
- eqc / merc: ``x = cx + (2R/π)·E``, ``y = cy - (2R/π)·(N - N_centre)``

Only viewports with a north-up orientation (as built by
`ViewportParams.centered_on`) can be compared this way.
"""

from typing import Sequence
import numpy as np
from numpy.typing import NDArray
from pyproj import CRS, Transformer

from common.logging_config import get_logger
from common.types import GeoCoordinate
from geospatial.spherical_geometry import normalize_longitude
from projections.abstract import AbstractProjection
from projections.cylindrical import CylindricalProjection
from projections.mercator import MercatorProjection
from projections.equirect import EquirectProjection
from projections.spherical import SphericalProjection
from validation.projection_checks import ValidationResult
from viewport.params import ViewportParams

logger = get_logger(__name__)

GEOGRAPHIC_SPHERE = "+proj=longlat +R=1 +no_defs"
SEAM_TOLERANCE = 1e-9


class ReferenceProjectionCheck:
    """Evaluate a projection with PROJ and compare pixel positions.

    Parameters
    ----------
    projection : AbstractProjection
        A spherical, equirectangular or Mercator projection.

    Raises
    ------
    ValueError
        For a projection PROJ has no counterpart for.
    """

    def __init__(self, projection: AbstractProjection):
        if isinstance(projection, SphericalProjection):
            self._proj_name = "ortho"
        elif isinstance(projection, MercatorProjection):
            self._proj_name = "merc"
        elif isinstance(projection, EquirectProjection):
            self._proj_name = "eqc"
        else:
            raise ValueError(f"No PROJ reference for projection '{projection.name}'")
        self.projection = projection

    def proj_string(self, viewport: ViewportParams) -> str:
        lon_0 = float(np.degrees(viewport.center_longitude))
        lat_0 = float(np.degrees(viewport.center_latitude))
        if self._proj_name == "ortho":
            return f"+proj=ortho +R=1 +lat_0={lat_0:.15g} +lon_0={lon_0:.15g} +no_defs"
        return f"+proj={self._proj_name} +R=1 +lon_0={lon_0:.15g} +no_defs"

    def _transformer(self, viewport: ViewportParams) -> Transformer:
        return Transformer.from_crs(
            CRS.from_proj4(GEOGRAPHIC_SPHERE),
            CRS.from_proj4(self.proj_string(viewport)),
            always_xy=True,
        )

    def reference_screen_positions(
        self,
        coordinates: Sequence[GeoCoordinate],
        viewport: ViewportParams
    ) -> NDArray[np.float64]:
        """PROJ screen positions, shape (N, 2); NaN where PROJ has none."""
        transformer = self._transformer(viewport)
        degrees = np.array([c.to_degrees() for c in coordinates], dtype=np.float64).reshape(-1, 2)
        easting, northing = transformer.transform(degrees[:, 0], degrees[:, 1], errcheck=False)
        easting = np.asarray(easting, dtype=np.float64)
        northing = np.asarray(northing, dtype=np.float64)

        if self._proj_name == "ortho":
            scale = viewport.radius
            offset = 0.0
        else:
            scale = CylindricalProjection.rad_to_pixel(viewport)
            center = self.projection.clamp_latitude(viewport.center_latitude)
            offset = self.projection.projected_y(center)

        positions = np.column_stack([
            viewport.center_x + scale * easting,
            viewport.center_y - scale * (northing - offset),
        ])
        positions[~np.isfinite(positions).all(axis=1)] = np.nan
        return positions

    def max_pixel_error(
        self,
        coordinates: Sequence[GeoCoordinate],
        viewport: ViewportParams
    ) -> float:
        """Largest pixel distance between our and PROJ's positions.

        Coordinates hidden by the globe, outside the valid latitude band, on
        the map seam or without a PROJ result are skipped.
        """
        reference = self.reference_screen_positions(coordinates, viewport)
        errors = []
        for coordinate, expected in zip(coordinates, reference):
            if np.isnan(expected).any() or self.projection.exceeds_latitude_range(coordinate):
                continue
            if self._on_seam(coordinate, viewport):
                continue
            position = self.projection.screen_position(coordinate, viewport)
            if position.globe_hides_point:
                continue
            errors.append(float(np.hypot(position.x - expected[0], position.y - expected[1])))
        return max(errors) if errors else 0.0

    def _on_seam(self, coordinate: GeoCoordinate, viewport: ViewportParams) -> bool:
        # Either map edge is a valid image of a point on the seam
        if self._proj_name == "ortho":
            return False
        relative = normalize_longitude(coordinate.longitude - viewport.center_longitude)
        return np.pi - abs(relative) < SEAM_TOLERANCE

    def check(
        self,
        coordinates: Sequence[GeoCoordinate],
        viewport: ViewportParams,
        tolerance_px: float = 1e-6
    ) -> ValidationResult:
        error = self.max_pixel_error(coordinates, viewport)
        passed = error <= tolerance_px
        if not passed:
            logger.warning(f"{self.projection.name} deviates from PROJ {self._proj_name} by {error:.3e} px")
        return ValidationResult(
            test_name=f"reference_{self._proj_name}",
            passed=passed,
            message=f"Max deviation from PROJ {self._proj_name}: {error:.3e} px",
            details={
                'max_pixel_error': error,
                'tolerance_px': tolerance_px,
                'proj_string': self.proj_string(viewport),
            }
        )
