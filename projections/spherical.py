"""
Orthographic Globe Projection.

Points on the unit sphere are rotated into the view frame by the viewport
orientation and dropped orthographically onto the screen:

    x = w/2 + R * v_x
    y = h/2 - R * v_y

A point is on the front hemisphere when v_z ≥ 0. Elevated points are pushed
outwards by ``1 + altitude / EARTH_MEAN_RADIUS``, so a point behind the
globe only counts as hidden when it projects inside the silhouette disk.
"""

from typing import List, Optional, Sequence, Tuple
import numpy as np
from numpy.typing import NDArray

from common.constants import ProjectionConstants
from common.logging_config import get_logger
from common.types import (
    GeoCoordinate,
    PreservationType,
    RepeatedScreenPosition,
    ScreenPoint,
    ScreenPolygon,
    ScreenPosition,
    ScreenSize,
    SurfaceType,
)
from geospatial.spherical_geometry import lonlat_to_vector, normalize_longitude, vector_to_lonlat
from projections.abstract import SILHOUETTE_TOLERANCE, AbstractProjection
from viewport.params import ViewportParams

logger = get_logger(__name__)

EARTH_RADIUS_M = ProjectionConstants.EARTH_MEAN_RADIUS.value

# Vertices of the silhouette outline (one per degree)
SILHOUETTE_VERTICES = 360

# Points this close behind the horizon plane still count as on the horizon
HORIZON_EPSILON = 1e-12


class SphericalProjection(AbstractProjection):
    """Orthographic view of the globe."""

    name = "Spherical"

    def surface_type(self) -> SurfaceType:
        return SurfaceType.AZIMUTHAL

    def preservation_type(self) -> PreservationType:
        return PreservationType.NO_PRESERVATION

    def traversable_poles(self) -> bool:
        return True

    def traversable_date_line(self) -> bool:
        return True

    def vertex_coordinates(self, lon: float, lat: float) -> Tuple[float, float, float]:
        """Unit-sphere vector of (lon, lat) in the globe frame."""
        v = lonlat_to_vector(lon, self.clamp_latitude(lat))
        return float(v[0]), float(v[1]), float(v[2])

    def view_vector(self, coordinate: GeoCoordinate, viewport: ViewportParams) -> NDArray[np.float64]:
        """Position of the coordinate in the view frame, in globe radii."""
        v = viewport.to_view(self.vertex_coordinates(coordinate.longitude, coordinate.latitude))
        if coordinate.altitude:
            v = v * (1.0 + coordinate.altitude / EARTH_RADIUS_M)
        return v

    def view_to_screen(self, v: Sequence[float], viewport: ViewportParams) -> ScreenPoint:
        return (viewport.center_x + viewport.radius * float(v[0]),
                viewport.center_y - viewport.radius * float(v[1]))

    def screen_position(self, coordinate: GeoCoordinate, viewport: ViewportParams) -> ScreenPosition:
        if viewport.is_degenerate:
            return ScreenPosition(viewport.center_x, viewport.center_y, False, False)
        v = self.view_vector(coordinate, viewport)
        x, y = self.view_to_screen(v, viewport)
        globe_hides_point = v[2] < -HORIZON_EPSILON and v[0] * v[0] + v[1] * v[1] < 1.0
        visible = (
            not globe_hides_point
            and 0.0 <= x < viewport.width
            and 0.0 <= y < viewport.height
        )
        return ScreenPosition(x, y, visible, bool(globe_hides_point))

    def repeated_screen_positions(
        self,
        coordinate: GeoCoordinate,
        viewport: ViewportParams,
        size: ScreenSize = ScreenSize()
    ) -> RepeatedScreenPosition:
        position = self.screen_position(coordinate, viewport)
        if viewport.is_degenerate or position.globe_hides_point:
            return RepeatedScreenPosition([], position.y, position.globe_hides_point)
        half_w, half_h = 0.5 * size.width, 0.5 * size.height
        inside = (
            position.x + half_w >= 0.0 and position.x - half_w < viewport.width
            and position.y + half_h >= 0.0 and position.y - half_h < viewport.height
        )
        return RepeatedScreenPosition([position.x] if inside else [], position.y, False)

    def _geo_radians(self, x: float, y: float, viewport: ViewportParams) -> Optional[Tuple[float, float]]:
        if viewport.is_degenerate:
            return None
        vx = (x - viewport.center_x) / viewport.radius
        vy = (viewport.center_y - y) / viewport.radius
        r2 = vx * vx + vy * vy
        if r2 > 1.0 + SILHOUETTE_TOLERANCE:
            return None
        vz = np.sqrt(max(0.0, 1.0 - r2))
        return vector_to_lonlat(viewport.from_view((vx, vy, vz)))

    def map_covers_viewport(self, viewport: ViewportParams) -> bool:
        if viewport.is_degenerate:
            return False
        corner_distance2 = viewport.center_x ** 2 + viewport.center_y ** 2
        return corner_distance2 <= viewport.radius ** 2

    def map_shape(self, viewport: ViewportParams) -> ScreenPolygon:
        """The viewport rectangle when the globe fills it, else the silhouette."""
        if viewport.is_degenerate:
            return ScreenPolygon()
        if self.map_covers_viewport(viewport):
            w, h = float(viewport.width), float(viewport.height)
            return ScreenPolygon([(0.0, 0.0), (w, 0.0), (w, h), (0.0, h)], closed=True)
        angles = np.linspace(0.0, 2.0 * np.pi, SILHOUETTE_VERTICES, endpoint=False)
        xs = viewport.center_x + viewport.radius * np.cos(angles)
        ys = viewport.center_y + viewport.radius * np.sin(angles)
        return ScreenPolygon(list(zip(xs.tolist(), ys.tolist())), closed=True)

    def horizon_to_polygon(
        self,
        viewport: ViewportParams,
        disappear: ScreenPoint,
        reappear: ScreenPoint
    ) -> List[ScreenPoint]:
        """Silhouette points from `disappear` to `reappear`, one per degree,
        along the shorter way round (endpoints excluded)."""
        if viewport.is_degenerate:
            return []
        cx, cy, radius = viewport.center_x, viewport.center_y, viewport.radius
        start = np.arctan2(disappear[1] - cy, disappear[0] - cx)
        end = np.arctan2(reappear[1] - cy, reappear[0] - cx)
        delta = normalize_longitude(end - start)
        steps = int(np.ceil(abs(np.degrees(delta))))
        step = np.radians(1.0) * np.sign(delta)
        return [
            (cx + radius * np.cos(start + i * step), cy + radius * np.sin(start + i * step))
            for i in range(1, steps)
        ]
