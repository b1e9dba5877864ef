"""
Cylindrical Projection Family.

Flat maps whose meridians are equally spaced vertical lines. The full map is
``4R`` pixels wide (``rad_to_pixel = 2R / π``) and the screen centre shows
the viewport's centre longitude and latitude:

    x = w/2 + normalize(lon - center_lon) * rad_to_pixel
    y = h/2 - (Y(lat) - Y(center_lat)) * rad_to_pixel

Subclasses only supply the vertical scale Y and its inverse. The map seam is
the meridian opposite the centre longitude; lines crossing it are cut there
and the map can be repeated horizontally.
"""

from abc import abstractmethod
from typing import Optional, Sequence, Tuple
import numpy as np

from common.logging_config import get_logger
from common.types import (
    GeoCoordinate,
    LatLonAltBox,
    RepeatedScreenPosition,
    ScreenPoint,
    ScreenPolygon,
    ScreenPosition,
    ScreenRect,
    ScreenSize,
    SurfaceType,
)
from geospatial.spherical_geometry import normalize_longitude
from projections.abstract import SILHOUETTE_TOLERANCE, AbstractProjection
from viewport.params import ViewportParams

logger = get_logger(__name__)


class CylindricalProjection(AbstractProjection):
    """Shared math of the cylindrical projections."""

    name = "Cylindrical"

    def surface_type(self) -> SurfaceType:
        return SurfaceType.CYLINDRICAL

    def repeatable_x(self) -> bool:
        return True

    @abstractmethod
    def projected_y(self, lat: float) -> float:
        """Vertical map coordinate of a latitude, in radians of longitude."""

    @abstractmethod
    def inverse_projected_y(self, value: float) -> float:
        """Latitude of a vertical map coordinate."""

    @staticmethod
    def rad_to_pixel(viewport: ViewportParams) -> float:
        return 2.0 * viewport.radius / np.pi

    @staticmethod
    def map_width(viewport: ViewportParams) -> float:
        return 4.0 * viewport.radius

    def vertex_coordinates(self, lon: float, lat: float) -> Tuple[float, float, float]:
        """Map-plane position in globe radii, before centring."""
        scale = 2.0 / np.pi
        return float(lon * scale), float(self.projected_y(self.clamp_latitude(lat)) * scale), 0.0

    # =========================================================================
    # Forward projection
    # =========================================================================

    def _screen_xy(self, lon: float, lat: float, viewport: ViewportParams) -> ScreenPoint:
        scale = self.rad_to_pixel(viewport)
        center_lat = self.clamp_latitude(viewport.center_latitude)
        x = viewport.center_x + normalize_longitude(lon - viewport.center_longitude) * scale
        y = viewport.center_y - (
            self.projected_y(self.clamp_latitude(lat)) - self.projected_y(center_lat)
        ) * scale
        return x, y

    def _map_top(self, viewport: ViewportParams) -> float:
        return self._screen_xy(0.0, self.max_lat, viewport)[1]

    def _map_bottom(self, viewport: ViewportParams) -> float:
        return self._screen_xy(0.0, self.min_lat, viewport)[1]

    def _x_on_screen(self, x: float, viewport: ViewportParams) -> bool:
        if self.repeat_x:
            width = self.map_width(viewport)
            return x - np.floor(x / width) * width < viewport.width
        return 0.0 <= x < viewport.width

    def screen_position(self, coordinate: GeoCoordinate, viewport: ViewportParams) -> ScreenPosition:
        if viewport.is_degenerate:
            return ScreenPosition(viewport.center_x, viewport.center_y, False, False)
        x, y = self._screen_xy(coordinate.longitude, coordinate.latitude, viewport)
        in_band = not self.exceeds_latitude_range(coordinate)
        visible = in_band and 0.0 <= y < viewport.height and self._x_on_screen(x, viewport)
        return ScreenPosition(x, y, bool(visible), False)

    def repeated_screen_positions(
        self,
        coordinate: GeoCoordinate,
        viewport: ViewportParams,
        size: ScreenSize = ScreenSize()
    ) -> RepeatedScreenPosition:
        if viewport.is_degenerate:
            return RepeatedScreenPosition([], viewport.center_y, False)
        x, y = self._screen_xy(coordinate.longitude, coordinate.latitude, viewport)
        half_w, half_h = 0.5 * size.width, 0.5 * size.height
        if self.exceeds_latitude_range(coordinate):
            return RepeatedScreenPosition([], y, False)
        if y + half_h < 0.0 or y - half_h >= viewport.height:
            return RepeatedScreenPosition([], y, False)

        if not self.repeat_x:
            inside = x + half_w >= 0.0 and x - half_w < viewport.width
            return RepeatedScreenPosition([x] if inside else [], y, False)

        width = self.map_width(viewport)
        first = int(np.ceil((-half_w - x) / width))
        last = int(np.ceil((viewport.width + half_w - x) / width)) - 1
        xs = [x + k * width for k in range(first, last + 1)]
        return RepeatedScreenPosition(xs, y, False)

    def screen_distance(self, p: ScreenPosition, q: ScreenPosition, viewport: ViewportParams) -> float:
        """Manhattan distance measured the short way round the map seam."""
        width = self.map_width(viewport)
        dx = q.x - p.x
        dx -= width * np.round(dx / width)
        return abs(dx) + abs(q.y - p.y)

    def date_line_crossing(
        self,
        a: GeoCoordinate,
        b: GeoCoordinate,
        viewport: ViewportParams
    ) -> Optional[Tuple[ScreenPoint, ScreenPoint]]:
        center_lon = viewport.center_longitude
        rel_a = normalize_longitude(a.longitude - center_lon)
        rel_b = normalize_longitude(b.longitude - center_lon)
        if abs(rel_b - rel_a) <= np.pi:
            return None

        gap_a, gap_b = np.pi - abs(rel_a), np.pi - abs(rel_b)
        f = gap_a / (gap_a + gap_b) if gap_a + gap_b > 0.0 else 0.5
        lat = a.latitude + f * (b.latitude - a.latitude)
        _, y = self._screen_xy(center_lon, lat, viewport)
        edge = np.pi * self.rad_to_pixel(viewport)
        side = 1.0 if rel_a > 0.0 else -1.0
        return (viewport.center_x + side * edge, y), (viewport.center_x - side * edge, y)

    # =========================================================================
    # Inverse projection
    # =========================================================================

    def _geo_radians(self, x: float, y: float, viewport: ViewportParams) -> Optional[Tuple[float, float]]:
        if viewport.is_degenerate:
            return None
        scale = self.rad_to_pixel(viewport)
        center_lat = self.clamp_latitude(viewport.center_latitude)

        map_y = (viewport.center_y - y) / scale + self.projected_y(center_lat)
        lat = self.inverse_projected_y(map_y)
        if lat > self.max_lat + SILHOUETTE_TOLERANCE or lat < self.min_lat - SILHOUETTE_TOLERANCE:
            return None

        rel_lon = (x - viewport.center_x) / scale
        if not self.repeat_x and abs(rel_lon) > np.pi + SILHOUETTE_TOLERANCE:
            return None
        lon = normalize_longitude(rel_lon + viewport.center_longitude)
        return lon, self.clamp_latitude(lat)

    def _box_padding(
        self,
        box: LatLonAltBox,
        steps: Sequence[Tuple[GeoCoordinate, GeoCoordinate]]
    ) -> Tuple[float, float]:
        # Longitude is linear in x and latitude monotonic in y, so the steps
        # themselves bound what lies between two samples
        lat_pad = max((abs(q.latitude - p.latitude) for p, q in steps), default=0.0)
        lon_pad = max((abs(normalize_longitude(q.longitude - p.longitude)) for p, q in steps), default=0.0)
        return lat_pad, lon_pad

    # =========================================================================
    # Map outline
    # =========================================================================

    def _map_rect(self, viewport: ViewportParams) -> ScreenRect:
        top, bottom = self._map_top(viewport), self._map_bottom(viewport)
        if self.repeat_x:
            left, right = 0.0, float(viewport.width)
        else:
            edge = np.pi * self.rad_to_pixel(viewport)
            left, right = viewport.center_x - edge, viewport.center_x + edge
        return ScreenRect(left, top, right - left, bottom - top)

    def map_covers_viewport(self, viewport: ViewportParams) -> bool:
        if viewport.is_degenerate:
            return False
        rect = self._map_rect(viewport)
        return (rect.x <= 0.0 and rect.y <= 0.0
                and rect.right >= viewport.width and rect.bottom >= viewport.height)

    def map_shape(self, viewport: ViewportParams) -> ScreenPolygon:
        """The map rectangle clipped to the viewport."""
        if viewport.is_degenerate:
            return ScreenPolygon()
        rect = self._map_rect(viewport).intersected(viewport.rect())
        if rect.is_empty:
            return ScreenPolygon()
        return ScreenPolygon(
            [(rect.x, rect.y), (rect.right, rect.y), (rect.right, rect.bottom), (rect.x, rect.bottom)],
            closed=True,
        )
