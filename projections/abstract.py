"""
Abstract Projection Contract and Shared Geometry.

Every map projection of the globe renderer implements `AbstractProjection`.
The contract converts between geographic space (longitude, latitude,
altitude) and screen space for a given `ViewportParams`, and the base class
provides the geometry shared by all projection families:

- line string → screen polygons, split at the horizon and at map seams
- great-circle tessellation (delegated to `tessellation.engine`)
- bounding box of a screen rectangle, by sampling
- pixel clip region from the projection's map shape
- latitude clamping against user bounds and the valid band

Failure Semantics
-----------------
No geometric operation raises. A point that cannot be drawn is reported as
invisible, a pixel in space as not on the globe, a degenerate viewport as
an empty result. Only programmer errors (non-finite input, invalid
configuration) raise `ValueError`.

Thread Safety
-------------
Projection queries keep all scratch state in local variables. The only
mutable attributes are the user latitude bounds and the repeat flag, which
are set between render passes.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Sequence, Tuple, Union
import numpy as np
from numpy.typing import NDArray
from matplotlib.path import Path

from common.constants import LATLONALTBOX_SAMPLING_RATE
from common.logging_config import get_logger
from common.types import (
    GeoCoordinate,
    GeoLineString,
    LatLonAltBox,
    PreservationType,
    RepeatedScreenPosition,
    ScreenPoint,
    ScreenPolygon,
    ScreenPosition,
    ScreenRect,
    ScreenSize,
    SurfaceType,
    TessellationFlags,
)
from common.units import AngleUnit, from_radians
from geospatial.spherical_geometry import HALF_PI, central_angle, lonlat_to_vector
from tessellation.engine import TessellationConfig, tessellate_line_segment
from viewport.params import ViewportParams

logger = get_logger(__name__)

# Tolerance for inverse-projecting points that lie exactly on the map outline
SILHOUETTE_TOLERANCE = 1e-9


class AbstractProjection(ABC):
    """Base class for all projections of the globe.

    Concrete projections implement the per-family math:
    `vertex_coordinates`, `screen_position`, `repeated_screen_positions`,
    `_geo_radians`, `map_covers_viewport` and `map_shape`. Everything else
    is expressed in terms of those.

    Parameters
    ----------
    tessellation_config : TessellationConfig, optional
        Precision and node cap used when tessellating line segments.
    """

    name: str = "Abstract"

    def __init__(self, tessellation_config: Optional[TessellationConfig] = None):
        self.tessellation_config = tessellation_config or TessellationConfig()
        self._max_lat = self.max_valid_lat()
        self._min_lat = self.min_valid_lat()
        self._repeat_x = self.repeatable_x()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(min_lat={self._min_lat:.6f}, max_lat={self._max_lat:.6f})"

    # =========================================================================
    # Metadata
    # =========================================================================

    @abstractmethod
    def surface_type(self) -> SurfaceType:
        """Surface the projection is developed onto."""

    def preservation_type(self) -> PreservationType:
        return PreservationType.NO_PRESERVATION

    def is_oriented_normal(self) -> bool:
        """Whether the projection surface's axis matches the Earth's axis."""
        return True

    def traversable_poles(self) -> bool:
        """Whether a path can continue across a pole without a map edge."""
        return False

    def traversable_date_line(self) -> bool:
        """Whether a path can continue across the date line without a seam."""
        return False

    def repeatable_x(self) -> bool:
        """Whether the map can be repeated horizontally."""
        return False

    @property
    def repeat_x(self) -> bool:
        return self._repeat_x

    @repeat_x.setter
    def repeat_x(self, repeat: bool) -> None:
        self._repeat_x = bool(repeat) and self.repeatable_x()

    # =========================================================================
    # Latitude bounds
    # =========================================================================

    def max_valid_lat(self) -> float:
        """Northernmost latitude the projection can represent."""
        return HALF_PI

    def min_valid_lat(self) -> float:
        """Southernmost latitude the projection can represent."""
        return -HALF_PI

    @property
    def max_lat(self) -> float:
        return self._max_lat

    @max_lat.setter
    def max_lat(self, value: float) -> None:
        clamped = float(np.clip(value, self.min_valid_lat(), self.max_valid_lat()))
        if clamped != value:
            logger.debug(f"{self.name}: max_lat {value:.6f} clamped to {clamped:.6f}")
        self._max_lat = clamped

    @property
    def min_lat(self) -> float:
        return self._min_lat

    @min_lat.setter
    def min_lat(self, value: float) -> None:
        clamped = float(np.clip(value, self.min_valid_lat(), self.max_valid_lat()))
        if clamped != value:
            logger.debug(f"{self.name}: min_lat {value:.6f} clamped to {clamped:.6f}")
        self._min_lat = clamped

    def latitude_bounds(self) -> Tuple[float, float]:
        """The persisted (min_lat, max_lat) pair."""
        return self._min_lat, self._max_lat

    def set_latitude_bounds(self, min_lat: float, max_lat: float) -> None:
        self.min_lat = min_lat
        self.max_lat = max_lat

    def clamp_latitude(self, latitude: float) -> float:
        return min(max(latitude, self._min_lat), self._max_lat)

    def exceeds_latitude_range(
        self,
        item: Union[GeoCoordinate, GeoLineString, Sequence[GeoCoordinate]]
    ) -> bool:
        """Whether a coordinate, or any node of a line string, lies outside
        the current latitude bounds."""
        if isinstance(item, GeoCoordinate):
            return item.latitude > self._max_lat or item.latitude < self._min_lat
        return any(self.exceeds_latitude_range(c) for c in item)

    # =========================================================================
    # Forward projection
    # =========================================================================

    @abstractmethod
    def vertex_coordinates(self, lon: float, lat: float) -> Tuple[float, float, float]:
        """Projection-specific placement of (lon, lat) before orientation and
        scaling, in units of the globe radius."""

    @abstractmethod
    def screen_position(self, coordinate: GeoCoordinate, viewport: ViewportParams) -> ScreenPosition:
        """Project a coordinate, reporting both viewport visibility and
        whether the globe itself hides the point."""

    def screen_coordinates(
        self,
        lon: float,
        lat: float,
        viewport: ViewportParams
    ) -> Tuple[float, float, bool]:
        """Project (lon, lat) in radians.

        Returns
        -------
        Tuple[float, float, bool]
            (x, y, visible)
        """
        position = self.screen_position(GeoCoordinate(lon, lat), viewport)
        return position.x, position.y, position.visible

    @abstractmethod
    def repeated_screen_positions(
        self,
        coordinate: GeoCoordinate,
        viewport: ViewportParams,
        size: ScreenSize = ScreenSize()
    ) -> RepeatedScreenPosition:
        """Every screen x at which an object of footprint `size` placed at
        `coordinate` is at least partly inside the viewport."""

    def screen_distance(self, p: ScreenPosition, q: ScreenPosition, viewport: ViewportParams) -> float:
        """Manhattan distance between two projected points along the map."""
        return abs(q.x - p.x) + abs(q.y - p.y)

    def date_line_crossing(
        self,
        a: GeoCoordinate,
        b: GeoCoordinate,
        viewport: ViewportParams
    ) -> Optional[Tuple[ScreenPoint, ScreenPoint]]:
        """Map seam between two neighbouring nodes, if any.

        Returns
        -------
        Optional[Tuple[ScreenPoint, ScreenPoint]]
            ``(exit_point, entry_point)`` on the two map edges, or None when
            the step does not cross a seam.
        """
        return None

    # =========================================================================
    # Inverse projection
    # =========================================================================

    @abstractmethod
    def _geo_radians(self, x: float, y: float, viewport: ViewportParams) -> Optional[Tuple[float, float]]:
        """(lon, lat) in radians under pixel (x, y), or None in space."""

    def geo_coordinates(
        self,
        x: float,
        y: float,
        viewport: ViewportParams,
        unit: AngleUnit = AngleUnit.DEGREE
    ) -> Tuple[float, float, bool]:
        """Geographic coordinates under a pixel.

        Parameters
        ----------
        x, y : float
            Pixel position.
        viewport : ViewportParams
            The viewport parameters.
        unit : AngleUnit
            Unit of the returned angles (default: degrees).

        Returns
        -------
        Tuple[float, float, bool]
            (lon, lat, on_globe). When the pixel lies in space, `on_globe`
            is False and the angles are 0.
        """
        result = self._geo_radians(x, y, viewport)
        if result is None:
            return 0.0, 0.0, False
        lon, lat = result
        return from_radians(lon, unit), from_radians(lat, unit), True

    # =========================================================================
    # Map outline
    # =========================================================================

    @abstractmethod
    def map_covers_viewport(self, viewport: ViewportParams) -> bool:
        """Whether the map fills the whole viewport (no space visible)."""

    @abstractmethod
    def map_shape(self, viewport: ViewportParams) -> ScreenPolygon:
        """Closed outline of the projected map in screen space."""

    def map_region(self, viewport: ViewportParams) -> NDArray[np.bool_]:
        """Pixel clip mask of the map, shape (height, width).

        A pixel belongs to the region when its centre lies inside
        `map_shape`.
        """
        height, width = int(viewport.height), int(viewport.width)
        if viewport.is_degenerate:
            return np.zeros((height, width), dtype=bool)
        shape = self.map_shape(viewport)
        if len(shape) < 3:
            return np.zeros((height, width), dtype=bool)
        if self.map_covers_viewport(viewport):
            return np.ones((height, width), dtype=bool)

        path = Path(shape.as_array())
        xs, ys = np.meshgrid(np.arange(width) + 0.5, np.arange(height) + 0.5)
        inside = path.contains_points(np.column_stack([xs.ravel(), ys.ravel()]))
        return inside.reshape(height, width)

    # =========================================================================
    # Line strings
    # =========================================================================

    def tessellate_line_segment(
        self,
        a: GeoCoordinate,
        b: GeoCoordinate,
        viewport: ViewportParams,
        flags: TessellationFlags = TessellationFlags.FOLLOW_GREAT_CIRCLE,
        subdivide: bool = True
    ) -> List[ScreenPolygon]:
        """Screen fragments of the segment a → b (see `tessellation.engine`)."""
        return tessellate_line_segment(
            self, a, b, viewport, flags, self.tessellation_config, subdivide
        )

    def horizon_to_polygon(
        self,
        viewport: ViewportParams,
        disappear: ScreenPoint,
        reappear: ScreenPoint
    ) -> List[ScreenPoint]:
        """Outline points joining a disappearance and a reappearance point
        along the map silhouette. Flat maps have no horizon."""
        return []

    def screen_polygons(
        self,
        line_string: Union[GeoLineString, Sequence[GeoCoordinate]],
        viewport: ViewportParams
    ) -> List[ScreenPolygon]:
        """Project a line string (or ring) into screen polygons.

        The line string is walked segment by segment. A new polygon starts
        whenever the line reappears from behind the globe or crosses a map
        seam, so one line string can yield several polygons. Points hidden
        by the globe are never emitted. Rings that stay in one piece are
        returned closed; rings interrupted by the horizon are joined along
        the silhouette so they stay fillable.

        Returns
        -------
        List[ScreenPolygon]
            Polygons with at least two points.
        """
        if not isinstance(line_string, GeoLineString):
            line_string = GeoLineString(line_string)
        if viewport.is_degenerate or len(line_string) == 0:
            return []

        pieces: List[ScreenPolygon] = []
        current = ScreenPolygon()
        start = self.screen_position(line_string[0], viewport)
        if not start.globe_hides_point:
            current.append((start.x, start.y))

        for a, b in line_string.segments():
            fragments = self.tessellate_line_segment(
                a, b, viewport, line_string.flags, subdivide=line_string.tessellate
            )
            for i, fragment in enumerate(fragments):
                if i > 0:
                    pieces.append(current)
                    current = ScreenPolygon()
                current.extend(fragment)
        pieces.append(current)

        if line_string.is_closed:
            pieces = self._close_ring(pieces, start, viewport)
        return [p for p in pieces if len(p) >= 2]

    def _close_ring(
        self,
        pieces: List[ScreenPolygon],
        start: ScreenPosition,
        viewport: ViewportParams
    ) -> List[ScreenPolygon]:
        broken = len(pieces) > 1
        pieces = [p for p in pieces if p]
        if not pieces:
            return []
        if not broken:
            ring = pieces[0]
            if len(ring) > 1 and ring.first == ring.last:
                ring.points.pop()
            ring.closed = True
            return pieces

        # The ring ends where it started, so a visible start node means the
        # last piece runs straight into the first one
        if not start.globe_hides_point and len(pieces) > 1:
            head = pieces.pop(0)
            pieces[-1].extend(head.points[1:])

        if not self.traversable_date_line():
            return pieces

        # Join the pieces along the silhouette into one fillable outline
        ring = ScreenPolygon(closed=True)
        for i, piece in enumerate(pieces):
            ring.extend(piece)
            following = pieces[(i + 1) % len(pieces)]
            ring.extend(self.horizon_to_polygon(viewport, piece.last, following.first))
        return [ring]

    # =========================================================================
    # Bounding box
    # =========================================================================

    def lat_lon_alt_box(self, screen_rect: ScreenRect, viewport: ViewportParams) -> LatLonAltBox:
        """Geographic bounding box of the map inside a screen rectangle.

        Samples the rectangle edges every `LATLONALTBOX_SAMPLING_RATE`
        pixels and the map outline inside the rectangle, inverse-projects
        the samples and takes their bounding box. The box is grown by the
        largest step between neighbouring samples (`_box_padding`) and
        extended to a pole when the pole is visible inside the rectangle,
        so it never under-reports the covered area.

        Returns
        -------
        LatLonAltBox
            The covering box, or an empty box for a degenerate viewport or
            a rectangle that shows no map.
        """
        if viewport.is_degenerate or screen_rect.is_empty:
            logger.debug(f"{self.name}: empty bounding box for {screen_rect} on {viewport}")
            return LatLonAltBox.empty_box()

        shape = self.map_shape(viewport)
        if len(shape) < 3:
            return LatLonAltBox.empty_box()
        outline = shape.as_array()
        shape_rect = ScreenRect(
            float(outline[:, 0].min()), float(outline[:, 1].min()),
            float(np.ptp(outline[:, 0])), float(np.ptp(outline[:, 1]))
        )
        map_rect = screen_rect.intersected(viewport.rect()).intersected(shape_rect)
        if map_rect.is_empty:
            return LatLonAltBox.empty_box()

        sequences = list(self._edge_samples(map_rect, viewport))
        sequences.extend(self._outline_samples(outline, map_rect, viewport))

        coordinates: List[GeoCoordinate] = []
        steps: List[Tuple[GeoCoordinate, GeoCoordinate]] = []
        for sequence in sequences:
            previous = None
            for coordinate in sequence:
                if coordinate is None:
                    previous = None
                    continue
                coordinates.append(coordinate)
                if previous is not None:
                    steps.append((previous, coordinate))
                previous = coordinate

        box = LatLonAltBox.from_coordinates(coordinates)
        if box.empty:
            return box

        box = box.padded(*self._box_padding(box, steps))

        center_lon = box.center().longitude
        for pole_lat, is_north in ((self._max_lat, True), (self._min_lat, False)):
            pole = self.screen_position(GeoCoordinate(center_lon, pole_lat), viewport)
            if pole.globe_hides_point or not map_rect.contains(pole.x, pole.y):
                continue
            west, east = (-np.pi, np.pi) if self.traversable_poles() else (box.west, box.east)
            box = LatLonAltBox(
                west=west,
                east=east,
                south=box.south if is_north else pole_lat,
                north=pole_lat if is_north else box.north,
            )
        return box

    def _box_padding(
        self,
        box: LatLonAltBox,
        steps: Sequence[Tuple[GeoCoordinate, GeoCoordinate]]
    ) -> Tuple[float, float]:
        """(lat_pad, lon_pad) covering the area between neighbouring samples.

        On the globe a gap of angle g can hide up to g of latitude and
        g / cos(lat) of longitude, which is unbounded next to a pole.
        """
        max_gap = max((central_angle(p.unit_vector(), q.unit_vector()) for p, q in steps), default=0.0)
        extreme_lat = min(max(abs(box.north), abs(box.south)) + max_gap, HALF_PI)
        cos_lat = np.cos(extreme_lat)
        lon_pad = max_gap / cos_lat if cos_lat > 1e-6 else np.pi
        return max_gap, lon_pad

    def _edge_samples(
        self,
        rect: ScreenRect,
        viewport: ViewportParams
    ) -> Iterable[List[Optional[GeoCoordinate]]]:
        xs = _sample_range(rect.x, rect.right, LATLONALTBOX_SAMPLING_RATE)
        ys = _sample_range(rect.y, rect.bottom, LATLONALTBOX_SAMPLING_RATE)
        yield [self._sample(x, rect.y, viewport) for x in xs]
        yield [self._sample(x, rect.bottom, viewport) for x in xs]
        yield [self._sample(rect.x, y, viewport) for y in ys]
        yield [self._sample(rect.right, y, viewport) for y in ys]

    def _outline_samples(
        self,
        outline: NDArray[np.float64],
        rect: ScreenRect,
        viewport: ViewportParams
    ) -> Iterable[List[Optional[GeoCoordinate]]]:
        closed = np.vstack([outline, outline[:1]])
        sequence: List[Optional[GeoCoordinate]] = []
        for p, q in zip(closed[:-1], closed[1:]):
            steps = max(1, int(np.ceil(np.abs(q - p).max() / LATLONALTBOX_SAMPLING_RATE)))
            for t in np.arange(steps) / steps:
                x, y = p + t * (q - p)
                if rect.contains(x, y):
                    sequence.append(self._sample(x, y, viewport))
                else:
                    sequence.append(None)
        yield sequence

    def _sample(self, x: float, y: float, viewport: ViewportParams) -> Optional[GeoCoordinate]:
        result = self._geo_radians(x, y, viewport)
        if result is None:
            return None
        return GeoCoordinate(*result)


def _sample_range(start: float, stop: float, step: float) -> NDArray[np.float64]:
    """Samples from start to stop (both included) at most `step` apart."""
    count = max(1, int(np.ceil((stop - start) / step)))
    return np.linspace(start, stop, count + 1)
