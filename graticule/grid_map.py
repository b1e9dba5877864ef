"""
Graticule Generation.

`GridMap` builds the screen polygons of latitude circles, meridians and the
special parallels (equator, tropics, polar circles) for the current
viewport, and hands them to a painter.

Two paths are used:

- On projections with traversable poles (the globe) each circle is walked
  in 3-D, oriented by the viewport and projected. Where the circle passes
  behind the globe the exact horizon point is found by bisection and the
  polygon is ended or restarted there.
- On cylindrical maps parallels are horizontal lines and meridians are
  vertical lines, repeated across the map width when the map repeats.

Usage
-----
>>> grid = GridMap(SphericalProjection())
>>> grid.create_grid(viewport)
>>> grid.paint_grid_map(painter, antialiasing=True)
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Protocol, Sequence, Tuple
import numpy as np

from common.constants import ProjectionConstants
from common.logging_config import get_logger
from common.types import GeoCoordinate, ScreenPoint, ScreenPolygon
from geospatial.spherical_geometry import HALF_PI
from projections.abstract import AbstractProjection
from projections.cylindrical import CylindricalProjection
from viewport.params import ViewportParams

logger = get_logger(__name__)

DEFAULT_GRID_PRECISION = int(ProjectionConstants.DEFAULT_GRID_PRECISION.value)
GRID_SPACING = ProjectionConstants.GRID_SPACING.value
TROPIC_LATITUDE = ProjectionConstants.TROPIC_LATITUDE.value
POLAR_CIRCLE_LATITUDE = ProjectionConstants.POLAR_CIRCLE_LATITUDE.value

HORIZON_ITERATIONS = 48


class SphereDim(Enum):
    """Which coordinate a grid circle holds constant."""
    LONGITUDE = "longitude"
    LATITUDE = "latitude"


@dataclass(frozen=True)
class Pen:
    """Stroke used for the graticule.

    Attributes
    ----------
    color : Tuple[int, int, int, int]
        RGBA colour.
    width : float
        Line width in pixels.
    style : str
        Dash style understood by the painter (``"solid"``, ``"dash"``, ...).
    """
    color: Tuple[int, int, int, int] = (255, 255, 255, 128)
    width: float = 1.0
    style: str = "solid"


class Painter(Protocol):
    """Drawing surface the graticule is painted on."""

    def set_pen(self, pen: Pen) -> None:
        ...

    def set_antialiasing(self, enabled: bool) -> None:
        ...

    def draw_polyline(self, points: Sequence[ScreenPoint]) -> None:
        ...


@dataclass
class _CircleFoldState:
    """Running state while walking one circle."""
    polygon: ScreenPolygon = field(default_factory=ScreenPolygon)
    last_t: Optional[float] = None
    last_visible: bool = False
    went_hidden: bool = False


class GridMap:
    """Cached graticule polygons for one viewport.

    Parameters
    ----------
    projection : AbstractProjection
        Projection the grid is drawn in.
    precision : int
        Number of nodes on a quarter circle (globe path).
    pen : Pen
        Stroke handed to the painter.

    Notes
    -----
    Not thread-safe; use one instance per render pass.
    """

    def __init__(
        self,
        projection: AbstractProjection,
        precision: int = DEFAULT_GRID_PRECISION,
        pen: Pen = Pen()
    ):
        if precision < 1:
            raise ValueError(f"Grid precision must be at least 1, got {precision}")
        self.projection = projection
        self.precision = precision
        self.pen = pen
        self._polygons: List[ScreenPolygon] = []
        self._image_width = 0
        self._image_height = 0

    @property
    def polygons(self) -> List[ScreenPolygon]:
        return list(self._polygons)

    def __len__(self) -> int:
        return len(self._polygons)

    def clear(self) -> None:
        self._polygons = []

    def set_pen(self, pen: Pen) -> None:
        self.pen = pen

    def resize_map(self, width: int, height: int) -> None:
        """Adopt a new image size; cached circles become invalid."""
        self._image_width = width
        self._image_height = height
        self.clear()

    def _sync(self, viewport: ViewportParams) -> None:
        if (viewport.width, viewport.height) != (self._image_width, self._image_height):
            self.resize_map(viewport.width, viewport.height)

    # =========================================================================
    # Circle sets
    # =========================================================================

    def create_equator(self, viewport: ViewportParams) -> List[ScreenPolygon]:
        self._sync(viewport)
        self.clear()
        self.create_circle(0.0, SphereDim.LATITUDE, viewport)
        return self.polygons

    def create_tropics(self, viewport: ViewportParams) -> List[ScreenPolygon]:
        """Tropics of Cancer and Capricorn plus the polar circles."""
        self._sync(viewport)
        self.clear()
        for lat in (TROPIC_LATITUDE, -TROPIC_LATITUDE, POLAR_CIRCLE_LATITUDE, -POLAR_CIRCLE_LATITUDE):
            self.create_circle(lat, SphereDim.LATITUDE, viewport)
        return self.polygons

    def create_grid(self, viewport: ViewportParams) -> List[ScreenPolygon]:
        """Parallels and meridians every `GRID_SPACING` radians."""
        lat_num = int(round(HALF_PI / GRID_SPACING))
        lon_num = int(round(np.pi / GRID_SPACING))
        return self.create_circles(lon_num, lat_num, viewport)

    def create_circles(self, lon_num: int, lat_num: int, viewport: ViewportParams) -> List[ScreenPolygon]:
        """Parallels at multiples of (π/2)/lat_num, excluding the equator and
        the poles, and `lon_num` meridian circles spaced π/lon_num apart.

        Meridians stop one parallel spacing short of the poles.
        """
        self._sync(viewport)
        self.clear()
        if viewport.is_degenerate:
            logger.debug(f"No graticule for degenerate viewport {viewport}")
            return []

        if lat_num > 0:
            step = HALF_PI / lat_num
            for i in range(1, lat_num):
                self.create_circle(i * step, SphereDim.LATITUDE, viewport)
                self.create_circle(-i * step, SphereDim.LATITUDE, viewport)

        if lon_num > 0:
            cut_off = HALF_PI / lat_num if lat_num > 0 else 0.0
            for i in range(lon_num):
                self.create_circle(i * np.pi / lon_num, SphereDim.LONGITUDE, viewport, cut_off)

        logger.debug(f"Created {len(self._polygons)} grid polygons ({lon_num} meridian circles, "
                     f"{max(lat_num - 1, 0) * 2} parallels)")
        return self.polygons

    # =========================================================================
    # Single circles
    # =========================================================================

    def create_circle(
        self,
        value: float,
        dim: SphereDim,
        viewport: ViewportParams,
        cut_off: float = 0.0
    ) -> List[ScreenPolygon]:
        """Add the polygons of one grid circle.

        Parameters
        ----------
        value : float
            Latitude of a parallel, or longitude of a meridian in radians.
            A meridian circle also contains the meridian at ``value + π``.
        dim : SphereDim
            Which coordinate `value` fixes.
        viewport : ViewportParams
            The viewport parameters.
        cut_off : float
            Arc in radians left out around each pole (meridians only).

        Returns
        -------
        List[ScreenPolygon]
            The polygons added by this call.
        """
        self._sync(viewport)
        if viewport.is_degenerate:
            return []
        if self.projection.traversable_poles():
            added = self._spherical_circle(value, dim, viewport, cut_off)
        else:
            added = self._rectangular_circle(value, dim, viewport, cut_off)
        self._polygons.extend(added)
        return added

    def _spherical_circle(
        self,
        value: float,
        dim: SphereDim,
        viewport: ViewportParams,
        cut_off: float
    ) -> List[ScreenPolygon]:
        steps = 4 * self.precision
        if dim == SphereDim.LATITUDE:
            def at(t: float) -> Tuple[float, float]:
                return -np.pi + 2.0 * np.pi * t, value
            return self._trace(at, steps, viewport, closed=True)

        if cut_off <= 0.0:
            # Up meridian `value` from the south pole, down meridian `value + π`
            def at(t: float) -> Tuple[float, float]:
                s = 2.0 * np.pi * t
                if s <= np.pi:
                    return value, s - HALF_PI
                return value + np.pi, 3.0 * HALF_PI - s
            return self._trace(at, steps, viewport, closed=True)

        extent = np.pi - 2.0 * cut_off
        if extent <= 0.0:
            return []
        arc_steps = max(1, int(np.ceil(steps * extent / (2.0 * np.pi))))
        bottom, top = -HALF_PI + cut_off, HALF_PI - cut_off
        polygons = self._trace(lambda t: (value, bottom + extent * t), arc_steps, viewport, closed=False)
        polygons += self._trace(lambda t: (value + np.pi, top - extent * t), arc_steps, viewport, closed=False)
        return polygons

    def _trace(
        self,
        at: Callable[[float], Tuple[float, float]],
        steps: int,
        viewport: ViewportParams,
        closed: bool
    ) -> List[ScreenPolygon]:
        """Walk t = 0..1 in `steps` steps, splitting at the horizon."""
        projection = self.projection

        def view(t: float) -> np.ndarray:
            return projection.view_vector(GeoCoordinate(*at(t)), viewport)

        emitted: List[ScreenPolygon] = []

        def step(state: _CircleFoldState, t: float) -> _CircleFoldState:
            v = view(t)
            visible = v[2] >= 0.0
            point = projection.view_to_screen(v, viewport)
            if state.last_t is None:
                if visible:
                    state.polygon.append(point)
            elif visible and state.last_visible:
                state.polygon.append(point)
            elif visible:
                state.polygon = ScreenPolygon([self._horizon(view, t, state.last_t, viewport), point])
            elif state.last_visible:
                state.polygon.append(self._horizon(view, state.last_t, t, viewport))
                emitted.append(state.polygon)
                state.polygon = ScreenPolygon()
                state.went_hidden = True
            return _CircleFoldState(state.polygon, t, visible, state.went_hidden)

        state = _CircleFoldState()
        for t in np.linspace(0.0, 1.0, steps + 1):
            state = step(state, float(t))

        if closed and not state.went_hidden and state.last_visible:
            polygon = state.polygon
            polygon.points.pop()
            polygon.closed = True
            emitted.append(polygon)
        elif closed and state.last_visible and view(0.0)[2] >= 0.0:
            # The start point is not a split point; rejoin the first piece
            polygon = state.polygon
            polygon.extend(emitted.pop(0).points[1:])
            emitted.append(polygon)
        elif len(state.polygon) > 0:
            emitted.append(state.polygon)
        return [p for p in emitted if len(p) >= 2]

    def _horizon(
        self,
        view: Callable[[float], np.ndarray],
        t_visible: float,
        t_hidden: float,
        viewport: ViewportParams
    ) -> ScreenPoint:
        """Silhouette point where the circle crosses the horizon."""
        for _ in range(HORIZON_ITERATIONS):
            mid = 0.5 * (t_visible + t_hidden)
            if view(mid)[2] >= 0.0:
                t_visible = mid
            else:
                t_hidden = mid
        v = view(t_visible)
        length = float(np.hypot(v[0], v[1]))
        if length > 0.0:
            v = (v[0] / length, v[1] / length, 0.0)
        return self.projection.view_to_screen(v, viewport)

    def _rectangular_circle(
        self,
        value: float,
        dim: SphereDim,
        viewport: ViewportParams,
        cut_off: float
    ) -> List[ScreenPolygon]:
        shape = self.projection.map_shape(viewport)
        if len(shape) < 3:
            return []
        outline = shape.as_array()
        left, right = float(outline[:, 0].min()), float(outline[:, 0].max())
        top, bottom = float(outline[:, 1].min()), float(outline[:, 1].max())
        center_lon = viewport.center_longitude
        projection = self.projection

        if dim == SphereDim.LATITUDE:
            if value > projection.max_lat or value < projection.min_lat:
                return []
            y = projection.screen_position(GeoCoordinate(center_lon, value), viewport).y
            if not top <= y <= bottom:
                return []
            return [ScreenPolygon([(left, y), (right, y)])]

        north = min(projection.max_lat, HALF_PI - cut_off)
        south = max(projection.min_lat, -HALF_PI + cut_off)
        if north <= south:
            return []
        y_top = max(projection.screen_position(GeoCoordinate(center_lon, north), viewport).y, top)
        y_bottom = min(projection.screen_position(GeoCoordinate(center_lon, south), viewport).y, bottom)
        if y_top >= y_bottom:
            return []

        polygons = []
        for lon in (value, value + np.pi):
            x = projection.screen_position(GeoCoordinate(lon, 0.0), viewport).x
            for repeated_x in self._repeated_xs(x, viewport):
                if left <= repeated_x <= right:
                    polygons.append(ScreenPolygon([(repeated_x, y_top), (repeated_x, y_bottom)]))
        return polygons

    def _repeated_xs(self, x: float, viewport: ViewportParams) -> List[float]:
        if not (self.projection.repeat_x and isinstance(self.projection, CylindricalProjection)):
            return [x]
        width = CylindricalProjection.map_width(viewport)
        first = int(np.ceil(-x / width))
        last = int(np.ceil((viewport.width - x) / width)) - 1
        return [x + k * width for k in range(first, last + 1)]

    # =========================================================================
    # Painting
    # =========================================================================

    def paint_grid_map(self, painter: Painter, antialiasing: bool = True) -> None:
        """Draw every cached polygon as a polyline."""
        painter.set_pen(self.pen)
        painter.set_antialiasing(antialiasing)
        for polygon in self._polygons:
            points = list(polygon.points)
            if polygon.closed and points:
                points.append(points[0])
            painter.draw_polyline(points)
