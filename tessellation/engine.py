"""
Adaptive Line-Segment Tessellation.

Turns one geographic segment a → b into screen-space fragments. Intermediate
nodes are inserted breadth-first by halving every interval whose projected
Manhattan length exceeds the precision threshold, so the subdivision is
balanced along the segment and bounded by a node cap.

The node path is then walked once:

- a step that passes behind the globe ends the current fragment at the
  horizon point, found by bisection on the segment parameter
- a step that comes back from behind the globe starts a new fragment at the
  horizon point
- a step that crosses a map seam ends the current fragment on one map edge
  and starts the next one on the opposite edge

Output Convention
-----------------
The start point `a` is never emitted (the caller already holds it) and the
end point `b` is emitted when visible. Fragment 0 continues the caller's
current polygon; every later fragment starts a new polygon. A trailing empty
fragment means the caller's polygon ends inside this segment.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, List, Optional
import numpy as np

from common.constants import MAX_TESSELLATION_NODES, TESSELLATION_PRECISION
from common.logging_config import get_logger
from common.types import GeoCoordinate, ScreenPoint, ScreenPolygon, ScreenPosition, TessellationFlags
from geospatial.spherical_geometry import (
    central_angle,
    interpolate_lon_lat,
    normalize_longitude,
    slerp,
    vector_to_lonlat,
)
from viewport.params import ViewportParams

if TYPE_CHECKING:
    from projections.abstract import AbstractProjection

logger = get_logger(__name__)

# Intervals spanning more than this arc are halved regardless of their
# projected length (both ends can project to the same pixel on a globe)
MAX_INTERVAL_ARC = np.pi / 8

# Segment parameter below which intervals are no longer halved
MIN_INTERVAL = 1e-9

# Halving depth used to fill the stretch between a node and the horizon
MAX_BRIDGE_DEPTH = 8

# Consecutive fragment points closer than this are the same vertex
SAME_POINT_PX = 1e-9


@dataclass(frozen=True)
class TessellationConfig:
    """Tessellation tuning.

    Attributes
    ----------
    precision_px : float
        Maximum Manhattan distance in pixels between neighbouring emitted
        points.
    max_nodes : int
        Maximum number of intermediate nodes inserted per segment.
    horizon_iterations : int
        Bisection steps used to locate a horizon point.
    """
    precision_px: float = TESSELLATION_PRECISION
    max_nodes: int = MAX_TESSELLATION_NODES
    horizon_iterations: int = 48

    def __post_init__(self):
        if not self.precision_px > 0:
            raise ValueError(f"precision_px must be positive, got {self.precision_px}")
        if self.max_nodes < 0:
            raise ValueError(f"max_nodes must be non-negative, got {self.max_nodes}")
        if self.horizon_iterations < 1:
            raise ValueError(f"horizon_iterations must be at least 1, got {self.horizon_iterations}")


@dataclass(frozen=True)
class _Node:
    """A point of the segment at parameter t ∈ [0, 1]."""
    t: float
    coordinate: GeoCoordinate
    position: ScreenPosition

    @property
    def hidden(self) -> bool:
        return self.position.globe_hides_point

    @property
    def point(self) -> ScreenPoint:
        return self.position.x, self.position.y


def segment_interpolator(
    a: GeoCoordinate,
    b: GeoCoordinate,
    flags: TessellationFlags
) -> Callable[[float], GeoCoordinate]:
    """Parametric path from a (t = 0) to b (t = 1).

    Follows the great circle when `FOLLOW_GREAT_CIRCLE` is set, otherwise
    interpolates longitude and latitude linearly along the shorter longitude
    direction. Altitude is always interpolated linearly.
    """
    va, vb = a.unit_vector(), b.unit_vector()
    great_circle = bool(flags & TessellationFlags.FOLLOW_GREAT_CIRCLE)

    def at(t: float) -> GeoCoordinate:
        if t <= 0.0:
            return a
        if t >= 1.0:
            return b
        if great_circle:
            lon, lat = vector_to_lonlat(slerp(va, vb, t))
        else:
            lon, lat = interpolate_lon_lat((a.longitude, a.latitude), (b.longitude, b.latitude), t)
        return GeoCoordinate(lon, lat, a.altitude + t * (b.altitude - a.altitude))

    return at


def segment_arc(a: GeoCoordinate, b: GeoCoordinate, flags: TessellationFlags) -> float:
    """Angular extent of the interpolated path, in radians."""
    if flags & TessellationFlags.FOLLOW_GREAT_CIRCLE:
        return central_angle(a.unit_vector(), b.unit_vector())
    dlon = abs(normalize_longitude(b.longitude - a.longitude))
    return max(dlon, abs(b.latitude - a.latitude))


def tessellate_line_segment(
    projection: 'AbstractProjection',
    a: GeoCoordinate,
    b: GeoCoordinate,
    viewport: ViewportParams,
    flags: TessellationFlags = TessellationFlags.FOLLOW_GREAT_CIRCLE,
    config: TessellationConfig = TessellationConfig(),
    subdivide: bool = True
) -> List[ScreenPolygon]:
    """Screen fragments of the segment a → b.

    Parameters
    ----------
    projection : AbstractProjection
        Projection used to place the nodes.
    a, b : GeoCoordinate
        Segment endpoints.
    viewport : ViewportParams
        The viewport parameters.
    flags : TessellationFlags
        Interpolation and ground-clamping behaviour.
    config : TessellationConfig
        Precision threshold and node cap.
    subdivide : bool
        Insert intermediate nodes. When False the segment is still split at
        the horizon and at map seams.

    Returns
    -------
    List[ScreenPolygon]
        Fragments following the module's output convention. Empty for a
        degenerate viewport.
    """
    if viewport.is_degenerate:
        return []

    interpolate = segment_interpolator(a, b, flags)

    def node_at(t: float) -> _Node:
        coordinate = interpolate(t)
        return _Node(t, coordinate, projection.screen_position(coordinate, viewport))

    nodes = [node_at(0.0), node_at(1.0)]
    if subdivide:
        nodes = _subdivide(nodes, node_at, projection, viewport, config, segment_arc(a, b, flags))

    fragments = _split(nodes, node_at, projection, viewport, config, subdivide)

    if flags & TessellationFlags.CLAMP_TO_GROUND:
        ground_a = projection.screen_position(a.with_altitude(0.0), viewport)
        ground_b = projection.screen_position(b.with_altitude(0.0), viewport)
        if not ground_a.globe_hides_point and not nodes[0].hidden:
            fragments[0].points.insert(0, (ground_a.x, ground_a.y))
        if not ground_b.globe_hides_point and fragments[-1]:
            fragments[-1].append((ground_b.x, ground_b.y))

    return fragments


def _subdivide(
    nodes: List[_Node],
    node_at: Callable[[float], _Node],
    projection: 'AbstractProjection',
    viewport: ViewportParams,
    config: TessellationConfig,
    arc: float
) -> List[_Node]:
    """Halve intervals breadth-first until every interval is short enough."""
    inserted = 0
    changed = True
    while changed:
        changed = False
        refined = [nodes[0]]
        for left, right in zip(nodes, nodes[1:]):
            span = right.t - left.t
            too_long = (
                span * arc > MAX_INTERVAL_ARC
                or projection.screen_distance(left.position, right.position, viewport) > config.precision_px
            )
            if too_long and span > MIN_INTERVAL and inserted < config.max_nodes:
                refined.append(node_at(left.t + 0.5 * span))
                inserted += 1
                changed = True
            refined.append(right)
        nodes = refined

    if inserted >= config.max_nodes:
        logger.debug(f"Tessellation hit the node cap of {config.max_nodes}")
    return nodes


def _split(
    nodes: List[_Node],
    node_at: Callable[[float], _Node],
    projection: 'AbstractProjection',
    viewport: ViewportParams,
    config: TessellationConfig,
    refine: bool
) -> List[ScreenPolygon]:
    """Walk the node path, cutting fragments at the horizon and at seams."""
    def bridge(left: _Node, right: _Node, depth: int = 0) -> List[ScreenPoint]:
        # Points strictly between two visible nodes, refined down to precision
        if not refine or depth >= MAX_BRIDGE_DEPTH:
            return []
        if projection.screen_distance(left.position, right.position, viewport) <= config.precision_px:
            return []
        mid = node_at(0.5 * (left.t + right.t))
        if mid.hidden:
            return []
        return bridge(left, mid, depth + 1) + [mid.point] + bridge(mid, right, depth + 1)

    fragments = [ScreenPolygon()]
    previous = nodes[0]
    for node in nodes[1:]:
        if node.hidden and not previous.hidden:
            horizon = _horizon_node(previous, node, node_at, config)
            fragments[-1].extend(bridge(previous, horizon))
            fragments[-1].append(horizon.point)
            fragments.append(ScreenPolygon())
        elif previous.hidden and not node.hidden:
            horizon = _horizon_node(node, previous, node_at, config)
            if fragments[-1]:
                fragments.append(ScreenPolygon())
            fragments[-1].append(horizon.point)
            fragments[-1].extend(bridge(horizon, node))
            fragments[-1].append(node.point)
        elif not node.hidden:
            crossing = projection.date_line_crossing(previous.coordinate, node.coordinate, viewport)
            if crossing is not None:
                exit_point, entry_point = crossing
                drawn = fragments[-1].last if fragments[-1] else previous.point
                if not _same_point(drawn, exit_point):
                    fragments[-1].append(exit_point)
                fragments.append(ScreenPolygon([entry_point]))
            if not _same_point(fragments[-1].last, node.point):
                fragments[-1].append(node.point)
        previous = node
    return fragments


def _horizon_node(
    visible: _Node,
    hidden: _Node,
    node_at: Callable[[float], _Node],
    config: TessellationConfig
) -> _Node:
    """Last visible node between a visible and a hidden node."""
    for _ in range(config.horizon_iterations):
        mid = node_at(0.5 * (visible.t + hidden.t))
        if mid.hidden:
            hidden = mid
        else:
            visible = mid
    return visible


def _same_point(p: Optional[ScreenPoint], q: ScreenPoint) -> bool:
    return p is not None and abs(p[0] - q[0]) <= SAME_POINT_PX and abs(p[1] - q[1]) <= SAME_POINT_PX
