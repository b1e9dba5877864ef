"""
Type Definitions for the Globe Projection Engine.

This module defines the value types exchanged between the projection
contract, the tessellation engine, the graticule generator and their
collaborators (navigation, map data and rendering layers).

Design Rationale
----------------
Using typed dataclasses instead of raw tuples/dicts provides:
1. Self-documenting code - field names describe the data
2. Immutability where the engine must not retain or mutate caller state
3. Runtime validation of coordinates at construction time
4. Clear unit expectations in docstrings (radians inside, any unit outside)
"""

from dataclasses import dataclass, field, replace
from enum import Enum, Flag, auto
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, Union
import numpy as np
from numpy.typing import NDArray

from common.units import AngleLike, AngleUnit, from_radians, to_radians
from geospatial.spherical_geometry import (
    HALF_PI,
    TWO_PI,
    lonlat_to_vector,
    normalize_lon_lat,
    normalize_longitude,
)


ScreenPoint = Tuple[float, float]


class SurfaceType(Enum):
    """Surface a projection is developed onto (descriptive metadata)."""
    CYLINDRICAL = "cylindrical"
    PSEUDOCYLINDRICAL = "pseudocylindrical"
    HYBRID = "hybrid"
    CONICAL = "conical"
    PSEUDOCONICAL = "pseudoconical"
    AZIMUTHAL = "azimuthal"


class PreservationType(Enum):
    """Metric property a projection preserves (descriptive metadata)."""
    NO_PRESERVATION = "none"
    CONFORMAL = "conformal"
    EQUAL_AREA = "equal_area"


class TessellationFlags(Flag):
    """Independent options controlling line segment tessellation.

    FOLLOW_GREAT_CIRCLE
        Interpolate along the great circle instead of linearly in
        longitude/latitude.
    CLAMP_TO_GROUND
        Add the ground-level (altitude 0) endpoints to the polygon.
    """
    NONE = 0
    FOLLOW_GREAT_CIRCLE = auto()
    CLAMP_TO_GROUND = auto()


@dataclass(frozen=True)
class GeoCoordinate:
    """A geographic coordinate on the globe.

    This is the fundamental spatial type of the engine. All positions
    handed to a projection are represented using this class.

    Attributes
    ----------
    longitude : float
        Longitude in RADIANS, normalized to (-π, π].
    latitude : float
        Latitude in RADIANS, normalized to [-π/2, π/2].
    altitude : float, optional
        Height above the globe surface in METERS. Default is 0.

    Notes
    -----
    - Latitudes beyond a pole are folded back over it (the longitude moves
      to the opposite meridian).
    - Use `from_degrees`/`from_unit` and `to_degrees` at the boundary;
      everything inside the engine works in radians.

    Examples
    --------
    >>> coord = GeoCoordinate.from_degrees(-80.1918, 25.7617)
    >>> lon_deg, lat_deg = coord.to_degrees()
    >>> print(f"Miami: {lat_deg:.4f}°N, {abs(lon_deg):.4f}°W")
    Miami: 25.7617°N, 80.1918°W
    """
    longitude: float  # radians
    latitude: float  # radians
    altitude: float = 0.0  # meters

    def __post_init__(self):
        """Validate and normalize coordinate ranges."""
        if not (np.isfinite(self.longitude) and np.isfinite(self.latitude)
                and np.isfinite(self.altitude)):
            raise ValueError(
                f"Non-finite coordinate ({self.longitude}, {self.latitude}, "
                f"{self.altitude})"
            )
        lon, lat = normalize_lon_lat(self.longitude, self.latitude)
        object.__setattr__(self, "longitude", lon)
        object.__setattr__(self, "latitude", lat)
        object.__setattr__(self, "altitude", float(self.altitude))

    @classmethod
    def from_degrees(cls, lon_deg: float, lat_deg: float, alt_m: float = 0.0) -> 'GeoCoordinate':
        """Create coordinate from degrees (convenience constructor)."""
        return cls(
            longitude=float(np.radians(lon_deg)),
            latitude=float(np.radians(lat_deg)),
            altitude=alt_m
        )

    @classmethod
    def from_unit(
        cls,
        lon: AngleLike,
        lat: AngleLike,
        alt_m: float = 0.0,
        unit: AngleUnit = AngleUnit.RADIAN
    ) -> 'GeoCoordinate':
        """Create coordinate from values in an arbitrary angular unit.

        Parameters
        ----------
        lon, lat : float or pint.Quantity
            Angles. Quantities carry their own unit; bare floats use `unit`.
        alt_m : float
            Altitude in meters.
        unit : AngleUnit
            Unit of bare float angles.

        Returns
        -------
        GeoCoordinate
            Coordinate with internally stored radians.
        """
        return cls(to_radians(lon, unit), to_radians(lat, unit), alt_m)

    def to_degrees(self) -> Tuple[float, float]:
        """Convert to degrees for display.

        Returns
        -------
        Tuple[float, float]
            (longitude_degrees, latitude_degrees)
        """
        return float(np.degrees(self.longitude)), float(np.degrees(self.latitude))

    def longitude_in(self, unit: AngleUnit) -> float:
        return from_radians(self.longitude, unit)

    def latitude_in(self, unit: AngleUnit) -> float:
        return from_radians(self.latitude, unit)

    def with_altitude(self, altitude: float) -> 'GeoCoordinate':
        return replace(self, altitude=altitude)

    def unit_vector(self) -> NDArray[np.float64]:
        """Position on the unit sphere (altitude ignored)."""
        return lonlat_to_vector(self.longitude, self.latitude)


class GeoLineString:
    """Ordered sequence of coordinates, owned by the map data layer.

    Parameters
    ----------
    coordinates : iterable of GeoCoordinate
        The nodes of the line string.
    tessellate : bool
        Whether segments get subdivided to follow the globe's curvature.
    flags : TessellationFlags
        Interpolation options used when tessellating.
    """

    is_closed = False

    def __init__(
        self,
        coordinates: Iterable[GeoCoordinate] = (),
        tessellate: bool = True,
        flags: TessellationFlags = TessellationFlags.FOLLOW_GREAT_CIRCLE
    ):
        self._coordinates: Tuple[GeoCoordinate, ...] = tuple(coordinates)
        self.tessellate = tessellate
        self.flags = flags

    @classmethod
    def from_degrees(
        cls,
        points: Iterable[Sequence[float]],
        **kwargs
    ) -> 'GeoLineString':
        """Build from (lon, lat[, alt]) tuples in degrees."""
        return cls((GeoCoordinate.from_degrees(*p) for p in points), **kwargs)

    @property
    def coordinates(self) -> Tuple[GeoCoordinate, ...]:
        return self._coordinates

    def __len__(self) -> int:
        return len(self._coordinates)

    def __iter__(self) -> Iterator[GeoCoordinate]:
        return iter(self._coordinates)

    def __getitem__(self, index: int) -> GeoCoordinate:
        return self._coordinates[index]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({len(self)} nodes)"

    def segments(self) -> Iterator[Tuple[GeoCoordinate, GeoCoordinate]]:
        """Consecutive coordinate pairs, including the closing pair of a ring."""
        nodes = self._coordinates
        for a, b in zip(nodes, nodes[1:]):
            yield a, b
        if self.is_closed and len(nodes) > 2 and nodes[0] != nodes[-1]:
            yield nodes[-1], nodes[0]

    def lat_lon_alt_box(self) -> 'LatLonAltBox':
        return LatLonAltBox.from_coordinates(self._coordinates)


class GeoLinearRing(GeoLineString):
    """A line string that is implicitly closed (last node joins the first)."""

    is_closed = True


@dataclass(frozen=True)
class LatLonAltBox:
    """Axis-aligned bounding box in geographic space.

    Attributes
    ----------
    west, east : float
        Longitude bounds in radians. ``west > east`` means the box crosses
        the date line.
    south, north : float
        Latitude bounds in radians.
    min_altitude, max_altitude : float
        Altitude range in meters.
    empty : bool
        True for the box that contains nothing.
    """
    west: float
    east: float
    south: float
    north: float
    min_altitude: float = 0.0
    max_altitude: float = 0.0
    empty: bool = False

    @classmethod
    def empty_box(cls) -> 'LatLonAltBox':
        return cls(0.0, 0.0, 0.0, 0.0, empty=True)

    @classmethod
    def global_box(cls) -> 'LatLonAltBox':
        return cls(-np.pi, np.pi, -HALF_PI, HALF_PI)

    @classmethod
    def from_coordinates(cls, coordinates: Iterable[GeoCoordinate]) -> 'LatLonAltBox':
        """Smallest box containing all coordinates.

        The longitude interval is found by removing the largest gap between
        neighbouring longitudes on the circle, so that a set of points
        straddling the date line yields a box crossing it rather than one
        spanning the whole globe.
        """
        coords = list(coordinates)
        if not coords:
            return cls.empty_box()

        lons = np.sort(np.array([c.longitude for c in coords]))
        lats = [c.latitude for c in coords]
        alts = [c.altitude for c in coords]

        if len(lons) == 1:
            west = east = float(lons[0])
        else:
            gaps = np.diff(lons)
            wrap_gap = lons[0] + TWO_PI - lons[-1]
            i = int(np.argmax(gaps))
            if wrap_gap >= gaps[i]:
                west, east = float(lons[0]), float(lons[-1])
            else:
                west, east = float(lons[i + 1]), float(lons[i])

        return cls(
            west=west,
            east=east,
            south=float(min(lats)),
            north=float(max(lats)),
            min_altitude=float(min(alts)),
            max_altitude=float(max(alts)),
        )

    @property
    def crosses_date_line(self) -> bool:
        return not self.empty and self.west > self.east

    @property
    def width(self) -> float:
        """Longitude extent in radians."""
        if self.empty:
            return 0.0
        if self.crosses_date_line:
            return self.east - self.west + TWO_PI
        return self.east - self.west

    @property
    def height(self) -> float:
        """Latitude extent in radians."""
        return 0.0 if self.empty else self.north - self.south

    @property
    def is_global_longitude(self) -> bool:
        return not self.empty and self.width >= TWO_PI - 1e-12

    def center(self) -> GeoCoordinate:
        return GeoCoordinate(
            self.west + 0.5 * self.width,
            0.5 * (self.south + self.north),
            0.5 * (self.min_altitude + self.max_altitude),
        )

    def contains(self, coordinate: GeoCoordinate, tolerance: float = 0.0) -> bool:
        """Whether a coordinate lies inside the box (altitude ignored)."""
        if self.empty:
            return False
        lat = coordinate.latitude
        if lat < self.south - tolerance or lat > self.north + tolerance:
            return False
        if self.is_global_longitude:
            return True
        offset = normalize_longitude(coordinate.longitude - self.west)
        if offset < 0.0:
            offset += TWO_PI
        # offset close to 2π is the west edge approached from the west
        return offset <= self.width + tolerance or TWO_PI - offset <= tolerance

    def padded(self, lat_pad: float, lon_pad: float) -> 'LatLonAltBox':
        """Grow the box by the given margins, saturating at the globe."""
        if self.empty:
            return self
        north = min(self.north + lat_pad, HALF_PI)
        south = max(self.south - lat_pad, -HALF_PI)
        if self.width + 2.0 * lon_pad >= TWO_PI:
            west, east = -np.pi, np.pi
        else:
            west = normalize_longitude(self.west - lon_pad)
            east = normalize_longitude(self.east + lon_pad)
        return replace(self, west=west, east=east, south=south, north=north)

    def union(self, other: 'LatLonAltBox') -> 'LatLonAltBox':
        """Smallest box containing both boxes."""
        if self.empty:
            return other
        if other.empty:
            return self

        # Two candidate arcs: grow eastward from either west edge
        def span(first: 'LatLonAltBox', second: 'LatLonAltBox') -> float:
            delta = normalize_longitude(second.west - first.west)
            if delta < 0.0:
                delta += TWO_PI
            return max(first.width, delta + second.width)

        span_self = span(self, other)
        span_other = span(other, self)
        if min(span_self, span_other) >= TWO_PI:
            west, east = -np.pi, np.pi
        elif span_self <= span_other:
            west, east = self.west, normalize_longitude(self.west + span_self)
        else:
            west, east = other.west, normalize_longitude(other.west + span_other)

        return LatLonAltBox(
            west=west,
            east=east,
            south=min(self.south, other.south),
            north=max(self.north, other.north),
            min_altitude=min(self.min_altitude, other.min_altitude),
            max_altitude=max(self.max_altitude, other.max_altitude),
        )


@dataclass
class ScreenPolygon:
    """One contiguous visible contour in screen space.

    Attributes
    ----------
    points : List[ScreenPoint]
        Ordered (x, y) pixel positions.
    closed : bool
        Whether the last point joins the first.
    """
    points: List[ScreenPoint] = field(default_factory=list)
    closed: bool = False

    def append(self, point: ScreenPoint) -> None:
        self.points.append((float(point[0]), float(point[1])))

    def extend(self, points: Iterable[ScreenPoint]) -> None:
        for point in points:
            self.append(point)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[ScreenPoint]:
        return iter(self.points)

    def __bool__(self) -> bool:
        return bool(self.points)

    @property
    def first(self) -> Optional[ScreenPoint]:
        return self.points[0] if self.points else None

    @property
    def last(self) -> Optional[ScreenPoint]:
        return self.points[-1] if self.points else None

    def as_array(self) -> NDArray[np.float64]:
        """Points as an (N, 2) array."""
        return np.asarray(self.points, dtype=np.float64).reshape(-1, 2)


@dataclass(frozen=True)
class ScreenPosition:
    """Result of projecting a single coordinate.

    Attributes
    ----------
    x, y : float
        Screen position in pixels (also set for invisible points).
    visible : bool
        Whether the point is drawn inside the viewport.
    globe_hides_point : bool
        Whether the point is behind the globe (distinct from merely lying
        outside the viewport).
    """
    x: float
    y: float
    visible: bool
    globe_hides_point: bool = False


@dataclass(frozen=True)
class RepeatedScreenPosition:
    """Every screen position at which a coordinate is drawable.

    Attributes
    ----------
    xs : List[float]
        Screen x for each repetition across the viewport.
    y : float
        Shared screen y.
    repeat_count : int
        Number of repetitions (``len(xs)``).
    globe_hides_point : bool
        Whether the point is behind the globe.
    """
    xs: List[float]
    y: float
    globe_hides_point: bool = False

    @property
    def repeat_count(self) -> int:
        return len(self.xs)

    @property
    def visible(self) -> bool:
        return bool(self.xs)


@dataclass(frozen=True)
class ScreenSize:
    """Footprint of an object drawn at a projected point, in pixels."""
    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True)
class ScreenRect:
    """Axis-aligned pixel rectangle; `right`/`bottom` are inclusive edges."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.right and self.y <= py <= self.bottom

    def intersected(self, other: 'ScreenRect') -> 'ScreenRect':
        left = max(self.x, other.x)
        top = max(self.y, other.y)
        right = min(self.right, other.right)
        bottom = min(self.bottom, other.bottom)
        return ScreenRect(left, top, max(0.0, right - left), max(0.0, bottom - top))


LineStringLike = Union[GeoLineString, Sequence[GeoCoordinate]]
