"""
Viewport Parameters.

`ViewportParams` is the read-only view state every projection call works
against: the size of the canvas, the globe radius in pixels and the globe
orientation. It is produced by the navigation collaborator once per render
pass; projections never keep a reference to it beyond a call.
"""

from dataclasses import dataclass, field, replace
from functools import cached_property
from typing import Sequence, Tuple
import numpy as np
from numpy.typing import NDArray

from common.types import ScreenRect
from geospatial.spherical_geometry import vector_to_lonlat
from viewport.quaternion import Quaternion


@dataclass(frozen=True)
class ViewportParams:
    """Viewport size, globe radius and orientation.

    Attributes
    ----------
    width, height : int
        Canvas size in pixels.
    radius : float
        Globe radius in pixels. For cylindrical projections the full map is
        ``4 * radius`` wide and ``2 * radius`` high.
    orientation : Quaternion
        Rotation from the globe frame into the view frame.

    Notes
    -----
    A viewport with zero radius or zero size is *degenerate*: it is valid
    to construct, and every projection query against it yields an empty or
    invisible result.

    Examples
    --------
    >>> vp = ViewportParams.centered_on(0.0, 0.0, radius=200, width=800, height=600)
    >>> vp.center_longitude, vp.center_latitude
    (0.0, 0.0)
    """
    width: int
    height: int
    radius: float
    orientation: Quaternion = field(default_factory=Quaternion.identity)

    def __post_init__(self):
        """Validate dimensions and normalize the orientation."""
        for name in ("width", "height", "radius"):
            value = getattr(self, name)
            if not np.isfinite(value) or value < 0:
                raise ValueError(f"Viewport {name} must be a non-negative number, got {value}")
        object.__setattr__(self, "orientation", self.orientation.normalized())

    @classmethod
    def centered_on(
        cls,
        longitude_rad: float,
        latitude_rad: float,
        radius: float,
        width: int,
        height: int
    ) -> 'ViewportParams':
        """Viewport looking straight at (longitude, latitude) with north up."""
        return cls(width, height, radius, orientation_for_center(longitude_rad, latitude_rad))

    def center_on(self, longitude_rad: float, latitude_rad: float) -> 'ViewportParams':
        return replace(self, orientation=orientation_for_center(longitude_rad, latitude_rad))

    def with_size(self, width: int, height: int) -> 'ViewportParams':
        return replace(self, width=width, height=height)

    def with_radius(self, radius: float) -> 'ViewportParams':
        return replace(self, radius=radius)

    def with_orientation(self, orientation: Quaternion) -> 'ViewportParams':
        return replace(self, orientation=orientation)

    @property
    def is_degenerate(self) -> bool:
        return self.radius <= 0 or self.width <= 0 or self.height <= 0

    @property
    def center_x(self) -> float:
        return 0.5 * self.width

    @property
    def center_y(self) -> float:
        return 0.5 * self.height

    def rect(self) -> ScreenRect:
        return ScreenRect(0, 0, self.width, self.height)

    @cached_property
    def rotation_matrix(self) -> NDArray[np.float64]:
        """Globe frame → view frame."""
        return self.orientation.to_matrix()

    @cached_property
    def _center(self) -> Tuple[float, float]:
        return vector_to_lonlat(self.rotation_matrix.T @ np.array([0.0, 0.0, 1.0]))

    @property
    def center_longitude(self) -> float:
        """Longitude shown at the screen centre, in radians."""
        return self._center[0]

    @property
    def center_latitude(self) -> float:
        """Latitude shown at the screen centre, in radians."""
        return self._center[1]

    def to_view(self, vector: Sequence[float]) -> NDArray[np.float64]:
        return self.rotation_matrix @ np.asarray(vector, dtype=np.float64)

    def from_view(self, vector: Sequence[float]) -> NDArray[np.float64]:
        return self.rotation_matrix.T @ np.asarray(vector, dtype=np.float64)


def orientation_for_center(longitude_rad: float, latitude_rad: float) -> Quaternion:
    """Orientation that brings (longitude, latitude) to the view axis.

    Turns the globe by -longitude about the polar (y) axis, then tilts it by
    +latitude about the horizontal (x) axis.
    """
    spin = Quaternion.from_axis_angle((0.0, 1.0, 0.0), -longitude_rad)
    tilt = Quaternion.from_axis_angle((1.0, 0.0, 0.0), latitude_rad)
    return tilt * spin
