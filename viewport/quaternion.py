"""
Quaternion Representation of the Globe Orientation.

The navigation layer describes how the globe is turned in front of the
viewer as a unit quaternion. Projections only ever read it: they rotate
unit-sphere vectors from the globe frame into the view frame (and back, for
inverse projection).

Conventions
-----------
- Components are stored as (w, x, y, z) with w the scalar part.
- Products follow Hamilton's convention; ``(a * b).rotate(v)`` applies
  ``b`` first, then ``a``.
- Rotations are right-handed: a positive angle about +x turns +y towards +z.

References
----------
- Shoemake, K. (1985). Animating rotation with quaternion curves.
  SIGGRAPH '85, 245-254.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple
import numpy as np
from numpy.typing import NDArray

from geospatial.spherical_geometry import lonlat_to_vector, vector_to_lonlat


@dataclass(frozen=True)
class Quaternion:
    """A rotation quaternion (w, x, y, z).

    Attributes
    ----------
    w : float
        Scalar part.
    x, y, z : float
        Vector part.

    Examples
    --------
    >>> q = Quaternion.from_axis_angle((0.0, 1.0, 0.0), np.pi / 2)
    >>> np.round(q.rotate((0.0, 0.0, 1.0)), 12)
    array([1., 0., 0.])
    """
    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def identity(cls) -> 'Quaternion':
        return cls(1.0, 0.0, 0.0, 0.0)

    @classmethod
    def from_axis_angle(cls, axis: Sequence[float], angle: float) -> 'Quaternion':
        """Rotation by `angle` radians about `axis`.

        Raises
        ------
        ValueError
            If the axis has zero length.
        """
        axis_arr = np.asarray(axis, dtype=np.float64)
        length = np.linalg.norm(axis_arr)
        if length == 0.0:
            raise ValueError("Rotation axis must not be the zero vector")
        axis_arr = axis_arr / length
        half = 0.5 * angle
        s = np.sin(half)
        return cls(float(np.cos(half)), float(axis_arr[0] * s),
                   float(axis_arr[1] * s), float(axis_arr[2] * s))

    @classmethod
    def from_euler(cls, pitch: float, yaw: float, roll: float) -> 'Quaternion':
        """Rotation by `pitch` about x, then `yaw` about y, then `roll` about z."""
        qx = cls.from_axis_angle((1.0, 0.0, 0.0), pitch)
        qy = cls.from_axis_angle((0.0, 1.0, 0.0), yaw)
        qz = cls.from_axis_angle((0.0, 0.0, 1.0), roll)
        return qz * qy * qx

    @classmethod
    def from_spherical(cls, longitude_rad: float, latitude_rad: float) -> 'Quaternion':
        """Pure (w = 0) quaternion holding the unit-sphere point."""
        v = lonlat_to_vector(longitude_rad, latitude_rad)
        return cls(0.0, float(v[0]), float(v[1]), float(v[2]))

    def to_spherical(self) -> Tuple[float, float]:
        """(longitude, latitude) of the vector part."""
        return vector_to_lonlat(np.array([self.x, self.y, self.z]))

    def __mul__(self, other: 'Quaternion') -> 'Quaternion':
        w1, x1, y1, z1 = self.w, self.x, self.y, self.z
        w2, x2, y2, z2 = other.w, other.x, other.y, other.z
        return Quaternion(
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
        )

    def conjugate(self) -> 'Quaternion':
        return Quaternion(self.w, -self.x, -self.y, -self.z)

    def norm(self) -> float:
        return float(np.sqrt(self.w ** 2 + self.x ** 2 + self.y ** 2 + self.z ** 2))

    def normalized(self) -> 'Quaternion':
        """Unit quaternion with the same orientation.

        Raises
        ------
        ValueError
            For the zero quaternion.
        """
        n = self.norm()
        if n == 0.0:
            raise ValueError("Cannot normalize a zero quaternion")
        return Quaternion(self.w / n, self.x / n, self.y / n, self.z / n)

    def inverse(self) -> 'Quaternion':
        n2 = self.norm() ** 2
        if n2 == 0.0:
            raise ValueError("Cannot invert a zero quaternion")
        c = self.conjugate()
        return Quaternion(c.w / n2, c.x / n2, c.y / n2, c.z / n2)

    def to_matrix(self) -> NDArray[np.float64]:
        """3x3 rotation matrix of the normalized quaternion."""
        q = self.normalized()
        w, x, y, z = q.w, q.x, q.y, q.z
        return np.array([
            [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)],
            [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
            [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)],
        ])

    def rotate(self, vector: Sequence[float]) -> NDArray[np.float64]:
        """Rotate a 3-D vector by this (normalized) quaternion."""
        return self.to_matrix() @ np.asarray(vector, dtype=np.float64)

    def slerp(self, other: 'Quaternion', t: float) -> 'Quaternion':
        """Spherical interpolation between two orientations.

        Takes the shorter path (``q`` and ``-q`` are the same rotation).
        """
        a = np.array([self.w, self.x, self.y, self.z]) / self.norm()
        b = np.array([other.w, other.x, other.y, other.z]) / other.norm()
        dot = float(np.dot(a, b))
        if dot < 0.0:
            b, dot = -b, -dot
        if dot > 0.9995:
            result = a + t * (b - a)
        else:
            theta = np.arccos(dot)
            result = (np.sin((1 - t) * theta) * a + np.sin(t * theta) * b) / np.sin(theta)
        result = result / np.linalg.norm(result)
        return Quaternion(*(float(c) for c in result))
