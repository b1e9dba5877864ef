"""
Spherical Geometry on the Unit Globe.

This module implements the coordinate conversions and great-circle
operations the projection engine is built on. The globe is modelled as a
unit sphere; screen scale is applied later by the viewport.

Scientific Context
------------------
Domain: Spherical trigonometry, vector geometry on S²
Model: Unit sphere (the rendered globe, not a geodetic ellipsoid)

Frame Convention
----------------
A geographic point (λ, φ) maps to the unit vector

    x = cos φ · sin λ
    y = sin φ
    z = cos φ · cos λ

so that (0, 0) faces the viewer along +z, north is +y and 90°E is +x.

Why Vector Interpolation
------------------------
Interpolating longitude and latitude linearly does not follow the
shortest path on the sphere: a segment between two high-latitude points
would bow towards the equator on an orthographic globe. Spherical linear
interpolation (slerp) of the unit vectors stays on the great circle and is
numerically stable near the poles, where longitude is degenerate.

References
----------
- Shoemake, K. (1985). Animating rotation with quaternion curves.
  SIGGRAPH '85, 245-254.
- Snyder, J.P. (1987). Map Projections - A Working Manual. USGS Prof. Paper 1395.
"""

from typing import Tuple
import numpy as np
from numpy.typing import NDArray


TWO_PI = 2.0 * np.pi
HALF_PI = 0.5 * np.pi

# Below this angle two unit vectors are treated as coincident
_COINCIDENT_ANGLE = 1e-12


def normalize_longitude(longitude_rad: float) -> float:
    """Wrap a longitude into (-π, π].

    Parameters
    ----------
    longitude_rad : float
        Longitude in radians, any range.

    Returns
    -------
    float
        Equivalent longitude in (-π, π].
    """
    lon = float(np.fmod(longitude_rad + np.pi, TWO_PI))
    if lon <= 0.0:
        lon += TWO_PI
    return lon - np.pi


def normalize_lon_lat(longitude_rad: float, latitude_rad: float) -> Tuple[float, float]:
    """Normalize a coordinate pair, folding latitudes across the poles.

    A latitude beyond ±π/2 continues over the pole onto the opposite
    meridian, so it is mirrored and the longitude is shifted by π.

    Parameters
    ----------
    longitude_rad, latitude_rad : float
        Coordinates in radians, any range.

    Returns
    -------
    Tuple[float, float]
        (longitude, latitude) with longitude in (-π, π] and latitude in
        [-π/2, π/2].
    """
    lat = normalize_longitude(latitude_rad)
    lon = float(longitude_rad)
    if lat > HALF_PI:
        lat = np.pi - lat
        lon += np.pi
    elif lat < -HALF_PI:
        lat = -np.pi - lat
        lon += np.pi
    return normalize_longitude(lon), float(lat)


def lonlat_to_vector(longitude_rad: float, latitude_rad: float) -> NDArray[np.float64]:
    """Convert a geographic coordinate to a unit vector.

    Parameters
    ----------
    longitude_rad, latitude_rad : float
        Coordinates in radians.

    Returns
    -------
    ndarray
        Shape (3,) unit vector in the globe frame.
    """
    cos_lat = np.cos(latitude_rad)
    return np.array([
        cos_lat * np.sin(longitude_rad),
        np.sin(latitude_rad),
        cos_lat * np.cos(longitude_rad),
    ])


def vector_to_lonlat(vector: NDArray[np.float64]) -> Tuple[float, float]:
    """Convert a (not necessarily unit) vector to longitude and latitude.

    Parameters
    ----------
    vector : ndarray
        Shape (3,) vector in the globe frame.

    Returns
    -------
    Tuple[float, float]
        (longitude_rad, latitude_rad). At the poles the longitude is 0.
    """
    x, y, z = (float(c) for c in vector)
    horizontal = np.hypot(x, z)
    lat = float(np.arctan2(y, horizontal))
    if horizontal < _COINCIDENT_ANGLE:
        return 0.0, lat
    return normalize_longitude(np.arctan2(x, z)), lat


def central_angle(a: NDArray[np.float64], b: NDArray[np.float64]) -> float:
    """Angle between two unit vectors, in radians.

    Uses atan2(|a × b|, a · b), which stays accurate for nearly
    coincident and nearly antipodal vectors (unlike acos of the dot
    product).
    """
    return float(np.arctan2(np.linalg.norm(np.cross(a, b)), np.dot(a, b)))


def slerp(a: NDArray[np.float64], b: NDArray[np.float64], t: float) -> NDArray[np.float64]:
    """Spherical linear interpolation between two unit vectors.

    Parameters
    ----------
    a, b : ndarray
        Shape (3,) unit vectors.
    t : float
        Interpolation parameter; 0 yields `a`, 1 yields `b`.

    Returns
    -------
    ndarray
        Shape (3,) unit vector on the great circle through `a` and `b`.

    Notes
    -----
    For antipodal endpoints the great circle is not unique; the arc is then
    taken through the plane spanned by `a` and the globe's north axis (or
    the x axis when `a` is a pole).
    """
    omega = central_angle(a, b)
    if omega < _COINCIDENT_ANGLE:
        return a.copy()

    if np.pi - omega < 1e-9:
        axis = np.array([0.0, 1.0, 0.0])
        if abs(float(np.dot(a, axis))) > 0.999:
            axis = np.array([1.0, 0.0, 0.0])
        ortho = axis - np.dot(axis, a) * a
        ortho /= np.linalg.norm(ortho)
        angle = t * omega
        return np.cos(angle) * a + np.sin(angle) * ortho

    sin_omega = np.sin(omega)
    result = (np.sin((1.0 - t) * omega) * a + np.sin(t * omega) * b) / sin_omega
    return result / np.linalg.norm(result)


def interpolate_lon_lat(
    a: Tuple[float, float],
    b: Tuple[float, float],
    t: float
) -> Tuple[float, float]:
    """Linear interpolation in longitude/latitude along the shorter way round.

    Parameters
    ----------
    a, b : Tuple[float, float]
        (longitude, latitude) endpoints in radians.
    t : float
        Interpolation parameter in [0, 1].

    Returns
    -------
    Tuple[float, float]
        Interpolated (longitude, latitude), longitude normalized.
    """
    delta_lon = normalize_longitude(b[0] - a[0])
    lon = a[0] + t * delta_lon
    lat = a[1] + t * (b[1] - a[1])
    return normalize_longitude(lon), float(lat)
