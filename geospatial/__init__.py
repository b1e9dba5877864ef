"""
Geospatial Module for the Globe Projection Engine.

All spherical computations system-wide originate from this module. The
projections, the tessellation engine and the graticule generator use these
helpers rather than re-deriving the globe geometry.

This module provides:
- Longitude/latitude normalization (date line and pole folding)
- Conversion between geographic coordinates and unit vectors
- Great-circle interpolation and angular distance
"""

from geospatial.spherical_geometry import (
    HALF_PI,
    TWO_PI,
    normalize_longitude,
    normalize_lon_lat,
    lonlat_to_vector,
    vector_to_lonlat,
    central_angle,
    slerp,
    interpolate_lon_lat,
)

__all__ = [
    "HALF_PI",
    "TWO_PI",
    "normalize_longitude",
    "normalize_lon_lat",
    "lonlat_to_vector",
    "vector_to_lonlat",
    "central_angle",
    "slerp",
    "interpolate_lon_lat",
]
