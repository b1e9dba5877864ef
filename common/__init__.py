"""
Common utilities and infrastructure for the Globe Projection Engine.

This package provides foundational components used across all modules:
- Projection constants with units and provenance
- Unit registry and angle conversion at the I/O boundary
- Value types (coordinates, line strings, screen polygons, bounding boxes)
- Logging infrastructure
"""

from common.constants import ProjectionConstants
from common.units import AngleUnit, ureg, Q_, to_radians, from_radians, ensure_angle
from common.types import (
    GeoCoordinate,
    GeoLineString,
    GeoLinearRing,
    LatLonAltBox,
    ScreenPolygon,
    ScreenPosition,
    RepeatedScreenPosition,
    ScreenRect,
    ScreenSize,
    SurfaceType,
    PreservationType,
    TessellationFlags,
)
from common.logging_config import get_logger

__all__ = [
    "ProjectionConstants",
    "AngleUnit",
    "ureg",
    "Q_",
    "to_radians",
    "from_radians",
    "ensure_angle",
    "GeoCoordinate",
    "GeoLineString",
    "GeoLinearRing",
    "LatLonAltBox",
    "ScreenPolygon",
    "ScreenPosition",
    "RepeatedScreenPosition",
    "ScreenRect",
    "ScreenSize",
    "SurfaceType",
    "PreservationType",
    "TessellationFlags",
    "get_logger",
]
