"""
Projections of the globe onto the screen.

This module provides:
- AbstractProjection: the projection contract and shared geometry
- SphericalProjection: orthographic globe
- CylindricalProjection: base of the flat maps
- EquirectProjection, MercatorProjection: concrete flat maps
- create_projection: factory by ProjectionKind or name
"""

from projections.abstract import AbstractProjection
from projections.spherical import SphericalProjection
from projections.cylindrical import CylindricalProjection
from projections.equirect import EquirectProjection
from projections.mercator import MercatorProjection
from projections.factory import ProjectionKind, create_projection

__all__ = [
    "AbstractProjection",
    "SphericalProjection",
    "CylindricalProjection",
    "EquirectProjection",
    "MercatorProjection",
    "ProjectionKind",
    "create_projection",
]
