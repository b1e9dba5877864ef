"""
Mercator Projection.

Conformal cylindrical projection with ``Y(lat) = atanh(sin(lat))``. The
poles are at infinity, so the map is cut at ``atan(sinh(π))`` (about
85.0511°), the latitude at which the world map becomes square.
"""

import numpy as np

from common.constants import ProjectionConstants
from common.types import PreservationType
from projections.cylindrical import CylindricalProjection

MERCATOR_MAX_LATITUDE = ProjectionConstants.MERCATOR_MAX_LATITUDE.value


class MercatorProjection(CylindricalProjection):
    """Conformal flat map."""

    name = "Mercator"

    def preservation_type(self) -> PreservationType:
        return PreservationType.CONFORMAL

    def max_valid_lat(self) -> float:
        return MERCATOR_MAX_LATITUDE

    def min_valid_lat(self) -> float:
        return -MERCATOR_MAX_LATITUDE

    def projected_y(self, lat: float) -> float:
        return float(np.arctanh(np.sin(lat)))

    def inverse_projected_y(self, value: float) -> float:
        return float(np.arctan(np.sinh(value)))
