"""
Equirectangular (Plate Carrée) Projection.

Latitude maps linearly onto the vertical axis, so the full world is a
``4R × 2R`` rectangle and every degree has the same height.
"""

from common.types import PreservationType
from projections.cylindrical import CylindricalProjection


class EquirectProjection(CylindricalProjection):
    """Flat map with equally spaced parallels."""

    name = "Flat Map"

    def preservation_type(self) -> PreservationType:
        return PreservationType.NO_PRESERVATION

    def projected_y(self, lat: float) -> float:
        return lat

    def inverse_projected_y(self, value: float) -> float:
        return value
