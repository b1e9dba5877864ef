"""
Projection and Rendering Constants.

This module provides the numeric constants shared by the projection,
tessellation and graticule layers, together with their units and sources.

References
----------
- Mercator latitude limit: atan(sinh(π)), the latitude at which a square
  Mercator world map ends.
- Obliquity of the ecliptic (tropic latitude): IAU 2006, J2000.0 epoch.
- Earth mean radius: IUGG.
"""

from dataclasses import dataclass
from typing import Final
import numpy as np


@dataclass(frozen=True)
class Constant:
    """A named constant with unit and provenance.

    Attributes
    ----------
    value : float
        The nominal value of the constant.
    unit : str
        The unit of the constant.
    source : str
        Reference for the constant value.
    description : str
        Human-readable description of the constant.
    """
    value: float
    unit: str
    source: str
    description: str


class ProjectionConstants:
    """Registry of constants used throughout the projection engine.

    All constants are class attributes with full metadata.

    Tessellation
    ------------
    Pixel thresholds and node limits for great-circle subdivision.

    Geometry
    --------
    Latitude limits and reference circles on the sphere.
    """

    # =========================================================================
    # Tessellation
    # =========================================================================

    TESSELLATION_PRECISION: Final[Constant] = Constant(
        value=10.0,
        unit="px",
        source="Globe renderer tessellation contract",
        description="Manhattan distance at which extra tessellation nodes get created"
    )

    MAX_TESSELLATION_NODES: Final[Constant] = Constant(
        value=200,
        unit="nodes",
        source="Globe renderer tessellation contract",
        description="Upper bound of nodes inserted into a single line segment"
    )

    LATLONALTBOX_SAMPLING_RATE: Final[Constant] = Constant(
        value=4,
        unit="px",
        source="Globe renderer bounding box contract",
        description="Pixel step between samples along a screen rectangle edge"
    )

    # =========================================================================
    # Latitude limits and reference circles
    # =========================================================================

    MERCATOR_MAX_LATITUDE: Final[Constant] = Constant(
        value=float(np.arctan(np.sinh(np.pi))),
        unit="rad",
        source="atan(sinh(π)) ≈ 85.0511°",
        description="Latitude at which the Mercator map is cut off"
    )

    TROPIC_LATITUDE: Final[Constant] = Constant(
        value=float(np.radians(23.4394)),
        unit="rad",
        source="IAU 2006 obliquity of the ecliptic (J2000.0)",
        description="Latitude of the tropics of Cancer and Capricorn"
    )

    POLAR_CIRCLE_LATITUDE: Final[Constant] = Constant(
        value=float(np.radians(90.0 - 23.4394)),
        unit="rad",
        source="Complement of the tropic latitude",
        description="Latitude of the arctic and antarctic circles"
    )

    # =========================================================================
    # Graticule
    # =========================================================================

    GRID_SPACING: Final[Constant] = Constant(
        value=float(np.radians(15.0)),
        unit="rad",
        source="Globe renderer default graticule",
        description="Angular spacing between neighbouring grid circles"
    )

    DEFAULT_GRID_PRECISION: Final[Constant] = Constant(
        value=20,
        unit="nodes per quarter circle",
        source="Globe renderer default graticule",
        description="Number of nodes used to approximate a quarter circle"
    )

    # =========================================================================
    # Earth
    # =========================================================================

    EARTH_MEAN_RADIUS: Final[Constant] = Constant(
        value=6_371_008.8,
        unit="m",
        source="IUGG mean radius",
        description="Mean radius of Earth, used to scale altitudes onto the globe"
    )


# Plain aliases for hot paths
TESSELLATION_PRECISION: Final[float] = ProjectionConstants.TESSELLATION_PRECISION.value
MAX_TESSELLATION_NODES: Final[int] = int(ProjectionConstants.MAX_TESSELLATION_NODES.value)
LATLONALTBOX_SAMPLING_RATE: Final[int] = int(ProjectionConstants.LATLONALTBOX_SAMPLING_RATE.value)
