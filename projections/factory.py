"""
Projection Factory.

Projections are plain values: every call returns a fresh, independently
configurable instance.
"""

from enum import Enum
from typing import Optional, Union

from projections.abstract import AbstractProjection
from projections.equirect import EquirectProjection
from projections.mercator import MercatorProjection
from projections.spherical import SphericalProjection
from tessellation.engine import TessellationConfig


class ProjectionKind(Enum):
    """Supported projection variants."""
    SPHERICAL = "spherical"
    EQUIRECTANGULAR = "equirectangular"
    MERCATOR = "mercator"


_PROJECTIONS = {
    ProjectionKind.SPHERICAL: SphericalProjection,
    ProjectionKind.EQUIRECTANGULAR: EquirectProjection,
    ProjectionKind.MERCATOR: MercatorProjection,
}


def create_projection(
    kind: Union[ProjectionKind, str],
    tessellation_config: Optional[TessellationConfig] = None
) -> AbstractProjection:
    """Create a projection by kind.

    Parameters
    ----------
    kind : ProjectionKind or str
        The variant, or its name (case-insensitive, e.g. ``"mercator"``).
    tessellation_config : TessellationConfig, optional
        Tessellation tuning for the new projection.

    Raises
    ------
    ValueError
        If `kind` names no known projection.
    """
    if isinstance(kind, str):
        try:
            kind = ProjectionKind(kind.strip().lower())
        except ValueError:
            options = ", ".join(k.value for k in ProjectionKind)
            raise ValueError(f"Unknown projection '{kind}'. Choose one of: {options}") from None
    return _PROJECTIONS[kind](tessellation_config)
