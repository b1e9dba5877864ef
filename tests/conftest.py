"""Shared pytest fixtures for the globe projection engine test suite."""

from typing import List, Sequence, Tuple

import numpy as np
import pytest

from graticule.grid_map import Pen
from projections import EquirectProjection, MercatorProjection, SphericalProjection
from viewport import ViewportParams

# ---------------------------------------------------------------------------
# Viewport fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def viewport() -> ViewportParams:
    """800x600 canvas, globe radius 200 px, looking at (0°, 0°)."""
    return ViewportParams(800, 600, 200.0)


@pytest.fixture()
def tilted_viewport() -> ViewportParams:
    """800x600 canvas, globe radius 250 px, looking at (30°E, 40°N)."""
    return ViewportParams.centered_on(np.radians(30.0), np.radians(40.0), 250.0, 800, 600)


@pytest.fixture()
def zoomed_viewport() -> ViewportParams:
    """Globe larger than the canvas, looking at (10°W, 50°N)."""
    return ViewportParams.centered_on(np.radians(-10.0), np.radians(50.0), 900.0, 800, 600)


@pytest.fixture()
def degenerate_viewport() -> ViewportParams:
    """Zero-radius viewport."""
    return ViewportParams(800, 600, 0.0)


# ---------------------------------------------------------------------------
# Projection fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def spherical() -> SphericalProjection:
    return SphericalProjection()


@pytest.fixture()
def equirect() -> EquirectProjection:
    return EquirectProjection()


@pytest.fixture()
def mercator() -> MercatorProjection:
    return MercatorProjection()


@pytest.fixture(params=["spherical", "equirect", "mercator"])
def any_projection(request):
    """Each projection family in turn."""
    return {
        "spherical": SphericalProjection,
        "equirect": EquirectProjection,
        "mercator": MercatorProjection,
    }[request.param]()


# ---------------------------------------------------------------------------
# Painter fixture
# ---------------------------------------------------------------------------


class RecordingPainter:
    """Painter that records every call."""

    def __init__(self) -> None:
        self.pens: List[Pen] = []
        self.antialiasing: List[bool] = []
        self.polylines: List[List[Tuple[float, float]]] = []

    def set_pen(self, pen: Pen) -> None:
        self.pens.append(pen)

    def set_antialiasing(self, enabled: bool) -> None:
        self.antialiasing.append(enabled)

    def draw_polyline(self, points: Sequence[Tuple[float, float]]) -> None:
        self.polylines.append(list(points))


@pytest.fixture()
def painter() -> RecordingPainter:
    return RecordingPainter()
