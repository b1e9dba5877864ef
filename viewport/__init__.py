"""
Viewport state consumed read-only by the projection engine.

This module provides:
- Quaternion orientation of the globe
- ViewportParams (canvas size, globe radius in pixels, orientation)
"""

from viewport.quaternion import Quaternion
from viewport.params import ViewportParams, orientation_for_center

__all__ = [
    "Quaternion",
    "ViewportParams",
    "orientation_for_center",
]
