"""
Graticule (coordinate grid) generation and painting.
"""

from graticule.grid_map import GridMap, Painter, Pen, SphereDim

__all__ = [
    "GridMap",
    "Painter",
    "Pen",
    "SphereDim",
]
