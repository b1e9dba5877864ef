"""
Tessellation of geographic line segments into screen-space fragments.
"""

from tessellation.engine import (
    TessellationConfig,
    segment_arc,
    segment_interpolator,
    tessellate_line_segment,
)

__all__ = [
    "TessellationConfig",
    "segment_arc",
    "segment_interpolator",
    "tessellate_line_segment",
]
