"""
Geometric queries on curves: arc length, closest point, tessellation.
"""

from .arc_length import (
    CurveSample, InverseResult, ArcLengthTable, curve_length, curve_speed
)
from .closest_point import ClosestPoint, find_closest_point
from .tessellation import tessellate, tessellate_params
