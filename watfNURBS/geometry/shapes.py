"""
Named curve variants.

Every variant is a NURBSCurve: evaluation and queries only look at the
curve data. The construction parameters (center, axes, radius, angle
range, end points, ...) are kept for introspection and describe the curve
as it was built; reverse() and transform() do not update them.
"""

import numpy as np
from typing import Optional

from ..io.config import KernelConfig
from .nurbs import NURBSCurve, CurveKind
from .primitives import (
    make_line_data, make_arc_data, make_circle_data,
    make_ellipse_arc_data, make_ellipse_data, make_rational_bezier_data,
)
from .vector import as_point, as_points, normalized


class Line(NURBSCurve):
    """Straight segment from start to end."""

    kind = CurveKind.LINE

    def __init__(self, start, end, config: Optional[KernelConfig] = None):
        self.start = as_point(start)
        self.end = as_point(end)
        self._init_data(make_line_data(self.start, self.end), config)


class Arc(NURBSCurve):
    """
    Circular arc.

    Attributes:
        center: Arc center
        xaxis, yaxis: Unit vectors spanning the arc plane
        radius: Arc radius
        min_angle, max_angle: Angle range in radians, measured from xaxis
    """

    kind = CurveKind.ARC

    def __init__(self, center, xaxis, yaxis, radius: float,
                 min_angle: float, max_angle: float,
                 config: Optional[KernelConfig] = None):
        data = make_arc_data(center, xaxis, yaxis, radius, min_angle, max_angle)
        self.center = as_point(center)
        self.xaxis = normalized(as_point(xaxis))
        self.yaxis = normalized(as_point(yaxis))
        self.radius = float(radius)
        self.min_angle = float(min_angle)
        self.max_angle = float(max_angle)
        self._init_data(data, config)


class Circle(Arc):
    """Full circle, starting at center + radius * xaxis."""

    kind = CurveKind.CIRCLE

    def __init__(self, center, xaxis, yaxis, radius: float,
                 config: Optional[KernelConfig] = None):
        super().__init__(center, xaxis, yaxis, radius, 0.0, 2.0 * np.pi, config)


class EllipseArc(NURBSCurve):
    """
    Elliptic arc; |xaxis| and |yaxis| are the radii.
    """

    kind = CurveKind.ELLIPSE_ARC

    def __init__(self, center, xaxis, yaxis,
                 min_angle: float, max_angle: float,
                 config: Optional[KernelConfig] = None):
        data = make_ellipse_arc_data(center, xaxis, yaxis, min_angle, max_angle)
        self.center = as_point(center)
        self.xaxis = as_point(xaxis)
        self.yaxis = as_point(yaxis)
        self.min_angle = float(min_angle)
        self.max_angle = float(max_angle)
        self._init_data(data, config)


class Ellipse(EllipseArc):
    """Full ellipse."""

    kind = CurveKind.ELLIPSE

    def __init__(self, center, xaxis, yaxis, config: Optional[KernelConfig] = None):
        super().__init__(center, xaxis, yaxis, 0.0, 2.0 * np.pi, config)


class BezierCurve(NURBSCurve):
    """Single (rational) Bezier segment of degree len(points) - 1."""

    kind = CurveKind.BEZIER

    def __init__(self, points, weights: Optional[np.ndarray] = None,
                 config: Optional[KernelConfig] = None):
        data = make_rational_bezier_data(points, weights)
        self.points = as_points(points)
        self._init_data(data, config)
