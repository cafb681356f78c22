"""
Geometry module for NURBS curves.
"""

from .vector import as_point, as_points
from .bspline import BSplineBasis, eval_basis_1d, eval_basis_ders_1d
from .nurbs import NURBSCurve, CurveKind, rational_derivatives
from .primitives import (
    make_curve_data,
    make_line_data,
    make_polyline_data,
    make_rational_bezier_data,
    make_ellipse_arc_data,
    make_ellipse_data,
    make_arc_data,
    make_circle_data,
    interpolate_curve_data,
)
from .shapes import Line, Arc, Circle, EllipseArc, Ellipse, BezierCurve
