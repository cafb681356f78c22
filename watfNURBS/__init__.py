"""
watfNURBS - NURBS curve kernel

A compact implementation of rational B-spline curves with a single
representation for lines, arcs, circles, ellipses, Bezier and general
NURBS curves, and the numerical queries built on it.

Key modules:
- geometry: basis functions, curve evaluation, primitives and variants
- discretization: knot vectors, curve data, knot insertion and splitting
- quadrature: Gauss-Legendre integration
- query: arc length, closest point, tessellation
- io: numerical configuration

Quick start:
    import numpy as np
    from watfNURBS import Arc

    # Quarter circle of radius 1 in the xy-plane
    arc = Arc((0, 0, 0), (1, 0, 0), (0, 1, 0), 1.0, 0.0, np.pi / 2)

    arc.eval_point(0.5)          # (0.7071, 0.7071, 0)
    arc.length()                 # pi / 2
    arc.param_at_length(0.5)     # parameter one half unit along the arc
    arc.closest_param((2, 2, 0))
    left, right = arc.split(0.25)
    polyline = arc.tessellate(1e-3)
"""

__version__ = "0.1.0"
__author__ = "Wataru Fukuda"

# Core imports for convenience (geometry first: it pulls in discretization)
from .geometry.nurbs import NURBSCurve, CurveKind
from .geometry.shapes import Line, Arc, Circle, EllipseArc, Ellipse, BezierCurve
from .geometry.primitives import make_curve_data, make_polyline_data, interpolate_curve_data
from .discretization.knot_vector import KnotVector, make_open_knot_vector
from .discretization.curve_data import CurveData
from .query.arc_length import CurveSample, InverseResult
from .query.closest_point import ClosestPoint
from .io.config import KernelConfig, get_config, set_config, load_config
from .errors import (
    NURBSError,
    InvalidConstructionError,
    ParameterOutOfDomainError,
    DegenerateTangentError,
    InvalidSplitParameterError,
)
from .logging_config import setup_logging
