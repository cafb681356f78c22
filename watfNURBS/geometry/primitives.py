"""
Primitive curve factory functions.

Each factory converts a named primitive to canonical CurveData
(degree, knots, homogeneous control points):

- make_curve_data: raw degree / control points / knots / weights
- make_line_data: straight segment, degree 1
- make_polyline_data: chained segments, degree 1, chord-length knots
- make_rational_bezier_data: single Bezier segment, optional weights
- make_ellipse_arc_data / make_ellipse_data: rational quadratic ellipse
- make_arc_data / make_circle_data: rational quadratic circle
- interpolate_curve_data: B-spline through given points

Circular and elliptic arcs use one rational quadratic segment per started
quarter turn (1 to 4 segments). For a segment sweeping dtheta the middle
control point sits on the intersection of the end tangents with weight
cos(dtheta / 2). All conics are parameterized on [0, 1].
"""

import logging
import numpy as np
from typing import Optional, Sequence
from scipy import linalg

from ..discretization.curve_data import CurveData
from ..discretization.knot_vector import KnotVector
from ..errors import InvalidConstructionError
from .bspline import eval_basis_1d
from .vector import as_point, as_points, norm, normalized

logger = logging.getLogger(__name__)


def make_curve_data(degree: int, control_points: np.ndarray,
                    knots: Sequence[float],
                    weights: Optional[np.ndarray] = None) -> CurveData:
    """
    Create curve data from degree, control points, knots and weights.

    Parameters:
        degree: Polynomial degree
        control_points: Array of shape (n, 2) or (n, 3)
        knots: Knot values, length n + degree + 1
        weights: Array of shape (n,), defaults to 1.0

    Returns:
        CurveData

    Raises:
        InvalidConstructionError: on inconsistent counts or values
    """
    return CurveData.from_points(degree, control_points, knots, weights)


def make_line_data(start, end) -> CurveData:
    """
    Create a straight segment from start to end on [0, 1].
    """
    points = np.vstack([as_point(start), as_point(end)])
    return CurveData.from_points(1, points, [0.0, 0.0, 1.0, 1.0])


def make_polyline_data(points) -> CurveData:
    """
    Create a degree 1 curve through a sequence of points.

    Knots are the cumulative chord lengths, so the parameter equals the
    arc length. Consecutive duplicate points are dropped.

    Parameters:
        points: Array of shape (n, 2) or (n, 3)

    Returns:
        CurveData on [0, total length]
    """
    pts = as_points(points)
    keep = [0]
    for i in range(1, len(pts)):
        if norm(pts[i] - pts[keep[-1]]) > 0.0:
            keep.append(i)
    pts = pts[keep]

    if len(pts) < 2:
        raise InvalidConstructionError("A polyline needs at least two distinct points")

    chord = np.linalg.norm(np.diff(pts, axis=0), axis=1)
    cumulative = np.concatenate([[0.0], np.cumsum(chord)])
    knots = np.concatenate([[0.0], cumulative, [cumulative[-1]]])
    return CurveData.from_points(1, pts, knots)


def make_rational_bezier_data(points, weights: Optional[np.ndarray] = None) -> CurveData:
    """
    Create a single (rational) Bezier segment on [0, 1].

    The degree is the number of points minus one.
    """
    pts = as_points(points)
    n = len(pts)
    if n < 2:
        raise InvalidConstructionError("A Bezier curve needs at least two points")
    knots = [0.0] * n + [1.0] * n
    return CurveData.from_points(n - 1, pts, knots, weights)


def make_ellipse_arc_data(center, xaxis, yaxis,
                          min_angle: float, max_angle: float) -> CurveData:
    """
    Create an elliptic arc as a rational quadratic curve on [0, 1].

    C(theta) = center + cos(theta) * xaxis + sin(theta) * yaxis
    for theta from min_angle to max_angle; the lengths of xaxis and yaxis
    are the radii.

    Parameters:
        center: Ellipse center
        xaxis: Vector to the point at theta = 0
        yaxis: Vector to the point at theta = pi/2
        min_angle, max_angle: Angle range in radians; max_angle < min_angle
            wraps around by 2*pi

    Returns:
        CurveData with 1-4 rational quadratic segments
    """
    c = as_point(center)
    x = as_point(xaxis)
    y = as_point(yaxis)
    if norm(x) == 0.0 or norm(y) == 0.0:
        raise InvalidConstructionError("Ellipse axes must be non-zero")

    if max_angle < min_angle:
        max_angle = max_angle + 2.0 * np.pi
    theta = max_angle - min_angle
    if theta <= 0.0:
        raise InvalidConstructionError("Arc sweep must be positive")
    if theta > 2.0 * np.pi + 1e-12:
        raise InvalidConstructionError("Arc sweep must not exceed a full turn")

    n_arcs = min(4, int(np.ceil(theta / (np.pi / 2) - 1e-9)))
    n_arcs = max(n_arcs, 1)
    dtheta = theta / n_arcs
    w1 = np.cos(dtheta / 2.0)

    control_points = np.zeros((2 * n_arcs + 1, 3))
    weights = np.ones(2 * n_arcs + 1)

    angle = min_angle
    control_points[0] = c + np.cos(angle) * x + np.sin(angle) * y
    for i in range(n_arcs):
        mid = angle + 0.5 * dtheta
        end = angle + dtheta
        # Tangent intersection: the mid-angle point pushed out by 1/cos(dtheta/2)
        control_points[2 * i + 1] = c + (np.cos(mid) * x + np.sin(mid) * y) / w1
        control_points[2 * i + 2] = c + np.cos(end) * x + np.sin(end) * y
        weights[2 * i + 1] = w1
        angle = end

    knots = [0.0, 0.0, 0.0]
    for i in range(1, n_arcs):
        t = i / n_arcs
        knots.extend([t, t])
    knots.extend([1.0, 1.0, 1.0])

    return CurveData.from_points(2, control_points, knots, weights)


def make_ellipse_data(center, xaxis, yaxis) -> CurveData:
    """Full ellipse starting (and ending) at center + xaxis."""
    return make_ellipse_arc_data(center, xaxis, yaxis, 0.0, 2.0 * np.pi)


def make_arc_data(center, xaxis, yaxis, radius: float,
                  min_angle: float, max_angle: float) -> CurveData:
    """
    Create a circular arc of the given radius in the plane of xaxis, yaxis.

    The axes are normalized; only their directions matter.
    """
    if radius <= 0:
        raise InvalidConstructionError(f"Radius must be positive, got {radius}")
    try:
        x = radius * normalized(as_point(xaxis))
        y = radius * normalized(as_point(yaxis))
    except ValueError as e:
        raise InvalidConstructionError(str(e)) from e
    return make_ellipse_arc_data(center, x, y, min_angle, max_angle)


def make_circle_data(center, xaxis, yaxis, radius: float) -> CurveData:
    """Full circle (9 control points, 4 quarter segments)."""
    return make_arc_data(center, xaxis, yaxis, radius, 0.0, 2.0 * np.pi)


def interpolate_curve_data(points, degree: int = 3) -> CurveData:
    """
    Create a B-spline curve passing through the given points.

    Global interpolation (The NURBS Book, Sec. 9.2.1): chord-length
    parameters, knots by averaging, control points from the collocation
    system. The degree is lowered to len(points) - 1 when there are too
    few points.

    Parameters:
        points: Array of shape (n, 2) or (n, 3), n >= 2
        degree: Requested degree

    Returns:
        CurveData on [0, 1]
    """
    Q = as_points(points)
    n = len(Q)
    if n < 2:
        raise InvalidConstructionError("Interpolation needs at least two points")
    if degree < 1:
        raise InvalidConstructionError(f"Degree must be at least 1, got {degree}")
    p = min(degree, n - 1)

    chord = np.linalg.norm(np.diff(Q, axis=0), axis=1)
    total = np.sum(chord)
    if total == 0.0:
        raise InvalidConstructionError("Interpolation points are all coincident")
    if np.any(chord == 0.0):
        raise InvalidConstructionError("Consecutive interpolation points must differ")
    params = np.concatenate([[0.0], np.cumsum(chord) / total])
    params[-1] = 1.0

    knots = np.zeros(n + p + 1)
    knots[-(p + 1):] = 1.0
    for j in range(1, n - p):
        knots[j + p] = np.mean(params[j:j + p])

    kv = KnotVector(knots, p)
    A = np.zeros((n, n))
    for k, u in enumerate(params):
        span = kv.find_span(u)
        A[k, span - p:span + 1] = eval_basis_1d(kv, u, span)

    try:
        control_points = linalg.solve(A, Q)
    except linalg.LinAlgError as e:
        raise InvalidConstructionError(f"Interpolation system is singular: {e}") from e

    logger.debug(f"Interpolated {n} points with a degree {p} curve")
    return CurveData.from_points(p, control_points, knots)
