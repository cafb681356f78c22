"""
Knot insertion and curve splitting.

Inserting a knot leaves the curve unchanged and adds one control point;
the new homogeneous control points come from the knot insertion matrix
(compute_knot_insertion_matrix), so rational curves are handled exactly.

Splitting at u raises the multiplicity of u to the degree p. The curve
then passes through a single control point at u and falls apart into two
independent curves, clamped at u:

    left:  knots[:last] + [u],   control points [:first]
    right: [u] + knots[first:],  control points [first-1:]

where knots[first:last] are the p copies of u. Unclamped input is clamped
first (clamp_curve) so both halves come out clamped at both ends.
"""

import logging
import numpy as np
from typing import Tuple

from ..errors import (
    InvalidConstructionError, InvalidSplitParameterError, ParameterOutOfDomainError
)
from .curve_data import CurveData
from .knot_vector import compute_knot_insertion_matrix

logger = logging.getLogger(__name__)


def _snap_to_knot(knots: np.ndarray, u: float, eps: float) -> float:
    """Replace u by an existing knot value within eps of it."""
    i = int(np.argmin(np.abs(knots - u)))
    if abs(knots[i] - u) <= eps:
        return float(knots[i])
    return float(u)


def insert_knot_curve(data: CurveData, u: float, times: int = 1,
                      eps: float = 1e-10) -> CurveData:
    """
    Insert a knot into a curve without changing its shape.

    Parameters:
        data: Curve data
        u: Knot value, strictly inside the domain
        times: Number of insertions
        eps: Snapping tolerance to existing knots

    Returns:
        New CurveData with `times` more control points
    """
    if times < 0:
        raise ValueError(f"times must be non-negative, got {times}")

    a, b = data.domain
    if not (a < u < b):
        raise ParameterOutOfDomainError(u, (a, b))

    u = _snap_to_knot(data.knots, u, eps)
    kv = data.knot_vector
    s = kv.multiplicity(u)
    if s + times > data.degree:
        raise InvalidConstructionError(
            f"Inserting u={u} {times} times would raise its multiplicity "
            f"to {s + times} > degree {data.degree}"
        )

    Pw = data.control_points_w.copy()
    for _ in range(times):
        kv, A = compute_knot_insertion_matrix(kv, u)
        Pw = A @ Pw

    return CurveData(data.degree, kv.knots.copy(), Pw)


def clamp_curve(data: CurveData) -> CurveData:
    """
    Same curve on the same domain with p+1 repeated knots at both ends.

    Each domain end is inserted until its multiplicity reaches p; the
    knots and control points outside the domain then no longer affect the
    curve and are dropped.

    Parameters:
        data: Curve data, clamped or not

    Returns:
        Clamped CurveData (data itself when already clamped)
    """
    if data.is_clamped:
        return data

    p = data.degree
    a, b = data.domain
    kv = data.knot_vector
    Pw = data.control_points_w.copy()
    for end in (a, b):
        for _ in range(p - kv.multiplicity(end)):
            kv, A = compute_knot_insertion_matrix(kv, end)
            Pw = A @ Pw

    knots = kv.knots.copy()

    # Trailing end first so the leading indices stay valid
    first_b = int(np.searchsorted(knots, b, side='left'))
    knots = knots[:first_b + p + 1]
    knots[-1] = b
    Pw = Pw[:first_b]

    last_a = int(np.searchsorted(knots, a, side='right'))
    start = last_a - p - 1
    knots = knots[start:]
    knots[0] = a
    Pw = Pw[start:]

    logger.debug(f"Clamped curve on [{a}, {b}]: {len(Pw)} control points")
    return CurveData(p, knots, Pw)


def split_curve(data: CurveData, u: float,
                eps: float = 1e-10) -> Tuple[CurveData, CurveData]:
    """
    Split a curve into the pieces before and after u.

    Parameters:
        data: Curve data
        u: Split parameter, strictly inside the domain
        eps: Parametric tolerance; u within eps of a domain end is rejected

    Returns:
        (left, right) curve data; left covers [u_min, u], right [u, u_max]

    Raises:
        InvalidSplitParameterError: if u is not strictly interior
    """
    a, b = data.domain
    tol = eps * max(1.0, b - a)
    if not (a + tol < u < b - tol):
        raise InvalidSplitParameterError(u, (a, b))

    data = clamp_curve(data)
    p = data.degree
    u = _snap_to_knot(data.knots, u, tol)
    s = data.knot_vector.multiplicity(u)

    refined = insert_knot_curve(data, u, p - s, tol) if p - s > 0 else data

    knots = refined.knots
    Pw = refined.control_points_w
    first = int(np.searchsorted(knots, u, side='left'))
    last = int(np.searchsorted(knots, u, side='right'))

    left = CurveData(p, np.append(knots[:last], u), Pw[:first].copy())
    right = CurveData(p, np.insert(knots[first:], 0, u), Pw[first - 1:].copy())

    logger.debug(f"Split curve at u={u}: {left.n_control_points} + "
                 f"{right.n_control_points} control points")
    return left, right
