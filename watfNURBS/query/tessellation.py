"""
Adaptive tessellation of a curve into a polyline.

Every non-empty knot span is first cut into `degree` equal pieces (so
inflections inside a span cannot hide behind a straight chord), then each
piece is bisected recursively while the curve point at the parameter
midpoint lies further than tol from the chord midpoint. Recursion stops
at config.tessellation_max_depth; degenerate (zero-length) intervals are
accepted as they are.

The returned polyline starts at C(u_min), ends at C(u_max) and is ordered
by increasing parameter.
"""

import numpy as np
from typing import Optional, Tuple

from ..io.config import KernelConfig, get_config
from ..geometry.vector import distance


def tessellate_params(curve, tol: float,
                      config: Optional[KernelConfig] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Tessellate a curve within a chordal tolerance.

    Parameters:
        curve: Curve to tessellate
        tol: Maximum chord-to-curve deviation
        config: Numerical settings

    Returns:
        (params, points) with shapes (n,) and (n, 3)
    """
    if tol <= 0:
        raise ValueError(f"Tessellation tolerance must be positive, got {tol}")
    config = config or get_config()

    a, _ = curve.domain
    pieces = max(1, curve.degree)
    eps = config.eps

    params = [a]
    points = [curve.eval_point(a)]
    for start, end in curve.knot_vector.spans:
        grid = np.linspace(start, end, pieces + 1)
        p_prev = points[-1]
        for u0, u1 in zip(grid[:-1], grid[1:]):
            p_next = curve.eval_point(u1)
            _refine(curve, float(u0), p_prev, float(u1), p_next, tol,
                    config.tessellation_max_depth, eps, params, points)
            p_prev = p_next

    return np.array(params), np.vstack(points)


def _refine(curve, u0, p0, u1, p1, tol, depth, eps, params, points):
    """Append the polyline vertices of (u0, u1], start vertex excluded."""
    if depth > 0 and u1 - u0 > eps:
        um = 0.5 * (u0 + u1)
        pm = curve.eval_point(um)
        if distance(pm, 0.5 * (p0 + p1)) > tol:
            _refine(curve, u0, p0, um, pm, tol, depth - 1, eps, params, points)
            _refine(curve, um, pm, u1, p1, tol, depth - 1, eps, params, points)
            return
    params.append(u1)
    points.append(p1)


def tessellate(curve, tol: float, config: Optional[KernelConfig] = None) -> np.ndarray:
    """Polyline points approximating the curve within tol."""
    return tessellate_params(curve, tol, config)[1]
