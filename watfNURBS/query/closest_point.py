"""
Closest-point projection of a point onto a curve.

Find u* minimizing |C(u) - Q|^2 in two stages:

1. Coarse: evaluate the curve at a fixed number of parameters per knot
   span and keep the nearest, so the refinement starts in the right
   valley of a multi-lobed curve.
2. Refine: Newton iteration on the stationarity condition

       f(u) = C'(u) . (C(u) - Q) = 0
       f'(u) = C''(u) . (C(u) - Q) + |C'(u)|^2

   with each iterate clamped to the domain (wrapped around on closed
   curves). Convergence is declared when C(u) coincides with Q, when
   C'(u) is perpendicular to C(u) - Q (zero cosine), or when the step
   becomes negligible (The NURBS Book, Sec. 6.1).

   Where C'(u) vanishes (coincident control points, cusps) f(u) = 0 holds
   trivially, so the distance itself is minimized with a bounded scalar
   search between the neighbouring coarse samples before Newton resumes.

The solver never fails: it returns the best point visited and reports
whether the iteration converged.
"""

import logging
import numpy as np
from dataclasses import dataclass, field
from typing import Optional
from scipy.optimize import minimize_scalar

from ..io.config import KernelConfig, get_config
from ..geometry.vector import as_point, distance, dot, norm

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ClosestPoint:
    """
    Result of a closest-point query.

    Attributes:
        param: Parameter of the closest point found
        point: Curve point at param, (3,) array
        distance: Distance from the query point
        converged: False when the Newton budget ran out (best effort)
        iterations: Newton iterations used
    """
    param: float
    point: np.ndarray = field(repr=False)
    distance: float
    converged: bool
    iterations: int


def _coarse_params(curve, n_per_span: int) -> np.ndarray:
    params = []
    for start, end in curve.knot_vector.spans:
        params.extend(np.linspace(start, end, n_per_span + 1)[:-1])
    params.append(curve.domain[1])
    return np.array(params)


def _minimize_between_samples(curve, q: np.ndarray, samples: np.ndarray,
                              u: float, xatol: float) -> float:
    """Bounded search for the nearest point between the samples around u."""
    i = int(np.searchsorted(samples, u))
    lo = float(samples[max(i - 1, 0)])
    hi = float(samples[min(i + 1, len(samples) - 1)])

    def dist(t):
        return distance(curve.eval_point(t), q)

    res = minimize_scalar(dist, bounds=(lo, hi), method='bounded',
                          options={'xatol': xatol})
    return float(res.x)


def find_closest_point(curve, query, config: Optional[KernelConfig] = None) -> ClosestPoint:
    """
    Closest point on the curve to a query point.

    Parameters:
        curve: Curve to project onto
        query: (x, y) or (x, y, z) query point
        config: Numerical settings

    Returns:
        ClosestPoint with the best parameter found
    """
    config = config or get_config()
    q = as_point(query)
    a, b = curve.domain
    closed = curve.is_closed

    # Coarse stage
    best_u = a
    best_point = curve.eval_point(a)
    best_dist = distance(best_point, q)
    samples = _coarse_params(curve, config.closest_point_samples_per_span)
    for u in samples:
        pt = curve.eval_point(u)
        d = distance(pt, q)
        if d < best_dist:
            best_u, best_point, best_dist = float(u), pt, d

    # Newton refinement
    u = best_u
    converged = False
    iterations = 0
    tol = config.closest_point_tol
    for iterations in range(1, config.closest_point_max_iter + 1):
        C, d1, d2 = curve.eval_derivatives(u, 2)
        r = C - q
        r_norm = norm(r)
        if r_norm < best_dist:
            best_u, best_point, best_dist = u, C, r_norm

        if r_norm <= tol:
            converged = True
            break

        d1_norm = norm(d1)
        if d1_norm <= config.tangent_eps:
            u_next = _minimize_between_samples(curve, q, samples, u,
                                               config.eps * max(1.0, b - a))
            if distance(curve.eval_point(u_next), q) >= r_norm - tol:
                # The zero-speed point is itself the nearest
                converged = True
                break
            u = u_next
            continue

        f = dot(d1, r)
        if abs(f) / (d1_norm * r_norm) <= config.closest_point_cos_tol:
            converged = True
            break

        fp = dot(d2, r) + d1_norm * d1_norm
        if fp <= 0.0:
            # Newton would head for a maximum; take a Gauss-Newton step instead
            fp = d1_norm * d1_norm
        u_next = u - f / fp

        if closed:
            span = b - a
            if u_next < a:
                u_next = b - ((a - u_next) % span)
            elif u_next > b:
                u_next = a + ((u_next - b) % span)
        else:
            u_next = min(max(u_next, a), b)

        if norm((u_next - u) * d1) <= tol:
            u = u_next
            converged = True
            break
        u = u_next

    point = curve.eval_point(u)
    d = distance(point, q)
    if d < best_dist:
        best_u, best_point, best_dist = u, point, d

    if not converged:
        logger.warning(f"Closest point refinement did not converge after "
                       f"{iterations} iterations; returning best estimate "
                       f"u={best_u:.12g} (distance {best_dist:.3e})")

    return ClosestPoint(float(best_u), best_point, float(best_dist), converged, iterations)
