"""
Gauss-Legendre quadrature for numerical integration.

Gauss quadrature provides optimal polynomial integration:
n points integrate exactly polynomials up to degree 2n-1.

The curve speed |C'(u)| is not a polynomial (a square root, and rational
for NURBS), so arc lengths are integrated adaptively: a panel is accepted
when its n-point estimate agrees with the sum over its two halves,
otherwise both halves are refined recursively.

The reference domain is [0, 1] for consistency with the knot spans.
Standard Gauss points on [-1, 1] are mapped accordingly.

Usage:
    points, weights = gauss_legendre_1d(n)  # 1D quadrature on [0,1]
    value = integrate_adaptive(f, a, b, n_points=8, tol=1e-12)
"""

import logging
import numpy as np
from typing import Callable, Tuple
from functools import lru_cache

logger = logging.getLogger(__name__)


@lru_cache(maxsize=16)
def gauss_legendre_1d(n: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Gauss-Legendre quadrature points and weights on [0, 1].

    Parameters:
        n: Number of quadrature points

    Returns:
        (points, weights) where:
        - points: Array of n quadrature points in [0, 1]
        - weights: Array of n quadrature weights (sum to 1)
    """
    if n < 1:
        raise ValueError("Need at least 1 quadrature point")

    # Get standard Gauss points on [-1, 1]
    points_std, weights_std = np.polynomial.legendre.leggauss(n)

    # Map to [0, 1]: x = (xi + 1) / 2, dx = 1/2 * dxi
    points = 0.5 * (points_std + 1.0)
    weights = 0.5 * weights_std

    points.flags.writeable = False
    weights.flags.writeable = False
    return points, weights


def integrate_fixed(f: Callable[[float], float], a: float, b: float,
                    n_points: int = 8) -> float:
    """
    Integrate f over [a, b] with a single n-point Gauss-Legendre panel.
    """
    points, weights = gauss_legendre_1d(n_points)
    h = b - a
    total = 0.0
    for x, w in zip(points, weights):
        total += w * f(a + h * x)
    return total * h


def integrate_adaptive(f: Callable[[float], float], a: float, b: float,
                       n_points: int = 8, tol: float = 1e-12,
                       max_depth: int = 20) -> float:
    """
    Adaptive Gauss-Legendre integration of f over [a, b].

    Each panel is compared with the sum of its two halves; panels whose
    estimates differ by more than their share of the tolerance are bisected,
    up to max_depth levels.

    Parameters:
        f: Scalar integrand
        a, b: Integration bounds (a > b gives a negative result)
        n_points: Gauss points per panel
        tol: Absolute error target for the whole interval
        max_depth: Maximum bisection depth

    Returns:
        Approximation of the integral
    """
    if b == a:
        return 0.0
    if b < a:
        return -integrate_adaptive(f, b, a, n_points, tol, max_depth)

    whole = integrate_fixed(f, a, b, n_points)
    return _adaptive_panel(f, a, b, whole, n_points, tol, max_depth)


def _adaptive_panel(f, a, b, whole, n_points, tol, depth):
    mid = 0.5 * (a + b)
    left = integrate_fixed(f, a, mid, n_points)
    right = integrate_fixed(f, mid, b, n_points)
    refined = left + right

    # Relative floor at round-off level
    if abs(refined - whole) <= max(tol, 1e-14 * abs(refined)):
        return refined
    if depth <= 0:
        logger.debug(f"Adaptive quadrature hit max depth on [{a}, {b}]")
        return refined

    half_tol = 0.5 * tol
    return (_adaptive_panel(f, a, mid, left, n_points, half_tol, depth - 1) +
            _adaptive_panel(f, mid, b, right, n_points, half_tol, depth - 1))
