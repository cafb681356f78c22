"""
B-spline basis function evaluation.

B-splines are piecewise polynomial functions defined by:
1. A knot vector (non-decreasing sequence of parametric values)
2. A polynomial degree p

The i-th B-spline basis function of degree p is defined recursively:

    N_{i,0}(xi) = 1 if xi_i <= xi < xi_{i+1}, else 0

    N_{i,p}(xi) = (xi - xi_i)/(xi_{i+p} - xi_i) * N_{i,p-1}(xi)
                + (xi_{i+p+1} - xi)/(xi_{i+p+1} - xi_{i+1}) * N_{i+1,p-1}(xi)

with the convention 0/0 := 0 for repeated knots.

Properties:
- Partition of unity: sum of all basis functions = 1
- Non-negativity: N_{i,p}(xi) >= 0
- Local support: N_{i,p} is non-zero only on [xi_i, xi_{i+p+1})
- Smoothness: C^{p-k} at a knot of multiplicity k

Only the p+1 functions that are non-zero on the span containing xi are
computed, bottom-up in a triangular table (O(p^2)).
"""

import numpy as np
from typing import Optional
from ..discretization.knot_vector import KnotVector


def _safe_div(num: float, den: float) -> float:
    """num / den with 0/0 (and x/0) taken as 0."""
    if den == 0.0:
        return 0.0
    return num / den


def eval_basis_1d(kv: KnotVector, xi: float,
                  span: Optional[int] = None) -> np.ndarray:
    """
    Evaluate all non-zero B-spline basis functions at a parameter value.

    Uses the Cox-de Boor algorithm optimized for evaluating only
    the p+1 non-zero basis functions at a given parameter value.

    Parameters:
        kv: Knot vector
        xi: Parameter value
        span: Optional pre-computed span index

    Returns:
        Array of shape (p+1,) containing N_{span-p,p}(xi) to N_{span,p}(xi)
    """
    p = kv.degree
    knots = kv.knots

    if span is None:
        span = kv.find_span(xi)

    # Initialize with degree 0
    N = np.zeros(p + 1)
    N[0] = 1.0

    # Build up to degree p
    left = np.zeros(p + 1)
    right = np.zeros(p + 1)

    for j in range(1, p + 1):
        left[j] = xi - knots[span + 1 - j]
        right[j] = knots[span + j] - xi

        saved = 0.0
        for r in range(j):
            temp = _safe_div(N[r], right[r + 1] + left[j - r])
            N[r] = saved + right[r + 1] * temp
            saved = left[j - r] * temp
        N[j] = saved

    return N


def eval_basis_ders_1d(kv: KnotVector, xi: float, n_ders: int,
                       span: Optional[int] = None) -> np.ndarray:
    """
    Evaluate B-spline basis functions and derivatives at a parameter value.

    Uses the algorithm from Piegl & Tiller "The NURBS Book" (Algorithm A2.3).

    Parameters:
        kv: Knot vector
        xi: Parameter value
        n_ders: Number of derivatives to compute (0 = just values)
        span: Optional pre-computed span index

    Returns:
        Array of shape (n_ders+1, p+1) where result[k, j] is the k-th derivative
        of the j-th non-zero basis function (N_{span-p+j, p}).
        Rows for k > p are zero.
    """
    if n_ders < 0:
        raise ValueError(f"n_ders must be non-negative, got {n_ders}")

    p = kv.degree
    knots = kv.knots

    if span is None:
        span = kv.find_span(xi)

    # Result array; orders above p stay zero
    ders = np.zeros((n_ders + 1, p + 1))
    n_eff = min(n_ders, p)

    # ndu[j][r] = N_{span-p+r, j} or knot differences
    ndu = np.zeros((p + 1, p + 1))
    ndu[0, 0] = 1.0

    left = np.zeros(p + 1)
    right = np.zeros(p + 1)

    # Compute basis functions and store knot differences
    for j in range(1, p + 1):
        left[j] = xi - knots[span + 1 - j]
        right[j] = knots[span + j] - xi

        saved = 0.0
        for r in range(j):
            # Upper triangle: knot differences
            ndu[j, r] = right[r + 1] + left[j - r]
            temp = _safe_div(ndu[r, j - 1], ndu[j, r])

            # Lower triangle: basis functions
            ndu[r, j] = saved + right[r + 1] * temp
            saved = left[j - r] * temp

        ndu[j, j] = saved

    # Load basis functions
    for j in range(p + 1):
        ders[0, j] = ndu[j, p]

    # Compute derivatives
    a = np.zeros((2, p + 1))

    for r in range(p + 1):  # Loop over basis functions
        s1, s2 = 0, 1
        a[0, 0] = 1.0

        for k in range(1, n_eff + 1):  # Loop over derivatives
            d = 0.0
            rk = r - k
            pk = p - k

            if r >= k:
                a[s2, 0] = _safe_div(a[s1, 0], ndu[pk + 1, rk])
                d = a[s2, 0] * ndu[rk, pk]

            j1 = 1 if rk >= -1 else -rk
            j2 = k - 1 if r - 1 <= pk else p - r

            for j in range(j1, j2 + 1):
                a[s2, j] = _safe_div(a[s1, j] - a[s1, j - 1], ndu[pk + 1, rk + j])
                d += a[s2, j] * ndu[rk + j, pk]

            if r <= pk:
                a[s2, k] = _safe_div(-a[s1, k - 1], ndu[pk + 1, r])
                d += a[s2, k] * ndu[r, pk]

            ders[k, r] = d
            s1, s2 = s2, s1

    # Multiply by factorial factors
    r = p
    for k in range(1, n_eff + 1):
        for j in range(p + 1):
            ders[k, j] *= r
        r *= (p - k)

    return ders


class BSplineBasis:
    """
    Encapsulates a univariate B-spline basis.

    This class bundles a knot vector with methods for basis evaluation,
    providing a cleaner interface for higher-level code.

    Attributes:
        knot_vector: The underlying KnotVector
        degree: Polynomial degree
        n_basis: Number of basis functions
    """

    def __init__(self, knot_vector: KnotVector):
        self.knot_vector = knot_vector

    @property
    def degree(self) -> int:
        return self.knot_vector.degree

    @property
    def n_basis(self) -> int:
        return self.knot_vector.n_basis

    @property
    def n_spans(self) -> int:
        return self.knot_vector.n_spans

    def find_span(self, xi: float) -> int:
        return self.knot_vector.find_span(xi)

    def eval(self, xi: float, span: Optional[int] = None) -> np.ndarray:
        """Evaluate non-zero basis functions at xi."""
        return eval_basis_1d(self.knot_vector, xi, span)

    def eval_ders(self, xi: float, n_ders: int,
                  span: Optional[int] = None) -> np.ndarray:
        """Evaluate basis functions and derivatives at xi."""
        return eval_basis_ders_1d(self.knot_vector, xi, n_ders, span)
