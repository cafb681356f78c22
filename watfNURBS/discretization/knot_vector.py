"""
Knot vector utilities for NURBS curves.

A knot vector is a non-decreasing sequence of real numbers that defines
the parametric domain and basis function support for B-splines/NURBS.

Mathematical background:
- Open (clamped) knot vectors have p+1 repeated knots at each end and make
  the curve interpolate its first and last control points
- Unclamped (periodic-style) knot vectors are accepted; the valid domain
  is [xi_p, xi_n] either way
- The number of basis functions n = len(knots) - p - 1
- Knot spans are unique intervals [xi_i, xi_{i+1}] where xi_i < xi_{i+1}
- An interior knot may repeat at most p times (the curve stays C^0)
"""

import numpy as np
from typing import List, Tuple
from dataclasses import dataclass

from ..errors import InvalidConstructionError


@dataclass
class KnotVector:
    """
    Represents a univariate knot vector.

    Attributes:
        knots: The knot values (non-decreasing sequence)
        degree: Polynomial degree p

    Properties computed:
        n_basis: Number of basis functions
        n_spans: Number of non-zero measure knot spans
        spans: List of (start, end) parametric coordinates for each span
    """
    knots: np.ndarray
    degree: int

    def __post_init__(self):
        self.knots = np.asarray(self.knots, dtype=np.float64).reshape(-1)
        self.degree = int(self.degree)
        self._validate()
        self._compute_spans()

    def _validate(self):
        """Validate knot vector properties."""
        if self.degree < 0:
            raise InvalidConstructionError(f"Degree must be non-negative, got {self.degree}.")
        if len(self.knots) < 2 * (self.degree + 1):
            raise InvalidConstructionError(
                f"Knot vector too short for degree {self.degree}. "
                f"Need at least {2 * (self.degree + 1)} knots, got {len(self.knots)}."
            )
        if not np.all(np.isfinite(self.knots)):
            raise InvalidConstructionError("Knot values must be finite.")
        # Check non-decreasing
        if not np.all(np.diff(self.knots) >= 0):
            raise InvalidConstructionError("Knot vector must be non-decreasing.")

        a, b = self.domain
        if not b > a:
            raise InvalidConstructionError(
                f"Knot vector has an empty domain [{a}, {b}]."
            )

        # Interior knots may repeat at most p times
        interior = self.knots[(self.knots > a) & (self.knots < b)]
        if len(interior) > 0:
            _, counts = np.unique(interior, return_counts=True)
            if counts.max() > self.degree:
                raise InvalidConstructionError(
                    f"Interior knot multiplicity {counts.max()} exceeds degree {self.degree}."
                )

    def _compute_spans(self):
        """
        Compute the non-zero measure knot spans inside the domain.

        Spans are intervals [xi_i, xi_{i+1}] with xi_i < xi_{i+1} and
        p <= i < n, stored with their span index i.
        """
        p = self.degree
        n = self.n_basis
        self._spans = []
        self._span_indices = []

        for i in range(p, n):
            if self.knots[i + 1] > self.knots[i]:
                self._spans.append((float(self.knots[i]), float(self.knots[i + 1])))
                self._span_indices.append(i)

    @property
    def n_basis(self) -> int:
        """Number of basis functions."""
        return len(self.knots) - self.degree - 1

    @property
    def n_spans(self) -> int:
        """Number of non-zero measure knot spans."""
        return len(self._spans)

    @property
    def spans(self) -> List[Tuple[float, float]]:
        """List of span intervals as (xi_start, xi_end) tuples."""
        return self._spans.copy()

    @property
    def span_indices(self) -> List[int]:
        """Knot span index i of each non-zero span."""
        return self._span_indices.copy()

    @property
    def breakpoints(self) -> np.ndarray:
        """Distinct knot values inside the domain, ends included."""
        a, b = self.domain
        return np.unique(self.knots[(self.knots >= a) & (self.knots <= b)])

    @property
    def domain(self) -> Tuple[float, float]:
        """Parametric domain (xi_p, xi_n)."""
        return (float(self.knots[self.degree]), float(self.knots[self.n_basis]))

    @property
    def is_clamped(self) -> bool:
        """True when both ends have multiplicity p+1."""
        p = self.degree
        return bool(np.all(self.knots[:p + 1] == self.knots[0]) and
                    np.all(self.knots[-(p + 1):] == self.knots[-1]))

    def find_span(self, xi: float) -> int:
        """
        Find the knot span index containing parameter value xi.

        For xi in [xi_i, xi_{i+1}), returns i.
        Uses the convention that the last span is closed: xi == xi_n maps
        to the last non-empty span rather than the degenerate one after it.
        Values outside the domain are clamped.

        Parameters:
            xi: Parameter value

        Returns:
            Span index i such that xi in [xi_i, xi_{i+1})
        """
        n = self.n_basis
        p = self.degree

        # Handle boundary cases
        if xi >= self.knots[n]:
            return self._span_indices[-1]
        if xi <= self.knots[p]:
            return self._span_indices[0]

        # Binary search
        low = p
        high = n
        mid = (low + high) // 2

        while xi < self.knots[mid] or xi >= self.knots[mid + 1]:
            if xi < self.knots[mid]:
                high = mid
            else:
                low = mid
            mid = (low + high) // 2

        return mid

    def multiplicity(self, xi: float, tol: float = 1e-14) -> int:
        """Number of times xi appears in the knot vector."""
        return compute_multiplicity(self, xi, tol)

    def reversed(self) -> 'KnotVector':
        """
        Knot vector of the reversed curve.

        Each knot is mapped by xi' = a + b - xi (a, b the domain ends) and
        the order is flipped, so the domain is preserved.
        """
        a, b = self.domain
        return KnotVector(a + b - self.knots[::-1], self.degree)

    def copy(self) -> 'KnotVector':
        return KnotVector(self.knots.copy(), self.degree)


def make_open_knot_vector(n_basis: int, degree: int,
                           domain: Tuple[float, float] = (0.0, 1.0)) -> KnotVector:
    """
    Create an open (clamped) uniform knot vector.

    Open knot vectors have the first and last knot repeated p+1 times,
    ensuring the basis interpolates the first and last control points.

    Parameters:
        n_basis: Number of basis functions desired
        degree: Polynomial degree p
        domain: Parametric domain (start, end)

    Returns:
        KnotVector with uniform internal knots
    """
    p = degree
    n = n_basis
    n_knots = n + p + 1
    n_internal = n_knots - 2 * (p + 1)

    if n_internal < 0:
        raise InvalidConstructionError(
            f"Cannot create knot vector: n_basis={n_basis} too small for degree={degree}"
        )

    a, b = domain

    # Start with p+1 repeated knots at start
    knots = [a] * (p + 1)

    # Add uniform internal knots
    if n_internal > 0:
        internal = np.linspace(a, b, n_internal + 2)[1:-1]
        knots.extend(internal)

    # End with p+1 repeated knots at end
    knots.extend([b] * (p + 1))

    return KnotVector(np.array(knots), degree)


def compute_multiplicity(kv: KnotVector, xi: float, tol: float = 1e-14) -> int:
    """
    Compute the multiplicity of a knot value.

    Parameters:
        kv: Knot vector
        xi: Knot value to check
        tol: Tolerance for equality

    Returns:
        Number of times xi appears in the knot vector
    """
    return int(np.sum(np.abs(kv.knots - xi) < tol))


def compute_knot_insertion_matrix(kv: KnotVector, xi: float) -> Tuple[KnotVector, np.ndarray]:
    """
    Compute the knot insertion matrix for inserting a single knot.

    When a knot is inserted, control points are updated by a linear
    transformation (Boehm corner cutting):
        P_new = A @ P_old

    Applied to homogeneous control points (w*x, w*y, w*z, w) this is exact
    for rational curves as well.

    Parameters:
        kv: Original knot vector
        xi: Knot value to insert (inside the domain, ends included)

    Returns:
        Tuple of (new_knot_vector, insertion_matrix A)
        A has shape (n_new, n_old) where n_new = n_old + 1
    """
    p = kv.degree
    knots = kv.knots
    n_old = kv.n_basis

    # Find span containing xi
    k = kv.find_span(xi)

    # New knot vector
    new_knots = np.zeros(len(knots) + 1)
    new_knots[:k + 1] = knots[:k + 1]
    new_knots[k + 1] = xi
    new_knots[k + 2:] = knots[k + 1:]

    n_new = n_old + 1

    # Build insertion matrix
    A = np.zeros((n_new, n_old))

    for i in range(n_new):
        if i <= k - p:
            # Control points before affected region
            A[i, i] = 1.0
        elif i >= k + 1:
            # Control points after affected region
            A[i, i - 1] = 1.0
        else:
            # Affected control points: linear combination
            # alpha_i = (xi - knots[i]) / (knots[i+p] - knots[i])
            denom = knots[i + p] - knots[i]
            if abs(denom) > 1e-14:
                alpha = (xi - knots[i]) / denom
            else:
                alpha = 0.0
            A[i, i - 1] = 1.0 - alpha
            A[i, i] = alpha

    return KnotVector(new_knots, p), A
