"""
Canonical curve representation.

CurveData is the single payload shared by every curve type: a degree, a
knot sequence and homogeneous control points.

Control points are stored homogeneously, one row per control point:

    Pw_i = (w_i * x_i, w_i * y_i, w_i * z_i, w_i)

so that the rational curve C(u) is the projection of the polynomial
B-spline C_w(u) = sum_i N_{i,p}(u) * Pw_i. Knot insertion, splitting and
reversal all act linearly on these rows.

Invariants (checked at construction):
- nknots == ncv + degree + 1
- ncv > degree
- knots non-decreasing, interior multiplicity <= degree
- all weights positive, all values finite
"""

import numpy as np
from dataclasses import dataclass
from typing import Optional, Tuple

from ..errors import InvalidConstructionError
from ..geometry.vector import as_points
from .knot_vector import KnotVector


@dataclass
class CurveData:
    """
    Degree, knots and homogeneous control points of a NURBS curve.

    Attributes:
        degree: Polynomial degree p
        knots: Knot values, shape (ncv + p + 1,)
        control_points_w: Homogeneous control points, shape (ncv, 4)
    """
    degree: int
    knots: np.ndarray
    control_points_w: np.ndarray

    def __post_init__(self):
        self.degree = int(self.degree)
        self.knots = np.asarray(self.knots, dtype=np.float64).reshape(-1)
        self.control_points_w = np.atleast_2d(
            np.asarray(self.control_points_w, dtype=np.float64))
        self._validate()
        self._knot_vector = KnotVector(self.knots, self.degree)

    def _validate(self):
        ncv = self.control_points_w.shape[0]
        if self.control_points_w.shape[1] != 4:
            raise InvalidConstructionError(
                f"Homogeneous control points must have 4 columns, "
                f"got {self.control_points_w.shape[1]}"
            )
        if self.degree < 0:
            raise InvalidConstructionError(f"Degree must be non-negative, got {self.degree}")
        if ncv <= self.degree:
            raise InvalidConstructionError(
                f"Degree {self.degree} needs at least {self.degree + 1} control points, got {ncv}"
            )
        if len(self.knots) != ncv + self.degree + 1:
            raise InvalidConstructionError(
                f"Number of knots ({len(self.knots)}) must equal "
                f"ncv + degree + 1 ({ncv + self.degree + 1})"
            )
        if not np.all(np.isfinite(self.control_points_w)):
            raise InvalidConstructionError("Control points and weights must be finite")
        if np.any(self.control_points_w[:, 3] <= 0):
            raise InvalidConstructionError("All weights must be positive")

    @classmethod
    def from_points(cls, degree: int, control_points, knots,
                    weights: Optional[np.ndarray] = None) -> 'CurveData':
        """
        Build curve data from Euclidean control points and weights.

        Parameters:
            degree: Polynomial degree
            control_points: Array of shape (n, 2) or (n, 3)
            knots: Knot values, length n + degree + 1
            weights: Array of shape (n,), defaults to 1.0 (B-spline)

        Returns:
            CurveData
        """
        try:
            points = as_points(control_points)
        except ValueError as e:
            raise InvalidConstructionError(str(e)) from e

        if weights is None:
            w = np.ones(points.shape[0])
        else:
            w = np.asarray(weights, dtype=np.float64).reshape(-1)
            if len(w) != points.shape[0]:
                raise InvalidConstructionError(
                    "Weights array length must match number of control points"
                )
            if np.any(w <= 0):
                raise InvalidConstructionError("All weights must be positive")

        return cls(degree, knots, homogenize(points, w))

    @property
    def n_control_points(self) -> int:
        return self.control_points_w.shape[0]

    @property
    def n_knots(self) -> int:
        return len(self.knots)

    @property
    def knot_vector(self) -> KnotVector:
        return self._knot_vector

    @property
    def weights(self) -> np.ndarray:
        return self.control_points_w[:, 3].copy()

    @property
    def control_points(self) -> np.ndarray:
        """Euclidean control points as (ncv, 3) array."""
        return dehomogenize(self.control_points_w)

    @property
    def domain(self) -> Tuple[float, float]:
        return self._knot_vector.domain

    @property
    def is_rational(self) -> bool:
        """False when every weight is exactly 1 (plain B-spline)."""
        return bool(np.any(self.control_points_w[:, 3] != 1.0))

    @property
    def is_clamped(self) -> bool:
        return self._knot_vector.is_clamped

    def copy(self) -> 'CurveData':
        return CurveData(self.degree, self.knots.copy(), self.control_points_w.copy())

    def reversed(self) -> 'CurveData':
        """
        Data of the same curve traversed in the opposite direction.

        Knots are re-parameterized with u' = u_min + u_max - u and the
        control point rows (weights included) are reversed, so the new
        curve evaluated at u' equals the old curve at u.
        """
        kv = self._knot_vector.reversed()
        return CurveData(self.degree, kv.knots, self.control_points_w[::-1].copy())


def homogenize(points: np.ndarray, weights: np.ndarray) -> np.ndarray:
    """
    Convert (n, 3) points and (n,) weights to (n, 4) homogeneous rows.
    """
    points = np.asarray(points, dtype=np.float64)
    weights = np.asarray(weights, dtype=np.float64)
    Pw = np.zeros((points.shape[0], 4))
    Pw[:, :3] = points * weights[:, None]
    Pw[:, 3] = weights
    return Pw


def dehomogenize(Pw: np.ndarray) -> np.ndarray:
    """
    Project homogeneous rows (or a single 4-vector) to Euclidean points.
    """
    Pw = np.asarray(Pw, dtype=np.float64)
    if Pw.ndim == 1:
        return Pw[:3] / Pw[3]
    return Pw[:, :3] / Pw[:, 3:4]
