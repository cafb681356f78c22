"""
NURBS (Non-Uniform Rational B-Spline) curve representation.

NURBS extend B-splines by introducing weights for each control point,
enabling exact representation of conic sections (circles, ellipses, etc.).

A NURBS curve point is computed as:

    C(u) = sum_i (N_i(u) * w_i * P_i) / sum_i (N_i(u) * w_i)

where:
- N_i are B-spline basis functions
- w_i are weights (positive real numbers)
- P_i are control points

Evaluation happens in homogeneous coordinates: C_w(u) = sum_i N_i(u) Pw_i
is a polynomial B-spline in R^4 and C(u) is its projection. Derivatives of
C are recovered from derivatives of C_w with the quotient (Leibniz) rule;
plain B-splines (all weights 1) skip that step.

This module provides:
- NURBSCurve: evaluation, reversal, transformation and the geometric
  queries (arc length, closest point, split, tessellation)
- CurveKind: tag of the curve variants defined in shapes.py
"""

import math
import logging
import threading
import numpy as np
from enum import Enum
from typing import Tuple, Optional

from ..discretization.knot_vector import KnotVector
from ..discretization.curve_data import CurveData, homogenize
from ..discretization.refinement import split_curve
from ..errors import ParameterOutOfDomainError, DegenerateTangentError
from ..io.config import KernelConfig, get_config
from ..query.arc_length import ArcLengthTable, InverseResult, curve_length
from ..query.closest_point import ClosestPoint, find_closest_point
from ..query.tessellation import tessellate_params
from .bspline import BSplineBasis
from .vector import distance, norm

logger = logging.getLogger(__name__)


class CurveKind(Enum):
    """Tag of a curve variant."""
    CURVE = 0
    ARC = 1
    BEZIER = 2
    CIRCLE = 3
    ELLIPSE = 4
    ELLIPSE_ARC = 5
    LINE = 6


def rational_derivatives(A_ders: np.ndarray, w_ders: np.ndarray) -> np.ndarray:
    """
    Derivatives of a rational curve from its homogeneous derivatives.

    Uses the formula for rational derivatives (Piegl & Tiller, Eq. 4.8):

        C^(k) = (A^(k) - sum_{j=1}^{k} C(k,j) * w^(j) * C^(k-j)) / w^(0)

    Parameters:
        A_ders: (n+1, d) derivatives of the weighted numerator
        w_ders: (n+1,) derivatives of the weight function

    Returns:
        (n+1, d) derivatives of the projected curve
    """
    n_ders = A_ders.shape[0] - 1
    C_ders = np.zeros_like(A_ders)

    for k in range(n_ders + 1):
        v = A_ders[k].copy()
        for j in range(1, k + 1):
            binom = math.comb(k, j)
            v -= binom * w_ders[j] * C_ders[k - j]
        C_ders[k] = v / w_ders[0]

    return C_ders


class NURBSCurve:
    """
    NURBS curve in 3D space.

    A NURBS curve C(u) is defined by:
    - Knot vector defining the parametric domain
    - Control points P_i in R^3 (2D input is embedded at z = 0)
    - Weights w_i > 0

    The curve owns one CurveData. reverse() and transform() replace it in
    place; split() and copy() return new curves. The arc-length table is
    built lazily on the first length query and dropped whenever the data
    changes.
    """

    kind = CurveKind.CURVE

    def __init__(self, knot_vector: KnotVector,
                 control_points: np.ndarray,
                 weights: Optional[np.ndarray] = None,
                 config: Optional[KernelConfig] = None):
        """
        Initialize a NURBS curve.

        Parameters:
            knot_vector: KnotVector defining the basis
            control_points: Array of shape (n, 2) or (n, 3) where n = n_basis
            weights: Array of shape (n,), defaults to 1.0 (B-spline)
            config: Numerical settings, defaults to the active config
        """
        data = CurveData.from_points(knot_vector.degree, control_points,
                                     knot_vector.knots, weights)
        self._init_data(data, config)

    def _init_data(self, data: CurveData, config: Optional[KernelConfig]):
        self._config = config if config is not None else get_config()
        self._lock = threading.Lock()
        self._set_data(data)

    def _set_data(self, data: CurveData):
        self._data = data
        self._basis = BSplineBasis(data.knot_vector)
        self._arc_length_table = None

    @classmethod
    def from_data(cls, data: CurveData,
                  config: Optional[KernelConfig] = None) -> 'NURBSCurve':
        """Wrap existing curve data in a generic curve."""
        curve = NURBSCurve.__new__(NURBSCurve)
        curve._init_data(data, config)
        return curve

    @classmethod
    def by_points(cls, points: np.ndarray, degree: int = 3,
                  config: Optional[KernelConfig] = None) -> 'NURBSCurve':
        """Curve interpolating the given points (global interpolation)."""
        from .primitives import interpolate_curve_data
        return cls.from_data(interpolate_curve_data(points, degree), config)

    @property
    def data(self) -> CurveData:
        return self._data

    @property
    def config(self) -> KernelConfig:
        return self._config

    @property
    def n_control_points(self) -> int:
        return self._data.n_control_points

    @property
    def control_points(self) -> np.ndarray:
        return self._data.control_points

    @property
    def weights(self) -> np.ndarray:
        return self._data.weights

    @property
    def knot_vector(self) -> KnotVector:
        return self._data.knot_vector

    @property
    def knots(self) -> np.ndarray:
        return self._data.knots.copy()

    @property
    def basis(self) -> BSplineBasis:
        return self._basis

    @property
    def degree(self) -> int:
        return self._data.degree

    @property
    def domain(self) -> Tuple[float, float]:
        """Parametric domain (u_min, u_max)."""
        return self._data.domain

    @property
    def is_rational(self) -> bool:
        return self._data.is_rational

    @property
    def is_closed(self) -> bool:
        """True when the start and end points coincide."""
        a, b = self.domain
        start = self.eval_point(a)
        end = self.eval_point(b)
        scale = max(1.0, norm(start), norm(end))
        return distance(start, end) <= self._config.eps * scale

    def copy(self) -> 'NURBSCurve':
        """Independent generic curve with a copy of the data."""
        return NURBSCurve.from_data(self._data.copy(), self._config)

    def _check_param(self, u: float) -> float:
        """
        Reject parameters outside the domain, clamp round-off overshoot.
        """
        a, b = self.domain
        eps = self._config.eps * max(1.0, b - a)
        if not (a - eps <= u <= b + eps):
            raise ParameterOutOfDomainError(u, (a, b))
        return min(max(float(u), a), b)

    def eval_point(self, u: float) -> np.ndarray:
        """
        Evaluate curve at parameter value.

        Parameters:
            u: Parameter value in the domain

        Returns:
            Point coordinates as (3,) array
        """
        u = self._check_param(u)
        span = self._basis.find_span(u)
        N = self._basis.eval(u, span)

        # Get active homogeneous control points
        start = span - self.degree
        Pw_local = self._data.control_points_w[start:start + self.degree + 1]

        Cw = np.dot(N, Pw_local)
        return Cw[:3] / Cw[3]

    def eval_homogeneous_derivatives(self, u: float, n_ders: int = 1) -> np.ndarray:
        """
        Derivatives of the homogeneous curve C_w(u) = sum_i N_i(u) Pw_i.

        Returns:
            (n_ders+1, 4) array; row k is the k-th derivative
        """
        u = self._check_param(u)
        span = self._basis.find_span(u)
        Nders = self._basis.eval_ders(u, n_ders, span)

        start = span - self.degree
        Pw_local = self._data.control_points_w[start:start + self.degree + 1]

        return np.dot(Nders, Pw_local)

    def eval_derivatives(self, u: float, n_ders: int = 1) -> Tuple[np.ndarray, ...]:
        """
        Evaluate curve and derivatives at parameter value.

        Parameters:
            u: Parameter value
            n_ders: Highest derivative order

        Returns:
            Tuple (C, dC/du, d²C/du², ...) of (3,) arrays
        """
        CKw = self.eval_homogeneous_derivatives(u, n_ders)

        if self._data.is_rational:
            C_ders = rational_derivatives(CKw[:, :3], CKw[:, 3])
        else:
            C_ders = CKw[:, :3]

        return tuple(C_ders[k].copy() for k in range(n_ders + 1))

    def eval_tangent(self, u: float) -> np.ndarray:
        """
        Unit tangent at parameter value.

        Raises:
            DegenerateTangentError: if |C'(u)| is below config.tangent_eps
        """
        d1 = self.eval_derivatives(u, 1)[1]
        magnitude = norm(d1)
        if magnitude < self._config.tangent_eps:
            raise DegenerateTangentError(u, magnitude)
        return d1 / magnitude

    def reverse(self) -> None:
        """
        Reverse the curve direction in place.

        The new curve at u' = u_min + u_max - u equals the old curve at u.
        """
        with self._lock:
            self._set_data(self._data.reversed())

    def transform(self, matrix: np.ndarray) -> None:
        """
        Apply a 4x4 affine or projective transform to the control points.

        Weights are left unchanged.

        Parameters:
            matrix: (4, 4) array acting on column vectors (x, y, z, 1)
        """
        M = np.asarray(matrix, dtype=np.float64)
        if M.shape != (4, 4):
            raise ValueError(f"Transform must be a 4x4 matrix, got shape {M.shape}")

        points = self._data.control_points
        hom = np.hstack([points, np.ones((points.shape[0], 1))]) @ M.T
        if np.any(np.abs(hom[:, 3]) < self._config.eps):
            raise ValueError("Transform maps a control point to infinity")
        new_points = hom[:, :3] / hom[:, 3:4]

        data = CurveData(self.degree, self._data.knots.copy(),
                         homogenize(new_points, self._data.weights))
        with self._lock:
            self._set_data(data)

    # Arc length

    def arc_length_table(self) -> ArcLengthTable:
        """Cached length-vs-parameter table, built on first use."""
        table = self._arc_length_table
        if table is None:
            with self._lock:
                if self._arc_length_table is None:
                    self._arc_length_table = ArcLengthTable(self, self._config)
                table = self._arc_length_table
        return table

    def length(self, u0: Optional[float] = None, u1: Optional[float] = None) -> float:
        """
        Arc length between two parameters (whole curve by default).

        Parameters are clamped to the domain.
        """
        if u0 is None and u1 is None:
            return self.arc_length_table().total_length
        a, b = self.domain
        return curve_length(self, a if u0 is None else u0,
                            b if u1 is None else u1, self._config)

    def length_at_param(self, u: float) -> float:
        """Arc length from u_min to u (u clamped to the domain)."""
        return self.arc_length_table().length_at_param(u)

    def solve_param_at_length(self, length: float) -> InverseResult:
        """Inverse arc-length query with convergence information."""
        return self.arc_length_table().solve(length)

    def param_at_length(self, length: float) -> float:
        """Parameter at which the arc length from u_min equals length."""
        return self.arc_length_table().param_at_length(length)

    def divide_by_equal_arc_length(self, divisions: int) -> list:
        """divisions+1 samples splitting the curve into equal-length pieces."""
        return self.arc_length_table().divide_by_equal_arc_length(divisions)

    def divide_by_arc_length(self, arc_length: float) -> list:
        """Samples every arc_length along the curve, end included."""
        return self.arc_length_table().divide_by_arc_length(arc_length)

    # Closest point

    def closest(self, point) -> ClosestPoint:
        """Closest point on the curve with parameter and convergence flag."""
        return find_closest_point(self, point, self._config)

    def closest_point(self, point) -> np.ndarray:
        return self.closest(point).point

    def closest_param(self, point) -> float:
        return self.closest(point).param

    # Split / tessellate

    def split(self, u: float) -> Tuple['NURBSCurve', 'NURBSCurve']:
        """
        Split the curve at an interior parameter.

        Raises:
            InvalidSplitParameterError: unless u_min < u < u_max
        """
        left, right = split_curve(self._data, u, self._config.eps)
        return (NURBSCurve.from_data(left, self._config),
                NURBSCurve.from_data(right, self._config))

    def tessellate(self, tol: float = 1e-3) -> np.ndarray:
        """Polyline points approximating the curve within tol."""
        _, points = tessellate_params(self, tol, self._config)
        return points

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(degree={self.degree}, "
                f"n_control_points={self.n_control_points}, "
                f"domain={self.domain}, rational={self.is_rational})")
