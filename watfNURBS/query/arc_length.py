"""
Arc-length engine: map between arc length and curve parameter.

    L(u) = integral_{u_min}^{u} |C'(t)| dt

The speed |C'| is smooth inside a knot span but may jump at knots, so
every integral is split at the knots and each piece integrated with
adaptive Gauss-Legendre quadrature.

For inverse queries an ArcLengthTable stores L at a fixed number of
parameters per knot span. param_at_length(s) brackets s in the table by
binary search, starts from linear interpolation and refines with Newton
steps (dL/du = |C'(u)|), falling back to bisection whenever a step leaves
the bracket. The bracket shrinks every iteration, so the iteration count
is bounded.

The curve argument is anything with eval_point/eval_derivatives, domain
and knot_vector (normally a NURBSCurve).
"""

import logging
import numpy as np
from dataclasses import dataclass
from typing import List, Optional

from ..io.config import KernelConfig, get_config
from ..quadrature.gauss import integrate_adaptive
from ..geometry.vector import norm

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurveSample:
    """A parameter and the arc length from u_min up to it."""
    u: float
    length: float


@dataclass(frozen=True)
class InverseResult:
    """
    Outcome of a length-to-parameter query.

    Attributes:
        param: Parameter estimate
        length: Arc length at param
        converged: False when the iteration budget ran out
        iterations: Refinement iterations used
    """
    param: float
    length: float
    converged: bool
    iterations: int


def curve_speed(curve, u: float) -> float:
    """|C'(u)|"""
    return norm(curve.eval_derivatives(u, 1)[1])


def _integrate_speed(curve, u0: float, u1: float, config: KernelConfig) -> float:
    """Length over [u0, u1] assuming no knot inside."""
    return integrate_adaptive(lambda u: curve_speed(curve, u), u0, u1,
                              n_points=config.quadrature_points,
                              tol=config.quadrature_tol,
                              max_depth=config.quadrature_max_depth)


def curve_length(curve, u0: float, u1: float,
                 config: Optional[KernelConfig] = None) -> float:
    """
    Arc length of the curve between two parameters.

    Both parameters are clamped to the domain; u1 < u0 gives a negative
    length.

    Parameters:
        curve: Curve to measure
        u0, u1: Parameter bounds
        config: Numerical settings

    Returns:
        Signed arc length
    """
    config = config or get_config()
    a, b = curve.domain
    u0 = min(max(u0, a), b)
    u1 = min(max(u1, a), b)
    if u1 < u0:
        return -curve_length(curve, u1, u0, config)

    total = 0.0
    for start, end in curve.knot_vector.spans:
        lo = max(start, u0)
        hi = min(end, u1)
        if hi > lo:
            total += _integrate_speed(curve, lo, hi, config)
    return total


class ArcLengthTable:
    """
    Monotonic table of (u, L(u)) samples over the whole curve.

    The table is immutable once built; curves cache one and drop it when
    their data changes.
    """

    def __init__(self, curve, config: Optional[KernelConfig] = None):
        self._curve = curve
        self._config = config or get_config()
        self._build()

    def _build(self):
        n_sub = self._config.arc_length_samples_per_span
        a, _ = self._curve.domain

        params = [a]
        lengths = [0.0]
        for start, end in self._curve.knot_vector.spans:
            grid = np.linspace(start, end, n_sub + 1)
            for u0, u1 in zip(grid[:-1], grid[1:]):
                seg = _integrate_speed(self._curve, u0, u1, self._config)
                params.append(float(u1))
                lengths.append(lengths[-1] + seg)

        self._u = np.array(params)
        self._len = np.array(lengths)
        logger.debug(f"Built arc-length table with {len(params)} samples, "
                     f"total length {self._len[-1]:.6g}")

    @property
    def samples(self) -> List[CurveSample]:
        return [CurveSample(float(u), float(s)) for u, s in zip(self._u, self._len)]

    @property
    def total_length(self) -> float:
        return float(self._len[-1])

    def _interval_at_param(self, u: float) -> int:
        i = int(np.searchsorted(self._u, u, side='right')) - 1
        return min(max(i, 0), len(self._u) - 2)

    def length_at_param(self, u: float) -> float:
        """
        Arc length from u_min to u; u is clamped to the domain.
        """
        a, b = self._u[0], self._u[-1]
        u = min(max(float(u), a), b)
        i = self._interval_at_param(u)
        return float(self._len[i]) + _integrate_speed(self._curve, self._u[i], u, self._config)

    def solve(self, length: float) -> InverseResult:
        """
        Parameter at which the arc length equals length.

        length is clamped to [0, total_length]. The result is always the
        best estimate found; converged is False only when the iteration
        budget ran out before the residual dropped below inverse_tol.
        """
        config = self._config
        a, b = float(self._u[0]), float(self._u[-1])
        total = self.total_length

        s = min(max(float(length), 0.0), total)
        if total <= 0.0 or s <= 0.0:
            return InverseResult(a, 0.0, True, 0)
        if s >= total:
            return InverseResult(b, total, True, 0)

        # Bracket in the table
        i = int(np.searchsorted(self._len, s, side='right')) - 1
        i = min(max(i, 0), len(self._u) - 2)
        base_u = float(self._u[i])
        base_len = float(self._len[i])
        lo, hi = base_u, float(self._u[i + 1])

        seg = float(self._len[i + 1]) - base_len
        u = lo + (hi - lo) * (s - base_len) / seg if seg > 0.0 else lo

        tol = config.inverse_tol * max(1.0, total)
        for it in range(1, config.inverse_max_iter + 1):
            residual = base_len + _integrate_speed(self._curve, base_u, u, config) - s
            if abs(residual) <= tol:
                return InverseResult(u, s + residual, True, it)

            if residual > 0.0:
                hi = u
            else:
                lo = u
            if hi - lo <= config.eps * max(1.0, abs(hi)):
                # Bracket collapsed: u is as good as the parameterization allows
                return InverseResult(u, s + residual, True, it)

            speed = curve_speed(self._curve, u)
            u_next = u - residual / speed if speed > config.tangent_eps else None
            if u_next is None or not (lo < u_next < hi):
                u_next = 0.5 * (lo + hi)
            u = u_next

        attained = base_len + _integrate_speed(self._curve, base_u, u, config)
        logger.warning(f"param_at_length({length}) did not converge after "
                       f"{config.inverse_max_iter} iterations "
                       f"(residual {attained - s:.3e})")
        return InverseResult(u, attained, False, config.inverse_max_iter)

    def param_at_length(self, length: float) -> float:
        return self.solve(length).param

    def divide_by_equal_arc_length(self, divisions: int) -> List[CurveSample]:
        """
        Split the curve into pieces of equal arc length.

        Returns:
            divisions+1 samples from u_min to u_max, or a single sample at
            u_min for a zero-length curve
        """
        if divisions < 1:
            raise ValueError(f"divisions must be at least 1, got {divisions}")

        a, b = float(self._u[0]), float(self._u[-1])
        total = self.total_length
        if total <= self._config.eps:
            return [CurveSample(a, 0.0)]

        step = total / divisions
        samples = [CurveSample(a, 0.0)]
        for k in range(1, divisions):
            s = k * step
            samples.append(CurveSample(self.param_at_length(s), s))
        samples.append(CurveSample(b, total))
        return samples

    def divide_by_arc_length(self, arc_length: float) -> List[CurveSample]:
        """
        Samples at arc lengths 0, step, 2*step, ... plus the curve end.

        The last piece may be shorter than arc_length; no sample lies
        beyond the total length.
        """
        if arc_length <= 0:
            raise ValueError(f"arc_length must be positive, got {arc_length}")

        a, b = float(self._u[0]), float(self._u[-1])
        total = self.total_length
        if total <= self._config.eps:
            return [CurveSample(a, 0.0)]

        end_tol = self._config.eps * max(1.0, total)
        samples = [CurveSample(a, 0.0)]
        k = 1
        while k * arc_length < total - end_tol:
            s = k * arc_length
            samples.append(CurveSample(self.param_at_length(s), s))
            k += 1
        samples.append(CurveSample(b, total))
        return samples
