"""
Error taxonomy for the curve kernel.

Every failure surfaced by the kernel is one of these types:

- InvalidConstructionError: malformed counts/degree/knots/weights at build time
- ParameterOutOfDomainError: query parameter outside [u_min, u_max]
- DegenerateTangentError: zero-magnitude first derivative
- InvalidSplitParameterError: split parameter not strictly interior

Numeric non-convergence of the iterative solvers (closest point,
length-to-parameter inversion) is not an exception: those solvers return
their best estimate with ``converged=False``.

The value-type errors also derive from ValueError so callers that only
catch ValueError keep working.
"""


class NURBSError(Exception):
    """Base class for all kernel errors."""
    pass


class InvalidConstructionError(NURBSError, ValueError):
    """Raised when curve data cannot be built from the given input."""
    pass


class ParameterOutOfDomainError(NURBSError, ValueError):
    """Raised when a parameter lies outside the curve domain."""

    def __init__(self, u: float, domain):
        self.u = u
        self.domain = tuple(domain)
        super().__init__(f"Parameter {u} outside domain {self.domain}")


class DegenerateTangentError(NURBSError, ArithmeticError):
    """Raised when the tangent direction is undefined at a parameter."""

    def __init__(self, u: float, magnitude: float):
        self.u = u
        self.magnitude = magnitude
        super().__init__(
            f"Degenerate tangent at u={u}: |C'(u)| = {magnitude:.3e}"
        )


class InvalidSplitParameterError(NURBSError, ValueError):
    """Raised when a split parameter is not strictly inside the domain."""

    def __init__(self, u: float, domain):
        self.u = u
        self.domain = tuple(domain)
        super().__init__(
            f"Split parameter {u} must lie strictly inside {self.domain}"
        )
