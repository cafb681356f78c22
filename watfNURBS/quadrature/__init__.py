"""
Gauss-Legendre quadrature.
"""

from .gauss import gauss_legendre_1d, integrate_fixed, integrate_adaptive
