"""
Unit tests for B-spline basis function evaluation.
"""

import pytest
import numpy as np
from numpy.testing import assert_array_almost_equal, assert_almost_equal

from watfNURBS.discretization.knot_vector import KnotVector, make_open_knot_vector
from watfNURBS.geometry.bspline import (
    eval_basis_1d, eval_basis_ders_1d, BSplineBasis
)


class TestBasisEvaluation1D:
    """Tests for 1D B-spline basis evaluation."""

    def test_partition_of_unity(self):
        """Test that basis functions sum to 1 (partition of unity)."""
        kv = make_open_knot_vector(n_basis=5, degree=2, domain=(0.0, 1.0))

        # Test at multiple points
        for xi in [0.0, 0.25, 0.5, 0.75, 1.0]:
            N = eval_basis_1d(kv, xi)
            assert_almost_equal(np.sum(N), 1.0, decimal=14)

    def test_non_negativity(self):
        """Test that basis functions are non-negative."""
        kv = make_open_knot_vector(n_basis=5, degree=2, domain=(0.0, 1.0))

        for xi in np.linspace(0, 1, 20):
            N = eval_basis_1d(kv, xi)
            assert np.all(N >= -1e-14), f"Negative basis value at xi={xi}"

    def test_boundary_interpolation(self):
        """Test that open knot vector basis interpolates at boundaries."""
        kv = make_open_knot_vector(n_basis=5, degree=2, domain=(0.0, 1.0))

        # At left boundary, only first basis function is 1
        N = eval_basis_1d(kv, 0.0)
        assert_almost_equal(N[0], 1.0)
        assert_almost_equal(N[1:], 0.0)

        # At right boundary, only last basis function is 1
        N = eval_basis_1d(kv, 1.0)
        assert_almost_equal(N[-1], 1.0)
        assert_almost_equal(N[:-1], 0.0)

    def test_local_support(self):
        """Test that exactly p+1 basis functions are non-zero."""
        for p in [1, 2, 3]:
            kv = make_open_knot_vector(n_basis=p + 3, degree=p, domain=(0.0, 1.0))

            for xi in [0.1, 0.3, 0.7]:
                N = eval_basis_1d(kv, xi)
                n_nonzero = np.sum(np.abs(N) > 1e-14)
                assert n_nonzero == p + 1, f"Expected {p+1} non-zero, got {n_nonzero}"

    def test_known_values_degree_1(self):
        """Test known values for linear (p=1) basis."""
        # Linear basis on [0,0,0.5,1,1]: hat functions
        kv = make_open_knot_vector(n_basis=3, degree=1, domain=(0.0, 1.0))

        # At midpoint of first span
        N = eval_basis_1d(kv, 0.25)
        assert_almost_equal(N[0], 0.5)
        assert_almost_equal(N[1], 0.5)

    def test_known_values_degree_2(self):
        """Test known values for quadratic (p=2) basis."""
        # Quadratic basis on [0,0,0,1,1,1]: single Bezier segment
        kv = make_open_knot_vector(n_basis=3, degree=2, domain=(0.0, 1.0))

        # At midpoint: Bernstein polynomials
        N = eval_basis_1d(kv, 0.5)
        # B_0 = (1-t)^2 = 0.25, B_1 = 2t(1-t) = 0.5, B_2 = t^2 = 0.25
        assert_almost_equal(N, [0.25, 0.5, 0.25])

    def test_degree_0(self):
        """Test piecewise constant basis."""
        kv = KnotVector(np.array([0.0, 0.5, 1.0]), degree=0)

        assert_almost_equal(eval_basis_1d(kv, 0.25), [1.0])
        assert kv.find_span(0.75) == 1

    def test_repeated_interior_knot(self):
        """Test evaluation exactly on a knot of multiplicity p."""
        kv = KnotVector(np.array([0, 0, 0, 0.5, 0.5, 1, 1, 1], dtype=float), degree=2)

        N = eval_basis_1d(kv, 0.5)
        assert np.all(np.isfinite(N))
        assert_almost_equal(np.sum(N), 1.0, decimal=14)
        # C^0 at the double knot: only N_2 is active there
        assert kv.find_span(0.5) == 4
        assert_almost_equal(N, [1.0, 0.0, 0.0])


class TestBasisDerivatives1D:
    """Tests for 1D B-spline basis derivatives."""

    def test_derivative_sum_zero(self):
        """Test that derivative of partition of unity is zero."""
        kv = make_open_knot_vector(n_basis=5, degree=2, domain=(0.0, 1.0))

        for xi in [0.1, 0.5, 0.9]:
            Nders = eval_basis_ders_1d(kv, xi, n_ders=1)
            dN = Nders[1, :]
            assert_almost_equal(np.sum(dN), 0.0, decimal=12)

    def test_derivative_values(self):
        """Test derivative values against known results."""
        # Single Bezier segment (Bernstein)
        kv = make_open_knot_vector(n_basis=3, degree=2, domain=(0.0, 1.0))

        Nders = eval_basis_ders_1d(kv, 0.5, n_ders=1)

        # Values
        assert_almost_equal(Nders[0, :], [0.25, 0.5, 0.25])

        # First derivatives of Bernstein:
        # dB_0/dt = -2(1-t) = -1 at t=0.5
        # dB_1/dt = 2(1-2t) = 0 at t=0.5
        # dB_2/dt = 2t = 1 at t=0.5
        assert_almost_equal(Nders[1, :], [-1.0, 0.0, 1.0])

    def test_second_derivative(self):
        """Test second derivative values."""
        kv = make_open_knot_vector(n_basis=3, degree=2, domain=(0.0, 1.0))

        Nders = eval_basis_ders_1d(kv, 0.5, n_ders=2)

        # Second derivatives of Bernstein:
        # d²B_0/dt² = 2
        # d²B_1/dt² = -4
        # d²B_2/dt² = 2
        assert_almost_equal(Nders[2, :], [2.0, -4.0, 2.0])

    def test_derivatives_above_degree_are_zero(self):
        """Test that derivative orders above p are zero."""
        kv = make_open_knot_vector(n_basis=4, degree=2, domain=(0.0, 1.0))

        Nders = eval_basis_ders_1d(kv, 0.3, n_ders=4)
        assert Nders.shape == (5, 3)
        assert_array_almost_equal(Nders[3:], np.zeros((2, 3)))

    def test_derivative_matches_finite_difference(self):
        """Test first derivatives against central differences."""
        kv = KnotVector(np.array([0, 0, 0, 0, 0.3, 0.7, 1, 1, 1, 1], dtype=float), degree=3)
        h = 1e-6

        for xi in [0.1, 0.45, 0.8]:
            span = kv.find_span(xi)
            dN = eval_basis_ders_1d(kv, xi, n_ders=1, span=span)[1]
            fd = (eval_basis_1d(kv, xi + h, span) - eval_basis_1d(kv, xi - h, span)) / (2 * h)
            assert_array_almost_equal(dN, fd, decimal=6)

    def test_negative_order_rejected(self):
        """Test that a negative derivative order is an error."""
        kv = make_open_knot_vector(n_basis=3, degree=2, domain=(0.0, 1.0))

        with pytest.raises(ValueError):
            eval_basis_ders_1d(kv, 0.5, n_ders=-1)


class TestBSplineBasisClass:
    """Tests for BSplineBasis class."""

    def test_basic_properties(self):
        """Test basic properties of BSplineBasis."""
        kv = make_open_knot_vector(n_basis=5, degree=2, domain=(0.0, 1.0))
        basis = BSplineBasis(kv)

        assert basis.degree == 2
        assert basis.n_basis == 5
        assert basis.n_spans == 3

    def test_eval_method(self):
        """Test eval method matches function."""
        kv = make_open_knot_vector(n_basis=5, degree=2, domain=(0.0, 1.0))
        basis = BSplineBasis(kv)

        for xi in [0.25, 0.5, 0.75]:
            N1 = basis.eval(xi)
            N2 = eval_basis_1d(kv, xi)
            assert_array_almost_equal(N1, N2)
