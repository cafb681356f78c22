"""
Unit tests for arc length, its inverse and arc-length division.
"""

import logging
import pytest
import numpy as np
from concurrent.futures import ThreadPoolExecutor
from numpy.testing import assert_array_almost_equal
from scipy.special import ellipe

from watfNURBS.discretization.knot_vector import make_open_knot_vector
from watfNURBS.geometry.nurbs import NURBSCurve
from watfNURBS.geometry.shapes import Arc, Ellipse
from watfNURBS.io.config import KernelConfig
from watfNURBS.query.arc_length import ArcLengthTable, curve_length


class TestCurveLength:
    """Tests for total and partial lengths."""

    def test_quarter_circle_length(self, quarter_arc):
        """Test the quarter circle has length pi/2."""
        assert abs(quarter_arc.length() - np.pi / 2) < 1e-6
        assert quarter_arc.length() == pytest.approx(np.pi / 2, abs=1e-10)

    def test_line_length(self, line):
        """Test the length of a straight line."""
        assert line.length() == pytest.approx(10.0, abs=1e-12)

    def test_circle_partial_length(self, unit_circle):
        """Test the length between two quarter knots."""
        assert unit_circle.length(0.25, 0.5) == pytest.approx(np.pi / 2, abs=1e-10)
        assert unit_circle.length() == pytest.approx(2.0 * np.pi, abs=1e-10)

    def test_ellipse_perimeter(self):
        """Test an ellipse perimeter against the complete elliptic integral."""
        ellipse = Ellipse((0, 0, 0), (2, 0, 0), (0, 1, 0))
        exact = 4.0 * 2.0 * ellipe(1.0 - (1.0 / 2.0)**2)
        assert ellipse.length() == pytest.approx(exact, abs=1e-8)

    def test_reversed_bounds_are_negative(self, quarter_arc):
        """Test u1 < u0 gives a negative length."""
        forward = quarter_arc.length(0.2, 0.7)
        assert quarter_arc.length(0.7, 0.2) == pytest.approx(-forward, abs=1e-14)

    def test_bounds_clamped(self, line):
        """Test length bounds outside the domain are clamped."""
        assert line.length(-1.0, 2.0) == pytest.approx(10.0, abs=1e-12)
        assert curve_length(line, 0.5, 5.0) == pytest.approx(5.0, abs=1e-12)

    def test_zero_length_curve(self):
        """Test a curve whose control points coincide."""
        kv = make_open_knot_vector(n_basis=3, degree=2, domain=(0.0, 1.0))
        curve = NURBSCurve(kv, np.array([[1.0, 1.0], [1.0, 1.0], [1.0, 1.0]]))

        assert curve.length() == 0.0
        assert curve.param_at_length(5.0) == 0.0
        assert len(curve.divide_by_equal_arc_length(4)) == 1


class TestLengthAtParam:
    """Tests for the forward table query."""

    def test_end_values(self, cubic_curve):
        """Test L(u_min) = 0 and L(u_max) = total length."""
        assert cubic_curve.length_at_param(0.0) == 0.0
        assert cubic_curve.length_at_param(1.0) == pytest.approx(cubic_curve.length(), abs=1e-12)

    def test_matches_direct_integration(self, rational_cubic):
        """Test table lookups agree with direct integration."""
        for u in [0.05, 0.37, 0.5, 0.81]:
            assert rational_cubic.length_at_param(u) == pytest.approx(
                rational_cubic.length(0.0, u), abs=1e-10)

    def test_monotonic(self, rational_cubic):
        """Test L(u) is non-decreasing."""
        lengths = [rational_cubic.length_at_param(u) for u in np.linspace(0, 1, 50)]
        assert np.all(np.diff(lengths) >= 0.0)

    def test_clamped(self, line):
        """Test parameters outside the domain are clamped."""
        assert line.length_at_param(-3.0) == 0.0
        assert line.length_at_param(4.0) == pytest.approx(10.0, abs=1e-12)

    def test_table_samples(self, unit_circle):
        """Test the table covers the domain with increasing samples."""
        table = unit_circle.arc_length_table()
        samples = table.samples

        assert samples[0].u == 0.0 and samples[0].length == 0.0
        assert samples[-1].u == 1.0
        assert len(samples) == 4 * unit_circle.config.arc_length_samples_per_span + 1
        assert all(b.length > a.length for a, b in zip(samples, samples[1:]))


class TestParamAtLength:
    """Tests for the inverse arc-length query."""

    def test_line_midpoint(self, line):
        """Test half the length maps to the middle of the domain."""
        assert line.param_at_length(5.0) == pytest.approx(0.5, abs=1e-10)

    def test_round_trip(self, rational_cubic):
        """Test param_at_length(length_at_param(u)) == u."""
        for u in np.linspace(0.0, 1.0, 17):
            s = rational_cubic.length_at_param(u)
            assert rational_cubic.param_at_length(s) == pytest.approx(u, abs=1e-8)

    def test_round_trip_conic(self, unit_circle):
        """Test the inverse on a rational curve with interior knots."""
        for s in np.linspace(0.0, 2.0 * np.pi, 9):
            u = unit_circle.param_at_length(s)
            assert unit_circle.length_at_param(u) == pytest.approx(s, abs=1e-9)

    def test_quarter_arc_half_length(self, quarter_arc):
        """Test half the quarter arc lands on the 45 degree point."""
        u = quarter_arc.param_at_length(np.pi / 4)
        s = np.sqrt(2.0) / 2.0
        assert_array_almost_equal(quarter_arc.eval_point(u), [s, s, 0.0], decimal=9)

    def test_lengths_clamped(self, line):
        """Test lengths outside [0, total] map to the domain ends."""
        assert line.param_at_length(-1.0) == 0.0
        assert line.param_at_length(20.0) == 1.0

    def test_converged_result(self, cubic_curve):
        """Test the solver reports convergence and the attained length."""
        result = cubic_curve.solve_param_at_length(1.5)

        assert result.converged
        assert result.length == pytest.approx(1.5, abs=1e-9)
        assert result.iterations >= 1

    def test_iteration_budget_exhausted(self, quarter_arc, caplog):
        """Test a tiny budget returns a best estimate flagged as not converged."""
        config = KernelConfig(inverse_max_iter=1, arc_length_samples_per_span=2)
        table = ArcLengthTable(quarter_arc, config)

        with caplog.at_level(logging.WARNING, logger="watfNURBS"):
            result = table.solve(0.4)

        assert not result.converged
        assert result.iterations == 1
        assert abs(table.length_at_param(result.param) - 0.4) < 1e-2
        assert "did not converge" in caplog.text


class TestDivision:
    """Tests for arc-length division."""

    def test_divide_by_equal_arc_length(self, unit_circle):
        """Test n divisions give n+1 equally spaced samples."""
        samples = unit_circle.divide_by_equal_arc_length(8)
        total = unit_circle.length()

        assert len(samples) == 9
        assert samples[0].u == 0.0 and samples[0].length == 0.0
        assert samples[-1].u == 1.0
        assert samples[-1].length == pytest.approx(total, abs=1e-14)
        for k, sample in enumerate(samples):
            assert sample.length == pytest.approx(k * total / 8, abs=1e-12)
            assert unit_circle.length_at_param(sample.u) == pytest.approx(sample.length, abs=1e-8)

    def test_equal_division_points_on_circle(self, unit_circle):
        """Test equal arc division of a circle gives equally spaced angles."""
        samples = unit_circle.divide_by_equal_arc_length(6)
        for k, sample in enumerate(samples):
            angle = k * np.pi / 3
            assert_array_almost_equal(unit_circle.eval_point(sample.u),
                                      [np.cos(angle), np.sin(angle), 0.0], decimal=8)

    def test_divide_by_arc_length(self, line):
        """Test fixed steps with a shorter last piece."""
        samples = line.divide_by_arc_length(3.0)

        assert [s.length for s in samples] == pytest.approx([0.0, 3.0, 6.0, 9.0, 10.0])
        assert [s.u for s in samples] == pytest.approx([0.0, 0.3, 0.6, 0.9, 1.0], abs=1e-10)

    def test_divide_by_exact_step(self, line):
        """Test a step dividing the length exactly has no extra sample."""
        samples = line.divide_by_arc_length(2.5)
        assert len(samples) == 5
        assert samples[-1].length == pytest.approx(10.0)

    def test_invalid_arguments(self, line):
        """Test non-positive division arguments raise."""
        with pytest.raises(ValueError):
            line.divide_by_equal_arc_length(0)
        with pytest.raises(ValueError):
            line.divide_by_arc_length(0.0)
        with pytest.raises(ValueError):
            line.divide_by_arc_length(-1.0)


class TestTableCache:
    """Tests for the cached arc-length table."""

    def test_table_is_cached(self, cubic_curve):
        """Test repeated queries reuse one table."""
        assert cubic_curve.arc_length_table() is cubic_curve.arc_length_table()

    def test_concurrent_queries(self):
        """Test concurrent first queries on one curve agree."""
        arc = Arc((0, 0, 0), (1, 0, 0), (0, 1, 0), 3.0, 0.0, 5.0)

        with ThreadPoolExecutor(max_workers=4) as pool:
            lengths = list(pool.map(lambda _: arc.length(), range(8)))

        assert lengths == pytest.approx([15.0] * 8, abs=1e-9)
        assert arc.arc_length_table() is arc.arc_length_table()
