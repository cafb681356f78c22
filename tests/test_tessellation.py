"""
Unit tests for adaptive tessellation.
"""

import pytest
import numpy as np
from numpy.testing import assert_array_almost_equal

from watfNURBS.geometry.vector import point_segment_distance
from watfNURBS.io.config import KernelConfig
from watfNURBS.query.tessellation import tessellate_params, tessellate


def max_deviation(curve, params, points, n_samples=20):
    """Largest distance from sampled curve points to their polyline segment."""
    worst = 0.0
    for i in range(len(params) - 1):
        for t in np.linspace(params[i], params[i + 1], n_samples):
            d = point_segment_distance(curve.eval_point(t), points[i], points[i + 1])
            worst = max(worst, d)
    return worst


class TestTessellation:
    """Tests for chordal tessellation."""

    def test_line_is_two_points(self, line):
        """Test a straight line needs no refinement."""
        points = line.tessellate(1e-6)

        assert points.shape == (2, 3)
        assert_array_almost_equal(points[0], [0.0, 0.0, 0.0])
        assert_array_almost_equal(points[-1], [10.0, 0.0, 0.0])

    def test_circle_within_tolerance(self, unit_circle):
        """Test every curve point is within tol of the polyline."""
        tol = 0.01
        params, points = tessellate_params(unit_circle, tol)

        assert max_deviation(unit_circle, params, points) <= tol + 1e-12
        assert_array_almost_equal(points[0], points[-1])

    def test_count_non_increasing_with_tolerance(self, unit_circle):
        """Test looser tolerances never give more points."""
        counts = [len(unit_circle.tessellate(tol)) for tol in (1e-4, 1e-3, 1e-2, 1e-1)]

        assert counts == sorted(counts, reverse=True)
        assert counts[0] > counts[-1]

    def test_params_increasing(self, rational_cubic):
        """Test the polyline is ordered by increasing parameter."""
        params, points = tessellate_params(rational_cubic, 1e-3)

        assert params[0] == 0.0
        assert params[-1] == 1.0
        assert np.all(np.diff(params) > 0.0)
        assert_array_almost_equal(points[0], rational_cubic.eval_point(0.0))
        assert_array_almost_equal(points[-1], rational_cubic.eval_point(1.0))

    def test_points_on_curve(self, rational_cubic):
        """Test polyline vertices are curve points."""
        params, points = tessellate_params(rational_cubic, 1e-2)
        for u, p in zip(params, points):
            assert_array_almost_equal(p, rational_cubic.eval_point(u), decimal=14)

    def test_depth_limit(self, unit_circle):
        """Test refinement stops at the configured depth."""
        config = KernelConfig(tessellation_max_depth=0)
        points = tessellate(unit_circle, 1e-9, config)

        # 4 spans, 2 initial pieces each, no bisection
        assert len(points) == 9

    def test_invalid_tolerance(self, line):
        """Test non-positive tolerances raise."""
        with pytest.raises(ValueError):
            line.tessellate(0.0)
        with pytest.raises(ValueError):
            tessellate_params(line, -1.0)
