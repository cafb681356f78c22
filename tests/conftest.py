"""
Pytest configuration and shared fixtures for watfNURBS tests.
"""

import pytest
import numpy as np
import sys
from pathlib import Path

# Add the parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from watfNURBS.geometry.shapes import Arc, Circle, Line
from watfNURBS.geometry.nurbs import NURBSCurve
from watfNURBS.discretization.knot_vector import KnotVector


@pytest.fixture
def tolerance():
    """Default tolerance for floating point comparisons."""
    return 1e-12


@pytest.fixture
def loose_tolerance():
    """Looser tolerance for numerical integration tests."""
    return 1e-8


@pytest.fixture
def quarter_arc():
    """Quarter circle of radius 1 around the origin, from (1,0) to (0,1)."""
    return Arc((0, 0, 0), (1, 0, 0), (0, 1, 0), 1.0, 0.0, np.pi / 2)


@pytest.fixture
def unit_circle():
    return Circle((0, 0, 0), (1, 0, 0), (0, 1, 0), 1.0)


@pytest.fixture
def line():
    """Straight line from (0,0,0) to (10,0,0)."""
    return Line((0, 0, 0), (10, 0, 0))


@pytest.fixture
def cubic_curve():
    """Non-uniform cubic B-spline with one interior knot."""
    kv = KnotVector(np.array([0.0, 0.0, 0.0, 0.0, 0.4, 1.0, 1.0, 1.0, 1.0]), 3)
    control_points = np.array([
        [0.0, 0.0, 0.0],
        [1.0, 2.0, 0.0],
        [3.0, 2.0, 1.0],
        [4.0, 0.0, 1.0],
        [5.0, 1.0, 0.0],
    ])
    return NURBSCurve(kv, control_points)


@pytest.fixture
def rational_cubic():
    """Cubic NURBS with non-uniform weights."""
    kv = KnotVector(np.array([0.0, 0.0, 0.0, 0.0, 0.5, 1.0, 1.0, 1.0, 1.0]), 3)
    control_points = np.array([
        [0.0, 0.0],
        [1.0, 1.0],
        [2.0, -1.0],
        [3.0, 1.0],
        [4.0, 0.0],
    ])
    weights = np.array([1.0, 2.0, 0.5, 3.0, 1.0])
    return NURBSCurve(kv, control_points, weights)
