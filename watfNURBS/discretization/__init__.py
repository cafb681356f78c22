"""
Discretization module: knot vectors, curve data, knot insertion.

Provides:
- KnotVector: Knot vector representation
- CurveData: Degree, knots and homogeneous control points
- insert_knot_curve / clamp_curve / split_curve: Knot insertion, clamping and splitting
"""

from .knot_vector import (
    KnotVector, make_open_knot_vector,
    compute_multiplicity, compute_knot_insertion_matrix
)
from .curve_data import CurveData, homogenize, dehomogenize
from .refinement import insert_knot_curve, clamp_curve, split_curve
