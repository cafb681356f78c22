#!/usr/bin/env python3
"""
Example: geometric queries on NURBS curves.

This example walks through the curve kernel:
1. Build a circle, a quarter arc and an interpolating cubic
2. Measure arc lengths and invert them
3. Project points onto the curves
4. Split a curve and tessellate the pieces

Usage:
    ./examples/src/curve_queries.py
"""

import numpy as np
import sys
from pathlib import Path

# Add project root to path (two levels up from examples/src/)
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from watfNURBS import Arc, Circle, NURBSCurve, setup_logging


def run(tol: float = 1e-3, verbose: bool = True):
    """
    Run the curve query example.

    Parameters:
        tol: Chordal tolerance for tessellation
        verbose: Print progress information

    Returns:
        Dictionary with the computed quantities
    """
    # ==========================================================================
    # 1. Curves
    # ==========================================================================
    circle = Circle((0, 0, 0), (1, 0, 0), (0, 1, 0), 2.0)
    arc = Arc((0, 0, 0), (1, 0, 0), (0, 1, 0), 1.0, 0.0, np.pi / 2)
    x = np.linspace(0.0, 3.0, 8)
    cubic = NURBSCurve.by_points(np.column_stack([x, np.sin(x)]), degree=3)

    if verbose:
        print("=" * 60)
        print("NURBS Curve Queries")
        print("=" * 60)
        print(f"  {circle!r}")
        print(f"  {arc!r}")
        print(f"  {cubic!r}")
        print()

    # ==========================================================================
    # 2. Arc length
    # ==========================================================================
    circle_length = circle.length()
    arc_length = arc.length()
    u_mid = arc.param_at_length(0.5 * arc_length)
    samples = cubic.divide_by_equal_arc_length(5)

    if verbose:
        print("Arc length:")
        print(f"  Circle (r=2): {circle_length:.12f}  (exact {4 * np.pi:.12f})")
        print(f"  Quarter arc:  {arc_length:.12f}  (exact {np.pi / 2:.12f})")
        print(f"  Arc midpoint: u={u_mid:.6f} -> {arc.eval_point(u_mid)}")
        print("  Cubic divided in 5 equal pieces:")
        for s in samples:
            print(f"    u={s.u:.6f}  L={s.length:.6f}")
        print()

    # ==========================================================================
    # 3. Closest point
    # ==========================================================================
    query = (3.0, 1.0, 0.0)
    result = circle.closest(query)

    if verbose:
        print("Closest point:")
        print(f"  Query {query} -> u={result.param:.6f}, point {result.point}, "
              f"distance {result.distance:.6f}, converged={result.converged}")
        print()

    # ==========================================================================
    # 4. Split and tessellate
    # ==========================================================================
    left, right = cubic.split(0.5)
    polyline = cubic.tessellate(tol)

    if verbose:
        print("Split / tessellate:")
        print(f"  Left  {left.domain}: length {left.length():.6f}")
        print(f"  Right {right.domain}: length {right.length():.6f}")
        print(f"  Whole: length {cubic.length():.6f}")
        print(f"  Tessellation (tol={tol}): {len(polyline)} points")
        print("=" * 60)

    return {
        'circle_length': circle_length,
        'arc_length': arc_length,
        'closest': result,
        'n_polyline_points': len(polyline),
    }


if __name__ == "__main__":
    setup_logging()
    run()
