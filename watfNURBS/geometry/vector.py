"""
3D point/vector algebra.

Points and vectors are both float64 arrays of shape (3,); points denote
locations, vectors displacements. 2D input is padded with z = 0 so callers
can work in the plane without special-casing.
"""

import numpy as np
from typing import Sequence


def as_point(p: Sequence[float]) -> np.ndarray:
    """
    Convert a 2D or 3D coordinate sequence to a (3,) float array.

    Parameters:
        p: (x, y) or (x, y, z)

    Returns:
        Array of shape (3,)
    """
    arr = np.asarray(p, dtype=np.float64).reshape(-1)
    if arr.shape[0] == 3:
        return arr.copy()
    if arr.shape[0] == 2:
        return np.array([arr[0], arr[1], 0.0])
    raise ValueError(f"Expected 2 or 3 coordinates, got {arr.shape[0]}")


# Vectors share the point layout
as_vector = as_point


def as_points(points) -> np.ndarray:
    """
    Convert an (n, 2) or (n, 3) array-like to an (n, 3) float array.
    """
    arr = np.atleast_2d(np.asarray(points, dtype=np.float64))
    if arr.shape[1] == 3:
        return arr.copy()
    if arr.shape[1] == 2:
        return np.hstack([arr, np.zeros((arr.shape[0], 1))])
    raise ValueError(f"Expected points of dimension 2 or 3, got {arr.shape[1]}")


def norm(v: np.ndarray) -> float:
    return float(np.sqrt(np.dot(v, v)))


def normalized(v: np.ndarray, eps: float = 0.0) -> np.ndarray:
    """
    Return v / |v|.

    Raises:
        ValueError: if |v| <= eps
    """
    length = norm(v)
    if length <= eps:
        raise ValueError("Cannot normalize a zero-length vector")
    return v / length


def dot(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.dot(a, b))


def cross(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    return np.cross(a, b)


def distance_sq(a: np.ndarray, b: np.ndarray) -> float:
    d = a - b
    return float(np.dot(d, d))


def distance(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.sqrt(distance_sq(a, b)))


def lerp(a: np.ndarray, b: np.ndarray, t: float) -> np.ndarray:
    """Point on the segment a->b at fraction t."""
    return a + t * (b - a)


def point_segment_distance(p: np.ndarray, a: np.ndarray, b: np.ndarray) -> float:
    """
    Distance from point p to the closed segment [a, b].

    Degenerate segments (a == b) reduce to the point distance.
    """
    ab = b - a
    len_sq = float(np.dot(ab, ab))
    if len_sq == 0.0:
        return distance(p, a)
    t = float(np.dot(p - a, ab)) / len_sq
    t = min(max(t, 0.0), 1.0)
    return distance(p, a + t * ab)
