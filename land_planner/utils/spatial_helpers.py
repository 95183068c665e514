"""
Vectorized spatial helpers.

Provides utilities for:
- Grid candidate generation
- Batch point-in-polygon and edge-distance queries
- KD-Tree spatial indexing of planted trees

Batch helpers agree exactly with the scalar functions in
`land_planner.utils.geometry`.
"""
from typing import Optional, Sequence
import numpy as np
from scipy.spatial import KDTree
import logging

logger = logging.getLogger(__name__)

# Slack added to the upper bound so a grid line landing on max_x / max_y
# through floating-point error is still generated.
GRID_EPSILON = 1e-9


def axis_steps(start: float, stop: float, step: float) -> np.ndarray:
    """
    Positions start, start + step, ... up to and including stop.

    Positions are computed as start + i * step rather than by repeated
    addition so rounding error does not accumulate.

    Args:
        start: First coordinate
        stop: Last admissible coordinate
        step: Strictly positive step

    Returns:
        1-D array of coordinates
    """
    count = axis_count(start, stop, step)
    if count == 0:
        return np.empty(0)
    return start + np.arange(count) * step


def axis_count(start: float, stop: float, step: float) -> int:
    """Number of positions axis_steps would generate, without allocating them."""
    if step <= 0:
        raise ValueError(f"Grid step must be strictly positive, got {step}")
    if stop < start:
        return 0
    return int(np.floor((stop - start) / step + GRID_EPSILON)) + 1


def grid_candidates(
    bounds: tuple[float, float, float, float],
    step_x: float,
    step_y: float,
) -> np.ndarray:
    """
    Row-major grid over a bounding box.

    Rows advance along y; within a row x increases.

    Args:
        bounds: (min_x, min_y, max_x, max_y)
        step_x: Horizontal step in working units
        step_y: Vertical step in working units

    Returns:
        (N, 2) array of candidate points
    """
    min_x, min_y, max_x, max_y = bounds
    xs = axis_steps(min_x, max_x, step_x)
    ys = axis_steps(min_y, max_y, step_y)
    if xs.size == 0 or ys.size == 0:
        return np.empty((0, 2))
    grid_y, grid_x = np.meshgrid(ys, xs, indexing="ij")
    candidates = np.column_stack([grid_x.ravel(), grid_y.ravel()])
    logger.debug(f"Grid of {len(xs)} x {len(ys)} = {len(candidates)} candidates")
    return candidates


def points_in_polygon(
    points: np.ndarray,
    polygon_coords: Sequence[tuple[float, float]],
) -> np.ndarray:
    """
    Crossing-number test for many points at once.

    Args:
        points: (N, 2) array of points
        polygon_coords: Ordered polygon vertices

    Returns:
        Boolean mask of length N
    """
    points = np.asarray(points, dtype=float).reshape(-1, 2)
    inside = np.zeros(len(points), dtype=bool)
    if len(polygon_coords) < 3 or len(points) == 0:
        return inside

    poly = np.asarray(polygon_coords, dtype=float)
    px, py = points[:, 0], points[:, 1]
    j = len(poly) - 1
    for i in range(len(poly)):
        xi, yi = poly[i]
        xj, yj = poly[j]
        straddles = (yi > py) != (yj > py)
        if yj != yi:
            x_cross = (xj - xi) * (py - yi) / (yj - yi) + xi
            inside ^= straddles & (px < x_cross)
        j = i
    return inside


def min_distance_to_edges(
    points: np.ndarray,
    polygon_coords: Sequence[tuple[float, float]],
) -> np.ndarray:
    """
    Distance from each point to the nearest edge of a closed polygon.

    Args:
        points: (N, 2) array of points
        polygon_coords: Ordered polygon vertices

    Returns:
        Array of N distances (inf when the polygon has no vertices)
    """
    points = np.asarray(points, dtype=float).reshape(-1, 2)
    result = np.full(len(points), np.inf)
    if len(polygon_coords) == 0 or len(points) == 0:
        return result

    poly = np.asarray(polygon_coords, dtype=float)
    starts = poly
    ends = np.roll(poly, -1, axis=0)
    for a, b in zip(starts, ends):
        d = b - a
        length_sq = float(d @ d)
        if length_sq == 0:
            dist = np.hypot(points[:, 0] - a[0], points[:, 1] - a[1])
        else:
            t = np.clip(((points - a) @ d) / length_sq, 0.0, 1.0)
            closest = a + t[:, None] * d
            dist = np.hypot(points[:, 0] - closest[:, 0], points[:, 1] - closest[:, 1])
        result = np.minimum(result, dist)
    return result


def build_kdtree(coordinates: list[tuple[float, float]]) -> Optional[KDTree]:
    """
    Build a KD-Tree for nearest-tree queries.

    Args:
        coordinates: List of (x, y) coordinate tuples

    Returns:
        KDTree instance, or None when there are no coordinates
    """
    if not coordinates:
        return None
    points = np.array(coordinates, dtype=float)
    return KDTree(points)


def nearest_within(
    kdtree: Optional[KDTree],
    point: tuple[float, float],
    max_distance: float,
) -> Optional[int]:
    """
    Index of the nearest indexed point within `max_distance`.

    Args:
        kdtree: KDTree built by build_kdtree (may be None)
        point: (x, y) query position
        max_distance: Search radius in the tree's units

    Returns:
        Index of the nearest point, or None if nothing is close enough
    """
    if kdtree is None:
        return None
    distance, index = kdtree.query(point, distance_upper_bound=max_distance)
    if not np.isfinite(distance):
        return None
    return int(index)
