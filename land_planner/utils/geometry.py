"""
Planar geometry kernel for land boundaries.

Pure functions on point sequences given as lists of (x, y) tuples in
working units. Nothing here validates canvas bounds or scale; callers
pass pre-validated input with scale > 0.

Boundaries with fewer than 3 points yield zero/empty results and never
raise.
"""
from dataclasses import dataclass, field
from typing import Sequence
import math
import logging

from shapely.geometry import LinearRing

logger = logging.getLogger(__name__)

Coordinate = tuple[float, float]

# Below this value of sin(angle / 2) a vertex is treated as a spike and
# keeps its original position.
SIN_EPSILON = 1e-6
LENGTH_EPSILON = 1e-12
# Relative slack when checking that offset vertices keep the requested
# distance from every boundary edge.
INRADIUS_TOLERANCE = 1e-6


@dataclass
class OffsetResult:
    """Result of an inward polygon offset."""
    points: list[Coordinate]
    distance: float
    degenerate: bool = False
    degenerate_vertices: list[int] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return len(self.points) < 3


def signed_area(polygon: Sequence[Coordinate]) -> float:
    """
    Signed shoelace area in working units.

    Positive for counter-clockwise winding in a y-up frame (clockwise on
    a y-down canvas).
    """
    n = len(polygon)
    if n < 3:
        return 0.0
    total = 0.0
    for i in range(n):
        x1, y1 = polygon[i]
        x2, y2 = polygon[(i + 1) % n]
        total += x1 * y2 - x2 * y1
    return total / 2


def area(polygon: Sequence[Coordinate], scale: float = 1.0) -> float:
    """
    Polygon area in square meters.

    Args:
        polygon: Ordered vertices in working units
        scale: Meters per working unit

    Returns:
        abs(shoelace sum) / 2 * scale², or 0 for fewer than 3 points
    """
    return abs(signed_area(polygon)) * scale * scale


def perimeter(polygon: Sequence[Coordinate], scale: float = 1.0) -> float:
    """Closed perimeter in meters; 0 for fewer than 3 points."""
    n = len(polygon)
    if n < 3:
        return 0.0
    total = 0.0
    for i in range(n):
        x1, y1 = polygon[i]
        x2, y2 = polygon[(i + 1) % n]
        total += math.hypot(x2 - x1, y2 - y1)
    return total * scale


def bounding_box(polygon: Sequence[Coordinate]) -> tuple[float, float, float, float]:
    """Axis-aligned bounds as (min_x, min_y, max_x, max_y)."""
    if not polygon:
        return (0.0, 0.0, 0.0, 0.0)
    xs = [p[0] for p in polygon]
    ys = [p[1] for p in polygon]
    return (min(xs), min(ys), max(xs), max(ys))


def point_in_polygon(point: Coordinate, polygon: Sequence[Coordinate]) -> bool:
    """
    Crossing-number test.

    Points exactly on an edge may land on either side; the result is
    independent of vertex rotation and winding direction.
    """
    n = len(polygon)
    if n < 3:
        return False
    px, py = point
    inside = False
    j = n - 1
    for i in range(n):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if (yi > py) != (yj > py):
            x_cross = (xj - xi) * (py - yi) / (yj - yi) + xi
            if px < x_cross:
                inside = not inside
        j = i
    return inside


def distance_point_to_segment(
    point: Coordinate,
    a: Coordinate,
    b: Coordinate,
) -> float:
    """Euclidean distance from a point to the closed segment a-b."""
    px, py = point
    ax, ay = a
    bx, by = b
    dx, dy = bx - ax, by - ay
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return math.hypot(px - ax, py - ay)
    t = ((px - ax) * dx + (py - ay) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(px - (ax + t * dx), py - (ay + t * dy))


def distance_to_boundary(point: Coordinate, polygon: Sequence[Coordinate]) -> float:
    """Smallest distance from a point to any edge of the closed polygon."""
    n = len(polygon)
    if n == 0:
        return math.inf
    if n == 1:
        return math.hypot(point[0] - polygon[0][0], point[1] - polygon[0][1])
    return min(
        distance_point_to_segment(point, polygon[i], polygon[(i + 1) % n])
        for i in range(n)
    )


def is_simple_polygon(polygon: Sequence[Coordinate]) -> bool:
    """True when the closed ring does not touch or cross itself."""
    if len(polygon) < 3:
        return False
    return bool(LinearRing(polygon).is_simple)


def _outward_normal(ux: float, uy: float, orientation: float) -> Coordinate:
    # Interior lies left of each edge for positive orientation.
    if orientation > 0:
        return (uy, -ux)
    return (-uy, ux)


def offset_polygon(polygon: Sequence[Coordinate], distance: float) -> OffsetResult:
    """
    Shrink a polygon inward by `distance` working units (bisector miter).

    Each vertex moves against the normalized bisector of the outward
    normals of its two edges by distance / sin(angle / 2), where angle is
    the angle between the edges at that vertex (atan2 of cross and dot).

    Vertices where sin(angle / 2) is near zero keep their original
    position and flag the result as degenerate. The result is also
    flagged when an offset vertex ends up closer than `distance` to some
    boundary edge (the offset exceeded the local inradius) or the offset
    ring crosses itself. A ring that collapses or flips winding is
    returned empty.

    Args:
        polygon: Ordered vertices of a simple polygon
        distance: Inward offset in working units

    Returns:
        OffsetResult with the offset vertices and degeneracy flags
    """
    n = len(polygon)
    if n < 3:
        return OffsetResult(points=[], distance=distance)

    original_area = signed_area(polygon)
    if abs(original_area) < LENGTH_EPSILON:
        logger.debug("Offset of zero-area polygon collapses")
        return OffsetResult(points=[], distance=distance, degenerate=True)

    if distance == 0:
        return OffsetResult(points=[(float(x), float(y)) for x, y in polygon], distance=0.0)

    orientation = 1.0 if original_area > 0 else -1.0
    offset_points: list[Coordinate] = []
    degenerate_vertices: list[int] = []

    for i in range(n):
        px, py = polygon[i - 1]
        cx, cy = polygon[i]
        nx, ny = polygon[(i + 1) % n]

        e1x, e1y = cx - px, cy - py
        e2x, e2y = nx - cx, ny - cy
        len1 = math.hypot(e1x, e1y)
        len2 = math.hypot(e2x, e2y)
        if len1 < LENGTH_EPSILON or len2 < LENGTH_EPSILON:
            degenerate_vertices.append(i)
            offset_points.append((float(cx), float(cy)))
            continue

        n1x, n1y = _outward_normal(e1x / len1, e1y / len1, orientation)
        n2x, n2y = _outward_normal(e2x / len2, e2y / len2, orientation)
        bx, by = n1x + n2x, n1y + n2y
        b_len = math.hypot(bx, by)

        # Angle between the two edges as seen from the vertex
        ax, ay = px - cx, py - cy
        cross = ax * e2y - ay * e2x
        dot = ax * e2x + ay * e2y
        angle = math.atan2(abs(cross), dot)
        sin_half = math.sin(angle / 2)

        if sin_half < SIN_EPSILON or b_len < LENGTH_EPSILON:
            degenerate_vertices.append(i)
            offset_points.append((float(cx), float(cy)))
            continue

        miter = distance / sin_half
        offset_points.append((cx - bx / b_len * miter, cy - by / b_len * miter))

    new_area = signed_area(offset_points)
    if new_area * orientation <= LENGTH_EPSILON:
        logger.debug(f"Offset by {distance:.3f} collapsed the polygon")
        return OffsetResult(
            points=[],
            distance=distance,
            degenerate=True,
            degenerate_vertices=list(range(n)),
        )

    if distance > 0:
        required = distance * (1 - INRADIUS_TOLERANCE)
        for i, vertex in enumerate(offset_points):
            if i in degenerate_vertices:
                continue
            if distance_to_boundary(vertex, polygon) < required:
                degenerate_vertices.append(i)

    degenerate = bool(degenerate_vertices) or not is_simple_polygon(offset_points)
    if degenerate:
        logger.debug(
            f"Degenerate offset by {distance:.3f}: "
            f"{len(degenerate_vertices)} of {n} vertices flagged"
        )

    return OffsetResult(
        points=offset_points,
        distance=distance,
        degenerate=degenerate,
        degenerate_vertices=sorted(degenerate_vertices),
    )
