"""
Domain service: Grid-based tree layout inside a buffered boundary.

Two tree counts exist:
- the exact count, enumerated by generate_grid (canonical, persisted)
- an analytic estimate, floor(plantable_area / (h · v)), which is only an
  approximation for instant feedback
"""
from typing import Optional
import math
import logging

import numpy as np

from land_planner.config import settings
from land_planner.domain.errors import InvalidScaleError, InvalidSpacingError
from land_planner.domain.models import Point, Spacing, TreePoint
from land_planner.utils.geometry import bounding_box
from land_planner.utils.spatial_helpers import (
    axis_count,
    build_kdtree,
    grid_candidates,
    min_distance_to_edges,
    nearest_within,
    points_in_polygon,
)

logger = logging.getLogger(__name__)


def grid_steps(spacing: Spacing, scale: float) -> tuple[float, float]:
    """
    Grid steps in working units.

    Raises:
        InvalidScaleError: If scale is not strictly positive
        InvalidSpacingError: If a step is not finite and strictly positive
    """
    if not scale > 0:
        raise InvalidScaleError(scale)
    step_x = spacing.horizontal / scale
    step_y = spacing.vertical / scale
    for step in (step_x, step_y):
        if not (math.isfinite(step) and step > 0):
            raise InvalidSpacingError(
                f"Spacing {spacing.horizontal}x{spacing.vertical} m at scale {scale} "
                f"gives an unusable grid step"
            )
    return step_x, step_y


def estimate_tree_count(plantable_area: float, spacing: Spacing) -> int:
    """Analytic tree estimate; an approximation, not the canonical count."""
    if plantable_area <= 0:
        return 0
    return int(math.floor(plantable_area / spacing.area_per_tree))


class TreeLayoutEngine:
    """Enumerates admissible planting points on a regular grid."""

    def __init__(self, max_grid_cells: Optional[int] = None):
        self.max_grid_cells = max_grid_cells or settings.layout_max_grid_cells

    def generate_grid(
        self,
        boundary: list[Point],
        buffered_boundary: list[Point],
        spacing: Spacing,
        scale: float,
        min_edge_distance_pixels: float = 0.0,
    ) -> list[Point]:
        """
        Admissible grid points, in row-major order.

        The grid starts at the boundary's bounding-box minimum corner and
        steps spacing/scale along each axis. A point is kept when it lies
        inside the buffered boundary and at least
        `min_edge_distance_pixels` from every boundary edge.

        Args:
            boundary: Boundary vertices in working units
            buffered_boundary: Inward offset of the boundary
            spacing: Tree spacing in meters
            scale: Meters per working unit
            min_edge_distance_pixels: Minimum distance to the boundary

        Returns:
            List of admissible points (empty for degenerate input)

        Raises:
            InvalidSpacingError: If the grid would exceed max_grid_cells
        """
        step_x, step_y = grid_steps(spacing, scale)
        if len(boundary) < 3 or len(buffered_boundary) < 3:
            return []

        boundary_coords = [p.as_tuple() for p in boundary]
        buffered_coords = [p.as_tuple() for p in buffered_boundary]
        bounds = bounding_box(boundary_coords)
        logger.debug(f"Bounding box {bounds}, steps ({step_x:.3f}, {step_y:.3f})")

        min_x, min_y, max_x, max_y = bounds
        cells = axis_count(min_x, max_x, step_x) * axis_count(min_y, max_y, step_y)
        if cells > self.max_grid_cells:
            raise InvalidSpacingError(
                f"Spacing {spacing.horizontal}x{spacing.vertical} m at scale {scale} "
                f"needs {cells} grid cells, above the limit of {self.max_grid_cells}"
            )

        candidates = grid_candidates(bounds, step_x, step_y)
        if len(candidates) == 0:
            return []

        inside = points_in_polygon(candidates, buffered_coords)
        clear = min_distance_to_edges(candidates, boundary_coords) >= min_edge_distance_pixels
        accepted = candidates[inside & clear]

        logger.info(
            f"Grid layout: {len(accepted)} of {len(candidates)} candidates admissible "
            f"(outside buffer: {int(np.count_nonzero(~inside))}, "
            f"too close to edge: {int(np.count_nonzero(inside & ~clear))})"
        )
        return [Point(x=float(x), y=float(y)) for x, y in accepted]


class TreeIndex:
    """Nearest-tree lookup for hover and selection in a renderer."""

    def __init__(self, trees: list[TreePoint]):
        self.trees = trees
        self._kdtree = build_kdtree([t.position.as_tuple() for t in trees])

    def nearest(self, point: Point, max_distance: float) -> Optional[TreePoint]:
        index = nearest_within(self._kdtree, point.as_tuple(), max_distance)
        if index is None:
            return None
        return self.trees[index]
