"""
Application service: Orchestration layer for layout planning.

Runs the pipeline boundary → buffer → grid → terrain → metrics and
memoizes results by their immutable inputs. Any change to boundary,
spacing, scale or buffer is a different cache key, which is the only
invalidation the results need.
"""
from typing import Optional, Sequence
from dataclasses import dataclass
from functools import lru_cache
import math
import random
import logging

from land_planner.config import settings
from land_planner.domain.errors import InvalidBufferError, InvalidScaleError
from land_planner.domain.models import (
    AnalysisRecord,
    BufferedBoundary,
    LayoutAnalysis,
    LayoutEstimate,
    Point,
    Spacing,
    TreePoint,
)
from land_planner.services.domain.metrics_aggregator import MetricsAggregator
from land_planner.services.domain.terrain_model import TerrainModel, summarize_terrain
from land_planner.services.domain.tree_layout import (
    TreeIndex,
    TreeLayoutEngine,
    estimate_tree_count,
    grid_steps,
)
from land_planner.utils import geometry

logger = logging.getLogger(__name__)

# Tolerances when comparing a stored record against a regenerated one
RECORD_REL_TOLERANCE = 1e-9
RECORD_ABS_TOLERANCE = 1e-6

BoundaryKey = tuple[tuple[float, float], ...]


@dataclass
class LayoutConfig:
    """Defaults for layout planning."""

    buffer_distance: float = 2.0
    """Inward buffer in meters"""

    min_edge_distance: Optional[float] = None
    """Minimum tree-to-edge distance in meters; None means the buffer distance"""

    cache_size: int = 128
    seed: int = 42
    """Seed for the terrain model's maturity-age jitter"""

    @classmethod
    def from_settings(cls) -> "LayoutConfig":
        return cls(
            buffer_distance=settings.layout_buffer_distance,
            min_edge_distance=settings.layout_min_edge_distance,
            cache_size=settings.layout_cache_size,
            seed=settings.terrain_seed,
        )


class LayoutPlanner:
    """
    Application service for planning tree layouts.

    Follows the application layer pattern: validation and coordination
    here, geometry and agronomy in the domain services.
    """

    def __init__(
        self,
        config: Optional[LayoutConfig] = None,
        layout_engine: Optional[TreeLayoutEngine] = None,
        metrics_aggregator: Optional[MetricsAggregator] = None,
    ):
        self.config = config or LayoutConfig.from_settings()
        self.layout_engine = layout_engine or TreeLayoutEngine()
        self.metrics_aggregator = metrics_aggregator or MetricsAggregator()
        self._analyze_cached = lru_cache(maxsize=self.config.cache_size)(self._compute)

        logger.info(
            f"Initialized LayoutPlanner: buffer={self.config.buffer_distance}m, "
            f"cache_size={self.config.cache_size}"
        )

    def analyze(
        self,
        boundary: Sequence[Point],
        spacing: Spacing,
        scale: float,
        buffer_distance: Optional[float] = None,
        min_edge_distance: Optional[float] = None,
    ) -> LayoutAnalysis:
        """
        Plan a tree layout for a boundary.

        Args:
            boundary: Boundary vertices in working units
            spacing: Tree spacing in meters
            scale: Meters per working unit
            buffer_distance: Inward buffer in meters (config default if None)
            min_edge_distance: Minimum tree-to-edge distance in meters
                (buffer distance if None)

        Returns:
            LayoutAnalysis; boundaries with fewer than 3 points give an
            empty layout with zero areas

        Raises:
            InvalidScaleError: If scale is not strictly positive
            InvalidSpacingError: If spacing/scale is not a usable grid step
                or the grid would be too large to enumerate
            InvalidBufferError: If a distance is negative or not finite
        """
        self._validate_scale(scale)
        buffer_m, edge_m = self._resolve_distances(buffer_distance, min_edge_distance)
        grid_steps(spacing, scale)
        key: BoundaryKey = tuple((float(p.x), float(p.y)) for p in boundary)
        return self._analyze_cached(
            key, spacing.horizontal, spacing.vertical, float(scale), buffer_m, edge_m
        )

    def estimate(
        self,
        boundary: Sequence[Point],
        spacing: Spacing,
        scale: float,
        buffer_distance: Optional[float] = None,
    ) -> LayoutEstimate:
        """Fast figures for interactive feedback; the tree count is approximate."""
        self._validate_scale(scale)
        buffer_m, _ = self._resolve_distances(buffer_distance, None)
        coords = [p.as_tuple() for p in boundary]
        offset = geometry.offset_polygon(coords, buffer_m / scale)
        plantable_area = geometry.area(offset.points, scale)
        return LayoutEstimate(
            total_area=geometry.area(coords, scale),
            perimeter=geometry.perimeter(coords, scale),
            plantable_area=plantable_area,
            estimated_tree_count=estimate_tree_count(plantable_area, spacing),
            degenerate_buffer=offset.degenerate,
        )

    def to_record(self, analysis: LayoutAnalysis) -> AnalysisRecord:
        """Record for an external persistence collaborator."""
        return AnalysisRecord(
            boundary=analysis.boundary,
            spacing=analysis.spacing,
            scale=analysis.scale,
            total_area=analysis.total_area,
            plantable_area=analysis.plantable_area,
            total_trees=analysis.tree_count,
            metrics=analysis.metrics,
            buffer_distance=analysis.buffer_distance,
        )

    def regenerate(self, record: AnalysisRecord) -> LayoutAnalysis:
        """Recompute an analysis from a stored record's geometry fields."""
        return self.analyze(
            boundary=record.boundary,
            spacing=record.spacing,
            scale=record.scale,
            buffer_distance=record.buffer_distance,
        )

    def verify_record(self, record: AnalysisRecord) -> tuple[LayoutAnalysis, bool]:
        """
        Regenerate a record and check its stored figures against the result.

        Returns:
            Tuple of (regenerated analysis, whether the stored figures match)
        """
        analysis = self.regenerate(record)
        regenerated = self.to_record(analysis)

        stored = record.metrics.model_dump()
        fresh = regenerated.metrics.model_dump()
        consistent = (
            record.total_trees == regenerated.total_trees
            and _close(record.total_area, regenerated.total_area)
            and _close(record.plantable_area, regenerated.plantable_area)
            and all(_close(stored[name], fresh[name]) for name in fresh)
        )
        if not consistent:
            logger.warning(
                f"Stored record does not match regeneration: "
                f"trees {record.total_trees} vs {regenerated.total_trees}, "
                f"area {record.total_area:.2f} vs {regenerated.total_area:.2f}"
            )
        return analysis, consistent

    def tree_at(
        self,
        analysis: LayoutAnalysis,
        cursor: Point,
        max_distance: float,
    ) -> Optional[TreePoint]:
        """Tree nearest to a cursor within max_distance working units."""
        return TreeIndex(analysis.trees).nearest(cursor, max_distance)

    def cache_info(self):
        return self._analyze_cached.cache_info()

    def clear_cache(self) -> None:
        self._analyze_cached.cache_clear()

    def _compute(
        self,
        boundary_key: BoundaryKey,
        horizontal: float,
        vertical: float,
        scale: float,
        buffer_m: float,
        edge_m: float,
    ) -> LayoutAnalysis:
        spacing = Spacing(horizontal=horizontal, vertical=vertical)
        coords = list(boundary_key)
        boundary = [Point.from_tuple(c) for c in coords]

        total_area = geometry.area(coords, scale)
        is_simple = geometry.is_simple_polygon(coords) if len(coords) >= 3 else False
        if len(coords) >= 3 and not is_simple:
            logger.warning("Boundary is not a simple polygon; results may be unreliable")

        offset = geometry.offset_polygon(coords, buffer_m / scale)
        if offset.degenerate:
            logger.warning(
                f"Degenerate buffer of {buffer_m}m: vertices {offset.degenerate_vertices}"
            )
        buffered = BufferedBoundary(
            points=[Point.from_tuple(c) for c in offset.points],
            distance=offset.distance,
            degenerate=offset.degenerate,
            degenerate_vertices=offset.degenerate_vertices,
        )
        plantable_area = geometry.area(offset.points, scale)

        positions = self.layout_engine.generate_grid(
            boundary=boundary,
            buffered_boundary=buffered.points,
            spacing=spacing,
            scale=scale,
            min_edge_distance_pixels=edge_m / scale,
        )
        trees = TerrainModel(rng=random.Random(self.config.seed)).trees_at(positions)
        metrics = self.metrics_aggregator.aggregate(
            tree_count=len(trees),
            total_area=total_area,
            plantable_area=plantable_area,
        )

        logger.info(
            f"Analysis: area={total_area:.2f}m², plantable={plantable_area:.2f}m², "
            f"trees={len(trees)}"
        )

        return LayoutAnalysis(
            boundary=boundary,
            spacing=spacing,
            scale=scale,
            buffer_distance=buffer_m,
            min_edge_distance=edge_m,
            total_area=total_area,
            perimeter=geometry.perimeter(coords, scale),
            plantable_area=plantable_area,
            buffered_boundary=buffered,
            trees=trees,
            estimated_tree_count=estimate_tree_count(plantable_area, spacing),
            metrics=metrics,
            terrain_summary=summarize_terrain(trees),
            boundary_is_simple=is_simple,
        )

    def _resolve_distances(
        self,
        buffer_distance: Optional[float],
        min_edge_distance: Optional[float],
    ) -> tuple[float, float]:
        buffer_m = self.config.buffer_distance if buffer_distance is None else buffer_distance
        if min_edge_distance is None:
            min_edge_distance = self.config.min_edge_distance
        edge_m = buffer_m if min_edge_distance is None else min_edge_distance
        for name, value in (("buffer_distance", buffer_m), ("min_edge_distance", edge_m)):
            if not (math.isfinite(value) and value >= 0):
                raise InvalidBufferError(f"{name} must be finite and non-negative, got {value}")
        return float(buffer_m), float(edge_m)

    @staticmethod
    def _validate_scale(scale: float) -> None:
        if not (math.isfinite(scale) and scale > 0):
            raise InvalidScaleError(scale)


def _close(a: float, b: float) -> bool:
    return math.isclose(a, b, rel_tol=RECORD_REL_TOLERANCE, abs_tol=RECORD_ABS_TOLERANCE)
