"""
API response models using Pydantic.
"""
from typing import List
from pydantic import Field

from land_planner.api.v1.models.requests import ApiModel
from land_planner.domain.models import (
    AnalysisRecord,
    BufferedBoundary,
    CaptureState,
    LayoutAnalysis,
    Metrics,
    Point,
    Spacing,
    TerrainSummary,
    TreePoint,
)


class LayoutResponse(ApiModel):
    """Response model for the layout analysis endpoint."""
    boundary: List[Point]
    buffered_boundary: BufferedBoundary
    spacing: Spacing
    scale: float
    total_area: float = Field(description="Boundary area in m²")
    plantable_area: float = Field(description="Buffered boundary area in m²")
    perimeter: float = Field(description="Boundary perimeter in meters")
    tree_count: int = Field(description="Exact enumerated tree count")
    estimated_tree_count: int = Field(
        description="Analytic approximation, for instant feedback only"
    )
    trees: List[TreePoint]
    metrics: Metrics
    water_requirement_m3: float = Field(description="Yearly water in m³")
    terrain_summary: TerrainSummary
    boundary_is_simple: bool

    @classmethod
    def from_analysis(cls, analysis: LayoutAnalysis) -> "LayoutResponse":
        return cls(
            boundary=analysis.boundary,
            buffered_boundary=analysis.buffered_boundary,
            spacing=analysis.spacing,
            scale=analysis.scale,
            total_area=analysis.total_area,
            plantable_area=analysis.plantable_area,
            perimeter=analysis.perimeter,
            tree_count=analysis.tree_count,
            estimated_tree_count=analysis.estimated_tree_count,
            trees=analysis.trees,
            metrics=analysis.metrics,
            water_requirement_m3=analysis.metrics.water_requirement_m3,
            terrain_summary=analysis.terrain_summary,
            boundary_is_simple=analysis.boundary_is_simple,
        )


class RegenerateResponse(ApiModel):
    """Response model for record regeneration."""
    record: AnalysisRecord
    consistent: bool = Field(
        description="Whether the stored figures match the regenerated ones"
    )


class CaptureResponse(ApiModel):
    """Response model for capture events."""
    state: CaptureState
    closable: bool = Field(
        description="Cursor is near the first vertex and the boundary can be closed"
    )
    boundary_valid: bool = Field(description="At least 3 points captured")
