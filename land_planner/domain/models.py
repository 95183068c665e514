"""
Domain models for land boundaries, tree layouts and plantation metrics.

These models represent the core domain entities and should be independent
of any infrastructure concerns (HTTP, persistence, rendering).

Field names serialize as camelCase so the same models can be stored by an
external persistence collaborator and read back unchanged.
"""
from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class DomainModel(BaseModel):
    """Base model: immutable, camelCase on the wire, snake_case accepted."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Point(DomainModel):
    """Position in working units (canvas pixels)."""
    x: float
    y: float

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)

    @classmethod
    def from_tuple(cls, xy: Tuple[float, float]) -> "Point":
        return cls(x=float(xy[0]), y=float(xy[1]))


class Spacing(DomainModel):
    """Distance between tree centers in meters."""
    horizontal: float = Field(gt=0, description="Meters between trees along x")
    vertical: float = Field(gt=0, description="Meters between trees along y")

    @property
    def area_per_tree(self) -> float:
        return self.horizontal * self.vertical


class SoilType(str, Enum):
    CLAY = "clay"
    LOAM = "loam"
    SANDY = "sandy"
    SILT = "silt"


class DrawingMode(str, Enum):
    POINT = "point"
    FREEHAND = "freehand"


class TerrainSample(DomainModel):
    """Synthetic terrain attributes at a position."""
    elevation: float = Field(description="Elevation in meters")
    soil_type: SoilType
    sun_exposure: float = Field(ge=0, le=1, description="Fraction of full sun")


class TreePoint(DomainModel):
    """An admissible planting position with terrain-derived growth attributes."""
    position: Point
    terrain: TerrainSample
    growth_rate: float = Field(description="Meters per year")
    maturity_age: float = Field(description="Years until maturity")
    soil_suitability: float = Field(ge=0, le=1)
    water_requirement: float = Field(description="Liters per day")

    def growth_progress(self, year: float) -> float:
        """Fraction of mature size reached after `year` years (0 to 1)."""
        if year <= 0:
            return 0.0
        return min(1.0, year / self.maturity_age)


class BufferedBoundary(DomainModel):
    """Inward offset of a boundary, derived and never edited directly."""
    points: Tuple[Point, ...] = ()
    distance: float = Field(default=0.0, description="Offset distance in working units")
    degenerate: bool = False
    degenerate_vertices: Tuple[int, ...] = ()


class Metrics(DomainModel):
    """Economic and environmental rollup of a layout."""
    total_area: float = Field(description="Boundary area in m²")
    plantable_area: float = Field(description="Buffered boundary area in m²")
    tree_count: int
    estimated_yield: float = Field(description="kg per year")
    water_requirement: float = Field(description="Liters per year")
    carbon_sequestration: float = Field(description="kg CO₂ per year")
    maintenance_cost: float = Field(description="Currency per year")
    estimated_revenue: float = Field(description="Currency per year")
    roi: float = Field(description="Return on investment in percent")

    @property
    def water_requirement_m3(self) -> float:
        return self.water_requirement / 1000


class TerrainSummary(DomainModel):
    """Aggregate terrain figures over the enumerated trees."""
    mean_growth_rate: float = 0.0
    mean_sun_exposure: float = 0.0
    mean_elevation: float = 0.0
    daily_water_requirement: float = Field(default=0.0, description="Liters per day")
    soil_distribution: dict[SoilType, int] = Field(default_factory=dict)


class LayoutAnalysis(DomainModel):
    """Complete result of planning a boundary."""
    boundary: Tuple[Point, ...]
    spacing: Spacing
    scale: float
    buffer_distance: float = Field(description="Buffer in meters")
    min_edge_distance: float = Field(description="Minimum tree-to-edge distance in meters")
    total_area: float
    perimeter: float
    plantable_area: float
    buffered_boundary: BufferedBoundary
    trees: Tuple[TreePoint, ...]
    estimated_tree_count: int = Field(
        description="Analytic approximation, for instant feedback only"
    )
    metrics: Metrics
    terrain_summary: TerrainSummary
    boundary_is_simple: bool = True

    @property
    def tree_count(self) -> int:
        """Exact enumerated count; the canonical figure."""
        return len(self.trees)


class LayoutEstimate(DomainModel):
    """Instant-feedback figures that skip grid enumeration."""
    total_area: float
    perimeter: float
    plantable_area: float
    estimated_tree_count: int
    degenerate_buffer: bool = False


class AnalysisRecord(DomainModel):
    """Analysis as stored by an external persistence collaborator."""
    boundary: Tuple[Point, ...]
    spacing: Spacing
    scale: float = Field(gt=0)
    total_area: float
    plantable_area: float
    total_trees: int
    metrics: Metrics
    buffer_distance: Optional[float] = Field(default=None, ge=0)


class CaptureState(DomainModel):
    """
    Explicit state of a boundary capture session.

    `history` holds full snapshots; `cursor` indexes the snapshot that
    `points` currently reflects (except during a transient drag).
    """
    points: Tuple[Point, ...] = ()
    selected_index: Optional[int] = None
    history: Tuple[Tuple[Point, ...], ...] = ((),)
    cursor: int = 0

    @model_validator(mode="after")
    def check_indices(self) -> "CaptureState":
        if not self.history:
            raise ValueError("history must hold at least one snapshot")
        if not 0 <= self.cursor < len(self.history):
            raise ValueError(
                f"cursor {self.cursor} out of range for {len(self.history)} snapshots"
            )
        if self.selected_index is not None and not 0 <= self.selected_index < len(self.points):
            raise ValueError(
                f"selected_index {self.selected_index} out of range for {len(self.points)} points"
            )
        return self

    @property
    def can_undo(self) -> bool:
        return self.cursor > 0

    @property
    def can_redo(self) -> bool:
        return self.cursor < len(self.history) - 1

    @property
    def is_valid_boundary(self) -> bool:
        return len(self.points) >= 3
