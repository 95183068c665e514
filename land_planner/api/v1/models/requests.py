"""
API request models using Pydantic.
"""
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from land_planner.config import settings
from land_planner.domain.models import CaptureState, DrawingMode, Point, Spacing


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case accepted."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _default_spacing() -> Spacing:
    return Spacing(
        horizontal=settings.layout_default_spacing,
        vertical=settings.layout_default_spacing,
    )


class LayoutRequest(ApiModel):
    """Inputs for layout analysis and estimation."""
    boundary: List[Point] = Field(
        description="Boundary vertices in working units, in drawing order"
    )
    spacing: Spacing = Field(
        default_factory=_default_spacing,
        description="Spacing between tree centers in meters"
    )
    scale: float = Field(
        default=settings.layout_default_scale,
        gt=0,
        description="Meters per working unit"
    )
    buffer_distance: Optional[float] = Field(
        default=None,
        ge=0,
        description="Inward buffer in meters (server default if omitted)"
    )
    min_edge_distance: Optional[float] = Field(
        default=None,
        ge=0,
        description="Minimum tree-to-edge distance in meters (buffer distance if omitted)"
    )

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "boundary": [
                    {"x": 0, "y": 0}, {"x": 0, "y": 10},
                    {"x": 10, "y": 10}, {"x": 10, "y": 0},
                ],
                "spacing": {"horizontal": 5, "vertical": 5},
                "scale": 1.0,
                "bufferDistance": 2.0,
            }
        },
    )


class CaptureEvent(ApiModel):
    """A discrete capture event."""
    type: Literal["add", "drag", "move", "delete", "select", "undo", "redo", "reset"]
    position: Optional[Point] = Field(
        default=None,
        description="Pointer position for add, drag and move"
    )
    index: Optional[int] = Field(
        default=None,
        description="Vertex index for drag, move, delete and select"
    )
    mode: DrawingMode = DrawingMode.POINT


class CaptureEventRequest(ApiModel):
    """Apply one event to an explicit capture state."""
    state: CaptureState = Field(default_factory=CaptureState)
    event: CaptureEvent
    cursor: Optional[Point] = Field(
        default=None,
        description="Current cursor, used to report whether the boundary can be closed"
    )
    canvas_width: Optional[float] = Field(default=None, gt=0)
    canvas_height: Optional[float] = Field(default=None, gt=0)
