"""
Domain service: Boundary capture with snapping, clamping and linear undo.

The service is stateless. Every operation takes a CaptureState and
returns a new one; edits append full immutable snapshots to the history,
so undo and redo restore exactly what was there.
"""
from typing import Optional
from dataclasses import dataclass
import math
import logging

from land_planner.config import settings
from land_planner.domain.errors import CaptureError
from land_planner.domain.models import CaptureState, DrawingMode, Point

logger = logging.getLogger(__name__)


@dataclass
class CaptureConfig:
    """Configuration for boundary capture."""

    width: float = 800.0
    height: float = 600.0

    padding: float = 20.0
    """Points are clamped into [padding, dimension - padding] on both axes"""

    grid_size: float = 20.0
    snap_to_grid: bool = True

    select_threshold: float = 10.0
    """Clicks within this radius of a vertex select it instead of adding a point"""

    close_threshold: float = 15.0
    """Cursor within this radius of the first vertex signals a closable boundary"""

    history_limit: int = 50

    @classmethod
    def from_settings(cls) -> "CaptureConfig":
        return cls(
            width=settings.capture_canvas_width,
            height=settings.capture_canvas_height,
            padding=settings.capture_padding,
            grid_size=settings.capture_grid_size,
            snap_to_grid=settings.capture_snap_to_grid,
            select_threshold=settings.capture_select_threshold,
            close_threshold=settings.capture_close_threshold,
            history_limit=settings.capture_history_limit,
        )


class BoundaryCapture:
    """
    Domain service for tracing a land boundary.

    Features:
    - Point mode: click near a vertex to select it, click again to move it
    - Freehand mode: every distinct position is appended
    - Optional grid snapping followed by clamping into the padded canvas
    - Bounded linear undo/redo over full snapshots
    - Transient drags that only enter history when committed
    """

    def __init__(self, config: Optional[CaptureConfig] = None):
        self.config = config or CaptureConfig.from_settings()
        if self.config.history_limit < 1:
            raise ValueError("history_limit must be at least 1")
        if self.config.grid_size <= 0:
            raise ValueError("grid_size must be strictly positive")

    def process(self, raw: Point) -> Point:
        """Snap (if enabled) then clamp a raw position."""
        if not (math.isfinite(raw.x) and math.isfinite(raw.y)):
            raise CaptureError(f"Point coordinates must be finite, got ({raw.x}, {raw.y})")
        x, y = raw.x, raw.y
        if self.config.snap_to_grid:
            grid = self.config.grid_size
            x = round(x / grid) * grid
            y = round(y / grid) * grid
        pad = self.config.padding
        x = min(max(x, pad), self.config.width - pad)
        y = min(max(y, pad), self.config.height - pad)
        return Point(x=x, y=y)

    def find_vertex(self, state: CaptureState, raw: Point) -> Optional[int]:
        """Index of the nearest vertex within the select threshold, if any."""
        best_index = None
        best_distance = self.config.select_threshold
        for i, p in enumerate(state.points):
            distance = math.hypot(p.x - raw.x, p.y - raw.y)
            if distance <= best_distance:
                best_index = i
                best_distance = distance
        return best_index

    def add_point(
        self,
        state: CaptureState,
        raw: Point,
        mode: DrawingMode = DrawingMode.POINT,
    ) -> CaptureState:
        """
        Handle a click (point mode) or a freehand sample.

        In point mode a pending selection is resolved first: the selected
        vertex moves to the new position. Otherwise a click near an
        existing vertex selects it, and anything else appends a vertex.

        Args:
            state: Current capture state
            raw: Pointer position before snapping and clamping
            mode: Drawing mode

        Returns:
            New capture state
        """
        position = self.process(raw)

        if mode == DrawingMode.FREEHAND:
            if state.points and state.points[-1] == position:
                return state
            return self._commit(state, state.points + (position,))

        if state.selected_index is not None:
            index = state.selected_index
            self._check_index(state, index)
            points = list(state.points)
            points[index] = position
            logger.debug(f"Moved selected vertex {index} to ({position.x}, {position.y})")
            return self._commit(state, tuple(points))

        hit = self.find_vertex(state, raw)
        if hit is not None:
            logger.debug(f"Selected vertex {hit}")
            return state.model_copy(update={"selected_index": hit})

        return self._commit(state, state.points + (position,))

    def select_point(self, state: CaptureState, index: Optional[int]) -> CaptureState:
        """Select a vertex by index, or clear the selection with None."""
        if index is not None:
            self._check_index(state, index)
        return state.model_copy(update={"selected_index": index})

    def drag_point(self, state: CaptureState, index: int, pos: Point) -> CaptureState:
        """
        Move a vertex during a drag without recording history.

        Call move_point with the release position to commit the edit.
        """
        self._check_index(state, index)
        points = list(state.points)
        points[index] = self.process(pos)
        return state.model_copy(update={"points": tuple(points)})

    def move_point(self, state: CaptureState, index: int, pos: Point) -> CaptureState:
        """Move a vertex and record the edit."""
        self._check_index(state, index)
        points = list(state.points)
        points[index] = self.process(pos)
        return self._commit(state, tuple(points))

    def delete_point(self, state: CaptureState, index: int) -> CaptureState:
        """Remove a vertex and record the edit."""
        self._check_index(state, index)
        points = state.points[:index] + state.points[index + 1:]
        return self._commit(state, points)

    def undo(self, state: CaptureState) -> CaptureState:
        if not state.can_undo:
            return state
        cursor = state.cursor - 1
        return state.model_copy(update={
            "points": state.history[cursor],
            "cursor": cursor,
            "selected_index": None,
        })

    def redo(self, state: CaptureState) -> CaptureState:
        if not state.can_redo:
            return state
        cursor = state.cursor + 1
        return state.model_copy(update={
            "points": state.history[cursor],
            "cursor": cursor,
            "selected_index": None,
        })

    def reset(self, state: CaptureState) -> CaptureState:
        """Clear the boundary; the reset itself can be undone."""
        return self._commit(state, ())

    def is_closable(self, state: CaptureState, cursor: Point) -> bool:
        """
        Whether the cursor is close enough to the first vertex to close the boundary.

        Only a signal: the points are left untouched and the caller decides
        whether to finalize.
        """
        if len(state.points) < 2:
            return False
        first = state.points[0]
        return math.hypot(cursor.x - first.x, cursor.y - first.y) <= self.config.close_threshold

    def _check_index(self, state: CaptureState, index: int) -> None:
        if not 0 <= index < len(state.points):
            raise CaptureError(
                f"Vertex index {index} out of range for {len(state.points)} points"
            )

    def _commit(self, state: CaptureState, points: tuple[Point, ...]) -> CaptureState:
        history = state.history[:state.cursor + 1] + (points,)
        overflow = len(history) - self.config.history_limit
        if overflow > 0:
            history = history[overflow:]
        return CaptureState(
            points=points,
            selected_index=None,
            history=history,
            cursor=len(history) - 1,
        )
