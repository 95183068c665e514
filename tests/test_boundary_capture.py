"""
Unit tests for boundary capture.

Tests cover:
- Clamping and grid snapping
- Vertex selection and move-on-next-click
- Freehand sampling
- Linear undo/redo over snapshots
- Closing signal
"""
import math

import pytest
from pydantic import ValidationError

from land_planner.domain.errors import CaptureError
from land_planner.domain.models import CaptureState, DrawingMode, Point
from land_planner.services.domain.boundary_capture import BoundaryCapture, CaptureConfig


def add_all(capture, state, coords, mode=DrawingMode.POINT):
    for x, y in coords:
        state = capture.add_point(state, Point(x=x, y=y), mode)
    return state


def coords_of(state):
    return [(p.x, p.y) for p in state.points]


# ============================================================
# Clamping & Snapping Tests
# ============================================================

class TestPositionProcessing:
    """Tests for snapping and clamping of raw positions."""

    def test_point_inside_canvas_is_unchanged(self, capture, empty_state):
        state = capture.add_point(empty_state, Point(x=123.5, y=321.25))
        assert coords_of(state) == [(123.5, 321.25)]

    def test_clamped_into_padded_canvas(self, capture, empty_state):
        state = add_all(capture, empty_state, [(5, 5), (900, 700), (-50, 300)])
        assert coords_of(state) == [(20, 20), (780, 580), (20, 300)]

    def test_snap_rounds_to_grid(self, capture_config, empty_state):
        capture_config.snap_to_grid = True
        capture = BoundaryCapture(capture_config)

        state = capture.add_point(empty_state, Point(x=33, y=47))
        assert coords_of(state) == [(40, 40)]

    def test_snap_applied_before_clamp(self, capture_config, empty_state):
        """(8, 8) snaps to (0, 0), which is then clamped to the padding."""
        capture_config.snap_to_grid = True
        capture = BoundaryCapture(capture_config)

        state = capture.add_point(empty_state, Point(x=8, y=8))
        assert coords_of(state) == [(20, 20)]

    def test_non_finite_point_rejected(self, capture, empty_state):
        with pytest.raises(CaptureError):
            capture.add_point(empty_state, Point(x=math.nan, y=10))

    def test_invalid_config(self):
        with pytest.raises(ValueError):
            BoundaryCapture(CaptureConfig(history_limit=0))


# ============================================================
# Selection Tests
# ============================================================

class TestPointModeSelection:
    """Tests for select-then-move in point mode."""

    def test_click_near_vertex_selects(self, capture, empty_state):
        state = add_all(capture, empty_state, [(100, 100), (200, 100)])
        selected = capture.add_point(state, Point(x=104, y=103))

        assert selected.selected_index == 0
        assert selected.points == state.points
        assert selected.history == state.history

    def test_next_click_moves_selected_vertex(self, capture, empty_state):
        state = add_all(capture, empty_state, [(100, 100), (200, 100), (104, 103)])
        moved = capture.add_point(state, Point(x=300, y=300))

        assert coords_of(moved) == [(300, 300), (200, 100)]
        assert moved.selected_index is None
        assert len(moved.history) == len(state.history) + 1

    def test_nearest_vertex_wins(self, capture, empty_state):
        state = add_all(capture, empty_state, [(100, 100), (115, 100)])
        assert len(state.points) == 2

        selected = capture.add_point(state, Point(x=108, y=100))
        assert selected.selected_index == 1

    def test_click_within_threshold_of_existing_vertex_does_not_append(self, capture, empty_state):
        state = add_all(capture, empty_state, [(100, 100), (108, 100)])
        assert len(state.points) == 1
        assert state.selected_index == 0

    def test_far_click_appends(self, capture, empty_state):
        state = add_all(capture, empty_state, [(100, 100), (111, 100)])
        assert len(state.points) == 2
        assert state.selected_index is None

    def test_select_point_by_index(self, capture, empty_state):
        state = add_all(capture, empty_state, [(100, 100), (200, 100)])
        assert capture.select_point(state, 1).selected_index == 1
        with pytest.raises(CaptureError):
            capture.select_point(state, 5)


# ============================================================
# Freehand Tests
# ============================================================

class TestFreehandMode:
    """Tests for freehand sampling."""

    def test_appends_every_distinct_sample(self, capture, empty_state):
        state = add_all(
            capture, empty_state,
            [(100, 100), (101, 100), (101, 100), (102, 101)],
            DrawingMode.FREEHAND,
        )
        assert coords_of(state) == [(100, 100), (101, 100), (102, 101)]

    def test_never_selects(self, capture, empty_state):
        state = add_all(capture, empty_state, [(100, 100), (300, 300)], DrawingMode.FREEHAND)
        state = capture.add_point(state, Point(x=102, y=101), DrawingMode.FREEHAND)

        assert state.selected_index is None
        assert len(state.points) == 3


# ============================================================
# Edit Operation Tests
# ============================================================

class TestEditOperations:
    """Tests for move, drag and delete."""

    def test_move_point_commits(self, capture, empty_state):
        state = add_all(capture, empty_state, [(100, 100), (200, 100), (200, 200)])
        moved = capture.move_point(state, 1, Point(x=250, y=120))

        assert coords_of(moved)[1] == (250, 120)
        assert moved.cursor == state.cursor + 1

    def test_drag_does_not_touch_history(self, capture, empty_state):
        state = add_all(capture, empty_state, [(100, 100), (200, 100), (200, 200)])
        dragged = capture.drag_point(state, 2, Point(x=220, y=240))
        dragged = capture.drag_point(dragged, 2, Point(x=230, y=250))

        assert coords_of(dragged)[2] == (230, 250)
        assert dragged.history == state.history
        assert dragged.cursor == state.cursor

        released = capture.move_point(dragged, 2, Point(x=230, y=250))
        assert len(released.history) == len(state.history) + 1
        assert capture.undo(released).points == state.points

    def test_delete_point(self, capture, empty_state):
        state = add_all(capture, empty_state, [(100, 100), (200, 100), (200, 200)])
        state = capture.select_point(state, 0)
        deleted = capture.delete_point(state, 1)

        assert coords_of(deleted) == [(100, 100), (200, 200)]
        assert deleted.selected_index is None

    @pytest.mark.parametrize("index", [-1, 3, 10])
    def test_out_of_range_index(self, capture, empty_state, index):
        state = add_all(capture, empty_state, [(100, 100), (200, 100), (200, 200)])
        with pytest.raises(CaptureError):
            capture.delete_point(state, index)
        with pytest.raises(CaptureError):
            capture.move_point(state, index, Point(x=1, y=1))

    def test_state_is_never_mutated(self, capture, empty_state):
        state = add_all(capture, empty_state, [(100, 100), (200, 100)])
        before = state.model_dump()

        capture.add_point(state, Point(x=300, y=300))
        capture.move_point(state, 0, Point(x=50, y=50))
        capture.delete_point(state, 1)
        capture.reset(state)

        assert state.model_dump() == before


# ============================================================
# History Tests
# ============================================================

class TestHistory:
    """Tests for linear undo/redo."""

    def test_undo_redo_restore_exact_snapshots(self, capture, empty_state):
        s1 = capture.add_point(empty_state, Point(x=100, y=100))
        s2 = capture.add_point(s1, Point(x=200, y=100))
        s3 = capture.add_point(s2, Point(x=200, y=200))

        u1 = capture.undo(s3)
        assert u1.points == s2.points
        u2 = capture.undo(u1)
        assert u2.points == s1.points
        u3 = capture.undo(u2)
        assert u3.points == ()

        assert capture.redo(u3).points == s1.points
        assert capture.redo(capture.redo(capture.redo(u3))).points == s3.points

    def test_undo_and_redo_at_ends_are_noops(self, capture, empty_state):
        assert capture.undo(empty_state) == empty_state
        state = capture.add_point(empty_state, Point(x=100, y=100))
        assert capture.redo(state) == state

    def test_new_edit_truncates_redo(self, capture, empty_state):
        state = add_all(capture, empty_state, [(100, 100), (200, 100), (200, 200)])
        state = capture.undo(capture.undo(state))
        assert state.can_redo

        state = capture.add_point(state, Point(x=400, y=400))
        assert not state.can_redo
        assert coords_of(state) == [(100, 100), (400, 400)]
        assert len(state.history) == 3

    def test_history_is_bounded(self, capture_config, empty_state):
        capture_config.history_limit = 5
        capture = BoundaryCapture(capture_config)

        state = add_all(capture, empty_state, [(100 + 20 * i, 100) for i in range(10)])
        assert len(state.history) == 5
        assert state.cursor == 4

        for _ in range(10):
            state = capture.undo(state)
        assert state.cursor == 0
        assert len(state.points) == 6

    def test_reset_is_undoable(self, capture, empty_state):
        state = add_all(capture, empty_state, [(100, 100), (200, 100), (200, 200)])
        cleared = capture.reset(state)

        assert cleared.points == ()
        assert cleared.selected_index is None
        assert capture.undo(cleared).points == state.points

    def test_undo_clears_selection(self, capture, empty_state):
        state = add_all(capture, empty_state, [(100, 100), (200, 100)])
        state = capture.select_point(state, 1)
        assert capture.undo(state).selected_index is None


# ============================================================
# Closing Tests
# ============================================================

class TestClosable:
    """Tests for the closing signal."""

    def test_closable_near_first_vertex(self, capture, empty_state):
        state = add_all(capture, empty_state, [(100, 100), (200, 100)])
        assert capture.is_closable(state, Point(x=110, y=108)) is True

    def test_not_closable_far_away(self, capture, empty_state):
        state = add_all(capture, empty_state, [(100, 100), (200, 100)])
        assert capture.is_closable(state, Point(x=120, y=100)) is False

    def test_needs_two_points(self, capture, empty_state):
        state = capture.add_point(empty_state, Point(x=100, y=100))
        assert capture.is_closable(state, Point(x=100, y=100)) is False

    def test_closing_signal_does_not_modify_points(self, capture, empty_state):
        state = add_all(capture, empty_state, [(100, 100), (200, 100), (200, 200)])
        capture.is_closable(state, Point(x=101, y=101))
        assert len(state.points) == 3


class TestCaptureState:

    def test_default_state(self):
        state = CaptureState()
        assert state.points == ()
        assert state.history == ((),)
        assert not state.can_undo
        assert not state.can_redo
        assert not state.is_valid_boundary

    @pytest.mark.parametrize("fields", [
        {"cursor": 5},
        {"cursor": -1},
        {"history": ()},
        {"selected_index": 0},
        {"points": ({"x": 100, "y": 100},), "selected_index": 1},
    ])
    def test_inconsistent_state_rejected(self, fields):
        """Cursor and selection must point inside history and points."""
        with pytest.raises(ValidationError):
            CaptureState(**fields)

    def test_out_of_range_cursor_never_reaches_undo(self, capture, empty_state):
        state = add_all(capture, empty_state, [(100, 100), (200, 100)])
        data = state.model_dump(by_alias=True)
        data["cursor"] = len(state.history)

        with pytest.raises(ValidationError):
            CaptureState.model_validate(data)

    def test_serializes_camel_case(self, capture, empty_state):
        state = capture.select_point(capture.add_point(empty_state, Point(x=100, y=100)), 0)
        data = state.model_dump(by_alias=True)
        assert data["selectedIndex"] == 0
        assert CaptureState.model_validate(data) == state


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
