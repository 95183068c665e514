"""
API router for boundary capture events.
"""
import dataclasses

from fastapi import APIRouter, HTTPException, Request

from land_planner.api.dependencies import BoundaryCaptureDep
from land_planner.api.limiter import DEFAULT_LIMIT, limiter
from land_planner.api.v1.models.requests import CaptureEvent, CaptureEventRequest
from land_planner.api.v1.models.responses import CaptureResponse
from land_planner.domain.errors import CaptureError
from land_planner.domain.models import CaptureState
from land_planner.services.domain.boundary_capture import BoundaryCapture


router = APIRouter(
    prefix="/capture",
    tags=["capture"],
)


@router.post(
    "/events",
    response_model=CaptureResponse,
    summary="Apply a capture event",
    description="""
    Apply one discrete event (add, drag, move, delete, select, undo, redo,
    reset) to an explicit capture state and return the new state.

    Drags do not enter the undo history; send a move on release to commit.
    When a cursor is supplied, `closable` reports whether it is near the
    first vertex. Points are never merged or removed by closing.
    """,
    responses={
        400: {"description": "Event cannot be applied to the state"},
        429: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit(DEFAULT_LIMIT)
def apply_capture_event(
    request: Request,
    payload: CaptureEventRequest,
    capture: BoundaryCaptureDep,
) -> CaptureResponse:
    if payload.canvas_width is not None or payload.canvas_height is not None:
        capture = BoundaryCapture(dataclasses.replace(
            capture.config,
            width=payload.canvas_width or capture.config.width,
            height=payload.canvas_height or capture.config.height,
        ))

    try:
        state = _dispatch(capture, payload.state, payload.event)
    except CaptureError as e:
        raise HTTPException(status_code=400, detail=str(e))

    closable = capture.is_closable(state, payload.cursor) if payload.cursor else False
    return CaptureResponse(
        state=state,
        closable=closable,
        boundary_valid=state.is_valid_boundary,
    )


def _dispatch(
    capture: BoundaryCapture,
    state: CaptureState,
    event: CaptureEvent,
) -> CaptureState:
    if event.type == "undo":
        return capture.undo(state)
    if event.type == "redo":
        return capture.redo(state)
    if event.type == "reset":
        return capture.reset(state)
    if event.type == "select":
        return capture.select_point(state, event.index)

    if event.type in ("add", "drag", "move") and event.position is None:
        raise CaptureError(f"'{event.type}' event requires a position")
    if event.type in ("drag", "move", "delete") and event.index is None:
        raise CaptureError(f"'{event.type}' event requires an index")

    if event.type == "add":
        return capture.add_point(state, event.position, event.mode)
    if event.type == "drag":
        return capture.drag_point(state, event.index, event.position)
    if event.type == "move":
        return capture.move_point(state, event.index, event.position)
    return capture.delete_point(state, event.index)
