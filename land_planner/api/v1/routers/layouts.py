"""
API router for layout endpoints.
"""
from fastapi import APIRouter, HTTPException, Request

from land_planner.api.dependencies import LayoutPlannerDep
from land_planner.api.limiter import DEFAULT_LIMIT, limiter
from land_planner.api.v1.models.requests import LayoutRequest
from land_planner.api.v1.models.responses import LayoutResponse
from land_planner.domain.errors import LandPlannerError
from land_planner.domain.models import LayoutEstimate


router = APIRouter(
    prefix="/layouts",
    tags=["layouts"],
)

COMMON_RESPONSES = {
    400: {"description": "Invalid scale, spacing or buffer distance"},
    422: {"description": "Malformed request body"},
    429: {"description": "Rate limit exceeded"},
}


@router.post(
    "/analyze",
    response_model=LayoutResponse,
    summary="Plan a tree layout",
    description="""
    Compute the optimal tree layout for a land boundary.

    This endpoint:
    1. Computes boundary area and perimeter
    2. Buffers the boundary inward (bisector miter offset)
    3. Enumerates grid points inside the buffer and clear of every edge
    4. Samples terrain and growth attributes per tree
    5. Rolls the exact tree count up into yield, cost, revenue, ROI, water and carbon

    Boundaries with fewer than 3 points return an empty layout.
    """,
    responses=COMMON_RESPONSES,
)
@limiter.limit(DEFAULT_LIMIT)
def analyze_layout(
    request: Request,
    payload: LayoutRequest,
    planner: LayoutPlannerDep,
) -> LayoutResponse:
    """
    Plan a tree layout.

    Args:
        request: Incoming request (used by the rate limiter)
        payload: Boundary, spacing, scale and buffer
        planner: Layout planner (injected dependency)

    Returns:
        LayoutResponse with buffered boundary, trees and metrics
    """
    try:
        analysis = planner.analyze(
            boundary=payload.boundary,
            spacing=payload.spacing,
            scale=payload.scale,
            buffer_distance=payload.buffer_distance,
            min_edge_distance=payload.min_edge_distance,
        )
    except LandPlannerError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return LayoutResponse.from_analysis(analysis)


@router.post(
    "/estimate",
    response_model=LayoutEstimate,
    summary="Estimate areas and tree count",
    description="""
    Instant-feedback figures without enumerating the grid.

    The tree count here is floor(plantable area / (horizontal × vertical spacing))
    and is an approximation only; use /analyze for the exact count.
    """,
    responses=COMMON_RESPONSES,
)
@limiter.limit(DEFAULT_LIMIT)
def estimate_layout(
    request: Request,
    payload: LayoutRequest,
    planner: LayoutPlannerDep,
) -> LayoutEstimate:
    try:
        return planner.estimate(
            boundary=payload.boundary,
            spacing=payload.spacing,
            scale=payload.scale,
            buffer_distance=payload.buffer_distance,
        )
    except LandPlannerError as e:
        raise HTTPException(status_code=400, detail=str(e))
