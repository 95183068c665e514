"""
API router for stored analysis records.
"""
from fastapi import APIRouter, HTTPException, Request

from land_planner.api.dependencies import LayoutPlannerDep
from land_planner.api.limiter import DEFAULT_LIMIT, limiter
from land_planner.api.v1.models.responses import RegenerateResponse
from land_planner.domain.errors import LandPlannerError
from land_planner.domain.models import AnalysisRecord


router = APIRouter(
    prefix="/analyses",
    tags=["analyses"],
)


@router.post(
    "/regenerate",
    response_model=RegenerateResponse,
    summary="Regenerate a stored analysis",
    description="""
    Recompute an analysis from a persisted record's geometry fields
    (boundary, spacing, scale and optional buffer distance) and report
    whether the stored areas, tree count and metrics still match.
    """,
    responses={
        400: {"description": "Record geometry cannot be analysed"},
        429: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit(DEFAULT_LIMIT)
def regenerate_analysis(
    request: Request,
    record: AnalysisRecord,
    planner: LayoutPlannerDep,
) -> RegenerateResponse:
    try:
        analysis, consistent = planner.verify_record(record)
    except LandPlannerError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return RegenerateResponse(
        record=planner.to_record(analysis),
        consistent=consistent,
    )
