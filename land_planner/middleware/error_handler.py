"""
Global error handling middleware.

Planning errors that escape a router (for example from a dependency)
become 400 responses; anything unexpected becomes a 500 with no internals
leaked to the client.
"""
import logging
from typing import Callable

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from land_planner.domain.errors import CaptureError, LandPlannerError


logger = logging.getLogger(__name__)


def _error_body(error: str, detail: str) -> dict:
    return {"error": error, "detail": detail}


def _describe(exc: LandPlannerError) -> str:
    if isinstance(exc, CaptureError):
        return "Invalid capture event"
    return "Invalid planning input"


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Maps uncaught exceptions to JSON error responses."""

    async def dispatch(self, request: Request, call_next: Callable):
        context = {"path": request.url.path, "method": request.method}
        try:
            return await call_next(request)

        except LandPlannerError as e:
            logger.warning(
                f"{type(e).__name__} on {request.method} {request.url.path}: {e}",
                extra={**context, "error_type": type(e).__name__},
            )
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content=_error_body(_describe(e), str(e)),
            )

        except ValueError as e:
            logger.warning(f"Rejected input on {request.url.path}: {e}", extra=context)
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content=_error_body("Invalid request", str(e)),
            )

        except Exception as e:
            logger.exception(f"Unhandled exception while planning: {e}", extra=context)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=_error_body("Internal server error", "An unexpected error occurred"),
            )
