"""
Dependency injection for FastAPI.
"""
from typing import Annotated, Optional
from fastapi import Depends

from land_planner.services.application.layout_service import LayoutPlanner
from land_planner.services.domain.boundary_capture import BoundaryCapture


# Singleton instance so memoized analyses survive across requests
_layout_planner: Optional[LayoutPlanner] = None


def get_layout_planner() -> LayoutPlanner:
    """
    Get or create the singleton LayoutPlanner instance.

    Returns:
        LayoutPlanner instance
    """
    global _layout_planner
    if _layout_planner is None:
        _layout_planner = LayoutPlanner()
    return _layout_planner


def get_boundary_capture() -> BoundaryCapture:
    """
    Dependency factory for BoundaryCapture.

    Returns:
        BoundaryCapture configured from settings
    """
    return BoundaryCapture()


# Type aliases for cleaner route signatures
LayoutPlannerDep = Annotated[LayoutPlanner, Depends(get_layout_planner)]
BoundaryCaptureDep = Annotated[BoundaryCapture, Depends(get_boundary_capture)]
