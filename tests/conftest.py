"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Sample boundaries
- Configured domain services
- FastAPI test client
"""
import pytest
from fastapi.testclient import TestClient

from land_planner.main import app
from land_planner.domain.models import CaptureState, Point, Spacing
from land_planner.services.application.layout_service import LayoutConfig, LayoutPlanner
from land_planner.services.domain.boundary_capture import BoundaryCapture, CaptureConfig


def make_points(coords) -> list[Point]:
    return [Point(x=x, y=y) for x, y in coords]


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def square_coords() -> list[tuple[float, float]]:
    """10 x 10 square, as traced on the canvas."""
    return [(0.0, 0.0), (0.0, 10.0), (10.0, 10.0), (10.0, 0.0)]


@pytest.fixture
def square_boundary(square_coords) -> list[Point]:
    return make_points(square_coords)


@pytest.fixture
def l_shape_coords() -> list[tuple[float, float]]:
    """L-shaped parcel with one reflex vertex at (5, 5); area 75."""
    return [(0, 0), (10, 0), (10, 5), (5, 5), (5, 10), (0, 10)]


@pytest.fixture
def spacing_5() -> Spacing:
    return Spacing(horizontal=5, vertical=5)


# ============================================================
# Service Fixtures
# ============================================================

@pytest.fixture
def planner() -> LayoutPlanner:
    """Planner with a small cache and a fixed seed."""
    return LayoutPlanner(config=LayoutConfig(buffer_distance=2.0, cache_size=16, seed=7))


@pytest.fixture
def capture_config() -> CaptureConfig:
    """800 x 600 canvas, 20px padding, snapping off."""
    return CaptureConfig(
        width=800,
        height=600,
        padding=20,
        grid_size=20,
        snap_to_grid=False,
        select_threshold=10,
        close_threshold=15,
        history_limit=50,
    )


@pytest.fixture
def capture(capture_config) -> BoundaryCapture:
    return BoundaryCapture(capture_config)


@pytest.fixture
def empty_state() -> CaptureState:
    return CaptureState()


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client() -> TestClient:
    """Create a synchronous test client for FastAPI."""
    return TestClient(app)
