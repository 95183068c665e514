"""
Unit tests for grid tree layout.

Tests cover:
- Grid enumeration inside a buffered boundary
- Minimum edge distance
- Grid validation
- Analytic estimate
- Nearest-tree lookup
"""
import math
import random

import pytest

from land_planner.domain.errors import InvalidScaleError, InvalidSpacingError
from land_planner.domain.models import Point, Spacing
from land_planner.services.domain.terrain_model import TerrainModel
from land_planner.services.domain.tree_layout import (
    TreeIndex,
    TreeLayoutEngine,
    estimate_tree_count,
    grid_steps,
)
from land_planner.utils.geometry import offset_polygon


def to_points(coords):
    return [Point(x=x, y=y) for x, y in coords]


def buffered(coords, distance):
    return to_points(offset_polygon(coords, distance).points)


@pytest.fixture
def engine() -> TreeLayoutEngine:
    return TreeLayoutEngine()


# ============================================================
# Grid Generation Tests
# ============================================================

class TestGenerateGrid:
    """Tests for grid enumeration."""

    def test_square_with_buffer(self, engine, square_coords, spacing_5):
        """10 x 10 square buffered by 2: only (5, 5) is admissible."""
        points = engine.generate_grid(
            to_points(square_coords), buffered(square_coords, 2.0), spacing_5, 1.0, 2.0
        )
        assert [(p.x, p.y) for p in points] == [(5.0, 5.0)]

    @pytest.mark.parametrize("step, per_axis", [
        (10, 9),
        (8, 12),
        (6, 16),
        (5, 19),
        (4, 24),
    ])
    def test_count_for_spacing(self, engine, step, per_axis):
        square = [(0, 0), (0, 100), (100, 100), (100, 0)]
        points = engine.generate_grid(
            to_points(square), buffered(square, 2.5),
            Spacing(horizontal=step, vertical=step), 1.0, 2.5,
        )
        assert len(points) == per_axis * per_axis

    def test_count_decreases_with_spacing(self, engine):
        field = [(0, 0), (0, 60), (120, 60), (120, 0)]
        inner = buffered(field, 3.0)
        counts = [
            len(engine.generate_grid(
                to_points(field), inner, Spacing(horizontal=s, vertical=s), 1.0, 3.0
            ))
            for s in (2, 3, 4, 6, 9)
        ]
        assert all(a > b for a, b in zip(counts, counts[1:]))

    def test_all_points_inside_buffer(self, engine, l_shape_coords):
        inner_coords = offset_polygon(l_shape_coords, 1.0).points
        points = engine.generate_grid(
            to_points(l_shape_coords), to_points(inner_coords),
            Spacing(horizontal=0.5, vertical=0.5), 1.0, 1.0,
        )
        assert points
        for p in points:
            assert not (p.x > 4 and p.y > 4)
            assert 1 <= p.x <= 9 and 1 <= p.y <= 9

    def test_min_edge_distance(self, engine, square_coords):
        """With no buffer, edge distance alone keeps points in [3, 7]."""
        boundary = to_points(square_coords)
        points = engine.generate_grid(
            boundary, boundary, Spacing(horizontal=1, vertical=1), 1.0, 3.0
        )
        assert len(points) == 25
        assert all(3 <= p.x <= 7 and 3 <= p.y <= 7 for p in points)

    def test_row_major_order(self, engine, square_coords):
        inner = to_points([(1, 1), (1, 9), (9, 9), (9, 1)])
        points = engine.generate_grid(
            to_points(square_coords), inner, Spacing(horizontal=2, vertical=2), 1.0, 0.0
        )
        coords = [(p.x, p.y) for p in points]

        assert len(coords) == 16
        assert coords[:5] == [(2, 2), (4, 2), (6, 2), (8, 2), (2, 4)]
        assert coords == sorted(coords, key=lambda c: (c[1], c[0]))

    def test_scale_converts_meters_to_units(self, engine, square_coords):
        """At 0.5 m per unit a 5 m spacing is a 10 unit step."""
        boundary = to_points(square_coords)
        inner = to_points([(1, 1), (1, 9), (9, 9), (9, 1)])
        coarse = engine.generate_grid(
            boundary, inner, Spacing(horizontal=5, vertical=5), 0.5, 0.0
        )
        assert coarse == []

        fine = engine.generate_grid(
            boundary, inner, Spacing(horizontal=1, vertical=1), 0.5, 0.0
        )
        assert len(fine) == 16
        assert {p.x for p in fine} == {2, 4, 6, 8}

    def test_deterministic(self, engine, l_shape_coords):
        inner = buffered(l_shape_coords, 0.5)
        spacing = Spacing(horizontal=0.7, vertical=1.3)
        first = engine.generate_grid(to_points(l_shape_coords), inner, spacing, 1.0, 0.5)
        second = engine.generate_grid(to_points(l_shape_coords), inner, spacing, 1.0, 0.5)
        assert first == second

    def test_fewer_than_three_points(self, engine, spacing_5):
        two = to_points([(0, 0), (10, 10)])
        assert engine.generate_grid(two, two, spacing_5, 1.0) == []

    def test_empty_buffer(self, engine, square_coords, spacing_5):
        assert engine.generate_grid(to_points(square_coords), [], spacing_5, 1.0) == []

    @pytest.mark.parametrize("scale", [0, -1, -0.5])
    def test_invalid_scale(self, engine, square_coords, spacing_5, scale):
        boundary = to_points(square_coords)
        with pytest.raises(InvalidScaleError):
            engine.generate_grid(boundary, boundary, spacing_5, scale)


class TestGridLimit:
    """Grids too large to enumerate are refused up front."""

    def test_limit_exceeded(self, square_coords):
        """Spacing 1 on the 10 x 10 square needs 11 x 11 = 121 cells."""
        boundary = to_points(square_coords)
        engine = TreeLayoutEngine(max_grid_cells=120)

        with pytest.raises(InvalidSpacingError):
            engine.generate_grid(boundary, boundary, Spacing(horizontal=1, vertical=1), 1.0)

    def test_limit_is_inclusive(self, square_coords):
        boundary = to_points(square_coords)
        engine = TreeLayoutEngine(max_grid_cells=121)

        points = engine.generate_grid(
            boundary, boundary, Spacing(horizontal=1, vertical=1), 1.0, 3.0
        )
        assert len(points) == 25

    def test_microscopic_spacing(self, engine, square_coords):
        boundary = to_points(square_coords)
        with pytest.raises(InvalidSpacingError):
            engine.generate_grid(
                boundary, boundary, Spacing(horizontal=1e-6, vertical=1e-6), 1.0
            )


class TestGridSteps:

    def test_steps(self):
        assert grid_steps(Spacing(horizontal=6, vertical=4), 2.0) == (3.0, 2.0)

    def test_infinite_scale_gives_zero_step(self):
        with pytest.raises(InvalidSpacingError):
            grid_steps(Spacing(horizontal=1, vertical=1), math.inf)

    def test_errors_are_value_errors(self):
        with pytest.raises(ValueError):
            grid_steps(Spacing(horizontal=1, vertical=1), 0)


# ============================================================
# Estimate Tests
# ============================================================

class TestEstimateTreeCount:
    """Tests for the analytic approximation."""

    def test_floor(self, spacing_5):
        assert estimate_tree_count(36.0, spacing_5) == 1
        assert estimate_tree_count(49.99, spacing_5) == 1
        assert estimate_tree_count(50.0, spacing_5) == 2

    def test_empty_area(self, spacing_5):
        assert estimate_tree_count(0.0, spacing_5) == 0
        assert estimate_tree_count(-3.0, spacing_5) == 0

    def test_rectangular_spacing(self):
        assert estimate_tree_count(1000.0, Spacing(horizontal=7, vertical=5)) == 28


# ============================================================
# Tree Index Tests
# ============================================================

class TestTreeIndex:
    """Tests for nearest-tree lookup."""

    @pytest.fixture
    def trees(self):
        positions = to_points([(10, 10), (20, 10), (10, 20), (20, 20)])
        return TerrainModel(random.Random(0)).trees_at(positions)

    def test_nearest_within_radius(self, trees):
        index = TreeIndex(trees)
        tree = index.nearest(Point(x=18, y=11), max_distance=5)
        assert tree.position == Point(x=20, y=10)

    def test_nothing_within_radius(self, trees):
        assert TreeIndex(trees).nearest(Point(x=15, y=15), max_distance=3) is None

    def test_empty_index(self):
        assert TreeIndex([]).nearest(Point(x=0, y=0), max_distance=100) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
