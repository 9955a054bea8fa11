"""Unit tests for the reference convex-region solver."""

import itertools

import pytest

from jumper_topology.geometry import BoundingBox, polygon_area, signed_area
from jumper_topology.solver import GridConvexRegionSolver, RectObstacle


def overlap_area(a: BoundingBox, b: BoundingBox) -> float:
    width = min(a.max_x, b.max_x) - max(a.min_x, b.min_x)
    height = min(a.max_y, b.max_y) - max(a.min_y, b.min_y)
    return max(width, 0) * max(height, 0)


def as_bounds(polygon) -> BoundingBox:
    return BoundingBox.from_points(polygon)


class TestRectObstacle:
    """Tests for RectObstacle."""

    def test_bounds(self):
        """Test obstacle bounds around the center."""
        assert RectObstacle((1, 2), 2, 4).bounds == BoundingBox(0, 0, 2, 4)


class TestGridConvexRegionSolver:
    """Tests for GridConvexRegionSolver."""

    def test_no_obstacles(self):
        """Test an empty board is one region."""
        regions = GridConvexRegionSolver().solve(BoundingBox(0, 0, 4, 3), [], 0, 0)
        assert regions == [[(0, 0), (4, 0), (4, 3), (0, 3)]]

    def test_center_obstacle(self):
        """Test a central obstacle yields a ring of four rectangles."""
        regions = GridConvexRegionSolver().solve(BoundingBox(0, 0, 10, 10), [RectObstacle((5, 5), 2, 2)], 0, 0)
        assert len(regions) == 4

    def test_tiling(self):
        """Test regions are CCW, disjoint, avoid obstacles and cover the free area."""
        bounds = BoundingBox(0, 0, 10, 6)
        obstacles = [RectObstacle((2, 2), 1, 1), RectObstacle((6, 3), 2, 1), RectObstacle((7, 4), 1, 2)]
        regions = GridConvexRegionSolver().solve(bounds, obstacles, 0, 0.5)

        for polygon in regions:
            assert len(polygon) == 4
            assert signed_area(polygon) > 0

        boxes = [as_bounds(p) for p in regions]
        for a, b in itertools.combinations(boxes, 2):
            assert overlap_area(a, b) == pytest.approx(0)
        for box in boxes:
            for obstacle in obstacles:
                assert overlap_area(box, obstacle.bounds) == pytest.approx(0)

        # The last two obstacles overlap on a 0.5 x 0.5 patch
        blocked = 1 + 2 + 2 - 0.25
        assert sum(polygon_area(p) for p in regions) == pytest.approx(bounds.area - blocked)

    def test_clearance_inflates_obstacles(self):
        """Test clearance grows the blocked area."""
        bounds = BoundingBox(0, 0, 10, 10)
        regions = GridConvexRegionSolver().solve(bounds, [RectObstacle((5, 5), 2, 2)], 0.5, 0)
        assert sum(polygon_area(p) for p in regions) == pytest.approx(100 - 9)

    def test_obstacle_clipped_to_bounds(self):
        """Test obstacles hanging over the edge only block the inside part."""
        bounds = BoundingBox(0, 0, 4, 4)
        regions = GridConvexRegionSolver().solve(bounds, [RectObstacle((0, 0), 2, 2)], 0, 0)
        assert sum(polygon_area(p) for p in regions) == pytest.approx(15)

    def test_fully_blocked(self):
        """Test a board with no free area fails."""
        with pytest.raises(ValueError):
            GridConvexRegionSolver().solve(BoundingBox(0, 0, 1, 1), [RectObstacle((0.5, 0.5), 2, 2)], 0, 0)

    def test_invalid_arguments(self):
        """Test invalid bounds and tolerances fail."""
        solver = GridConvexRegionSolver()
        with pytest.raises(ValueError):
            solver.solve(BoundingBox(0, 0, 0, 1), [], 0, 0)
        with pytest.raises(ValueError):
            solver.solve(BoundingBox(0, 0, 1, 1), [], -0.1, 0)
        with pytest.raises(ValueError):
            solver.solve(BoundingBox(0, 0, 1, 1), [], 0, float('nan'))
