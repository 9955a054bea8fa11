"""
Convex-region solver interface and a reference solver for rectangular
obstacles.

A solver partitions the free area of a board (the bounds minus the
obstacles inflated by a clearance) into simple convex polygons that tile
it. Solvers report failure by raising; the hypergraph assembler turns any
failure into an UpstreamSolverError.
"""

from dataclasses import dataclass
from typing import Protocol, Sequence
import bisect
import logging
import math

from .geometry import BoundingBox, Point, Polygon


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RectObstacle:
    """An axis-aligned rectangular obstacle."""
    center: Point
    width: float
    height: float

    @property
    def bounds(self) -> BoundingBox:
        hw, hh = self.width / 2, self.height / 2
        return BoundingBox(self.center[0] - hw, self.center[1] - hh, self.center[0] + hw, self.center[1] + hh)


class ConvexRegionSolver(Protocol):
    """Anything that can partition free board area into convex polygons."""

    def solve(
        self,
        bounds: BoundingBox,
        obstacles: Sequence[RectObstacle],
        clearance: float,
        concavity_tolerance: float
    ) -> list[Polygon]:
        ...


class GridConvexRegionSolver:
    """
    Partition free area into maximal axis-aligned rectangles.

    Algorithm:
    1. Inflate obstacles by the clearance and clip them to the bounds
    2. Build the coordinate-compressed grid of all rectangle edges
    3. Mark the cells covered by an obstacle
    4. Merge free cells into horizontal runs per row band
    5. Stack runs with identical x extent over consecutive bands

    Rectangles are convex, so any concavity tolerance is met.

    Example:
        >>> solver = GridConvexRegionSolver()
        >>> bounds = BoundingBox(0, 0, 10, 10)
        >>> regions = solver.solve(bounds, [RectObstacle((5, 5), 2, 2)], 0, 0)
        >>> len(regions)
        4
    """

    def solve(
        self,
        bounds: BoundingBox,
        obstacles: Sequence[RectObstacle],
        clearance: float,
        concavity_tolerance: float
    ) -> list[Polygon]:
        if bounds.width <= 0 or bounds.height <= 0:
            raise ValueError(f"Bounds must have positive area, got {bounds}")
        if not math.isfinite(clearance) or clearance < 0:
            raise ValueError(f"clearance must be finite and >= 0, got {clearance}")
        if not math.isfinite(concavity_tolerance) or concavity_tolerance < 0:
            raise ValueError(f"concavity_tolerance must be finite and >= 0, got {concavity_tolerance}")

        blocked = []
        for obstacle in obstacles:
            clipped = obstacle.bounds.expand(clearance).intersection(bounds)
            if clipped is not None and clipped.width > 0 and clipped.height > 0:
                blocked.append(clipped)

        xs = sorted({bounds.min_x, bounds.max_x}
                    | {b.min_x for b in blocked} | {b.max_x for b in blocked})
        ys = sorted({bounds.min_y, bounds.max_y}
                    | {b.min_y for b in blocked} | {b.max_y for b in blocked})

        # free[row][col] for the cell [xs[col], xs[col+1]] x [ys[row], ys[row+1]]
        free = [[True] * (len(xs) - 1) for _ in range(len(ys) - 1)]
        for box in blocked:
            col_start = bisect.bisect_left(xs, box.min_x)
            col_end = bisect.bisect_left(xs, box.max_x)
            row_start = bisect.bisect_left(ys, box.min_y)
            row_end = bisect.bisect_left(ys, box.max_y)
            for row in range(row_start, row_end):
                for col in range(col_start, col_end):
                    free[row][col] = False

        rectangles = self._merge_cells(free, xs, ys)
        if not rectangles:
            raise ValueError("No free area left after placing obstacles")

        logger.debug("Grid solver: %d obstacles -> %d regions", len(blocked), len(rectangles))
        return [rect.to_polygon() for rect in rectangles]

    @staticmethod
    def _row_runs(row_cells: list[bool]) -> list[tuple[int, int]]:
        """Maximal runs of free cells as (first_col, last_col + 1)."""
        runs = []
        start = None
        for col, is_free in enumerate(row_cells):
            if is_free and start is None:
                start = col
            elif not is_free and start is not None:
                runs.append((start, col))
                start = None
        if start is not None:
            runs.append((start, len(row_cells)))
        return runs

    def _merge_cells(self, free: list[list[bool]], xs: list[float], ys: list[float]) -> list[BoundingBox]:
        # (col_start, col_end) -> row index where the open rectangle began
        open_rects: dict[tuple[int, int], int] = {}
        closed: list[tuple[int, int, int, int]] = []

        for row, row_cells in enumerate(free):
            runs = set(self._row_runs(row_cells))
            for run in list(open_rects):
                if run not in runs:
                    closed.append((run[0], run[1], open_rects.pop(run), row))
            for run in sorted(runs):
                open_rects.setdefault(run, row)

        for run, row_start in open_rects.items():
            closed.append((run[0], run[1], row_start, len(free)))

        closed.sort(key=lambda r: (r[2], r[0]))
        return [
            BoundingBox(xs[col_start], ys[row_start], xs[col_end], ys[row_end])
            for col_start, col_end, row_start, row_end in closed
        ]
