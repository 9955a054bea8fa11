"""
Chokepoint elimination - split polygons at narrow internal necks.

A neck is an internal diagonal of the polygon's triangulation that is short
relative to the polygon size and separates a reasonable share of its area.
Pieces are split along the best such diagonal until no candidate remains or
the per-polygon split budget is spent.

Algorithm:
1. Triangulate the piece by ear clipping and build the triangle dual graph
2. Keep diagonals whose length / sqrt(area) is at most max_neck_ratio
3. Flood-fill the dual graph across each diagonal to measure the area on
   one side; keep diagonals whose smaller side is at least
   min_split_balance_ratio of the total
4. Cut along the candidate with the lowest neck_ratio / balance score and
   push both halves back onto the worklist
"""

from dataclasses import dataclass
from typing import Optional, Sequence
import logging
import math

from .errors import ConfigurationError, GeometryDegenerateError
from .geometry import Point, Polygon, normalize_polygon, polygon_area, validate_simple_polygon
from .triangulation import EPSILON, Triangulation, triangulate


logger = logging.getLogger(__name__)

DEFAULT_MAX_SPLITS_PER_REGION = 32


@dataclass(frozen=True)
class ChokepointConfig:
    """
    Chokepoint elimination settings.

    Attributes:
        max_neck_ratio: Longest neck, relative to sqrt(polygon area), that may
            be cut. Zero or negative disables the feature.
        min_split_balance_ratio: Smallest share of the area (0..1) the minor
            side of a cut must keep.
        max_splits_per_region: Split budget per input polygon.
    """
    max_neck_ratio: float
    min_split_balance_ratio: float
    max_splits_per_region: int = DEFAULT_MAX_SPLITS_PER_REGION

    @property
    def enabled(self) -> bool:
        return self.max_neck_ratio > 0

    def validate(self) -> list[str]:
        """
        Validate configuration values.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if not math.isfinite(self.max_neck_ratio):
            errors.append(f"max_neck_ratio must be finite, got {self.max_neck_ratio}")

        if not (math.isfinite(self.min_split_balance_ratio) and 0 <= self.min_split_balance_ratio <= 1):
            errors.append(f"min_split_balance_ratio must be within [0, 1], got {self.min_split_balance_ratio}")

        if not isinstance(self.max_splits_per_region, int) or self.max_splits_per_region < 0:
            errors.append(f"max_splits_per_region must be a non-negative integer, got {self.max_splits_per_region}")

        return errors


@dataclass(frozen=True)
class SplitCandidate:
    """A diagonal (i, j) selected for cutting."""
    i: int
    j: int
    neck_ratio: float
    balance: float

    @property
    def score(self) -> float:
        return self.neck_ratio / max(self.balance, EPSILON)


def split_on_chokepoints(polygons: list[Polygon], config: ChokepointConfig) -> list[Polygon]:
    """
    Split every polygon at its narrow necks.

    Args:
        polygons: Simple polygons in either winding order
        config: Chokepoint settings

    Returns:
        The input list itself when the feature is disabled, otherwise a new
        list holding the pieces of each input polygon in input order.

    Raises:
        ConfigurationError: invalid settings (only checked when enabled)
        GeometryDegenerateError: an input polygon is degenerate or
            self-intersecting
    """
    if not config.enabled:
        return polygons

    errors = config.validate()
    if errors:
        raise ConfigurationError("; ".join(errors))

    output: list[Polygon] = []
    for polygon in polygons:
        validate_simple_polygon(polygon)
        pieces = split_polygon(polygon, config)
        if len(pieces) > 1:
            logger.debug("Split %d-vertex polygon into %d pieces", len(polygon), len(pieces))
        output.extend(pieces)
    return output


def split_polygon(polygon: Sequence[Point], config: ChokepointConfig) -> list[Polygon]:
    """
    Split one polygon with an explicit worklist and a shared split budget.

    Pieces that cannot be triangulated are kept whole.
    """
    work: list[Polygon] = [normalize_polygon(polygon)]
    result: list[Polygon] = []
    remaining_splits = config.max_splits_per_region

    while work:
        current = work.pop()

        # No internal diagonal below 4 vertices
        if len(current) < 4:
            result.append(current)
            continue

        candidate = find_best_separator(current, config)
        if candidate is None or remaining_splits <= 0:
            result.append(current)
            continue

        first, second = split_polygon_by_chord(current, candidate.i, candidate.j)
        remaining_splits -= 1
        logger.debug(
            "Cutting neck (%d, %d): ratio=%.4f balance=%.4f",
            candidate.i, candidate.j, candidate.neck_ratio, candidate.balance
        )
        work.append(first)
        work.append(second)

    return result


def find_best_separator(polygon: Polygon, config: ChokepointConfig) -> Optional[SplitCandidate]:
    """Find the lowest-scoring neck diagonal, or None if nothing qualifies."""
    try:
        triangulation = triangulate(polygon)
    except GeometryDegenerateError as exc:
        logger.debug("Keeping %d-vertex piece whole: %s", len(polygon), exc)
        return None

    total_area = polygon_area(polygon)
    if total_area <= EPSILON:
        return None
    scale = math.sqrt(total_area)
    triangle_areas = triangulation.triangle_areas()

    best: Optional[SplitCandidate] = None
    for edge in triangulation.internal_edges:
        a = polygon[edge.i]
        b = polygon[edge.j]
        neck_ratio = math.hypot(a[0] - b[0], a[1] - b[1]) / scale
        if neck_ratio > config.max_neck_ratio:
            continue

        side_area = area_on_side(triangulation, edge.tri_a, edge.tri_b, triangle_areas)
        balance = min(side_area, total_area - side_area) / total_area
        if balance < config.min_split_balance_ratio:
            continue

        candidate = SplitCandidate(edge.i, edge.j, neck_ratio, balance)
        if best is None or candidate.score < best.score:
            best = candidate

    return best


def area_on_side(
    triangulation: Triangulation,
    start_triangle: int,
    blocked_triangle: int,
    triangle_areas: list[float]
) -> float:
    """
    Sum triangle areas reachable from start_triangle without crossing
    blocked_triangle in the dual graph.
    """
    visited = [False] * len(triangulation.triangles)
    visited[blocked_triangle] = True
    stack = [start_triangle]

    total = 0.0
    while stack:
        tri = stack.pop()
        if visited[tri]:
            continue
        visited[tri] = True
        total += triangle_areas[tri]

        for neighbor in triangulation.adjacency[tri]:
            if not visited[neighbor]:
                stack.append(neighbor)

    return total


def split_polygon_by_chord(polygon: Polygon, i: int, j: int) -> tuple[Polygon, Polygon]:
    """Cut a polygon along the chord between vertices i and j."""
    return (_walk_polygon(polygon, i, j), _walk_polygon(polygon, j, i))


def _walk_polygon(polygon: Polygon, start: int, end: int) -> Polygon:
    """Vertices from start to end (inclusive), following the vertex cycle."""
    n = len(polygon)
    idx = start
    points = [polygon[idx]]
    while idx != end:
        idx = (idx + 1) % n
        points.append(polygon[idx])
    return normalize_polygon(points)
