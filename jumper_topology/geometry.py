"""
Geometry primitives shared by the triangulator, the chokepoint splitter and
the boundary-topology synthesizer.

Points are plain (x, y) tuples and polygons are lists of points with an
implicit closing edge. Orientation is always detected, never assumed.
"""

from dataclasses import dataclass
from typing import Optional, Sequence
import math

from shapely.geometry import LinearRing

from .errors import ConfigurationError, GeometryDegenerateError


# Type aliases
Point = tuple[float, float]
Polygon = list[Point]

# Default tolerance for shared-boundary detection
BOUNDARY_TOLERANCE = 1e-5


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned bounding box."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def __post_init__(self):
        if self.min_x > self.max_x or self.min_y > self.max_y:
            raise ConfigurationError(
                f"Invalid bounds: min ({self.min_x}, {self.min_y}) "
                f"exceeds max ({self.max_x}, {self.max_y})"
            )

    @classmethod
    def from_points(cls, points: Sequence[Point]) -> 'BoundingBox':
        if not points:
            return cls(0.0, 0.0, 0.0, 0.0)
        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        return cls(min(xs), min(ys), max(xs), max(ys))

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> Point:
        return (
            (self.min_x + self.max_x) / 2,
            (self.min_y + self.max_y) / 2
        )

    def contains(self, x: float, y: float, tolerance: float = 0.0) -> bool:
        return (self.min_x - tolerance <= x <= self.max_x + tolerance and
                self.min_y - tolerance <= y <= self.max_y + tolerance)

    def expand(self, margin: float) -> 'BoundingBox':
        return BoundingBox(
            self.min_x - margin,
            self.min_y - margin,
            self.max_x + margin,
            self.max_y + margin
        )

    def intersection(self, other: 'BoundingBox', tolerance: float = 0.0) -> Optional['BoundingBox']:
        """
        Intersect two boxes.

        Boxes separated by no more than `tolerance` still intersect; the
        result is then collapsed onto the gap so that min <= max holds.
        Returns None when the boxes are further apart.
        """
        min_x = max(self.min_x, other.min_x)
        max_x = min(self.max_x, other.max_x)
        min_y = max(self.min_y, other.min_y)
        max_y = min(self.max_y, other.max_y)

        if max_x < min_x - tolerance or max_y < min_y - tolerance:
            return None

        if max_x < min_x:
            min_x = max_x = (min_x + max_x) / 2
        if max_y < min_y:
            min_y = max_y = (min_y + max_y) / 2

        return BoundingBox(min_x, min_y, max_x, max_y)

    def to_polygon(self) -> Polygon:
        """Corners in counter-clockwise order, starting at (min_x, min_y)."""
        return [
            (self.min_x, self.min_y),
            (self.max_x, self.min_y),
            (self.max_x, self.max_y),
            (self.min_x, self.max_y)
        ]


@dataclass(frozen=True)
class Segment:
    """A directed boundary segment."""
    start: Point
    end: Point

    @property
    def length(self) -> float:
        return math.hypot(self.end[0] - self.start[0], self.end[1] - self.start[1])

    @property
    def midpoint(self) -> Point:
        return self.point_at(0.5)

    def point_at(self, t: float) -> Point:
        """Point at parameter t (0 = start, 1 = end)."""
        return (
            self.start[0] + (self.end[0] - self.start[0]) * t,
            self.start[1] + (self.end[1] - self.start[1]) * t
        )


# =============================================================================
# Scalar and point helpers
# =============================================================================

def almost_equal(a: float, b: float, tolerance: float) -> bool:
    return abs(a - b) <= tolerance


def points_equal(p1: Point, p2: Point, tolerance: float = 1e-9) -> bool:
    """Check if two points are equal within tolerance on each axis."""
    return almost_equal(p1[0], p2[0], tolerance) and almost_equal(p1[1], p2[1], tolerance)


def cross_product_2d(o: Point, a: Point, b: Point) -> float:
    """
    Cross product of vectors OA and OB.
    Positive = B is to the left of OA (CCW turn)
    Negative = B is to the right of OA (CW turn)
    """
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def triangle_area(a: Point, b: Point, c: Point) -> float:
    return abs(cross_product_2d(a, b, c)) / 2


# =============================================================================
# Polygon helpers
# =============================================================================

def signed_area(polygon: Sequence[Point]) -> float:
    """
    Calculate signed area of polygon using shoelace formula.

    Returns:
        Positive for CCW winding, negative for CW winding.
    """
    n = len(polygon)
    if n < 3:
        return 0.0
    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += polygon[i][0] * polygon[j][1]
        area -= polygon[j][0] * polygon[i][1]
    return area / 2.0


def polygon_area(polygon: Sequence[Point]) -> float:
    return abs(signed_area(polygon))


def normalize_polygon(polygon: Sequence[Point]) -> Polygon:
    """Drop a duplicated closing vertex equal to the first one."""
    points = [(p[0], p[1]) for p in polygon]
    if len(points) >= 2 and points[0] == points[-1]:
        points.pop()
    return points


def polygon_edges(polygon: Sequence[Point]) -> list[Segment]:
    """Return the boundary edges, including the implicit closing edge."""
    n = len(polygon)
    if n < 2:
        return []
    return [Segment(polygon[i], polygon[(i + 1) % n]) for i in range(n)]


def validate_simple_polygon(polygon: Sequence[Point], eps: float = 1e-12) -> Polygon:
    """
    Reject polygons that cannot be treated as simple.

    Returns the normalized polygon. Self-intersecting input is rejected,
    never repaired.

    Raises:
        GeometryDegenerateError: fewer than 3 vertices, zero area or
            self-intersection.
    """
    ring = normalize_polygon(polygon)
    if len(ring) < 3:
        raise GeometryDegenerateError(f"Polygon needs at least 3 vertices, got {len(ring)}")
    if polygon_area(ring) <= eps:
        raise GeometryDegenerateError("Polygon has zero area")
    if not LinearRing(ring).is_simple:
        raise GeometryDegenerateError("Polygon is self-intersecting")
    return ring


# =============================================================================
# Segment relations
# =============================================================================

def segments_equal(a: Segment, b: Segment, tolerance: float) -> bool:
    """Undirected segment equality."""
    return ((points_equal(a.start, b.start, tolerance) and points_equal(a.end, b.end, tolerance)) or
            (points_equal(a.start, b.end, tolerance) and points_equal(a.end, b.start, tolerance)))


def _project_collinear(a: Segment, b: Segment, tolerance: float) -> Optional[tuple[float, float, float]]:
    """
    Project b onto the line of a.

    Returns (t_start, t_end, length_squared_of_a) when b lies on the line
    through a, or None otherwise. Parameters are relative to a (0..1 spans a).
    """
    avx = a.end[0] - a.start[0]
    avy = a.end[1] - a.start[1]
    a_len_sq = avx * avx + avy * avy
    if a_len_sq <= tolerance ** 2:
        return None

    bvx = b.end[0] - b.start[0]
    bvy = b.end[1] - b.start[1]
    if not almost_equal(avx * bvy - avy * bvx, 0.0, tolerance):
        return None

    sx, sy = b.start[0] - a.start[0], b.start[1] - a.start[1]
    ex, ey = b.end[0] - a.start[0], b.end[1] - a.start[1]
    if (not almost_equal(avx * sy - avy * sx, 0.0, tolerance) or
            not almost_equal(avx * ey - avy * ex, 0.0, tolerance)):
        return None

    t_start = (sx * avx + sy * avy) / a_len_sq
    t_end = (ex * avx + ey * avy) / a_len_sq
    return (t_start, t_end, a_len_sq)


def collinear_overlap(a: Segment, b: Segment, tolerance: float = BOUNDARY_TOLERANCE) -> Optional[Segment]:
    """
    Overlapping part of two collinear segments, oriented like a.

    Overlaps no longer than the tolerance are not adjacency and return None.
    """
    projection = _project_collinear(a, b, tolerance)
    if projection is None:
        return None
    t_start, t_end, a_len_sq = projection

    overlap_start = max(0.0, min(t_start, t_end))
    overlap_end = min(1.0, max(t_start, t_end))
    if overlap_end - overlap_start <= tolerance / math.sqrt(a_len_sq):
        return None

    return Segment(a.point_at(overlap_start), a.point_at(overlap_end))


def merge_collinear_pair(a: Segment, b: Segment, tolerance: float = BOUNDARY_TOLERANCE) -> Optional[Segment]:
    """Union of two collinear segments that overlap or touch end to end."""
    projection = _project_collinear(a, b, tolerance)
    if projection is None:
        return None
    t_start, t_end, a_len_sq = projection

    b_min = min(t_start, t_end)
    b_max = max(t_start, t_end)
    min_param = tolerance / math.sqrt(a_len_sq)
    if b_min > 1 + min_param or b_max < -min_param:
        return None

    return Segment(a.point_at(min(0.0, b_min)), a.point_at(max(1.0, b_max)))


def merge_collinear_segments(segments: Sequence[Segment], tolerance: float = BOUNDARY_TOLERANCE) -> list[Segment]:
    """
    Merge fragmented collinear segments into maximal ones.

    Each incoming segment absorbs every already merged segment it touches
    before being stored, so chains are merged regardless of input order.
    """
    merged: list[Segment] = []

    for segment in segments:
        candidate = segment
        did_merge = True
        while did_merge:
            did_merge = False
            for i, existing in enumerate(merged):
                combined = merge_collinear_pair(candidate, existing, tolerance)
                if combined is None:
                    continue
                candidate = combined
                del merged[i]
                did_merge = True
                break
        merged.append(candidate)

    return merged


def point_on_segment(point: Point, segment: Segment, tolerance: float = BOUNDARY_TOLERANCE) -> bool:
    """Check if a point lies on a segment within tolerance."""
    dx = segment.end[0] - segment.start[0]
    dy = segment.end[1] - segment.start[1]
    px = point[0] - segment.start[0]
    py = point[1] - segment.start[1]

    length = math.hypot(dx, dy)
    if length <= tolerance:
        return points_equal(point, segment.start, tolerance)

    # Perpendicular distance, then position along the segment
    if abs(dx * py - dy * px) / length > tolerance:
        return False
    along = (px * dx + py * dy) / length
    return -tolerance <= along <= length + tolerance
