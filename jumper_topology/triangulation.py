"""
Polygon triangulation by ear clipping.

Produces the triangles of a simple polygon together with its dual graph:
the internal diagonals and the triangle adjacency they induce. Triangle
vertices are indices into the polygon as given by the caller, whatever its
winding order.
"""

from dataclasses import dataclass, field
from typing import Sequence

from .errors import GeometryDegenerateError
from .geometry import Point, cross_product_2d, signed_area, triangle_area


EPSILON = 1e-9

Triangle = tuple[int, int, int]


@dataclass(frozen=True)
class InternalEdge:
    """A diagonal shared by two triangles."""
    i: int
    j: int
    tri_a: int
    tri_b: int


@dataclass
class Triangulation:
    """Triangles of a polygon plus their dual graph."""
    polygon: list[Point]
    triangles: list[Triangle]
    internal_edges: list[InternalEdge] = field(default_factory=list)
    # Triangle index -> indices of triangles sharing an internal edge
    adjacency: list[list[int]] = field(default_factory=list)

    def triangle_areas(self) -> list[float]:
        return [
            triangle_area(self.polygon[a], self.polygon[b], self.polygon[c])
            for a, b, c in self.triangles
        ]

    @property
    def area(self) -> float:
        return sum(self.triangle_areas())


def is_convex_vertex(prev_v: Point, curr_v: Point, next_v: Point) -> bool:
    """
    Check if curr_v is a strictly convex vertex of a CCW polygon.
    Nearly straight vertices are not convex.
    """
    return cross_product_2d(prev_v, curr_v, next_v) > EPSILON


def point_in_triangle(p: Point, a: Point, b: Point, c: Point) -> bool:
    """Check if p is inside or on the boundary of CCW triangle abc."""
    return (cross_product_2d(a, b, p) >= -EPSILON and
            cross_product_2d(b, c, p) >= -EPSILON and
            cross_product_2d(c, a, p) >= -EPSILON)


def ear_clip_triangulate(polygon: Sequence[Point]) -> list[Triangle]:
    """
    Triangulate a simple polygon using ear clipping.

    Args:
        polygon: List of (x, y) vertices in either winding order

    Returns:
        List of triangles, each as (i, j, k) indices into polygon, CCW

    Raises:
        GeometryDegenerateError: zero area, or no ear could be found
            (self-intersection or duplicate points).
    """
    n = len(polygon)
    if n < 3:
        raise GeometryDegenerateError(f"Cannot triangulate {n} vertices")

    area = signed_area(polygon)
    if area == 0:
        raise GeometryDegenerateError("Cannot triangulate a zero-area polygon")

    # Work with indices into the caller's polygon, visited in CCW order
    indices = list(range(n))
    if area < 0:
        indices.reverse()

    triangles: list[Triangle] = []
    max_iterations = n * n
    iteration = 0

    while len(indices) > 3:
        if iteration >= max_iterations:
            raise GeometryDegenerateError(f"Ear clipping exceeded {max_iterations} iterations")
        iteration += 1

        ear_found = False
        count = len(indices)
        for pos in range(count):
            prev_idx = indices[(pos - 1) % count]
            idx = indices[pos]
            next_idx = indices[(pos + 1) % count]

            a, b, c = polygon[prev_idx], polygon[idx], polygon[next_idx]
            if not is_convex_vertex(a, b, c):
                continue

            contains_vertex = False
            for other in indices:
                if other in (prev_idx, idx, next_idx):
                    continue
                if point_in_triangle(polygon[other], a, b, c):
                    contains_vertex = True
                    break
            if contains_vertex:
                continue

            triangles.append((prev_idx, idx, next_idx))
            del indices[pos]
            ear_found = True
            break

        if not ear_found:
            raise GeometryDegenerateError(
                f"No ear found with {len(indices)} vertices remaining; "
                "polygon is likely self-intersecting or has duplicate points"
            )

    # Final triangle
    triangles.append((indices[0], indices[1], indices[2]))
    return triangles


def _edge_key(a: int, b: int) -> tuple[int, int]:
    return (a, b) if a < b else (b, a)


def triangulate(polygon: Sequence[Point]) -> Triangulation:
    """
    Triangulate a polygon and build its dual graph.

    Every internal diagonal is reported once with the two triangles it
    separates; polygon boundary edges never appear in the dual graph.
    """
    points = [(p[0], p[1]) for p in polygon]
    triangles = ear_clip_triangulate(points)
    n = len(points)

    boundary_edges = {_edge_key(i, (i + 1) % n) for i in range(n)}

    edge_to_triangles: dict[tuple[int, int], list[int]] = {}
    for tri_index, triangle in enumerate(triangles):
        for e in range(3):
            key = _edge_key(triangle[e], triangle[(e + 1) % 3])
            edge_to_triangles.setdefault(key, []).append(tri_index)

    adjacency: list[list[int]] = [[] for _ in triangles]
    internal_edges: list[InternalEdge] = []

    for (i, j), hits in edge_to_triangles.items():
        if (i, j) in boundary_edges or len(hits) != 2:
            continue
        tri_a, tri_b = hits
        internal_edges.append(InternalEdge(i, j, tri_a, tri_b))
        adjacency[tri_a].append(tri_b)
        adjacency[tri_b].append(tri_a)

    return Triangulation(
        polygon=points,
        triangles=triangles,
        internal_edges=internal_edges,
        adjacency=adjacency,
    )
