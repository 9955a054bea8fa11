"""
Boundary-topology synthesis.

Builds typed regions and connects them with ports:

- free space <-> free space: every shared boundary segment gets evenly
  spaced interior ports, at least one per segment
- pad <-> free space: one port per touching pair, at the midpoint of the
  longest shared segment after merging collinear fragments
- pad <-> bridge: one port per pair whose bounds intersect, at the center
  of the intersection

Regions never hold references to their ports. The region -> port relation
is an index built once from the finished port list.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence
import logging
import math

from .errors import ConfigurationError
from .geometry import (
    BOUNDARY_TOLERANCE,
    BoundingBox,
    Point,
    Segment,
    collinear_overlap,
    merge_collinear_segments,
    polygon_edges,
    segments_equal,
)
from .patterns import JumperPlacement


logger = logging.getLogger(__name__)

FREE_SPACE_PORT_PREFIX = "tp"
PAD_PORT_PREFIX = "jp"
BRIDGE_PORT_PREFIX = "jip"


@dataclass(frozen=True, eq=False)
class Region:
    """
    A labeled area of the board.

    Free-space regions have neither flag set. Pads connect externally as
    component pads; bridges are the through-board links between two pads.
    """
    region_id: str
    polygon: tuple[Point, ...]
    bounds: BoundingBox
    center: Point
    is_pad: bool = False
    is_through_jumper: bool = False

    @property
    def is_free_space(self) -> bool:
        return not self.is_pad and not self.is_through_jumper

    @property
    def is_bridge(self) -> bool:
        return self.is_through_jumper and not self.is_pad


@dataclass(frozen=True, eq=False)
class Port:
    """A connection point between exactly two regions."""
    port_id: str
    region1: Region
    region2: Region
    location: Point

    @property
    def x(self) -> float:
        return self.location[0]

    @property
    def y(self) -> float:
        return self.location[1]

    @property
    def region_ids(self) -> tuple[str, str]:
        return (self.region1.region_id, self.region2.region_id)


class PortIdSequence:
    """Call-scoped port id counters, one per id prefix."""

    def __init__(self):
        self._counters: dict[str, int] = {}

    def next_id(self, prefix: str) -> str:
        index = self._counters.get(prefix, 0)
        self._counters[prefix] = index + 1
        return f"{prefix}_{index}"


@dataclass
class Topology:
    """Regions, ports and the region -> port id index."""
    regions: list[Region]
    ports: list[Port]
    region_ports: dict[str, list[str]] = field(default_factory=dict)

    def ports_for_region(self, region_id: str) -> list[Port]:
        return lookup_region_ports(self.ports, self.region_ports, region_id)


def lookup_region_ports(
    ports: Sequence[Port],
    region_ports: dict[str, list[str]],
    region_id: str
) -> list[Port]:
    """Resolve a region's port ids from the index to port objects."""
    by_id = {port.port_id: port for port in ports}
    return [by_id[port_id] for port_id in region_ports.get(region_id, [])]


# =============================================================================
# Region construction
# =============================================================================

def _region_from_polygon(region_id: str, polygon: Sequence[Point], **flags) -> Region:
    points = tuple((p[0], p[1]) for p in polygon)
    bounds = BoundingBox.from_points(points)
    return Region(region_id=region_id, polygon=points, bounds=bounds, center=bounds.center, **flags)


def _region_from_bounds(region_id: str, bounds: BoundingBox, center: Point, **flags) -> Region:
    return Region(
        region_id=region_id,
        polygon=tuple(bounds.to_polygon()),
        bounds=bounds,
        center=center,
        **flags
    )


def create_free_space_regions(polygons: Sequence[Sequence[Point]]) -> list[Region]:
    """Wrap free-space polygons as regions top_0, top_1, ..."""
    return [
        _region_from_polygon(f"top_{index}", polygon, is_pad=False, is_through_jumper=False)
        for index, polygon in enumerate(polygons)
    ]


def create_jumper_regions(
    jumpers: Sequence[JumperPlacement],
    orientation: str,
    pad_width: float,
    pad_height: float
) -> list[Region]:
    """
    Build the pad1 / bridge / pad2 regions of every jumper.

    The bridge runs between the two pad centers and is half as wide as a
    pad across the jumper axis.
    """
    if orientation == "horizontal":
        pad_x_half, pad_y_half = pad_width / 2, pad_height / 2
    else:
        pad_x_half, pad_y_half = pad_height / 2, pad_width / 2

    regions = []
    for jumper in jumpers:
        p1, p2 = jumper.pad_centers
        cx, cy = jumper.center

        pad1_bounds = BoundingBox(p1[0] - pad_x_half, p1[1] - pad_y_half, p1[0] + pad_x_half, p1[1] + pad_y_half)
        pad2_bounds = BoundingBox(p2[0] - pad_x_half, p2[1] - pad_y_half, p2[0] + pad_x_half, p2[1] + pad_y_half)

        if orientation == "horizontal":
            bridge_bounds = BoundingBox(
                min(p1[0], p2[0]), cy - pad_y_half / 2,
                max(p1[0], p2[0]), cy + pad_y_half / 2
            )
        else:
            bridge_bounds = BoundingBox(
                cx - pad_x_half / 2, min(p1[1], p2[1]),
                cx + pad_x_half / 2, max(p1[1], p2[1])
            )

        regions.append(_region_from_bounds(
            f"{jumper.jumper_id}_pad1", pad1_bounds, p1, is_pad=True, is_through_jumper=False))
        regions.append(_region_from_bounds(
            f"{jumper.jumper_id}_bridge", bridge_bounds, jumper.center, is_pad=False, is_through_jumper=True))
        regions.append(_region_from_bounds(
            f"{jumper.jumper_id}_pad2", pad2_bounds, p2, is_pad=True, is_through_jumper=False))

    return regions


# =============================================================================
# Shared boundaries
# =============================================================================

def validate_port_spacing(port_spacing: float) -> float:
    """
    Raises:
        ConfigurationError: spacing is not a finite number > 0
    """
    if isinstance(port_spacing, bool) or not isinstance(port_spacing, (int, float)):
        raise ConfigurationError(f"port_spacing must be a number, got {port_spacing!r}")
    if not math.isfinite(port_spacing) or port_spacing <= 0:
        raise ConfigurationError(f"port_spacing must be finite and > 0, got {port_spacing}")
    return float(port_spacing)


def shared_boundary_segments(
    region_a: Region,
    region_b: Region,
    tolerance: float = BOUNDARY_TOLERANCE
) -> list[Segment]:
    """
    Collinear overlaps between the edges of two regions.

    Each overlap is oriented along region_a's edge; undirected duplicates
    are reported once.
    """
    if not region_a.polygon or not region_b.polygon:
        return []

    edges_b = polygon_edges(region_b.polygon)
    shared: list[Segment] = []
    for edge_a in polygon_edges(region_a.polygon):
        for edge_b in edges_b:
            overlap = collinear_overlap(edge_a, edge_b, tolerance)
            if overlap is None:
                continue
            if any(segments_equal(existing, overlap, tolerance) for existing in shared):
                continue
            shared.append(overlap)
    return shared


def ports_along_segment(segment: Segment, port_spacing: float) -> list[Point]:
    """
    Strictly interior port locations along a shared segment.

    One port per spacing interval minus one, never fewer than one, evenly
    distributed with no port on an endpoint.
    """
    interval_count = math.floor(segment.length / port_spacing)
    port_count = max(1, interval_count - 1)
    return [segment.point_at((k + 1) / (port_count + 1)) for k in range(port_count)]


# =============================================================================
# Port synthesis
# =============================================================================

def create_free_space_ports(
    regions: Sequence[Region],
    port_spacing: float,
    port_ids: Optional[PortIdSequence] = None,
    tolerance: float = BOUNDARY_TOLERANCE
) -> list[Port]:
    """
    Ports between every pair of free-space regions sharing a boundary.

    Raises:
        ConfigurationError: invalid port spacing
    """
    port_spacing = validate_port_spacing(port_spacing)
    if port_ids is None:
        port_ids = PortIdSequence()

    ports = []
    for i, region_a in enumerate(regions):
        if not region_a.polygon:
            continue
        for region_b in regions[i + 1:]:
            if not region_b.polygon:
                continue
            for segment in shared_boundary_segments(region_a, region_b, tolerance):
                for location in ports_along_segment(segment, port_spacing):
                    ports.append(Port(port_ids.next_id(FREE_SPACE_PORT_PREFIX), region_a, region_b, location))

    return ports


def create_jumper_ports(
    pad_regions: Sequence[Region],
    free_space_regions: Sequence[Region],
    port_ids: Optional[PortIdSequence] = None,
    tolerance: float = BOUNDARY_TOLERANCE
) -> list[Port]:
    """One port per touching (pad, free-space region) pair."""
    if port_ids is None:
        port_ids = PortIdSequence()

    ports = []
    for pad in pad_regions:
        for free_region in free_space_regions:
            shared = shared_boundary_segments(pad, free_region, tolerance)
            if not shared:
                continue
            merged = merge_collinear_segments(shared, tolerance)
            longest = max(merged, key=lambda segment: segment.length)
            ports.append(Port(port_ids.next_id(PAD_PORT_PREFIX), pad, free_region, longest.midpoint))

    return ports


def create_bridge_ports(
    pad_regions: Sequence[Region],
    bridge_regions: Sequence[Region],
    port_ids: Optional[PortIdSequence] = None,
    tolerance: float = BOUNDARY_TOLERANCE
) -> list[Port]:
    """
    One port per (pad, bridge) pair whose bounds intersect.

    Uses bounds rather than edges, so corner-only contact also counts.
    """
    if port_ids is None:
        port_ids = PortIdSequence()

    ports = []
    for bridge in bridge_regions:
        for pad in pad_regions:
            overlap = bridge.bounds.intersection(pad.bounds, tolerance)
            if overlap is None:
                continue
            ports.append(Port(port_ids.next_id(BRIDGE_PORT_PREFIX), pad, bridge, overlap.center))

    return ports


def build_region_port_index(regions: Sequence[Region], ports: Sequence[Port]) -> dict[str, list[str]]:
    """Map each region id to the ids of the ports it owns, in port order."""
    index: dict[str, list[str]] = {region.region_id: [] for region in regions}
    for port in ports:
        for region_id in dict.fromkeys(port.region_ids):
            index.setdefault(region_id, []).append(port.port_id)
    return index


def build_topology(
    regions: Sequence[Region],
    port_spacing: float,
    tolerance: float = BOUNDARY_TOLERANCE
) -> Topology:
    """
    Connect typed regions with ports.

    Ports are listed free-space first, then pad, then pad-bridge.

    Raises:
        ConfigurationError: invalid port spacing (checked before any geometry)
    """
    port_spacing = validate_port_spacing(port_spacing)

    free_space = [r for r in regions if r.is_free_space]
    pads = [r for r in regions if r.is_pad]
    bridges = [r for r in regions if r.is_bridge]

    port_ids = PortIdSequence()
    free_ports = create_free_space_ports(free_space, port_spacing, port_ids, tolerance)
    pad_ports = create_jumper_ports(pads, free_space, port_ids, tolerance)
    bridge_ports = create_bridge_ports(pads, bridges, port_ids, tolerance)
    logger.debug(
        "Built %d free-space, %d pad and %d bridge ports for %d regions",
        len(free_ports), len(pad_ports), len(bridge_ports), len(regions)
    )

    ports = free_ports + pad_ports + bridge_ports
    region_list = list(regions)
    return Topology(
        regions=region_list,
        ports=ports,
        region_ports=build_region_port_index(region_list, ports),
    )
