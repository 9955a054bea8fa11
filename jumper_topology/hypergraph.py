"""
Jumper hypergraph assembly.

Places the jumper pattern, asks the convex-region solver for the free
area around the pads, splits that area at its chokepoints, and connects
free-space, pad and bridge regions with ports.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

from .chokepoints import split_on_chokepoints
from .config import JumperGraphConfig
from .errors import UpstreamSolverError
from .geometry import BoundingBox, Point, Polygon
from .patterns import JumperPlacement, Via, generate_pattern, resolve_options
from .solver import ConvexRegionSolver, GridConvexRegionSolver, RectObstacle
from .topology import (
    Port,
    Region,
    build_topology,
    create_free_space_regions,
    create_jumper_regions,
    lookup_region_ports,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class JumperLocation:
    """Placement summary of one jumper."""
    center: Point
    orientation: str
    pad_region_ids: tuple[str, ...]


@dataclass
class JumperHyperGraph:
    """
    Complete region/port graph for a jumper pattern.

    `regions` lists free-space regions first, then jumper regions.
    `region_ports` maps every region id to the ids of its ports.
    """
    regions: list[Region]
    ports: list[Port]
    jumper_locations: list[JumperLocation]
    free_space_regions: list[Region]
    jumper_regions: list[Region]
    jumpers: list[JumperPlacement]
    vias: list[Via]
    bounds: BoundingBox
    region_ports: dict[str, list[str]] = field(default_factory=dict)

    def get_region(self, region_id: str) -> Optional[Region]:
        for region in self.regions:
            if region.region_id == region_id:
                return region
        return None

    def ports_for_region(self, region_id: str) -> list[Port]:
        return lookup_region_ports(self.ports, self.region_ports, region_id)


def pad_obstacles(jumpers: list[JumperPlacement], orientation: str,
                  pad_width: float, pad_height: float) -> list[RectObstacle]:
    """Pad footprints as solver obstacles; vertical jumpers swap the pad axes."""
    if orientation == "horizontal":
        width, height = pad_width, pad_height
    else:
        width, height = pad_height, pad_width
    return [
        RectObstacle(center=pad, width=width, height=height)
        for jumper in jumpers
        for pad in jumper.pad_centers
    ]


def solve_free_space(
    solver: ConvexRegionSolver,
    bounds: BoundingBox,
    obstacles: list[RectObstacle],
    concavity_tolerance: float
) -> list[Polygon]:
    """
    Run the solver once.

    Raises:
        UpstreamSolverError: the solver raised or returned no regions
    """
    try:
        polygons = solver.solve(bounds, obstacles, 0.0, concavity_tolerance)
    except Exception as exc:
        raise UpstreamSolverError(f"Convex region solver failed: {exc}") from exc

    if not polygons:
        raise UpstreamSolverError("Convex region solver returned no regions")
    return polygons


def generate_jumper_hypergraph(
    config: JumperGraphConfig,
    solver: Optional[ConvexRegionSolver] = None
) -> JumperHyperGraph:
    """
    Generate the jumper hypergraph for a configuration.

    Args:
        config: Pattern, footprint, port and chokepoint settings
        solver: Convex-region solver (default: GridConvexRegionSolver)

    Returns:
        JumperHyperGraph with regions, ports and the region -> port index

    Raises:
        ConfigurationError: invalid configuration
        UpstreamSolverError: the solver failed (never retried)
    """
    options = resolve_options(config)
    pattern = generate_pattern(options)

    if solver is None:
        solver = GridConvexRegionSolver()

    obstacles = pad_obstacles(pattern.jumpers, options.orientation, options.pad_width, options.pad_height)
    polygons = solve_free_space(solver, pattern.bounds, obstacles, config.concavity_tolerance)
    polygons = split_on_chokepoints(polygons, config.chokepoint_config)

    free_space_regions = create_free_space_regions(polygons)
    jumper_regions = create_jumper_regions(
        pattern.jumpers, options.orientation, options.pad_width, options.pad_height
    )
    regions = free_space_regions + jumper_regions
    topology = build_topology(regions, config.port_spacing)

    # Regions come in pad1 / bridge / pad2 triples per jumper
    jumper_locations = [
        JumperLocation(
            center=jumper.center,
            orientation=jumper.orientation,
            pad_region_ids=tuple(r.region_id for r in jumper_regions[3 * index:3 * index + 3]),
        )
        for index, jumper in enumerate(pattern.jumpers)
    ]

    logger.info(
        "Generated jumper hypergraph: %d jumpers, %d free-space regions, %d ports",
        len(pattern.jumpers), len(free_space_regions), len(topology.ports)
    )

    return JumperHyperGraph(
        regions=topology.regions,
        ports=topology.ports,
        jumper_locations=jumper_locations,
        free_space_regions=free_space_regions,
        jumper_regions=jumper_regions,
        jumpers=pattern.jumpers,
        vias=pattern.vias,
        bounds=pattern.bounds,
        region_ports=topology.region_ports,
    )
