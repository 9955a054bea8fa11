"""
Jumper Topology - region/port graphs for PCB jumper patterns

Derives a planar connectivity topology for boards that place dual-pad
0603 jumpers in repeating patterns:
1. Chokepoint elimination: split free-space polygons at narrow necks
2. Boundary topology: connect regions with ports along shared boundaries
3. Hypergraph assembly: combine both with the jumper pattern
"""

__version__ = "0.1.0"

from .chokepoints import ChokepointConfig, split_on_chokepoints
from .config import LAYOUT_PRESETS, JumperGraphConfig
from .errors import (
    ConfigurationError,
    GeometryDegenerateError,
    JumperTopologyError,
    UpstreamSolverError,
)
from .hypergraph import JumperHyperGraph, JumperLocation, generate_jumper_hypergraph
from .solver import ConvexRegionSolver, GridConvexRegionSolver, RectObstacle
from .topology import Port, Region, Topology, build_topology
from .triangulation import Triangulation, ear_clip_triangulate, triangulate

__all__ = [
    "ChokepointConfig",
    "ConfigurationError",
    "ConvexRegionSolver",
    "GeometryDegenerateError",
    "GridConvexRegionSolver",
    "JumperGraphConfig",
    "JumperHyperGraph",
    "JumperLocation",
    "JumperTopologyError",
    "LAYOUT_PRESETS",
    "Port",
    "RectObstacle",
    "Region",
    "Topology",
    "Triangulation",
    "UpstreamSolverError",
    "build_topology",
    "ear_clip_triangulate",
    "generate_jumper_hypergraph",
    "split_on_chokepoints",
    "triangulate",
]
