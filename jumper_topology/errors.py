"""
Exceptions raised while deriving jumper topologies.

Configuration and solver failures always reach the caller. Geometry
failures are absorbed only inside the chokepoint splitter, where the
offending piece is kept whole.
"""


class JumperTopologyError(Exception):
    """Base class for all errors raised by this package."""


class ConfigurationError(JumperTopologyError, ValueError):
    """A numeric or named parameter is invalid (raised before geometry work)."""


class GeometryDegenerateError(JumperTopologyError, ValueError):
    """A polygon has zero area, self-intersects or cannot be triangulated."""


class UpstreamSolverError(JumperTopologyError, RuntimeError):
    """The convex-region solver failed; retrying with the same input cannot help."""
