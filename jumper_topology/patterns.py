"""
Jumper placement patterns.

Places 0603 jumpers (two pads bridged by a through-board link) on a regular
grid or a staggered grid centered on the origin, and reports the via list
and the board bounds the convex-region solver should work in.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from .errors import ConfigurationError
from .geometry import BoundingBox, Point

if TYPE_CHECKING:
    from .config import JumperGraphConfig


ORIENTATIONS = ("horizontal", "vertical")
PATTERNS = ("grid", "staggered")
STAGGER_AXES = ("x", "y")


@dataclass(frozen=True)
class JumperPlacement:
    """A placed jumper and its two pad centers."""
    jumper_id: str
    center: Point
    orientation: str
    pad_centers: tuple[Point, Point]


@dataclass(frozen=True)
class Via:
    """A circular through-board obstacle."""
    center: Point
    diameter: float


@dataclass
class JumperPattern:
    """Output of a pattern generator."""
    jumpers: list[JumperPlacement]
    vias: list[Via]
    bounds: BoundingBox


@dataclass(frozen=True)
class ResolvedPatternOptions:
    """Pattern options with every default filled in."""
    cols: int
    rows: int
    pattern: str
    pitch_x: float
    pitch_y: float
    stagger_axis: str
    stagger_offset: float
    pad_width: float
    pad_height: float
    pad_gap: float
    via_diameter: float
    bounds_padding: float
    orientation: str

    @property
    def pad_offset(self) -> float:
        """Distance from the jumper center to each pad center."""
        return self.pad_gap / 2 + self.pad_width / 2

    @property
    def pad_half_extents(self) -> tuple[float, float]:
        """Half size of a pad along x and y for the jumper orientation."""
        if self.orientation == "horizontal":
            return (self.pad_width / 2, self.pad_height / 2)
        return (self.pad_height / 2, self.pad_width / 2)


def jumper_size_along_axis(orientation: str, axis: str, pad_width: float,
                           pad_height: float, pad_gap: float) -> float:
    """Footprint extent of one jumper along the x or y axis."""
    along_jumper = pad_gap + pad_width * 2
    across_jumper = pad_height
    if orientation == "horizontal":
        return along_jumper if axis == "x" else across_jumper
    return across_jumper if axis == "x" else along_jumper


def resolve_options(config: 'JumperGraphConfig') -> ResolvedPatternOptions:
    """
    Validate a config and fill in the pattern defaults.

    The default stagger offset is half the jumper size along the stagger
    axis.

    Raises:
        ConfigurationError: if the config does not validate
    """
    errors = config.validate()
    if errors:
        raise ConfigurationError("; ".join(errors))

    stagger_offset = config.stagger_offset
    if stagger_offset is None:
        stagger_offset = jumper_size_along_axis(
            config.orientation,
            config.stagger_axis,
            config.pad_width,
            config.pad_height,
            config.pad_gap
        ) / 2

    return ResolvedPatternOptions(
        cols=config.cols,
        rows=config.rows,
        pattern=config.pattern,
        pitch_x=config.pitch_x,
        pitch_y=config.pitch_y,
        stagger_axis=config.stagger_axis,
        stagger_offset=stagger_offset,
        pad_width=config.pad_width,
        pad_height=config.pad_height,
        pad_gap=config.pad_gap,
        via_diameter=config.via_diameter,
        bounds_padding=config.bounds_padding,
        orientation=config.orientation,
    )


def _place_jumper(jumper_id: str, center: Point, options: ResolvedPatternOptions) -> JumperPlacement:
    offset = options.pad_offset
    cx, cy = center
    if options.orientation == "horizontal":
        pads = ((cx - offset, cy), (cx + offset, cy))
    else:
        pads = ((cx, cy - offset), (cx, cy + offset))
    return JumperPlacement(jumper_id, center, options.orientation, pads)


def _vias_for(jumper: JumperPlacement, options: ResolvedPatternOptions) -> list[Via]:
    return [Via(pad, options.via_diameter) for pad in jumper.pad_centers]


def generate_grid_pattern(options: ResolvedPatternOptions) -> JumperPattern:
    """Place rows x cols jumpers on a regular grid centered on the origin."""
    jumpers = []
    vias = []

    x_start = -((options.cols - 1) * options.pitch_x) / 2
    y_start = -((options.rows - 1) * options.pitch_y) / 2

    for row in range(options.rows):
        for col in range(options.cols):
            center = (x_start + col * options.pitch_x, y_start + row * options.pitch_y)
            jumper = _place_jumper(f"jumper_r{row}_c{col}", center, options)
            jumpers.append(jumper)
            vias.extend(_vias_for(jumper, options))

    # Same margin on both axes, measured from the outermost pad centers
    pad_offset = options.pad_offset
    bounds = BoundingBox(
        min_x=x_start - pad_offset - options.pad_width / 2 - options.bounds_padding,
        min_y=y_start - pad_offset - options.pad_height / 2 - options.bounds_padding,
        max_x=(x_start + (options.cols - 1) * options.pitch_x + pad_offset
               + options.pad_width / 2 + options.bounds_padding),
        max_y=(y_start + (options.rows - 1) * options.pitch_y + pad_offset
               + options.pad_height / 2 + options.bounds_padding),
    )

    return JumperPattern(jumpers=jumpers, vias=vias, bounds=bounds)


def _bounds_from_jumpers(jumpers: list[JumperPlacement], options: ResolvedPatternOptions) -> BoundingBox:
    x_half, y_half = options.pad_half_extents
    pads = [pad for jumper in jumpers for pad in jumper.pad_centers]
    return BoundingBox(
        min_x=min(p[0] - x_half for p in pads) - options.bounds_padding,
        min_y=min(p[1] - y_half for p in pads) - options.bounds_padding,
        max_x=max(p[0] + x_half for p in pads) + options.bounds_padding,
        max_y=max(p[1] + y_half for p in pads) + options.bounds_padding,
    )


def generate_staggered_pattern(options: ResolvedPatternOptions) -> JumperPattern:
    """
    Place jumpers on a staggered grid.

    With stagger axis "x" every odd row is shifted along x; with "y" every
    odd column is shifted along y.
    """
    jumpers = []
    vias = []

    x_start = -((options.cols - 1) * options.pitch_x) / 2
    y_start = -((options.rows - 1) * options.pitch_y) / 2

    for row in range(options.rows):
        row_offset = options.stagger_offset if options.stagger_axis == "x" and row % 2 == 1 else 0.0
        for col in range(options.cols):
            col_offset = options.stagger_offset if options.stagger_axis == "y" and col % 2 == 1 else 0.0
            center = (
                x_start + col * options.pitch_x + row_offset,
                y_start + row * options.pitch_y + col_offset
            )
            jumper = _place_jumper(f"jumper_r{row}_c{col}", center, options)
            jumpers.append(jumper)
            vias.extend(_vias_for(jumper, options))

    return JumperPattern(jumpers=jumpers, vias=vias, bounds=_bounds_from_jumpers(jumpers, options))


def generate_pattern(options: ResolvedPatternOptions) -> JumperPattern:
    """Dispatch on the pattern name."""
    if options.pattern == "staggered":
        return generate_staggered_pattern(options)
    return generate_grid_pattern(options)
