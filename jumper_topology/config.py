"""
Configuration for jumper hypergraph generation.

Defines the jumper pattern, pad footprint, solver, port spacing and
chokepoint elimination settings.
"""

from dataclasses import dataclass, fields
from typing import Optional
import json
import math
from pathlib import Path

from .chokepoints import DEFAULT_MAX_SPLITS_PER_REGION, ChokepointConfig
from .patterns import ORIENTATIONS, PATTERNS, STAGGER_AXES


@dataclass
class JumperGraphConfig:
    """
    Configuration for one hypergraph generation call.

    Attributes:
        cols, rows: Jumper grid size (must be positive)
        pattern: "grid" or "staggered"
        pitch_x, pitch_y: Jumper center spacing in mm
        stagger_axis: "x" shifts odd rows, "y" shifts odd columns
        stagger_offset: Stagger shift in mm (None = half the jumper size)
        pad_width: Pad size along the jumper axis in mm
        pad_height: Pad size across the jumper axis in mm
        pad_gap: Gap between the two pads of a jumper in mm
        via_diameter: Diameter reported for each pad via in mm
        clearance: Clearance reported with the pattern in mm
        concavity_tolerance: Passed through to the convex-region solver
        bounds_padding: Margin around the outermost pads in mm
        orientation: "horizontal" or "vertical"
        port_spacing: Target distance between free-space ports in mm
        max_neck_ratio: Chokepoint neck limit (0 = chokepoint elimination off)
        min_split_balance_ratio: Smallest area share a chokepoint cut may leave
        max_splits_per_region: Chokepoint split budget per solver region
    """
    cols: int = 1
    rows: int = 1

    # Pattern
    pattern: str = "grid"
    pitch_x: float = 2.2
    pitch_y: float = 1.8
    stagger_axis: str = "x"
    stagger_offset: Optional[float] = None

    # 0603 pad footprint
    pad_width: float = 0.9
    pad_height: float = 1.0
    pad_gap: float = 0.35
    via_diameter: float = 0.3

    # Solver
    clearance: float = 0.2
    concavity_tolerance: float = 0.8
    bounds_padding: float = 1.2

    orientation: str = "horizontal"

    # Topology
    port_spacing: float = 0.5

    # Chokepoint elimination
    max_neck_ratio: float = 0.0
    min_split_balance_ratio: float = 0.2
    max_splits_per_region: int = DEFAULT_MAX_SPLITS_PER_REGION

    def validate(self) -> list[str]:
        """
        Validate configuration values.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        for name in ("cols", "rows"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                errors.append(f"{name} must be a positive integer, got {value!r}")

        if self.pattern not in PATTERNS:
            errors.append(f"pattern must be one of {PATTERNS}, got {self.pattern!r}")
        if self.orientation not in ORIENTATIONS:
            errors.append(f"orientation must be one of {ORIENTATIONS}, got {self.orientation!r}")
        if self.stagger_axis not in STAGGER_AXES:
            errors.append(f"stagger_axis must be one of {STAGGER_AXES}, got {self.stagger_axis!r}")

        for name in ("pitch_x", "pitch_y", "pad_width", "pad_height", "port_spacing"):
            value = getattr(self, name)
            if not _is_finite(value) or value <= 0:
                errors.append(f"{name} must be finite and > 0, got {value!r}")

        for name in ("pad_gap", "via_diameter", "clearance", "concavity_tolerance", "bounds_padding"):
            value = getattr(self, name)
            if not _is_finite(value) or value < 0:
                errors.append(f"{name} must be finite and >= 0, got {value!r}")

        if self.stagger_offset is not None and not _is_finite(self.stagger_offset):
            errors.append(f"stagger_offset must be finite, got {self.stagger_offset!r}")

        if not _is_finite(self.max_neck_ratio):
            errors.append(f"max_neck_ratio must be finite, got {self.max_neck_ratio!r}")
        elif self.max_neck_ratio > 0:
            errors.extend(self.chokepoint_config.validate())

        return errors

    @property
    def chokepoint_config(self) -> ChokepointConfig:
        return ChokepointConfig(
            max_neck_ratio=self.max_neck_ratio,
            min_split_balance_ratio=self.min_split_balance_ratio,
            max_splits_per_region=self.max_splits_per_region,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: dict) -> "JumperGraphConfig":
        """Create from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        # Aliases win over the field names when both are given
        for alias, name in _FIELD_ALIASES.items():
            if data.get(alias) is not None:
                values[name] = data[alias]
        return cls(**values)

    @classmethod
    def from_preset(cls, name: str, **overrides) -> "JumperGraphConfig":
        """Create from one of LAYOUT_PRESETS, with field overrides."""
        if name not in LAYOUT_PRESETS:
            raise KeyError(f"Unknown layout preset {name!r}, expected one of {sorted(LAYOUT_PRESETS)}")
        return cls(**{**LAYOUT_PRESETS[name], **overrides})

    def save(self, filepath: Path | str) -> None:
        """Save configuration to JSON file."""
        filepath = Path(filepath)
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load(cls, filepath: Path | str) -> "JumperGraphConfig":
        """Load configuration from JSON file."""
        filepath = Path(filepath)
        if not filepath.exists():
            return cls()  # Return defaults if file doesn't exist

        with open(filepath, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)


_FIELD_ALIASES = {
    "colSpacing": "pitch_x",
    "rowSpacing": "pitch_y",
    "staggerOffsetX": "stagger_offset",
}


def _is_finite(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


# Common jumper layouts
LAYOUT_PRESETS = {
    "grid-horizontal": {
        "pattern": "grid", "orientation": "horizontal",
        "pitch_x": 2.4, "pitch_y": 1.8, "concavity_tolerance": 0.2,
    },
    "grid-vertical": {
        "pattern": "grid", "orientation": "vertical",
        "pitch_x": 2.0, "pitch_y": 2.0,
    },
    "staggered-x": {
        "pattern": "staggered", "stagger_axis": "x", "stagger_offset": 1.0, "orientation": "horizontal",
        "pitch_x": 2.8, "pitch_y": 1.9, "concavity_tolerance": 0.3,
    },
    "staggered-y": {
        "pattern": "staggered", "stagger_axis": "y", "stagger_offset": 0.7, "orientation": "vertical",
        "pitch_x": 2.1, "pitch_y": 2.5, "concavity_tolerance": 0.2,
    },
}
