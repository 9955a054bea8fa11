"""Pytest fixtures for jumper_topology tests."""

import pytest
import sys
from pathlib import Path

# Add project root to path so tests run without installing the package
ROOT_DIR = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT_DIR))

from jumper_topology.config import JumperGraphConfig


@pytest.fixture
def dumbbell_polygon() -> list:
    """Two 3.8 x 6 lobes joined by a 0.4 wide, 0.6 tall neck."""
    return [
        (-4, -3), (-0.2, -3), (-0.2, -0.3), (0.2, -0.3), (0.2, -3), (4, -3),
        (4, 3), (0.2, 3), (0.2, 0.3), (-0.2, 0.3), (-0.2, 3), (-4, 3),
    ]


@pytest.fixture
def square_polygon() -> list:
    """Return a 10x10 CCW square."""
    return [(0, 0), (10, 0), (10, 10), (0, 10)]


@pytest.fixture
def l_shape_polygon() -> list:
    """Return a CCW L-shape of area 3."""
    return [(0, 0), (2, 0), (2, 1), (1, 1), (1, 2), (0, 2)]


@pytest.fixture
def two_rectangles() -> list:
    """Two rectangles sharing the 2 mm edge x=4, 0 <= y <= 2."""
    return [
        [(0, 0), (4, 0), (4, 2), (0, 2)],
        [(4, 0), (8, 0), (8, 2), (4, 2)],
    ]


@pytest.fixture
def default_config() -> JumperGraphConfig:
    """Return a 3x2 horizontal grid configuration."""
    return JumperGraphConfig(cols=3, rows=2)
