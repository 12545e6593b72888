"""
Shared pytest configuration.
"""

import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.geometry.hyperbolic_space import hyperbolic_area_to_radius, sample_points_in_radius


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: long-running statistical tests")


@pytest.fixture
def disk_points():
    """1000 points of a disk with R = area_to_radius(1000), alpha = 1."""
    R = hyperbolic_area_to_radius(1000)
    angles, radii = sample_points_in_radius(1000, 1.0, R, seed=42)
    return angles, radii, R


@pytest.fixture
def rng():
    return np.random.default_rng(42)
