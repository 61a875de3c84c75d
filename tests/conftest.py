"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest


@pytest.fixture
def close_pairs() -> np.ndarray:
    """Two pairs of points; the points of a pair are about 55 m apart."""
    return np.array(
        [[0.0, 0.0], [0.0, 0.0005], [1.0, 1.0], [1.0, 1.0005]],
        dtype=np.float64,
    )


@pytest.fixture
def separated_points() -> np.ndarray:
    """5x5 lon/lat lattice with 1 degree spacing (> 100 km apart)."""
    lon, lat = np.meshgrid(np.arange(5.0), np.arange(40.0, 45.0))
    return np.column_stack((lon.ravel(), lat.ravel()))


@pytest.fixture
def clustered_points() -> np.ndarray:
    """Dense planar cloud of 300 points in a 0.2 x 0.2 square."""
    rng = np.random.default_rng(2024)
    return rng.uniform(0.0, 0.2, size=(300, 2))
