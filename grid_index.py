# grid_index.py
"""
grid_index.py

Spatial hash grid used by rounding/hashing thinning. Every point is attached
to the cell (round(x / precision), round(y / precision)); a neighbor search
then only has to look at the 3x3 block of cells around a point instead of at
all pairs.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Literal, Tuple

import numpy as np

from distance import DistanceMetric

CellKey = Tuple[int, int]
CellSizeMode = Literal["legacy", "metric"]

KM_PER_DEGREE = 111.32


def round_half_away(value: float) -> int:
    """Round to the nearest integer, halves away from zero (like C round())."""
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def cell_precision(thin_dist: float, metric: DistanceMetric, cell_size: CellSizeMode = "legacy") -> float:
    """
    Grid cell size for a thinning distance.

    "legacy" always treats thin_dist as kilometers and converts it to degrees,
    whatever the metric. "metric" converts only for the haversine metric and
    uses thin_dist as is for planar coordinates.
    """
    if cell_size == "legacy" or metric.is_geographic:
        return thin_dist / KM_PER_DEGREE
    return float(thin_dist)


@dataclass(frozen=True)
class GridIndex:
    """
    Immutable cell -> point indices mapping.

    `cell_keys` lists the occupied cells in the order they were first seen
    and is the only sequence that gets shuffled between trials.
    """
    precision: float
    cells: Dict[CellKey, Tuple[int, ...]] = field(default_factory=dict)
    cell_keys: Tuple[CellKey, ...] = ()

    def __len__(self) -> int:
        return len(self.cell_keys)

    def cell_key(self, x: float, y: float) -> CellKey:
        return (round_half_away(x / self.precision), round_half_away(y / self.precision))

    def neighborhood(self, key: CellKey) -> Iterator[Tuple[int, ...]]:
        """Yield the buckets of the existing cells in the 3x3 block around key."""
        cx, cy = key
        for dy in (-1, 0, 1):
            for dx in (-1, 0, 1):
                bucket = self.cells.get((cx + dx, cy + dy))
                if bucket is not None:
                    yield bucket


def build_grid_index(
        coordinates: np.ndarray,
        thin_dist: float,
        metric: DistanceMetric,
        cell_size: CellSizeMode = "legacy",
) -> GridIndex:
    """
    Bucket all points into grid cells.

    Parameters
    ----------
    coordinates : np.ndarray
        Points of shape (N, 2).
    thin_dist : float
        Thinning distance; determines the cell size.
    metric : DistanceMetric
        Distance model (only matters for cell_size="metric").
    cell_size : {"legacy", "metric"}
        How thin_dist is turned into a cell size, see cell_precision().

    Returns
    -------
    GridIndex
        Index with points kept in original order inside each cell.
    """
    precision = cell_precision(thin_dist, metric, cell_size)
    buckets: Dict[CellKey, List[int]] = {}

    grid = GridIndex(precision=precision)
    for idx, (x, y) in enumerate(coordinates):
        buckets.setdefault(grid.cell_key(float(x), float(y)), []).append(idx)

    # dicts keep insertion order, so cell_keys is first-seen order
    return GridIndex(
        precision=precision,
        cells={key: tuple(points) for key, points in buckets.items()},
        cell_keys=tuple(buckets.keys()),
    )


def assign_coords_to_grid(coords: np.ndarray, cell_size: float) -> np.ndarray:
    """
    Assign points to a grid anchored at the minimum corner of the cloud.

    Returns
    -------
    np.ndarray
        Integer cell indices of shape (N, 2).
    """
    if coords.shape[0] == 0:
        return np.empty((0, 2), dtype=np.int64)
    mins = coords.min(axis=0)
    return np.floor((coords - mins) / cell_size).astype(np.int64)
