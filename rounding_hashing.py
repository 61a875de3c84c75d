# rounding_hashing.py
"""
rounding_hashing.py

Rounding/hashing thinning: a greedy suppression pass over a spatial hash grid
(see grid_index.py), repeated over several randomly ordered trials.

One trial visits the occupied grid cells in a random order. Every point that
is still retained when it is visited suppresses all other retained points of
the surrounding 3x3 cells that lie within the thinning distance. The result
depends on the visiting order, which is why several trials are run and the
one that keeps the most points is returned.

By default every trial starts from the best mask found so far
(restart="from_best"). A trial can only keep or drop points from its starting
mask, so with this policy trials after the first cannot improve on it.
restart="from_full" starts every trial from the full point set instead.
"""

from typing import List, Literal, Optional, Sequence

import numpy as np
from loguru import logger

from distance import EARTH_RADIUS_KM, DistanceMetric, resolve_metric
from errors import InvalidArgumentError
from grid_index import CellKey, CellSizeMode, GridIndex, build_grid_index
from validation import SeedLike, as_coordinates, check_positive, check_trials

RestartPolicy = Literal["from_best", "from_full"]


def run_trial(
        grid: GridIndex,
        coordinates: np.ndarray,
        metric: DistanceMetric,
        thin_dist: float,
        starting_mask: np.ndarray,
        cell_order: Sequence[CellKey],
) -> np.ndarray:
    """
    Run one suppression pass over the grid.

    Parameters
    ----------
    grid : GridIndex
        Index built from `coordinates`.
    coordinates : np.ndarray
        Points of shape (N, 2).
    metric : DistanceMetric
        Distance model.
    thin_dist : float
        Points at distance <= thin_dist from a retained point are suppressed.
    starting_mask : np.ndarray
        Boolean mask of shape (N,). Suppressed points stay suppressed.
    cell_order : sequence of CellKey
        Order in which the occupied cells are visited.

    Returns
    -------
    np.ndarray
        New boolean mask; `starting_mask` is left untouched.
    """
    keep = starting_mask.copy()
    distance = metric.scalar

    for key in cell_order:
        for p1 in grid.cells[key]:
            if not keep[p1]:
                continue

            x1, y1 = coordinates[p1]
            for bucket in grid.neighborhood(grid.cell_key(x1, y1)):
                for p2 in bucket:
                    if p2 == p1 or not keep[p2]:
                        continue
                    x2, y2 = coordinates[p2]
                    if distance(x1, y1, x2, y2) <= thin_dist:
                        keep[p2] = False

    return keep


def select_best_trial(
        coordinates: np.ndarray,
        thin_dist: float,
        trials: int,
        metric: DistanceMetric,
        all_trials: bool = False,
        seed: SeedLike = None,
        restart: RestartPolicy = "from_best",
        cell_size: CellSizeMode = "legacy",
) -> List[np.ndarray]:
    """
    Run `trials` randomized passes and collect the result.

    Returns
    -------
    list of np.ndarray
        Every trial's mask in trial order if `all_trials`, otherwise a
        one-element list with the mask that kept the most points.
    """
    if restart not in ("from_best", "from_full"):
        raise InvalidArgumentError(f"Unknown restart policy: {restart!r}")

    n = coordinates.shape[0]
    grid = build_grid_index(coordinates, thin_dist, metric, cell_size=cell_size)
    logger.debug(
        "Grid index: {} points in {} cells (precision={:.6g})",
        n, len(grid), grid.precision,
    )

    rng = np.random.default_rng(seed)
    full = np.ones(n, dtype=bool)
    best = full
    best_count = 0
    collected: List[np.ndarray] = []

    for t in range(trials):
        order = rng.permutation(len(grid.cell_keys))
        cell_order = [grid.cell_keys[i] for i in order]
        start = best if restart == "from_best" else full

        mask = run_trial(grid, coordinates, metric, thin_dist, start, cell_order)
        count = int(mask.sum())
        logger.debug("Trial {}/{}: kept {} of {} points", t + 1, trials, count, n)

        if count > best_count:
            best = mask
            best_count = count
        if all_trials:
            collected.append(mask)

    if all_trials:
        return collected
    return [best]


def rounding_hashing_thinning(
        coordinates,
        thin_dist: float = 10.0,
        trials: int = 10,
        all_trials: bool = False,
        euclidean: bool = False,
        R: float = EARTH_RADIUS_KM,
        seed: SeedLike = None,
        restart: RestartPolicy = "from_best",
        cell_size: CellSizeMode = "legacy",
        metric: Optional[str] = None,
) -> List[np.ndarray]:
    """
    Thin points with the rounding/hashing grid method.

    Parameters
    ----------
    coordinates : array-like
        Points of shape (N, 2), lon/lat in degrees (or x/y if euclidean).
    thin_dist : float
        Minimum distance between kept points (km for haversine).
    trials : int
        Number of randomized passes.
    all_trials : bool
        Return every trial instead of only the best one.
    euclidean : bool
        Use planar distance instead of haversine.
    R : float
        Sphere radius for the haversine distance.
    seed : int, np.random.Generator or None
        Seed for the cell order; a fixed int gives reproducible output.
    restart : {"from_best", "from_full"}
        Starting mask of each trial, see module docstring.
    cell_size : {"legacy", "metric"}
        Grid cell size rule, see grid_index.cell_precision().
    metric : {"haversine", "euclidean"} or None
        Metric name; overrides `euclidean` when given.

    Returns
    -------
    list of np.ndarray
        Boolean masks of length N.
    """
    points = as_coordinates(coordinates)
    thin_dist = check_positive("thin_dist", thin_dist)
    trials = check_trials(trials)
    R = check_positive("R", R)
    if cell_size not in ("legacy", "metric"):
        raise InvalidArgumentError(f"Unknown cell size mode: {cell_size!r}")

    if metric is None:
        metric = "euclidean" if euclidean else "haversine"
    distance_metric = resolve_metric(metric, R)
    return select_best_trial(
        points,
        thin_dist,
        trials,
        distance_metric,
        all_trials=all_trials,
        seed=seed,
        restart=restart,
        cell_size=cell_size,
    )
