# thinning.py
"""
thinning.py

Cell-based thinning strategies that keep at most one point per cell:

1. Grid thinning: overlay a regular grid with step `resolution` and keep one
   representative per grid cell.

2. Precision thinning: round coordinates to a number of decimal places and
   keep one representative per unique rounded coordinate pair.

The representative of a cell is the point with the highest score. Scores are
either drawn at random for every trial or given as a `priority` vector.
"""

from typing import List, Literal, Optional, Sequence

import numpy as np
from loguru import logger

from errors import InvalidArgumentError
from grid_index import KM_PER_DEGREE
from validation import SeedLike, as_coordinates, check_positive, check_priority, check_trials

try:
    from backend_torch import grid_thinning_torch

    HAS_TORCH_BACKEND = True
except ImportError:
    HAS_TORCH_BACKEND = False

BackendType = Literal["numpy", "torch"]


def first_per_cell(keys: np.ndarray, scores: np.ndarray) -> np.ndarray:
    """
    Keep the highest-scoring point of every distinct key row.

    Parameters
    ----------
    keys : np.ndarray
        Cell keys of shape (N, 2).
    scores : np.ndarray
        Scores of shape (N,); ties keep the lower point index.

    Returns
    -------
    np.ndarray
        Boolean mask of shape (N,).
    """
    n = keys.shape[0]
    keep = np.zeros(n, dtype=bool)
    if n == 0:
        return keep

    order = np.argsort(-scores, kind="stable")
    _, first = np.unique(keys[order], axis=0, return_index=True)
    keep[order[first]] = True
    return keep


def _trial_scores(
        n: int,
        priority: Optional[np.ndarray],
        rng: np.random.Generator,
) -> np.ndarray:
    if priority is not None:
        return priority
    return rng.random(n)


def grid_thinning(
        coordinates,
        thin_dist: Optional[float] = None,
        resolution: Optional[float] = None,
        origin: Optional[Sequence[float]] = None,
        trials: int = 10,
        all_trials: bool = False,
        priority=None,
        seed: SeedLike = None,
        backend: BackendType = "numpy",
        torch_device: Literal["cpu", "cuda"] = "cpu",
) -> List[np.ndarray]:
    """
    Keep one point per regular grid cell.

    Parameters
    ----------
    coordinates : array-like
        Points of shape (N, 2).
    thin_dist : float or None
        Thinning distance in km; converted to a resolution in degrees when
        `resolution` is not given.
    resolution : float or None
        Grid step; takes priority over thin_dist.
    origin : sequence of 2 floats or None
        Grid origin. Defaults to the minimum corner of the point cloud.
    trials : int
        Number of trials (only used when all_trials is True).
    all_trials : bool
        Return `trials` masks instead of a single one.
    priority : array-like or None
        Per-point scores; the highest-scoring point of each cell is kept
        instead of a random one.
    seed : int, np.random.Generator or None
        Seed for the random scores.
    backend : {"numpy", "torch"}
        Where the per-cell selection runs.
    torch_device : {"cpu", "cuda"}
        Device for the torch backend.

    Returns
    -------
    list of np.ndarray
        Boolean masks of length N.
    """
    points = as_coordinates(coordinates)
    n = points.shape[0]

    if resolution is None:
        if thin_dist is None:
            raise InvalidArgumentError("Either `thin_dist` or `resolution` must be provided.")
        resolution = check_positive("thin_dist", thin_dist) / KM_PER_DEGREE
    else:
        resolution = check_positive("resolution", resolution)
    trials = check_trials(trials)
    priority = check_priority(priority, n)
    if backend not in ("numpy", "torch"):
        raise InvalidArgumentError(f"Unknown backend: {backend!r}")
    if backend == "torch" and not HAS_TORCH_BACKEND:
        raise RuntimeError("Torch backend requested but backend_torch is not available.")

    if origin is None:
        origin_arr = points.min(axis=0) if n > 0 else np.zeros(2)
    else:
        origin_arr = np.asarray(origin, dtype=float).reshape(2)

    rng = np.random.default_rng(seed)
    cells = np.floor((points - origin_arr) / resolution).astype(np.int64)
    logger.debug("Grid thinning: {} points, resolution={:.6g}, backend={}", n, resolution, backend)

    keep_points = []
    for _ in range(trials if all_trials else 1):
        scores = _trial_scores(n, priority, rng)
        if backend == "torch":
            keep = grid_thinning_torch(points, resolution, origin_arr, scores, device=torch_device)
        else:
            keep = first_per_cell(cells, scores)
        keep_points.append(keep)

    return keep_points


def precision_thinning(
        coordinates,
        precision: int = 4,
        trials: int = 10,
        all_trials: bool = False,
        priority=None,
        seed: SeedLike = None,
) -> List[np.ndarray]:
    """
    Keep one point per coordinate pair rounded to `precision` decimals.

    Returns
    -------
    list of np.ndarray
        Boolean masks of length N; `trials` of them if all_trials, else one.
    """
    points = as_coordinates(coordinates)
    if (isinstance(precision, bool) or not isinstance(precision, (int, np.integer))
            or precision < 0):
        raise InvalidArgumentError(f"`precision` must be a non-negative integer, got {precision!r}")
    trials = check_trials(trials)
    priority = check_priority(priority, points.shape[0])

    rng = np.random.default_rng(seed)
    rounded = np.round(points, int(precision))

    keep_points = []
    for _ in range(trials if all_trials else 1):
        scores = _trial_scores(points.shape[0], priority, rng)
        keep_points.append(first_per_cell(rounded, scores))

    return keep_points
