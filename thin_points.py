# thin_points.py
"""
thin_points.py

Single entry point for all thinning methods. Picks the method named in a
ThinningConfig, optionally thins every group of points independently, and
returns boolean masks over the full input.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Optional

import numpy as np
from loguru import logger

from errors import DimensionMismatchError, InvalidArgumentError
from neighbor_thinning import brute_force_thinning, kd_tree_thinning
from rounding_hashing import rounding_hashing_thinning
from thinning import grid_thinning, precision_thinning
from validation import as_coordinates, check_trials

ThinningMethod = Literal["brute_force", "kd_tree", "round_hash", "grid", "precision"]

THINNING_METHODS: Dict[str, Callable[..., List[np.ndarray]]] = {
    "brute_force": brute_force_thinning,
    "kd_tree": kd_tree_thinning,
    "round_hash": rounding_hashing_thinning,
    "grid": grid_thinning,
    "precision": precision_thinning,
}


@dataclass
class ThinningConfig:
    """
    Configuration for thin_points().

    `params` holds the method-specific keyword arguments, e.g.
    {"thin_dist": 5.0, "euclidean": True} or {"precision": 3}.
    """
    method: ThinningMethod = "brute_force"
    trials: int = 10
    all_trials: bool = False
    target_points: Optional[int] = None  # forces brute force
    seed: Optional[int] = None
    verbose: bool = False
    params: Dict[str, Any] = field(default_factory=dict)


def _run_method(
        points: np.ndarray,
        cfg: ThinningConfig,
        rng: np.random.Generator,
) -> List[np.ndarray]:
    if cfg.target_points is not None:
        logger.info("For specific target points, brute force method is used.")
        return brute_force_thinning(
            points,
            trials=cfg.trials,
            all_trials=cfg.all_trials,
            target_points=cfg.target_points,
            seed=rng,
            **cfg.params,
        )

    if cfg.verbose:
        logger.info("Starting thinning process using method: {}", cfg.method)
    method = THINNING_METHODS[cfg.method]
    result = method(points, trials=cfg.trials, all_trials=cfg.all_trials, seed=rng, **cfg.params)
    if cfg.verbose:
        logger.info("Thinning process completed.")
    return result


def thin_points(
        coordinates,
        cfg: Optional[ThinningConfig] = None,
        groups=None,
) -> List[np.ndarray]:
    """
    Spatially thin a set of points.

    Parameters
    ----------
    coordinates : array-like
        Points of shape (N, 2): longitude/x in column 0, latitude/y in column 1.
    cfg : ThinningConfig or None
        Method and parameters; defaults to ThinningConfig().
    groups : array-like or None
        Group label per point (e.g. species). Every group is thinned on its
        own.

    Returns
    -------
    list of np.ndarray
        Boolean masks of length N: one per trial if cfg.all_trials, otherwise
        a single mask for the best trial.
    """
    cfg = cfg if cfg is not None else ThinningConfig()
    points = as_coordinates(coordinates)
    n = points.shape[0]

    if cfg.method not in THINNING_METHODS:
        raise InvalidArgumentError(
            f"Invalid method {cfg.method!r}; choose one of {sorted(THINNING_METHODS)}"
        )
    check_trials(cfg.trials)
    if not isinstance(cfg.all_trials, (bool, np.bool_)):
        raise InvalidArgumentError("`all_trials` must be a boolean")

    if groups is None:
        subsets = [np.arange(n)]
        labels: List[Any] = [None]
    else:
        groups = np.asarray(groups)
        if groups.ndim != 1 or groups.shape[0] != n:
            raise DimensionMismatchError(
                f"`groups` must have one label per point ({n}), got shape {groups.shape}"
            )
        _, first_seen = np.unique(groups, return_index=True)
        labels = list(groups[np.sort(first_seen)])
        subsets = [np.flatnonzero(groups == label) for label in labels]

    rng = np.random.default_rng(cfg.seed)
    exported_trials = cfg.trials if cfg.all_trials else 1
    masks = [np.zeros(n, dtype=bool) for _ in range(exported_trials)]

    start_time = time.perf_counter()
    if cfg.verbose:
        logger.info("Starting spatial thinning of {} points", n)

    for label, subset in zip(labels, subsets):
        if cfg.verbose and label is not None:
            logger.info("Processing group: {}", label)
        group_masks = _run_method(points[subset], cfg, rng)
        for i in range(exported_trials):
            masks[i][subset] = group_masks[i]

    if cfg.verbose:
        logger.info("Total execution time: {:.2f} seconds", time.perf_counter() - start_time)

    return masks
