# neighbor_thinning.py
"""
neighbor_thinning.py

Thinning methods that first build, for every point, the list of points lying
closer than the thinning distance, and then remove points greedily until no
kept point has a kept neighbor left:

1. Brute force: full pairwise distance matrix (haversine or Euclidean).
   Also provides a "target_points" mode that picks a fixed number of points
   that are as far apart as possible.

2. K-D tree: radius queries on scipy's cKDTree. Lon/lat input is converted to
   3D Cartesian coordinates first, so the radius is a chord length.
"""

from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger
from scipy.spatial import cKDTree

from distance import EARTH_RADIUS_KM, long_lat_to_cartesian, resolve_metric
from errors import InvalidArgumentError
from grid_index import KM_PER_DEGREE, assign_coords_to_grid
from validation import SeedLike, as_coordinates, check_positive, check_trials


def max_thinning_algorithm(
        neighbor_indices: Sequence[np.ndarray],
        n: int,
        trials: int,
        all_trials: bool = False,
        seed: SeedLike = None,
) -> List[np.ndarray]:
    """
    Greedy removal of the points with the most neighbors.

    In every trial the point with the largest number of kept neighbors is
    removed (ties are broken at random) and the neighbor counts are updated,
    until no kept point has a kept neighbor.

    Parameters
    ----------
    neighbor_indices : sequence of np.ndarray
        neighbor_indices[i] holds the indices of the neighbors of point i
        (without i itself).
    n : int
        Number of points.
    trials : int
        Number of randomized trials.
    all_trials : bool
        Return every trial instead of only the best one.
    seed : int, np.random.Generator or None
        Seed for tie breaking.

    Returns
    -------
    list of np.ndarray
        Boolean masks of length n.
    """
    rng = np.random.default_rng(seed)
    neighbor_counts = np.array([len(nb) for nb in neighbor_indices], dtype=np.int64)

    results: List[np.ndarray] = [] if all_trials else [np.zeros(n, dtype=bool)]

    for _ in range(trials):
        keep = np.ones(n, dtype=bool)
        counts = neighbor_counts.copy()
        max_neighbors = counts.max() if n > 0 else 0

        while max_neighbors > 0:
            candidates = np.flatnonzero(counts == max_neighbors)
            if len(candidates) > 1:
                point = int(candidates[rng.integers(len(candidates))])
            else:
                point = int(candidates[0])

            neighbors = np.asarray(neighbor_indices[point], dtype=np.int64)
            neighbors = neighbors[keep[neighbors]]
            counts[neighbors] -= 1
            counts[point] = 0
            keep[point] = False

            max_neighbors = counts.max()

        if all_trials:
            results.append(keep)
        elif keep.sum() > results[0].sum():
            results[0] = keep

    return results


def _neighbors_from_matrix(dist: np.ndarray, thin_dist: float) -> List[np.ndarray]:
    close = dist < thin_dist
    np.fill_diagonal(close, False)
    return [np.flatnonzero(row) for row in close]


def _farthest_point_trials(
        dist: np.ndarray,
        thin_dist: float,
        target_points: int,
        trials: int,
        all_trials: bool,
        rng: np.random.Generator,
) -> List[np.ndarray]:
    """
    Select `target_points` points as far apart as possible.

    Every trial starts from a random point and keeps adding the point whose
    distance to the nearest kept point is largest, until the target is
    reached or every remaining point is closer than thin_dist.
    """
    n = dist.shape[0]
    dist = dist.copy()
    np.fill_diagonal(dist, np.inf)

    results: List[np.ndarray] = [] if all_trials else [np.zeros(n, dtype=bool)]

    for _ in range(trials):
        keep = np.zeros(n, dtype=bool)
        kept = [int(rng.integers(n))]
        while len(kept) < target_points:
            closest = dist[:, kept].min(axis=1)
            closest[kept] = 0.0

            farthest = closest.max()
            if farthest < thin_dist:
                break

            candidates = np.flatnonzero(closest == farthest)
            kept.append(int(rng.choice(candidates)))

        keep[kept] = True

        if all_trials:
            results.append(keep)
        elif len(kept) == target_points:
            results[0] = keep
            break
        elif keep.sum() > results[0].sum():
            results[0] = keep

    return results


def brute_force_thinning(
        coordinates,
        thin_dist: float = 10.0,
        trials: int = 10,
        all_trials: bool = False,
        target_points: Optional[int] = None,
        euclidean: bool = False,
        R: float = EARTH_RADIUS_KM,
        seed: SeedLike = None,
) -> List[np.ndarray]:
    """
    Thinning on the full pairwise distance matrix.

    Parameters
    ----------
    coordinates : array-like
        Points of shape (N, 2), lon/lat in degrees (or x/y if euclidean).
    thin_dist : float
        Minimum distance between kept points (km for haversine).
    trials : int
        Number of randomized trials.
    all_trials : bool
        Return every trial instead of only the best one.
    target_points : int or None
        If given, keep exactly this many points (or as many as can be kept
        at least thin_dist apart) instead of maximizing the kept count.
    euclidean : bool
        Use planar distance instead of haversine.
    R : float
        Sphere radius for the haversine distance.
    seed : int, np.random.Generator or None
        Random seed.

    Returns
    -------
    list of np.ndarray
        Boolean masks of length N.
    """
    points = as_coordinates(coordinates)
    thin_dist = check_positive("thin_dist", thin_dist)
    trials = check_trials(trials)
    metric = resolve_metric("euclidean" if euclidean else "haversine", check_positive("R", R))
    if target_points is not None and (
            isinstance(target_points, bool)
            or not isinstance(target_points, (int, np.integer))
            or target_points <= 0):
        raise InvalidArgumentError(f"`target_points` must be a positive integer, got {target_points!r}")

    n = points.shape[0]
    if n == 0:
        return [np.zeros(0, dtype=bool) for _ in range(trials if all_trials else 1)]

    rng = np.random.default_rng(seed)
    dist = metric.matrix(points, points)

    if target_points is None:
        neighbor_indices = _neighbors_from_matrix(dist, thin_dist)
        return max_thinning_algorithm(neighbor_indices, n, trials, all_trials, rng)

    logger.debug("Selecting {} of {} points by farthest-point search", target_points, n)
    return _farthest_point_trials(dist, thin_dist, int(target_points), trials, all_trials, rng)


def _partitioned_neighbors(
        coordinates: np.ndarray,
        cartesian: np.ndarray,
        thin_dist: float,
) -> List[np.ndarray]:
    """Radius queries restricted to each grid cell and its 8 neighbors."""
    n = coordinates.shape[0]
    cells = assign_coords_to_grid(coordinates, thin_dist / KM_PER_DEGREE)

    members: Dict[Tuple[int, int], List[int]] = {}
    for idx, (cx, cy) in enumerate(cells):
        members.setdefault((int(cx), int(cy)), []).append(idx)

    neighbor_indices: List[np.ndarray] = [np.empty(0, dtype=np.int64)] * n
    for (cx, cy), cell_points in members.items():
        around = [
            idx
            for dx in (-1, 0, 1)
            for dy in (-1, 0, 1)
            if (dx, dy) != (0, 0)
            for idx in members.get((cx + dx, cy + dy), ())
        ]
        combined = np.array(cell_points + around, dtype=np.int64)
        tree = cKDTree(cartesian[combined])

        hits = tree.query_ball_point(cartesian[cell_points], r=thin_dist)
        for local_i, idx in enumerate(cell_points):
            local = [j for j in hits[local_i] if j != local_i]
            neighbor_indices[idx] = np.sort(combined[local])

    return neighbor_indices


def kd_tree_thinning(
        coordinates,
        thin_dist: float = 10.0,
        trials: int = 10,
        all_trials: bool = False,
        space_partitioning: bool = False,
        euclidean: bool = False,
        R: float = EARTH_RADIUS_KM,
        seed: SeedLike = None,
) -> List[np.ndarray]:
    """
    Thinning with K-D tree radius queries.

    With space_partitioning=True the points are first attached to a grid of
    cell size thin_dist / 111.32 and every cell only searches its own and its
    8 neighboring cells, which keeps the trees small for large inputs.

    Returns
    -------
    list of np.ndarray
        Boolean masks of length N.
    """
    points = as_coordinates(coordinates)
    thin_dist = check_positive("thin_dist", thin_dist)
    trials = check_trials(trials)
    R = check_positive("R", R)
    if not isinstance(space_partitioning, (bool, np.bool_)):
        raise InvalidArgumentError("`space_partitioning` must be a boolean")

    n = points.shape[0]
    if n == 0:
        return max_thinning_algorithm([], 0, trials, all_trials, seed)

    if euclidean:
        cartesian = points
    else:
        cartesian = long_lat_to_cartesian(points[:, 0], points[:, 1], R)

    if space_partitioning:
        neighbor_indices = _partitioned_neighbors(points, cartesian, thin_dist)
    else:
        tree = cKDTree(cartesian)
        hits = tree.query_ball_point(cartesian, r=thin_dist)
        neighbor_indices = [
            np.array(sorted(j for j in hits[i] if j != i), dtype=np.int64)
            for i in range(n)
        ]

    return max_thinning_algorithm(neighbor_indices, n, trials, all_trials, seed)
