# experiment.py
"""
experiment.py

Two small experiments with the thinning methods:

1) Method comparison on a clustered synthetic lon/lat data set:
   - runs every thinning method with the same thinning distance,
   - reports the number of kept points, the closest kept pair and the
     run time,
   - plots the result of the rounding/hashing method.

2) Restart policy of rounding/hashing thinning:
   - with restart="from_best" every trial starts from the best mask so far,
     so the kept count never changes after the first trial,
   - with restart="from_full" every trial starts from all points and the
     best of several independent trials is returned.

run_experiment() runs both experiments in sequence.
"""

import time

import numpy as np

from distance import haversine_matrix
from plotting import plot_thinned_points
from rounding_hashing import rounding_hashing_thinning
from thin_points import ThinningConfig, thin_points


def generate_clustered_points(
        num_clusters: int = 8,
        points_per_cluster: int = 150,
        spread_deg: float = 0.3,
        seed: int = 0,
) -> np.ndarray:
    """
    Generate lon/lat points grouped around random cluster centers.

    Returns
    -------
    np.ndarray
        Array of shape (num_clusters * points_per_cluster, 2) in degrees.
    """
    rng = np.random.default_rng(seed)
    centers = np.column_stack((
        rng.uniform(-10.0, 10.0, num_clusters),
        rng.uniform(35.0, 45.0, num_clusters),
    ))
    offsets = rng.normal(scale=spread_deg, size=(num_clusters, points_per_cluster, 2))
    return (centers[:, None, :] + offsets).reshape(-1, 2)


def closest_kept_distance(points: np.ndarray, keep: np.ndarray) -> float:
    """Smallest great-circle distance (km) between two kept points."""
    kept = points[keep]
    if kept.shape[0] < 2:
        return float("inf")
    dist = haversine_matrix(kept, kept, 6371.0)
    np.fill_diagonal(dist, np.inf)
    return float(dist.min())


# ---------------------------------------------------------------------
# 1. Method comparison
# ---------------------------------------------------------------------


def run_method_comparison():
    """
    Thin the same data set with every method and compare the results.

    grid and precision thinning do not guarantee a minimum distance, they
    only limit the density to one point per cell.
    """
    print("=" * 80)
    print("Method comparison on clustered lon/lat points")
    print("=" * 80)

    points = generate_clustered_points()
    thin_dist = 10.0  # km
    print(f"Input: {points.shape[0]} points, thinning distance = {thin_dist} km")

    configs = {
        "brute_force": ThinningConfig(method="brute_force", trials=5, seed=42,
                                      params={"thin_dist": thin_dist}),
        "kd_tree": ThinningConfig(method="kd_tree", trials=5, seed=42,
                                  params={"thin_dist": thin_dist}),
        "kd_tree (partitioned)": ThinningConfig(method="kd_tree", trials=5, seed=42,
                                                params={"thin_dist": thin_dist,
                                                        "space_partitioning": True}),
        "round_hash": ThinningConfig(method="round_hash", trials=5, seed=42,
                                     params={"thin_dist": thin_dist}),
        "grid": ThinningConfig(method="grid", trials=5, seed=42,
                               params={"thin_dist": thin_dist}),
        "precision": ThinningConfig(method="precision", trials=5, seed=42,
                                    params={"precision": 1}),
    }

    results = {}
    for name, cfg in configs.items():
        t0 = time.perf_counter()
        keep = thin_points(points, cfg)[0]
        t1 = time.perf_counter()
        results[name] = keep
        print(f"[{name:>22}] kept {int(keep.sum()):5d} points, "
              f"closest kept pair = {closest_kept_distance(points, keep):8.3f} km, "
              f"time = {t1 - t0:.3f} s")

    plot_thinned_points(
        points,
        results["round_hash"],
        title=f"Rounding/hashing thinning, thin_dist = {thin_dist} km",
        save_path=None,
    )


# ---------------------------------------------------------------------
# 2. Restart policy
# ---------------------------------------------------------------------


def run_restart_policy_example():
    """
    Compare the kept counts of every trial under both restart policies.
    """
    print("=" * 80)
    print("Rounding/hashing thinning: restart policy")
    print("=" * 80)

    points = generate_clustered_points(seed=1)
    thin_dist = 10.0
    trials = 10

    for restart in ("from_best", "from_full"):
        masks = rounding_hashing_thinning(
            points,
            thin_dist=thin_dist,
            trials=trials,
            all_trials=True,
            seed=7,
            restart=restart,
        )
        counts = [int(m.sum()) for m in masks]
        print(f"[restart={restart}] kept per trial: {counts}")
        print(f"[restart={restart}] best = {max(counts)}")


# ---------------------------------------------------------------------
# 3. Entry point
# ---------------------------------------------------------------------


def run_experiment():
    run_method_comparison()
    run_restart_policy_example()


if __name__ == "__main__":
    run_experiment()
