"""Tests for rounding/hashing thinning."""

from itertools import combinations

import numpy as np
import pytest

from distance import euclidean, resolve_metric
from errors import DimensionMismatchError, InvalidArgumentError
from grid_index import build_grid_index
from rounding_hashing import rounding_hashing_thinning, run_trial, select_best_trial

PLANAR = resolve_metric("euclidean")


def test_one_point_kept_from_each_close_pair(close_pairs: np.ndarray) -> None:
    for seed in range(5):
        result = rounding_hashing_thinning(
            close_pairs, thin_dist=0.1, trials=1, metric="euclidean", seed=seed
        )
        assert len(result) == 1
        keep = result[0]
        assert keep.dtype == bool
        assert keep.sum() == 2
        assert keep[0] != keep[1]
        assert keep[2] != keep[3]


def test_haversine_close_pairs(close_pairs: np.ndarray) -> None:
    keep = rounding_hashing_thinning(close_pairs, thin_dist=0.1, trials=3, seed=3)[0]
    assert keep.sum() == 2


def test_empty_input() -> None:
    result = rounding_hashing_thinning(np.empty((0, 2)), thin_dist=1.0, trials=4, seed=0)
    assert len(result) == 1
    assert result[0].shape == (0,)

    result = rounding_hashing_thinning([], thin_dist=1.0, trials=4, all_trials=True, seed=0)
    assert len(result) == 4
    assert all(mask.shape == (0,) for mask in result)


@pytest.mark.parametrize("seed", [0, 1, 99])
@pytest.mark.parametrize("trials", [1, 5])
def test_separated_points_are_all_kept(separated_points: np.ndarray, seed: int, trials: int) -> None:
    keep = rounding_hashing_thinning(separated_points, thin_dist=10.0, trials=trials, seed=seed)[0]
    assert keep.all()


def test_all_trials_shape(clustered_points: np.ndarray) -> None:
    masks = rounding_hashing_thinning(
        clustered_points, thin_dist=0.02, trials=6, all_trials=True,
        euclidean=True, cell_size="metric", seed=5,
    )
    assert len(masks) == 6
    for mask in masks:
        assert mask.shape == (clustered_points.shape[0],)
        assert mask.dtype == bool


def test_same_seed_same_output(clustered_points: np.ndarray) -> None:
    kwargs = dict(thin_dist=0.02, trials=5, all_trials=True, euclidean=True,
                  cell_size="metric", restart="from_full", seed=11)
    first = rounding_hashing_thinning(clustered_points, **kwargs)
    second = rounding_hashing_thinning(clustered_points, **kwargs)
    for a, b in zip(first, second):
        np.testing.assert_array_equal(a, b)


def test_first_trial_dominates_with_carry_over(clustered_points: np.ndarray) -> None:
    kwargs = dict(thin_dist=0.02, trials=8, euclidean=True, cell_size="metric", seed=21)
    best = rounding_hashing_thinning(clustered_points, **kwargs)[0]
    every = rounding_hashing_thinning(clustered_points, all_trials=True, **kwargs)

    np.testing.assert_array_equal(best, every[0])
    counts = [int(mask.sum()) for mask in every]
    assert counts == [counts[0]] * len(counts)


def test_from_full_returns_largest_trial(clustered_points: np.ndarray) -> None:
    kwargs = dict(thin_dist=0.02, trials=8, euclidean=True, cell_size="metric",
                  restart="from_full", seed=21)
    best = rounding_hashing_thinning(clustered_points, **kwargs)[0]
    every = rounding_hashing_thinning(clustered_points, all_trials=True, **kwargs)

    counts = [int(mask.sum()) for mask in every]
    assert best.sum() == max(counts)
    np.testing.assert_array_equal(best, every[counts.index(max(counts))])


def test_trial_never_rescues_points(clustered_points: np.ndarray) -> None:
    grid = build_grid_index(clustered_points, 0.02, PLANAR, cell_size="metric")
    start = np.ones(clustered_points.shape[0], dtype=bool)
    start[::7] = False
    start_copy = start.copy()

    first = run_trial(grid, clustered_points, PLANAR, 0.02, start, grid.cell_keys)
    np.testing.assert_array_equal(start, start_copy)
    assert not (first & ~start).any()

    reversed_order = grid.cell_keys[::-1]
    second = run_trial(grid, clustered_points, PLANAR, 0.02, first, reversed_order)
    assert second.sum() <= first.sum()
    assert not (second & ~first).any()


def test_no_self_suppression() -> None:
    single = rounding_hashing_thinning([[3.0, 4.0]], thin_dist=1.0, trials=2, seed=0)[0]
    assert single.tolist() == [True]

    duplicates = rounding_hashing_thinning([[3.0, 4.0]] * 3, thin_dist=1.0, trials=2, seed=0)[0]
    assert duplicates.sum() == 1


def test_antipodal_pair_in_one_window() -> None:
    pair = [[0.0, -87.5], [-180.0, 87.5]]  # about pi * R apart
    both = rounding_hashing_thinning(pair, thin_dist=20000.0, trials=1, seed=0)[0]
    assert both.tolist() == [True, True]

    one = rounding_hashing_thinning(pair, thin_dist=20100.0, trials=1, seed=0)[0]
    assert one.sum() == 1


def test_survivors_in_same_window_are_far_apart(clustered_points: np.ndarray) -> None:
    thin_dist = 0.02
    grid = build_grid_index(clustered_points, thin_dist, PLANAR, cell_size="metric")
    keep = select_best_trial(clustered_points, thin_dist, 3, PLANAR, seed=8, cell_size="metric")[0]

    kept = np.flatnonzero(keep)
    assert 1 < kept.size < clustered_points.shape[0]
    for i, j in combinations(kept, 2):
        ki = grid.cell_key(*clustered_points[i])
        kj = grid.cell_key(*clustered_points[j])
        if abs(ki[0] - kj[0]) <= 1 and abs(ki[1] - kj[1]) <= 1:
            assert euclidean(*clustered_points[i], *clustered_points[j]) > thin_dist


def test_cell_size_modes_for_planar_points() -> None:
    line = np.column_stack((np.arange(0.0, 2.5, 0.5), np.zeros(5)))

    legacy = rounding_hashing_thinning(line, thin_dist=1.0, trials=1, euclidean=True, seed=0)[0]
    # cells are 1 / 111.32 wide, so no neighbor is ever inside the 3x3 window
    assert legacy.all()

    metric = rounding_hashing_thinning(
        line, thin_dist=1.0, trials=1, euclidean=True, cell_size="metric", seed=0
    )[0]
    kept = line[metric, 0]
    assert 1 <= kept.size <= 2
    assert all(abs(a - b) > 1.0 for a, b in combinations(kept, 2))


@pytest.mark.parametrize(
    "kwargs",
    [
        {"thin_dist": 0.0},
        {"thin_dist": -1.0},
        {"trials": 0},
        {"trials": 1.5},
        {"trials": True},
        {"R": 0.0},
        {"metric": "manhattan"},
        {"restart": "sometimes"},
        {"cell_size": "tiny"},
    ],
)
def test_invalid_arguments(close_pairs: np.ndarray, kwargs: dict) -> None:
    with pytest.raises(InvalidArgumentError):
        rounding_hashing_thinning(close_pairs, **kwargs)


@pytest.mark.parametrize("coords", [[1.0, 2.0, 3.0], [[1.0, 2.0, 3.0]], np.zeros((2, 2, 2))])
def test_bad_coordinate_shape(coords) -> None:
    with pytest.raises(DimensionMismatchError):
        rounding_hashing_thinning(coords, thin_dist=1.0)
