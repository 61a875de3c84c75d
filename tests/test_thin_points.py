"""Tests for the thin_points dispatcher."""

import numpy as np
import pytest

from errors import DimensionMismatchError, InvalidArgumentError
from rounding_hashing import rounding_hashing_thinning
from thin_points import THINNING_METHODS, ThinningConfig, thin_points


@pytest.mark.parametrize("method", ["brute_force", "kd_tree", "round_hash"])
def test_distance_methods_on_close_pairs(close_pairs: np.ndarray, method: str) -> None:
    cfg = ThinningConfig(method=method, trials=3, seed=1, params={"thin_dist": 0.1})
    result = thin_points(close_pairs, cfg)
    assert len(result) == 1
    keep = result[0]
    assert keep.sum() == 2
    assert keep[0] != keep[1]
    assert keep[2] != keep[3]


def test_all_trials(close_pairs: np.ndarray) -> None:
    cfg = ThinningConfig(method="grid", trials=3, all_trials=True, seed=0,
                         params={"resolution": 0.01})
    masks = thin_points(close_pairs, cfg)
    assert len(masks) == 3
    assert all(mask.shape == (4,) and mask.sum() == 2 for mask in masks)


def test_precision_method(close_pairs: np.ndarray) -> None:
    cfg = ThinningConfig(method="precision", seed=0, params={"precision": 2})
    assert thin_points(close_pairs, cfg)[0].sum() == 2


def test_seeded_round_hash_matches_direct_call(close_pairs: np.ndarray) -> None:
    cfg = ThinningConfig(method="round_hash", trials=2, all_trials=True, seed=17,
                         params={"thin_dist": 0.1, "euclidean": True})
    via_dispatcher = thin_points(close_pairs, cfg)
    direct = rounding_hashing_thinning(close_pairs, thin_dist=0.1, trials=2, all_trials=True,
                                       euclidean=True, seed=np.random.default_rng(17))
    for a, b in zip(via_dispatcher, direct):
        np.testing.assert_array_equal(a, b)


def test_same_seed_same_result() -> None:
    rng = np.random.default_rng(8)
    points = rng.uniform(0.0, 1.0, size=(100, 2))
    cfg = ThinningConfig(method="kd_tree", trials=4, all_trials=True, seed=3,
                         params={"thin_dist": 0.1, "euclidean": True})
    for a, b in zip(thin_points(points, cfg), thin_points(points, cfg)):
        np.testing.assert_array_equal(a, b)


def test_groups_are_thinned_independently() -> None:
    points = np.array([[0.0, 0.0], [0.0, 0.0001], [0.0, 0.0], [0.0, 0.0001]])
    groups = np.array(["a", "a", "b", "b"])
    cfg = ThinningConfig(method="brute_force", trials=2, seed=0, params={"thin_dist": 1.0})

    keep = thin_points(points, cfg, groups=groups)[0]
    assert keep.sum() == 2
    assert keep[0] != keep[1]
    assert keep[2] != keep[3]

    assert thin_points(points, cfg)[0].sum() == 1


def test_target_points_uses_brute_force() -> None:
    line = np.column_stack((np.arange(6.0), np.zeros(6)))
    cfg = ThinningConfig(method="grid", target_points=2, seed=0,
                         params={"thin_dist": 1.0, "euclidean": True})
    assert thin_points(line, cfg)[0].sum() == 2


def test_empty_input() -> None:
    for method in THINNING_METHODS:
        params = {"precision": 2} if method == "precision" else {"thin_dist": 1.0}
        cfg = ThinningConfig(method=method, trials=2, seed=0, params=params)
        result = thin_points(np.empty((0, 2)), cfg)
        assert len(result) == 1
        assert result[0].shape == (0,)


def test_verbose_run(close_pairs: np.ndarray) -> None:
    cfg = ThinningConfig(method="round_hash", verbose=True, seed=0, params={"thin_dist": 0.1})
    assert thin_points(close_pairs, cfg, groups=[1, 1, 2, 2])[0].sum() == 2


def test_invalid_config(close_pairs: np.ndarray) -> None:
    with pytest.raises(InvalidArgumentError):
        thin_points(close_pairs, ThinningConfig(method="r_tree"))
    with pytest.raises(InvalidArgumentError):
        thin_points(close_pairs, ThinningConfig(trials=0))
    with pytest.raises(InvalidArgumentError):
        thin_points(close_pairs, ThinningConfig(all_trials="yes"))


def test_groups_length_mismatch(close_pairs: np.ndarray) -> None:
    with pytest.raises(DimensionMismatchError):
        thin_points(close_pairs, ThinningConfig(params={"thin_dist": 1.0}), groups=[1, 2])
