# backend_torch.py
"""
backend_torch.py

PyTorch implementation of grid thinning, so that the per-cell selection can
run on the GPU for large point clouds. The result matches the NumPy version
in thinning.py: the highest-scoring point of every cell is kept, ties go to
the lower point index.
"""

from typing import Literal

import numpy as np

try:
    import torch
except ImportError as e:  # pragma: no cover
    raise ImportError(
        "backend_torch requires PyTorch to be installed. "
        "Install it via `pip install torch`."
    ) from e


def grid_thinning_torch(
        points: np.ndarray,
        resolution: float,
        origin: np.ndarray,
        scores: np.ndarray,
        device: Literal["cpu", "cuda"] = "cpu",
) -> np.ndarray:
    """
    Keep the highest-scoring point of each grid cell, in pure Torch.

    Parameters
    ----------
    points : np.ndarray
        Point cloud of shape (N, 2).
    resolution : float
        Grid step.
    origin : np.ndarray
        Grid origin, shape (2,).
    scores : np.ndarray
        Per-point scores, shape (N,).
    device : {"cpu", "cuda"}
        Torch device.

    Returns
    -------
    np.ndarray
        Boolean mask of shape (N,) on the CPU.
    """
    n = points.shape[0]
    if n == 0:
        return np.zeros(0, dtype=bool)

    points_t = torch.as_tensor(points, dtype=torch.float64, device=device)
    origin_t = torch.as_tensor(origin, dtype=torch.float64, device=device)
    scores_t = torch.as_tensor(scores, dtype=torch.float64, device=device)

    # integer cell indices: (N, 2)
    cell_idx = torch.floor((points_t - origin_t) / resolution).to(torch.int64)

    # best score first; stable so equal scores keep index order
    _, order = torch.sort(scores_t, descending=True, stable=True)
    _, inverse = torch.unique(cell_idx[order], dim=0, return_inverse=True)

    # group by cell id, first entry of every group is the representative
    sorted_inv, perm = torch.sort(inverse, stable=True)
    new_cell = torch.ones_like(sorted_inv, dtype=torch.bool)
    new_cell[1:] = sorted_inv[1:] != sorted_inv[:-1]
    first_indices = order[perm[new_cell]]

    keep = torch.zeros(n, dtype=torch.bool, device=device)
    keep[first_indices] = True
    return keep.detach().cpu().numpy()
