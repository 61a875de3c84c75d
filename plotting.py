# plotting.py
"""
plotting.py

Visualization utilities: show which points of a cloud were kept and which
were removed by a thinning run, with the thinning distance as a reference
circle around every kept point.
"""

from typing import Optional

import numpy as np
import matplotlib.pyplot as plt


def plot_thinned_points(
    points: np.ndarray,
    keep: np.ndarray,
    thin_dist: Optional[float] = None,
    title: str = "Thinned points",
    save_path: Optional[str] = None,
) -> None:
    """
    Scatter plot of kept vs removed points.

    Parameters
    ----------
    points : np.ndarray
        Point cloud, shape (N, 2).
    keep : np.ndarray
        Boolean mask of shape (N,) returned by a thinning method.
    thin_dist : float or None
        If given, draw a circle of this radius (in plot units) around every
        kept point. Only meaningful for planar coordinates.
    title : str
        Plot title.
    save_path : str or None
        If given, save the figure to this path. Otherwise, just show it.
    """
    fig, ax = plt.subplots(figsize=(6, 6))
    ax.set_aspect("equal", adjustable="box")

    removed = points[~keep]
    kept = points[keep]

    if removed.size > 0:
        ax.scatter(removed[:, 0], removed[:, 1], s=8, alpha=0.3, color="tab:gray",
                   label=f"Removed ({removed.shape[0]})")
    if kept.size > 0:
        ax.scatter(kept[:, 0], kept[:, 1], s=14, color="tab:blue",
                   label=f"Kept ({kept.shape[0]})")

    if thin_dist is not None:
        for x, y in kept:
            ax.add_patch(plt.Circle((x, y), thin_dist, fill=False, lw=0.5, color="tab:blue", alpha=0.4))

    ax.set_xlabel("x / longitude")
    ax.set_ylabel("y / latitude")
    ax.set_title(title)
    ax.grid(True)
    ax.legend(loc="best")

    if save_path is not None:
        fig.savefig(save_path, bbox_inches="tight", dpi=150)
    else:
        plt.show()
