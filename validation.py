# validation.py
"""
validation.py

Argument checks shared by all thinning methods. They run before any index or
distance matrix is built.
"""

from typing import Optional, Union

import numpy as np

from errors import DimensionMismatchError, InvalidArgumentError

SeedLike = Union[int, np.random.Generator, None]


def as_coordinates(coordinates) -> np.ndarray:
    """
    Convert an array-like to a float array of shape (N, 2).

    An empty sequence is accepted and becomes an array of shape (0, 2).
    """
    points = np.asarray(coordinates, dtype=float)
    if points.size == 0:
        return points.reshape(0, 2)
    if points.ndim != 2 or points.shape[1] != 2:
        raise DimensionMismatchError(
            f"Coordinates must have shape (N, 2), got {points.shape}"
        )
    return points


def check_positive(name: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float, np.integer, np.floating)):
        raise InvalidArgumentError(f"`{name}` must be a positive number, got {value!r}")
    if not value > 0:
        raise InvalidArgumentError(f"`{name}` must be a positive number, got {value}")
    return float(value)


def check_trials(trials) -> int:
    if isinstance(trials, bool) or not isinstance(trials, (int, np.integer)) or trials <= 0:
        raise InvalidArgumentError(f"`trials` must be a positive integer, got {trials!r}")
    return int(trials)


def check_priority(priority, n: int) -> Optional[np.ndarray]:
    if priority is None:
        return None
    values = np.asarray(priority, dtype=float)
    if values.ndim != 1 or values.shape[0] != n:
        raise InvalidArgumentError(
            "`priority` must be a numeric vector with the same length as the number of points"
        )
    return values
