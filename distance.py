# distance.py
"""
distance.py

Distance models used by the thinning methods:

1. Great-circle (haversine) distance between lon/lat points given in degrees.
   The result is in the same linear units as the sphere radius R.

2. Planar (Euclidean) distance in the native coordinate units.

Scalar functions are used by the grid-based trial loop; the *_matrix variants
compute full pairwise matrices by broadcasting and are used by brute-force
thinning.
"""

import math
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, Literal

import numpy as np

from errors import InvalidArgumentError

MetricName = Literal["haversine", "euclidean"]

EARTH_RADIUS_KM = 6371.0


def haversine(lon1: float, lat1: float, lon2: float, lat2: float, R: float) -> float:
    """
    Great-circle distance between (lon1, lat1) and (lon2, lat2) in degrees.

    Parameters
    ----------
    lon1, lat1, lon2, lat2 : float
        Coordinates in degrees.
    R : float
        Sphere radius; the result has the same units.

    Returns
    -------
    float
        Distance along the sphere surface.
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (math.sin(d_lat / 2.0) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2))
         * math.sin(d_lon / 2.0) ** 2)
    # rounding can push a slightly above 1 for antipodal points
    a = min(max(a, 0.0), 1.0)
    c = 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))
    return R * c


def euclidean(x1: float, y1: float, x2: float, y2: float) -> float:
    """Straight-line distance in native coordinate units."""
    return math.sqrt((x2 - x1) ** 2 + (y2 - y1) ** 2)


@dataclass(frozen=True)
class DistanceMetric:
    """
    One of the two supported distance models, resolved once per call.

    `radius` is only meaningful for the haversine variant. `scalar` is the
    point-pair distance function bound at construction, so hot loops call it
    without re-dispatching on `kind`.
    """
    kind: MetricName
    radius: float = EARTH_RADIUS_KM
    scalar: Callable[[float, float, float, float], float] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self):
        if self.kind == "haversine":
            fn = partial(haversine, R=self.radius)
        else:
            fn = euclidean
        object.__setattr__(self, "scalar", fn)

    @property
    def is_geographic(self) -> bool:
        return self.kind == "haversine"

    def distance(self, x1: float, y1: float, x2: float, y2: float) -> float:
        return self.scalar(x1, y1, x2, y2)

    def matrix(self, a: np.ndarray, b: np.ndarray) -> np.ndarray:
        if self.kind == "haversine":
            return haversine_matrix(a, b, self.radius)
        return euclidean_matrix(a, b)


def resolve_metric(name: str, R: float = EARTH_RADIUS_KM) -> DistanceMetric:
    """
    Map a metric name onto a DistanceMetric.

    Unknown names are rejected instead of falling back to the planar model,
    so a typo like "haversin" does not silently change the result.
    """
    if name not in ("haversine", "euclidean"):
        raise InvalidArgumentError(
            f"Unknown distance metric: {name!r} (expected 'haversine' or 'euclidean')"
        )
    if name == "haversine" and not R > 0:
        raise InvalidArgumentError(f"Sphere radius R must be positive, got {R}")
    return DistanceMetric(kind=name, radius=float(R))


def haversine_matrix(a: np.ndarray, b: np.ndarray, R: float) -> np.ndarray:
    """
    Pairwise great-circle distances.

    Parameters
    ----------
    a, b : np.ndarray
        Lon/lat arrays in degrees, shapes (Na, 2) and (Nb, 2).
    R : float
        Sphere radius.

    Returns
    -------
    np.ndarray
        Distance matrix of shape (Na, Nb).
    """
    a_rad = np.radians(a)
    b_rad = np.radians(b)
    lon1 = a_rad[:, None, 0]  # (Na, 1)
    lat1 = a_rad[:, None, 1]
    lon2 = b_rad[None, :, 0]  # (1, Nb)
    lat2 = b_rad[None, :, 1]

    h = (np.sin((lat2 - lat1) / 2.0) ** 2
         + np.cos(lat1) * np.cos(lat2) * np.sin((lon2 - lon1) / 2.0) ** 2)
    # rounding can push h slightly above 1 for antipodal points
    h = np.clip(h, 0.0, 1.0)
    return R * 2.0 * np.arctan2(np.sqrt(h), np.sqrt(1.0 - h))


def euclidean_matrix(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Pairwise planar distances, shape (Na, Nb)."""
    diff = a[:, None, :] - b[None, :, :]  # (Na, Nb, 2)
    return np.linalg.norm(diff, axis=-1)


def long_lat_to_cartesian(lon: np.ndarray, lat: np.ndarray, R: float = EARTH_RADIUS_KM) -> np.ndarray:
    """
    Convert lon/lat in degrees to Cartesian (x, y, z) on a sphere of radius R.

    Straight-line distances between the converted points are chord lengths,
    which is what the K-D tree search compares against the thinning distance.
    """
    lon_rad = np.radians(np.asarray(lon, dtype=float))
    lat_rad = np.radians(np.asarray(lat, dtype=float))
    x = R * np.cos(lat_rad) * np.cos(lon_rad)
    y = R * np.cos(lat_rad) * np.sin(lon_rad)
    z = R * np.sin(lat_rad)
    return np.stack((x, y, z), axis=-1)
