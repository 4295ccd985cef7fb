# python/hairforge/geometry.py
# Vector and bounding-box helpers shared by the spline converter and LOD merger
# Points are numpy float32 arrays of shape (3,) or (N, 3)
# RELEVANT FILES: python/hairforge/spline.py, python/hairforge/lod.py, tests/test_geometry.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Tuple

import numpy as np

_FLT_MAX = float(np.finfo(np.float32).max)


def as_points(array, label: str = "points") -> np.ndarray:
    """Return ``array`` as a contiguous (N, 3) float32 array."""
    arr = np.asarray(array, dtype=np.float32)
    if arr.ndim == 1 and arr.size % 3 == 0:
        arr = arr.reshape(-1, 3)
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise ValueError(f"{label} must have shape (N, 3), got {arr.shape}")
    return np.ascontiguousarray(arr)


def distance(p0: np.ndarray, p1: np.ndarray) -> float:
    """Euclidean distance between two points."""
    d = np.asarray(p1, dtype=np.float64) - np.asarray(p0, dtype=np.float64)
    return float(np.sqrt(np.dot(d, d)))


def distances(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Row-wise Euclidean distances between two (N, 3) arrays."""
    d = np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)
    return np.sqrt(np.einsum("ij,ij->i", d, d))


@dataclass
class Bounds3:
    """Axis-aligned bounding box.

    A default-constructed box is empty (min at +FLT_MAX, max at -FLT_MAX) so
    the first union adopts the point unchanged.
    """

    min: np.ndarray = field(default_factory=lambda: np.full(3, _FLT_MAX, dtype=np.float64))
    max: np.ndarray = field(default_factory=lambda: np.full(3, -_FLT_MAX, dtype=np.float64))

    @classmethod
    def from_points(cls, points: Iterable) -> "Bounds3":
        arr = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if arr.shape[0] == 0:
            return cls()
        return cls(min=arr.min(axis=0), max=arr.max(axis=0))

    @property
    def is_empty(self) -> bool:
        return bool(np.any(self.min > self.max))

    def union(self, other) -> "Bounds3":
        """Return the box enclosing this box and a point or another box."""
        if isinstance(other, Bounds3):
            return Bounds3(min=np.minimum(self.min, other.min), max=np.maximum(self.max, other.max))
        p = np.asarray(other, dtype=np.float64).reshape(3)
        return Bounds3(min=np.minimum(self.min, p), max=np.maximum(self.max, p))

    def extent(self) -> np.ndarray:
        return self.max - self.min

    def maximum_extent(self) -> int:
        """Index of the longest axis; x wins only if strictly longest, then y over z."""
        d = self.extent()
        if d[0] > d[1] and d[0] > d[2]:
            return 0
        if d[1] > d[2]:
            return 1
        return 2

    def as_tuples(self) -> Tuple[Tuple[float, float, float], Tuple[float, float, float]]:
        return (
            (float(self.min[0]), float(self.min[1]), float(self.min[2])),
            (float(self.max[0]), float(self.max[1]), float(self.max[2])),
        )
