"""Level-of-detail merging of hair strands.

Strands are consumed greedily: each group is built around a pivot hair (the
one whose root lies lowest along the longest axis of the remaining roots),
collects the hairs whose roots lie within ``2 * max_radius`` of the pivot
root, and collapses them into one averaged curve whose per-point radius
covers the spread of the group, capped at ``max_radius``.

Usage:
    import numpy as np
    from hairforge.lod import Hair, merge_hairs

    combined = merge_hairs(hairs, max_radius=2.0, thickness=0.1,
                           rng=np.random.default_rng(7))
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import reduce
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np

from .geometry import Bounds3, distance, distances
from .spline import BezierCurve, stack_curves

logger = logging.getLogger(__name__)

DEFAULT_MAX_RADIUS = 2.0
DEFAULT_SEED = 0
# Control-point indices compared per hair by the "sample" metric.
MAX_SAMPLES = 2

METRICS = ("sample", "root", "endpoints")


@dataclass
class Hair:
    """All Bezier control points of one strand, flattened in curve order."""

    strand_index: int
    cps: np.ndarray  # (4k, 3) float32
    radii: np.ndarray  # (4k,) float32

    def __post_init__(self) -> None:
        if self.cps.shape[0] != self.radii.shape[0]:
            raise ValueError("cps and radii must have the same length")
        if self.cps.shape[0] % 4 != 0:
            raise ValueError("a hair must hold whole 4-point Bezier groups")

    @classmethod
    def from_curves(cls, strand_index: int, curves: Sequence[BezierCurve]) -> "Hair":
        cps, radii = stack_curves(curves)
        return cls(strand_index=strand_index, cps=cps, radii=radii)

    @property
    def size(self) -> int:
        return int(self.cps.shape[0])

    @property
    def root(self) -> np.ndarray:
        return self.cps[0]

    @property
    def tip(self) -> np.ndarray:
        return self.cps[-1]

    @property
    def bounds(self) -> Bounds3:
        return Bounds3.from_points(self.cps)


@dataclass
class CombinedHair:
    """Averaged representative of a group of hairs."""

    cps: np.ndarray  # (4k, 3) float32
    radii: np.ndarray  # (4k,) float32
    members: Tuple[int, ...]  # source strand indices, pivot first

    @property
    def size(self) -> int:
        return int(self.cps.shape[0])

    @property
    def curve_count(self) -> int:
        return self.size // 4


@dataclass(frozen=True)
class PointAccumulator:
    """Per-index running sum, addition count and spread around a reference hair."""

    total: np.ndarray  # (N, 3) float64
    count: np.ndarray  # (N,) int64
    spread: np.ndarray  # (N,) float64, max distance to the reference
    reference: np.ndarray  # (N, 3) control points of the first admitted hair

    @classmethod
    def empty(cls, reference: np.ndarray) -> "PointAccumulator":
        n = reference.shape[0]
        return cls(
            total=np.zeros((n, 3), dtype=np.float64),
            count=np.zeros(n, dtype=np.int64),
            spread=np.zeros(n, dtype=np.float64),
            reference=np.asarray(reference, dtype=np.float64),
        )

    def add(self, hair: Hair) -> "PointAccumulator":
        n = min(hair.size, self.total.shape[0])
        pts = np.asarray(hair.cps[:n], dtype=np.float64)
        total = self.total.copy()
        count = self.count.copy()
        spread = self.spread.copy()
        total[:n] += pts
        count[:n] += 1
        spread[:n] = np.maximum(spread[:n], distances(pts, self.reference[:n]))
        return PointAccumulator(total=total, count=count, spread=spread, reference=self.reference)

    def mean(self) -> np.ndarray:
        return self.total / np.maximum(self.count, 1)[:, None]

    def radii(self, thickness: float, max_radius: float) -> np.ndarray:
        return np.minimum(np.maximum(thickness, self.spread), max_radius)


def _metric_key(
    metric: str,
    pivot: Hair,
    rng: np.random.Generator,
) -> Callable[[Hair], float]:
    if metric == "root":
        return lambda h: distance(h.root, pivot.root)
    if metric == "endpoints":
        return lambda h: distance(h.root, pivot.root) + distance(h.tip, pivot.tip)
    if metric != "sample":
        raise ValueError(f"Unknown LOD metric: {metric!r}")

    # One draw per group; each hair maps it onto the indices it shares with the pivot.
    samples = rng.random(MAX_SAMPLES)

    def sample_distance(h: Hair) -> float:
        m = min(h.size, pivot.size)
        n = min(m // 4, MAX_SAMPLES)
        if n == 0:
            return 0.0
        idx = np.minimum((samples[:n] * m).astype(np.int64), m - 1)
        return float(np.sum(distances(h.cps[idx], pivot.cps[idx])))

    return sample_distance


def combine_group(hairs: Sequence[Hair], thickness: float, max_radius: float) -> CombinedHair:
    """Average ``hairs`` index by index; the first hair sets length and radius reference."""
    if not hairs:
        raise ValueError("cannot combine an empty group")
    acc = reduce(PointAccumulator.add, hairs, PointAccumulator.empty(hairs[0].cps))
    return CombinedHair(
        cps=acc.mean().astype(np.float32),
        radii=acc.radii(thickness, max_radius).astype(np.float32),
        members=tuple(h.strand_index for h in hairs),
    )


def merge_hairs(
    hairs: Sequence[Hair],
    max_radius: float = DEFAULT_MAX_RADIUS,
    thickness: float = 0.01,
    rng: Optional[np.random.Generator] = None,
    metric: str = "sample",
) -> List[CombinedHair]:
    """Greedily cluster hairs into averaged representatives.

    Parameters
    ----------
    hairs : Sequence[Hair]
        Hairs in strand order. Hairs without control points are ignored.
    max_radius : float
        Cap on every output radius; roots closer than ``2 * max_radius`` to
        the pivot root may join its group.
    thickness : float
        Initial radius of every combined control point.
    rng : np.random.Generator, optional
        Source of the sample positions for the ``sample`` metric. Defaults to
        a generator seeded with ``DEFAULT_SEED``.
    metric : str
        Ordering of candidates around the pivot: ``sample``, ``root`` or
        ``endpoints``.

    Returns
    -------
    List[CombinedHair]
        One entry per group; every input hair belongs to exactly one group.
    """
    if max_radius <= 0:
        raise ValueError("max_radius must be positive")
    if rng is None:
        rng = np.random.default_rng(DEFAULT_SEED)
    max_distance = 2.0 * max_radius

    pending = [h for h in hairs if h.size > 0]
    logger.info(f"begin LOD with {len(pending)} hairs")

    combined: List[CombinedHair] = []
    while pending:
        roots = np.stack([h.root for h in pending])
        axis = Bounds3.from_points(roots).maximum_extent()
        pivot_pos = int(np.argmin(roots[:, axis]))
        pivot = pending[pivot_pos]

        rest = pending[:pivot_pos] + pending[pivot_pos + 1:]
        rest.sort(key=_metric_key(metric, pivot, rng))
        ordered = [pivot] + rest

        walked = 1
        while walked < len(ordered) and distance(pivot.root, ordered[walked].root) < max_distance:
            walked += 1

        admitted = [h for h in ordered[:walked] if h.size >= pivot.size]
        admitted.sort(key=lambda h: h.size)
        left_behind = [h for h in ordered[:walked] if h.size < pivot.size]

        combined.append(combine_group(admitted, thickness, max_radius))
        pending = left_behind + ordered[walked:]

    logger.info(f"end LOD, combined hair to {len(combined)} hairs")
    return combined


def flatten_combined(combined: Sequence[CombinedHair]) -> Tuple[np.ndarray, np.ndarray]:
    """Concatenate combined hairs into ``(4m, 3)`` vertices and ``(4m,)`` radii."""
    if not combined:
        return np.zeros((0, 3), dtype=np.float32), np.zeros(0, dtype=np.float32)
    cps = np.concatenate([c.cps for c in combined], axis=0).astype(np.float32)
    radii = np.concatenate([c.radii for c in combined], axis=0).astype(np.float32)
    return cps, radii
