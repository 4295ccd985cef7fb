# python/hairforge/spline.py
# Catmull-Rom spline -> cubic Bezier conversion for hair strands
# Exists to turn each strand's control polygon into renderer curve segments
# RELEVANT FILES: python/hairforge/convert.py, python/hairforge/lod.py, tests/test_spline.py

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .config import ConversionConfig
from .cyhair import Strand
from .geometry import as_points

# Rows are the four Bezier control points, columns the four spline points
# P0..P3 of the neighborhood. Each row sums to one.
CATMULL_ROM_TO_BEZIER = np.array(
    [
        [0.0, 6.0, 0.0, 0.0],
        [-1.0, 6.0, 1.0, 0.0],
        [0.0, 1.0, 6.0, -1.0],
        [0.0, 0.0, 6.0, 0.0],
    ],
    dtype=np.float64,
) / 6.0

# First segment: P0 is a zero phantom before the root, one-sided tangent.
CATMULL_ROM_TO_BEZIER_START = np.array(
    [
        [0.0, 6.0, 0.0, 0.0],
        [0.0, 3.0, 4.0, -1.0],
        [0.0, 1.0, 6.0, -1.0],
        [0.0, 0.0, 6.0, 0.0],
    ],
    dtype=np.float64,
) / 6.0

# Last segment: P3 is a zero phantom after the tip.
CATMULL_ROM_TO_BEZIER_END = np.array(
    [
        [0.0, 6.0, 0.0, 0.0],
        [-1.0, 6.0, 1.0, 0.0],
        [-1.0, 4.0, 3.0, 0.0],
        [0.0, 0.0, 6.0, 0.0],
    ],
    dtype=np.float64,
) / 6.0

_ZERO = np.zeros(3, dtype=np.float64)


@dataclass
class BezierCurve:
    """Four cubic Bezier control points and one radius per control point."""

    points: np.ndarray  # (4, 3) float32
    radii: np.ndarray  # (4,) float32

    @property
    def width0(self) -> float:
        return float(self.radii[0])

    @property
    def width1(self) -> float:
        return float(self.radii[3])


def segment_matrix(point_count: int, seg_idx: int) -> Optional[np.ndarray]:
    """Basis-change matrix used for ``seg_idx`` of a polygon with ``point_count`` points.

    Returns ``None`` for the two-point polygon, which is a straight segment.
    """
    if point_count == 2:
        return None
    if seg_idx == 0:
        return CATMULL_ROM_TO_BEZIER_START
    if seg_idx == point_count - 2:
        return CATMULL_ROM_TO_BEZIER_END
    return CATMULL_ROM_TO_BEZIER


def catmull_rom_to_bezier(points: np.ndarray, seg_idx: int) -> np.ndarray:
    """Convert one Catmull-Rom segment to four Bezier control points.

    Parameters
    ----------
    points : np.ndarray
        (m, 3) spline control polygon, ``m >= 2``.
    seg_idx : int
        Segment between ``points[seg_idx]`` and ``points[seg_idx + 1]``.

    Returns
    -------
    np.ndarray
        (4, 3) float32 control points starting at ``points[seg_idx]`` and
        ending at ``points[seg_idx + 1]``.
    """
    cps = np.asarray(points, dtype=np.float64)
    m = cps.shape[0]
    if m < 2:
        raise ValueError(f"spline needs at least 2 points, got {m}")
    if not 0 <= seg_idx < m - 1:
        raise ValueError(f"segment index {seg_idx} out of range for {m} points")

    if m == 2:
        p0, p1 = cps[0], cps[1]
        q = np.stack([p0, p0 * (2.0 / 3.0) + p1 * (1.0 / 3.0), p0 * (1.0 / 3.0) + p1 * (2.0 / 3.0), p1])
        return q.astype(np.float32)

    mat = segment_matrix(m, seg_idx)
    if mat is CATMULL_ROM_TO_BEZIER_START:
        neighborhood = np.stack([_ZERO, cps[0], cps[1], cps[2]])
    elif mat is CATMULL_ROM_TO_BEZIER_END:
        neighborhood = np.stack([cps[seg_idx - 1], cps[seg_idx], cps[seg_idx + 1], _ZERO])
    else:
        neighborhood = cps[seg_idx - 1:seg_idx + 3]
    return (mat @ neighborhood).astype(np.float32)


def control_polygon(points: np.ndarray) -> np.ndarray:
    """Control polygon actually converted for a strand.

    The polygon starts at the root and drops the last two vertices, so ``n``
    points leave ``p0 .. p(n-3)``. A two-point strand is kept whole and
    becomes a single straight segment.
    """
    n = points.shape[0]
    if n == 2:
        return points
    if n < 4:
        return points[:0]
    return points[:-2]


def strand_curve_count(point_count: int) -> int:
    if point_count == 2:
        return 1
    return max(point_count - 3, 0)


def _curve_radii(
    strand: Strand,
    seg_idx: int,
    config: ConversionConfig,
    default_thickness: float,
) -> np.ndarray:
    if config.thickness > 0:
        return np.full(4, config.thickness, dtype=np.float32)
    if config.use_point_thickness and strand.thickness is not None:
        # Curve seg_idx spans strand vertices seg_idx and seg_idx + 1.
        t0 = float(strand.thickness[seg_idx])
        t1 = float(strand.thickness[seg_idx + 1])
        return np.array(
            [t0, t0 * (2.0 / 3.0) + t1 * (1.0 / 3.0), t0 * (1.0 / 3.0) + t1 * (2.0 / 3.0), t1],
            dtype=np.float32,
        )
    return np.full(4, default_thickness, dtype=np.float32)


def swap_axes(points: np.ndarray, config: ConversionConfig) -> np.ndarray:
    pts = as_points(points, "strand points")
    if config.swap_yz:
        # Zup -> Yup
        return pts[:, [0, 2, 1]]
    return pts


def scale_translate(q: np.ndarray, config: ConversionConfig) -> np.ndarray:
    """``scale * q + translate`` per axis, applied to every control point."""
    scale = np.asarray(config.vertex_scale, dtype=np.float32)
    translate = np.asarray(config.vertex_translate, dtype=np.float32)
    return (scale * q + translate).astype(np.float32)


def convert_strand(
    strand: Strand,
    config: ConversionConfig,
    default_thickness: float,
) -> List[BezierCurve]:
    """Convert one strand to its Bezier curves.

    A strand with fewer than two points produces no curves.
    """
    if strand.point_count < 2:
        return []

    polygon = control_polygon(swap_axes(strand.points, config))
    curves: List[BezierCurve] = []
    for seg_idx in range(strand_curve_count(strand.point_count)):
        q = scale_translate(catmull_rom_to_bezier(polygon, seg_idx), config)
        curves.append(BezierCurve(points=q, radii=_curve_radii(strand, seg_idx, config, default_thickness)))
    return curves


def stack_curves(curves: Sequence[BezierCurve]) -> Tuple[np.ndarray, np.ndarray]:
    """Flatten curves into ``(4k, 3)`` control points and ``(4k,)`` radii."""
    if not curves:
        return np.zeros((0, 3), dtype=np.float32), np.zeros(0, dtype=np.float32)
    cps = np.concatenate([c.points for c in curves], axis=0)
    radii = np.concatenate([c.radii for c in curves], axis=0)
    return cps.astype(np.float32), radii.astype(np.float32)
