# python/hairforge/convert.py
# CyHair strands -> flat cubic Bezier vertex/radius buffers, with optional LOD merge
# RELEVANT FILES: python/hairforge/spline.py, python/hairforge/lod.py, python/hairforge/pbrt.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from .config import ConfigSource, ConversionConfig, load_config
from .cyhair import HairFile
from .errors import EmptyInputError
from .lod import CombinedHair, Hair, flatten_combined, merge_hairs
from .spline import BezierCurve, convert_strand, stack_curves

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 1000


@dataclass
class CurveBuffers:
    """Cubic Bezier curves ready for emission.

    ``vertices`` holds four control points per curve and ``radii`` one
    radius per control point; only the first and last radius of each curve
    are written out as widths.
    """

    vertices: np.ndarray  # (4m, 3) float32
    radii: np.ndarray  # (4m,) float32
    combined: Optional[List[CombinedHair]] = None

    @property
    def curve_count(self) -> int:
        return int(self.radii.shape[0] // 4)

    def curve(self, i: int) -> BezierCurve:
        return BezierCurve(points=self.vertices[4 * i:4 * i + 4], radii=self.radii[4 * i:4 * i + 4])


def strand_limit(num_strands: int, max_strands: Optional[int]) -> int:
    """Number of leading strands to convert; negative or ``None`` means all."""
    if max_strands is None or max_strands < 0:
        return num_strands
    return min(max_strands, num_strands)


def to_cubic_bezier_curves(hair: HairFile, config: ConfigSource = None) -> CurveBuffers:
    """Convert the strands of ``hair`` to cubic Bezier curves.

    Raises
    ------
    EmptyInputError
        The file holds no points or no strands.
    """
    cfg = config if isinstance(config, ConversionConfig) else load_config(config)
    if hair.points.size == 0 or len(hair.strands) == 0:
        raise EmptyInputError("no points or strands to convert", filename=hair.filename)

    num_strands = strand_limit(len(hair.strands), cfg.max_strands)
    logger.info(f"[Hair] Convert first {num_strands} strands from {hair.num_strands} strands in the input hair data.")

    default_thickness = hair.default_thickness
    per_strand: List[List[BezierCurve]] = []
    for strand in hair.strands[:num_strands]:
        if strand.index % PROGRESS_INTERVAL == 0:
            logger.debug(f"{strand.index} / {hair.num_strands}")
        per_strand.append(convert_strand(strand, cfg, default_thickness))

    if not cfg.lod_enabled:
        vertices, radii = stack_curves([c for curves in per_strand for c in curves])
        return CurveBuffers(vertices=vertices, radii=radii)

    if cfg.use_point_thickness:
        logger.warning("per-point thickness is ignored by the LOD merge; combined radii start from a single thickness")
    hairs = [Hair.from_curves(i, curves) for i, curves in enumerate(per_strand)]
    thickness = cfg.thickness if cfg.thickness > 0 else default_thickness
    combined = merge_hairs(
        hairs,
        max_radius=cfg.lod_radius,
        thickness=thickness,
        rng=np.random.default_rng(cfg.seed),
        metric=cfg.lod_metric,
    )
    vertices, radii = flatten_combined(combined)
    logger.info(f"moved {vertices.shape[0]} combined vertices")
    return CurveBuffers(vertices=vertices, radii=radii, combined=combined)
