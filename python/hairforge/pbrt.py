# python/hairforge/pbrt.py
# Text emitter for pbrt curve shapes plus the scene-bounds summary
# RELEVANT FILES: python/hairforge/convert.py, python/hairforge/cli.py, tests/test_pbrt.py

from __future__ import annotations

from pathlib import Path
from typing import Optional, TextIO, Union

import numpy as np

from .convert import CurveBuffers
from .geometry import Bounds3, as_points

CURVE_TYPE = "cylinder"
_SCENE_EXTENT = 1e30


def scene_bounds(vertices: np.ndarray, radii: np.ndarray) -> Bounds3:
    """Union over every control point of ``p - r`` and ``p + r``.

    With no vertices the box is the inverted ``(1e30 .. -1e30)`` sentinel.
    """
    pts = as_points(vertices, "vertices").astype(np.float64)
    r = np.asarray(radii, dtype=np.float64).reshape(-1)[:, None]
    if pts.shape[0] == 0:
        return Bounds3(min=np.full(3, _SCENE_EXTENT), max=np.full(3, -_SCENE_EXTENT))
    return Bounds3.from_points(pts - r).union(Bounds3.from_points(pts + r))


def format_curve(points: np.ndarray, width0: float, width1: float) -> str:
    coords = " ".join(f"{float(v):f}" for v in np.asarray(points).reshape(12))
    return (
        f'Shape "curve" "string type" [ "{CURVE_TYPE}" ] "point P" [ {coords}  ] '
        f'"float width0" [ {width0:f} ] "float width1" [ {width1:f} ]'
    )


def emit_pbrt(
    curves: CurveBuffers,
    out: TextIO,
    source: str = "",
    user_thickness: float = -1.0,
) -> int:
    """Write the header comments and one ``Shape "curve"`` record per curve.

    Returns the number of curve records written.
    """
    bounds = scene_bounds(curves.vertices, curves.radii)
    (x0, y0, z0), (x1, y1, z1) = bounds.as_tuples()
    n = curves.curve_count

    out.write(f'# Converted from "{source}" by hairforge\n')
    out.write(f"# The number of strands = {n}. user_thickness = {float(user_thickness):f}\n")
    out.write(f"# Scene bounds: ({x0:f}, {y0:f}, {z0:f}) - ({x1:f}, {y1:f}, {z1:f})\n\n\n")

    for i in range(n):
        curve = curves.curve(i)
        out.write(format_curve(curve.points, curve.width0, curve.width1))
        out.write("\n")
    return n


def write_pbrt(
    curves: CurveBuffers,
    path: Union[str, Path],
    source: str = "",
    user_thickness: Optional[float] = None,
) -> int:
    """Write ``curves`` to ``path`` as a pbrt scene fragment."""
    with open(path, "w", encoding="utf-8") as fh:
        return emit_pbrt(curves, fh, source=source, user_thickness=-1.0 if user_thickness is None else user_thickness)
