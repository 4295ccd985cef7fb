# python/hairforge/__init__.py
# Public API for converting CyHair strands to cubic Bezier curves
# RELEVANT FILES: python/hairforge/convert.py, python/hairforge/cli.py, README.md
"""
hairforge - CyHair to cubic Bezier curve conversion.

Loads CyHair strand files, converts each strand's Catmull-Rom control
polygon to cubic Bezier segments, optionally merges nearby strands into
fewer level-of-detail curves, and writes pbrt curve shapes.
"""

from .config import ConversionConfig, load_config
from .convert import CurveBuffers, to_cubic_bezier_curves
from .cyhair import HairFile, HairHeader, Strand, load_cyhair, read_cyhair
from .errors import EmptyInputError, FormatError, HairError, MissingDataError
from .geometry import Bounds3, distance
from .lod import CombinedHair, Hair, merge_hairs
from .pbrt import emit_pbrt, scene_bounds, write_pbrt
from .spline import BezierCurve, catmull_rom_to_bezier, convert_strand

__version__ = "0.1.0"
__all__ = [
    "ConversionConfig",
    "load_config",
    "CurveBuffers",
    "to_cubic_bezier_curves",
    "HairFile",
    "HairHeader",
    "Strand",
    "load_cyhair",
    "read_cyhair",
    "HairError",
    "FormatError",
    "MissingDataError",
    "EmptyInputError",
    "Bounds3",
    "distance",
    "Hair",
    "CombinedHair",
    "merge_hairs",
    "BezierCurve",
    "catmull_rom_to_bezier",
    "convert_strand",
    "emit_pbrt",
    "scene_bounds",
    "write_pbrt",
]
