#!/usr/bin/env python3
"""
CyHair -> pbrt curve converter.

Hair vertices are interpreted as Catmull-Rom spline points and written out as
cubic Bezier ``Shape "curve"`` records, optionally merged into fewer curves
with the LOD pass.

Usage:
    hairforge INPUT.hair OUTPUT.pbrt [LOD_LEVEL] [MAX_STRANDS] [THICKNESS]
    python -m hairforge INPUT.hair - --scale 0.1 0.1 0.1
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .config import load_config
from .convert import to_cubic_bezier_curves
from .cyhair import load_cyhair
from .errors import HairError
from .pbrt import emit_pbrt, write_pbrt

logger = logging.getLogger("hairforge")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hairforge",
        description="Convert CyHair strands to pbrt cubic Bezier curves",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert every strand
  hairforge straight.hair straight.pbrt

  # LOD merge, first 5000 strands, thickness 0.05, to stdout
  hairforge straight.hair - 1 5000 0.05
        """,
    )
    parser.add_argument("input", type=Path, help="CyHair input file")
    parser.add_argument("output", help="pbrt output file, or '-' for stdout")
    parser.add_argument("lod_level", nargs="?", type=int, default=None,
                        help="LOD level; <= 0 disables merging (default: -1)")
    parser.add_argument("max_strands", nargs="?", type=int, default=None,
                        help="Convert only the first N strands; -1 converts all")
    parser.add_argument("thickness", nargs="?", type=float, default=None,
                        help="Override strand thickness when > 0")
    parser.add_argument("--scale", nargs=3, type=float, metavar=("X", "Y", "Z"),
                        help="Per-axis vertex scale, applied before --translate")
    parser.add_argument("--translate", nargs=3, type=float, metavar=("X", "Y", "Z"),
                        help="Per-axis vertex translation")
    parser.add_argument("--lod-radius", type=float, default=None,
                        help="Maximum radius of a merged curve (default: 2.0)")
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for LOD sample selection (default: 0)")
    parser.add_argument("--lod-metric", choices=["sample", "root", "endpoints"], default=None,
                        help="How candidate strands are ordered around a group pivot")
    parser.add_argument("--no-swap-yz", action="store_true",
                        help="Keep input axes instead of converting Z-up to Y-up")
    parser.add_argument("--point-thickness", action="store_true",
                        help="Use per-point thickness from the file when present (no effect with LOD)")
    parser.add_argument("--config", type=Path, default=None,
                        help="JSON file with conversion settings; flags override it")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Log progress (-vv for per-strand progress)")
    return parser


def _overrides(args: argparse.Namespace) -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    if args.lod_level is not None:
        values["lod_level"] = args.lod_level
    if args.max_strands is not None:
        values["max_strands"] = args.max_strands
    if args.thickness is not None:
        values["thickness"] = args.thickness
    if args.scale is not None:
        values["vertex_scale"] = list(args.scale)
    if args.translate is not None:
        values["vertex_translate"] = list(args.translate)
    if args.lod_radius is not None:
        values["lod_radius"] = args.lod_radius
    if args.seed is not None:
        values["seed"] = args.seed
    if args.lod_metric is not None:
        values["lod_metric"] = args.lod_metric
    if args.no_swap_yz:
        values["swap_yz"] = False
    if args.point_thickness:
        values["use_point_thickness"] = True
    return values


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns the process exit status."""
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)

    try:
        config = load_config(args.config, overrides=_overrides(args))
    except (OSError, ValueError, TypeError) as exc:
        print(f"Invalid configuration: {exc}", file=sys.stderr)
        return 1

    try:
        hair = load_cyhair(args.input)
    except (HairError, OSError) as exc:
        print(f"Failed to load CyHair file [ {args.input} ]: {exc}", file=sys.stderr)
        return 1

    try:
        curves = to_cubic_bezier_curves(hair, config)
    except HairError as exc:
        print(f"Failed to convert CyHair data [ {args.input} ]: {exc}", file=sys.stderr)
        return 1

    if args.output == "-":
        count = emit_pbrt(curves, sys.stdout, source=str(args.input), user_thickness=config.thickness)
    else:
        try:
            count = write_pbrt(curves, args.output, source=str(args.input), user_thickness=config.thickness)
        except OSError as exc:
            print(f"{args.output}: {exc}", file=sys.stderr)
            return 1

    print(f"Converted {count} strands.", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
