"""CyHair file loading.

A CyHair file is a 128-byte little-endian header followed by flat arrays of
per-strand segment counts and per-point positions, thickness, transparency
and color. Only the positions are required.

Usage:
    from hairforge.cyhair import load_cyhair

    hair = load_cyhair("straight.hair")
    print(f"Strands: {hair.num_strands}, Points: {hair.total_points}")
    for strand in hair.strands:
        print(strand.index, strand.points.shape)
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple, Union

import numpy as np

from .errors import FormatError, MissingDataError

logger = logging.getLogger(__name__)

MAGIC = b"HAIR"
HEADER_SIZE = 128

FLAG_SEGMENTS = 0x1
FLAG_POINTS = 0x2
FLAG_THICKNESS = 0x4
FLAG_TRANSPARENCY = 0x8
FLAG_COLOR = 0x10

HEADER_DTYPE = np.dtype(
    [
        ("magic", "S4"),
        ("num_strands", "<u4"),
        ("total_points", "<u4"),
        ("flags", "<u4"),
        ("default_segments", "<i4"),
        ("default_thickness", "<f4"),
        ("default_transparency", "<f4"),
        ("default_color", "<f4", (3,)),
        ("info", "S88"),
    ]
)
assert HEADER_DTYPE.itemsize == HEADER_SIZE


@dataclass
class HairHeader:
    """Decoded CyHair header."""
    num_strands: int
    total_points: int
    flags: int
    default_segments: int = -1
    default_thickness: float = 0.01
    default_transparency: float = 1.0
    default_color: Tuple[float, float, float] = (0.5, 0.5, 0.5)
    info: str = ""

    @property
    def has_segments(self) -> bool:
        return bool(self.flags & FLAG_SEGMENTS)

    @property
    def has_points(self) -> bool:
        return bool(self.flags & FLAG_POINTS)

    @property
    def has_thickness(self) -> bool:
        return bool(self.flags & FLAG_THICKNESS)

    @property
    def has_transparency(self) -> bool:
        return bool(self.flags & FLAG_TRANSPARENCY)

    @property
    def has_color(self) -> bool:
        return bool(self.flags & FLAG_COLOR)

    @classmethod
    def from_bytes(cls, data: bytes, filename: Optional[str] = None) -> "HairHeader":
        if len(data) < HEADER_SIZE:
            raise FormatError(
                f"truncated header ({len(data)} of {HEADER_SIZE} bytes)",
                filename=filename,
                field="header",
            )
        raw = np.frombuffer(data, dtype=HEADER_DTYPE, count=1)[0]
        if bytes(raw["magic"]) != MAGIC:
            raise FormatError(f"bad magic {bytes(raw['magic'])!r}, expected {MAGIC!r}", filename=filename, field="magic")
        return cls(
            num_strands=int(raw["num_strands"]),
            total_points=int(raw["total_points"]),
            flags=int(raw["flags"]),
            default_segments=int(raw["default_segments"]),
            default_thickness=float(raw["default_thickness"]),
            default_transparency=float(raw["default_transparency"]),
            default_color=tuple(float(c) for c in raw["default_color"]),
            info=_decode_info(bytes(raw["info"])),
        )


def _decode_info(raw: bytes) -> str:
    text = raw.split(b"\0", 1)[0]
    try:
        return text.decode("ascii")
    except UnicodeDecodeError:
        logger.warning("CyHair info field is not ASCII text; ignoring it")
        return ""


@dataclass
class Strand:
    """One hair fiber: its spline control points and optional per-point attributes."""
    index: int
    points: np.ndarray  # (n, 3) float32
    thickness: Optional[np.ndarray] = None  # (n,) float32
    transparency: Optional[np.ndarray] = None  # (n,) float32
    color: Optional[np.ndarray] = None  # (n, 3) float32

    @property
    def point_count(self) -> int:
        return int(self.points.shape[0])

    @property
    def segment_count(self) -> int:
        return self.point_count - 1


@dataclass
class HairFile:
    """Loaded CyHair data with the strand table already resolved."""
    header: HairHeader
    segments: Optional[np.ndarray]  # (num_strands,) uint16 or None
    points: np.ndarray  # (total_points, 3) float32
    thickness: Optional[np.ndarray] = None
    transparency: Optional[np.ndarray] = None
    color: Optional[np.ndarray] = None
    strand_offsets: np.ndarray = field(default_factory=lambda: np.zeros(0, dtype=np.int64))
    strands: List[Strand] = field(default_factory=list)
    filename: Optional[str] = None

    @property
    def num_strands(self) -> int:
        return self.header.num_strands

    @property
    def total_points(self) -> int:
        return self.header.total_points

    @property
    def default_thickness(self) -> float:
        return self.header.default_thickness

    def segment_count(self, index: int) -> int:
        if self.segments is not None:
            return int(self.segments[index])
        return self.header.default_segments


def _remaining_bytes(f: BinaryIO) -> Optional[int]:
    if not f.seekable():
        return None
    pos = f.tell()
    end = f.seek(0, io.SEEK_END)
    f.seek(pos)
    return end - pos


def _read_array(
    f: BinaryIO,
    dtype: str,
    count: int,
    label: str,
    filename: Optional[str],
) -> np.ndarray:
    dt = np.dtype(dtype)
    nbytes = dt.itemsize * count
    # Sizes come from the header; never ask the stream for more than it holds.
    remaining = _remaining_bytes(f)
    data = f.read(nbytes if remaining is None else min(nbytes, remaining))
    if len(data) != nbytes:
        raise FormatError(
            f"failed to read {label} data ({len(data)} of {nbytes} bytes)",
            filename=filename,
            field=label,
        )
    return np.frombuffer(data, dtype=dt, count=count).copy()


def strand_offsets(segment_counts: np.ndarray) -> np.ndarray:
    """Start offset of each strand: prefix sum of ``segments + 1``."""
    counts = np.asarray(segment_counts, dtype=np.int64) + 1
    offsets = np.zeros(counts.shape[0], dtype=np.int64)
    if counts.shape[0] > 1:
        offsets[1:] = np.cumsum(counts[:-1])
    return offsets


def read_cyhair(f: BinaryIO, filename: Optional[str] = None) -> HairFile:
    """Parse CyHair data from an open binary stream."""
    header = HairHeader.from_bytes(f.read(HEADER_SIZE), filename=filename)

    if not header.has_points:
        raise MissingDataError("no point data in CyHair file", filename=filename, field="points")
    if header.default_segments < 1 and not header.has_segments:
        raise MissingDataError("no valid segment information in CyHair file", filename=filename, field="segments")

    n_strands = header.num_strands
    n_points = header.total_points

    if not header.has_segments and n_strands * (header.default_segments + 1) > n_points:
        raise FormatError(
            f"strand table references {n_strands * (header.default_segments + 1)} points but the file holds {n_points}",
            filename=filename,
            field="segments",
        )

    segments = None
    if header.has_segments:
        segments = _read_array(f, "<u2", n_strands, "segments", filename)

    logger.info("[CyHair] Has points.")
    points = _read_array(f, "<f4", 3 * n_points, "points", filename).reshape(-1, 3)

    thickness = transparency = color = None
    if header.has_thickness:
        logger.info("[CyHair] Has thickness.")
        thickness = _read_array(f, "<f4", n_points, "thickness", filename)
    if header.has_transparency:
        logger.info("[CyHair] Has transparency.")
        transparency = _read_array(f, "<f4", n_points, "transparency", filename)
    if header.has_color:
        logger.info("[CyHair] Has color.")
        color = _read_array(f, "<f4", 3 * n_points, "color", filename).reshape(-1, 3)

    if segments is not None:
        counts = segments.astype(np.int64)
    else:
        counts = np.full(n_strands, header.default_segments, dtype=np.int64)
    offsets = strand_offsets(counts)

    used = int(np.sum(counts + 1)) if n_strands else 0
    if used > n_points:
        raise FormatError(
            f"strand table references {used} points but the file holds {n_points}",
            filename=filename,
            field="segments",
        )

    strands: List[Strand] = []
    for i in range(n_strands):
        start = int(offsets[i])
        stop = start + int(counts[i]) + 1
        strands.append(
            Strand(
                index=i,
                points=points[start:stop],
                thickness=None if thickness is None else thickness[start:stop],
                transparency=None if transparency is None else transparency[start:stop],
                color=None if color is None else color[start:stop],
            )
        )

    return HairFile(
        header=header,
        segments=segments,
        points=points,
        thickness=thickness,
        transparency=transparency,
        color=color,
        strand_offsets=offsets,
        strands=strands,
        filename=filename,
    )


def load_cyhair(path: Union[str, Path]) -> HairFile:
    """Load a CyHair file from disk.

    Raises
    ------
    FormatError
        Bad magic, truncated header, or a short read of any array.
    MissingDataError
        The points array is absent or no segment counts can be derived.
    OSError
        The file cannot be opened.
    """
    path = Path(path)
    with open(path, "rb") as f:
        hair = read_cyhair(f, filename=str(path))
    logger.info(f"Loaded {path}: {hair.num_strands} strands, {hair.total_points} points")
    return hair
