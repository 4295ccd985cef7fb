# python/hairforge/errors.py
# Error types raised while loading and converting CyHair data
# RELEVANT FILES: python/hairforge/cyhair.py, python/hairforge/convert.py, python/hairforge/cli.py

from __future__ import annotations

from typing import Optional


class HairError(ValueError):
    """Base class for load and conversion failures.

    ``filename`` and ``field`` name the file and the header field or array
    that caused the failure, when known.
    """

    def __init__(self, message: str, filename: Optional[str] = None, field: Optional[str] = None):
        self.filename = filename
        self.field = field
        if filename:
            message = f"{filename}: {message}"
        super().__init__(message)


class FormatError(HairError):
    """Bad magic, truncated header, or short read of an array."""


class MissingDataError(HairError):
    """Required data (points, segment counts) is absent from the file."""


class EmptyInputError(HairError):
    """Nothing to convert: no points or no strands."""
