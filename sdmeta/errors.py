"""
sdmeta errors.

Every error is a ValueError, so callers that only care about "bad input"
can catch that and move on.
"""

from __future__ import annotations


class SDMetaError(ValueError):
    """Base class for all sdmeta errors."""


class NotContainerFormat(SDMetaError):
    """The first 8 bytes are not the PNG signature."""


class Truncated(SDMetaError):
    """A chunk ended before its declared length and trailer were read.

    By default the scanner sets ``MetadataDocument.truncated`` and keeps the
    partial result. ``scan(..., strict=True)`` raises this instead.
    """


class MalformedField(SDMetaError):
    """A text chunk body is missing its keyword terminator, uses an
    unsupported compression method or is too small to hold a payload."""


class DecodeFailure(SDMetaError):
    """The zlib stream inside a zTXt chunk could not be inflated."""
