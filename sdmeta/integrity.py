"""
sdmeta Integrity - Chunk CRC checks and document fingerprints.

Integrity features:
  - CRC-32 verification of chunk type + body (opt-in, off by default)
  - Stable fingerprint of the rendered metadata for deduplication
"""

from __future__ import annotations

import hashlib
import struct
import zlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sdmeta.document import MetadataDocument
    from sdmeta.reader import Chunk


# =============================================================================
# Chunk CRC
# =============================================================================

def compute_crc(chunk_type: bytes, body: bytes) -> int:
    """CRC-32 as stored in a PNG chunk trailer (covers type + body)."""
    return zlib.crc32(body, zlib.crc32(chunk_type)) & 0xFFFFFFFF


def chunk_crc_ok(chunk: Chunk) -> bool:
    """
    Verify a chunk's CRC trailer.
    Returns True if the stored CRC matches type + body.
    """
    (stored,) = struct.unpack(">I", chunk.crc)
    return stored == compute_crc(chunk.type, chunk.body)


# =============================================================================
# Document Fingerprint
# =============================================================================

def fingerprint(doc: MetadataDocument) -> str:
    """
    Generate a short fingerprint for a metadata document.
    Based on the rendered text only, so two images generated with the
    same settings share a fingerprint.
    """
    return hashlib.sha256(doc.render().encode("utf-8")).hexdigest()[:16]
