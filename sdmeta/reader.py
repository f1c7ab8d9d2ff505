"""
sdmeta Reader - Text metadata scanner for PNG files.

Features:
  - Signature check on the first 8 bytes (instant file identification)
  - Forward-only chunk walk: never seeks, works on pipes and sockets
  - tEXt fields copied verbatim, zTXt fields inflated in bounded steps
  - Corrupt fields are skipped, truncated files keep what was already found
"""

from __future__ import annotations

import io
import logging
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, Iterator

from sdmeta.document import MetadataDocument, decode_text
from sdmeta.errors import DecodeFailure, MalformedField, NotContainerFormat, Truncated
from sdmeta.inflate import inflate_field, split_keyword
from sdmeta.integrity import chunk_crc_ok
from sdmeta.spec import (
    CHUNK_CRC_SIZE,
    CHUNK_END,
    CHUNK_HEADER_SIZE,
    CHUNK_TEXT,
    CHUNK_ZTEXT,
    PNG_SIGNATURE,
    READ_BLOCK_SIZE,
)

logger = logging.getLogger(__name__)

_LENGTH = struct.Struct(">I")


@dataclass
class Chunk:
    length: int
    type: bytes
    body: bytes
    crc: bytes

    @property
    def name(self) -> str:
        return self.type.decode("latin-1")


def read_exact(handle: BinaryIO, length: int, block_size: int = READ_BLOCK_SIZE) -> bytes:
    """
    Read up to length bytes in block_size pieces.

    The declared chunk length is untrusted, so memory grows with the bytes
    actually read, never with the length asked for. Returns fewer than
    length bytes at end of stream.
    """
    buf = bytearray()
    while len(buf) < length:
        want = min(length - len(buf), block_size)
        piece = handle.read(want)
        if not piece:
            break
        buf += piece
    return bytes(buf)


def iter_chunks(handle: BinaryIO, on_truncated: Callable[[], None] | None = None) -> Iterator[Chunk]:
    """
    Yield chunks from a handle positioned just after the signature.

    Stops quietly at end of stream. A short read inside a chunk also stops
    iteration, after calling on_truncated().
    """
    while True:
        header = handle.read(CHUNK_HEADER_SIZE)
        if not header:
            return
        if len(header) < CHUNK_HEADER_SIZE:
            logger.debug("Short chunk header (%d bytes)", len(header))
            break

        (length,) = _LENGTH.unpack_from(header)
        chunk_type = header[4:8]

        body = read_exact(handle, length)
        if len(body) != length:
            logger.debug(
                "Chunk %r declares %d bytes, only %d available", chunk_type, length, len(body)
            )
            break

        crc = handle.read(CHUNK_CRC_SIZE)
        if len(crc) != CHUNK_CRC_SIZE:
            logger.debug("Chunk %r is missing its CRC trailer", chunk_type)
            break

        yield Chunk(length=length, type=chunk_type, body=body, crc=crc)

    if on_truncated is not None:
        on_truncated()


class PNGMetadataReader:
    """
    PNG text metadata reader.

    Usage:
        # From a path
        doc = PNGMetadataReader.read("image.png")

        # From bytes
        doc = PNGMetadataReader.parse(data)

        # From an open handle (caller owns it)
        with open("image.png", "rb") as f:
            doc = PNGMetadataReader.scan(f)

    All three return a MetadataDocument, or None when the PNG carries no
    text fields.
    """

    @staticmethod
    def is_png(path: str | Path) -> bool:
        """Fast check if a file is a PNG. Reads only the first 8 bytes."""
        try:
            with open(path, "rb") as f:
                head = f.read(len(PNG_SIGNATURE))
        except OSError:
            return False
        return head == PNG_SIGNATURE

    @staticmethod
    def is_png_bytes(data: bytes) -> bool:
        """Fast check if bytes start with the PNG signature."""
        return data[:len(PNG_SIGNATURE)] == PNG_SIGNATURE

    @classmethod
    def read(
        cls, path: str | Path, *, verify_crc: bool = False, strict: bool = False
    ) -> MetadataDocument | None:
        """Open a PNG file and scan it for text metadata."""
        with open(path, "rb") as f:
            return cls.scan(f, verify_crc=verify_crc, strict=strict)

    @classmethod
    def parse(
        cls, data: bytes, *, verify_crc: bool = False, strict: bool = False
    ) -> MetadataDocument | None:
        """Scan in-memory PNG bytes for text metadata."""
        return cls.scan(io.BytesIO(data), verify_crc=verify_crc, strict=strict)

    @classmethod
    def scan(
        cls, handle: BinaryIO, *, verify_crc: bool = False, strict: bool = False
    ) -> MetadataDocument | None:
        """
        Walk the chunk stream and collect tEXt / zTXt fields in order.

        Raises NotContainerFormat if the signature is wrong. Returns None
        when no text field was recovered.

        A short read normally ends the scan and keeps the partial result
        with doc.truncated set. With strict=True it raises Truncated instead.
        """
        signature = handle.read(len(PNG_SIGNATURE))
        if signature != PNG_SIGNATURE:
            raise NotContainerFormat("Not a PNG file: bad signature")

        doc = MetadataDocument()

        def mark_truncated() -> None:
            doc.truncated = True

        for chunk in iter_chunks(handle, on_truncated=mark_truncated):
            if chunk.type == CHUNK_END:
                break
            if chunk.type not in (CHUNK_TEXT, CHUNK_ZTEXT):
                continue

            if verify_crc and not chunk_crc_ok(chunk):
                cls._skip(doc, chunk, "CRC mismatch")
                continue

            if chunk.type == CHUNK_TEXT:
                cls._read_text(doc, chunk)
            else:
                cls._read_compressed_text(doc, chunk)

        if strict and doc.truncated:
            raise Truncated(f"PNG ends mid-chunk after {len(doc)} text field(s)")
        if doc.is_empty:
            return None
        return doc

    @classmethod
    def _read_text(cls, doc: MetadataDocument, chunk: Chunk) -> None:
        found = split_keyword(chunk.body)
        if found is None:
            cls._skip(doc, chunk, "missing keyword terminator")
            return
        keyword, null_pos = found
        doc.add_field(decode_text(keyword), decode_text(chunk.body[null_pos + 1:]))

    @classmethod
    def _read_compressed_text(cls, doc: MetadataDocument, chunk: Chunk) -> None:
        found = split_keyword(chunk.body)
        if found is None:
            cls._skip(doc, chunk, "missing keyword terminator")
            return
        keyword, _ = found

        # One bad field must not abort the rest of the container
        try:
            text = inflate_field(chunk.body)
        except (MalformedField, DecodeFailure) as e:
            cls._skip(doc, chunk, str(e))
            return

        if text:
            doc.add_field(decode_text(keyword), text, compressed=True)

    @staticmethod
    def _skip(doc: MetadataDocument, chunk: Chunk, reason: str) -> None:
        logger.debug("Skipping %s chunk: %s", chunk.name, reason)
        doc.skipped.append(f"{chunk.name}: {reason}")


def extract_text(path: str | Path, *, verify_crc: bool = False) -> str | None:
    """
    Rendered metadata for a PNG file, or None.

    None covers both "not a PNG" and "PNG without text fields".
    """
    try:
        doc = PNGMetadataReader.read(path, verify_crc=verify_crc)
    except NotContainerFormat:
        return None
    return doc.render() if doc is not None else None
