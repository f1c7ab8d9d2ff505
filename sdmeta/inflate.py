"""
zTXt inflate - streaming decompression of compressed text fields.

The decompressor is driven as a step machine: every step asks zlib for at
most INFLATE_BUFFER_SIZE bytes of output and reports whether the stream
should continue, is done, or has failed. The caller's loop is plain
iteration with a hard step cap.
"""

from __future__ import annotations

import enum
import logging
import zlib

from sdmeta.document import decode_text
from sdmeta.errors import DecodeFailure, MalformedField
from sdmeta.spec import (
    COMPRESSION_DEFLATE,
    INFLATE_BUFFER_SIZE,
    MAX_INFLATE_STEPS,
    MIN_ZTXT_BODY,
)

logger = logging.getLogger(__name__)


class InflateStatus(enum.Enum):
    CONTINUE = "continue"
    DONE = "done"
    ERROR = "error"


class InflateSession:
    """
    One zlib stream, inflated in bounded steps.

    Usage:
        with InflateSession(payload) as session:
            while True:
                produced, status = session.step()
                ...

    A session wraps exactly one payload and is not reusable once closed.
    """

    def __init__(self, payload: bytes, buffer_size: int = INFLATE_BUFFER_SIZE) -> None:
        self._decompressor = zlib.decompressobj()
        self._pending = payload
        self.buffer_size = buffer_size
        self.total_out = 0
        self.steps = 0
        self.error: str | None = None

    @property
    def closed(self) -> bool:
        return self._decompressor is None

    def step(self) -> tuple[bytes, InflateStatus]:
        """Inflate up to buffer_size bytes. Returns (newly produced bytes, status)."""
        if self._decompressor is None:
            raise RuntimeError("Inflate session is closed")
        if self._decompressor.eof:
            return b"", InflateStatus.DONE

        self.steps += 1
        try:
            produced = self._decompressor.decompress(self._pending, self.buffer_size)
        except zlib.error as e:
            # Corrupt data and preset-dictionary streams both land here
            self.error = str(e)
            return b"", InflateStatus.ERROR
        except MemoryError:
            self.error = "out of memory"
            return b"", InflateStatus.ERROR

        self._pending = self._decompressor.unconsumed_tail
        self.total_out += len(produced)

        if self._decompressor.eof:
            return produced, InflateStatus.DONE
        if not produced and not self._pending:
            # Input exhausted before the stream end marker
            self.error = "incomplete deflate stream"
            return b"", InflateStatus.ERROR
        return produced, InflateStatus.CONTINUE

    def close(self) -> None:
        self._decompressor = None
        self._pending = b""

    def __enter__(self) -> InflateSession:
        return self

    def __exit__(self, *args) -> None:
        self.close()


def split_keyword(body: bytes) -> tuple[bytes, int] | None:
    """Find the keyword terminator. Returns (keyword, null index) or None."""
    null_pos = body.find(b"\x00")
    if null_pos < 0:
        return None
    return body[:null_pos], null_pos


def inflate_payload(payload: bytes, max_steps: int = MAX_INFLATE_STEPS) -> bytes:
    """Inflate a raw zlib stream, raising DecodeFailure on any failure."""
    out = bytearray()
    with InflateSession(payload) as session:
        while True:
            if session.steps >= max_steps:
                raise DecodeFailure(
                    f"Inflate exceeded {max_steps} steps ({session.total_out} bytes produced)"
                )
            produced, status = session.step()
            out += produced
            if status is InflateStatus.DONE:
                return bytes(out)
            if status is InflateStatus.ERROR:
                raise DecodeFailure(f"Inflate failed: {session.error}")


def inflate_field(body: bytes, max_steps: int = MAX_INFLATE_STEPS) -> str:
    """
    Decode a full zTXt chunk body (keyword 0x00 method zlib-stream).

    Returns the decompressed text. Raises MalformedField when the body
    layout is wrong and DecodeFailure when the stream does not inflate.
    """
    if len(body) < MIN_ZTXT_BODY:
        raise MalformedField(f"zTXt body too short: {len(body)} bytes")

    found = split_keyword(body)
    # The terminator must leave room for the method byte
    if found is None or found[1] >= len(body) - 1:
        raise MalformedField("zTXt keyword is not null-terminated")
    _, null_pos = found

    method = body[null_pos + 1]
    if method != COMPRESSION_DEFLATE:
        raise MalformedField(f"Unsupported zTXt compression method: {method}")

    text = decode_text(inflate_payload(body[null_pos + 2:], max_steps=max_steps))
    logger.debug("Inflated zTXt field: %d -> %d chars", len(body), len(text))
    return text
