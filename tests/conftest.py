import struct
import zlib

import pytest

SIGNATURE = b"\x89PNG\r\n\x1a\n"

# 1x1 grayscale image
IHDR_BODY = struct.pack(">IIBBBBB", 1, 1, 8, 0, 0, 0, 0)
IDAT_BODY = zlib.compress(b"\x00\x00")


def chunk(chunk_type: bytes, body: bytes, crc: int | None = None) -> bytes:
    if crc is None:
        crc = zlib.crc32(chunk_type + body) & 0xFFFFFFFF
    return struct.pack(">I", len(body)) + chunk_type + body + struct.pack(">I", crc)


def text_chunk(keyword: str, value: str) -> bytes:
    return chunk(b"tEXt", keyword.encode("latin-1") + b"\x00" + value.encode("utf-8"))


def ztxt_chunk(keyword: str, value: str, method: int = 0) -> bytes:
    body = keyword.encode("latin-1") + b"\x00" + bytes([method]) + zlib.compress(value.encode("utf-8"))
    return chunk(b"zTXt", body)


def build_png(*chunks: bytes, end: bool = True) -> bytes:
    data = SIGNATURE + chunk(b"IHDR", IHDR_BODY)
    data += b"".join(chunks)
    data += chunk(b"IDAT", IDAT_BODY)
    if end:
        data += chunk(b"IEND", b"")
    return data


class PNGFactory:
    chunk = staticmethod(chunk)
    text = staticmethod(text_chunk)
    ztxt = staticmethod(ztxt_chunk)
    build = staticmethod(build_png)
    signature = SIGNATURE


@pytest.fixture
def png():
    return PNGFactory
