"""
Unit Tests - Test individual components in isolation.
"""

import zlib

import pytest

from sdmeta.spec import (
    PNG_SIGNATURE,
    CHUNK_TEXT,
    CHUNK_ZTEXT,
    CHUNK_END,
    COMPRESSION_DEFLATE,
    MIN_ZTXT_BODY,
    INFLATE_BUFFER_SIZE,
    ENTRY_SEPARATOR,
)
from sdmeta.document import MetadataDocument, TextField, decode_text
from sdmeta.errors import (
    SDMetaError,
    NotContainerFormat,
    Truncated,
    MalformedField,
    DecodeFailure,
)
from sdmeta.integrity import compute_crc, chunk_crc_ok, fingerprint
from sdmeta.reader import Chunk


# =============================================================================
# Spec constants
# =============================================================================

class TestSpec:

    def test_signature(self):
        assert PNG_SIGNATURE == bytes([137, 80, 78, 71, 13, 10, 26, 10])

    def test_chunk_tags(self):
        assert CHUNK_TEXT == b"tEXt"
        assert CHUNK_ZTEXT == b"zTXt"
        assert CHUNK_END == b"IEND"

    def test_limits(self):
        assert COMPRESSION_DEFLATE == 0
        assert MIN_ZTXT_BODY == 10
        assert INFLATE_BUFFER_SIZE == 128 * 1024

    def test_separator_is_one_blank_line(self):
        assert ENTRY_SEPARATOR == "\n\n"


# =============================================================================
# Errors
# =============================================================================

class TestErrors:

    @pytest.mark.parametrize("kind", [NotContainerFormat, Truncated, MalformedField, DecodeFailure])
    def test_all_errors_are_value_errors(self, kind):
        assert issubclass(kind, SDMetaError)
        assert issubclass(kind, ValueError)

    def test_catch_as_value_error(self):
        with pytest.raises(ValueError, match="bad"):
            raise MalformedField("bad field")


# =============================================================================
# Text decoding
# =============================================================================

class TestDecodeText:

    def test_utf8(self):
        assert decode_text("masterpiece, ✨".encode("utf-8")) == "masterpiece, ✨"

    def test_latin1_fallback(self):
        # 0xE9 alone is not valid UTF-8
        assert decode_text(b"caf\xe9") == "café"

    def test_latin1_that_is_also_utf8(self):
        # "Ã©" written as Latin-1 is the same two bytes as UTF-8 "é"
        assert decode_text("Ã©".encode("latin-1")) == "é"

    def test_empty(self):
        assert decode_text(b"") == ""


# =============================================================================
# TextField / MetadataDocument
# =============================================================================

class TestTextField:

    def test_render(self):
        f = TextField(keyword="parameters", value="seed: 42")
        assert f.render() == "parameters: seed: 42"
        assert f.compressed is False

    def test_render_empty_value(self):
        assert TextField(keyword="k", value="").render() == "k: "


class TestMetadataDocument:

    def test_empty_document(self):
        doc = MetadataDocument()
        assert doc.is_empty
        assert len(doc) == 0
        assert doc.render() == ""
        assert doc.truncated is False
        assert doc.skipped == []

    def test_add_field(self):
        doc = MetadataDocument()
        f = doc.add_field("prompt", "{}", compressed=True)
        assert isinstance(f, TextField)
        assert f.compressed is True
        assert doc.keywords == ["prompt"]

    def test_render_order_and_separator(self):
        doc = MetadataDocument()
        doc.add_field("a", "1")
        doc.add_field("b", "2")
        doc.add_field("c", "3")
        assert doc.render() == "a: 1\n\nb: 2\n\nc: 3"
        assert str(doc) == doc.render()

    def test_get_field(self):
        doc = MetadataDocument()
        doc.add_field("Software", "ComfyUI")
        doc.add_field("prompt", "first")
        doc.add_field("prompt", "second")

        assert doc.get_field("prompt").value == "first"
        assert [f.value for f in doc.get_fields("prompt")] == ["first", "second"]
        assert doc.get_field("missing") is None

    def test_parameters_shortcut(self):
        doc = MetadataDocument()
        assert doc.parameters is None
        doc.add_field("parameters", "Steps: 20")
        assert doc.parameters == "Steps: 20"

    def test_write(self, tmp_path):
        doc = MetadataDocument()
        doc.add_field("parameters", "a cat, Steps: 20")
        out = doc.write(tmp_path / "cat.txt")
        assert out.read_text(encoding="utf-8") == "parameters: a cat, Steps: 20"

    def test_repr(self):
        doc = MetadataDocument()
        doc.add_field("parameters", "x")
        doc.truncated = True
        r = repr(doc)
        assert "MetadataDocument" in r
        assert "parameters" in r
        assert "truncated" in r


# =============================================================================
# Integrity
# =============================================================================

class TestIntegrity:

    def test_compute_crc_matches_zlib(self):
        assert compute_crc(b"IEND", b"") == 0xAE426082

    def test_chunk_crc_ok(self):
        body = b"k\x00v"
        crc = zlib.crc32(b"tEXt" + body).to_bytes(4, "big")
        assert chunk_crc_ok(Chunk(length=len(body), type=b"tEXt", body=body, crc=crc))

    def test_chunk_crc_mismatch(self):
        body = b"k\x00v"
        assert not chunk_crc_ok(Chunk(length=len(body), type=b"tEXt", body=body, crc=b"\x00" * 4))

    def test_fingerprint_stable(self):
        a = MetadataDocument()
        a.add_field("parameters", "seed: 1")
        b = MetadataDocument()
        b.add_field("parameters", "seed: 1")
        assert fingerprint(a) == fingerprint(b)
        assert len(fingerprint(a)) == 16

    def test_fingerprint_differs(self):
        a = MetadataDocument()
        a.add_field("parameters", "seed: 1")
        b = MetadataDocument()
        b.add_field("parameters", "seed: 2")
        assert fingerprint(a) != fingerprint(b)
