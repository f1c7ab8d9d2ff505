"""
Metadata document - ordered text fields recovered from one PNG.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from sdmeta.files import write_text_atomic
from sdmeta.spec import ENTRY_SEPARATOR, KEYWORD_SEPARATOR, TEXT_ENCODINGS


def decode_text(raw: bytes) -> str:
    """Decode chunk text, UTF-8 first, Latin-1 (the PNG text encoding) otherwise.

    Latin-1 text whose bytes also form valid UTF-8 comes back as UTF-8:
    b"\\xc3\\xa9" decodes to "é", not "Ã©".
    """
    for encoding in TEXT_ENCODINGS[:-1]:
        try:
            return raw.decode(encoding)
        except UnicodeDecodeError:
            continue
    # Latin-1 maps every byte, so this never fails
    return raw.decode(TEXT_ENCODINGS[-1])


@dataclass
class TextField:
    keyword: str
    value: str
    compressed: bool = False

    def render(self) -> str:
        return f"{self.keyword}{KEYWORD_SEPARATOR}{self.value}"


@dataclass
class MetadataDocument:
    """
    Text fields in on-wire chunk order, plus scan diagnostics.

    Usage:
        doc = PNGMetadataReader.read("image.png")
        if doc is not None:
            print(doc.render())
            print(doc.parameters)
    """

    fields: list[TextField] = field(default_factory=list)
    truncated: bool = False
    skipped: list[str] = field(default_factory=list)

    def add_field(self, keyword: str, value: str, compressed: bool = False) -> TextField:
        text_field = TextField(keyword=keyword, value=value, compressed=compressed)
        self.fields.append(text_field)
        return text_field

    def get_field(self, keyword: str) -> TextField | None:
        """Get the first field with this keyword."""
        for f in self.fields:
            if f.keyword == keyword:
                return f
        return None

    def get_fields(self, keyword: str) -> list[TextField]:
        return [f for f in self.fields if f.keyword == keyword]

    @property
    def keywords(self) -> list[str]:
        return [f.keyword for f in self.fields]

    @property
    def parameters(self) -> str | None:
        """Shortcut for the A1111 'parameters' field."""
        f = self.get_field("parameters")
        return f.value if f else None

    @property
    def is_empty(self) -> bool:
        return not self.fields

    def render(self) -> str:
        """Join entries as 'keyword: value', one blank line apart."""
        return ENTRY_SEPARATOR.join(f.render() for f in self.fields)

    def write(self, path: str | Path) -> Path:
        """Write the rendered document to a text file."""
        return write_text_atomic(path, self.render())

    def __str__(self) -> str:
        return self.render()

    def __len__(self) -> int:
        return len(self.fields)

    def __repr__(self) -> str:
        flags = ", truncated" if self.truncated else ""
        return f"MetadataDocument(keywords={self.keywords}{flags})"
