"""
sdmeta - Stable Diffusion metadata from PNG tEXt/zTXt chunks.
"""

__version__ = "1.0.0"

from sdmeta.document import MetadataDocument, TextField
from sdmeta.errors import DecodeFailure, MalformedField, NotContainerFormat, SDMetaError, Truncated
from sdmeta.inflate import inflate_field
from sdmeta.reader import PNGMetadataReader, extract_text

__all__ = [
    "MetadataDocument",
    "TextField",
    "PNGMetadataReader",
    "extract_text",
    "inflate_field",
    "SDMetaError",
    "NotContainerFormat",
    "Truncated",
    "MalformedField",
    "DecodeFailure",
]
