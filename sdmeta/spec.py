"""
PNG Text Chunk Layout
=====================

Layout:
    89 50 4E 47 0D 0A 1A 0A      <- Signature (8 bytes, instant identification)
    <length:4> <type:4>          <- Chunk header, length is big-endian uint32
    <body:length>                <- Chunk body
    <crc:4>                      <- CRC-32 over type + body (read, not verified)
    ...
    <0> IEND <crc>               <- Terminator chunk

Text chunk bodies:
    tEXt   keyword 0x00 value
    zTXt   keyword 0x00 method(1) zlib-stream        (method 0 = deflate)

Design Decisions:
    - Only chunk length is interpreted as an integer, always big-endian
    - A short read anywhere in a chunk ends the scan, keeping what was found
    - One bad text field never aborts the rest of the container
    - Entries are rendered "keyword: value" and joined by one blank line
"""

# Signature bytes - first 8 bytes of every PNG file
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

# Chunk tags
CHUNK_TEXT = b"tEXt"
CHUNK_ZTEXT = b"zTXt"
CHUNK_END = b"IEND"

# Header is length (4) + type (4), trailer is the CRC (4)
CHUNK_HEADER_SIZE = 8
CHUNK_CRC_SIZE = 4

# Chunk bodies are read in pieces of at most this size
READ_BLOCK_SIZE = 64 * 1024

# zTXt compression methods (only deflate is defined)
COMPRESSION_DEFLATE = 0

# Smallest zTXt body worth inflating: keyword, null, method and a zlib stream
MIN_ZTXT_BODY = 10

# Output buffer handed to the decompressor on each step
INFLATE_BUFFER_SIZE = 128 * 1024

# Step cap per field (2048 * 128 KiB = 256 MiB of output)
MAX_INFLATE_STEPS = 2048

# Rendering
ENTRY_SEPARATOR = "\n\n"
KEYWORD_SEPARATOR = ": "

# Text encodings, tried in order
TEXT_ENCODINGS = ("utf-8", "latin-1")

# Batch driver
PNG_EXTENSIONS = {".png"}
SIDECAR_SUFFIX = ".txt"
