"""
tarpack: directory trees to (compressed) tarballs and back.

Features:

- Walk a directory into an in-memory tar stream, preserving type, mode bits and
  symlink targets.
- Save/load through one of four codecs: none, gzip, bzip2, lzma/xz.
- Load from bytes, a stream or a file (codec guessed from the extension or
  sniffed from magic bytes).
- Extract to a directory or iterate the members in stream order.

Everything is held in memory; there is no streaming or append mode.
"""

from .archive import Archive
from .codec import Codec, detect_compression, get_codec, guess_compression
from .constants import Compression
from .errors import (
    TarpackError,
    UnknownCompressionError,
    CodecError,
    ArchiveFormatError,
    UnsafePathError,
    UnsupportedEntryError,
)
from .extract import ExtractStats

__version__ = "0.1"

__all__ = [
    "Archive",
    "Codec",
    "Compression",
    "ExtractStats",
    "detect_compression",
    "get_codec",
    "guess_compression",
    "TarpackError",
    "UnknownCompressionError",
    "CodecError",
    "ArchiveFormatError",
    "UnsafePathError",
    "UnsupportedEntryError",
]
