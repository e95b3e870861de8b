from __future__ import annotations

import tarfile
from enum import IntEnum
from typing import Dict, Union

from .errors import UnknownCompressionError


class Compression(IntEnum):
    """Compression applied to the tar stream at serialization time."""

    NONE = 0
    GZIP = 1
    BZIP2 = 2
    LZMA = 3

    @classmethod
    def parse(cls, value: Union["Compression", int, str]) -> "Compression":
        """Resolve a member, an integer tag, or a name/alias (case-insensitive)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            if key in COMPRESSION_ALIASES:
                return COMPRESSION_ALIASES[key]
            raise UnknownCompressionError(f"unknown compression: {value!r}")
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                pass
        raise UnknownCompressionError(f"unknown compression: {value!r}")


COMPRESSION_ALIASES: Dict[str, Compression] = {
    "none": Compression.NONE,
    "tar": Compression.NONE,
    "gzip": Compression.GZIP,
    "gz": Compression.GZIP,
    "bzip2": Compression.BZIP2,
    "bz2": Compression.BZIP2,
    "lzma": Compression.LZMA,
    "xz": Compression.LZMA,
}

# Final suffix (lower-case) -> codec used when guessing from a filename
EXTENSION_MAP: Dict[str, Compression] = {
    ".xz": Compression.LZMA,
    ".lzma": Compression.LZMA,
    ".txz": Compression.LZMA,
    ".bz2": Compression.BZIP2,
    ".bzip2": Compression.BZIP2,
    ".tbz": Compression.BZIP2,
    ".tbz2": Compression.BZIP2,
    ".gz": Compression.GZIP,
    ".gzip": Compression.GZIP,
    ".tgz": Compression.GZIP,
}

# Leading magic bytes of each container format
GZIP_MAGIC = b"\x1f\x8b\x08"
BZIP2_MAGIC = b"BZh"
BZIP2_BLOCK_MAGIC = b"1AY&SY"  # follows the 1-byte block size digit
XZ_MAGIC = b"\xfd7zXZ\x00"
LZMA_ALONE_MAGIC = b"\x5d\x00\x00\x80"


# Codec defaults (same levels the stdlib one-shot helpers use)
DEFAULT_GZIP_LEVEL = 9
DEFAULT_BZIP2_LEVEL = 9
DEFAULT_LZMA_PRESET = 6

DEFAULT_TAR_FORMAT = tarfile.PAX_FORMAT
DEFAULT_DIR_MODE = 0o755
