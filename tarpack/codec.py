from __future__ import annotations

import bz2
import contextlib
import gzip
import io
import lzma
import os
import zlib
from dataclasses import dataclass
from typing import BinaryIO, Callable, ContextManager, Dict, Optional, Tuple, Type, Union

from .constants import (
    Compression,
    EXTENSION_MAP,
    GZIP_MAGIC,
    BZIP2_MAGIC,
    BZIP2_BLOCK_MAGIC,
    XZ_MAGIC,
    LZMA_ALONE_MAGIC,
    DEFAULT_GZIP_LEVEL,
    DEFAULT_BZIP2_LEVEL,
    DEFAULT_LZMA_PRESET,
)
from .errors import CodecError


_READ_BLOCK = 1 << 20


@dataclass(frozen=True)
class _CodecSpec:
    name: str
    default_level: Optional[int]
    writer: Callable[[BinaryIO, Optional[int]], ContextManager[BinaryIO]]
    reader: Callable[[BinaryIO], ContextManager[BinaryIO]]
    # Exceptions the library raises for malformed or truncated input read
    # from an in-memory buffer
    errors: Tuple[Type[BaseException], ...]


def _identity(fileobj: BinaryIO, _level: Optional[int] = None) -> ContextManager[BinaryIO]:
    # Leaves the caller's stream open on exit
    return contextlib.nullcontext(fileobj)


def _gzip_writer(fileobj: BinaryIO, level: Optional[int]) -> gzip.GzipFile:
    # filename="" and mtime=0 keep the header free of per-call metadata
    return gzip.GzipFile(filename="", mode="wb", compresslevel=level, fileobj=fileobj, mtime=0)


def _gzip_reader(fileobj: BinaryIO) -> gzip.GzipFile:
    return gzip.GzipFile(filename="", mode="rb", fileobj=fileobj)


def _bzip2_writer(fileobj: BinaryIO, level: Optional[int]) -> bz2.BZ2File:
    return bz2.BZ2File(fileobj, mode="wb", compresslevel=level)


def _bzip2_reader(fileobj: BinaryIO) -> bz2.BZ2File:
    return bz2.BZ2File(fileobj, mode="rb")


def _lzma_writer(fileobj: BinaryIO, level: Optional[int]) -> lzma.LZMAFile:
    return lzma.LZMAFile(fileobj, mode="wb", format=lzma.FORMAT_XZ, preset=level)


def _lzma_reader(fileobj: BinaryIO) -> lzma.LZMAFile:
    # FORMAT_AUTO also accepts legacy .lzma streams
    return lzma.LZMAFile(fileobj, mode="rb", format=lzma.FORMAT_AUTO)


_CODECS: Dict[Compression, _CodecSpec] = {
    Compression.NONE: _CodecSpec("none", None, _identity, _identity, ()),
    Compression.GZIP: _CodecSpec(
        "gzip", DEFAULT_GZIP_LEVEL, _gzip_writer, _gzip_reader,
        (gzip.BadGzipFile, zlib.error, EOFError),
    ),
    Compression.BZIP2: _CodecSpec(
        "bzip2", DEFAULT_BZIP2_LEVEL, _bzip2_writer, _bzip2_reader,
        (OSError, EOFError),
    ),
    Compression.LZMA: _CodecSpec(
        "lzma", DEFAULT_LZMA_PRESET, _lzma_writer, _lzma_reader,
        (lzma.LZMAError, EOFError),
    ),
}


class Codec:
    """Compression strategy for one tag: stream wrappers plus one-shot helpers."""

    def __init__(self, compression: Union[Compression, int, str], level: Optional[int] = None):
        self.compression = Compression.parse(compression)
        self._spec = _CODECS[self.compression]
        self.level = level if level is not None else self._spec.default_level

    @property
    def name(self) -> str:
        return self._spec.name

    def open_writer(self, fileobj: BinaryIO) -> ContextManager[BinaryIO]:
        """Wrap a binary sink; closing the wrapper flushes the codec trailer only."""
        return self._spec.writer(fileobj, self.level)

    def open_reader(self, fileobj: BinaryIO) -> ContextManager[BinaryIO]:
        """Wrap a binary source yielding decompressed bytes."""
        return self._spec.reader(fileobj)

    def write_all(self, fileobj: BinaryIO, data: bytes) -> int:
        with self.open_writer(fileobj) as w:
            w.write(data)
        return len(data)

    def read_all(self, fileobj: BinaryIO) -> bytes:
        """Decompress everything ``fileobj`` holds.

        The source is drained before decoding, so I/O errors from it propagate
        as they are and only codec failures become CodecError.
        """
        raw = fileobj.read()
        if self.compression == Compression.NONE:
            return raw
        buf = bytearray()
        try:
            with self.open_reader(io.BytesIO(raw)) as r:
                while True:
                    block = r.read(_READ_BLOCK)
                    if not block:
                        break
                    buf += block
        except self._spec.errors as exc:
            raise CodecError(f"{self.name} decompression failed: {exc}") from exc
        return bytes(buf)

    def compress(self, data: bytes) -> bytes:
        out = io.BytesIO()
        self.write_all(out, data)
        return out.getvalue()

    def decompress(self, data: bytes) -> bytes:
        return self.read_all(io.BytesIO(data))

    def __repr__(self) -> str:
        return f"Codec({self.compression.name}, level={self.level})"


def get_codec(compression: Union[Compression, int, str], level: Optional[int] = None) -> Codec:
    """Resolve a tag to its codec; unknown tags raise UnknownCompressionError."""
    return Codec(compression, level)


def guess_compression(filename: Union[str, os.PathLike]) -> Compression:
    """Guess the codec from the final file extension (case-insensitive)."""
    _root, ext = os.path.splitext(os.fspath(filename))
    return EXTENSION_MAP.get(ext.lower(), Compression.NONE)


def detect_compression(data: bytes) -> Compression:
    """Sniff the container format from leading magic bytes."""
    if data.startswith(GZIP_MAGIC):
        return Compression.GZIP
    if data.startswith(BZIP2_MAGIC) and data[4:10] == BZIP2_BLOCK_MAGIC:
        return Compression.BZIP2
    if data.startswith((XZ_MAGIC, LZMA_ALONE_MAGIC)):
        return Compression.LZMA
    return Compression.NONE
