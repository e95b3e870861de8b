from __future__ import annotations

import io
import os
import tarfile
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Iterator, List, Optional, Union

from .codec import Codec, detect_compression, get_codec, guess_compression
from .constants import Compression, DEFAULT_TAR_FORMAT
from .errors import ArchiveFormatError
from .extract import ExtractStats, extract_tar
from .reader import Entry, iter_entries, list_members, open_tar
from .writer import build_tar


PathLike = Union[str, "os.PathLike[str]"]
EntryCallback = Callable[[tarfile.TarInfo, Optional[BinaryIO]], None]


@dataclass
class Archive:
    """An uncompressed tar stream held in memory plus the codec used to serialize it.

    ``data`` never holds compressed bytes: compression is applied by
    :meth:`save`, :meth:`to_bytes` and :meth:`to_file`, and removed by
    :meth:`load` and the ``from_*`` constructors. A tag of ``None`` or
    ``Compression.NONE`` lets :meth:`to_file` guess the codec from the target
    extension; everything else writes a plain tar for it.

    Example::

        archive = Archive.from_directory("docs")
        archive.to_file("docs.tar.xz")
        Archive.from_file("docs.tar.xz").to_directory("docs.restored")
    """

    data: bytes = field(default=b"", repr=False)
    compression: Optional[Compression] = None
    level: Optional[int] = None

    # construction
    @classmethod
    def from_directory(cls, path: PathLike, *, tar_format: int = DEFAULT_TAR_FORMAT) -> "Archive":
        """Archive the contents (not the directory itself) of ``path``."""
        return cls(data=build_tar(os.fspath(path), tar_format=tar_format))

    @classmethod
    def from_bytes(cls, data: bytes, compression: Union[Compression, int, str, None] = None) -> "Archive":
        """Load a (possibly compressed) blob; ``compression=None`` sniffs the format."""
        tag = detect_compression(data) if compression is None else Compression.parse(compression)
        archive = cls(compression=tag)
        archive.load(io.BytesIO(data))
        return archive

    @classmethod
    def from_stream(cls, fileobj: BinaryIO, compression: Union[Compression, int, str] = Compression.NONE) -> "Archive":
        archive = cls(compression=Compression.parse(compression))
        archive.load(fileobj)
        return archive

    @classmethod
    def from_file(cls, path: PathLike) -> "Archive":
        """Load a tar file; the codec is guessed from the file extension."""
        archive = cls(compression=guess_compression(path))
        with open(path, "rb") as fh:
            archive.load(fh)
        return archive

    # codec boundary
    def codec(self, compression: Union[Compression, int, str, None] = None) -> Codec:
        """Codec for ``compression``, else for this archive's tag (unset = none)."""
        if compression is None:
            compression = self.compression if self.compression is not None else Compression.NONE
        return get_codec(compression, self.level)

    def save(self, out: BinaryIO) -> int:
        """Write ``data`` through the codec into ``out``.

        Returns the number of tar bytes written. The codec is resolved before
        any output, so an unknown tag leaves ``out`` untouched.
        """
        return self.codec().write_all(out, self.data)

    def load(self, src: BinaryIO) -> int:
        """Replace ``data`` with the decompressed contents of ``src``."""
        self.data = self.codec().read_all(src)
        return len(self.data)

    # serialization
    def to_bytes(self) -> bytes:
        codec = self.codec()
        out = io.BytesIO()
        codec.write_all(out, self.data)
        return out.getvalue()

    def to_file(self, path: PathLike) -> int:
        """Save to ``path``; without a codec tag it is guessed from the extension."""
        compression = self.compression
        if compression is None or compression == Compression.NONE:
            compression = guess_compression(path)
        codec = self.codec(compression)
        with open(path, "wb") as fh:
            return codec.write_all(fh, self.data)

    def to_directory(self, path: PathLike) -> ExtractStats:
        """Extract every member under ``path``, creating it if needed."""
        return extract_tar(self.data, os.fspath(path))

    # inspection
    def open_tar(self) -> tarfile.TarFile:
        return open_tar(self.data)

    def iter_entries(self) -> Iterator[Entry]:
        return iter_entries(self.data)

    def for_each_entry(self, callback: EntryCallback) -> None:
        """Call ``callback(tarinfo, reader)`` for each member in stream order.

        ``reader`` is None for anything but regular files. An exception raised
        by the callback stops the iteration and propagates. Truncated member
        data surfaces as ArchiveFormatError when the callback reads it.
        """
        for ti, reader in iter_entries(self.data):
            try:
                callback(ti, reader)
            except tarfile.TarError as exc:
                raise ArchiveFormatError(f"Malformed member data for {ti.name!r}: {exc}") from exc

    def members(self) -> List[tarfile.TarInfo]:
        return list_members(self.data)

    def names(self) -> List[str]:
        return [ti.name for ti in list_members(self.data)]
