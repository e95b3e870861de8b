from __future__ import annotations

import io
import tarfile
from typing import BinaryIO, Iterator, List, Optional, Tuple

from .errors import ArchiveFormatError


Entry = Tuple[tarfile.TarInfo, Optional[BinaryIO]]


def open_tar(data: bytes) -> tarfile.TarFile:
    """Open an uncompressed tar stream held in memory for reading."""
    try:
        return tarfile.open(fileobj=io.BytesIO(data), mode="r:")
    except tarfile.TarError as exc:
        raise ArchiveFormatError(f"Malformed tar stream: {exc}") from exc


def iter_entries(data: bytes) -> Iterator[Entry]:
    """Yield ``(tarinfo, reader)`` for each member in stream order.

    ``reader`` is a binary file object for regular files and None for every
    other member type. It is only valid until the next member is requested.
    An empty buffer yields nothing. Reading a member whose data is cut short
    raises ``tarfile.ReadError``.
    """
    if not data:
        return
    with open_tar(data) as tar:
        while True:
            try:
                ti = tar.next()
            except tarfile.TarError as exc:
                raise ArchiveFormatError(f"Malformed tar header: {exc}") from exc
            if ti is None:
                break
            reader = tar.extractfile(ti) if ti.isreg() else None
            yield ti, reader


def list_members(data: bytes) -> List[tarfile.TarInfo]:
    return [ti for ti, _reader in iter_entries(data)]
