from __future__ import annotations

import errno
import io
import os
import stat
import tarfile
from typing import Optional

from .constants import DEFAULT_TAR_FORMAT
from .errors import UnsupportedEntryError
from .pathutil import arc_name, norm_path


class TarWriter:
    """In-memory writer producing one uncompressed tar stream."""

    def __init__(self, tar_format: int = DEFAULT_TAR_FORMAT):
        self.tar_format = tar_format
        self._buf: Optional[io.BytesIO] = None
        self._tar: Optional[tarfile.TarFile] = None
        self._data: Optional[bytes] = None

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self):
        if self._tar is not None:
            return
        self._buf = io.BytesIO()
        self._data = None
        self._tar = tarfile.open(fileobj=self._buf, mode="w", format=self.tar_format)

    def close(self):
        if self._tar is not None:
            self._tar.close()
            self._tar = None
            self._data = self._buf.getvalue()
            self._buf = None

    def getvalue(self) -> bytes:
        """The finished stream; only available once the writer is closed."""
        if self._data is None:
            raise RuntimeError("Tar stream not finalized")
        return self._data

    def add_path(self, fs_path: str, arc_path: str) -> tarfile.TarInfo:
        """Archive one filesystem entry (without recursing) under ``arc_path``.

        Type and mode come from ``lstat``; symlinks store their target, regular
        files their content.
        """
        tar = self._require_open()
        ti = tar.gettarinfo(fs_path, arcname=norm_path(arc_path))
        if ti is None:
            raise UnsupportedEntryError(f"Cannot archive {fs_path}: unsupported file type")
        if ti.isreg():
            with open(fs_path, "rb") as fh:
                tar.addfile(ti, fh)
        else:
            tar.addfile(ti)
        return ti

    # internals
    def _require_open(self) -> tarfile.TarFile:
        if self._tar is None:
            raise RuntimeError("Tar writer not open")
        return self._tar


def _walk(w: TarWriter, root: str, dirpath: str) -> None:
    for name in sorted(os.listdir(dirpath)):
        full = os.path.join(dirpath, name)
        ti = w.add_path(full, arc_name(root, full))
        # lstat-based, so symlinked directories are never entered
        if ti.isdir():
            _walk(w, root, full)


def build_tar(root: str, *, tar_format: int = DEFAULT_TAR_FORMAT) -> bytes:
    """Serialize the contents (not the root itself) of ``root`` into a tar stream.

    Entries are emitted depth-first in lexical order (``a``, ``b``, ``b/x``,
    ``c``), so a parent always precedes its descendants. Symlinked directories
    are stored as links and not descended into. Any unreadable path aborts the
    walk with the underlying ``OSError``.
    """
    root = os.path.abspath(root)
    st = os.stat(root)
    if not stat.S_ISDIR(st.st_mode):
        raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), root)

    with TarWriter(tar_format=tar_format) as w:
        _walk(w, root, root)
    return w.getvalue()
