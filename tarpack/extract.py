from __future__ import annotations

import os
import shutil
import sys
import tarfile
from dataclasses import dataclass
from typing import List, Tuple

from .constants import DEFAULT_DIR_MODE
from .errors import ArchiveFormatError, UnsafePathError
from .pathutil import ensure_within, member_dest, norm_path
from .reader import iter_entries


@dataclass
class ExtractStats:
    files: int = 0
    dirs: int = 0
    symlinks: int = 0
    links: int = 0
    skipped_symlinks: int = 0


def _safe_symlink(target: str, dst: str) -> bool:
    """Best‑effort symlink that never raises.

    Args:
        target: Link target exactly as recorded in the archive.
        dst: Filesystem path of the link to create.

    Returns:
        True when the link was created.
    """
    symlink_fn = getattr(os, "symlink", None)
    if symlink_fn is None:
        print(f"Warning: symlinks not supported; skipping {dst}", file=sys.stderr)
        return False
    try:
        symlink_fn(target, dst)
    except (OSError, NotImplementedError) as exc:
        print(f"Warning: failed to create symlink {dst} -> {target}: {exc}", file=sys.stderr)
        return False
    return True


def _prepare_parent(dest: str, dst: str) -> None:
    parent = os.path.dirname(dst)
    ensure_within(dest, parent)
    os.makedirs(parent, exist_ok=True)


def _check_target(dest: str, dst: str) -> None:
    # An earlier member may have left a symlink at dst; never write through it
    if os.path.islink(dst):
        raise UnsafePathError(f"Member would be written through a symlink: {dst}")
    ensure_within(dest, dst)


def extract_tar(data: bytes, dest: str) -> ExtractStats:
    """Recreate the members of an uncompressed tar stream under ``dest``.

    Members are written in stream order. Directory modes are applied once
    everything else is in place, deepest first, so read-only directories still
    receive their children. A failed symlink is reported on stderr and
    skipped; any other error aborts the extraction. A member that would be
    written through a symlink already present at its path is rejected.
    """
    os.makedirs(dest, mode=DEFAULT_DIR_MODE, exist_ok=True)
    stats = ExtractStats()
    dir_modes: List[Tuple[str, int]] = []

    for ti, reader in iter_entries(data):
        if not norm_path(ti.name):
            if ti.isdir():
                continue  # "./" style entry for the root itself
            raise UnsafePathError(f"Member name resolves to the extraction root: {ti.name!r}")
        dst = member_dest(dest, ti.name)

        if ti.isdir():
            _prepare_parent(dest, dst)
            _check_target(dest, dst)
            os.makedirs(dst, exist_ok=True)
            dir_modes.append((dst, ti.mode))
            stats.dirs += 1
            continue

        _prepare_parent(dest, dst)

        if ti.issym():
            if _safe_symlink(ti.linkname, dst):
                stats.symlinks += 1
            else:
                stats.skipped_symlinks += 1
            continue

        _check_target(dest, dst)

        if ti.islnk():
            src = member_dest(dest, ti.linkname)
            ensure_within(dest, src)
            os.link(src, dst)
            stats.links += 1
            continue

        # Regular files and anything else tar can carry are written as files
        with open(dst, "wb") as wf:
            if reader is not None:
                try:
                    shutil.copyfileobj(reader, wf)
                except tarfile.TarError as exc:
                    raise ArchiveFormatError(f"Truncated member data for {ti.name!r}: {exc}") from exc
        os.chmod(dst, ti.mode)
        stats.files += 1

    for path, mode in sorted(dir_modes, reverse=True):
        os.chmod(path, mode)
    return stats
