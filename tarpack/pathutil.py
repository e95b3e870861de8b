from __future__ import annotations

import os

from .errors import UnsafePathError


def norm_path(p: str) -> str:
    """Normalize member names to a canonical forward-slash form.

    Rules:
    - Convert backslashes to slashes
    - Strip leading/trailing slashes
    - Remove empty and '.' segments
    - Reject '..' segments
    """
    p = p.replace("\\", "/").strip("/")
    parts = [q for q in p.split("/") if q not in ("", ".")]
    for q in parts:
        if q == "..":
            raise UnsafePathError(f"Member name may not contain '..': {p!r}")
    return "/".join(parts)


def arc_name(root: str, full: str) -> str:
    """Member name of ``full`` relative to the walk root."""
    rel = os.path.relpath(full, start=root)
    return rel.replace(os.sep, "/")


def member_dest(dest: str, name: str) -> str:
    """Filesystem path for member ``name`` under ``dest``; never ``dest`` itself."""
    rel = norm_path(name)
    if not rel:
        raise UnsafePathError(f"Member name resolves to the extraction root: {name!r}")
    return os.path.join(dest, *rel.split("/"))


def ensure_within(root: str, path: str) -> None:
    """Reject ``path`` if, after resolving symlinks, it lies outside ``root``."""
    real_root = os.path.realpath(root)
    real = os.path.realpath(path)
    if real != real_root and not real.startswith(real_root.rstrip(os.sep) + os.sep):
        raise UnsafePathError(f"Path escapes the extraction root: {path}")
