"""Pure path arithmetic: normalising, relating and partitioning paths and sizes."""

from __future__ import annotations

import logging
import os
from typing import List, Tuple

__all__ = [
    "absolute_path",
    "current_path",
    "find_common_root",
    "is_absolute",
    "parent_path",
    "partition_count",
    "partition_range",
    "real_path",
    "relative",
    "repo_file_path",
    "simplify_path",
    "unify_dir",
]

_log = logging.getLogger(__name__)


def unify_dir(path: str) -> str:
    """Drop one trailing ``/`` (unless the path is just ``/``) and collapse ``//``."""
    if len(path) > 1 and path.endswith("/"):
        path = path[:-1]
    return path.replace("//", "/")


def is_absolute(path: str) -> bool:
    """Whether ``path`` is absolute."""
    return os.path.isabs(path)


def parent_path(path: str) -> str:
    """The parent of ``path`` with its last element removed.

    A path without a separator has no parent and gives ``""``; a root-only
    path is its own parent; ``"/a/b/"`` gives ``"/a/b"``.
    """
    if "/" not in path:
        return ""
    if not path.strip("/"):
        return path
    head = path[: path.rfind("/")].rstrip("/")
    if not head:
        return "/"
    return head


def simplify_path(path: str) -> str:
    """Resolve ``.`` and ``..`` elements and repeated separators.

    Raises ``ValueError`` when ``..`` would climb above the start of the path.
    """
    dirs: List[str] = []
    for token in path.split("/"):
        if token == "..":
            if not dirs:
                raise ValueError(f"path escapes its root: {path!r}")
            dirs.pop()
        elif token and token != ".":
            dirs.append(token)
    out = "".join(f"{name}/" for name in dirs)
    if path.startswith("/"):
        out = "/" + out
    return unify_dir(out)


def find_common_root(path: str, base: str) -> str:
    """The nearest ancestor of ``base`` (or ``base`` itself) that prefixes ``path``.

    Returns ``""`` when there is none.
    """
    current = base
    while True:
        if path.startswith(current):
            return current
        if current == "/":
            return ""
        parent = parent_path(current)
        if not parent:
            return ""
        current = parent


def relative(path: str, base: str) -> str:
    """The path of ``path`` relative to ``base``.

    Raises ``ValueError`` when the two paths share no common root.
    """
    u_path = unify_dir(path)
    u_base = unify_dir(base)
    common = find_common_root(u_path, u_base)
    if not common:
        raise ValueError(f"cannot calc relative between {path!r} and {base!r}")

    parts: List[str] = []
    current = u_base
    while current != common:
        parts.append("../")
        current = parent_path(current)

    if len(u_path) > len(common):
        parts.append(u_path[len(common) + 1 :])
    return unify_dir("".join(parts))


def repo_file_path(repo_path: str, digest: str) -> str:
    """Where a blob with hex ``digest`` lives under ``repo_path``: ``aa/bb/aabb...``."""
    if len(digest) < 2:
        raise ValueError(f"digest too short: {digest!r}")
    return f"{unify_dir(repo_path)}/{digest[:2]}/{digest[2:4]}/{digest}"


def partition_count(total_size: int, partition_size: int) -> int:
    """How many partitions of ``partition_size`` bytes cover ``total_size`` bytes."""
    if partition_size <= 0:
        raise ValueError(f"partition size must be positive: {partition_size}")
    whole, rest = divmod(total_size, partition_size)
    return whole + (1 if rest > 0 else 0)


def partition_range(size: int, partition: int, partition_size: int) -> Tuple[int, int]:
    """Inclusive byte range ``(start, end)`` of a partition of a ``size``-byte file."""
    start = partition * partition_size
    end = start + partition_size - 1
    if end > size:
        end = size - 1
    return start, end


def current_path() -> str:
    """The current working directory."""
    return os.getcwd()


def absolute_path(path: str) -> str:
    """``path`` made absolute against the working directory, without normalising."""
    if os.path.isabs(path):
        return path
    return os.path.join(os.getcwd(), path)


def real_path(path: str) -> str:
    """The target of ``path`` if it is a symlink, otherwise ``path`` itself."""
    if not os.path.islink(path):
        return path
    return os.readlink(path)