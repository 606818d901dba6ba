"""File system operations: stat, create, copy, write and symlink syncing."""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass
from typing import Union

from oceandoc.pathutil import parent_path, partition_count, relative

try:
    import grp
    import pwd
except ImportError:  # pragma: no cover - non-POSIX systems
    grp = None
    pwd = None

__all__ = [
    "FileInfo",
    "copy",
    "copy_file",
    "create",
    "create_file_with_size",
    "create_symlink",
    "exists",
    "file_info",
    "file_partition_count",
    "file_size",
    "load_file",
    "mk_parent_dir",
    "mkdir",
    "remove",
    "rename",
    "set_update_time",
    "sync_remote_symlink",
    "sync_symlink",
    "target_exists",
    "truncate_file",
    "update_time",
    "write_at",
    "write_file",
]

_log = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]
Content = Union[bytes, bytearray, memoryview, str]


@dataclass(frozen=True)
class FileInfo:
    """Size, modification time (Unix ms) and owner names of a path."""

    update_time: int
    size: int
    user: str
    group: str


def _bytes(content: Content) -> bytes:
    return content.encode("utf-8") if isinstance(content, str) else bytes(content)


def _mtime_ms(st: os.stat_result) -> int:
    return st.st_mtime_ns // 1_000_000


def _owner_names(uid: int, gid: int) -> tuple:
    user = group = ""
    if pwd is not None:
        for candidate in (uid, os.getuid()):
            try:
                user = pwd.getpwuid(candidate).pw_name
                break
            except KeyError:
                continue
    if grp is not None:
        for candidate in (gid, os.getgid()):
            try:
                group = grp.getgrgid(candidate).gr_name
                break
            except KeyError:
                continue
    return user, group


def set_update_time(path: PathLike, ts: int) -> None:
    """Set access and modification time of ``path`` (not following links) to ``ts`` ms."""
    ns = ts * 1_000_000
    os.utime(os.fspath(path), ns=(ns, ns), follow_symlinks=False)


def update_time(path: PathLike) -> int:
    """Modification time of ``path`` in Unix milliseconds, without following links."""
    return _mtime_ms(os.lstat(os.fspath(path)))


def file_size(path: PathLike) -> int:
    """Size in bytes of ``path``, without following links."""
    return os.lstat(os.fspath(path)).st_size


def file_info(path: PathLike) -> FileInfo:
    """Modification time, size and owner names of ``path``."""
    st = os.lstat(os.fspath(path))
    user, group = _owner_names(st.st_uid, st.st_gid)
    return FileInfo(update_time=_mtime_ms(st), size=st.st_size, user=user, group=group)


def exists(path: PathLike) -> bool:
    """Whether anything, a dangling symlink included, is at ``path``."""
    return os.path.lexists(os.fspath(path))


def target_exists(src: PathLike, dst: PathLike) -> bool:
    """False only when ``src`` exists and ``dst`` does not."""
    if not os.path.exists(os.fspath(src)):
        return True
    return os.path.exists(os.fspath(dst))


def mkdir(path: PathLike) -> None:
    """Create ``path`` and its missing parents unless something is already there."""
    path = os.fspath(path)
    if not exists(path):
        os.makedirs(path)


def mk_parent_dir(path: PathLike) -> None:
    """Create the parent directory of ``path``; ``ValueError`` if it has none."""
    parent = parent_path(os.fspath(path))
    if not parent:
        raise ValueError(f"path has no parent: {os.fspath(path)!r}")
    mkdir(parent)


def remove(path: PathLike) -> bool:
    """Remove ``path`` recursively; returns whether anything was there."""
    path = os.fspath(path)
    if not exists(path):
        return False
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
    else:
        os.remove(path)
    return True


def create(path: PathLike) -> None:
    """Create an empty file (and its parent directory) unless ``path`` exists."""
    path = os.fspath(path)
    if not path:
        raise ValueError("empty path")
    if len(path) > 1 and path.endswith("/"):
        raise ValueError(f"create only supports files: {path!r}")
    if exists(path):
        return
    mk_parent_dir(path)
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o640)
    os.close(fd)


def rename(src: PathLike, dst: PathLike) -> None:
    """Rename ``src`` to ``dst``; ``FileNotFoundError`` if ``src`` is missing."""
    src, dst = os.fspath(src), os.fspath(dst)
    if not os.path.exists(src):
        raise FileNotFoundError(f"no such file: {src!r}")
    os.rename(src, dst)


def create_file_with_size(path: PathLike, size: int) -> None:
    """Create a file of ``size`` bytes; an existing ``path`` is left untouched."""
    path = os.fspath(path)
    if exists(path):
        return
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o640)
    try:
        os.ftruncate(fd, size)
    finally:
        os.close(fd)


def create_symlink(src: PathLike, target: PathLike) -> None:
    """Make ``src`` a symbolic link pointing to ``target``."""
    os.symlink(os.fspath(target), os.fspath(src))


def copy_file(src: PathLike, dst: PathLike, overwrite: bool = True) -> None:
    """Copy a regular file's contents and mode; ``FileExistsError`` if not overwriting."""
    src, dst = os.fspath(src), os.fspath(dst)
    if not overwrite and os.path.exists(dst):
        raise FileExistsError(f"destination exists: {dst!r}")
    shutil.copyfile(src, dst)
    shutil.copymode(src, dst)


def copy(src: PathLike, dst: PathLike) -> None:
    """Copy a file or, recursively, a directory tree to ``dst``."""
    src, dst = os.fspath(src), os.fspath(dst)
    if os.path.isdir(src):
        shutil.copytree(src, dst, dirs_exist_ok=True)
    elif os.path.isdir(dst):
        copy_file(src, os.path.join(dst, os.path.basename(src)), overwrite=False)
    else:
        copy_file(src, dst, overwrite=False)


def truncate_file(path: PathLike) -> None:
    """Empty an existing file; a missing path is left missing."""
    path = os.fspath(path)
    if not os.path.exists(path):
        return
    with open(path, "wb"):
        pass


def write_file(path: PathLike, content: Content, append: bool = False) -> None:
    """Write (or append) ``content``, creating missing parent directories."""
    path = os.fspath(path)
    if not os.path.exists(path):
        parent = parent_path(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
    with open(path, "ab" if append else "wb") as fh:
        fh.write(_bytes(content))


def write_at(path: PathLike, content: Content, start: int) -> None:
    """Overwrite bytes of an existing file from offset ``start``."""
    with open(os.fspath(path), "r+b") as fh:
        fh.seek(start)
        fh.write(_bytes(content))


def load_file(path: PathLike) -> bytes:
    """The whole content of ``path``."""
    with open(os.fspath(path), "rb") as fh:
        return fh.read()


def _check_symlink_args(src: str, src_symlink: str) -> None:
    if not src_symlink.startswith(src):
        raise ValueError(f"{src_symlink!r} must start with {src!r}")
    if not os.path.islink(src_symlink):
        raise ValueError(f"{src_symlink!r} must be a symlink")


def sync_symlink(src: PathLike, dst: PathLike, src_symlink: PathLike) -> str:
    """Recreate the symlink ``src_symlink`` under ``dst`` at the same relative place.

    Returns the path of the link created.
    """
    src, dst, src_symlink = os.fspath(src), os.fspath(dst), os.fspath(src_symlink)
    if not src_symlink.startswith(src):
        raise ValueError(f"{src_symlink!r} must start with {src!r}")
    if os.path.islink(src) or os.path.islink(dst):
        raise ValueError("src and dst cannot be symlinks")
    _check_symlink_args(src, src_symlink)

    target = os.readlink(src_symlink)
    try:
        rel = relative(src_symlink, src)
    except ValueError as exc:
        _log.error("%s", exc)
        rel = ""
    dst_symlink = f"{dst}/{rel}" if rel else dst

    mk_parent_dir(dst_symlink)
    remove(dst_symlink)
    os.symlink(target, dst_symlink)
    return dst_symlink


def sync_remote_symlink(src: PathLike, src_symlink: PathLike) -> str:
    """The target of ``src_symlink``, which must lie under the non-link ``src``."""
    src, src_symlink = os.fspath(src), os.fspath(src_symlink)
    if not src_symlink.startswith(src):
        raise ValueError(f"{src_symlink!r} must start with {src!r}")
    if os.path.islink(src):
        raise ValueError("src cannot be a symlink")
    _check_symlink_args(src, src_symlink)
    return os.readlink(src_symlink)


def file_partition_count(path: PathLike, partition_size: int) -> int:
    """How many partitions of ``partition_size`` bytes cover the file at ``path``."""
    return partition_count(file_size(path), partition_size)