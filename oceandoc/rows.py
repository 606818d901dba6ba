"""Typed records built from rows of the users, meta and files tables."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

from oceandoc.hashing import DEFAULT_KEY_SIZE, DEFAULT_SALT_SIZE

__all__ = ["FilesRow", "MetaRow", "UsersRow"]


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def _int(value: Any) -> int:
    if value is None:
        return 0
    return int(value)


@dataclass
class UsersRow:
    """A user account with its salt and derived password hash (hex text)."""

    id: int = 0
    user: str = ""
    salt: str = ""
    password: str = ""
    create_time: int = 0
    update_time: int = 0

    @classmethod
    def from_row(
        cls,
        row: Sequence[Any],
        salt_size: int = DEFAULT_SALT_SIZE,
        key_size: int = DEFAULT_KEY_SIZE,
    ) -> "UsersRow":
        """Build from ``(user, salt, password, create_time, update_time)``.

        Salt and hash are cut to the hex length of ``salt_size`` and
        ``key_size`` bytes.
        """
        user, salt, hashed, create_time, update_time = row[:5]
        return cls(
            user=_text(user),
            salt=_text(salt)[: salt_size * 2],
            password=_text(hashed)[: key_size * 2],
            create_time=_int(create_time),
            update_time=_int(update_time),
        )


@dataclass
class MetaRow:
    """The schema version stored in the meta table."""

    id: int = 0
    version: int = 0

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "MetaRow":
        """Build from ``(version,)``."""
        return cls(version=_int(row[0]))


@dataclass
class FilesRow:
    """A stored file and where it came from."""

    id: int = 0
    local_id: str = ""
    device_id: str = ""
    repo_dir: str = ""
    file_hash: str = ""
    type: int = 0
    file_name: str = ""
    owner: str = ""
    taken_time: int = 0
    video_hash: str = ""
    cover_hash: str = ""
    thumb_hash: str = ""

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "FilesRow":
        """Build from the twelve columns in field order, ``id`` first."""
        if len(row) < 12:
            raise ValueError(f"files row needs 12 columns, got {len(row)}")
        (
            id_, local_id, device_id, repo_dir, file_hash, type_,
            file_name, owner, taken_time, video_hash, cover_hash, thumb_hash,
        ) = row[:12]
        return cls(
            id=_int(id_),
            local_id=_text(local_id),
            device_id=_text(device_id),
            repo_dir=_text(repo_dir),
            file_hash=_text(file_hash),
            type=_int(type_),
            file_name=_text(file_name),
            owner=_text(owner),
            taken_time=_int(taken_time),
            video_hash=_text(video_hash),
            cover_hash=_text(cover_hash),
            thumb_hash=_text(thumb_hash),
        )