"""String, hex, base64, xz and UUID helpers."""

from __future__ import annotations

import base64
import lzma
import re
import string
import uuid
from typing import List, Union

__all__ = [
    "base64_decode",
    "base64_encode",
    "bytes_to_hex",
    "contains",
    "ends_with",
    "hex_to_int",
    "lzma_compress",
    "lzma_decompress",
    "new_uuid",
    "replace_all",
    "split",
    "starts_with",
    "to_hex",
    "to_int",
    "to_lower",
    "to_upper",
    "trim",
]

_WHITESPACE = " \t\n\v\f\r"
_WHITESPACE_RUN = re.compile(r"[ \t\n\v\f\r]+")
_TO_UPPER = str.maketrans(string.ascii_lowercase, string.ascii_uppercase)
_TO_LOWER = str.maketrans(string.ascii_uppercase, string.ascii_lowercase)
_DECIMAL = re.compile(r"-?[0-9]+")
_HEX = re.compile(r"-?[0-9a-fA-F]+")
_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_UINT64_MASK = (1 << 64) - 1

Data = Union[bytes, bytearray, memoryview, str]


def _as_bytes(data: Data) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


def to_upper(text: str) -> str:
    """Upper-case ASCII letters; other characters are left alone."""
    return text.translate(_TO_UPPER)


def to_lower(text: str) -> str:
    """Lower-case ASCII letters; other characters are left alone."""
    return text.translate(_TO_LOWER)


def trim(text: str) -> str:
    """Strip ASCII whitespace from both ends."""
    return text.strip(_WHITESPACE)


def starts_with(text: str, prefix: str) -> bool:
    return text.startswith(prefix)


def ends_with(text: str, suffix: str) -> bool:
    return text.endswith(suffix)


def contains(text: str, part: str) -> bool:
    return part in text


def replace_all(text: str, old: str, new: Union[str, int, float]) -> str:
    """Replace every occurrence of ``old``; an empty ``old`` changes nothing."""
    if not old:
        return text
    return text.replace(old, new if isinstance(new, str) else str(new))


def split(text: str, delims: str, trim_empty: bool = True) -> List[str]:
    """Split ``text`` on any character of ``delims``.

    With ``trim_empty`` the text is first trimmed and every internal run of
    whitespace is collapsed to its first character. Empty text gives ``[]``.
    """
    if not text:
        return []
    if trim_empty:
        text = _WHITESPACE_RUN.sub(lambda m: m.group(0)[0], trim(text))
    if not delims:
        return [text]
    pattern = "[" + "".join(re.escape(c) for c in sorted(set(delims))) + "]"
    return re.split(pattern, text)


def to_int(text: str) -> int:
    """Parse the leading decimal integer of ``text``.

    An optional ``-`` and at least one digit must open the text; anything
    after the digits is ignored. Raises ``ValueError`` otherwise.
    """
    match = _DECIMAL.match(text)
    if match is None:
        raise ValueError(f"not an integer: {text!r}")
    return int(match.group(0))


def to_hex(value: int, upper: bool = False) -> str:
    """Render ``value`` as 16 hex digits of its unsigned 64-bit form."""
    return format(value & _UINT64_MASK, "016X" if upper else "016x")


def bytes_to_hex(data: Data, upper: bool = False) -> str:
    """Two hex digits per byte of ``data``."""
    out = _as_bytes(data).hex()
    return out.upper() if upper else out


def hex_to_int(text: str) -> int:
    """Parse the leading hex number of ``text`` as a signed 64-bit integer.

    No ``0x`` prefix is accepted. Raises ``ValueError`` on malformed input or
    a value outside the 64-bit signed range.
    """
    match = _HEX.match(text)
    if match is None:
        raise ValueError(f"not a hex number: {text!r}")
    value = int(match.group(0), 16)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise ValueError(f"hex number out of range: {text!r}")
    return value


def base64_encode(data: Data) -> str:
    """Standard padded base64."""
    return base64.b64encode(_as_bytes(data)).decode("ascii")


def base64_decode(text: Union[str, bytes]) -> bytes:
    """Decode standard base64; raises ``binascii.Error`` on bad padding."""
    return base64.b64decode(text)


def lzma_compress(data: Data) -> bytes:
    """Compress into an xz stream with the default preset and a CRC64 check."""
    return lzma.compress(
        _as_bytes(data),
        format=lzma.FORMAT_XZ,
        check=lzma.CHECK_CRC64,
        preset=lzma.PRESET_DEFAULT,
    )


def lzma_decompress(data: Data) -> bytes:
    """Decompress one or more concatenated xz streams.

    Raises ``lzma.LZMAError`` on corrupt or truncated input.
    """
    return lzma.decompress(_as_bytes(data), format=lzma.FORMAT_XZ)


def new_uuid() -> str:
    """A random (version 4) UUID in canonical text form."""
    return str(uuid.uuid4())