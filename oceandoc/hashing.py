"""Checksums, BLAKE3, message digests and password hashing."""

from __future__ import annotations

import hashlib
import hmac
import os
import secrets
import struct
from typing import BinaryIO, Iterator, List, Optional, Union

from oceandoc.textutil import bytes_to_hex

__all__ = [
    "Blake3",
    "DEFAULT_ITERATIONS",
    "DEFAULT_KEY_SIZE",
    "DEFAULT_SALT_SIZE",
    "blake3_hex",
    "crc32c",
    "digest_hex",
    "file_blake3",
    "file_digest",
    "file_md5",
    "file_sha256",
    "generate_salt",
    "hash_password",
    "md5_hex",
    "murmur_hash64a",
    "sha256_hex",
    "verify_password",
]

Data = Union[bytes, bytearray, memoryview, str]
PathLike = Union[str, "os.PathLike[str]"]

CALC_BUFFER_SIZE = 16 * 1024
DEFAULT_SALT_SIZE = 16
DEFAULT_KEY_SIZE = 32
DEFAULT_ITERATIONS = 100_000

_MASK32 = 0xFFFFFFFF
_MASK64 = (1 << 64) - 1


def _as_bytes(data: Data) -> bytes:
    return data.encode("utf-8") if isinstance(data, str) else bytes(data)


def _read_chunks(fh: BinaryIO) -> Iterator[bytes]:
    while True:
        chunk = fh.read(CALC_BUFFER_SIZE)
        if not chunk:
            return
        yield chunk


# --- CRC-32C (Castagnoli) -------------------------------------------------


def _crc32c_table() -> List[int]:
    table = []
    for byte in range(256):
        crc = byte
        for _ in range(8):
            crc = (crc >> 1) ^ 0x82F63B78 if crc & 1 else crc >> 1
        table.append(crc)
    return table


_CRC32C_TABLE = _crc32c_table()


def crc32c(data: Data) -> int:
    """CRC-32C checksum of ``data`` as an unsigned 32-bit integer."""
    crc = _MASK32
    for byte in _as_bytes(data):
        crc = _CRC32C_TABLE[(crc ^ byte) & 0xFF] ^ (crc >> 8)
    return crc ^ _MASK32


# --- MurmurHash64A --------------------------------------------------------


def murmur_hash64a(data: Data, seed: int = 42) -> int:
    """MurmurHash64A of ``data`` as a signed 64-bit integer."""
    raw = _as_bytes(data)
    m = 0xC6A4A7935BD1E995
    r = 47
    h = (seed ^ (len(raw) * m)) & _MASK64

    body = len(raw) - len(raw) % 8
    for (k,) in struct.iter_unpack("<Q", raw[:body]):
        k = (k * m) & _MASK64
        k ^= k >> r
        k = (k * m) & _MASK64
        h ^= k
        h = (h * m) & _MASK64

    tail = raw[body:]
    if tail:
        h ^= int.from_bytes(tail, "little")
        h = (h * m) & _MASK64

    h ^= h >> r
    h = (h * m) & _MASK64
    h ^= h >> r
    return h - (1 << 64) if h >= 1 << 63 else h


# --- BLAKE3 ---------------------------------------------------------------

_OUT_LEN = 32
_BLOCK_LEN = 64
_CHUNK_LEN = 1024
_CHUNK_START = 1
_CHUNK_END = 2
_PARENT = 4
_ROOT = 8

_IV = (
    0x6A09E667, 0xBB67AE85, 0x3C6EF372, 0xA54FF53A,
    0x510E527F, 0x9B05688C, 0x1F83D9AB, 0x5BE0CD19,
)
_MSG_PERMUTATION = (2, 6, 3, 10, 7, 0, 4, 13, 1, 11, 12, 5, 9, 14, 15, 8)


def _rotr(x: int, n: int) -> int:
    return ((x >> n) | (x << (32 - n))) & _MASK32


def _g(s: List[int], a: int, b: int, c: int, d: int, mx: int, my: int) -> None:
    s[a] = (s[a] + s[b] + mx) & _MASK32
    s[d] = _rotr(s[d] ^ s[a], 16)
    s[c] = (s[c] + s[d]) & _MASK32
    s[b] = _rotr(s[b] ^ s[c], 12)
    s[a] = (s[a] + s[b] + my) & _MASK32
    s[d] = _rotr(s[d] ^ s[a], 8)
    s[c] = (s[c] + s[d]) & _MASK32
    s[b] = _rotr(s[b] ^ s[c], 7)


def _round(s: List[int], m: List[int]) -> None:
    _g(s, 0, 4, 8, 12, m[0], m[1])
    _g(s, 1, 5, 9, 13, m[2], m[3])
    _g(s, 2, 6, 10, 14, m[4], m[5])
    _g(s, 3, 7, 11, 15, m[6], m[7])
    _g(s, 0, 5, 10, 15, m[8], m[9])
    _g(s, 1, 6, 11, 12, m[10], m[11])
    _g(s, 2, 7, 8, 13, m[12], m[13])
    _g(s, 3, 4, 9, 14, m[14], m[15])


def _compress(cv, block_words, counter: int, block_len: int, flags: int) -> List[int]:
    state = list(cv) + list(_IV[:4]) + [
        counter & _MASK32,
        (counter >> 32) & _MASK32,
        block_len,
        flags,
    ]
    words = list(block_words)
    for round_no in range(7):
        _round(state, words)
        if round_no < 6:
            words = [words[i] for i in _MSG_PERMUTATION]
    for i in range(8):
        state[i] ^= state[i + 8]
        state[i + 8] ^= cv[i]
    return state


def _words(block: bytes) -> List[int]:
    return list(struct.unpack("<16I", block.ljust(_BLOCK_LEN, b"\0")))


class _Output:
    def __init__(self, cv, block_words, counter: int, block_len: int, flags: int):
        self.cv = cv
        self.block_words = block_words
        self.counter = counter
        self.block_len = block_len
        self.flags = flags

    def chaining_value(self) -> List[int]:
        return _compress(
            self.cv, self.block_words, self.counter, self.block_len, self.flags
        )[:8]

    def root_bytes(self, length: int) -> bytes:
        out = bytearray()
        counter = 0
        while len(out) < length:
            words = _compress(
                self.cv, self.block_words, counter, self.block_len, self.flags | _ROOT
            )
            out += struct.pack("<16I", *words)
            counter += 1
        return bytes(out[:length])


class _ChunkState:
    def __init__(self, key, chunk_counter: int, flags: int):
        self.cv = list(key)
        self.chunk_counter = chunk_counter
        self.block = bytearray()
        self.blocks_compressed = 0
        self.flags = flags

    def __len__(self) -> int:
        return self.blocks_compressed * _BLOCK_LEN + len(self.block)

    def _start_flag(self) -> int:
        return _CHUNK_START if self.blocks_compressed == 0 else 0

    def update(self, data: memoryview) -> None:
        while data:
            if len(self.block) == _BLOCK_LEN:
                self.cv = _compress(
                    self.cv,
                    _words(bytes(self.block)),
                    self.chunk_counter,
                    _BLOCK_LEN,
                    self.flags | self._start_flag(),
                )[:8]
                self.blocks_compressed += 1
                self.block.clear()
            take = min(_BLOCK_LEN - len(self.block), len(data))
            self.block += data[:take]
            data = data[take:]

    def output(self) -> _Output:
        return _Output(
            self.cv,
            _words(bytes(self.block)),
            self.chunk_counter,
            len(self.block),
            self.flags | self._start_flag() | _CHUNK_END,
        )


def _parent_output(left, right, key, flags: int) -> _Output:
    return _Output(key, list(left) + list(right), 0, _BLOCK_LEN, _PARENT | flags)


class Blake3:
    """Incremental BLAKE3 hasher producing 32-byte digests."""

    def __init__(self, data: Optional[Data] = None) -> None:
        self._key = _IV
        self._flags = 0
        self._chunk = _ChunkState(self._key, 0, self._flags)
        self._cv_stack: List[List[int]] = []
        if data is not None:
            self.update(data)

    def _add_chunk_cv(self, cv: List[int], total_chunks: int) -> None:
        while total_chunks & 1 == 0:
            cv = _parent_output(
                self._cv_stack.pop(), cv, self._key, self._flags
            ).chaining_value()
            total_chunks >>= 1
        self._cv_stack.append(cv)

    def update(self, data: Data) -> "Blake3":
        """Feed more input; returns the hasher for chaining."""
        view = memoryview(_as_bytes(data))
        while view:
            if len(self._chunk) == _CHUNK_LEN:
                cv = self._chunk.output().chaining_value()
                total = self._chunk.chunk_counter + 1
                self._add_chunk_cv(cv, total)
                self._chunk = _ChunkState(self._key, total, self._flags)
            take = min(_CHUNK_LEN - len(self._chunk), len(view))
            self._chunk.update(view[:take])
            view = view[take:]
        return self

    def digest(self) -> bytes:
        """The 32-byte digest of everything fed so far."""
        output = self._chunk.output()
        for cv in reversed(self._cv_stack):
            output = _parent_output(cv, output.chaining_value(), self._key, self._flags)
        return output.root_bytes(_OUT_LEN)

    def hexdigest(self, upper: bool = False) -> str:
        """The digest as hex text."""
        return bytes_to_hex(self.digest(), upper)


def blake3_hex(data: Data, upper: bool = False) -> str:
    """BLAKE3 of ``data`` as hex text."""
    return Blake3(data).hexdigest(upper)


def file_blake3(path: PathLike, upper: bool = False) -> str:
    """BLAKE3 of the file at ``path`` as hex text, read in blocks."""
    hasher = Blake3()
    with open(os.fspath(path), "rb") as fh:
        for chunk in _read_chunks(fh):
            hasher.update(chunk)
    return hasher.hexdigest(upper)


# --- Message digests ------------------------------------------------------


def digest_hex(data: Data, algorithm: str = "sha256", upper: bool = False) -> str:
    """Digest of ``data`` with a hashlib algorithm, as hex text.

    Raises ``ValueError`` for an unknown algorithm.
    """
    return bytes_to_hex(hashlib.new(algorithm, _as_bytes(data)).digest(), upper)


def file_digest(path: PathLike, algorithm: str = "sha256", upper: bool = False) -> str:
    """Digest of the file at ``path`` with a hashlib algorithm, read in blocks."""
    hasher = hashlib.new(algorithm)
    with open(os.fspath(path), "rb") as fh:
        for chunk in _read_chunks(fh):
            hasher.update(chunk)
    return bytes_to_hex(hasher.digest(), upper)


def md5_hex(data: Data, upper: bool = False) -> str:
    return digest_hex(data, "md5", upper)


def file_md5(path: PathLike, upper: bool = False) -> str:
    return file_digest(path, "md5", upper)


def sha256_hex(data: Data, upper: bool = False) -> str:
    return digest_hex(data, "sha256", upper)


def file_sha256(path: PathLike, upper: bool = False) -> str:
    return file_digest(path, "sha256", upper)


# --- Passwords ------------------------------------------------------------


def generate_salt(size: int = DEFAULT_SALT_SIZE) -> str:
    """``size`` cryptographically random bytes as lower-case hex text."""
    return secrets.token_bytes(size).hex()


def hash_password(
    password: str,
    salt: str,
    iterations: int = DEFAULT_ITERATIONS,
    key_size: int = DEFAULT_KEY_SIZE,
) -> str:
    """PBKDF2-HMAC-SHA256 of ``password`` with ``salt``, as lower-case hex text."""
    key = hashlib.pbkdf2_hmac(
        "sha256", _as_bytes(password), _as_bytes(salt), iterations, key_size
    )
    return key.hex()


def verify_password(
    password: str,
    salt: str,
    stored_hash: str,
    iterations: int = DEFAULT_ITERATIONS,
    key_size: int = DEFAULT_KEY_SIZE,
) -> bool:
    """Whether ``password`` with ``salt`` hashes to ``stored_hash``."""
    computed = hash_password(password, salt, iterations, key_size)
    return hmac.compare_digest(computed, stored_hash)