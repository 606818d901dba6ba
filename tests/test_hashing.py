import hashlib

import pytest

from oceandoc.hashing import (
    Blake3,
    blake3_hex,
    crc32c,
    digest_hex,
    file_blake3,
    file_digest,
    file_md5,
    file_sha256,
    generate_salt,
    hash_password,
    md5_hex,
    murmur_hash64a,
    sha256_hex,
    verify_password,
)


def _payload(n):
    return bytes(i % 251 for i in range(n))


def test_crc32c_check_value():
    assert crc32c(b"123456789") == 0xE3069283


def test_crc32c_empty_and_str():
    assert crc32c(b"") == 0
    assert crc32c("123456789") == crc32c(b"123456789")


def test_blake3_empty_vector():
    assert blake3_hex(b"") == (
        "af1349b9f5f9a1a6a0404dea36dcc9499bcb25c9adc112b7cc9a93cae41f3262"
    )


def test_blake3_upper_case():
    assert blake3_hex(b"abc", upper=True) == blake3_hex(b"abc").upper()
    assert len(blake3_hex(b"abc")) == 64


@pytest.mark.parametrize("size", [1, 63, 64, 65, 1023, 1024, 1025, 2048, 3073, 4097])
def test_blake3_streaming_matches_one_shot(size):
    data = _payload(size)
    hasher = Blake3()
    for i in range(0, size, 100):
        hasher.update(data[i : i + 100])
    assert hasher.hexdigest() == blake3_hex(data)


def test_blake3_digest_does_not_consume_state():
    hasher = Blake3(b"part one ")
    first = hasher.digest()
    assert hasher.digest() == first
    hasher.update(b"part two")
    assert hasher.digest() == Blake3(b"part one part two").digest()
    assert hasher.digest() != first


def test_blake3_distinguishes_inputs():
    assert blake3_hex(_payload(2048)) != blake3_hex(_payload(2047))


def test_file_blake3(tmp_path):
    data = _payload(40000)
    path = tmp_path / "blob.bin"
    path.write_bytes(data)
    assert file_blake3(path) == blake3_hex(data)
    assert file_blake3(path, upper=True) == blake3_hex(data).upper()


def test_file_blake3_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        file_blake3(tmp_path / "missing")


def test_digests_match_hashlib():
    data = b"hello world"
    assert md5_hex(data) == hashlib.md5(data).hexdigest()
    assert sha256_hex(data) == hashlib.sha256(data).hexdigest()
    assert sha256_hex(data, upper=True) == hashlib.sha256(data).hexdigest().upper()
    assert digest_hex(data, "sha1") == hashlib.sha1(data).hexdigest()


def test_digest_unknown_algorithm():
    with pytest.raises(ValueError):
        digest_hex(b"x", "no-such-digest")


def test_file_digests(tmp_path):
    data = _payload(50000)
    path = tmp_path / "f.bin"
    path.write_bytes(data)
    assert file_md5(path) == hashlib.md5(data).hexdigest()
    assert file_sha256(path) == hashlib.sha256(data).hexdigest()
    assert file_digest(path, "sha512") == hashlib.sha512(data).hexdigest()


def test_file_digest_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        file_sha256(tmp_path / "missing")


def test_murmur_deterministic_and_signed():
    for n in range(0, 20):
        data = _payload(n)
        value = murmur_hash64a(data)
        assert value == murmur_hash64a(data)
        assert -(1 << 63) <= value < (1 << 63)


def test_murmur_seed_and_input_sensitivity():
    assert murmur_hash64a(b"abcdefgh") != murmur_hash64a(b"abcdefgh", seed=7)
    assert murmur_hash64a(b"abcdefghi") != murmur_hash64a(b"abcdefgh")
    assert murmur_hash64a("text") == murmur_hash64a(b"text")


def test_generate_salt():
    salt = generate_salt()
    assert len(salt) == 32
    int(salt, 16)
    assert generate_salt(8) != generate_salt(8)
    assert len(generate_salt(8)) == 16


def test_hash_and_verify_password():
    password = "password"
    salt = "placeholder"
    stored = hash_password(password, salt, iterations=1000)
    assert stored == hashlib.pbkdf2_hmac(
        "sha256", password.encode(), salt.encode(), 1000, 32
    ).hex()
    assert verify_password(password, salt, stored, iterations=1000)
    assert not verify_password("secret", salt, stored, iterations=1000)


def test_hash_password_key_size():
    password = "password"
    assert len(hash_password(password, "placeholder", iterations=10, key_size=16)) == 32