import hashlib
import hmac
from uuid import UUID

import pytest

from tunl.hashing import kdf, md5, sha224, sha256


def test_kdf():
    user_id = UUID("96850032-1b92-46e9-a4f2-b99631456894").bytes
    key = md5(user_id, b"c48619fe-8f02-49e0-b9e9-edf763e17e21")
    res = kdf(key, [b"AES Auth ID Encryption"])
    assert list(res[:16]) == [117, 82, 144, 159, 147, 65, 74, 253, 91, 74, 70, 84, 114, 118, 203, 30]


def test_kdf_without_path_is_plain_hmac():
    key = b"some key material"
    expected = hmac.new(b"VMess AEAD KDF", key, hashlib.sha256).digest()
    assert kdf(key, []) == expected


def test_kdf_depends_on_path():
    key = bytes(16)
    assert kdf(key, [b"a"]) != kdf(key, [b"b"])
    assert kdf(key, [b"a", b"b"]) != kdf(key, [b"b", b"a"])
    assert len(kdf(key, [b"a", b"b"])) == 32


def test_kdf_path_segments_are_zero_padded_to_block():
    key = bytes(range(16))
    padded = kdf(key, [bytes(64)])
    assert len(padded) == 32
    assert kdf(key, [bytes(63)]) == padded
    assert kdf(key, [b""]) == padded


def test_kdf_rejects_oversized_path_segment():
    with pytest.raises(ValueError):
        kdf(b"k", [bytes(65)])


def test_digests_concatenate_arguments():
    assert md5(b"ab", b"cd") == md5(b"abcd") == hashlib.md5(b"abcd").digest()
    assert sha256(b"a", b"b", b"c") == hashlib.sha256(b"abc").digest()
    assert sha224(b"pass", b"word") == hashlib.sha224(b"password").digest()
    assert len(sha224(b"x")) == 28