"""Digest helpers and the nested-HMAC key derivation used by VMess AEAD."""

from __future__ import annotations

import hashlib
from collections.abc import Iterable
from typing import Protocol as _Protocol

_BLOCK_SIZE = 64


class _Hasher(_Protocol):
    def copy(self) -> _Hasher: ...

    def update(self, data: bytes) -> None: ...

    def digest(self) -> bytes: ...


class _Sha256:
    def __init__(self, state: hashlib._Hash | None = None) -> None:
        self._state = state if state is not None else hashlib.sha256()

    def copy(self) -> _Sha256:
        return _Sha256(self._state.copy())

    def update(self, data: bytes) -> None:
        self._state.update(data)

    def digest(self) -> bytes:
        return self._state.digest()


class _Nested:
    """HMAC construction over an arbitrary (possibly nested) hasher."""

    def __init__(self, inner: _Hasher, outer: _Hasher, opad: bytes) -> None:
        self._inner = inner
        self._outer = outer
        self._opad = opad

    @classmethod
    def keyed(cls, key: bytes, base: _Hasher) -> _Nested:
        if len(key) > _BLOCK_SIZE:
            raise ValueError(f"key longer than {_BLOCK_SIZE} bytes")
        padded = key.ljust(_BLOCK_SIZE, b"\0")
        ipad = bytes(b ^ 0x36 for b in padded)
        opad = bytes(b ^ 0x5C for b in padded)
        inner = base.copy()
        inner.update(ipad)
        return cls(inner, base, opad)

    def copy(self) -> _Nested:
        return _Nested(self._inner.copy(), self._outer.copy(), self._opad)

    def update(self, data: bytes) -> None:
        self._inner.update(data)

    def digest(self) -> bytes:
        result = self._inner.digest()
        outer = self._outer.copy()
        outer.update(self._opad)
        outer.update(result)
        return outer.digest()


def kdf(key: bytes, path: Iterable[bytes]) -> bytes:
    """Derive 32 bytes from ``key`` through nested HMAC-SHA256 keyed by ``path``."""
    current: _Hasher = _Nested.keyed(b"VMess AEAD KDF", _Sha256())
    for segment in path:
        current = _Nested.keyed(segment, current)
    current.update(key)
    return current.digest()


def _digest(name: str, parts: tuple[bytes, ...]) -> bytes:
    h = hashlib.new(name)
    for part in parts:
        h.update(part)
    return h.digest()


def md5(*args: bytes) -> bytes:
    """MD5 of the concatenation of ``args``."""
    return _digest("md5", args)


def sha256(*args: bytes) -> bytes:
    """SHA-256 of the concatenation of ``args``."""
    return _digest("sha256", args)


def sha224(*args: bytes) -> bytes:
    """SHA-224 of the concatenation of ``args``."""
    return _digest("sha224", args)