"""VMess AEAD request header decoding and response header encoding."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from uuid import UUID

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from .common import (
    KDFSALT_CONST_AEAD_RESP_HEADER_IV,
    KDFSALT_CONST_AEAD_RESP_HEADER_KEY,
    KDFSALT_CONST_AEAD_RESP_HEADER_LEN_IV,
    KDFSALT_CONST_AEAD_RESP_HEADER_LEN_KEY,
    KDFSALT_CONST_VMESS_HEADER_PAYLOAD_AEAD_IV,
    KDFSALT_CONST_VMESS_HEADER_PAYLOAD_AEAD_KEY,
    KDFSALT_CONST_VMESS_HEADER_PAYLOAD_LENGTH_AEAD_IV,
    KDFSALT_CONST_VMESS_HEADER_PAYLOAD_LENGTH_AEAD_KEY,
    ExactReader,
    parse_domain,
    parse_ipv4,
    parse_ipv6,
)
from .context import Network
from .hashing import kdf, md5, sha256

_AUTH_SALT = b"c48619fe-8f02-49e0-b9e9-edf763e17e21"


@dataclass(frozen=True)
class RequestHeader:
    """Decoded VMess command section."""

    network: Network
    address: str
    port: int
    key: bytes
    iv: bytes
    response_header: int


@dataclass(frozen=True)
class ResponseHeader:
    """Encrypted response header: sealed length then sealed payload."""

    length: bytes
    payload: bytes


def _uuid_bytes(uuid: UUID | bytes) -> bytes:
    return uuid.bytes if isinstance(uuid, UUID) else bytes(uuid)


def _open(key: bytes, nonce: bytes, data: bytes, aad: bytes | None) -> bytes:
    try:
        return AESGCM(key).decrypt(nonce, data, aad)
    except InvalidTag:
        raise ValueError("aead decryption failed") from None


async def aead_decrypt(reader: ExactReader, uuid: UUID | bytes) -> bytes:
    """Read and decrypt the AEAD-sealed command section of a VMess request."""
    cmd_key = md5(_uuid_bytes(uuid), _AUTH_SALT)

    auth_id = await reader.readexactly(16)
    sealed_length = await reader.readexactly(18)
    nonce = await reader.readexactly(8)

    length_key = kdf(cmd_key, [KDFSALT_CONST_VMESS_HEADER_PAYLOAD_LENGTH_AEAD_KEY, auth_id, nonce])
    length_nonce = kdf(cmd_key, [KDFSALT_CONST_VMESS_HEADER_PAYLOAD_LENGTH_AEAD_IV, auth_id, nonce])
    length = _open(length_key[:16], length_nonce[:12], sealed_length, auth_id)
    header_length = int.from_bytes(length[:2], "big")

    sealed = await reader.readexactly(header_length + 16)

    payload_key = kdf(cmd_key, [KDFSALT_CONST_VMESS_HEADER_PAYLOAD_AEAD_KEY, auth_id, nonce])
    payload_nonce = kdf(cmd_key, [KDFSALT_CONST_VMESS_HEADER_PAYLOAD_AEAD_IV, auth_id, nonce])
    return _open(payload_key[:16], payload_nonce[:12], sealed, auth_id)


async def decode_request_header(reader: ExactReader, uuid: UUID | bytes) -> RequestHeader:
    """Read a VMess AEAD request and decode its command section."""
    body = asyncio.StreamReader()
    body.feed_data(await aead_decrypt(reader, uuid))
    body.feed_eof()

    (version,) = await body.readexactly(1)
    if version != 1:
        raise ValueError("invalid request version")

    iv = await body.readexactly(16)
    key = await body.readexactly(16)
    options = await body.readexactly(5)
    network = Network.from_byte(options[4])

    port = int.from_bytes(await body.readexactly(2), "big")

    (address_type,) = await body.readexactly(1)
    if address_type == 0x01:
        address = await parse_ipv4(body)
    elif address_type == 0x02:
        address = await parse_domain(body)
    elif address_type == 0x03:
        address = await parse_ipv6(body)
    else:
        raise ValueError("invalid address")

    return RequestHeader(
        network=network,
        address=address,
        port=port,
        key=key,
        iv=iv,
        response_header=options[0],
    )


def encode_response_header(key: bytes, iv: bytes, response_header: int) -> ResponseHeader:
    """Seal the response header for the session ``key`` and ``iv``."""
    key = sha256(key)[:16]
    iv = sha256(iv)[:16]

    length_key = kdf(key, [KDFSALT_CONST_AEAD_RESP_HEADER_LEN_KEY])[:16]
    length_iv = kdf(iv, [KDFSALT_CONST_AEAD_RESP_HEADER_LEN_IV])[:12]
    length = AESGCM(length_key).encrypt(length_iv, (4).to_bytes(2, "big"), None)

    payload_key = kdf(key, [KDFSALT_CONST_AEAD_RESP_HEADER_KEY])[:16]
    payload_iv = kdf(iv, [KDFSALT_CONST_AEAD_RESP_HEADER_IV])[:12]
    payload = AESGCM(payload_key).encrypt(payload_iv, bytes([response_header, 0, 0, 0]), None)

    return ResponseHeader(length=length, payload=payload)