"""Address encoding and decoding shared by the protocol handlers."""

from __future__ import annotations

import ipaddress
from typing import Protocol

KDFSALT_CONST_VMESS_HEADER_PAYLOAD_LENGTH_AEAD_KEY = b"VMess Header AEAD Key_Length"
KDFSALT_CONST_VMESS_HEADER_PAYLOAD_LENGTH_AEAD_IV = b"VMess Header AEAD Nonce_Length"
KDFSALT_CONST_VMESS_HEADER_PAYLOAD_AEAD_KEY = b"VMess Header AEAD Key"
KDFSALT_CONST_VMESS_HEADER_PAYLOAD_AEAD_IV = b"VMess Header AEAD Nonce"
KDFSALT_CONST_AEAD_RESP_HEADER_LEN_KEY = b"AEAD Resp Header Len Key"
KDFSALT_CONST_AEAD_RESP_HEADER_LEN_IV = b"AEAD Resp Header Len IV"
KDFSALT_CONST_AEAD_RESP_HEADER_KEY = b"AEAD Resp Header Key"
KDFSALT_CONST_AEAD_RESP_HEADER_IV = b"AEAD Resp Header IV"


class ExactReader(Protocol):
    """Anything with an ``asyncio.StreamReader``-style ``readexactly``."""

    async def readexactly(self, n: int) -> bytes: ...


def encode_addr(addr: str) -> bytes:
    """Return the packed bytes of an IPv4 or IPv6 address."""
    try:
        return ipaddress.ip_address(addr).packed
    except ValueError:
        raise ValueError("couldn't encode ip address") from None


async def parse_ipv4(reader: ExactReader) -> str:
    """Read four bytes and return them as a dotted IPv4 address."""
    return str(ipaddress.IPv4Address(await reader.readexactly(4)))


async def parse_ipv6(reader: ExactReader) -> str:
    """Read sixteen bytes and return them as an IPv6 address."""
    return str(ipaddress.IPv6Address(await reader.readexactly(16)))


async def parse_domain(reader: ExactReader) -> str:
    """Read a length-prefixed domain name."""
    (length,) = await reader.readexactly(1)
    return (await reader.readexactly(length)).decode("utf-8", errors="replace")