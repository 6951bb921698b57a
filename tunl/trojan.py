"""Trojan request header decoding."""

from __future__ import annotations

from .common import ExactReader, parse_domain, parse_ipv4, parse_ipv6
from .context import Network
from .hashing import sha224
from .vless import TargetHeader


async def decode_request_header(reader: ExactReader, password: str) -> TargetHeader:
    """Read a Trojan request header and check its password hash."""
    received = (await reader.readexactly(56)).decode("utf-8", errors="replace")
    if received != sha224(password.encode()).hex():
        raise ValueError("invalid password")

    await reader.readexactly(2)  # CRLF

    (command,) = await reader.readexactly(1)
    if command == 0x01:
        network = Network.TCP
    elif command == 0x03:
        network = Network.UDP
    else:
        raise ValueError("invalid network type")

    (address_type,) = await reader.readexactly(1)
    if address_type == 0x01:
        address = await parse_ipv4(reader)
    elif address_type == 0x03:
        address = await parse_domain(reader)
    elif address_type == 0x04:
        address = await parse_ipv6(reader)
    else:
        raise ValueError("invalid address")

    port = int.from_bytes(await reader.readexactly(2), "big")

    if network is Network.UDP:
        await reader.readexactly(2)  # UDP length
    await reader.readexactly(2)  # CRLF

    return TargetHeader(network=network, address=address, port=port)