"""Relay outbound: a plain socket preceded by a small target header."""

from __future__ import annotations

import asyncio
import ipaddress
from enum import Enum

from .context import Network, RequestContext


class RelayVersion(Enum):
    """Relay header format."""

    V1 = 0
    V2 = 1


def _varint(value: int) -> bytes:
    if value < 251:
        return bytes([value])
    return b"\xfb" + value.to_bytes(2, "little")


def encode_v1_header(context: RequestContext) -> bytes:
    """Text header ``network@address$port`` followed by CRLF."""
    return f"{context.network.value}@{context.address}${context.port}\r\n".encode()


def encode_v2_header(context: RequestContext) -> bytes:
    """Binary header: big-endian length, then version, network, address and port."""
    try:
        address = ipaddress.ip_address(context.address)
    except ValueError:
        raise ValueError("invalid ip address") from None

    body = b"".join(
        (
            _varint(RelayVersion.V2.value),
            _varint(0 if context.network is Network.TCP else 1),
            _varint(0 if address.version == 4 else 1),
            address.packed,
            _varint(context.port),
        )
    )
    return len(body).to_bytes(2, "big") + body


class RelayStream:
    """A connection to a relay server."""

    def __init__(
        self,
        context: RequestContext,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        version: RelayVersion,
    ) -> None:
        self.context = context
        self.version = version
        self._reader = reader
        self._writer = writer

    async def process(self) -> None:
        """Send the target header for this relay version."""
        if self.version is RelayVersion.V1:
            header = encode_v1_header(self.context)
        else:
            header = encode_v2_header(self.context)
        await self.write(header)

    async def read(self, n: int) -> bytes:
        """Read up to ``n`` bytes; empty bytes at end of stream."""
        return await self._reader.read(n)

    async def write(self, data: bytes) -> int:
        """Send ``data`` and return how many bytes were sent."""
        self._writer.write(data)
        await self._writer.drain()
        return len(data)

    async def close(self) -> None:
        """Close the connection."""
        self._writer.close()
        await self._writer.wait_closed()