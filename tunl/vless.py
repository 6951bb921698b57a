"""VLESS request header codec and the VLESS outbound stream."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from uuid import UUID

from .common import ExactReader, encode_addr, parse_domain, parse_ipv4, parse_ipv6
from .config import Outbound
from .context import Network, RequestContext


@dataclass(frozen=True)
class TargetHeader:
    """The destination a client asked to be connected to."""

    network: Network = Network.TCP
    address: str = ""
    port: int = 0


def _uuid_bytes(uuid: UUID | bytes) -> bytes:
    return uuid.bytes if isinstance(uuid, UUID) else bytes(uuid)


async def decode_request_header(reader: ExactReader, uuid: UUID | bytes) -> TargetHeader:
    """Read a VLESS request header and check it carries ``uuid``."""
    (version,) = await reader.readexactly(1)
    if version != 0:
        raise ValueError("invalid request version")

    if await reader.readexactly(16) != _uuid_bytes(uuid):
        raise ValueError("incorrect request user id")

    # Addons are skipped.
    (addon_length,) = await reader.readexactly(1)
    await reader.readexactly(addon_length)

    (command,) = await reader.readexactly(1)
    network = Network.from_byte(command)

    port = int.from_bytes(await reader.readexactly(2), "big")

    (address_type,) = await reader.readexactly(1)
    if address_type == 0x01:
        address = await parse_ipv4(reader)
    elif address_type == 0x02:
        address = await parse_domain(reader)
    elif address_type == 0x03:
        address = await parse_ipv6(reader)
    else:
        raise ValueError("invalid address")

    return TargetHeader(network=network, address=address, port=port)


def encode_request_header(context: RequestContext, outbound: Outbound) -> bytes:
    """Build the VLESS request header sent to an upstream server."""
    addr = encode_addr(context.address)
    address_type = 0x02 if len(addr) > 4 else 0x01
    return b"".join(
        (
            b"\x00",
            outbound.uuid.bytes,
            b"\x00",
            bytes([context.network.to_byte()]),
            context.port.to_bytes(2, "big"),
            bytes([address_type]),
            addr,
        )
    )


class VlessOutboundStream:
    """A connection to a VLESS upstream; strips the response header on first read."""

    def __init__(
        self,
        context: RequestContext,
        outbound: Outbound,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        self.context = context
        self.outbound = outbound
        self._reader = reader
        self._writer = writer
        self._handshaked = False

    async def process(self) -> None:
        """Send the request header upstream."""
        await self.write(encode_request_header(self.context, self.outbound))

    async def read(self, n: int) -> bytes:
        """Read up to ``n`` bytes of payload; empty bytes at end of stream."""
        if not self._handshaked:
            self._handshaked = True
            try:
                await self._reader.readexactly(2)
            except asyncio.IncompleteReadError:
                return b""
        return await self._reader.read(n)

    async def write(self, data: bytes) -> int:
        """Send ``data`` upstream and return how many bytes were sent."""
        self._writer.write(data)
        await self._writer.drain()
        return len(data)

    async def close(self) -> None:
        """Close the upstream connection."""
        self._writer.close()
        await self._writer.wait_closed()