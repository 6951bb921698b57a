"""Byte streams used on both sides of a tunnel, and the copy loop between them."""

from __future__ import annotations

import asyncio
import contextlib
from typing import Any, Protocol

from aiohttp import WSMsgType

_COPY_CHUNK = 8192

# Messages that carry no payload but do not end the stream.
_SKIPPED = frozenset({WSMsgType.TEXT, WSMsgType.PING, WSMsgType.PONG})


class _Stream(Protocol):
    async def read(self, n: int) -> bytes: ...

    async def write(self, data: bytes) -> int: ...


class WebSocketStream:
    """Byte stream over the binary messages of a websocket.

    Text messages are ignored; a close or error message ends the stream.
    """

    def __init__(self, ws: Any) -> None:
        self.ws = ws
        self._buffer = bytearray()
        self._eof = False

    async def _fill(self) -> bool:
        """Append the next binary message to the buffer; False at end of stream."""
        while not self._eof:
            msg = await self.ws.receive()
            if msg.type is WSMsgType.BINARY:
                self._buffer += msg.data
                return True
            if msg.type not in _SKIPPED:
                self._eof = True
        return False

    def _take(self, n: int) -> bytes:
        chunk = bytes(self._buffer[:n])
        del self._buffer[:n]
        return chunk

    async def read(self, n: int) -> bytes:
        """Read up to ``n`` bytes; empty bytes at end of stream."""
        if not self._buffer and not await self._fill():
            return b""
        return self._take(n)

    async def readexactly(self, n: int) -> bytes:
        """Read exactly ``n`` bytes or raise ``asyncio.IncompleteReadError``."""
        while len(self._buffer) < n:
            if not await self._fill():
                partial = self._take(len(self._buffer))
                raise asyncio.IncompleteReadError(partial, n)
        return self._take(n)

    async def write(self, data: bytes) -> int:
        """Send ``data`` as one binary message and return its length."""
        await self.ws.send_bytes(bytes(data))
        return len(data)

    async def close(self) -> None:
        """Close the websocket."""
        await self.ws.close()


class SocketStream:
    """A plain TCP connection to the destination."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._reader = reader
        self._writer = writer

    async def process(self) -> None:
        """No handshake; wait until the connection accepts writes."""
        await self._writer.drain()

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
        with contextlib.suppress(ConnectionError):
            await self._writer.wait_closed()


class BlackholeStream:
    """Discards everything written and is always at end of stream."""

    def __init__(self) -> None:
        self.discarded = 0
        self.closed = False

    async def process(self) -> None:
        """No handshake; start with a fresh count of discarded bytes."""
        self.discarded = 0
        self.closed = False

    async def read(self, n: int) -> bytes:
        """Give other tasks a turn, then report end of stream."""
        await asyncio.sleep(0)
        return b""

    async def write(self, data: bytes) -> int:
        """Accept and drop ``data``."""
        self.discarded += len(data)
        return len(data)

    async def close(self) -> None:
        """Mark the stream closed."""
        self.closed = True


async def _pump(source: _Stream, target: _Stream) -> int:
    total = 0
    while chunk := await source.read(_COPY_CHUNK):
        await target.write(chunk)
        total += len(chunk)
    return total


async def copy_bidirectional(a: _Stream, b: _Stream) -> tuple[int, int]:
    """Copy ``a`` to ``b`` and ``b`` to ``a`` until both reach end of stream.

    Returns the number of bytes copied from ``a`` to ``b`` and from ``b`` to ``a``.
    """
    try:
        async with asyncio.TaskGroup() as group:
            forward = group.create_task(_pump(a, b))
            backward = group.create_task(_pump(b, a))
    except ExceptionGroup as errors:
        raise errors.exceptions[0] from None
    return forward.result(), backward.result()