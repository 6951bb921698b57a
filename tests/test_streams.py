import asyncio
import contextlib
from types import SimpleNamespace

import pytest
from aiohttp import WSMsgType

from tunl.streams import BlackholeStream, SocketStream, WebSocketStream, copy_bidirectional


def binary(data):
    return SimpleNamespace(type=WSMsgType.BINARY, data=data)


def text(data):
    return SimpleNamespace(type=WSMsgType.TEXT, data=data)


class FakeWebSocket:
    def __init__(self, messages=()):
        self._messages = list(messages)
        self.sent = []
        self.closed = False

    async def receive(self):
        if self._messages:
            return self._messages.pop(0)
        return SimpleNamespace(type=WSMsgType.CLOSE, data=None)

    async def send_bytes(self, data):
        self.sent.append(bytes(data))

    async def close(self):
        self.closed = True


class MemoryStream:
    def __init__(self, chunks):
        self._chunks = list(chunks)
        self.written = bytearray()

    async def read(self, n):
        if not self._chunks:
            return b""
        return self._chunks.pop(0)

    async def write(self, data):
        self.written += data
        return len(data)


@pytest.mark.asyncio
async def test_websocket_read_splits_and_ends():
    stream = WebSocketStream(FakeWebSocket([binary(b"hello"), binary(b"world")]))
    assert await stream.read(3) == b"hel"
    assert await stream.read(10) == b"lo"
    assert await stream.read(10) == b"world"
    assert await stream.read(10) == b""
    assert await stream.read(10) == b""


@pytest.mark.asyncio
async def test_websocket_ignores_text_messages():
    stream = WebSocketStream(FakeWebSocket([text("ignored"), binary(b"data")]))
    assert await stream.read(100) == b"data"


@pytest.mark.asyncio
async def test_websocket_readexactly_spans_messages():
    stream = WebSocketStream(FakeWebSocket([binary(b"ab"), binary(b"cd"), binary(b"ef")]))
    assert await stream.readexactly(5) == b"abcde"
    assert await stream.read(10) == b"f"


@pytest.mark.asyncio
async def test_websocket_readexactly_short_raises():
    stream = WebSocketStream(FakeWebSocket([binary(b"abc")]))
    with pytest.raises(asyncio.IncompleteReadError) as info:
        await stream.readexactly(5)
    assert info.value.partial == b"abc"
    assert info.value.expected == 5


@pytest.mark.asyncio
async def test_websocket_write_and_close():
    ws = FakeWebSocket()
    stream = WebSocketStream(ws)
    assert await stream.write(b"payload") == 7
    await stream.close()
    assert ws.sent == [b"payload"]
    assert ws.closed is True


@pytest.mark.asyncio
async def test_blackhole_discards_and_is_empty():
    hole = BlackholeStream()
    await hole.process()
    assert await hole.write(b"abcdef") == 6
    assert await hole.read(1024) == b""


@pytest.mark.asyncio
async def test_copy_bidirectional_moves_both_ways():
    a = MemoryStream([b"one", b"two"])
    b = MemoryStream([b"three"])
    counts = await copy_bidirectional(a, b)
    assert counts == (6, 5)
    assert bytes(b.written) == b"onetwo"
    assert bytes(a.written) == b"three"


@pytest.mark.asyncio
async def test_copy_bidirectional_propagates_errors():
    class Broken(MemoryStream):
        async def write(self, data):
            raise ConnectionResetError("gone")

    with pytest.raises(ConnectionResetError):
        await copy_bidirectional(MemoryStream([b"x"]), Broken([]))


@contextlib.asynccontextmanager
async def echo_server():
    async def handle(reader, writer):
        data = await reader.read(1024)
        writer.write(data)
        await writer.drain()
        writer.close()
        await writer.wait_closed()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    try:
        yield server.sockets[0].getsockname()[1]
    finally:
        server.close()
        await server.wait_closed()


@pytest.mark.asyncio
async def test_socket_stream_round_trip():
    async with echo_server() as port:
        reader, writer = await asyncio.open_connection("127.0.0.1", port)
        stream = SocketStream(reader, writer)
        await stream.process()
        assert await stream.write(b"ping") == 4
        assert await stream.read(100) == b"ping"
        assert await stream.read(100) == b""
        await stream.close()