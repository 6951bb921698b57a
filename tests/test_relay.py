import asyncio
import ipaddress

import pytest

from tunl.context import Network, RequestContext
from tunl.relay import RelayStream, RelayVersion, encode_v1_header, encode_v2_header


def _reader(data: bytes) -> asyncio.StreamReader:
    reader = asyncio.StreamReader()
    reader.feed_data(data)
    reader.feed_eof()
    return reader


class _Writer:
    def __init__(self) -> None:
        self.data = bytearray()
        self.closed = False

    def write(self, data: bytes) -> None:
        self.data += data

    async def drain(self) -> None:
        pass

    def close(self) -> None:
        self.closed = True

    async def wait_closed(self) -> None:
        pass


def test_v1_tcp():
    context = RequestContext(address="1.2.3.4", port=80)
    assert encode_v1_header(context) == b"tcp@1.2.3.4$80\r\n"


def test_v1_udp_domain():
    context = RequestContext(address="example.com", port=53, network=Network.UDP)
    assert encode_v1_header(context) == b"udp@example.com$53\r\n"


def test_v2_ipv4_small_port():
    context = RequestContext(address="1.2.3.4", port=80)
    assert encode_v2_header(context) == b"\x00\x08\x01\x00\x00\x01\x02\x03\x04\x50"


def test_v2_large_port_varint():
    context = RequestContext(address="1.2.3.4", port=443)
    assert encode_v2_header(context).endswith(b"\xfb\xbb\x01")


def test_v2_ipv6_udp_layout():
    context = RequestContext(address="2001:db8::1", port=80, network=Network.UDP)
    header = encode_v2_header(context)
    length = int.from_bytes(header[:2], "big")
    assert length == len(header) - 2
    assert header[2:5] == b"\x01\x01\x01"
    assert header[5:21] == ipaddress.IPv6Address("2001:db8::1").packed


def test_v2_rejects_domain():
    with pytest.raises(ValueError, match="invalid ip address"):
        encode_v2_header(RequestContext(address="example.com", port=80))


@pytest.mark.asyncio
@pytest.mark.parametrize("version", list(RelayVersion))
async def test_process_writes_header(version):
    context = RequestContext(address="10.0.0.9", port=8080)
    writer = _Writer()
    await RelayStream(context, _reader(b""), writer, version).process()
    expected = encode_v1_header(context) if version is RelayVersion.V1 else encode_v2_header(context)
    assert bytes(writer.data) == expected


@pytest.mark.asyncio
async def test_stream_passes_data_through():
    writer = _Writer()
    stream = RelayStream(RequestContext(), _reader(b"response"), writer, RelayVersion.V1)
    assert await stream.write(b"request") == 7
    assert await stream.read(100) == b"response"
    assert await stream.read(100) == b""
    await stream.close()
    assert bytes(writer.data) == b"request"
    assert writer.closed