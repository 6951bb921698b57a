"""Inbound protocol handlers and outbound connection setup."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import random
from typing import Any

from . import bepass, trojan, vless, vmess
from .config import Config, Outbound, Protocol
from .context import RequestContext
from .relay import RelayStream, RelayVersion
from .streams import BlackholeStream, SocketStream, WebSocketStream, copy_bidirectional
from .vless import TargetHeader, VlessOutboundStream

logger = logging.getLogger(__name__)

Upstream = SocketStream | BlackholeStream | VlessOutboundStream | RelayStream

_RELAY_VERSIONS = {
    Protocol.RELAY_V1: RelayVersion.V1,
    Protocol.RELAY_V2: RelayVersion.V2,
}


async def connect_outbound(context: RequestContext, outbound: Outbound) -> Upstream:
    """Open the upstream connection chosen by ``outbound`` and run its handshake."""
    if outbound.protocol is Protocol.FREEDOM:
        address, port = context.address, context.port
    else:
        address = random.choice(outbound.addresses) if outbound.addresses else context.address
        port = outbound.port

    logger.info("[%s] connecting to upstream %s:%s", outbound.protocol.name, address, port)

    stream: Upstream
    if outbound.protocol is Protocol.BLACKHOLE:
        stream = BlackholeStream()
    else:
        reader, writer = await asyncio.open_connection(address, port)
        if outbound.protocol is Protocol.VLESS:
            stream = VlessOutboundStream(context, outbound, reader, writer)
        elif outbound.protocol in _RELAY_VERSIONS:
            stream = RelayStream(context, reader, writer, _RELAY_VERSIONS[outbound.protocol])
        else:
            stream = SocketStream(reader, writer)

    try:
        await stream.process()
    except BaseException:
        await _close_quietly(stream)
        raise
    return stream


async def _close_quietly(stream: Upstream) -> None:
    with contextlib.suppress(OSError):
        await stream.close()


async def _open_upstream(
    config: Config, context: RequestContext, header: TargetHeader
) -> Upstream:
    target = context.with_target(header.address, header.port, header.network)
    return await connect_outbound(target, config.dispatch_outbound(target))


async def _relay(ws: WebSocketStream, upstream: Upstream) -> None:
    try:
        await copy_bidirectional(ws, upstream)
    finally:
        await _close_quietly(upstream)


async def handle_vmess(config: Config, context: RequestContext, ws: WebSocketStream) -> None:
    """Serve a VMess client on ``ws``."""
    header = await vmess.decode_request_header(ws, context.inbound.uuid)
    target = TargetHeader(network=header.network, address=header.address, port=header.port)
    upstream = await _open_upstream(config, context, target)
    try:
        response = vmess.encode_response_header(header.key, header.iv, header.response_header)
        await ws.write(response.length)
        await ws.write(response.payload)
    except BaseException:
        await _close_quietly(upstream)
        raise
    await _relay(ws, upstream)


async def handle_vless(config: Config, context: RequestContext, ws: WebSocketStream) -> None:
    """Serve a VLESS client on ``ws``."""
    header = await vless.decode_request_header(ws, context.inbound.uuid)
    upstream = await _open_upstream(config, context, header)
    try:
        # Response: version 0, no additional information.
        await ws.write(b"\x00\x00")
    except BaseException:
        await _close_quietly(upstream)
        raise
    await _relay(ws, upstream)


async def handle_trojan(config: Config, context: RequestContext, ws: WebSocketStream) -> None:
    """Serve a Trojan client on ``ws``."""
    header = await trojan.decode_request_header(ws, context.inbound.password)
    upstream = await _open_upstream(config, context, header)
    await _relay(ws, upstream)


async def handle_bepass(config: Config, context: RequestContext, ws: WebSocketStream) -> None:
    """Serve a Bepass client whose target is given in the request URL."""
    if context.request is None:
        raise ValueError("failed to retrieve request context")
    url = getattr(context.request, "url", context.request)
    header = bepass.decode_request_header(str(url))
    upstream = await _open_upstream(config, context, header)
    await _relay(ws, upstream)


_HANDLERS = {
    Protocol.VMESS: handle_vmess,
    Protocol.VLESS: handle_vless,
    Protocol.TROJAN: handle_trojan,
    Protocol.BEPASS: handle_bepass,
}


async def process(config: Config, context: RequestContext, ws: Any) -> None:
    """Tunnel the websocket ``ws`` with the handler for the request's inbound protocol."""
    handler = _HANDLERS.get(context.inbound.protocol)
    if handler is None:
        raise ValueError("invalid inbound protocol")
    await handler(config, context, WebSocketStream(ws))