"""HTTP entry point: share links and websocket tunnels."""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path

from aiohttp import web

from .config import Config
from .context import RequestContext
from .link import generate_link
from .proxy import process

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.toml"


def load_config(path: str | os.PathLike[str] | None = None) -> Config:
    """Load the config from ``path``, ``$CONFIG_PATH`` or ``config.toml``."""
    if path is None:
        path = os.environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH)
    return Config.from_toml(Path(path).read_text(encoding="utf-8"))


def create_app(config: Config) -> web.Application:
    """Build the web application serving ``config``."""

    async def handle(request: web.Request) -> web.StreamResponse:
        if request.path == "/link":
            return web.json_response(generate_link(config, request.url.host or ""))

        inbound = config.dispatch_inbound(request.path)
        if inbound is None:
            return web.Response()

        ws = web.WebSocketResponse()
        await ws.prepare(request)
        context = RequestContext(inbound=inbound, request=request)
        try:
            await process(config, context, ws)
        except Exception as error:  # noqa: BLE001 - a failed tunnel must not kill the server
            logger.warning("[tunnel]: %s", error)
        return ws

    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", handle)
    return app


def main(argv: list[str] | None = None) -> int:
    """Run the proxy server."""
    parser = argparse.ArgumentParser(description="Websocket tunnel proxy server.")
    parser.add_argument("--config", default=None, help="path of the TOML config file")
    parser.add_argument("--host", default="127.0.0.1", help="address to listen on")
    parser.add_argument("--port", type=int, default=8787, help="port to listen on")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    web.run_app(create_app(load_config(args.config)), host=args.host, port=args.port)
    return 0