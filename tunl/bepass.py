"""Bepass request header: the target is carried in the URL query."""

from __future__ import annotations

import re
from urllib.parse import parse_qsl, urlsplit

from .context import Network
from .vless import TargetHeader

_PORT = re.compile(r"\+?[0-9]+")


def _port(value: str) -> int:
    if not _PORT.fullmatch(value) or int(value) > 0xFFFF:
        raise ValueError("invalid port number")
    return int(value)


def decode_request_header(url: str) -> TargetHeader:
    """Read ``host``, ``port`` and ``net`` from the query of ``url``."""
    network = Network.TCP
    address = ""
    port = 0
    for key, value in parse_qsl(urlsplit(str(url)).query, keep_blank_values=True):
        if key == "host":
            address = value
        elif key == "port":
            port = _port(value)
        elif key == "net":
            network = Network.parse(value)
    return TargetHeader(network=network, address=address, port=port)