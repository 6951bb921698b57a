"""Client share links for the configured inbounds."""

from __future__ import annotations

import base64
import json

from .config import Config, Inbound, Protocol


def vless_link(inbound: Inbound, host: str) -> str:
    """Build a ``vless://`` link for ``inbound`` served at ``host``."""
    return f"vless://{inbound.uuid}@{host}:443?type=ws&security=tls&path={inbound.path}#tunl"


def vmess_link(inbound: Inbound, host: str) -> str:
    """Build a ``vmess://`` link: base64 of a compact JSON description."""
    description = {
        "ps": "tunl",
        "v": "2",
        "add": host,
        "port": "443",
        "id": str(inbound.uuid),
        "path": inbound.path,
        "aid": "0",
        "scy": "zero",
        "net": "ws",
        "type": "none",
        "tls": "tls",
        "sni": "",
        "alpn": "",
    }
    text = json.dumps(description, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return "vmess://" + base64.urlsafe_b64encode(text.encode()).decode("ascii")


def trojan_link(inbound: Inbound, host: str) -> str:
    """Build a ``trojan://`` link for ``inbound`` served at ``host``."""
    return f"trojan://{inbound.password}@{host}:443?security=tls&type=ws&path={inbound.path}#tunl"


_BUILDERS = {
    Protocol.VLESS: vless_link,
    Protocol.VMESS: vmess_link,
    Protocol.TROJAN: trojan_link,
}


def generate_link(config: Config, host: str) -> dict[str, list[str]]:
    """Return ``{"links": [...]}`` for every inbound that has a link format."""
    return {
        "links": [
            _BUILDERS[inbound.protocol](inbound, host)
            for inbound in config.inbound
            if inbound.protocol in _BUILDERS
        ]
    }