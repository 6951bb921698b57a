"""Per-request routing state."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from .config import Inbound


class Network(Enum):
    """Transport of a proxied connection."""

    TCP = "tcp"
    UDP = "udp"

    @classmethod
    def parse(cls, value: str) -> Network:
        """Parse ``"tcp"`` or ``"udp"``."""
        try:
            return cls(value)
        except ValueError:
            raise ValueError("invalid network type") from None

    @classmethod
    def from_byte(cls, b: int) -> Network:
        """Decode the wire byte used by the VLESS and VMess headers."""
        if b == 0x01:
            return cls.TCP
        if b == 0x02:
            return cls.UDP
        raise ValueError("invalid network type")

    def to_byte(self) -> int:
        """Encode as the wire byte used by the VLESS and VMess headers."""
        return 0x01 if self is Network.TCP else 0x02


@dataclass
class RequestContext:
    """What is known about a request while it is being proxied."""

    address: str = ""
    port: int = 0
    network: Network = Network.TCP
    inbound: Inbound = field(default_factory=Inbound)
    request: Any = None

    def with_target(self, address: str, port: int, network: Network) -> RequestContext:
        """Return a copy aimed at a new destination, without the original request."""
        return replace(self, address=address, port=port, network=network, request=None)