"""Proxy configuration: inbound listeners and the outbound route."""

from __future__ import annotations

import ipaddress
import tomllib
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any
from uuid import UUID

if TYPE_CHECKING:
    from .context import RequestContext

IpNetwork = ipaddress.IPv4Network | ipaddress.IPv6Network

NIL_UUID = UUID(int=0)


class Protocol(Enum):
    """Protocols usable for inbound listeners and the outbound route."""

    VMESS = "vmess"
    VLESS = "vless"
    TROJAN = "trojan"
    BEPASS = "bepass"
    RELAY_V1 = "relay_v1"
    RELAY_V2 = "relay_v2"
    BLACKHOLE = "blackhole"
    FREEDOM = "freedom"


def _require(table: dict[str, Any], key: str) -> Any:
    try:
        return table[key]
    except KeyError:
        raise ValueError(f"missing field `{key}`") from None


def _string(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"`{name}` must be a string")
    return value


def _list(value: Any, name: str) -> list[Any]:
    if not isinstance(value, list):
        raise ValueError(f"`{name}` must be an array")
    return value


def _table(value: Any, name: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"`{name}` must be a table")
    return value


def _protocol(value: Any) -> Protocol:
    return Protocol(_string(value, "protocol"))


def _uuid(value: Any) -> UUID:
    return UUID(_string(value, "uuid"))


def _port(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 0xFFFF:
        raise ValueError("`port` must be an integer between 0 and 65535")
    return value


def _network(value: Any) -> IpNetwork:
    return ipaddress.ip_network(_string(value, "match"))


@dataclass(frozen=True)
class Outbound:
    """Where matching connections are forwarded to."""

    match: tuple[IpNetwork, ...] = ()
    protocol: Protocol = Protocol.VMESS
    addresses: tuple[str, ...] = ()
    port: int = 0
    uuid: UUID = NIL_UUID

    @classmethod
    def _from_table(cls, table: dict[str, Any]) -> Outbound:
        return cls(
            match=tuple(_network(v) for v in _list(_require(table, "match"), "match")),
            protocol=_protocol(_require(table, "protocol")),
            addresses=tuple(
                _string(v, "addresses") for v in _list(table.get("addresses", []), "addresses")
            ),
            port=_port(table.get("port", 0)),
            uuid=_uuid(table["uuid"]) if "uuid" in table else NIL_UUID,
        )


@dataclass(frozen=True)
class Inbound:
    """A listener bound to a request path."""

    protocol: Protocol = Protocol.VMESS
    uuid: UUID = NIL_UUID
    password: str = ""
    path: str = ""

    @classmethod
    def _from_table(cls, table: dict[str, Any]) -> Inbound:
        return cls(
            protocol=_protocol(_require(table, "protocol")),
            uuid=_uuid(table["uuid"]) if "uuid" in table else NIL_UUID,
            password=_string(table.get("password", ""), "password"),
            path=_string(_require(table, "path"), "path"),
        )


@dataclass(frozen=True)
class Config:
    """The whole proxy configuration."""

    inbound: tuple[Inbound, ...] = ()
    outbound: Outbound = Outbound()

    @classmethod
    def from_toml(cls, buf: str) -> Config:
        """Parse TOML text; an invalid document yields the empty default config."""
        try:
            data = tomllib.loads(buf)
            inbound = tuple(
                Inbound._from_table(_table(item, "inbound"))
                for item in _list(_require(data, "inbound"), "inbound")
            )
            outbound = Outbound._from_table(_table(_require(data, "outbound"), "outbound"))
        except ValueError:
            return cls()
        return cls(inbound=inbound, outbound=outbound)

    def dispatch_inbound(self, path: str) -> Inbound | None:
        """Return the first inbound listening on ``path``."""
        return next((inbound for inbound in self.inbound if inbound.path == path), None)

    def dispatch_outbound(self, context: RequestContext) -> Outbound:
        """Pick the outbound for a request: the configured one or a direct connection."""
        from .context import Network

        if context.network is Network.UDP:
            return self.outbound

        try:
            ip = ipaddress.ip_address(context.address)
        except ValueError:
            ip = None

        if ip is not None and any(ip in network for network in self.outbound.match):
            return self.outbound

        return Outbound(protocol=Protocol.FREEDOM)