# tunl

`tunl` is a small tunnel server built on aiohttp. Clients connect over
WebSocket to a configured path and speak one of the supported inbound
protocols. The server decodes the target address from the handshake and
forwards the traffic either directly or through a configured upstream.

## Protocols

Inbound (client to tunl):

- `vmess`: AEAD request header, authenticated with a UUID
- `vless`: authenticated with a UUID
- `trojan`: authenticated with a password (SHA-224 hash in the header)
- `bepass`: target taken from the `host`, `port` and `net` query parameters
  of the request URL

Outbound (tunl to upstream):

- `freedom`: connect straight to the requested target
- `vless`: send a VLESS request header to an upstream server
- `relay_v1`: prefix the connection with a text header `network@address$port`
- `relay_v2`: prefix the connection with a length-prefixed binary header
- `blackhole`: accept and discard everything

A connection goes to the configured outbound when it is UDP, or when its
target is an IP address inside one of the outbound's `match` ranges. Anything
else uses `freedom`. When the outbound lists several `addresses`, one is
picked at random for each connection; with none, the requested target address
is used together with the outbound's `port`.

The `vless` and `relay_v2` outbounds need the target to be an IP address; a
domain name target makes the connection fail.

## Installation

```
pip install .
```

## Configuration

The configuration is a TOML file:

```toml
[[inbound]]
protocol = "vless"
uuid = "0fbf4f81-2598-4b6a-a623-0ead4cb9efa8"
path = "/vless"

[[inbound]]
protocol = "vmess"
uuid = "0fbf4f81-2598-4b6a-a623-0ead4cb9efa8"
path = "/vmess"

[[inbound]]
protocol = "trojan"
password = "password"
path = "/trojan"

[outbound]
protocol = "vless"
uuid = "0fbf4f81-2598-4b6a-a623-0ead4cb9efa8"
addresses = ["192.0.2.10"]
port = 6666
match = ["173.245.48.0/20", "104.16.0.0/13"]
```

Each inbound needs `protocol` and `path`; the outbound needs `protocol` and
`match`. A file that cannot be parsed, or that lacks a required field, is
treated as an empty configuration.

## Running

```
tunl --config config.toml --host 127.0.0.1 --port 8787
```

All options are optional. Without `--config` the file named by the
`CONFIG_PATH` environment variable is read, or `config.toml` if that is not
set. The server listens on `127.0.0.1:8787` by default.

Once running, the server answers:

- `/link` with a JSON object `{"links": [...]}` holding a share link for
  each VLESS, VMess and Trojan inbound, using the request's host name.
- Any configured inbound `path` with a WebSocket upgrade, after which the
  tunnel is set up. Failures of a tunnel are logged and close that
  connection only.
- Any other path with an empty response.

## Configuration schema

A JSON Schema (draft-07) describing the configuration file is printed by:

```
tunl-schema > config.schema.json
```

## Using it as a library

- `tunl.config.Config.from_toml(text)` parses a configuration.
- `tunl.server.load_config(path)` reads one from a file.
- `tunl.server.create_app(config)` returns the `aiohttp.web.Application`.
- `tunl.link.generate_link(config, host)` returns the share links.
- `tunl.schema.config_schema()` returns the schema as a dictionary.

## What it does not do

- The server speaks plain HTTP. The share links advertise port 443 with TLS,
  so TLS has to be terminated by something in front of the server.
- Only the VMess request and response headers are handled; the data that
  follows is relayed unchanged, matching the `zero` security the links
  advertise.
- Upstream connections are always TCP. UDP requests are routed to the
  configured outbound but carried over a TCP connection; no UDP sockets
  are opened.

## Tests

```
pip install .[test]
pytest
```