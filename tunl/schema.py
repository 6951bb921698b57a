"""JSON Schema (draft-07) describing the configuration file."""

from __future__ import annotations

import argparse
import json
from typing import Any

from .config import NIL_UUID, Protocol

_UUID_SCHEMA = {
    "default": str(NIL_UUID),
    "type": "string",
    "format": "uuid",
}

_EMPTY_STRING_SCHEMA = {
    "default": "",
    "type": "string",
}


def config_schema() -> dict[str, Any]:
    """Return the schema of the configuration document."""
    protocol_ref = {"$ref": "#/definitions/Protocol"}
    return {
        "$schema": "http://json-schema.org/draft-07/schema#",
        "title": "Config",
        "type": "object",
        "required": ["inbound", "outbound"],
        "properties": {
            "inbound": {"type": "array", "items": {"$ref": "#/definitions/Inbound"}},
            "outbound": {"$ref": "#/definitions/Outbound"},
        },
        "definitions": {
            "Inbound": {
                "type": "object",
                "required": ["path", "protocol"],
                "properties": {
                    "password": dict(_EMPTY_STRING_SCHEMA),
                    "path": {"type": "string"},
                    "protocol": protocol_ref,
                    "uuid": dict(_UUID_SCHEMA),
                },
            },
            "Outbound": {
                "type": "object",
                "required": ["match", "protocol"],
                "properties": {
                    "addresses": {
                        "default": [],
                        "type": "array",
                        "items": {"type": "string"},
                    },
                    "match": {
                        "title": "List of Ip Rages (E.g. 103.22.200.0/22)",
                        "type": "array",
                        "items": {"type": "string", "format": "ip"},
                    },
                    "port": {
                        "default": 0,
                        "type": "integer",
                        "format": "uint16",
                        "minimum": 0.0,
                    },
                    "protocol": protocol_ref,
                    "uuid": dict(_UUID_SCHEMA),
                },
            },
            "Protocol": {
                "type": "string",
                "enum": [protocol.value for protocol in Protocol],
            },
        },
    }


def main(argv: list[str] | None = None) -> int:
    """Print the configuration schema as pretty JSON."""
    parser = argparse.ArgumentParser(description="Print the configuration JSON schema.")
    parser.parse_args(argv)
    print(json.dumps(config_schema(), indent=2))
    return 0