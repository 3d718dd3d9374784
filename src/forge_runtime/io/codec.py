"""JSON codec for the wire protocol (orjson).

Requests and responses are UTF-8 JSON documents, one per connection.

Usage:
    >>> from forge_runtime.io.codec import encode, decode
    >>> encode({"status": "ok"})
    b'{"status":"ok"}'
"""

from __future__ import annotations

import orjson

from forge_runtime.foundation.errors import JsonValue

DecodeError = orjson.JSONDecodeError


def encode(data: JsonValue) -> bytes:
    """Encode to JSON bytes. Non-JSON values (e.g. tool results) fall back to ``str``."""
    return orjson.dumps(data, default=str, option=orjson.OPT_NON_STR_KEYS)


def decode(data: bytes | bytearray | memoryview | str) -> JsonValue:
    """Decode JSON bytes/str.

    Raises:
        DecodeError: On malformed JSON or invalid UTF-8
    """
    return orjson.loads(data)


def encode_str(data: JsonValue) -> str:
    """Encode to JSON string."""
    return encode(data).decode()
