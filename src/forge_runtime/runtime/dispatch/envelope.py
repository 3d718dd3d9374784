"""Request/response envelopes of the control protocol.

Request:  ``{"version": 1, "action": "<action>", ...action fields}``
Response: ``{"status": "ok"|"error", "action"?: str, "result"?: any, "error"?: Error}``

Malformed envelopes (bad JSON, wrong version, unknown action) get a bare
``{"status": "error", "error": "<reason>"}`` without an ``action`` key.
Action-level failures carry the action and a structured Error object.
"""

from __future__ import annotations

from enum import StrEnum

from forge_runtime.foundation.errors import ErrorInfo, JsonDict, JsonValue

PROTOCOL_VERSION = 1

UNSUPPORTED_VERSION = "unsupported protocol version"
UNKNOWN_ACTION = "unknown action"
INVALID_JSON = "invalid json"
INVALID_ENVELOPE = "invalid request"
REQUEST_TOO_LARGE = "request too large"


class Action(StrEnum):
    """Routing keys understood by the dispatcher."""
    PING = "ping"
    INFER = "infer"
    LIST_TOOLS = "list_tools"
    GENERATE = "generate"
    MODEL_INFO = "model_info"


class Status(StrEnum):
    OK = "ok"
    ERROR = "error"


def ok(action: str, result: JsonValue) -> JsonDict:
    return {"status": Status.OK.value, "action": action, "result": result}


def error(action: str, err: ErrorInfo) -> JsonDict:
    return {"status": Status.ERROR.value, "action": action, "error": err.to_dict()}


def envelope_error(reason: str) -> JsonDict:
    """Top-level rejection of a malformed envelope."""
    return {"status": Status.ERROR.value, "error": reason}


def read_version(request: JsonDict) -> int | None:
    """The request's protocol version, or None when absent or not an integer."""
    version = request.get("version")
    return version if isinstance(version, int) and not isinstance(version, bool) else None
