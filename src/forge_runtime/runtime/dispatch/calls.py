"""Explicit tool-call directives carried in ``infer`` messages.

A message may carry a single ``tool_call`` object or a ``tool_calls`` list.
Each directive comes in one of two shapes, both normalized to ToolCall::

    {"id": "c1", "function": {"name": "list_dir", "arguments": {"path": "."}}}
    {"id": "c1", "name": "list_dir", "arguments": {"path": "."}}

``function.arguments`` may also be a JSON-encoded string, as chat-completion
APIs emit it. Arguments are not checked here: whatever they are, the registry
validates them against the tool schema and reports problems per call.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from forge_runtime.foundation.errors import DispatchError, ErrorCode, JsonDict, JsonValue
from forge_runtime.io.codec import DecodeError, decode

DIRECTIVE_KEYS = ("tool_call", "tool_calls")


class ToolCall(BaseModel):
    """Normalized tool-call directive."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    arguments: JsonValue = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _flatten_function(cls, data: object) -> object:
        """Accept the ``{"function": {"name", "arguments"}}`` shape."""
        if isinstance(data, dict) and isinstance(fn := data.get("function"), dict):
            flat = {"id": data.get("id"), "name": fn.get("name")}
            if "arguments" in fn:
                flat["arguments"] = fn["arguments"]
            return flat
        return data

    @field_validator("arguments", mode="before")
    @classmethod
    def _decode_arguments(cls, v: object) -> object:
        """JSON-encoded argument strings are decoded; blank means no arguments.

        A string that is not JSON is kept as is and fails validation later.
        """
        if isinstance(v, str):
            if not v.strip():
                return {}
            try:
                return decode(v)
            except DecodeError:
                return v
        return v


def carries_directive(message: object) -> bool:
    """Whether a message carries an explicit tool-call field."""
    return isinstance(message, dict) and any(message.get(k) is not None for k in DIRECTIVE_KEYS)


def _directives(message: JsonDict) -> list[object]:
    found: list[object] = []
    for key in DIRECTIVE_KEYS:
        value = message.get(key)
        if value is None:
            continue
        found.extend(value if isinstance(value, list) else [value])
    return found


def extract_tool_calls(messages: Sequence[object]) -> list[ToolCall]:
    """Normalize every directive, in message order.

    Raises:
        DispatchError: INVALID_REQUEST when a directive lacks an id or a name
    """
    calls: list[ToolCall] = []
    for message in messages:
        if not carries_directive(message):
            continue
        for raw in _directives(message):  # type: ignore[arg-type]
            try:
                calls.append(ToolCall.model_validate(raw))
            except ValidationError as e:
                first = e.errors()[0] if e.errors() else {}
                where = ".".join(str(p) for p in first.get("loc", ())) or "tool_call"
                raise DispatchError.create(
                    ErrorCode.INVALID_REQUEST,
                    f"malformed tool call: {where}: {first.get('msg', 'invalid')}",
                    field=where,
                ) from e
    return calls
