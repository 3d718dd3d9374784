"""Detection of a tool call embedded in free model output.

Models without a structured tool-calling contract are prompted to answer with
``{"tool": "<name>", "arguments": {...}}`` somewhere in their reply. This is a
best-effort scan, not a parser: the first ``"tool"`` key that sits inside a
brace-balanced object is considered (mentions in prose are skipped), and the
innermost such object must decode to an object with a string ``tool`` and an
object ``arguments``. Anything else means "no tool call".
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from forge_runtime.foundation.errors import JsonDict
from forge_runtime.io.codec import DecodeError, decode

_TOOL_KEY = re.compile(r'"tool"\s*:')


@dataclass(slots=True, frozen=True)
class EmbeddedToolCall:
    """Tool call recovered from model text."""
    name: str
    arguments: JsonDict
    start: int
    end: int


def _closing_brace(text: str, start: int) -> int | None:
    """Index of the brace closing the object opened at ``start``, string-aware."""
    depth = 0
    in_string = escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def _enclosing_object(text: str, key_at: int) -> tuple[int, int] | None:
    """Innermost balanced ``{...}`` span containing position ``key_at``."""
    start = text.rfind("{", 0, key_at)
    while start >= 0:
        end = _closing_brace(text, start)
        if end is not None and end > key_at:
            return start, end
        start = text.rfind("{", 0, start)
    return None


def find_embedded_tool_call(text: str) -> EmbeddedToolCall | None:
    """Find the tool call embedded in ``text``, if any.

    Example:
        >>> find_embedded_tool_call('Sure. {"tool": "list_dir", "arguments": {"path": "."}}')
        EmbeddedToolCall(name='list_dir', arguments={'path': '.'}, start=6, end=54)
    """
    spans = (_enclosing_object(text, m.start()) for m in _TOOL_KEY.finditer(text))
    if (span := next((s for s in spans if s is not None), None)) is None:
        return None
    start, end = span
    try:
        obj = decode(text[start:end + 1])
    except DecodeError:
        return None
    if not isinstance(obj, dict) or not isinstance(name := obj.get("tool"), str) or not isinstance(args := obj.get("arguments"), dict):
        return None
    return EmbeddedToolCall(name, args, start, end + 1)
