"""Decorator-based tool definition for simple functions.

Turns a plain function into a BaseTool whose parameter schema is generated
from the function's signature and type hints.

Example:
    >>> @tool(description="Add two numbers")
    ... def add(a: float, b: float = 1) -> float:
    ...     '''Add numbers.
    ...
    ...     Args:
    ...         a: First operand
    ...         b: Second operand
    ...     '''
    ...     return a + b
    ...
    >>> registry.register(add)
    >>> add.run({"a": 2, "b": 3})
    5
"""

from __future__ import annotations

import inspect
import re
from typing import Callable, get_type_hints, overload

from ..errors import JsonDict, JsonValue
from .base import BaseTool, ToolMetadata, object_schema

_PARAM_PATTERN = re.compile(
    r"^\s*(?P<name>\w+)\s*(?:\([^)]*\))?\s*:\s*(?P<desc>.+?)(?=\n\s*\w+\s*:|$)",
    re.MULTILINE | re.DOTALL,
)

_TYPE_NAMES: dict[type, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    dict: "object",
    list: "array",
}


def _parse_docstring_params(docstring: str | None) -> dict[str, str]:
    """Extract parameter descriptions from a Google style ``Args:`` section."""
    if not docstring:
        return {}
    sections = re.split(r"\n\s*(?:Args|Arguments|Parameters)\s*:\s*\n", docstring, flags=re.IGNORECASE)
    if len(sections) < 2:
        return {}
    args_section = re.split(r"\n\s*(?:Returns|Raises|Examples?|Notes?)\s*:", sections[1], flags=re.IGNORECASE)[0]
    return {m.group("name"): " ".join(m.group("desc").split()) for m in _PARAM_PATTERN.finditer(args_section)}


def _generate_schema(func: Callable[..., JsonValue]) -> JsonDict:
    """Build the restricted object schema from a function signature."""
    sig = inspect.signature(func)
    hints = get_type_hints(func)
    docs = _parse_docstring_params(func.__doc__)
    properties: JsonDict = {}
    required: list[str] = []

    for name, param in sig.parameters.items():
        if name in ("self", "cls") or param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        spec: JsonDict = {}
        hint = hints.get(name, str)
        if (type_name := _TYPE_NAMES.get(getattr(hint, "__origin__", hint))) is not None:
            spec["type"] = type_name
        if name in docs:
            spec["description"] = docs[name]
        if param.default is inspect.Parameter.empty:
            required.append(name)
        else:
            spec["default"] = param.default
        properties[name] = spec

    return object_schema(properties, required)


def _extract_description(docstring: str | None) -> str | None:
    """First line of docstring."""
    if not docstring:
        return None
    lines = docstring.strip().split("\n")
    return lines[0].strip() if lines else None


class FunctionTool(BaseTool):
    """BaseTool implementation that wraps a decorated function."""

    def __init__(self, func: Callable[..., JsonValue], metadata: ToolMetadata) -> None:
        self._func = func
        self.metadata = metadata  # type: ignore[misc]

    def run(self, arguments: JsonDict) -> JsonValue:
        return self._func(**arguments)

    def __call__(self, *args: object, **kwargs: object) -> JsonValue:
        return self._func(*args, **kwargs)

    @property
    def func(self) -> Callable[..., JsonValue]:
        return self._func


@overload
def tool(func: Callable[..., JsonValue]) -> FunctionTool: ...

@overload
def tool(
    *,
    name: str | None = None,
    description: str | None = None,
    parameters: JsonDict | None = None,
) -> Callable[[Callable[..., JsonValue]], FunctionTool]: ...


def tool(
    func: Callable[..., JsonValue] | None = None,
    *,
    name: str | None = None,
    description: str | None = None,
    parameters: JsonDict | None = None,
) -> FunctionTool | Callable[[Callable[..., JsonValue]], FunctionTool]:
    """Decorator to create a tool from a function.

    Args:
        func: The function to wrap (used when decorator called without parens)
        name: Tool name (defaults to the function name)
        description: Tool description (defaults to first line of docstring)
        parameters: Explicit schema, overriding the generated one
    """
    def decorator(fn: Callable[..., JsonValue]) -> FunctionTool:
        tool_name = name or fn.__name__
        meta = ToolMetadata(
            name=tool_name,
            description=description or _extract_description(fn.__doc__) or f"Execute {tool_name}",
            parameters=parameters if parameters is not None else _generate_schema(fn),
        )
        return FunctionTool(fn, meta)

    if func is not None:
        return decorator(func)
    return decorator
