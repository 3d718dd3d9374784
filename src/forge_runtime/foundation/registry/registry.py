"""Central registry for tool lookup and invocation.

The registry provides:
- Tool registration and lookup by name
- Validate-then-invoke with structured errors (never raises)
- Function-call descriptors for clients and models
- Formatted tool descriptions for model prompts

Registration happens once at startup. ``seal()`` freezes the registry before
the transport starts accepting, after which concurrent lookups need no locking.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterator

from forge_runtime.foundation.core import Tool, ToolDescriptor
from forge_runtime.foundation.errors import Err, ErrorCode, ErrorInfo, JsonDict, JsonValue, Ok, Result
from forge_runtime.foundation.validation import validate

logger = logging.getLogger("forge_runtime.registry")

InvokeResult = Result[JsonValue, ErrorInfo]


class ToolRegistry:
    """Owns every registered tool, keyed by name.

    Example:
        >>> registry = ToolRegistry()
        >>> registry.register(ListDirTool())
        >>> registry.invoke("list_dir", {"path": "."})
        Ok({'files': [...]})
        >>> registry.invoke("does_not_exist", {}).unwrap_err().code
        <ErrorCode.UNKNOWN_TOOL: 'UNKNOWN_TOOL'>
    """

    __slots__ = ("_tools", "_sealed")

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}
        self._sealed = False

    def register(self, tool: Tool) -> None:
        """Register a tool instance, replacing any tool with the same name."""
        if self._sealed:
            raise RuntimeError("registry is sealed; tools must be registered before serving")
        name = tool.name()
        if name in self._tools:
            logger.warning("replacing registered tool %r", name)
        self._tools[name] = tool

    def register_all(self, *tools: Tool) -> None:
        for tool in tools:
            self.register(tool)

    def seal(self) -> None:
        """Refuse further registration. Called before serving begins."""
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def has(self, name: str) -> bool:
        return name in self._tools

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def names(self) -> list[str]:
        return list(self._tools)

    # ─────────────────────────────────────────────────────────────────
    # Invocation
    # ─────────────────────────────────────────────────────────────────

    def invoke(self, name: str, arguments: object) -> InvokeResult:
        """Validate ``arguments`` against the tool schema and run the tool.

        The caller's argument object is not modified; the tool receives a
        normalized copy with schema defaults applied.

        Returns:
            Ok(result) or Err(ErrorInfo) with code UNKNOWN_TOOL,
            INVALID_ARGUMENT or TOOL_EXECUTION_FAILED
        """
        if (tool := self._tools.get(name)) is None:
            return Err(ErrorInfo.create(ErrorCode.UNKNOWN_TOOL, "tool not found", tool=name))

        args = copy.deepcopy(arguments)
        if (issue := validate(args, tool.schema())) is not None:
            return Err(ErrorInfo.create(ErrorCode.INVALID_ARGUMENT, issue.message, field=issue.field, tool=name))

        try:
            return Ok(tool.run(args))  # type: ignore[arg-type]
        except Exception as e:
            logger.warning("tool %r failed: %s", name, e, exc_info=True)
            return Err(ErrorInfo.from_exception(name, e))

    # ─────────────────────────────────────────────────────────────────
    # Querying & Formatting
    # ─────────────────────────────────────────────────────────────────

    def descriptors(self) -> list[ToolDescriptor]:
        return [ToolDescriptor(name=t.name(), description=t.description(), schema=t.schema()) for t in self._tools.values()]

    def list_tools(self) -> list[JsonDict]:
        """Function-call envelopes for every registered tool."""
        return [d.to_function() for d in self.descriptors()]

    def describe(self) -> str:
        """One ``- name: description`` line per tool, for model prompts."""
        return "\n".join(f"- {t.name()}: {t.description()}" for t in self._tools.values())
