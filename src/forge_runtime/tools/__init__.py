"""Built-in tools shipped with the runtime."""

from __future__ import annotations

from forge_runtime.foundation.registry import ToolRegistry

from .list_dir import ListDirTool

__all__ = ["ListDirTool", "BUILTIN_TOOLS", "default_registry"]

BUILTIN_TOOLS = (ListDirTool,)


def default_registry() -> ToolRegistry:
    """Fresh registry holding one instance of every built-in tool."""
    registry = ToolRegistry()
    registry.register_all(*(cls() for cls in BUILTIN_TOOLS))
    return registry
