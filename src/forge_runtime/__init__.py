"""forge_runtime - control plane of a local AI-assistant runtime.

Accepts one JSON request per connection on a Unix socket, routes it to an
action (ping, list_tools, generate, model_info, infer) and answers with a
JSON envelope. ``infer`` either runs explicit tool calls in parallel or lets
the attached text engine pick a tool from the registry.

Quick Start:
    >>> from forge_runtime import ActionDispatcher, default_registry
    >>> dispatcher = ActionDispatcher(default_registry())
    >>> await dispatcher.dispatch({"version": 1, "action": "list_tools"})
    {'status': 'ok', 'action': 'list_tools', 'result': [{'type': 'function', ...}]}

Custom tools:
    >>> from forge_runtime import tool
    >>>
    >>> @tool(description="Add two numbers")
    ... def add(a: float, b: float) -> float:
    ...     return a + b
    >>>
    >>> registry = default_registry()
    >>> registry.register(add)
"""

from __future__ import annotations

__version__ = "0.1.0"

from .foundation.config import RuntimeSettings, get_settings
from .foundation.core import BaseTool, Tool, ToolMetadata, object_schema, tool
from .foundation.errors import DispatchError, ErrorCode, ErrorInfo, ToolError
from .foundation.registry import ToolRegistry
from .runtime.dispatch import PROTOCOL_VERSION, ActionDispatcher
from .runtime.engine import GenerateResult, TextEngine
from .tools import default_registry

__all__ = [
    "__version__",
    "PROTOCOL_VERSION", "ActionDispatcher",
    "BaseTool", "Tool", "ToolMetadata", "object_schema", "tool",
    "ToolRegistry", "default_registry",
    "ErrorCode", "ErrorInfo", "ToolError", "DispatchError",
    "GenerateResult", "TextEngine",
    "RuntimeSettings", "get_settings",
]
