"""Foundation - core building blocks for forge_runtime.

Contains: tool abstractions, error handling, validation, registry, config, testing.
"""

from __future__ import annotations

__all__ = [
    # Core
    "BaseTool", "Tool", "ToolMetadata", "ToolDescriptor", "object_schema", "tool", "FunctionTool",
    # Errors
    "ErrorCode", "ErrorInfo", "ToolError", "DispatchError", "Result", "Ok", "Err",
    "JsonDict", "JsonValue",
    # Validation
    "validate", "ValidationIssue", "minimal_arguments",
    # Registry
    "ToolRegistry", "InvokeResult",
    # Config
    "RuntimeSettings", "EngineSettings", "LoggingSettings", "get_settings", "clear_settings_cache",
    # Testing
    "MockTool", "ScriptedEngine", "Invocation",
]

_SUBMODULES = {
    "core": ("BaseTool", "Tool", "ToolMetadata", "ToolDescriptor", "object_schema", "tool", "FunctionTool"),
    "errors": ("ErrorCode", "ErrorInfo", "ToolError", "DispatchError", "Result", "Ok", "Err", "JsonDict", "JsonValue"),
    "validation": ("validate", "ValidationIssue", "minimal_arguments"),
    "registry": ("ToolRegistry", "InvokeResult"),
    "config": ("RuntimeSettings", "EngineSettings", "LoggingSettings", "get_settings", "clear_settings_cache"),
    "testing": ("MockTool", "ScriptedEngine", "Invocation"),
}


def __getattr__(name: str):
    """Lazy imports to avoid circular dependencies."""
    for module, names in _SUBMODULES.items():
        if name in names:
            from importlib import import_module
            return getattr(import_module(f".{module}", __name__), name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
