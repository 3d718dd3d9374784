"""Tool registry."""

from .registry import InvokeResult, ToolRegistry

__all__ = ["InvokeResult", "ToolRegistry"]
