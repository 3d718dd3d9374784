"""Tool capability: BaseTool, metadata, descriptors and the @tool decorator."""

from .base import BaseTool, Tool, ToolDescriptor, ToolMetadata, object_schema
from .decorator import FunctionTool, tool

__all__ = ["BaseTool", "Tool", "ToolDescriptor", "ToolMetadata", "object_schema", "FunctionTool", "tool"]
