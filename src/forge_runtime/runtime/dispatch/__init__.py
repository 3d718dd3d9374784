"""Protocol routing and tool-calling orchestration."""

from .calls import ToolCall, carries_directive, extract_tool_calls
from .detection import EmbeddedToolCall, find_embedded_tool_call
from .dispatcher import ActionDispatcher
from .envelope import PROTOCOL_VERSION, Action, Status
from .inference import NO_TOOL_CALL, InferenceOrchestrator

__all__ = [
    "ActionDispatcher", "InferenceOrchestrator",
    "Action", "Status", "PROTOCOL_VERSION", "NO_TOOL_CALL",
    "ToolCall", "carries_directive", "extract_tool_calls",
    "EmbeddedToolCall", "find_embedded_tool_call",
]
