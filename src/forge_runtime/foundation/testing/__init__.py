"""Testing utilities: MockTool and ScriptedEngine."""

from .mock import Invocation, MockTool, ScriptedEngine

__all__ = ["Invocation", "MockTool", "ScriptedEngine"]
