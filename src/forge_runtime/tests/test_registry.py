"""Tests for tool definition, registration and invocation."""

from __future__ import annotations

import pytest

from forge_runtime.foundation.core import BaseTool, FunctionTool, Tool, ToolMetadata, object_schema, tool
from forge_runtime.foundation.errors import ErrorCode, ToolError
from forge_runtime.foundation.registry import ToolRegistry
from forge_runtime.foundation.testing import MockTool
from forge_runtime.foundation.validation import minimal_arguments, validate
from forge_runtime.tools import ListDirTool, default_registry


class EchoTool(BaseTool):
    metadata = ToolMetadata(
        name="echo",
        description="Echo the given text",
        parameters=object_schema({"text": {"type": "string"}, "times": {"type": "number", "default": 1}}, ["text"]),
    )

    def run(self, arguments):
        return arguments["text"] * int(arguments["times"])


@pytest.fixture
def registry() -> ToolRegistry:
    reg = ToolRegistry()
    reg.register(EchoTool())
    return reg


# ─────────────────────────────────────────────────────────────────────────────
# Registration
# ─────────────────────────────────────────────────────────────────────────────


def test_register_and_lookup(registry: ToolRegistry) -> None:
    assert "echo" in registry
    assert registry.has("echo") and not registry.has("nope")
    assert isinstance(registry.get("echo"), Tool)
    assert registry.names() == ["echo"]
    assert len(registry) == 1


def test_duplicate_name_replaces(registry: ToolRegistry) -> None:
    replacement = MockTool("echo", return_value="replaced")
    registry.register(replacement)
    assert len(registry) == 1
    assert registry.invoke("echo", {}).unwrap() == "replaced"


def test_sealed_registry_refuses_registration(registry: ToolRegistry) -> None:
    registry.seal()
    assert registry.sealed
    with pytest.raises(RuntimeError, match="sealed"):
        registry.register(MockTool("late"))
    assert registry.invoke("echo", {"text": "a"}).is_ok()


def test_metadata_rejects_bad_names() -> None:
    with pytest.raises(ValueError):
        ToolMetadata(name="Bad Name", description="x")
    with pytest.raises(ValueError):
        ToolMetadata(name="ok_name", description="")


# ─────────────────────────────────────────────────────────────────────────────
# Invocation
# ─────────────────────────────────────────────────────────────────────────────


def test_invoke_success_applies_defaults(registry: ToolRegistry) -> None:
    assert registry.invoke("echo", {"text": "ab"}).unwrap() == "ab"
    assert registry.invoke("echo", {"text": "ab", "times": 2}).unwrap() == "abab"


def test_invoke_unknown_tool(registry: ToolRegistry) -> None:
    err = registry.invoke("does_not_exist", {}).unwrap_err()
    assert err.code == ErrorCode.UNKNOWN_TOOL
    assert err.tool == "does_not_exist"
    assert err.message == "tool not found"


def test_invoke_invalid_argument(registry: ToolRegistry) -> None:
    err = registry.invoke("echo", {"text": 5}).unwrap_err()
    assert err.code == ErrorCode.INVALID_ARGUMENT
    assert (err.field, err.tool) == ("text", "echo")
    assert err.to_dict() == {
        "code": "INVALID_ARGUMENT",
        "message": "type mismatch, expected string",
        "field": "text",
        "tool": "echo",
    }


def test_invoke_does_not_mutate_caller_arguments(registry: ToolRegistry) -> None:
    args = {"text": "x"}
    registry.invoke("echo", args)
    assert args == {"text": "x"}


def test_tool_receives_validated_arguments() -> None:
    mock = MockTool("defaulted", parameters=object_schema({"path": {"type": "string", "default": "."}}))
    reg = ToolRegistry()
    reg.register(mock)
    reg.invoke("defaulted", {})
    mock.assert_called_with(path=".")


def test_tool_exception_becomes_execution_failure() -> None:
    reg = ToolRegistry()
    reg.register(MockTool("boom", raises=ToolError("disk on fire")))
    err = reg.invoke("boom", {}).unwrap_err()
    assert err.code == ErrorCode.TOOL_EXECUTION_FAILED
    assert err.message == "disk on fire"
    assert err.tool == "boom"


def test_unexpected_exception_also_contained() -> None:
    reg = ToolRegistry()
    reg.register(MockTool("boom", raises=KeyError))
    err = reg.invoke("boom", {}).unwrap_err()
    assert err.code == ErrorCode.TOOL_EXECUTION_FAILED
    assert err.message == "KeyError"


# ─────────────────────────────────────────────────────────────────────────────
# Descriptions
# ─────────────────────────────────────────────────────────────────────────────


def test_list_tools_round_trip(registry: ToolRegistry) -> None:
    """Every listed schema yields arguments the registry accepts."""
    registry.register(ListDirTool())
    listed = registry.list_tools()
    assert [t["function"]["name"] for t in listed] == ["echo", "list_dir"]
    for entry in listed:
        assert entry["type"] == "function"
        fn = entry["function"]
        args = minimal_arguments(fn["parameters"])
        assert validate(dict(args), fn["parameters"]) is None
        assert registry.invoke(fn["name"], args).is_ok()


def test_schema_is_a_copy(registry: ToolRegistry) -> None:
    schema = registry.get("echo").schema()
    schema["properties"].clear()
    assert registry.get("echo").schema()["properties"]


def test_describe(registry: ToolRegistry) -> None:
    registry.register(ListDirTool())
    lines = registry.describe().splitlines()
    assert lines[0] == "- echo: Echo the given text"
    assert lines[1].startswith("- list_dir: ")


# ─────────────────────────────────────────────────────────────────────────────
# @tool decorator
# ─────────────────────────────────────────────────────────────────────────────


def test_decorator_generates_schema() -> None:
    @tool
    def add(a: float, b: float = 1, label: str = "sum") -> dict:
        """Add two numbers.

        Args:
            a: First operand
            b: Second operand
            label: Result key
        """
        return {label: a + b}

    assert isinstance(add, FunctionTool)
    assert add.name() == "add"
    assert add.description() == "Add two numbers."
    schema = add.schema()
    assert schema["required"] == ["a"]
    assert schema["properties"]["a"] == {"type": "number", "description": "First operand"}
    assert schema["properties"]["b"]["default"] == 1

    reg = ToolRegistry()
    reg.register(add)
    assert reg.invoke("add", {"a": 2}).unwrap() == {"sum": 3}
    assert reg.invoke("add", {"a": "2"}).unwrap_err().field == "a"
    assert add(1, 2) == {"sum": 3}


def test_decorator_maps_int_to_integer() -> None:
    @tool
    def repeat(text: str, times: int = 2) -> str:
        """Repeat text."""
        return text * times

    assert repeat.schema()["properties"]["times"]["type"] == "integer"
    reg = ToolRegistry()
    reg.register(repeat)
    assert reg.invoke("repeat", {"text": "ab", "times": 3}).unwrap() == "ababab"
    err = reg.invoke("repeat", {"text": "ab", "times": 2.5}).unwrap_err()
    assert (err.code, err.field) == (ErrorCode.INVALID_ARGUMENT, "times")


def test_decorator_with_explicit_metadata() -> None:
    @tool(name="shout", description="Upper-case text", parameters=object_schema({"text": {"type": "string"}}, ["text"]))
    def _shout(text: str) -> str:
        return text.upper()

    assert _shout.name() == "shout"
    assert _shout.run({"text": "hi"}) == "HI"


# ─────────────────────────────────────────────────────────────────────────────
# Built-in tools
# ─────────────────────────────────────────────────────────────────────────────


def test_list_dir(tmp_path) -> None:
    (tmp_path / "b.txt").write_text("b")
    (tmp_path / "a.txt").write_text("a")
    (tmp_path / "sub").mkdir()
    reg = default_registry()
    assert reg.invoke("list_dir", {"path": str(tmp_path)}).unwrap() == {"files": ["a.txt", "b.txt", "sub"]}


def test_list_dir_rejects_non_string_path() -> None:
    err = default_registry().invoke("list_dir", {"path": 5}).unwrap_err()
    assert err.code == ErrorCode.INVALID_ARGUMENT
    assert err.field == "path"


def test_list_dir_missing_directory(tmp_path) -> None:
    err = default_registry().invoke("list_dir", {"path": str(tmp_path / "missing")}).unwrap_err()
    assert err.code == ErrorCode.TOOL_EXECUTION_FAILED
    assert err.tool == "list_dir"
