"""Tests for the ``infer`` action: explicit and AI-mediated tool calling."""

from __future__ import annotations

import copy

import orjson
import pytest

from forge_runtime.foundation.errors import ErrorCode
from forge_runtime.foundation.registry import ToolRegistry
from forge_runtime.foundation.testing import MockTool, ScriptedEngine
from forge_runtime.runtime.dispatch import NO_TOOL_CALL, ActionDispatcher

from conftest import request


def call(call_id: str, name: str, **arguments: object) -> dict[str, object]:
    return {"id": call_id, "function": {"name": name, "arguments": arguments}}


class ExplodingRegistry(ToolRegistry):
    """Registry whose invocation itself raises for one tool."""

    def invoke(self, name, arguments):
        if name == "explode":
            raise RuntimeError("invoker crashed")
        return super().invoke(name, arguments)


# ─────────────────────────────────────────────────────────────────────────────
# Request shape
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
@pytest.mark.parametrize("messages", [None, "hello", {"role": "user"}])
async def test_messages_must_be_array(dispatcher: ActionDispatcher, messages: object) -> None:
    response = await dispatcher.dispatch(request("infer", messages=messages))
    assert response["status"] == "error"
    assert response["error"]["code"] == ErrorCode.INVALID_REQUEST
    assert response["error"]["field"] == "messages"


@pytest.mark.asyncio
async def test_malformed_directive(dispatcher: ActionDispatcher) -> None:
    messages = [{"role": "assistant", "tool_call": {"function": {"name": "echo"}}}]
    response = await dispatcher.dispatch(request("infer", messages=messages))
    assert response["error"]["code"] == ErrorCode.INVALID_REQUEST
    assert response["error"]["field"] == "id"


# ─────────────────────────────────────────────────────────────────────────────
# Explicit mode
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_explicit_single_call(dispatcher: ActionDispatcher, echo: MockTool) -> None:
    messages = [{"role": "assistant", "tool_call": call("c1", "echo", text="hi")}]
    response = await dispatcher.dispatch(request("infer", messages=messages))
    assert response == {
        "status": "ok",
        "action": "infer",
        "result": {
            "type": "tool_results",
            "messages": [{"role": "tool", "tool_call_id": "c1", "name": "echo", "content": "hi"}],
        },
    }
    echo.assert_called_with(text="hi")


@pytest.mark.asyncio
async def test_explicit_results_follow_submission_order(registry: ToolRegistry, pool) -> None:
    slow = MockTool("slow", return_value="slow done", delay=0.2)
    fast = MockTool("fast", return_value="fast done")
    registry.register_all(slow, fast)
    dispatcher = ActionDispatcher(registry, pool=pool)

    messages = [{"role": "assistant", "tool_calls": [call("a", "slow"), {"id": "b", "name": "fast"}]}]
    result = (await dispatcher.dispatch(request("infer", messages=messages)))["result"]

    assert [(m["tool_call_id"], m["content"]) for m in result["messages"]] == [("a", "slow done"), ("b", "fast done")]
    assert slow.call_count == fast.call_count == 1


@pytest.mark.asyncio
async def test_explicit_structured_errors_are_per_call(dispatcher: ActionDispatcher) -> None:
    messages = [{
        "role": "assistant",
        "tool_calls": [call("c1", "echo", text="ok"), call("c2", "nope"), call("c3", "echo", text=5)],
    }]
    response = await dispatcher.dispatch(request("infer", messages=messages))
    assert response["status"] == "ok"
    entries = response["result"]["messages"]
    assert entries[0]["content"] == "ok"
    assert entries[1]["error"] == {"code": "UNKNOWN_TOOL", "message": "tool not found", "tool": "nope"}
    assert entries[2]["error"]["code"] == "INVALID_ARGUMENT"
    assert entries[2]["error"]["field"] == "text"
    assert all(("content" in e) != ("error" in e) for e in entries)


@pytest.mark.asyncio
async def test_explicit_non_object_arguments_are_validated_per_call(registry: ToolRegistry, pool) -> None:
    free = MockTool("free", parameters={"type": "object"}, return_value="free done")
    registry.register(free)
    dispatcher = ActionDispatcher(registry, pool=pool)
    messages = [{
        "role": "assistant",
        "tool_calls": [
            {"id": "c1", "name": "anything", "arguments": {}},
            {"id": "c2", "name": "free", "arguments": [1, 2]},
            {"id": "c3", "name": "echo", "arguments": [1, 2]},
        ],
    }]
    response = await dispatcher.dispatch(request("infer", messages=messages))

    assert response["status"] == "ok"
    first, second, third = response["result"]["messages"]
    assert first["error"]["code"] == "UNKNOWN_TOOL"
    assert second["content"] == "free done"
    assert third["error"] == {"code": "INVALID_ARGUMENT", "message": "arguments must be an object", "tool": "echo", "field": "$"}


@pytest.mark.asyncio
async def test_explicit_tool_failure_is_contained(registry: ToolRegistry, pool) -> None:
    registry.register(MockTool("flaky", raises=OSError("disk gone")))
    dispatcher = ActionDispatcher(registry, pool=pool)
    messages = [{"tool_call": call("c1", "flaky")}]
    entry = (await dispatcher.dispatch(request("infer", messages=messages)))["result"]["messages"][0]
    assert entry["error"] == {"code": "TOOL_EXECUTION_FAILED", "message": "disk gone", "tool": "flaky"}


@pytest.mark.asyncio
async def test_explicit_abort_when_task_raises(echo: MockTool, pool) -> None:
    registry = ExplodingRegistry()
    registry.register_all(echo, MockTool("explode"))
    dispatcher = ActionDispatcher(registry, pool=pool)

    messages = [{"tool_calls": [call("c1", "echo", text="a"), call("c2", "explode"), call("c3", "echo", text="b")]}]
    response = await dispatcher.dispatch(request("infer", messages=messages))

    assert response["status"] == "error"
    assert response["action"] == "infer"
    assert response["error"]["code"] == ErrorCode.TOOL_EXECUTION_FAILED
    assert response["error"]["tool"] == "explode"
    assert "result" not in response


@pytest.mark.asyncio
async def test_explicit_with_no_calls(dispatcher: ActionDispatcher) -> None:
    response = await dispatcher.dispatch(request("infer", messages=[{"role": "assistant", "tool_calls": []}]))
    assert response["result"] == {"type": "assistant", "message": {"role": "assistant", "content": NO_TOOL_CALL}}


@pytest.mark.asyncio
async def test_explicit_mode_does_not_need_engine(dispatcher: ActionDispatcher) -> None:
    messages = [{"tool_call": {"id": "c1", "name": "list_dir", "arguments": '{"path": "."}'}}]
    response = await dispatcher.dispatch(request("infer", messages=messages))
    assert "files" in response["result"]["messages"][0]["content"]


# ─────────────────────────────────────────────────────────────────────────────
# AI-mediated mode
# ─────────────────────────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_mediated_requires_engine(dispatcher: ActionDispatcher) -> None:
    # embedded-looking text from the user is not a directive
    messages = [{"role": "user", "content": '{"tool": "list_dir", "arguments": {}}'}]
    response = await dispatcher.dispatch(request("infer", messages=messages))
    assert response["error"]["code"] == ErrorCode.INTERNAL_ERROR


@pytest.mark.asyncio
async def test_mediated_plain_answer(engine_dispatcher: ActionDispatcher, engine: ScriptedEngine, echo: MockTool) -> None:
    engine.extend(["Hello! How can I help?"])
    messages = [{"role": "user", "content": "hi"}]
    result = (await engine_dispatcher.dispatch(request("infer", messages=messages)))["result"]

    assert result == {
        "type": "assistant",
        "message": {"role": "assistant", "content": "Hello! How can I help?"},
        "tokens_used": 8,
        "tokens_per_second": 80.0,
    }
    [conversation] = engine.chats
    assert conversation[0]["role"] == "system"
    assert "- echo: Echo the given text" in conversation[0]["content"]
    assert "- list_dir: " in conversation[0]["content"]
    assert conversation[1:] == messages
    assert not echo.called


@pytest.mark.asyncio
async def test_mediated_tool_round(engine_dispatcher: ActionDispatcher, engine: ScriptedEngine, echo: MockTool) -> None:
    engine.extend(['Let me check. {"tool": "echo", "arguments": {"text": "pong"}}', "The tool said pong."])
    messages = [{"role": "user", "content": "say pong"}]
    original = copy.deepcopy(messages)

    result = (await engine_dispatcher.dispatch(request("infer", messages=messages)))["result"]

    assert result["type"] == "assistant"
    assert result["message"] == {"role": "assistant", "content": "The tool said pong."}
    assert result["tool_used"] == "echo"
    assert result["tokens_used"] == 16
    echo.assert_called_with(text="pong")
    assert messages == original

    first, second = engine.chats
    assert second[:len(first)] == first
    assert second[-2] == {"role": "assistant", "content": 'Let me check. {"tool": "echo", "arguments": {"text": "pong"}}'}
    assert second[-1] == {"role": "tool", "name": "echo", "content": "pong"}


@pytest.mark.asyncio
async def test_mediated_structured_result_is_serialized(engine_dispatcher: ActionDispatcher, engine: ScriptedEngine, tmp_path) -> None:
    (tmp_path / "notes.md").write_text("x")
    engine.extend([orjson.dumps({"tool": "list_dir", "arguments": {"path": str(tmp_path)}}).decode(), "One file."])
    await engine_dispatcher.dispatch(request("infer", messages=[{"role": "user", "content": "ls"}]))
    tool_message = engine.chats[1][-1]
    assert orjson.loads(tool_message["content"]) == {"files": ["notes.md"]}


@pytest.mark.asyncio
async def test_mediated_tool_error_is_shown_to_model(engine_dispatcher: ActionDispatcher, engine: ScriptedEngine) -> None:
    engine.extend(['{"tool": "echo", "arguments": {"text": 42}}', "Sorry, that failed."])
    response = await engine_dispatcher.dispatch(request("infer", messages=[{"role": "user", "content": "x"}]))

    assert response["status"] == "ok"
    assert response["result"]["tool_used"] == "echo"
    content = orjson.loads(engine.chats[1][-1]["content"])
    assert content["error"]["code"] == "INVALID_ARGUMENT"
    assert content["error"]["field"] == "text"


@pytest.mark.asyncio
async def test_mediated_unknown_tool(engine_dispatcher: ActionDispatcher, engine: ScriptedEngine) -> None:
    engine.extend(['{"tool": "rm_rf", "arguments": {}}'])
    response = await engine_dispatcher.dispatch(request("infer", messages=[{"role": "user", "content": "x"}]))
    assert response["error"]["code"] == ErrorCode.UNKNOWN_TOOL
    assert response["error"]["tool"] == "rm_rf"
    assert len(engine.chats) == 1
