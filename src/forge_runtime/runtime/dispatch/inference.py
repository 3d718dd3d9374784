"""Tool-calling orchestration behind the ``infer`` action.

Two modes, chosen by the request's messages:

Explicit mode
    Some message carries ``tool_call``/``tool_calls``. Every directive becomes
    a ToolTask running in parallel on the worker pool; results are assembled
    in submission order. If awaiting a task raises, the whole call fails with
    TOOL_EXECUTION_FAILED and results of sibling tasks are not reported.

AI-mediated mode
    No directive. The engine sees a system message listing the tools, may
    answer with an embedded ``{"tool": ..., "arguments": ...}`` object, and
    gets one follow-up turn with the tool's result::

        AWAITING_FIRST_RESPONSE -> DONE
        AWAITING_FIRST_RESPONSE -> TOOL_EXECUTED -> AWAITING_FINAL_RESPONSE -> DONE

    At most one tool runs per call.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from forge_runtime.foundation.errors import DispatchError, ErrorCode, ErrorInfo, JsonDict, JsonValue
from forge_runtime.foundation.registry import InvokeResult, ToolRegistry
from forge_runtime.io.codec import encode_str
from forge_runtime.runtime.concurrency import ThreadPool, ToolTaskFailed, ToolTaskSet
from forge_runtime.runtime.engine import EngineGate, GenerateResult

from .calls import ToolCall, carries_directive, extract_tool_calls
from .detection import EmbeddedToolCall, find_embedded_tool_call

logger = logging.getLogger("forge_runtime.inference")

NO_TOOL_CALL = "No tool call detected"
TOOL_PROMPT = (
    "You can use the following tools:\n{tools}\n\n"
    'To call a tool, reply with a JSON object of the form {{"tool": "<name>", "arguments": {{...}}}}.'
)


def _assistant(content: str, **extra: JsonValue) -> JsonDict:
    return {"type": "assistant", "message": {"role": "assistant", "content": content}, **extra}


def _stringify(value: JsonValue) -> str:
    return value if isinstance(value, str) else encode_str(value)


def _tool_message(call: ToolCall, outcome: InvokeResult) -> JsonDict:
    entry: JsonDict = {"role": "tool", "tool_call_id": call.id, "name": call.name}
    if outcome.is_err():
        entry["error"] = outcome.unwrap_err().to_dict()
    else:
        entry["content"] = outcome.unwrap()
    return entry


class InferenceOrchestrator:
    """Runs ``infer`` requests against a registry and an engine gate."""

    __slots__ = ("_registry", "_gate", "_pool", "_tool_prompt", "_system_prompt", "_max_tokens", "_temperature")

    def __init__(
        self,
        registry: ToolRegistry,
        gate: EngineGate,
        pool: ThreadPool,
        *,
        tool_prompt: str = TOOL_PROMPT,
        system_prompt: str = "",
        max_tokens: int = -1,
        temperature: float = -1.0,
    ) -> None:
        self._registry = registry
        self._gate = gate
        self._pool = pool
        self._tool_prompt = tool_prompt
        self._system_prompt = system_prompt
        self._max_tokens = max_tokens
        self._temperature = temperature

    async def infer(self, request: JsonDict) -> JsonDict:
        """Result payload for an ``infer`` request.

        Raises:
            DispatchError: INVALID_REQUEST, UNKNOWN_TOOL, TOOL_EXECUTION_FAILED
                or INTERNAL_ERROR
        """
        messages = request.get("messages")
        if not isinstance(messages, list):
            raise DispatchError.create(ErrorCode.INVALID_REQUEST, "messages must be an array", field="messages")

        if any(carries_directive(m) for m in messages):
            return await self._explicit(messages)
        return await self._mediated(messages)

    # ─────────────────────────────────────────────────────────────────
    # Explicit mode
    # ─────────────────────────────────────────────────────────────────

    async def _explicit(self, messages: Sequence[object]) -> JsonDict:
        calls = extract_tool_calls(messages)
        if not calls:
            return _assistant(NO_TOOL_CALL)

        tasks: ToolTaskSet[InvokeResult] = ToolTaskSet(self._pool)
        for call in calls:
            tasks.spawn(call.id, call.name, self._registry.invoke, call.name, call.arguments)
        logger.debug("submitted %d tool task(s): %s", len(tasks), [c.name for c in calls])

        try:
            outcomes = await tasks.join()
        except ToolTaskFailed as e:
            logger.error("tool task %s (%s) raised: %s", e.task.call_id, e.task.tool_name, e.cause)
            raise DispatchError.create(ErrorCode.TOOL_EXECUTION_FAILED, str(e.cause) or "tool task failed", tool=e.task.tool_name) from e

        return {"type": "tool_results", "messages": [_tool_message(c, o) for c, o in zip(calls, outcomes)]}

    # ─────────────────────────────────────────────────────────────────
    # AI-mediated mode
    # ─────────────────────────────────────────────────────────────────

    def system_message(self) -> JsonDict:
        """Configured system prompt followed by the tool listing."""
        tools = self._tool_prompt.format(tools=self._registry.describe())
        return {"role": "system", "content": f"{self._system_prompt}\n\n{tools}" if self._system_prompt else tools}

    async def _chat(self, conversation: list[JsonDict]) -> GenerateResult:
        return await self._pool.run(self._gate.chat, list(conversation), self._max_tokens, self._temperature)

    async def _mediated(self, messages: list[object]) -> JsonDict:
        if not self._gate.is_loaded():
            raise DispatchError.create(ErrorCode.INTERNAL_ERROR, "no model loaded; AI-mediated inference requires an engine")

        conversation: list[JsonDict] = [self.system_message(), *messages]  # type: ignore[list-item]
        first = await self._chat(conversation)

        if (found := find_embedded_tool_call(first.text)) is None:
            return _assistant(first.text, tokens_used=first.tokens_generated, tokens_per_second=first.tokens_per_second)

        outcome = await self._run_embedded(found)
        conversation.append({"role": "assistant", "content": first.text})
        conversation.append({"role": "tool", "name": found.name, "content": self._tool_content(outcome)})

        final = await self._chat(conversation)
        logger.debug("mediated inference used tool %s", found.name)
        return _assistant(
            final.text,
            tool_used=found.name,
            tokens_used=first.tokens_generated + final.tokens_generated,
            tokens_per_second=final.tokens_per_second,
        )

    async def _run_embedded(self, found: EmbeddedToolCall) -> InvokeResult:
        if not self._registry.has(found.name):
            raise DispatchError(ErrorInfo.create(ErrorCode.UNKNOWN_TOOL, "model requested an unregistered tool", tool=found.name))
        return await self._pool.run(self._registry.invoke, found.name, found.arguments)

    @staticmethod
    def _tool_content(outcome: InvokeResult) -> str:
        """Tool message content; failures are shown to the model as an error object."""
        return outcome.match(ok=_stringify, err=lambda e: encode_str({"error": e.to_dict()}))
