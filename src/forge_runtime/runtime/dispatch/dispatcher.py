"""Action dispatcher: the protocol router.

Interprets a decoded request envelope, routes it to an action handler and
turns the outcome into a response envelope. Every failure becomes a
well-formed error response; nothing raised by a handler escapes ``dispatch``.

Example:
    >>> dispatcher = ActionDispatcher(registry, engine=None)
    >>> await dispatcher.dispatch({"version": 1, "action": "ping"})
    {'status': 'ok', 'action': 'ping', 'result': 'pong'}
    >>> await dispatcher.handle_bytes(b'{"version": 2, "action": "ping"}')
    b'{"status":"error","error":"unsupported protocol version"}'
"""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable

from forge_runtime.foundation.config import EngineSettings
from forge_runtime.foundation.errors import DispatchError, ErrorCode, ErrorInfo, JsonDict, JsonValue
from forge_runtime.foundation.registry import ToolRegistry
from forge_runtime.io.codec import DecodeError, decode, encode
from forge_runtime.runtime.concurrency import ThreadPool
from forge_runtime.runtime.engine import EngineGate, TextEngine

from . import envelope
from .envelope import Action
from .inference import InferenceOrchestrator

logger = logging.getLogger("forge_runtime.dispatch")

Handler = Callable[[JsonDict], Awaitable[JsonValue]]


def _int_field(request: JsonDict, name: str, default: int) -> int:
    value = request.get(name, default)
    if not isinstance(value, int) or isinstance(value, bool):
        raise DispatchError.create(ErrorCode.INVALID_REQUEST, f"{name} must be an integer", field=name)
    return value


def _float_field(request: JsonDict, name: str, default: float) -> float:
    value = request.get(name, default)
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise DispatchError.create(ErrorCode.INVALID_REQUEST, f"{name} must be a number", field=name)
    return float(value)


class ActionDispatcher:
    """Routes protocol requests to action handlers.

    The registry and engine are shared process-wide state built once at
    startup and handed in here. Engine calls are serialized by an EngineGate;
    tool tasks and engine calls run on ``pool`` so the event loop stays free.

    With ``settings``, generation limits a request omits fall back to the
    configured ones and the system prompt leads the AI-mediated conversation.
    Without it, -1 is forwarded and the engine applies its own defaults.
    """

    __slots__ = ("_registry", "_gate", "_pool", "_owns_pool", "_settings", "_inference", "_handlers")

    def __init__(
        self,
        registry: ToolRegistry,
        engine: TextEngine | None = None,
        *,
        pool: ThreadPool | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        self._registry = registry
        self._gate = EngineGate(engine)
        self._owns_pool = pool is None
        self._pool = pool or ThreadPool()
        self._settings = settings
        if settings is None:
            self._inference = InferenceOrchestrator(registry, self._gate, self._pool)
        else:
            self._inference = InferenceOrchestrator(
                registry,
                self._gate,
                self._pool,
                system_prompt=settings.system_prompt,
                max_tokens=settings.max_tokens,
                temperature=settings.temperature,
            )
        self._handlers: dict[str, Handler] = {
            Action.PING: self._handle_ping,
            Action.INFER: self._inference.infer,
            Action.LIST_TOOLS: self._handle_list_tools,
            Action.GENERATE: self._handle_generate,
            Action.MODEL_INFO: self._handle_model_info,
        }

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def actions(self) -> list[str]:
        return list(self._handlers)

    async def dispatch(self, request: object) -> JsonDict:
        """Response envelope for a decoded request."""
        if not isinstance(request, dict):
            return envelope.envelope_error(envelope.INVALID_ENVELOPE)
        if envelope.read_version(request) != envelope.PROTOCOL_VERSION:
            return envelope.envelope_error(envelope.UNSUPPORTED_VERSION)

        action = request.get("action")
        if not isinstance(action, str) or (handler := self._handlers.get(action)) is None:
            logger.info("rejected unknown action %r", action)
            return envelope.envelope_error(envelope.UNKNOWN_ACTION)

        start = time.perf_counter()
        try:
            response = envelope.ok(action, await handler(request))
        except DispatchError as e:
            logger.warning("[%s] %s", action, e.error)
            response = envelope.error(action, e.error)
        except Exception as e:
            logger.exception("[%s] unexpected failure", action)
            response = envelope.error(action, ErrorInfo.create(ErrorCode.INTERNAL_ERROR, str(e) or type(e).__name__))
        logger.debug("[%s] %s (%.1fms)", action, response["status"], (time.perf_counter() - start) * 1000)
        return response

    async def handle_bytes(self, raw: bytes) -> bytes:
        """Transport entry point: raw request bytes in, response bytes out."""
        try:
            request = decode(raw)
        except DecodeError:
            logger.info("rejected undecodable request (%d bytes)", len(raw))
            return encode(envelope.envelope_error(envelope.INVALID_JSON))
        return encode(await self.dispatch(request))

    def close(self) -> None:
        """Release the worker pool if this dispatcher created it."""
        if self._owns_pool:
            self._pool.shutdown(wait=False)

    # ─────────────────────────────────────────────────────────────────
    # Handlers
    # ─────────────────────────────────────────────────────────────────

    async def _handle_ping(self, request: JsonDict) -> JsonValue:
        return "pong"

    async def _handle_list_tools(self, request: JsonDict) -> JsonValue:
        return self._registry.list_tools()

    async def _handle_model_info(self, request: JsonDict) -> JsonValue:
        return self._gate.info()

    async def _handle_generate(self, request: JsonDict) -> JsonValue:
        prompt = request.get("prompt")
        if not isinstance(prompt, str):
            raise DispatchError.create(ErrorCode.INVALID_REQUEST, "prompt is required", field="prompt")
        if not self._gate.is_loaded():
            raise DispatchError.create(ErrorCode.INTERNAL_ERROR, "no model loaded")

        defaults = self._settings
        max_tokens = _int_field(request, "max_tokens", defaults.max_tokens if defaults else -1)
        temperature = _float_field(request, "temperature", defaults.temperature if defaults else -1.0)
        stop = request.get("stop")
        if isinstance(stop, list):
            stop = [s for s in stop if isinstance(s, str)]
        else:
            stop = list(defaults.stop_sequences) if defaults else []

        result = await self._pool.run(self._gate.generate, prompt, max_tokens, temperature, stop)
        return result.model_dump(include={"text", "tokens_generated", "tokens_per_second", "stop_reason", "stopped_by_limit"})
