"""Text generation engine capability.

The runtime does not generate text itself. It talks to an engine through the
narrow ``TextEngine`` protocol and never calls it concurrently: every call
goes through an ``EngineGate``.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field

from forge_runtime.foundation.errors import JsonDict


class GenerateResult(BaseModel):
    """Outcome of one ``generate`` or ``chat`` call."""

    model_config = ConfigDict(frozen=True)

    text: str = ""
    tokens_generated: int = Field(default=0, ge=0)
    tokens_per_second: float = Field(default=0.0, ge=0.0)
    stopped_by_limit: bool = False
    stop_reason: str = ""


@runtime_checkable
class TextEngine(Protocol):
    """Capability consumed from the text generation engine.

    ``max_tokens=-1`` and ``temperature=-1.0`` mean "use the engine default".
    """

    def is_loaded(self) -> bool: ...

    def generate(
        self,
        prompt: str,
        max_tokens: int = -1,
        temperature: float = -1.0,
        stop: Sequence[str] = (),
    ) -> GenerateResult: ...

    def chat(
        self,
        messages: Sequence[JsonDict],
        max_tokens: int = -1,
        temperature: float = -1.0,
    ) -> GenerateResult: ...

    def model_name(self) -> str: ...
    def context_size(self) -> int: ...
    def vocab_size(self) -> int: ...


class EngineGate:
    """Serializes access to an engine.

    The engine is not assumed to be safe for concurrent use, so at most one
    ``generate``/``chat`` call is in flight across all threads. Metadata reads
    are not gated.
    """

    __slots__ = ("_engine", "_lock")

    def __init__(self, engine: TextEngine | None) -> None:
        self._engine = engine
        self._lock = threading.Lock()

    @property
    def engine(self) -> TextEngine | None:
        return self._engine

    def is_loaded(self) -> bool:
        return self._engine is not None and self._engine.is_loaded()

    def _require(self) -> TextEngine:
        if self._engine is None:
            raise RuntimeError("no engine attached")
        return self._engine

    def generate(
        self,
        prompt: str,
        max_tokens: int = -1,
        temperature: float = -1.0,
        stop: Sequence[str] = (),
    ) -> GenerateResult:
        engine = self._require()
        with self._lock:
            return engine.generate(prompt, max_tokens, temperature, list(stop))

    def chat(
        self,
        messages: Sequence[JsonDict],
        max_tokens: int = -1,
        temperature: float = -1.0,
    ) -> GenerateResult:
        engine = self._require()
        with self._lock:
            return engine.chat(list(messages), max_tokens, temperature)

    def info(self) -> JsonDict:
        """``model_info`` payload."""
        if not self.is_loaded():
            return {"loaded": False}
        engine = self._require()
        return {
            "loaded": True,
            "model_name": engine.model_name(),
            "context_size": engine.context_size(),
            "vocab_size": engine.vocab_size(),
        }
