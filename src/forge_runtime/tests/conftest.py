"""Shared fixtures: a registry with mock tools and a dispatcher over it."""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
import pytest_asyncio

from forge_runtime.foundation.config import clear_settings_cache
from forge_runtime.foundation.core import object_schema
from forge_runtime.foundation.registry import ToolRegistry
from forge_runtime.foundation.testing import MockTool, ScriptedEngine
from forge_runtime.runtime.concurrency import ThreadPool
from forge_runtime.runtime.dispatch import ActionDispatcher
from forge_runtime.tools import ListDirTool


@pytest.fixture(autouse=True)
def clean_settings() -> object:
    """Reset cached settings around each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def echo() -> MockTool:
    return MockTool(
        "echo",
        description="Echo the given text",
        parameters=object_schema({"text": {"type": "string"}}, ["text"]),
        side_effect=lambda args: args["text"],
    )


@pytest.fixture
def registry(echo: MockTool) -> ToolRegistry:
    reg = ToolRegistry()
    reg.register_all(echo, ListDirTool())
    return reg


@pytest.fixture
def engine() -> ScriptedEngine:
    return ScriptedEngine()


@pytest_asyncio.fixture
async def pool() -> AsyncIterator[ThreadPool]:
    async with ThreadPool(max_workers=4) as p:
        yield p


@pytest.fixture
def dispatcher(registry: ToolRegistry, pool: ThreadPool) -> ActionDispatcher:
    """Dispatcher without an engine."""
    return ActionDispatcher(registry, pool=pool)


@pytest.fixture
def engine_dispatcher(registry: ToolRegistry, engine: ScriptedEngine, pool: ThreadPool) -> ActionDispatcher:
    return ActionDispatcher(registry, engine, pool=pool)


def request(action: str, **fields: object) -> dict[str, object]:
    return {"version": 1, "action": action, **fields}
