"""Tool tasks: fan-out of tool invocations, fan-in in submission order.

A ToolTask is a handle to one in-flight or completed invocation. A
ToolTaskSet owns the tasks of a single ``infer`` request: tasks start as
soon as they are spawned and run in parallel worker threads; ``join`` awaits
them one by one in the order they were spawned.

There is no cancellation. When ``join`` stops at a failing task, tasks still
running are abandoned: they keep running to completion and their outcomes are
discarded.

Example:
    >>> tasks = ToolTaskSet(pool)
    >>> tasks.spawn("call_1", "slow_tool", registry.invoke, "slow_tool", {})
    >>> tasks.spawn("call_2", "fast_tool", registry.invoke, "fast_tool", {})
    >>> outcomes = await tasks.join()   # [call_1 outcome, call_2 outcome]
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Callable, Generic, TypeVar

from .pool import ThreadPool

T = TypeVar("T")

logger = logging.getLogger("forge_runtime.concurrency")


class TaskState(StrEnum):
    """Task lifecycle states."""
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ToolTaskFailed(Exception):
    """Raised by ``ToolTaskSet.join`` when awaiting a task raised."""

    __slots__ = ("task", "cause")

    def __init__(self, task: ToolTask[object], cause: BaseException) -> None:
        self.task = task
        self.cause = cause
        super().__init__(f"tool task {task.call_id!r} ({task.tool_name}) failed: {cause}")


@dataclass(slots=True)
class ToolTask(Generic[T]):
    """Handle to one tool invocation.

    Attributes:
        call_id: Identifier of the originating tool call
        tool_name: Tool being invoked
        pending_result: Future resolved exactly once with the outcome
    """

    call_id: str
    tool_name: str
    pending_result: asyncio.Future[T] = field(repr=False)

    @property
    def state(self) -> TaskState:
        if not self.pending_result.done():
            return TaskState.RUNNING
        if self.pending_result.cancelled() or self.pending_result.exception() is not None:
            return TaskState.FAILED
        return TaskState.COMPLETED

    @property
    def done(self) -> bool:
        return self.pending_result.done()

    async def wait(self) -> T:
        return await self.pending_result


def _discard_outcome(fut: asyncio.Future[object]) -> None:
    # Retrieve the exception of an abandoned task so asyncio does not report it
    if not fut.cancelled() and (exc := fut.exception()) is not None:
        logger.debug("abandoned tool task finished with %r", exc)


@dataclass(slots=True)
class ToolTaskSet(Generic[T]):
    """Tasks submitted for one request, kept in submission order."""

    pool: ThreadPool
    tasks: list[ToolTask[T]] = field(default_factory=list)

    def spawn(self, call_id: str, tool_name: str, func: Callable[..., T], *args: object) -> ToolTask[T]:
        """Start ``func(*args)`` in a worker thread and track it."""
        task: ToolTask[T] = ToolTask(call_id, tool_name, self.pool.submit(func, *args))
        self.tasks.append(task)
        return task

    async def join(self) -> list[T]:
        """Await every task in submission order.

        Raises:
            ToolTaskFailed: On the first task (in submission order) whose
                awaiting raises. Later tasks are abandoned, not cancelled.
        """
        results: list[T] = []
        for i, task in enumerate(self.tasks):
            try:
                results.append(await task.pending_result)
            except Exception as e:
                for rest in self.tasks[i + 1:]:
                    rest.pending_result.add_done_callback(_discard_outcome)
                raise ToolTaskFailed(task, e) from e  # type: ignore[arg-type]
        return results

    def __len__(self) -> int:
        return len(self.tasks)
