"""Worker threads for blocking tool and engine calls.

Tools and the text engine are synchronous. The dispatcher runs on an event
loop, so every such call is handed to a ThreadPool and awaited. Work starts
as soon as it is submitted, which is what lets explicit tool calls of one
``infer`` request execute in parallel.

Example:
    >>> async with ThreadPool(max_workers=4) as pool:
    ...     files = await pool.run(os.listdir, ".")
"""

from __future__ import annotations

import asyncio
import functools
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, ParamSpec, TypeVar

T = TypeVar("T")
P = ParamSpec("P")

__all__ = ["ThreadPool", "DEFAULT_THREAD_WORKERS"]

DEFAULT_THREAD_WORKERS = min(32, (os.cpu_count() or 1) + 4)


class ThreadPool:
    """Lazily started ``ThreadPoolExecutor`` bound to the running event loop."""

    __slots__ = ("max_workers", "thread_name_prefix", "_executor")

    def __init__(self, max_workers: int = DEFAULT_THREAD_WORKERS, *, thread_name_prefix: str = "forge-tool-") -> None:
        if max_workers < 1:
            raise ValueError("max_workers must be >= 1")
        self.max_workers = max_workers
        self.thread_name_prefix = thread_name_prefix
        self._executor: ThreadPoolExecutor | None = None

    @property
    def started(self) -> bool:
        return self._executor is not None

    def _ensure_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(self.max_workers, thread_name_prefix=self.thread_name_prefix)
        return self._executor

    def submit(self, func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> asyncio.Future[T]:
        """Start ``func`` in a worker thread; returns a Future of the running loop."""
        call = functools.partial(func, *args, **kwargs) if kwargs else functools.partial(func, *args)
        return asyncio.get_running_loop().run_in_executor(self._ensure_executor(), call)

    async def run(self, func: Callable[P, T], *args: P.args, **kwargs: P.kwargs) -> T:
        return await self.submit(func, *args, **kwargs)

    def shutdown(self, wait: bool = True, *, cancel_futures: bool = False) -> None:
        """Stop the worker threads. The pool may be used again afterwards."""
        executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait, cancel_futures=cancel_futures)

    async def __aenter__(self) -> ThreadPool:
        self._ensure_executor()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.shutdown(wait=True, cancel_futures=exc_info[1] is not None)

    def __repr__(self) -> str:
        return f"ThreadPool(max_workers={self.max_workers}, started={self.started})"
