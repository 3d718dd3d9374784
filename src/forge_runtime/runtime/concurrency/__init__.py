"""Concurrency primitives for parallel tool execution.

- ThreadPool: async-friendly worker pool for blocking tool/engine calls
- ToolTask/ToolTaskSet: fan-out of tool invocations, ordered fan-in
"""

from .pool import DEFAULT_THREAD_WORKERS, ThreadPool
from .task import TaskState, ToolTask, ToolTaskFailed, ToolTaskSet

__all__ = ["DEFAULT_THREAD_WORKERS", "ThreadPool", "TaskState", "ToolTask", "ToolTaskFailed", "ToolTaskSet"]
