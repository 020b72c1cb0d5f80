"""Executor interface used by the coordinator."""

from __future__ import annotations

import inspect
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Protocol, Sequence, Union

from ..tasks.base import TaskView


@dataclass(frozen=True)
class ExecutionContext:
    """Everything an executor receives for one task invocation."""

    task: TaskView
    dependency_results: Sequence[tuple[str, Any]] = ()
    deadline: Optional[float] = None
    cancel_event: threading.Event = field(default_factory=threading.Event, compare=False)

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def remaining(self) -> Optional[float]:
        """Seconds left before the deadline, measured on ``time.monotonic``."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def dependency_result(self, task_id: str) -> Any:
        for dep_id, result in self.dependency_results:
            if dep_id == task_id:
                return result
        raise KeyError(f"Task {self.task.id} has no dependency {task_id}")


class Executor(Protocol):
    """Performs the work for tasks of one agent type.

    ``run`` may be a plain function, which the coordinator calls from a worker
    thread, or a coroutine function, which it awaits on the event loop.
    """

    def run(self, context: ExecutionContext) -> Union[Any, Awaitable[Any]]:  # pragma: no cover - interface
        ...


class CallableExecutor:
    """Adapts a plain callable (sync or async) to the executor interface."""

    def __init__(self, func: Callable[[ExecutionContext], Any], name: str | None = None) -> None:
        self.func = func
        self.name = name or getattr(func, "__name__", "callable")
        self.is_async = inspect.iscoroutinefunction(func)

    def run(self, context: ExecutionContext) -> Any:
        return self.func(context)

    def __repr__(self) -> str:
        return f"CallableExecutor({self.name})"
