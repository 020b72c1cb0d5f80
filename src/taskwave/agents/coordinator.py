"""Wave scheduler that drives a task graph to completion."""

from __future__ import annotations

import asyncio
import copy
import enum
import inspect
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from ..errors import ConfigError, TaskTimeoutError
from ..notify.base import EventKind, SafeNotifier
from ..tasks.base import TaskStatus, TaskStep
from ..tasks.graph import propagate_failure, ready_tasks, validate_graph
from .base import ExecutionContext
from .registry import ExecutorRegistry

logger = logging.getLogger(__name__)

MAX_DEFAULT_WORKERS = 64


class RunStatus(str, enum.Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    STALLED = "stalled"


@dataclass
class RunOutcome:
    """Result of one coordinator run.

    ``results`` only holds completed tasks; ``tasks`` is the final collection
    with every status and error.
    """

    status: RunStatus
    results: Dict[str, Any]
    tasks: List[TaskStep]
    waves: List[List[str]] = field(default_factory=list)
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return self.status is RunStatus.SUCCEEDED

    def _with_status(self, status: TaskStatus) -> List[TaskStep]:
        return [task for task in self.tasks if task.status is status]

    @property
    def completed(self) -> List[TaskStep]:
        return self._with_status(TaskStatus.COMPLETED)

    @property
    def failed(self) -> List[TaskStep]:
        return self._with_status(TaskStatus.FAILED)

    @property
    def pending(self) -> List[TaskStep]:
        return self._with_status(TaskStatus.PENDING)


@dataclass
class _RunState:
    tasks: List[TaskStep]
    sink: SafeNotifier
    pool: ThreadPoolExecutor
    results: Dict[str, Any] = field(default_factory=dict)


class Coordinator:
    """Executes a task graph in waves.

    Each wave dispatches every ready task concurrently and waits for all of
    them to settle before the next ready set is computed. Synchronous
    executors run on worker threads; coroutine executors are awaited on the
    loop. Task state is only written from the loop thread.
    """

    def __init__(
        self,
        registry: ExecutorRegistry,
        notifier: Optional[Any] = None,
        *,
        task_timeout: Optional[float] = None,
        validate: bool = True,
        max_workers: Optional[int] = None,
        flush_timeout: float = 10.0,
    ) -> None:
        if task_timeout is not None and task_timeout <= 0:
            raise ValueError("task_timeout must be positive")
        self.registry = registry
        self.notifier = notifier
        self.task_timeout = task_timeout
        self.validate = validate
        self.max_workers = max_workers
        self.flush_timeout = flush_timeout

    def run(self, tasks: Iterable[TaskStep]) -> RunOutcome:
        return asyncio.run(self.arun(tasks))

    async def arun(self, tasks: Iterable[TaskStep]) -> RunOutcome:
        collection = list(tasks)
        not_pending = [task.id for task in collection if task.status is not TaskStatus.PENDING]
        if not_pending:
            raise ConfigError(f"Tasks must start pending: {', '.join(not_pending)}")
        if self.validate:
            validate_graph(collection)

        workers = self.max_workers or min(MAX_DEFAULT_WORKERS, max(1, len(collection)))
        state = _RunState(
            tasks=collection,
            sink=SafeNotifier(self.notifier, flush_timeout=self.flush_timeout),
            pool=ThreadPoolExecutor(max_workers=workers, thread_name_prefix="taskwave-worker"),
        )
        waves: List[List[str]] = []
        started = time.perf_counter()
        logger.info("Starting task graph with %d task(s)", len(collection))
        try:
            # Every wave settles before the next ready set is computed, so an
            # empty ready set with pending tasks left is a stall.
            while any(task.status is TaskStatus.PENDING for task in collection):
                ready = ready_tasks(collection)
                if not ready:
                    break
                for task in ready:
                    task.start()
                    state.sink.emit(EventKind.STARTED, task)
                waves.append([task.id for task in ready])
                logger.info("Wave %d: dispatching %s", len(waves), ", ".join(waves[-1]))
                await asyncio.gather(*(self._dispatch(task, state) for task in ready))
        finally:
            state.pool.shutdown(wait=False, cancel_futures=True)
            state.sink.close()

        outcome = RunOutcome(
            status=self._final_status(collection),
            results=state.results,
            tasks=collection,
            waves=waves,
            duration=time.perf_counter() - started,
        )
        if outcome.status is RunStatus.STALLED:
            logger.warning(
                "Task graph stalled; never ready: %s",
                ", ".join(task.id for task in outcome.pending),
            )
        logger.info(
            "Task graph finished (%s): %d/%d completed, %d failed, %d pending in %.2fs",
            outcome.status.value,
            len(outcome.completed),
            len(collection),
            len(outcome.failed),
            len(outcome.pending),
            outcome.duration,
        )
        return outcome

    async def _dispatch(self, task: TaskStep, state: _RunState) -> None:
        try:
            context = ExecutionContext(
                task=task.snapshot(),
                dependency_results=tuple(
                    (dep, copy.deepcopy(state.results.get(dep))) for dep in task.dependencies
                ),
                deadline=(time.monotonic() + self.task_timeout) if self.task_timeout else None,
            )
            value = await self._invoke(task, context, state.pool)
        except Exception as exc:
            self._record_failure(task, exc, state)
        else:
            task.complete(value)
            state.results[task.id] = value
            logger.debug("Task %s completed", task.id)
            state.sink.emit(EventKind.COMPLETED, task)

    async def _invoke(self, task: TaskStep, context: ExecutionContext, pool: ThreadPoolExecutor) -> Any:
        executor = self.registry.get(task.agent_type)
        logger.debug("Running task %s with %r", task.id, executor)
        if _is_async(executor):
            call = executor.run(context)
        else:
            call = asyncio.get_running_loop().run_in_executor(pool, executor.run, context)
        if self.task_timeout is None:
            return await call
        try:
            return await asyncio.wait_for(call, self.task_timeout)
        except asyncio.TimeoutError:
            context.cancel_event.set()
            raise TaskTimeoutError(f"Task {task.id} timed out after {self.task_timeout:g}s") from None

    def _record_failure(self, task: TaskStep, exc: Exception, state: _RunState) -> None:
        message = str(exc) or type(exc).__name__
        task.fail(message, cause=exc)
        logger.warning("Task %s (%s) failed: %s", task.id, task.name, message)
        state.sink.emit(EventKind.FAILED, task)
        for dependent in propagate_failure(task.id, state.tasks):
            logger.warning("Task %s not run: %s", dependent.id, dependent.error)
            state.sink.emit(EventKind.FAILED, dependent)

    @staticmethod
    def _final_status(tasks: List[TaskStep]) -> RunStatus:
        if any(task.status is TaskStatus.PENDING for task in tasks):
            return RunStatus.STALLED
        if any(task.status is TaskStatus.FAILED for task in tasks):
            return RunStatus.FAILED
        return RunStatus.SUCCEEDED


def _is_async(executor: Any) -> bool:
    flag = getattr(executor, "is_async", None)
    if flag is not None:
        return bool(flag)
    return inspect.iscoroutinefunction(executor.run)
