"""Notification events and the adapter that keeps notifiers off the critical path."""

from __future__ import annotations

import enum
import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait
from datetime import datetime, timezone
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from ..tasks.base import TaskStep

logger = logging.getLogger(__name__)


class EventKind(str, enum.Enum):
    STARTED = "started"
    COMPLETED = "completed"
    FAILED = "failed"


class TaskEvent(BaseModel):
    """Payload delivered to notifiers for every task transition."""

    kind: EventKind
    task_id: str
    name: str
    description: str = ""
    agent_type: str = ""
    result: Any = None
    error: Optional[str] = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def from_task(cls, kind: EventKind, task: TaskStep) -> "TaskEvent":
        return cls(
            kind=kind,
            task_id=task.id,
            name=task.name,
            description=task.description,
            agent_type=task.agent_type,
            result=task.result if kind is EventKind.COMPLETED else None,
            error=task.error if kind is EventKind.FAILED else None,
        )

    def summary(self) -> str:
        if self.kind is EventKind.STARTED:
            text = f"🚀 Started: {self.name}"
            return f"{text}\n{self.description}" if self.description else text
        if self.kind is EventKind.COMPLETED:
            return f"✅ Completed: {self.name}"
        return f"❌ Failed: {self.name}\nError: {self.error}"


class Notifier:
    """Base notifier. Subclasses override the hooks they care about or ``handle``."""

    def task_started(self, event: TaskEvent) -> None:
        self.handle(event)

    def task_completed(self, event: TaskEvent) -> None:
        self.handle(event)

    def task_failed(self, event: TaskEvent) -> None:
        self.handle(event)

    def handle(self, event: TaskEvent) -> None:
        pass


class SafeNotifier:
    """Delivers events to a notifier on a background thread.

    Delivery order is preserved. Anything the wrapped notifier raises is
    logged and dropped; the caller never waits on delivery except in
    :meth:`close`, which waits at most ``flush_timeout`` seconds.
    """

    def __init__(self, notifier: Optional[Any], *, flush_timeout: float = 10.0) -> None:
        self.notifier = notifier
        self.flush_timeout = flush_timeout
        self._pool: Optional[ThreadPoolExecutor] = None
        self._pending: List[Future] = []

    def emit(self, kind: EventKind, task: TaskStep) -> None:
        if self.notifier is None:
            return
        try:
            event = TaskEvent.from_task(kind, task)
        except Exception:
            logger.warning("Could not build %s event for task %s", kind.value, task.id, exc_info=True)
            return
        if self._pool is None:
            self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="taskwave-notify")
        self._pending = [future for future in self._pending if not future.done()]
        self._pending.append(self._pool.submit(self._deliver, event))

    def _deliver(self, event: TaskEvent) -> None:
        hook = getattr(self.notifier, f"task_{event.kind.value}", None)
        if hook is None:
            return
        try:
            hook(event)
        except Exception:
            logger.warning(
                "Notifier %r failed on %s event for task %s",
                self.notifier,
                event.kind.value,
                event.task_id,
                exc_info=True,
            )

    def close(self) -> None:
        if self._pool is None:
            return
        _done, not_done = wait(self._pending, timeout=self.flush_timeout)
        if not_done:
            logger.warning("Gave up waiting on %d undelivered notifications", len(not_done))
        self._pool.shutdown(wait=False)
        self._pool = None
        self._pending = []
