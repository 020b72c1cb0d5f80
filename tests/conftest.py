import threading
from typing import Callable, List, Tuple

import pytest

from taskwave.agents.registry import ExecutorRegistry
from taskwave.notify.sinks import RecordingNotifier
from taskwave.tasks.base import TaskStep


@pytest.fixture
def make_tasks() -> Callable[..., List[TaskStep]]:
    """Build tasks from ``(id, [deps], agent_type)`` tuples; agent defaults to ``work``."""

    def factory(*specs: Tuple) -> List[TaskStep]:
        tasks = []
        for spec in specs:
            task_id, deps = spec[0], spec[1]
            agent = spec[2] if len(spec) > 2 else "work"
            tasks.append(TaskStep(id=task_id, name=task_id.upper(), agent_type=agent, dependencies=deps))
        return tasks

    return factory


@pytest.fixture
def diamond(make_tasks) -> List[TaskStep]:
    return make_tasks(("a", []), ("b", ["a"]), ("c", ["a"]), ("d", ["b", "c"]))


class CallLog:
    """Thread-safe record of executor start/end events."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, str]] = []
        self._lock = threading.Lock()

    def add(self, kind: str, task_id: str) -> None:
        with self._lock:
            self.events.append((kind, task_id))

    def index(self, kind: str, task_id: str) -> int:
        return self.events.index((kind, task_id))

    def started(self) -> List[str]:
        return [task_id for kind, task_id in self.events if kind == "start"]


@pytest.fixture
def call_log() -> CallLog:
    return CallLog()


@pytest.fixture
def registry(call_log) -> ExecutorRegistry:
    """Registry whose ``work`` executor logs calls and returns ``result-<id>``."""

    def work(context):
        call_log.add("start", context.task.id)
        call_log.add("end", context.task.id)
        return f"result-{context.task.id}"

    reg = ExecutorRegistry(fallback=None)
    reg.register_function("work", work)
    return reg


@pytest.fixture
def recorder() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def failing_for(call_log) -> Callable[..., Callable]:
    """Executor function that fails for the given ids and succeeds otherwise."""

    def build(*failing_ids: str, message: str = "boom") -> Callable:
        def work(context):
            call_log.add("start", context.task.id)
            call_log.add("end", context.task.id)
            if context.task.id in failing_ids:
                raise RuntimeError(f"{message} in {context.task.id}")
            return {dep: result for dep, result in context.dependency_results}

        return work

    return build
