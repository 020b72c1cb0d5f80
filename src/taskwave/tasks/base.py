"""Task dataclasses and the per-task state machine."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, Union

from ..errors import ConfigError, TaskStateError


class TaskStatus(str, enum.Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.COMPLETED, TaskStatus.FAILED)


@dataclass(frozen=True)
class Success:
    """Outcome of a task whose executor returned a value."""

    value: Any


@dataclass(frozen=True)
class Failure:
    """Outcome of a task that failed, either itself or through a dependency."""

    error: str
    cause: Optional[BaseException] = field(default=None, compare=False, repr=False)


TaskOutcome = Union[Success, Failure]


@dataclass
class TaskStep:
    """A single unit of schedulable work.

    ``dependencies`` is frozen into a tuple at construction. Status only moves
    forward through :meth:`start`, :meth:`complete` and :meth:`fail`; the
    outcome is written exactly once.
    """

    id: str
    name: str = ""
    description: str = ""
    agent_type: str = "general-purpose"
    dependencies: Sequence[str] = ()
    status: TaskStatus = TaskStatus.PENDING
    outcome: Optional[TaskOutcome] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if isinstance(self.dependencies, str):
            self.dependencies = (self.dependencies,)
        self.dependencies = tuple(str(dep) for dep in self.dependencies)
        self.status = TaskStatus(self.status)
        if not self.name:
            self.name = self.id
        if self.status is not TaskStatus.PENDING or self.outcome is not None:
            raise TaskStateError(f"Task {self.id} must be created pending without an outcome")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TaskStep":
        if "id" not in data:
            raise ConfigError("Task is missing required key: id")
        raw_depends = data.get("depends_on", data.get("dependencies")) or []
        if isinstance(raw_depends, str):
            raw_depends = [raw_depends]
        return cls(
            id=str(data["id"]),
            name=str(data.get("name") or data["id"]),
            description=str(data.get("description") or ""),
            agent_type=str(data.get("agent") or data.get("agent_type") or "general-purpose"),
            dependencies=[str(item) for item in raw_depends],
        )

    @property
    def result(self) -> Any:
        if isinstance(self.outcome, Success):
            return self.outcome.value
        return None

    @property
    def error(self) -> Optional[str]:
        if isinstance(self.outcome, Failure):
            return self.outcome.error
        return None

    def start(self) -> None:
        if self.status is not TaskStatus.PENDING:
            raise TaskStateError(f"Cannot start task {self.id} from status {self.status.value}")
        self.status = TaskStatus.RUNNING

    def complete(self, value: Any) -> None:
        if self.status is not TaskStatus.RUNNING:
            raise TaskStateError(f"Cannot complete task {self.id} from status {self.status.value}")
        self.outcome = Success(value)
        self.status = TaskStatus.COMPLETED

    def fail(self, error: str, cause: Optional[BaseException] = None) -> None:
        if self.status.is_terminal:
            raise TaskStateError(f"Task {self.id} already {self.status.value}")
        self.outcome = Failure(error=error, cause=cause)
        self.status = TaskStatus.FAILED

    def snapshot(self) -> "TaskView":
        return TaskView(
            id=self.id,
            name=self.name,
            description=self.description,
            agent_type=self.agent_type,
            dependencies=tuple(self.dependencies),
        )


@dataclass(frozen=True)
class TaskView:
    """Read-only copy of a task handed to executors and notifiers."""

    id: str
    name: str
    description: str
    agent_type: str
    dependencies: tuple[str, ...]
