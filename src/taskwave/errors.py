"""Exception hierarchy for taskwave."""

from __future__ import annotations

from typing import Iterable, List, Sequence


class TaskwaveError(Exception):
    """Base class for all taskwave errors."""


class ConfigError(TaskwaveError, RuntimeError):
    """Raised when configuration files or task collections are invalid."""


class GraphValidationError(ConfigError):
    """Raised when a task graph cannot be scheduled to completion."""

    def __init__(
        self,
        *,
        duplicates: Iterable[str] = (),
        dangling: Iterable[tuple[str, str]] = (),
        cycle: Sequence[str] = (),
    ) -> None:
        self.duplicates: List[str] = list(duplicates)
        self.dangling: List[tuple[str, str]] = list(dangling)
        self.cycle: List[str] = list(cycle)
        super().__init__(self._render())

    def _render(self) -> str:
        problems: List[str] = []
        if self.duplicates:
            problems.append(f"duplicate task ids: {', '.join(self.duplicates)}")
        if self.dangling:
            refs = ", ".join(f"{task_id} -> {dep}" for task_id, dep in self.dangling)
            problems.append(f"unknown dependencies: {refs}")
        if self.cycle:
            problems.append(f"dependency cycle: {' -> '.join(self.cycle + self.cycle[:1])}")
        return "Invalid task graph: " + "; ".join(problems or ["unknown problem"])


class TaskStateError(TaskwaveError, RuntimeError):
    """Raised on an illegal task status transition."""


class UnknownAgentError(TaskwaveError, LookupError):
    """Raised when no executor is registered for an agent type."""


class TaskTimeoutError(TaskwaveError, TimeoutError):
    """Raised when an executor call exceeds its deadline."""
