"""Dependency-graph task scheduler that runs agent tasks in concurrent waves."""

from importlib import metadata

from .agents import Coordinator, ExecutorRegistry, Orchestrator, RunOutcome, RunStatus
from .tasks import TaskStatus, TaskStep

try:
    __version__ = metadata.version("taskwave")
except metadata.PackageNotFoundError:  # pragma: no cover - fallback for dev
    __version__ = "0.0.0"

__all__ = [
    "Coordinator",
    "ExecutorRegistry",
    "Orchestrator",
    "RunOutcome",
    "RunStatus",
    "TaskStatus",
    "TaskStep",
    "__version__",
]
