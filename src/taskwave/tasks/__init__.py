"""Task primitives."""

from .base import Failure, Success, TaskOutcome, TaskStatus, TaskStep, TaskView
from .graph import plan_waves, propagate_failure, ready_tasks, validate_graph
from .producer import InstructionDecomposer, TaskProducer, tasks_from_config

__all__ = [
    "Failure",
    "InstructionDecomposer",
    "Success",
    "TaskOutcome",
    "TaskProducer",
    "TaskStatus",
    "TaskStep",
    "TaskView",
    "plan_waves",
    "propagate_failure",
    "ready_tasks",
    "tasks_from_config",
    "validate_graph",
]
