"""Executors and the wave coordinator."""

from .base import CallableExecutor, ExecutionContext, Executor
from .builtin import SimulatedAgent, register_builtin_executors
from .coordinator import Coordinator, RunOutcome, RunStatus
from .orchestrator import Orchestrator
from .registry import ExecutorRegistry

__all__ = [
    "CallableExecutor",
    "Coordinator",
    "ExecutionContext",
    "Executor",
    "ExecutorRegistry",
    "Orchestrator",
    "RunOutcome",
    "RunStatus",
    "SimulatedAgent",
    "register_builtin_executors",
]
