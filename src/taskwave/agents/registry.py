"""Registry mapping agent types to executors."""

from __future__ import annotations

import threading
from typing import Callable, Dict, Optional

from ..config import ExecutorSpec, instantiate_from_path
from ..errors import ConfigError, UnknownAgentError
from .base import CallableExecutor, Executor

ExecutorFactory = Callable[[], Executor]


class ExecutorRegistry:
    """Stores executor factories and lazily instantiates them when requested.

    Lookups for an unregistered agent type fall back to ``fallback`` when it
    is set and registered.
    """

    def __init__(self, fallback: Optional[str] = "general-purpose") -> None:
        self.fallback = fallback
        self._factories: Dict[str, ExecutorFactory] = {}
        self._instances: Dict[str, Executor] = {}
        self._lock = threading.Lock()

    def register_instance(self, agent_type: str, executor: Executor, *, overwrite: bool = False) -> None:
        if agent_type in self and not overwrite:
            raise ValueError(f"Executor for {agent_type} already registered")
        self._factories.pop(agent_type, None)
        self._instances[agent_type] = executor

    def register_factory(self, agent_type: str, factory: ExecutorFactory, *, overwrite: bool = False) -> None:
        if agent_type in self and not overwrite:
            raise ValueError(f"Executor factory for {agent_type} already registered")
        self._instances.pop(agent_type, None)
        self._factories[agent_type] = factory

    def register_function(self, agent_type: str, func: Callable, *, overwrite: bool = False) -> None:
        self.register_instance(agent_type, CallableExecutor(func, name=agent_type), overwrite=overwrite)

    def register_from_spec(self, spec: ExecutorSpec) -> None:
        def factory() -> Executor:
            instance = instantiate_from_path(spec.type, **spec.params)
            if not callable(getattr(instance, "run", None)):
                raise ConfigError(f"Executor '{spec.agent_type}' ({spec.type}) has no run method")
            return instance

        self.register_factory(spec.agent_type, factory, overwrite=True)

    def configure_from_specs(self, specs: Dict[str, ExecutorSpec]) -> None:
        for spec in specs.values():
            self.register_from_spec(spec)

    def resolve(self, agent_type: str) -> str:
        """Return the registered agent type that will serve ``agent_type``."""
        if agent_type in self:
            return agent_type
        if self.fallback and self.fallback in self:
            return self.fallback
        raise UnknownAgentError(f"No executor registered for agent type '{agent_type}'")

    def get(self, agent_type: str) -> Executor:
        key = self.resolve(agent_type)
        with self._lock:
            if key not in self._instances:
                self._instances[key] = self._factories[key]()
            return self._instances[key]

    def __contains__(self, agent_type: str) -> bool:
        return agent_type in self._instances or agent_type in self._factories

    def agent_types(self) -> list[str]:
        return sorted(set(self._instances) | set(self._factories))
