"""High-level orchestration for running config-defined task graphs."""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from ..config import ProjectConfig, instantiate_from_path
from ..notify.sinks import CompositeNotifier
from ..tasks.base import TaskStep
from ..tasks.producer import tasks_from_config
from .builtin import register_builtin_executors
from .coordinator import Coordinator, RunOutcome
from .registry import ExecutorRegistry

logger = logging.getLogger(__name__)


class Orchestrator:
    """Builds executors and notifiers from config and runs the task graph."""

    def __init__(
        self,
        project_config: ProjectConfig,
        *,
        extra_notifiers: Optional[List[Any]] = None,
        task_timeout: Optional[float] = None,
        validate: Optional[bool] = None,
    ) -> None:
        self.config = project_config
        settings = project_config.settings
        self.registry = ExecutorRegistry(fallback=settings.fallback_agent)
        register_builtin_executors(self.registry, delay_scale=settings.simulated_delay_scale)
        self.registry.configure_from_specs(self.config.executor_specs)
        self.notifier = self._build_notifier(extra_notifiers or [])
        self.coordinator = Coordinator(
            self.registry,
            self.notifier,
            task_timeout=task_timeout if task_timeout is not None else settings.task_timeout,
            validate=settings.validate if validate is None else validate,
            max_workers=settings.max_workers,
        )

    def _build_notifier(self, extra: List[Any]) -> Optional[Any]:
        notifiers: List[Any] = [
            instantiate_from_path(spec.type, **spec.params) for spec in self.config.notifiers
        ]
        notifiers.extend(extra)
        if not notifiers:
            return None
        if len(notifiers) == 1:
            return notifiers[0]
        return CompositeNotifier(notifiers)

    def build_tasks(self) -> List[TaskStep]:
        return tasks_from_config(self.config)

    def run(self, tasks: Optional[List[TaskStep]] = None) -> RunOutcome:
        tasks = tasks if tasks is not None else self.build_tasks()
        logger.info("Running project %s", self.config.name)
        return self.coordinator.run(tasks)
