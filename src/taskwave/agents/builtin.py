"""Built-in simulated executors, one per standard agent type."""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Mapping

from ..errors import TaskTimeoutError
from .base import ExecutionContext
from .registry import ExecutorRegistry

logger = logging.getLogger(__name__)


class SimulatedAgent:
    """Waits for a fixed delay, then returns a canned result.

    The wait honours the context's cancel token, so a timed-out task stops
    promptly instead of holding its worker thread.
    """

    def __init__(
        self,
        agent_type: str,
        delay: float = 0.5,
        result: Mapping[str, Any] | None = None,
        *,
        delay_scale: float = 1.0,
    ) -> None:
        self.agent_type = agent_type
        self.delay = delay
        self.delay_scale = delay_scale
        self.result = dict(result or {})

    def run(self, context: ExecutionContext) -> Dict[str, Any]:
        logger.info("%s: %s", self.agent_type, context.task.description or context.task.name)
        if context.cancel_event.wait(self.delay * self.delay_scale):
            raise TaskTimeoutError(f"{self.agent_type} cancelled while working on {context.task.id}")
        payload = copy.deepcopy(self.result)
        payload.setdefault("agent", self.agent_type)
        if context.dependency_results:
            payload["inputs"] = [dep_id for dep_id, _ in context.dependency_results]
        return payload


BUILTIN_AGENTS: Dict[str, tuple[float, Dict[str, Any]]] = {
    "CodeGenAgent": (1.0, {"files_created": ["src/example.py"], "lines_of_code": 150}),
    "TestAgent": (0.8, {"tests_run": 25, "tests_passed": 25, "coverage": 85}),
    "ReviewAgent": (0.6, {"issues": [], "quality_score": 95, "security_score": 98}),
    "DeploymentAgent": (
        1.5,
        {"deployed": True, "url": "https://example.com", "environment": "production"},
    ),
    "APIAgent": (0.7, {"endpoints": ["/api/users", "/api/posts"], "openapi_spec": "openapi.yaml"}),
    "DatabaseAgent": (0.6, {"tables": ["users", "posts"], "migrations": ["001_initial.sql"]}),
    "SecurityAgent": (0.9, {"vulnerabilities": 0, "security_score": 100}),
    "DocumentationAgent": (0.5, {"docs_generated": ["README.md", "API.md"]}),
    "Plan": (0.4, {"plan": "Detailed implementation plan", "estimated_time": "2 hours"}),
    "Explore": (0.3, {"findings": "Codebase analysis complete"}),
    "general-purpose": (0.5, {"status": "completed"}),
}


def register_builtin_executors(registry: ExecutorRegistry, *, delay_scale: float = 1.0) -> None:
    """Register simulated executor factories for every built-in agent type."""

    for agent_type, (delay, result) in BUILTIN_AGENTS.items():
        registry.register_factory(
            agent_type,
            lambda agent_type=agent_type, delay=delay, result=result: SimulatedAgent(
                agent_type, delay, result, delay_scale=delay_scale
            ),
            overwrite=True,
        )
