"""Task producers: turn configuration or a free-form instruction into pending tasks."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Dict, List, Protocol, Sequence, Tuple

from .base import TaskStep

if TYPE_CHECKING:  # pragma: no cover
    from ..config import ProjectConfig

logger = logging.getLogger(__name__)


class TaskProducer(Protocol):
    def produce(self) -> Sequence[TaskStep]:  # pragma: no cover - interface
        """Return the initial, all-pending task collection."""


def tasks_from_config(config: "ProjectConfig") -> List[TaskStep]:
    return [spec.to_task() for spec in config.tasks]


# id, name, description, agent type, dependencies
PlanStep = Tuple[str, str, str, str, Tuple[str, ...]]

PLAN_TEMPLATES: Dict[str, List[PlanStep]] = {
    "web_development": [
        ("plan", "Requirements and design", "Collect requirements and sketch the architecture", "Plan", ()),
        ("scaffold", "Project setup", "Pick a framework and scaffold the project", "CodeGenAgent", ("plan",)),
        ("implement", "Implement components", "Build the UI components", "CodeGenAgent", ("scaffold",)),
        ("test", "Write and run tests", "Unit and end-to-end tests", "TestAgent", ("implement",)),
        ("review", "Code review", "Quality checks and security scan", "ReviewAgent", ("test",)),
        ("deploy", "Deploy", "Build and deploy the application", "DeploymentAgent", ("review",)),
    ],
    "api_development": [
        ("design", "API design", "Design endpoints and schemas", "APIAgent", ()),
        ("database", "Database design", "Schema design and migrations", "DatabaseAgent", ("design",)),
        ("implement", "Implement API", "Handlers and business logic", "CodeGenAgent", ("database",)),
        ("test", "API tests", "Integration and API tests", "TestAgent", ("implement",)),
        ("security", "Security scan", "Vulnerability scan and auth checks", "SecurityAgent", ("test",)),
        ("docs", "API documentation", "Generate OpenAPI documentation", "DocumentationAgent", ("implement",)),
    ],
    "data_analysis": [
        ("collect", "Collect data", "Gather data from the required sources", "general-purpose", ()),
        ("clean", "Clean data", "Preprocess and normalise the data", "general-purpose", ("collect",)),
        ("analyze", "Analyse data", "Statistics and visualisation", "general-purpose", ("clean",)),
        ("report", "Write report", "Summarise the findings", "DocumentationAgent", ("analyze",)),
    ],
    "automation": [
        ("design", "Workflow design", "Define the automation steps", "Plan", ()),
        ("implement", "Implement scripts", "Write the automation scripts", "CodeGenAgent", ("design",)),
        ("test", "Test workflow", "Exercise the workflow end to end", "TestAgent", ("implement",)),
        ("schedule", "Schedule", "Hook the workflow into CI or cron", "DeploymentAgent", ("test",)),
    ],
    "general": [
        ("analyze", "Analyse request", "Work out what is being asked", "Explore", ()),
        ("plan", "Plan", "Decide on the approach", "Plan", ("analyze",)),
        ("execute", "Execute", "Carry out the plan", "general-purpose", ("plan",)),
        ("verify", "Verify", "Check the result", "ReviewAgent", ("execute",)),
    ],
}

KEYWORDS: Dict[str, re.Pattern] = {
    "web": re.compile(r"\b(web|site|page|frontend|front-end|ui)\b", re.IGNORECASE),
    "api": re.compile(r"\b(api|backend|back-end|server|endpoint)s?\b", re.IGNORECASE),
    "database": re.compile(r"\b(database|db|sql)\b", re.IGNORECASE),
    "analysis": re.compile(r"\b(analy[sz]e|analysis|report|statistics)\b", re.IGNORECASE),
    "automation": re.compile(r"\b(automat\w*|workflow|cron|schedule)\b", re.IGNORECASE),
}


class InstructionDecomposer:
    """Rule-based decomposition of an instruction into one of the canned plans."""

    def __init__(self, instruction: str) -> None:
        self.instruction = instruction

    def keywords(self) -> List[str]:
        return [name for name, pattern in KEYWORDS.items() if pattern.search(self.instruction)]

    def plan_name(self) -> str:
        found = set(self.keywords())
        if "web" in found:
            return "web_development"
        if "api" in found:
            return "api_development"
        if "analysis" in found:
            return "data_analysis"
        if "automation" in found:
            return "automation"
        return "general"

    def produce(self) -> List[TaskStep]:
        plan = self.plan_name()
        tasks = [
            TaskStep(id=step_id, name=name, description=description, agent_type=agent, dependencies=deps)
            for step_id, name, description, agent, deps in PLAN_TEMPLATES[plan]
        ]
        logger.info("Decomposed instruction into %d task(s) using the %s plan", len(tasks), plan)
        return tasks
