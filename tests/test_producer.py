import pytest

from taskwave.config import ProjectConfig
from taskwave.tasks.base import TaskStatus, TaskStep
from taskwave.tasks.graph import plan_waves, validate_graph
from taskwave.tasks.producer import PLAN_TEMPLATES, InstructionDecomposer, tasks_from_config


@pytest.mark.parametrize(
    "instruction, plan",
    [
        ("Build a landing page for the web shop", "web_development"),
        ("Create a REST API with a database", "api_development"),
        ("Analyze last month's sales and write a report", "data_analysis"),
        ("Automate the nightly backup workflow", "automation"),
        ("Tidy up my notes", "general"),
    ],
)
def test_decomposer_picks_plan(instruction, plan):
    assert InstructionDecomposer(instruction).plan_name() == plan


@pytest.mark.parametrize("plan", sorted(PLAN_TEMPLATES))
def test_every_plan_template_is_a_valid_graph(plan):
    tasks = [
        TaskStep(id=step_id, agent_type=agent, dependencies=deps)
        for step_id, _name, _description, agent, deps in PLAN_TEMPLATES[plan]
    ]
    validate_graph(tasks)


def test_decomposer_produces_pending_tasks():
    tasks = InstructionDecomposer("create an api backend").produce()

    assert [task.id for task in tasks] == ["design", "database", "implement", "test", "security", "docs"]
    assert all(task.status is TaskStatus.PENDING for task in tasks)
    assert plan_waves(tasks) == [["design"], ["database"], ["implement"], ["test", "docs"], ["security"]]


def test_decomposer_returns_fresh_tasks_each_time():
    decomposer = InstructionDecomposer("whatever")
    first = decomposer.produce()
    first[0].start()
    assert decomposer.produce()[0].status is TaskStatus.PENDING


def test_tasks_from_config():
    config = ProjectConfig.from_yaml(
        """
tasks:
  - id: a
    agent: Plan
  - id: b
    agent: CodeGenAgent
    depends_on: [a]
"""
    )
    tasks = tasks_from_config(config)
    assert [(task.id, task.agent_type, task.dependencies) for task in tasks] == [
        ("a", "Plan", ()),
        ("b", "CodeGenAgent", ("a",)),
    ]
