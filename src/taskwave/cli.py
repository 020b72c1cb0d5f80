"""Command line interface for taskwave."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .agents.builtin import register_builtin_executors
from .agents.coordinator import Coordinator, RunOutcome
from .agents.orchestrator import Orchestrator
from .agents.registry import ExecutorRegistry
from .config import ProjectConfig
from .errors import ConfigError
from .notify.sinks import ConsoleNotifier
from .report import render_markdown_report
from .tasks.base import TaskStatus, TaskStep
from .tasks.graph import plan_waves, validate_graph
from .tasks.producer import InstructionDecomposer, tasks_from_config

app = typer.Typer(help="Run dependency-graph task plans in concurrent waves")
console = Console()

STATUS_STYLES = {
    TaskStatus.PENDING: "[yellow]pending",
    TaskStatus.RUNNING: "[cyan]running",
    TaskStatus.COMPLETED: "[green]completed ✅",
    TaskStatus.FAILED: "[red]failed ❌",
}


def _configure_logging(verbose: bool) -> None:
    logger = logging.getLogger("taskwave")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        logger.addHandler(handler)


def _render_plan(tasks: Sequence[TaskStep], title: str = "Execution Plan") -> None:
    wave_of: Dict[str, int] = {}
    for number, wave in enumerate(plan_waves(tasks), start=1):
        for task_id in wave:
            wave_of[task_id] = number
    plan = Table(title=title, show_lines=True)
    plan.add_column("Wave")
    plan.add_column("Task ID")
    plan.add_column("Agent")
    plan.add_column("Depends on")
    plan.add_column("Description")
    for task in tasks:
        plan.add_row(
            str(wave_of.get(task.id, "-")),
            task.id,
            task.agent_type,
            ", ".join(task.dependencies) or "-",
            task.description or task.name,
        )
    console.print(plan)


def _format_value(value: Any, limit: int = 120) -> str:
    try:
        text = json.dumps(value, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        text = repr(value)
    return text if len(text) <= limit else text[: limit - 3] + "..."


def _render_outcome(outcome: RunOutcome) -> None:
    table = Table(title="Task outcomes", show_lines=True)
    table.add_column("Task ID")
    table.add_column("Status")
    table.add_column("Result / error")
    for task in outcome.tasks:
        detail = _format_value(task.result) if task.status is TaskStatus.COMPLETED else (task.error or "")
        table.add_row(task.id, STATUS_STYLES[task.status], detail)
    console.print(table)
    colour = "green" if outcome.ok else "red"
    console.print(
        f"[bold {colour}]Run {outcome.status.value}[/]: "
        f"{len(outcome.completed)}/{len(outcome.tasks)} completed, "
        f"{len(outcome.failed)} failed, {len(outcome.pending)} never started "
        f"in {len(outcome.waves)} wave(s), {outcome.duration:.2f}s"
    )


def _finish(outcome: RunOutcome, title: str, report: Optional[Path], instruction: Optional[str] = None) -> None:
    _render_outcome(outcome)
    if report is not None:
        report.write_text(render_markdown_report(outcome, title, instruction=instruction))
        console.print(f"Report written to {report}")
    if not outcome.ok:
        raise typer.Exit(code=1)


@app.command()
def run(
    config_path: Path = typer.Argument(..., help="Path to YAML configuration"),
    timeout: Optional[float] = typer.Option(None, help="Per-task timeout in seconds"),
    validate: Optional[bool] = typer.Option(
        None, "--validate/--no-validate", help="Reject cycles and unknown ids up front (default: from config)"
    ),
    report: Optional[Path] = typer.Option(None, help="Write a Markdown report to this path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Execute the task graph described in the given config file."""

    _configure_logging(verbose)
    try:
        config = ProjectConfig.from_file(config_path)
        orchestrator = Orchestrator(
            config,
            extra_notifiers=[ConsoleNotifier(console)],
            task_timeout=timeout,
            validate=validate,
        )
        tasks = orchestrator.build_tasks()
        console.print(f"[bold green]Running project[/] {config.name}")
        _render_plan(tasks)
        outcome = orchestrator.run(tasks)
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/] {exc}")
        raise typer.Exit(code=2) from exc
    _finish(outcome, config.name, report)


@app.command()
def plan(config_path: Path = typer.Argument(..., help="Config to inspect")) -> None:
    """Validate a config file and print the waves it would run in."""

    try:
        config = ProjectConfig.from_file(config_path)
        tasks = tasks_from_config(config)
        validate_graph(tasks)
    except ConfigError as exc:
        console.print(f"[bold red]Configuration error:[/] {exc}")
        raise typer.Exit(code=2) from exc
    console.print(f"[bold]Project:[/] {config.name}\n{config.description or ''}")
    _render_plan(tasks)


@app.command()
def decompose(
    instruction: str = typer.Argument(..., help="Free-form instruction to break into tasks"),
    execute: bool = typer.Option(False, "--run", help="Run the plan with the simulated agents"),
    delay_scale: float = typer.Option(1.0, min=0.0, help="Multiplier for simulated agent delays"),
    timeout: Optional[float] = typer.Option(None, help="Per-task timeout in seconds"),
    report: Optional[Path] = typer.Option(None, help="Write a Markdown report to this path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Decompose an instruction into a task plan and optionally run it."""

    _configure_logging(verbose)
    decomposer = InstructionDecomposer(instruction)
    tasks: List[TaskStep] = decomposer.produce()
    _render_plan(tasks, title=f"Plan ({decomposer.plan_name()})")
    if not execute:
        return
    registry = ExecutorRegistry()
    register_builtin_executors(registry, delay_scale=delay_scale)
    coordinator = Coordinator(registry, ConsoleNotifier(console), task_timeout=timeout)
    _finish(coordinator.run(tasks), "taskwave report", report, instruction=instruction)


if __name__ == "__main__":  # pragma: no cover
    app()
