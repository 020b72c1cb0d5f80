"""Markdown summary of a finished run."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from .agents.coordinator import RunOutcome


def render_markdown_report(
    outcome: RunOutcome,
    title: str,
    *,
    instruction: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> str:
    generated_at = generated_at or datetime.now()
    lines: List[str] = [f"# {title}", ""]
    if instruction:
        lines += ["## Instruction", "", instruction, ""]

    lines += ["## Steps", ""]
    for position, task in enumerate(outcome.tasks, start=1):
        lines.append(f"### {position}. {task.name}")
        lines.append(f"- **Status:** {task.status.value}")
        lines.append(f"- **Agent:** {task.agent_type}")
        if task.description:
            lines.append(f"- **Description:** {task.description}")
        if task.dependencies:
            lines.append(f"- **Depends on:** {', '.join(task.dependencies)}")
        if task.error:
            lines.append(f"- **Error:** {task.error}")
        lines.append("")

    lines += [
        "## Summary",
        "",
        f"- **Run status:** {outcome.status.value}",
        f"- **Total steps:** {len(outcome.tasks)}",
        f"- **Succeeded:** {len(outcome.completed)}",
        f"- **Failed:** {len(outcome.failed)}",
        f"- **Never started:** {len(outcome.pending)}",
        f"- **Waves:** {len(outcome.waves)}",
        f"- **Duration:** {outcome.duration:.2f}s",
        "",
        "---",
        f"*Generated by taskwave at {generated_at:%Y-%m-%d %H:%M:%S}*",
        "",
    ]
    return "\n".join(lines)
