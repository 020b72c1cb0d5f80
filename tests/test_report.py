from datetime import datetime

from taskwave.agents.coordinator import Coordinator
from taskwave.agents.registry import ExecutorRegistry
from taskwave.report import render_markdown_report


def test_report_lists_steps_and_totals(failing_for, diamond):
    registry = ExecutorRegistry(fallback=None)
    registry.register_function("work", failing_for("c"))
    outcome = Coordinator(registry).run(diamond)

    report = render_markdown_report(
        outcome,
        "Nightly build",
        instruction="build everything",
        generated_at=datetime(2026, 1, 2, 3, 4, 5),
    )

    assert report.startswith("# Nightly build\n")
    assert "## Instruction\n\nbuild everything" in report
    assert "### 3. C\n- **Status:** failed\n- **Agent:** work" in report
    assert "- **Error:** boom in c" in report
    assert "- **Error:** Dependency c failed" in report
    assert "- **Depends on:** b, c" in report
    assert "- **Run status:** failed" in report
    assert "- **Succeeded:** 2" in report
    assert "- **Failed:** 2" in report
    assert "- **Never started:** 0" in report
    assert "*Generated by taskwave at 2026-01-02 03:04:05*" in report
