from typer.testing import CliRunner

from taskwave.cli import app

runner = CliRunner()

CONFIG = """
name: cli-demo
settings:
  simulated_delay_scale: 0
tasks:
  - id: plan
    agent: Plan
  - id: build
    agent: CodeGenAgent
    depends_on: [plan]
  - id: docs
    agent: DocumentationAgent
    depends_on: [plan]
"""


def _write(tmp_path, text, name="project.yaml"):
    path = tmp_path / name
    path.write_text(text)
    return path


def test_run_succeeds_and_writes_report(tmp_path):
    config = _write(tmp_path, CONFIG)
    report = tmp_path / "report.md"

    result = runner.invoke(app, ["run", str(config), "--report", str(report)])

    assert result.exit_code == 0, result.output
    assert "Run succeeded" in result.output
    text = report.read_text()
    assert text.startswith("# cli-demo")
    assert "- **Succeeded:** 3" in text


def test_run_exits_nonzero_when_a_task_fails(tmp_path):
    config = _write(
        tmp_path,
        """
tasks:
  - id: deploy
    agent: DeploymentAgent
  - id: announce
    agent: DocumentationAgent
    depends_on: [deploy]
""",
    )

    result = runner.invoke(app, ["run", str(config), "--timeout", "0.05"])

    assert result.exit_code == 1
    assert "Run failed" in result.output


def test_run_rejects_cycles(tmp_path):
    config = _write(
        tmp_path,
        """
settings: {simulated_delay_scale: 0}
tasks:
  - {id: x, agent: Plan, depends_on: [y]}
  - {id: y, agent: Plan, depends_on: [x]}
""",
    )

    result = runner.invoke(app, ["run", str(config)])

    assert result.exit_code == 2
    assert "Configuration error" in result.output


def test_run_without_validation_reports_stall(tmp_path):
    config = _write(
        tmp_path,
        """
settings: {simulated_delay_scale: 0}
tasks:
  - {id: ok, agent: Plan}
  - {id: orphan, agent: Plan, depends_on: [missing]}
""",
    )

    result = runner.invoke(app, ["run", str(config), "--no-validate"])

    assert result.exit_code == 1
    assert "Run stalled" in result.output


def test_plan_prints_waves(tmp_path):
    config = _write(tmp_path, CONFIG)

    result = runner.invoke(app, ["plan", str(config)])

    assert result.exit_code == 0, result.output
    assert "Execution Plan" in result.output
    assert "cli-demo" in result.output


def test_plan_reports_missing_file(tmp_path):
    result = runner.invoke(app, ["plan", str(tmp_path / "nope.yaml")])
    assert result.exit_code == 2


def test_decompose_shows_plan():
    result = runner.invoke(app, ["decompose", "automate the release workflow"])

    assert result.exit_code == 0, result.output
    assert "automation" in result.output


def test_decompose_can_run_plan():
    result = runner.invoke(app, ["decompose", "tidy the notes", "--run", "--delay-scale", "0"])

    assert result.exit_code == 0, result.output
    assert "Run succeeded" in result.output


def test_run_honours_validate_setting_from_config(tmp_path):
    config = _write(
        tmp_path,
        """
settings: {simulated_delay_scale: 0, validate: false}
tasks:
  - {id: ok, agent: Plan}
  - {id: z, agent: Plan, depends_on: [missing]}
""",
    )

    result = runner.invoke(app, ["run", str(config)])

    assert result.exit_code == 1, result.output
    assert "Run stalled" in result.output

    result = runner.invoke(app, ["run", str(config), "--validate"])

    assert result.exit_code == 2
    assert "Configuration error" in result.output


def test_run_reports_bad_settings_as_configuration_error(tmp_path):
    config = _write(
        tmp_path,
        """
settings: {task_timeout: soon}
tasks:
  - {id: a, agent: Plan}
""",
    )

    result = runner.invoke(app, ["run", str(config)])

    assert result.exit_code == 2
    assert "task_timeout must be a number" in result.output
