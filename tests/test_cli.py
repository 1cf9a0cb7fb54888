from __future__ import annotations

from click.testing import CliRunner

from stepper.cli import cli


DOC = """
version: 1
globals: {name: world}
steps:
  - name: greet
    shell: {command: "echo {{ name }}"}
"""


def _write(tmp_path, text=DOC, name="steps.yaml"):
    path = tmp_path / name
    path.write_text(text)
    return path


def test_run(tmp_path):
    result = CliRunner().invoke(cli, ["run", str(_write(tmp_path))])
    assert result.exit_code == 0, result.output
    assert "-> echo world" in result.output
    assert "[shell][out] world" in result.output
    assert "STATUS: success" in result.output


def test_dry_run(tmp_path):
    result = CliRunner().invoke(cli, ["run", "--dry-run", str(_write(tmp_path))])
    assert result.exit_code == 0, result.output
    assert "RUN STARTED (dry-run)" in result.output
    assert "-> echo world" in result.output
    assert "[shell][out]" not in result.output


def test_dry_run_from_environment(tmp_path):
    result = CliRunner().invoke(cli, ["run", str(_write(tmp_path))], env={"STEPPER_DRY_RUN": "1"})
    assert result.exit_code == 0, result.output
    assert "[shell][out]" not in result.output


def test_failure_exit_code(tmp_path):
    doc = "version: 1\nsteps:\n  - exec: {cmd: \"false\"}\n  - shell: {command: \"echo later\"}\n"
    result = CliRunner().invoke(cli, ["run", str(_write(tmp_path, doc))])
    assert result.exit_code == 1
    assert "STEP FAILED: 1" in result.output
    assert "later" not in result.output


def test_default_document_discovery(tmp_path, monkeypatch):
    _write(tmp_path, name="stepper.yaml")
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["run", "--dry-run"])
    assert result.exit_code == 0, result.output
    assert "Document: stepper.yaml" in result.output


def test_missing_document(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = CliRunner().invoke(cli, ["run"])
    assert result.exit_code == 1
    assert "No document found" in result.output


def test_invalid_document(tmp_path):
    result = CliRunner().invoke(cli, ["run", str(_write(tmp_path, "version: one\n"))])
    assert result.exit_code == 1
    assert "Failed to load document" in result.output


def test_validate(tmp_path):
    result = CliRunner().invoke(cli, ["validate", str(_write(tmp_path))])
    assert result.exit_code == 0, result.output
    assert "[1] shell greet" in result.output


def test_validate_reports_ambiguous_steps(tmp_path):
    doc = "version: 1\nsteps:\n  - shell: {command: a}\n    exec: {cmd: b}\n  - name: empty\n"
    result = CliRunner().invoke(cli, ["validate", str(_write(tmp_path, doc))])
    assert result.exit_code == 1
    assert "Step 1 is invalid" in result.output
    assert "found: shell, exec" in result.output
    assert "Step 2 is invalid" in result.output
    assert "found: none" in result.output


def test_verbose_flag(tmp_path):
    doc = "version: 1\nsteps:\n  - retry: 2\n    shell: {command: \"true\"}\n"
    result = CliRunner().invoke(cli, ["--verbose", "run", str(_write(tmp_path, doc))])
    assert result.exit_code == 0, result.output
    assert "[DEBUG]" in result.output
