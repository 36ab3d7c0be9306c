from __future__ import annotations

import re
from pathlib import Path

import pytest

pytest.importorskip("typer")

from typer.testing import CliRunner

from nestprof import __version__
from nestprof.cli import app
from nestprof.constants import (
    EXIT_GENERAL_ERROR,
    EXIT_INVALID_INPUT,
    EXIT_IO_ERROR,
    EXIT_SUCCESS,
)
from nestprof.profiler import default_profiler

NESTED_SCRIPT = """\
import nestprof

nestprof.enter("load")
nestprof.release()
nestprof.enter("compute")
nestprof.enter("inner")
nestprof.release()
nestprof.release()
"""


def _write_script(tmp_path: Path, body: str, name: str = "job.py") -> Path:
    script = tmp_path / name
    script.write_text(body, encoding="utf-8")
    return script


def _tree_lines(output: str) -> list[str]:
    return [line for line in output.splitlines() if re.search(r"\[(UNRELEASED|[\d,]+ms)", line)]


def test_cli_run_prints_tree(tmp_path):
    script = _write_script(tmp_path, NESTED_SCRIPT)

    result = CliRunner().invoke(app, ["run", str(script)])

    assert result.exit_code == EXIT_SUCCESS
    lines = _tree_lines(result.stdout)
    assert len(lines) == 4
    assert lines[0].startswith("0 [") and lines[0].endswith(" - job.py")
    assert lines[1].startswith("+---") and lines[1].endswith(" - load")
    assert lines[2].startswith("`---") and lines[2].endswith(" - compute")
    assert lines[3].startswith("    `---") and lines[3].endswith(" - inner")


def test_cli_run_label_and_prefix(tmp_path):
    script = _write_script(tmp_path, NESTED_SCRIPT)

    result = CliRunner().invoke(app, ["run", str(script), "--label", "batch", "--prefix", ">> "])

    assert result.exit_code == EXIT_SUCCESS
    lines = _tree_lines(result.stdout)
    assert lines[0].startswith(">> 0 [") and lines[0].endswith(" - batch")
    assert all(line.startswith(">> ") for line in lines)


def test_cli_quiet_prints_total_duration(tmp_path):
    script = _write_script(tmp_path, NESTED_SCRIPT)

    result = CliRunner().invoke(app, ["run", str(script), "--quiet"])

    assert result.exit_code == EXIT_SUCCESS
    assert re.fullmatch(r"\d+", result.stdout.strip())


def test_cli_passes_arguments_to_script(tmp_path):
    script = _write_script(
        tmp_path,
        "import pathlib, sys\npathlib.Path(sys.argv[1]).write_text(' '.join(sys.argv[2:]))\n",
    )
    out_path = tmp_path / "argv.txt"

    result = CliRunner().invoke(app, ["run", str(script), "--", str(out_path), "a", "b"])

    assert result.exit_code == EXIT_SUCCESS
    assert out_path.read_text() == "a b"


def test_cli_missing_script_is_io_error(tmp_path):
    result = CliRunner().invoke(app, ["run", str(tmp_path / "missing.py")])

    assert result.exit_code == EXIT_IO_ERROR
    assert "Script not found" in result.output
    assert _tree_lines(result.stdout) == []


def test_cli_directory_is_io_error(tmp_path):
    result = CliRunner().invoke(app, ["run", str(tmp_path)])

    assert result.exit_code == EXIT_IO_ERROR
    assert "not a file" in result.output


def test_cli_propagates_script_exit_code(tmp_path):
    script = _write_script(tmp_path, "import sys\nimport nestprof\nnestprof.enter('step')\nsys.exit(4)\n")

    result = CliRunner().invoke(app, ["run", str(script)])

    assert result.exit_code == 4
    lines = _tree_lines(result.stdout)
    assert lines[0].endswith(" - job.py")
    assert lines[1].startswith("`---")
    assert lines[1].endswith("[UNRELEASED] - step")
    assert "Script exited with code 4" in result.output


def test_cli_script_exception_still_dumps(tmp_path):
    script = _write_script(tmp_path, "import nestprof\nnestprof.enter('step')\nraise RuntimeError('boom')\n")

    result = CliRunner().invoke(app, ["run", str(script)])

    assert result.exit_code == EXIT_GENERAL_ERROR
    assert "RuntimeError: boom" in result.output
    assert any(line.endswith(" - job.py") for line in _tree_lines(result.stdout))


def test_cli_strict_mode_fails_on_extra_release(tmp_path):
    script = _write_script(tmp_path, "import nestprof\nnestprof.release()\nnestprof.release()\n")

    lenient = CliRunner().invoke(app, ["run", str(script)])
    strict = CliRunner().invoke(app, ["run", str(script), "--strict"])

    assert lenient.exit_code == EXIT_SUCCESS
    assert strict.exit_code == EXIT_INVALID_INPUT
    assert "ProfilerStateError" in strict.output


def test_cli_invalid_env_option(tmp_path, monkeypatch):
    script = _write_script(tmp_path, NESTED_SCRIPT)
    monkeypatch.setenv("NESTPROF_THRESHOLD_MS", "soon")

    result = CliRunner().invoke(app, ["run", str(script)])

    assert result.exit_code == EXIT_INVALID_INPUT
    assert "Invalid options" in result.output


def test_cli_config_file(tmp_path):
    script = _write_script(tmp_path, NESTED_SCRIPT)
    config_path = tmp_path / "nestprof.yml"
    config_path.write_text("label: from-config\n", encoding="utf-8")

    result = CliRunner().invoke(app, ["run", str(script), "--config", str(config_path)])

    assert result.exit_code == EXIT_SUCCESS
    assert _tree_lines(result.stdout)[0].endswith(" - from-config")


def test_cli_restores_default_profiler(tmp_path):
    script = _write_script(tmp_path, NESTED_SCRIPT)
    saved = default_profiler.config

    CliRunner().invoke(app, ["run", str(script), "--strict", "--threshold-ms", "5"])

    assert default_profiler.config is saved
    assert default_profiler.get_entry() is None


def test_cli_version():
    result = CliRunner().invoke(app, ["version"])

    assert result.exit_code == EXIT_SUCCESS
    assert result.stdout.strip() == __version__
