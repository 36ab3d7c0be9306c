"""CLI entrypoint for nestprof using Typer."""

import os
import runpy
import sys
from pathlib import Path

import typer
from rich.console import Console

from nestprof import __version__
from nestprof.cli_config import CLIConfig
from nestprof.constants import EXIT_SUCCESS
from nestprof.context import AppContext, map_exception_to_exit_code
from nestprof.exceptions import ScriptLoadError
from nestprof.logging import configure_logging_json, get_logger
from nestprof.profiler import default_profiler

app = typer.Typer(
    name="nestprof",
    help="nestprof - run a Python script and print its nested timing tree",
)
console = Console()
logger = get_logger(__name__)


def _emit_error(message: str) -> None:
    typer.secho(message, fg="red", err=True)


def _exit_code_of(exc: SystemExit) -> int:
    if exc.code is None:
        return EXIT_SUCCESS
    if isinstance(exc.code, int):
        return exc.code
    _emit_error(str(exc.code))
    return 1


def _check_script(script: Path) -> None:
    if not script.exists():
        raise ScriptLoadError(f"Script not found: {script}")
    if not script.is_file():
        raise ScriptLoadError(f"Script is not a file: {script}")


def _run_script(script: Path, args: list[str]) -> int:
    saved_argv = sys.argv
    saved_path = list(sys.path)
    sys.argv = [str(script), *args]
    sys.path.insert(0, str(script.resolve().parent))
    try:
        runpy.run_path(str(script), run_name="__main__")
    except SystemExit as exc:
        return _exit_code_of(exc)
    finally:
        sys.argv = saved_argv
        sys.path[:] = saved_path
    return EXIT_SUCCESS


@app.command()
def run(
    script: str = typer.Argument(..., help="Python script to profile"),
    args: list[str] | None = typer.Argument(None, help="Arguments passed to the script (after --)"),
    label: str | None = typer.Option(None, "--label", "-l", help="Root entry label"),
    prefix: str | None = typer.Option(None, "--prefix", help="Prefix for every dump line"),
    strict: bool | None = typer.Option(
        None, "--strict/--lenient", help="Fail on unmatched enter/release calls"
    ),
    threshold_ms: int | None = typer.Option(
        None, "--threshold-ms", help="Log a warning when the run takes at least this long"
    ),
    config: str | None = typer.Option(None, "--config", "-c", help="YAML config file"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Print only the total duration (ms)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """Run SCRIPT inside a profiling session and print the timing tree."""
    try:
        cfg = CLIConfig.from_sources(
            cli_args={
                "script": script,
                "args": args or [],
                "label": label,
                "prefix": prefix,
                "strict": strict,
                "threshold_ms": threshold_ms,
                "quiet": quiet or None,
                "verbose": verbose or None,
            },
            config_path=config,
            environ=os.environ,
        )
        profiler_config = cfg.to_profiler_config()
    except Exception as exc:
        _emit_error(f"Invalid options: {exc}")
        raise typer.Exit(code=map_exception_to_exit_code(exc)) from exc

    ctx = AppContext.create(quiet=cfg.quiet, verbose=cfg.verbose, config=profiler_config)
    configure_logging_json(level=cfg.log_level or ctx.log_level)

    try:
        _check_script(cfg.script)
    except ScriptLoadError as exc:
        _emit_error(str(exc))
        raise typer.Exit(code=map_exception_to_exit_code(exc)) from exc

    saved_config = default_profiler.config
    default_profiler.config = ctx.config
    try:
        root = default_profiler.start(cfg.root_label)
        logger.info("profile_run_started", script=str(cfg.script), args=cfg.args)
        try:
            exit_code = _run_script(cfg.script, cfg.args)
        except Exception as exc:
            logger.error("profile_script_failed", script=str(cfg.script), exc_info=True)
            _emit_error(f"Script raised {type(exc).__name__}: {exc}")
            exit_code = map_exception_to_exit_code(exc)
        finally:
            if root is not None:
                default_profiler.release_entry(root)

        duration = default_profiler.get_duration()
        if ctx.mode == "quiet":
            typer.echo(str(duration))
        else:
            if ctx.verbose:
                console.rule(f"[bold]Profile: {cfg.root_label}[/bold]", style="white")
            console.print(
                default_profiler.dump(cfg.prefix), markup=False, highlight=False, soft_wrap=True
            )
        logger.info("profile_run_finished", duration_ms=duration, exit_code=exit_code)
    finally:
        default_profiler.reset()
        default_profiler.config = saved_config

    if exit_code != EXIT_SUCCESS:
        _emit_error(f"Script exited with code {exit_code}")
    raise typer.Exit(code=exit_code)


@app.command()
def version():
    """Print the nestprof version."""
    typer.echo(__version__)


if __name__ == "__main__":
    app()
