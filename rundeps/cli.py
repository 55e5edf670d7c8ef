"""Command-line interface for rundeps."""

from __future__ import annotations

import logging
import shlex
import subprocess
import time
from pathlib import Path
from typing import Annotated

import typer

from .config import RunDepsConfig, find_config_file, load_config
from .dependency import ConfigurationError
from .hooks import Registrar
from .report import RED, RESET, colorize_output, set_colorize_output, settings_from_env
from .watcher import FileWatcher

logger = logging.getLogger(__name__)

app = typer.Typer(add_completion=False, no_args_is_help=True, help="Gate test runs on shell-verified dependencies")

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", exists=True, dir_okay=False, readable=True, resolve_path=True, help="Configuration file (rundeps.toml or pyproject.toml)"),
]
RootOption = Annotated[
    Path,
    typer.Option("--root", exists=True, file_okay=False, resolve_path=True, help="Directory whose files are watched for changes"),
]
IntervalOption = Annotated[float | None, typer.Option("--poll-interval", min=0.01, help="Seconds between change checks")]
NoColorOption = Annotated[bool, typer.Option("--no-color", help="Print reports without ANSI colors")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Log every check to stderr")]


def _configure_logging(verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _fail(message: str, colorize: bool) -> typer.Exit:
    if colorize:
        message = f"{RED}{message}{RESET}"
    typer.echo(message, err=True, color=colorize)
    return typer.Exit(code=2)


def _load(config_path: Path | None, root: Path) -> RunDepsConfig:
    path = config_path or find_config_file(root)
    if path is None:
        raise ConfigurationError(f"No rundeps.toml or [tool.rundeps] table found in {root}")
    config = load_config(path)
    if not config.dependencies:
        raise ConfigurationError(f"{path}: no dependencies declared")
    logger.debug("Loaded %d dependency declaration(s) from %s", len(config.dependencies), path)
    return config


def _prepare(
    config_path: Path | None,
    root: Path,
    poll_interval: float | None,
    no_color: bool,
    verbose: bool,
) -> tuple[Registrar, FileWatcher]:
    _configure_logging(verbose)
    colorize = settings_from_env().colorize and not no_color
    try:
        config = _load(config_path, root)
    except ConfigurationError as exc:
        raise _fail(str(exc), colorize) from exc
    if config.colorize is not None and not no_color:
        colorize = config.colorize
    set_colorize_output(colorize)

    watcher = FileWatcher(
        root,
        patterns=config.watch,
        exclude=config.exclude,
        poll_interval=poll_interval or config.poll_interval,
    )
    if not watcher.find_files():
        raise _fail(f"No watched files found under {root}; check --root and the watch patterns", colorize)
    registrar = Registrar()
    for spec in config.dependencies:
        _ = registrar.add(spec)
    registrar.initialize(watcher)
    return registrar, watcher


def _shell_command(args: list[str]) -> str:
    return args[0] if len(args) == 1 else shlex.join(args)


@app.command()
def check(
    config: ConfigOption = None,
    root: RootOption = Path("."),
    poll_interval: IntervalOption = None,
    no_color: NoColorOption = False,
    verbose: VerboseOption = False,
) -> None:
    """Block until every configured dependency is satisfied, then exit."""
    registrar, _ = _prepare(config, root, poll_interval, no_color, verbose)
    try:
        registrar.before_run()
    except ConfigurationError as exc:
        raise _fail(str(exc), colorize_output()) from exc


@app.command()
def watch(
    test_command: Annotated[list[str], typer.Argument(help="Test command to run once dependencies are satisfied")],
    config: ConfigOption = None,
    root: RootOption = Path("."),
    poll_interval: IntervalOption = None,
    no_color: NoColorOption = False,
    verbose: VerboseOption = False,
) -> None:
    """
    Check dependencies, run the tests, and repeat whenever files change.

    Files the test run itself writes must be covered by the configured
    exclude list, or every run retriggers the next one.

    Press Ctrl-C once to force every dependency to be rechecked and restart the
    run; press it again before the run completes to quit.
    """
    registrar, watcher = _prepare(config, root, poll_interval, no_color, verbose)
    command = _shell_command(test_command)
    interrupted = False
    while True:
        try:
            registrar.before_run()
            started = time.time()
            typer.echo(f"Running: {command}")
            completed = subprocess.run(command, shell=True)
            logger.info("Test command exited with status %s", completed.returncode)
            interrupted = False
            _ = watcher.wait_for_changes(started)
        except KeyboardInterrupt:
            if interrupted:
                typer.echo("\nStopped.")
                raise typer.Exit(code=130)
            interrupted = True
            registrar.interrupt()
            typer.echo("\nInterrupted: rechecking all dependencies (Ctrl-C again to quit)")
        except ConfigurationError as exc:
            raise _fail(str(exc), colorize_output()) from exc


def run() -> None:
    app(prog_name="rundeps")
