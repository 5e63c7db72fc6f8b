"""
filecopy CLI

Commands:
- run: Prepare directories and run a file-copy pipeline
- setup: Prepare the input and output directories only
- validate: Validate a pipeline configuration resource
- configs: List bundled configuration resources
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import time
from datetime import datetime, timezone

import typer
import logging

from filecopy.config import list_bundled_configs
from filecopy.directories import DEFAULT_INPUT_DIR, DEFAULT_OUTPUT_DIR, setup_directories
from filecopy.errors import ConfigurationResolutionError, FileCopyError
from filecopy.launcher import DEFAULT_RESOURCE, bootstrap, launch

app = typer.Typer(add_completion=False, help="File-copy pipeline demo")

WAIT_STEP_SECONDS = 0.5


class JsonFormatter(logging.Formatter):
    """Simple JSON formatter for structured logs."""
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "msg": record.getMessage(),
            "logger": record.name,
        }
        # Include any custom attributes passed via `extra=`.
        reserved = {
            "name","msg","args","levelname","levelno","pathname","filename","module",
            "exc_info","exc_text","stack_info","lineno","funcName","created","msecs",
            "relativeCreated","thread","threadName","processName","process","taskName",
        }
        for k, v in record.__dict__.items():
            if k in reserved or k.startswith("_"):
                continue
            try:
                json.dumps(v)
                payload[k] = v
            except TypeError:
                payload[k] = repr(v)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def setup_logging(level: str) -> logging.Logger:
    logger = logging.getLogger("filecopy")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logger.handlers[:] = [handler]
    logger.propagate = False
    return logger


LOGGER = logging.getLogger("filecopy")


def _report_startup_failure(e: FileCopyError) -> None:
    typer.echo(f"❌ Startup failed: {e}", err=True)
    if isinstance(e, ConfigurationResolutionError):
        for i, issue in enumerate(e.issues, start=1):
            typer.echo(f"  {i:>3}. {issue.path}: {issue.message}", err=True)


@app.command("run")
def run_cmd(
    resource: str = typer.Argument(
        DEFAULT_RESOURCE, help="Configuration resource: bundled name, JSON path or URL"
    ),
    input_dir: Path = typer.Option(
        DEFAULT_INPUT_DIR, "--input-dir", help="Directory to prepare and copy from"
    ),
    output_dir: Path = typer.Option(
        DEFAULT_OUTPUT_DIR, "--output-dir", help="Directory to prepare and copy to"
    ),
    config_dir: list[Path] | None = typer.Option(
        None, "--config-dir", help="Extra directory to search for configuration resources"
    ),
    once: bool = typer.Option(
        False, "--once", help="Scan the input directory once instead of polling"
    ),
    duration: float | None = typer.Option(
        None, "--duration", help="Stop a polling pipeline after this many seconds"
    ),
    log_level: str = typer.Option(
        "INFO", "--log-level", help="Logging verbosity (DEBUG, INFO, WARNING, ERROR)"
    ),
) -> None:
    """
    Prepare the input/output directories and run a file-copy pipeline.

    A polling pipeline runs until interrupted (Ctrl-C) or until --duration
    expires; --once copies what is present and exits.

    Example:
        filecopy run filecopy-text --input-dir in/ --output-dir out/ --once
    """
    global LOGGER
    LOGGER = setup_logging(log_level)

    try:
        handle = launch(
            resource,
            input_dir=input_dir,
            output_dir=output_dir,
            search_paths=config_dir or (),
            trigger="once" if once else None,
        )
    except FileCopyError as e:
        _report_startup_failure(e)
        raise typer.Exit(code=1)

    config = handle.config
    typer.echo(f"Running pipeline: {config.name} ({config.transfer.mode}, {config.poller.trigger})")
    typer.echo(f"  {config.source.directory} -> {config.target.directory}")

    deadline = time.monotonic() + duration if duration is not None else None
    try:
        while not handle.wait(timeout=WAIT_STEP_SECONDS):
            if deadline is not None and time.monotonic() >= deadline:
                break
    except KeyboardInterrupt:
        typer.echo("\nStopping pipeline...")
    finally:
        handle.stop()

    report = handle.report
    typer.echo(f"\n{'='*60}")
    typer.echo("📊 Summary:")
    typer.echo(f"  Polls: {report.polls}")
    typer.echo(f"  Files copied: {report.copied}")
    typer.echo(f"  Files skipped: {report.skipped}")
    typer.echo(f"  Files failed: {report.failed}")
    typer.echo(f"  Bytes written: {report.bytes_written}")

    if handle.error is not None:
        typer.echo(f"❌ Pipeline stopped on error: {handle.error}", err=True)
        raise typer.Exit(code=1)

    if report.failed:
        raise typer.Exit(code=2)


@app.command("setup")
def setup_cmd(
    input_dir: Path = typer.Option(DEFAULT_INPUT_DIR, "--input-dir", help="Input directory"),
    output_dir: Path = typer.Option(DEFAULT_OUTPUT_DIR, "--output-dir", help="Output directory"),
) -> None:
    """Create the input and output directories if they do not exist."""
    try:
        layout = setup_directories(input_dir, output_dir)
    except FileCopyError as e:
        _report_startup_failure(e)
        raise typer.Exit(code=1)

    typer.echo(f"✅ Input directory: {layout.input_dir}")
    typer.echo(f"✅ Output directory: {layout.output_dir}")


@app.command("validate")
def validate_cmd(
    resource: str = typer.Argument(..., help="Configuration resource: bundled name, JSON path or URL"),
    input_dir: Path = typer.Option(DEFAULT_INPUT_DIR, "--input-dir", help="Value of ${input_dir}"),
    output_dir: Path = typer.Option(DEFAULT_OUTPUT_DIR, "--output-dir", help="Value of ${output_dir}"),
    config_dir: list[Path] | None = typer.Option(
        None, "--config-dir", help="Extra directory to search for configuration resources"
    ),
) -> None:
    """Validate a pipeline configuration resource without running it."""
    try:
        config = bootstrap(
            resource,
            input_dir=input_dir,
            output_dir=output_dir,
            search_paths=config_dir or (),
        )
    except ConfigurationResolutionError as e:
        if e.issues:
            typer.echo(f"❌ Validation failed: {len(e.issues)} issue(s)\n")
            for i, issue in enumerate(e.issues, start=1):
                typer.echo(f"  {i:>3}. {issue.path}: {issue.message}")
            raise typer.Exit(code=2)
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"✅ Validation passed: {config.name}")
    typer.echo(f"  source: {config.source.directory} ({config.source.pattern})")
    typer.echo(f"  transfer: {config.transfer.mode}, transform={config.transfer.transform}")
    typer.echo(f"  target: {config.target.directory} (exists={config.target.exists})")
    typer.echo(f"  poller: {config.poller.trigger}, every {config.poller.interval_seconds}s")


@app.command("configs")
def configs_cmd() -> None:
    """List configuration resources bundled with filecopy."""
    for name in list_bundled_configs():
        typer.echo(name)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
