"""Common CLI utilities: JSON output, stable exit codes, bootstrap."""

from __future__ import annotations

import json
import traceback
import uuid
from datetime import datetime
from enum import IntEnum
from typing import Any

import click

from ..adapters.llm import LLMError
from ..config.settings import ConfigError, Settings, load_settings
from ..core.time import ensure_timezone
from ..diary.exchange import ExchangeError
from ..diary.store import EntryNotFoundError, JsonEntryStore, StoreError
from ..observability import configure_loguru, get_logger
from ..trends.periods import TrendValidationError

__all__ = [
    "CLIContext",
    "ExitCode",
    "bootstrap",
    "exit_code_for",
    "handle_cli_error",
    "parse_moment",
]

log = get_logger("cli")


class ExitCode(IntEnum):
    """Stable exit codes for CLI commands."""

    SUCCESS = 0
    VALIDATION_ERROR = 2  # Bad arguments or input data
    NOT_FOUND = 3  # Unknown entry id
    IO_ERROR = 5  # Diary file or export file problems
    CONFIG_ERROR = 6  # Missing or invalid configuration
    UNKNOWN_ERROR = 7
    SERVICE_ERROR = 8  # Summary service failures


class CLIContext:
    """Context for CLI execution with JSON output and trace ID."""

    def __init__(self, json_output: bool = False, verbose: bool = False, trace_id: str | None = None):
        self.json_output = json_output
        self.verbose = verbose
        self.trace_id = trace_id or f"trace-{uuid.uuid4().hex[:12]}"

    def output(
        self, data: Any, status: str = "success", error: str | None = None, meta: dict[str, Any] | None = None
    ) -> None:
        """Output result as JSON envelope or human-readable text."""
        if self.json_output:
            result: dict[str, Any] = {"status": status, "trace_id": self.trace_id}

            if error:
                result["error"] = error
            else:
                result["data"] = data

            if meta:
                result["meta"] = meta

            click.echo(json.dumps(result, ensure_ascii=False, indent=2, default=str))
        elif status == "error":
            click.echo(f"Error: {error}", err=True)
        elif isinstance(data, dict):
            for key, value in data.items():
                click.echo(f"{key}: {value}")
        elif isinstance(data, list):
            for item in data:
                click.echo(item)
        else:
            click.echo(data)


def exit_code_for(exc: Exception) -> ExitCode:
    if isinstance(exc, ConfigError):
        return ExitCode.CONFIG_ERROR
    if isinstance(exc, EntryNotFoundError):
        return ExitCode.NOT_FOUND
    if isinstance(exc, (StoreError, ExchangeError, OSError)):
        return ExitCode.IO_ERROR
    if isinstance(exc, LLMError):
        return ExitCode.SERVICE_ERROR
    if isinstance(exc, (TrendValidationError, ValueError)):
        return ExitCode.VALIDATION_ERROR
    return ExitCode.UNKNOWN_ERROR


def handle_cli_error(ctx: CLIContext, exc: Exception, cmd: str) -> int:
    """Report an error and return the matching exit code."""
    exit_code = exit_code_for(exc)
    error_msg = str(exc) if not isinstance(exc, EntryNotFoundError) else f"Entry not found: {exc.args[0]}"

    log.bind(trace_id=ctx.trace_id).error(
        f"{cmd} failed",
        error=error_msg,
        error_type=type(exc).__name__,
        exit_code=int(exit_code),
    )
    ctx.output(None, status="error", error=error_msg, meta={"exit_code": int(exit_code)})

    if ctx.verbose and not ctx.json_output:
        click.echo("\nTraceback:", err=True)
        click.echo(traceback.format_exc(), err=True)

    return int(exit_code)


def bootstrap(verbose: bool = False) -> tuple[Settings, JsonEntryStore]:
    """Load settings, configure logging and open the diary store.

    Raises
    ------
    ConfigError
        If settings are missing or invalid
    StoreError
        If the diary file cannot be read
    """
    settings = load_settings()
    configure_loguru(
        log_dir=settings.log_dir,
        level=settings.log_level,
        enable_console=verbose,
    )
    return settings, JsonEntryStore(settings.data_path)


def parse_moment(value: str | None, tz: str | None = None) -> datetime | None:
    """Parse an ISO-8601 date or datetime; naive values are in the diary timezone.

    Raises
    ------
    ValueError
        If the value is not ISO-8601
    """
    if value is None:
        return None
    try:
        moment = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError as exc:
        raise ValueError(f"Invalid date/time {value!r}: use ISO-8601, e.g. 2025-03-07 or 2025-03-07T14:30") from exc
    return ensure_timezone(moment, tz)
