"""Loguru configuration for the diary.

Centralized sinks:
- Colored console output
- Structured JSONL application log
- Timing log for instrumented operations
- One JSONL file per component (trends, diary, summary, cli)
"""

from __future__ import annotations

import functools
import sys
import time
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, TypeVar

from loguru import logger

if TYPE_CHECKING:
    from collections.abc import Generator

__all__ = [
    "COMPONENTS",
    "configure_loguru",
    "get_logger",
    "log_timing",
    "timing_context",
]

F = TypeVar("F", bound=Callable[..., Any])

COMPONENTS = ("trends", "diary", "summary", "cli")


def configure_loguru(
    *,
    log_dir: Path | None = None,
    level: str = "INFO",
    rotation: str = "10 MB",
    retention: str = "10 days",
    compression: str = "zip",
    enable_console: bool = True,
    enable_timing_logs: bool = True,
) -> None:
    """Configure loguru with structured logging and timing support.

    Parameters
    ----------
    log_dir
        Directory for log files (default: logs/)
    level
        Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    rotation
        Log rotation policy (e.g., "10 MB", "1 day")
    retention
        Log retention policy (e.g., "10 days", "1 week")
    compression
        Compression for rotated logs (zip, gz, bz2, xz)
    enable_console
        Enable console output
    enable_timing_logs
        Enable separate timing logs file
    """
    log_dir = log_dir or Path("logs")
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.remove()

    if enable_console:
        logger.add(
            sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[component]}</cyan> | "
            "<level>{message}</level>",
            level=level,
            colorize=True,
            backtrace=True,
            diagnose=False,
            filter=_with_component,
        )

    # Every file sink is JSONL, rotated, and written from a background queue.
    jsonl: dict[str, Any] = {
        "format": "{message}",
        "rotation": rotation,
        "retention": retention,
        "compression": compression,
        "serialize": True,
        "enqueue": True,
    }

    logger.add(log_dir / "pleva.jsonl", level=level, backtrace=True, diagnose=False, **jsonl)

    if enable_timing_logs:
        logger.add(log_dir / "timing.jsonl", level="DEBUG", filter=_is_timing, **jsonl)

    for component in COMPONENTS:
        logger.add(log_dir / f"{component}.jsonl", level=level, filter=_component_filter(component), **jsonl)

    logger.bind(component="cli").debug("Loguru configured", log_dir=str(log_dir), level=level)


def _with_component(record: Any) -> bool:
    record["extra"].setdefault("component", "pleva")
    return True


def _is_timing(record: Any) -> bool:
    return bool(record["extra"].get("timing", False))


def _component_filter(component: str) -> Callable[[Any], bool]:
    def accept(record: Any) -> bool:
        return record["extra"].get("component") == component

    return accept


def get_logger(component: str = "pleva") -> Any:
    """Get logger instance bound to a component name."""
    return logger.bind(component=component)


@contextmanager
def timing_context(
    operation: str,
    *,
    component: str = "pleva",
    **metadata: Any,
) -> Generator[dict[str, Any], None, None]:
    """Context manager timing an operation.

    The yielded dict can be updated with values to attach to the END record.

    Example
    -------
    >>> with timing_context("compute_trend", component="trends", range="W") as ctx:
    ...     points = compute_trend(entries, TimeRange.WEEK)
    ...     ctx["points"] = len(points)
    """
    start_ns = time.perf_counter_ns()
    context: dict[str, Any] = dict(metadata)
    bound = logger.bind(component=component, timing=True, operation=operation)

    bound.debug(f"START: {operation}", phase="start", **metadata)

    try:
        yield context
    finally:
        duration_ns = time.perf_counter_ns() - start_ns
        bound.debug(
            f"END: {operation}",
            phase="end",
            duration_ms=duration_ns / 1_000_000,
            **context,
        )


def log_timing(component: str = "pleva") -> Callable[[F], F]:
    """Decorator wrapping a function call in :func:`timing_context`."""

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with timing_context(f"{func.__module__}.{func.__name__}", component=component):
                return func(*args, **kwargs)

        return wrapper  # type: ignore

    return decorator
