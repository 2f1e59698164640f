"""Structured logging utilities for cagent-security.

This module configures structlog for CI use. Logs go to stderr; stdout is
reserved for GitHub workflow commands (annotations). Every log entry carries
the CLI step name and, inside GitHub Actions, the run id and job.
"""

import logging
import os
import sys
import time
from contextvars import ContextVar
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

# Context variable for the running CLI step (e.g. "sanitize-input")
step_var: ContextVar[Optional[str]] = ContextVar("step", default=None)

# GitHub Actions environment → log key
_RUN_CONTEXT_ENV = {
    "GITHUB_RUN_ID": "run_id",
    "GITHUB_JOB": "job",
    "GITHUB_ACTION": "action",
}


def add_step(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add the current step name to log context if set."""
    step = step_var.get()
    if step:
        event_dict["step"] = step
    return event_dict


def add_run_context(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add GitHub Actions run identifiers when running in a workflow."""
    for env_name, key in _RUN_CONTEXT_ENV.items():
        value = os.environ.get(env_name)
        if value:
            event_dict.setdefault(key, value)
    return event_dict


def add_timestamp(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add epoch timestamp to log entries."""
    event_dict["timestamp"] = time.time()
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = False
) -> None:
    """Configure structured logging for the CLI.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON format. If False, use console format.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_step,
        add_run_context,
        add_timestamp,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        # JSON output for log shipping
        processors.append(structlog.processors.JSONRenderer())
    else:
        # CI log viewers do not render ANSI colours reliably
        processors.extend([
            structlog.dev.ConsoleRenderer(colors=False),
        ])

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str = "cagent_security") -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name (typically module name)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


class PerformanceLogger:
    """Context manager for tracking scan duration."""

    def __init__(self, operation: str, logger: Optional[structlog.stdlib.BoundLogger] = None):
        """Initialize performance logger.

        Args:
            operation: Name of the operation being timed
            logger: Logger instance to use (creates new if None)
        """
        self.operation = operation
        self.logger = logger or get_logger()
        self.start_time: float = 0
        self.end_time: float = 0

    def __enter__(self) -> "PerformanceLogger":
        """Start timing."""
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Stop timing and log performance."""
        self.end_time = time.perf_counter()
        duration_ms = (self.end_time - self.start_time) * 1000

        if exc_type is not None:
            self.logger.error(
                f"{self.operation} failed",
                operation=self.operation,
                duration_ms=duration_ms,
                error_type=exc_type.__name__,
            )
        else:
            # Warn if a scan exceeded the 500ms threshold (very large diffs)
            log_method = self.logger.warning if duration_ms > 500 else self.logger.debug
            log_method(
                f"{self.operation} completed",
                operation=self.operation,
                duration_ms=duration_ms,
            )

    @property
    def duration_ms(self) -> float:
        """Get duration in milliseconds."""
        if self.end_time == 0:
            return (time.perf_counter() - self.start_time) * 1000
        return (self.end_time - self.start_time) * 1000


def set_step(step: str) -> None:
    """Set the CLI step name in context for all subsequent logs.

    Args:
        step: Sub-command being executed
    """
    step_var.set(step)


def clear_step() -> None:
    """Clear the step name from context."""
    step_var.set(None)


# Initialize logging with sensible defaults
# This will be reconfigured by the CLI from the loaded config
configure_logging()
