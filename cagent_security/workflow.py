"""GitHub Actions workflow commands and step outputs.

Provides:
  - ``annotate()`` / ``error()`` / ``warning()`` / ``notice()``: workflow
    command annotations on stdout, consumed by the CI log viewer.
  - ``set_output()``: append a ``key=value`` step output to ``$GITHUB_OUTPUT``.

Outside GitHub Actions (``GITHUB_OUTPUT`` unset) outputs are skipped, so the
CLI runs unchanged on a developer machine.

See: https://docs.github.com/actions/using-workflows/workflow-commands-for-github-actions
"""

from __future__ import annotations

import os
import sys
import uuid
from typing import Optional

from cagent_security.constants import GITHUB_OUTPUT_ENV
from cagent_security.models.block import BlockMessage
from cagent_security.utils.logger import get_logger

logger = get_logger(__name__)

_LEVELS = frozenset({"error", "warning", "notice"})


def escape_data(value: object) -> str:
    """Escape an annotation message."""
    if value is None:
        return ""
    return str(value).replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def escape_property(value: object) -> str:
    """Escape an annotation property value (``title=...``)."""
    return escape_data(value).replace(":", "%3A").replace(",", "%2C")


def annotate(level: str, message: str, title: Optional[str] = None) -> None:
    """Write a ``::<level> title=...::message`` workflow command to stdout.

    Raises:
        ValueError: If ``level`` is not error, warning or notice.
    """
    if level not in _LEVELS:
        raise ValueError(f"Unknown annotation level: {level!r}")
    props = f" title={escape_property(title)}" if title else ""
    sys.stdout.write(f"::{level}{props}::{escape_data(message)}\n")
    sys.stdout.flush()


def error(message: str, title: Optional[str] = None) -> None:
    annotate("error", message, title)


def warning(message: str, title: Optional[str] = None) -> None:
    annotate("warning", message, title)


def notice(message: str, title: Optional[str] = None) -> None:
    annotate("notice", message, title)


def emit(level: str, message: BlockMessage) -> None:
    """Emit a ``BlockMessage`` as a single multi-line annotation."""
    annotate(level, message.body, title=message.title)


def format_bool(value: bool) -> str:
    return "true" if value else "false"


def set_output(name: str, value: object) -> bool:
    """Append a step output to the file named by ``$GITHUB_OUTPUT``.

    Multi-line values use the heredoc form with a random delimiter.

    Returns:
        True if written. False when ``GITHUB_OUTPUT`` is unset or the file
        cannot be written (logged, never raised: a missing output file must not
        turn a verdict into a crash).
    """
    path = os.environ.get(GITHUB_OUTPUT_ENV)
    if not path:
        logger.debug("GITHUB_OUTPUT not set — step output skipped", output=name)
        return False

    text = format_bool(value) if isinstance(value, bool) else str(value)
    if "\n" in text:
        delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
        line = f"{name}<<{delimiter}\n{text}\n{delimiter}\n"
    else:
        line = f"{name}={text}\n"

    try:
        with open(path, "a", encoding="utf-8") as fh:
            fh.write(line)
    except OSError as exc:
        logger.warning(
            "Could not write step output",
            output=name,
            path=path,
            error=str(exc),
        )
        return False
    return True
