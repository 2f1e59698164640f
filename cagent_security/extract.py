"""Agent response extraction.

The agent CLI interleaves its answer with log noise (``time=... level=...``
lines, an ``--- Agent: root ---`` header, a feedback banner). The leak scanner
must see exactly the text that would be published, so the answer is extracted
first and both the scan and the publish step read the same file.

Extraction order:
  1. Fenced ``cagent-output`` blocks, if the agent used them.
  2. Everything after the last ``--- Agent: <name> ---`` marker, minus log lines.
  3. The whole log, minus log lines and the feedback banner.
"""

from __future__ import annotations

from cagent_security.constants import (
    AGENT_FEEDBACK_BANNER,
    AGENT_LOG_LINE_PREFIXES,
    AGENT_OUTPUT_FENCE,
    FENCE_CLOSE,
)
from cagent_security.utils.logger import get_logger

logger = get_logger(__name__)


def _is_metadata(line: str) -> bool:
    return line.startswith(AGENT_LOG_LINE_PREFIXES)


def _fenced_blocks(lines: list[str]) -> list[str]:
    out: list[str] = []
    inside = False
    for line in lines:
        stripped = line.rstrip()
        if not inside and stripped == AGENT_OUTPUT_FENCE:
            inside = True
        elif inside and stripped == FENCE_CLOSE:
            inside = False
        elif inside:
            out.append(line)
    return out


def _squeeze_blank(lines: list[str]) -> list[str]:
    out: list[str] = []
    for line in lines:
        if not line.strip() and out and not out[-1].strip():
            continue
        out.append(line)
    return out


def extract_agent_response(raw: str, agent_name: str = "root") -> str:
    """Return the agent's answer from raw CLI output.

    Args:
        raw:        Full stdout/stderr capture of the agent run.
        agent_name: Agent whose ``--- Agent: <name> ---`` marker starts the answer.

    Returns:
        The extracted answer, stripped of surrounding blank lines. May be empty.
    """
    lines = raw.splitlines()

    if any(line.rstrip() == AGENT_OUTPUT_FENCE for line in lines):
        logger.debug("Extracting fenced agent output")
        return "\n".join(_fenced_blocks(lines)).strip("\n")

    marker = f"--- Agent: {agent_name} ---"
    marker_index = None
    for i, line in enumerate(lines):
        if line.strip() == marker:
            marker_index = i

    if marker_index is not None:
        logger.debug("Extracting agent output after marker", agent=agent_name)
        body = [
            line
            for line in lines[marker_index + 1:]
            if not _is_metadata(line) and AGENT_FEEDBACK_BANNER not in line
        ]
        return "\n".join(_squeeze_blank(body)).strip("\n")

    logger.debug("No agent marker found — dropping log lines only", agent=agent_name)
    return "\n".join(
        line for line in lines if not _is_metadata(line) and AGENT_FEEDBACK_BANNER not in line
    ).strip("\n")
