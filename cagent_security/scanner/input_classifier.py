"""Input risk classifier — gates PR diffs and prompts before they reach the agent.

Provides:
  - ``strip_comment_lines()``: drop added diff lines that are pure comments.
  - ``is_pattern_definition_line()``: false-positive guard for pattern tables and quoted literals.
  - ``classify_input()``: three-tier classification; never raises.

Pipeline (one call, one text):
  1. Diff-shaped input only: strip comment-only ``+`` lines. Comments are the
     usual hiding place for injected instructions, and a stripped line never
     reaches the agent.
  2. HIGH tier against the stripped text → ``blocked=True``; stop.
  3. MEDIUM tier against the stripped text → warn, proceed.
  4. Nothing matched → LOW.

Matching is line-oriented: every part of a pattern must sit on one line.
Only a newline ends a line. Carriage returns, vertical tabs and Unicode line
separators stay inside the line they appear in.
Lines recognised by ``is_pattern_definition_line()`` are skipped in both tiers.

IMPORT RULES:
  - ``import re2`` ONLY — ``import re`` is PROHIBITED in this file.
"""

from __future__ import annotations

from typing import Optional, Sequence

import re2  # google-re2 — NOT stdlib re

from cagent_security.models.scan import ClassificationResult, RiskLevel
from cagent_security.scanner.definitions import (
    HIGH_RISK_PATTERNS,
    MEDIUM_RISK_PATTERNS,
    QUOTED_LITERAL_LINE,
    SELF_REFERENCE_MARKERS,
    PatternEntry,
)
from cagent_security.utils.logger import PerformanceLogger, get_logger

logger = get_logger(__name__)

#: An added diff line whose content starts with a comment opener:
#: ``+// ...``, ``+  /* ...``, ``+# ...``. Code followed by a trailing comment
#: does not match.
_COMMENT_ONLY_ADDITION = re2.compile(r'^\+\s*(?://|/\*|#)')


# ---------------------------------------------------------------------------
# Comment stripping
# ---------------------------------------------------------------------------


def _split_lines(text: str) -> list[str]:
    """Split on newline only, keeping each line's terminator."""
    chunks = text.split("\n")
    lines = [chunk + "\n" for chunk in chunks[:-1]]
    if chunks[-1]:
        lines.append(chunks[-1])
    return lines


def strip_comment_lines(text: str) -> str:
    """Remove added diff lines that consist only of a comment.

    Context lines, removed lines and lines mixing code with a trailing comment
    are kept byte-for-byte. Applying this twice gives the same text as applying
    it once.
    """
    return "".join(line for line in _split_lines(text) if not _COMMENT_ONLY_ADDITION.search(line))


# ---------------------------------------------------------------------------
# False-positive guard
# ---------------------------------------------------------------------------


def is_pattern_definition_line(line: str) -> bool:
    """True when ``line`` declares detection patterns rather than carrying a payload.

    Two shapes are recognised:
      - the line names one of this package's pattern tables;
      - the line is a diff line (``+``, ``-`` or context space) holding nothing
        but a quoted literal, optionally followed by a list comma, e.g.
        ``+  "ignore previous instructions",``.

    This is a heuristic. Input that avoids quotes is not covered by it.
    """
    if any(marker in line for marker in SELF_REFERENCE_MARKERS):
        return True
    return QUOTED_LITERAL_LINE.search(line.rstrip("\r\n")) is not None


def _candidate_lines(text: str) -> list[str]:
    return [line for line in text.split("\n") if not is_pattern_definition_line(line)]


def _match_tier(lines: Sequence[str], patterns: Sequence[PatternEntry]) -> list[PatternEntry]:
    """Every entry of ``patterns`` that matches at least one of ``lines``."""
    return [entry for entry in patterns if any(entry.search(line) for line in lines)]


# ---------------------------------------------------------------------------
# classify_input()
# ---------------------------------------------------------------------------


def classify_input(
    text: str,
    is_diff: bool = True,
    high_patterns: Sequence[PatternEntry] = HIGH_RISK_PATTERNS,
    medium_patterns: Sequence[PatternEntry] = MEDIUM_RISK_PATTERNS,
) -> tuple[Optional[str], ClassificationResult]:
    """Classify ``text`` and produce the sanitized text for the agent prompt.

    INVARIANTS:
      - Any HIGH match → ``blocked=True``, ``risk_level=HIGH``, regardless of
        MEDIUM matches. The MEDIUM tier is not evaluated.
      - Only MEDIUM matches → ``blocked=False``, ``risk_level=MEDIUM``.
      - No match → ``blocked=False``, ``risk_level=LOW``.
      - The sanitized text is ``None`` whenever the result is blocked: nothing
        derived from a blocked input may be forwarded.
      - NEVER raises. An unexpected exception returns
        ``(None, ClassificationResult.scanner_error())``.

    Args:
        text:            PR diff or prompt.
        is_diff:         True for unified-diff input; enables comment stripping.
                         Free-form prompts are never stripped.
        high_patterns:   Blocking tier (default: ``HIGH_RISK_PATTERNS``).
        medium_patterns: Warning tier (default: ``MEDIUM_RISK_PATTERNS``).

    Returns:
        ``(sanitized_text, result)``.
    """
    try:
        with PerformanceLogger("classify_input", logger):
            sanitized = strip_comment_lines(text) if is_diff else text
            if is_diff:
                removed = len(_split_lines(text)) - len(_split_lines(sanitized))
                if removed:
                    logger.info("Comment-only added lines stripped", count=removed)

            lines = _candidate_lines(sanitized)

            # ── HIGH tier: any match blocks, nothing else is evaluated ────────
            high = _match_tier(lines, high_patterns)
            if high:
                logger.error(
                    "High-risk input patterns detected — BLOCKING",
                    patterns=[entry.slug for entry in high],
                )
                return None, ClassificationResult(
                    blocked=True,
                    risk_level=RiskLevel.HIGH,
                    matched_patterns=tuple(high),
                )

            # ── MEDIUM tier: warn and proceed ─────────────────────────────────
            medium = _match_tier(lines, medium_patterns)
            if medium:
                logger.warning(
                    "Medium-risk input patterns detected",
                    patterns=[entry.slug for entry in medium],
                )
                return sanitized, ClassificationResult(
                    blocked=False,
                    risk_level=RiskLevel.MEDIUM,
                    matched_patterns=tuple(medium),
                )

        return sanitized, ClassificationResult.clean()

    except Exception as exc:  # noqa: BLE001
        logger.error(
            "Unexpected error in classify_input() — BLOCKING",
            error_type=type(exc).__name__,
            exc_info=True,
        )
        return None, ClassificationResult.scanner_error()
