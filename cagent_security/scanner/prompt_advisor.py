"""Prompt advisory scanner for general (non-PR-review) agent runs.

Same pattern families as the input classifier's HIGH and MEDIUM tiers, plus
encoded-content heuristics. Results are warnings only: a prompt that discusses
API keys by name is normal usage, so ``advise()`` never blocks. Leaked values
are still caught afterwards by the output scanner.

IMPORT RULES:
  - ``import re2`` ONLY — ``import re`` is PROHIBITED in this file.
"""

from __future__ import annotations

import re2  # noqa: F401 — google-re2. NEVER: import re

from cagent_security.models.scan import AdvisoryResult
from cagent_security.scanner.definitions import (
    ENCODED_CONTENT_PATTERNS,
    HIGH_RISK_PATTERNS,
    MEDIUM_RISK_PATTERNS,
    PatternEntry,
)
from cagent_security.utils.logger import get_logger

logger = get_logger(__name__)

#: Evaluation order for advisory reasons.
ADVISORY_PATTERN_GROUPS: tuple[tuple[PatternEntry, ...], ...] = (
    HIGH_RISK_PATTERNS,
    MEDIUM_RISK_PATTERNS,
    ENCODED_CONTENT_PATTERNS,
)


def _reason(entry: PatternEntry) -> str:
    return f"{entry.slug}: {entry.description}"


def advise(text: str) -> AdvisoryResult:
    """Flag suspicious content in a free-text prompt. Never blocks, never raises.

    The prompt is not comment-stripped and no false-positive guard is applied:
    over-reporting costs one warning line.

    Returns:
        ``AdvisoryResult(suspicious, reasons)`` with one reason per matched
        pattern, formatted ``"<slug>: <description>"``.
    """
    if not text:
        return AdvisoryResult(suspicious=False)

    try:
        lines = text.split("\n")
        reasons = tuple(
            _reason(entry)
            for group in ADVISORY_PATTERN_GROUPS
            for entry in group
            if any(entry.search(line) for line in lines)
        )
    except Exception as exc:  # noqa: BLE001
        logger.error(
            "Unexpected error in advise() — reporting as suspicious",
            error_type=type(exc).__name__,
            exc_info=True,
        )
        return AdvisoryResult(suspicious=True, reasons=("scanner-error: prompt could not be scanned",))

    if reasons:
        logger.warning("Suspicious prompt patterns detected", count=len(reasons))
    return AdvisoryResult(suspicious=bool(reasons), reasons=reasons)
