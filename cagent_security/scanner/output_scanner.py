"""Output leak scanner — the last line of defence before agent output is published.

Provides:
  - ``scan_output()``: test agent output against every secret pattern in a
    ``SecretPatternRegistry``; any single match blocks. Never raises.

INVARIANTS:
  - No warn-only mode: one secret match → ``blocked=True``, ``risk_level=HIGH``.
  - Provider variable NAMES in the text only set ``advisory``; they never block.
  - The matched value is never logged or stored on the result — labels only.

IMPORT RULES:
  - ``import re2`` ONLY — ``import re`` is PROHIBITED in this file.
"""

from __future__ import annotations

from typing import Optional

import re2  # noqa: F401 — google-re2. NEVER: import re

from cagent_security.models.scan import ClassificationResult, RiskLevel
from cagent_security.scanner.definitions import PROVIDER_VARIABLE_NAME_PATTERN, PatternEntry
from cagent_security.scanner.registry import SecretPatternRegistry
from cagent_security.utils.logger import PerformanceLogger, get_logger

logger = get_logger(__name__)

_DEFAULT_REGISTRY = SecretPatternRegistry.default()


def scan_output(
    text: str,
    registry: Optional[SecretPatternRegistry] = None,
) -> ClassificationResult:
    """Scan ``text`` (the agent's final response) for leaked secrets.

    Every registry entry is evaluated so the caller can report all leaked
    secret types, not just the first.

    NEVER raises. Any exception is caught, logged at ERROR, and returns a
    blocked ``ClassificationResult.scanner_error()`` (fail closed).

    Args:
        text:     Agent output to scan. The whole text is scanned.
        registry: Secret patterns to apply (default: built-in table).

    Returns:
        Blocked HIGH result listing the matched entries, or a clean LOW result.
        ``advisory`` is True when provider variable names appear in the text.
    """
    registry = registry if registry is not None else _DEFAULT_REGISTRY
    try:
        with PerformanceLogger("scan_output", logger):
            matched: list[PatternEntry] = [entry for entry in registry if entry.search(text)]
            advisory = PROVIDER_VARIABLE_NAME_PATTERN.search(text) is not None

        if advisory:
            logger.warning("Provider variable names present in output")

        if not matched:
            return ClassificationResult.clean(advisory=advisory)

        # Slugs only — the matched value must not reach CI logs.
        logger.error(
            "Secret leak detected in output",
            patterns=[entry.slug for entry in matched],
            count=len(matched),
        )
        return ClassificationResult(
            blocked=True,
            risk_level=RiskLevel.HIGH,
            matched_patterns=tuple(matched),
            advisory=advisory,
        )

    except Exception as exc:  # noqa: BLE001
        logger.error(
            "Unexpected error in scan_output() — BLOCKING",
            error_type=type(exc).__name__,
            exc_info=True,
        )
        return ClassificationResult.scanner_error()
