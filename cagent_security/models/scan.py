"""Scan result contracts shared by every gate.

  - ``RiskLevel``            — low / medium / high, ordered.
  - ``ClassificationResult`` — verdict of the input classifier and the leak scanner.
  - ``AuthorizationResult``  — verdict of the authorization gate.
  - ``AdvisoryResult``       — verdict of the prompt advisory scanner (never blocks).

All results are frozen and built once per call. Nothing here holds matched
text: results carry ``PatternEntry`` references (slug + description) only, so a
result can be logged or written to step outputs without re-leaking a secret.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from cagent_security.scanner.definitions import PatternEntry


class RiskLevel(str, Enum):
    """Risk tier of a scanned text. The value is the ``risk-level`` step output."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def __str__(self) -> str:
        return self.value


_RANKS = {RiskLevel.LOW: 0, RiskLevel.MEDIUM: 1, RiskLevel.HIGH: 2}


@dataclass(frozen=True)
class ClassificationResult:
    """Result of a single ``classify_input()`` or ``scan_output()`` call.

    Fields:
        blocked:          True when the caller must abort and forward nothing.
        risk_level:       Highest tier that matched.
        matched_patterns: Entries that matched, in table order. For the input
                          classifier only the deciding tier is listed.
        advisory:         Non-blocking signal (leak scanner: provider variable
                          names present in the text). Never affects ``blocked``.
        error:            Set to ``"SCANNER_ERROR"`` when the scan itself failed.
                          Such results are blocked (fail closed) and callers
                          report them as tooling failures, not as detections.
    """

    blocked: bool
    risk_level: RiskLevel
    matched_patterns: tuple["PatternEntry", ...] = ()
    advisory: bool = False
    error: Optional[str] = None

    @property
    def matched_slugs(self) -> list[str]:
        return [entry.slug for entry in self.matched_patterns]

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @classmethod
    def clean(cls, advisory: bool = False) -> "ClassificationResult":
        """A pass verdict: nothing matched."""
        return cls(blocked=False, risk_level=RiskLevel.LOW, advisory=advisory)

    @classmethod
    def scanner_error(cls) -> "ClassificationResult":
        """A fail-closed verdict for a scan that raised."""
        return cls(blocked=True, risk_level=RiskLevel.HIGH, error="SCANNER_ERROR")


@dataclass(frozen=True)
class AuthorizationResult:
    """Result of ``authorize()``.

    ``reason`` explains a denial (empty role, empty allow-list, role not listed).
    It is None when authorized.
    """

    authorized: bool
    actor_role: str
    reason: Optional[str] = None


@dataclass(frozen=True)
class AdvisoryResult:
    """Result of ``advise()``. The caller always proceeds."""

    suspicious: bool
    reasons: tuple[str, ...] = ()
