"""Block, incident and warning message builders for CI annotations.

Provides one factory per verdict the CLI can surface:

  build_input_block_message():
      HIGH-risk input — the workflow is aborted and nothing reaches the agent.
  build_medium_risk_message():
      MEDIUM-risk input — warning only; the run proceeds.
  build_leak_incident_message():
      Secret leak in agent output — a security incident, not a plain failure.
  build_authorization_failure_message():
      Actor role outside the allow-list.
  build_advisory_message():
      Suspicious prompt in a general run — warning only.
  build_scanner_error_message():
      The scan itself failed — a tooling error, distinct from a detection.

Security invariants:
  - Messages are built from ``PatternEntry`` slugs and descriptions only. No
    builder receives the scanned text, so a matched secret can never be echoed.
  - Every block message says which tier matched and why it is risky.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

from cagent_security.models.scan import AdvisoryResult, AuthorizationResult, ClassificationResult


@dataclass(frozen=True)
class BlockMessage:
    """A titled, multi-line annotation body."""

    title: str
    lines: list[str] = field(default_factory=list)

    @property
    def body(self) -> str:
        return "\n".join(self.lines)


def _pattern_lines(result: ClassificationResult) -> list[str]:
    return [f"  - {entry.slug}: {entry.description}" for entry in result.matched_patterns]


def build_input_block_message(result: ClassificationResult) -> BlockMessage:
    """Message for a HIGH-risk input classification (``blocked=True``).

    Args:
        result: ClassificationResult with ``risk_level == HIGH``.
    """
    return BlockMessage(
        title="BLOCKED: HIGH-RISK PROMPT INJECTION DETECTED",
        lines=[
            "The input contains patterns that strongly indicate a prompt injection attack.",
            "Execution has been blocked and no part of the input was passed to the agent.",
            "",
            "High-risk patterns:",
            *_pattern_lines(result),
        ],
    )


def build_medium_risk_message(result: ClassificationResult) -> BlockMessage:
    return BlockMessage(
        title="MEDIUM-RISK pattern detected",
        lines=[
            "This input references API key configuration. Review it carefully.",
            "Execution continues; the agent output will be scanned for leaked secrets.",
            "",
            "Medium-risk patterns:",
            *_pattern_lines(result),
        ],
    )


def build_leak_incident_message(
    result: ClassificationResult,
    pr_number: Optional[str] = None,
) -> BlockMessage:
    """Message for a secret leak detected in agent output.

    Lists the provider label of each matched pattern. The leaked value itself
    is never part of the message.

    Args:
        result:    Blocked ClassificationResult from ``scan_output()``.
        pr_number: Pull request under review, for the investigation checklist.
    """
    target = f"PR #{pr_number}" if pr_number else "the triggering input"
    return BlockMessage(
        title="CRITICAL SECURITY INCIDENT: SECRET LEAK DETECTED",
        lines=[
            "Response contains secret patterns:",
            *[f"  - {entry.description} ({entry.slug})" for entry in result.matched_patterns],
            "",
            "ACTIONS TAKEN:",
            "  - Response BLOCKED from being posted",
            "  - Security incident logged",
            "  - Workflow will fail",
            "",
            "IMMEDIATE ACTIONS REQUIRED:",
            f"  1. Investigate {target} for prompt injection",
            "  2. Review the agent response in the workflow logs",
            "  3. Rotate compromised secrets immediately",
            "  4. Block the author if the input was malicious",
            "",
            "DO NOT publish this response.",
        ],
    )


def build_authorization_failure_message(
    result: AuthorizationResult,
    allowed_roles: Iterable[str],
) -> BlockMessage:
    allowed = ", ".join(sorted(allowed_roles)) or "(none)"
    return BlockMessage(
        title="AUTHORIZATION FAILED",
        lines=[
            f"User association: {result.actor_role or '(none)'}",
            f"Allowed roles: {allowed}",
            f"Reason: {result.reason}",
            "",
            "Only trusted contributors can trigger reviews.",
            "If you are a maintainer, ensure you have the appropriate permissions in the repository.",
        ],
    )


def build_advisory_message(result: AdvisoryResult) -> BlockMessage:
    return BlockMessage(
        title="PROMPT INJECTION PATTERNS DETECTED",
        lines=[
            "The prompt contains patterns that may indicate a prompt injection attempt.",
            "The agent will still run and its output will be scanned for leaked secrets.",
            "If this is a false positive, you can ignore this warning.",
            "",
            *[f"  - {reason}" for reason in result.reasons],
        ],
    )


def build_scanner_error_message(step: str) -> BlockMessage:
    return BlockMessage(
        title="SECURITY SCAN FAILED",
        lines=[
            f"The {step} scan could not complete. Failing closed.",
            "This is a tooling error, not a detection. See the step logs for details.",
        ],
    )
