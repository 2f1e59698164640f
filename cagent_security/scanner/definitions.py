"""Pattern definitions for every cagent-security gate.

All patterns are pre-compiled at module load time using google-re2.
NO pattern compilation happens per call or lazily.

Tables:
  - ``SECRET_PATTERNS``           literal shapes of provider secrets (leak scanner)
  - ``HIGH_RISK_PATTERNS``        behavioural injection attempts (blocking tier)
  - ``MEDIUM_RISK_PATTERNS``      bare provider variable names (warning tier)
  - ``ENCODED_CONTENT_PATTERNS``  obfuscation markers (advisory only)

IMPORT RULES:
  - ``import re2`` ONLY — ``import re`` is PROHIBITED in cagent_security/scanner/.
  - Inline flags (``(?i)``) instead of compile flags.

Every table is an immutable tuple. Extending a table means appending an entry
here (or, for secrets, through ``secrets.extra_patterns`` in the config file);
no scanner code changes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import re2  # google-re2 — NOT stdlib re

from cagent_security.constants import PROVIDER_SECRET_VARIABLES
from cagent_security.models.scan import RiskLevel

# ---------------------------------------------------------------------------
# Rule identifiers
# ---------------------------------------------------------------------------

RULE_SECRET_LEAK = "SECRET_LEAK_DETECTED"
RULE_PROMPT_INJECTION = "PROMPT_INJECTION_DETECTED"
RULE_SENSITIVE_VARIABLE = "SENSITIVE_VARIABLE_MENTIONED"
RULE_ENCODED_CONTENT = "ENCODED_CONTENT_DETECTED"


# ---------------------------------------------------------------------------
# PatternEntry dataclass
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PatternEntry:
    """A single compiled pattern with metadata.

    Fields:
        pattern:     Pre-compiled re2 pattern object. Compiled at module load time.
        rule_id:     Identifier of the rule family (e.g. ``"SECRET_LEAK_DETECTED"``).
        risk_level:  Tier this entry belongs to.
        slug:        Kebab-case label reported in logs and annotations
                     (e.g. ``"anthropic-api-key"``). Safe to print.
        description: Provider label for secret entries, rationale for risk entries.
    """
    pattern: Any           # re2._Regexp — pre-compiled at module load
    rule_id: str
    risk_level: RiskLevel
    slug: str
    description: str = ""

    def search(self, text: str) -> bool:
        return self.pattern.search(text) is not None


# Alternation of the provider variable names, e.g. (?:ANTHROPIC_API_KEY|GITHUB_TOKEN|...)
_SECRET_VARIABLES = "(?:" + "|".join(PROVIDER_SECRET_VARIABLES) + ")"


# ===========================================================================
# SECRET PATTERNS — leak scanner
# Case-sensitive: provider token prefixes are case-sensitive by construction.
# Lengths are strict so that prose or regex text describing a token shape
# (e.g. 'ghs_[a-zA-Z0-9]{36}') does not match.
# ===========================================================================

SECRET_PATTERNS: tuple[PatternEntry, ...] = (
    # ─── Anthropic ────────────────────────────────────────────────────────
    PatternEntry(
        pattern=re2.compile(r'sk-ant-[a-zA-Z0-9_-]{30,}'),
        rule_id=RULE_SECRET_LEAK,
        risk_level=RiskLevel.HIGH,
        slug="anthropic-api-key",
        description="Anthropic API key",
    ),
    # ─── GitHub tokens ────────────────────────────────────────────────────
    PatternEntry(
        pattern=re2.compile(r'ghp_[a-zA-Z0-9]{36}'),
        rule_id=RULE_SECRET_LEAK,
        risk_level=RiskLevel.HIGH,
        slug="github-personal-access-token",
        description="GitHub personal access token",
    ),
    PatternEntry(
        pattern=re2.compile(r'gho_[a-zA-Z0-9]{36}'),
        rule_id=RULE_SECRET_LEAK,
        risk_level=RiskLevel.HIGH,
        slug="github-oauth-token",
        description="GitHub OAuth token",
    ),
    PatternEntry(
        pattern=re2.compile(r'ghu_[a-zA-Z0-9]{36}'),
        rule_id=RULE_SECRET_LEAK,
        risk_level=RiskLevel.HIGH,
        slug="github-user-token",
        description="GitHub user-to-server token",
    ),
    PatternEntry(
        pattern=re2.compile(r'ghs_[a-zA-Z0-9]{36}'),
        rule_id=RULE_SECRET_LEAK,
        risk_level=RiskLevel.HIGH,
        slug="github-server-token",
        description="GitHub server-to-server token",
    ),
    PatternEntry(
        pattern=re2.compile(r'ghr_[a-zA-Z0-9]{36}'),
        rule_id=RULE_SECRET_LEAK,
        risk_level=RiskLevel.HIGH,
        slug="github-refresh-token",
        description="GitHub refresh token",
    ),
    PatternEntry(
        # Real fine-grained PATs carry 82 chars after the prefix; 22 is the
        # first segment, which is enough to rule out prose like "github_pat_ tokens".
        pattern=re2.compile(r'github_pat_[a-zA-Z0-9_]{22,}'),
        rule_id=RULE_SECRET_LEAK,
        risk_level=RiskLevel.HIGH,
        slug="github-fine-grained-pat",
        description="GitHub fine-grained personal access token",
    ),
    # ─── OpenAI ───────────────────────────────────────────────────────────
    PatternEntry(
        pattern=re2.compile(r'sk-[a-zA-Z0-9]{48}'),
        rule_id=RULE_SECRET_LEAK,
        risk_level=RiskLevel.HIGH,
        slug="openai-api-key",
        description="OpenAI API key",
    ),
    PatternEntry(
        pattern=re2.compile(r'sk-proj-[a-zA-Z0-9_-]{48,}'),
        rule_id=RULE_SECRET_LEAK,
        risk_level=RiskLevel.HIGH,
        slug="openai-project-key",
        description="OpenAI project key",
    ),
    # ─── Google ───────────────────────────────────────────────────────────
    PatternEntry(
        pattern=re2.compile(r'AIza[0-9A-Za-z_-]{35}'),
        rule_id=RULE_SECRET_LEAK,
        risk_level=RiskLevel.HIGH,
        slug="google-api-key",
        description="Google API key",
    ),
)

#: Provider variable NAMES (not values) in any case. Advisory signal only.
PROVIDER_VARIABLE_NAME_PATTERN = re2.compile(r'(?i)' + _SECRET_VARIABLES)


# ===========================================================================
# HIGH-RISK PATTERNS — behavioural instructions that should not appear in
# normal code or prompts. One match blocks the run.
# All patterns are case-insensitive and evaluated one line at a time.
# ===========================================================================

def _high(regex: str, slug: str, description: str) -> PatternEntry:
    return PatternEntry(
        pattern=re2.compile(r'(?i)' + regex),
        rule_id=RULE_PROMPT_INJECTION,
        risk_level=RiskLevel.HIGH,
        slug=slug,
        description=description,
    )


HIGH_RISK_PATTERNS: tuple[PatternEntry, ...] = (
    # ─── Instruction override ─────────────────────────────────────────────
    _high(r'ignore.*previous.*instruction', "ignore-previous-instructions",
          "Instructs the agent to ignore its previous instructions"),
    _high(r'ignore.*all.*instruction', "ignore-all-instructions",
          "Instructs the agent to ignore all instructions"),
    _high(r'disregard.*previous', "disregard-previous",
          "Instructs the agent to disregard prior context"),
    _high(r'forget.*previous', "forget-previous",
          "Instructs the agent to forget prior context"),
    _high(r'new.*instruction.*follow', "new-instructions",
          "Injects replacement instructions"),

    # ─── Mode switches ────────────────────────────────────────────────────
    # Word-bounded with at most two words in between, so release notes such as
    # "fallback system ... alternative models" are not read as "system mode".
    _high(r'\bsystem(?:\W+\w+){0,2}\W+override\b', "system-override",
          "Claims a system-level override"),
    _high(r'\bsystem(?:\W+\w+){0,2}\W+mode\b', "system-mode",
          "Requests a privileged system mode"),
    _high(r'\badmin(?:\W+\w+){0,2}\W+mode\b', "admin-mode",
          "Requests an admin mode"),
    _high(r'\bdebug(?:\W+\w+){0,2}\W+mode\b', "debug-mode",
          "Requests a debug mode"),
    _high(r'\bdeveloper(?:\W+\w+){0,2}\W+mode\b', "developer-mode",
          "Requests a developer mode"),

    # ─── Secret printing — shell ──────────────────────────────────────────
    _high(r'echo.*\$.*' + _SECRET_VARIABLES, "echo-secret-variable",
          "Echoes a provider secret variable"),
    _high(r'printenv\s+' + _SECRET_VARIABLES, "printenv-secret-variable",
          "Prints a provider secret variable with printenv"),
    _high(r'cat\s+\.env', "cat-dotenv",
          "Dumps a .env file"),

    # ─── Secret printing — Python ─────────────────────────────────────────
    _high(r'print\(.*' + _SECRET_VARIABLES, "python-print-secret-variable",
          "Prints a provider secret variable from Python"),
    _high(r'print.*os\.environ', "python-print-environ",
          "Prints the process environment from Python"),

    # ─── Secret printing — JavaScript ─────────────────────────────────────
    _high(r'console\.log.*process\.env', "js-log-process-env",
          "Logs the process environment from JavaScript"),
    _high(r'console\.log\(.*' + _SECRET_VARIABLES, "js-log-secret-variable",
          "Logs a provider secret variable from JavaScript"),

    # ─── Environment dumps ────────────────────────────────────────────────
    _high(r'print.*environment.*variable', "print-environment-variables",
          "Asks for environment variables to be printed"),

    # ─── Direct secret revelation requests ────────────────────────────────
    _high(r'show.*me.*(?:your|the|my).*(?:key|secret|token|api)', "show-secret",
          "Asks the agent to show a key or token"),
    _high(r'reveal.*(?:your|the|my).*(?:key|secret|token|api)', "reveal-secret",
          "Asks the agent to reveal a key or token"),
    _high(r'display.*(?:your|the|my).*(?:key|secret|token|api)', "display-secret",
          "Asks the agent to display a key or token"),
    _high(r'what.*is.*(?:your|the).*(?:api.*key|secret|token)', "ask-secret-value",
          "Asks for the value of a key or token"),
    _high(r'give.*me.*(?:your|the).*(?:key|secret|token|api)', "give-secret",
          "Asks the agent to hand over a key or token"),

    # ─── System prompt extraction ─────────────────────────────────────────
    _high(r'repeat.*system.*prompt', "repeat-system-prompt",
          "Asks the agent to repeat its system prompt"),
    _high(r'what.*are.*your.*instructions', "ask-instructions",
          "Asks the agent to disclose its instructions"),
    _high(r'show.*initial.*prompt', "show-initial-prompt",
          "Asks the agent to show its initial prompt"),
    _high(r'show.*system.*prompt', "show-system-prompt",
          "Asks the agent to show its system prompt"),

    # ─── Jailbreak phrasing ───────────────────────────────────────────────
    _high(r'act.*as.*no.*restrictions', "act-without-restrictions",
          "Asks the agent to act without restrictions"),
    _high(r'pretend.*to.*be.*evil', "pretend-evil",
          "Asks the agent to adopt a malicious role"),
    _high(r'pretend.*you.*are.*jailbroken', "pretend-jailbroken",
          "Asks the agent to behave as jailbroken"),

    # ─── Encoded payloads ─────────────────────────────────────────────────
    _high(r'base64.*decode', "base64-decode",
          "Carries a base64 payload to decode"),
    _high(r'decode.*base64', "decode-base64",
          "Carries a base64 payload to decode"),
    _high(r'atob\(', "atob-call",
          "Decodes base64 in JavaScript"),
    _high(r'btoa\(', "btoa-call",
          "Encodes data as base64 in JavaScript"),
    _high(r'0x[0-9a-f]{20,}', "long-hex-literal",
          "Carries a long hex-encoded payload"),
)


# ===========================================================================
# MEDIUM-RISK PATTERNS — bare mentions of provider secret variables.
# Common in legitimate config, tests and docs: warn, never block.
# Case-sensitive, matching how the variables are spelled in code.
# ===========================================================================

MEDIUM_RISK_PATTERNS: tuple[PatternEntry, ...] = tuple(
    PatternEntry(
        pattern=re2.compile(name),
        rule_id=RULE_SENSITIVE_VARIABLE,
        risk_level=RiskLevel.MEDIUM,
        slug=name.lower().replace("_", "-") + "-mention",
        description=f"Mentions the {name} secret variable",
    )
    for name in PROVIDER_SECRET_VARIABLES
)


# ===========================================================================
# ENCODED CONTENT PATTERNS — advisory scanner only
# ===========================================================================

ENCODED_CONTENT_PATTERNS: tuple[PatternEntry, ...] = (
    PatternEntry(
        pattern=re2.compile(r'base64|atob|btoa'),
        rule_id=RULE_ENCODED_CONTENT,
        risk_level=RiskLevel.MEDIUM,
        slug="encoding-keyword",
        description="Mentions a base64 encoding routine",
    ),
    PatternEntry(
        pattern=re2.compile(r'0x[0-9a-fA-F]{20,}'),
        rule_id=RULE_ENCODED_CONTENT,
        risk_level=RiskLevel.MEDIUM,
        slug="hex-payload",
        description="Contains a long hex-encoded span",
    ),
    PatternEntry(
        pattern=re2.compile(r'[A-Za-z0-9+/]{32,}={1,2}'),
        rule_id=RULE_ENCODED_CONTENT,
        risk_level=RiskLevel.MEDIUM,
        slug="base64-payload",
        description="Contains a long padded base64 span",
    ),
)


# ===========================================================================
# Self-reference guard
# Lines naming these tables are pattern definitions, not payloads.
# ===========================================================================

SELF_REFERENCE_MARKERS: tuple[str, ...] = (
    "SECRET_PATTERNS",
    "HIGH_RISK_PATTERNS",
    "MEDIUM_RISK_PATTERNS",
    "ENCODED_CONTENT_PATTERNS",
)

#: A diff line (added, removed or context) that is nothing but a quoted literal,
#: optionally followed by a list comma: ``+  "ignore previous instructions",``
#: The leading diff marker is required.
QUOTED_LITERAL_LINE = re2.compile(r'''^[+\s-]\s*['"].*['"],?\s*$''')


# ===========================================================================
# ALL_PATTERNS — concatenation of all groups (used by tests)
# ===========================================================================

ALL_PATTERNS: tuple[PatternEntry, ...] = (
    SECRET_PATTERNS
    + HIGH_RISK_PATTERNS
    + MEDIUM_RISK_PATTERNS
    + ENCODED_CONTENT_PATTERNS
)
