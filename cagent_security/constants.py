"""Shared constants for cagent-security.

Role identifiers, provider variable names, step-output keys and exit codes used
across modules are defined here. No magic strings in other modules — import
from here.
"""

# ─── Repository association roles ────────────────────────────────────────────

# Every value GitHub reports in ``author_association``.
KNOWN_ROLES: frozenset[str] = frozenset({
    "OWNER",
    "MEMBER",
    "COLLABORATOR",
    "CONTRIBUTOR",
    "FIRST_TIMER",
    "FIRST_TIME_CONTRIBUTOR",
    "MANNEQUIN",
    "NONE",
})

# Default allow-list for the PR-review trigger path.
# Caller policy only: the gate itself never falls back to this value.
DEFAULT_ALLOWED_ROLES: tuple[str, ...] = ("OWNER", "MEMBER", "COLLABORATOR")

# ─── Provider secret variables ───────────────────────────────────────────────

# Environment variable names wired into the agent step. The names are not
# secrets, but their appearance in input or output is a signal.
PROVIDER_SECRET_VARIABLES: tuple[str, ...] = (
    "ANTHROPIC_API_KEY",
    "GITHUB_TOKEN",
    "OPENAI_API_KEY",
    "GOOGLE_API_KEY",
)

# ─── GitHub Actions step outputs ─────────────────────────────────────────────

GITHUB_OUTPUT_ENV: str = "GITHUB_OUTPUT"

OUTPUT_AUTHORIZED: str = "authorized"
OUTPUT_BLOCKED: str = "blocked"
OUTPUT_RISK_LEVEL: str = "risk-level"
OUTPUT_LEAKED: str = "leaked"
OUTPUT_SUSPICIOUS: str = "suspicious"

# ─── Process exit codes ──────────────────────────────────────────────────────
# A deliberate block and a tooling failure never share an exit code.

EXIT_OK: int = 0
EXIT_BLOCKED: int = 1
EXIT_ERROR: int = 2

# ─── Agent log markers ───────────────────────────────────────────────────────

# Fenced block the agent is instructed to wrap its final answer in.
AGENT_OUTPUT_FENCE: str = "```cagent-output"
FENCE_CLOSE: str = "```"

# Prefixes of agent CLI log lines that are never part of the answer.
AGENT_LOG_LINE_PREFIXES: tuple[str, ...] = ("time=", "level=")

# Feedback banner printed by the agent CLI on every run.
AGENT_FEEDBACK_BANNER: str = "For any feedback"
