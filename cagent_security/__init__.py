"""cagent-security — security gates for AI agent runs in GitHub Actions.

Authorization gate, input risk classifier, output leak scanner and prompt
advisory scanner, driven from CI steps through the ``cagent-security`` CLI.
"""

__version__ = "1.0.0"
