"""cagent-security authorization package.

Public API:
  - authorize()            — allow-list membership check, fails closed
  - parse_allowed_roles()  — JSON array → frozenset of role names
"""

from __future__ import annotations

from cagent_security.auth.gate import authorize, parse_allowed_roles

__all__ = [
    "authorize",
    "parse_allowed_roles",
]
