"""Authorization gate for the PR-review trigger path.

Provides:
  - ``authorize()``: exact, case-sensitive membership of the actor's repository
    association in an explicit allow-list.
  - ``parse_allowed_roles()``: parse the JSON array the workflow passes in.

CRITICAL INVARIANT: the gate fails closed. An empty role, an empty allow-list
or an allow-list that is not a collection of strings is "not authorized". It
never substitutes a default policy: ``DEFAULT_ALLOWED_ROLES`` is applied by the
caller (the CLI), never here.
"""

from __future__ import annotations

import json
from collections.abc import Iterable

from cagent_security.constants import KNOWN_ROLES
from cagent_security.errors import InputError
from cagent_security.models.scan import AuthorizationResult
from cagent_security.utils.logger import get_logger

logger = get_logger(__name__)


def authorize(actor_role: str, allowed_roles: Iterable[str]) -> AuthorizationResult:
    """Return whether ``actor_role`` is a member of ``allowed_roles``.

    Args:
        actor_role:    Repository association of the triggering user
                       (e.g. ``"MEMBER"``). Compared verbatim.
        allowed_roles: Explicit allow-list. A bare string is rejected rather
                       than being treated as a set of characters.

    Returns:
        AuthorizationResult. ``reason`` is set on every denial.
    """
    if not isinstance(actor_role, str) or not actor_role:
        logger.error("Authorization denied: no association provided")
        return AuthorizationResult(
            authorized=False,
            actor_role="",
            reason="No association provided",
        )

    if isinstance(allowed_roles, (str, bytes)) or not isinstance(allowed_roles, Iterable):
        logger.error(
            "Authorization denied: malformed allow-list",
            actual_type=type(allowed_roles).__name__,
        )
        return AuthorizationResult(
            authorized=False,
            actor_role=actor_role,
            reason="Allowed roles must be a collection of role names",
        )

    roles = list(allowed_roles)
    if not roles:
        logger.error("Authorization denied: empty allow-list", actor_role=actor_role)
        return AuthorizationResult(
            authorized=False,
            actor_role=actor_role,
            reason="No allowed roles provided",
        )
    if not all(isinstance(role, str) for role in roles):
        logger.error("Authorization denied: non-string entry in allow-list", actor_role=actor_role)
        return AuthorizationResult(
            authorized=False,
            actor_role=actor_role,
            reason="Allowed roles must be a collection of role names",
        )

    unknown = sorted(set(roles) - KNOWN_ROLES)
    if unknown:
        # Still compared verbatim — a typo simply never matches.
        logger.warning("Allow-list contains unknown roles", unknown=unknown)

    if actor_role in roles:
        logger.info("Authorization successful", actor_role=actor_role)
        return AuthorizationResult(authorized=True, actor_role=actor_role)

    logger.error(
        "Authorization denied: role not allowed",
        actor_role=actor_role,
        allowed_roles=sorted(set(roles)),
    )
    return AuthorizationResult(
        authorized=False,
        actor_role=actor_role,
        reason=f"Role '{actor_role}' is not in the allowed roles",
    )


def parse_allowed_roles(raw: str) -> frozenset[str]:
    """Parse the workflow's allowed-roles value, e.g. ``'["OWNER", "MEMBER"]'``.

    An empty JSON array parses to an empty set (which ``authorize()`` denies).

    Raises:
        InputError: If ``raw`` is blank, not valid JSON, not a JSON array, or
                    contains anything other than non-empty strings.
    """
    if not raw or not raw.strip():
        raise InputError("No allowed roles provided")

    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InputError(f"Allowed roles is not valid JSON: {exc.msg}") from exc

    if not isinstance(parsed, list):
        raise InputError(
            f"Allowed roles must be a JSON array, got {type(parsed).__name__}"
        )
    for i, role in enumerate(parsed):
        if not isinstance(role, str) or not role:
            raise InputError(f"Allowed roles entry {i} is not a role name: {role!r}")

    return frozenset(parsed)
