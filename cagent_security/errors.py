"""Exceptions for cagent-security.

Blocks are never exceptions: a high-risk input or a leaked secret is a
``ClassificationResult`` with ``blocked=True``. These exceptions cover tooling
failures only, which the CLI maps to ``EXIT_ERROR``.
"""

from __future__ import annotations

from typing import Optional


class InputError(ValueError):
    """Raised when caller-supplied input is missing or malformed.

    Examples: input file not found, empty actor association, allowed-roles
    value that is not a JSON array of role strings.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigError(Exception):
    """Raised when the configuration file cannot be used.

    ``load_config()`` converts this into ``SystemExit(EXIT_ERROR)`` after
    printing the message to stderr.
    """

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
