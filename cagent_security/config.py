"""Config loading for cagent-security.

Reads `.cagent/security.yaml` (or `~/.cagent/security.yaml`).
Raises SystemExit(2) on parse errors, a missing `version` field or an invalid value.
If no config file is found, returns default values (safe to run without config).

Config search order:
  1. `config_path` argument (if provided — for testing or explicit override)
  2. CAGENT_SECURITY_CONFIG environment variable (if set)
  3. `.cagent/security.yaml` (working directory — the checked-out repository)
  4. `~/.cagent/security.yaml` (home directory — self-hosted runners)

Environment variable overrides:
  CAGENT_SECURITY_LOG_LEVEL — overrides logging.level
  CAGENT_SECURITY_CONFIG — sets an explicit config file path to try first
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import NoReturn, Optional

import yaml

from cagent_security.constants import DEFAULT_ALLOWED_ROLES, EXIT_ERROR, KNOWN_ROLES
from cagent_security.errors import ConfigError
from cagent_security.scanner.definitions import PatternEntry
from cagent_security.scanner.registry import SecretPatternRegistry, compile_secret_patterns
from cagent_security.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

CONFIG_ENV = "CAGENT_SECURITY_CONFIG"
LOG_LEVEL_ENV = "CAGENT_SECURITY_LOG_LEVEL"

VALID_LOG_LEVELS: frozenset[str] = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

# Default config search paths (CAGENT_SECURITY_CONFIG env var prepended at runtime)
DEFAULT_CONFIG_PATHS = [
    ".cagent/security.yaml",
    os.path.expanduser("~/.cagent/security.yaml"),
]


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass
class LoggingConfig:
    level: str = "INFO"
    json: bool = False


@dataclass
class AuthorizationConfig:
    """Default allow-list for ``check-auth`` when the workflow passes none."""

    allowed_roles: list[str] = field(default_factory=lambda: list(DEFAULT_ALLOWED_ROLES))


@dataclass
class SecretsConfig:
    """Additional leak patterns, already compiled with google-re2."""

    extra_patterns: tuple[PatternEntry, ...] = ()


@dataclass
class Config:
    """Root configuration object populated from .cagent/security.yaml.

    All fields have safe defaults — the CLI can run without any config file.
    """

    version: int = SUPPORTED_CONFIG_VERSION
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    authorization: AuthorizationConfig = field(default_factory=AuthorizationConfig)
    secrets: SecretsConfig = field(default_factory=SecretsConfig)
    path: Optional[str] = None  # Path to the loaded config file

    @classmethod
    def defaults(cls) -> "Config":
        """Return a fully-default Config (no file required)."""
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Merges user-supplied values onto defaults; unknown keys are ignored.

        Raises:
            ConfigError: On a section that is not a mapping, an invalid log level,
                         a non-boolean ``logging.json``, a malformed allow-list or an unusable extra secret pattern.
        """
        # ── Logging ───────────────────────────────────────────────────────────
        logging_raw = _section(raw, "logging")
        level = str(logging_raw.get("level", "INFO")).upper()
        if level not in VALID_LOG_LEVELS:
            raise ConfigError(
                f"Invalid logging.level: '{level}'. Supported values: {sorted(VALID_LOG_LEVELS)}.",
                path,
            )
        json_output = logging_raw.get("json", False)
        if not isinstance(json_output, bool):
            raise ConfigError(
                f"logging.json must be true or false, got {json_output!r}.", path
            )
        logging_cfg = LoggingConfig(level=level, json=json_output)

        # ── Authorization ─────────────────────────────────────────────────────
        auth_raw = _section(raw, "authorization")
        roles = auth_raw.get("allowed_roles", list(DEFAULT_ALLOWED_ROLES))
        if not isinstance(roles, list) or not all(isinstance(r, str) and r for r in roles):
            raise ConfigError(
                "authorization.allowed_roles must be a list of role names.", path
            )
        unknown = sorted(set(roles) - KNOWN_ROLES)
        if unknown:
            logger.warning("authorization.allowed_roles contains unknown roles", unknown=unknown)
        authorization = AuthorizationConfig(allowed_roles=list(roles))

        # ── Secrets ───────────────────────────────────────────────────────────
        secrets_raw = _section(raw, "secrets")
        extra_raw = secrets_raw.get("extra_patterns") or []
        if not isinstance(extra_raw, list):
            raise ConfigError("secrets.extra_patterns must be a list.", path)
        secrets = SecretsConfig(extra_patterns=compile_secret_patterns(extra_raw))

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            logging=logging_cfg,
            authorization=authorization,
            secrets=secrets,
            path=path,
        )

    def secret_registry(self) -> SecretPatternRegistry:
        """Built-in secret patterns followed by ``secrets.extra_patterns``."""
        return SecretPatternRegistry.default().extend(self.secrets.extra_patterns)


def _section(raw: dict, name: str) -> dict:
    value = raw.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"'{name}' must be a mapping, got {type(value).__name__}.")
    return value


# ─── Config loading ───────────────────────────────────────────────────────────


def _fail(message: str) -> NoReturn:
    print(f"CONFIG ERROR: {message}", file=sys.stderr)
    raise SystemExit(EXIT_ERROR)


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate cagent-security configuration.

    Search order:
      1. ``config_path`` argument
      2. ``CAGENT_SECURITY_CONFIG`` environment variable
      3. ``.cagent/security.yaml``
      4. ``~/.cagent/security.yaml``

    If no file is found at any of these paths, returns default Config (not an error).
    If a file is found but invalid, writes the error to stderr and raises SystemExit(2).

    ``CAGENT_SECURITY_LOG_LEVEL`` is applied after loading, whether or not a
    file was found.

    Raises:
        SystemExit(2): On YAML parse error, missing ``version`` field, unsupported
                       version, or any invalid value.
    """
    search_paths: list[str] = []
    if config_path:
        search_paths.append(config_path)
    env_config = os.environ.get(CONFIG_ENV)
    if env_config:
        search_paths.append(env_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    # ── No config file found ─────────────────────────────────────────────────
    if found_path is None:
        logger.debug("No config file found — using defaults", searched=search_paths)
        config = Config.defaults()
        _apply_env_overrides(config)
        return config

    # ── Parse config file ─────────────────────────────────────────────────────
    logger.debug("Loading config", path=found_path)

    try:
        with open(found_path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        _fail(
            f"Failed to parse {found_path}: {exc}\n"
            "Check the YAML syntax and try again."
        )
    except OSError as exc:
        _fail(f"Could not read {found_path}: {exc}")

    if not isinstance(raw, dict):
        if raw is None:
            _fail(
                f"{found_path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your config file."
            )
        _fail(
            f"{found_path} is not a valid YAML mapping.\n"
            "The config file must be a YAML dictionary at the top level."
        )

    # ── Version validation ────────────────────────────────────────────────────
    version = raw.get("version")
    if version is None:
        _fail(
            f"{found_path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your config file."
        )
    if version not in SUPPORTED_VERSIONS:
        _fail(
            f"Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )

    try:
        config = Config.from_dict(raw, path=found_path)
    except ConfigError as exc:
        _fail(f"{found_path}: {exc.message}")

    _apply_env_overrides(config)

    logger.debug(
        "Config loaded",
        path=found_path,
        version=config.version,
        extra_secret_patterns=len(config.secrets.extra_patterns),
    )
    return config


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides to a Config object in-place.

    Raises:
        SystemExit(2): If CAGENT_SECURITY_LOG_LEVEL is set to an unknown level.
    """
    env_level = os.environ.get(LOG_LEVEL_ENV)
    if env_level:
        level = env_level.strip().upper()
        if level not in VALID_LOG_LEVELS:
            _fail(
                f"{LOG_LEVEL_ENV} environment variable is not a valid level: '{env_level}'"
            )
        config.logging.level = level
