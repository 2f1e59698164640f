"""Secret pattern registry.

The leak scanner iterates a ``SecretPatternRegistry`` generically, so adding a
provider means appending an entry, never touching scanner logic. A registry is
an immutable value: it is built once at startup (built-in table plus any
``secrets.extra_patterns`` from the config file) and handed to the scanner.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, Mapping

import re2  # google-re2. NEVER: import re

from cagent_security.errors import ConfigError
from cagent_security.models.scan import RiskLevel
from cagent_security.scanner.definitions import RULE_SECRET_LEAK, SECRET_PATTERNS, PatternEntry
from cagent_security.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SecretPatternRegistry:
    """Ordered, immutable collection of secret ``PatternEntry`` objects.

    Order does not affect whether text is blocked; it only decides which label
    is reported first when several patterns match.
    """

    entries: tuple[PatternEntry, ...] = SECRET_PATTERNS

    @classmethod
    def default(cls) -> "SecretPatternRegistry":
        return cls()

    def extend(self, extra: Iterable[PatternEntry]) -> "SecretPatternRegistry":
        """Return a new registry with ``extra`` appended. ``self`` is unchanged."""
        extra = tuple(extra)
        for entry in extra:
            if entry.rule_id != RULE_SECRET_LEAK:
                raise ValueError(f"Not a secret pattern: {entry.slug!r} ({entry.rule_id})")
        return SecretPatternRegistry(entries=self.entries + extra)

    @property
    def slugs(self) -> list[str]:
        return [entry.slug for entry in self.entries]

    def __iter__(self) -> Iterator[PatternEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


def compile_secret_patterns(raw_entries: Iterable[Mapping[str, object]]) -> tuple[PatternEntry, ...]:
    """Compile ``secrets.extra_patterns`` config entries into ``PatternEntry`` objects.

    Each raw entry needs ``slug`` and ``pattern`` strings; ``description`` is
    optional and defaults to the slug.

    An unusable secret pattern is a hard error; it is never skipped.

    Raises:
        ConfigError: On a non-mapping entry, missing/duplicate slug, or a
                     pattern google-re2 cannot compile.
    """
    compiled: list[PatternEntry] = []
    seen = {entry.slug for entry in SECRET_PATTERNS}

    for i, item in enumerate(raw_entries):
        if not isinstance(item, Mapping):
            raise ConfigError(
                f"secrets.extra_patterns[{i}] must be a mapping, got {type(item).__name__}"
            )

        slug = item.get("slug")
        pattern = item.get("pattern")
        if not slug or not isinstance(slug, str):
            raise ConfigError(f"secrets.extra_patterns[{i}] is missing 'slug'")
        if not pattern or not isinstance(pattern, str):
            raise ConfigError(f"secrets.extra_patterns[{i}] ({slug}) is missing 'pattern'")
        if slug in seen:
            raise ConfigError(f"secrets.extra_patterns[{i}] reuses slug '{slug}'")

        try:
            regex = re2.compile(pattern)
        except re2.error as exc:
            raise ConfigError(
                f"secrets.extra_patterns[{i}] ({slug}) is not a valid google-re2 regex: {exc}"
            ) from exc

        description = item.get("description") or slug
        compiled.append(
            PatternEntry(
                pattern=regex,
                rule_id=RULE_SECRET_LEAK,
                risk_level=RiskLevel.HIGH,
                slug=slug,
                description=str(description),
            )
        )
        seen.add(slug)

    if compiled:
        logger.debug("Extra secret patterns compiled", count=len(compiled))
    return tuple(compiled)
