"""Naive secret-key masking.

A key is considered secret when any configured pattern occurs anywhere in
its lower-cased form. The pattern set is always passed in explicitly.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from stackpeek.config import DEFAULT_SECRET_PATTERNS

REDACTED = "****"


@dataclass(frozen=True, slots=True)
class SecretPatterns:
    """An immutable set of lower-case substrings that mark a key as secret."""

    patterns: tuple[str, ...] = DEFAULT_SECRET_PATTERNS

    def __post_init__(self) -> None:
        normalized = tuple(p.strip().lower() for p in self.patterns if p.strip())
        object.__setattr__(self, "patterns", normalized)

    def matches(self, key: str) -> bool:
        """True if any pattern occurs in the lower-cased *key*."""
        lowered = key.lower()
        return any(pattern in lowered for pattern in self.patterns)

    def describe(self) -> str:
        """Comma-separated list for the masking hint on the page."""
        return ", ".join(self.patterns)


def looks_like_secret(key: str, patterns: SecretPatterns | Iterable[str]) -> bool:
    """True if any pattern occurs in the lower-cased *key*."""
    if not isinstance(patterns, SecretPatterns):
        patterns = SecretPatterns(tuple(patterns))
    return patterns.matches(key)


def mask(key: str, value: str, patterns: SecretPatterns) -> str:
    """Return ``REDACTED`` for a secret key, otherwise *value* unchanged."""
    return REDACTED if patterns.matches(key) else value
