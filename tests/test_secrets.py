"""Tests for stackpeek.facts.secrets: naive secret-key masking."""

import pytest

from stackpeek.config import DEFAULT_SECRET_PATTERNS
from stackpeek.facts.secrets import REDACTED, SecretPatterns, looks_like_secret, mask


class TestLooksLikeSecret:
    @pytest.mark.parametrize(
        "key",
        [
            "DB_PASSWORD",
            "db_password",
            "Secret_Key",
            "GITHUB_TOKEN",
            "HTTP_AUTHORIZATION",
            "HTTP_COOKIE",
            "SSH_AUTH_SOCK",
            "JWT_SIGNING",
            "PRIVATE_THING",
            "STRIPE_APIKEY",
        ],
    )
    def test_matches_case_insensitive(self, key: str) -> None:
        assert looks_like_secret(key, SecretPatterns())

    @pytest.mark.parametrize("key", ["HOME", "PATH", "LANG", "HOSTNAME", "PYTHONPATH"])
    def test_plain_keys(self, key: str) -> None:
        assert not looks_like_secret(key, SecretPatterns())

    def test_substring_anywhere(self) -> None:
        # substring match, not word match
        assert looks_like_secret("PASSENGER_COUNT", SecretPatterns())

    def test_explicit_patterns(self) -> None:
        patterns = SecretPatterns(("foo",))
        assert looks_like_secret("MY_FOO", patterns)
        assert not looks_like_secret("DB_PASSWORD", patterns)

    def test_plain_iterable(self) -> None:
        assert looks_like_secret("My_Token", ["TOKEN"])

    def test_empty_patterns_match_nothing(self) -> None:
        assert not looks_like_secret("DB_PASSWORD", SecretPatterns(()))


class TestSecretPatterns:
    def test_defaults(self) -> None:
        assert SecretPatterns().patterns == DEFAULT_SECRET_PATTERNS

    def test_normalized_to_lower_case(self) -> None:
        assert SecretPatterns((" Token ", "", "KEY")).patterns == ("token", "key")

    def test_frozen(self) -> None:
        patterns = SecretPatterns()
        with pytest.raises(AttributeError):
            patterns.patterns = ("x",)  # type: ignore[misc]

    def test_describe(self) -> None:
        assert SecretPatterns(("a", "b")).describe() == "a, b"

    def test_matches(self) -> None:
        assert SecretPatterns(("cookie",)).matches("HTTP_COOKIE")
        assert not SecretPatterns(("cookie",)).matches("HTTP_HOST")


class TestMask:
    def test_masks_secret(self) -> None:
        assert mask("DB_PASSWORD", "xyz", SecretPatterns()) == REDACTED == "****"

    def test_keeps_plain(self) -> None:
        assert mask("HOME", "/root", SecretPatterns()) == "/root"
