"""Application and inspector configuration.

Both configs are frozen dataclasses: immutable after creation,
IDE-autocompletable, no string-key dict lookups. ``from_env()`` builds
either one from ``STACKPEEK_*`` environment variables.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

from stackpeek.errors import ConfigurationError

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})

DEFAULT_SECRET_PATTERNS: tuple[str, ...] = (
    "password",
    "passwd",
    "pass",
    "secret",
    "key",
    "token",
    "apikey",
    "api_key",
    "authorization",
    "auth",
    "cookie",
    "jwt",
    "ssh",
    "private",
)


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(env="local", database_url="sqlite:///app.db")
    """

    # Identity
    name: str = "stackpeek"
    env: str = "production"
    debug: bool = False
    url: str = ""

    # Server
    host: str = "127.0.0.1"
    port: int = 8000

    # Drivers
    database_url: str | None = None
    cache_driver: str = "memory"
    queue_driver: str = "sync"
    mail_driver: str = "log"
    session_driver: str = "cookie"

    # Static files
    static_dir: str | Path | None = "static"

    # Limits
    max_content_length: int = 16 * 1024 * 1024  # 16 MB
    request_timeout: float = 30.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> AppConfig:
        """Build a config from ``STACKPEEK_APP_*`` variables.

        ``STACKPEEK_APP_DEBUG=1`` sets ``debug``, ``STACKPEEK_APP_ENV=local``
        sets ``env`` and so on. Unset variables keep their defaults.
        """
        return cls(**_read_env(cls, "STACKPEEK_APP_", environ))


@dataclass(frozen=True, slots=True)
class InspectorConfig:
    """What the inspection page collects and how it displays it.

    ``secret_patterns`` is passed explicitly to the masking function; there
    is no module-level pattern list to mutate.
    """

    title: str = "Stack Inspector"
    path: str = "/_stackpeek"

    # Environment snapshot
    secret_patterns: tuple[str, ...] = DEFAULT_SECRET_PATTERNS
    env_limit: int = 200

    # Well-known files
    os_release_path: str = "/etc/os-release"
    cgroup_path: str = "/proc/1/cgroup"
    container_marker_path: str = "/.dockerenv"

    # Modules flagged in the loaded-modules list (db, tls, perf, debug)
    critical_modules: tuple[str, ...] = (
        "sqlite3",
        "asyncpg",
        "psycopg",
        "redis",
        "ssl",
        "uvloop",
        "debugpy",
        "pydevd",
    )
    # Modules checked for importability on the framework page
    checked_modules: tuple[str, ...] = (
        "ssl",
        "sqlite3",
        "zlib",
        "hashlib",
        "json",
        "decimal",
        "ctypes",
        "readline",
        "uuid",
        "asyncpg",
        "anyio",
    )
    package_sample_size: int = 12

    # External tools
    package_manager_command: tuple[str, ...] = ("pip", "--version")
    git_branch_command: tuple[str, ...] = ("git", "rev-parse", "--abbrev-ref", "HEAD")
    git_commit_command: tuple[str, ...] = ("git", "rev-parse", "--short", "HEAD")

    # Gate
    local_environments: tuple[str, ...] = ("local", "development", "dev")

    def __post_init__(self) -> None:
        if self.env_limit < 0:
            msg = f"env_limit must be >= 0, got {self.env_limit}"
            raise ConfigurationError(msg)
        if not self.path.startswith("/"):
            msg = f"Inspector path must start with '/', got {self.path!r}"
            raise ConfigurationError(msg)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> InspectorConfig:
        """Build a config from ``STACKPEEK_*`` variables.

        Tuple fields take comma-separated values, e.g.
        ``STACKPEEK_SECRET_PATTERNS=password,token``.
        """
        return cls(**_read_env(cls, "STACKPEEK_", environ))


def _read_env(
    cls: type,
    prefix: str,
    environ: Mapping[str, str] | None,
) -> dict[str, Any]:
    """Collect dataclass overrides from prefixed environment variables."""
    source = os.environ if environ is None else environ
    values: dict[str, Any] = {}
    for field in fields(cls):
        raw = source.get(prefix + field.name.upper())
        if raw is None:
            continue
        values[field.name] = _coerce(field.name, field.default, raw)
    return values


def _coerce(name: str, default: Any, raw: str) -> Any:
    """Convert a raw string to the type of the field default."""
    if isinstance(default, bool):
        lowered = raw.strip().lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        msg = f"Invalid boolean for {name}: {raw!r}"
        raise ConfigurationError(msg)
    if isinstance(default, tuple):
        return tuple(part.strip() for part in raw.split(",") if part.strip())
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError:
            msg = f"Invalid integer for {name}: {raw!r}"
            raise ConfigurationError(msg) from None
    if isinstance(default, float):
        try:
            return float(raw)
        except ValueError:
            msg = f"Invalid number for {name}: {raw!r}"
            raise ConfigurationError(msg) from None
    return raw
