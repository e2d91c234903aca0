"""Environment variable snapshot with masking and a display cap."""

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from stackpeek.facts.secrets import REDACTED, SecretPatterns

DEFAULT_LIMIT = 200


@dataclass(frozen=True, slots=True)
class EnvRow:
    key: str
    value: str
    masked: bool = False


@dataclass(frozen=True, slots=True)
class EnvSnapshot:
    """Rows to render plus bookkeeping for the "N more hidden" hint.

    Secret rows are always rendered and do not count toward ``limit``.
    Enumeration stops at the first non-secret key past the cap, so
    ``hidden`` counts every key from there on, secret or not.
    """

    rows: tuple[EnvRow, ...]
    total: int
    limit: int

    @property
    def shown(self) -> int:
        return len(self.rows)

    @property
    def hidden(self) -> int:
        return self.total - self.shown

    @property
    def truncated(self) -> bool:
        return self.hidden > 0

    @property
    def masked_count(self) -> int:
        return sum(1 for row in self.rows if row.masked)


def merge_variables(
    environ: Mapping[Any, Any] | None = None,
    server: Mapping[Any, Any] | None = None,
) -> dict[Any, Any]:
    """Process environment overlaid with request server variables.

    Server variables win on key collision.
    """
    merged: dict[Any, Any] = dict(os.environ if environ is None else environ)
    if server:
        merged.update(server)
    return merged


def stringify(value: Any) -> str:
    """Render a variable value as text.

    Lists, tuples and dicts become compact JSON.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple, dict)):
        try:
            return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
        except ValueError:
            return str(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def collect_environment(
    variables: Mapping[Any, Any],
    patterns: SecretPatterns,
    limit: int = DEFAULT_LIMIT,
) -> EnvSnapshot:
    """Sort, mask and cap *variables*.

    Non-string keys are skipped and do not count toward ``total``.
    """
    keys = sorted(k for k in variables if isinstance(k, str))
    rows: list[EnvRow] = []
    plain = 0
    for key in keys:
        if patterns.matches(key):
            rows.append(EnvRow(key=key, value=REDACTED, masked=True))
            continue
        plain += 1
        if plain > limit:
            break
        rows.append(EnvRow(key=key, value=stringify(variables[key])))
    return EnvSnapshot(rows=tuple(rows), total=len(keys), limit=limit)
