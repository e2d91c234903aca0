"""Best-effort probes that return a value or an explicit "unavailable".

Every file read, command run or library call made while collecting facts
goes through :func:`attempt` (or one of the helpers built on it). The
caller gets a :class:`Probe` back and never an exception, so one failing
source cannot stop the rest of the page from rendering.
"""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger("stackpeek.facts")

UNAVAILABLE = "Not available"


@dataclass(frozen=True, slots=True)
class Probe[T]:
    """Outcome of one best-effort probe.

    ``error`` is ``None`` when the probe produced ``value``; otherwise it
    holds a short reason and ``value`` is ``None``.
    """

    value: T | None = None
    error: str | None = None

    @classmethod
    def available(cls, value: T) -> Probe[T]:
        return cls(value=value)

    @classmethod
    def unavailable(cls, reason: str) -> Probe[T]:
        return cls(error=reason or "unavailable")

    @property
    def ok(self) -> bool:
        return self.error is None

    def get(self, default: Any = None) -> T | Any:
        """The value, or *default* when the probe failed."""
        return self.value if self.ok else default

    def display(self, default: str = UNAVAILABLE) -> str:
        """Text for the page.

        Unavailable probes and available-but-empty values render the same
        *default* text.
        """
        if not self.ok or self.value is None:
            return default
        text = str(self.value)
        return text if text.strip() else default


def attempt[T](func: Callable[..., T], *args: Any, **kwargs: Any) -> Probe[T]:
    """Call *func* once and capture the result or the failure."""
    try:
        return Probe.available(func(*args, **kwargs))
    except Exception as exc:
        name = getattr(func, "__qualname__", repr(func))
        logger.debug("probe %s failed: %s", name, exc)
        return Probe.unavailable(f"{type(exc).__name__}: {exc}")


async def attempt_async[T](
    func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
) -> Probe[T]:
    """Await ``func(*args, **kwargs)`` once and capture the outcome."""
    try:
        return Probe.available(await func(*args, **kwargs))
    except Exception as exc:
        name = getattr(func, "__qualname__", repr(func))
        logger.debug("probe %s failed: %s", name, exc)
        return Probe.unavailable(f"{type(exc).__name__}: {exc}")


def read_file(path: str | Path, max_bytes: int = 8192) -> Probe[str]:
    """Read at most *max_bytes* of a text file, stripped.

    Missing paths, directories and unreadable files are unavailable.
    """
    target = Path(path)

    def _read() -> str:
        if target.is_dir():
            msg = f"{target} is a directory"
            raise IsADirectoryError(msg)
        with target.open("r", encoding="utf-8", errors="replace") as fh:
            return fh.read(max_bytes).strip()

    return attempt(_read)


def path_exists(path: str | Path) -> bool:
    """True if *path* exists or is a (possibly dangling) symlink."""
    target = Path(path)
    result = attempt(lambda: target.is_symlink() or target.exists())
    return bool(result.get(False))


def run_command(args: Sequence[str], *, timeout: float | None = None) -> Probe[str]:
    """Run an external command and return its stripped stdout.

    A missing binary, a non-zero exit status or empty output all make
    the probe unavailable. Stderr is discarded. No timeout is applied
    unless the caller passes one.
    """
    if not args:
        return Probe.unavailable("empty command")

    def _run() -> str:
        completed = subprocess.run(
            list(args),
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            stdin=subprocess.DEVNULL,
            text=True,
            timeout=timeout,
            check=True,
        )
        output = completed.stdout.strip()
        if not output:
            msg = f"{args[0]} produced no output"
            raise ValueError(msg)
        return output

    return attempt(_run)
