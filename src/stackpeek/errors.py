"""Exceptions raised across stackpeek.

HTTP errors carry their status, so handlers and middleware can raise
them and the request pipeline turns them into responses.
"""

from dataclasses import dataclass


class StackpeekError(Exception):
    """Root of every stackpeek exception."""


class ConfigurationError(StackpeekError):
    """Invalid configuration, such as an unknown cache driver or a malformed route path."""


@dataclass(frozen=True, slots=True)
class HTTPError(StackpeekError):
    """Abort the request with ``status``.

    ``detail`` is the plain-text body (HTML-escaped on the way out) and
    ``headers`` are added to the response. An ``@app.error(status)``
    handler, when registered, replaces the default body.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        return f"{self.status}: {self.detail}" if self.detail else str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404. Raised for unmatched paths and by the inspector gate."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405, with an ``Allow`` header naming the methods the path serves."""

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow = ", ".join(sorted(allowed))
        super().__init__(
            status=405,
            detail=detail or f"Method not allowed. Allowed methods: {allow}",
            headers=(("Allow", allow),),
        )


class CacheError(StackpeekError):
    """A cache backend failed to store or return a value."""
