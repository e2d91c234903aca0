"""Immutable HTTP response.

Handlers return one directly or return a plain value that content
negotiation turns into one. Changes go through ``with_*()`` copies.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class Response:
    """A status, a content type, extra headers and a body.

    ::

        Response("<h1>Gone</h1>").with_status(410).with_header("Cache-Control", "no-store")
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    def with_status(self, status: int) -> Response:
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        return self.with_headers(((name, value),))

    def with_headers(
        self,
        headers: Mapping[str, str] | Iterable[tuple[str, str]],
    ) -> Response:
        """Append headers, given as a mapping or as ``(name, value)`` pairs."""
        pairs = headers.items() if isinstance(headers, Mapping) else headers
        return replace(self, headers=(*self.headers, *pairs))

    def with_content_type(self, content_type: str) -> Response:
        return replace(self, content_type=content_type)

    @property
    def body_bytes(self) -> bytes:
        body = self.body
        return body.encode("utf-8") if isinstance(body, str) else body

    @property
    def text(self) -> str:
        body = self.body
        return body if isinstance(body, str) else body.decode("utf-8")
