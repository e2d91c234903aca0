"""Immutable HTTP request.

Frozen metadata read from the ASGI scope. The inspection page only ever
reads requests, so there is no body access beyond what the scope carries.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from stackpeek.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request."""

    method: str
    path: str
    headers: Headers
    query_string: bytes
    path_params: dict[str, str]
    http_version: str
    scheme: str
    asgi_version: str
    root_path: str
    server: tuple[str, int] | None
    client: tuple[str, int] | None

    def server_variables(self) -> dict[str, str]:
        """CGI-style view of the request, as web servers expose it.

        ``REQUEST_METHOD``, ``PATH_INFO``, ``SERVER_NAME`` and friends, plus
        one ``HTTP_*`` entry per request header. Used to enrich the
        environment snapshot the way a CGI server environment would.
        """
        variables: dict[str, str] = {
            "REQUEST_METHOD": self.method,
            "PATH_INFO": self.path,
            "SCRIPT_NAME": self.root_path,
            "QUERY_STRING": self.query_string.decode("latin-1"),
            "SERVER_PROTOCOL": f"HTTP/{self.http_version}",
            "REQUEST_SCHEME": self.scheme,
        }
        if self.server:
            variables["SERVER_NAME"] = str(self.server[0])
            variables["SERVER_PORT"] = str(self.server[1])
        if self.client:
            variables["REMOTE_ADDR"] = str(self.client[0])
            variables["REMOTE_PORT"] = str(self.client[1])
        for name in self.headers:
            key = "HTTP_" + name.upper().replace("-", "_")
            variables[key] = ", ".join(self.headers.getlist(name))
        return variables

    @classmethod
    def from_asgi(
        cls,
        scope: dict[str, Any],
        path_params: dict[str, str] | None = None,
    ) -> Request:
        """Create a Request from an ASGI scope."""
        server = scope.get("server")
        client = scope.get("client")
        asgi = scope.get("asgi") or {}
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(tuple(scope.get("headers", ()))),
            query_string=scope.get("query_string", b""),
            path_params=path_params or {},
            http_version=scope.get("http_version", "1.1"),
            scheme=scope.get("scheme", "http"),
            asgi_version=str(asgi.get("version", "3.0")),
            root_path=scope.get("root_path", ""),
            server=tuple(server) if server else None,
            client=tuple(client) if client else None,
        )
