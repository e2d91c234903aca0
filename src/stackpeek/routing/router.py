"""Compiled router with regex path matching.

Each route path is compiled to an anchored regex at ``add()`` time.
Matching tries routes from the most static to the most dynamic, so
``/users/me`` wins over ``/users/{name}`` regardless of registration
order.
"""

import re
from dataclasses import dataclass

from stackpeek.errors import ConfigurationError, MethodNotAllowed, NotFound
from stackpeek.routing.params import CONVERTERS
from stackpeek.routing.route import Route, RouteMatch

_PARAM = re.compile(r"^\{(?P<name>[A-Za-z_][A-Za-z0-9_]*)(?::(?P<type>[a-z]+))?\}$")


def compile_path(path: str) -> tuple[re.Pattern[str], int]:
    """Compile a route path into a regex and its static segment count.

    Examples::

        "/users"             -> ^/users$
        "/users/{id:int}"    -> ^/users/(?P<id>\\d+)$
        "/files/{rest:path}" -> ^/files/(?P<rest>.+)$
    """
    parts: list[str] = []
    static = 0
    for segment in path.strip("/").split("/"):
        if not segment:
            continue
        if segment.startswith("<") and segment.endswith(">"):
            msg = (
                f"Route path {path!r} uses <param> syntax; "
                "stackpeek expects {param} or {param:type}."
            )
            raise ConfigurationError(msg)
        param = _PARAM.match(segment)
        if param is None:
            parts.append(re.escape(segment))
            static += 1
            continue
        param_type = param.group("type") or "str"
        if param_type not in CONVERTERS:
            msg = f"Unknown converter {param_type!r} in route path {path!r}"
            raise ConfigurationError(msg)
        parts.append(f"(?P<{param.group('name')}>{CONVERTERS[param_type]})")
    pattern = "^/" + "/".join(parts) + "$"
    return re.compile(pattern), static


@dataclass(frozen=True, slots=True)
class _CompiledRoute:
    route: Route
    regex: re.Pattern[str]
    static: int
    order: int


class Router:
    """Compiled route table.

    Usage::

        router = Router()
        router.add(Route("/users", handler, frozenset({"GET"})))
        router.add(Route("/users/{id:int}", handler, frozenset({"GET"})))
        router.compile()
        match = router.match("GET", "/users/42")
    """

    __slots__ = ("_compiled", "_entries")

    def __init__(self) -> None:
        self._entries: list[_CompiledRoute] = []
        self._compiled = False

    def add(self, route: Route) -> None:
        """Add a route to the router. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        regex, static = compile_path(route.path)
        self._entries.append(_CompiledRoute(route, regex, static, len(self._entries)))

    @property
    def routes(self) -> list[Route]:
        """Return all registered routes in registration order."""
        return [entry.route for entry in sorted(self._entries, key=lambda e: e.order)]

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._entries.sort(key=lambda e: (-e.static, e.order))
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request path and method against compiled routes.

        Returns a ``RouteMatch`` on success.
        Raises ``NotFound`` if no route matches the path.
        Raises ``MethodNotAllowed`` if the path matches but the method doesn't.
        """
        normalized = "/" + path.strip("/")
        allowed: set[str] = set()
        for entry in self._entries:
            found = entry.regex.match(normalized)
            if found is None:
                continue
            if entry.route.allows(method):
                return RouteMatch(route=entry.route, path_params=found.groupdict())
            allowed.update(entry.route.methods)

        if allowed:
            raise MethodNotAllowed(frozenset(allowed))
        raise NotFound(f"No route matches {method} {path!r}")
