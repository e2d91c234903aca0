"""Route table entries."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class Route:
    """One registered path, its handler and the methods it answers.

    ``middleware`` runs inside the app-level pipeline, for this route only.
    """

    path: str
    handler: Callable[..., Any]
    methods: frozenset[str]
    name: str | None = None
    middleware: tuple[Callable[..., Any], ...] = ()

    def allows(self, method: str) -> bool:
        """Whether *method* is served here. ``HEAD`` is implied by ``GET``."""
        if method in self.methods:
            return True
        return method == "HEAD" and "GET" in self.methods


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """The route that answered a request and the raw path parameters."""

    route: Route
    path_params: dict[str, str]
