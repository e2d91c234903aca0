"""Access gate for the mounted inspection pages.

The pages are only served when the app runs in a local posture or with
debug on. Everywhere else any request to them, whatever its method,
answers a bare 404 before routing or fact collection.
"""

import logging
from collections.abc import Iterable

from stackpeek.config import AppConfig, InspectorConfig
from stackpeek.errors import NotFound
from stackpeek.http.request import Request
from stackpeek.http.response import Response
from stackpeek.middleware.protocol import Next

logger = logging.getLogger("stackpeek.server")


def is_exposed(app_config: AppConfig, inspector: InspectorConfig) -> bool:
    """True when the environment is local/development or debug is on."""
    if app_config.debug:
        return True
    return app_config.env.strip().lower() in inspector.local_environments


def _normalize(path: str) -> str:
    return "/" + path.strip("/")


class LocalOnly:
    """App-level middleware hiding the inspector paths outside local environments.

    Runs ahead of the router, so a hidden path never produces a 405 or an
    ``Allow`` header. Other paths pass through untouched.
    """

    __slots__ = ("_app_config", "_inspector", "_paths")

    def __init__(
        self,
        app_config: AppConfig,
        inspector: InspectorConfig,
        paths: Iterable[str],
    ) -> None:
        self._app_config = app_config
        self._inspector = inspector
        self._paths = frozenset(_normalize(p) for p in paths)

    @property
    def paths(self) -> frozenset[str]:
        return self._paths

    async def __call__(self, request: Request, next: Next) -> Response:
        if _normalize(request.path) in self._paths and not is_exposed(
            self._app_config, self._inspector
        ):
            logger.debug(
                "inspector hidden: %s %s env=%r",
                request.method,
                request.path,
                self._app_config.env,
            )
            raise NotFound("")
        return await next(request)
