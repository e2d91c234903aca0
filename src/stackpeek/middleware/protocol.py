"""The middleware shape.

Middleware is any async callable taking the request and the next step::

    async def add_server_header(request: Request, next: Next) -> Response:
        response = await next(request)
        return response.with_header("Server", "stackpeek")

Classes work too when they define ``async __call__(self, request, next)``;
the inspector gate is one.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from stackpeek.http.request import Request
from stackpeek.http.response import Response

type Next = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    async def __call__(self, request: Request, next: Next) -> Response: ...


def middleware_name(middleware: Any) -> str:
    """``__name__`` for functions, the class name for callable objects."""
    return str(getattr(middleware, "__name__", None) or type(middleware).__name__)
