"""Exception to Response mapping.

``HTTPError`` becomes its own status; anything else becomes a 500.
A handler registered with ``@app.error(...)`` gets the first say.
"""

import html
import inspect
import logging
import traceback
from collections.abc import Callable
from typing import Any

from stackpeek._internal.invoke import invoke
from stackpeek.errors import HTTPError
from stackpeek.http.request import Request
from stackpeek.http.response import Response
from stackpeek.server.negotiation import negotiate

logger = logging.getLogger("stackpeek.server")


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
) -> Response:
    """Call *handler* with as many of ``(request, exc)`` as it accepts."""
    arity = len(inspect.signature(handler).parameters)
    args = (request, exc)[: min(arity, 2)]
    return negotiate(await invoke(handler, *args))


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> Response:
    """Map an HTTPError to a Response.

    An empty ``detail`` gives an empty body: gated pages answer a bare 404.
    """
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        # A handler that did not pick a status keeps the error's
        return response if response.status != 200 else response.with_status(exc.status)

    body = html.escape(f"{exc.status}: {exc.detail}" if debug and exc.detail else exc.detail)
    return Response(body=body, status=exc.status, headers=exc.headers)


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> Response:
    """Log the exception and answer 500, with the traceback in debug mode."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = error_handlers.get(500) or error_handlers.get(type(exc))
    if handler is not None:
        return await call_error_handler(handler, request, exc)

    if not debug:
        return Response(body="Internal Server Error", status=500)

    formatted = html.escape("".join(traceback.format_exception(exc)))
    return Response(
        body=f"<!DOCTYPE html><title>500 Internal Server Error</title><pre>{formatted}</pre>",
        status=500,
    )
