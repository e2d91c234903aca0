"""HTTP dispatch: one ASGI request in, one Response out.

Builds the Request, runs app middleware around routing, runs route
middleware around the handler, and maps every exception to a Response.
"""

import inspect
from collections.abc import Callable
from dataclasses import replace
from typing import Any

from stackpeek._internal.invoke import invoke
from stackpeek._internal.types import Receive, Scope, Send
from stackpeek.errors import HTTPError
from stackpeek.http.request import Request
from stackpeek.http.response import Response
from stackpeek.middleware.protocol import Next
from stackpeek.routing.route import RouteMatch
from stackpeek.routing.router import Router
from stackpeek.server.errors import handle_http_error, handle_internal_error
from stackpeek.server.negotiation import negotiate
from stackpeek.server.sender import send_response


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> None:
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope)

    async def dispatch(req: Request) -> Response:
        return await _invoke_route(router.match(req.method, req.path), req)

    try:
        response = await chain(middleware, dispatch)(request)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers, debug)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, debug)

    await send_response(response, send, head=request.method == "HEAD")


def chain(middleware: tuple[Callable[..., Any], ...], innermost: Next) -> Next:
    """Wrap *innermost* so the first middleware listed runs outermost."""
    wrapped = innermost
    for mw in reversed(middleware):

        async def step(req: Request, _mw: Any = mw, _next: Next = wrapped) -> Response:
            return await _mw(req, _next)

        wrapped = step
    return wrapped


async def _invoke_route(match: RouteMatch, request: Request) -> Response:
    route = match.route
    request = replace(request, path_params=match.path_params)

    async def call_handler(req: Request) -> Response:
        kwargs = _handler_kwargs(route.handler, req, match.path_params)
        return negotiate(await invoke(route.handler, **kwargs))

    return await chain(route.middleware, call_handler)(request)


def _handler_kwargs(
    handler: Callable[..., Any],
    request: Request,
    path_params: dict[str, str],
) -> dict[str, Any]:
    """Fill handler parameters by name.

    ``request`` (or any parameter annotated ``Request``) gets the request.
    Path parameters are passed through their annotation when it can
    convert the raw string, and as the raw string otherwise.
    """
    kwargs: dict[str, Any] = {}
    for name, param in inspect.signature(handler, eval_str=True).parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = request
            continue
        if name not in path_params:
            continue
        raw = path_params[name]
        convert = param.annotation
        if convert is inspect.Parameter.empty:
            kwargs[name] = raw
            continue
        try:
            kwargs[name] = convert(raw)
        except (ValueError, TypeError):
            kwargs[name] = raw
    return kwargs
