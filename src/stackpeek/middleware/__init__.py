"""Middleware: callables wrapping the request pipeline.

App-level middleware wraps every request; route-level middleware wraps a
single handler. Both are listed by name on the inspection page.
"""

from stackpeek.middleware.protocol import Middleware, Next, middleware_name

__all__ = ["Middleware", "Next", "middleware_name"]
