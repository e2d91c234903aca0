"""Stackpeek: a runtime inspection page for Python web apps.

One GET renders one self-contained HTML page describing the process that
serves it: interpreter, limits, modules, host, environment variables
(secret-looking keys masked), and for a host app its drivers, database
and cache connectivity and route table.

Standalone usage::

    from stackpeek import create_app

    app = create_app()
    app.run()

Mounted on an app (served only when ``env`` is local or ``debug`` is on)::

    from stackpeek import App, AppConfig, mount_inspector

    app = App(AppConfig(env="local"), db="sqlite:///app.db")
    mount_inspector(app)          # GET /_stackpeek
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "HTTPError",
    "InspectorConfig",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "Request",
    "Response",
    "StackpeekError",
    "create_app",
    "mount_inspector",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import stackpeek`` fast while providing a clean top-level API.
    """
    if name == "App":
        from stackpeek.app import App

        return App

    if name in ("AppConfig", "InspectorConfig"):
        from stackpeek import config as _config

        return getattr(_config, name)

    if name == "Request":
        from stackpeek.http.request import Request

        return Request

    if name == "Response":
        from stackpeek.http.response import Response

        return Response

    if name in ("Middleware", "Next"):
        from stackpeek.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("create_app", "mount_inspector"):
        from stackpeek import dashboard as _dashboard

        return getattr(_dashboard, name)

    if name in (
        "ConfigurationError",
        "HTTPError",
        "MethodNotAllowed",
        "NotFound",
        "StackpeekError",
    ):
        from stackpeek import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
