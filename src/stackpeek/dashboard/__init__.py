"""The inspection pages.

Two ways to serve them::

    # Standalone: a dedicated app serving the stack page at "/"
    from stackpeek.dashboard import create_app
    app = create_app()

    # Framework: add gated pages to an existing App
    from stackpeek.dashboard import mount_inspector
    mount_inspector(app)          # /_stackpeek and /_stackpeek/stack

The mounted pages answer a bare 404 unless the app runs with a local
``env`` or with ``debug`` on.
"""

from stackpeek.app import App
from stackpeek.config import AppConfig, InspectorConfig
from stackpeek.dashboard.gate import LocalOnly, is_exposed
from stackpeek.dashboard.page import render_framework_page, render_stack_page
from stackpeek.facts.environment import collect_environment, merge_variables
from stackpeek.facts.framework import collect_framework
from stackpeek.facts.runtime import collect_runtime
from stackpeek.facts.secrets import SecretPatterns
from stackpeek.facts.system import collect_system
from stackpeek.http.request import Request
from stackpeek.http.response import Response

__all__ = [
    "LocalOnly",
    "build_stack_page",
    "create_app",
    "is_exposed",
    "mount_inspector",
    "render_framework_page",
    "render_stack_page",
]


def build_stack_page(
    app_config: AppConfig,
    inspector: InspectorConfig,
    request: Request | None = None,
) -> str:
    """Collect runtime, host and environment facts and render them."""
    patterns = SecretPatterns(inspector.secret_patterns)
    server = request.server_variables() if request is not None else None
    env = collect_environment(
        merge_variables(server=server),
        patterns,
        inspector.env_limit,
    )
    return render_stack_page(
        collect_runtime(app_config, inspector, request),
        collect_system(inspector),
        env,
        patterns=patterns,
        title=inspector.title,
    )


def mount_inspector(
    app: App,
    config: InspectorConfig | None = None,
    *,
    path: str | None = None,
) -> None:
    """Register the gated framework page and stack page on *app*.

    The gate is added as app-level middleware, so it answers for every
    method before the router runs.

    The framework page lives at ``path`` (``config.path`` by default) and
    the stack page at ``path + "/stack"``.
    """
    inspector = config or InspectorConfig()
    base = (path or inspector.path).rstrip("/") or "/"
    stack_path = "/stack" if base == "/" else f"{base}/stack"
    app.add_middleware(LocalOnly(app.config, inspector, (base, stack_path)))

    async def inspector_page() -> Response:
        facts = await collect_framework(app, inspector)
        return Response(render_framework_page(facts, title=inspector.title))

    def stack_page(request: Request) -> Response:
        return Response(build_stack_page(app.config, inspector, request))

    app.add_route(base, inspector_page, name="stackpeek.framework")
    app.add_route(stack_path, stack_page, name="stackpeek.stack")


def create_app(
    config: InspectorConfig | None = None,
    app_config: AppConfig | None = None,
) -> App:
    """A dedicated app serving the stack page at ``/``, without a gate."""
    inspector = config or InspectorConfig()
    app = App(app_config or AppConfig(name="stackpeek"))

    @app.route("/", name="stackpeek.stack")
    def index(request: Request) -> Response:
        return Response(build_stack_page(app.config, inspector, request))

    return app
