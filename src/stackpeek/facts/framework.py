"""Host application facts: drivers, connectivity, packages, routes."""

import importlib.metadata
import importlib.util
import os
import platform
from dataclasses import dataclass
from pathlib import Path

import stackpeek
from stackpeek.app import App
from stackpeek.cache import Cache
from stackpeek.config import InspectorConfig
from stackpeek.data.database import detect_driver
from stackpeek.facts.probe import Probe, attempt, attempt_async, path_exists
from stackpeek.facts.system import shorten_home
from stackpeek.middleware.protocol import middleware_name
from stackpeek.routing.route import Route

CACHE_CHECK_KEY = "__stackpeek_check__"
CACHE_CHECK_VALUE = "ok"
CACHE_CHECK_TTL = 60


@dataclass(frozen=True, slots=True)
class RouteInfo:
    """One row of the route table."""

    methods: frozenset[str]
    path: str
    name: str | None
    handler: str
    middleware: tuple[str, ...] = ()

    @property
    def method_label(self) -> str:
        return "|".join(sorted(self.methods))


@dataclass(frozen=True, slots=True)
class DriverStatus:
    label: str
    driver: str


@dataclass(frozen=True, slots=True)
class ConnectivityCheck:
    """Outcome of one live round-trip against a backend."""

    configured: bool
    result: Probe[bool]

    @property
    def ok(self) -> bool:
        return self.configured and bool(self.result.get(False))

    @property
    def detail(self) -> str:
        if not self.configured:
            return "not configured"
        if self.ok:
            return "OK"
        return self.result.error or "KO"


@dataclass(frozen=True, slots=True)
class PackageSummary:
    total: int
    sample: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ModuleCheck:
    name: str
    importable: bool


@dataclass(frozen=True, slots=True)
class FrameworkFacts:
    name: str
    env: str
    debug: bool
    url: str
    project_path: Probe[str]
    version: str
    python_version: str
    drivers: tuple[DriverStatus, ...]
    database: ConnectivityCheck
    cache: ConnectivityCheck
    static_dir: str
    static_present: bool
    packages: Probe[PackageSummary]
    modules: tuple[ModuleCheck, ...]
    routes: tuple[RouteInfo, ...]


async def collect_framework(app: App, inspector: InspectorConfig) -> FrameworkFacts:
    """Gather facts about *app*. Never raises; backend failures become KO checks."""
    config = app.config
    static_dir = str(config.static_dir) if config.static_dir else ""
    return FrameworkFacts(
        name=config.name,
        env=config.env,
        debug=config.debug,
        url=config.url,
        project_path=attempt(lambda: shorten_home(os.getcwd())),
        version=stackpeek.__version__,
        python_version=platform.python_version(),
        drivers=collect_drivers(app),
        database=await check_database(app),
        cache=check_cache(app.cache),
        static_dir=static_dir,
        static_present=bool(static_dir) and path_exists(Path(static_dir)),
        packages=attempt(installed_packages, inspector.package_sample_size),
        modules=check_modules(inspector.checked_modules),
        routes=collect_routes(app),
    )


def collect_drivers(app: App) -> tuple[DriverStatus, ...]:
    config = app.config
    if app.has_db:
        database = attempt(detect_driver, app.db.url).get("unknown")
    else:
        database = "none"
    return (
        DriverStatus("cache", config.cache_driver),
        DriverStatus("queue", config.queue_driver),
        DriverStatus("mail", config.mail_driver),
        DriverStatus("session", config.session_driver),
        DriverStatus("database", database),
    )


async def check_database(app: App) -> ConnectivityCheck:
    """One ``SELECT 1`` through the app's database."""
    if not app.has_db:
        return ConnectivityCheck(configured=False, result=Probe.unavailable("not configured"))

    async def _ping() -> bool:
        await app.db.ping()
        return True

    return ConnectivityCheck(configured=True, result=await attempt_async(_ping))


def _cache_roundtrip(cache: Cache) -> bool:
    cache.put(CACHE_CHECK_KEY, CACHE_CHECK_VALUE, CACHE_CHECK_TTL)
    return cache.get(CACHE_CHECK_KEY) == CACHE_CHECK_VALUE


def check_cache(cache: Cache) -> ConnectivityCheck:
    """Put then get a sentinel value. Any mismatch or failure is KO."""
    return ConnectivityCheck(configured=True, result=attempt(_cache_roundtrip, cache))


def installed_packages(sample_size: int = 12) -> PackageSummary:
    """Installed distributions as ``name version``, sorted by name."""
    seen: dict[str, str] = {}
    for dist in importlib.metadata.distributions():
        name = dist.metadata["Name"]
        if name:
            seen.setdefault(name.lower(), f"{name} {dist.version}")
    ordered = [seen[key] for key in sorted(seen)]
    return PackageSummary(total=len(ordered), sample=tuple(ordered[:sample_size]))


def check_modules(names: tuple[str, ...]) -> tuple[ModuleCheck, ...]:
    def _importable(name: str) -> bool:
        return importlib.util.find_spec(name) is not None

    return tuple(
        ModuleCheck(name=name, importable=bool(attempt(_importable, name).get(False)))
        for name in names
    )


def describe_handler(handler: object) -> str:
    """``module.qualname`` for functions, the class path for callables."""
    qualname = getattr(handler, "__qualname__", None) or type(handler).__qualname__
    module = getattr(handler, "__module__", None) or type(handler).__module__
    return f"{module}.{qualname}" if module else qualname


def route_info(route: Route, app_middleware: tuple[object, ...] = ()) -> RouteInfo:
    return RouteInfo(
        methods=route.methods,
        path=route.path or "/",
        name=route.name,
        handler=describe_handler(route.handler),
        middleware=tuple(middleware_name(mw) for mw in (*app_middleware, *route.middleware)),
    )


def collect_routes(app: App) -> tuple[RouteInfo, ...]:
    """Every registered route, sorted by path then by method list."""
    app_middleware = app.middleware
    rows = [route_info(route, app_middleware) for route in app.routes]
    return tuple(sorted(rows, key=lambda r: (r.path, r.method_label)))
