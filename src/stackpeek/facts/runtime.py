"""Interpreter facts: version, server interface, limits, modules, bytecode cache."""

import importlib.metadata
import logging
import os
import platform
import site
import sys
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType

from stackpeek.config import AppConfig, InspectorConfig
from stackpeek.facts.probe import Probe, attempt
from stackpeek.facts.system import shorten_home
from stackpeek.facts.units import format_bytes, format_ini_size, limit_token
from stackpeek.http.request import Request

logger = logging.getLogger("stackpeek.facts")

# Checked in order; the first one imported in this process is reported.
KNOWN_SERVERS = ("uvicorn", "hypercorn", "granian", "daphne", "pounce")

DEBUG_ON = "On ⚠️"
DEBUG_OFF = "Off ✅"


@dataclass(frozen=True, slots=True)
class LimitRow:
    label: str
    value: Probe[str]


@dataclass(frozen=True, slots=True)
class ModuleEntry:
    name: str
    critical: bool = False


@dataclass(frozen=True, slots=True)
class ConfigFiles:
    pyvenv: Probe[str]
    pth_files: Probe[tuple[str, ...]]


@dataclass(frozen=True, slots=True)
class BytecodeCacheStats:
    enabled: bool
    prefix: str | None = None
    cached: int = 0
    missing: int = 0
    total_bytes: int = 0

    @property
    def size(self) -> str:
        return format_bytes(self.total_bytes)


@dataclass(frozen=True, slots=True)
class RuntimeFacts:
    python_version: str
    implementation: str
    sys_version: str
    os_name: str
    platform: str
    executable: str
    document_root: str
    asgi_version: str
    server_software: Probe[str]
    limits: tuple[LimitRow, ...]
    modules: tuple[ModuleEntry, ...]
    config_files: ConfigFiles
    bytecode: Probe[BytecodeCacheStats]

    @property
    def critical_modules(self) -> tuple[ModuleEntry, ...]:
        return tuple(m for m in self.modules if m.critical)


def collect_runtime(
    app_config: AppConfig,
    inspector: InspectorConfig,
    request: Request | None = None,
) -> RuntimeFacts:
    """Gather interpreter facts. Never raises."""
    return RuntimeFacts(
        python_version=platform.python_version(),
        implementation=platform.python_implementation(),
        sys_version=sys.version,
        os_name=platform.system() or os.name,
        platform=platform.platform(),
        executable=sys.executable or "",
        document_root=document_root(app_config, request),
        asgi_version=request.asgi_version if request is not None else "3.0",
        server_software=attempt(detect_server_software),
        limits=collect_limits(app_config),
        modules=loaded_modules(inspector.critical_modules),
        config_files=ConfigFiles(
            pyvenv=attempt(find_pyvenv_cfg),
            pth_files=attempt(find_pth_files),
        ),
        bytecode=attempt(bytecode_cache_stats),
    )


def document_root(app_config: AppConfig, request: Request | None = None) -> str:
    """Absolute static directory, else the request's ``root_path``, else ``""``."""
    if app_config.static_dir:
        return shorten_home(os.path.abspath(app_config.static_dir))
    if request is not None:
        return request.root_path
    return ""


def detect_server_software() -> str:
    """Name and version of the ASGI server imported in this process."""
    for name in KNOWN_SERVERS:
        if name in sys.modules:
            try:
                return f"{name}/{importlib.metadata.version(name)}"
            except importlib.metadata.PackageNotFoundError:
                return name
    msg = "no known ASGI server imported"
    raise LookupError(msg)


# -- Limits --


def _rlimit(name: str) -> int | None:
    """Soft limit for ``resource.<name>``, ``None`` when unlimited."""
    import resource

    soft, _hard = resource.getrlimit(getattr(resource, name))
    if soft == resource.RLIM_INFINITY:
        return None
    return soft


def _size_limit(name: str) -> Probe[str]:
    return attempt(lambda: format_ini_size(limit_token(_rlimit(name))))


def _cpu_limit() -> str:
    seconds = _rlimit("RLIMIT_CPU")
    if seconds is None:
        return format_ini_size("-1")
    return f"{seconds} s"


def collect_limits(app_config: AppConfig) -> tuple[LimitRow, ...]:
    """Process rlimits next to the host app's own request limits."""
    return (
        LimitRow("memory_limit (RLIMIT_AS)", _size_limit("RLIMIT_AS")),
        LimitRow("data_segment (RLIMIT_DATA)", _size_limit("RLIMIT_DATA")),
        LimitRow("max_file_size (RLIMIT_FSIZE)", _size_limit("RLIMIT_FSIZE")),
        LimitRow(
            "max_content_length",
            attempt(lambda: format_ini_size(limit_token(app_config.max_content_length))),
        ),
        LimitRow("max_cpu_time (RLIMIT_CPU)", attempt(_cpu_limit)),
        LimitRow("request_timeout", Probe.available(f"{app_config.request_timeout:g} s")),
        LimitRow("debug", Probe.available(DEBUG_ON if app_config.debug else DEBUG_OFF)),
    )


# -- Modules --


def loaded_modules(critical: tuple[str, ...]) -> tuple[ModuleEntry, ...]:
    """Sorted top-level public module names, with critical ones flagged."""
    names = {name.partition(".")[0] for name in tuple(sys.modules)}
    critical_set = set(critical)
    return tuple(
        ModuleEntry(name=name, critical=name in critical_set)
        for name in sorted(names)
        if name and not name.startswith("_")
    )


# -- Configuration files --


def find_pyvenv_cfg() -> str:
    path = Path(sys.prefix) / "pyvenv.cfg"
    if not path.is_file():
        msg = f"{path} not found"
        raise FileNotFoundError(msg)
    return str(path)


def _site_directories() -> list[str]:
    directories = list(site.getsitepackages())
    user_site = site.getusersitepackages()
    if isinstance(user_site, str):
        directories.append(user_site)
    return directories


def find_pth_files() -> tuple[str, ...]:
    """``.pth`` files scanned at startup, across all site directories."""
    found: list[str] = []
    for directory in _site_directories():
        base = Path(directory)
        if base.is_dir():
            found.extend(str(p) for p in sorted(base.glob("*.pth")))
    return tuple(found)


# -- Bytecode cache --


def _cached_path(module: ModuleType) -> str | None:
    spec = getattr(module, "__spec__", None)
    if spec is None or not spec.has_location or not spec.origin:
        return None
    if not spec.origin.endswith(".py"):
        return None
    return spec.cached or ""


def bytecode_cache_stats() -> BytecodeCacheStats:
    """Count imported source modules with and without a ``.pyc`` on disk."""
    if sys.dont_write_bytecode:
        return BytecodeCacheStats(enabled=False, prefix=sys.pycache_prefix)

    cached = missing = total = 0
    for module in tuple(sys.modules.values()):
        pyc = _cached_path(module)
        if pyc is None:
            continue
        try:
            size = os.stat(pyc).st_size if pyc else None
        except OSError:
            size = None
        if size is None:
            missing += 1
        else:
            cached += 1
            total += size
    logger.debug("bytecode cache: %d cached, %d missing", cached, missing)
    return BytecodeCacheStats(
        enabled=True,
        prefix=sys.pycache_prefix,
        cached=cached,
        missing=missing,
        total_bytes=total,
    )
