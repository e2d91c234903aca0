"""Tests for stackpeek.facts.runtime: interpreter facts."""

import platform
import sys

from stackpeek.config import AppConfig, InspectorConfig
from stackpeek.facts.probe import UNAVAILABLE
from stackpeek.facts.runtime import (
    DEBUG_OFF,
    DEBUG_ON,
    bytecode_cache_stats,
    collect_limits,
    collect_runtime,
    loaded_modules,
)


def _limits(config: AppConfig) -> dict[str, str]:
    return {row.label: row.value.display() for row in collect_limits(config)}


class TestCollectRuntime:
    def test_basic_facts(self) -> None:
        facts = collect_runtime(AppConfig(), InspectorConfig())
        assert facts.python_version == platform.python_version()
        assert facts.sys_version == sys.version
        assert facts.asgi_version == "3.0"
        assert facts.modules

    def test_limits_rows(self) -> None:
        labels = [row.label for row in collect_runtime(AppConfig(), InspectorConfig()).limits]
        assert labels[0].startswith("memory_limit")
        assert "max_content_length" in labels
        assert "debug" in labels


class TestLimits:
    def test_max_content_length_formatted(self) -> None:
        assert _limits(AppConfig())["max_content_length"] == "16.00 MB (16M)"

    def test_request_timeout(self) -> None:
        assert _limits(AppConfig(request_timeout=12.5))["request_timeout"] == "12.5 s"

    def test_debug_flag(self) -> None:
        assert _limits(AppConfig(debug=True))["debug"] == DEBUG_ON
        assert _limits(AppConfig(debug=False))["debug"] == DEBUG_OFF

    def test_rlimits_never_raise(self) -> None:
        for label, value in _limits(AppConfig()).items():
            assert value, label

    def test_missing_resource_module_degrades(self, monkeypatch) -> None:
        monkeypatch.setitem(sys.modules, "resource", None)
        limits = _limits(AppConfig())
        assert limits["memory_limit (RLIMIT_AS)"] == UNAVAILABLE
        assert limits["max_cpu_time (RLIMIT_CPU)"] == UNAVAILABLE
        assert limits["max_content_length"] == "16.00 MB (16M)"


class TestLoadedModules:
    def test_sorted_top_level_public(self) -> None:
        names = [m.name for m in loaded_modules(())]
        assert names == sorted(names)
        assert "sys" in names
        assert all(not n.startswith("_") and "." not in n for n in names)

    def test_critical_flagged(self) -> None:
        import sqlite3  # noqa: F401

        entries = {m.name: m for m in loaded_modules(("sqlite3",))}
        assert entries["sqlite3"].critical
        assert not entries["sys"].critical


class TestBytecodeCache:
    def test_disabled(self, monkeypatch) -> None:
        monkeypatch.setattr(sys, "dont_write_bytecode", True)
        stats = bytecode_cache_stats()
        assert stats.enabled is False
        assert stats.cached == 0

    def test_enabled_counts(self, monkeypatch) -> None:
        monkeypatch.setattr(sys, "dont_write_bytecode", False)
        stats = bytecode_cache_stats()
        assert stats.enabled is True
        assert stats.cached >= 0
        assert stats.missing >= 0
        assert stats.size.endswith("B")
