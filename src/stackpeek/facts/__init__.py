"""Fact collectors for the inspection page.

Each collector returns frozen dataclasses and never raises: every file
read, command run or backend call is wrapped in a :class:`Probe`.
"""

from stackpeek.facts.environment import EnvRow, EnvSnapshot, collect_environment, merge_variables
from stackpeek.facts.framework import FrameworkFacts, RouteInfo, collect_framework
from stackpeek.facts.probe import Probe, attempt, read_file, run_command
from stackpeek.facts.runtime import RuntimeFacts, collect_runtime
from stackpeek.facts.secrets import REDACTED, SecretPatterns, looks_like_secret
from stackpeek.facts.system import SystemFacts, collect_system, detect_container
from stackpeek.facts.units import format_bytes, format_ini_size, parse_ini_size

__all__ = [
    "REDACTED",
    "EnvRow",
    "EnvSnapshot",
    "FrameworkFacts",
    "Probe",
    "RouteInfo",
    "RuntimeFacts",
    "SecretPatterns",
    "SystemFacts",
    "attempt",
    "collect_environment",
    "collect_framework",
    "collect_runtime",
    "collect_system",
    "detect_container",
    "format_bytes",
    "format_ini_size",
    "looks_like_secret",
    "merge_variables",
    "parse_ini_size",
    "read_file",
    "run_command",
]
