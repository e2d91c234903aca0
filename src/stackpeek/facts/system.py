"""Host facts: OS release, control group, container hint, identity, tools."""

import getpass
import os
import socket
from dataclasses import dataclass
from pathlib import Path

import stackpeek
from stackpeek.config import InspectorConfig
from stackpeek.facts.probe import Probe, attempt, path_exists, read_file, run_command

CONTAINER_MARKERS = ("docker", "kubepods")


@dataclass(frozen=True, slots=True)
class ToolVersions:
    package_manager: Probe[str]
    git_branch: Probe[str]
    git_commit: Probe[str]


@dataclass(frozen=True, slots=True)
class SystemFacts:
    hostname: str
    user: Probe[str]
    cwd: Probe[str]
    script: str
    os_release: Probe[str]
    cgroup: Probe[str]
    in_container: bool
    tools: ToolVersions


def detect_container(marker_exists: bool, cgroup_text: str | None) -> bool:
    """Advisory "running in a container" signal.

    True if the marker file exists or the control-group text mentions
    docker or kubepods. An unreadable cgroup file is passed as ``None``.
    """
    if marker_exists:
        return True
    if not cgroup_text:
        return False
    return any(marker in cgroup_text for marker in CONTAINER_MARKERS)


def hostname() -> str:
    """``socket.gethostname()``, then ``$HOSTNAME``, then ``"N/A"``."""
    name = attempt(socket.gethostname).get("")
    return name or os.environ.get("HOSTNAME") or "N/A"


def shorten_home(path: str, home: str | None = None) -> str:
    """Replace a leading ``$HOME`` with ``~``."""
    home = os.environ.get("HOME", "") if home is None else home
    home = home.rstrip("/")
    if home and (path == home or path.startswith(home + "/")):
        return "~" + path[len(home) :]
    return path


def collect_tools(inspector: InspectorConfig) -> ToolVersions:
    return ToolVersions(
        package_manager=run_command(inspector.package_manager_command),
        git_branch=run_command(inspector.git_branch_command),
        git_commit=run_command(inspector.git_commit_command),
    )


def collect_system(inspector: InspectorConfig) -> SystemFacts:
    """Gather host facts. Never raises."""
    cgroup = read_file(inspector.cgroup_path)
    marker = path_exists(inspector.container_marker_path)
    return SystemFacts(
        hostname=hostname(),
        user=attempt(getpass.getuser),
        cwd=attempt(lambda: shorten_home(os.getcwd())),
        script=shorten_home(str(Path(stackpeek.__file__).resolve().parent)),
        os_release=read_file(inspector.os_release_path),
        cgroup=cgroup,
        in_container=detect_container(marker, cgroup.get()),
        tools=collect_tools(inspector),
    )
