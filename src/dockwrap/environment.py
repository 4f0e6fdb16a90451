"""Startup environment probes: executable discovery and container detection."""

from __future__ import annotations

import re
import shutil
from pathlib import Path

from dockwrap.errors import ExecutableNotFoundError

CGROUP_PATH = Path("/proc/1/cgroup")

# cgroupfs driver:  "4:memory:/docker/<id>"
# systemd driver:   "0::/system.slice/docker-<id>.scope"
_CONTAINER_ID_PATTERNS = (
    re.compile(r":/docker/([a-z0-9]+)$"),
    re.compile(r"/docker-([0-9a-f]+)\.scope$"),
)


def detect_parent_container(path: Path | str = CGROUP_PATH) -> str:
    """Return the ID of the container this process runs in, or "" if none.

    Scans the cgroup file once and returns the first container ID found.
    Raises OSError if the file cannot be opened or read.
    """
    with open(path, encoding="utf-8", errors="replace") as f:
        for line in f:
            line = line.rstrip("\n")
            for pattern in _CONTAINER_ID_PATTERNS:
                if match := pattern.search(line):
                    return match.group(1)
    return ""


def find_executable(name: str = "docker") -> str:
    """Resolve *name* on PATH."""
    path = shutil.which(name)
    if path is None:
        raise ExecutableNotFoundError(name)
    return path
