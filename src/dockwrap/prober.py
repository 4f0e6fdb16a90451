"""Daemon liveness probe — `docker info` exit status, no caching."""

from __future__ import annotations

import asyncio
from typing import Protocol, runtime_checkable

from dockwrap.environment import find_executable
from dockwrap.logger import logger


@runtime_checkable
class LivenessProber(Protocol):
    """Anything the runner's watchdog can poll."""

    async def is_connected(self) -> bool: ...


class DaemonProber:
    """Stateless handle that checks whether the docker daemon is reachable."""

    def __init__(self, executable: str) -> None:
        self.executable = executable

    @classmethod
    def discover(cls, name: str = "docker") -> DaemonProber:
        """Build a prober from a PATH lookup (raises ExecutableNotFoundError)."""
        return cls(find_executable(name))

    async def is_connected(self) -> bool:
        try:
            proc = await asyncio.create_subprocess_exec(
                self.executable,
                "info",
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as exc:
            logger.debug("docker info failed to start", executable=self.executable, err=str(exc))
            return False
        return await proc.wait() == 0
