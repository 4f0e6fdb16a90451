"""dockwrap — drive the docker CLI from Python with live output and a daemon watchdog."""

from dockwrap.client import DockerClient, new_client
from dockwrap.errors import (
    AmbiguousImageError,
    CommandFailedError,
    DaemonConnectionLost,
    DockerError,
    ExecutableNotFoundError,
    ImageNotFoundError,
    LaunchError,
    OutputHandlerError,
    WorkdirError,
)
from dockwrap.runner import run_command
from dockwrap.types import CommandInvocation, CommandResult

__all__ = [
    "AmbiguousImageError",
    "CommandFailedError",
    "CommandInvocation",
    "CommandResult",
    "DaemonConnectionLost",
    "DockerClient",
    "DockerError",
    "ExecutableNotFoundError",
    "ImageNotFoundError",
    "LaunchError",
    "OutputHandlerError",
    "WorkdirError",
    "new_client",
    "run_command",
]
