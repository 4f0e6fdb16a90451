"""Error taxonomy for docker CLI invocations.

Runner-backed operations hand these back inside a ``CommandResult``;
lookup helpers raise them.
"""

from __future__ import annotations


class DockerError(Exception):
    """Base class for every failure surfaced by dockwrap."""


class ExecutableNotFoundError(DockerError):
    """Raised when the docker executable cannot be located on PATH."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Executable not found in PATH: {name}")


class LaunchError(DockerError):
    """The process could not be started (missing binary, permissions, bad cwd)."""

    def __init__(self, command: str, cause: OSError) -> None:
        self.command = command
        self.cause = cause
        super().__init__(f"Failed to start '{command}': {cause}")


class DaemonConnectionLost(DockerError):
    """The liveness probe failed while a command was still running."""

    def __init__(self) -> None:
        super().__init__("Lost connection to Docker daemon")


class CommandFailedError(DockerError):
    """The process ran to completion but exited with a nonzero status."""

    def __init__(self, command: str, returncode: int) -> None:
        self.command = command
        self.returncode = returncode
        super().__init__(f"'{command}' exited with status {returncode}")


class AmbiguousImageError(DockerError):
    def __init__(self, image_name: str) -> None:
        self.image_name = image_name
        super().__init__(f"Multiple IDs returned for image: {image_name}")


class ImageNotFoundError(DockerError):
    def __init__(self, image_name: str) -> None:
        self.image_name = image_name
        super().__init__(f"No image ID found for image: {image_name}")


class WorkdirError(DockerError):
    def __init__(self) -> None:
        super().__init__("Unable to determine working directory")


class OutputHandlerError(DockerError):
    """The caller's on_line callback raised while output was streaming."""

    def __init__(self, command: str, cause: Exception) -> None:
        self.command = command
        self.cause = cause
        super().__init__(f"Output handler failed for '{command}': {cause}")
