"""Data models for dockwrap."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from dockwrap.errors import DockerError

# Called with each captured line (terminator stripped) as it arrives
OnLine = Callable[[str], Awaitable[None]]


@dataclass(frozen=True)
class CommandInvocation:
    executable: str
    args: tuple[str, ...]
    workdir: str | None = None  # None → inherit the caller's cwd

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.args]

    @property
    def command_string(self) -> str:
        """Space-joined argv, for display only (no quoting)."""
        return " ".join(self.argv)


@dataclass(frozen=True)
class CommandResult:
    """Final outcome of one docker CLI invocation."""

    command: str  # invocation string, see CommandInvocation.command_string
    output: str = ""
    error: DockerError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> CommandResult:
        """Raise the carried error, if any; otherwise return self for chaining."""
        if self.error is not None:
            raise self.error
        return self
