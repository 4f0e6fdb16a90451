"""Docker CLI client — one coroutine per supported docker operation.

build and run stream through :func:`dockwrap.runner.run_command` under the
daemon watchdog. push, pull, images and tag are one-shot captures without
streaming or watchdog; they run in a thread via ``asyncio.to_thread`` so
they don't block the event loop.
"""

from __future__ import annotations

import asyncio
import os
import subprocess
from collections.abc import Sequence

from dockwrap.config import (
    DEFAULT_DOCKERFILE,
    DEFAULT_PROBE_INTERVAL,
    DEFAULT_REGISTRY_HOST,
    Settings,
    get_settings,
)
from dockwrap.environment import detect_parent_container, find_executable
from dockwrap.errors import (
    AmbiguousImageError,
    CommandFailedError,
    DockerError,
    ImageNotFoundError,
    LaunchError,
    WorkdirError,
)
from dockwrap.logger import logger
from dockwrap.prober import DaemonProber
from dockwrap.runner import run_command
from dockwrap.types import CommandInvocation, CommandResult, OnLine


def _run_sync(argv: list[str], *, merge_stderr: bool) -> subprocess.CompletedProcess[str]:
    """Run a docker CLI command to completion (blocking — internal only)."""
    return subprocess.run(
        argv,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT if merge_stderr else subprocess.DEVNULL,
        text=True,
        errors="replace",
        check=False,
    )


class DockerClient:
    """Drives the docker CLI.

    ``show_output`` and ``registry_host`` may be changed between calls. The
    client holds no lock, so don't change them while calls are in flight.
    """

    def __init__(
        self,
        command: str,
        *,
        dockerfile: str = DEFAULT_DOCKERFILE,
        registry_host: str = DEFAULT_REGISTRY_HOST,
        parent_container_id: str | None = None,
        show_output: bool = False,
        probe_interval: float = DEFAULT_PROBE_INTERVAL,
        kill_on_daemon_loss: bool = False,
        read_limit: int = 1048576,
    ) -> None:
        self.command = command
        self.dockerfile = dockerfile
        self.registry_host = registry_host
        self.parent_container_id = parent_container_id
        self.show_output = show_output
        self.probe_interval = probe_interval
        self.kill_on_daemon_loss = kill_on_daemon_loss
        self.read_limit = read_limit

    @property
    def is_in_container(self) -> bool:
        return bool(self.parent_container_id)

    def __repr__(self) -> str:
        return (
            f"DockerClient(command={self.command!r}, registry_host={self.registry_host!r}, "
            f"parent_container_id={self.parent_container_id!r})"
        )

    # --- Daemon ---

    async def is_connected(self) -> bool:
        return await DaemonProber(self.command).is_connected()

    def version(self) -> str:
        """Not implemented: always returns ""."""
        return ""

    # --- Streaming operations ---

    async def _stream(
        self, workdir: str | None, args: list[str], on_line: OnLine | None
    ) -> CommandResult:
        return await run_command(
            self.show_output,
            workdir,
            self.command,
            *args,
            prober=DaemonProber(self.command),
            probe_interval=self.probe_interval,
            kill_on_daemon_loss=self.kill_on_daemon_loss,
            on_line=on_line,
            read_limit=self.read_limit,
        )

    async def build(
        self,
        image_name: str,
        build_context_dir: str,
        *args: str,
        on_line: OnLine | None = None,
    ) -> CommandResult:
        """``docker build -f <dockerfile> -t <image_name> [args...] .`` in the context dir."""
        cmd_args = ["build", "-f", self.dockerfile, "-t", image_name, *args, "."]
        return await self._stream(build_context_dir, cmd_args, on_line)

    async def run(
        self,
        image_name: str,
        command: Sequence[str] = (),
        volumes: Sequence[str] = (),
        env_vars: Sequence[str] = (),
        *args: str,
        on_line: OnLine | None = None,
    ) -> CommandResult:
        """``docker run -v.. -e.. [args...] <image_name> [command...]`` in the current dir.

        *volumes* are ``host:container[:mode]`` specs and *env_vars* are
        ``KEY=VALUE`` pairs, each passed through verbatim.
        """
        cmd_args = ["run"]
        for v in volumes:
            cmd_args += ["-v", v]
        for e in env_vars:
            cmd_args += ["-e", e]
        cmd_args += [*args, image_name, *command]

        try:
            workdir = os.getcwd()
        except OSError:
            logger.error("Unable to determine working directory")
            return CommandResult(command="", error=WorkdirError())
        return await self._stream(workdir, cmd_args, on_line)

    # --- One-shot operations ---

    def resolve_image_name(self, image_name: str) -> str:
        """Prefix *image_name* with the registry host unless it is the default."""
        if self.registry_host != DEFAULT_REGISTRY_HOST:
            return f"{self.registry_host}/{image_name}"
        return image_name

    async def _oneshot(self, *args: str, merge_stderr: bool = True) -> CommandResult:
        invocation = CommandInvocation(self.command, args)
        command = invocation.command_string
        try:
            proc = await asyncio.to_thread(_run_sync, invocation.argv, merge_stderr=merge_stderr)
        except OSError as exc:
            logger.warning("Failed to start docker command", command=command, err=str(exc))
            return CommandResult(command=command, error=LaunchError(command, exc))
        if proc.returncode != 0:
            logger.warning("Docker command failed", command=command, code=proc.returncode)
            return CommandResult(
                command=command,
                output=proc.stdout,
                error=CommandFailedError(command, proc.returncode),
            )
        return CommandResult(command=command, output=proc.stdout)

    async def push(self, image_name: str) -> CommandResult:
        return await self._oneshot("push", self.resolve_image_name(image_name))

    async def pull(self, image_name: str) -> CommandResult:
        return await self._oneshot("pull", self.resolve_image_name(image_name))

    async def get_image_id(self, image_name: str) -> str:
        """Return the single image ID matching *image_name*, or "" if none.

        Raises AmbiguousImageError when more than one image matches and the
        carried error when ``docker images`` itself fails.
        """
        result = await self._oneshot("images", "-q", image_name, merge_stderr=False)
        result.raise_for_error()
        image_id = result.output.strip("\n ")
        if len(image_id.splitlines()) > 1:
            raise AmbiguousImageError(image_name)
        return image_id

    async def tag(self, image_name: str, new_tag: str) -> CommandResult:
        """``docker tag -f <id> <new_tag>`` after resolving *image_name* to one ID."""
        try:
            image_id = await self.get_image_id(image_name)
        except DockerError as exc:
            return CommandResult(command="", error=exc)
        if not image_id:
            return CommandResult(command="", error=ImageNotFoundError(image_name))
        return await self._oneshot("tag", "-f", image_id, new_tag)


def new_client(settings: Settings | None = None) -> DockerClient:
    """Build a client from settings, locating docker and detecting our container.

    Raises ExecutableNotFoundError if no executable is configured and docker
    is not on PATH. Container detection failures are not fatal.
    """
    cfg = (settings or get_settings()).docker
    command = cfg.executable or find_executable("docker")

    try:
        parent_id = detect_parent_container()
    except OSError as exc:
        logger.debug("Container detection unavailable", err=str(exc))
        parent_id = ""

    client = DockerClient(
        command,
        dockerfile=cfg.dockerfile,
        registry_host=cfg.registry_host,
        parent_container_id=parent_id or None,
        show_output=cfg.show_output,
        probe_interval=cfg.probe_interval,
        kill_on_daemon_loss=cfg.kill_on_daemon_loss,
        read_limit=cfg.read_limit,
    )
    logger.debug("Docker client created", command=command, in_container=client.is_in_container)
    return client
