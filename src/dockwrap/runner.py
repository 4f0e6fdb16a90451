"""Supervised subprocess execution — the engine behind build and run.

Provides:
  - run_command() — launch a docker CLI command, stream its merged
    stdout/stderr, and abort if the daemon stops answering
  - _read_merged() — reader task: both pipes → one line queue
  - _watch_daemon() — watchdog task: completes when the daemon is lost

The controller (run_command) owns the accumulated output. The two tasks only
talk to it through the line queue and the watchdog task's completion.
"""

from __future__ import annotations

import asyncio
import contextlib

from dockwrap.config import DEFAULT_PROBE_INTERVAL
from dockwrap.errors import (
    CommandFailedError,
    DaemonConnectionLost,
    ExecutableNotFoundError,
    LaunchError,
    OutputHandlerError,
)
from dockwrap.logger import logger
from dockwrap.prober import DaemonProber, LivenessProber
from dockwrap.types import CommandInvocation, CommandResult, OnLine

_DEFAULT_READ_LIMIT = 1048576

# Sentinel queued by the reader once both pipes hit EOF
_DONE = object()


def _strip_terminator(raw: bytes) -> str:
    if raw.endswith(b"\n"):
        raw = raw[:-1]
    if raw.endswith(b"\r"):
        raw = raw[:-1]
    return raw.decode(errors="replace")


async def _read_line(stream: asyncio.StreamReader) -> bytes:
    """Read one whole line, however long; b"" at EOF.

    Lines longer than the stream limit are collected in limit-sized pieces.
    """
    parts: list[bytes] = []
    while True:
        try:
            parts.append(await stream.readuntil(b"\n"))
            break
        except asyncio.IncompleteReadError as exc:
            parts.append(exc.partial)
            break
        except asyncio.LimitOverrunError as exc:
            parts.append(await stream.readexactly(exc.consumed))
    return b"".join(parts)


async def _read_stream(
    stream: asyncio.StreamReader,
    lines: asyncio.Queue[object],
    show_output: bool,
    on_line: OnLine | None,
) -> None:
    while raw := await _read_line(stream):
        line = _strip_terminator(raw)
        lines.put_nowait(line)
        if show_output:
            print(line, flush=True)
        if on_line is not None:
            await on_line(line)


async def _read_merged(
    proc: asyncio.subprocess.Process,
    lines: asyncio.Queue[object],
    show_output: bool,
    on_line: OnLine | None,
) -> None:
    """Drain stdout and stderr concurrently into one queue, then signal EOF."""
    assert proc.stdout is not None
    assert proc.stderr is not None
    try:
        await asyncio.gather(
            _read_stream(proc.stdout, lines, show_output, on_line),
            _read_stream(proc.stderr, lines, show_output, on_line),
        )
    finally:
        lines.put_nowait(_DONE)


async def _watch_daemon(prober: LivenessProber | None, interval: float) -> None:
    """Return as soon as the daemon is unreachable. Never returns otherwise."""
    if prober is None:
        try:
            prober = DaemonProber.discover()
        except ExecutableNotFoundError as exc:
            logger.warning("Could not build liveness prober", err=str(exc))
            return
    while await prober.is_connected():
        await asyncio.sleep(interval)


async def _kill_and_reap(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is not None:
        return
    with contextlib.suppress(ProcessLookupError):
        proc.kill()
    await proc.wait()


async def run_command(
    show_output: bool,
    workdir: str | None,
    executable: str,
    *args: str,
    prober: LivenessProber | None = None,
    probe_interval: float = DEFAULT_PROBE_INTERVAL,
    kill_on_daemon_loss: bool = False,
    on_line: OnLine | None = None,
    read_limit: int = _DEFAULT_READ_LIMIT,
) -> CommandResult:
    """Run ``executable *args`` in *workdir* under a daemon liveness watchdog.

    Output lines from both pipes are concatenated without separators in the
    order they are read. Whichever happens first ends the run:

    - both pipes reach EOF → wait for exit; a nonzero status is reported as
      ``CommandFailedError`` alongside the full output
    - the prober reports the daemon unreachable → return what was captured so
      far with ``DaemonConnectionLost``. The child is left running unless
      *kill_on_daemon_loss* is set.
    - *on_line* raises → the child is killed and reaped, and the failure is
      returned as ``OutputHandlerError``

    When *prober* is None a fresh ``DaemonProber`` is discovered on PATH for
    this run; failing to find one counts as losing the daemon.
    """
    invocation = CommandInvocation(executable, tuple(args), workdir)
    command = invocation.command_string
    logger.debug("Running docker command", command=command, workdir=workdir)

    try:
        proc = await asyncio.create_subprocess_exec(
            *invocation.argv,
            cwd=workdir,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            limit=read_limit,
        )
    except OSError as exc:
        logger.warning("Failed to start docker command", command=command, err=str(exc))
        return CommandResult(command=command, error=LaunchError(command, exc))

    lines: asyncio.Queue[object] = asyncio.Queue()
    reader = asyncio.create_task(_read_merged(proc, lines, show_output, on_line))
    watchdog = asyncio.create_task(_watch_daemon(prober, probe_interval))
    next_line: asyncio.Future[object] | None = None
    output = ""

    try:
        while True:
            next_line = asyncio.ensure_future(lines.get())
            done, _ = await asyncio.wait({next_line, watchdog}, return_when=asyncio.FIRST_COMPLETED)
            if watchdog in done:
                if not watchdog.cancelled() and (exc := watchdog.exception()) is not None:
                    logger.error("Liveness probe raised", command=command, err=str(exc))
                logger.error("Lost connection to Docker daemon", command=command, pid=proc.pid)
                reader.cancel()
                await asyncio.gather(reader, return_exceptions=True)
                if kill_on_daemon_loss:
                    await _kill_and_reap(proc)
                return CommandResult(command=command, output=output, error=DaemonConnectionLost())
            item = next_line.result()
            if item is _DONE:
                break
            assert isinstance(item, str)
            output += item
    finally:
        if next_line is not None:
            next_line.cancel()
        watchdog.cancel()
        reader.cancel()

    try:
        await reader
    except Exception as exc:
        logger.exception("Output handler failed", command=command)
        await _kill_and_reap(proc)
        return CommandResult(
            command=command,
            output=output,
            error=OutputHandlerError(command, exc),
        )

    returncode = await proc.wait()
    if returncode != 0:
        logger.warning("Docker command failed", command=command, code=returncode)
        return CommandResult(
            command=command,
            output=output,
            error=CommandFailedError(command, returncode),
        )
    return CommandResult(command=command, output=output)
