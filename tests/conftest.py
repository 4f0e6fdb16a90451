"""Shared test fixtures and doubles for dockwrap."""

from __future__ import annotations

import asyncio
import subprocess

import pytest

# ---------------------------------------------------------------------------
# Shared helpers (plain functions/classes, not fixtures — importable by test files)
# ---------------------------------------------------------------------------


def make_settings(**docker_overrides):
    """Create a Settings object from pure defaults, no dockwrap.toml or .env.

    Usage::

        s = make_settings(executable="/usr/bin/docker", registry_host="myregistry.com")
    """
    from dockwrap.config import DockerConfig, LoggingConfig, Settings

    return Settings.model_construct(
        docker=DockerConfig(**docker_overrides),
        logging=LoggingConfig(),
    )


def completed(stdout: str = "", returncode: int = 0) -> subprocess.CompletedProcess[str]:
    """Simulate a finished one-shot docker command."""
    return subprocess.CompletedProcess([], returncode, stdout=stdout, stderr=None)


class FakeDockerProcess:
    """Stand-in for the Process returned by asyncio.create_subprocess_exec.

    Tests push bytes into the pipes, then call finish() to end the process.
    """

    pid = 4242

    def __init__(self) -> None:
        self.stdout = asyncio.StreamReader()
        self.stderr = asyncio.StreamReader()
        self.returncode: int | None = None
        self.killed = False
        self._exited = asyncio.Event()

    def write_stdout(self, data: bytes) -> None:
        self.stdout.feed_data(data)

    def write_stderr(self, data: bytes) -> None:
        self.stderr.feed_data(data)

    def finish(self, returncode: int = 0) -> None:
        self.returncode = returncode
        for pipe in (self.stdout, self.stderr):
            pipe.feed_eof()
        self._exited.set()

    async def wait(self) -> int:
        await self._exited.wait()
        assert self.returncode is not None
        return self.returncode

    def kill(self) -> None:
        self.killed = True
        self.finish(-9)


class FakeProber:
    """Liveness prober that replays scripted answers, then keeps the last one."""

    def __init__(self, *answers: bool) -> None:
        self._answers = list(answers) or [True]
        self.calls = 0

    async def is_connected(self) -> bool:
        self.calls += 1
        if len(self._answers) > 1:
            return self._answers.pop(0)
        return self._answers[0]


# ---------------------------------------------------------------------------
# Autouse fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def reset_settings(monkeypatch):
    """Ensure each test starts with a clean Settings singleton.

    Built from pure defaults so tests never read a developer's dockwrap.toml.
    """
    monkeypatch.setattr("dockwrap.config._settings", make_settings())
