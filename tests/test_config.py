"""Tests for Settings sources and validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from dockwrap.config import DockerConfig, Settings, get_settings, reset_settings


@pytest.fixture
def isolated_cwd(tmp_path, monkeypatch):
    """Run from an empty directory so no dockwrap.toml or .env leaks in."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestDefaults:
    def test_docker_defaults(self, isolated_cwd):
        s = Settings()
        assert s.docker.executable is None
        assert s.docker.dockerfile == "Dockerfile"
        assert s.docker.registry_host == "docker.io"
        assert s.docker.show_output is False
        assert s.docker.probe_interval == 5.0
        assert s.docker.kill_on_daemon_loss is False
        assert s.logging.level is None


class TestSources:
    def test_toml_file(self, isolated_cwd):
        (isolated_cwd / "dockwrap.toml").write_text(
            '[docker]\nregistry_host = "myregistry.com"\nshow_output = true\n'
        )
        s = Settings()
        assert s.docker.registry_host == "myregistry.com"
        assert s.docker.show_output is True

    def test_env_overrides_toml(self, isolated_cwd, monkeypatch):
        (isolated_cwd / "dockwrap.toml").write_text('[docker]\nregistry_host = "from-toml"\n')
        monkeypatch.setenv("DOCKER__REGISTRY_HOST", "from-env")
        assert Settings().docker.registry_host == "from-env"

    def test_unknown_key_rejected(self, isolated_cwd):
        (isolated_cwd / "dockwrap.toml").write_text('[docker]\nregistry = "typo"\n')
        with pytest.raises(ValidationError):
            Settings()


class TestValidation:
    def test_probe_interval_must_be_positive(self):
        with pytest.raises(ValidationError):
            DockerConfig(probe_interval=0)

    def test_read_limit_clamped(self):
        assert DockerConfig(read_limit=10).read_limit == 1024

    def test_log_level_normalized(self, isolated_cwd):
        (isolated_cwd / "dockwrap.toml").write_text('[logging]\nlevel = "debug"\n')
        assert Settings().logging.level == "DEBUG"


class TestSingleton:
    def test_cached_until_reset(self, isolated_cwd):
        reset_settings()
        first = get_settings()
        assert get_settings() is first
        reset_settings()
        assert get_settings() is not first
