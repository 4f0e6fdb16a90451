"""Centralized configuration — Pydantic BaseSettings with TOML + dotenv sources.

Settings live in ``dockwrap.toml`` in the working directory. Environment
variables override it using ``__`` as the nested delimiter
(e.g. ``DOCKER__REGISTRY_HOST=myregistry.com``).

Priority (highest wins): init args > env vars > .env > dockwrap.toml

Usage::

    from dockwrap.config import get_settings

    s = get_settings()
    print(s.docker.registry_host)
"""

from __future__ import annotations

from pydantic import BaseModel, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

DEFAULT_DOCKERFILE = "Dockerfile"
DEFAULT_REGISTRY_HOST = "docker.io"
DEFAULT_PROBE_INTERVAL = 5.0

# ---------------------------------------------------------------------------
# Sub-models (each maps to a [section] in dockwrap.toml)
# ---------------------------------------------------------------------------


class _StrictModel(BaseModel):
    """Base for all config sub-models — reject unknown keys so typos fail loudly."""

    model_config = {"extra": "forbid"}


class DockerConfig(_StrictModel):
    executable: str | None = None  # None → PATH lookup of "docker"
    dockerfile: str = DEFAULT_DOCKERFILE
    registry_host: str = DEFAULT_REGISTRY_HOST
    show_output: bool = False
    probe_interval: float = DEFAULT_PROBE_INTERVAL  # seconds between `docker info` probes
    kill_on_daemon_loss: bool = False
    read_limit: int = 1048576  # pipe buffer size; longer lines are read in pieces

    @field_validator("probe_interval")
    @classmethod
    def positive_interval(cls, v: float) -> float:
        if v <= 0:
            msg = "probe_interval must be positive"
            raise ValueError(msg)
        return v

    @field_validator("read_limit")
    @classmethod
    def clamp_line_bytes(cls, v: int) -> int:
        return max(1024, v)


class LoggingConfig(_StrictModel):
    level: str | None = None  # None → keep LOG_LEVEL from the environment

    @field_validator("level")
    @classmethod
    def normalize_level(cls, v: str | None) -> str | None:
        return v.upper() if v else v


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        toml_file="dockwrap.toml",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    docker: DockerConfig = DockerConfig()
    logging: LoggingConfig = LoggingConfig()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority: init > env vars > .env > dockwrap.toml > file secrets."""
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


# ---------------------------------------------------------------------------
# Singleton
# ---------------------------------------------------------------------------

_settings: Settings | None = None


def get_settings() -> Settings:
    """Lazy cached singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Clear the cached singleton (for tests)."""
    global _settings
    _settings = None
