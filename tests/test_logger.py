"""Tests for logging setup: the library must not configure logging on import."""

from __future__ import annotations

import importlib
import logging
from unittest.mock import patch

import pytest

import dockwrap.logger as logger_mod


@pytest.fixture
def restore_root_level():
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


class TestImport:
    def test_import_leaves_host_config_alone(self):
        with (
            patch("structlog.configure") as configure,
            patch("logging.basicConfig") as basic_config,
        ):
            importlib.reload(logger_mod)

        configure.assert_not_called()
        basic_config.assert_not_called()

    def test_library_logger_routes_through_stdlib(self, caplog):
        with caplog.at_level(logging.WARNING, logger="dockwrap"):
            logger_mod.logger.warning("something odd", image="app")

        assert [r.name for r in caplog.records] == ["dockwrap"]
        assert "something odd" in caplog.text


class TestConfigureLogging:
    def test_explicit_level(self, restore_root_level):
        with (
            patch("dockwrap.logger.structlog.configure") as configure,
            patch("dockwrap.logger.logging.basicConfig") as basic_config,
        ):
            logger_mod.configure_logging("debug")

        assert basic_config.call_args.kwargs["level"] == logging.DEBUG
        configure.assert_called_once()

    def test_falls_back_to_env(self, monkeypatch, restore_root_level):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        with (
            patch("dockwrap.logger.structlog.configure"),
            patch("dockwrap.logger.logging.basicConfig") as basic_config,
        ):
            logger_mod.configure_logging(None)

        assert basic_config.call_args.kwargs["level"] == logging.WARNING
