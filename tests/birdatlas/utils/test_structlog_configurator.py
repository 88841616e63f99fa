import logging
import os

import pytest
import structlog

from birdatlas import __version__
from birdatlas.config.models import BirdAtlasConfig, LoggingConfig
from birdatlas.utils.structlog_configurator import (
    _add_static_context,
    _configure_handlers,
    _configure_processors,
    bind_command_context,
    configure_structlog,
    get_deployment_environment,
    get_logger,
    is_development_environment,
    is_docker_environment,
)


@pytest.fixture
def restore_logging():
    """Put the root logger and structlog back after a test reconfigures them."""
    root_logger = logging.getLogger()
    handlers = root_logger.handlers[:]
    level = root_logger.level
    yield
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(level)
    structlog.reset_defaults()


class TestEnvironmentDetection:
    """Test environment detection functions."""

    def test_is_docker_environment__dockerenv(self, mocker):
        """Should return True when /.dockerenv exists."""
        mocker.patch("os.path.exists", return_value=True)
        assert is_docker_environment() is True

    def test_is_docker_environment__env_var(self, mocker):
        """Should return True when DOCKER_CONTAINER env var is set."""
        mocker.patch("os.path.exists", return_value=False)
        mocker.patch.dict(os.environ, {"DOCKER_CONTAINER": "true"})
        assert is_docker_environment() is True

    def test_is_development_environment(self, mocker):
        """Should read BIRDATLAS_ENV."""
        mocker.patch.dict(os.environ, {"BIRDATLAS_ENV": "development"})
        assert is_development_environment() is True

    @pytest.mark.parametrize(
        "docker,env,expected",
        [
            pytest.param(True, {}, "docker", id="docker"),
            pytest.param(False, {"BIRDATLAS_ENV": "development"}, "development", id="development"),
            pytest.param(False, {}, "unknown", id="unknown"),
        ],
    )
    def test_get_deployment_environment(self, mocker, docker, env, expected):
        """Should prefer docker, then development, then unknown."""
        mocker.patch("os.path.exists", return_value=docker)
        mocker.patch.dict(os.environ, env, clear=True)
        assert get_deployment_environment() == expected


class TestProcessors:
    """Test processor chain construction."""

    def test_add_static_context(self):
        """Should merge static fields into every event."""
        processor = _add_static_context({"service": "birdatlas"})
        event = processor(None, "info", {"event": "hello"})
        assert event == {"event": "hello", "service": "birdatlas"}

    def test_json_renderer_when_requested(self):
        """Should end with a JSON renderer when json_logs is set."""
        config = BirdAtlasConfig(logging=LoggingConfig(json_logs=True))
        processors = _configure_processors(config)
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_console_renderer_in_development(self, mocker):
        """Should render for humans in development unless JSON is forced."""
        mocker.patch("os.path.exists", return_value=False)
        mocker.patch.dict(os.environ, {"BIRDATLAS_ENV": "development"}, clear=True)
        processors = _configure_processors(BirdAtlasConfig())
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_json_forced_in_development(self, mocker):
        """Should honour BIRDATLAS_JSON_LOGS in development."""
        mocker.patch("os.path.exists", return_value=False)
        mocker.patch.dict(
            os.environ, {"BIRDATLAS_ENV": "development", "BIRDATLAS_JSON_LOGS": "true"}, clear=True
        )
        processors = _configure_processors(BirdAtlasConfig())
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_static_context_includes_principal(self):
        """Should tag events with version and principal."""
        config = BirdAtlasConfig(principal="aaaaa-aa", logging=LoggingConfig(json_logs=True))
        static = _configure_processors(config)[1]
        event = static(None, "info", {})
        assert event["version"] == __version__
        assert event["principal"] == "aaaaa-aa"
        assert event["service"] == "birdatlas"

    def test_caller_info(self):
        """Should add callsite parameters when include_caller is set."""
        config = BirdAtlasConfig(logging=LoggingConfig(json_logs=True, include_caller=True))
        processors = _configure_processors(config)
        assert any(
            isinstance(p, structlog.processors.CallsiteParameterAdder) for p in processors
        )


class TestConfigure:
    """Test full configuration."""

    def test_configure_handlers(self, restore_logging):
        """Should leave a single stdout handler at the configured level."""
        config = BirdAtlasConfig(logging=LoggingConfig(level="debug"))
        _configure_handlers(config)
        root_logger = logging.getLogger()
        assert len(root_logger.handlers) == 1
        assert root_logger.level == logging.DEBUG

    def test_configure_structlog(self, restore_logging):
        """Should configure structlog and return working loggers."""
        configure_structlog(BirdAtlasConfig(logging=LoggingConfig(json_logs=True)))
        assert structlog.is_configured()
        logger = get_logger(__name__)
        logger.info("test event", key="value")

    def test_bind_command_context(self):
        """Should replace any previous context with the command name."""
        structlog.contextvars.bind_contextvars(stale="value")
        bind_command_context("export-csv")
        assert structlog.contextvars.get_contextvars() == {"command": "export-csv"}
        structlog.contextvars.clear_contextvars()
