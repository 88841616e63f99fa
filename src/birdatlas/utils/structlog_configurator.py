"""Structured logging setup for birdatlas.

Rendering depends on where the client runs:
- Docker: one JSON object per line on stdout
- Development (``BIRDATLAS_ENV=development``): colored console output, unless
  ``BIRDATLAS_JSON_LOGS=true``
- Anywhere else: JSON unless ``logging.json_logs`` says otherwise

Module loggers created with ``logging.getLogger(__name__)`` end up on the same
stdout handler, so both styles can be mixed.
"""

import logging
import os
import sys
from collections.abc import Callable
from typing import Any

import structlog

from birdatlas import __version__
from birdatlas.config.models import BirdAtlasConfig, LoggingConfig

Processor = Callable[[Any, str, dict[str, Any]], dict[str, Any]]


def is_docker_environment() -> bool:
    """Check if running in a Docker container."""
    return os.path.exists("/.dockerenv") or os.environ.get("DOCKER_CONTAINER") == "true"


def is_development_environment() -> bool:
    return os.environ.get("BIRDATLAS_ENV", "production") == "development"


def get_deployment_environment() -> str:
    """Name of the runtime environment, ``unknown`` when nothing matches."""
    if is_docker_environment():
        return "docker"
    if is_development_environment():
        return "development"
    return "unknown"


def _resolve_level(logging_config: LoggingConfig) -> int:
    return getattr(logging, logging_config.level.upper(), logging.INFO)


def _add_static_context(fields: dict[str, str]) -> Processor:
    """Build a processor stamping ``fields`` onto every event."""

    def stamp(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:  # noqa: ANN401
        event_dict.update(fields)
        return event_dict

    return stamp


def _use_json(config: BirdAtlasConfig) -> bool:
    if is_development_environment():
        forced = os.environ.get("BIRDATLAS_JSON_LOGS", "false").lower() == "true"
        if forced:
            return True
    if config.logging.json_logs is not None:
        return config.logging.json_logs
    return is_docker_environment() or not is_development_environment()


def _static_fields(config: BirdAtlasConfig) -> dict[str, str]:
    fields = {
        "service": "birdatlas",
        "version": __version__,
        "deployment": get_deployment_environment(),
    }
    fields.update(config.logging.extra_fields)
    if config.principal:
        fields["principal"] = config.principal
    return fields


def _configure_processors(config: BirdAtlasConfig) -> list[Any]:
    """Assemble the processor chain ending in the JSON or console renderer."""
    chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        _add_static_context(_static_fields(config)),
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="ISO"),
    ]
    if config.logging.include_caller:
        chain.append(structlog.processors.CallsiteParameterAdder())

    renderer = (
        structlog.processors.JSONRenderer()
        if _use_json(config)
        else structlog.dev.ConsoleRenderer(colors=True)
    )
    chain.append(renderer)
    return chain


def _configure_handlers(config: BirdAtlasConfig) -> None:
    """Replace the root handlers with a single stdout handler."""
    level = _resolve_level(config.logging)
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(level)
    stdout_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(stdout_handler)
    root_logger.setLevel(level)


def configure_structlog(config: BirdAtlasConfig) -> None:
    """Configure structlog and stdlib logging from ``config.logging``.

    Args:
        config: Loaded configuration; its principal, if any, is added to
            every event
    """
    structlog.configure(
        processors=_configure_processors(config),
        wrapper_class=structlog.make_filtering_bound_logger(_resolve_level(config.logging)),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    _configure_handlers(config)

    structlog.get_logger(__name__).info(
        "Logging configured",
        level=config.logging.level,
        deployment=get_deployment_environment(),
        json_output=_use_json(config),
    )


def bind_command_context(command: str) -> None:
    """Tag every event logged while a CLI command runs with its name."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(command=command)


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger, usually for ``__name__``."""
    return structlog.get_logger(name)
