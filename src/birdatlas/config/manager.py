"""YAML configuration loading and saving."""

import logging
import shutil
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from birdatlas.config.models import BirdAtlasConfig
from birdatlas.system.path_resolver import PathResolver

logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages configuration loading and saving."""

    def __init__(self, path_resolver: PathResolver | None = None, config_path: Path | None = None):
        """Initialize ConfigManager.

        Args:
            path_resolver: Optional PathResolver instance. If None, creates a new one.
            config_path: Explicit config file, overriding the resolved location
        """
        self.path_resolver = path_resolver or PathResolver()
        self.config_path = config_path or self.path_resolver.get_config_path()

    def load(self) -> BirdAtlasConfig:
        """Load and validate configuration, writing defaults if the file is missing.

        Raises:
            ValueError: If the file does not validate
        """
        self._ensure_config_exists()
        raw_config = self._read_yaml()

        expected_fields = set(BirdAtlasConfig.model_fields.keys())
        unexpected_fields = set(raw_config.keys()) - expected_fields
        if unexpected_fields:
            logger.warning("Ignoring unknown config fields: %s", sorted(unexpected_fields))
        filtered_config = {k: v for k, v in raw_config.items() if k in expected_fields}

        try:
            return BirdAtlasConfig(**filtered_config)
        except ValidationError as e:
            raise ValueError(f"Configuration validation failed: {e}") from e

    def save(self, config: BirdAtlasConfig) -> None:
        """Save configuration to file, keeping a backup of the previous one."""
        self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            backup_path = self.config_path.with_suffix(".yaml.backup")
            try:
                shutil.copy2(self.config_path, backup_path)
            except PermissionError:
                logger.warning("Could not create backup at %s", backup_path)

        config_yaml = yaml.safe_dump(
            config.model_dump(mode="json"),
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
        self.config_path.write_text(config_yaml, encoding="utf-8")
        logger.info("Configuration saved successfully to %s", self.config_path)

    def reload(self) -> BirdAtlasConfig:
        return self.load()

    def _ensure_config_exists(self) -> None:
        if not self.config_path.exists():
            logger.info("No configuration at %s; writing defaults", self.config_path)
            self.save(BirdAtlasConfig())

    def _read_yaml(self) -> dict[str, Any]:
        config_text = self.config_path.read_text(encoding="utf-8")
        raw = yaml.safe_load(config_text) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"Configuration at {self.config_path} is not a mapping")
        return raw
