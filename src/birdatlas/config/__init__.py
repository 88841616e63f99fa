"""birdatlas configuration package."""

from .manager import ConfigManager
from .models import BirdAtlasConfig

__all__ = [
    "BirdAtlasConfig",
    "ConfigManager",
]
