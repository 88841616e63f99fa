"""Session, query key registry and cached service over the remote actor."""

from birdatlas.sync.service import BirdAtlasService
from birdatlas.sync.session import Session

__all__ = ["BirdAtlasService", "Session"]
