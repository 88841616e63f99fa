"""Client-side data synchronization layer for bird-sighting records."""

__version__ = "0.1.0"
