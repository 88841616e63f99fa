import os
from pathlib import Path


class PathResolver:
    """Central authority for file path resolution in birdatlas.

    Uses environment variables for configuration with sensible defaults.
    """

    def __init__(self) -> None:
        self.data_dir = Path(os.getenv("BIRDATLAS_DATA", Path.home() / ".local/share/birdatlas"))

    def get_config_path(self) -> Path:
        """Get the path to the main configuration file.

        Checks BIRDATLAS_CONFIG environment variable first, then falls back to default.
        """
        config_path = os.getenv("BIRDATLAS_CONFIG")
        if config_path:
            return Path(config_path)
        return self.data_dir / "config" / "birdatlas.yaml"

    def get_data_dir(self) -> Path:
        return self.data_dir

    def get_exports_dir(self, configured: Path | None = None) -> Path:
        """Resolve the export directory; relative paths live under the data directory."""
        if configured is None:
            return self.data_dir / "exports"
        if configured.is_absolute():
            return configured
        return self.data_dir / configured
