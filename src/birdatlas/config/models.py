"""Typed configuration for the birdatlas client."""

from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class LoggingConfig(BaseModel):
    """Structlog-based logging configuration."""

    level: str = "INFO"
    json_logs: bool | None = None  # None = auto-detect based on environment
    include_caller: bool = False  # Include file:line info (useful for debugging)
    extra_fields: dict[str, str] = Field(default_factory=lambda: {"service": "birdatlas"})


class ServiceConfig(BaseModel):
    """Remote bird data service connection."""

    base_url: str = "http://localhost:8000"
    timeout: float = 30.0

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid service URL '{v}'. Must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Timeout must be positive")
        return v


class StorageConfig(BaseModel):
    """Blob storage for uploaded media."""

    base_url: str = "http://localhost:8000"
    timeout: float = 60.0


class QueryConfig(BaseModel):
    """Query cache behaviour."""

    stale_time: float = 5.0  # Seconds a fetched entry is served without refetching
    refetch_on_invalidate: bool = True

    @field_validator("stale_time")
    @classmethod
    def validate_stale_time(cls, v: float) -> float:
        if v < 0:
            raise ValueError("stale_time cannot be negative")
        return v


class ExportConfig(BaseModel):
    """Output location and labels for exports."""

    directory: Path = Path("exports")
    report_title: str = "تقرير بيانات الطيور"
    report_footer: str = "تم إنشاء هذا التقرير بواسطة نظام إدارة بيانات الطيور"


class BirdAtlasConfig(BaseModel):
    """Root configuration."""

    config_version: str = "1.0.0"
    principal: str | None = None  # Identity used by the CLI; None = anonymous
    service: ServiceConfig = Field(default_factory=ServiceConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
