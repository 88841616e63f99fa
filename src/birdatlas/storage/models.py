"""Models for stored files and their registered references."""

from pydantic import BaseModel, ConfigDict


class FileReference(BaseModel):
    """Content hash plus storage path of an uploaded file."""

    model_config = ConfigDict(frozen=True)

    hash: str
    path: str


class UploadResult(BaseModel):
    """Outcome of a blob upload."""

    model_config = ConfigDict(frozen=True)

    path: str
    size_bytes: int = 0
