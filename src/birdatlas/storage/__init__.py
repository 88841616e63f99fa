"""Blob storage collaborator and media upload flows."""

from birdatlas.storage.blob_storage import BlobStorage, HttpBlobStorage
from birdatlas.storage.models import FileReference, UploadResult

__all__ = ["BlobStorage", "FileReference", "HttpBlobStorage", "UploadResult"]
