"""Blob storage collaborator for uploaded images, audio and maps."""

import logging
from abc import ABC, abstractmethod
from urllib.parse import quote

import httpx

from birdatlas.errors import UploadError
from birdatlas.storage.models import UploadResult

logger = logging.getLogger(__name__)


class BlobStorage(ABC):
    """Stores opaque blobs under a path and resolves them to URLs."""

    @abstractmethod
    async def upload(self, path: str, data: bytes, content_type: str | None = None) -> UploadResult:
        """Store ``data`` under ``path``.

        Raises:
            UploadError: If the blob could not be stored
        """

    @abstractmethod
    async def resolve_url(self, path: str) -> str | None:
        """Return a displayable URL for ``path``, or None if it is missing.

        Never raises for a missing or unreachable blob.
        """

    async def start(self) -> None:  # noqa: B027
        """Open any underlying connection."""

    async def stop(self) -> None:  # noqa: B027
        """Release any underlying connection."""


class HttpBlobStorage(BlobStorage):
    """Blob storage served at ``{base_url}/blobs/{path}``."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self.client: httpx.AsyncClient | None = None

    def _open_client(self) -> httpx.AsyncClient:
        if self.client is None:
            self.client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self.client

    async def start(self) -> None:
        self._open_client()

    async def stop(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.client = None

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/blobs/{quote(path.lstrip('/'))}"

    async def upload(self, path: str, data: bytes, content_type: str | None = None) -> UploadResult:
        client = self._open_client()
        headers = {"Content-Type": content_type} if content_type else {}
        try:
            response = await client.put(self.url_for(path), content=data, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UploadError(path, f"HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise UploadError(path, str(e) or type(e).__name__) from e

        logger.debug("Blob uploaded", extra={"path": path, "size_bytes": len(data)})
        return UploadResult(path=path, size_bytes=len(data))

    async def resolve_url(self, path: str) -> str | None:
        if not path:
            return None
        client = self._open_client()
        url = self.url_for(path)
        try:
            response = await client.head(url)
        except httpx.RequestError as e:
            logger.warning("Blob lookup failed", extra={"path": path, "error": str(e)})
            return None
        if response.status_code != 200:
            return None
        return url
