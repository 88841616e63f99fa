"""HTTP transport for the remote bird data service.

Each backend method is exposed at ``POST {base_url}/rpc/{method}``. The request
body is ``{"args": [...]}``; the response is ``{"ok": value}`` on success or
``{"err": message}`` when the backend rejects the call.
"""

import logging
from typing import Any

import httpx

from birdatlas.actor.interface import Actor
from birdatlas.errors import RemoteCallError
from birdatlas.gate.models import Identity

logger = logging.getLogger(__name__)

PRINCIPAL_HEADER = "X-Principal"


class HttpActor(Actor):
    """Actor backed by an ``httpx.AsyncClient``.

    No retries are attempted; remote writes are not assumed idempotent.
    """

    def __init__(
        self,
        base_url: str,
        identity: Identity | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the actor.

        Args:
            base_url: Root URL of the backend service
            identity: Principal the calls are made on behalf of, if any
            timeout: Request timeout in seconds
            transport: Optional transport override (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.identity = identity
        self.timeout = timeout
        self._transport = transport
        self.client: httpx.AsyncClient | None = None

    def _open_client(self) -> httpx.AsyncClient:
        if self.client is None:
            headers = {}
            if self.identity is not None:
                headers[PRINCIPAL_HEADER] = self.identity.principal
            self.client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
            logger.debug("Actor client started", extra={"base_url": self.base_url})
        return self.client

    async def start(self) -> None:
        """Open the underlying HTTP client."""
        self._open_client()

    async def stop(self) -> None:
        """Close the underlying HTTP client."""
        if self.client is not None:
            await self.client.aclose()
            self.client = None

    async def __aenter__(self) -> "HttpActor":
        await self.start()
        return self

    async def __aexit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        await self.stop()

    @property
    def is_ready(self) -> bool:
        return self.client is not None

    async def call(self, method: str, *args: Any) -> Any:  # noqa: ANN401
        """Invoke a backend method.

        Raises:
            RemoteCallError: On transport errors, non-2xx responses, malformed
                bodies, or an ``err`` payload from the backend
        """
        client = self._open_client()
        try:
            response = await client.post(f"/rpc/{method}", json={"args": list(args)})
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            raise RemoteCallError(method, f"HTTP {e.response.status_code}") from e
        except httpx.RequestError as e:
            raise RemoteCallError(method, str(e) or type(e).__name__) from e
        except ValueError as e:
            raise RemoteCallError(method, "Response body is not valid JSON") from e

        if not isinstance(body, dict):
            raise RemoteCallError(method, "Response body is not an object")
        if "err" in body:
            logger.debug("Remote call rejected", extra={"method": method, "error": body["err"]})
            raise RemoteCallError(method, str(body["err"]))
        if "ok" not in body:
            raise RemoteCallError(method, "Response body has neither 'ok' nor 'err'")
        return body["ok"]
