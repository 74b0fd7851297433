"""HTTP client for the backend cart endpoints (GET/POST /cart)."""
import os
from typing import Any

import httpx

from core.errors import ERROR_CART_FETCH_FAILED, ERROR_CART_PUSH_FAILED
from core.logging import get_logger

logger = get_logger(__name__)

CART_API_URL = os.environ.get("CART_API_URL", "http://localhost:3001")


class CartApiError(Exception):
    """Backend cart request failed (transport error, non-2xx status, bad body)."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class CartApiClient:
    """Reads and replaces the authenticated user's server cart."""

    def __init__(self, base_url: str | None = None, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = (base_url or CART_API_URL).rstrip("/")
        self._transport = transport

        # HTTP client (lazy init)
        self._http_client: httpx.AsyncClient | None = None

    def _get_http_client(self) -> httpx.AsyncClient:
        """Lazy creation of shared httpx client with timeouts."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(10.0, connect=5.0, read=10.0, write=10.0),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
                transport=self._transport,
            )
        return self._http_client

    @staticmethod
    def _auth_headers(token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    async def fetch_cart(self, token: str) -> dict[str, Any]:
        """
        Fetch the stored cart record for the token's identity.

        Returns:
            Decoded JSON body (``{"items": [...]}``-shaped; an empty dict if the
            server answered with ``null``)

        Raises:
            CartApiError: On transport errors, non-2xx status or invalid JSON
        """
        client = self._get_http_client()
        try:
            response = await client.get("/cart", headers=self._auth_headers(token))
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise CartApiError(
                f"{ERROR_CART_FETCH_FAILED}: {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise CartApiError(f"{ERROR_CART_FETCH_FAILED}: {e!s}") from e
        except ValueError as e:
            raise CartApiError(f"{ERROR_CART_FETCH_FAILED}: invalid JSON body") from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise CartApiError(f"{ERROR_CART_FETCH_FAILED}: unexpected body type {type(data).__name__}")
        return data

    async def push_cart(self, token: str, items: list[dict[str, Any]]) -> None:
        """
        Replace the server cart with ``items``.

        Raises:
            CartApiError: On transport errors or non-2xx status
        """
        client = self._get_http_client()
        try:
            response = await client.post("/cart", json={"items": items}, headers=self._auth_headers(token))
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise CartApiError(
                f"{ERROR_CART_PUSH_FAILED}: {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise CartApiError(f"{ERROR_CART_PUSH_FAILED}: {e!s}") from e

        logger.debug(f"Pushed {len(items)} cart items to backend")

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
