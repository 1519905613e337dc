"""Pooled HTTP access to 1inch venues with error classification."""

import logging
from typing import Any, Optional

import httpx

from swapsettle.errors import (
    MalformedVenueResponse,
    SwapError,
    VenueUnavailable,
    classify_venue_error,
)

logger = logging.getLogger(__name__)


def error_text(response: httpx.Response) -> str:
    """Best-effort human readable error from a venue response."""
    try:
        data = response.json()
    except ValueError:
        return response.text[:500]

    if isinstance(data, dict):
        for key in ("description", "error", "message", "detail"):
            value = data.get(key)
            if isinstance(value, str) and value:
                return value
    return str(data)[:500]


class VenueHttpClient:
    """Thin wrapper around a shared ``httpx.AsyncClient``.

    Every call carries the configured timeout. Non-2xx responses are mapped
    through ``classify_venue_error``; unclassified failures become
    ``error_cls`` with the venue's original text.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 3.0,
        client: Optional[httpx.AsyncClient] = None,
        venue: str = "venue",
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.venue = venue
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout)
            self._owns_client = True
        return self._client

    def _headers(self) -> dict:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[dict] = None,
        json: Optional[dict] = None,
        error_cls: type[SwapError] = VenueUnavailable,
    ) -> Any:
        """Perform a request and return the decoded JSON body ({} when empty)."""
        client = await self._get_client()
        url = f"{self.base_url}{path}"

        try:
            response = await client.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise VenueUnavailable(f"{self.venue} timed out: {method} {path}") from e
        except httpx.HTTPError as e:
            raise VenueUnavailable(f"{self.venue} request failed: {type(e).__name__}: {e}") from e

        if not response.is_success:
            text = error_text(response)
            logger.warning(f"{self.venue} API error: {response.status_code} {method} {path} - {text}")
            classified = classify_venue_error(text, response.status_code)
            if classified is not None:
                raise classified
            raise error_cls(f"{self.venue} HTTP {response.status_code}: {text}")

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise MalformedVenueResponse(f"{self.venue} returned non-JSON body for {path}") from e

    async def json_rpc(self, rpc_url: str, method: str, params: list) -> Any:
        """Call a chain JSON-RPC endpoint and return its ``result``."""
        client = await self._get_client()
        try:
            response = await client.post(
                rpc_url,
                json={"jsonrpc": "2.0", "method": method, "params": params, "id": 1},
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise VenueUnavailable(f"RPC {method} failed: {type(e).__name__}: {e}") from e

        if response.status_code != 200:
            raise VenueUnavailable(f"RPC {method} HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedVenueResponse(f"RPC {method} returned non-JSON body") from e

        if "error" in data:
            raise VenueUnavailable(f"RPC {method} error: {data['error']}")
        return data.get("result")

    async def close(self) -> None:
        if self._client is not None and self._owns_client and not self._client.is_closed:
            await self._client.aclose()
