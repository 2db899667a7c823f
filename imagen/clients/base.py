"""Base HTTP client for the image provider clients.

Provides:
- JSON POST over a shared httpx.AsyncClient
- Automatic retry with exponential backoff (429 / 5xx / transport errors)
- Timeout handling
- Structured ApiError / NetworkError for everything else

Provider clients wrap a BaseClient instead of talking to httpx directly.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from imagen.errors import ApiError, NetworkError
from imagen.utils.retry import with_retry

log = logging.getLogger("imagen.clients")


class BaseClient:
    """Async JSON client with retry.

    Usage:
        client = BaseClient(
            base_url="https://api.example.com",
            headers={"Authorization": "Bearer xxx"},
            timeout=120.0,
            provider_name="example",
        )
        data, text = await client.post("/endpoint", json_data={"q": "test"})
    """

    def __init__(
        self,
        base_url: str = "",
        headers: dict[str, str] | None = None,
        timeout: float = 180.0,
        provider_name: str = "",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.provider_name = provider_name
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers or {},
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def post(
        self,
        path: str,
        json_data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> tuple[Any, str]:
        """POST with retry. Returns (parsed JSON, raw body text)."""
        return await self._request("POST", path, json_data=json_data, headers=headers)

    @with_retry
    async def _request(
        self,
        method: str,
        path: str,
        json_data: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> tuple[Any, str]:
        log.debug("%s %s%s", method, self.base_url, path)
        try:
            response = await self._client.request(
                method,
                path,
                json=json_data,
                headers=headers,
            )
        except httpx.TransportError as e:
            raise NetworkError(
                f"Connection error to {self.provider_name}: {e}",
                provider=self.provider_name,
            ) from e

        text = response.text
        if response.status_code == 429 or response.status_code >= 500:
            log.warning("%s returned %d, retrying", self.provider_name, response.status_code)
            raise ApiError(
                response.status_code, text,
                provider=self.provider_name,
                retryable=True,
            )

        if response.status_code >= 400:
            raise ApiError(response.status_code, text, provider=self.provider_name)

        try:
            return response.json(), text
        except ValueError as e:
            raise ApiError(
                response.status_code, f"Failed to parse response: {e}",
                provider=self.provider_name,
            ) from e


def truncate_body(text: str, limit: int = 500) -> str:
    if len(text) > limit:
        return f"{text[:limit]}..."
    return text
