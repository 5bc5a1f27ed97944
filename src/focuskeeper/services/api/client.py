"""API client for the FocusKeeper document store."""

import asyncio
from typing import Any

import httpx

from focuskeeper.services.config_service import get_config_service
from focuskeeper.utils.logger import get_logger


class APIClient:
    """HTTP client for the remote document store."""

    def __init__(self, base_url: str | None = None, token: str | None = None):
        self.config_manager = get_config_service()
        self.config = self.config_manager.config
        context = self.config_manager.get_current_context()
        self.base_url = base_url or context.source
        self.timeout = self.config.api.timeout
        self._token = token
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "APIClient":
        """Enter the async context manager."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit the async context manager and ensure the client is closed."""
        await self.close()

    def _get_headers(self) -> dict[str, str]:
        """Get HTTP headers with authentication."""
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        token = self._token
        if token is None:
            credentials = self.config_manager.load_credentials()
            if credentials and "token" in credentials:
                token = credentials["token"]
        if token:
            headers["Authorization"] = f"Bearer {token}"

        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                follow_redirects=True,
            )
        self._client.headers.update(self._get_headers())
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        retry: int | None = None,
    ) -> httpx.Response:
        """Make an HTTP request to the API.

        Server errors and transport failures are retried with exponential
        backoff; client errors (4xx) are raised immediately.
        """
        if retry is None:
            retry = self.config.api.retry

        client = await self._get_client()
        url = f"{path}" if path.startswith("/") else f"/{path}"

        last_exception: Exception | None = None
        for attempt in range(retry + 1):
            try:
                response = await client.request(
                    method=method,
                    url=url,
                    json=json,
                    params=params,
                )
                response.raise_for_status()
                return response
            except httpx.HTTPStatusError as e:
                # Don't retry client errors (4xx)
                if 400 <= e.response.status_code < 500:
                    raise
                last_exception = e
            except httpx.RequestError as e:
                last_exception = e

            get_logger("api").warning(
                "%s %s failed (attempt %d/%d): %s",
                method,
                url,
                attempt + 1,
                retry + 1,
                last_exception,
            )
            if attempt < retry:
                await asyncio.sleep(2**attempt)

        if last_exception:
            raise last_exception
        raise RuntimeError("Request failed after all retries")

    async def get(
        self, path: str, *, params: dict[str, Any] | None = None
    ) -> httpx.Response:
        """Make a GET request."""
        return await self.request("GET", path, params=params)

    async def post(
        self, path: str, *, json: dict[str, Any] | None = None
    ) -> httpx.Response:
        """Make a POST request."""
        return await self.request("POST", path, json=json)

    async def put(
        self, path: str, *, json: dict[str, Any] | None = None
    ) -> httpx.Response:
        """Make a PUT request."""
        return await self.request("PUT", path, json=json)

    async def delete(self, path: str) -> httpx.Response:
        """Make a DELETE request."""
        return await self.request("DELETE", path)


def get_client() -> APIClient:
    """Get an API client instance."""
    return APIClient()
