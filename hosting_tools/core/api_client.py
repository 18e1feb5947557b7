"""Async JSON REST client shared by the hosting and identity APIs."""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from hosting_tools import __version__
from hosting_tools.core.errors import ApiError

logger = structlog.get_logger()


class ApiClient:
    """Thin async wrapper over ``httpx.AsyncClient``.

    Requests are resolved against ``{origin}/{api_version}``. Non-success
    responses are raised as ``ApiError`` carrying the HTTP status and the
    backend's own error message where one is present. Network failures
    surface as the underlying ``httpx.HTTPError``. No retries are made.
    """

    def __init__(
        self,
        origin: str,
        api_version: str,
        *,
        access_token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize API client.

        Args:
            origin: API origin, e.g. https://firebasehosting.googleapis.com
            api_version: Version path segment, e.g. v1beta1
            access_token: Optional OAuth2 bearer token
            timeout: Request timeout in seconds
            transport: Optional transport override (used by tests)
        """
        self.origin = origin.rstrip("/")
        self.api_version = api_version.strip("/")
        self.access_token = access_token
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return f"{self.origin}/{self.api_version}"

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None:
            headers = {
                "User-Agent": f"hosting-tools/{__version__}",
                "Accept": "application/json",
            }
            if self.access_token:
                headers["Authorization"] = f"Bearer {self.access_token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def request(
        self,
        method: str,
        path: str,
        *,
        query: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        """Send a request and decode the JSON response.

        Args:
            method: HTTP method
            path: Path relative to the versioned base URL
            query: Optional query parameters
            json: Optional JSON body

        Returns:
            Decoded JSON body, or None for an empty response

        Raises:
            ApiError: If the backend returns a non-success status
        """
        response = await self.client.request(method, path, params=query, json=json)
        if response.is_error:
            raise self._to_error(response)

        logger.debug(
            "api_request",
            method=method,
            url=str(response.request.url),
            status=response.status_code,
        )
        if not response.content:
            return None
        return response.json()

    async def get(self, path: str, *, query: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, query=query)

    async def post(
        self, path: str, json: Any = None, *, query: dict[str, Any] | None = None
    ) -> Any:
        return await self.request("POST", path, query=query, json=json)

    async def patch(
        self, path: str, json: Any = None, *, query: dict[str, Any] | None = None
    ) -> Any:
        return await self.request("PATCH", path, query=query, json=json)

    async def delete(self, path: str, *, query: dict[str, Any] | None = None) -> Any:
        return await self.request("DELETE", path, query=query)

    @staticmethod
    def _to_error(response: httpx.Response) -> ApiError:
        """Build an ApiError, preferring the backend's error message."""
        body: Any
        try:
            body = response.json()
        except ValueError:
            body = response.text or None

        message = f"HTTP Error: {response.status_code}, {response.reason_phrase}"
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                message = f"HTTP Error: {response.status_code}, {error['message']}"

        url = str(response.request.url)
        logger.debug("api_error", url=url, status=response.status_code, message=message)
        return ApiError(message, status=response.status_code, url=url, body=body)

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()
