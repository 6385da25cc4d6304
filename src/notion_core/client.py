"""Base client for Notion API interactions."""

from typing import Any, Dict, Optional

import httpx
from loguru import logger


class NotionAPIError(RuntimeError):
    """A non-success response from the Notion API."""

    def __init__(self, status_code: int, body: Any) -> None:
        self.status_code = status_code
        self.body = body
        message = body.get("message", "") if isinstance(body, dict) else str(body)
        super().__init__(f"Notion API error ({status_code}): {message}")


class NotionClient:
    """Async client for Notion API interactions.

    The token is forwarded as received; it is never validated or stored
    beyond the lifetime of the client. Use as an async context manager so the
    underlying connection pool is closed when the request is done::

        async with NotionClient(token) as client:
            page = await client.get(f"pages/{page_id}")
    """

    API_BASE = "https://api.notion.com/v1"
    API_VERSION = "2022-06-28"  # stable version

    def __init__(
        self,
        token: str,
        api_base: Optional[str] = None,
        api_version: Optional[str] = None,
        timeout: float = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the client.

        Args:
            token: Notion integration token, forwarded as a bearer credential.
            api_base: Override for the API root URL.
            api_version: Override for the Notion-Version header.
            timeout: Per-request timeout in seconds.
            transport: Optional httpx transport, used to intercept calls in tests.
        """
        self.token = token
        self.api_base = api_base or self.API_BASE
        self.api_version = api_version or self.API_VERSION
        self._http = httpx.AsyncClient(
            base_url=self.api_base.rstrip("/") + "/",
            headers=self._headers(),
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "NotionClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _headers(self) -> Dict[str, str]:
        """Get the headers required for Notion API requests."""
        return {
            "Authorization": f"Bearer {self.token}",
            "Notion-Version": self.api_version,
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        r = await self._http.request(method, path.lstrip("/"), json=json, params=params)
        try:
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            body = self._extract_error_body(r)
            logger.warning(f"[notion] {method} {path} -> {r.status_code}")
            raise NotionAPIError(r.status_code, body) from e
        return r.json()

    async def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Make a GET request to the Notion API."""
        return await self._request("GET", path, params=params)

    async def post(self, path: str, json: Dict[str, Any]) -> Dict[str, Any]:
        """Make a POST request to the Notion API."""
        return await self._request("POST", path, json=json)

    async def patch(self, path: str, json: Dict[str, Any]) -> Dict[str, Any]:
        """Make a PATCH request to the Notion API."""
        return await self._request("PATCH", path, json=json)

    async def delete(self, path: str) -> Dict[str, Any]:
        """Make a DELETE request to the Notion API."""
        return await self._request("DELETE", path)

    @staticmethod
    def _extract_error_body(response: httpx.Response) -> Any:
        """Return Notion's error object, or the raw text when it is not JSON."""
        try:
            return response.json()
        except ValueError:
            return response.text or "No details available"
