"""
Base HTTP Client

Shared base class for the thin storefront API clients.
"""

import logging
from typing import Dict, Any, Optional

import httpx

from storefront.config import get_settings
from storefront.errors import UpstreamError

logger = logging.getLogger(__name__)


class BaseClient:
    """Base async HTTP client with bearer auth and common error handling."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize base client.

        Args:
            base_url: API base URL. Defaults to STOREFRONT_API_BASE_URL.
            token: Bearer token. Defaults to STOREFRONT_API_TOKEN.
            timeout: Request timeout in seconds. Defaults to STOREFRONT_HTTP_TIMEOUT.
            transport: Optional httpx transport (used to stub the API in tests)
        """
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.token = token if token is not None else settings.api_token
        self.timeout = timeout if timeout is not None else settings.http_timeout

        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        # Single client instance reused for every call
        self._client = httpx.AsyncClient(
            timeout=self.timeout,
            headers=headers,
            transport=transport,
        )

    @staticmethod
    def _error_payload(response: httpx.Response) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            return {"message": response.text[:500]} if response.text else {}
        return body if isinstance(body, dict) else {"message": str(body)}

    async def _send(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        url = f"{self.base_url}{path}"
        logger.debug("%s %s json=%s params=%s", method, url, json, params)
        try:
            return await self._client.request(method=method, url=url, json=json, params=params)
        except httpx.RequestError as e:
            raise UpstreamError(f"API request failed: {str(e)}") from e

    def _parse(self, response: httpx.Response) -> Dict[str, Any]:
        if response.is_error:
            payload = self._error_payload(response)
            raise UpstreamError(
                f"API returned error {response.status_code}: {payload.get('message', '')}",
                status_code=response.status_code,
                payload=payload,
            )
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(
                f"API returned invalid JSON ({response.status_code})",
                status_code=response.status_code,
            ) from e

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Make HTTP request and return parsed JSON.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: API path (will be appended to base_url)
            json: JSON payload for POST/PATCH requests
            params: Query parameters

        Returns:
            Parsed JSON response

        Raises:
            UpstreamError: On network failures or HTTP errors
        """
        response = await self._send(method, path, json=json, params=params)
        return self._parse(response)

    async def _request_allow_404(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Make HTTP request and return parsed JSON, or None on 404.

        Raises:
            UpstreamError: On network failures or HTTP errors (except 404)
        """
        response = await self._send(method, path, json=json, params=params)
        if response.status_code == 404:
            return None
        return self._parse(response)

    async def aclose(self) -> None:
        """Close the underlying httpx client."""
        await self._client.aclose()
