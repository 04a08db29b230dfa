"""
Async Secure HTTP Client Wrapper

Provides async HTTP methods with enforced SSL verification and timeouts.
Built on httpx for concurrent, non-blocking API calls.

Usage:
    from strikeboard.async_http_client import AsyncSecureHTTPClient

    async with AsyncSecureHTTPClient(base_url="https://autostrike.example.com/api/v1") as client:
        response = await client.get("analytics/trend", params={"days": 30})
        response = await client.post("scenarios/import", json=batch)

Security Features:
    - SSL verification always enabled (verify=True)
    - Default 30-second timeout on all requests
    - Connection pooling for concurrent requests
    - HTTP/2 support
"""

from typing import Any

import httpx

from .domain.constants import api_config


class AsyncSecureHTTPClient:
    """
    Async HTTP client with enforced SSL verification and connection pooling.

    Features:
    - Context manager for automatic connection cleanup
    - Connection pooling (configurable max connections)
    - HTTP/2 support for multiplexing
    - Enforced SSL verification
    - Request timeouts
    - Optional injected transport (httpx.MockTransport in tests)
    """

    DEFAULT_TIMEOUT = api_config.DEFAULT_TIMEOUT_SECONDS
    DEFAULT_MAX_CONNECTIONS = api_config.MAX_CONNECTIONS
    DEFAULT_MAX_KEEPALIVE = api_config.MAX_KEEPALIVE_CONNECTIONS

    def __init__(
        self,
        base_url: str = "",
        headers: dict[str, str] | None = None,
        max_connections: int = DEFAULT_MAX_CONNECTIONS,
        max_keepalive_connections: int = DEFAULT_MAX_KEEPALIVE,
        timeout: float = DEFAULT_TIMEOUT,
        http2: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Initialize async HTTP client.

        Args:
            base_url: Prefix for relative request URLs
            headers: Headers sent with every request
            max_connections: Maximum number of concurrent connections
            max_keepalive_connections: Max persistent connections
            timeout: Default timeout in seconds
            http2: Enable HTTP/2 support
            transport: Custom transport; the default pooled transport is used when None
        """
        self.base_url = base_url
        self.headers = dict(headers or {})
        self.limits = httpx.Limits(max_connections=max_connections, max_keepalive_connections=max_keepalive_connections)
        self.timeout = httpx.Timeout(timeout)
        self.http2 = http2
        self.transport = transport
        self.client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "AsyncSecureHTTPClient":
        """Context manager entry - create async client"""
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            limits=self.limits,
            timeout=self.timeout,
            verify=True,  # CRITICAL: Force SSL verification
            http2=self.http2,
            follow_redirects=True,
            transport=self.transport,
        )
        return self

    async def __aexit__(self, *args):
        """Context manager exit - close connections"""
        if self.client:
            await self.client.aclose()
            self.client = None

    def _require_client(self) -> httpx.AsyncClient:
        if not self.client:
            raise RuntimeError("Client not initialized. Use 'async with AsyncSecureHTTPClient()' context manager")
        return self.client

    async def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Async request with SSL verification enforced.

        Args:
            method: HTTP method (GET, POST, ...)
            url: Absolute URL or path relative to base_url
            **kwargs: Additional arguments to pass to httpx.AsyncClient.request()

        Returns:
            httpx.Response: HTTP response
        """
        client = self._require_client()
        kwargs.setdefault("timeout", self.timeout)
        return await client.request(method, url, **kwargs)

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Async GET request with SSL verification enforced."""
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        """Async POST request with SSL verification enforced."""
        return await self.request("POST", url, **kwargs)
