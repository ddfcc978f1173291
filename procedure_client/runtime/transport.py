"""
HTTP transport for procedure calls.

The executor only depends on the ``Fetch`` protocol, so any coroutine with
the same signature can stand in for the default ``HttpxFetch``.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Protocol

import httpx
from loguru import logger

from ..config import settings
from .abort import AbortSignal
from .errors import RequestAbortedError


class FetchResponse(Protocol):
    """What the executor needs from a response: a JSON body."""

    def json(self) -> Any | Awaitable[Any]:
        ...


class Fetch(Protocol):
    """Injectable HTTP call capability."""

    async def __call__(
        self,
        url: str,
        *,
        method: str,
        headers: dict[str, str],
        body: str | None = None,
        signal: AbortSignal | None = None,
    ) -> FetchResponse:
        ...


class HttpxFetch:
    """Default transport backed by a pooled httpx.AsyncClient.

    The client is created lazily on first use unless one is injected. An
    injected client belongs to the caller and is not closed by ``close()``.

    When an abort signal fires while a request is in flight, the request task
    is cancelled and RequestAbortedError is raised.

    Example:
        fetch = HttpxFetch(timeout=10.0)
        async with fetch:
            response = await fetch("http://router/getUser", method="GET", headers={})
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
        max_connections: int | None = None,
        max_keepalive: int | None = None,
    ):
        """Initialize the transport.

        Args:
            client: Pre-built httpx client to use instead of a pooled one.
            timeout: Default timeout in seconds.
            max_connections: Maximum total connections in pool.
            max_keepalive: Maximum keepalive connections.
        """
        self.timeout = timeout if timeout is not None else settings.RPC_TIMEOUT
        self._limits = httpx.Limits(
            max_connections=max_connections or settings.RPC_MAX_CONNECTIONS,
            max_keepalive_connections=max_keepalive or settings.RPC_MAX_KEEPALIVE,
            keepalive_expiry=30.0,
        )
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client.

        Returns:
            The shared httpx.AsyncClient instance.
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                limits=self._limits,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client and release connections."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpxFetch":
        await self._get_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def __call__(
        self,
        url: str,
        *,
        method: str,
        headers: dict[str, str],
        body: str | None = None,
        signal: AbortSignal | None = None,
    ) -> httpx.Response:
        """Send one request.

        Args:
            url: Absolute request URL.
            method: HTTP method.
            headers: Request headers.
            body: Encoded request body, if any.
            signal: Abort signal to honor, if any.

        Returns:
            The httpx response, whatever its status code.

        Raises:
            RequestAbortedError: If the signal fired before the response.
            httpx.HTTPError: For transport failures.
        """
        client = await self._get_client()
        call = client.request(method, url, headers=headers, content=body)
        if signal is None:
            return await call

        if signal.aborted:
            call.close()
            raise RequestAbortedError()

        task = asyncio.ensure_future(call)
        waiter = asyncio.ensure_future(signal.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)

        if task.cancelled():
            logger.debug(f"Aborted {method} {url}")
            raise RequestAbortedError()
        return task.result()
