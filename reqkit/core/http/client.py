"""
Verb-oriented facade over perform().

HTTPClient keeps per-instance defaults (timeout, retry, body type, shared
httpx client) and turns each get/post/... call into a RequestDescriptor.
"""

from typing import Any, Mapping, Optional, Tuple

import httpx

from reqkit.core.http.context import RequestContext
from reqkit.core.http.encoding import BodyType
from reqkit.core.http.headers import HeaderValue
from reqkit.core.http.request import RequestDescriptor, perform


class HTTPClient:
    """
    Async HTTP client with encoded bodies, default headers and optional retries.

    Every call returns (response, body bytes) and raises an HTTPClientError
    subclass on failure; HTTP statuses >= 400 raise HTTPStatusError with the
    response and body attached.

    Example:
        ```python
        client = HTTPClient(retry=True)
        response, body = await client.get("https://api.example.com/data")
        data = response.json()
        ```
    """

    def __init__(
        self,
        default_timeout: Optional[float] = None,
        retry: bool = False,
        body_type: BodyType = BodyType.JSON,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize HTTP client.

        Args:
            default_timeout: Timeout in seconds for every request (library default if not set)
            retry: Retry transient failures of idempotent requests
            body_type: Encoding used for request bodies
            client: Shared httpx.AsyncClient to send through (optional)
        """
        self.default_timeout = default_timeout
        self.retry = retry
        self.body_type = BodyType.parse(body_type)
        self.client = client

    async def get(
        self,
        url: str,
        headers: Optional[Mapping[str, HeaderValue]] = None,
        timeout: Optional[float] = None,
        ctx: Optional[RequestContext] = None
    ) -> Tuple[httpx.Response, bytes]:
        """Make an async GET request."""
        return await self.request("GET", url, headers=headers, timeout=timeout, ctx=ctx)

    async def head(
        self,
        url: str,
        headers: Optional[Mapping[str, HeaderValue]] = None,
        timeout: Optional[float] = None,
        ctx: Optional[RequestContext] = None
    ) -> Tuple[httpx.Response, bytes]:
        """Make an async HEAD request."""
        return await self.request("HEAD", url, headers=headers, timeout=timeout, ctx=ctx)

    async def options(
        self,
        url: str,
        headers: Optional[Mapping[str, HeaderValue]] = None,
        timeout: Optional[float] = None,
        ctx: Optional[RequestContext] = None
    ) -> Tuple[httpx.Response, bytes]:
        """Make an async OPTIONS request."""
        return await self.request("OPTIONS", url, headers=headers, timeout=timeout, ctx=ctx)

    async def post(
        self,
        url: str,
        body: Any = None,
        headers: Optional[Mapping[str, HeaderValue]] = None,
        timeout: Optional[float] = None,
        ctx: Optional[RequestContext] = None
    ) -> Tuple[httpx.Response, bytes]:
        """
        Make an async POST request.

        POST is not idempotent, so it is attempted once even with retry enabled.
        """
        return await self.request("POST", url, body=body, headers=headers, timeout=timeout, ctx=ctx)

    async def put(
        self,
        url: str,
        body: Any = None,
        headers: Optional[Mapping[str, HeaderValue]] = None,
        timeout: Optional[float] = None,
        ctx: Optional[RequestContext] = None
    ) -> Tuple[httpx.Response, bytes]:
        """Make an async PUT request."""
        return await self.request("PUT", url, body=body, headers=headers, timeout=timeout, ctx=ctx)

    async def patch(
        self,
        url: str,
        body: Any = None,
        headers: Optional[Mapping[str, HeaderValue]] = None,
        timeout: Optional[float] = None,
        ctx: Optional[RequestContext] = None
    ) -> Tuple[httpx.Response, bytes]:
        """
        Make an async PATCH request.

        PATCH is not idempotent, so it is attempted once even with retry enabled.
        """
        return await self.request("PATCH", url, body=body, headers=headers, timeout=timeout, ctx=ctx)

    async def delete(
        self,
        url: str,
        headers: Optional[Mapping[str, HeaderValue]] = None,
        timeout: Optional[float] = None,
        ctx: Optional[RequestContext] = None
    ) -> Tuple[httpx.Response, bytes]:
        """Make an async DELETE request."""
        return await self.request("DELETE", url, headers=headers, timeout=timeout, ctx=ctx)

    async def request(
        self,
        method: str,
        url: str,
        body: Any = None,
        headers: Optional[Mapping[str, HeaderValue]] = None,
        timeout: Optional[float] = None,
        ctx: Optional[RequestContext] = None
    ) -> Tuple[httpx.Response, bytes]:
        """
        Make a request with this client's defaults.

        Args:
            method: HTTP method
            url: The URL to request
            body: Request body, encoded with this client's body type (optional)
            headers: HTTP headers to send (optional)
            timeout: Request timeout in seconds (uses default if not specified)
            ctx: Cancellation/deadline signal (optional)

        Returns:
            Tuple of (httpx.Response, body bytes)
        """
        descriptor = RequestDescriptor(
            url=url,
            method=method,
            body_type=self.body_type,
            retry=self.retry,
            client=self.client
        )
        return await perform(
            descriptor,
            ctx=ctx,
            headers=headers,
            body=body,
            timeout=timeout if timeout is not None else self.default_timeout
        )
