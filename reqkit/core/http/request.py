"""
Request executor.

perform() runs one logical call across 1..N physical attempts: the body is
encoded once, each attempt builds a fresh httpx.Request over the same bytes,
and the retry policy decides whether to back off and try again.
"""

import copy
from typing import Any, Callable, Mapping, Optional, Tuple

import httpx
from pydantic import BaseModel, ConfigDict, field_validator

from reqkit.core.config import DEFAULT_RETRY_ATTEMPTS, DEFAULT_TIMEOUT, ERROR_BODY_LIMIT
from reqkit.core.http.context import RequestContext
from reqkit.core.http.encoding import BodyType, CONTENT_TYPES, encode_body
from reqkit.core.http.exceptions import (
    HTTPConnectionError,
    HTTPStatusError,
    HTTPTimeoutError,
    RequestBuildError,
    RequestCancelledError,
    RequestValidationError,
    ResponseReadError,
    RetriesExhaustedError,
)
from reqkit.core.http.headers import (
    HeaderList,
    HeaderValue,
    apply_headers,
    get_header,
    set_header,
    truncate,
)
from reqkit.core.http.retry import (
    TransientError,
    backoff_delay,
    is_idempotent_method,
    is_retryable_error,
    is_retryable_status,
    sleep_backoff,
)
from reqkit.core.logging import get_logger

logger = get_logger(__name__)


class RequestDescriptor(BaseModel):
    """
    Immutable description of one logical HTTP call.

    Attributes:
        url: Target URL
        method: HTTP method
        body_type: Body format; unknown tags fall back to JSON
        retry: Enable the built-in retry strategy (idempotent methods only)
        client: Optional injected httpx.AsyncClient. It is used as-is, or
            shallow-copied when perform() gets a timeout override; it is
            never mutated or closed.
        backoff: Delay schedule, attempt number -> seconds
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    url: str = ""
    method: str = ""
    body_type: BodyType = BodyType.JSON
    retry: bool = False
    client: Optional[httpx.AsyncClient] = None
    backoff: Callable[[int], float] = backoff_delay

    @field_validator("body_type", mode="before")
    @classmethod
    def default_to_json(cls, v: Any) -> BodyType:
        return BodyType.parse(v)

    async def perform(
        self,
        ctx: Optional[RequestContext] = None,
        headers: Optional[Mapping[str, HeaderValue]] = None,
        body: Any = None,
        timeout: Optional[float] = None
    ) -> Tuple[httpx.Response, bytes]:
        """Shortcut for perform(self, ...)."""
        return await perform(self, ctx, headers, body, timeout)


async def perform(
    descriptor: RequestDescriptor,
    ctx: Optional[RequestContext] = None,
    headers: Optional[Mapping[str, HeaderValue]] = None,
    body: Any = None,
    timeout: Optional[float] = None
) -> Tuple[httpx.Response, bytes]:
    """
    Execute the request described by `descriptor`.

    Args:
        descriptor: What to call and how
        ctx: Cancellation/deadline signal (background context if omitted)
        headers: Header values may be str (set), list/tuple of str (added one
            by one) or anything else (stringified and set)
        body: None for no body; any serializable value for JSON/XML;
            str or bytes for plain
        timeout: Timeout override in seconds; ignored unless positive

    Returns:
        Tuple of (response, body bytes). The response content is already read
        and its stream closed.

    Raises:
        RequestValidationError: If URL or method is empty
        BodyEncodingError: If the body cannot be encoded
        RequestBuildError: If the request cannot be constructed
        HTTPConnectionError / HTTPTimeoutError: If sending fails
        ResponseReadError: If the response body cannot be read
        HTTPStatusError: If the final status code is >= 400
        RequestCancelledError: If ctx is cancelled or past its deadline
        RetriesExhaustedError: If attempts ran out without an outcome
    """
    if ctx is None:
        ctx = RequestContext.background()

    if not descriptor.url.strip():
        raise RequestValidationError("URL is empty")
    if not descriptor.method.strip():
        raise RequestValidationError("Method is empty")

    override = timeout is not None and timeout > 0
    effective_timeout = timeout if override else DEFAULT_TIMEOUT

    # Encode once so every attempt replays the same bytes
    payload: Optional[bytes] = None
    content_type = ""
    if body is not None:
        payload, content_type = encode_body(descriptor.body_type, body)

    attempts = 1
    if descriptor.retry and is_idempotent_method(descriptor.method):
        attempts = DEFAULT_RETRY_ATTEMPTS

    client, owned = _resolve_client(descriptor.client, effective_timeout, override)
    try:
        return await _run_attempts(descriptor, ctx, client, headers, payload, content_type, attempts)
    finally:
        if owned:
            await client.aclose()


def _new_client(timeout: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=timeout)


def _resolve_client(
    injected: Optional[httpx.AsyncClient],
    timeout: float,
    override: bool
) -> Tuple[httpx.AsyncClient, bool]:
    """Return the client to use and whether this call owns (and must close) it."""
    if injected is None:
        return _new_client(timeout), True
    if override:
        # Shallow copy shares the transport and pool; only the copy gets the new timeout
        scoped = copy.copy(injected)
        scoped.timeout = timeout
        return scoped, False
    return injected, False


async def _run_attempts(
    descriptor: RequestDescriptor,
    ctx: RequestContext,
    client: httpx.AsyncClient,
    headers: Optional[Mapping[str, HeaderValue]],
    payload: Optional[bytes],
    content_type: str,
    attempts: int
) -> Tuple[httpx.Response, bytes]:
    method, url = descriptor.method, descriptor.url
    last_response: Optional[httpx.Response] = None
    last_body: Optional[bytes] = None

    for attempt in range(1, attempts + 1):
        cancelled = ctx.err()
        if cancelled is not None:
            raise _with_outcome(cancelled, url, last_response, last_body)

        request = _build_request(client, descriptor, headers, payload, content_type)
        logger.debug(f"{method} {url} attempt {attempt}/{attempts}")

        try:
            response = await ctx.guard(client.send(request, stream=True))
        except RequestCancelledError as cancelled:
            raise _with_outcome(cancelled, url, last_response, last_body)
        except Exception as e:
            if descriptor.retry and attempt < attempts and is_retryable_error(e):
                logger.warning(
                    f"Retrying {method} {url} after transport error "
                    f"(attempt {attempt}/{attempts}): {e}"
                )
                await sleep_backoff(ctx, attempt, descriptor.backoff)
                continue
            error_cls = HTTPTimeoutError if _is_timeout(e) else HTTPConnectionError
            raise error_cls(
                f"do request: {str(e)}",
                url=url,
                original_error=e,
                response=last_response,
                body=last_body
            ) from e

        read_error: Optional[httpx.HTTPError] = None
        try:
            response_body = await ctx.guard(response.aread())
        except httpx.HTTPError as e:
            read_error = e
        except RequestCancelledError as cancelled:
            raise _with_outcome(cancelled, url, response, None)
        finally:
            await response.aclose()

        if read_error is not None:
            if descriptor.retry and attempt < attempts:
                last_response, last_body = response, None
                logger.warning(
                    f"Retrying {method} {url} after read error "
                    f"(attempt {attempt}/{attempts}): {read_error}"
                )
                await sleep_backoff(ctx, attempt, descriptor.backoff)
                continue
            raise ResponseReadError(
                f"read response: {str(read_error)}",
                url=url,
                status_code=response.status_code,
                original_error=read_error,
                response=response,
                body=None
            ) from read_error

        last_response, last_body = response, response_body

        if descriptor.retry and attempt < attempts and is_retryable_status(response.status_code):
            logger.warning(
                f"Retrying {method} {url} after HTTP {response.status_code} "
                f"(attempt {attempt}/{attempts})"
            )
            await sleep_backoff(ctx, attempt, descriptor.backoff)
            continue

        if response.status_code >= 400:
            raise _status_error(url, response, response_body)

        return response, response_body

    if last_response is not None and last_response.status_code >= 400:
        raise _status_error(url, last_response, last_body or b"")
    raise RetriesExhaustedError(
        f"request failed after {attempts} attempts",
        url=url,
        response=last_response,
        body=last_body
    )


def _build_request(
    client: httpx.AsyncClient,
    descriptor: RequestDescriptor,
    headers: Optional[Mapping[str, HeaderValue]],
    payload: Optional[bytes],
    content_type: str
) -> httpx.Request:
    request_headers: HeaderList = []
    apply_headers(request_headers, headers)

    if payload is not None and not get_header(request_headers, "Content-Type"):
        set_header(request_headers, "Content-Type", content_type)

    if not get_header(request_headers, "Accept"):
        set_header(request_headers, "Accept", CONTENT_TYPES[descriptor.body_type])

    try:
        return client.build_request(
            descriptor.method,
            descriptor.url,
            content=payload,
            headers=request_headers
        )
    except (httpx.InvalidURL, TypeError, ValueError) as e:
        raise RequestBuildError(
            f"create request: {str(e)}",
            url=descriptor.url,
            original_error=e
        ) from e


def _is_timeout(err: BaseException) -> bool:
    if isinstance(err, TransientError):
        return bool(err.is_timeout())
    return isinstance(err, httpx.TimeoutException)


def _status_error(url: str, response: httpx.Response, body: bytes) -> HTTPStatusError:
    text = body.decode("utf-8", errors="replace")
    return HTTPStatusError(
        f"http error {response.status_code}: {truncate(text, ERROR_BODY_LIMIT)}",
        url=url,
        status_code=response.status_code,
        response=response,
        body=body
    )


def _with_outcome(
    cancelled: RequestCancelledError,
    url: str,
    response: Optional[httpx.Response],
    body: Optional[bytes]
) -> RequestCancelledError:
    cancelled.url = url
    cancelled.response = response
    cancelled.body = body
    return cancelled
