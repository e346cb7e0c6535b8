"""
HTTP request execution layer.

This package provides request descriptors, body encoding, retry policy and
the exception hierarchy used for every HTTP call made through reqkit.
"""

from reqkit.core.http.client import HTTPClient
from reqkit.core.http.context import RequestContext
from reqkit.core.http.encoding import BodyType, encode_body
from reqkit.core.http.exceptions import (
    BodyEncodingError,
    DeadlineExceededError,
    HTTPClientError,
    HTTPConnectionError,
    HTTPStatusError,
    HTTPTimeoutError,
    HTTPTransportError,
    RequestBuildError,
    RequestCancelledError,
    RequestValidationError,
    ResponseReadError,
    RetriesExhaustedError,
)
from reqkit.core.http.request import RequestDescriptor, perform
from reqkit.core.http.retry import (
    TransientError,
    backoff_delay,
    is_idempotent_method,
    is_retryable_error,
    is_retryable_status,
    sleep_backoff,
)

__all__ = [
    "HTTPClient",
    "RequestContext",
    "RequestDescriptor",
    "perform",
    "BodyType",
    "encode_body",
    "TransientError",
    "backoff_delay",
    "is_idempotent_method",
    "is_retryable_error",
    "is_retryable_status",
    "sleep_backoff",
    "HTTPClientError",
    "RequestValidationError",
    "BodyEncodingError",
    "RequestBuildError",
    "HTTPTransportError",
    "HTTPConnectionError",
    "HTTPTimeoutError",
    "ResponseReadError",
    "HTTPStatusError",
    "RetriesExhaustedError",
    "RequestCancelledError",
    "DeadlineExceededError",
]
