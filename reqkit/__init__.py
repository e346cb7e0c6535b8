"""reqkit: encoded bodies, default headers and retrying HTTP calls on top of httpx."""

from reqkit.core.http import (
    BodyType,
    HTTPClient,
    HTTPClientError,
    HTTPStatusError,
    RequestCancelledError,
    RequestContext,
    RequestDescriptor,
    perform,
)
from reqkit.core.logging import get_logger, setup_logging

__all__ = [
    "BodyType",
    "HTTPClient",
    "HTTPClientError",
    "HTTPStatusError",
    "RequestCancelledError",
    "RequestContext",
    "RequestDescriptor",
    "perform",
    "get_logger",
    "setup_logging",
]

__version__ = "1.0.0"
