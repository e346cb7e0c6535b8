"""
Custom exceptions for HTTP request execution.

Every failure raised by perform() is an HTTPClientError. Failures that happen
after a response was obtained keep that response and its body on the
exception, so callers can inspect the payload of a failed call while still
treating it as an error.
"""

from typing import Optional

import httpx


class HTTPClientError(Exception):
    """
    Base exception for all HTTP client errors.

    Catch this to handle any request failure generically.
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        original_error: Optional[BaseException] = None,
        response: Optional[httpx.Response] = None,
        body: Optional[bytes] = None
    ):
        """
        Initialize HTTP client error.

        Args:
            message: Human-readable error description
            url: The URL that was being accessed (optional)
            status_code: HTTP status code if applicable (optional)
            original_error: The underlying exception that caused this error (optional)
            response: Last response received before the failure (optional)
            body: Body bytes of that response, when they were read (optional)
        """
        self.message = message
        self.url = url
        self.status_code = status_code
        self.original_error = original_error
        self.response = response
        self.body = body

        super().__init__(self.message)

    def __str__(self) -> str:
        """Return string representation of the error."""
        parts = [self.message]
        if self.url:
            parts.append(f"URL: {self.url}")
        if self.status_code:
            parts.append(f"Status: {self.status_code}")
        return " | ".join(parts)


class RequestValidationError(HTTPClientError):
    """
    Raised when a request descriptor is unusable (empty URL or method).

    No network activity happens before this is raised.
    """
    pass


class BodyEncodingError(HTTPClientError):
    """
    Raised when the request body cannot be encoded for its body type.

    No network activity happens before this is raised.
    """
    pass


class RequestBuildError(HTTPClientError):
    """Raised when the transport request cannot be constructed."""
    pass


class HTTPTransportError(HTTPClientError):
    """
    Exception raised when sending the request fails at the transport level.

    Parent of HTTPConnectionError and HTTPTimeoutError.
    """
    pass


class HTTPConnectionError(HTTPTransportError):
    """
    Exception raised when connection to the server fails.

    This includes DNS resolution failures, refused or reset connections, etc.
    """
    pass


class HTTPTimeoutError(HTTPTransportError):
    """
    Exception raised when a request times out.

    This occurs when the server doesn't respond within the specified timeout period.
    """
    pass


class ResponseReadError(HTTPClientError):
    """Raised when the response body cannot be read; `body` is always None."""
    pass


class HTTPStatusError(HTTPClientError):
    """
    Exception raised when the server returns an error status code.

    This includes 4xx client errors and 5xx server errors. Both `response`
    and `body` are populated.
    """
    pass


class RetriesExhaustedError(HTTPClientError):
    """Raised when every attempt was consumed without a usable outcome."""
    pass


class RequestCancelledError(HTTPClientError):
    """Raised when the caller's RequestContext was cancelled."""
    pass


class DeadlineExceededError(RequestCancelledError):
    """Raised when the caller's RequestContext deadline passed."""
    pass
