"""Shared fixtures for reqkit tests."""

from __future__ import annotations

from typing import Callable, List

import httpx
import pytest


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it was asked to send."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: List[httpx.Request] = []

        def record(request: httpx.Request):
            self.requests.append(request)
            return handler(request)

        super().__init__(record)

    @property
    def calls(self) -> int:
        return len(self.requests)


@pytest.fixture
def no_backoff():
    """Backoff schedule that never waits."""

    def backoff(attempt: int) -> float:
        return 0.0

    return backoff


@pytest.fixture
def make_client():
    """Build httpx.AsyncClient instances backed by a RecordingTransport."""

    def factory(handler, **kwargs):
        transport = RecordingTransport(handler)
        return httpx.AsyncClient(transport=transport, **kwargs), transport

    return factory


@pytest.fixture
def sequence():
    """Handler factory replaying responses in order, repeating the last one.

    Items may be a status code, a (status, content) tuple, or an exception
    to raise from the transport.
    """

    def build(*items):
        remaining = list(items)

        def handler(request: httpx.Request):
            item = remaining.pop(0) if len(remaining) > 1 else remaining[0]
            if isinstance(item, BaseException):
                raise item
            if isinstance(item, int):
                return httpx.Response(item)
            status, content = item
            return httpx.Response(status, content=content)

        return handler

    return build
