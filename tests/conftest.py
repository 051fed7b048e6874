"""Summary: Shared pytest fixtures for nylasbridge tests.

Importance: Provides a recording transport so no test touches the network.
Alternatives: Patch urllib in every dispatcher test.
"""

from __future__ import annotations

from typing import Any, Callable

import pytest

from nylasbridge.models import Credentials, RequestDescriptor
from nylasbridge.transport import HttpTransport


class RecordingTransport(HttpTransport):
    """Summary: Records requests and replays queued responses or errors."""

    def __init__(self, responses: list[Any] | None = None) -> None:
        self.requests: list[RequestDescriptor] = []
        self.credentials: list[Credentials] = []
        self._responses = list(responses or [])

    def send(self, request: RequestDescriptor, credentials: Credentials) -> Any:
        self.requests.append(request)
        self.credentials.append(credentials)
        response = self._responses.pop(0) if self._responses else {"data": []}
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def make_transport() -> Callable[..., RecordingTransport]:
    def _make(responses: list[Any] | None = None) -> RecordingTransport:
        return RecordingTransport(responses)

    return _make
