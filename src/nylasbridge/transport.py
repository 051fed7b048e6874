"""Summary: Authenticated HTTP transport for the Nylas v3 API.

Importance: Performs the single outbound call per item and maps HTTP failures to typed errors.
Alternatives: Use the Nylas Python SDK or a third-party HTTP client.
"""

from __future__ import annotations

import http.client
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Mapping
import urllib.error
import urllib.parse
import urllib.request

from nylasbridge.errors import ApiError, TransportError
from nylasbridge.models import Credentials, RequestDescriptor


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


class HttpTransport(ABC):
    """Summary: Abstract interface for authenticated Nylas calls.

    Importance: Lets the dispatcher run against real HTTP or a test double.
    Alternatives: Call urllib directly from the dispatcher.
    """

    @abstractmethod
    def send(self, request: RequestDescriptor, credentials: Credentials) -> Any:
        """Summary: Execute a request and return the parsed JSON body.

        Importance: Raises ApiError on non-2xx and TransportError when no response arrives.
        Alternatives: Return status and body tuples for the caller to inspect.
        """


class UrllibTransport(HttpTransport):
    """Summary: Sends Nylas requests with urllib and bearer authentication.

    Importance: Covers the whole v3 surface used here without extra dependencies.
    Alternatives: Use requests or httpx with connection pooling.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT_SECONDS) -> None:
        self._timeout = timeout

    def send(self, request: RequestDescriptor, credentials: Credentials) -> Any:
        logger.debug("Sending %s %s", request.method, request.path)
        try:
            http_request = _build_http_request(request, credentials)
            with urllib.request.urlopen(http_request, timeout=self._timeout) as response:
                raw = response.read()
        except urllib.error.HTTPError as exc:
            error_body = exc.read().decode("utf-8", errors="replace")
            raise ApiError(
                _extract_error_message(error_body) or str(exc.reason or ""),
                status_code=exc.code,
            ) from exc
        except urllib.error.URLError as exc:
            raise TransportError(str(exc.reason)) from exc
        except OSError as exc:
            raise TransportError(str(exc)) from exc
        # Malformed URLs raise ValueError; truncated reads raise HTTPException.
        except (ValueError, http.client.HTTPException) as exc:
            raise TransportError(str(exc) or type(exc).__name__) from exc
        return _parse_body(raw)


def _build_http_request(request: RequestDescriptor, credentials: Credentials) -> urllib.request.Request:
    """Summary: Translate a descriptor into a urllib request.

    Importance: Keeps header, query, and JSON encoding rules in one place.
    Alternatives: Encode requests inside each builder.
    """

    url = request.url
    if request.query:
        url += "?" + urllib.parse.urlencode(
            {key: _query_value(value) for key, value in request.query.items()}
        )
    headers = {
        "Authorization": f"Bearer {credentials.access_token}",
        "Accept": "application/json",
    }
    data = None
    if request.body is not None:
        data = json.dumps(request.body, default=_json_default).encode("utf-8")
        headers["Content-Type"] = "application/json"
    return urllib.request.Request(url, data=data, headers=headers, method=request.method)


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _json_default(value: Any) -> Any:
    if isinstance(value, Mapping):
        return dict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _parse_body(raw: bytes) -> Any:
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise TransportError(f"Invalid JSON response: {exc.reason}") from exc
    if not text.strip():
        return {}
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise TransportError(f"Invalid JSON response: {exc.msg}") from exc


def _extract_error_message(raw: str) -> str | None:
    """Summary: Pull a human-readable message from a Nylas error body.

    Importance: Nylas v3 nests messages under "error", older responses use "message".
    Alternatives: Surface the raw error body text.
    """

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError:
        return raw.strip() or None
    if not isinstance(payload, dict):
        return None
    message = payload.get("message")
    if message:
        return str(message)
    error = payload.get("error")
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    return None


def check_credentials(transport: HttpTransport, credentials: Credentials) -> bool:
    """Summary: Verify credentials against the applications endpoint.

    Importance: Mirrors the connectivity self-check used when saving credentials.
    Alternatives: Attempt a real operation and inspect the failure.
    """

    request = RequestDescriptor(method="GET", path="/v3/applications", base_uri=credentials.api_uri)
    try:
        transport.send(request, credentials)
    except TransportError:
        raise
    except ApiError as exc:
        logger.warning("Credential check failed with status %s.", exc.status_code)
        return False
    return True
