"""Summary: Error types raised while executing Nylas operations.

Importance: Separates local validation failures from remote API and network failures.
Alternatives: Raise RuntimeError everywhere and parse messages downstream.
"""

from __future__ import annotations


API_ERROR_PREFIX = "Nylas API Error"
UNKNOWN_ERROR_MESSAGE = "Unknown error occurred"


class NylasBridgeError(Exception):
    """Summary: Base class for item-level failures.

    Importance: Lets the dispatcher catch every recoverable failure in one place.
    Alternatives: Catch Exception and risk hiding programming errors.
    """

    status_code: int | None = None


class OperationError(NylasBridgeError):
    """Summary: Local precondition or validation failure.

    Importance: Raised before any request is sent, so it never reaches the network.
    Alternatives: Return validation results instead of raising.
    """


class ApiError(NylasBridgeError):
    """Summary: The Nylas API answered with a non-2xx status.

    Importance: Carries the status code as metadata instead of embedding it in the message.
    Alternatives: Surface the raw HTTP error from the transport.
    """

    def __init__(
        self,
        server_message: str | None,
        status_code: int | None = None,
        description: str | None = None,
    ) -> None:
        self.server_message = server_message or UNKNOWN_ERROR_MESSAGE
        self.status_code = status_code
        self.description = description
        super().__init__(f"{API_ERROR_PREFIX}: {self.server_message}")


class TransportError(ApiError):
    """Summary: The request could not complete (DNS, TLS, connection reset).

    Importance: Surfaces like an ApiError but without a status code.
    Alternatives: Let urllib errors propagate unchanged.
    """

    def __init__(
        self,
        server_message: str | None,
        status_code: int | None = None,
        description: str | None = None,
    ) -> None:
        super().__init__(server_message, None, description)


class UnsupportedOperationError(ValueError):
    """Summary: A resource/operation pair outside the declared operation table.

    Importance: Signals a configuration or programming error that must abort the batch.
    Alternatives: Emit an empty success record and continue silently.
    """
