"""Summary: Normalizes API outcomes into output records.

Importance: Gives the workflow engine one record shape for both results and captured failures.
Alternatives: Return raw responses and exceptions side by side.
"""

from __future__ import annotations

from typing import Any

from nylasbridge.errors import NylasBridgeError
from nylasbridge.models import OutputRecord


def normalize_success(body: Any) -> OutputRecord:
    """Summary: Wrap a successful response body unchanged.

    Importance: Empty bodies (such as a 204 from DELETE) become an empty object.
    Alternatives: Drop empty responses from the output.
    """

    return OutputRecord(json={} if body is None else body)


def normalize_failure(error: NylasBridgeError) -> OutputRecord:
    """Summary: Convert a captured failure into an error record.

    Importance: Keeps the status code as metadata rather than in the message text.
    Alternatives: Embed the status code in the error string.
    """

    return OutputRecord(json={"error": str(error)}, status_code=error.status_code)


def normalize(outcome: Any) -> OutputRecord:
    if isinstance(outcome, NylasBridgeError):
        return normalize_failure(outcome)
    return normalize_success(outcome)
