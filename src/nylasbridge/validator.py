"""Summary: Input validation for Nylas operations.

Importance: Rejects malformed sends locally so bad requests never reach the network.
Alternatives: Let the Nylas API reject invalid payloads and surface its errors.
"""

from __future__ import annotations

import re
from typing import Any, Callable

from nylasbridge.errors import OperationError
from nylasbridge.models import Operation, Recipient, Resource


EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

ValidatedParams = dict[str, Any]


def validate(
    resource: Resource | str, operation: Operation | str, params: dict[str, Any]
) -> ValidatedParams:
    """Summary: Validate parameters for one resource/operation pair.

    Importance: Central entry point used by the dispatcher before building requests.
    Alternatives: Validate inside each request builder.
    """

    check = _VALIDATORS.get((Resource(resource), Operation(operation)))
    if check is None:
        return dict(params)
    return check(params)


def validate_send_message(params: dict[str, Any]) -> ValidatedParams:
    """Summary: Validate recipients, subject, and body for SendMessage.

    Importance: Reports the first offending recipient with its 1-based position.
    Alternatives: Collect every problem and report them together.
    """

    recipients = validate_recipients(_recipient_entries(params.get("recipients")))
    subject = params.get("subject") or ""
    body = params.get("body") or ""
    if not subject.strip():
        raise OperationError("Subject cannot be empty")
    if not body.strip():
        raise OperationError("Body cannot be empty")
    validated = dict(params)
    validated["recipients"] = recipients
    return validated


def validate_recipients(entries: list[dict[str, Any]]) -> tuple[Recipient, ...]:
    if not entries:
        raise OperationError("At least one recipient is required")
    recipients: list[Recipient] = []
    for index, entry in enumerate(entries, start=1):
        raw_email = entry.get("email") or ""
        email = raw_email.strip()
        if not email:
            raise OperationError(f"Recipient {index}: Email address is required")
        if not is_valid_email(email):
            raise OperationError(f"Recipient {index}: Invalid email format - {raw_email}")
        name = (entry.get("name") or "").strip()
        recipients.append(Recipient(email=email, name=name or None))
    return tuple(recipients)


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value))


def _recipient_entries(raw: Any) -> list[dict[str, Any]]:
    """Summary: Unwrap the recipients fixed collection.

    Importance: The engine nests recipient rows under a "recipient" key.
    Alternatives: Require callers to pass a flat list.
    """

    if raw is None:
        return []
    if isinstance(raw, dict):
        raw = raw.get("recipient") or []
    if not isinstance(raw, list):
        raise OperationError("Recipients must be a list")
    entries: list[dict[str, Any]] = []
    for item in raw:
        if isinstance(item, Recipient):
            entries.append({"email": item.email, "name": item.name})
        elif isinstance(item, dict):
            entries.append(item)
        else:
            raise OperationError("Recipients must be a list")
    return entries


# Operations absent here pass through unchanged.
_VALIDATORS: dict[tuple[Resource, Operation], Callable[[dict[str, Any]], ValidatedParams]] = {
    (Resource.EMAIL, Operation.SEND_MESSAGE): validate_send_message,
}
