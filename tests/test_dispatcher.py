"""Summary: Tests for per-item dispatch and the batch fail policy.

Importance: Ensures output order, error capture, and abort behavior match workflow expectations.
Alternatives: Exercise the dispatcher only through the HTTP API.
"""

from __future__ import annotations

import urllib.request
from typing import Any

import pytest

from nylasbridge.dispatcher import Dispatcher
from nylasbridge.errors import ApiError, OperationError, TransportError, UnsupportedOperationError
from nylasbridge.models import Credentials
from nylasbridge.parameters import ItemParameterSource
from nylasbridge.transport import UrllibTransport


CREDENTIALS = Credentials(access_token="token")


def _send_item(email: str = "a@b.com") -> dict[str, object]:
    return {
        "resource": "email",
        "operation": "sendMessage",
        "grantId": "grant-1",
        "recipients": {"recipient": [{"email": email}]},
        "subject": "Hello",
        "body": "Body",
    }


def _list_item(limit: int = 5) -> dict[str, object]:
    return {"resource": "calendar", "operation": "listCalendars", "grantId": "grant-1", "limit": limit}


def test_continue_on_fail_keeps_order(make_transport) -> None:
    """Summary: Verify a failing middle item becomes an error record.

    Importance: Downstream steps rely on output index i matching input index i.
    Alternatives: Drop failed items from the output.
    """

    transport = make_transport([{"id": "first"}, {"id": "third"}])
    dispatcher = Dispatcher(transport=transport, credentials=CREDENTIALS)
    items = [_send_item(), _send_item(email="bad"), _list_item()]
    records = dispatcher.execute(ItemParameterSource(items), continue_on_fail=True)
    assert [record.json for record in records] == [
        {"id": "first"},
        {"error": "Recipient 1: Invalid email format - bad"},
        {"id": "third"},
    ]
    assert records[1].is_error
    assert len(transport.requests) == 2


def test_abort_stops_at_first_failure(make_transport) -> None:
    """Summary: Verify the batch aborts without continue-on-fail.

    Importance: No further items may be sent after the failing one.
    Alternatives: Finish the batch and raise afterwards.
    """

    transport = make_transport()
    dispatcher = Dispatcher(transport=transport, credentials=CREDENTIALS)
    items = [_send_item(), {**_send_item(), "recipients": []}, _list_item()]
    with pytest.raises(OperationError, match="At least one recipient is required"):
        dispatcher.execute(ItemParameterSource(items), continue_on_fail=False)
    assert len(transport.requests) == 1


def test_api_error_captured_with_status(make_transport) -> None:
    transport = make_transport([ApiError("Grant not found", status_code=404)])
    dispatcher = Dispatcher(transport=transport, credentials=CREDENTIALS)
    records = dispatcher.execute(ItemParameterSource([_send_item()]), continue_on_fail=True)
    assert records[0].json == {"error": "Nylas API Error: Grant not found"}
    assert records[0].status_code == 404


def test_api_error_propagates_with_description(make_transport) -> None:
    """Summary: Verify aborted API errors carry the operation description.

    Importance: Gives operators context without changing the message text.
    Alternatives: Wrap the error in a new exception type.
    """

    error = ApiError(None, status_code=500)
    transport = make_transport([error])
    dispatcher = Dispatcher(transport=transport, credentials=CREDENTIALS)
    with pytest.raises(ApiError) as excinfo:
        dispatcher.execute(ItemParameterSource([_send_item()]))
    assert excinfo.value is error
    assert str(excinfo.value) == "Nylas API Error: Unknown error occurred"
    assert excinfo.value.description == "Failed to send email via Nylas API"


def test_transport_error_has_no_status(make_transport) -> None:
    transport = make_transport([TransportError("Connection refused")])
    dispatcher = Dispatcher(transport=transport, credentials=CREDENTIALS)
    records = dispatcher.execute(ItemParameterSource([_list_item()]), continue_on_fail=True)
    assert records[0].json == {"error": "Nylas API Error: Connection refused"}
    assert records[0].status_code is None


def test_unsupported_operation_aborts_even_when_continuing(make_transport) -> None:
    transport = make_transport()
    dispatcher = Dispatcher(transport=transport, credentials=CREDENTIALS)
    items = [_list_item(), {"resource": "email", "operation": "deleteEvent", "grantId": "g"}]
    with pytest.raises(UnsupportedOperationError):
        dispatcher.execute(ItemParameterSource(items), continue_on_fail=True)
    assert len(transport.requests) == 1


def test_missing_required_parameter_is_item_error(make_transport) -> None:
    transport = make_transport()
    dispatcher = Dispatcher(transport=transport, credentials=CREDENTIALS)
    item = {
        "resource": "calendar",
        "operation": "createEvent",
        "grantId": "g",
        "startTime": 100,
        "endTime": 200,
    }
    records = dispatcher.execute(ItemParameterSource([item]), continue_on_fail=True)
    assert records[0].json == {"error": "Parameter 'title' is required"}
    assert transport.requests == []


def test_declared_defaults_and_shared_grant(make_transport) -> None:
    """Summary: Verify declared defaults and shared values fill in item parameters.

    Importance: Matches the engine behavior of schema defaults for omitted fields.
    Alternatives: Require every item to spell out every parameter.
    """

    transport = make_transport()
    dispatcher = Dispatcher(transport=transport, credentials=CREDENTIALS)
    item = {"resource": "calendar", "operation": "listEvents"}
    dispatcher.execute(ItemParameterSource([item], shared={"grantId": "shared-grant"}))
    request = transport.requests[0]
    assert request.path == "/v3/grants/shared-grant/events"
    assert request.query == {"calendar_id": "primary", "limit": 50}
    assert request.url.startswith("https://api.us.nylas.com/")
    assert transport.credentials[0] is CREDENTIALS


def test_empty_batch_returns_empty_list(make_transport) -> None:
    dispatcher = Dispatcher(transport=make_transport(), credentials=CREDENTIALS)
    assert dispatcher.execute(ItemParameterSource([])) == []


def test_delete_without_body_yields_empty_object(make_transport) -> None:
    transport = make_transport([None])
    dispatcher = Dispatcher(transport=transport, credentials=CREDENTIALS)
    item = {"resource": "contact", "operation": "deleteContact", "grantId": "g", "contactId": "c1"}
    records = dispatcher.execute(ItemParameterSource([item]))
    assert records[0].json == {}
    assert transport.requests[0].method == "DELETE"


def test_malformed_api_uri_becomes_error_records() -> None:
    """Summary: Verify URL construction failures respect continue-on-fail.

    Importance: Every item must still produce one output record.
    Alternatives: Abort the batch on configuration mistakes.
    """

    credentials = Credentials(access_token="token", api_uri="api.us.nylas.com")
    dispatcher = Dispatcher(transport=UrllibTransport(), credentials=credentials)
    records = dispatcher.execute(ItemParameterSource([_list_item(), _list_item()]), continue_on_fail=True)
    assert len(records) == 2
    for record in records:
        assert record.is_error
        assert record.status_code is None
        assert record.json["error"].startswith("Nylas API Error: unknown url type")


def test_undecodable_response_becomes_error_records(monkeypatch: pytest.MonkeyPatch) -> None:
    class _Response:
        def read(self) -> bytes:
            return b"\xff\xfe{}"

        def __enter__(self) -> "_Response":
            return self

        def __exit__(self, *args: Any) -> None:
            return None

    monkeypatch.setattr(urllib.request, "urlopen", lambda request, timeout: _Response())
    dispatcher = Dispatcher(transport=UrllibTransport(), credentials=CREDENTIALS)
    records = dispatcher.execute(ItemParameterSource([_list_item(), _list_item()]), continue_on_fail=True)
    assert [record.is_error for record in records] == [True, True]
    assert records[0].json["error"].startswith("Nylas API Error: Invalid JSON response")
