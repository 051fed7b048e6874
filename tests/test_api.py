"""Summary: API integration tests.

Importance: Validates FastAPI endpoints against the dispatcher with a recording transport.
Alternatives: Use manual curl testing only.
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from nylasbridge.api import create_app
from nylasbridge.config import AppConfig
from nylasbridge.errors import ApiError


def _build_config(api_key: str = "", grant_id: str = "grant-1") -> AppConfig:
    """Summary: Build an AppConfig for API tests.

    Importance: Keeps tests independent of config files and environment.
    Alternatives: Load AppConfig from environment variables.
    """

    return AppConfig(
        access_token="token",
        api_uri="https://api.us.nylas.com",
        grant_id=grant_id,
        request_timeout=5.0,
        continue_on_fail=False,
        api_host="127.0.0.1",
        api_port=8000,
        api_key=api_key,
    )


def test_health() -> None:
    client = TestClient(create_app(_build_config()))
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_execute_batch_with_continue(make_transport) -> None:
    """Summary: Verify a batch returns one record per item over HTTP.

    Importance: Confirms the HTTP layer wires into the dispatcher and fail policy.
    Alternatives: Validate only the CLI workflow.
    """

    transport = make_transport([{"data": [{"id": "cal-1"}]}])
    client = TestClient(create_app(_build_config(), transport=transport))
    payload = {
        "items": [
            {"resource": "calendar", "operation": "listCalendars", "limit": 10},
            {
                "resource": "email",
                "operation": "sendMessage",
                "recipients": [],
                "subject": "Hi",
                "body": "Body",
            },
        ],
        "continue_on_fail": True,
    }
    response = client.post("/execute", json=payload)
    assert response.status_code == 200
    assert response.json() == {
        "items": [
            {"json": {"data": [{"id": "cal-1"}]}},
            {"json": {"error": "At least one recipient is required"}},
        ]
    }
    assert transport.requests[0].path == "/v3/grants/grant-1/calendars"


def test_execute_abort_returns_validation_status(make_transport) -> None:
    client = TestClient(create_app(_build_config(), transport=make_transport()))
    payload = {
        "items": [{"resource": "contact", "operation": "deleteContact", "contactId": ""}],
    }
    response = client.post("/execute", json=payload)
    assert response.status_code == 400
    assert response.json()["detail"] == "Parameter 'contactId' is required"


def test_execute_abort_returns_api_status(make_transport) -> None:
    transport = make_transport([ApiError("Grant not found", status_code=404)])
    client = TestClient(create_app(_build_config(), transport=transport))
    payload = {"items": [{"resource": "contact", "operation": "listContacts"}]}
    response = client.post("/execute", json=payload)
    assert response.status_code == 404
    assert response.json()["detail"] == "Nylas API Error: Grant not found"


def test_execute_unknown_operation(make_transport) -> None:
    client = TestClient(create_app(_build_config(), transport=make_transport()))
    payload = {"items": [{"resource": "email", "operation": "archive"}], "continue_on_fail": True}
    response = client.post("/execute", json=payload)
    assert response.status_code == 422


def test_api_key_required_when_configured(make_transport) -> None:
    """Summary: Verify the API key guard protects execution endpoints.

    Importance: Prevents unauthenticated callers from spending the access token.
    Alternatives: Rely on network isolation only.
    """

    client = TestClient(create_app(_build_config(api_key="k"), transport=make_transport()))
    assert client.get("/operations").status_code == 401
    response = client.get("/operations", headers={"X-API-Key": "k"})
    assert response.status_code == 200
    assert len(response.json()["operations"]) == 11


def test_credentials_check(make_transport) -> None:
    transport = make_transport([ApiError("Unauthorized", status_code=401)])
    client = TestClient(create_app(_build_config(), transport=transport))
    response = client.get("/credentials/check")
    assert response.status_code == 200
    assert response.json() == {"valid": False}
    assert transport.requests[0].path == "/v3/applications"
