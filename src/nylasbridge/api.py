"""Summary: FastAPI application for nylasbridge.

Importance: Exposes batch execution over HTTP for workflow engines that cannot embed Python.
Alternatives: Use a CLI-only workflow or a different web framework.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import Depends, FastAPI, Header, HTTPException
from pydantic import BaseModel, Field

from nylasbridge.app import build_context, supported_operations
from nylasbridge.config import AppConfig
from nylasbridge.errors import ApiError, NylasBridgeError, TransportError, UnsupportedOperationError
from nylasbridge.transport import HttpTransport


class ExecuteRequest(BaseModel):
    """Summary: Request payload for batch execution.

    Importance: Carries one parameter mapping per item plus the batch fail policy.
    Alternatives: Accept one item per HTTP request.
    """

    items: list[dict[str, Any]] = Field(default_factory=list)
    continue_on_fail: bool | None = None


class ExecuteResponse(BaseModel):
    """Summary: Response payload with one output record per input item."""

    items: list[dict[str, Any]]


def create_app(config: AppConfig, transport: HttpTransport | None = None) -> FastAPI:
    """Summary: Create a FastAPI app wired to the dispatcher.

    Importance: Ensures the API layer shares the same configuration and transport.
    Alternatives: Instantiate the dispatcher globally outside the factory.
    """

    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    app = FastAPI(title="nylasbridge API", version="0.1.0")
    context = build_context(config, transport=transport)

    def require_api_key(x_api_key: str | None = Header(default=None)) -> None:
        """Summary: Enforce API key authentication when configured.

        Importance: Adds a minimal security layer for local and private deployments.
        Alternatives: Use OAuth or session-based authentication.
        """

        if not config.api_key:
            return
        if x_api_key != config.api_key:
            raise HTTPException(status_code=401, detail="Invalid API key")

    @app.get("/health")
    def health() -> dict[str, str]:
        """Summary: Health check endpoint.

        Importance: Supports uptime checks in local and cloud deployments.
        Alternatives: Use a metrics endpoint only.
        """

        return {"status": "ok"}

    @app.get("/operations", dependencies=[Depends(require_api_key)])
    def operations() -> dict[str, list[dict[str, str]]]:
        return {
            "operations": [
                {"resource": resource, "operation": operation}
                for resource, operation in supported_operations()
            ]
        }

    @app.get("/credentials/check", dependencies=[Depends(require_api_key)])
    def credentials_check() -> dict[str, bool]:
        """Summary: Run the connectivity self-check against the applications endpoint.

        Importance: Lets operators confirm the access token before running batches.
        Alternatives: Discover bad credentials on the first failed batch.
        """

        try:
            valid = context.check_credentials()
        except TransportError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        return {"valid": valid}

    @app.post("/execute", response_model=ExecuteResponse, dependencies=[Depends(require_api_key)])
    def execute(payload: ExecuteRequest) -> ExecuteResponse:
        """Summary: Execute a batch of Nylas operations.

        Importance: Returns one record per item, or the first error when the batch aborts.
        Alternatives: Stream records back as each item completes.
        """

        try:
            records = context.run_batch(payload.items, continue_on_fail=payload.continue_on_fail)
        except UnsupportedOperationError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except NylasBridgeError as exc:
            raise HTTPException(status_code=_status_for(exc), detail=str(exc)) from exc
        return ExecuteResponse(items=[record.to_dict() for record in records])

    return app


def _status_for(error: NylasBridgeError) -> int:
    if isinstance(error, TransportError):
        return 502
    if isinstance(error, ApiError):
        return error.status_code or 502
    return 400


def get_app() -> FastAPI:
    """Summary: Build the app from the environment for ASGI servers.

    Importance: Defers config loading until the server starts.
    Alternatives: Create a module-level app at import time.
    """

    return create_app(AppConfig.from_env())
