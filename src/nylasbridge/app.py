"""Summary: Application factory wiring the dispatcher to configuration.

Importance: Centralizes dependency creation for the CLI and HTTP API.
Alternatives: Instantiate transport and dispatcher manually in each entrypoint.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from nylasbridge.config import AppConfig
from nylasbridge.dispatcher import Dispatcher
from nylasbridge.models import OPERATIONS_BY_RESOURCE, OutputRecord
from nylasbridge.parameters import ItemParameterSource
from nylasbridge.transport import HttpTransport, UrllibTransport, check_credentials


@dataclass(frozen=True)
class AppContext:
    """Summary: Shared dependencies for executing batches.

    Importance: Reuses one transport and credential set across batches.
    Alternatives: Rebuild dependencies for every request.
    """

    config: AppConfig
    transport: HttpTransport
    dispatcher: Dispatcher

    def run_batch(
        self,
        items: Sequence[Mapping[str, Any]],
        continue_on_fail: bool | None = None,
    ) -> list[OutputRecord]:
        """Summary: Execute a batch of items with config-level fallbacks.

        Importance: Applies the configured grant id to items that do not name one.
        Alternatives: Require every item to carry its own grant id.
        """

        shared = {"grantId": self.config.grant_id} if self.config.grant_id else {}
        parameters = ItemParameterSource(items, shared=shared)
        if continue_on_fail is None:
            continue_on_fail = self.config.continue_on_fail
        return self.dispatcher.execute(parameters, continue_on_fail=continue_on_fail)

    def check_credentials(self) -> bool:
        return check_credentials(self.transport, self.dispatcher.credentials)


def supported_operations() -> list[tuple[str, str]]:
    return [
        (resource.value, operation.value)
        for resource, operations in OPERATIONS_BY_RESOURCE.items()
        for operation in operations
    ]


def build_context(config: AppConfig, transport: HttpTransport | None = None) -> AppContext:
    """Summary: Build the shared context from configuration.

    Importance: Provides a single construction path for the application.
    Alternatives: Construct dependencies separately per request.
    """

    transport = transport or UrllibTransport(timeout=config.request_timeout)
    dispatcher = Dispatcher(transport=transport, credentials=config.credentials())
    return AppContext(config=config, transport=transport, dispatcher=dispatcher)
