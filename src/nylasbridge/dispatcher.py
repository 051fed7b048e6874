"""Summary: Per-item dispatcher for Nylas resource operations.

Importance: Runs read, validate, build, execute, and normalize for each input item in order.
Alternatives: Batch all items into one request or process them concurrently.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from nylasbridge.builder import OperationSpec, build, lookup
from nylasbridge.errors import ApiError, NylasBridgeError
from nylasbridge.models import Credentials, OutputRecord, RequestDescriptor
from nylasbridge.normalizer import normalize_failure, normalize_success
from nylasbridge.parameters import ParameterSource
from nylasbridge.transport import HttpTransport
from nylasbridge.validator import validate


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PreparedItem:
    """Summary: The validated request for one item, before it is sent.

    Importance: Separates the pure stages from the single network call.
    Alternatives: Send requests directly from the builder.
    """

    index: int
    spec: OperationSpec
    request: RequestDescriptor


@dataclass(frozen=True)
class Dispatcher:
    """Summary: Executes one Nylas request per input item.

    Importance: Preserves input order and applies the batch fail policy per item.
    Alternatives: Let the workflow engine iterate items and call builders itself.
    """

    transport: HttpTransport
    credentials: Credentials

    def execute(
        self, parameters: ParameterSource, continue_on_fail: bool = False
    ) -> list[OutputRecord]:
        """Summary: Process every item and return one output record per item.

        Importance: With continue_on_fail the failure becomes an error record; otherwise
        the first failure propagates and no batch is returned.
        Alternatives: Collect errors and raise once after all items run.
        """

        records: list[OutputRecord] = []
        for index in range(parameters.item_count()):
            try:
                prepared = self.prepare(parameters, index)
                record = self.send(prepared)
            except NylasBridgeError as exc:
                if not continue_on_fail:
                    logger.info("Aborting batch at item %s: %s", index, exc)
                    raise
                logger.warning("Item %s failed: %s", index, exc)
                record = normalize_failure(exc)
            records.append(record)
        logger.info("Processed %s items.", len(records))
        return records

    def prepare(self, parameters: ParameterSource, index: int) -> PreparedItem:
        """Summary: Read, validate, and build the request for one item.

        Importance: Unknown resource/operation pairs raise before any parameter is read.
        Alternatives: Validate the whole batch before sending anything.
        """

        resource = parameters.get_param("resource", index)
        operation = parameters.get_param("operation", index)
        spec = lookup(resource, operation)
        grant_id = parameters.get_param("grantId", index)
        params: dict[str, Any] = {
            decl.name: parameters.get_param(decl.name, index, decl.default)
            for decl in spec.params
        }
        validated = validate(resource, operation, params)
        request = build(resource, operation, grant_id, validated, self.credentials)
        return PreparedItem(index=index, spec=spec, request=request)

    def send(self, prepared: PreparedItem) -> OutputRecord:
        try:
            body = self.transport.send(prepared.request, self.credentials)
        except ApiError as exc:
            if exc.description is None:
                exc.description = prepared.spec.description
            raise
        request = prepared.request
        logger.info("Item %s: %s %s succeeded.", prepared.index, request.method, request.path)
        return normalize_success(body)
