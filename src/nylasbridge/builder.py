"""Summary: Request builders and the resource/operation dispatch table.

Importance: Maps validated parameters to the exact Nylas v3 method, path, query, and body.
Alternatives: Use the Nylas Python SDK and accept its request shapes.
"""

from __future__ import annotations

import json
import urllib.parse
from dataclasses import dataclass
from typing import Any, Callable

from nylasbridge.errors import OperationError, UnsupportedOperationError
from nylasbridge.models import (
    CalendarEventSpec,
    ContactEmail,
    ContactPhoneNumber,
    ContactSpec,
    Credentials,
    EventWhen,
    Operation,
    Participant,
    RequestDescriptor,
    Resource,
)
from nylasbridge.parameters import MISSING
from nylasbridge.validator import ValidatedParams


@dataclass(frozen=True)
class GrantScope:
    """Summary: Base URI and grant id shared by every request of one item.

    Importance: Guarantees each descriptor path is rooted at /v3/grants/{grantId}.
    Alternatives: Format full URLs inline in every builder.
    """

    base_uri: str
    grant_id: str

    def request(
        self,
        method: str,
        *segments: str,
        query: dict[str, Any] | None = None,
        body: Any = None,
    ) -> RequestDescriptor:
        path = "/v3/grants/" + _quote(self.grant_id)
        for segment in segments:
            path += "/" + segment
        return RequestDescriptor(
            method=method,
            path=path,
            base_uri=self.base_uri,
            query=query or {},
            body=body,
        )


Builder = Callable[[GrantScope, ValidatedParams], RequestDescriptor]


@dataclass(frozen=True)
class ParamDecl:
    """Summary: A parameter read for an operation, with its optional fallback."""

    name: str
    default: Any = MISSING


@dataclass(frozen=True)
class OperationSpec:
    """Summary: Builder, declared parameters, and error description for one operation.

    Importance: One table entry per resource/operation pair replaces nested branching.
    Alternatives: Chain conditionals over resource and operation strings.
    """

    build: Builder
    params: tuple[ParamDecl, ...]
    description: str


def _send_message(scope: GrantScope, params: ValidatedParams) -> RequestDescriptor:
    body: dict[str, Any] = {
        "to": [recipient.to_payload() for recipient in params["recipients"]],
        "subject": params["subject"].strip(),
        "body": params["body"],
    }
    send_at = params.get("sendAt") or 0
    if send_at > 0:
        body["send_at"] = send_at
    if params.get("useDraft"):
        body["use_draft"] = True
    return scope.request("POST", "messages", "send", body=body)


def _list_messages(scope: GrantScope, params: ValidatedParams) -> RequestDescriptor:
    query: dict[str, Any] = {"limit": params["limit"]}
    if params.get("subjectFilter"):
        query["subject"] = params["subjectFilter"]
    return scope.request("GET", "messages", query=query)


def _list_calendars(scope: GrantScope, params: ValidatedParams) -> RequestDescriptor:
    return scope.request("GET", "calendars", query={"limit": params["limit"]})


def _create_event(scope: GrantScope, params: ValidatedParams) -> RequestDescriptor:
    event = _event_spec(params)
    when = EventWhen(start_time=params["startTime"], end_time=params["endTime"])
    body = {
        "calendar_id": event.calendar_id,
        "title": params["title"],
        "when": when.to_payload(),
    }
    optional = event.to_payload()
    for key in ("participants", "location", "description"):
        if key in optional:
            body[key] = optional[key]
    return scope.request("POST", "events", body=body)


def _list_events(scope: GrantScope, params: ValidatedParams) -> RequestDescriptor:
    query: dict[str, Any] = {"calendar_id": params["calendarId"], "limit": params["limit"]}
    if (params.get("start") or 0) > 0:
        query["start"] = params["start"]
    if (params.get("end") or 0) > 0:
        query["end"] = params["end"]
    return scope.request("GET", "events", query=query)


def _update_event(scope: GrantScope, params: ValidatedParams) -> RequestDescriptor:
    event = _event_spec(params)
    return scope.request(
        "PUT", "events", _required_id(params, "eventId"), body=event.to_payload()
    )


def _delete_event(scope: GrantScope, params: ValidatedParams) -> RequestDescriptor:
    return scope.request("DELETE", "events", _required_id(params, "eventId"))


def _list_contacts(scope: GrantScope, params: ValidatedParams) -> RequestDescriptor:
    query: dict[str, Any] = {"limit": params["limit"]}
    if params.get("emailFilter"):
        query["email"] = params["emailFilter"]
    if params.get("phoneNumberFilter"):
        query["phone_number"] = params["phoneNumberFilter"]
    return scope.request("GET", "contacts", query=query)


def _create_contact(scope: GrantScope, params: ValidatedParams) -> RequestDescriptor:
    contact = _contact_spec(params)
    body = {"given_name": params["givenName"], "surname": params["surname"]}
    optional = contact.to_payload()
    for key in ("emails", "phone_numbers"):
        if key in optional:
            body[key] = optional[key]
    return scope.request("POST", "contacts", body=body)


def _update_contact(scope: GrantScope, params: ValidatedParams) -> RequestDescriptor:
    contact = _contact_spec(params)
    return scope.request(
        "PUT", "contacts", _required_id(params, "contactId"), body=contact.to_payload()
    )


def _delete_contact(scope: GrantScope, params: ValidatedParams) -> RequestDescriptor:
    return scope.request("DELETE", "contacts", _required_id(params, "contactId"))


def _event_spec(params: ValidatedParams) -> CalendarEventSpec:
    participants = tuple(
        Participant(email=entry["email"], name=entry.get("name") or None)
        for entry in _json_list(params.get("participants"), "participants")
        if entry.get("email")
    )
    return CalendarEventSpec(
        calendar_id=params["calendarId"],
        title=params.get("title") or "",
        when=EventWhen.from_timestamps(params.get("startTime") or 0, params.get("endTime") or 0),
        participants=participants,
        location=params.get("location") or "",
        description=params.get("description") or "",
    )


def _contact_spec(params: ValidatedParams) -> ContactSpec:
    emails = tuple(
        ContactEmail(email=entry["email"], type=entry.get("type") or None)
        for entry in _json_list(params.get("emails"), "emails")
        if entry.get("email")
    )
    phone_numbers = tuple(
        ContactPhoneNumber(number=entry["number"], type=entry.get("type") or None)
        for entry in _json_list(params.get("phoneNumbers"), "phoneNumbers")
        if entry.get("number")
    )
    return ContactSpec(
        given_name=params.get("givenName") or "",
        surname=params.get("surname") or "",
        emails=emails,
        phone_numbers=phone_numbers,
    )


def _json_list(value: Any, name: str) -> list[dict[str, Any]]:
    """Summary: Decode a JSON-typed list parameter.

    Importance: The engine delivers JSON parameters either as text or already decoded.
    Alternatives: Require callers to always pre-decode JSON parameters.
    """

    if value is None or value == "":
        return []
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as exc:
            raise OperationError(f"Parameter '{name}' must be valid JSON") from exc
    if not isinstance(value, list) or not all(isinstance(item, dict) for item in value):
        raise OperationError(f"Parameter '{name}' must be a JSON array of objects")
    return value


def _required_id(params: ValidatedParams, name: str) -> str:
    value = str(params.get(name) or "").strip()
    if not value:
        raise OperationError(f"Parameter '{name}' is required")
    return _quote(value)


def _quote(value: str) -> str:
    return urllib.parse.quote(value, safe="")


_LIMIT = ParamDecl("limit", 50)
_EVENT_FIELDS = (
    ParamDecl("participants"),
    ParamDecl("location", ""),
    ParamDecl("description", ""),
)
_CONTACT_LISTS = (ParamDecl("emails"), ParamDecl("phoneNumbers"))

OPERATION_TABLE: dict[tuple[Resource, Operation], OperationSpec] = {
    (Resource.EMAIL, Operation.SEND_MESSAGE): OperationSpec(
        build=_send_message,
        params=(
            ParamDecl("recipients", {}),
            ParamDecl("subject"),
            ParamDecl("body"),
            ParamDecl("sendAt", 0),
            ParamDecl("useDraft", False),
        ),
        description="Failed to send email via Nylas API",
    ),
    (Resource.EMAIL, Operation.LIST_MESSAGES): OperationSpec(
        build=_list_messages,
        params=(_LIMIT, ParamDecl("subjectFilter", "")),
        description="Failed to list messages via Nylas API",
    ),
    (Resource.CALENDAR, Operation.LIST_CALENDARS): OperationSpec(
        build=_list_calendars,
        params=(_LIMIT,),
        description="Failed to list calendars via Nylas API",
    ),
    (Resource.CALENDAR, Operation.CREATE_EVENT): OperationSpec(
        build=_create_event,
        params=(
            ParamDecl("calendarId"),
            ParamDecl("title"),
            ParamDecl("startTime"),
            ParamDecl("endTime"),
        )
        + _EVENT_FIELDS,
        description="Failed to create event via Nylas API",
    ),
    (Resource.CALENDAR, Operation.LIST_EVENTS): OperationSpec(
        build=_list_events,
        params=(ParamDecl("calendarId"), _LIMIT, ParamDecl("start", 0), ParamDecl("end", 0)),
        description="Failed to list events via Nylas API",
    ),
    (Resource.CALENDAR, Operation.UPDATE_EVENT): OperationSpec(
        build=_update_event,
        params=(
            ParamDecl("eventId"),
            ParamDecl("calendarId"),
            ParamDecl("title", ""),
            ParamDecl("startTime", 0),
            ParamDecl("endTime", 0),
        )
        + _EVENT_FIELDS,
        description="Failed to update event via Nylas API",
    ),
    (Resource.CALENDAR, Operation.DELETE_EVENT): OperationSpec(
        build=_delete_event,
        params=(ParamDecl("eventId"),),
        description="Failed to delete event via Nylas API",
    ),
    (Resource.CONTACT, Operation.LIST_CONTACTS): OperationSpec(
        build=_list_contacts,
        params=(_LIMIT, ParamDecl("emailFilter", ""), ParamDecl("phoneNumberFilter", "")),
        description="Failed to list contacts via Nylas API",
    ),
    (Resource.CONTACT, Operation.CREATE_CONTACT): OperationSpec(
        build=_create_contact,
        params=(ParamDecl("givenName"), ParamDecl("surname")) + _CONTACT_LISTS,
        description="Failed to create contact via Nylas API",
    ),
    (Resource.CONTACT, Operation.UPDATE_CONTACT): OperationSpec(
        build=_update_contact,
        params=(ParamDecl("contactId"), ParamDecl("givenName", ""), ParamDecl("surname", ""))
        + _CONTACT_LISTS,
        description="Failed to update contact via Nylas API",
    ),
    (Resource.CONTACT, Operation.DELETE_CONTACT): OperationSpec(
        build=_delete_contact,
        params=(ParamDecl("contactId"),),
        description="Failed to delete contact via Nylas API",
    ),
}


def lookup(resource: Resource | str, operation: Operation | str) -> OperationSpec:
    """Summary: Resolve the table entry for a resource/operation pair.

    Importance: Unknown pairs are configuration errors, never user-facing failures.
    Alternatives: Fall through and emit an empty success record.
    """

    try:
        key = (Resource(resource), Operation(operation))
    except ValueError as exc:
        raise UnsupportedOperationError(
            f"Unsupported resource/operation: {resource}/{operation}"
        ) from exc
    spec = OPERATION_TABLE.get(key)
    if spec is None:
        raise UnsupportedOperationError(
            f"Unsupported resource/operation: {key[0].value}/{key[1].value}"
        )
    return spec


def build(
    resource: Resource | str,
    operation: Operation | str,
    grant_id: str,
    params: ValidatedParams,
    credentials: Credentials,
) -> RequestDescriptor:
    """Summary: Build the request descriptor for one validated item.

    Importance: Pure and deterministic, so identical inputs yield identical requests.
    Alternatives: Build and send the request in a single step.
    """

    spec = lookup(resource, operation)
    if not grant_id or not str(grant_id).strip():
        raise OperationError("Grant ID is required")
    scope = GrantScope(base_uri=credentials.api_uri, grant_id=str(grant_id).strip())
    return spec.build(scope, params)
