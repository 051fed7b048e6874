"""Summary: Domain model dataclasses for nylasbridge.

Importance: Defines the per-item values shared by validation, request building, and dispatch.
Alternatives: Use Pydantic models or pass raw dictionaries between stages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping


DEFAULT_API_URI = "https://api.us.nylas.com"


class Resource(str, Enum):
    """Summary: Top-level Nylas object families.

    Importance: Selects the operation set and base path segment for a request.
    Alternatives: Use free-form strings validated at dispatch time.
    """

    EMAIL = "email"
    CALENDAR = "calendar"
    CONTACT = "contact"


class Operation(str, Enum):
    """Summary: Actions available within a resource.

    Importance: Each operation fixes the HTTP method and path shape.
    Alternatives: Nest operation enums inside each resource.
    """

    SEND_MESSAGE = "sendMessage"
    LIST_MESSAGES = "listMessages"
    LIST_CALENDARS = "listCalendars"
    CREATE_EVENT = "createEvent"
    LIST_EVENTS = "listEvents"
    UPDATE_EVENT = "updateEvent"
    DELETE_EVENT = "deleteEvent"
    LIST_CONTACTS = "listContacts"
    CREATE_CONTACT = "createContact"
    UPDATE_CONTACT = "updateContact"
    DELETE_CONTACT = "deleteContact"


OPERATIONS_BY_RESOURCE: dict[Resource, tuple[Operation, ...]] = {
    Resource.EMAIL: (Operation.SEND_MESSAGE, Operation.LIST_MESSAGES),
    Resource.CALENDAR: (
        Operation.LIST_CALENDARS,
        Operation.CREATE_EVENT,
        Operation.LIST_EVENTS,
        Operation.UPDATE_EVENT,
        Operation.DELETE_EVENT,
    ),
    Resource.CONTACT: (
        Operation.LIST_CONTACTS,
        Operation.CREATE_CONTACT,
        Operation.UPDATE_CONTACT,
        Operation.DELETE_CONTACT,
    ),
}


@dataclass(frozen=True)
class RequestDescriptor:
    """Summary: Immutable description of one outbound Nylas call.

    Importance: Fully determines the HTTP request so building stays pure and testable.
    Alternatives: Mutate a shared options dictionary per branch.
    """

    method: str
    path: str
    base_uri: str = DEFAULT_API_URI
    query: Mapping[str, Any] = field(default_factory=dict)
    body: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_uri", (self.base_uri or DEFAULT_API_URI).rstrip("/"))
        object.__setattr__(self, "query", MappingProxyType(dict(self.query)))
        object.__setattr__(self, "body", _freeze(self.body))

    @property
    def url(self) -> str:
        return f"{self.base_uri}{self.path}"


def _freeze(value: Any) -> Any:
    """Summary: Recursively convert a JSON body into read-only containers.

    Importance: Objects become mapping proxies and arrays become tuples.
    Alternatives: Store the body as a pre-serialized JSON string.
    """

    if isinstance(value, Mapping):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


@dataclass(frozen=True)
class Recipient:
    """Summary: Represents one email recipient.

    Importance: SendMessage requires at least one validated recipient.
    Alternatives: Pass recipients as comma-separated strings.
    """

    email: str
    name: str | None = None

    def to_payload(self) -> dict[str, str]:
        payload = {"email": self.email}
        if self.name:
            payload["name"] = self.name
        return payload


@dataclass(frozen=True)
class Participant:
    """Summary: Represents a calendar event participant."""

    email: str
    name: str | None = None

    def to_payload(self) -> dict[str, str]:
        payload = {"email": self.email}
        if self.name:
            payload["name"] = self.name
        return payload


@dataclass(frozen=True)
class EventWhen:
    """Summary: Timespan of a calendar event in Unix seconds.

    Importance: Nylas expects a typed "time" object for timed events.
    Alternatives: Send ISO strings and let the API infer the type.
    """

    start_time: int
    end_time: int
    object: str = "time"

    @staticmethod
    def from_timestamps(start_time: int, end_time: int) -> "EventWhen | None":
        """Summary: Build a timespan only when both timestamps are set.

        Importance: Zero means unset, so a half-specified span is omitted.
        Alternatives: Reject half-specified spans as validation errors.
        """

        if start_time > 0 and end_time > 0:
            return EventWhen(start_time=start_time, end_time=end_time)
        return None

    def to_payload(self) -> dict[str, Any]:
        return {"start_time": self.start_time, "end_time": self.end_time, "object": self.object}


@dataclass(frozen=True)
class CalendarEventSpec:
    """Summary: Event fields for create and update requests.

    Importance: Keeps optional event fields out of the body unless provided.
    Alternatives: Build event payloads inline in each request builder.
    """

    calendar_id: str
    title: str = ""
    when: EventWhen | None = None
    participants: tuple[Participant, ...] = ()
    location: str = ""
    description: str = ""

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"calendar_id": self.calendar_id}
        if self.title:
            payload["title"] = self.title
        if self.when is not None:
            payload["when"] = self.when.to_payload()
        if self.participants:
            payload["participants"] = [item.to_payload() for item in self.participants]
        if self.location:
            payload["location"] = self.location
        if self.description:
            payload["description"] = self.description
        return payload


@dataclass(frozen=True)
class ContactEmail:
    email: str
    type: str | None = None

    def to_payload(self) -> dict[str, str]:
        payload = {"email": self.email}
        if self.type:
            payload["type"] = self.type
        return payload


@dataclass(frozen=True)
class ContactPhoneNumber:
    number: str
    type: str | None = None

    def to_payload(self) -> dict[str, str]:
        payload = {"number": self.number}
        if self.type:
            payload["type"] = self.type
        return payload


@dataclass(frozen=True)
class ContactSpec:
    """Summary: Contact fields for create and update requests.

    Importance: Omits empty names and lists so updates only touch provided fields.
    Alternatives: Send every field and rely on the API to ignore blanks.
    """

    given_name: str = ""
    surname: str = ""
    emails: tuple[ContactEmail, ...] = ()
    phone_numbers: tuple[ContactPhoneNumber, ...] = ()

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.given_name:
            payload["given_name"] = self.given_name
        if self.surname:
            payload["surname"] = self.surname
        if self.emails:
            payload["emails"] = [item.to_payload() for item in self.emails]
        if self.phone_numbers:
            payload["phone_numbers"] = [item.to_payload() for item in self.phone_numbers]
        return payload


@dataclass(frozen=True)
class Credentials:
    """Summary: Access token and base URI for one Nylas application.

    Importance: Supplies bearer auth and the regional API host for every call.
    Alternatives: Read credentials from the environment inside the transport.
    """

    access_token: str
    api_uri: str = DEFAULT_API_URI

    def __post_init__(self) -> None:
        api_uri = (self.api_uri or DEFAULT_API_URI).rstrip("/")
        object.__setattr__(self, "api_uri", api_uri)


@dataclass(frozen=True)
class OutputRecord:
    """Summary: One output item handed back to the workflow engine.

    Importance: Preserves a one-to-one mapping between input and output items.
    Alternatives: Return raw response bodies and a parallel error list.
    """

    json: Any
    status_code: int | None = None

    @property
    def is_error(self) -> bool:
        return isinstance(self.json, dict) and set(self.json) == {"error"}

    def to_dict(self) -> dict[str, Any]:
        return {"json": self.json}
