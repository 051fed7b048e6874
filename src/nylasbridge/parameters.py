"""Summary: Parameter sources that supply declared values per input item.

Importance: Decouples the dispatcher from how the workflow engine stores item parameters.
Alternatives: Pass fully-typed request objects into the dispatcher.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Mapping, Sequence

from nylasbridge.errors import OperationError


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


DECLARED_DEFAULTS: dict[str, Any] = {
    "recipients": {},
    "sendAt": 0,
    "useDraft": False,
    "limit": 50,
    "subjectFilter": "",
    "calendarId": "primary",
    "participants": "[]",
    "location": "",
    "description": "",
    "start": 0,
    "end": 0,
    "emails": '[{"type": "work", "email": ""}]',
    "phoneNumbers": "[]",
    "emailFilter": "",
    "phoneNumberFilter": "",
}

MIN_VALUES: dict[str, int] = {"limit": 1}


class ParameterSource(ABC):
    """Summary: Abstract access to declared parameter values.

    Importance: Mirrors the engine contract of reading one named value for one item.
    Alternatives: Hand the dispatcher a list of dictionaries directly.
    """

    @abstractmethod
    def get_param(self, name: str, item_index: int, default: Any = MISSING) -> Any:
        """Summary: Return the value of a declared parameter for one item.

        Importance: Required parameters are enforced here, before validation.
        Alternatives: Return None for missing values and check downstream.
        """

    @abstractmethod
    def item_count(self) -> int:
        """Summary: Return the number of input items in the batch."""


class ItemParameterSource(ParameterSource):
    """Summary: In-memory parameter source backed by one mapping per item.

    Importance: Serves the CLI, HTTP API, and tests with the same declared defaults.
    Alternatives: Load parameters lazily from a workflow engine.
    """

    def __init__(
        self,
        items: Sequence[Mapping[str, Any]],
        shared: Mapping[str, Any] | None = None,
    ) -> None:
        """Summary: Initialize with per-item mappings and optional shared values.

        Importance: Shared values (such as a default grant id) apply to every item
        unless the item overrides them.
        Alternatives: Require every item to repeat every value.
        """

        self._items = [dict(item) for item in items]
        self._shared = dict(shared or {})

    def item_count(self) -> int:
        return len(self._items)

    def get_param(self, name: str, item_index: int, default: Any = MISSING) -> Any:
        item = self._items[item_index]
        if name in item:
            value = item[name]
        elif name in self._shared:
            value = self._shared[name]
        elif default is not MISSING:
            value = default
        elif name in DECLARED_DEFAULTS:
            value = DECLARED_DEFAULTS[name]
        else:
            raise OperationError(f"Parameter '{name}' is required")
        return _check_range(name, value)


def _check_range(name: str, value: Any) -> Any:
    minimum = MIN_VALUES.get(name)
    if minimum is None:
        return value
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise OperationError(f"Parameter '{name}' must be a number")
    if value < minimum:
        raise OperationError(f"Parameter '{name}' must be at least {minimum}")
    return value
