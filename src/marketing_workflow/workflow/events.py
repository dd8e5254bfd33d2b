from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field

from marketing_workflow.errors import InvalidEventError

_EVENT_ID_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]{0,63}$")


@dataclass(frozen=True, slots=True)
class TriggerEvent:
    """A signal that starts workflow runs.

    Events carry facts only. Every function registered for ``name`` receives
    the same event.
    """

    name: str
    data: dict[str, object] = field(default_factory=dict)
    id: str | None = None

    def to_json(self) -> dict[str, object]:
        out: dict[str, object] = {"name": self.name, "data": dict(self.data)}
        if self.id is not None:
            out["id"] = self.id
        return out

    @staticmethod
    def from_json(obj: Mapping[str, object]) -> TriggerEvent:
        name = obj.get("name")
        if not isinstance(name, str) or not name.strip():
            raise InvalidEventError("Event name must be a non-empty string")

        data = obj.get("data", {})
        if not isinstance(data, Mapping):
            raise InvalidEventError(f"Event data for {name!r} must be an object")

        event_id = obj.get("id")
        if event_id is not None and (
            not isinstance(event_id, str) or not _EVENT_ID_RE.match(event_id)
        ):
            raise InvalidEventError("Event id may only contain letters, digits, '.', '_' and '-'")
        return TriggerEvent(name=name, data=dict(data), id=event_id)


def feature_input(event: TriggerEvent) -> str:
    """Return the free-text feature description carried by a feature event."""

    value = event.data.get("input")
    if not isinstance(value, str) or not value.strip():
        raise InvalidEventError(f"Event {event.name!r} requires a non-empty 'input' string")
    return value
