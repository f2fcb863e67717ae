"""Mutation intents for the task placement engine.

An assignee change is one of three explicit variants instead of a
sentinel-typed string: leave the assignee alone, assign to a named person,
or clear the assignment.
"""

from dataclasses import dataclass
from typing import Any, Union


@dataclass(frozen=True)
class NoChange:
    """Keep the task's current assignee."""


@dataclass(frozen=True)
class AssignTo:
    """Assign the task to the person with this display name."""

    name: str


@dataclass(frozen=True)
class Unassign:
    """Clear the task's assignee."""


AssigneeChange = Union[NoChange, AssignTo, Unassign]

NO_CHANGE = NoChange()
UNASSIGN = Unassign()

_MISSING = object()


def assignee_change_from_payload(payload: dict[str, Any], key: str = "assignedTo") -> AssigneeChange:
    """Translate a JSON payload field into an AssigneeChange.

    An absent key means no change; null or a blank string means unassign;
    any other string assigns to that name.
    """
    value = payload.get(key, _MISSING)
    if value is _MISSING:
        return NO_CHANGE
    if value is None:
        return UNASSIGN
    name = str(value).strip()
    if not name:
        return UNASSIGN
    return AssignTo(name)
