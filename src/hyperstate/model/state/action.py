"""Action - behaviour bound to entering a resource state.

Actions are opaque to the hypermedia engine; they are carried on states so
that the hosting service can dispatch them.
"""

from dataclasses import dataclass, field
from enum import Enum


class ActionType(Enum):
    """When an action runs.

    - VIEW: produces the representation of the state (safe, idempotent)
    - ENTRY: side effect executed when the state is entered
    """

    VIEW = "VIEW"
    ENTRY = "ENTRY"


@dataclass(frozen=True)
class Action:
    """A named command bound to a resource state."""

    name: str
    type: ActionType = ActionType.VIEW
    properties: tuple[tuple[str, str], ...] = field(default=())

    def __str__(self) -> str:
        return f"{self.type.value}:{self.name}"
