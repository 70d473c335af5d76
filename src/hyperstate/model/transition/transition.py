"""Transition - a method-labelled edge between resource states."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from ..state.resource_state import ResourceState


class TransitionType(Enum):
    """How a transition is turned into links.

    - NORMAL: one link (or one per repetition) on the resource itself
    - FOR_EACH: resolved once per item of a collection, attached to the item
    - AUTO: followed by the server; never rendered as a link
    """

    NORMAL = "NORMAL"
    FOR_EACH = "FOR_EACH"
    AUTO = "AUTO"


@runtime_checkable
class NestedStateMachine(Protocol):
    """A self-contained state machine used as a transition target."""

    @property
    def initial(self) -> ResourceState: ...


TransitionTarget = Union["ResourceState", NestedStateMachine]


@dataclass(frozen=True)
class TransitionCommand:
    """The interaction a transition performs and its URI parameter expressions."""

    method: str
    uri_parameters: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "uri_parameters", MappingProxyType(dict(self.uri_parameters)))

    def __hash__(self) -> int:
        return hash((self.method, tuple(sorted(self.uri_parameters.items()))))


@dataclass(repr=False)
class Transition:
    """A directed edge from ``source`` to ``target``.

    The target is either a resource state or a nested state machine; in the
    latter case the machine's initial state is the effective target.
    """

    source: ResourceState
    target: TransitionTarget
    command: TransitionCommand
    type: TransitionType = TransitionType.NORMAL
    label: str | None = None
    target_field: str | None = None

    @property
    def target_state(self) -> ResourceState:
        """Effective target state."""
        if isinstance(self.target, NestedStateMachine):
            return self.target.initial
        return self.target

    @property
    def method(self) -> str:
        return self.command.method

    @property
    def uri_parameters(self) -> Mapping[str, str]:
        return self.command.uri_parameters

    @property
    def id(self) -> str:
        """Canonical id, ``<source entity>.<source name>><target entity>.<target name>``."""
        return f"{self.source.id}>{self.target_state.id}"

    @property
    def title(self) -> str:
        return self.label or self.target_state.name

    @property
    def is_self_loop(self) -> bool:
        return self.source == self.target_state

    @property
    def is_auto(self) -> bool:
        return self.type is TransitionType.AUTO

    @property
    def is_for_each(self) -> bool:
        return self.type is TransitionType.FOR_EACH

    def __repr__(self) -> str:
        return f"Transition({self.method} {self.id}, type={self.type.value})"
