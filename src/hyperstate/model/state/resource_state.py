"""ResourceState - a node in the hypermedia state graph.

A resource state is one REST-addressable application state, distinct from
the data entity it represents. States are connected by transitions; the
closure and indices over them are computed by ResourceStateMachine.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from ..path_template import PathTemplate
from ..transition.transition import Transition, TransitionCommand, TransitionType
from .action import Action

if TYPE_CHECKING:
    from ..transition.transition import TransitionTarget


class StateKind(Enum):
    """Closed set of resource state variants.

    - PLAIN: a single resource with its own path
    - COLLECTION: a resource representing a repeating set of entities
    - PSEUDO_FINAL: no own path; a terminal outcome sharing its parent's path
    - DYNAMIC: target located at runtime from locator arguments
    """

    PLAIN = "PLAIN"
    COLLECTION = "COLLECTION"
    PSEUDO_FINAL = "PSEUDO_FINAL"
    DYNAMIC = "DYNAMIC"


@dataclass(eq=False, repr=False)
class ResourceState:
    """A resource state.

    Identity is the ``(entity_name, name)`` pair: two separately constructed
    states with the same entity and name are the same node of the graph.

    Example:
        >>> exists = ResourceState("toaster", "exists", path="/machines/toaster")
        >>> cooking = ResourceState("toaster", "cooking", path="/machines/toaster/cooking")
        >>> exists.add_transition("GET", cooking).id
        'toaster.exists>toaster.cooking'
    """

    entity_name: str
    name: str
    path: PathTemplate | None = None
    actions: frozenset[Action] = frozenset()
    kind: StateKind = StateKind.PLAIN
    rels: tuple[str, ...] = ()
    parent: ResourceState | None = None
    locator_name: str | None = None
    locator_args: tuple[str, ...] = ()
    transitions: list[Transition] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.path = PathTemplate.of(self.path)
        self.actions = frozenset(self.actions or ())
        self.rels = tuple(self.rels or ())
        self.locator_args = tuple(self.locator_args or ())
        if self.kind is StateKind.PSEUDO_FINAL:
            if self.path is not None:
                raise ValueError(f"Pseudo state '{self.id}' cannot own a path")
            if self.parent is None:
                raise ValueError(f"Pseudo state '{self.id}' needs a parent state")
        if self.kind is StateKind.DYNAMIC and not self.locator_name:
            raise ValueError(f"Dynamic state '{self.id}' needs a resource locator name")

    @classmethod
    def child_of(
        cls,
        parent: ResourceState,
        name: str,
        path: PathTemplate | str,
        actions: Iterable[Action] = (),
        rels: Iterable[str] = (),
        collection: bool = False,
    ) -> ResourceState:
        """Create a state of the parent's entity whose path extends the parent's.

        Args:
            parent: State providing entity name and base path
            name: State name
            path: Path appended to the parent's effective path
            actions: Actions bound to the state
            rels: Explicit link relations
            collection: Whether the state is a collection state

        Returns:
            The new state
        """
        base = parent.effective_path
        full_path = base.join(path) if base is not None else PathTemplate.of(path)
        return cls(
            parent.entity_name,
            name,
            path=full_path,
            actions=frozenset(actions),
            kind=StateKind.COLLECTION if collection else StateKind.PLAIN,
            rels=tuple(rels),
            parent=parent,
        )

    @classmethod
    def pseudo_of(
        cls, parent: ResourceState, name: str, actions: Iterable[Action] | None = ()
    ) -> ResourceState:
        """Create a pseudo-final state that inherits the parent's path."""
        return cls(
            parent.entity_name,
            name,
            actions=frozenset(actions or ()),
            kind=StateKind.PSEUDO_FINAL,
            parent=parent,
        )

    @classmethod
    def collection(
        cls,
        entity_name: str,
        name: str,
        path: PathTemplate | str,
        actions: Iterable[Action] = (),
        rels: Iterable[str] = (),
    ) -> ResourceState:
        """Create a collection state."""
        return cls(
            entity_name,
            name,
            path=PathTemplate.of(path),
            actions=frozenset(actions),
            kind=StateKind.COLLECTION,
            rels=tuple(rels),
        )

    @classmethod
    def dynamic(
        cls,
        entity_name: str,
        name: str,
        locator_name: str,
        locator_args: Iterable[str] = (),
        actions: Iterable[Action] = (),
    ) -> ResourceState:
        """Create a dynamically located state.

        Args:
            entity_name: Entity name
            name: State name
            locator_name: Name of the registered resource locator
            locator_args: Argument expressions, e.g. ``"{Addr.City}"``

        Returns:
            The new state
        """
        return cls(
            entity_name,
            name,
            actions=frozenset(actions),
            kind=StateKind.DYNAMIC,
            locator_name=locator_name,
            locator_args=tuple(locator_args),
        )

    @property
    def id(self) -> str:
        """Stable identity, ``<entity_name>.<name>``."""
        return f"{self.entity_name}.{self.name}"

    @property
    def is_pseudo(self) -> bool:
        return self.kind is StateKind.PSEUDO_FINAL

    @property
    def is_collection(self) -> bool:
        return self.kind is StateKind.COLLECTION

    @property
    def is_dynamic(self) -> bool:
        return self.kind is StateKind.DYNAMIC

    @property
    def effective_path(self) -> PathTemplate | None:
        """Own path, else the nearest path-bearing ancestor's path."""
        state: ResourceState | None = self
        while state is not None:
            if state.path is not None:
                return state.path
            state = state.parent
        return None

    @property
    def rel(self) -> str:
        """Link relation used for links targeting this state."""
        return " ".join(self.rels) if self.rels else self.name

    def add_transition(
        self,
        method: str,
        target: TransitionTarget,
        uri_parameters: Mapping[str, str] | None = None,
        label: str | None = None,
        target_field: str | None = None,
    ) -> Transition:
        """Add a transition to another state or to a nested state machine.

        Args:
            method: Interaction (HTTP method) of the transition
            target: Target state, or state machine whose initial state is the target
            uri_parameters: Placeholder name to expression, e.g. ``{"id": "{Order.id}"}``
            label: Human readable title of the link
            target_field: Field the link key binds to, e.g. ``"Items.Sku"``

        Returns:
            The new transition
        """
        return self._add(method, target, uri_parameters, TransitionType.NORMAL, label, target_field)

    def add_transition_for_each_item(
        self,
        method: str,
        target: TransitionTarget,
        uri_parameters: Mapping[str, str] | None = None,
        label: str | None = None,
        target_field: str | None = None,
    ) -> Transition:
        """Add a transition resolved once per item of a collection entity."""
        return self._add(
            method, target, uri_parameters, TransitionType.FOR_EACH, label, target_field
        )

    def add_auto_transition(
        self, target: TransitionTarget, uri_parameters: Mapping[str, str] | None = None
    ) -> Transition:
        """Add an automatic (server side) transition; it has no interaction."""
        return self._add("GET", target, uri_parameters, TransitionType.AUTO, None, None)

    def _add(
        self,
        method: str,
        target: TransitionTarget,
        uri_parameters: Mapping[str, str] | None,
        transition_type: TransitionType,
        label: str | None,
        target_field: str | None,
    ) -> Transition:
        transition = Transition(
            source=self,
            target=target,
            command=TransitionCommand(method.upper(), dict(uri_parameters or {})),
            type=transition_type,
            label=label,
            target_field=target_field,
        )
        self.transitions.append(transition)
        return transition

    def self_transition(self) -> Transition:
        """An undeclared GET transition from this state to itself."""
        return Transition(source=self, target=self, command=TransitionCommand("GET"))

    def get_transition(self, target: ResourceState) -> Transition | None:
        """First outbound transition whose effective target is ``target``."""
        for transition in self.transitions:
            if transition.target_state == target:
                return transition
        return None

    def all_targets(self) -> list[ResourceState]:
        """Distinct effective target states, in declaration order."""
        targets: list[ResourceState] = []
        for transition in self.transitions:
            if transition.target_state not in targets:
                targets.append(transition.target_state)
        return targets

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResourceState):
            return NotImplemented
        return self.entity_name == other.entity_name and self.name == other.name

    def __hash__(self) -> int:
        return hash((self.entity_name, self.name))

    def __repr__(self) -> str:
        return f"ResourceState({self.id}, kind={self.kind.value}, path={self.effective_path})"
