"""ResourceStateMachine - closure, indices and links of a resource state graph.

The machine owns one initial state. On construction it walks every
transition reachable from that state, nested state machines included, and
builds its path and interaction indices from a snapshot of each state's
transitions; transitions added to a state later are not seen by the machine.
Nothing is mutated afterwards, so a machine can be queried from any number of
threads without locking.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from ..config import get_settings
from ..hypermedia_exceptions import MethodNotAllowedException, StateNotInMachineError
from ..http.link_header import relations_from
from ..logging import LinkLogger, get_logger
from ..model.path_template import PathTemplate
from ..model.resource import BeanTransformer, CollectionResource, EntityResource, EntityTransformer
from ..model.state.resource_state import ResourceState
from ..model.transition.link import Link
from ..model.transition.transition import Transition
from .link_generator import LinkGenerator, ResourceLocator

logger = get_logger(__name__)


class ResourceStateMachine:
    """A hypermedia state machine rooted at one initial state.

    Example:
        >>> exists = ResourceState("toaster", "exists", path="/machines/toaster")
        >>> cooking = ResourceState("toaster", "cooking", path="/machines/toaster/cooking")
        >>> exists.add_transition("GET", cooking)
        >>> cooking.add_transition("DELETE", exists)
        >>> machine = ResourceStateMachine(exists)
        >>> sorted(machine.interactions(cooking))
        ['GET']
    """

    def __init__(
        self,
        initial: ResourceState,
        transformer: EntityTransformer | None = None,
        locators: Mapping[str, ResourceLocator] | None = None,
        base_uri: str | None = None,
        strict_templates: bool | None = None,
    ) -> None:
        """Build the machine and all of its indices.

        Args:
            initial: Initial state
            transformer: Turns entities into property mappings
            locators: Resource locators by name, for dynamic states
            base_uri: Prefix for generated hrefs (defaults to settings)
            strict_templates: Skip links with unresolved placeholders (defaults to settings)
        """
        settings = get_settings()
        self._initial = initial
        self.transformer: EntityTransformer = transformer or BeanTransformer()
        self._link_generator = LinkGenerator(
            settings.base_uri if base_uri is None else base_uri,
            locators,
            settings.strict_templates if strict_templates is None else strict_templates,
        )
        self._link_logger = LinkLogger(logger)
        self._max_relations = settings.link_header_max_rels

        self._states = self._collect_states(initial)
        self._transitions_by_id = self._index_transitions(self._states)
        self._interactions_by_path = self._index_interactions(self._states)
        self._states_by_path = self._group_by_path(self._states)
        self._templates = sorted(
            {state.effective_path for state in self._states if state.effective_path is not None},
            key=PathTemplate.specificity,
        )
        self._states_by_request = self._index_requests(self._states)

        logger.debug(
            "state_machine_built",
            initial=initial.id,
            states=len(self._states),
            paths=len(self._interactions_by_path),
        )

    @property
    def initial(self) -> ResourceState:
        """Initial state; also the effective target of transitions into this machine."""
        return self._initial

    @property
    def states(self) -> set[ResourceState]:
        return set(self._states)

    @property
    def locators(self) -> dict[str, ResourceLocator]:
        return dict(self._link_generator.locators)

    def all_states(self) -> set[ResourceState]:
        """Every state reachable from the initial state, each exactly once."""
        return set(self._states)

    def get_transitions_by_id(self) -> dict[str, Transition]:
        """Canonical transition id to transition, over all reachable states."""
        return dict(self._transitions_by_id)

    def outbound_transitions(self, state: ResourceState) -> tuple[Transition, ...]:
        """Outbound transitions of a state as they were when the machine was built.

        A state outside the machine has no snapshot; its current transitions
        are returned.
        """
        transitions = self._states.get(state)
        if transitions is None:
            return tuple(state.transitions)
        return transitions

    def get_state(self, name: str) -> ResourceState | None:
        """First reachable state with the given name."""
        for state in self._states:
            if state.name == name:
                return state
        return None

    def interactions_by_path(self) -> dict[str, set[str]]:
        """Path to the methods that may be performed on it.

        A transition's method applies to its target's path; every path with a
        non-pseudo state also accepts GET.
        """
        return {path: set(methods) for path, methods in self._interactions_by_path.items()}

    def interactions(self, state: ResourceState) -> set[str]:
        """Methods accepted by the path of a state of this machine.

        Raises:
            StateNotInMachineError: If the state is not part of this machine
        """
        self._require_member(state)
        path = state.effective_path
        if path is None:
            return set()
        return set(self._interactions_by_path.get(str(path), set()))

    def states_by_path(self, starting_from: ResourceState | None = None) -> dict[str, set[ResourceState]]:
        """Path to the states sharing it.

        Args:
            starting_from: Restrict to the states reachable from this state

        Returns:
            Path template string to states
        """
        if starting_from is None:
            return {path: set(states) for path, states in self._states_by_path.items()}
        self._require_member(starting_from)
        return self._group_by_path(self._collect_states(starting_from, self._states.__getitem__))

    def states_for_path(self, path: PathTemplate | str | None = None) -> set[ResourceState]:
        """States sharing a path; None means the initial state's path."""
        key = str(self._initial.effective_path) if path is None else str(path)
        return set(self._states_by_path.get(key, set()))

    def determine_state(
        self, method: str, request_path: str
    ) -> tuple[ResourceState, dict[str, str]] | None:
        """Find the state addressed by an inbound request.

        Args:
            method: Request method
            request_path: Concrete request path

        Returns:
            The state and the extracted path parameters, or None for an unknown path

        Raises:
            MethodNotAllowedException: If the path is known but not for this method
        """
        method = method.upper()
        allowed: set[str] = set()
        matched = False
        for template in self._templates:
            path_parameters = template.match(request_path)
            if path_parameters is None:
                continue
            matched = True
            state = self._states_by_request.get((method, str(template)))
            if state is not None:
                return state, path_parameters
            allowed.update(self._interactions_by_path.get(str(template), set()))
        if matched:
            raise MethodNotAllowedException(method, request_path, allowed)
        return None

    def resolve_link(
        self,
        current_state: ResourceState,
        target: ResourceState | str,
        path_parameters: Mapping[str, Any] | None = None,
        entity: Any = None,
    ) -> Link | None:
        """Resolve one link from the current state.

        Args:
            current_state: State of the current request
            target: Target state, method name, or ``"src>tgt"`` relation
            path_parameters: Path parameters of the current request
            entity: Current entity (or resource wrapping it)

        Returns:
            The link, or None when there is no navigable transition
        """
        if isinstance(target, ResourceState):
            return self.get_link_to_state(path_parameters, entity, current_state, target)
        if ">" in target:
            return self.get_link_from_relation(path_parameters, entity, target)
        return self.get_link_from_method(path_parameters, entity, current_state, target)

    def get_link_to_state(
        self,
        path_parameters: Mapping[str, Any] | None,
        entity: Any,
        current_state: ResourceState,
        target_state: ResourceState,
    ) -> Link | None:
        """Link for the transition from ``current_state`` to ``target_state``."""
        for transition in self.outbound_transitions(current_state):
            if transition.target_state == target_state:
                return self._create_transition_link(transition, path_parameters, entity)
        return None

    def get_link_from_method(
        self,
        path_parameters: Mapping[str, Any] | None,
        entity: Any,
        current_state: ResourceState,
        method: str,
    ) -> Link | None:
        """Link for the first transition from ``current_state`` using ``method``."""
        method = method.upper()
        for transition in self.outbound_transitions(current_state):
            if transition.method == method and not transition.is_auto:
                return self._create_transition_link(transition, path_parameters, entity)
        return None

    def get_link_from_relation(
        self, path_parameters: Mapping[str, Any] | None, entity: Any, relation: str
    ) -> Link | None:
        """Link for a custom relation, e.g. from a request's Link header.

        Args:
            path_parameters: Path parameters of the current request
            entity: Current entity (or resource wrapping it)
            relation: ``"src>tgt"`` canonical id(s), or a raw Link header value

        Returns:
            Link for the first relation naming a known transition, else None
        """
        for rel in relations_from(relation)[: self._max_relations]:
            transition = self._transitions_by_id.get(rel)
            if transition is None:
                continue
            link = self._create_transition_link(transition, path_parameters, entity)
            if link is not None:
                return link
        return None

    def inject_links(
        self,
        path_parameters: Mapping[str, Any] | None,
        resource: Any,
        current_state: ResourceState,
        custom_relation: str | None = None,
    ) -> list[Link]:
        """Compute the links of a resource in ``current_state`` and attach them.

        The result always starts with the ``self`` link. For a collection,
        per-item transitions are resolved for each item and attached to the
        item instead of the collection.

        Args:
            path_parameters: Path parameters of the current request
            resource: EntityResource, CollectionResource, bare entity, or None
            current_state: State of the current request
            custom_relation: Only emit outbound links for these ``"src>tgt"`` relations

        Returns:
            Links of the resource itself; empty for a None resource
        """
        if resource is None:
            return []

        path_parameters = dict(path_parameters or {})
        wanted = set(relations_from(custom_relation)) if custom_relation else None
        properties = self._entity_properties(resource)

        links: list[Link] = [
            self._link_generator.create_self_link(current_state, path_parameters, properties)
        ]

        for transition in self.outbound_transitions(current_state):
            if transition.is_auto or transition.is_for_each:
                continue
            if transition.is_self_loop and transition.method == "GET":
                continue
            if wanted is not None and transition.id not in wanted:
                continue
            if transition.target_state.is_pseudo:
                continue
            links.extend(
                self._link_generator.create_links(
                    transition, path_parameters, properties, self._rel_for(transition)
                )
            )

        item_link_count = 0
        if isinstance(resource, CollectionResource):
            per_item = [
                transition
                for transition in self.outbound_transitions(current_state)
                if transition.is_for_each and not transition.target_state.is_pseudo
            ]
            for item in resource.entities:
                item_properties = self._entity_properties(item)
                item_links: list[Link] = []
                for transition in per_item:
                    item_links.extend(
                        self._link_generator.create_links(
                            transition, path_parameters, item_properties, self._rel_for(transition)
                        )
                    )
                item.links = item_links
                item_link_count += len(item_links)

        if isinstance(resource, (EntityResource, CollectionResource)):
            resource.links = links

        self._link_logger.log_links_injected(current_state.id, len(links), item_link_count)
        return links

    def _create_transition_link(
        self, transition: Transition, path_parameters: Mapping[str, Any] | None, entity: Any
    ) -> Link | None:
        if transition.target_state.is_pseudo:
            logger.debug("terminal_transition", transition=transition.id)
            return None
        links = self._link_generator.create_links(
            transition,
            path_parameters,
            self._entity_properties(entity),
            self._rel_for(transition),
        )
        return links[0] if links else None

    @staticmethod
    def _rel_for(transition: Transition) -> str | None:
        return "self" if transition.is_self_loop else None

    def _entity_properties(self, resource: Any) -> dict[str, Any]:
        if resource is None or isinstance(resource, CollectionResource):
            return {}
        if isinstance(resource, EntityResource):
            return self.transformer.transform(resource.entity)
        return self.transformer.transform(resource)

    def _require_member(self, state: ResourceState) -> None:
        if state not in self._states:
            raise StateNotInMachineError(state.id)

    @staticmethod
    def _collect_states(
        start: ResourceState,
        transitions_of: Callable[[ResourceState], tuple[Transition, ...]] | None = None,
    ) -> dict[ResourceState, tuple[Transition, ...]]:
        """Depth first walk mapping each reachable state to its outbound transitions.

        The visited set is keyed by state identity. Without ``transitions_of``
        the states' current transition lists are copied.
        """
        visited: dict[ResourceState, tuple[Transition, ...]] = {}
        stack = [start]
        while stack:
            state = stack.pop()
            if state in visited:
                continue
            transitions = tuple(state.transitions) if transitions_of is None else transitions_of(state)
            visited[state] = transitions
            for transition in reversed(transitions):
                target = transition.target_state
                if target not in visited:
                    stack.append(target)
        return visited

    @staticmethod
    def _index_transitions(
        states: Mapping[ResourceState, tuple[Transition, ...]]
    ) -> dict[str, Transition]:
        transitions: dict[str, Transition] = {}
        for outbound in states.values():
            for transition in outbound:
                transitions.setdefault(transition.id, transition)
        return transitions

    @staticmethod
    def _index_interactions(
        states: Mapping[ResourceState, tuple[Transition, ...]]
    ) -> dict[str, set[str]]:
        interactions: dict[str, set[str]] = {}
        for state, outbound in states.items():
            path = state.effective_path
            if path is not None and not state.is_pseudo:
                interactions.setdefault(str(path), set()).add("GET")
            for transition in outbound:
                if transition.is_auto:
                    continue
                target_path = transition.target_state.effective_path
                if target_path is None:
                    continue
                interactions.setdefault(str(target_path), set()).add(transition.method)
        return interactions

    @staticmethod
    def _group_by_path(states: Iterable[ResourceState]) -> dict[str, set[ResourceState]]:
        grouped: dict[str, set[ResourceState]] = {}
        for state in states:
            path = state.effective_path
            if path is not None:
                grouped.setdefault(str(path), set()).add(state)
        return grouped

    @staticmethod
    def _index_requests(
        states: Mapping[ResourceState, tuple[Transition, ...]]
    ) -> dict[tuple[str, str], ResourceState]:
        """(method, path) to the state a request of that shape enters."""
        requests: dict[tuple[str, str], ResourceState] = {}
        for outbound in states.values():
            for transition in outbound:
                target_path = transition.target_state.effective_path
                if transition.is_auto or target_path is None:
                    continue
                requests.setdefault((transition.method, str(target_path)), transition.target_state)
        for state in states:
            path = state.effective_path
            if path is not None and not state.is_pseudo:
                requests.setdefault(("GET", str(path)), state)
        return requests

    def __repr__(self) -> str:
        return f"ResourceStateMachine(initial={self._initial.id}, states={len(self._states)})"
