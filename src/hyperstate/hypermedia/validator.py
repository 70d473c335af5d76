"""HypermediaValidator - consistency checks and DOT rendering of a machine."""

from __future__ import annotations

from ..logging import get_logger
from ..model.state.resource_state import ResourceState
from ..model.transition.transition import Transition, TransitionType
from .link_property_resolver import LinkPropertyResolver
from .state_machine import ResourceStateMachine

logger = get_logger(__name__)


class HypermediaValidator:
    """Checks a ResourceStateMachine for configuration problems.

    Example:
        >>> validator = HypermediaValidator.create(machine)
        >>> validator.is_valid()
        True
        >>> print(validator.graph())  # doctest: +SKIP
    """

    def __init__(self, machine: ResourceStateMachine) -> None:
        self.machine = machine

    @classmethod
    def create(cls, machine: ResourceStateMachine) -> HypermediaValidator:
        return cls(machine)

    def validate(self) -> list[str]:
        """Collect every problem found in the machine.

        Returns:
            Human readable issues, empty for a consistent machine
        """
        issues: list[str] = []
        states = sorted(self.machine.all_states(), key=lambda state: state.id)

        names: dict[str, set[str]] = {}
        for state in states:
            names.setdefault(state.name, set()).add(state.entity_name)
        for name, entities in sorted(names.items()):
            if len(entities) > 1:
                issues.append(
                    f"State name '{name}' is used by several entities: {', '.join(sorted(entities))}"
                )

        locators = self.machine.locators
        for state in states:
            if state.is_dynamic and state.locator_name not in locators:
                issues.append(
                    f"Dynamic state '{state.id}' uses unregistered resource locator "
                    f"'{state.locator_name}'"
                )
            elif not state.is_dynamic and state.effective_path is None:
                issues.append(f"State '{state.id}' has no path and cannot be linked to")
            for transition in self.machine.outbound_transitions(state):
                issues.extend(self._check_transition(transition))

        for issue in issues:
            logger.warning("validation_issue", issue=issue)
        return issues

    def is_valid(self) -> bool:
        return not self.validate()

    def graph(self) -> str:
        """Render the machine as Graphviz DOT text."""
        lines = [f'digraph "{self.machine.initial.id}" {{']
        states = sorted(self.machine.all_states(), key=lambda state: state.id)
        for state in states:
            lines.append(f"    {self._node(state)}")
        for state in states:
            for transition in self.machine.outbound_transitions(state):
                lines.append(f"    {self._edge(transition)}")
        lines.append("}")
        return "\n".join(lines)

    def _check_transition(self, transition: Transition) -> list[str]:
        issues = []
        resolver = LinkPropertyResolver(transition, None)
        if transition.target_field is None and (
            resolver.collection_params or resolver.has_collection_dynamic_resource
        ):
            issues.append(
                f"Transition {transition.id} references collection parameters "
                f"{resolver.collection_params} without a target field"
            )
        return issues

    @staticmethod
    def _node(state: ResourceState) -> str:
        path = state.effective_path
        label = state.id if path is None else f"{state.id}\\n{path}"
        attributes = [f'label="{label}"']
        if state.is_pseudo:
            attributes.append("shape=circle")
        elif state.is_collection:
            attributes.append("shape=box3d")
        else:
            attributes.append("shape=box")
        return f'"{state.id}" [{", ".join(attributes)}];'

    @staticmethod
    def _edge(transition: Transition) -> str:
        attributes = [f'label="{transition.method}"']
        if transition.type is TransitionType.AUTO:
            attributes.append("style=dashed")
        elif transition.type is TransitionType.FOR_EACH:
            attributes.append("style=bold")
        return (
            f'"{transition.source.id}" -> "{transition.target_state.id}" '
            f"[{', '.join(attributes)}];"
        )
