"""LinkPropertyResolver - parameter maps for the links of one transition.

A transition's URI parameters may reference repeating entity fields, for
example ``{"sku": "{Items.Sku}"}``. Given the entity's normalised property bag
(``Items(0).Sku``, ``Items(1).Sku``...) the resolver produces one
``LinkProperties`` per repetition:

- fields sharing the target field's parent group are paired by index
- fields under an unrelated parent are re-derived for each synthetic index
- ``{Other.Key}`` placeholders inside resolved values are substituted with
  the value resolved for the same repetition
"""

from collections.abc import Mapping
from typing import Any

from ..hypermedia_exceptions import UnsupportedTransitionException
from ..logging import get_logger
from ..model.transition.link_properties import LinkProperties
from ..model.transition.transition import Transition
from .template_helper import (
    EXPRESSION_PATTERN,
    INDEX_PATTERN,
    child_of,
    collection_params,
    last_index,
    normalize_properties,
    parent_of,
    strip_indices,
)

logger = get_logger(__name__)


def replace_last_index(key: str, index: int) -> str:
    """Replace the innermost ``(n)`` of a key with ``(index)``."""
    matches = list(INDEX_PATTERN.finditer(key))
    if not matches:
        return key
    last = matches[-1]
    return f"{key[: last.start()]}({index}){key[last.end() :]}"


class LinkPropertyResolver:
    """Resolves the parameter maps needed to build the links of a transition.

    Instances hold no state beyond their constructor arguments; ``resolve``
    may be called any number of times and from any thread.

    Example:
        >>> resolver = LinkPropertyResolver(transition, {"Items": [{"Sku": "A"}, {"Sku": "B"}]})
        >>> [p.parameters["Sku"] for p in resolver.resolve()]
        ['A', 'B']
    """

    def __init__(self, transition: Transition, properties: Mapping[str, Any] | None) -> None:
        """Initialize the resolver.

        Args:
            transition: Transition whose links are being built
            properties: Properties of the current entity, nested or already flat
        """
        self.transition = transition
        self.target_field = transition.target_field
        self._normalized = normalize_properties(properties)
        self.collection_params = self._collect_collection_params()
        self._dynamic_parent = self._first_dynamic_parent()

    @property
    def has_collection_dynamic_resource(self) -> bool:
        """Whether the target is located from a dotted (collection) argument."""
        return self._dynamic_parent is not None

    def is_transition_supported(self) -> bool:
        """Check the transition declares a target field when it needs one.

        Returns:
            False, after logging an error, for an unsupported configuration
        """
        if self.target_field is None and (
            self.collection_params or self.has_collection_dynamic_resource
        ):
            logger.error(
                "transition_unsupported",
                transition=self.transition.id,
                reason="target field required for collection parameters or dynamic resource",
                collection_params=self.collection_params,
            )
            return False
        return True

    def resolve(self, strict: bool = False) -> list[LinkProperties]:
        """Compute one LinkProperties per link of the transition.

        Args:
            strict: Raise for an unsupported transition instead of returning []

        Returns:
            Parameter maps in repetition order

        Raises:
            UnsupportedTransitionException: If strict and the transition is unsupported
        """
        if not self.is_transition_supported():
            if strict:
                raise UnsupportedTransitionException(
                    self.transition.id, "target field name cannot be None"
                )
            return []

        child_names = [child_of(param) or param for param in self.collection_params]
        if self.target_field is not None and "." in self.target_field:
            results = self._resolve_multivalue_target(child_names)
        else:
            results = self._resolve_single_target()

        logger.debug(
            "link_properties_resolved", transition=self.transition.id, count=len(results)
        )
        return results

    def _resolve_multivalue_target(self, child_names: list[str]) -> list[LinkProperties]:
        target_field = self.target_field
        found = self._matching_keys(target_field)
        # An absent target still yields one, unresolved, occurrence
        occurrences = found or [target_field]
        target_parent = parent_of(target_field)

        if not self.collection_params:
            return [
                self._create(occurrence, self._dynamic_keys(occurrence))
                for occurrence in occurrences
            ]

        if parent_of(self.collection_params[0]) == target_parent:
            results = []
            for index, occurrence in enumerate(occurrences):
                occurrence_parent = parent_of(occurrence)
                keys = []
                for param, child in zip(self.collection_params, child_names):
                    if parent_of(param) == target_parent:
                        keys.append(f"{occurrence_parent}.{child}")
                    else:
                        keys.append(self._param_key(param, index))
                results.append(self._create(occurrence, keys + self._dynamic_keys(occurrence)))
            return results

        # Unrelated parents: pair by position, over the longest contributing group
        cardinality = max(len(found), self._cardinality())
        results = []
        for index in range(cardinality):
            occurrence = occurrences[index] if index < len(occurrences) else target_field
            keys = self._param_keys(index) + self._dynamic_keys(occurrence)
            results.append(self._create(occurrence, keys))
        return results

    def _resolve_single_target(self) -> list[LinkProperties]:
        if not self.collection_params:
            return [self._create(self.target_field, [])]
        return [
            self._create(self.target_field, self._param_keys(index))
            for index in range(self._cardinality())
        ]

    def _param_keys(self, index: int) -> list[str]:
        """Property keys of every collection parameter for one repetition."""
        return [self._param_key(param, index) for param in self.collection_params]

    def _param_key(self, param: str, index: int) -> str:
        matches = self._matching_keys(param)
        return replace_last_index(matches[0], index) if matches else param

    def _cardinality(self) -> int:
        """Number of repetitions of the collection parameters, at least one."""
        highest = 0
        for param in self.collection_params:
            for key in self._matching_keys(param):
                index = last_index(key)
                if index is not None and index > highest:
                    highest = index
        return highest + 1

    def _dynamic_keys(self, target_field: str) -> list[str]:
        """Locator arguments of a dynamic target, re-rooted at the target's parent."""
        if not self.has_collection_dynamic_resource:
            return []
        target = self.transition.target_state
        if not target.is_dynamic:
            return []
        target_parent = parent_of(target_field)
        keys = []
        for arg in target.locator_args:
            if "." in arg:
                keys.append(f"{target_parent}.{child_of(arg).replace('}', '')}")
        return keys

    def _create(self, target_field: str | None, keys: list[str]) -> LinkProperties:
        parameters: dict[str, Any] = dict(self._normalized)
        unindexed_keys: set[str] = set()

        for key in keys:
            value = self._normalized.get(key)
            unindexed = strip_indices(key)
            unindexed_keys.add(unindexed)
            parameters[unindexed] = "" if value is None else str(value)

        if target_field is not None and "." in target_field and target_field in self._normalized:
            value = self._normalized[target_field]
            resolved = "" if value is None else str(value)
            unindexed = strip_indices(target_field)
            unindexed_keys.add(unindexed)
            parameters[unindexed] = resolved
            parameters[child_of(unindexed)] = resolved

        # Replace Id={A.B} with Id=VAL when A.B=VAL was resolved for this repetition
        for key, value in list(parameters.items()):
            if isinstance(value, str) and "{" in value:
                parameters[key] = EXPRESSION_PATTERN.sub(
                    lambda match: (
                        str(parameters[strip_indices(match.group(1))])
                        if strip_indices(match.group(1)) in unindexed_keys
                        else match.group(0)
                    ),
                    value,
                )

        return LinkProperties(target_field, parameters)

    def _matching_keys(self, field_name: str) -> list[str]:
        """Bag keys equal to ``field_name`` once their indices are stripped."""
        return [key for key in self._normalized if strip_indices(key) == field_name]

    def _collect_collection_params(self) -> list[str]:
        params: list[str] = []
        for expression in self.transition.uri_parameters.values():
            params.extend(collection_params(expression))
        target = self.transition.target_state
        if target.is_dynamic:
            for arg in target.locator_args:
                params.extend(collection_params(arg))
        return params

    def _first_dynamic_parent(self) -> str | None:
        target = self.transition.target_state
        if not target.is_dynamic:
            return None
        for arg in target.locator_args:
            if "." in arg:
                return parent_of(arg).replace("{", "")
        return None
