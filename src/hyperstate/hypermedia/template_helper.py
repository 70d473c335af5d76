"""Helpers for property bags and ``{expression}`` templates.

The normalised property bag flattens an entity to dotted and indexed keys,
for example ``{"Items": [{"Sku": "A1"}]}`` becomes ``{"Items(0).Sku": "A1"}``.
"""

import dataclasses
import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

COLLECTION_PARAM_PATTERN = re.compile(r"\{(\w+(?:\.\w+)+)\}")
EXPRESSION_PATTERN = re.compile(r"\{([^{}]+)\}")
INDEX_PATTERN = re.compile(r"\((\d+)\)")


def normalize_properties(properties: Mapping[str, Any] | None) -> dict[str, Any]:
    """Flatten nested mappings and sequences to dotted and indexed keys.

    Keys that are already flat pass through unchanged. Repetition order is the
    order of the input sequence.

    Args:
        properties: Entity properties, possibly nested

    Returns:
        Flat property bag
    """
    flat: dict[str, Any] = {}
    if properties:
        for key, value in properties.items():
            _flatten(str(key), value, flat)
    return flat


def _flatten(prefix: str, value: Any, flat: dict[str, Any]) -> None:
    if isinstance(value, BaseModel):
        value = value.model_dump()
    elif dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = dataclasses.asdict(value)

    if isinstance(value, Mapping):
        for key, child in value.items():
            _flatten(f"{prefix}.{key}", child, flat)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _flatten(f"{prefix}({index})", item, flat)
    else:
        flat[prefix] = value


def strip_indices(key: str) -> str:
    """Remove every ``(n)`` index from a key: ``A(0).B(2).C`` -> ``A.B.C``."""
    return INDEX_PATTERN.sub("", key)


def last_index(key: str) -> int | None:
    """Index of the innermost repetition in a key, if any."""
    indices = INDEX_PATTERN.findall(key)
    return int(indices[-1]) if indices else None


def strip_last_index(key: str) -> str:
    """Remove a trailing ``(n)``: ``A(0).B(3)`` -> ``A(0).B``."""
    position = key.rfind("(")
    if position != -1 and key.endswith(")"):
        return key[:position]
    return key


def parent_of(value: str | None) -> str | None:
    """Everything before the last dot, or None for an undotted value."""
    if value and "." in value:
        return value[: value.rfind(".")]
    return None


def child_of(value: str | None) -> str | None:
    """The segment after the last dot, or None for an undotted value."""
    if value and "." in value:
        return value[value.rfind(".") + 1 :]
    return None


def collection_params(expression: str) -> list[str]:
    """Dotted ``{A.B[.C]}`` references in an expression, without braces."""
    return COLLECTION_PARAM_PATTERN.findall(expression)


def template_replace(template: str, properties: Mapping[str, Any]) -> str:
    """Replace each ``{expression}`` whose key is in ``properties``.

    Unknown expressions are left as they are.
    """

    def substitute(match: re.Match[str]) -> str:
        key = match.group(1)
        if key in properties and properties[key] is not None:
            return str(properties[key])
        return match.group(0)

    return EXPRESSION_PATTERN.sub(substitute, template)


def get_templated_parameters(
    uri_parameters: Mapping[str, str] | None, properties: Mapping[str, Any]
) -> dict[str, str]:
    """Resolve each URI parameter expression against the properties."""
    if not uri_parameters:
        return {}
    return {
        name: template_replace(expression, properties)
        for name, expression in uri_parameters.items()
    }


def is_resolved(value: str) -> bool:
    """Whether a templated value has no ``{expression}`` left."""
    return EXPRESSION_PATTERN.search(value) is None
