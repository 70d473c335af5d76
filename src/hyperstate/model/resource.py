"""Resource payloads that link injection operates on.

Entities are arbitrary Python objects. ``BeanTransformer`` turns one into a
property mapping so that URI templates can be filled from its fields.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, TypeVar

from pydantic import BaseModel

from .transition.link import Link

T = TypeVar("T")


class EntityTransformer(Protocol):
    """Turns an entity into a mapping of field name to value."""

    def transform(self, entity: Any) -> dict[str, Any]: ...


class BeanTransformer:
    """Default transformer for mappings, dataclasses, pydantic models and objects.

    Nested structures are kept as they are; flattening to dotted and indexed
    keys happens in the template helper.
    """

    def transform(self, entity: Any) -> dict[str, Any]:
        if entity is None:
            return {}
        if isinstance(entity, Mapping):
            return dict(entity)
        if isinstance(entity, BaseModel):
            return entity.model_dump()
        if dataclasses.is_dataclass(entity) and not isinstance(entity, type):
            return dataclasses.asdict(entity)
        if hasattr(entity, "__dict__"):
            return {
                name: value
                for name, value in vars(entity).items()
                if not name.startswith("_") and not callable(value)
            }
        return {}


@dataclass
class EntityResource(Generic[T]):
    """A single entity and the links computed for it."""

    entity: T | None
    links: list[Link] = field(default_factory=list)
    entity_name: str | None = None


@dataclass
class CollectionResource(Generic[T]):
    """A collection of entity resources and the links of the collection itself."""

    name: str
    entities: list[EntityResource[T]] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)

    def __iter__(self):
        return iter(self.entities)

    def __len__(self) -> int:
        return len(self.entities)
