"""Hypermedia graph model: paths, states, transitions, links and resources."""

from .path_template import PathTemplate
from .resource import BeanTransformer, CollectionResource, EntityResource, EntityTransformer
from .state import Action, ActionType, ResourceState, StateKind
from .transition import (
    Link,
    LinkProperties,
    NestedStateMachine,
    Transition,
    TransitionCommand,
    TransitionTarget,
    TransitionType,
)

__all__ = [
    "Action",
    "ActionType",
    "BeanTransformer",
    "CollectionResource",
    "EntityResource",
    "EntityTransformer",
    "Link",
    "LinkProperties",
    "NestedStateMachine",
    "PathTemplate",
    "ResourceState",
    "StateKind",
    "Transition",
    "TransitionCommand",
    "TransitionTarget",
    "TransitionType",
]
