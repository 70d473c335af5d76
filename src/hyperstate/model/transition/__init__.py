"""Transition and link model."""

from .link import Link
from .link_properties import LinkProperties
from .transition import (
    NestedStateMachine,
    Transition,
    TransitionCommand,
    TransitionTarget,
    TransitionType,
)

__all__ = [
    "Link",
    "LinkProperties",
    "NestedStateMachine",
    "Transition",
    "TransitionCommand",
    "TransitionTarget",
    "TransitionType",
]
