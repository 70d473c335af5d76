"""Hypermedia engine: state machine, link property resolution and link generation."""

from .link_generator import LinkGenerator, ResourceLocator
from .link_property_resolver import LinkPropertyResolver
from .state_machine import ResourceStateMachine
from .validator import HypermediaValidator

__all__ = [
    "HypermediaValidator",
    "LinkGenerator",
    "LinkPropertyResolver",
    "ResourceLocator",
    "ResourceStateMachine",
]
