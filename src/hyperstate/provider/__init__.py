"""Resource state providers and the state cache."""

from .state_cache import StateCache, StateLoader, default_group
from .state_provider import InMemoryResourceStateProvider, ResourceStateProvider, parse_binding

__all__ = [
    "InMemoryResourceStateProvider",
    "ResourceStateProvider",
    "StateCache",
    "StateLoader",
    "default_group",
    "parse_binding",
]
