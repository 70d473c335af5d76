"""Resource state model."""

from .action import Action, ActionType
from .resource_state import ResourceState, StateKind

__all__ = ["Action", "ActionType", "ResourceState", "StateKind"]
