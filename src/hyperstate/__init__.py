"""hyperstate: hypermedia application state for REST APIs.

Resource states and transitions form a declarative graph. A
ResourceStateMachine indexes the graph, determines the state behind a
request and computes the links of a resource, one per repetition of its
collection fields.
"""

from .base_exceptions import HyperstateException
from .config import HyperstateSettings, get_settings, reset_settings
from .hypermedia import (
    HypermediaValidator,
    LinkGenerator,
    LinkPropertyResolver,
    ResourceLocator,
    ResourceStateMachine,
)
from .hypermedia_exceptions import (
    HypermediaException,
    InvalidBindingException,
    MethodNotAllowedException,
    StateNotFoundException,
    StateNotInMachineError,
    UnresolvedTemplateException,
    UnsupportedTransitionException,
)
from .model import (
    Action,
    ActionType,
    BeanTransformer,
    CollectionResource,
    EntityResource,
    Link,
    LinkProperties,
    PathTemplate,
    ResourceState,
    StateKind,
    Transition,
    TransitionType,
)
from .provider import InMemoryResourceStateProvider, ResourceStateProvider, StateCache

__version__ = "0.1.0"

__all__ = [
    # Model
    "Action",
    "ActionType",
    "BeanTransformer",
    "CollectionResource",
    "EntityResource",
    "Link",
    "LinkProperties",
    "PathTemplate",
    "ResourceState",
    "StateKind",
    "Transition",
    "TransitionType",
    # Engine
    "HypermediaValidator",
    "LinkGenerator",
    "LinkPropertyResolver",
    "ResourceLocator",
    "ResourceStateMachine",
    # Providers
    "InMemoryResourceStateProvider",
    "ResourceStateProvider",
    "StateCache",
    # Configuration
    "HyperstateSettings",
    "get_settings",
    "reset_settings",
    # Exceptions
    "HyperstateException",
    "HypermediaException",
    "InvalidBindingException",
    "MethodNotAllowedException",
    "StateNotFoundException",
    "StateNotInMachineError",
    "UnresolvedTemplateException",
    "UnsupportedTransitionException",
]
