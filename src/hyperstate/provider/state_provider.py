"""Resource state providers.

A provider maps state names to ResourceState objects and inbound requests to
state names. Bindings are written ``"GET,PUT /customers/{id}"``: a comma
separated method list, one space, then the path template.
"""

import logging
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

import yaml

from ..hypermedia_exceptions import (
    InvalidBindingException,
    MethodNotAllowedException,
    StateNotFoundException,
)
from ..model.path_template import PathTemplate
from ..model.state.resource_state import ResourceState
from .state_cache import StateCache, StateLoader

logger = logging.getLogger(__name__)


@runtime_checkable
class ResourceStateProvider(Protocol):
    """Source of resource states for a request dispatcher."""

    def get_resource_state(self, name: str) -> ResourceState | None: ...

    def get_resource_state_for_request(self, method: str, path: str) -> ResourceState | None: ...

    def get_resource_states_by_path(self) -> dict[str, set[str]]: ...

    def is_loaded(self, name: str) -> bool: ...


def parse_binding(state_name: str, binding: str) -> tuple[frozenset[str], PathTemplate]:
    """Split a binding into its methods and path template.

    Args:
        state_name: State the binding belongs to (for error reporting)
        binding: ``"METHOD[,METHOD...] /path"``

    Returns:
        Upper-cased methods and the path template

    Raises:
        InvalidBindingException: If the binding is malformed
    """
    parts = binding.split() if isinstance(binding, str) else []
    if len(parts) != 2 or not parts[1].startswith("/"):
        raise InvalidBindingException(state_name, str(binding))
    methods = frozenset(method.strip().upper() for method in parts[0].split(",") if method.strip())
    if not methods:
        raise InvalidBindingException(state_name, binding)
    return methods, PathTemplate(parts[1])


class InMemoryResourceStateProvider:
    """ResourceStateProvider over a binding table and a StateCache.

    States missing from the cache are fetched through the optional loader,
    one group at a time.

    Example:
        >>> provider = InMemoryResourceStateProvider(
        ...     {"Note-item": "GET,PUT /notes/{id}"}, states={"Note-item": item}
        ... )
        >>> provider.get_resource_state_for_request("GET", "/notes/7")
        ResourceState(Note.item, ...)
    """

    def __init__(
        self,
        bindings: Mapping[str, str] | None = None,
        states: Mapping[str, ResourceState] | None = None,
        loader: StateLoader | None = None,
        cache: StateCache | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            bindings: State name to binding
            states: States known up front, by name
            loader: Loads a group of states by group name
            cache: Cache to use; a private one by default

        Raises:
            InvalidBindingException: If a binding is malformed
        """
        self._cache = cache if cache is not None else StateCache()
        self._loader = loader
        self._lock = threading.RLock()
        self._states_by_request: dict[tuple[str, str], str] = {}
        self._states_by_path: dict[str, set[str]] = {}
        self._methods_by_state: dict[str, set[str]] = {}
        self._paths_by_state: dict[str, str] = {}
        self._templates: list[PathTemplate] = []

        if states:
            self._cache.put_all(states)
        for name, binding in (bindings or {}).items():
            self._store(name, binding)

    @classmethod
    def from_yaml(
        cls,
        yaml_path: Path | str,
        states: Mapping[str, ResourceState] | None = None,
        loader: StateLoader | None = None,
        cache: StateCache | None = None,
    ) -> "InMemoryResourceStateProvider":
        """Create a provider from a YAML binding file.

        The file is either a mapping of state name to binding, or a mapping
        with such a table under ``bindings``.
        """
        with open(yaml_path, encoding="utf-8") as f:
            data: Any = yaml.safe_load(f) or {}
        if isinstance(data, Mapping) and isinstance(data.get("bindings"), Mapping):
            data = data["bindings"]
        if not isinstance(data, Mapping):
            raise ValueError(f"Expected a mapping of state bindings in {yaml_path}")
        logger.info(f"Loaded {len(data)} state bindings from {yaml_path}")
        return cls({str(name): str(binding) for name, binding in data.items()}, states, loader, cache)

    def _store(self, name: str, binding: str) -> None:
        methods, template = parse_binding(name, binding)
        path = str(template)
        with self._lock:
            self._unbind(name)
            self._paths_by_state[name] = path
            self._methods_by_state[name] = set(methods)
            for method in methods:
                request = (method, path)
                found = self._states_by_request.get(request)
                if found is not None and found != name:
                    logger.error(
                        f"Multiple states bound to the same request [{method} {path}], "
                        f"overriding [{found}] with [{name}]"
                    )
                self._states_by_request[request] = name
                logger.debug(f"Binding [{name}] to [{method} {path}]")
            self._states_by_path.setdefault(path, set()).add(name)
            if template not in self._templates:
                self._templates.append(template)
                self._templates.sort(key=PathTemplate.specificity)

    def _unbind(self, name: str) -> None:
        """Drop every request entry of a name so that a new binding replaces it."""
        old_path = self._paths_by_state.pop(name, None)
        if old_path is None:
            return
        self._methods_by_state.pop(name, None)
        for request in [r for r, bound in self._states_by_request.items() if bound == name]:
            del self._states_by_request[request]
        names = self._states_by_path.get(old_path, set())
        names.discard(name)
        if not names:
            self._states_by_path.pop(old_path, None)
            self._templates = [t for t in self._templates if str(t) != old_path]
        logger.debug(f"Unbinding [{name}] from [{old_path}]")

    def register_state(
        self, name: str, binding: str, state: ResourceState | None = None
    ) -> bool:
        """Register a state binding at runtime.

        The state is loaded first; a state that cannot be loaded is not bound.

        Args:
            name: State name
            binding: ``"METHOD[,METHOD...] /path"``
            state: The state itself, when not available from the loader

        Returns:
            True if the state was registered
        """
        parse_binding(name, binding)
        logger.info(f"Attempting to register state: {name} binding: {binding}")
        if state is not None:
            self._cache.put(name, state)
        if self.get_resource_state(name) is None:
            logger.warning(f"Not registering '{name}': state could not be loaded")
            return False
        self._store(name, binding)
        return True

    def register_states(self, bindings: Mapping[str, str]) -> list[str]:
        """Register several bindings; returns the names that were registered."""
        return [name for name, binding in bindings.items() if self.register_state(name, binding)]

    def get_resource_state(self, name: str) -> ResourceState | None:
        """Get a state by name, loading it if needed."""
        if not name:
            return None
        if self._loader is None:
            return self._cache.get(name)
        return self._cache.get_or_load(name, self._loader)

    def require_resource_state(self, name: str) -> ResourceState:
        """Get a state by name.

        Raises:
            StateNotFoundException: If no such state exists
        """
        state = self.get_resource_state(name)
        if state is None:
            raise StateNotFoundException(name)
        return state

    def get_resource_state_id(self, method: str, path: str) -> str | None:
        """Name of the state bound to a request.

        Args:
            method: Request method
            path: Concrete request path (a bound template also matches itself)

        Returns:
            State name, or None for an unknown path

        Raises:
            MethodNotAllowedException: If the path is bound, but not for this method
        """
        method = method.upper()
        allowed: set[str] = set()
        with self._lock:
            for template in self._templates:
                if not template.matches(path):
                    continue
                key = str(template)
                name = self._states_by_request.get((method, key))
                if name is not None:
                    return name
                allowed.update(m for (m, p) in self._states_by_request if p == key)
        if allowed:
            raise MethodNotAllowedException(method, path, allowed)
        return None

    def get_resource_state_for_request(self, method: str, path: str) -> ResourceState | None:
        name = self.get_resource_state_id(method, path)
        if name is None:
            logger.warning(f"No state found for [{method} {path}]")
            return None
        logger.debug(f"Found state [{name}] for [{method} {path}]")
        return self.get_resource_state(name)

    def get_resource_states_by_path(self) -> dict[str, set[str]]:
        with self._lock:
            return {path: set(names) for path, names in self._states_by_path.items()}

    def get_resource_methods_by_state(self) -> dict[str, set[str]]:
        with self._lock:
            return {name: set(methods) for name, methods in self._methods_by_state.items()}

    def get_resource_paths_by_state(self) -> dict[str, str]:
        with self._lock:
            return dict(self._paths_by_state)

    def is_loaded(self, name: str) -> bool:
        return self._cache.is_loaded(name)

    def unload(self, name: str) -> None:
        self._cache.unload(name)
