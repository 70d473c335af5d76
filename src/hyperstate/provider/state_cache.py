"""StateCache - thread-safe read-through cache of loaded resource states.

States are loaded in groups: asking for one state of a group loads (and
caches) every state of that group.
"""

import logging
import threading
from collections.abc import Callable, Mapping

from ..model.state.resource_state import ResourceState

logger = logging.getLogger(__name__)

StateLoader = Callable[[str], Mapping[str, ResourceState]]


def default_group(state_name: str) -> str:
    """Group of a state name: everything before the first ``-``."""
    return state_name.split("-", 1)[0]


class StateCache:
    """Read-through cache of resource states by name.

    Safe for concurrent readers; loading is serialised so a group is loaded
    at most once however many threads miss on it together.
    """

    def __init__(self, group_of: Callable[[str], str] = default_group) -> None:
        """Initialize the cache.

        Args:
            group_of: Maps a state name to the name of the group it is loaded with
        """
        self._states: dict[str, ResourceState] = {}
        self._group_of = group_of
        self._lock = threading.RLock()

    def get(self, name: str) -> ResourceState | None:
        with self._lock:
            return self._states.get(name)

    def get_or_load(self, name: str, loader: StateLoader) -> ResourceState | None:
        """Return a cached state, loading its whole group on a miss.

        Args:
            name: State name
            loader: Called with the group name; returns every state of the group

        Returns:
            The state, or None if the group does not contain it
        """
        state = self.get(name)
        if state is not None:
            return state

        with self._lock:
            # Another thread may have loaded the group while we waited
            state = self._states.get(name)
            if state is not None:
                return state

            group = self._group_of(name)
            loaded = loader(group)
            self._states.update(loaded)
            logger.debug(f"Loaded {len(loaded)} states of group '{group}'")

            state = self._states.get(name)
            if state is None:
                logger.error(f"Failed to load '{name}': not in group '{group}'")
            return state

    def put(self, name: str, state: ResourceState) -> None:
        with self._lock:
            self._states[name] = state

    def put_all(self, states: Mapping[str, ResourceState]) -> None:
        with self._lock:
            self._states.update(states)

    def unload(self, name: str) -> None:
        """Drop one state; it is reloaded on next access."""
        with self._lock:
            if self._states.pop(name, None) is not None:
                logger.debug(f"Unloaded '{name}'")

    def is_loaded(self, name: str) -> bool:
        with self._lock:
            return name in self._states

    def names(self) -> list[str]:
        with self._lock:
            return list(self._states)

    def clear(self) -> None:
        """Clear the cache."""
        with self._lock:
            self._states.clear()
            logger.debug("State cache cleared")

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)
