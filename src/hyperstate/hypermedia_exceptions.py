"""Resource state, transition and link exceptions.

Lookup misses are not exceptions in hyperstate: a missing transition or a
terminal target is reported as ``None``. The classes here cover configuration
problems, provider failures and caller misuse.
"""

from collections.abc import Iterable

from .base_exceptions import HyperstateException


class HypermediaException(HyperstateException):
    """Base exception for hypermedia errors."""

    default_error_code = "HYPERMEDIA_ERROR"


class StateNotFoundException(HypermediaException):
    """Raised when a resource state cannot be found by name."""

    default_error_code = "STATE_NOT_FOUND"

    def __init__(self, state_name: str, **kwargs) -> None:
        """Initialize with state name."""
        super().__init__(
            f"Resource state '{state_name}' not found",
            context={"state_name": state_name, **kwargs},
        )


class MethodNotAllowedException(HypermediaException):
    """Raised when a path is known but not bound to the requested method."""

    default_error_code = "METHOD_NOT_ALLOWED"

    def __init__(self, method: str, path: str, allowed_methods: Iterable[str]) -> None:
        """Initialize with the request and the methods the path does accept."""
        self.allowed_methods = frozenset(allowed_methods)
        super().__init__(
            f"Method {method} not allowed for '{path}'",
            context={
                "method": method,
                "path": path,
                "allowed_methods": sorted(self.allowed_methods),
            },
        )


class InvalidBindingException(HypermediaException):
    """Raised when a state binding is not of the form ``METHOD[,METHOD] /path``."""

    default_error_code = "INVALID_BINDING"

    def __init__(self, state_name: str, binding: str) -> None:
        super().__init__(
            f"Invalid binding '{binding}' for state '{state_name}'",
            context={"state_name": state_name, "binding": binding},
        )


class UnsupportedTransitionException(HypermediaException):
    """Raised when a transition needs a target field but does not declare one."""

    default_error_code = "UNSUPPORTED_TRANSITION"

    def __init__(self, transition_id: str, reason: str) -> None:
        super().__init__(
            f"Cannot generate links for transition {transition_id}: {reason}",
            context={"transition_id": transition_id, "reason": reason},
        )


class UnresolvedTemplateException(HypermediaException):
    """Raised when a URI template still has placeholders without values."""

    default_error_code = "UNRESOLVED_TEMPLATE"

    def __init__(self, template: str, missing: Iterable[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(
            f"Template '{template}' has unresolved placeholders: {', '.join(self.missing)}",
            context={"template": template, "missing": list(self.missing)},
        )


class StateNotInMachineError(AssertionError):
    """A state that does not belong to the machine was queried.

    This is caller misuse rather than a data condition, so it derives from
    AssertionError and is never caught inside hyperstate.
    """

    def __init__(self, state_id: str) -> None:
        super().__init__(f"State '{state_id}' is not part of this state machine")
        self.state_id = state_id
