"""Tests for the hyperstate exception hierarchy."""

import pytest

from hyperstate.base_exceptions import HyperstateException
from hyperstate.hypermedia_exceptions import (
    HypermediaException,
    MethodNotAllowedException,
    StateNotFoundException,
    UnresolvedTemplateException,
)


class TestErrorCodes:
    """Tests for default and explicit error codes."""

    @pytest.mark.parametrize(
        "exc,code",
        [
            (HyperstateException("boom"), "HYPERSTATE_ERROR"),
            (HypermediaException("boom"), "HYPERMEDIA_ERROR"),
            (StateNotFoundException("Note-item"), "STATE_NOT_FOUND"),
            (MethodNotAllowedException("PUT", "/notes/1", {"GET"}), "METHOD_NOT_ALLOWED"),
            (UnresolvedTemplateException("/notes/{id}", ["id"]), "UNRESOLVED_TEMPLATE"),
        ],
    )
    def test_default_error_code(self, exc, code):
        assert exc.error_code == code
        assert str(exc).startswith(f"[{code}] ")

    def test_explicit_error_code_wins(self):
        exc = HyperstateException("boom", error_code="CUSTOM")

        assert str(exc) == "[CUSTOM] boom"


class TestLogFields:
    """Tests for structured log fields."""

    def test_log_fields_carry_context(self):
        """Test that the context is flattened next to the code and message."""
        exc = MethodNotAllowedException("put", "/notes/1", {"GET", "DELETE"})

        assert exc.log_fields() == {
            "error_code": "METHOD_NOT_ALLOWED",
            "error": "Method put not allowed for '/notes/1'",
            "method": "put",
            "path": "/notes/1",
            "allowed_methods": ["DELETE", "GET"],
        }

    def test_context_is_copied(self):
        context = {"state_name": "a"}
        exc = HyperstateException("boom", context=context)

        context["state_name"] = "b"

        assert exc.context == {"state_name": "a"}
