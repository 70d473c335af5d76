"""Pytest configuration and fixtures."""

import pytest

from hyperstate.config import reset_settings
from hyperstate.model import ResourceState


@pytest.fixture(autouse=True)
def hyperstate_settings(monkeypatch):
    """Give every test fresh settings with the test base URI."""
    monkeypatch.delenv("HYPERSTATE_ENV", raising=False)
    monkeypatch.setenv("HYPERSTATE_BASE_URI", "/baseuri")
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def toaster_states():
    """Two toaster states with a GET there and a DELETE back."""
    exists = ResourceState("toaster", "exists", path="/machines/toaster")
    cooking = ResourceState("toaster", "cooking", path="/machines/toaster/cooking")
    exists.add_transition("GET", cooking)
    cooking.add_transition("DELETE", exists)
    return exists, cooking


@pytest.fixture
def entity_lifecycle():
    """An entity with draft and published child states and pseudo deletions."""
    initial = ResourceState("", "initial", path="/entity")
    published = ResourceState.child_of(initial, "published", "/published")
    published_deleted = ResourceState.pseudo_of(published, "publishedDeleted")
    draft = ResourceState.child_of(initial, "draft", "/draft")
    draft_deleted = ResourceState.pseudo_of(draft, "draftDeleted")

    initial.add_transition("PUT", draft)
    draft.add_transition("PUT", draft)
    draft.add_transition("PUT", published)
    draft.add_transition("DELETE", draft_deleted)
    published.add_transition("DELETE", published_deleted)

    return {
        "initial": initial,
        "published": published,
        "publishedDeleted": published_deleted,
        "draft": draft,
        "draftDeleted": draft_deleted,
    }
