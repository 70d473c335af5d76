"""Link - a concrete, fully substituted hypermedia link."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Link(BaseModel):
    """A link ready to be rendered into a hypermedia wire format.

    ``id`` is the canonical transition id (``"src>tgt"``); the originating
    transition is kept for callers but excluded from serialisation.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Canonical transition id")
    rel: str = Field(description="Link relation(s), space separated")
    href: str = Field(description="Fully substituted URI")
    method: str = Field("GET", description="Interaction used to follow the link")
    title: str | None = Field(None, description="Human readable title")
    transition: Any = Field(None, exclude=True, repr=False)

    def has_rel(self, rel: str) -> bool:
        """Whether ``rel`` is one of this link's relations."""
        return rel in self.rel.split()
