"""LinkProperties - the parameters for one link of a transition."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class LinkProperties:
    """Parameters to substitute into a transition's URI template.

    Attributes:
        target_field: Resolved (possibly indexed) field the link key binds to
        parameters: Unindexed key to literal value
    """

    target_field: str | None
    parameters: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self.parameters.get(key, default)
