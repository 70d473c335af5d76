"""PathTemplate - URI templates for resource state paths.

A template such as ``/notes/{id}/reviewers`` names the placeholders a link
must fill and is matched against concrete request paths to find the current
resource state.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass
from functools import cached_property
from typing import Any
from urllib.parse import quote, unquote

from ..hypermedia_exceptions import UnresolvedTemplateException

PLACEHOLDER_PATTERN = re.compile(r"\{([A-Za-z0-9_.()\-]+)\}")


@dataclass(frozen=True)
class PathTemplate:
    """An immutable URI path template.

    Placeholders are ``{name}``; a purely numeric name (``{0}``) is positional.
    Each placeholder matches exactly one path segment.

    Example:
        >>> template = PathTemplate("/notes/{id}")
        >>> template.match("/notes/123")
        {'id': '123'}
        >>> template.expand({"id": "456"})
        '/notes/456'
    """

    template: str

    @classmethod
    def of(cls, value: PathTemplate | str | None) -> PathTemplate | None:
        """Coerce a string (or None) to a PathTemplate.

        Args:
            value: Template, template string or None

        Returns:
            PathTemplate or None
        """
        if value is None or isinstance(value, PathTemplate):
            return value
        return cls(value)

    @cached_property
    def variables(self) -> tuple[str, ...]:
        """Placeholder names in order of first appearance."""
        seen: list[str] = []
        for name in PLACEHOLDER_PATTERN.findall(self.template):
            if name not in seen:
                seen.append(name)
        return tuple(seen)

    @cached_property
    def _matcher(self) -> tuple[re.Pattern[str], dict[str, str]]:
        groups: dict[str, str] = {}
        parts: list[str] = []
        position = 0
        for match in PLACEHOLDER_PATTERN.finditer(self.template):
            parts.append(re.escape(self.template[position : match.start()]))
            name = match.group(1)
            group = next((g for g, n in groups.items() if n == name), None)
            if group is None:
                group = f"g{len(groups)}"
                groups[group] = name
                parts.append(f"(?P<{group}>[^/]+)")
            else:
                parts.append(f"(?P={group})")
            position = match.end()
        parts.append(re.escape(self.template[position:]))
        return re.compile("".join(parts)), groups

    @property
    def variable_count(self) -> int:
        """Number of distinct placeholders."""
        return len(self.variables)

    @property
    def literal_length(self) -> int:
        """Number of characters outside placeholders."""
        return len(PLACEHOLDER_PATTERN.sub("", self.template))

    def specificity(self) -> tuple[int, int]:
        """Sort key: more literal characters first, then fewer placeholders."""
        return (-self.literal_length, self.variable_count)

    def match(self, path: str) -> dict[str, str] | None:
        """Match a concrete path and extract the placeholder values.

        Args:
            path: Request path, without query string

        Returns:
            Placeholder bindings, or None if the path does not match
        """
        pattern, groups = self._matcher
        candidates = [path]
        if len(path) > 1 and path.endswith("/") and not self.template.endswith("/"):
            candidates.append(path[:-1])
        for candidate in candidates:
            found = pattern.fullmatch(candidate)
            if found:
                return {name: unquote(found.group(group)) for group, name in groups.items()}
        return None

    def matches(self, path: str) -> bool:
        """Whether a concrete path matches this template."""
        return self.match(path) is not None

    def expand(self, values: Mapping[str, Any], strict: bool = True) -> str:
        """Substitute placeholder values, percent-encoding each value.

        Args:
            values: Placeholder name to value
            strict: Raise when a placeholder has no value; otherwise keep it literally

        Returns:
            The expanded path

        Raises:
            UnresolvedTemplateException: If strict and a placeholder is missing
        """
        missing = [
            name for name in self.variables if values.get(name) is None
        ]
        if missing and strict:
            raise UnresolvedTemplateException(self.template, missing)

        def substitute(match: re.Match[str]) -> str:
            value = values.get(match.group(1))
            if value is None:
                return match.group(0)
            return quote(str(value), safe="")

        return PLACEHOLDER_PATTERN.sub(substitute, self.template)

    def expand_positional(self, *args: Any) -> str:
        """Fill positional placeholders (``{0}``, ``{1}``...) by index."""
        return self.expand({str(index): value for index, value in enumerate(args)})

    def join(self, child: PathTemplate | str | None) -> PathTemplate:
        """Append a child path, as used for states built from a parent state."""
        suffix = str(child) if child is not None else ""
        if not suffix:
            return self
        base = self.template
        if base.endswith("/") and suffix.startswith("/"):
            base = base[:-1]
        return PathTemplate(base + suffix)

    def __str__(self) -> str:
        return self.template
