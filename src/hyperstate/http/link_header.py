"""Link header (RFC 5988) rendering and parsing."""

import re
from collections.abc import Iterable

from ..model.transition.link import Link

_LINK_VALUE = re.compile(r"<([^>]*)>((?:\s*;\s*[^;,]+)*)")
_LINK_PARAM = re.compile(r"""(\w+)\s*=\s*(?:"([^"]*)"|([^;,\s]+))""")


def format_link_header(links: Iterable[Link]) -> str:
    """Render links as a single Link header value."""
    values = []
    for link in links:
        value = f'<{link.href}>; rel="{link.rel}"'
        if link.title:
            value += f'; title="{link.title}"'
        values.append(value)
    return ", ".join(values)


def parse_link_header(header: str) -> list[tuple[str, list[str]]]:
    """Parse a Link header value.

    Args:
        header: Header value, e.g. ``</path>; rel="a>b"``

    Returns:
        (href, relations) for each link value, in header order
    """
    parsed = []
    for match in _LINK_VALUE.finditer(header or ""):
        href = match.group(1)
        rels: list[str] = []
        for param in _LINK_PARAM.finditer(match.group(2)):
            if param.group(1).lower() == "rel":
                rels.extend((param.group(2) or param.group(3) or "").split())
        parsed.append((href, rels))
    return parsed


def relations_from(value: str) -> list[str]:
    """Relations named by a Link header value or by a bare relation string."""
    if "<" in value and "rel" in value:
        return [rel for _, rels in parse_link_header(value) for rel in rels]
    return value.split()
