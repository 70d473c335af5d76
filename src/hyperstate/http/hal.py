"""HAL (JSON Hypertext Application Language) rendering of links."""

from collections.abc import Iterable
from typing import Any

from ..model.transition.link import Link


def link_to_hal(link: Link) -> dict[str, Any]:
    entry: dict[str, Any] = {"href": link.href, "name": link.id}
    if link.title:
        entry["title"] = link.title
    if link.method != "GET":
        entry["method"] = link.method
    return entry


def links_to_hal(links: Iterable[Link]) -> dict[str, Any]:
    """Render links as a HAL ``_links`` object.

    A relation used by one link maps to an object; a relation shared by
    several links maps to an array, in link order.
    """
    grouped: dict[str, list[dict[str, Any]]] = {}
    for link in links:
        for rel in link.rel.split():
            grouped.setdefault(rel, []).append(link_to_hal(link))
    return {
        "_links": {
            rel: entries[0] if len(entries) == 1 else entries
            for rel, entries in grouped.items()
        }
    }
