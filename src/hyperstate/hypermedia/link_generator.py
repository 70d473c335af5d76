"""LinkGenerator - concrete links from transitions and entity properties."""

from collections.abc import Mapping
from typing import Any, Protocol
from urllib.parse import urlencode

from ..hypermedia_exceptions import UnresolvedTemplateException
from ..logging import LinkLogger, get_logger
from ..model.state.resource_state import ResourceState
from ..model.transition.link import Link
from ..model.transition.link_properties import LinkProperties
from ..model.transition.transition import Transition
from .link_property_resolver import LinkPropertyResolver
from .template_helper import get_templated_parameters, is_resolved, normalize_properties, template_replace

logger = get_logger(__name__)


class ResourceLocator(Protocol):
    """Locates the concrete state behind a dynamic resource state."""

    def resolve(self, *args: str) -> ResourceState | None: ...


class LinkGenerator:
    """Builds links for transitions.

    The href of a link is the base URI followed by the target's path, expanded
    with (in increasing priority) the request's path parameters, the link
    parameters and the transition's templated URI parameters. URI parameters
    that are not placeholders of the target path become query parameters.
    """

    def __init__(
        self,
        base_uri: str = "",
        locators: Mapping[str, ResourceLocator] | None = None,
        strict_templates: bool = True,
    ) -> None:
        """Initialize the generator.

        Args:
            base_uri: Prefix for every href
            locators: Resource locators by name, for dynamic targets
            strict_templates: Skip links with unresolved placeholders
        """
        self.base_uri = base_uri.rstrip("/")
        self.locators: dict[str, ResourceLocator] = dict(locators or {})
        self.strict_templates = strict_templates
        self._link_logger = LinkLogger(logger)

    def create_links(
        self,
        transition: Transition,
        path_parameters: Mapping[str, Any] | None,
        properties: Mapping[str, Any] | None,
        rel: str | None = None,
    ) -> list[Link]:
        """Create every link of a transition; repeating fields give several.

        Args:
            transition: Transition to render
            path_parameters: Path parameters of the current request
            properties: Properties of the current entity
            rel: Relation overriding the target's own

        Returns:
            Links in repetition order; empty when none could be built
        """
        resolver = LinkPropertyResolver(transition, properties)
        links = []
        for link_properties in resolver.resolve():
            link = self.create_link(transition, path_parameters, link_properties, rel)
            if link is not None:
                links.append(link)
        return links

    def create_self_link(
        self,
        state: ResourceState,
        path_parameters: Mapping[str, Any] | None,
        properties: Mapping[str, Any] | None,
    ) -> Link:
        """Create the ``self`` link of a state, declared or not.

        Unlike other links the self link is never skipped. Placeholders
        without a value stay in the href, a dynamic state falls back to its
        own or its parent's path when it cannot be located, and a state with
        no path at all links to the base URI.
        """
        transition = state.self_transition()
        link_properties = LinkProperties(None, normalize_properties(properties))

        path = state.effective_path
        locator = self.locators.get(state.locator_name) if state.is_dynamic else None
        if locator is not None:
            args = [template_replace(arg, link_properties.parameters) for arg in state.locator_args]
            located = locator.resolve(*args)
            if located is not None and located.effective_path is not None:
                path = located.effective_path

        values: dict[str, Any] = dict(path_parameters or {})
        values.update(link_properties.parameters)
        href = self.base_uri + (path.expand(values, strict=False) if path is not None else "")

        return Link(
            id=transition.id,
            rel="self",
            href=href or "/",
            method=transition.method,
            title=transition.title,
            transition=transition,
        )

    def create_link(
        self,
        transition: Transition,
        path_parameters: Mapping[str, Any] | None,
        link_properties: LinkProperties,
        rel: str | None = None,
    ) -> Link | None:
        """Create one link from resolved link properties.

        Returns:
            The link, or None when the target cannot be addressed
        """
        target = transition.target_state
        if target.is_dynamic:
            located = self._locate(transition, link_properties)
            if located is None:
                return None
            target = located

        path = target.effective_path
        if path is None:
            self._link_logger.log_link_skipped(transition.id, "target has no path")
            return None

        values: dict[str, Any] = dict(path_parameters or {})
        values.update(link_properties.parameters)

        query: dict[str, str] = {}
        for name, value in get_templated_parameters(transition.uri_parameters, values).items():
            if name in path.variables:
                values[name] = value
            elif is_resolved(value):
                query[name] = value

        try:
            href = self.base_uri + path.expand(values, strict=self.strict_templates)
        except UnresolvedTemplateException as e:
            self._link_logger.log_link_skipped(
                transition.id, "unresolved placeholders", **e.log_fields()
            )
            return None

        if query:
            href = f"{href}?{urlencode(query)}"

        return Link(
            id=transition.id,
            rel=rel or target.rel,
            href=href,
            method=transition.method,
            title=transition.title,
            transition=transition,
        )

    def _locate(
        self, transition: Transition, link_properties: LinkProperties
    ) -> ResourceState | None:
        target = transition.target_state
        locator = self.locators.get(target.locator_name)
        if locator is None:
            self._link_logger.log_link_skipped(
                transition.id, "no resource locator registered", locator=target.locator_name
            )
            return None
        args = [template_replace(arg, link_properties.parameters) for arg in target.locator_args]
        located = locator.resolve(*args)
        if located is None or located.is_dynamic:
            self._link_logger.log_link_skipped(
                transition.id, "resource locator found no concrete state", args=args
            )
            return None
        return located
