"""HTTP seam: request value bags and link rendering."""

from .hal import link_to_hal, links_to_hal
from .link_header import format_link_header, parse_link_header, relations_from
from .request import extract_request_parameters

__all__ = [
    "extract_request_parameters",
    "format_link_header",
    "link_to_hal",
    "links_to_hal",
    "parse_link_header",
    "relations_from",
]
