"""Request value bag extraction."""

from urllib.parse import parse_qsl

from ..model.path_template import PathTemplate


def extract_request_parameters(
    template: PathTemplate | str, path: str, query_string: str | None = None
) -> dict[str, str]:
    """Map a request's path and query parameters into one value bag.

    Path parameters win over query parameters of the same name; for a
    repeated query parameter the first value is kept.

    Args:
        template: Path template of the matched resource state
        path: Concrete request path
        query_string: Raw query string, without the leading ``?``

    Returns:
        Parameter name to value
    """
    values: dict[str, str] = {}
    for name, value in parse_qsl(query_string or "", keep_blank_values=True):
        values.setdefault(name, value)
    path_values = PathTemplate.of(template).match(path) or {}
    values.update(path_values)
    return values
