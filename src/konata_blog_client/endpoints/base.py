from typing import Any, Iterable, Optional, Sequence, Tuple, Union
from urllib.parse import quote, quote_plus, urlencode

from ..base_client import BaseAPIClient


SortKeys = Union[str, Sequence[str]]


def format_query_value(value: Any) -> str:
    """Render a query value the way the backend expects it."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(str(v) for v in value)
    return str(value)


def form_quote(value, safe="", encoding=None, errors=None) -> str:
    """
    Form-encode one query key or value.

    Only ASCII alphanumerics and `*-._` stay literal and spaces become
    `+`, so `~` is escaped and `*` is not.
    """
    encoded = quote_plus(value, safe="*", encoding=encoding, errors=errors)
    return encoded.replace("~", "%7E")


def with_query(
    path: str,
    params: Iterable[Tuple[str, Any]],
    *,
    always: bool = False
) -> str:
    """
    Append a query string built from `(name, value)` pairs.

    Pairs whose value is None are dropped; order is preserved. With
    `always=True` the `?` is kept even when no parameter survives.
    """
    pairs = [
        (name, format_query_value(value))
        for name, value in params
        if value is not None
    ]
    query = urlencode(pairs, quote_via=form_quote)
    if query or always:
        return f"{path}?{query}"
    return path


def encode_component(value: str) -> str:
    return quote(value, safe="!~*'()")


def page_params(
    page: Optional[int],
    size: Optional[int],
    sort: Optional[SortKeys]
) -> list:
    return [
        ("page", page),
        ("size", size),
        ("sort", sort or None),
    ]


class BaseEndpoint:
    """Shared plumbing for endpoint groups bound to one API client."""

    def __init__(
        self,
        *,
        api_client: BaseAPIClient
    ) -> None:
        self.api_client = api_client
