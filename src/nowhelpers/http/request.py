"""
=============================================================================
REQUEST MODEL
=============================================================================

The request object handed to user handlers.

    ┌─────────────────────────────────────────────────────────────────────┐
    │  NowRequest                                                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │  method     "POST"                                                  │
    │  url        "/api/users?page=2"                                     │
    │  headers    {"content-type": "application/json", ...}               │
    │                                                                     │
    │  cookies ─┐                                                         │
    │  query   ─┼── lazy: parsed on first read, installed by the adapter  │
    │  body    ─┘                                                         │
    └─────────────────────────────────────────────────────────────────────┘

Header names are lowercase. A header that arrived more than once may hold
a list of values instead of a single string.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

from .body import parse_body
from .cookies import parse_cookies
from .lazy import Lazy, LazyField, set_lazy_prop
from .query import parse_query

HeaderValue = Union[str, List[str]]


@dataclass
class NowRequest:
    """
    An incoming request with lazily parsed cookies, query and body.

    The lazy fields only exist once install_parsers() has run (the adapter
    does this before calling the handler). Any of them can be assigned to,
    which skips parsing entirely:

        request.body = {"stub": True}   # handler/test override
    """

    method: str = "GET"
    url: str = "/"
    headers: Dict[str, HeaderValue] = field(default_factory=dict)
    http_version: str = "HTTP/1.1"

    _lazy: Dict[str, Lazy] = field(default_factory=dict, init=False, repr=False)

    cookies = LazyField()
    query = LazyField()
    body = LazyField()

    @property
    def path(self) -> str:
        """URL path without the query string."""
        return (self.url or "/").split("?", 1)[0] or "/"

    @property
    def content_type(self) -> Optional[str]:
        """Raw Content-Type header, or None."""
        value = self.headers.get("content-type")
        if isinstance(value, list):
            value = value[0] if value else None
        return value or None

    def get_header(self, name: str, default: Any = None) -> Any:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower(), default)

    def install_parsers(self, raw_body: bytes) -> None:
        """
        Install the lazy `cookies`, `query` and `body` fields.

        Each getter closes over this request only, so concurrent
        requests never see each other's parsed values.
        """
        set_lazy_prop(self, "cookies", self._cookie_parser())
        set_lazy_prop(self, "query", self._query_parser())
        set_lazy_prop(self, "body", self._body_parser(raw_body))

    def _cookie_parser(self) -> Callable[[], Dict[str, str]]:
        return lambda: parse_cookies(self.headers.get("cookie"))

    def _query_parser(self) -> Callable[[], Dict[str, str]]:
        return lambda: parse_query(self.url or "/")

    def _body_parser(self, raw_body: bytes) -> Callable[[], Any]:
        return lambda: parse_body(self.content_type, raw_body)
