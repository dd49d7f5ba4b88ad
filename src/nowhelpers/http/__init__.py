"""
=============================================================================
HTTP HELPERS
=============================================================================

Request parsing and response serialization used by the adapter.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ REQUEST SIDE                                                        │
    │ ─────────────────────────────────────────────────────────────────── │
    │ lazy.py          once-computed, overridable request fields          │
    │ cookies.py       Cookie header → dict                               │
    │ query.py         URL query → dict (last value wins)                 │
    │ form.py          urlencoded body → dict with bracket expansion      │
    │ content_type.py  Content-Type parse / format / set_charset          │
    │ body.py          body dispatch on media type                        │
    │ request.py       NowRequest                                         │
    └─────────────────────────────────────────────────────────────────────┘

    ┌─────────────────────────────────────────────────────────────────────┐
    │ RESPONSE SIDE                                                       │
    │ ─────────────────────────────────────────────────────────────────── │
    │ response.py      NowResponse, send(), send_json(), send_error()     │
    │ etag.py          weak ETags                                         │
    │ status_codes.py  HTTPStatus and reason phrases                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .body import parse_body
from .content_type import ContentType, ContentTypeError, format_content_type, parse_content_type, set_charset
from .cookies import parse_cookies
from .etag import create_etag
from .form import parse_form, parse_qs
from .lazy import Lazy, LazyField, set_lazy_prop
from .query import parse_query
from .request import NowRequest
from .response import NowResponse, send, send_error, send_json, status
from .status_codes import HTTPStatus, status_phrase

__all__ = [
    # Request side
    "NowRequest",
    "Lazy",
    "LazyField",
    "set_lazy_prop",
    "parse_cookies",
    "parse_query",
    "parse_qs",
    "parse_form",
    "parse_body",

    # Content-Type
    "ContentType",
    "ContentTypeError",
    "parse_content_type",
    "format_content_type",
    "set_charset",

    # Response side
    "NowResponse",
    "send",
    "send_json",
    "send_error",
    "status",
    "create_etag",

    # Status codes
    "HTTPStatus",
    "status_phrase",
]
