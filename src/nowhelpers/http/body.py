"""
=============================================================================
REQUEST BODY PARSING
=============================================================================

The body is parsed according to the media type of the Content-Type
header. Parameters such as charset play no part in the dispatch.

    ┌─────────────────────────────────────┬──────────────────────────────┐
    │  Content-Type                       │  request.body                │
    ├─────────────────────────────────────┼──────────────────────────────┤
    │  (absent)                           │  None                        │
    │  application/json                   │  decoded JSON value          │
    │  application/octet-stream           │  raw bytes, untouched        │
    │  application/x-www-form-urlencoded  │  dict (bracket-expanded)     │
    │  text/plain                         │  str (UTF-8)                 │
    │  anything else                      │  None                        │
    └─────────────────────────────────────┴──────────────────────────────┘

Malformed JSON is the client's fault: it raises ApiError(400, "Invalid
JSON"), which the adapter turns into "HTTP/1.1 400 Invalid JSON".

=============================================================================
"""

import json
from typing import Any, Optional

from ..errors import ApiError
from .content_type import media_type
from .form import parse_form
from .status_codes import HTTPStatus


def _reject_constant(name: str) -> Any:
    # NaN / Infinity / -Infinity are not JSON
    raise ValueError(f"Unexpected token {name}")


def parse_json(raw: bytes) -> Any:
    """
    Parse a JSON request body.

    Raises:
        ApiError: 400 "Invalid JSON" if the body is not valid JSON.
    """
    try:
        return json.loads(
            raw.decode("utf-8", errors="replace"),
            parse_constant=_reject_constant,
        )
    except ValueError:
        raise ApiError(HTTPStatus.BAD_REQUEST, "Invalid JSON") from None


def parse_body(content_type: Optional[str], raw: bytes) -> Any:
    """
    Parse `raw` according to the Content-Type header value.

    Args:
        content_type: Raw header value ("application/json; charset=utf-8")
                      or None when the request has no Content-Type.
        raw: The request body bytes.

    Returns:
        The decoded body, or None when no parser applies.
    """
    if not content_type:
        return None

    kind = media_type(content_type)

    if kind == "application/json":
        return parse_json(raw)

    if kind == "application/octet-stream":
        return raw

    if kind == "application/x-www-form-urlencoded":
        return parse_form(raw.decode("utf-8", errors="replace"))

    if kind == "text/plain":
        return raw.decode("utf-8", errors="replace")

    return None
