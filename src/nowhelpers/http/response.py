"""
=============================================================================
RESPONSE MODEL AND SEND PIPELINE
=============================================================================

NowResponse collects a status, headers and a body; send() and send_json()
turn a handler's value into a finished response.

=============================================================================
BODY SHAPES
=============================================================================

Whatever a handler passes to send() is first classified:

    ┌──────────────────┬───────────────────────────────┬──────────────────┐
    │  Variant         │  Python values                │  Goes to         │
    ├──────────────────┼───────────────────────────────┼──────────────────┤
    │  TextBody        │  str                          │  text pipeline   │
    │  BytesBody       │  bytes, bytearray, memoryview │  bytes pipeline  │
    │  StructuredBody  │  dict, list, tuple,           │  send_json()     │
    │                  │  bool, int, float             │                  │
    │  EmptyBody       │  None                         │  TextBody("")    │
    └──────────────────┴───────────────────────────────┴──────────────────┘

Anything else is a programming error in the handler and raises TypeError.

=============================================================================
SEND PIPELINE
=============================================================================

    classify ─► default Content-Type ─► charset=utf-8 for text
        │
        ▼
    Content-Length ─► ETag (W/"...") ─► 204/304 stripping ─► HEAD? ─► end()

    Content-Type defaults:   text  → text/html
                             bytes → application/octet-stream
                             json  → application/json; charset=utf-8

Text under SMALL_BODY_THRESHOLD characters has its UTF-8 length counted
without encoding it; longer text is encoded once and continues as bytes.

=============================================================================
"""

import json
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from ..errors import ResponseEndedError
from .content_type import set_charset
from .etag import create_etag
from .status_codes import HTTPStatus, status_phrase

SMALL_BODY_THRESHOLD = 1000

# headers that must not accompany a 204/304
BODYLESS_STRIP_HEADERS = ("content-type", "content-length", "transfer-encoding")

HeaderValue = Union[str, int, List[str]]


# =============================================================================
# BODY VARIANTS
# =============================================================================

@dataclass(frozen=True)
class TextBody:
    text: str


@dataclass(frozen=True)
class BytesBody:
    data: bytes


@dataclass(frozen=True)
class StructuredBody:
    value: Any


@dataclass(frozen=True)
class EmptyBody:
    pass


Body = Union[TextBody, BytesBody, StructuredBody, EmptyBody]


def classify_body(value: Any) -> Body:
    """
    Map a handler-supplied value onto one of the body variants.

    Raises:
        TypeError: For values that cannot be sent (functions, sets,
                   arbitrary objects...).
    """
    if value is None:
        return EmptyBody()
    if isinstance(value, str):
        return TextBody(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return BytesBody(bytes(value))
    if isinstance(value, (dict, list, tuple, bool, int, float)):
        return StructuredBody(value)
    raise TypeError(
        "`body` is not a valid string, object, boolean, number, or bytes "
        f"(got {type(value).__name__})"
    )


def encode_text(text: str) -> bytes:
    return text.encode("utf-8", "surrogatepass")


def utf8_byte_length(text: str) -> int:
    """Byte length of `text` in UTF-8, counted without encoding it."""
    length = 0
    for char in text:
        code = ord(char)
        if code < 0x80:
            length += 1
        elif code < 0x800:
            length += 2
        elif code < 0x10000:
            length += 3
        else:
            length += 4
    return length


# =============================================================================
# RESPONSE MODEL
# =============================================================================

@dataclass
class NowResponse:
    """
    An outgoing response.

    Header names are stored lowercase. Once end() has been called the
    response is final: further end() calls raise ResponseEndedError.

    The status/send/json helpers only work after the adapter has bound
    the response to its request (attach_helpers()); send() needs the
    request to know whether it was a HEAD.
    """

    status_code: int = 200
    headers: Dict[str, HeaderValue] = field(default_factory=dict)
    body: bytes = b""
    ended: bool = False

    _status_message: Optional[str] = field(default=None, repr=False)
    _request: Any = field(default=None, repr=False)

    @property
    def status_message(self) -> str:
        """Explicit status message, or the reason phrase of status_code."""
        if self._status_message is not None:
            return self._status_message
        return status_phrase(self.status_code)

    @status_message.setter
    def status_message(self, message: Optional[str]) -> None:
        self._status_message = message

    # -------------------------------------------------------------------------
    # Headers
    # -------------------------------------------------------------------------

    def get_header(self, name: str, default: Any = None) -> Any:
        return self.headers.get(name.lower(), default)

    def set_header(self, name: str, value: HeaderValue) -> "NowResponse":
        self.headers[name.lower()] = value
        return self

    def has_header(self, name: str) -> bool:
        return bool(self.headers.get(name.lower()))

    def remove_header(self, name: str) -> None:
        self.headers.pop(name.lower(), None)

    # -------------------------------------------------------------------------
    # Termination
    # -------------------------------------------------------------------------

    def end(self, chunk: Union[str, bytes, None] = None, encoding: Optional[str] = None) -> None:
        """Write the final chunk (if any) and mark the response ended."""
        if self.ended:
            raise ResponseEndedError("write after end")
        if isinstance(chunk, str):
            chunk = chunk.encode(encoding or "utf-8", "surrogatepass")
        if chunk:
            self.body += chunk
        self.ended = True

    # -------------------------------------------------------------------------
    # Helpers (installed by the adapter)
    # -------------------------------------------------------------------------

    def attach_helpers(self, request: Any) -> None:
        self._request = request

    def _bound_request(self) -> Any:
        if self._request is None:
            raise RuntimeError("response helpers are not installed for this response")
        return self._request

    def status(self, status_code: int) -> "NowResponse":
        """Set the status code; chainable: res.status(201).json(...)."""
        self._bound_request()
        return status(self, status_code)

    def send(self, body: Any) -> "NowResponse":
        return send(self._bound_request(), self, body)

    def json(self, value: Any) -> "NowResponse":
        return send_json(self._bound_request(), self, value)


# =============================================================================
# PIPELINE
# =============================================================================

def status(response: NowResponse, status_code: int) -> NowResponse:
    response.status_code = status_code
    return response


def send(request: Any, response: NowResponse, body: Any) -> NowResponse:
    """
    Send `body` as the complete response.

    Args:
        request: The request being answered (its method decides HEAD).
        response: The response to finish.
        body: str, bytes, None, or a JSON-serializable structure.

    Returns:
        The (now ended) response.

    Raises:
        TypeError: If `body` has an unsupported type.
        ResponseEndedError: If the response was already ended.
    """
    if response.ended:
        raise ResponseEndedError("cannot send on an ended response")

    chunk = classify_body(body)

    if isinstance(chunk, StructuredBody):
        return send_json(request, response, chunk.value)

    if isinstance(chunk, EmptyBody):
        chunk = TextBody("")

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT-TYPE
    # ─────────────────────────────────────────────────────────────────────
    encoding = None
    if isinstance(chunk, TextBody):
        if not response.has_header("content-type"):
            response.set_header("content-type", "text/html")

        encoding = "utf-8"
        content_type = response.get_header("content-type")
        if isinstance(content_type, str):
            response.set_header("content-type", set_charset(content_type, "utf-8"))
    elif not response.has_header("content-type"):
        response.set_header("content-type", "application/octet-stream")

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT-LENGTH
    # ─────────────────────────────────────────────────────────────────────
    if isinstance(chunk, BytesBody):
        length = len(chunk.data)
    elif len(chunk.text) < SMALL_BODY_THRESHOLD:
        length = utf8_byte_length(chunk.text)
    else:
        chunk = BytesBody(encode_text(chunk.text))
        encoding = None
        length = len(chunk.data)

    response.set_header("content-length", str(length))

    # ─────────────────────────────────────────────────────────────────────
    # ETAG
    # ─────────────────────────────────────────────────────────────────────
    payload = chunk.data if isinstance(chunk, BytesBody) else chunk.text
    if not response.has_header("etag"):
        response.set_header("etag", create_etag(payload))

    # ─────────────────────────────────────────────────────────────────────
    # BODY-LESS STATUSES
    # ─────────────────────────────────────────────────────────────────────
    if response.status_code in (HTTPStatus.NO_CONTENT, HTTPStatus.NOT_MODIFIED):
        for name in BODYLESS_STRIP_HEADERS:
            response.remove_header(name)
        payload = ""

    if getattr(request, "method", None) == "HEAD":
        response.end()
    else:
        response.end(payload, encoding)

    return response


def _finite(value: Any) -> Any:
    # NaN and the infinities have no JSON form; JSON.stringify writes null
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {key: _finite(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_finite(item) for item in value]
    return value


def send_json(request: Any, response: NowResponse, value: Any) -> NowResponse:
    """Serialize `value` like JSON.stringify and send it as text."""
    text = json.dumps(
        _finite(value),
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )

    if not response.has_header("content-type"):
        response.set_header("content-type", "application/json; charset=utf-8")

    return send(request, response, text)


def send_error(response: NowResponse, status_code: int, message: str) -> None:
    """Finish `response` with a status line only: no headers, no body."""
    response.status_code = status_code
    response.status_message = message
    response.end()
