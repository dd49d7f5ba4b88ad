"""
=============================================================================
CONTENT-TYPE HEADER CODEC
=============================================================================

    Content-Type: Text/HTML; Charset="UTF-8"; level=1
                  ────┬────  ───────┬───────  ───┬───
                      │             │            │
                 media type    parameter    parameter
                 (lowercased)  (name lowercased, quotes removed)

    parse_content_type()  → ContentType("text/html", {"charset": "UTF-8", "level": "1"})
    format_content_type() → "text/html; charset=UTF-8; level=1"

Formatting lists parameters in sorted name order and quotes any value that
is not a plain token, so parse → format round-trips to a canonical form.

Malformed headers raise ContentTypeError. It is a ValueError and NOT an
ApiError: a broken Content-Type is not translated into a 4xx here.

=============================================================================
GRAMMAR (RFC 7231 section 3.1.1.1)
=============================================================================

    media-type = type "/" subtype *( OWS ";" OWS parameter )
    parameter  = token "=" ( token / quoted-string )
    token      = 1*tchar
    tchar      = "!" / "#" / "$" / "%" / "&" / "'" / "*" / "+" / "-" / "."
               / "^" / "_" / "`" / "|" / "~" / DIGIT / ALPHA

=============================================================================
"""

import re
from dataclasses import dataclass, field
from typing import Dict

_TOKEN = r"[!#$%&'*+.^_`|~0-9A-Za-z-]+"

# "; name=value" with optional spaces around "=" and after the value
PARAM_PATTERN = re.compile(
    r"; *(" + _TOKEN + r") *= *"
    r"(\"(?:[\u000b\u0020\u0021\u0023-\u005b\u005d-\u007e\u0080-\u00ff]"
    r"|\\[\u000b\u0020-\u00ff])*\"|" + _TOKEN + r") *"
)
TYPE_PATTERN = re.compile(r"^" + _TOKEN + r"/" + _TOKEN + r"$")
TOKEN_PATTERN = re.compile(r"^" + _TOKEN + r"$")
TEXT_PATTERN = re.compile(r"^[\u000b\u0020-\u007e\u0080-\u00ff]+$")
QUOTED_PAIR = re.compile(r"\\([\u000b\u0020-\u00ff])")
QUOTE_ESCAPE = re.compile(r"([\\\"])")


class ContentTypeError(ValueError):
    """The header (or a value to be formatted) is not a valid media type."""


@dataclass
class ContentType:
    type: str
    parameters: Dict[str, str] = field(default_factory=dict)


def parse_content_type(header: str) -> ContentType:
    """
    Parse a Content-Type header value.

    Raises:
        ContentTypeError: If the media type or any parameter is malformed.
    """
    if not isinstance(header, str):
        raise ContentTypeError("argument header is required to be a string")

    index = header.find(";")
    media_type = (header[:index] if index != -1 else header).strip()

    if not TYPE_PATTERN.match(media_type):
        raise ContentTypeError(f"invalid media type: {media_type!r}")

    result = ContentType(media_type.lower())

    if index == -1:
        return result

    pos = index
    while pos < len(header):
        match = PARAM_PATTERN.match(header, pos)
        if match is None:
            raise ContentTypeError(f"invalid parameter format in {header!r}")

        pos = match.end()
        name = match.group(1).lower()
        value = match.group(2)

        if value.startswith('"'):
            value = QUOTED_PAIR.sub(r"\1", value[1:-1])

        result.parameters[name] = value

    return result


def _quote(value: str) -> str:
    if TOKEN_PATTERN.match(value):
        return value
    if len(value) > 0 and not TEXT_PATTERN.match(value):
        raise ContentTypeError(f"invalid parameter value: {value!r}")
    return '"' + QUOTE_ESCAPE.sub(r"\\\1", value) + '"'


def format_content_type(content_type: ContentType) -> str:
    """Serialize a ContentType, parameters in sorted order."""
    if not content_type.type or not TYPE_PATTERN.match(content_type.type):
        raise ContentTypeError(f"invalid type: {content_type.type!r}")

    parts = [content_type.type]
    for name in sorted(content_type.parameters):
        if not TOKEN_PATTERN.match(name):
            raise ContentTypeError(f"invalid parameter name: {name!r}")
        parts.append(f"{name}={_quote(content_type.parameters[name])}")

    return "; ".join(parts)


def set_charset(header: str, charset: str) -> str:
    """
    Rewrite a Content-Type header to declare `charset`.

        set_charset("text/html", "utf-8")                 → "text/html; charset=utf-8"
        set_charset("text/plain; charset=latin1", "utf-8") → "text/plain; charset=utf-8"
    """
    parsed = parse_content_type(header)
    parsed.parameters["charset"] = charset
    return format_content_type(parsed)


def media_type(header: str) -> str:
    """Just the lowercased "type/subtype" part of a header."""
    return parse_content_type(header).type
