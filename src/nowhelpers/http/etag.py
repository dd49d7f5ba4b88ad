"""
Entity tags for response bodies.

    W/"1b-Kq5sNclPz7QV2+lfQIuc6R7oRu0"
    ─┬ ─┬ ─────────────┬────────────
     │  │              │
     │  │   base64(sha1(body))[:27]
     │  └── body length in hex
     └───── weak validator prefix

The format matches the `etag` package most Node servers use, so a client
that cached a response from either keeps getting 304s from the other.
"""

import base64
import hashlib
from typing import Union

# sha1 of b"" is a constant; skip hashing for empty bodies
EMPTY_ENTITY_TAG = '"0-2jmj7l5rSw0yVb/vlWAYkK/YBwk"'


def entity_tag(entity: bytes) -> str:
    if len(entity) == 0:
        return EMPTY_ENTITY_TAG

    digest = hashlib.sha1(entity).digest()
    hashed = base64.b64encode(digest).decode("ascii")[:27]
    return f'"{len(entity):x}-{hashed}"'


def create_etag(body: Union[str, bytes], weak: bool = True) -> str:
    """
    Compute an ETag for a response body.

    Args:
        body: Bytes, or text that will be sent as UTF-8.
        weak: Prefix the tag with "W/" (the default).
    """
    if isinstance(body, str):
        body = body.encode("utf-8", "surrogatepass")
    tag = entity_tag(bytes(body))
    return f"W/{tag}" if weak else tag
