"""
Query string parsing for request URLs.

Only the query component matters, so the URL is resolved against a
placeholder origin first; "/users?id=1", "?id=1" and "users?id=1" all
produce the same result.

    "/search?q=hello+world&page=1&page=2&flag"
                │                 │       │
                ▼                 ▼       ▼
    {"q": "hello world", "page": "2", "flag": ""}

Repeated names keep the LAST value. Bracket names ("tags[]") are left as
they are; expanding them into lists is FormDecoder's job, and it only runs
on urlencoded request bodies.
"""

from typing import Dict, Optional
from urllib.parse import parse_qsl, urljoin, urlsplit

PLACEHOLDER_BASE = "https://n"


def parse_query(url: Optional[str] = "/") -> Dict[str, str]:
    """Return the URL's query parameters, last value winning per name."""
    resolved = urljoin(PLACEHOLDER_BASE, url or "/")
    query = urlsplit(resolved).query

    params: Dict[str, str] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        params[key] = value
    return params
