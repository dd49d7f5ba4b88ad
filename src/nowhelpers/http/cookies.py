"""
Cookie header parsing.

    Cookie: session=abc123; theme="dark"; name=J%C3%BCrgen
            ──────┬──────   ─────┬──────  ───────┬───────
                  │              │               │
             plain value   quotes removed   percent-decoded

    → {"session": "abc123", "theme": "dark", "name": "Jürgen"}

Malformed pairs are skipped rather than failing the whole header (unlike
http.cookies.SimpleCookie).
"""

from typing import Dict, List, Optional, Union
from urllib.parse import unquote


def _decode(value: str) -> str:
    if "%" not in value:
        return value
    try:
        return unquote(value, errors="strict")
    except UnicodeDecodeError:
        return value


def parse_cookies(header: Optional[Union[str, List[str]]]) -> Dict[str, str]:
    """
    Parse a Cookie header into a name → value dict.

    Args:
        header: The raw header. A list (several Cookie headers on one
                request) is joined with ";" first. None or "" gives {}.

    Returns:
        Decoded cookies. When a name repeats, the first value wins.
    """
    if not header:
        return {}
    if isinstance(header, list):
        header = ";".join(header)

    cookies: Dict[str, str] = {}
    for pair in header.split(";"):
        name, sep, value = pair.partition("=")
        if not sep:
            continue

        name = name.strip()
        if not name or name in cookies:
            continue

        value = value.strip()
        if len(value) >= 2 and value[0] == '"' and value[-1] == '"':
            value = value[1:-1]

        cookies[name] = _decode(value)

    return cookies
