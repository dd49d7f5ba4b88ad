"""
=============================================================================
URLENCODED FORM DECODING
=============================================================================

Turns an application/x-www-form-urlencoded body into a dict, expanding the
bracket notation browsers and HTML forms use for lists.

=============================================================================
SUPPORTED NOTATION
=============================================================================

    ┌──────────────────────────────┬───────────────────────────────────────┐
    │  Body                        │  Result                               │
    ├──────────────────────────────┼───────────────────────────────────────┤
    │  plain=1                     │  {"plain": "1"}                       │
    │  tag=a&tag=b                 │  {"tag": ["a", "b"]}                  │
    │  name[]=1&name[]=2           │  {"name": ["1", "2"]}                 │
    │  name[0]=a&name[1]=b         │  {"name": ["a", "b"]}                 │
    │  name[2]=c                   │  {"name": ["c", None, "c"]}           │
    │  obj[field]=1                │  {"obj[field]": "1"}                  │
    │  name[500]=x                 │  {"name[500]": "x"}                   │
    └──────────────────────────────┴───────────────────────────────────────┘

Named brackets are NOT expanded into nested objects: "obj[field]" stays a
literal key.

An indexed key seeds a missing list with its own value before assigning at
the index, which is why "name[2]=c" alone also fills position 0.

=============================================================================
ALGORITHM (per key, in encounter order)
=============================================================================

    1. bracket_flag   key contains "[]" or "[x]" (one non-digit char)
    2. index_match    key ends with "[<digits>*]"
                      (no match when the index exceeds ARRAY_INDEX_LIMIT)
    3. base key       key with that trailing "[<digits>*]" removed
    4. no match   →   acc[key] = value                   (literal key)
    5. acc[base] unset:
           bracket_flag → acc[base] = value, done
           otherwise    → acc[base] = [value]
    6. bracket_flag → acc[base] = concat(acc[base], value)
       otherwise    → acc[base][index] = value

=============================================================================
"""

import re
from typing import Any, Dict, List, Union
from urllib.parse import parse_qsl

FormValue = Union[str, List[str]]

# "[]" or "[x]" anywhere in the key, x being one non-digit, non-bracket char
BRACKET_NOTATION = re.compile(r"\[[^\[\]\d]?\]")

# trailing "[]" or "[123]"; group 1 holds the (possibly empty) digits
TRAILING_INDEX = re.compile(r"\[(\d*)\]$")

# highest "[N]" expanded into a list; larger indexes stay literal keys
ARRAY_INDEX_LIMIT = 20


def parse_urlencoded(text: str) -> Dict[str, FormValue]:
    """
    Decode urlencoded text into a flat dict.

    A name seen once maps to its string value; a repeated name maps to
    the list of all its values, in order. "+" decodes to a space and
    blank values are kept ("a=&b" → {"a": "", "b": ""}).
    """
    flat: Dict[str, FormValue] = {}
    for key, value in parse_qsl(text, keep_blank_values=True):
        if key not in flat:
            flat[key] = value
        elif isinstance(flat[key], list):
            flat[key].append(value)
        else:
            flat[key] = [flat[key], value]
    return flat


def _concat(*items: Any) -> List[Any]:
    # list arguments are spread one level, scalars appended
    out: List[Any] = []
    for item in items:
        if isinstance(item, list):
            out.extend(item)
        else:
            out.append(item)
    return out


def _assign_index(target: Any, index: int, value: Any) -> List[Any]:
    if not isinstance(target, list):
        target = [target]
    if index >= len(target):
        target.extend([None] * (index + 1 - len(target)))
    target[index] = value
    return target


def _index_allowed(digits: str) -> bool:
    digits = digits.lstrip("0") or "0"
    return len(digits) <= len(str(ARRAY_INDEX_LIMIT)) and int(digits) <= ARRAY_INDEX_LIMIT


def parse_qs_array(key: str, value: Any, acc: Dict[str, Any]) -> None:
    """Fold one key/value pair into the accumulator `acc` (in place)."""
    bracket_flag = BRACKET_NOTATION.search(key) is not None
    match = TRAILING_INDEX.search(key)

    if match is None or (not bracket_flag and not _index_allowed(match.group(1))):
        acc[key] = value
        return

    base = key[:match.start()]

    if base not in acc:
        if bracket_flag:
            acc[base] = value
            return
        acc[base] = [value]

    if bracket_flag:
        acc[base] = _concat(acc[base], value)
    else:
        # "[N]" without bracket_flag always has digits
        acc[base] = _assign_index(acc[base], int(match.group(1)), value)


def parse_qs(flat: Dict[str, Any]) -> Dict[str, Any]:
    """Expand bracket notation in a flat key/value dict."""
    parsed: Dict[str, Any] = {}
    for key, value in flat.items():
        parse_qs_array(key, value, parsed)
    return parsed


def parse_form(text: str) -> Dict[str, Any]:
    """parse_urlencoded() followed by parse_qs()."""
    return parse_qs(parse_urlencoded(text))
