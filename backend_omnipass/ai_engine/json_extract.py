"""Best-effort extraction of a JSON object embedded in free text."""

from __future__ import annotations

import json
from typing import Any


def _first_balanced_block(text: str) -> str | None:
    """Return the first top-level {...} substring, honoring JSON string literals and escapes."""
    start = text.find("{")
    if start < 0:
        return None
    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start:i + 1]
    return None


def extract_json_object(text: Any) -> dict[str, Any] | None:
    """
    Parse the first balanced {...} block of text as a JSON object.

    Returns None for non-string input, no block, unbalanced braces, invalid
    JSON, or a block that does not decode to an object.
    """
    if not isinstance(text, str):
        return None
    block = _first_balanced_block(text)
    if block is None:
        return None
    try:
        parsed = json.loads(block)
    except ValueError:
        return None
    return parsed if isinstance(parsed, dict) else None


def string_list(value: Any) -> list[str]:
    """Coerce a decoded JSON value to a list of strings; anything else becomes []."""
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if isinstance(v, (str, int, float))]
