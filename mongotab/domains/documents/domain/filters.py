"""Parsing and canonical encoding of document filters and sorts."""

from __future__ import annotations

import ast
import json
from typing import Any

EMPTY_FILTER_TEXT = "{}"


class FilterSyntaxError(ValueError):
    """Raised when filter or sort text is not a JSON-like object."""


def parse_json_value(value: str) -> tuple[bool, dict | list | None]:
    """Parse a string as JSON and return (is_json, parsed_value).

    Tries standard JSON parsing first, then falls back to Python literal_eval
    for Python-style dicts/lists.
    """
    stripped = value.strip()
    if not stripped or stripped[0] not in "{[":
        return False, None

    try:
        parsed = json.loads(stripped)
        return True, parsed
    except (json.JSONDecodeError, ValueError):
        pass

    try:
        parsed = ast.literal_eval(stripped)
        if isinstance(parsed, dict | list):
            return True, parsed
    except (ValueError, SyntaxError):
        pass

    return False, None


def parse_filter(text: str) -> dict[str, Any]:
    """Parse filter text; blank text means match everything."""
    if not text.strip():
        return {}
    ok, parsed = parse_json_value(text)
    if not ok or not isinstance(parsed, dict):
        raise FilterSyntaxError(f"Invalid filter: {text.strip()}")
    return parsed


def parse_sort(text: str) -> dict[str, Any] | None:
    """Parse sort text such as ``{"total": -1}``; blank text means no sort."""
    if not text.strip():
        return None
    ok, parsed = parse_json_value(text)
    if not ok or not isinstance(parsed, dict):
        raise FilterSyntaxError(f"Invalid sort: {text.strip()}")
    for key, direction in parsed.items():
        if direction not in (1, -1):
            raise FilterSyntaxError(f"Sort direction for {key!r} must be 1 or -1")
    return parsed


def canonical_json(value: Any) -> str:
    """Stable text form used in fingerprints: key order never matters."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=str)
