"""Searching the documents of the current page.

Each document is flattened into ``path:value`` items, one per field at every
depth plus one per bare key, and a matcher ranks those items against the
pattern typed by the user.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Protocol

from mongotab.shared.core.utils import fuzzy_score


class Matcher(Protocol):
    def rank(self, pattern: str, items: list[str]) -> list[int]:
        """Indices of the items that match, best first."""
        ...


class FuzzyMatcher:
    def rank(self, pattern: str, items: list[str]) -> list[int]:
        if not pattern:
            return []
        scored = []
        for index, item in enumerate(items):
            score = fuzzy_score(pattern, item)
            if score is not None:
                scored.append((-score, index))
        scored.sort()
        return [index for _, index in scored]


@dataclass(frozen=True)
class SearchItem:
    document: int
    path: str
    text: str


def _value_text(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, default=str, ensure_ascii=False)


def _flatten(path: str, value: Any) -> list[tuple[str, str]]:
    items: list[tuple[str, str]] = []
    if isinstance(value, dict):
        for key, child in value.items():
            items.extend(_flatten(f"{path}.{key}", child))
    elif isinstance(value, list):
        for index, child in enumerate(value):
            items.extend(_flatten(f"{path}.{index}", child))
    else:
        items.append((path, _value_text(value)))
    items.append((path, ""))
    return items


def flatten_document(document: dict[str, Any]) -> list[tuple[str, str]]:
    """(path, value) pairs of every field; a bare key has an empty value."""
    items: list[tuple[str, str]] = []
    for key, value in document.items():
        items.extend(_flatten(str(key), value))
    return items


def search_items(documents: list[dict[str, Any]]) -> list[SearchItem]:
    return [
        SearchItem(index, path, f"{path}:{value}")
        for index, document in enumerate(documents)
        for path, value in flatten_document(document)
    ]


def search(matcher: Matcher, pattern: str, documents: list[dict[str, Any]]) -> list[SearchItem]:
    """Matching items of ``documents``, best first."""
    items = search_items(documents)
    return [items[index] for index in matcher.rank(pattern, [item.text for item in items])]
