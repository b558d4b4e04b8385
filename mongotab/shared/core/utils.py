"""Small text helpers shared across domains."""

from __future__ import annotations

_BOUNDARY_CHARS = " .:_-/"


def fuzzy_match(pattern: str, text: str) -> tuple[bool, list[int]]:
    """Match ``pattern`` as a subsequence of ``text``.

    Matching is case-insensitive unless the pattern has an upper-case letter.
    Returns whether it matched and the indices of the matched characters.
    """
    if not pattern:
        return True, []
    if not any(char.isupper() for char in pattern):
        pattern = pattern.lower()
        haystack = text.lower()
    else:
        haystack = text
    indices: list[int] = []
    position = 0
    for char in pattern:
        found = haystack.find(char, position)
        if found < 0:
            return False, []
        indices.append(found)
        position = found + 1
    return True, indices


def fuzzy_score(pattern: str, text: str) -> int | None:
    """Score a fuzzy match; higher is better, None means no match.

    Consecutive characters and characters at the start of a word are worth
    more; gaps and long texts cost a little.
    """
    matched, indices = fuzzy_match(pattern, text)
    if not matched:
        return None
    score = 0
    previous = -1
    for index in indices:
        score += 16
        if index == previous + 1:
            score += 8
        if index == 0 or text[index - 1] in _BOUNDARY_CHARS:
            score += 8
        if previous >= 0:
            score -= index - previous - 1
        previous = index
    return score - len(text) // 8
