"""Focus manager: which tab is active and the path to the focused leaf."""

from __future__ import annotations

ROOT = "app"

FocusPath = tuple[str, ...]


class FocusManager:
    """Tracks the ordered tab ids and the active one.

    When no tab exists the app root holds focus. Every change request with an
    out-of-range target is ignored and reported as ``False``.
    """

    def __init__(self) -> None:
        self._tab_ids: list[str] = []
        self._active: int | None = None

    @property
    def tab_ids(self) -> tuple[str, ...]:
        return tuple(self._tab_ids)

    @property
    def active_index(self) -> int | None:
        return self._active

    @property
    def active_tab_id(self) -> str | None:
        if self._active is None:
            return None
        return self._tab_ids[self._active]

    def __len__(self) -> int:
        return len(self._tab_ids)

    def append(self, tab_id: str, *, activate: bool = True) -> int:
        self._tab_ids.append(tab_id)
        index = len(self._tab_ids) - 1
        if activate or self._active is None:
            self._active = index
        return index

    def insert_after_active(self, tab_id: str) -> int:
        index = 0 if self._active is None else self._active + 1
        self._tab_ids.insert(index, tab_id)
        self._active = index
        return index

    def remove(self, tab_id: str) -> bool:
        """Remove a tab; focus moves to the previous tab, or the root."""
        if tab_id not in self._tab_ids:
            return False
        index = self._tab_ids.index(tab_id)
        del self._tab_ids[index]
        if not self._tab_ids:
            self._active = None
        elif self._active is not None and index <= self._active:
            self._active = max(0, self._active - 1)
        return True

    def goto(self, index: int) -> bool:
        if index < 0 or index >= len(self._tab_ids) or index == self._active:
            return False
        self._active = index
        return True

    def next(self) -> bool:
        if len(self._tab_ids) < 2 or self._active is None:
            return False
        self._active = (self._active + 1) % len(self._tab_ids)
        return True

    def previous(self) -> bool:
        if len(self._tab_ids) < 2 or self._active is None:
            return False
        self._active = (self._active - 1) % len(self._tab_ids)
        return True

    def path(self, leaf_path: FocusPath = ()) -> FocusPath:
        """Root-to-leaf path, given the active tab's own path."""
        if self._active is None:
            return (ROOT,)
        return (ROOT, f"tab:{self._active}", *leaf_path)
