"""Session dehydration, hydration and bounded saving."""

from .persistence import dehydrate, hydrate, load_snapshot, restore_tab, save_session_bounded, save_snapshot

__all__ = [
    "dehydrate",
    "hydrate",
    "load_snapshot",
    "restore_tab",
    "save_session_bounded",
    "save_snapshot",
]
