"""Clipboard capability."""

from __future__ import annotations

import logging
from typing import Protocol

import pyperclip

from mongotab.shared.core.errors import ClipboardError

logger = logging.getLogger(__name__)


class Clipboard(Protocol):
    def copy(self, text: str) -> None:
        ...


class SystemClipboard:
    """The desktop clipboard, through pyperclip."""

    def copy(self, text: str) -> None:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as exc:
            logger.debug("pyperclip could not copy", exc_info=True)
            raise ClipboardError(f"Clipboard unavailable: {exc}") from exc


class InMemoryClipboard:
    """Keeps the copied text; ``fail`` makes every copy raise."""

    def __init__(self, *, fail: bool = False) -> None:
        self.text: str | None = None
        self.fail = fail

    def copy(self, text: str) -> None:
        if self.fail:
            raise ClipboardError("Clipboard unavailable")
        self.text = text
