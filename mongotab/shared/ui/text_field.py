"""Single-line text buffer edited through raw keys."""

from __future__ import annotations

from dataclasses import dataclass

from mongotab.core.signals import RawKey


@dataclass
class TextField:
    text: str = ""
    cursor: int = 0
    masked: bool = False

    def set(self, text: str) -> None:
        self.text = text
        self.cursor = len(text)

    def apply(self, key: RawKey) -> bool:
        """Apply a raw key. Returns True when the key was consumed."""
        if key.key == "backspace":
            if self.cursor > 0:
                self.text = self.text[: self.cursor - 1] + self.text[self.cursor :]
                self.cursor -= 1
            return True
        if key.key == "delete":
            self.text = self.text[: self.cursor] + self.text[self.cursor + 1 :]
            return True
        if key.key == "left":
            self.cursor = max(0, self.cursor - 1)
            return True
        if key.key == "right":
            self.cursor = min(len(self.text), self.cursor + 1)
            return True
        if key.key in ("home", "ctrl+a"):
            self.cursor = 0
            return True
        if key.key in ("end", "ctrl+e"):
            self.cursor = len(self.text)
            return True
        if key.key == "ctrl+u":
            self.text = self.text[self.cursor :]
            self.cursor = 0
            return True
        if key.character and key.character.isprintable():
            self.text = self.text[: self.cursor] + key.character + self.text[self.cursor :]
            self.cursor += len(key.character)
            return True
        return False

    @property
    def display(self) -> str:
        return "*" * len(self.text) if self.masked else self.text

    def render_with_cursor(self) -> str:
        shown = self.display
        return shown[: self.cursor] + "▏" + shown[self.cursor :]
