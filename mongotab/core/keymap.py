"""Core keymap definitions (UI-agnostic).

Keys are Textual key names. One key may map to several commands and several
keys may map to the same command.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from mongotab.core import signals as sig

KEY_DISPLAY_OVERRIDES: dict[str, str] = {
    "question_mark": "?",
    "left_square_bracket": "[",
    "right_square_bracket": "]",
    "space": "<space>",
    "escape": "<esc>",
    "enter": "<enter>",
    "delete": "<del>",
    "backspace": "<backspace>",
    "tab": "<tab>",
    "shift+tab": "<s-tab>",
    "left": "<left>",
    "right": "<right>",
    "up": "<up>",
    "down": "<down>",
    "pageup": "<pgup>",
    "pagedown": "<pgdn>",
}

# Keys that keep their command meaning while a text field is being edited.
RAW_MODE_PASSTHROUGH: dict[str, type[sig.Command]] = {
    "enter": sig.Confirm,
    "escape": sig.Cancel,
    "up": sig.NavUp,
    "down": sig.NavDown,
    "tab": sig.NavDown,
    "shift+tab": sig.NavUp,
    "ctrl+q": sig.Quit,
}


def format_key(key: str) -> str:
    """Format a key name for display in UI hints."""
    if key in KEY_DISPLAY_OVERRIDES:
        return KEY_DISPLAY_OVERRIDES[key]
    if key.startswith("ctrl+"):
        return f"^{key.split('+', 1)[1]}"
    return key


@dataclass
class ActionKeyDef:
    """Definition of a regular command keybinding."""

    key: str  # The key to press
    command: type[sig.Command]  # The command class produced
    primary: bool = True  # Primary key for display vs secondary aliases


class KeymapProvider(ABC):
    """Abstract base class for keymap providers."""

    @abstractmethod
    def get_action_keys(self) -> list[ActionKeyDef]:
        """Get all key definitions."""
        raise NotImplementedError

    def key_for(self, command: type[sig.Command]) -> str | None:
        """Get the display key for a command class."""
        primary = None
        fallback = None
        for ak in self.get_action_keys():
            if ak.command is not command:
                continue
            if fallback is None:
                fallback = ak.key
            if ak.primary and primary is None:
                primary = ak.key
        key = primary or fallback
        return format_key(key) if key else None

    def commands_for_key(self, key: str) -> list[sig.Command]:
        """Translate a key into zero or more commands."""
        commands: list[sig.Command] = []
        for ak in self.get_action_keys():
            if ak.key == key:
                commands.append(ak.command())
        if not commands and len(key) == 1 and key.isdigit() and key != "0":
            commands.append(sig.GotoTab(int(key) - 1))
        return commands

    def translate(self, key: str, character: str | None, *, raw_mode: bool) -> list[sig.Command]:
        """Translate a key press, honouring raw (text entry) mode."""
        if raw_mode:
            passthrough = RAW_MODE_PASSTHROUGH.get(key)
            if passthrough is not None:
                return [passthrough()]
            return [sig.RawKey(key, character)]
        return self.commands_for_key(key)


class DefaultKeymapProvider(KeymapProvider):
    """Built-in key bindings."""

    def __init__(self) -> None:
        self._action_keys: list[ActionKeyDef] | None = None

    def get_action_keys(self) -> list[ActionKeyDef]:
        if self._action_keys is None:
            self._action_keys = self._build_action_keys()
        return self._action_keys

    def _build_action_keys(self) -> list[ActionKeyDef]:
        return [
            # Navigation
            ActionKeyDef("up", sig.NavUp),
            ActionKeyDef("k", sig.NavUp, primary=False),
            ActionKeyDef("down", sig.NavDown),
            ActionKeyDef("j", sig.NavDown, primary=False),
            ActionKeyDef("left", sig.NavLeft),
            ActionKeyDef("right", sig.NavRight),
            ActionKeyDef("H", sig.FocusLeft),
            ActionKeyDef("L", sig.FocusRight),
            ActionKeyDef("K", sig.FocusUp),
            ActionKeyDef("J", sig.FocusDown),
            ActionKeyDef("enter", sig.Confirm),
            ActionKeyDef("space", sig.ExpandCollapse),
            ActionKeyDef("escape", sig.Cancel),
            ActionKeyDef("ctrl+r", sig.Reset),
            ActionKeyDef("r", sig.Refresh),
            ActionKeyDef("n", sig.NextPage),
            ActionKeyDef("p", sig.PreviousPage),
            ActionKeyDef("P", sig.FirstPage),
            ActionKeyDef("N", sig.LastPage),
            ActionKeyDef("slash", sig.Search),
            ActionKeyDef("y", sig.Yank),
            # Editing
            ActionKeyDef("a", sig.CreateNew),
            ActionKeyDef("e", sig.Edit),
            ActionKeyDef("D", sig.Delete),
            ActionKeyDef("slash", sig.StartEdit),
            ActionKeyDef("i", sig.InsertDoc),
            ActionKeyDef("E", sig.EditDoc),
            ActionKeyDef("c", sig.DuplicateDoc),
            ActionKeyDef("d", sig.DeleteDoc),
            # Tabs
            ActionKeyDef("T", sig.NewTab),
            ActionKeyDef("ctrl+t", sig.NewTab, primary=False),
            ActionKeyDef("X", sig.CloseTab),
            ActionKeyDef("ctrl+w", sig.CloseTab, primary=False),
            ActionKeyDef("C", sig.DuplicateTab),
            ActionKeyDef("right_square_bracket", sig.NextTab),
            ActionKeyDef("tab", sig.NextTab, primary=False),
            ActionKeyDef("left_square_bracket", sig.PreviousTab),
            ActionKeyDef("shift+tab", sig.PreviousTab, primary=False),
            # Global
            ActionKeyDef("question_mark", sig.ShowHelp),
            ActionKeyDef("q", sig.Quit),
            ActionKeyDef("ctrl+q", sig.Quit, primary=False),
        ]


# Global keymap instance
_keymap_provider: KeymapProvider | None = None


def get_keymap() -> KeymapProvider:
    """Get the current keymap provider."""
    global _keymap_provider
    if _keymap_provider is None:
        _keymap_provider = DefaultKeymapProvider()
    return _keymap_provider


def set_keymap(provider: KeymapProvider) -> None:
    """Set the keymap provider (for testing or custom keymaps)."""
    global _keymap_provider
    _keymap_provider = provider


def reset_keymap() -> None:
    """Reset to default keymap provider."""
    global _keymap_provider
    _keymap_provider = None
