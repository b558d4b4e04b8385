"""FIFO queue of signals drained once per tick."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator

from mongotab.core.signals import Event, Message, Signal


class SignalQueue:
    """Ordered queue of signals.

    Signals pushed while another signal is being processed go to the tail, so
    every cascade of the current tick resolves before the next input.
    """

    def __init__(self) -> None:
        self._items: deque[Signal] = deque()

    def push(self, signal: Signal) -> None:
        self._items.append(signal)

    def push_event(self, event: Event) -> None:
        self.push(Signal(event=event))

    def push_message(self, message: Message) -> None:
        self.push(Signal(message=message))

    def pop(self) -> Signal | None:
        """Remove and return the front signal, or None when empty."""
        if not self._items:
            return None
        return self._items.popleft()

    def is_empty(self) -> bool:
        return not self._items

    def clear(self) -> int:
        """Drop every queued signal and return how many were dropped."""
        dropped = len(self._items)
        self._items.clear()
        return dropped

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Signal]:
        return iter(tuple(self._items))
